# Sample documents and tags for the tagging demo and integration tests

SAMPLE_SPACE_AND_COOKING = """
The NASA Mars rover has detected new rock formations. Space exploration is crucial for understanding our universe.
Rocket propulsion systems are becoming more efficient. Astronauts are training for long-duration missions.

On a different note, making the perfect pasta requires boiling water with plenty of salt.
Italian cuisine relies on fresh ingredients like tomatoes and basil. Cooking is an art form that brings people together.
"""

SAMPLE_JAVA_RELEASE = """
The new JDK release ships virtual threads as a stable feature.
Java developers can now write blocking code that scales like asynchronous code.
"""

# (tag_id, alias, synonyms)
SAMPLE_TAGS = [
    ("tag-space", "Space", ["Space", "Cosmos"]),
    ("tag-mars", "Mars", ["Mars", "Red Planet"]),
    ("tag-cooking", "Cooking", ["Cooking", "Culinary"]),
    ("tag-pasta", "Pasta", ["Pasta", "Spaghetti"]),
    ("tag-java", "Java", ["Java", "JDK"]),
]

SAMPLE_DOCUMENTS = {
    "space_and_cooking": SAMPLE_SPACE_AND_COOKING,
    "java_release": SAMPLE_JAVA_RELEASE,
}

if __name__ == "__main__":
    print("Sample data loaded. Available documents:")
    for key in SAMPLE_DOCUMENTS.keys():
        print(f"  - {key}")
    print("Sample tags:")
    for tag_id, alias, synonyms in SAMPLE_TAGS:
        print(f"  - {alias} ({tag_id}): {', '.join(synonyms)}")
