"""
Main entry point for the semantic tagging engine
Learns the sample tags and prints raw, region, combined tags and keywords
"""

import argparse
import json

from core.pipeline_factory import PipelineFactory
from sample_data.sample_documents import SAMPLE_DOCUMENTS, SAMPLE_TAGS
from utils.helpers import print_section, print_subsection, format_scores, save_json


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(description="Semantic tagging demo")
    parser.add_argument("--document", default="space_and_cooking", choices=sorted(SAMPLE_DOCUMENTS))
    parser.add_argument("--threshold", type=float, default=None)
    parser.add_argument("--output", default=None, help="Write all results to a JSON file")
    args = parser.parse_args()

    print_section("SEMANTIC TAGGING ENGINE")

    brain = PipelineFactory().create_brain(initialize=True)

    for tag_id, alias, synonyms in SAMPLE_TAGS:
        brain.learn(tag_id, alias, synonyms)
    print(f"Learned {len(SAMPLE_TAGS)} tags")

    sample_text = SAMPLE_DOCUMENTS[args.document]
    print("\nSample Input Text:")
    print("-" * 60)
    print(sample_text.strip())
    print("-" * 60)

    raw = brain.get_raw_tags(sample_text, args.threshold)
    print_subsection("Raw tags (whole document)")
    print(format_scores(raw))

    regions = brain.get_region_tags(sample_text, args.threshold)
    print_subsection("Region tags")
    for i, region in enumerate(regions):
        preview = region.content[:40].replace("\n", " ")
        print(f"[Region {i}] {region.start_index}-{region.end_index} \"{preview}...\"")
        print(format_scores(region.tag_scores))

    combined = brain.get_combined_tags(sample_text, args.threshold)
    print_subsection("Combined tags (consensus)")
    print(format_scores(combined))

    keywords = brain.extract_keywords(sample_text)
    print_subsection("Keyword candidates")
    print(format_scores(keywords))

    results = {
        "raw": [t.to_dict() for t in raw],
        "regions": [r.to_dict() for r in regions],
        "combined": [t.to_dict() for t in combined],
        "keywords": [k.to_dict() for k in keywords],
    }
    if args.output:
        save_json(results, args.output)
    else:
        print("\n" + json.dumps(results["combined"], indent=2))


if __name__ == "__main__":
    main()
