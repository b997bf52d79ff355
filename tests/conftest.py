"""
Pytest configuration and shared fixtures for the tagging engine tests.
"""

import math
import os
import re
import sys
from typing import Any, Dict, List, Optional

import pytest

# Add the project root to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from core.service_interfaces import (  # noqa: E402
    EmbeddingInterface,
    VectorIndexInterface,
    Point,
    SearchHit,
    ScrollPage,
)
from core.validation_and_errors import ValidationException  # noqa: E402
from semantic_tagging.ranking import cosine_similarity  # noqa: E402
from semantic_tagging.tag_brain import TagBrain  # noqa: E402


# Word -> topic axis for the deterministic embedding
TOPIC_WORDS = {
    "space": 0, "cosmos": 0, "mars": 0, "planet": 0, "nasa": 0, "rover": 0,
    "rocket": 0, "rockets": 0, "astronauts": 0, "universe": 0,
    "exploration": 0, "propulsion": 0, "missions": 0,
    "cooking": 1, "culinary": 1, "pasta": 1, "spaghetti": 1, "salt": 1,
    "cuisine": 1, "italian": 1, "tomatoes": 1, "basil": 1, "boiling": 1,
    "ingredients": 1,
    "java": 2, "jdk": 2, "threads": 2, "developers": 2,
}
GENERIC_WEIGHT = 0.1


class TopicEmbedding(EmbeddingInterface):
    """
    Deterministic embedding over four axes: space, cooking, java and a small
    constant generic component. Vectors are unit length.
    """

    def __init__(self):
        self.initialize_calls = 0
        self.text_calls: List[str] = []
        self.batch_calls: List[List[str]] = []

    def initialize(self) -> None:
        self.initialize_calls += 1

    def vector(self, text: str) -> List[float]:
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")
        counts = [0.0, 0.0, 0.0, GENERIC_WEIGHT]
        for word in re.findall(r"[a-z]+", text.lower()):
            axis = TOPIC_WORDS.get(word)
            if axis is not None:
                counts[axis] += 1.0
        norm = math.sqrt(sum(c * c for c in counts))
        return [c / norm for c in counts]

    def embed_text(self, text: str) -> List[float]:
        self.text_calls.append(text)
        return self.vector(text)

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        self.batch_calls.append(list(texts))
        return [self.vector(t) for t in texts]


class StaticEmbedding(EmbeddingInterface):
    """Looks vectors up in a fixed table; unknown texts get `default`"""

    def __init__(self, table: Dict[str, List[float]], default: Optional[List[float]] = None):
        self.table = table
        self.default = default or [0.0, 0.0, 1.0]

    def initialize(self) -> None:
        pass

    def embed_text(self, text: str) -> List[float]:
        return list(self.table.get(text.strip(), self.default))

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        return [self.embed_text(t) for t in texts]


class InMemoryVectorIndex(VectorIndexInterface):
    """Exact cosine search over a dict of points, with equality filters"""

    def __init__(self):
        self.points: Dict[str, Point] = {}
        self.initialize_calls = 0
        self.search_calls: List[Dict[str, Any]] = []

    def initialize(self) -> None:
        self.initialize_calls += 1

    @staticmethod
    def _matches(point: Point, filters: Optional[Dict[str, Any]]) -> bool:
        return all(point.payload.get(k) == v for k, v in (filters or {}).items())

    def upsert(self, points: List[Point]) -> None:
        for point in points:
            self.points[point.id] = point

    def search(self, vector, limit, score_threshold, filters=None) -> List[SearchHit]:
        self.search_calls.append({"limit": limit, "threshold": score_threshold, "filters": filters})
        hits = [
            SearchHit(id=p.id, score=cosine_similarity(vector, p.vector), payload=dict(p.payload))
            for p in self.points.values()
            if self._matches(p, filters)
        ]
        hits = [h for h in hits if h.score >= score_threshold]
        hits.sort(key=lambda h: h.score, reverse=True)
        return hits[:limit]

    def delete_by_filter(self, filters: Dict[str, Any]) -> None:
        if not filters:
            raise ValueError("Refusing to delete without a filter")
        for point_id in [pid for pid, p in self.points.items() if self._matches(p, filters)]:
            del self.points[point_id]

    def scroll(self, limit, cursor=None, filters=None) -> ScrollPage:
        if cursor and not cursor.isdigit():
            raise ValidationException(f"Invalid scroll cursor {cursor!r}")
        offset = int(cursor) if cursor else 0
        matching = [p for p in self.points.values() if self._matches(p, filters)]
        page = matching[offset:offset + limit]
        next_cursor = str(offset + limit) if len(matching) > offset + limit else None
        return ScrollPage(points=page, next_cursor=next_cursor)


@pytest.fixture
def embedding():
    return TopicEmbedding()


@pytest.fixture
def index():
    return InMemoryVectorIndex()


@pytest.fixture
def brain(embedding, index):
    """TagBrain over the fakes, with Space, Cooking and Java learned"""
    tag_brain = TagBrain(embedding, index)
    tag_brain.learn("tag-space", "Space", ["Space", "Cosmos"])
    tag_brain.learn("tag-cooking", "Cooking", ["Cooking", "Culinary"])
    tag_brain.learn("tag-java", "Java", ["Java", "JDK"])
    return tag_brain


@pytest.fixture
def two_topic_text():
    return (
        "Space exploration is vast. Rockets fly to the cosmos.\n"
        "Cooking pasta needs salt. Italian cuisine is culinary art."
    )


@pytest.fixture
def static_embedding():
    """Factory for table-driven embeddings"""
    return StaticEmbedding
