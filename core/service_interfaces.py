"""
Tagging Service Interfaces
==========================

Defines the collaborator abstractions used by the tagging engine.
Embedding providers and vector indexes implement these interfaces so the
engine can be composed with real backends or in-memory fakes.
"""

from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional, Set
from dataclasses import dataclass, field


@dataclass
class Concept:
    """A named concept with the synonyms it is learned from"""
    tag_id: str
    alias: str
    synonyms: Set[str] = field(default_factory=set)


@dataclass
class Point:
    """A stored vector with its id and payload"""
    id: str
    vector: List[float]
    payload: Dict[str, Any]


@dataclass
class SearchHit:
    """A nearest-neighbour hit returned by the vector index"""
    id: str
    score: float
    payload: Dict[str, Any]


@dataclass
class ScrollPage:
    """One page of a filtered scroll over the index"""
    points: List[Point]
    next_cursor: Optional[str] = None


@dataclass
class TagScore:
    """Tag name with its similarity (or aggregated) score"""
    name: str
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "score": self.score}


@dataclass
class TextSpan:
    """Half-open character range [start, end) in a source text"""
    start: int
    end: int


@dataclass
class Region:
    """A semantically coherent span of the source and its tags"""
    content: str
    start_index: int
    end_index: int
    tag_scores: List[TagScore] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "regionContent": self.content,
            "regionStartIndex": self.start_index,
            "regionEndIndex": self.end_index,
            "tagScores": [t.to_dict() for t in self.tag_scores],
        }


@dataclass
class KeywordCandidate:
    """An n-gram proposed as a new keyword"""
    text: str
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.text, "score": self.score}


class EmbeddingInterface(ABC):
    """
    Abstract interface for text embeddings.
    Implementations: LocalTransformerEmbedding, ConcurrentEmbedder.

    Vectors are unit-normalised and deterministic for identical text.
    """

    @abstractmethod
    def initialize(self) -> None:
        """Load the model. Safe to call more than once."""
        pass

    @abstractmethod
    def embed_text(self, text: str) -> List[float]:
        """Generate embedding for text"""
        pass

    @abstractmethod
    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """Generate embeddings for multiple texts, in input order"""
        pass


class VectorIndexInterface(ABC):
    """
    Abstract interface for the vector database holding synonym points.
    Implementations: WeaviateVectorIndex.

    Filters are dicts of payload field -> required value, combined with AND.
    """

    @abstractmethod
    def initialize(self) -> None:
        """Connect and ensure the collection exists (cosine distance)"""
        pass

    @abstractmethod
    def upsert(self, points: List[Point]) -> None:
        """Insert or overwrite points by id"""
        pass

    @abstractmethod
    def search(
        self,
        vector: List[float],
        limit: int,
        score_threshold: float,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[SearchHit]:
        """Return up to `limit` hits scoring at least `score_threshold`, best first"""
        pass

    @abstractmethod
    def delete_by_filter(self, filters: Dict[str, Any]) -> None:
        """Delete every point matching the filter"""
        pass

    @abstractmethod
    def scroll(
        self,
        limit: int,
        cursor: Optional[str] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> ScrollPage:
        """Page through points matching the filter"""
        pass
