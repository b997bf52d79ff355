"""
Tag Brain
=========

Canonical entry point for the tagging engine. Owns the injected embedding
provider and vector index and exposes learning, retrieval, scoring,
keyword discovery and tag listing.
"""

import threading
from typing import List, Dict, Any, Optional, Sequence

from core.service_interfaces import (
    EmbeddingInterface,
    VectorIndexInterface,
    TagScore,
    Region,
    KeywordCandidate,
    Concept,
)
from core.validation_and_errors import DataValidator
from core.logging_config import Logger, log_performance
from semantic_tagging.ranking import cosine_similarity
from semantic_tagging.tag_learner import TagLearner, TAG_TYPE
from semantic_tagging.tag_retriever import (
    TagRetriever,
    DEFAULT_RAW_THRESHOLD,
    DEFAULT_RAW_TOP_K,
    DEFAULT_REGION_THRESHOLD,
    DEFAULT_REGION_TOP_K,
)
from semantic_tagging.keyword_extractor import (
    KeywordExtractor,
    DEFAULT_TOP_K as DEFAULT_KEYWORD_TOP_K,
    DEFAULT_DIVERSITY,
)
from semantic_tagging.text_segmenter import TextSegmenter
from semantic_tagging.text_locator import TextLocator


logger = Logger(__name__)

DEFAULT_LIST_LIMIT = 100


class TagBrain:
    """
    Tagging engine composed from explicit service objects.

    Retrieval paths are read-only and may run concurrently; learn and
    delete are the only writers.
    """

    def __init__(
        self,
        embedding_service: EmbeddingInterface,
        vector_index: VectorIndexInterface,
        segment_similarity_threshold: float = 0.5,
        summary_chars: int = 2000,
        overfetch: int = 3,
    ):
        self.embedding_service = embedding_service
        self.vector_index = vector_index
        self.segmenter = TextSegmenter(embedding_service, segment_similarity_threshold)
        self.learner = TagLearner(embedding_service, vector_index)
        self.retriever = TagRetriever(
            embedding_service,
            vector_index,
            segmenter=self.segmenter,
            locator=TextLocator(),
            summary_chars=summary_chars,
            overfetch=overfetch,
        )
        self.keyword_extractor = KeywordExtractor(embedding_service, self.retriever)
        self._initialized = False
        self._init_lock = threading.Lock()

    def initialize(self) -> None:
        """Load the model and ensure the collection exists, once"""
        if self._initialized:
            return
        with self._init_lock:
            if self._initialized:
                return
            self.embedding_service.initialize()
            self.vector_index.initialize()
            self._initialized = True
            logger.info("✓ Tag brain initialized")

    def learn(self, tag_id: str, alias: str, synonyms: Sequence[str]) -> Concept:
        return self.learner.learn(tag_id, alias, synonyms)

    def delete_tag(self, tag_id: str) -> None:
        self.learner.forget(tag_id)

    def get_raw_tags(
        self,
        content: str,
        threshold: Optional[float] = None,
        top_k: Optional[int] = None,
    ) -> List[TagScore]:
        return self.retriever.get_raw_tags(
            content,
            DEFAULT_RAW_THRESHOLD if threshold is None else threshold,
            DEFAULT_RAW_TOP_K if top_k is None else top_k,
        )

    def get_region_tags(
        self,
        content: str,
        threshold: Optional[float] = None,
        top_k: Optional[int] = None,
    ) -> List[Region]:
        return self.retriever.get_region_tags(
            content,
            DEFAULT_REGION_THRESHOLD if threshold is None else threshold,
            DEFAULT_REGION_TOP_K if top_k is None else top_k,
        )

    def get_combined_tags(
        self,
        content: str,
        threshold: Optional[float] = None,
        top_k: Optional[int] = None,
    ) -> List[TagScore]:
        return self.retriever.get_combined_tags(
            content,
            DEFAULT_REGION_THRESHOLD if threshold is None else threshold,
            DEFAULT_RAW_TOP_K if top_k is None else top_k,
        )

    @log_performance
    def score_tags(self, tags: Sequence[str], content: str) -> List[TagScore]:
        """Cosine similarity of each tag name to the content, best first; no index lookup"""
        DataValidator.require_text(content, "content")
        names = [t for t in DataValidator.require_string_list(tags, "tags") if t.strip()]
        if not names:
            return []

        content_vector = self.embedding_service.embed_text(content)
        tag_vectors = self.embedding_service.embed_batch(names)
        scores = [
            TagScore(name=name, score=cosine_similarity(content_vector, vector))
            for name, vector in zip(names, tag_vectors)
        ]
        scores.sort(key=lambda t: t.score, reverse=True)
        return scores

    def extract_keywords(
        self,
        content: str,
        top_k: Optional[int] = None,
        diversity: Optional[float] = None,
    ) -> List[KeywordCandidate]:
        return self.keyword_extractor.extract(
            content,
            DEFAULT_KEYWORD_TOP_K if top_k is None else top_k,
            DEFAULT_DIVERSITY if diversity is None else diversity,
        )

    @log_performance
    def list_tags(self, limit: int = DEFAULT_LIST_LIMIT, cursor: Optional[str] = None) -> Dict[str, Any]:
        """One entry per learned synonym point, with a cursor for the next page"""
        DataValidator.validate_top_k(limit)
        page = self.vector_index.scroll(limit, cursor, {"type": TAG_TYPE})
        tags = [
            {
                "id": point.id,
                "tagId": point.payload.get("tag_id"),
                "alias": point.payload.get("alias"),
                "name": point.payload.get("original_name"),
            }
            for point in page.points
        ]
        return {"tags": tags, "nextCursor": page.next_cursor}
