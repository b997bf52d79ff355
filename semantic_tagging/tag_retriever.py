"""
Tag Retriever
=============

Ranks learned concepts against content in three modes:
- raw: one query with the whole-document (or leading summary) embedding
- region: one query per semantic chunk, anchored back to the source
- combined: cross-region consensus with a per-tag decay
"""

from typing import List, Dict, Any, Optional, Iterable

from core.service_interfaces import (
    EmbeddingInterface,
    VectorIndexInterface,
    SearchHit,
    TagScore,
    Region,
)
from core.validation_and_errors import DataValidator, AnchorFailure
from core.logging_config import Logger, log_performance
from semantic_tagging.tag_learner import TAG_TYPE
from semantic_tagging.text_locator import TextLocator
from semantic_tagging.text_segmenter import TextSegmenter
from semantic_tagging.ranking import aggregate_consensus


logger = Logger(__name__)

DEFAULT_RAW_THRESHOLD = 0.3
DEFAULT_RAW_TOP_K = 50
DEFAULT_REGION_THRESHOLD = 0.3
DEFAULT_REGION_TOP_K = 5

TAG_FILTER: Dict[str, Any] = {"type": TAG_TYPE}


def best_score_per_tag(hits: Iterable[SearchHit]) -> List[TagScore]:
    """Group hits by alias (falling back to the synonym) keeping the max score, best first"""
    best: Dict[str, float] = {}
    for hit in hits:
        name = hit.payload.get("alias") or hit.payload.get("original_name")
        if not name:
            continue
        if name not in best or hit.score > best[name]:
            best[name] = hit.score
    scores = [TagScore(name=name, score=score) for name, score in best.items()]
    scores.sort(key=lambda t: t.score, reverse=True)
    return scores


class TagRetriever:
    """Similarity-based tag retrieval against the vector index"""

    def __init__(
        self,
        embedding_service: EmbeddingInterface,
        vector_index: VectorIndexInterface,
        segmenter: Optional[TextSegmenter] = None,
        locator: Optional[TextLocator] = None,
        summary_chars: int = 2000,
        overfetch: int = 3,
    ):
        self.embedding_service = embedding_service
        self.vector_index = vector_index
        self.segmenter = segmenter or TextSegmenter(embedding_service)
        self.locator = locator or TextLocator()
        self.summary_chars = summary_chars
        self.overfetch = max(1, overfetch)

    def _summary(self, content: str) -> str:
        if self.summary_chars and len(content) > self.summary_chars:
            return content[: self.summary_chars]
        return content

    def _search(self, vector: List[float], threshold: float, top_k: int) -> List[TagScore]:
        hits = self.vector_index.search(
            vector,
            limit=top_k * self.overfetch,
            score_threshold=threshold,
            filters=TAG_FILTER,
        )
        return best_score_per_tag(hits)[:top_k]

    @log_performance
    def get_raw_tags(
        self,
        content: str,
        threshold: float = DEFAULT_RAW_THRESHOLD,
        top_k: int = DEFAULT_RAW_TOP_K,
    ) -> List[TagScore]:
        """Tags for the whole document, one entry per alias"""
        DataValidator.require_text(content, "content")
        DataValidator.validate_threshold(threshold)
        DataValidator.validate_top_k(top_k)

        vector = self.embedding_service.embed_text(self._summary(content))
        tags = self._search(vector, threshold, top_k)
        logger.debug(f"Raw retrieval found {len(tags)} tags")
        return tags

    @log_performance
    def get_region_tags(
        self,
        content: str,
        threshold: float = DEFAULT_REGION_THRESHOLD,
        top_k: int = DEFAULT_REGION_TOP_K,
        similarity_threshold: Optional[float] = None,
    ) -> List[Region]:
        """
        Tags per semantic region.

        Chunks that cannot be anchored in the source, or that match no tag,
        produce no region.
        """
        DataValidator.require_text(content, "content")
        DataValidator.validate_threshold(threshold)
        DataValidator.validate_top_k(top_k)

        chunks = self.segmenter.split(content, similarity_threshold)
        if not chunks:
            return []
        vectors = self.embedding_service.embed_batch(chunks)

        regions: List[Region] = []
        cursor = 0
        for chunk, vector in zip(chunks, vectors):
            try:
                span = self.locator.locate_or_raise(content, chunk, cursor)
            except AnchorFailure as e:
                logger.warning(str(e))
                continue
            cursor = span.end

            tag_scores = self._search(vector, threshold, top_k)
            if not tag_scores:
                continue
            regions.append(Region(
                content=content[span.start:span.end],
                start_index=span.start,
                end_index=span.end,
                tag_scores=tag_scores,
            ))

        logger.debug(f"Region retrieval produced {len(regions)} of {len(chunks)} regions")
        return regions

    @log_performance
    def get_combined_tags(
        self,
        content: str,
        threshold: float = DEFAULT_REGION_THRESHOLD,
        top_k: int = DEFAULT_RAW_TOP_K,
        region_top_k: int = DEFAULT_REGION_TOP_K,
    ) -> List[TagScore]:
        """Cross-region consensus: per-tag summed score times 1/ln(n + e) for n > 1 regions"""
        DataValidator.validate_top_k(top_k)
        regions = self.get_region_tags(content, threshold, region_top_k)

        combined = aggregate_consensus(
            [(t.name, t.score) for t in region.tag_scores] for region in regions
        )
        tags = [TagScore(name=name, score=score) for name, score in combined.items()]
        tags.sort(key=lambda t: t.score, reverse=True)
        return tags[:top_k]
