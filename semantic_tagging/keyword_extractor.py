"""
Keyword Extractor
=================

Proposes new keyword candidates for a document: unigrams and bigrams that
are close to the document embedding, are not already known concepts, and
are diversified with Maximal Marginal Relevance.
"""

from typing import List, Set

from core.service_interfaces import EmbeddingInterface, KeywordCandidate
from core.text_processor import TextProcessor
from core.validation_and_errors import DataValidator
from core.logging_config import Logger, log_performance
from semantic_tagging.tag_retriever import TagRetriever
from semantic_tagging.ranking import maximal_marginal_relevance


logger = Logger(__name__)

DEFAULT_TOP_K = 10
DEFAULT_DIVERSITY = 0.5
KNOWN_TAG_THRESHOLD = 0.6
MIN_KEYWORD_LENGTH = 3
MMR_POOL_SIZE = 50


class KeywordExtractor:
    """N-gram keyword discovery with MMR diversification"""

    def __init__(
        self,
        embedding_service: EmbeddingInterface,
        retriever: TagRetriever,
        known_tag_threshold: float = KNOWN_TAG_THRESHOLD,
        min_length: int = MIN_KEYWORD_LENGTH,
        pool_size: int = MMR_POOL_SIZE,
    ):
        self.embedding_service = embedding_service
        self.retriever = retriever
        self.known_tag_threshold = known_tag_threshold
        self.min_length = min_length
        self.pool_size = pool_size

    def _known_tags(self, content: str) -> Set[str]:
        tags = self.retriever.get_raw_tags(content, threshold=self.known_tag_threshold)
        return {t.name.lower() for t in tags}

    def candidates(self, content: str, exclude: Set[str]) -> List[str]:
        """Unique n-grams of sufficient length that are not excluded, first-seen order"""
        unique = dict.fromkeys(TextProcessor.ngrams(content))
        return [
            c for c in unique
            if len(c) >= self.min_length and c not in exclude
        ]

    @log_performance
    def extract(
        self,
        content: str,
        top_k: int = DEFAULT_TOP_K,
        diversity: float = DEFAULT_DIVERSITY,
    ) -> List[KeywordCandidate]:
        DataValidator.require_text(content, "content")
        DataValidator.validate_top_k(top_k)
        DataValidator.validate_diversity(diversity)

        known = self._known_tags(content)
        candidates = self.candidates(content, known)
        if not candidates:
            logger.debug("No keyword candidates survived filtering")
            return []

        doc_vector = self.embedding_service.embed_text(content)
        candidate_vectors = self.embedding_service.embed_batch(candidates)

        selected = maximal_marginal_relevance(
            candidate_vectors,
            doc_vector,
            top_k=top_k,
            diversity=diversity,
            pool_size=self.pool_size,
        )
        logger.debug(
            f"Selected {len(selected)} keywords from {len(candidates)} candidates "
            f"({len(known)} known tags excluded)"
        )
        return [KeywordCandidate(text=candidates[idx], score=score) for idx, score in selected]
