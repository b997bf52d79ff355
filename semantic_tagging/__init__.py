# Semantic Tagging Module
# Embedding-first concept tagging and keyword discovery
#
# Architecture:
#   1. Learn concepts as one vector point per synonym (idempotent ids)
#   2. Segment content into regions of adjacent similar sentences
#   3. Query the vector index per document or per region
#   4. Re-anchor regions to character offsets in the source
#   5. Aggregate cross-region consensus scores
#   6. Discover new keywords with n-grams and MMR diversification

from .tag_brain import TagBrain
from .tag_learner import TagLearner, synonym_point_id
from .tag_retriever import TagRetriever
from .keyword_extractor import KeywordExtractor
from .text_segmenter import TextSegmenter
from .text_locator import TextLocator, locate

__all__ = [
    "TagBrain",
    "TagLearner",
    "synonym_point_id",
    "TagRetriever",
    "KeywordExtractor",
    "TextSegmenter",
    "TextLocator",
    "locate",
]
