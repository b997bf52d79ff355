# Text Segmenter: semantic region splitting
#
# Splits content into sentences, embeds every sentence, and greedily merges
# consecutive sentences while each sentence stays close to the one before it.
#
# Key ideas:
#   - Each sentence is compared to the immediately preceding sentence, not to
#     a running centroid of the chunk. Slow topic drift across a long passage
#     therefore stays in one chunk.
#   - Sentence embeddings are fanned out in one batch call; the merge
#     decisions then run strictly in sentence order.

from typing import List, Optional

from core.service_interfaces import EmbeddingInterface
from core.text_processor import TextProcessor
from core.logging_config import Logger, log_performance
from semantic_tagging.ranking import cosine_similarity


logger = Logger(__name__)


class TextSegmenter:
    """
    Greedy adjacent-sentence segmentation.

    Parameters
    ----------
    embedding_service : EmbeddingInterface
        Provider used to embed each sentence.
    similarity_threshold : float
        Default minimum similarity for a sentence to join the current chunk.
    """

    def __init__(self, embedding_service: EmbeddingInterface, similarity_threshold: float = 0.5):
        self.embedding_service = embedding_service
        self.similarity_threshold = similarity_threshold

    @log_performance
    def split(self, content: str, similarity_threshold: Optional[float] = None) -> List[str]:
        """
        Split *content* → sentences → semantically coherent chunks.

        Returns chunk strings in source order; sentences inside a chunk are
        joined with a single space.
        """
        threshold = self.similarity_threshold if similarity_threshold is None else similarity_threshold
        sentences = TextProcessor.split_sentences(content)
        if not sentences:
            return []

        vectors = self.embedding_service.embed_batch(sentences)

        chunks: List[str] = []
        current: List[str] = [sentences[0]]
        previous_vector = vectors[0]

        for sentence, vector in zip(sentences[1:], vectors[1:]):
            if cosine_similarity(previous_vector, vector) >= threshold:
                current.append(sentence)
            else:
                chunks.append(" ".join(current))
                current = [sentence]
            previous_vector = vector

        chunks.append(" ".join(current))
        logger.debug(f"Split {len(sentences)} sentences into {len(chunks)} chunks")
        return chunks
