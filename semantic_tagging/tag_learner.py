"""
Tag Learner
===========

Teaches the index a concept as one point per unique synonym. Point ids are
derived from (tag id, synonym), so re-learning overwrites instead of
duplicating, and every learn call fully replaces the tag's previous points.

Concurrent learns for the same tag id are eventually consistent: between
the delete and the upsert there is a short window with no points for it.
"""

import json
from typing import List, Sequence

from weaviate.util import generate_uuid5

from core.service_interfaces import EmbeddingInterface, VectorIndexInterface, Point, Concept
from core.text_processor import TextProcessor
from core.validation_and_errors import DataValidator
from core.logging_config import Logger, log_performance


logger = Logger(__name__)

TAG_TYPE = "TAG"


def synonym_point_id(tag_id: str, synonym: str) -> str:
    """Deterministic UUID for a (tag id, normalised synonym) pair"""
    return generate_uuid5(json.dumps([tag_id, synonym]))


class TagLearner:
    """Writes concepts into the vector index"""

    def __init__(self, embedding_service: EmbeddingInterface, vector_index: VectorIndexInterface):
        self.embedding_service = embedding_service
        self.vector_index = vector_index

    @log_performance
    def learn(self, tag_id: str, alias: str, synonyms: Sequence[str]) -> Concept:
        """
        Replace the points of `tag_id` with one point per unique synonym.

        Returns:
            The concept as stored (normalised synonyms)
        """
        synonyms = DataValidator.validate_learn_request(tag_id, alias, synonyms)
        unique = TextProcessor.normalize_terms(synonyms)

        # Embedding happens before the delete: a model failure leaves existing points untouched
        vectors = self.embedding_service.embed_batch(unique) if unique else []

        self.vector_index.delete_by_filter({"tag_id": tag_id})

        if unique:
            points: List[Point] = [
                Point(
                    id=synonym_point_id(tag_id, synonym),
                    vector=vector,
                    payload={
                        "tag_id": tag_id,
                        "alias": alias,
                        "original_name": synonym,
                        "type": TAG_TYPE,
                    },
                )
                for synonym, vector in zip(unique, vectors)
            ]
            self.vector_index.upsert(points)

        logger.info(f"Learned tag {alias!r} ({tag_id}) with {len(unique)} synonyms")
        return Concept(tag_id=tag_id, alias=alias, synonyms=set(unique))

    @log_performance
    def forget(self, tag_id: str) -> None:
        """Remove every point of `tag_id`"""
        DataValidator.require_text(tag_id, "tagId")
        self.vector_index.delete_by_filter({"tag_id": tag_id})
        logger.info(f"Deleted tag {tag_id}")
