"""
Pipeline Factory
================

Composition root for the tagging engine. Builds the embedding provider,
the vector index and the TagBrain once at process start-up and hands them
to request-handling code.
"""

from typing import Optional

from core.service_interfaces import EmbeddingInterface, VectorIndexInterface
from core.embedding_service import LocalTransformerEmbedding, ConcurrentEmbedder
from core.vector_store import WeaviateVectorIndex
from core.config import BrainConfig, SecretsMask
from core.validation_and_errors import RetryStrategy
from core.logging_config import Logger
from semantic_tagging.tag_brain import TagBrain


logger = Logger(__name__)


class PipelineFactory:
    """
    Factory for properly configured TagBrain instances.
    Handles service composition, configuration, and start-up.
    """

    def __init__(self, config: Optional[BrainConfig] = None):
        """
        Args:
            config: Optional BrainConfig. Defaults to the environment.
        """
        self.config = config or BrainConfig.from_env()

    def create_embedding_service(self) -> EmbeddingInterface:
        model = LocalTransformerEmbedding(
            model_name=self.config.embedding_model,
            dimension=self.config.embedding_dimension,
        )
        return ConcurrentEmbedder(
            model,
            batch_size=self.config.embedding_batch_size,
            max_workers=self.config.embedding_max_workers,
            timeout=self.config.backend_timeout,
        )

    def create_vector_index(self) -> VectorIndexInterface:
        return WeaviateVectorIndex(
            weaviate_url=self.config.weaviate_url,
            grpc_port=self.config.weaviate_grpc_port,
            api_key=self.config.weaviate_api_key,
            collection_name=self.config.collection_name,
            dimension=self.config.embedding_dimension,
            timeout=self.config.backend_timeout,
        )

    def create_brain(
        self,
        embedding_service: Optional[EmbeddingInterface] = None,
        vector_index: Optional[VectorIndexInterface] = None,
        initialize: bool = False,
        retry: Optional[RetryStrategy] = None,
    ) -> TagBrain:
        """
        Create a TagBrain, optionally waiting for its backends.

        Args:
            embedding_service: Embedding implementation (default: local model with fan-out)
            vector_index: Vector index implementation (default: Weaviate)
            initialize: Load the model and ensure the collection before returning
            retry: Backoff used while initializing; the engine itself never retries
        """
        logger.info(
            "Creating tag brain",
            service="pipeline_factory",
        )
        logger.debug(f"Configuration: {SecretsMask.mask_dict(self.config.as_dict())}")

        brain = TagBrain(
            embedding_service or self.create_embedding_service(),
            vector_index or self.create_vector_index(),
            segment_similarity_threshold=self.config.segment_similarity_threshold,
            summary_chars=self.config.raw_summary_chars,
            overfetch=self.config.search_overfetch,
        )

        if initialize:
            (retry or RetryStrategy()).execute(brain.initialize)

        logger.info("✓ Tag brain created successfully")
        return brain
