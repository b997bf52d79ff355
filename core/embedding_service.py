"""
Embedding Generation Service
=============================

Provides unit-normalised vector embeddings from a local
sentence-transformers model, plus a wrapper that fans batches out over a
bounded worker pool.
"""

import threading
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import List, Optional
from core.service_interfaces import EmbeddingInterface
from core.validation_and_errors import BackendUnavailableException
from core.logging_config import Logger, log_performance


logger = Logger(__name__)


class LocalTransformerEmbedding(EmbeddingInterface):
    """Local transformer-based embeddings using sentence-transformers"""

    def __init__(
        self,
        model_name: str = "BAAI/bge-small-en-v1.5",
        dimension: Optional[int] = 384,
    ):
        self.model_name = model_name
        self.dimension = dimension
        self.model = None
        self._init_lock = threading.Lock()

    def initialize(self) -> None:
        """Load the transformer model once, even under concurrent first use"""
        if self.model is not None:
            return
        with self._init_lock:
            if self.model is not None:
                return
            try:
                from sentence_transformers import SentenceTransformer
            except ImportError as e:
                logger.error("sentence-transformers package not installed")
                raise BackendUnavailableException("sentence-transformers is not installed") from e

            logger.info(f"Loading embedding model {self.model_name}")
            try:
                model = SentenceTransformer(self.model_name)
            except Exception as e:
                logger.error(f"Failed to load embedding model {self.model_name}: {e}")
                raise BackendUnavailableException(
                    f"Embedding model {self.model_name} failed to load"
                ) from e

            actual = model.get_sentence_embedding_dimension()
            if self.dimension is not None and actual != self.dimension:
                raise BackendUnavailableException(
                    f"Model {self.model_name} produces {actual}-dim vectors, expected {self.dimension}"
                )
            self.dimension = actual
            self.model = model
            logger.info(f"Local transformer embedding ready (dim={actual})")

    @log_performance
    def embed_text(self, text: str) -> List[float]:
        """Generate embedding for single text"""
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")
        self.initialize()

        embedding = self.model.encode(
            text.strip(), normalize_embeddings=True, convert_to_numpy=True
        )
        return embedding.tolist()

    @log_performance
    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """Generate embeddings for multiple texts in one model call"""
        if not texts:
            return []
        if any(not t or not t.strip() for t in texts):
            raise ValueError("Cannot embed empty text")
        self.initialize()

        embeddings = self.model.encode(
            [t.strip() for t in texts],
            normalize_embeddings=True,
            convert_to_numpy=True,
            show_progress_bar=False,
        )
        return [e.tolist() for e in embeddings]


class ConcurrentEmbedder(EmbeddingInterface):
    """
    Bounded fan-out over another embedding service.

    Texts are split into batches, each batch is embedded on a worker thread,
    and the vectors are reassembled in input order. At most `max_workers`
    batches are in flight and each batch waits at most `timeout` seconds.
    """

    def __init__(
        self,
        inner: EmbeddingInterface,
        batch_size: int = 16,
        max_workers: int = 4,
        timeout: Optional[float] = 60.0,
    ):
        if batch_size <= 0 or max_workers <= 0:
            raise ValueError("batch_size and max_workers must be positive")
        self.inner = inner
        self.batch_size = batch_size
        self.max_workers = max_workers
        self.timeout = timeout
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="embed"
        )

    def initialize(self) -> None:
        self.inner.initialize()

    def embed_text(self, text: str) -> List[float]:
        return self.inner.embed_text(text)

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []
        if len(texts) <= self.batch_size:
            return self.inner.embed_batch(list(texts))

        batches = [
            list(texts[i:i + self.batch_size])
            for i in range(0, len(texts), self.batch_size)
        ]
        futures = [self._executor.submit(self.inner.embed_batch, b) for b in batches]

        vectors: List[List[float]] = []
        try:
            for future in futures:
                vectors.extend(future.result(timeout=self.timeout))
        except FutureTimeout as e:
            for future in futures:
                future.cancel()
            raise BackendUnavailableException(
                f"Embedding batch timed out after {self.timeout}s"
            ) from e

        logger.debug(f"Embedded {len(texts)} texts in {len(batches)} batches")
        return vectors

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
