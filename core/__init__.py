"""Core module - service interfaces, backends and configuration"""

from .service_interfaces import (
    EmbeddingInterface,
    VectorIndexInterface,
    Concept,
    Point,
    SearchHit,
    ScrollPage,
    TagScore,
    TextSpan,
    Region,
    KeywordCandidate,
)
from .logging_config import Logger, setup_logger, log_performance
from .embedding_service import LocalTransformerEmbedding, ConcurrentEmbedder
from .vector_store import WeaviateVectorIndex
from .text_processor import TextProcessor, STOPWORDS
from .validation_and_errors import (
    DataValidator,
    RetryStrategy,
    TaggingException,
    ValidationException,
    BackendUnavailableException,
    StorageException,
    AnchorFailure,
)
from .config import BrainConfig, SecretsMask

__all__ = [
    # Interfaces
    "EmbeddingInterface",
    "VectorIndexInterface",
    # Data models
    "Concept",
    "Point",
    "SearchHit",
    "ScrollPage",
    "TagScore",
    "TextSpan",
    "Region",
    "KeywordCandidate",
    # Logging
    "Logger",
    "setup_logger",
    "log_performance",
    # Backends
    "LocalTransformerEmbedding",
    "ConcurrentEmbedder",
    "WeaviateVectorIndex",
    "TextProcessor",
    "STOPWORDS",
    # Validation & Errors
    "DataValidator",
    "RetryStrategy",
    "TaggingException",
    "ValidationException",
    "BackendUnavailableException",
    "StorageException",
    "AnchorFailure",
    # Config
    "BrainConfig",
    "SecretsMask",
]
