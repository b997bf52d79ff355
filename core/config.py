"""
Configuration Management
========================

Loads engine settings from the environment (optionally via a .env file)
and keeps secrets out of the logs.
"""

import os
import re
from typing import Optional, Dict, Any
from dataclasses import dataclass, asdict
from dotenv import load_dotenv
from core.logging_config import Logger


logger = Logger(__name__)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}, using {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={raw!r}, using {default}")
        return default


@dataclass
class BrainConfig:
    """Settings for the embedding model, the vector index and retrieval"""
    weaviate_url: str = "http://localhost:8080"
    weaviate_grpc_port: int = 50051
    weaviate_api_key: Optional[str] = None
    collection_name: str = "ConceptTag"
    embedding_model: str = "BAAI/bge-small-en-v1.5"
    embedding_dimension: int = 384
    embedding_batch_size: int = 16
    embedding_max_workers: int = 4
    backend_timeout: float = 60.0
    segment_similarity_threshold: float = 0.5
    raw_summary_chars: int = 2000
    search_overfetch: int = 3
    port: int = 3000

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "BrainConfig":
        """
        Build configuration from the process environment.

        Args:
            env_file: Optional path to a .env file loaded first
        """
        if env_file:
            if os.path.exists(env_file):
                load_dotenv(env_file)
                logger.info(f"Loaded configuration from {env_file}")
            else:
                logger.warning(f"Env file {env_file} not found, using process environment")
        else:
            load_dotenv()

        defaults = cls()
        return cls(
            weaviate_url=os.getenv("WEAVIATE_URL", defaults.weaviate_url),
            weaviate_grpc_port=_env_int("WEAVIATE_GRPC_PORT", defaults.weaviate_grpc_port),
            weaviate_api_key=os.getenv("WEAVIATE_API_KEY") or None,
            collection_name=os.getenv("TAG_COLLECTION", defaults.collection_name),
            embedding_model=os.getenv("EMBEDDING_MODEL", defaults.embedding_model),
            embedding_dimension=_env_int("EMBEDDING_DIMENSION", defaults.embedding_dimension),
            embedding_batch_size=_env_int("EMBEDDING_BATCH_SIZE", defaults.embedding_batch_size),
            embedding_max_workers=_env_int("EMBEDDING_MAX_WORKERS", defaults.embedding_max_workers),
            backend_timeout=_env_float("BACKEND_TIMEOUT", defaults.backend_timeout),
            segment_similarity_threshold=_env_float(
                "SEGMENT_SIMILARITY_THRESHOLD", defaults.segment_similarity_threshold
            ),
            raw_summary_chars=_env_int("RAW_SUMMARY_CHARS", defaults.raw_summary_chars),
            search_overfetch=_env_int("SEARCH_OVERFETCH", defaults.search_overfetch),
            port=_env_int("PORT", defaults.port),
        )

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


class SecretsMask:
    """Utility for masking secrets in logs"""

    SENSITIVE_KEYS = [
        "api_key", "password", "secret", "token", "authorization",
    ]

    @classmethod
    def mask_dict(cls, data: Dict[str, Any], depth: int = 0) -> Dict[str, Any]:
        """Recursively mask sensitive values in a dictionary"""
        if depth > 5:
            return data

        masked: Dict[str, Any] = {}
        for key, value in data.items():
            if cls._is_sensitive_key(key):
                masked[key] = "***MASKED***" if value else value
            elif isinstance(value, dict):
                masked[key] = cls.mask_dict(value, depth + 1)
            else:
                masked[key] = value

        return masked

    @classmethod
    def _is_sensitive_key(cls, key: str) -> bool:
        key_lower = key.lower()
        return any(sensitive in key_lower for sensitive in cls.SENSITIVE_KEYS)

    @classmethod
    def mask_string(cls, text: str) -> str:
        """Mask API keys and bearer tokens embedded in free text"""
        patterns = [
            (r"api.?key[=:\s]+['\"]?([^'\"\s]+)['\"]?", "api_key=***MASKED***"),
            (r"Bearer\s+\S+", "Bearer ***MASKED***"),
        ]
        masked = text
        for pattern, replacement in patterns:
            masked = re.sub(pattern, replacement, masked, flags=re.IGNORECASE)
        return masked
