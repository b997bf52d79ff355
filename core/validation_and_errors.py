"""
Input Validation and Error Handling
===================================

Exception hierarchy for the tagging engine, request validation, and the
caller-side retry strategy used while waiting for backends at start-up.
"""

from typing import List, Any, Optional, Callable, Sequence
import logging
import time
from core.logging_config import Logger


logger = Logger(__name__)


class TaggingException(Exception):
    """Base exception for tagging operations"""
    pass


class ValidationException(TaggingException):
    """Raised when caller input is missing or malformed"""
    log_level = logging.WARNING


class BackendUnavailableException(TaggingException):
    """Raised when the embedding model or the vector index cannot be used"""
    pass


class StorageException(TaggingException):
    """Raised when the vector index rejects written points"""
    pass


class AnchorFailure(TaggingException):
    """Raised when a chunk cannot be located in its source text"""
    pass


class RetryStrategy:
    """Configurable retry strategy with exponential backoff"""

    def __init__(
        self,
        max_attempts: int = 3,
        initial_delay: float = 1.0,
        max_delay: float = 60.0,
        backoff_factor: float = 2.0,
        exceptions: tuple = (BackendUnavailableException,),
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.max_attempts = max_attempts
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.backoff_factor = backoff_factor
        self.exceptions = exceptions
        self._sleep = sleep

    def execute(self, func: Callable, *args, **kwargs) -> Any:
        """Execute function with retry logic"""
        delay = self.initial_delay
        last_exception: Optional[Exception] = None

        for attempt in range(self.max_attempts):
            try:
                return func(*args, **kwargs)
            except self.exceptions as e:
                last_exception = e
                if attempt < self.max_attempts - 1:
                    logger.warning(
                        f"Attempt {attempt + 1} failed: {e}. "
                        f"Retrying in {delay}s..."
                    )
                    self._sleep(delay)
                    delay = min(delay * self.backoff_factor, self.max_delay)

        logger.error(f"All {self.max_attempts} attempts failed")
        if last_exception is not None:
            raise last_exception
        raise RuntimeError(f"All {self.max_attempts} attempts failed without exception")


class DataValidator:
    """Validation of caller-supplied tagging input"""

    VALID_SCORE_RANGE = (-1.0, 1.0)
    VALID_DIVERSITY_RANGE = (0.0, 1.0)

    @staticmethod
    def require_text(value: Any, field_name: str) -> str:
        """Return `value` if it is a non-blank string"""
        if not isinstance(value, str) or not value.strip():
            raise ValidationException(f"{field_name} is required")
        return value

    @staticmethod
    def require_string_list(value: Any, field_name: str) -> List[str]:
        """Return `value` if it is a list of strings"""
        if not isinstance(value, (list, tuple)):
            raise ValidationException(f"{field_name} must be a list")
        if not all(isinstance(item, str) for item in value):
            raise ValidationException(f"{field_name} must contain only strings")
        return list(value)

    @classmethod
    def validate_threshold(cls, threshold: float) -> float:
        low, high = cls.VALID_SCORE_RANGE
        if not low <= threshold <= high:
            raise ValidationException(f"threshold must be between {low} and {high}")
        return threshold

    @staticmethod
    def validate_top_k(top_k: int) -> int:
        if isinstance(top_k, bool) or not isinstance(top_k, int) or top_k <= 0:
            raise ValidationException("topK must be a positive integer")
        return top_k

    @classmethod
    def validate_diversity(cls, diversity: float) -> float:
        low, high = cls.VALID_DIVERSITY_RANGE
        if not low <= diversity <= high:
            raise ValidationException(f"diversity must be between {low} and {high}")
        return diversity

    @classmethod
    def validate_learn_request(cls, tag_id: Any, alias: Any, synonyms: Any) -> Sequence[str]:
        """Validate the arguments of a learn call, returning the synonym list"""
        cls.require_text(tag_id, "tagId")
        cls.require_text(alias, "alias")
        return cls.require_string_list(synonyms, "synonyms")
