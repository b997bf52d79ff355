"""
Weaviate Vector Index
=====================

Implements VectorIndexInterface on the Weaviate v4 client with:
- Self-provided vectors (no server-side vectorizer)
- Cosine distance, converted to similarity scores
- Idempotent batch upsert by deterministic UUID
- Filtered delete and paginated scroll
"""

import functools
import operator
import threading
from typing import List, Dict, Any, Optional
from urllib.parse import urlparse

from core.service_interfaces import VectorIndexInterface, Point, SearchHit, ScrollPage
from core.validation_and_errors import (
    BackendUnavailableException,
    StorageException,
    ValidationException,
)
from core.logging_config import Logger, log_performance


logger = Logger(__name__)

PAYLOAD_FIELDS = ("tag_id", "alias", "original_name", "type")


class WeaviateVectorIndex(VectorIndexInterface):
    """Weaviate collection holding one object per synonym point"""

    def __init__(
        self,
        weaviate_url: str = "http://localhost:8080",
        grpc_port: int = 50051,
        api_key: Optional[str] = None,
        collection_name: str = "ConceptTag",
        dimension: Optional[int] = 384,
        timeout: float = 60.0,
        client: Any = None,
    ):
        self.url = weaviate_url.rstrip("/")
        self.grpc_port = grpc_port
        self.api_key = api_key
        self.collection_name = collection_name
        self.dimension = dimension
        self.timeout = timeout
        self.client: Any = client
        self.initialized = False
        self._init_lock = threading.Lock()

    def _connect(self) -> Any:
        import weaviate
        from weaviate.classes.init import AdditionalConfig, Auth, Timeout

        parsed = urlparse(self.url)
        host = parsed.hostname or "localhost"
        port = parsed.port or 8080
        auth = Auth.api_key(self.api_key) if self.api_key else None
        timeout = int(self.timeout)

        return weaviate.connect_to_local(
            host=host,
            port=port,
            grpc_port=self.grpc_port,
            auth_credentials=auth,
            additional_config=AdditionalConfig(
                timeout=Timeout(init=timeout, query=timeout, insert=timeout)
            ),
        )

    @log_performance
    def initialize(self) -> None:
        """Connect once and make sure the collection exists"""
        if self.initialized:
            return
        with self._init_lock:
            if self.initialized:
                return
            try:
                if self.client is None:
                    self.client = self._connect()
                if not self.client.is_ready():
                    raise BackendUnavailableException(f"Weaviate at {self.url} is not ready")
                self._ensure_collection()
            except BackendUnavailableException:
                raise
            except ImportError as e:
                logger.error("weaviate-client package not installed")
                raise BackendUnavailableException("weaviate-client is not installed") from e
            except Exception as e:
                logger.error(f"Failed to initialize Weaviate: {e}")
                raise BackendUnavailableException(f"Weaviate at {self.url} is unavailable") from e

            self.initialized = True
            logger.info(f"✓ Weaviate collection '{self.collection_name}' ready")

    def _ensure_collection(self) -> None:
        from weaviate.classes.config import Configure, Property, DataType, Tokenization, VectorDistances

        if self.client.collections.exists(self.collection_name):
            logger.info(f"✓ Collection '{self.collection_name}' already exists")
            return

        # Equality filters on payload fields must match the whole value
        properties = [
            Property(name=name, data_type=DataType.TEXT, tokenization=Tokenization.FIELD)
            for name in PAYLOAD_FIELDS
        ]
        self.client.collections.create(
            name=self.collection_name,
            properties=properties,
            vectorizer_config=Configure.Vectorizer.none(),
            vector_index_config=Configure.VectorIndex.hnsw(
                distance_metric=VectorDistances.COSINE
            ),
        )
        logger.info(f"✓ Created collection '{self.collection_name}'")

    def _collection(self) -> Any:
        self.initialize()
        return self.client.collections.get(self.collection_name)

    @staticmethod
    def _build_filter(filters: Optional[Dict[str, Any]]) -> Any:
        """AND together equality conditions on payload properties"""
        if not filters:
            return None
        from weaviate.classes.query import Filter

        conditions = [Filter.by_property(key).equal(value) for key, value in filters.items()]
        return functools.reduce(operator.and_, conditions)

    @staticmethod
    def _payload(properties: Dict[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in properties.items() if v is not None}

    @log_performance
    def upsert(self, points: List[Point]) -> None:
        """Batch-write points; objects with an existing UUID are overwritten"""
        if not points:
            return
        from weaviate.classes.data import DataObject

        for point in points:
            if self.dimension is not None and len(point.vector) != self.dimension:
                raise StorageException(
                    f"Point {point.id} has {len(point.vector)} dimensions, expected {self.dimension}"
                )

        objects = [
            DataObject(properties=dict(p.payload), vector=list(p.vector), uuid=p.id)
            for p in points
        ]
        try:
            result = self._collection().data.insert_many(objects)
        except BackendUnavailableException:
            raise
        except Exception as e:
            raise BackendUnavailableException(f"Upsert failed: {e}") from e

        if result.has_errors:
            messages = [str(err.message) for err in result.errors.values()]
            logger.error(f"Upsert rejected {len(messages)} of {len(points)} points")
            raise StorageException("; ".join(messages))
        logger.debug(f"Upserted {len(points)} points")

    @log_performance
    def search(
        self,
        vector: List[float],
        limit: int,
        score_threshold: float,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[SearchHit]:
        """Near-vector search; cosine distance d maps to score 1 - d"""
        from weaviate.classes.query import MetadataQuery

        try:
            response = self._collection().query.near_vector(
                near_vector=list(vector),
                limit=limit,
                distance=1.0 - score_threshold,
                filters=self._build_filter(filters),
                return_metadata=MetadataQuery(distance=True),
            )
        except BackendUnavailableException:
            raise
        except Exception as e:
            raise BackendUnavailableException(f"Search failed: {e}") from e

        hits: List[SearchHit] = []
        for item in response.objects:
            distance = getattr(item.metadata, "distance", None) if item.metadata else None
            score = 1.0 - (distance if distance is not None else 1.0)
            if score < score_threshold:
                continue
            hits.append(SearchHit(
                id=str(item.uuid),
                score=score,
                payload=self._payload(item.properties),
            ))

        hits.sort(key=lambda h: h.score, reverse=True)
        logger.debug(f"Search returned {len(hits)} hits")
        return hits

    @log_performance
    def delete_by_filter(self, filters: Dict[str, Any]) -> None:
        if not filters:
            raise ValueError("Refusing to delete without a filter")
        try:
            result = self._collection().data.delete_many(where=self._build_filter(filters))
        except BackendUnavailableException:
            raise
        except Exception as e:
            raise BackendUnavailableException(f"Delete failed: {e}") from e
        logger.info(f"Deleted {getattr(result, 'successful', 0)} points matching {filters}")

    @log_performance
    def scroll(
        self,
        limit: int,
        cursor: Optional[str] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> ScrollPage:
        """
        Page through matching points.

        The cursor is the offset of the next page. Weaviate's `after` cursor
        cannot be combined with filters, so offset paging is used instead.
        """
        try:
            offset = int(cursor) if cursor else 0
        except ValueError:
            offset = -1
        if offset < 0:
            raise ValidationException(f"Invalid scroll cursor {cursor!r}")

        try:
            response = self._collection().query.fetch_objects(
                limit=limit + 1,
                offset=offset,
                filters=self._build_filter(filters),
                include_vector=True,
            )
        except BackendUnavailableException:
            raise
        except Exception as e:
            raise BackendUnavailableException(f"Scroll failed: {e}") from e

        objects = list(response.objects)
        next_cursor = str(offset + limit) if len(objects) > limit else None
        points = [
            Point(
                id=str(item.uuid),
                vector=self._default_vector(item.vector),
                payload=self._payload(item.properties),
            )
            for item in objects[:limit]
        ]
        return ScrollPage(points=points, next_cursor=next_cursor)

    @staticmethod
    def _default_vector(vector: Any) -> List[float]:
        if isinstance(vector, dict):
            vector = vector.get("default")
        return list(vector) if vector is not None else []

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
