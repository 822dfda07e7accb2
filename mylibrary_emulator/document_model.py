import logging
from typing import Any, AsyncGenerator, ClassVar, Dict, List, Optional, Tuple, Type, Union

from google.cloud.firestore_v1 import AsyncClient
from google.cloud.firestore_v1.base_query import FieldFilter
from google.cloud.firestore_v1.field_path import FieldPath

from .enums import FirestoreOperators, OrderByDirection
from .fields import DocumentField
from .pydantic_compat import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    PydanticVersion,
    get_model_config,
    get_model_fields,
    model_dump_compat,
)

FieldType = Union[str, DocumentField]
FieldOrderType = Tuple[FieldType, OrderByDirection]
FilterType = Tuple[FieldType, FirestoreOperators, Any]

logger = logging.getLogger(__name__)


class BaseDocument(BaseModel):
    """
    Async Firestore document keyed by its natural id.

    Subclasses name their collection in ``Settings.name``. A document that
    lives in a subcollection declares ``Settings.parent``; its operations
    then need a ``parent`` instance (or a document loaded through one,
    which remembers its parent path).
    """

    id: Optional[str] = Field(default=None)

    _db: ClassVar[Optional[Any]] = None
    _parent_path: Optional[str] = PrivateAttr(default=None)

    class Settings:
        name: str = "BaseCollection"

    if PydanticVersion >= 2:
        model_config = ConfigDict(**get_model_config())
    else:
        class Config:
            allow_population_by_field_name = True

    # --------------------------------------------------------------------------
    # Registration
    # --------------------------------------------------------------------------
    @classmethod
    def initialize_db(cls, db) -> None:
        """Bind the :class:`FirebaseHandle` used by every operation."""
        cls._db = db

    @classmethod
    def initialize_fields(cls) -> None:
        for field_name, field_info in get_model_fields(cls).items():
            alias = (
                FieldPath.document_id() if field_name == "id"
                else (field_info.alias or field_name)  # type: ignore[attr-defined]
            )
            setattr(cls, field_name, DocumentField(alias))

    @classmethod
    def _client(cls) -> AsyncClient:
        if not cls._db:
            raise RuntimeError("Database must be initialized before using the model.")
        return cls._db.client

    # --------------------------------------------------------------------------
    # Paths
    # --------------------------------------------------------------------------
    @classmethod
    def get_collection_name(cls) -> str:
        if hasattr(cls, "Settings") and hasattr(cls.Settings, "name"):
            return cls.Settings.name
        return cls.__name__

    @classmethod
    def parent_model(cls) -> Optional[Type["BaseDocument"]]:
        return getattr(cls.Settings, "parent", None)

    @classmethod
    def collection_path(
        cls, parent: Optional["BaseDocument"] = None, parent_path: Optional[str] = None
    ) -> str:
        """Slash-separated collection path, e.g. ``libraries/u1/books``."""
        name = cls.get_collection_name()
        if cls.parent_model() is None:
            return name
        if parent is not None:
            if not parent.id:
                raise ValueError(f"Parent {type(parent).__name__} has no ID.")
            parent_path = parent.document_path
        if not parent_path:
            raise RuntimeError(
                f"{cls.__name__} requires a parent {cls.parent_model().__name__}."
            )
        return f"{parent_path}/{name}"

    @property
    def document_path(self) -> str:
        if not self.id:
            raise ValueError(f"{type(self).__name__} has no ID.")
        return f"{self.collection_path(parent_path=self._parent_path)}/{self.id}"

    def _document_ref(self, parent: Optional["BaseDocument"] = None):
        if not self.id:
            raise ValueError(f"Cannot address a {type(self).__name__} without an ID.")
        if parent is not None:
            self._parent_path = parent.document_path
        path = self.collection_path(parent_path=self._parent_path)
        return self._client().collection(path).document(self.id)

    # --------------------------------------------------------------------------
    # Serialization
    # --------------------------------------------------------------------------
    def to_firestore(self, exclude_unset: bool = True, exclude_none: bool = False) -> Dict[str, Any]:
        """Persisted representation: aliased names, no ``id``."""
        return model_dump_compat(
            self,
            exclude={"id"},
            exclude_unset=exclude_unset,
            exclude_none=exclude_none,
            by_alias=True,
        )

    @classmethod
    def from_snapshot(cls, snapshot, parent_path: Optional[str] = None) -> "BaseDocument":
        data = snapshot.to_dict() or {}
        data["id"] = snapshot.id
        instance = cls(**data)
        instance._parent_path = parent_path
        return instance

    # --------------------------------------------------------------------------
    # Writes
    # --------------------------------------------------------------------------
    async def upsert(self, parent: Optional["BaseDocument"] = None) -> "BaseDocument":
        """
        Write the whole document under its natural id, replacing whatever
        was stored there. Running it twice leaves a single document.
        """
        doc_ref = self._document_ref(parent)
        data = self.to_firestore()
        logger.debug(f"Upsert: {self.document_path} -> {data}")
        await doc_ref.set(data)
        return self

    @classmethod
    async def merge(
        cls, doc_id: str, fields: Dict[str, Any], parent: Optional["BaseDocument"] = None
    ) -> None:
        """
        Merge ``fields`` (persisted names) into an existing or new document.
        No version check: the last write wins.
        """
        doc_ref = cls._client().collection(cls.collection_path(parent)).document(doc_id)
        logger.debug(f"Merge: {cls.get_collection_name()} - id={doc_id}, fields={fields}")
        await doc_ref.set(fields, merge=True)

    async def delete(self) -> None:
        await self._document_ref().delete()

    # --------------------------------------------------------------------------
    # Reads
    # --------------------------------------------------------------------------
    @classmethod
    async def get(cls, doc_id: str, parent: Optional["BaseDocument"] = None) -> Optional["BaseDocument"]:
        path = cls.collection_path(parent)
        snapshot = await cls._client().collection(path).document(doc_id).get()
        if snapshot.exists:
            return cls.from_snapshot(snapshot, parent.document_path if parent else None)
        return None

    @classmethod
    async def get_raw(cls, doc_id: str, parent: Optional["BaseDocument"] = None) -> Optional[Dict[str, Any]]:
        """Stored data of ``doc_id`` without model validation."""
        snapshot = await cls._client().collection(cls.collection_path(parent)).document(doc_id).get()
        return snapshot.to_dict() if snapshot.exists else None

    @classmethod
    async def raw_documents(
        cls, parent: Optional["BaseDocument"] = None
    ) -> List[Tuple[str, Dict[str, Any]]]:
        """
        ``(id, data)`` pairs exactly as stored. The store enforces no schema,
        so readers that only need presence use this instead of :meth:`all`.
        """
        query = cls._client().collection(cls.collection_path(parent))
        return [(snapshot.id, snapshot.to_dict() or {}) async for snapshot in query.stream()]

    @classmethod
    async def exists(cls, doc_id: str, parent: Optional["BaseDocument"] = None) -> bool:
        path = cls.collection_path(parent)
        snapshot = await cls._client().collection(path).document(doc_id).get()
        return snapshot.exists

    @classmethod
    async def count(
        cls, filters: Optional[List[FilterType]] = None, parent: Optional["BaseDocument"] = None
    ) -> int:
        """
        Number of documents matching ``filters``. Falls back to fetching ids
        when the SDK has no aggregation support.
        """
        query = cls._build_query(filters or [], parent)
        try:
            count_snapshot = await query.count().get()
            return count_snapshot[0][0].value
        except AttributeError:
            logger.warning("Firestore: Performing count by fetching all items with empty select")
            docs = await query.select([]).get()
            return len(docs)

    @classmethod
    async def find(
        cls,
        filters: Optional[List[FilterType]] = None,
        parent: Optional["BaseDocument"] = None,
        order_by: Optional[Union[List[Union[FieldType, FieldOrderType]], FieldType, FieldOrderType]] = None,
        limit: Optional[int] = None,
    ) -> AsyncGenerator["BaseDocument", None]:
        query = cls._build_query(filters or [], parent)

        if order_by:
            if not isinstance(order_by, list):
                order_by = [order_by]
            for order_by_field in order_by:
                if isinstance(order_by_field, tuple):
                    field, direction = order_by_field
                    query = query.order_by(str(field), direction=str(direction))
                else:
                    query = query.order_by(str(order_by_field))

        if limit is not None:
            query = query.limit(limit)

        parent_path = parent.document_path if parent else None
        async for snapshot in query.stream():
            yield cls.from_snapshot(snapshot, parent_path)

    @classmethod
    async def find_one(
        cls, filters: Optional[List[FilterType]] = None, parent: Optional["BaseDocument"] = None
    ) -> Optional["BaseDocument"]:
        async for obj in cls.find(filters=filters, parent=parent, limit=1):
            return obj
        return None

    @classmethod
    async def all(cls, parent: Optional["BaseDocument"] = None) -> List["BaseDocument"]:
        return [doc async for doc in cls.find(parent=parent)]

    @classmethod
    def _build_query(cls, filters: List[FilterType], parent: Optional["BaseDocument"] = None):
        query = cls._client().collection(cls.collection_path(parent))
        for field_name, op, value in filters:
            query = query.where(
                filter=FieldFilter(str(field_name), getattr(op, "value", op), value)
            )
        return query

    # --------------------------------------------------------------------------
    # Subcollections
    # --------------------------------------------------------------------------
    def subcollection(self, child_cls: Type["BaseDocument"]):
        from .subcollection_accessor import SubCollectionAccessor

        return SubCollectionAccessor(self, child_cls)
