"""
Bound accessor for the documents of a subcollection under one parent:
``library.subcollection(LibraryBook).all()`` instead of
``LibraryBook.all(parent=library)``.
"""

from typing import TYPE_CHECKING, AsyncGenerator, List, Optional, Type

if TYPE_CHECKING:
    from .document_model import BaseDocument


class SubCollectionAccessor:

    def __init__(self, parent: "BaseDocument", child_cls: Type["BaseDocument"]):
        if child_cls.parent_model() is not type(parent):
            raise ValueError(
                f"{child_cls.__name__} does not declare "
                f"Settings.parent = {type(parent).__name__}"
            )
        self._parent = parent
        self._child_cls = child_cls

    @property
    def path(self) -> str:
        return self._child_cls.collection_path(self._parent)

    async def upsert(self, doc: "BaseDocument") -> "BaseDocument":
        return await doc.upsert(parent=self._parent)

    async def get(self, doc_id: str) -> Optional["BaseDocument"]:
        return await self._child_cls.get(doc_id, parent=self._parent)

    async def find(self, filters=None, **kwargs) -> AsyncGenerator:
        async for doc in self._child_cls.find(filters=filters, parent=self._parent, **kwargs):
            yield doc

    async def all(self) -> List["BaseDocument"]:
        return await self._child_cls.all(parent=self._parent)

    async def count(self, filters=None) -> int:
        return await self._child_cls.count(filters=filters or [], parent=self._parent)
