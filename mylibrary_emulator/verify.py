import logging
from typing import Any, Callable, Dict, List, Optional

from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from .errors import EmulatorConnectionError
from .firebase_client import FirebaseHandle
from .models import ALL_DOCUMENTS, Library, LibraryBook, Review, User
from .pydantic_compat import BaseModel, Field
from .registry import init_mylibrary_odm

logger = logging.getLogger(__name__)

CONNECTIVITY_COLLECTION = "_test"
CONNECTIVITY_DOCUMENT = "connectivity"
REVIEW_EXCERPT_LENGTH = 80


def _sample(describe: Callable[[str, Dict[str, Any]], str], doc_id: str, data: Dict[str, Any]) -> str:
    """One report line per document; the bare id when its fields don't fit."""
    try:
        return describe(doc_id, data)
    except (KeyError, TypeError, AttributeError):
        return doc_id


class CollectionCheck(BaseModel):
    """Outcome of reading back one collection. Empty means not ok."""

    name: str
    ok: bool = False
    count: int = 0
    samples: List[str] = Field(default_factory=list)
    # library id -> "title - author" lines, only for libraries
    children: Dict[str, List[str]] = Field(default_factory=dict)
    error: Optional[str] = None


class Statistics(BaseModel):
    collections: Dict[str, int] = Field(default_factory=dict)
    total_books: int = 0
    error: Optional[str] = None


class VerificationReport(BaseModel):
    users: CollectionCheck
    libraries: CollectionCheck
    reviews: CollectionCheck
    statistics: Statistics

    @property
    def ok(self) -> bool:
        return self.users.ok and self.libraries.ok and self.reviews.ok


class Verifier:
    """
    Reads back what the seed wrote. Presence and counts only: references
    between reviews, books and users are not cross-checked.
    """

    def __init__(self, handle: FirebaseHandle):
        self.handle = handle
        init_mylibrary_odm(handle, ALL_DOCUMENTS)

    async def check_connectivity(self) -> None:
        """Scratch write and delete; raises :class:`EmulatorConnectionError`."""
        doc_ref = self.handle.client.collection(CONNECTIVITY_COLLECTION).document(CONNECTIVITY_DOCUMENT)
        try:
            await doc_ref.set({"timestamp": SERVER_TIMESTAMP, "test": True})
            await doc_ref.delete()
        except Exception as exc:
            logger.error(f"Firestore connectivity check failed: {exc}")
            raise EmulatorConnectionError(
                f"Cannot reach Firestore at {self.handle.settings.firestore_host}: {exc}"
            ) from exc
        logger.info("Firestore connectivity OK")

    async def _check(self, model, describe: Callable[[str, Dict[str, Any]], str]) -> CollectionCheck:
        check = CollectionCheck(name=model.get_collection_name())
        try:
            documents = await model.raw_documents()
        except Exception as exc:
            logger.error(f"Error verifying {check.name}: {exc}")
            check.error = str(exc)
            return check
        check.count = len(documents)
        check.ok = bool(documents)
        check.samples = [_sample(describe, doc_id, data) for doc_id, data in documents]
        return check

    async def verify_users(self) -> CollectionCheck:
        return await self._check(
            User, lambda doc_id, data: f"{doc_id}: {data['nombre']} {data['apellido']} ({data['email']})"
        )

    async def verify_libraries(self) -> CollectionCheck:
        check = await self._check(Library, lambda doc_id, data: doc_id)
        if not check.ok:
            return check
        try:
            for library_id in check.samples:
                books = await LibraryBook.raw_documents(parent=Library(id=library_id, userId=library_id))
                check.children[library_id] = [
                    _sample(lambda doc_id, data: f"{data['titulo']} - {data['autor']}", doc_id, data)
                    for doc_id, data in books
                ]
        except Exception as exc:
            logger.error(f"Error verifying library books: {exc}")
            check.error = str(exc)
        return check

    async def verify_reviews(self) -> CollectionCheck:
        return await self._check(
            Review,
            lambda doc_id, data: (
                f'{doc_id}: {data["calificacion"]}⭐ for book {data["bookId"]} '
                f'"{data.get("textoReseña", "")[:REVIEW_EXCERPT_LENGTH]}"'
            ),
        )

    async def statistics(self) -> Statistics:
        stats = Statistics()
        try:
            for model in (User, Library, Review):
                stats.collections[model.get_collection_name()] = await model.count()
            for library_id, _ in await Library.raw_documents():
                library = Library(id=library_id, userId=library_id)
                stats.total_books += await library.subcollection(LibraryBook).count()
        except Exception as exc:
            logger.error(f"Error collecting statistics: {exc}")
            stats.error = str(exc)
        return stats

    async def run(self) -> VerificationReport:
        await self.check_connectivity()
        return VerificationReport(
            users=await self.verify_users(),
            libraries=await self.verify_libraries(),
            reviews=await self.verify_reviews(),
            statistics=await self.statistics(),
        )
