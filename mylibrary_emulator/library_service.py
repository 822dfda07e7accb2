import logging
from typing import Any, Dict, List, Optional

from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from .firebase_client import FirebaseHandle
from .models import ALL_DOCUMENTS, Library, LibraryBook, Review, User
from .pydantic_compat import BaseModel
from .registry import init_mylibrary_odm

logger = logging.getLogger(__name__)


class ServiceResult(BaseModel):
    """What the screens get back: never an exception for backend errors."""

    success: bool
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None) -> "ServiceResult":
        return cls(success=True, data=data)

    @classmethod
    def failure(cls, error: str) -> "ServiceResult":
        return cls(success=False, error=error)


class UserStats(BaseModel):
    total_books: int = 0
    total_reviews: int = 0
    average_rating: Optional[float] = None


class LibraryService:
    """
    Facade the app screens use instead of touching Firestore directly.

    Mirrors the read/write shapes of the mobile client: profile fields,
    aggregate stats, the user's shelf. Every method returns a
    :class:`ServiceResult`.
    """

    def __init__(self, handle: FirebaseHandle):
        self.handle = handle
        init_mylibrary_odm(handle, ALL_DOCUMENTS)

    @staticmethod
    def _library_ref(uid: str) -> Library:
        return Library(id=uid, userId=uid)

    async def get_user_profile(self, uid: str) -> ServiceResult:
        try:
            user = await User.get(uid)
        except Exception as exc:
            logger.error(f"Error loading profile {uid}: {exc}")
            return ServiceResult.failure(str(exc))
        if user is None:
            return ServiceResult.failure(f"User {uid} not found")
        return ServiceResult.ok(user)

    async def get_user_stats(self, uid: str) -> ServiceResult:
        try:
            total_books = await LibraryBook.count(parent=self._library_ref(uid))
            ratings = [review.rating async for review in Review.find([Review.user_id == uid])]
        except Exception as exc:
            logger.error(f"Error loading stats for {uid}: {exc}")
            return ServiceResult.failure(str(exc))
        return ServiceResult.ok(
            UserStats(
                total_books=total_books,
                total_reviews=len(ratings),
                average_rating=sum(ratings) / len(ratings) if ratings else None,
            )
        )

    async def update_user_profile(self, uid: str, fields: Dict[str, Any]) -> ServiceResult:
        """Merge ``fields`` (persisted names) into ``users/{uid}``."""
        try:
            await User.merge(uid, fields)
        except Exception as exc:
            logger.error(f"Error updating profile {uid}: {exc}")
            return ServiceResult.failure(str(exc))
        return ServiceResult.ok()

    async def get_library_books(self, uid: str) -> ServiceResult:
        try:
            books: List[LibraryBook] = await LibraryBook.all(parent=self._library_ref(uid))
        except Exception as exc:
            logger.error(f"Error loading library {uid}: {exc}")
            return ServiceResult.failure(str(exc))
        return ServiceResult.ok(books)

    async def add_book(self, uid: str, book: LibraryBook) -> ServiceResult:
        """
        Put ``book`` on the user's shelf, creating the library document on
        first use, then store the new ``totalLibros``.
        """
        try:
            library = await Library.get(uid)
            if library is None:
                library = Library(id=uid, userId=uid, totalLibros=0, fechaCreacion=SERVER_TIMESTAMP)
                await library.upsert()
            if book.added_at is None:
                book.added_at = SERVER_TIMESTAMP
            await library.subcollection(LibraryBook).upsert(book)
            total = await library.subcollection(LibraryBook).count()
            await Library.merge(uid, {"totalLibros": total})
        except Exception as exc:
            logger.error(f"Error adding book to library {uid}: {exc}")
            return ServiceResult.failure(str(exc))
        return ServiceResult.ok(book)
