import asyncio
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from firebase_admin import auth

from . import fixtures
from .errors import SeedError
from .firebase_client import FirebaseHandle
from .fixtures import AuthIdentity, LibraryFixture
from .models import ALL_DOCUMENTS, LibraryBook, Review, User
from .pydantic_compat import BaseModel
from .registry import init_mylibrary_odm

logger = logging.getLogger(__name__)


class SeedSummary(BaseModel):
    auth_created: int = 0
    auth_existing: int = 0
    users: int = 0
    libraries: int = 0
    books: int = 0
    reviews: int = 0


@asynccontextmanager
async def _step(name: str):
    logger.info(f"Seeding step: {name}")
    try:
        yield
    except SeedError:
        raise
    except Exception as exc:
        logger.error(f"Seeding aborted during '{name}': {exc}")
        raise SeedError(name, exc) from exc


class SeedWriter:
    """
    Loads the demo fixtures into the emulators.

    Steps run in a fixed order (auth, users, libraries, books, reviews) and
    every document is written under its natural id, so rerunning the seed
    overwrites instead of duplicating. The first failing step aborts the
    run; whatever was written before it stays.
    """

    def __init__(self, handle: FirebaseHandle):
        self.handle = handle
        init_mylibrary_odm(handle, ALL_DOCUMENTS)

    async def create_auth_identities(self, identities: List[AuthIdentity], summary: SeedSummary) -> None:
        for identity in identities:
            try:
                await asyncio.to_thread(
                    auth.create_user,
                    uid=identity.uid,
                    email=identity.email,
                    password=identity.password,
                    display_name=identity.display_name,
                    app=self.handle.app,
                )
            except (auth.UidAlreadyExistsError, auth.EmailAlreadyExistsError):
                logger.info(f"Auth user already exists, skipping: {identity.email}")
                summary.auth_existing += 1
                continue
            logger.info(f"Auth user created: {identity.email}")
            summary.auth_created += 1

    async def write_users(self, users: List[User], summary: SeedSummary) -> None:
        for user in users:
            await user.upsert()
            logger.info(f"User written: {user.email}")
            summary.users += 1

    async def write_libraries(self, libraries: List[LibraryFixture], summary: SeedSummary) -> None:
        for fixture in libraries:
            await fixture.library.upsert()
            logger.info(
                f"Library written: {fixture.library.id} ({fixture.library.total_books} books)"
            )
            summary.libraries += 1

    async def write_books(self, libraries: List[LibraryFixture], summary: SeedSummary) -> None:
        for fixture in libraries:
            shelf = fixture.library.subcollection(LibraryBook)
            for book in fixture.books:
                await shelf.upsert(book)
                logger.info(f"Book written: {book.title} for user {fixture.library.id}")
                summary.books += 1

    async def write_reviews(self, reviews: List[Review], summary: SeedSummary) -> None:
        for review in reviews:
            await review.upsert()
            logger.info(f"Review written for book {review.book_id}")
            summary.reviews += 1

    async def run(
        self,
        identities: Optional[List[AuthIdentity]] = None,
        users: Optional[List[User]] = None,
        libraries: Optional[List[LibraryFixture]] = None,
        reviews: Optional[List[Review]] = None,
    ) -> SeedSummary:
        """Seed everything. Arguments default to the demo fixtures."""
        identities = fixtures.demo_auth_identities() if identities is None else identities
        users = fixtures.demo_users() if users is None else users
        libraries = fixtures.demo_libraries() if libraries is None else libraries
        reviews = fixtures.demo_reviews() if reviews is None else reviews

        summary = SeedSummary()
        async with _step("auth"):
            await self.create_auth_identities(identities, summary)
        async with _step("users"):
            await self.write_users(users, summary)
        async with _step("libraries"):
            await self.write_libraries(libraries, summary)
        async with _step("books"):
            await self.write_books(libraries, summary)
        async with _step("reviews"):
            await self.write_reviews(reviews, summary)

        logger.info(f"Seeding finished: {summary}")
        return summary
