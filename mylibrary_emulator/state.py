"""
App-wide state shared by the screens.

Each container is created once by the app shell and handed to the screens
that need it; screens never look them up implicitly.
"""

import logging
from collections import deque
from typing import Deque, List, NamedTuple, Optional

from .enums import ToastKind
from .library_service import LibraryService, ServiceResult
from .models import LibraryBook, User

logger = logging.getLogger(__name__)


class AuthUser(NamedTuple):
    uid: str
    email: str
    display_name: Optional[str] = None


class Toast(NamedTuple):
    kind: ToastKind
    message: str


class ToastState:

    def __init__(self, max_messages: int = 20):
        self.messages: Deque[Toast] = deque(maxlen=max_messages)

    def show(self, kind: ToastKind, message: str) -> None:
        logger.debug(f"Toast [{kind.value}]: {message}")
        self.messages.append(Toast(kind, message))

    def show_success(self, message: str) -> None:
        self.show(ToastKind.SUCCESS, message)

    def show_error(self, message: str) -> None:
        self.show(ToastKind.ERROR, message)

    def show_info(self, message: str) -> None:
        self.show(ToastKind.INFO, message)

    @property
    def current(self) -> Optional[Toast]:
        return self.messages[-1] if self.messages else None

    def dismiss(self) -> Optional[Toast]:
        return self.messages.popleft() if self.messages else None


class AuthState:
    """Signed-in user and their profile document."""

    def __init__(self, service: LibraryService):
        self.service = service
        self.user: Optional[AuthUser] = None
        self.profile: Optional[User] = None

    @property
    def signed_in(self) -> bool:
        return self.user is not None

    async def sign_in(self, user: AuthUser) -> ServiceResult:
        self.user = user
        return await self.reload_profile()

    async def reload_profile(self) -> ServiceResult:
        if self.user is None:
            return ServiceResult.failure("Not signed in")
        result = await self.service.get_user_profile(self.user.uid)
        if result.success:
            self.profile = result.data
        return result

    async def logout(self) -> ServiceResult:
        if self.user is None:
            return ServiceResult.failure("Not signed in")
        logger.info(f"Signing out {self.user.email}")
        self.user = None
        self.profile = None
        return ServiceResult.ok()


class LibraryState:
    """The signed-in user's shelf."""

    def __init__(self, service: LibraryService, auth: AuthState):
        self.service = service
        self.auth = auth
        self.books: List[LibraryBook] = []
        self.error: Optional[str] = None

    async def refresh(self) -> ServiceResult:
        if self.auth.user is None:
            self.books = []
            return ServiceResult.failure("Not signed in")
        result = await self.service.get_library_books(self.auth.user.uid)
        self.error = result.error
        if result.success:
            self.books = result.data
        return result

    async def add_book(self, book: LibraryBook) -> ServiceResult:
        if self.auth.user is None:
            return ServiceResult.failure("Not signed in")
        result = await self.service.add_book(self.auth.user.uid, book)
        if result.success:
            await self.refresh()
        return result
