# mylibrary_emulator/__init__.py
from .config import EmulatorSettings
from .document_model import BaseDocument
from .enums import FirestoreOperators, OrderByDirection, ProfileState, ToastKind, UploadState
from .errors import EmulatorConnectionError, MyLibraryEmulatorError, SeedError, StorageFlowError
from .fields import DocumentField
from .firebase_client import FirebaseHandle
from .models import ALL_DOCUMENTS, Library, LibraryBook, Review, User
from .registry import init_mylibrary_odm
from .subcollection_accessor import SubCollectionAccessor

__all__ = [
    "ALL_DOCUMENTS",
    "BaseDocument",
    "DocumentField",
    "EmulatorConnectionError",
    "EmulatorSettings",
    "FirebaseHandle",
    "FirestoreOperators",
    "Library",
    "LibraryBook",
    "MyLibraryEmulatorError",
    "OrderByDirection",
    "ProfileState",
    "Review",
    "SeedError",
    "StorageFlowError",
    "SubCollectionAccessor",
    "ToastKind",
    "UploadState",
    "User",
    "init_mylibrary_odm",
]
