"""
Documents of the MyLibrary app.

  - User          users/{uid}
  - Library       libraries/{uid}            (same id as its User)
  - LibraryBook   libraries/{uid}/books/{id}
  - Review        reviews/{id}               (references users and books by id only)

Persisted names are the ones the mobile app reads, hence the aliases.
Timestamps are typed ``Any`` so they accept ``SERVER_TIMESTAMP`` on write
and the SDK's datetime on read.
"""

from typing import Any, Optional

from .document_model import BaseDocument
from .pydantic_compat import Field


class User(BaseDocument):
    class Settings:
        name = "users"

    email: str
    first_name: str = Field(alias="nombre")
    last_name: str = Field(alias="apellido")
    photo_url: Optional[str] = Field(default=None, alias="fotoPerfilUrl")
    bio: Optional[str] = None
    created_at: Optional[Any] = Field(default=None, alias="fechaCreacion")
    last_active_at: Optional[Any] = Field(default=None, alias="fechaUltimaActividad")
    updated_at: Optional[str] = Field(default=None, alias="fechaActualizacion")


class Library(BaseDocument):
    class Settings:
        name = "libraries"

    user_id: str = Field(alias="userId")
    total_books: int = Field(default=0, alias="totalLibros")
    created_at: Optional[Any] = Field(default=None, alias="fechaCreacion")


class LibraryBook(BaseDocument):
    class Settings:
        name = "books"
        parent = Library

    book_id: str = Field(alias="bookId")
    title: str = Field(alias="titulo")
    author: str = Field(alias="autor")
    cover_url: Optional[str] = Field(default=None, alias="portadaUrl")
    added_at: Optional[Any] = Field(default=None, alias="fechaAgregado")
    has_review: bool = Field(default=False, alias="tieneReseña")


class Review(BaseDocument):
    class Settings:
        name = "reviews"

    user_id: str = Field(alias="userId")
    book_id: str = Field(alias="bookId")
    rating: int = Field(alias="calificacion", ge=1, le=5)
    text: str = Field(default="", alias="textoReseña")
    created_at: Optional[Any] = Field(default=None, alias="fechaCreacion")
    modified_at: Optional[Any] = Field(default=None, alias="fechaModificacion")


ALL_DOCUMENTS = [User, Library, LibraryBook, Review]
TOP_LEVEL_COLLECTIONS = [User.get_collection_name(), Library.get_collection_name(), Review.get_collection_name()]
