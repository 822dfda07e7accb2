"""
Demo dataset loaded by ``seed-data``.

The fixture objects are built by functions, not module constants, so each
seed run gets fresh ``SERVER_TIMESTAMP`` sentinels and untouched models.
"""

from typing import Dict, List, NamedTuple

from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from .models import Library, LibraryBook, Review, User

DEMO_PASSWORD = "demo123456"


class AuthIdentity(NamedTuple):
    uid: str
    email: str
    password: str
    display_name: str


class LibraryFixture(NamedTuple):
    library: Library
    books: List[LibraryBook]


def demo_users() -> List[User]:
    return [
        User(
            id="demo-user-1",
            email="estudiante1@example.com",
            nombre="Ana",
            apellido="García",
            fotoPerfilUrl=None,
            fechaCreacion=SERVER_TIMESTAMP,
            fechaUltimaActividad=SERVER_TIMESTAMP,
        ),
        User(
            id="demo-user-2",
            email="estudiante2@example.com",
            nombre="Carlos",
            apellido="Rodríguez",
            fotoPerfilUrl=None,
            fechaCreacion=SERVER_TIMESTAMP,
            fechaUltimaActividad=SERVER_TIMESTAMP,
        ),
        # No library and no reviews
        User(
            id="demo-user-3",
            email="estudiante3@example.com",
            nombre="Lucía",
            apellido="Martínez",
            fotoPerfilUrl=None,
            fechaCreacion=SERVER_TIMESTAMP,
            fechaUltimaActividad=SERVER_TIMESTAMP,
        ),
    ]


def demo_auth_identities() -> List[AuthIdentity]:
    return [
        AuthIdentity(
            uid=user.id,
            email=user.email,
            password=DEMO_PASSWORD,
            display_name=f"{user.first_name} {user.last_name}",
        )
        for user in demo_users()
    ]


def _library_books() -> Dict[str, List[LibraryBook]]:
    return {
        "demo-user-1": [
            LibraryBook(
                id="book-1",
                bookId="nggnmAEACAAJ",
                titulo="The Linux Command Line",
                autor="William E. Shotts Jr.",
                portadaUrl="http://books.google.com/books/content?id=nggnmAEACAAJ&printsec=frontcover&img=1&zoom=1&source=gbs_api",
                fechaAgregado=SERVER_TIMESTAMP,
                tieneReseña=True,
            ),
            # Flag is false and no review exists; nothing enforces the pairing
            LibraryBook(
                id="book-2",
                bookId="PXa2bby0oQ0C",
                titulo="JavaScript: The Good Parts",
                autor="Douglas Crockford",
                portadaUrl="http://books.google.com/books/content?id=PXa2bby0oQ0C&printsec=frontcover&img=1&zoom=1&edge=curl&source=gbs_api",
                fechaAgregado=SERVER_TIMESTAMP,
                tieneReseña=False,
            ),
        ],
        "demo-user-2": [
            LibraryBook(
                id="book-3",
                bookId="qU_oDwAAQBAJ",
                titulo="React: Up & Running",
                autor="Stoyan Stefanov",
                portadaUrl="http://books.google.com/books/content?id=qU_oDwAAQBAJ&printsec=frontcover&img=1&zoom=1&edge=curl&source=gbs_api",
                fechaAgregado=SERVER_TIMESTAMP,
                tieneReseña=True,
            ),
        ],
    }


def demo_libraries() -> List[LibraryFixture]:
    """Library parents with ``totalLibros`` precomputed from their books."""
    return [
        LibraryFixture(
            library=Library(
                id=user_id,
                userId=user_id,
                totalLibros=len(books),
                fechaCreacion=SERVER_TIMESTAMP,
            ),
            books=books,
        )
        for user_id, books in _library_books().items()
    ]


def demo_reviews() -> List[Review]:
    return [
        Review(
            id="review-1",
            userId="demo-user-1",
            bookId="nggnmAEACAAJ",
            calificacion=5,
            textoReseña="Excelente libro para aprender la línea de comandos de Linux. Muy didáctico y con ejemplos prácticos.",
            fechaCreacion=SERVER_TIMESTAMP,
            fechaModificacion=SERVER_TIMESTAMP,
        ),
        Review(
            id="review-2",
            userId="demo-user-2",
            bookId="qU_oDwAAQBAJ",
            calificacion=4,
            textoReseña="Buen punto de partida para React. Los ejemplos son claros aunque algunos conceptos podrían estar más actualizados.",
            fechaCreacion=SERVER_TIMESTAMP,
            fechaModificacion=SERVER_TIMESTAMP,
        ),
    ]
