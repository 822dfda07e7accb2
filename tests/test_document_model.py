import pytest
import pytest_asyncio
from unittest.mock import MagicMock, AsyncMock

from mylibrary_emulator import (
    ALL_DOCUMENTS,
    FirestoreOperators,
    Library,
    LibraryBook,
    OrderByDirection,
    Review,
    User,
    init_mylibrary_odm,
)
from mylibrary_emulator.pydantic_compat import ValidationError


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def initialized_models(mock_handle):
    init_mylibrary_odm(mock_handle, ALL_DOCUMENTS)
    return mock_handle.client


def make_library(uid="demo-user-1"):
    return Library(id=uid, userId=uid, totalLibros=0)


async def mock_stream(docs):
    for d in docs:
        yield d


def snapshot(doc_id, data, exists=True):
    snap = MagicMock()
    snap.id = doc_id
    snap.exists = exists
    snap.to_dict.return_value = data
    return snap


# ===========================================================================
# Paths and serialization
# ===========================================================================
class TestPaths:

    def test_top_level_collection_path(self, initialized_models):
        assert User.collection_path() == "users"
        assert Review.collection_path() == "reviews"

    def test_subcollection_path_from_parent(self, initialized_models):
        assert LibraryBook.collection_path(make_library()) == "libraries/demo-user-1/books"

    def test_subcollection_without_parent_raises(self, initialized_models):
        with pytest.raises(RuntimeError, match="requires a parent"):
            LibraryBook.collection_path()

    def test_parent_without_id_raises(self, initialized_models):
        with pytest.raises(ValueError):
            LibraryBook.collection_path(Library(userId="demo-user-1"))

    def test_to_firestore_uses_persisted_names(self, initialized_models):
        book = LibraryBook(id="book-1", bookId="abc", titulo="T", autor="A", tieneReseña=True)
        assert book.to_firestore() == {
            "bookId": "abc",
            "titulo": "T",
            "autor": "A",
            "tieneReseña": True,
        }

    def test_explicit_none_is_persisted(self, initialized_models):
        user = User(id="u1", email="a@example.com", nombre="Ana", apellido="G", fotoPerfilUrl=None)
        data = user.to_firestore()
        assert data["fotoPerfilUrl"] is None
        assert "bio" not in data

    def test_population_by_attribute_name(self, initialized_models):
        user = User(id="u1", email="a@example.com", first_name="Ana", last_name="G")
        assert user.first_name == "Ana"
        assert user.to_firestore()["nombre"] == "Ana"

    def test_rating_out_of_range_rejected(self, initialized_models):
        with pytest.raises(ValidationError):
            Review(id="r", userId="u", bookId="b", calificacion=6)


# ===========================================================================
# Query fields
# ===========================================================================
class TestFields:

    def test_field_comparison_builds_filter(self, initialized_models):
        assert (Review.user_id == "u1") == ("userId", FirestoreOperators.EQ, "u1")
        assert (Review.rating >= 4) == ("calificacion", FirestoreOperators.GTE, 4)

    def test_in_filter(self, initialized_models):
        assert LibraryBook.book_id.in_(["a", "b"]) == ("bookId", FirestoreOperators.IN, ["a", "b"])

    def test_instance_access_returns_value(self, initialized_models):
        review = Review(id="r", userId="u1", bookId="b", calificacion=3)
        assert review.user_id == "u1"


# ===========================================================================
# Writes
# ===========================================================================
class TestWrites:

    @pytest.mark.asyncio
    async def test_upsert_sets_whole_document(self, initialized_models):
        client = initialized_models
        doc_ref_mock = MagicMock()
        doc_ref_mock.set = AsyncMock()
        client.collection.return_value.document.return_value = doc_ref_mock

        user = User(id="demo-user-1", email="a@example.com", nombre="Ana", apellido="García")
        await user.upsert()

        client.collection.assert_called_with("users")
        client.collection.return_value.document.assert_called_with("demo-user-1")
        doc_ref_mock.set.assert_awaited_once_with(
            {"email": "a@example.com", "nombre": "Ana", "apellido": "García"}
        )

    @pytest.mark.asyncio
    async def test_upsert_into_subcollection(self, initialized_models):
        client = initialized_models
        client.collection.return_value.document.return_value.set = AsyncMock()

        book = LibraryBook(id="book-1", bookId="abc", titulo="T", autor="A")
        await make_library().subcollection(LibraryBook).upsert(book)

        client.collection.assert_called_with("libraries/demo-user-1/books")
        assert book._parent_path == "libraries/demo-user-1"
        assert book.document_path == "libraries/demo-user-1/books/book-1"

    @pytest.mark.asyncio
    async def test_upsert_without_id_raises(self, initialized_models):
        with pytest.raises(ValueError):
            await User(email="a@example.com", nombre="A", apellido="B").upsert()

    @pytest.mark.asyncio
    async def test_merge_uses_merge_flag(self, initialized_models):
        client = initialized_models
        doc_ref_mock = MagicMock()
        doc_ref_mock.set = AsyncMock()
        client.collection.return_value.document.return_value = doc_ref_mock

        await User.merge("demo-user-1", {"nombre": "X"})

        doc_ref_mock.set.assert_awaited_once_with({"nombre": "X"}, merge=True)

    @pytest.mark.asyncio
    async def test_delete_uses_stored_parent_path(self, initialized_models):
        client = initialized_models
        doc_ref_mock = MagicMock()
        doc_ref_mock.delete = AsyncMock()
        client.collection.return_value.document.return_value = doc_ref_mock

        book = LibraryBook(id="book-2", bookId="x", titulo="T", autor="A")
        book._parent_path = "libraries/demo-user-1"
        await book.delete()

        client.collection.assert_called_with("libraries/demo-user-1/books")
        doc_ref_mock.delete.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_uninitialized_model_raises(self, initialized_models):
        User._db = None
        with pytest.raises(RuntimeError, match="must be initialized"):
            await User.get("demo-user-1")


# ===========================================================================
# Reads
# ===========================================================================
class TestReads:

    @pytest.mark.asyncio
    async def test_get_existing(self, initialized_models):
        client = initialized_models
        client.collection.return_value.document.return_value.get = AsyncMock(
            return_value=snapshot("demo-user-1", {"email": "a@example.com", "nombre": "Ana", "apellido": "G"})
        )

        user = await User.get("demo-user-1")

        assert user.id == "demo-user-1"
        assert user.first_name == "Ana"

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, initialized_models):
        client = initialized_models
        client.collection.return_value.document.return_value.get = AsyncMock(
            return_value=snapshot("nope", None, exists=False)
        )
        assert await User.get("nope") is None

    @pytest.mark.asyncio
    async def test_get_in_subcollection_keeps_parent(self, initialized_models):
        client = initialized_models
        client.collection.return_value.document.return_value.get = AsyncMock(
            return_value=snapshot("book-1", {"bookId": "abc", "titulo": "T", "autor": "A"})
        )

        book = await LibraryBook.get("book-1", parent=make_library())

        client.collection.assert_called_with("libraries/demo-user-1/books")
        assert book._parent_path == "libraries/demo-user-1"

    @pytest.mark.asyncio
    async def test_find_applies_field_filter(self, initialized_models):
        client = initialized_models
        query_mock = MagicMock()
        query_mock.stream = lambda: mock_stream(
            [snapshot("review-1", {"userId": "u1", "bookId": "b", "calificacion": 5})]
        )
        client.collection.return_value.where.return_value = query_mock

        results = [r async for r in Review.find([Review.user_id == "u1"])]

        field_filter = client.collection.return_value.where.call_args.kwargs["filter"]
        assert field_filter.field_path == "userId"
        assert field_filter.op_string == "=="
        assert field_filter.value == "u1"
        assert [r.rating for r in results] == [5]

    @pytest.mark.asyncio
    async def test_count_uses_aggregation(self, initialized_models):
        client = initialized_models
        count_result = MagicMock()
        count_result.value = 2
        client.collection.return_value.count.return_value.get = AsyncMock(return_value=[[count_result]])

        assert await LibraryBook.count(parent=make_library()) == 2
        client.collection.assert_called_with("libraries/demo-user-1/books")

    @pytest.mark.asyncio
    async def test_count_falls_back_without_aggregation(self, initialized_models):
        client = initialized_models
        collection_ref_mock = client.collection.return_value
        collection_ref_mock.count.side_effect = AttributeError
        collection_ref_mock.select.return_value.get = AsyncMock(return_value=["a", "b", "c"])

        assert await User.count() == 3
        collection_ref_mock.select.assert_called_with([])


class TestSubCollectionAccessor:

    def test_wrong_parent_type_raises(self, initialized_models):
        user = User(id="u1", email="a@example.com", nombre="A", apellido="B")
        with pytest.raises(ValueError, match="Settings.parent"):
            user.subcollection(LibraryBook)

    def test_path(self, initialized_models):
        assert make_library("demo-user-2").subcollection(LibraryBook).path == "libraries/demo-user-2/books"


# ===========================================================================
# Queries against the in-memory store
# ===========================================================================
class TestQueries:

    @pytest_asyncio.fixture
    async def reviews(self, handle, fake_client):
        init_mylibrary_odm(handle, ALL_DOCUMENTS)
        for doc_id, uid, rating in (("r1", "u1", 5), ("r2", "u1", 2), ("r3", "u2", 4)):
            fake_client.docs[f"reviews/{doc_id}"] = {"userId": uid, "bookId": "b", "calificacion": rating}
        return fake_client

    @pytest.mark.asyncio
    async def test_order_by_and_limit(self, reviews):
        ordered = [
            r.id async for r in Review.find(order_by=(Review.rating, OrderByDirection.DESCENDING), limit=2)
        ]
        assert ordered == ["r1", "r3"]

    @pytest.mark.asyncio
    async def test_find_one(self, reviews):
        review = await Review.find_one([Review.user_id == "u2"])
        assert review.id == "r3"
        assert await Review.find_one([Review.user_id == "nobody"]) is None

    @pytest.mark.asyncio
    async def test_not_in_and_count(self, reviews):
        assert await Review.count([Review.user_id.not_in_(["u2"])]) == 2
        assert await Review.count([Review.rating > 3]) == 2

    @pytest.mark.asyncio
    async def test_exists(self, reviews):
        assert await Review.exists("r1") is True
        assert await Review.exists("r9") is False

