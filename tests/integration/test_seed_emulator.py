"""
Seed, verify and debug report against the real emulators, cross-checked
with the raw Firestore SDK.
"""

import pytest
from firebase_admin import auth

from mylibrary_emulator.debug_ui import collect_debug_info
from mylibrary_emulator.seed import SeedWriter
from mylibrary_emulator.verify import Verifier

pytestmark = pytest.mark.asyncio


async def ids(raw_client, path):
    return sorted([doc.id async for doc in raw_client.collection(path).stream()])


async def test_seed_writes_fixture_set(handle, raw_client):
    summary = await SeedWriter(handle).run()

    assert summary.auth_created == 3
    assert await ids(raw_client, "users") == ["demo-user-1", "demo-user-2", "demo-user-3"]
    assert await ids(raw_client, "libraries") == ["demo-user-1", "demo-user-2"]
    assert await ids(raw_client, "libraries/demo-user-1/books") == ["book-1", "book-2"]
    assert await ids(raw_client, "reviews") == ["review-1", "review-2"]

    user = await raw_client.collection("users").document("demo-user-1").get()
    assert user.to_dict()["nombre"] == "Ana"
    assert user.to_dict()["fechaCreacion"] is not None


async def test_seed_twice_is_idempotent(handle, raw_client):
    await SeedWriter(handle).run()

    summary = await SeedWriter(handle).run()

    assert summary.auth_created == 0
    assert summary.auth_existing == 3
    assert len(await ids(raw_client, "users")) == 3
    assert len(await ids(raw_client, "reviews")) == 2
    assert len(await ids(raw_client, "libraries/demo-user-2/books")) == 1


async def test_auth_identity_uses_demo_password(handle):
    await SeedWriter(handle).run()

    record = auth.get_user("demo-user-2", app=handle.app)

    assert record.email == "estudiante2@example.com"
    assert record.display_name == "Carlos Rodríguez"


async def test_verify_after_seed(handle):
    await SeedWriter(handle).run()

    report = await Verifier(handle).run()

    assert report.ok is True
    assert report.statistics.total_books == 3


async def test_verify_empty_emulator(handle):
    report = await Verifier(handle).run()

    assert report.ok is False
    assert report.users.error is None


async def test_debug_info_after_seed(handle):
    await SeedWriter(handle).run()

    info = await collect_debug_info(handle)

    assert info.complete is True
    assert info.probe_library_total == 2
