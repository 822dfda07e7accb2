from unittest.mock import MagicMock

import pytest
from firebase_admin import auth

from mylibrary_emulator import EmulatorSettings, FirebaseHandle
from mylibrary_emulator.seed import SeedWriter

from .fake_firestore import FakeFirestore


def make_handle(client) -> FirebaseHandle:
    """FirebaseHandle around ``client`` without exporting env vars or
    creating a real AsyncClient / firebase_admin App."""
    handle = FirebaseHandle.__new__(FirebaseHandle)
    handle.settings = EmulatorSettings()
    handle.project_id = handle.settings.project_id
    handle.credentials = None
    handle._use_emulator = True
    handle._app = MagicMock(name="firebase_app")
    handle._bucket = None
    handle.client = client
    return handle


@pytest.fixture
def fake_client():
    return FakeFirestore()


@pytest.fixture
def handle(fake_client):
    return make_handle(fake_client)


@pytest.fixture
def mock_handle():
    return make_handle(MagicMock())


@pytest.fixture
def seeded(handle, fake_client, monkeypatch):
    """Coroutine function loading the demo dataset into ``fake_client``."""
    monkeypatch.setattr(auth, "create_user", lambda **kwargs: None)

    async def _seed():
        await SeedWriter(handle).run()
        return fake_client

    return _seed
