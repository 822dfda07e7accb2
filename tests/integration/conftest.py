"""
Fixtures for tests against a running emulator suite.

Collected only when ``FIRESTORE_EMULATOR_HOST`` is set, e.g.::

    firebase emulators:start --only firestore,auth --project mylibrary-demo
    FIRESTORE_EMULATOR_HOST=localhost:8080 FIREBASE_AUTH_EMULATOR_HOST=localhost:9099 \
        pytest tests/integration

Every test starts and ends with empty Firestore and Auth emulators.
"""

import logging
import os
import warnings

import httpx
import pytest_asyncio

from mylibrary_emulator import EmulatorSettings, FirebaseHandle

logger = logging.getLogger(__name__)

EMULATOR_HOST = os.environ.get("FIRESTORE_EMULATOR_HOST", "").strip()
AUTH_EMULATOR_HOST = os.environ.get("FIREBASE_AUTH_EMULATOR_HOST", "").strip() or "localhost:9099"
PROJECT_ID = os.environ.get("GOOGLE_CLOUD_PROJECT") or "mylibrary-demo"

IS_EMULATOR = bool(EMULATOR_HOST)

if not IS_EMULATOR:
    collect_ignore_glob = ["test_*.py"]


def _split(host_port: str):
    host, _, port = host_port.rpartition(":")
    return host, int(port)


def emulator_settings() -> EmulatorSettings:
    host, firestore_port = _split(EMULATOR_HOST)
    _, auth_port = _split(AUTH_EMULATOR_HOST)
    return EmulatorSettings(
        project_id=PROJECT_ID,
        storage_bucket=f"{PROJECT_ID}.appspot.com",
        host=host,
        firestore_port=firestore_port,
        auth_port=auth_port,
    )


async def _wipe_emulators(settings: EmulatorSettings) -> None:
    urls = [
        f"http://{settings.firestore_host}/emulator/v1/projects/{settings.project_id}"
        f"/databases/(default)/documents",
        f"http://{settings.auth_host}/emulator/v1/projects/{settings.project_id}/accounts",
    ]
    async with httpx.AsyncClient() as client:
        for url in urls:
            try:
                await client.delete(url)
            except httpx.HTTPError as exc:
                # A teardown error would turn a passing test into FAILED+ERROR
                warnings.warn(f"[conftest] emulator cleanup failed for {url}: {exc}", stacklevel=1)


@pytest_asyncio.fixture()
async def handle():
    """Fresh handle per test so the AsyncClient binds to the test's event loop."""
    settings = emulator_settings()
    await _wipe_emulators(settings)
    firebase = FirebaseHandle(settings)
    yield firebase
    firebase.close()
    await _wipe_emulators(settings)


@pytest_asyncio.fixture()
async def raw_client(handle):
    """Plain AsyncClient on the same emulator, for cross-checking the models."""
    return handle.client
