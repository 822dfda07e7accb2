"""
Pick an image, upload it to Firebase Storage, show its download URL.

:class:`UploadFlow` is a linear state machine; each transition waits on
exactly one collaborator call. A denied permission or a cancelled pick
goes quietly back to ``idle``. Any failure lands in ``error`` and the whole
flow has to be started again.
"""

import asyncio
import logging
import os
import time
from pathlib import Path
from typing import Callable, List, NamedTuple, Optional
from urllib.parse import quote, urlparse

import httpx
from google.api_core.exceptions import NotFound

from .enums import UploadState
from .errors import StorageFlowError
from .firebase_client import FirebaseHandle

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
UPLOAD_ERROR = "There was a problem uploading the image. Check that the emulator is running."
PERMISSION_NOTICE = "The app needs permission to access your photos."
DOWNLOAD_TOKENS_KEY = "firebaseStorageDownloadTokens"


class PickResult(NamedTuple):
    canceled: bool
    uri: Optional[str] = None


def epoch_millis() -> int:
    return int(time.time() * 1000)


class LocalMediaLibrary:
    """
    Media library backed by a directory. ``chooser`` gets the candidate
    images and returns one of them, or None to cancel.
    """

    def __init__(self, directory: Path, chooser: Callable[[List[Path]], Optional[Path]]):
        self.directory = Path(directory)
        self.chooser = chooser

    async def request_permission(self) -> bool:
        return self.directory.is_dir() and os.access(self.directory, os.R_OK)

    def images(self) -> List[Path]:
        return sorted(
            path for path in self.directory.iterdir()
            if path.is_file() and path.suffix.lower() in IMAGE_SUFFIXES
        )

    async def pick(self) -> PickResult:
        chosen = self.chooser(self.images())
        if chosen is None:
            return PickResult(canceled=True)
        return PickResult(canceled=False, uri=Path(chosen).resolve().as_uri())


class BlobFetcher:
    """Bytes behind a ``file://``, plain path or ``http(s)://`` URI."""

    def __init__(self, timeout: float = 30.0):
        self.timeout = timeout

    async def fetch(self, uri: str) -> bytes:
        parsed = urlparse(uri)
        if parsed.scheme in ("http", "https"):
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(uri)
                response.raise_for_status()
                return response.content
        path = Path(parsed.path) if parsed.scheme == "file" else Path(uri)
        return await asyncio.to_thread(path.read_bytes)


class FirebaseStorageBucket:
    """Upload and URL resolution on the handle's Storage bucket."""

    def __init__(self, handle: FirebaseHandle):
        self.handle = handle

    async def upload(self, path: str, data: bytes, content_type: str) -> None:
        blob = self.handle.bucket.blob(path)
        await asyncio.to_thread(blob.upload_from_string, data, content_type=content_type)
        logger.info(f"Uploaded {len(data)} bytes to {path}")

    async def download_url(self, path: str) -> str:
        """
        Public URL of an uploaded object. Reads the object's metadata first,
        so a missing object raises instead of resolving.
        """
        blob = self.handle.bucket.blob(path)
        try:
            await asyncio.to_thread(blob.reload)
        except NotFound as exc:
            raise StorageFlowError(f"No object at {path}") from exc

        if self.handle.is_emulator:
            base = f"http://{self.handle.settings.storage_host}"
        else:
            base = "https://firebasestorage.googleapis.com"
        bucket = self.handle.settings.storage_bucket
        url = f"{base}/v0/b/{bucket}/o/{quote(path, safe='')}?alt=media"
        tokens = (blob.metadata or {}).get(DOWNLOAD_TOKENS_KEY)
        if tokens:
            url += f"&token={tokens.split(',')[0]}"
        return url


class UploadFlow:

    def __init__(self, media, fetcher, storage, clock: Callable[[], int] = epoch_millis):
        self.media = media
        self.fetcher = fetcher
        self.storage = storage
        self.clock = clock
        self.reset()

    def reset(self) -> None:
        self.state = UploadState.IDLE
        self.image_uri: Optional[str] = None
        self.uploaded_url: Optional[str] = None
        self.storage_path: Optional[str] = None
        self.progress = ""
        self.error: Optional[str] = None

    @property
    def busy(self) -> bool:
        return self.state not in (UploadState.IDLE, UploadState.URL_RESOLVED, UploadState.ERROR)

    def _enter(self, state: UploadState, progress: str = "") -> None:
        logger.debug(f"Upload flow: {self.state.value} -> {state.value}")
        self.state = state
        self.progress = progress

    async def select_and_upload(self) -> UploadState:
        if self.busy:
            raise StorageFlowError(f"Upload already in progress ({self.state.value})")
        self.reset()
        try:
            self._enter(UploadState.PERMISSION_REQUESTED)
            if not await self.media.request_permission():
                self._enter(UploadState.IDLE, PERMISSION_NOTICE)
                return self.state

            self._enter(UploadState.PICKING, "Selecting image...")
            result = await self.media.pick()
            if result.canceled:
                self._enter(UploadState.IDLE)
                return self.state

            self.image_uri = result.uri
            self._enter(UploadState.PICKED, "Preparing image...")

            self._enter(UploadState.BLOB_CONVERTING, "Converting image...")
            blob = await self.fetcher.fetch(result.uri)

            self.storage_path = f"images/demo_image_{self.clock()}.jpg"
            self._enter(UploadState.UPLOADING, "Uploading to Firebase Storage...")
            await self.storage.upload(self.storage_path, blob, "image/jpeg")

            self.uploaded_url = await self.storage.download_url(self.storage_path)
            self._enter(UploadState.URL_RESOLVED, "Image uploaded")
            logger.info(f"Download URL: {self.uploaded_url}")
        except Exception as exc:
            logger.error(f"Upload flow failed in '{self.state.value}': {exc}")
            self.error = UPLOAD_ERROR
            self._enter(UploadState.ERROR)
        return self.state
