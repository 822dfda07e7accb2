"""Snapshot of what the emulator UI should be showing, for troubleshooting."""

import logging
from typing import Dict, List, Optional

from .firebase_client import FirebaseHandle
from .models import ALL_DOCUMENTS, Library, LibraryBook, Review, User
from .pydantic_compat import BaseModel, Field
from .registry import init_mylibrary_odm

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 3
PROBE_USER_ID = "demo-user-1"


class DebugInfo(BaseModel):
    counts: Dict[str, int] = Field(default_factory=dict)
    sample_ids: Dict[str, List[str]] = Field(default_factory=dict)
    library_titles: Dict[str, List[str]] = Field(default_factory=dict)
    probe_user_name: Optional[str] = None
    probe_library_total: Optional[int] = None

    @property
    def complete(self) -> bool:
        return bool(self.counts) and all(count > 0 for count in self.counts.values())


async def collect_debug_info(handle: FirebaseHandle) -> DebugInfo:
    init_mylibrary_odm(handle, ALL_DOCUMENTS)
    info = DebugInfo()

    for model in (User, Library, Review):
        name = model.get_collection_name()
        documents = await model.raw_documents()
        info.counts[name] = len(documents)
        info.sample_ids[name] = [doc_id for doc_id, _ in documents[:SAMPLE_SIZE]]

    for library_id, _ in await Library.raw_documents():
        books = await LibraryBook.raw_documents(parent=Library(id=library_id, userId=library_id))
        info.library_titles[library_id] = [data.get("titulo") or doc_id for doc_id, data in books]

    user = await User.get_raw(PROBE_USER_ID)
    if user is not None:
        info.probe_user_name = user.get("nombre")
    library = await Library.get_raw(PROBE_USER_ID)
    if library is not None:
        info.probe_library_total = library.get("totalLibros")

    logger.debug(f"Debug info collected: {info}")
    return info
