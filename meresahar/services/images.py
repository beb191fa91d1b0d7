# meresahar/services/images.py
"""Before/after photo storage, served separately from issue listings.

Listings only say whether a slot is filled; the bytes come from a dedicated
per-issue, per-slot endpoint so browsers can cache them and the map can
fetch them only when a popup is opened.
"""
from enum import Enum
from typing import Optional

from fastapi import UploadFile

from meresahar.db.store import IssueStore, RecordNotFound

IMAGE_MEDIA_TYPE = "image/png"
ALLOWED = {"image/jpeg", "image/png", "image/webp", "image/gif"}


class ImageSlot(str, Enum):
    before = "before"
    after = "after"


SLOT_COLUMNS = {
    ImageSlot.before: "image",
    ImageSlot.after: "after_image",
}


class ImageNotFound(Exception):
    def __init__(self, issue_id: int, slot: ImageSlot):
        super().__init__(f"No {slot.value} image for issue {issue_id}")
        self.issue_id = issue_id
        self.slot = slot


class ImageRejected(ValueError):
    pass


def image_url(issue_id: int, slot: ImageSlot) -> str:
    return f"/issues/{issue_id}/image/{ImageSlot(slot).value}"


def store_image(store: IssueStore, issue_id: int, slot: ImageSlot, data: bytes) -> None:
    store.write_column(issue_id, SLOT_COLUMNS[ImageSlot(slot)], data)


def fetch_image(store: IssueStore, issue_id: int, slot: ImageSlot) -> bytes:
    slot = ImageSlot(slot)
    try:
        data = store.read_column(issue_id, SLOT_COLUMNS[slot])
    except RecordNotFound:
        raise ImageNotFound(issue_id, slot)
    if data is None:
        raise ImageNotFound(issue_id, slot)
    return bytes(data)


def read_upload(upload: Optional[UploadFile], max_bytes: int) -> Optional[bytes]:
    """Reads an optional multipart image. Returns None when nothing was attached."""
    if upload is None:
        return None
    data = upload.file.read()
    if not data:
        return None
    if upload.content_type not in ALLOWED:
        raise ImageRejected("Unsupported image type")
    if len(data) > max_bytes:
        raise ImageRejected(f"Image exceeds {max_bytes} bytes")
    return data
