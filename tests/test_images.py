"""Before/after image slots: storage, retrieval and upload validation."""

from __future__ import annotations

import io

import pytest
from starlette.datastructures import Headers, UploadFile

from meresahar.services.images import (
    ImageNotFound,
    ImageRejected,
    ImageSlot,
    fetch_image,
    image_url,
    read_upload,
    store_image,
)
from meresahar.db.store import RecordNotFound
from tests.conftest import OTHER_PNG_BYTES, PNG_BYTES, make_issue


def _upload(data: bytes, content_type: str = "image/png") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(data),
        filename="issue.png",
        headers=Headers({"content-type": content_type}),
    )


class TestFetchImage:
    def test_before_image_round_trips(self, store) -> None:
        issue_id = make_issue(store, image=PNG_BYTES)
        assert fetch_image(store, issue_id, ImageSlot.before) == PNG_BYTES

    def test_empty_slot_is_not_found(self, store) -> None:
        issue_id = make_issue(store, image=PNG_BYTES)
        with pytest.raises(ImageNotFound) as exc:
            fetch_image(store, issue_id, ImageSlot.after)
        assert exc.value.slot is ImageSlot.after

    def test_missing_record_is_not_found(self, store) -> None:
        with pytest.raises(ImageNotFound):
            fetch_image(store, 999, ImageSlot.before)

    def test_slot_accepts_plain_string(self, store) -> None:
        issue_id = make_issue(store, image=PNG_BYTES)
        assert fetch_image(store, issue_id, "before") == PNG_BYTES


class TestStoreImage:
    def test_slots_are_independent(self, store) -> None:
        issue_id = make_issue(store, image=PNG_BYTES)
        store_image(store, issue_id, ImageSlot.after, OTHER_PNG_BYTES)
        assert fetch_image(store, issue_id, ImageSlot.before) == PNG_BYTES
        assert fetch_image(store, issue_id, ImageSlot.after) == OTHER_PNG_BYTES

    def test_overwrite_replaces_bytes(self, store) -> None:
        issue_id = make_issue(store)
        store_image(store, issue_id, ImageSlot.after, PNG_BYTES)
        store_image(store, issue_id, ImageSlot.after, OTHER_PNG_BYTES)
        assert fetch_image(store, issue_id, ImageSlot.after) == OTHER_PNG_BYTES

    def test_unknown_record_raises(self, store) -> None:
        with pytest.raises(RecordNotFound):
            store_image(store, 42, ImageSlot.before, PNG_BYTES)


class TestReadUpload:
    def test_none_means_no_image(self) -> None:
        assert read_upload(None, 1024) is None

    def test_empty_file_means_no_image(self) -> None:
        assert read_upload(_upload(b""), 1024) is None

    def test_returns_bytes(self) -> None:
        assert read_upload(_upload(PNG_BYTES), 1024) == PNG_BYTES

    def test_rejects_non_image(self) -> None:
        with pytest.raises(ImageRejected):
            read_upload(_upload(b"hello", "text/plain"), 1024)

    def test_rejects_oversized(self) -> None:
        with pytest.raises(ImageRejected):
            read_upload(_upload(PNG_BYTES), 10)


def test_image_url() -> None:
    assert image_url(7, ImageSlot.after) == "/issues/7/image/after"
