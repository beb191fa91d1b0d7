"""HTTP: map page, report endpoint and startup checks."""

from __future__ import annotations

import asyncio

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError

from meresahar.main import create_app, lifespan
from tests.conftest import BrokenStore, PNG_BYTES


def _create(client, **overrides) -> int:
    data = {"username": "A", "category": "Pothole", "description": "deep hole",
            "latitude": "12.9", "longitude": "77.6"}
    data.update(overrides)
    return client.post("/issues", data=data).json()["id"]


class TestMapPage:
    def test_renders_clustered_map(self, client) -> None:
        issue_id = _create(client)
        _create(client, latitude="", longitude="")
        resp = client.get("/map")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        assert resp.headers["x-issues-error"] == "false"
        assert "markerClusterGroup" in resp.text
        assert f"#{issue_id} Pothole" in resp.text

    def test_hostile_category_is_escaped_in_tooltip_and_popup(self, client) -> None:
        issue_id = _create(client, category="<img src=x onerror=alert(1)>")
        _create(client, category="Road `closed`")
        page = client.get("/map").text
        assert "<img src=x onerror=alert(1)>" not in page
        assert f"#{issue_id} &lt;img src=x onerror=alert(1)&gt;" in page
        assert "`closed`" not in page

    def test_filters_apply(self, client) -> None:
        _create(client, category="Pothole")
        _create(client, category="Garbage")
        page = client.get("/map", params={"category": "Garbage"}).text
        assert "Garbage" in page
        assert "Pothole" not in page

    def test_no_image_bytes_in_page(self, client) -> None:
        client.post(
            "/issues",
            data={"category": "Pothole", "latitude": "1", "longitude": "2"},
            files={"image": ("a.png", PNG_BYTES, "image/png")},
        )
        page = client.get("/map").text
        assert "data:image" not in page
        assert "/image/before" in page

    def test_store_failure_renders_empty_map(self, client, app) -> None:
        app.state.store = BrokenStore()
        resp = client.get("/map")
        assert resp.status_code == 200
        assert resp.headers["x-issues-error"] == "true"


class TestReport:
    def test_report_shape(self, client) -> None:
        _create(client)
        body = client.get("/issues/stats/report").json()
        assert body["error"] is False
        assert body["total"] == 1
        assert [b["label"] for b in body["by_status"]] == ["Pending", "Ongoing", "Completed", "Other"]
        assert [b["label"] for b in body["by_urgency"]] == ["High", "Medium", "Low", "Other"]
        assert len(body["daily"]) == 7
        assert body["recent"][0]["category"] == "Pothole"

    def test_report_degrades(self, client, app) -> None:
        app.state.store = BrokenStore()
        body = client.get("/issues/stats/report").json()
        assert body["error"] is True
        assert body["total"] == 0


class TestStartup:
    def test_unreachable_database_aborts_startup(self, tmp_path) -> None:
        engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'dir' / 'issues.db'}")
        app = create_app(engine)

        async def start():
            async with lifespan(app):
                pass

        with pytest.raises(SQLAlchemyError):
            asyncio.run(start())
