# meresahar/services/map_render.py
"""Clustered Leaflet map of issues, rendered with folium.

Markers go into a single MarkerCluster so thousands of issues stay cheap to
draw; clusters split as the user zooms and spiderfy at max zoom. Popups carry
only placeholders for photos. A small script on the map fetches a photo when
its popup is opened, swapping the placeholder for the image or an
"unavailable" note, so page load never triggers image requests.
"""
import asyncio
import html
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Iterable, Optional

import folium
from branca.element import MacroElement
from folium.plugins import MarkerCluster
from jinja2 import Template

from meresahar.models.issue import DEFAULT_STATUS, DEFAULT_URGENCY
from meresahar.schemas.issue import IssueSummary
from meresahar.services.images import ImageSlot, image_url

DEFAULT_CENTER = (20.5937, 78.9629)  # India
DEFAULT_ZOOM = 5
MAX_ZOOM = 19

STATUS_COLORS = {
    "Pending": "red",
    "Ongoing": "orange",
    "Completed": "green",
}
FALLBACK_COLOR = STATUS_COLORS[DEFAULT_STATUS.value]

LOADING_TEXT = "Loading…"
UNAVAILABLE_TEXT = "Image unavailable"
NO_IMAGES_TEXT = "No images uploaded yet"
SLOT_LABELS = {ImageSlot.before: "Before", ImageSlot.after: "After"}


class SlotState(str, Enum):
    loading = "loading"
    loaded = "loaded"
    unavailable = "unavailable"


ImageFetcher = Callable[[int, ImageSlot], Awaitable[bytes]]


@dataclass
class PopupImages:
    """Per-popup photo state. Each slot starts ``loading`` and settles once.

    Server-side twin of the ``LazyPopupImages`` script: ``for_issue`` decides
    which placeholders ``popup_html`` emits, and ``settle``/``resolve`` follow
    the same loading -> loaded | unavailable steps the browser takes on
    ``popupopen``. Python clients that fetch popup photos through
    ``/issues/{id}/image/{slot}`` drive ``resolve`` with their own fetcher.
    """
    issue_id: int
    states: dict = field(default_factory=dict)

    @classmethod
    def for_issue(cls, issue: IssueSummary) -> "PopupImages":
        states = {}
        if issue.has_before:
            states[ImageSlot.before] = SlotState.loading
        if issue.has_after:
            states[ImageSlot.after] = SlotState.loading
        return cls(issue_id=issue.id, states=states)

    @property
    def empty(self) -> bool:
        return not self.states

    def settle(self, slot: ImageSlot, ok: bool) -> SlotState:
        current = self.states.get(slot)
        if current is SlotState.loading:
            self.states[slot] = SlotState.loaded if ok else SlotState.unavailable
        return self.states.get(slot)

    async def resolve(self, fetch: ImageFetcher) -> dict:
        """Popup-open handler: one task per pending slot, all in flight together."""
        pending = [s for s, st in self.states.items() if st is SlotState.loading]

        async def load(slot: ImageSlot):
            try:
                data = await fetch(self.issue_id, slot)
            except Exception as e:
                logging.warning(f"Issue #{self.issue_id} {slot.value} image failed: {e}")
                self.settle(slot, ok=False)
                return slot, None
            self.settle(slot, ok=True)
            return slot, data

        results = await asyncio.gather(*(load(s) for s in pending))
        return {slot: data for slot, data in results if data is not None}


def marker_color(status: Optional[str]) -> str:
    return STATUS_COLORS.get(status or "", FALLBACK_COLOR)


def _on_globe(lat: Optional[float], lng: Optional[float]) -> bool:
    if lat is None or lng is None:
        return False
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return -90 <= lat <= 90 and -180 <= lng <= 180


def mappable(issues: Iterable[IssueSummary]) -> list[IssueSummary]:
    return [i for i in issues if _on_globe(i.latitude, i.longitude)]


def escape_text(value) -> str:
    """HTML-escape ``value`` for folium popup and tooltip bodies.

    folium pastes these into JavaScript template literals, so backticks and
    ``$`` are turned into entities as well.
    """
    return html.escape(str(value)).replace("`", "&#96;").replace("$", "&#36;")


def tooltip_text(issue: IssueSummary) -> str:
    return escape_text(f"#{issue.id} {issue.category}")


def popup_html(issue: IssueSummary) -> str:
    e = escape_text
    parts = [
        f"<b>{e(issue.username or 'Anonymous')}</b><br>",
        f"<b>Category:</b> {e(issue.category)}<br>",
        f"<b>Description:</b> {e(issue.description)}<br>",
        f"<b>Status:</b> {e(issue.status or DEFAULT_STATUS.value)}<br>",
        f"<b>Urgency:</b> {e(issue.urgency or DEFAULT_URGENCY.value)}<br>",
        f"<b>Location:</b> ({issue.latitude}, {issue.longitude})<br>",
    ]
    images = PopupImages.for_issue(issue)
    if images.empty:
        parts.append(f'<p class="no-images">{NO_IMAGES_TEXT}</p>')
    for slot in images.states:
        parts.append(
            f'<div class="popup-img-slot" data-slot="{slot.value}" '
            f'data-src="{image_url(issue.id, slot)}">'
            f"<b>{SLOT_LABELS[slot]}:</b> <span>{LOADING_TEXT}</span></div>"
        )
    return "".join(parts)


class LazyPopupImages(MacroElement):
    """Loads popup photos on ``popupopen``; each placeholder fetches at most once."""
    _template = Template(
        """
        {% macro script(this, kwargs) %}
        {{ this._parent.get_name() }}.on("popupopen", function (e) {
            var root = e.popup.getElement();
            if (!root) { return; }
            root.querySelectorAll(".popup-img-slot[data-src]").forEach(function (slot) {
                if (slot.dataset.state) { return; }
                slot.dataset.state = "loading";
                var img = new Image();
                img.className = "popup-img";
                img.alt = slot.dataset.slot + " image";
                img.onload = function () {
                    slot.dataset.state = "loaded";
                    slot.querySelector("span").replaceWith(img);
                    e.popup.update();
                };
                img.onerror = function () {
                    slot.dataset.state = "unavailable";
                    slot.querySelector("span").textContent = {{ this.unavailable_text|tojson }};
                };
                img.src = slot.dataset.src;
            });
        });
        {% endmacro %}
        """
    )

    def __init__(self, unavailable_text: str = UNAVAILABLE_TEXT):
        super().__init__()
        self._name = "LazyPopupImages"
        self.unavailable_text = unavailable_text


@dataclass
class IssueMap:
    map: folium.Map
    cluster: MarkerCluster
    placed: list = field(default_factory=list)
    skipped: list = field(default_factory=list)

    def render(self) -> str:
        return self.map.get_root().render()


def build_issue_map(
    issues: Iterable[IssueSummary],
    center: tuple = DEFAULT_CENTER,
    zoom: int = DEFAULT_ZOOM,
) -> IssueMap:
    issues = list(issues)
    m = folium.Map(location=list(center), zoom_start=zoom, max_zoom=MAX_ZOOM, tiles="OpenStreetMap")
    cluster = MarkerCluster(
        name="Issues",
        options={"spiderfyOnMaxZoom": True, "showCoverageOnHover": False},
    ).add_to(m)

    located = mappable(issues)
    for issue in located:
        folium.Marker(
            [issue.latitude, issue.longitude],
            popup=folium.Popup(popup_html(issue), max_width=300),
            tooltip=tooltip_text(issue),
            icon=folium.Icon(color=marker_color(issue.status), icon="info-sign"),
        ).add_to(cluster)
    LazyPopupImages().add_to(m)

    placed = [i.id for i in located]
    located_ids = set(placed)
    skipped = [i.id for i in issues if i.id not in located_ids]
    if skipped:
        logging.info(f"Map: {len(skipped)} issue(s) without usable coordinates left off the map")
    return IssueMap(map=m, cluster=cluster, placed=placed, skipped=skipped)
