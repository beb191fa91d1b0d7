# File: meresahar/routers/map.py
from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse
from typing import Optional

from meresahar.db.session import get_store
from meresahar.db.store import IssueStore, StoreUnavailable
from meresahar.services.listing import list_issues
from meresahar.services.map_render import build_issue_map

router = APIRouter(tags=["map"])


@router.get("/map", response_class=HTMLResponse)
def issue_map(
    category: Optional[str] = Query(default=None),
    status: Optional[str] = Query(default=None),
    urgency: Optional[str] = Query(default=None),
    store: IssueStore = Depends(get_store),
):
    error = False
    try:
        issues = list_issues(store, {"category": category, "status": status, "urgency": urgency})
    except StoreUnavailable:
        issues, error = [], True
    rendered = build_issue_map(issues)
    return HTMLResponse(
        rendered.render(),
        headers={"X-Issues-Error": "true" if error else "false"},
    )
