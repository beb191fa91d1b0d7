# File: meresahar/routers/issues.py
import logging
from fastapi import APIRouter, Depends, Query, HTTPException, UploadFile, File, Request, Form
from fastapi.responses import Response
from typing import Optional

from meresahar.core.config import settings
from meresahar.core.ratelimit import limiter
from meresahar.db.session import get_store
from meresahar.db.store import IssueStore, StoreUnavailable
from meresahar.schemas.issue import IssueCreated, IssueListOut
from meresahar.services.images import (
    IMAGE_MEDIA_TYPE,
    ImageNotFound,
    ImageRejected,
    ImageSlot,
    fetch_image,
    read_upload,
)
from meresahar.services.lifecycle import submit_issue
from meresahar.services.listing import list_issues

router = APIRouter(prefix="/issues", tags=["issues"])


@router.post("", response_model=IssueCreated, status_code=201)
@limiter.limit(settings.submit_rate_limit)
def create_issue(
    request: Request,
    category: str = Form(...),
    description: Optional[str] = Form(""),
    username: Optional[str] = Form(None),
    latitude: Optional[float] = Form(None, ge=-90, le=90, allow_inf_nan=False),
    longitude: Optional[float] = Form(None, ge=-180, le=180, allow_inf_nan=False),
    image: Optional[UploadFile] = File(default=None),
    store: IssueStore = Depends(get_store),
):
    try:
        data = read_upload(image, settings.max_image_bytes)
    except ImageRejected as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        issue_id = submit_issue(
            store,
            category=category.strip(),
            description=description,
            username=username.strip() if username else None,
            latitude=latitude,
            longitude=longitude,
            image=data,
        )
    except StoreUnavailable:
        raise HTTPException(status_code=500, detail="Database error")
    return IssueCreated(id=issue_id)


@router.get("", response_model=IssueListOut)
@limiter.limit(settings.list_rate_limit)
def get_issues(
    request: Request,
    category: Optional[str] = Query(default=None),
    status: Optional[str] = Query(default=None),
    urgency: Optional[str] = Query(default=None),
    store: IssueStore = Depends(get_store),
):
    filters = {"category": category, "status": status, "urgency": urgency}
    try:
        items = list_issues(store, filters)
    except StoreUnavailable:
        # keep the dashboard usable; the client shows the error flag
        return IssueListOut(items=[], total=0, error=True)
    return IssueListOut(items=items, total=len(items))


@router.get("/{issue_id}/image/{slot}")
def get_issue_image(issue_id: int, slot: ImageSlot, store: IssueStore = Depends(get_store)):
    try:
        data = fetch_image(store, issue_id, slot)
    except ImageNotFound:
        raise HTTPException(status_code=404, detail="No image")
    except StoreUnavailable:
        logging.error(f"Image fetch failed for issue #{issue_id} ({slot.value})")
        raise HTTPException(status_code=503, detail="Image temporarily unavailable")
    return Response(
        content=data,
        media_type=IMAGE_MEDIA_TYPE,
        headers={"Cache-Control": f"public, max-age={settings.image_cache_seconds}"},
    )
