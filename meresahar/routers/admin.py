# File: meresahar/routers/admin.py
from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Form
from typing import Optional

from meresahar.core.config import settings
from meresahar.core.security import require_admin
from meresahar.db.session import get_store
from meresahar.db.store import IssueStore, StoreUnavailable
from meresahar.models.issue import IssueStatus, IssueUrgency
from meresahar.schemas.issue import TransitionOut
from meresahar.services.images import ImageRejected, read_upload
from meresahar.services.lifecycle import IssueNotFound, TransitionRejected, apply_transition

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/issues/{issue_id}", response_model=TransitionOut, dependencies=[Depends(require_admin)])
def update_issue(
    issue_id: int,
    status: str = Form(...),
    urgency: Optional[str] = Form(None),
    after_image: Optional[UploadFile] = File(default=None),
    store: IssueStore = Depends(get_store),
):
    try:
        new_status = IssueStatus(status)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid status")
    new_urgency = None
    if urgency:
        try:
            new_urgency = IssueUrgency(urgency)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid urgency")

    try:
        data = read_upload(after_image, settings.max_image_bytes)
    except ImageRejected as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        apply_transition(
            store,
            issue_id,
            new_status,
            new_urgency=new_urgency,
            after_image=data,
            strict=settings.strict_lifecycle,
        )
    except IssueNotFound:
        raise HTTPException(status_code=404, detail="Issue not found")
    except TransitionRejected as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StoreUnavailable:
        raise HTTPException(status_code=500, detail="Database error")
    return TransitionOut(id=issue_id)
