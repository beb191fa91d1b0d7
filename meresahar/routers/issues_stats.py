# meresahar/routers/issues_stats.py
from fastapi import APIRouter, Depends

from meresahar.db.session import get_store
from meresahar.db.store import IssueStore
from meresahar.schemas.report import ReportOut
from meresahar.services.reporting import build_report

router = APIRouter(prefix="/issues/stats", tags=["issues:stats"])

@router.get("/report", response_model=ReportOut)
def report(store: IssueStore = Depends(get_store)):
    return build_report(store)
