from pydantic import BaseModel
from typing import List

from meresahar.schemas.issue import IssueSummary


class BucketCount(BaseModel):
    label: str
    count: int


class DailyCount(BaseModel):
    date: str
    count: int


class ReportOut(BaseModel):
    total: int = 0
    by_category: List[BucketCount] = []
    by_status: List[BucketCount] = []
    by_urgency: List[BucketCount] = []
    daily: List[DailyCount] = []
    recent: List[IssueSummary] = []
    error: bool = False
