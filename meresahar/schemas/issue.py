from pydantic import BaseModel
from typing import Optional, Literal, List

Status = Literal["Pending", "Ongoing", "Completed"]
Urgency = Literal["Low", "Medium", "High"]


class IssueSummary(BaseModel):
    """Listing projection of an issue. Image bytes are never included."""
    id: int
    username: Optional[str] = None
    category: str
    description: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    # unknown legacy values pass through; the map falls back to Pending styling
    status: str = "Pending"
    urgency: str = "Low"
    has_before: bool = False
    has_after: bool = False


class IssueListOut(BaseModel):
    items: List[IssueSummary]
    total: int
    error: bool = False


class IssueCreated(BaseModel):
    id: int
    status: Status = "Pending"
    urgency: Urgency = "Low"


class TransitionOut(BaseModel):
    ok: bool = True
    id: int
