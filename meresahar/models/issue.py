# File: meresahar/models/issue.py
from __future__ import annotations
from enum import Enum as PyEnum
from sqlalchemy import String, Float, Text, LargeBinary, DateTime, func, Index
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from meresahar.db.base import Base

class IssueStatus(str, PyEnum):
    pending = "Pending"
    ongoing = "Ongoing"
    completed = "Completed"

class IssueUrgency(str, PyEnum):
    low = "Low"
    medium = "Medium"
    high = "High"

DEFAULT_STATUS = IssueStatus.pending
DEFAULT_URGENCY = IssueUrgency.low

class Issue(Base):
    __tablename__ = "issues"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    username: Mapped[str | None] = mapped_column(String(120), nullable=True)
    category: Mapped[str] = mapped_column(String(120), index=True)
    description: Mapped[str] = mapped_column(Text, default="")

    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Stored as plain strings and left nullable: rows written before these
    # columns existed read back as Pending / Low.
    status: Mapped[str | None] = mapped_column(String(20), index=True, nullable=True)
    urgency: Mapped[str | None] = mapped_column(String(20), index=True, nullable=True)

    image: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    after_image: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)

Index("ix_issues_lat_lng", Issue.latitude, Issue.longitude)
