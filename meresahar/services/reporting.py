# meresahar/services/reporting.py
"""Read-only dashboard aggregates over the issues table."""
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterable, Optional, Sequence

from meresahar.db.store import IssueStore, StoreUnavailable
from meresahar.models.issue import DEFAULT_STATUS, DEFAULT_URGENCY
from meresahar.schemas.report import BucketCount, DailyCount, ReportOut
from meresahar.services.filters import SUMMARY_PROJECTION
from meresahar.services.listing import summarize

OTHER = "Other"
# display order; anything unrecognised lands in the last bucket
STATUS_ORDER = ("Pending", "Ongoing", "Completed", OTHER)
URGENCY_ORDER = ("High", "Medium", "Low", OTHER)

TREND_DAYS = 7
RECENT_LIMIT = 10


def bucket_for(value: Optional[str], order: Sequence[str], default: str) -> str:
    value = value or default
    return value if value in order[:-1] else order[-1]


def ordered_buckets(counts: Iterable[tuple[Any, int]], order: Sequence[str], default: str) -> list[BucketCount]:
    totals = dict.fromkeys(order, 0)
    for value, n in counts:
        totals[bucket_for(value, order, default)] += n
    return [BucketCount(label=label, count=totals[label]) for label in order]


def _utc_naive(ts: datetime) -> datetime:
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc).replace(tzinfo=None)
    return ts


def daily_counts(timestamps: Iterable[datetime], today: date) -> list[DailyCount]:
    days = [today - timedelta(days=i) for i in range(TREND_DAYS - 1, -1, -1)]
    counts = dict.fromkeys(days, 0)
    for ts in timestamps:
        day = _utc_naive(ts).date()
        if day in counts:
            counts[day] += 1
    return [DailyCount(date=d.isoformat(), count=counts[d]) for d in days]


def empty_report() -> ReportOut:
    return ReportOut(
        total=0,
        by_category=[],
        by_status=[BucketCount(label=label, count=0) for label in STATUS_ORDER],
        by_urgency=[BucketCount(label=label, count=0) for label in URGENCY_ORDER],
        daily=daily_counts([], datetime.now(timezone.utc).date()),
        recent=[],
        error=True,
    )


def build_report(store: IssueStore, now: Optional[datetime] = None) -> ReportOut:
    now = _utc_naive(now or datetime.now(timezone.utc))
    today = now.date()
    since = datetime.combine(
        today - timedelta(days=TREND_DAYS - 1), datetime.min.time(), tzinfo=timezone.utc
    )

    try:
        total = store.count()
        by_category = sorted(store.count_by("category"), key=lambda r: (-r[1], r[0] or ""))
        by_status = store.count_by("status")
        by_urgency = store.count_by("urgency")
        created = store.created_since(since)
        recent_rows = store.select(
            f"SELECT {SUMMARY_PROJECTION} FROM issues "
            "ORDER BY created_at DESC, id DESC LIMIT :limit_val",
            {"limit_val": RECENT_LIMIT},
        )
        return ReportOut(
            total=total,
            by_category=[BucketCount(label=c or "unknown", count=n) for c, n in by_category],
            by_status=ordered_buckets(by_status, STATUS_ORDER, DEFAULT_STATUS.value),
            by_urgency=ordered_buckets(by_urgency, URGENCY_ORDER, DEFAULT_URGENCY.value),
            daily=daily_counts(created, today),
            recent=[summarize(r) for r in recent_rows],
            error=False,
        )
    except StoreUnavailable:
        # already logged by the store
        return empty_report()
    except Exception as e:
        logging.error(f"Report aggregation failed: {e}", exc_info=True)
        return empty_report()
