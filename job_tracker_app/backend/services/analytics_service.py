"""
Dashboard analytics derived from a user's job applications.

Everything in this module is pure: it never touches the store and never
reorders or mutates the records it is given. Records may be ORM rows,
pydantic schemas or plain mappings; each only needs ``status``, ``company``
and ``created_at``.
"""
import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional

from .. import schemas
from ..utils.time_utils import parse_datetime

logger = logging.getLogger(__name__)

STATUS_ORDER = ("applied", "assessment", "interview", "offer", "rejected")

# status -> (color, icon)
STATUS_STYLES = {
    "applied": ("#2196F3", "send"),
    "assessment": ("#9C27B0", "quiz"),
    "interview": ("#FF9800", "event"),
    "offer": ("#4CAF50", "check-circle"),
    "rejected": ("#F44336", "cancel"),
}

DEFAULT_STATUS_COLOR = "#666"
DEFAULT_STATUS_ICON = "help"

TREND_MONTHS = 6
TOP_COMPANIES_LIMIT = 5
RECENT_APPLICATIONS_LIMIT = 5

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def get_status_color(status: str) -> str:
    return STATUS_STYLES.get(status, (DEFAULT_STATUS_COLOR, DEFAULT_STATUS_ICON))[0]


def get_status_icon(status: str) -> str:
    return STATUS_STYLES.get(status, (DEFAULT_STATUS_COLOR, DEFAULT_STATUS_ICON))[1]


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _is_known_status(status: Any) -> bool:
    return isinstance(status, str) and status in STATUS_STYLES


def _created_at(record: Any) -> Optional[datetime]:
    """
    created_at as an aware UTC datetime, or None when missing or unparsable.

    Values at the edge of the datetime range that cannot be shifted into the
    local calendar count as unparsable.
    """
    parsed = parse_datetime(_field(record, "created_at"))
    if parsed is None:
        return None
    created = parsed.replace(tzinfo=timezone.utc)
    try:
        created.astimezone()
    except (OverflowError, ValueError):
        logger.debug("created_at %r is outside the local calendar range", parsed)
        return None
    return created


def _local_now(now: Optional[datetime]) -> datetime:
    # a naive "now" is local wall-clock time
    return (now or datetime.now()).astimezone()


def _month_key(moment: datetime) -> str:
    local = moment.astimezone()
    return f"{local.year}-{local.month:02d}"


def trailing_months(now: datetime, count: int = TREND_MONTHS) -> List[str]:
    """Year-month keys for the ``count`` calendar months ending at ``now``, oldest first."""
    year, month = now.year, now.month
    keys = []
    for _ in range(count):
        keys.append(f"{year}-{month:02d}")
        month -= 1
        if month == 0:
            month = 12
            year -= 1
    keys.reverse()
    return keys


def status_distribution(records: List[Any]) -> List[schemas.StatusBucket]:
    counts = Counter(
        status for status in (_field(r, "status") for r in records) if _is_known_status(status)
    )
    return [
        schemas.StatusBucket(
            status=status,
            count=counts.get(status, 0),
            color=get_status_color(status),
            icon=get_status_icon(status),
        )
        for status in STATUS_ORDER
    ]


def monthly_trends(records: List[Any], now: Optional[datetime] = None) -> List[schemas.MonthlyTrend]:
    months = trailing_months(_local_now(now))
    counts = Counter()
    for record in records:
        created = _created_at(record)
        if created is not None:
            counts[_month_key(created)] += 1
    return [schemas.MonthlyTrend(month=month, count=counts.get(month, 0)) for month in months]


def top_companies(records: List[Any], limit: int = TOP_COMPANIES_LIMIT) -> List[schemas.CompanyCount]:
    counts = Counter()
    for record in records:
        company = _field(record, "company")
        if isinstance(company, str) and company:
            counts[company] += 1
    # stable sort: equal counts keep the order companies were first seen
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [schemas.CompanyCount(company=company, count=count) for company, count in ranked[:limit]]


def recent_applications(records: Iterable[Any], limit: int = RECENT_APPLICATIONS_LIMIT) -> List[Any]:
    ordered = sorted(records, key=lambda r: _created_at(r) or _OLDEST, reverse=True)
    return ordered[:limit]


def compute_analytics(applications: Iterable[Any], now: Optional[datetime] = None) -> schemas.AnalyticsSummary:
    """
    Derive the dashboard summary for a list of applications.

    Never raises for malformed records: unknown statuses count toward the
    total but toward no bucket, and records without a usable created_at are
    left out of the monthly trends and sorted last among recent applications.

    Args:
        applications: Application-like records, in any order
        now: Reference time for the monthly window; defaults to local now

    Returns:
        AnalyticsSummary with six monthly trend entries and five status buckets
    """
    records = list(applications)
    total = len(records)

    unknown = {
        repr(status) for status in (_field(r, "status") for r in records)
        if not _is_known_status(status)
    }
    if unknown:
        logger.warning(
            "Analytics skipped unknown application statuses: %s", ", ".join(sorted(unknown))
        )

    distribution = status_distribution(records)
    offers = next(bucket.count for bucket in distribution if bucket.status == "offer")
    trends = monthly_trends(records, now=now)

    success_rate = (offers / total) * 100 if total > 0 else 0.0
    months = len({trend.month for trend in trends})
    average = total / months if total > 0 and months > 0 else 0.0

    return schemas.AnalyticsSummary(
        total=total,
        success_rate=success_rate,
        status_distribution=distribution,
        monthly_trends=trends,
        top_companies=top_companies(records),
        recent_applications=recent_applications(records),
        average_applications_per_month=average,
    )
