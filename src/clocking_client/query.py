"""
Report query normalization.

PURPOSE: Reduce every way of asking for a report to one canonical ReportQuery.
AI CONTEXT: Pure functions. The gateway consumes ReportQuery verbatim.

INPUT SOURCES:
- Quick pick: named (offset, days) shortcut such as 'today' or 'last_7_days'
- Raw form: offset/day-count text fields
- Date range: inclusive 'YYYY-MM-DD' start and end dates

NORMALIZATION RULES:
- offset: integer >= 0; non-numeric, missing or negative -> 0 (today)
- days: integer >= 1; non-numeric, missing or < 1 -> unbounded (None)
- view_type: one of ViewType; anything else is a programmer error (ValueError)

USAGE:
    query = from_quick_pick("yesterday")
    query = normalize(offset="abc", days="7")      # ReportQuery(0, 7, DAILY_DETAIL)
    query = from_date_range("2024-05-01", "2024-05-03")
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from .config import Config
from .errors import InvalidQueryError

__all__ = [
    "ViewType",
    "ReportQuery",
    "QUICK_PICKS",
    "normalize",
    "from_quick_pick",
    "from_date_range",
]

DATE_FORMAT = "%Y-%m-%d"


class ViewType(str, Enum):
    """Report rendering mode requested from the server."""

    DAILY_DETAIL = "daily_detail"
    DAILY = "daily"
    DETAIL = "detail"
    DIST = "dist"


@dataclass(frozen=True)
class ReportQuery:
    """
    Canonical report request.

    Attributes:
        offset: Days before today where the range starts (0 = today).
        days: Length of the range in days, or None for "through now".
        view_type: Report rendering mode.
    """

    offset: int = 0
    days: int | None = None
    view_type: ViewType = ViewType.DAILY_DETAIL

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise ValueError(f"offset must be >= 0, got {self.offset}")
        if self.days is not None and self.days < 1:
            raise ValueError(f"days must be >= 1 or None, got {self.days}")
        if not isinstance(self.view_type, ViewType):
            raise ValueError(f"view_type must be a ViewType, got {self.view_type!r}")

    @property
    def is_unbounded(self) -> bool:
        """True when the range runs from offset through now."""
        return self.days is None

    @property
    def days_param(self) -> str:
        """Path segment for days; unbounded is the literal 'null'."""
        return Config.UNBOUNDED_DAYS if self.is_unbounded else str(self.days)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {"offset": self.offset, "days": self.days, "view_type": self.view_type.value}


# name -> (offset, days); "last N days" is (N - 1, unbounded)
QUICK_PICKS: dict[str, tuple[int, int | None]] = {
    "today": (0, None),
    "yesterday": (1, 1),
    "last_3_days": (2, None),
    "last_7_days": (6, None),
    "last_30_days": (29, None),
}


def _coerce_view_type(view_type: ViewType | str | None) -> ViewType:
    if view_type is None:
        return ViewType(Config.DEFAULT_VIEW_TYPE)
    # ViewType() raises ValueError for unknown values
    return ViewType(view_type)


def _parse_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def normalize(
    offset: Any = None,
    days: Any = None,
    view_type: ViewType | str | None = None,
) -> ReportQuery:
    """
    Normalize raw offset/day-count input into a ReportQuery.

    Args:
        offset: Text or int; days before today.
        days: Text or int; span length.
        view_type: ViewType or its string value. Defaults to daily_detail.

    Returns:
        ReportQuery with offset >= 0 and days >= 1 or None.

    Raises:
        ValueError: If view_type is not a known ViewType value.

    Example:
        >>> normalize("abc", "7")
        ReportQuery(offset=0, days=7, view_type=<ViewType.DAILY_DETAIL: 'daily_detail'>)
        >>> normalize("2", "xyz").days is None
        True
    """
    kind = _coerce_view_type(view_type)

    parsed_offset = _parse_int(offset)
    if parsed_offset is None or parsed_offset < 0:
        parsed_offset = 0

    parsed_days = _parse_int(days)
    if parsed_days is not None and parsed_days < 1:
        parsed_days = None

    return ReportQuery(offset=parsed_offset, days=parsed_days, view_type=kind)


def from_quick_pick(name: str, view_type: ViewType | str | None = None) -> ReportQuery:
    """
    Build the ReportQuery for a named quick pick.

    Raises:
        ValueError: If name is not in QUICK_PICKS or view_type is unknown.
    """
    try:
        offset, days = QUICK_PICKS[name]
    except KeyError:
        raise ValueError(f"Unknown quick pick: {name!r}") from None
    return ReportQuery(offset=offset, days=days, view_type=_coerce_view_type(view_type))


def _parse_date(value: Any, label: str) -> date:
    text = str(value or "").strip()
    if not text:
        raise InvalidQueryError(f"Missing {label}")
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError:
        raise InvalidQueryError(f"Invalid format of {label}: {text}") from None


def from_date_range(
    start: Any,
    end: Any,
    view_type: ViewType | str | None = None,
    today: date | None = None,
) -> ReportQuery:
    """
    Build a ReportQuery covering an inclusive date range.

    The range maps onto the canonical shape: offset counts days from start
    back to today, days covers start through end inclusive.

    Args:
        start: 'YYYY-MM-DD' first day.
        end: 'YYYY-MM-DD' last day (included).
        view_type: ViewType or its string value.
        today: Reference date; defaults to the local current date.

    Returns:
        ReportQuery for the range.

    Raises:
        InvalidQueryError: Malformed dates, end before start, or start in
            the future. User-facing.
        ValueError: Unknown view_type (programmer error).

    Example:
        >>> from_date_range("2024-05-01", "2024-05-03", today=date(2024, 5, 10))
        ReportQuery(offset=9, days=3, view_type=<ViewType.DAILY_DETAIL: 'daily_detail'>)
    """
    kind = _coerce_view_type(view_type)
    first = _parse_date(start, "start date")
    last = _parse_date(end, "end date")
    if last < first:
        raise InvalidQueryError("Invalid date range: end date must not be before start date")

    reference = today or date.today()
    offset = (reference - first).days
    if offset < 0:
        raise InvalidQueryError("Invalid date range: start date is in the future")

    return ReportQuery(offset=offset, days=(last - first).days + 1, view_type=kind)
