"""
Data models for the clocking client.

PURPOSE: Type-safe dataclasses for sessions as the server reports them and
as the UI displays them.

MODEL HIERARCHY:
- Session: One tracked interval (title, start, optional end, notes)
- SessionDetail: Display form of a Session with rendered timestamps

PAYLOAD SHAPES:
The server reports sessions in two shapes:
    /api/unfinished/      {"title": ..., "start": ...}
    /api/latest/{title}   {"id": {"title": ..., "start": ...}, "end": ..., "notes": ...}
Session.from_payload() accepts both.

USAGE:
    session = Session.from_payload({"title": "Write report", "start": "2024-05-01T09:00:00Z"})
    detail = SessionDetail.from_session(session)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any

from .clock import format_local, parse_timestamp

__all__ = ["Session", "SessionDetail"]


@dataclass(frozen=True)
class Session:
    """
    One activity instance.

    LIFECYCLE:
    1. Opened on the server by /api/start/{title} (start is server-issued)
    2. Listed by /api/unfinished/ while end is None
    3. Closed by /api/finish/{title}; notes become server-resident

    The client never invents an open Session: every instance comes from a
    server payload.
    """

    title: str
    start: datetime
    end: datetime | None = None
    notes: str = ""

    @property
    def is_open(self) -> bool:
        """True while the session has no end timestamp."""
        return self.end is None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Session:
        """
        Build a Session from either server payload shape.

        Args:
            payload: Decoded JSON object, flat ({title, start, ...}) or
                nested ({id: {title, start}, end, notes}).

        Returns:
            Session with parsed, timezone-aware timestamps.

        Raises:
            ValueError: If the payload is not an object, the title is
                missing or empty, or a timestamp is malformed.

        Example:
            >>> s = Session.from_payload({"id": {"title": "A", "start": "2024-05-01T09:00:00Z"},
            ...                           "end": None, "notes": ""})
            >>> s.is_open
            True
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Session payload must be an object, got {type(payload).__name__}")

        ident = payload.get("id")
        source = ident if isinstance(ident, dict) else payload

        title = source.get("title")
        if not isinstance(title, str) or not title:
            raise ValueError("Session payload has no title")
        if "start" not in source:
            raise ValueError(f"Session payload for {title!r} has no start")

        end = payload.get("end")
        notes = payload.get("notes") or ""
        return cls(
            title=title,
            start=parse_timestamp(source["start"]),
            end=parse_timestamp(end) if end is not None else None,
            notes=str(notes),
        )


@dataclass(frozen=True)
class SessionDetail:
    """
    Display form of a single fetched session.

    start is always rendered. end is rendered only when the session is
    closed; an open session keeps end as None so display code can branch
    on it for open/closed styling.
    """

    title: str
    start: str
    end: str | None
    notes: str = ""

    @property
    def is_open(self) -> bool:
        """True when the underlying session had no end."""
        return self.end is None

    @classmethod
    def from_session(cls, session: Session, tz: tzinfo | None = None) -> SessionDetail:
        """
        Render a Session's timestamps for display.

        Args:
            session: Session as fetched from the server.
            tz: Display timezone; defaults to local time.

        Returns:
            SessionDetail with formatted start and, only if present, end.
        """
        return cls(
            title=session.title,
            start=format_local(session.start, tz=tz),
            end=format_local(session.end, tz=tz) if session.end is not None else None,
            notes=session.notes,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "title": self.title,
            "start": self.start,
            "end": self.end,
            "notes": self.notes,
            "is_open": self.is_open,
        }
