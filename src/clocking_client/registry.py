"""
Session registry.

PURPOSE: Single source of truth for "what is currently running".
AI CONTEXT: Ordered mapping title -> RegistryEntry(session, notes). refresh()
is the only writer of the mapping; set_notes() only edits scratch notes of
titles already present.

REFRESH RULES:
- The mapping is rebuilt wholesale from /api/unfinished/ on every refresh
- Titles still open keep their scratch notes
- Titles no longer open are dropped together with their notes
- Newly open titles start with empty notes
- A failed fetch leaves the mapping untouched

USAGE:
    registry = SessionRegistry(gateway)
    await registry.refresh()
    if not registry.has_any_open():
        ...
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .gateway import ApiGateway
    from .models import Session

__all__ = ["RegistryEntry", "SessionRegistry", "rebuild_entries"]

logger = logging.getLogger(__name__)


@dataclass
class RegistryEntry:
    """One open session and its local notes buffer."""

    session: Session
    notes: str = ""


def rebuild_entries(
    previous: dict[str, RegistryEntry],
    sessions: Iterable[Session],
) -> dict[str, RegistryEntry]:
    """
    Build a new registry mapping from the server's open-session list.

    Pure: previous is not modified. When the server lists a title more than
    once, the first occurrence wins.

    Args:
        previous: Current mapping, consulted only for surviving notes.
        sessions: Open sessions in server order.

    Returns:
        New ordered mapping title -> RegistryEntry.
    """
    entries: dict[str, RegistryEntry] = {}
    for session in sessions:
        if session.title in entries:
            continue
        prior = previous.get(session.title)
        entries[session.title] = RegistryEntry(
            session=session,
            notes=prior.notes if prior is not None else "",
        )
    return entries


class SessionRegistry:
    """
    In-memory registry of open sessions with per-session scratch notes.

    Insertion order is display order. Lookup by title is O(1), which the
    finish flow relies on.
    """

    def __init__(self, gateway: ApiGateway) -> None:
        """
        Create an empty registry.

        Args:
            gateway: Source of the open-session list for refresh().
        """
        self._gateway = gateway
        self._entries: dict[str, RegistryEntry] = {}

    async def refresh(self) -> None:
        """
        Replace the mapping with the server's current open sessions.

        Raises:
            GatewayError: Propagated from the gateway; the mapping is
                left unchanged.
        """
        sessions = await self._gateway.fetch_ongoing()
        entries = rebuild_entries(self._entries, sessions)
        dropped = [title for title in self._entries if title not in entries]
        if dropped:
            logger.debug(f"Registry dropped closed sessions: {dropped}")
        self._entries = entries

    def set_notes(self, title: str, text: str) -> None:
        """Replace the scratch notes of an open title; no-op otherwise."""
        entry = self._entries.get(title)
        if entry is None:
            logger.debug(f"Ignoring notes for {title!r}: not open")
            return
        entry.notes = text

    def has_any_open(self) -> bool:
        """
        Whether any session is open.

        Gates starting: only one open session at a time is permitted.
        """
        return bool(self._entries)

    def notes_for(self, title: str) -> str | None:
        """Scratch notes of an open title, or None if it is not open."""
        entry = self._entries.get(title)
        return entry.notes if entry is not None else None

    def titles(self) -> list[str]:
        """Open titles in display order."""
        return list(self._entries)

    def entries(self) -> list[RegistryEntry]:
        """Snapshot of open sessions with their notes, in display order."""
        return list(self._entries.values())

    def __len__(self) -> int:
        """Number of open sessions."""
        return len(self._entries)
