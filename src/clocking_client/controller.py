"""
View-model controller - user actions over the clocking state model.

PURPOSE: Orchestrate registry, query normalizer and gateway for each user intent.
AI CONTEXT: Shared by the web dashboard and the CLI.

ARCHITECTURE:
    web routes ──┐
                 ├──► Controller ──► SessionRegistry ──► ApiGateway
    CLI verbs ───┘         │
                           └──► ViewState (replaced via pure reducers)

STATE:
ViewState is immutable. Every change goes through a reducer
(with_error, with_recent, with_detail, with_report) that returns a new
ViewState, so each transition can be tested on its own. The registry is
owned separately and only written by SessionRegistry.refresh().

USAGE:
    controller = Controller(gateway)
    await controller.load()
    result = await controller.start("Write report")
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any

from .errors import ClientError, GatewayError, InvalidQueryError
from .models import SessionDetail
from .query import ReportQuery, ViewType, from_date_range, from_quick_pick, normalize
from .registry import SessionRegistry

if TYPE_CHECKING:
    from .gateway import ApiGateway

__all__ = [
    "Outcome",
    "ActionResult",
    "ViewState",
    "Controller",
    "with_error",
    "with_recent",
    "with_detail",
    "with_report",
]

logger = logging.getLogger(__name__)

EMPTY_TITLE = "Empty title"


class Outcome(str, Enum):
    """How an action ended."""

    OK = "ok"
    INVALID = "invalid"
    REJECTED = "rejected"
    NOT_OPEN = "not_open"
    FAILED = "failed"


@dataclass
class ActionResult:
    """
    Result from a controller action.

    Provides a consistent return type for all actions with success/failure
    status, a distinct outcome tag and the error that was recorded, if any.

    Attributes:
        success: Whether the action completed successfully.
        outcome: Outcome tag; REJECTED and NOT_OPEN never reach the network.
        message: Human-readable result message.
        error: ClientError recorded in the view state, or None.
        data: Optional action-specific data.
    """

    success: bool
    outcome: Outcome
    message: str
    error: ClientError | None = None
    data: dict[str, Any] | None = None

    @classmethod
    def ok(cls, message: str, data: dict[str, Any] | None = None) -> ActionResult:
        """Successful result with optional action data."""
        return cls(success=True, outcome=Outcome.OK, message=message, data=data)

    @classmethod
    def failed(cls, outcome: Outcome, error: ClientError) -> ActionResult:
        """Unsuccessful result; the message is the error's user-facing text."""
        return cls(success=False, outcome=outcome, message=error.message, error=error)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary, omitting empty fields.

        Example:
            >>> ActionResult.ok("Started Write report").to_dict()
            {'success': True, 'outcome': 'ok', 'message': 'Started Write report'}
        """
        result: dict[str, Any] = {
            "success": self.success,
            "outcome": self.outcome.value,
            "message": self.message,
        }
        if self.error:
            result["error"] = self.error.to_dict()
        if self.data:
            result["data"] = self.data
        return result


@dataclass(frozen=True)
class ViewState:
    """
    Everything the UI renders besides the registry.

    Attributes:
        recent_titles: Most-recent-first titles for the restart affordance.
        error: The single current error, or None.
        detail: Last fetched session detail, or None.
        report: Last fetched report text, or None.
        report_query: Query that produced report.
    """

    recent_titles: tuple[str, ...] = field(default_factory=tuple)
    error: ClientError | None = None
    detail: SessionDetail | None = None
    report: str | None = None
    report_query: ReportQuery | None = None


# =============================================================================
# Reducers
# =============================================================================


def with_error(state: ViewState, error: ClientError | None) -> ViewState:
    """Overwrite the current error (None clears it)."""
    return replace(state, error=error)


def with_recent(state: ViewState, titles: list[str]) -> ViewState:
    """Replace the recent titles (most recent first)."""
    return replace(state, recent_titles=tuple(titles))


def with_detail(state: ViewState, detail: SessionDetail | None) -> ViewState:
    """Replace the shown session detail (None hides it)."""
    return replace(state, detail=detail)


def with_report(state: ViewState, query: ReportQuery, text: str) -> ViewState:
    """Store report text together with the query that produced it."""
    return replace(state, report=text, report_query=query)


class Controller:
    """
    Reacts to user intents and keeps ViewState and the registry current.

    OPERATIONS:
    - load: Populate registry and recent titles
    - start / finish: Mutating session actions, followed by a reload
    - set_notes: Edit scratch notes of an open session
    - view_detail: Fetch and format the latest session for a title
    - run_report / run_quick_report / run_form_report / run_date_report
    - dismiss_error: Clear the current error

    No client-side mutex: two overlapping finishes may both be sent. The
    loser's failure only lands in the error slot; the registry follows
    the next refresh.
    """

    def __init__(
        self,
        gateway: ApiGateway,
        registry: SessionRegistry | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            gateway: ApiGateway used for every network call.
            registry: Optional SessionRegistry; defaults to a new one
                bound to gateway.
        """
        self.gateway = gateway
        self.registry = registry or SessionRegistry(gateway)
        self.state = ViewState()

    # =========================================================================
    # Helpers
    # =========================================================================

    def _record(self, error: ClientError) -> ClientError:
        """Log error and make it the current error."""
        logger.info(f"Error ({error.kind.value}): {error.message}")
        self.state = with_error(self.state, error)
        return error

    def _fail(self, outcome: Outcome, error: ClientError) -> ActionResult:
        return ActionResult.failed(outcome, self._record(error))

    async def _refresh_recent(self) -> None:
        titles = await self.gateway.fetch_recent()
        self.state = with_recent(self.state, titles)

    # =========================================================================
    # Actions
    # =========================================================================

    async def load(self) -> ActionResult:
        """
        Refresh the registry and recent titles concurrently.

        A failure of either fetch is recorded as the current error; the
        part that succeeded is still applied.

        Returns:
            ActionResult; FAILED if any fetch failed.
        """
        results = await asyncio.gather(
            self.registry.refresh(),
            self._refresh_recent(),
            return_exceptions=True,
        )
        failure: ClientError | None = None
        for outcome in results:
            if isinstance(outcome, GatewayError):
                failure = self._record(outcome.to_client_error())
            elif isinstance(outcome, BaseException):
                raise outcome
        if failure is not None:
            return ActionResult.failed(Outcome.FAILED, failure)
        return ActionResult.ok(f"Loaded {len(self.registry)} open session(s)")

    async def start(self, title: str | None) -> ActionResult:
        """
        Start a new session.

        Empty titles are a validation error. While any session is open
        the start is rejected locally without touching the error slot.

        Args:
            title: Activity title; surrounding whitespace is trimmed.

        Returns:
            ActionResult with outcome OK, INVALID, REJECTED or FAILED.
        """
        clean = (title or "").strip()
        if not clean:
            return self._fail(Outcome.INVALID, ClientError.validation(EMPTY_TITLE))

        # Checked again right before the await below; nothing yields in between
        if self.registry.has_any_open():
            open_titles = ", ".join(self.registry.titles())
            logger.info(f"Start of {clean!r} rejected: already open: {open_titles}")
            return ActionResult(
                success=False,
                outcome=Outcome.REJECTED,
                message=f"A session is already open: {open_titles}",
            )

        try:
            await self.gateway.start_session(clean)
        except GatewayError as e:
            return self._fail(Outcome.FAILED, e.to_client_error())

        logger.info(f"Started session {clean!r}")
        self.state = with_error(self.state, None)
        await self.load()
        return ActionResult.ok(f"Started {clean}", data={"title": clean})

    async def finish(self, title: str) -> ActionResult:
        """
        Finish an open session, sending its scratch notes.

        Args:
            title: Title of an open session.

        Returns:
            ActionResult with outcome OK, NOT_OPEN (no network call) or
            FAILED (session and notes left untouched).
        """
        notes = self.registry.notes_for(title)
        if notes is None:
            return self._fail(Outcome.NOT_OPEN, ClientError.validation(f"Not open: {title}"))

        try:
            await self.gateway.finish_session(title, notes)
        except GatewayError as e:
            return self._fail(Outcome.FAILED, e.to_client_error())

        logger.info(f"Finished session {title!r}")
        self.state = with_error(self.state, None)
        await self.load()
        return ActionResult.ok(f"Finished {title}", data={"title": title, "notes": notes})

    def set_notes(self, title: str, text: str) -> None:
        """Edit the scratch notes of an open session (no-op if not open)."""
        self.registry.set_notes(title, text)

    async def view_detail(self, title: str | None) -> ActionResult:
        """
        Fetch the latest session for title and store its display form.

        A missing session clears the detail. On failure the previous detail
        stays in place.
        """
        clean = (title or "").strip()
        if not clean:
            return self._fail(Outcome.INVALID, ClientError.validation(EMPTY_TITLE))

        try:
            session = await self.gateway.fetch_detail(clean)
        except GatewayError as e:
            return self._fail(Outcome.FAILED, e.to_client_error())

        detail = SessionDetail.from_session(session) if session is not None else None
        self.state = with_detail(self.state, detail)
        if detail is None:
            return ActionResult.ok(f"No session found for {clean}")
        return ActionResult.ok(f"Loaded {clean}", data=detail.to_dict())

    async def run_report(self, query: ReportQuery) -> ActionResult:
        """Fetch the report for an already-normalized query."""
        logger.debug(f"Requesting report {query.to_dict()}")
        try:
            text = await self.gateway.fetch_report(query)
        except GatewayError as e:
            return self._fail(Outcome.FAILED, e.to_client_error())
        self.state = with_report(self.state, query, text)
        return ActionResult.ok("Report loaded", data=query.to_dict())

    async def run_quick_report(
        self, pick: str, view_type: ViewType | str | None = None
    ) -> ActionResult:
        """Report for a named quick pick. Unknown names raise ValueError."""
        return await self.run_report(from_quick_pick(pick, view_type))

    async def run_form_report(
        self,
        offset: Any = None,
        days: Any = None,
        view_type: ViewType | str | None = None,
    ) -> ActionResult:
        """Report from raw offset/day-count input."""
        return await self.run_report(normalize(offset, days, view_type))

    async def run_date_report(
        self,
        start: Any,
        end: Any,
        view_type: ViewType | str | None = None,
    ) -> ActionResult:
        """Report for an inclusive date range; bad dates are validation errors."""
        try:
            query = from_date_range(start, end, view_type)
        except InvalidQueryError as e:
            return self._fail(Outcome.INVALID, e.to_client_error())
        return await self.run_report(query)

    def dismiss_error(self) -> None:
        """Clear the current error (user dismissed it)."""
        self.state = with_error(self.state, None)
