"""
Presenters for the clocking dashboard and CLI.

PURPOSE: Testable layer between controller state and UI.
AI CONTEXT: Pure data transformation - no I/O, no rendering.

DESIGN PRINCIPLES:
1. Presenters read controller state, return view models (dataclasses)
2. No dependencies on a specific UI (web page and CLI share them)
3. Time is injectable so elapsed durations are testable

USAGE:
    presenter = DashboardPresenter(controller)
    overview = presenter.get_overview()
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime, tzinfo
from typing import TYPE_CHECKING, Any

from .clock import elapsed_minutes, format_duration, format_local

if TYPE_CHECKING:
    from .controller import Controller
    from .models import SessionDetail

__all__ = [
    "OngoingViewModel",
    "DashboardOverview",
    "DashboardPresenter",
]


@dataclass
class OngoingViewModel:
    """View model for one open session."""

    title: str
    started_display: str
    elapsed_minutes: int
    notes: str

    @property
    def elapsed_display(self) -> str:
        """
        Elapsed time as 'H:MM', or 'D:HH:MM' after a day.

        Example:
            >>> OngoingViewModel("A", "...", 125, "").elapsed_display
            '2:05'
        """
        return format_duration(self.elapsed_minutes)


@dataclass
class DashboardOverview:
    """Complete state for one render of the dashboard."""

    ongoing: list[OngoingViewModel] = field(default_factory=list)
    recent_titles: list[str] = field(default_factory=list)
    can_start: bool = True
    error_kind: str | None = None
    error_message: str | None = None
    detail: SessionDetail | None = None
    report: str | None = None
    report_query: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to a JSON-serializable dictionary for /api/state.

        Elapsed display strings are included alongside the raw minutes.
        """
        result = asdict(self)
        for item, model in zip(result["ongoing"], self.ongoing, strict=True):
            item["elapsed_display"] = model.elapsed_display
        result["detail"] = self.detail.to_dict() if self.detail is not None else None
        return result


class DashboardPresenter:
    """
    Presenter for the dashboard page and CLI status output.

    Transforms the controller's registry and ViewState into a
    DashboardOverview.
    """

    def __init__(
        self,
        controller: Controller,
        now: datetime | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        """
        Initialize presenter.

        Args:
            controller: Source of registry and view state.
            now: Reference time for elapsed durations; defaults to the
                current time at each call.
            tz: Display timezone; defaults to local time.
        """
        self.controller = controller
        self._now = now
        self._tz = tz

    def get_ongoing(self) -> list[OngoingViewModel]:
        """View models for open sessions in registry order."""
        now = self._now or datetime.now(UTC)
        return [
            OngoingViewModel(
                title=entry.session.title,
                started_display=format_local(entry.session.start, tz=self._tz),
                elapsed_minutes=elapsed_minutes(entry.session.start, now),
                notes=entry.notes,
            )
            for entry in self.controller.registry.entries()
        ]

    def get_overview(self) -> DashboardOverview:
        """
        Build the complete dashboard overview.

        Returns:
            DashboardOverview; can_start is False whenever a session is open.
        """
        state = self.controller.state
        error = state.error
        return DashboardOverview(
            ongoing=self.get_ongoing(),
            recent_titles=list(state.recent_titles),
            can_start=not self.controller.registry.has_any_open(),
            error_kind=error.kind.value if error is not None else None,
            error_message=error.message if error is not None else None,
            detail=state.detail,
            report=state.report,
            report_query=state.report_query.to_dict() if state.report_query else None,
        )
