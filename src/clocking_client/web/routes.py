"""
FastAPI routes for the clocking dashboard.

PURPOSE: Thin route handlers that delegate to the controller and presenter.
AI CONTEXT: Routes should be simple - state logic lives in controller.py.

ROUTE STRUCTURE:
- /               : Dashboard page (full HTML)
- /api/state      : JSON overview for programmatic access
- /actions/*      : Form posts; each runs one controller action, then
                    redirects back to / (303 See Other)
"""

from __future__ import annotations

from html import escape
from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from ..controller import Controller
from ..presenters import DashboardPresenter
from ..query import QUICK_PICKS, ViewType

if TYPE_CHECKING:
    from ..presenters import DashboardOverview

__all__ = ["router", "get_controller", "get_presenter"]

router = APIRouter()

_DASHBOARD_CSS = """
body { font-family: system-ui, sans-serif; margin: 1.5rem; max-width: 60rem; }
section { border: 1px solid #cbd5e1; border-radius: 0.4rem; padding: 0.75rem 1rem; margin-bottom: 1rem; }
h2 { font-size: 1rem; margin: 0 0 0.5rem; color: #475569; }
.error { background: #fee2e2; border-color: #ef4444; }
.open { color: #2563eb; }
.closed { color: #16a34a; }
pre { background: #f1f5f9; padding: 0.75rem; overflow-x: auto; }
textarea { width: 100%; min-height: 3rem; }
form.inline { display: inline; }
"""

# =============================================================================
# Dependencies
# =============================================================================


def get_controller(request: Request) -> Controller:
    """Controller created by the app lifespan (or injected by create_app)."""
    controller: Controller = request.app.state.controller
    return controller


def get_presenter(
    controller: Annotated[Controller, Depends(get_controller)],
) -> DashboardPresenter:
    """Presenter over the app controller, built per request."""
    return DashboardPresenter(controller)


def _back_to_dashboard() -> RedirectResponse:
    return RedirectResponse(url="/", status_code=303)


# =============================================================================
# Pages
# =============================================================================


@router.get("/", response_class=HTMLResponse)
async def dashboard_page(
    presenter: Annotated[DashboardPresenter, Depends(get_presenter)],
) -> HTMLResponse:
    """Render the dashboard: error, open sessions, start form, detail, report."""
    html = _render_dashboard_html(presenter.get_overview())
    return HTMLResponse(content=html, media_type="text/html; charset=utf-8")


@router.get("/api/state")
async def api_state(
    presenter: Annotated[DashboardPresenter, Depends(get_presenter)],
) -> JSONResponse:
    """Current overview as JSON."""
    return JSONResponse(presenter.get_overview().to_dict())


# =============================================================================
# Actions
# =============================================================================


@router.post("/actions/refresh")
async def refresh_action(
    controller: Annotated[Controller, Depends(get_controller)],
) -> RedirectResponse:
    """Reload open sessions and recent titles from the service."""
    await controller.load()
    return _back_to_dashboard()


@router.post("/actions/start")
async def start_action(
    controller: Annotated[Controller, Depends(get_controller)],
    title: Annotated[str, Form()] = "",
) -> RedirectResponse:
    """Start a session; an open session or empty title is refused."""
    await controller.start(title)
    return _back_to_dashboard()


@router.post("/actions/finish")
async def finish_action(
    controller: Annotated[Controller, Depends(get_controller)],
    title: Annotated[str, Form()],
    notes: Annotated[str | None, Form()] = None,
) -> RedirectResponse:
    """Finish a session; notes typed in the same form are saved first."""
    if notes is not None:
        controller.set_notes(title, notes)
    await controller.finish(title)
    return _back_to_dashboard()


@router.post("/actions/notes")
async def notes_action(
    controller: Annotated[Controller, Depends(get_controller)],
    title: Annotated[str, Form()],
    notes: Annotated[str, Form()] = "",
) -> RedirectResponse:
    """Save scratch notes of an open session."""
    controller.set_notes(title, notes)
    return _back_to_dashboard()


@router.post("/actions/detail")
async def detail_action(
    controller: Annotated[Controller, Depends(get_controller)],
    title: Annotated[str, Form()] = "",
) -> RedirectResponse:
    """Show the latest session for a title."""
    await controller.view_detail(title)
    return _back_to_dashboard()


@router.post("/actions/report")
async def report_action(
    controller: Annotated[Controller, Depends(get_controller)],
    view_type: Annotated[ViewType, Form()] = ViewType.DAILY_DETAIL,
    pick: Annotated[str, Form()] = "",
    offset: Annotated[str, Form()] = "",
    days: Annotated[str, Form()] = "",
    start_date: Annotated[str, Form()] = "",
    end_date: Annotated[str, Form()] = "",
) -> RedirectResponse:
    """
    Run a report from whichever input the form carried.

    Priority: quick pick, then date range (either date filled), then raw
    offset/days fields.
    """
    if pick in QUICK_PICKS:
        await controller.run_quick_report(pick, view_type)
    elif start_date or end_date:
        await controller.run_date_report(start_date, end_date, view_type)
    else:
        await controller.run_form_report(offset, days, view_type)
    return _back_to_dashboard()


@router.post("/actions/dismiss")
async def dismiss_action(
    controller: Annotated[Controller, Depends(get_controller)],
) -> RedirectResponse:
    """Clear the current error."""
    controller.dismiss_error()
    return _back_to_dashboard()


# =============================================================================
# HTML Rendering
# =============================================================================


def _render_error(overview: DashboardOverview) -> str:
    if overview.error_message is None:
        return ""
    kind = escape(overview.error_kind or "")
    return f"""<section class="error">
        <strong>Error ({kind}):</strong> {escape(overview.error_message)}
        <form class="inline" method="post" action="/actions/dismiss"><button>Dismiss</button></form>
    </section>"""


def _render_ongoing(overview: DashboardOverview) -> str:
    if not overview.ongoing:
        return '<section><h2>Ongoing</h2><p>No open sessions.</p></section>'
    items = []
    for item in overview.ongoing:
        title = escape(item.title, quote=True)
        items.append(f"""<li>
            <strong class="open">{escape(item.title)}</strong>
            started {escape(item.started_display)} ({item.elapsed_display})
            <form method="post" action="/actions/finish">
                <input type="hidden" name="title" value="{title}">
                <textarea name="notes">{escape(item.notes)}</textarea>
                <button formaction="/actions/notes">Save notes</button>
                <button>Finish</button>
            </form>
        </li>""")
    return f'<section><h2>Ongoing</h2><ul>{"".join(items)}</ul></section>'


def _render_start(overview: DashboardOverview) -> str:
    disabled = "" if overview.can_start else " disabled"
    recent = []
    for title in overview.recent_titles:
        value = escape(title, quote=True)
        recent.append(f"""<li>{escape(title)}
            <form class="inline" method="post" action="/actions/start">
                <input type="hidden" name="title" value="{value}"><button{disabled}>Start</button>
            </form>
            <form class="inline" method="post" action="/actions/detail">
                <input type="hidden" name="title" value="{value}"><button>Detail</button>
            </form>
        </li>""")
    recent_html = "".join(recent)
    return f"""<section><h2>Start</h2>
        <form method="post" action="/actions/start">
            <input name="title" placeholder="Activity title"><button{disabled}>Start</button>
        </form>
        <ul>{recent_html}</ul>
    </section>"""


def _render_detail(overview: DashboardOverview) -> str:
    detail = overview.detail
    if detail is None:
        return ""
    if detail.end is None:
        span = f'<span class="open">{escape(detail.start)} ~ (ongoing)</span>'
    else:
        span = f'<span class="closed">{escape(detail.start)} ~ {escape(detail.end)}</span>'
    return f"""<section><h2>Latest: {escape(detail.title)}</h2>
        <p>{span}</p><pre>{escape(detail.notes)}</pre>
    </section>"""


def _render_report(overview: DashboardOverview) -> str:
    picks = "".join(
        f'<button name="pick" value="{name}">{name.replace("_", " ")}</button>'
        for name in QUICK_PICKS
    )
    views = "".join(f'<option value="{v.value}">{v.value}</option>' for v in ViewType)
    report = f"<pre>{escape(overview.report)}</pre>" if overview.report is not None else ""
    return f"""<section><h2>Report</h2>
        <form method="post" action="/actions/report">
            <select name="view_type">{views}</select> {picks}<br>
            Offset <input name="offset" size="4"> Days <input name="days" size="4">
            or <input type="date" name="start_date"> to <input type="date" name="end_date">
            <button>Run</button>
        </form>
        {report}
    </section>"""


def _render_dashboard_html(overview: DashboardOverview) -> str:
    """Render the full dashboard page."""
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Clocking</title>
    <style>{_DASHBOARD_CSS}</style>
</head>
<body>
    <h1>Clocking</h1>
    <form method="post" action="/actions/refresh"><button>Refresh</button></form>
    {_render_error(overview)}
    {_render_ongoing(overview)}
    {_render_start(overview)}
    {_render_detail(overview)}
    {_render_report(overview)}
</body>
</html>"""
