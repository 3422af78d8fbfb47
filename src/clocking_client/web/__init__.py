"""
Web dashboard module for the clocking client.

PURPOSE: FastAPI-based local UI over the controller state.

FEATURES:
- Open sessions with editable scratch notes and finish buttons
- Start form plus one-click restart of recent titles
- Latest-session detail with open/closed styling
- Report runner (quick picks, offset/days, date range)
- JSON state endpoint for programmatic access

USAGE:
    # Via CLI
    clocking-client dashboard

    # Programmatically
    from clocking_client.web import create_app
    app = create_app()
    # Run with uvicorn
"""

from .app import create_app, run_dashboard

__all__ = ["create_app", "run_dashboard"]
