"""
Configuration for the clocking client.

PURPOSE: Centralized configuration constants and runtime settings.
AI CONTEXT: All configurable values live here - modify this file to change behavior.

CONFIGURATION CATEGORIES:
- Remote service: Base URL, endpoint templates, request timeout
- Display: Timestamp format used for local rendering
- Reports: Default view type (values are defined by query.ViewType)
- Dashboard: Bind address for the local web UI

ENVIRONMENT VARIABLES:
- CLOCKING_SERVER_URL: Root URL of the clocking service (default: http://127.0.0.1:8000)
- CLOCKING_TIMEOUT: Request timeout in seconds (default: unset, no client timeout)

USAGE:
    from clocking_client.config import Config
    base_url = Config.get_server_url()
    fmt = Config.TIME_FORMAT
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import ClassVar

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Config:
    """
    Immutable configuration container for the clocking client.

    DESIGN: Frozen dataclass ensures configuration immutability at runtime.
    All values are class-level constants - no instance creation needed.

    ENDPOINTS (relative to the service root):
        /api/recent/                     GET   recent titles
        /api/unfinished/                 GET   open sessions
        /api/start/{title}               POST  open a session
        /api/finish/{title}              POST  close a session (body = notes)
        /api/latest/{title}              GET   latest session for title
        /api/report/{offset}/{days}      GET   rendered report text
    """

    # =========================================================================
    # REMOTE SERVICE
    # =========================================================================
    DEFAULT_SERVER_URL: ClassVar[str] = "http://127.0.0.1:8000"

    RECENT_PATH: ClassVar[str] = "/api/recent/"
    UNFINISHED_PATH: ClassVar[str] = "/api/unfinished/"
    START_PATH: ClassVar[str] = "/api/start/{title}"
    FINISH_PATH: ClassVar[str] = "/api/finish/{title}"
    LATEST_PATH: ClassVar[str] = "/api/latest/{title}"
    REPORT_PATH: ClassVar[str] = "/api/report/{offset}/{days}"

    UNBOUNDED_DAYS: ClassVar[str] = "null"
    """Path literal the service reads as "from offset through now"."""

    # =========================================================================
    # DISPLAY
    # =========================================================================
    TIME_FORMAT: ClassVar[str] = "%Y-%m-%d %a %H:%M"

    # =========================================================================
    # REPORTS
    # =========================================================================
    DEFAULT_VIEW_TYPE: ClassVar[str] = "daily_detail"

    # =========================================================================
    # DASHBOARD
    # =========================================================================
    DASHBOARD_HOST: ClassVar[str] = "127.0.0.1"
    DASHBOARD_PORT: ClassVar[int] = 8765

    # =========================================================================
    # ENVIRONMENT-BASED SETTINGS (runtime configurable)
    # =========================================================================
    _server_url_override: ClassVar[str | None] = None
    _timeout_override: ClassVar[float | None] = None

    @classmethod
    def get_server_url(cls) -> str:
        """
        Get the root URL of the clocking service.

        Priority: test override, then CLOCKING_SERVER_URL, then
        DEFAULT_SERVER_URL. A trailing slash is stripped so endpoint paths
        can be appended directly.

        Returns:
            Base URL string, e.g. 'http://127.0.0.1:8000'.

        Example:
            >>> # With env var: CLOCKING_SERVER_URL=http://tracker.lan:9000/
            >>> Config.get_server_url()
            'http://tracker.lan:9000'
        """
        if cls._server_url_override is not None:
            url = cls._server_url_override
        else:
            url = os.environ.get("CLOCKING_SERVER_URL", "") or cls.DEFAULT_SERVER_URL
        return url.rstrip("/")

    @classmethod
    def get_timeout(cls) -> float | None:
        """
        Get the per-request timeout in seconds.

        The client enforces no timeout by default: a hung request ends when
        the network stack gives up. CLOCKING_TIMEOUT sets an explicit limit.
        Unparseable or non-positive values are ignored with a warning.

        Returns:
            Timeout in seconds, or None for no client-side timeout.

        Example:
            >>> # With env var: CLOCKING_TIMEOUT=30
            >>> Config.get_timeout()
            30.0
        """
        if cls._timeout_override is not None:
            return cls._timeout_override
        raw = os.environ.get("CLOCKING_TIMEOUT", "").strip()
        if not raw:
            return None
        try:
            value = float(raw)
        except ValueError:
            logger.warning(f"Ignoring invalid CLOCKING_TIMEOUT value: {raw!r}")
            return None
        if value <= 0:
            logger.warning(f"Ignoring non-positive CLOCKING_TIMEOUT value: {raw!r}")
            return None
        return value

    @classmethod
    def set_test_overrides(
        cls,
        server_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """
        Set test overrides for environment-based settings.

        Must be paired with reset_test_overrides() in teardown.

        Args:
            server_url: Override for the service root URL. None to clear.
            timeout: Override for the request timeout. None to clear.

        Example:
            >>> Config.set_test_overrides(server_url='http://clocking.test')
            >>> Config.get_server_url()
            'http://clocking.test'
            >>> Config.reset_test_overrides()
        """
        cls._server_url_override = server_url
        cls._timeout_override = timeout

    @classmethod
    def reset_test_overrides(cls) -> None:
        """Reset all test overrides so settings come from the environment again."""
        cls._server_url_override = None
        cls._timeout_override = None
