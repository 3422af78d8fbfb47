"""
API gateway for the remote clocking service.

PURPOSE: The only component that performs network I/O.
AI CONTEXT: Thin async transport adapter - builds URLs, issues one request,
parses the body or raises a GatewayError. No retries, no caching.

OPERATIONS:
- fetch_recent()                 GET  /api/recent/
- fetch_ongoing()                GET  /api/unfinished/
- start_session(title)           POST /api/start/{title}
- finish_session(title, notes)   POST /api/finish/{title}
- fetch_detail(title)            GET  /api/latest/{title}
- fetch_report(query)            GET  /api/report/{offset}/{days}?view_type=...

FAILURES:
- HttpFailure: non-2xx status
- TransportFailure: request never completed, or body unreadable

USAGE:
    async with ApiGateway("http://127.0.0.1:8000") as gateway:
        sessions = await gateway.fetch_ongoing()
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from .config import Config
from .errors import HttpFailure, TransportFailure
from .models import Session
from .query import ReportQuery

__all__ = ["ApiGateway", "quote_title"]

logger = logging.getLogger(__name__)

_UNSET: Any = object()


def quote_title(title: str) -> str:
    """
    Percent-encode a title as a single path segment.

    '/' is escaped, and titles made only of dots are written as %2E so
    they are not read as "." or ".." path segments.

    Example:
        >>> quote_title("a/b c")
        'a%2Fb%20c'
        >>> quote_title("..")
        '%2E%2E'
    """
    if title and set(title) == {"."}:
        return "%2E" * len(title)
    return quote(title, safe="")


class ApiGateway:
    """
    Async HTTP client for the clocking service endpoints.

    Wraps one httpx.AsyncClient. Every call is a single attempt; failures
    are raised to the caller for display.

    Example:
        >>> gateway = ApiGateway("http://127.0.0.1:8000")
        >>> titles = await gateway.fetch_recent()
        >>> await gateway.aclose()
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = _UNSET,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Create the gateway and its underlying HTTP client.

        Args:
            base_url: Service root. Defaults to Config.get_server_url().
            timeout: Per-request timeout in seconds; None disables it.
                Defaults to Config.get_timeout().
            transport: Optional httpx transport, e.g. httpx.MockTransport
                in tests.
        """
        self.base_url = (base_url or Config.get_server_url()).rstrip("/")
        if timeout is _UNSET:
            timeout = Config.get_timeout()
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> ApiGateway:
        """Enter an async context; the gateway is ready on construction."""
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        """Close the HTTP client on context exit."""
        await self.aclose()

    async def aclose(self) -> None:
        """Release the connection pool."""
        await self._client.aclose()

    # =========================================================================
    # Transport
    # =========================================================================

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        content: str | None = None,
    ) -> httpx.Response:
        """
        Issue one request and map failures onto GatewayError.

        Raises:
            TransportFailure: httpx could not complete the request.
            HttpFailure: The response status is not 2xx.
        """
        logger.debug(f"{method} {self.base_url}{path}")
        headers = {"Content-Type": "text/plain; charset=utf-8"} if content is not None else None
        try:
            response = await self._client.request(
                method, path, params=params, content=content, headers=headers
            )
        except httpx.RequestError as e:
            description = str(e) or type(e).__name__
            logger.warning(f"{method} {path} failed: {description}")
            raise TransportFailure(description) from e

        if not response.is_success:
            logger.warning(f"{method} {path} returned HTTP {response.status_code}")
            raise HttpFailure(response.status_code)
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise TransportFailure(f"Malformed response: {e}") from e

    # =========================================================================
    # Operations
    # =========================================================================

    async def fetch_recent(self) -> list[str]:
        """
        Fetch recently used titles, most recent first.

        Returns:
            List of titles.

        Raises:
            GatewayError: On HTTP or transport failure, or if the body is
                not a JSON array.
        """
        data = self._json(await self._request("GET", Config.RECENT_PATH))
        if not isinstance(data, list):
            raise TransportFailure("Malformed response: recent titles must be a list")
        return [str(title) for title in data]

    async def fetch_ongoing(self) -> list[Session]:
        """
        Fetch the authoritative list of open sessions.

        Returns:
            Sessions in server order.

        Raises:
            GatewayError: On HTTP or transport failure, or malformed entries.
        """
        data = self._json(await self._request("GET", Config.UNFINISHED_PATH))
        if not isinstance(data, list):
            raise TransportFailure("Malformed response: unfinished sessions must be a list")
        try:
            return [Session.from_payload(item) for item in data]
        except ValueError as e:
            raise TransportFailure(f"Malformed response: {e}") from e

    async def start_session(self, title: str) -> None:
        """Open a new session for title."""
        await self._request("POST", Config.START_PATH.format(title=quote_title(title)))

    async def finish_session(self, title: str, notes: str = "") -> None:
        """
        Close the open session for title.

        Args:
            title: Open session title.
            notes: Scratch notes, sent as the plain-text request body.
        """
        await self._request(
            "POST",
            Config.FINISH_PATH.format(title=quote_title(title)),
            content=notes,
        )

    async def fetch_detail(self, title: str) -> Session | None:
        """
        Fetch the most recent session (open or closed) for title.

        Returns:
            Session, or None if the server knows no session for title.

        Raises:
            GatewayError: On HTTP or transport failure, or malformed body.
        """
        data = self._json(
            await self._request("GET", Config.LATEST_PATH.format(title=quote_title(title)))
        )
        if data is None:
            return None
        try:
            return Session.from_payload(data)
        except ValueError as e:
            raise TransportFailure(f"Malformed response: {e}") from e

    async def fetch_report(self, query: ReportQuery) -> str:
        """
        Fetch the pre-rendered report text for a normalized query.

        Args:
            query: Output of the query normalizer; used verbatim.

        Returns:
            Report body as text.
        """
        path = Config.REPORT_PATH.format(offset=query.offset, days=query.days_param)
        response = await self._request("GET", path, params={"view_type": query.view_type.value})
        return response.text
