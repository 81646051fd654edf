# src/sources/http.py — v1
"""HTTP transport for content sources, with conditional revalidation.

A conditional fetch replays stored validators as ``If-None-Match`` /
``If-Modified-Since``. A 304 yields ``data=None, not_modified=True``; any
status other than 2xx or 304 raises ``HttpStatusError``.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import BaseModel, Field

from swiftpatterns.core.models import HttpMeta

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_USER_AGENT = "swift-patterns/1.0 (RSS Reader)"


class SourceFetchError(Exception):
    """An upstream request failed (transport error or bad status)."""

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(f"{url}: {message}")


class HttpStatusError(SourceFetchError):
    """Upstream answered with a status other than 2xx/304."""

    def __init__(self, url: str, status_code: int):
        self.status_code = status_code
        super().__init__(url, f"HTTP {status_code}")


class ConditionalResponse(BaseModel):
    """Result of a conditional GET."""

    data: str | None = None
    http_meta: HttpMeta = Field(default_factory=HttpMeta)
    not_modified: bool = False


def build_headers(user_agent: str, auth_token: str | None = None) -> dict[str, str]:
    """Request headers with an optional bearer token."""
    headers = {"User-Agent": user_agent}
    if auth_token:
        headers["Authorization"] = f"Bearer {auth_token}"
    return headers


def conditional_headers(http_meta: HttpMeta | None) -> dict[str, str]:
    """Revalidation headers for previously stored validators."""
    headers: dict[str, str] = {}
    if http_meta is None:
        return headers
    if http_meta.etag:
        headers["If-None-Match"] = http_meta.etag
    if http_meta.last_modified:
        headers["If-Modified-Since"] = http_meta.last_modified
    return headers


class HttpClient:
    """Thin async HTTP client shared by all sources.

    Args:
        timeout: Per-request timeout in seconds.
        user_agent: User-Agent header sent on every request.
        client: Pre-built ``httpx.AsyncClient`` (tests pass a MockTransport
            client). When omitted one is created and owned by this instance.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout, follow_redirects=True
        )
        self._user_agent = user_agent

    async def fetch_conditional(
        self, url: str, http_meta: HttpMeta | None = None
    ) -> ConditionalResponse:
        """GET ``url`` replaying ``http_meta`` validators when present."""
        headers = build_headers(self._user_agent)
        headers.update(conditional_headers(http_meta))
        response = await self._get(url, headers)

        if response.status_code == 304:
            logger.debug("Not modified: %s", url)
            return ConditionalResponse(
                data=None, http_meta=http_meta or HttpMeta(), not_modified=True
            )

        return ConditionalResponse(
            data=response.text,
            http_meta=HttpMeta(
                etag=response.headers.get("etag"),
                last_modified=response.headers.get("last-modified"),
            ),
            not_modified=False,
        )

    async def fetch_text(self, url: str) -> str:
        """Unconditional GET returning the body text."""
        response = await self._get(url, build_headers(self._user_agent))
        if response.status_code == 304:
            raise HttpStatusError(url, 304)
        return response.text

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get(self, url: str, headers: dict[str, str]) -> httpx.Response:
        try:
            response = await self._client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise SourceFetchError(url, str(exc) or type(exc).__name__) from exc

        if response.status_code != 304 and not response.is_success:
            raise HttpStatusError(url, response.status_code)
        return response
