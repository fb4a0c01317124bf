"""Low-level HTTP transport layer wrapping httpx."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

import httpx

from f1feeds.exceptions import (
    RateLimitedError,
    SourceAPIError,
    SourceConnectionError,
    SourceDecodeError,
    SourceTimeoutError,
)

logger = logging.getLogger(__name__)

USER_AGENT = "f1-standings-bot/1.0"
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 4

# OpenF1 allows ~3 req/s; the first wait is already over a second.
_BACKOFF_BASE = 1.1
_BACKOFF_STEP = 0.9


def backoff_delay(attempt: int) -> float:
    """Seconds to wait before retry number *attempt* (0-based) after a 429."""
    return _BACKOFF_BASE + attempt * _BACKOFF_STEP


def _handle_response(response: httpx.Response) -> Any:
    """Validate response status and return parsed JSON."""
    if response.status_code >= 400:
        raise SourceAPIError(
            status_code=response.status_code,
            message=response.text,
            url=str(response.request.url),
        )
    try:
        return response.json()
    except ValueError as exc:
        raise SourceDecodeError(
            f"Non-JSON response from {response.request.url}: {response.text[:160]}"
        ) from exc


class SyncTransport:
    """Synchronous HTTP transport using httpx.Client.

    HTTP 429 responses are retried with a growing delay up to *max_retries*
    times; every other failure is raised immediately as a typed error.
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.base_url = base_url
        self._max_retries = max_retries
        self._sleep = sleep
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            follow_redirects=True,
        )

    def _send(
        self,
        endpoint: str,
        params: list[tuple[str, str]] | None = None,
        accept: str | None = None,
    ) -> httpx.Response:
        headers = {"Accept": accept} if accept else None
        for attempt in range(self._max_retries + 1):
            try:
                response = self._client.get(endpoint, params=params, headers=headers)
            except httpx.ConnectError as exc:
                raise SourceConnectionError(str(exc)) from exc
            except httpx.TimeoutException as exc:
                raise SourceTimeoutError(str(exc)) from exc
            except httpx.TransportError as exc:
                raise SourceConnectionError(str(exc)) from exc

            if response.status_code != 429:
                return response
            if attempt == self._max_retries:
                break
            wait = backoff_delay(attempt)
            logger.warning(
                "429 from %s, waiting %.1fs (retry %d/%d)",
                response.request.url, wait, attempt + 1, self._max_retries,
            )
            self._sleep(wait)

        raise RateLimitedError(
            status_code=429,
            message="rate limited for too long",
            url=str(response.request.url),
        )

    def get(self, endpoint: str, params: list[tuple[str, str]] | None = None) -> Any:
        """Perform a GET request and return parsed JSON."""
        return _handle_response(self._send(endpoint, params))

    def get_text(self, url: str, accept: str = "text/calendar,*/*") -> str:
        """Perform a GET request and return the body as text."""
        response = self._send(url, accept=accept)
        if response.status_code >= 400:
            raise SourceAPIError(response.status_code, response.text, url=url)
        return response.text

    def get_bytes(self, url: str, accept: str = "image/*,*/*") -> bytes:
        """Perform a GET request and return the raw body."""
        response = self._send(url, accept=accept)
        if response.status_code >= 400:
            raise SourceAPIError(response.status_code, response.text, url=url)
        return response.content

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> SyncTransport:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
