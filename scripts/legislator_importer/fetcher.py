"""Retrying HTTP GET against the Congress.gov API."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

import httpx
from tenacity import AsyncRetrying, RetryError, retry_if_exception_type, stop_after_attempt

from .config import RetryPolicy
from .exceptions import FetchError

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def redact_url(url: httpx.URL | str) -> str:
    """Mask the api_key query parameter so URLs are safe to log."""
    url = httpx.URL(str(url))
    if "api_key" not in url.params:
        return str(url)
    return str(url.copy_set_param("api_key", "***"))


class RetryingFetcher:
    """Performs one logical GET with bounded retries and full-jitter backoff."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        policy: RetryPolicy,
        *,
        api_key: str,
        user_agent: str,
        sleep: Sleep = asyncio.sleep,
        log: logging.Logger | None = None,
    ) -> None:
        self.client = client
        self.policy = policy
        self.headers = {
            "Accept": "application/json",
            "User-Agent": user_agent,
            "X-API-Key": api_key,
        }
        self._sleep = sleep
        self.log = log or logger

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.policy.max_attempts),
            wait=self.policy.wait_strategy(),
            retry=retry_if_exception_type(httpx.HTTPError),
            sleep=self._sleep,
        )

    async def _get_once(self, url: httpx.URL | str, safe_url: str, attempt: int) -> httpx.Response:
        context = {"url": safe_url, "attempt": attempt}
        started = time.monotonic()
        try:
            response = await self.client.get(
                url, headers=self.headers, timeout=httpx.Timeout(self.policy.request_timeout)
            )
        except httpx.HTTPError as e:
            self.log.warning(
                f"Attempt {attempt} for {safe_url} failed: {type(e).__name__}: {e}",
                extra=context,
            )
            raise

        elapsed = time.monotonic() - started
        if not response.is_success:
            self.log.warning(
                f"Attempt {attempt} for {safe_url} returned {response.status_code} "
                f"({elapsed:.2f}s)",
                extra={**context, "status_code": response.status_code},
            )
            raise httpx.HTTPStatusError(
                f"HTTP error! status: {response.status_code}, body: {response.text}",
                request=response.request,
                response=response,
            )

        self.log.info(
            f"Fetched {safe_url} on attempt {attempt} ({elapsed:.2f}s)",
            extra={**context, "status_code": response.status_code},
        )
        return response

    async def fetch(self, url: httpx.URL | str) -> httpx.Response:
        """
        GET a URL, retrying transport errors, timeouts and non-2xx responses.

        Args:
            url: Absolute URL to request

        Returns:
            The first successful (2xx) response

        Raises:
            FetchError: After policy.max_attempts failed attempts
        """
        safe_url = redact_url(url)
        try:
            async for attempt in self._retrying():
                with attempt:
                    response = await self._get_once(
                        url, safe_url, attempt.retry_state.attempt_number
                    )
        except RetryError as e:
            last_error = e.last_attempt.exception()
        else:
            return response

        status_code = None
        body = None
        if isinstance(last_error, httpx.HTTPStatusError):
            status_code = last_error.response.status_code
            body = last_error.response.text

        error = FetchError(
            message=f"Original error: {last_error}",
            url=safe_url,
            attempts=self.policy.max_attempts,
            status_code=status_code,
            body=body,
        )
        self.log.error(
            str(error),
            extra={
                "url": safe_url,
                "attempts": self.policy.max_attempts,
                "status_code": status_code,
            },
        )
        raise error from last_error
