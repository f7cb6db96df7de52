"""
HTTP session shared by the PXWEB and SSE clients.

Wraps a lazily created httpx.AsyncClient with per-call timeouts, a bounded
retry on transient status codes, and translation of every failure into the
gateway error taxonomy.
"""

import asyncio
import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, Optional

import httpx

import config
from errors import NoRecordsFoundError, RateLimitedError, UpstreamError
from utils import RETRYABLE_STATUS_CODES, is_no_records_response, truncate

logger = logging.getLogger(__name__)


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """
    Parse a Retry-After header.

    Accepts delta-seconds or an HTTP-date; returns seconds to wait, or None
    when the header is absent or unreadable.
    """
    if not value:
        return None
    value = value.strip()
    try:
        return max(0.0, float(value))
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())


class UpstreamSession:
    """HTTP session for one upstream API."""

    def __init__(self,
                 name: str,
                 max_retries: Optional[int] = None,
                 request_delay: Optional[float] = None,
                 max_retry_delay: Optional[float] = None):
        self.name = name
        self.max_retries = config.MAX_RETRIES if max_retries is None else max_retries
        self.request_delay = config.REQUEST_DELAY if request_delay is None else request_delay
        self.max_retry_delay = config.MAX_RETRY_DELAY if max_retry_delay is None else max_retry_delay
        self.session = None

    async def _get_session(self) -> httpx.AsyncClient:
        """Get or create HTTP session."""
        if self.session is None:
            self.session = httpx.AsyncClient(timeout=config.METADATA_TIMEOUT, follow_redirects=True)
        return self.session

    async def close(self):
        """Close HTTP session."""
        if self.session:
            await self.session.aclose()
            self.session = None

    def _retry_delay(self, response: httpx.Response) -> float:
        retry_after = parse_retry_after(response.headers.get("Retry-After"))
        if retry_after is None:
            return self.request_delay
        return min(retry_after, self.max_retry_delay)

    def _error_for(self, response: httpx.Response, url: str) -> UpstreamError:
        status = response.status_code
        body = response.text
        if status == 429:
            return RateLimitedError(
                f"{self.name} rate limit exceeded (HTTP 429)",
                url=url,
                retry_after=parse_retry_after(response.headers.get("Retry-After")),
            )
        return UpstreamError(f"{self.name} returned HTTP {status}: {truncate(body)}", status_code=status, url=url)

    async def request(self,
                      method: str,
                      url: str,
                      *,
                      timeout: float,
                      headers: Optional[Dict[str, str]] = None,
                      json: Optional[Any] = None,
                      no_records: bool = False) -> httpx.Response:
        """
        Send a request, retrying only whitelisted transient statuses.

        Raises:
            NoRecordsFoundError: with no_records set, a 404 whose body says the
                query matched nothing
            RateLimitedError: HTTP 429 after retries are exhausted
            UpstreamError: any other non-success status, timeout or transport error
        """
        session = await self._get_session()
        attempt = 0

        while True:
            try:
                response = await session.request(method, url, headers=headers, json=json, timeout=timeout)
            except httpx.TimeoutException as e:
                logger.error(f"{self.name} request timed out after {timeout}s: {url}")
                raise UpstreamError(f"{self.name} request timed out after {timeout}s", url=url) from e
            except httpx.RequestError as e:
                logger.error(f"{self.name} request failed: {url}: {e}")
                raise UpstreamError(f"{self.name} request failed: {e}", url=url) from e

            if response.is_success:
                return response

            if no_records and is_no_records_response(response.status_code, response.text):
                raise NoRecordsFoundError("No records found for the specified query")

            if response.status_code in RETRYABLE_STATUS_CODES and attempt < self.max_retries:
                attempt += 1
                delay = self._retry_delay(response)
                logger.warning(
                    f"{self.name} returned HTTP {response.status_code} for {url}; "
                    f"retry {attempt}/{self.max_retries} in {delay:.1f}s"
                )
                await asyncio.sleep(delay)
                continue

            logger.error(f"{self.name} request failed with HTTP {response.status_code}: {url}")
            raise self._error_for(response, url)

    async def get(self,
                  url: str,
                  *,
                  timeout: float,
                  headers: Optional[Dict[str, str]] = None,
                  no_records: bool = False) -> httpx.Response:
        return await self.request("GET", url, timeout=timeout, headers=headers, no_records=no_records)

    async def post(self,
                   url: str,
                   *,
                   timeout: float,
                   json: Any,
                   headers: Optional[Dict[str, str]] = None) -> httpx.Response:
        return await self.request("POST", url, timeout=timeout, headers=headers, json=json)
