"""Upstream number feed client for the average calculator."""

import json
import time
import requests
from typing import List, Optional
from .categories import Category
from .constants import DEFAULT_FETCH_TIMEOUT_MS, MS_PER_SEC, FETCH_CHUNK_BYTES
from .logging import get_logger
from .window import Number

logger = get_logger(__name__)


class UpstreamError(Exception):
    """Raised when the upstream feed fails for any reason other than a timeout."""
    def __init__(self, message: str, status: Optional[int] = None, url: Optional[str] = None):
        self.status = status
        self.url = url
        self.message = message
        super().__init__(self.message)


class FetchTimedOut(Exception):
    """Internal signal: the fetch deadline passed before the body was complete."""


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class NumberFetcher:
    """Upstream number client with persistent session."""

    def __init__(self, timeout_ms: int = DEFAULT_FETCH_TIMEOUT_MS, session: requests.Session = None):
        """
        Initialize fetcher.

        Args:
            timeout_ms: Default time budget for one fetch, in milliseconds
            session: Optional pre-built session (tests inject a mock here)
        """
        self.timeout_ms = timeout_ms
        self.session = session or requests.Session()
        self.session.headers["Accept"] = "application/json"

    def fetch(self, category: Category, timeout_ms: int = None) -> List[Number]:
        """
        Fetch the current numbers for a category.

        Makes exactly one attempt. The whole exchange (connect, headers and
        body) shares one deadline. Running out of time is not a failure: the
        response is dropped and an empty list comes back so the caller can
        still answer with the unchanged window.

        Args:
            category: Category whose upstream URL is queried
            timeout_ms: Time budget in milliseconds (defaults to the fetcher's)

        Returns:
            Numbers from the response's "numbers" field, or [] if the field is
            missing or the deadline passed

        Raises:
            UpstreamError: On non-2xx status, connection failure, a body that
                is not JSON, or a "numbers" field holding anything but numbers
        """
        timeout_ms = timeout_ms if timeout_ms is not None else self.timeout_ms
        if timeout_ms <= 0:
            raise ValueError(f"Fetch timeout must be positive, got {timeout_ms}")

        try:
            body = self._read_body(category, timeout_ms)
        except FetchTimedOut:
            logger.warning(f"Request to {category.url} timed out after {timeout_ms}ms")
            return []

        try:
            data = json.loads(body)
        except ValueError as e:
            raise UpstreamError(f"Malformed response from {category.url}: {e}", url=category.url) from e

        numbers = data.get("numbers") if isinstance(data, dict) else None
        if not numbers:
            return []
        if not isinstance(numbers, list) or not all(_is_number(n) for n in numbers):
            raise UpstreamError(f"Malformed response from {category.url}: 'numbers' must be a list of numbers",
                                url=category.url)

        logger.debug(f"Fetched {len(numbers)} numbers for category {category.id}")
        return numbers

    def _read_body(self, category: Category, timeout_ms: int) -> bytes:
        """
        Download the response body before the deadline.

        Raises:
            FetchTimedOut: If the deadline passes at any point
            UpstreamError: On connection failure or non-2xx status
        """
        deadline = time.monotonic() + timeout_ms / MS_PER_SEC

        try:
            response = self.session.get(category.url, timeout=timeout_ms / MS_PER_SEC, stream=True)
        except requests.Timeout as e:
            raise FetchTimedOut() from e
        except requests.RequestException as e:
            raise UpstreamError(str(e), url=category.url) from e

        try:
            if not response.ok:
                raise UpstreamError(f"Status: {response.status_code}", status=response.status_code, url=category.url)

            body = bytearray()
            try:
                for chunk in response.iter_content(chunk_size=FETCH_CHUNK_BYTES):
                    if time.monotonic() >= deadline:
                        raise FetchTimedOut()
                    body.extend(chunk)
            except requests.RequestException as e:
                # A stalled body read surfaces as ConnectionError, not Timeout
                if isinstance(e, requests.Timeout) or time.monotonic() >= deadline:
                    raise FetchTimedOut() from e
                raise UpstreamError(str(e), status=response.status_code, url=category.url) from e

            if time.monotonic() >= deadline:
                raise FetchTimedOut()
            return bytes(body)
        finally:
            response.close()

    def close(self) -> None:
        self.session.close()
