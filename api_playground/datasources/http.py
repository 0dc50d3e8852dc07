"""HTTP JSON data source."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

import httpx

from ..config.config import FetchConfig

logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """Raised when a URL is rejected or its response is unusable."""


@dataclass
class FetchResult:
    """Outcome of one fetch, successful or not."""

    success: bool
    url: str
    timestamp: str
    data: Any = None
    status: Optional[int] = None
    headers: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None


def validate_url(url: Any, config: FetchConfig) -> str:
    """Check that a URL is a public HTTP(S) address.

    Args:
        url: Candidate URL
        config: Fetch configuration with allowed schemes and blocked hosts

    Returns:
        The URL unchanged

    Raises:
        FetchError: If the URL is rejected
    """
    if not url or not isinstance(url, str):
        raise FetchError("Please provide a valid URL")

    try:
        parsed = urlsplit(url)
        hostname = parsed.hostname
    except ValueError:
        raise FetchError("Invalid URL format")
    if not parsed.scheme or not hostname:
        raise FetchError("Invalid URL format")

    if parsed.scheme.lower() not in config.allowed_schemes:
        raise FetchError("Only HTTP and HTTPS URLs are allowed")

    hostname = hostname.lower()
    for blocked in config.blocked_hosts:
        if hostname.startswith(blocked):
            raise FetchError(
                "Private/localhost URLs are not allowed for security reasons"
            )
    return url


class HttpJsonSource:
    """Fetches JSON documents from public HTTP APIs."""

    def __init__(
        self,
        config: Optional[FetchConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize source.

        Args:
            config: Fetch configuration
            transport: Optional httpx transport (tests use MockTransport)
        """
        self.config = config or FetchConfig()
        self.transport = transport

    def fetch(self, url: str) -> FetchResult:
        """Fetch and decode a JSON document.

        Never raises for fetch problems; failures come back as a
        FetchResult with ``success`` False and a display message.
        """
        try:
            response, data = self._fetch_json(url)
        except FetchError as e:
            logger.error(f"API fetch error for {url}: {e}")
            return FetchResult(
                success=False, url=url, timestamp=_now(), error=str(e)
            )

        logger.info(f"Fetched {url}: HTTP {response.status_code}")
        return FetchResult(
            success=True,
            url=url,
            timestamp=_now(),
            data=data,
            status=response.status_code,
            headers=dict(response.headers),
        )

    def _fetch_json(self, url: str):
        validate_url(url, self.config)
        response = self._get(url)

        if not response.is_success:
            raise FetchError(f"HTTP {response.status_code}: {response.reason_phrase}")

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            raise FetchError("API must return JSON data")

        try:
            data = response.json()
        except ValueError:
            raise FetchError("API returned invalid JSON")

        if data is None:
            raise FetchError("API returned empty or null data")
        return response, data

    def _get(self, url: str) -> httpx.Response:
        headers = {
            "Accept": "application/json",
            "User-Agent": self.config.user_agent,
        }
        try:
            with httpx.Client(
                timeout=self.config.timeout_seconds,
                transport=self.transport,
                follow_redirects=True,
            ) as client:
                logger.debug(f"GET {url}")
                return client.get(url, headers=headers)
        except httpx.TimeoutException:
            raise FetchError(
                f"Request timed out after {self.config.timeout_seconds:g} seconds"
            )
        except httpx.HTTPError as e:
            raise FetchError(f"Request failed: {e}")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
