"""
Sentry issues endpoint client with HTTP status branching
"""

import json
import logging
from typing import Any

import aiohttp

from sentry_monitor.models.config import MonitorConfig
from sentry_monitor.models.errors import (
    AuthError,
    GenericApiError,
    NotFoundError,
    ParseError,
    RateLimitError,
    TransportError,
)

logger = logging.getLogger(__name__)


class SentryFetcher:
    """Issues one authenticated GET against the organization issues endpoint"""

    def __init__(
        self, config: MonitorConfig, session: aiohttp.ClientSession | None = None
    ):
        self.config = config
        self.session = session
        self.base_url = f"https://{config.api_host}/api/0"
        self.headers = {
            "Authorization": f"Bearer {config.auth_token}",
            "Content-Type": "application/json",
        }
        self.timeout = aiohttp.ClientTimeout(total=config.request_timeout_s)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/organizations/{self.config.org_slug}/issues/"

    def build_params(self) -> dict[str, str]:
        sort = self.config.api_sort()
        if not sort:
            logger.warning(
                f"Unknown sortBy '{self.config.sort_by}', using the API default order"
            )
        return {
            "query": "is:unresolved",
            "sort": sort,
            "statsPeriod": self.config.time_range or "24h",
        }

    async def fetch_issues(self) -> list[Any]:
        """Fetch unresolved issues, raising a SentryMonitorError on failure"""
        params = self.build_params()
        logger.debug(f"Query params: {params}")
        logger.info("Fetching issues from Sentry...")

        try:
            status, reason, body = await self._make_request(params)
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.error(f"Network error: {e!r}")
            raise TransportError(str(e) or type(e).__name__) from e

        return self._handle_response(status, reason, body)

    async def _make_request(
        self, params: dict[str, str]
    ) -> tuple[int, str | None, bytes]:
        if self.session is not None:
            return await self._get(self.session, params)

        async with aiohttp.ClientSession() as session:
            return await self._get(session, params)

    async def _get(
        self, session: aiohttp.ClientSession, params: dict[str, str]
    ) -> tuple[int, str | None, bytes]:
        async with session.get(
            self.endpoint, headers=self.headers, params=params, timeout=self.timeout
        ) as response:
            body = await response.read()
            return response.status, response.reason, body

    def _handle_response(
        self, status: int, reason: str | None, body: bytes
    ) -> list[Any]:
        if status == 200:
            try:
                data = json.loads(body.decode("utf-8"))
            except (UnicodeDecodeError, json.JSONDecodeError) as e:
                logger.error(f"Error parsing Sentry response: {e}")
                raise ParseError() from e
            if not isinstance(data, list):
                logger.error("Expected array from Sentry API")
                raise ParseError()
            return data

        if status == 401:
            logger.error("Unauthorized: invalid auth token")
            raise AuthError()
        if status == 404:
            logger.error("Not found: invalid organization or project")
            raise NotFoundError()
        if status == 429:
            logger.error("Rate limit exceeded")
            raise RateLimitError()

        logger.error(f"Sentry API error: {status}")
        raise GenericApiError(status, reason)
