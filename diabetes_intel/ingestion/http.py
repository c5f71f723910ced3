"""Shared aiohttp client for feeds and external APIs."""

from typing import Any, Optional

import aiohttp
import structlog

from ..config.settings import settings

logger = structlog.get_logger()


class HttpClient:
    """Lazily opened aiohttp session; non-2xx responses raise ClientResponseError."""

    def __init__(self, timeout_seconds: int = None, user_agent: str = None):
        self.timeout_seconds = timeout_seconds or settings.fetch_timeout_seconds
        self.user_agent = user_agent or settings.user_agent
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self._get_session()
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                headers={"User-Agent": self.user_agent}
            )
        return self._session

    async def close(self):
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def get_text(self, url: str, params: dict = None) -> str:
        session = await self._get_session()
        async with session.get(url, params=params) as response:
            response.raise_for_status()
            return await response.text()

    async def get_json(self, url: str, params: dict = None) -> Any:
        session = await self._get_session()
        async with session.get(url, params=params) as response:
            response.raise_for_status()
            # Some APIs label JSON as text/plain
            return await response.json(content_type=None)
