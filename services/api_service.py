"""
Base REST client for upstream APIs
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from core.errors import ExternalApiError

logger = logging.getLogger('archon.services.api_service')


class ApiService:
    """
    Thin JSON REST client over a shared aiohttp session.

    The session is created on first use so the service can be constructed
    before an event loop is running.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        auth_header: str = "Authorization",
        timeout: int = 10
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.headers: Dict[str, str] = {'Accept': 'application/json'}
        if api_key:
            self.headers[auth_header] = f"Bearer {api_key}" if auth_header == "Authorization" else api_key
        self.session: Optional[aiohttp.ClientSession] = None

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(timeout=self.timeout, headers=self.headers)
        return self.session

    async def get(self, endpoint: str) -> Any:
        return await self._request('GET', endpoint)

    async def post(self, endpoint: str, data: Any) -> Any:
        return await self._request('POST', endpoint, json=data)

    async def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        url = self._url(endpoint)
        try:
            async with self._get_session().request(method, url, **kwargs) as response:
                if response.status >= 400:
                    body = await response.text()
                    raise ExternalApiError(
                        f"{method} {url} failed with status {response.status}: {body[:200]}",
                        status=response.status
                    )
                if response.status == 204:
                    return None
                return await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise ExternalApiError(f"{method} {url} failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise ExternalApiError(f"{method} {url} timed out") from e

    async def close(self) -> None:
        if self.session and not self.session.closed:
            await self.session.close()
            logger.debug(f"Closed HTTP session for {self.base_url}")
