import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional

import aiohttp
from yarl import URL

from cnstrc_client.exceptions import TransportError

logger = logging.getLogger(__name__)

Fetch = Callable[[str, Dict[str, Any]], Awaitable[Any]]


@dataclass(frozen=True)
class TransportResponse:
    status: int
    reason: str = ''
    url: str = ''
    text: str = ''
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Parse the body, an empty body parses to None"""
        if not self.text.strip():
            return None
        return json.loads(self.text)


async def aiohttp_fetch(url: str, options: Optional[Dict[str, Any]] = None) -> TransportResponse:
    """Perform a single request with a short-lived aiohttp session

    `options` holds method, headers and body. Any coroutine with the same
    signature can replace this one through the `fetch` option.
    """
    options = options or {}
    method = options.get('method') or 'GET'
    headers = options.get('headers') or {}
    body = options.get('body')

    try:
        async with aiohttp.ClientSession() as session:
            async with session.request(
                method=method,
                url=URL(url, encoded=True),
                headers=headers,
                data=body
            ) as response:
                text = await response.text()
                return TransportResponse(
                    status=response.status,
                    reason=response.reason or '',
                    url=str(response.url),
                    text=text,
                    headers=dict(response.headers)
                )
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.error(f"Transport failure for {method} {url.split('?')[0]}: {e}")
        raise TransportError(f"Request failed: {str(e) or type(e).__name__}") from e
