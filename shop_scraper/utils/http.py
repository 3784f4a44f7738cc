from __future__ import annotations

import asyncio
from typing import Optional
from aiohttp import ClientSession, ClientTimeout
import aiohttp
import logging

from ..errors import NavigationError

logger = logging.getLogger(__name__)


async def fetch_text(
    session: ClientSession,
    url: str,
    *,
    timeout: float = 30.0,
    user_agent: Optional[str] = None,
) -> tuple[str, str]:
    """
    Fetch a URL and return ``(final_url, body_text)``.
    Raises NavigationError on any client error or HTTP status >= 400; no retries.
    """
    headers = {}
    if user_agent:
        headers["User-Agent"] = user_agent

    try:
        async with session.get(url, headers=headers, timeout=ClientTimeout(total=timeout)) as resp:
            if resp.status >= 400:
                raise NavigationError(url, f"HTTP {resp.status}")
            return str(resp.url), await resp.text()
    except NavigationError:
        raise
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        logger.debug("fetch_text failed for %s: %r", url, exc)
        raise NavigationError(url, repr(exc)) from exc


def create_session(limit: int = 0) -> ClientSession:
    """
    Create a shared aiohttp ClientSession.
    """
    # Note: caller is responsible for closing the session (await session.close()).
    connector = aiohttp.TCPConnector(limit=limit)  # 0 = unlimited; concurrency managed by the session pool
    return aiohttp.ClientSession(connector=connector)
