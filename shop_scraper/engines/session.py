from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, FrozenSet, Optional, Protocol, Set, TypeVar

from bs4 import BeautifulSoup

from ..utils.parsing import parse_html

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RequestFilter:
    """
    Per-session request policy: only the listed resource types may load.
    Stateless, so one instance can be installed on every session.
    """
    allowed_resource_types: FrozenSet[str] = frozenset({"document"})

    def allows(self, resource_type: str) -> bool:
        return resource_type in self.allowed_resource_types


class PageSession(Protocol):
    """
    One navigable browsing context. Navigation mutates it in place, so a
    session has exactly one owner at a time.
    """

    @property
    def url(self) -> str:
        ...

    async def navigate(self, url: str) -> None:
        """Load ``url``; raise NavigationError if it cannot be reached."""
        ...

    async def evaluate(self, fn: Callable[..., T], *args: Any) -> T:
        """Run ``fn(document, *args)`` against the page currently loaded."""
        ...

    async def set_request_filter(self, request_filter: RequestFilter) -> None:
        ...

    async def close(self) -> None:
        ...


class BrowserHandle(Protocol):
    """
    A launched browser backend. Constructed with the CrawlConfig and scoped
    with ``async with`` so that it is closed exactly once.
    """

    async def __aenter__(self) -> "BrowserHandle":
        ...

    async def __aexit__(self, *exc_info: Any) -> None:
        ...

    async def new_session(self) -> PageSession:
        ...


def evaluate_html(html: str, fn: Callable[..., T], *args: Any) -> T:
    """Shared ``evaluate`` body for backends: parse the page once and hand it to ``fn``."""
    document: BeautifulSoup = parse_html(html)
    return fn(document, *args)


class SessionPool:
    """
    Hands out page sessions from one browser and reclaims them.

    At most ``max_sessions`` sessions are open at once; further acquirers
    wait. The pool borrows the browser, it never closes it.
    """

    def __init__(
        self,
        browser: BrowserHandle,
        *,
        max_sessions: int,
        request_filter: Optional[RequestFilter] = None,
    ) -> None:
        if max_sessions <= 0:
            raise ValueError("max_sessions must be > 0")
        self._browser = browser
        self._filter = request_filter or RequestFilter()
        self._slots = asyncio.Semaphore(max_sessions)
        self._lock = asyncio.Lock()
        self._live: Set[PageSession] = set()
        self._closed = False
        self.max_sessions = max_sessions

    @property
    def in_use(self) -> int:
        return len(self._live)

    async def acquire(self) -> PageSession:
        if self._closed:
            raise RuntimeError("session pool is closed")
        await self._slots.acquire()
        if self._closed:
            # Woken by a slot that close() handed back.
            self._slots.release()
            raise RuntimeError("session pool is closed")
        try:
            session = await self._browser.new_session()
            try:
                await session.set_request_filter(self._filter)
            except BaseException:
                await session.close()
                raise
        except BaseException:
            self._slots.release()
            raise
        async with self._lock:
            self._live.add(session)
        logger.debug("Session acquired (%s/%s in use)", self.in_use, self.max_sessions)
        return session

    async def release(self, session: PageSession) -> None:
        async with self._lock:
            if session not in self._live:
                if self._closed:
                    # Already reclaimed by close().
                    return
                raise RuntimeError("session was not acquired from this pool or was already released")
            self._live.discard(session)
        try:
            await session.close()
        finally:
            self._slots.release()
        logger.debug("Session released (%s/%s in use)", self.in_use, self.max_sessions)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[PageSession]:
        session = await self.acquire()
        try:
            yield session
        finally:
            await self.release(session)

    async def close(self) -> None:
        """Reclaim every session still out."""
        self._closed = True
        async with self._lock:
            leftovers = list(self._live)
            self._live.clear()
        for session in leftovers:
            try:
                await session.close()
            except Exception as exc:
                logger.warning("Failed to close session on pool close: %r", exc)
            finally:
                self._slots.release()
        if leftovers:
            logger.debug("Reclaimed %s session(s) on pool close", len(leftovers))
