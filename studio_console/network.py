"""Streaming HTTP GET reporting progress through console events."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import httpx

from studio_console.collaborators import NetEvent
from studio_console.config import get_config
from studio_console.logging import get_logger

log = get_logger(__name__)


class HttpxNetwork:
    """Runs each GET as a task on the running asyncio loop.

    Events are handed to `on_event` as the download proceeds; exactly one
    `done` or `error` event ends every request.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        user_agent: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        net = get_config().net
        self.base_url = (net.base_url if base_url is None else base_url).rstrip("/")
        self.client = client or httpx.AsyncClient(
            timeout=timeout or net.timeout,
            follow_redirects=True,
            headers={"User-Agent": user_agent or net.user_agent},
        )
        self._tasks: set[asyncio.Task[None]] = set()

    def url_for(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def get(self, url: str, on_event: Callable[[NetEvent], None]) -> None:
        if not self.base_url and not url.startswith(("http://", "https://")):
            on_event(NetEvent(kind="error", url=url, error="network is not configured"))
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            on_event(NetEvent(kind="error", url=url, error="no running event loop"))
            return
        task = loop.create_task(self._fetch(url, on_event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _fetch(self, url: str, on_event: Callable[[NetEvent], None]) -> None:
        full_url = self.url_for(url)
        try:
            log.info("Fetching URL", url=full_url)
            async with self.client.stream("GET", full_url) as response:
                response.raise_for_status()
                total = int(response.headers.get("content-length") or 0)
                body = bytearray()
                async for chunk in response.aiter_bytes():
                    body.extend(chunk)
                    if total:
                        on_event(NetEvent(kind="progress", url=url, received=len(body), total=total))
            on_event(NetEvent(kind="done", url=url, data=bytes(body), received=len(body), total=total))
        except httpx.HTTPError as e:
            log.error("HTTP fetch failed", url=full_url, error=str(e))
            on_event(NetEvent(kind="error", url=url, error=str(e)))
        except Exception as e:
            log.error("Fetch failed", url=full_url, error=str(e))
            on_event(NetEvent(kind="error", url=url, error=str(e)))

    async def wait_idle(self) -> None:
        """Wait for in-flight requests."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        await self.client.aclose()
