"""aiohttp client for the remote commerce API's cart endpoint.

Only the read side is needed here: ``GET /api/cart/`` returns
``{"items": [{"product": {...}, "quantity": n}, ...]}`` for the
authenticated user.  Every failure is raised as ``RemoteCartError``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from cartcore.domain.exceptions import RemoteCartError

logger = logging.getLogger(__name__)

CART_PATH = "/api/cart/"

_NO_CACHE_HEADERS = {
    "Content-Type": "application/json",
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


class HttpCartApi:
    """Fetches the authenticated user's cart.

    Instances are awaitable callables, so one can be handed directly to
    ``reconcile_with_remote`` as the remote fetcher.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: Optional[float] = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout

    @property
    def cart_url(self) -> str:
        return f"{self._base_url}{CART_PATH}"

    async def fetch_cart(self) -> list[dict[str, Any]]:
        headers = dict(_NO_CACHE_HEADERS)
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        timeout = aiohttp.ClientTimeout(total=self._timeout)

        logger.debug("GET %s", self.cart_url)
        try:
            async with aiohttp.ClientSession(headers=headers, timeout=timeout) as session:
                async with session.get(self.cart_url) as resp:
                    if resp.status != 200:
                        raise RemoteCartError(
                            f"Cart request failed with HTTP {resp.status}"
                        )
                    payload = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise RemoteCartError(f"Cart request failed: {exc!r}") from exc

        items = payload.get("items") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise RemoteCartError("Remote cart payload has no 'items' list")
        return items

    async def __call__(self) -> list[dict[str, Any]]:
        return await self.fetch_cart()
