"""ASGI middleware binding a NetworkScope to each HTTP request."""

from __future__ import annotations

from typing import Any, Callable
import logging

from multinet.namespace.context import NetworkContext, SharedStorage, StorageHandle
from multinet.namespace.scope import NetworkScope

logger = logging.getLogger(__name__)


class NetworkMiddleware:
    """ASGI middleware for setting the network scope.

    Reads the network ID and the network's root site ID from request
    headers and runs the request inside a NetworkScope. Requests
    without usable headers are passed through unscoped, so every
    rewrite during them leaves names unchanged.

    Attributes:
        app: The ASGI application to wrap.
        network_header: Header carrying the network ID.
        root_site_header: Header carrying the root site ID.
        storage: Storage handle shared by every request.

    Example:
        from fastapi import FastAPI
        from multinet.namespace.middleware import NetworkMiddleware

        app = FastAPI()
        app.add_middleware(NetworkMiddleware, network_header="X-Network-ID")
    """

    def __init__(
        self,
        app: Any,
        network_header: str = "X-Network-ID",
        root_site_header: str = "X-Root-Site-ID",
        storage: StorageHandle | None = None,
        primary_network_id: int | None = None,
    ):
        self.app = app
        self.network_header = network_header.lower()
        self.root_site_header = root_site_header.lower()
        self.storage = storage if storage is not None else SharedStorage()
        self.primary_network_id = primary_network_id

    async def __call__(
        self,
        scope: dict[str, Any],
        receive: Callable[..., Any],
        send: Callable[..., Any],
    ) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        context = self._extract_network(scope)

        if context is not None:
            async with NetworkScope(context):
                await self.app(scope, receive, send)
        else:
            await self.app(scope, receive, send)

    def _extract_network(self, scope: dict[str, Any]) -> NetworkContext | None:
        headers = dict(scope.get("headers", []))
        network = headers.get(self.network_header.encode())
        root_site = headers.get(self.root_site_header.encode())
        if not network or not root_site:
            return None

        kwargs: dict[str, Any] = {}
        if self.primary_network_id is not None:
            kwargs["primary_network_id"] = self.primary_network_id

        try:
            return NetworkContext(
                network_id=int(network.decode()),
                root_site_id=int(root_site.decode()),
                storage=self.storage,
                **kwargs,
            )
        except ValueError as exc:
            logger.warning(f"Ignoring invalid network headers: {exc}")
            return None
