"""
Application Context and Lifespan Management for the BFS Statistics Gateway.

The lifespan owns the process-wide resources: one endpoint cache, one
PXWEB client and one SSE client, wrapped by a StatsGateway. They are created
when the server starts and closed when it stops.

Usage:
    mcp = FastMCP("BFS Statistics Gateway", lifespan=app_lifespan)

    @mcp.tool()
    async def my_tool(ctx: Context) -> str:
        gateway = get_app_context(ctx).gateway
        ...

Note: Nothing in this module logs; STDIO transport carries JSON-RPC.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

import config
from endpoint_resolver import EndpointCache
from gateway import StatsGateway
from pxweb_client import PxWebClient
from sse_client import SSEClient

if TYPE_CHECKING:
    from mcp.server.fastmcp import Context, FastMCP


@dataclass
class AppContext:
    """
    Application context holding shared resources.

    Accessible in all tool handlers via:
        ctx.request_context.lifespan_context

    Attributes:
        gateway: Backend dispatcher used by every tool
        endpoint_cache: Resolved SSE URLs, shared by all requests
        global_config: Server-wide configuration snapshot
    """

    gateway: StatsGateway
    endpoint_cache: EndpointCache
    global_config: dict[str, Any] = field(default_factory=dict)

    async def close(self) -> None:
        await self.gateway.close()


def create_app_context(cache: Optional[EndpointCache] = None) -> AppContext:
    """Build the clients and gateway around a (possibly shared) endpoint cache."""
    cache = cache if cache is not None else EndpointCache()
    gateway = StatsGateway(
        pxweb=PxWebClient(config.PXWEB_BASE_URL),
        sse=SSEClient(config.SSE_BASE_URL, cache=cache),
    )
    return AppContext(gateway=gateway, endpoint_cache=cache, global_config=config.get_current_config())


def get_app_context(ctx: Context[Any, Any, Any]) -> AppContext:
    """Application context of the running server for a tool call."""
    return ctx.request_context.lifespan_context


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[AppContext]:
    """
    Manage application lifecycle with proper resource initialization and cleanup.

    Args:
        server: The MCP server instance

    Yields:
        AppContext: The application context with initialized resources
    """
    _ = server

    context = create_app_context()
    try:
        yield context
    finally:
        # Close HTTP sessions on shutdown - no logging to avoid STDIO interference
        await context.close()


__all__ = [
    "AppContext",
    "app_lifespan",
    "create_app_context",
    "get_app_context",
]
