"""
BFS Statistics Gateway Server

A Model Context Protocol server exposing statistical datasets of the Swiss
Federal Statistical Office through the PXWEB (tabular) and Swiss Stats
Explorer (SDMX time-series) APIs.
"""

import logging
from typing import Dict, List, Literal, Optional, Union

import click
from mcp.server.fastmcp import Context, FastMCP

import config
from app_context import app_lifespan, get_app_context
from tools.data_tools import (
    get_pxweb_config as get_pxweb_config_impl,
    get_sse_data as get_sse_data_impl,
    get_statistical_data as get_statistical_data_impl,
)
from tools.metadata_tools import (
    get_dataset_dimensions as get_dataset_dimensions_impl,
    get_dataset_metadata as get_dataset_metadata_impl,
    get_sse_metadata as get_sse_metadata_impl,
)

logger = logging.getLogger(__name__)

Language = Literal["de", "fr", "it", "en"]

# Initialize FastMCP server
mcp = FastMCP(config.SERVER_NAME, lifespan=app_lifespan)


@mcp.tool()
async def get_dataset_metadata(number_bfs: str, ctx: Context, language: Optional[Language] = None):
    """
    Get complete metadata structure for a BFS dataset from the PXWEB API.

    Returns information about all available dimensions, their codes, and possible
    values. Use this before querying data to understand what filters you can apply.

    Args:
        number_bfs: BFS number (FSO number) of the dataset (e.g., "px-x-1502040100_131")
        language: Language for dimension and value labels
    """
    return await get_dataset_metadata_impl(get_app_context(ctx).gateway, number_bfs, language)


@mcp.tool()
async def get_dataset_dimensions(number_bfs: str, ctx: Context, language: Optional[Language] = None):
    """
    Get a simplified view of available dimensions and their values for a PXWEB dataset.

    Useful for quickly understanding what filters you can apply when querying data.
    Returns dimension codes and the first few possible values.
    """
    return await get_dataset_dimensions_impl(get_app_context(ctx).gateway, number_bfs, language)


@mcp.tool()
async def get_statistical_data(number_bfs: str,
                               ctx: Context,
                               language: Optional[Language] = None,
                               query: Optional[Dict[str, Union[str, List[str]]]] = None,
                               format: Literal["json-stat", "json", "csv"] = "json-stat"):
    """
    Retrieve statistical data from a BFS dataset using the PXWEB API.

    You can optionally filter by specific dimensions. Use get_dataset_metadata first
    to see available dimensions and values for filtering.

    Args:
        number_bfs: BFS number (FSO number) of the dataset (e.g., "px-x-1502040100_131")
        language: Language for results and labels
        query: Optional dimension filters. Keys are dimension codes, values are value
               codes (string or list of strings), e.g. {"Jahr": ["40", "41"]}
        format: Response format (default: json-stat)
    """
    return await get_statistical_data_impl(get_app_context(ctx).gateway, number_bfs, language, query, format)


@mcp.tool()
async def get_sse_metadata(number_bfs: str, ctx: Context, language: Optional[Language] = None):
    """
    Get metadata for a Swiss Stats Explorer (SSE) dataset.

    Returns available dimensions and their possible values. Use this before calling
    get_sse_data to understand what filters you can apply.

    Args:
        number_bfs: BFS dataset identifier for SSE (e.g., "DF_LWZ_1")
        language: Language for dimension and value labels
    """
    return await get_sse_metadata_impl(get_app_context(ctx).gateway, number_bfs, language)


@mcp.tool()
async def get_sse_data(number_bfs: str,
                       ctx: Context,
                       language: Optional[Language] = None,
                       query: Optional[Dict[str, Union[str, List[str]]]] = None,
                       start_period: Optional[str] = None,
                       end_period: Optional[str] = None):
    """
    Retrieve time-series data from the Swiss Stats Explorer (SSE) API.

    Use get_sse_metadata first to see available dimensions. You can filter by
    dimensions and time periods.

    Args:
        number_bfs: BFS dataset identifier for SSE (e.g., "DF_LWZ_1")
        language: Language for results and labels
        query: Optional dimension filters, e.g. {"GR_KT_GDE": ["2581", "4001"]}
        start_period: Start period for time-series data (e.g., "2020")
        end_period: End period for time-series data (e.g., "2023")
    """
    return await get_sse_data_impl(
        get_app_context(ctx).gateway, number_bfs, language, query, start_period, end_period
    )


@mcp.tool()
async def get_pxweb_config(ctx: Context, language: Optional[Language] = None):
    """
    Get configuration limits of the PXWEB API, such as the maximum number of
    cells per query and the rate-limit time window.
    """
    return await get_pxweb_config_impl(get_app_context(ctx).gateway, language)


@click.command()
@click.option("--port", default=8000, help="Port to listen on for HTTP transports")
@click.option(
    "--transport",
    type=click.Choice(["stdio", "sse", "streamable-http"]),
    default="stdio",
    help="Transport type",
)
@click.option("--log-level", default=config.LOG_LEVEL, help="Logging level (default from LOG_LEVEL)")
def main(port: int, transport: str, log_level: str) -> None:
    """Run the BFS Statistics Gateway server."""
    # basicConfig writes to stderr, keeping stdout free for STDIO JSON-RPC
    logging.basicConfig(level=log_level.upper())
    logger.info(f"Starting {config.SERVER_NAME} {config.SERVER_VERSION} ({transport})")

    mcp.settings.port = port
    mcp.run(transport=transport)


if __name__ == "__main__":
    main()
