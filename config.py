"""
Configuration for the BFS Statistics Gateway

Upstream base URLs, timeouts and retry settings are read from environment
variables at import time and can be inspected with get_current_config().
"""

import logging
import os
from typing import Any, Dict

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid value for {name}: {raw!r} (using {default})")
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid value for {name}: {raw!r} (using {default})")
        return default


# Upstream APIs of the Swiss Federal Statistical Office
BFS_ENDPOINTS = {
    "PXWEB": {
        "name": "BFS PXWEB API",
        "base_url": os.getenv("BFS_PXWEB_BASE_URL", "https://www.pxweb.bfs.admin.ch/api/v1"),
        "description": "Statistical tables in PX format (tabular backend)",
    },
    "SSE": {
        "name": "Swiss Stats Explorer",
        "base_url": os.getenv("BFS_SSE_BASE_URL", "https://disseminate.stats.swiss/rest"),
        "description": "SDMX 2.1 time-series API (time-series backend)",
    },
}

PXWEB_BASE_URL = BFS_ENDPOINTS["PXWEB"]["base_url"].rstrip("/")
SSE_BASE_URL = BFS_ENDPOINTS["SSE"]["base_url"].rstrip("/")

DEFAULT_LANGUAGE = os.getenv("BFS_DEFAULT_LANGUAGE", "en").lower()

# Seconds to wait before each data request, and between retries when the
# upstream does not send Retry-After
REQUEST_DELAY = _env_float("BFS_REQUEST_DELAY", 0.0)
MAX_RETRIES = _env_int("BFS_MAX_RETRIES", 3)
MAX_RETRY_DELAY = _env_float("BFS_MAX_RETRY_DELAY", 30.0)

METADATA_TIMEOUT = _env_float("BFS_METADATA_TIMEOUT", 30.0)
DATA_TIMEOUT = _env_float("BFS_DATA_TIMEOUT", 60.0)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

SERVER_NAME = "BFS Statistics Gateway"
SERVER_VERSION = "1.0.0"


def get_current_config() -> Dict[str, Any]:
    """
    Get the active gateway configuration.

    Returns:
        Dict with base URLs, retry and timeout settings
    """
    return {
        "pxweb_base_url": PXWEB_BASE_URL,
        "sse_base_url": SSE_BASE_URL,
        "default_language": DEFAULT_LANGUAGE,
        "request_delay": REQUEST_DELAY,
        "max_retries": MAX_RETRIES,
        "max_retry_delay": MAX_RETRY_DELAY,
        "metadata_timeout": METADATA_TIMEOUT,
        "data_timeout": DATA_TIMEOUT,
        "log_level": LOG_LEVEL,
    }
