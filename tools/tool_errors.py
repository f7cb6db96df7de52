"""
Conversion of gateway failures into caller-visible tool results.
"""

import logging
from typing import Optional

from errors import (
    GatewayError,
    NoRecordsFoundError,
    NotFoundError,
    RateLimitedError,
    UpstreamError,
    ValidationError,
)
from models.schemas import ErrorResult

logger = logging.getLogger(__name__)


def tip_for(error: GatewayError, metadata_tool: str) -> Optional[str]:
    """Troubleshooting hint matching the failure class."""
    if isinstance(error, RateLimitedError):
        return ("You may be hitting rate limits. Wait a few seconds before trying again, "
                "or query specific dimensions instead of all data.")
    if isinstance(error, NoRecordsFoundError):
        return ("Check your query filters and time period. The dataset may not have data "
                "for the specified criteria.")
    if isinstance(error, NotFoundError):
        return "Dataset not found. Please check the BFS number and try again."
    if isinstance(error, ValidationError):
        return f"Use {metadata_tool} to see the valid dimension codes and values."
    if isinstance(error, UpstreamError):
        if error.status_code == 404:
            return "Dataset not found. Please check the BFS number and try again."
        if error.status_code == 400:
            return "Invalid request. Please check your query parameters."
    return None


def error_result(error: Exception, action: str, dataset_id: Optional[str], metadata_tool: str) -> ErrorResult:
    """
    Build the ErrorResult for a failed tool call.

    Gateway errors keep their class; anything else is logged with its
    traceback and reported as an internal error.
    """
    if isinstance(error, GatewayError):
        logger.error(f"Error {action} for {dataset_id}: {error}")
        return ErrorResult(
            error=f"Error {action}: {error}",
            error_type=error.error_type,
            dataset_id=dataset_id,
            status_code=getattr(error, "status_code", None),
            tip=tip_for(error, metadata_tool),
        )

    logger.exception(f"Unexpected error {action} for {dataset_id}")
    return ErrorResult(
        error=f"Error {action}: {error}",
        error_type="internal",
        dataset_id=dataset_id,
    )
