"""
Pydantic schemas for BFS Statistics Gateway structured tool outputs.

These schemas define the structured output format for all MCP tools,
enabling automatic validation and JSON Schema generation for the MCP protocol.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, Field

# =============================================================================
# Common/Shared Schemas
# =============================================================================


class ErrorResult(BaseModel):
    """Standard error response."""

    error: str = Field(description="Error message")
    error_type: str = Field(
        description="Failure class: validation, not_found, no_records, upstream, rate_limited or internal"
    )
    dataset_id: Optional[str] = Field(default=None, description="Dataset the call was about")
    status_code: Optional[int] = Field(default=None, description="Upstream HTTP status, if any")
    tip: Optional[str] = Field(default=None, description="Suggested next step for the caller")


class DimensionValueInfo(BaseModel):
    """A selectable value of a dimension."""

    code: str = Field(description="Value code (use this in query filters)")
    label: str = Field(description="Localized label")


class DimensionDetail(BaseModel):
    """A dimension with all of its values."""

    code: str = Field(description="Dimension code (use this as a query key)")
    label: str = Field(description="Localized dimension label")
    position: int = Field(description="Position of the dimension in the dataset (0-based)")
    is_time_dimension: bool = Field(default=False, description="Whether this is the time axis")
    elimination: bool = Field(default=False, description="Whether the dimension may be left out of a query")
    value_count: int = Field(description="Number of values")
    values: list[DimensionValueInfo] = Field(description="Values in upstream order")


# =============================================================================
# Tabular (PXWEB) Schemas
# =============================================================================


class DatasetMetadataResult(BaseModel):
    """Result from get_dataset_metadata() tool."""

    dataset_id: str = Field(description="BFS number of the dataset")
    language: str = Field(description="Language of labels")
    title: str = Field(description="Dataset title")
    updated: Optional[str] = Field(default=None, description="Last update timestamp")
    source: Optional[str] = Field(default=None, description="Publishing source")
    note: Optional[str] = Field(default=None, description="Dataset notes")
    total_dimensions: int = Field(description="Number of dimensions")
    dimensions: list[DimensionDetail] = Field(description="Dimensions in dataset order")


class DimensionSummary(BaseModel):
    """Compact view of a dimension with a few sample values."""

    code: str = Field(description="Dimension code")
    name: str = Field(description="Localized dimension label")
    is_time: bool = Field(description="Whether this is the time axis")
    elimination: bool = Field(default=False, description="Whether the dimension may be left out of a query")
    value_count: int = Field(description="Number of values")
    sample_values: list[str] = Field(description="First value codes")
    sample_value_texts: list[str] = Field(description="Labels of the first value codes")
    note: Optional[str] = Field(default=None, description="How many values were left out")


class DimensionSummaryResult(BaseModel):
    """Result from get_dataset_dimensions() tool."""

    dataset_id: str = Field(description="BFS number of the dataset")
    dataset_title: str = Field(description="Dataset title")
    total_dimensions: int = Field(description="Number of dimensions")
    dimensions: list[DimensionSummary] = Field(description="Dimension summaries")
    tip: str = Field(description="How to use the codes in a query")


class StatisticalDataResult(BaseModel):
    """Result from get_statistical_data() tool."""

    dataset_id: str = Field(description="BFS number of the dataset")
    language: str = Field(description="Language of labels")
    format: str = Field(description="Response format requested from PXWEB")
    query: dict[str, Any] = Field(description="Query body sent to PXWEB")
    data: Union[dict[str, Any], list[Any], str] = Field(
        description="Upstream payload, unmodified (JSON-stat, JSON or CSV text)"
    )


class PxWebConfigResult(BaseModel):
    """Result from get_pxweb_config() tool."""

    language: str = Field(description="Language used for the request")
    config: dict[str, Any] = Field(description="PXWEB API limits and settings")


# =============================================================================
# Time-series (SSE) Schemas
# =============================================================================


class DimensionsResult(BaseModel):
    """Result from get_sse_metadata() tool."""

    dataset_id: str = Field(description="SSE dataflow identifier")
    language: str = Field(description="Language of labels")
    total_dimensions: int = Field(description="Number of dimensions")
    dimensions: list[DimensionDetail] = Field(description="Dimensions in declared order")


class ObservationsResult(BaseModel):
    """Result from get_sse_data() tool."""

    dataset_id: str = Field(description="SSE dataflow identifier")
    language: str = Field(description="Language of labels")
    key: str = Field(description="Positional SDMX key used for the query")
    start_period: Optional[str] = Field(default=None, description="Start period applied")
    end_period: Optional[str] = Field(default=None, description="End period applied")
    total_observations: int = Field(description="Number of observations")
    data: list[dict[str, Any]] = Field(
        description="Observations: dimension code to resolved label, plus 'value'"
    )
