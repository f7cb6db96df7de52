"""
BFS Statistics Gateway - Models Package

Canonical dataset types shared by both backends, and Pydantic schemas
for structured tool outputs.
"""

from models.dataset_types import (
    Backend,
    DataflowRef,
    DatasetMetadata,
    DatasetRef,
    Dimension,
    DimensionValue,
    EndpointPurpose,
    Observation,
    PxWebQuery,
    SdmxDataQuery,
)
from models.schemas import (
    # Tabular schemas
    DatasetMetadataResult,
    DimensionDetail,
    DimensionsResult,
    DimensionSummary,
    DimensionSummaryResult,
    DimensionValueInfo,
    # Common schemas
    ErrorResult,
    # Time-series schemas
    ObservationsResult,
    PxWebConfigResult,
    StatisticalDataResult,
)

__all__ = [
    # Dataset types
    "Backend",
    "DataflowRef",
    "DatasetMetadata",
    "DatasetRef",
    "Dimension",
    "DimensionValue",
    "EndpointPurpose",
    "Observation",
    "PxWebQuery",
    "SdmxDataQuery",
    # Common
    "ErrorResult",
    "DimensionValueInfo",
    "DimensionDetail",
    # Tabular
    "DatasetMetadataResult",
    "DimensionSummary",
    "DimensionSummaryResult",
    "StatisticalDataResult",
    "PxWebConfigResult",
    # Time-series
    "DimensionsResult",
    "ObservationsResult",
]
