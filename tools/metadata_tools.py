"""
Metadata tools for the BFS Statistics Gateway.

These tools describe a dataset's dimensions and their possible values,
which callers need before filtering a data query:
- get_dataset_metadata: full PXWEB metadata
- get_dataset_dimensions: compact PXWEB dimension view with sample values
- get_sse_metadata: SSE/SDMX dimensions with codelist values
"""

import logging
from typing import List, Optional, Union

import config
from gateway import StatsGateway
from models.dataset_types import Backend, DatasetRef, Dimension
from models.schemas import (
    DatasetMetadataResult,
    DimensionDetail,
    DimensionsResult,
    DimensionSummary,
    DimensionSummaryResult,
    DimensionValueInfo,
    ErrorResult,
)
from tools.tool_errors import error_result

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 5


def dimension_detail(dimension: Dimension) -> DimensionDetail:
    return DimensionDetail(
        code=dimension.code,
        label=dimension.label,
        position=dimension.position,
        is_time_dimension=dimension.is_time_dimension,
        elimination=dimension.elimination,
        value_count=len(dimension.values),
        values=[DimensionValueInfo(code=v.code, label=v.label) for v in dimension.values],
    )


def dimension_summary(dimension: Dimension) -> DimensionSummary:
    codes = dimension.value_codes
    return DimensionSummary(
        code=dimension.code,
        name=dimension.label,
        is_time=dimension.is_time_dimension,
        elimination=dimension.elimination,
        value_count=len(codes),
        sample_values=codes[:SAMPLE_SIZE],
        sample_value_texts=[v.label for v in dimension.values[:SAMPLE_SIZE]],
        note=f"... and {len(codes) - SAMPLE_SIZE} more values" if len(codes) > SAMPLE_SIZE else None,
    )


async def get_dataset_metadata(
    gateway: StatsGateway,
    dataset_id: str,
    language: Optional[str] = None,
) -> Union[DatasetMetadataResult, ErrorResult]:
    """
    Complete metadata of a PXWEB table: title, notes and every dimension
    with all of its values.
    """
    try:
        ref = DatasetRef.create(dataset_id, Backend.TABULAR, language or config.DEFAULT_LANGUAGE)
        logger.info(f"Getting dataset metadata for {ref.dataset_id} ({ref.language})")

        metadata = await gateway.pxweb.get_metadata(ref)
        dimensions = [dimension_detail(d) for d in metadata.dimensions]

        return DatasetMetadataResult(
            dataset_id=ref.dataset_id,
            language=ref.language,
            title=metadata.title,
            updated=metadata.updated,
            source=metadata.source,
            note=metadata.note,
            total_dimensions=len(dimensions),
            dimensions=dimensions,
        )
    except Exception as e:
        return error_result(e, "getting dataset metadata", dataset_id, "get_dataset_metadata")


async def get_dataset_dimensions(
    gateway: StatsGateway,
    dataset_id: str,
    language: Optional[str] = None,
) -> Union[DimensionSummaryResult, ErrorResult]:
    """Compact view of a PXWEB table's dimensions with a few sample values each."""
    try:
        ref = DatasetRef.create(dataset_id, Backend.TABULAR, language or config.DEFAULT_LANGUAGE)
        logger.info(f"Getting dataset dimensions for {ref.dataset_id} ({ref.language})")

        metadata = await gateway.pxweb.get_metadata(ref)
        summaries: List[DimensionSummary] = [dimension_summary(d) for d in metadata.dimensions]

        return DimensionSummaryResult(
            dataset_id=ref.dataset_id,
            dataset_title=metadata.title,
            total_dimensions=len(summaries),
            dimensions=summaries,
            tip='Use the "code" field as keys in your query object, and "sample_values" as possible filter values',
        )
    except Exception as e:
        return error_result(e, "getting dataset dimensions", dataset_id, "get_dataset_metadata")


async def get_sse_metadata(
    gateway: StatsGateway,
    dataset_id: str,
    language: Optional[str] = None,
) -> Union[DimensionsResult, ErrorResult]:
    """Dimensions of an SSE dataflow with the values of their codelists."""
    try:
        ref = DatasetRef.create(dataset_id, Backend.TIMESERIES, language or config.DEFAULT_LANGUAGE)
        logger.info(f"Getting SSE metadata for {ref.dataset_id} ({ref.language})")

        dimensions = await gateway.get_dimensions(ref)

        return DimensionsResult(
            dataset_id=ref.dataset_id,
            language=ref.language,
            total_dimensions=len(dimensions),
            dimensions=[dimension_detail(d) for d in dimensions],
        )
    except Exception as e:
        return error_result(e, "getting SSE metadata", dataset_id, "get_sse_metadata")
