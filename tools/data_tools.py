"""
Data retrieval tools for the BFS Statistics Gateway.

- get_statistical_data: PXWEB tables, payload returned as the upstream sends it
- get_sse_data: SSE time series, flattened into labelled observations
- get_pxweb_config: PXWEB API limits, useful before large queries
"""

import logging
from typing import Dict, List, Optional, Union

import config
from gateway import StatsGateway
from models.dataset_types import Backend, DatasetRef
from models.schemas import ErrorResult, ObservationsResult, PxWebConfigResult, StatisticalDataResult
from tools.tool_errors import error_result
from utils import validate_language

logger = logging.getLogger(__name__)

QueryFilter = Optional[Dict[str, Union[str, List[str]]]]


async def get_statistical_data(
    gateway: StatsGateway,
    dataset_id: str,
    language: Optional[str] = None,
    query: QueryFilter = None,
    format: str = "json-stat",
) -> Union[StatisticalDataResult, ErrorResult]:
    """
    Data of a PXWEB table.

    Without a query every value of every dimension is requested; with a
    query only the named dimensions are constrained to the listed codes.
    """
    try:
        ref = DatasetRef.create(dataset_id, Backend.TABULAR, language or config.DEFAULT_LANGUAGE)
        logger.info(
            f"Getting statistical data for {ref.dataset_id} "
            f"(language={ref.language}, has_query={query is not None}, format={format})"
        )

        pxweb_query, payload = await gateway.get_observations(ref, query, response_format=format)

        return StatisticalDataResult(
            dataset_id=ref.dataset_id,
            language=ref.language,
            format=pxweb_query.response_format,
            query=pxweb_query.to_payload(),
            data=payload,
        )
    except Exception as e:
        return error_result(e, "getting statistical data", dataset_id, "get_dataset_metadata")


async def get_sse_data(
    gateway: StatsGateway,
    dataset_id: str,
    language: Optional[str] = None,
    query: QueryFilter = None,
    start_period: Optional[str] = None,
    end_period: Optional[str] = None,
) -> Union[ObservationsResult, ErrorResult]:
    """
    Time-series observations of an SSE dataflow, with dimension codes
    replaced by their labels.
    """
    try:
        ref = DatasetRef.create(dataset_id, Backend.TIMESERIES, language or config.DEFAULT_LANGUAGE)
        logger.info(
            f"Getting SSE data for {ref.dataset_id} (language={ref.language}, "
            f"has_query={query is not None}, start={start_period}, end={end_period})"
        )

        sdmx_query, observations = await gateway.get_observations(
            ref, query, start_period=start_period, end_period=end_period
        )
        params = dict(sdmx_query.params)

        return ObservationsResult(
            dataset_id=ref.dataset_id,
            language=ref.language,
            key=sdmx_query.key,
            start_period=params.get("startPeriod"),
            end_period=params.get("endPeriod"),
            total_observations=len(observations),
            data=[observation.to_dict() for observation in observations],
        )
    except Exception as e:
        return error_result(e, "getting SSE data", dataset_id, "get_sse_metadata")


async def get_pxweb_config(
    gateway: StatsGateway,
    language: Optional[str] = None,
) -> Union[PxWebConfigResult, ErrorResult]:
    """PXWEB limits such as the maximum number of cells per query."""
    try:
        lang = validate_language(language or config.DEFAULT_LANGUAGE)
        return PxWebConfigResult(language=lang, config=await gateway.pxweb.get_config(lang))
    except Exception as e:
        return error_result(e, "getting PXWEB config", None, "get_dataset_metadata")
