"""
Query construction for both BFS backends.

Turns canonical dimensions plus a simplified filter
(dimension code -> value code or list of value codes) into:
- a PXWEB JSON query body (tabular backend)
- an SDMX positional key plus time-range parameters (SSE backend)
"""

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from errors import ValidationError
from models.dataset_types import Dimension, PxWebQuery, SdmxDataQuery
from utils import validate_pxweb_format

logger = logging.getLogger(__name__)

FilterValue = Union[str, Sequence[str]]
Filter = Optional[Mapping[str, FilterValue]]


def normalize_filter(query: Filter) -> Optional[Dict[str, List[str]]]:
    """
    Coerce every filter value to a list of codes.

    None stays None ("select everything"); a bare value becomes a
    one-element list.
    """
    if query is None:
        return None
    normalized = {}
    for code, values in query.items():
        if isinstance(values, (str, int, float)):
            normalized[code] = [str(values)]
        else:
            normalized[code] = [str(value) for value in values]
    return normalized


def validate_filter_dimensions(dimensions: List[Dimension], query: Mapping[str, object]) -> None:
    """Reject filter keys that do not name a dimension of the dataset."""
    known = [dimension.code for dimension in dimensions]
    unknown = [code for code in query if code not in known]
    if unknown:
        raise ValidationError(
            f"Unknown dimension(s) {', '.join(repr(code) for code in unknown)}. "
            f"Valid dimensions: {', '.join(known)}"
        )


def build_pxweb_query(dimensions: List[Dimension],
                      query: Filter = None,
                      response_format: str = "json-stat") -> PxWebQuery:
    """
    Build the PXWEB query body.

    Without a filter every dimension selects the "all" wildcard. With a
    filter, only the named dimensions are sent (in the dataset's own order)
    with an "item" selection; the PXWEB API applies its own default to the
    dimensions left out.
    """
    response_format = validate_pxweb_format(response_format)
    selections = normalize_filter(query)

    if selections is None:
        entries = [
            {"code": dimension.code, "selection": {"filter": "all", "values": ["*"]}}
            for dimension in dimensions
        ]
    else:
        validate_filter_dimensions(dimensions, selections)
        entries = [
            {"code": dimension.code, "selection": {"filter": "item", "values": selections[dimension.code]}}
            for dimension in dimensions
            if dimension.code in selections
        ]

    return PxWebQuery(query=entries, response_format=response_format)


def build_data_key(dimensions: List[Dimension], selections: Optional[Dict[str, List[str]]]) -> str:
    """
    Build the dot-delimited positional SDMX key.

    Non-time dimensions are ordered by position; each contributes its
    '+'-joined selected codes or an empty segment. A key with only empty
    segments collapses to 'all'.
    """
    ordered = sorted(
        (dimension for dimension in dimensions if not dimension.is_time_dimension),
        key=lambda dimension: dimension.position,
    )
    selections = selections or {}
    key_parts = ['+'.join(selections.get(dimension.code) or []) for dimension in ordered]

    if all(part == '' for part in key_parts):
        return 'all'
    return '.'.join(key_parts)


def _time_range(dimensions: List[Dimension],
                selections: Optional[Dict[str, List[str]]]) -> Tuple[Optional[str], Optional[str]]:
    """Derive startPeriod/endPeriod from a filter on the time dimension."""
    for dimension in dimensions:
        if dimension.is_time_dimension and selections and selections.get(dimension.code):
            periods = selections[dimension.code]
            return min(periods), max(periods)
    return None, None


def build_sdmx_query(dimensions: List[Dimension],
                     query: Filter = None,
                     start_period: Optional[str] = None,
                     end_period: Optional[str] = None) -> SdmxDataQuery:
    """
    Build the key and query parameters of an SSE data request.

    Explicit start/end periods win over periods selected on the time
    dimension; both are omitted when neither is given.
    """
    selections = normalize_filter(query)
    if selections:
        validate_filter_dimensions(dimensions, selections)

    key = build_data_key(dimensions, selections)

    derived_start, derived_end = _time_range(dimensions, selections)
    start_period = start_period or derived_start
    end_period = end_period or derived_end

    params = [("dimensionAtObservation", "AllDimensions")]
    if start_period:
        params.append(("startPeriod", start_period))
    if end_period:
        params.append(("endPeriod", end_period))

    logger.debug(f"Built SDMX key {key!r} with params {params}")
    return SdmxDataQuery(key=key, params=params)
