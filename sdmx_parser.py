"""
SDMX-ML parsing for the Swiss Stats Explorer.

Turns SDMX 2.1 structure messages (dimensions + codelists) into canonical
Dimension objects and GenericData messages into Observation rows.

Every level of the XML tree is looked up with helpers that return "empty"
when an element is missing, so a partial structure degrades to fewer
dimensions or values instead of failing the whole call.
"""

import logging
import math
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional, Tuple, Union

from errors import UpstreamError
from models.dataset_types import Dimension, DimensionValue, Observation
from utils import SDMX_NAMESPACES, XML_LANG

logger = logging.getLogger(__name__)

DIMENSION_TAG = f"{{{SDMX_NAMESPACES['str']}}}Dimension"
TIME_DIMENSION_TAG = f"{{{SDMX_NAMESPACES['str']}}}TimeDimension"


def _first(elem: Optional[ET.Element], path: str) -> Optional[ET.Element]:
    if elem is None:
        return None
    return elem.find(path, SDMX_NAMESPACES)


def _children(elem: Optional[ET.Element], path: str) -> List[ET.Element]:
    if elem is None:
        return []
    return elem.findall(path, SDMX_NAMESPACES)


def _attr(elem: Optional[ET.Element], name: str) -> Optional[str]:
    return elem.get(name) if elem is not None else None


def _parse_xml(content: Union[str, bytes], what: str) -> ET.Element:
    try:
        return ET.fromstring(content)
    except ET.ParseError as e:
        raise UpstreamError(f"Could not parse SDMX {what}: {e}") from e


def _parse_position(raw: Optional[str]) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return 0


def _parse_measure(raw: Optional[str]) -> Optional[float]:
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def localized_name(elem: Optional[ET.Element], language: str, fallback: str) -> str:
    """
    Name of an SDMX item in the requested language.

    Falls back to the first declared name, then to ``fallback`` (usually the
    item id) when the element has no names at all.
    """
    names = _children(elem, 'com:Name')
    chosen = next((name for name in names if name.get(XML_LANG) == language), None)
    if chosen is None and names:
        chosen = names[0]
    if chosen is None:
        return fallback
    return (chosen.text or '').strip() or fallback


def _codelist_ref(dimension: ET.Element) -> Optional[str]:
    enumeration = _first(dimension, 'str:LocalRepresentation/str:Enumeration')
    ref = _first(enumeration, 'Ref')
    if ref is None:
        ref = _first(enumeration, 'com:Ref')
    return ref.get('id') if ref is not None else None


def parse_codelists(structures: Optional[ET.Element],
                    language: str) -> Tuple[Dict[str, List[DimensionValue]], Dict[str, str]]:
    """
    Read every codelist of a structure message.

    Returns:
        (codelist id -> ordered values, codelist id -> localized codelist name)
    """
    values: Dict[str, List[DimensionValue]] = {}
    names: Dict[str, str] = {}

    for codelist in _children(structures, 'str:Codelists/str:Codelist'):
        codelist_id = codelist.get('id')
        if not codelist_id:
            continue
        names[codelist_id] = localized_name(codelist, language, codelist_id)
        values[codelist_id] = [
            DimensionValue(code=code.get('id'), label=localized_name(code, language, code.get('id')))
            for code in _children(codelist, 'str:Code')
            if code.get('id')
        ]

    return values, names


def parse_structure(content: Union[str, bytes], language: str) -> List[Dimension]:
    """
    Canonical dimensions from an SDMX structure message (references=all).

    A dimension takes its label from the name of the codelist it references
    and its values from that codelist's codes. Dimensions without a codelist,
    or referencing an unknown or empty one, get an empty value list.
    """
    root = _parse_xml(content, "structure")
    structures = _first(root, 'mes:Structures')

    codelist_values, codelist_names = parse_codelists(structures, language)

    data_structure = _first(structures, 'str:DataStructures/str:DataStructure')
    dimension_list = _first(data_structure, 'str:DataStructureComponents/str:DimensionList')

    dimensions = []
    for elem in list(dimension_list) if dimension_list is not None else []:
        if elem.tag not in (DIMENSION_TAG, TIME_DIMENSION_TAG):
            continue
        dim_id = elem.get('id')
        if not dim_id:
            continue
        codelist_id = _codelist_ref(elem)
        dimensions.append(Dimension(
            code=dim_id,
            label=codelist_names.get(codelist_id, dim_id) if codelist_id else dim_id,
            position=_parse_position(elem.get('position')),
            is_time_dimension=elem.tag == TIME_DIMENSION_TAG,
            values=tuple(codelist_values.get(codelist_id, [])) if codelist_id else (),
        ))

    logger.debug(f"Parsed {len(dimensions)} dimensions from SDMX structure")
    return dimensions


def _label_index(dimensions: List[Dimension]) -> Dict[Tuple[str, str], str]:
    return {
        (dimension.code, value.code): value.label
        for dimension in dimensions
        for value in dimension.values
    }


def _resolve(labels: Dict[Tuple[str, str], str], key_values: List[ET.Element]) -> Dict[str, str]:
    resolved = {}
    for key_value in key_values:
        dim_id = key_value.get('id')
        raw = key_value.get('value')
        if dim_id is None or raw is None:
            continue
        # Unknown codes stay as the raw code
        resolved[dim_id] = labels.get((dim_id, raw), raw)
    return resolved


def parse_generic_data(content: Union[str, bytes], dimensions: List[Dimension]) -> List[Observation]:
    """
    Observations from an SDMX GenericData message.

    Handles the flat layout requested with dimensionAtObservation=AllDimensions
    as well as series-grouped data. An empty message yields an empty list.
    """
    root = _parse_xml(content, "data")
    labels = _label_index(dimensions)
    observations = []

    for data_set in _children(root, 'mes:DataSet'):
        for obs in _children(data_set, 'gen:Obs'):
            observations.append(Observation(
                values=_resolve(labels, _children(obs, 'gen:ObsKey/gen:Value')),
                measure=_parse_measure(_attr(_first(obs, 'gen:ObsValue'), 'value')),
            ))

        for series in _children(data_set, 'gen:Series'):
            series_key = _children(series, 'gen:SeriesKey/gen:Value')
            for obs in _children(series, 'gen:Obs'):
                values = _resolve(labels, series_key)
                obs_dimension = _first(obs, 'gen:ObsDimension')
                if obs_dimension is not None:
                    # The observation-level dimension is the time axis unless named
                    dim_id = obs_dimension.get('id', 'TIME_PERIOD')
                    raw = obs_dimension.get('value')
                    if raw is not None:
                        values[dim_id] = labels.get((dim_id, raw), raw)
                observations.append(Observation(
                    values=values,
                    measure=_parse_measure(_attr(_first(obs, 'gen:ObsValue'), 'value')),
                ))

    logger.debug(f"Parsed {len(observations)} observations from SDMX data")
    return observations
