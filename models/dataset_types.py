"""
Canonical data model shared by both BFS backends.

The PXWEB (tabular) and SSE (SDMX time-series) APIs describe their datasets
very differently; everything they return is normalized into these types
before it reaches the tool layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from utils import format_dataset_id, validate_language


class Backend(Enum):
    """Upstream API family a dataset is served from."""

    TABULAR = "tabular"  # PXWEB
    TIMESERIES = "timeseries"  # Swiss Stats Explorer (SDMX)


class EndpointPurpose(Enum):
    """What a resolved SSE URL is used for."""

    METADATA = "metadata"
    DATA = "data"


@dataclass(frozen=True)
class DatasetRef:
    """Identifies one dataset for the lifetime of a single request."""

    dataset_id: str
    backend: Backend
    language: str

    @classmethod
    def create(cls, dataset_id: Optional[str], backend: Backend, language: Optional[str]) -> "DatasetRef":
        """Validate caller input and build a reference."""
        return cls(
            dataset_id=format_dataset_id(dataset_id),
            backend=backend,
            language=validate_language(language),
        )


@dataclass(frozen=True)
class DataflowRef:
    """Agency, id and version parsed from a dataflow URN."""

    agency_id: str
    dataflow_id: str
    version: str

    @property
    def flow(self) -> str:
        return f"{self.agency_id},{self.dataflow_id},{self.version}"


@dataclass(frozen=True)
class DimensionValue:
    """One selectable value of a dimension."""

    code: str
    label: str


@dataclass
class Dimension:
    """
    A filterable axis of a dataset, independent of the backend.

    ``values`` keeps the upstream's declared order and holds each code once.
    ``position`` orders the dimensions for display and for the SDMX key.
    """

    code: str
    label: str
    position: int = 0
    is_time_dimension: bool = False
    values: tuple[DimensionValue, ...] = ()
    elimination: bool = False

    def __post_init__(self) -> None:
        seen: set[str] = set()
        unique = []
        for value in self.values:
            if value.code in seen:
                continue
            seen.add(value.code)
            unique.append(value)
        self.values = tuple(unique)

    @property
    def value_codes(self) -> list[str]:
        return [value.code for value in self.values]

    def label_for(self, value_code: str) -> Optional[str]:
        """Label of a value code, or None when the code is unknown."""
        for value in self.values:
            if value.code == value_code:
                return value.label
        return None


@dataclass
class Observation:
    """One data point: resolved dimension values plus a nullable measure."""

    values: dict[str, str] = field(default_factory=dict)
    measure: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        row: dict[str, Any] = dict(self.values)
        row["value"] = self.measure
        return row


@dataclass
class DatasetMetadata:
    """PXWEB metadata document with its variables normalized to dimensions."""

    title: str
    dimensions: list[Dimension]
    updated: Optional[str] = None
    source: Optional[str] = None
    note: Optional[str] = None


@dataclass
class PxWebQuery:
    """JSON body POSTed to the PXWEB API."""

    query: list[dict[str, Any]]
    response_format: str = "json-stat"

    def to_payload(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "response": {"format": self.response_format},
        }


@dataclass
class SdmxDataQuery:
    """Positional key and query parameters for an SSE data request."""

    key: str
    params: list[tuple[str, str]]

    def url(self, data_url: str) -> str:
        """Append key and parameters to a resolved data URL ending in '/'."""
        query = "&".join(f"{name}={value}" for name, value in self.params)
        return f"{data_url}{self.key}?{query}" if query else f"{data_url}{self.key}"
