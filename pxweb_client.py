"""
PXWEB API client for BFS statistical tables (tabular backend).

Metadata is a JSON document whose "variables" array is already close to the
canonical dimension shape; data is POSTed as a JSON query and returned in the
upstream's own format (JSON-stat, JSON or CSV) without reshaping.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

import config
from errors import UpstreamError
from http_session import UpstreamSession
from models.dataset_types import DatasetMetadata, DatasetRef, Dimension, DimensionValue, PxWebQuery
from query_builder import Filter, build_pxweb_query

logger = logging.getLogger(__name__)


def normalize_variables(variables: Optional[List[Dict[str, Any]]]) -> List[Dimension]:
    """
    Map PXWEB variables to canonical dimensions.

    Missing labels default to the code, missing value arrays to empty.
    """
    dimensions = []
    for position, variable in enumerate(variables or []):
        code = variable.get("code")
        if not code:
            continue
        values = variable.get("values") or []
        value_texts = variable.get("valueTexts") or []
        dimensions.append(Dimension(
            code=code,
            label=variable.get("text") or code,
            position=position,
            is_time_dimension=bool(variable.get("time", False)),
            elimination=bool(variable.get("elimination", False)),
            values=tuple(
                DimensionValue(
                    code=str(value),
                    label=str(value_texts[i]) if i < len(value_texts) and value_texts[i] else str(value),
                )
                for i, value in enumerate(values)
            ),
        ))
    return dimensions


class PxWebClient:
    """Client for the BFS PXWEB API."""

    def __init__(self, base_url: str = None, http: Optional[UpstreamSession] = None):
        self.base_url = (base_url or config.PXWEB_BASE_URL).rstrip('/')
        self.http = http or UpstreamSession("PXWEB API")

    async def close(self):
        """Close HTTP session."""
        await self.http.close()

    def table_url(self, ref: DatasetRef) -> str:
        return f"{self.base_url}/{ref.language}/{ref.dataset_id}/{ref.dataset_id}.px"

    async def get_raw_metadata(self, ref: DatasetRef) -> Dict[str, Any]:
        """Fetch the metadata JSON of a table."""
        url = self.table_url(ref)
        logger.debug(f"Fetching PXWEB metadata: {url}")

        response = await self.http.get(url, timeout=config.METADATA_TIMEOUT)
        try:
            document = response.json()
        except ValueError as e:
            raise UpstreamError(f"PXWEB metadata for {ref.dataset_id} is not valid JSON: {e}", url=url) from e
        if not isinstance(document, dict):
            raise UpstreamError(f"Unexpected PXWEB metadata shape for {ref.dataset_id}", url=url)
        return document

    async def get_metadata(self, ref: DatasetRef) -> DatasetMetadata:
        """Fetch table metadata with its variables normalized."""
        document = await self.get_raw_metadata(ref)
        dimensions = normalize_variables(document.get("variables"))
        logger.debug(f"PXWEB table {ref.dataset_id} has {len(dimensions)} dimensions")
        return DatasetMetadata(
            title=document.get("title") or "Untitled",
            dimensions=dimensions,
            updated=document.get("updated"),
            source=document.get("source") or "BFS",
            note=document.get("note"),
        )

    async def get_dimensions(self, ref: DatasetRef) -> List[Dimension]:
        return (await self.get_metadata(ref)).dimensions

    async def fetch_data(self, ref: DatasetRef, query: PxWebQuery) -> Union[Dict[str, Any], List[Any], str]:
        """
        POST a query and return the upstream payload unmodified.

        JSON formats are decoded; CSV is returned as text.
        """
        if config.REQUEST_DELAY > 0:
            await asyncio.sleep(config.REQUEST_DELAY)

        url = self.table_url(ref)
        logger.debug(f"Fetching PXWEB data: {url} ({len(query.query)} dimension selections)")

        response = await self.http.post(url, timeout=config.DATA_TIMEOUT, json=query.to_payload())
        if query.response_format == "csv":
            return response.text
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"PXWEB data for {ref.dataset_id} is not valid JSON: {e}", url=url) from e

    def build_query(self,
                    dimensions: List[Dimension],
                    query: Filter = None,
                    response_format: str = "json-stat") -> PxWebQuery:
        return build_pxweb_query(dimensions, query, response_format)

    async def get_observations(self,
                               ref: DatasetRef,
                               query: Filter = None,
                               response_format: str = "json-stat") -> Tuple[PxWebQuery, Union[Dict[str, Any], List[Any], str]]:
        """
        Fetch data for a table, selecting everything when query is None.

        Returns:
            The query body that was sent and the unmodified upstream payload
        """
        dimensions = await self.get_dimensions(ref)
        pxweb_query = self.build_query(dimensions, query, response_format)
        return pxweb_query, await self.fetch_data(ref, pxweb_query)

    async def get_config(self, language: str) -> Dict[str, Any]:
        """API limits and settings (max cells per query, rate-limit window)."""
        url = f"{self.base_url}/{language}/?config"
        response = await self.http.get(url, timeout=config.METADATA_TIMEOUT)
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"PXWEB config is not valid JSON: {e}", url=url) from e
