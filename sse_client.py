"""
Swiss Stats Explorer (SSE) client for BFS time-series data.

The SSE speaks SDMX 2.1 REST:
1. Dataflow discovery (dataset id -> agency/version), cached
2. Structure message with codelists -> canonical dimensions
3. GenericData message -> observations with labels resolved
"""

import asyncio
import logging
from typing import List, Optional, Tuple

import config
from endpoint_resolver import EndpointCache, EndpointResolver
from http_session import UpstreamSession
from models.dataset_types import DatasetRef, Dimension, EndpointPurpose, Observation, SdmxDataQuery
from query_builder import Filter, build_sdmx_query
from sdmx_parser import parse_generic_data, parse_structure

logger = logging.getLogger(__name__)


class SSEClient:
    """SDMX client for the Swiss Stats Explorer."""

    def __init__(self,
                 base_url: str = None,
                 cache: Optional[EndpointCache] = None,
                 http: Optional[UpstreamSession] = None):
        self.base_url = (base_url or config.SSE_BASE_URL).rstrip('/')
        self.http = http or UpstreamSession("SSE API")
        self.resolver = EndpointResolver(self.http, cache if cache is not None else EndpointCache(), self.base_url)

    async def close(self):
        """Close HTTP session."""
        await self.http.close()

    async def get_dimensions(self, ref: DatasetRef) -> List[Dimension]:
        """
        Canonical dimensions of an SSE dataflow.

        Raises:
            NotFoundError: the dataflow is not declared by the SSE
            UpstreamError: discovery or structure request failed or is unparsable
        """
        url = await self.resolver.resolve(ref.dataset_id, EndpointPurpose.METADATA)
        logger.debug(f"Fetching SSE metadata: {url} (language={ref.language})")

        response = await self.http.get(
            url,
            timeout=config.METADATA_TIMEOUT,
            headers={"Accept": "application/xml", "Accept-Language": ref.language},
        )
        dimensions = parse_structure(response.content, ref.language)
        logger.debug(f"SSE dataflow {ref.dataset_id} has {len(dimensions)} dimensions")
        return dimensions

    def build_query(self,
                    dimensions: List[Dimension],
                    query: Filter = None,
                    start_period: Optional[str] = None,
                    end_period: Optional[str] = None) -> SdmxDataQuery:
        return build_sdmx_query(dimensions, query, start_period, end_period)

    async def get_observations(self,
                               ref: DatasetRef,
                               query: Filter = None,
                               start_period: Optional[str] = None,
                               end_period: Optional[str] = None) -> Tuple[SdmxDataQuery, List[Observation]]:
        """
        Fetch and normalize observations.

        Returns:
            The query that was sent and the observations it returned

        Raises:
            NoRecordsFoundError: the query matched no observations
            NotFoundError: the dataflow is not declared by the SSE
            UpstreamError: any request failed or a payload is unparsable
        """
        if config.REQUEST_DELAY > 0:
            await asyncio.sleep(config.REQUEST_DELAY)

        data_url = await self.resolver.resolve(ref.dataset_id, EndpointPurpose.DATA)
        dimensions = await self.get_dimensions(ref)
        sdmx_query = self.build_query(dimensions, query, start_period, end_period)

        url = sdmx_query.url(data_url)
        logger.debug(f"Fetching SSE data: {url}")

        response = await self.http.get(
            url,
            timeout=config.DATA_TIMEOUT,
            headers={"Accept": "application/xml", "Accept-Language": ref.language},
            no_records=True,
        )
        observations = parse_generic_data(response.content, dimensions)
        logger.debug(f"SSE dataflow {ref.dataset_id} returned {len(observations)} observations")
        return sdmx_query, observations
