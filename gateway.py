"""
Backend selection for the BFS Statistics Gateway.

Both clients offer the same capabilities (dimensions, query building,
observations); the gateway picks one by the dataset's backend.
"""

import logging
from typing import Any, Dict, List, Union

from models.dataset_types import Backend, DatasetRef, Dimension
from pxweb_client import PxWebClient
from sse_client import SSEClient

logger = logging.getLogger(__name__)


class StatsGateway:
    """Dispatches dataset operations to the PXWEB or SSE client."""

    def __init__(self, pxweb: PxWebClient, sse: SSEClient):
        self.pxweb = pxweb
        self.sse = sse
        self._backends: Dict[Backend, Union[PxWebClient, SSEClient]] = {
            Backend.TABULAR: pxweb,
            Backend.TIMESERIES: sse,
        }

    def backend_for(self, ref: DatasetRef) -> Union[PxWebClient, SSEClient]:
        return self._backends[ref.backend]

    async def get_dimensions(self, ref: DatasetRef) -> List[Dimension]:
        """Canonical dimensions of a dataset on either backend."""
        logger.info(f"Getting dimensions for {ref.dataset_id} ({ref.backend.value}, {ref.language})")
        return await self.backend_for(ref).get_dimensions(ref)

    async def get_observations(self, ref: DatasetRef, query=None, **options: Any):
        """
        Fetch data for a dataset on either backend.

        ``options`` are backend specific: ``response_format`` for tabular
        datasets, ``start_period``/``end_period`` for time-series datasets.

        Returns:
            (request sent upstream, payload) where payload is the PXWEB
            response unmodified or a list of Observation
        """
        logger.info(
            f"Getting observations for {ref.dataset_id} ({ref.backend.value}, {ref.language}, "
            f"filtered={query is not None})"
        )
        return await self.backend_for(ref).get_observations(ref, query, **options)

    async def close(self):
        await self.pxweb.close()
        await self.sse.close()
