"""
Dataflow discovery for the Swiss Stats Explorer.

SSE datasets are addressed by agency, dataflow id and version, but callers
only know the dataflow id (e.g. "DF_LWZ_1"). The resolver looks the id up in
the full dataflow listing once and caches the metadata and data URLs.
"""

import logging
import threading
from typing import Dict, Optional, Tuple

import config
from errors import NotFoundError, UpstreamError
from http_session import UpstreamSession
from models.dataset_types import DataflowRef, EndpointPurpose
from utils import DATAFLOW_URN_PATTERN

logger = logging.getLogger(__name__)


class EndpointCache:
    """
    Process-wide map of (dataset id, purpose) to resolved URL.

    Entries never expire: the dataset-to-agency/version mapping is assumed
    stable for the life of the process, so a dataflow the upstream retires
    keeps its stale URL until restart.
    """

    def __init__(self):
        self._entries: Dict[Tuple[str, EndpointPurpose], str] = {}
        self._dataflows: Dict[str, DataflowRef] = {}
        self._lock = threading.Lock()

    def get(self, dataset_id: str, purpose: EndpointPurpose) -> Optional[str]:
        return self._entries.get((dataset_id, purpose))

    def get_dataflow(self, dataset_id: str) -> Optional[DataflowRef]:
        return self._dataflows.get(dataset_id)

    def put_if_absent(self, dataset_id: str, purpose: EndpointPurpose, url: str) -> str:
        """Store url unless an entry exists; return the cached value."""
        with self._lock:
            return self._entries.setdefault((dataset_id, purpose), url)

    def put_dataflow_if_absent(self, dataflow: DataflowRef) -> DataflowRef:
        with self._lock:
            return self._dataflows.setdefault(dataflow.dataflow_id, dataflow)

    def __contains__(self, key: Tuple[str, EndpointPurpose]) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def parse_dataflow_urn(urn: str) -> Optional[DataflowRef]:
    """Extract agency, id and version from a dataflow URN, or None."""
    match = DATAFLOW_URN_PATTERN.search(urn)
    if not match:
        return None
    return DataflowRef(agency_id=match.group(1), dataflow_id=match.group(2), version=match.group(3))


def find_dataflow(references: Dict[str, object], dataset_id: str) -> Optional[DataflowRef]:
    """
    First URN whose dataflow id equals dataset_id.

    The listing is scanned in document order with no tie-break, so when the
    same id is declared by several agencies or versions the first one wins.
    """
    for urn in references:
        dataflow = parse_dataflow_urn(urn)
        if dataflow and dataflow.dataflow_id == dataset_id:
            return dataflow
    return None


class EndpointResolver:
    """Resolves SSE dataset identifiers to metadata and data URLs."""

    def __init__(self,
                 http: UpstreamSession,
                 cache: EndpointCache,
                 base_url: str = None):
        self.http = http
        self.cache = cache
        self.base_url = (base_url or config.SSE_BASE_URL).rstrip('/')

    def metadata_url(self, dataflow: DataflowRef) -> str:
        return (f"{self.base_url}/dataflow/{dataflow.agency_id}/{dataflow.dataflow_id}/"
                f"{dataflow.version}?references=all")

    def data_url(self, dataflow: DataflowRef) -> str:
        return f"{self.base_url}/data/{dataflow.flow}/"

    def url_for(self, dataflow: DataflowRef, purpose: EndpointPurpose) -> str:
        if purpose is EndpointPurpose.METADATA:
            return self.metadata_url(dataflow)
        return self.data_url(dataflow)

    async def discover(self, dataset_id: str) -> DataflowRef:
        """Fetch the dataflow listing and locate dataset_id in it."""
        url = f"{self.base_url}/dataflow"
        response = await self.http.get(
            url,
            timeout=config.METADATA_TIMEOUT,
            headers={"Accept": "application/json", "Accept-Language": "en"},
        )
        try:
            document = response.json()
        except ValueError as e:
            raise UpstreamError(f"Dataflow listing is not valid JSON: {e}", url=url) from e

        references = document.get("references") if isinstance(document, dict) else None
        if not isinstance(references, dict):
            references = {}

        dataflow = find_dataflow(references, dataset_id)
        if dataflow is None:
            logger.info(f"Dataset {dataset_id} not found among {len(references)} SSE dataflows")
            raise NotFoundError(f"Dataset {dataset_id} not found in SSE API")
        return dataflow

    async def resolve_dataflow(self, dataset_id: str) -> DataflowRef:
        """Agency/id/version for dataset_id, discovering it on first use."""
        cached = self.cache.get_dataflow(dataset_id)
        if cached is not None:
            return cached
        dataflow = await self.discover(dataset_id)
        dataflow = self.cache.put_dataflow_if_absent(dataflow)
        # One discovery call fills both purposes
        for purpose in EndpointPurpose:
            self.cache.put_if_absent(dataset_id, purpose, self.url_for(dataflow, purpose))
        return dataflow

    async def resolve(self, dataset_id: str, purpose: EndpointPurpose) -> str:
        """
        Resolved URL for dataset_id.

        Raises:
            NotFoundError: no declared dataflow matches dataset_id
            UpstreamError: the discovery call failed
        """
        cached = self.cache.get(dataset_id, purpose)
        if cached is not None:
            return cached

        dataflow = await self.resolve_dataflow(dataset_id)
        url = self.cache.put_if_absent(dataset_id, purpose, self.url_for(dataflow, purpose))
        logger.debug(f"Resolved SSE {purpose.value} URL for {dataset_id}: {url}")
        return url
