"""
Shared utilities and constants for the BFS Statistics Gateway.
"""

import re
from typing import Optional

from errors import ValidationError

# SDMX 2.1 XML namespaces used by the Swiss Stats Explorer
SDMX_NAMESPACES = {
    'mes': 'http://www.sdmx.org/resources/sdmxml/schemas/v2_1/message',
    'str': 'http://www.sdmx.org/resources/sdmxml/schemas/v2_1/structure',
    'com': 'http://www.sdmx.org/resources/sdmxml/schemas/v2_1/common',
    'gen': 'http://www.sdmx.org/resources/sdmxml/schemas/v2_1/data/generic',
}

XML_LANG = '{http://www.w3.org/XML/1998/namespace}lang'

SUPPORTED_LANGUAGES = ('de', 'fr', 'it', 'en')

PXWEB_FORMATS = ('json-stat', 'json', 'csv')

# Transient statuses worth retrying: request timeout, payload too large,
# rate limited and the 5xx family
RETRYABLE_STATUS_CODES = frozenset({408, 413, 429, 500, 502, 503, 504})

# urn:sdmx:org.sdmx.infomodel.datastructure.Dataflow=AGENCY:DATAFLOW_ID(VERSION)
DATAFLOW_URN_PATTERN = re.compile(r'Dataflow=([^:]+):([^(]+)\(([^)]+)\)')

# Markers the SSE puts in the body of a 404 when a query matches nothing
NO_RECORDS_MARKERS = ('NoRecordsFound', 'NoResultsFound', 'No Results Found')


def validate_language(language: Optional[str]) -> str:
    """Normalize a language code to lowercase, rejecting unsupported ones."""
    lang = (language or '').strip().lower()
    if lang not in SUPPORTED_LANGUAGES:
        raise ValidationError(
            f"Invalid language: {language}. Must be one of: {', '.join(SUPPORTED_LANGUAGES)}"
        )
    return lang


def format_dataset_id(dataset_id: Optional[str]) -> str:
    """Trim a BFS dataset identifier; it must not be empty."""
    if dataset_id is None or not str(dataset_id).strip():
        raise ValidationError("Dataset identifier (BFS number) is required")
    return str(dataset_id).strip()


def validate_pxweb_format(response_format: str) -> str:
    """Check the response format requested from the PXWEB API."""
    if response_format not in PXWEB_FORMATS:
        raise ValidationError(
            f"Invalid format: {response_format}. Must be one of: {', '.join(PXWEB_FORMATS)}"
        )
    return response_format


def is_no_records_response(status_code: int, body: str) -> bool:
    """True when an SSE error response means 'the query matched no observations'."""
    if status_code != 404:
        return False
    return any(marker in (body or '') for marker in NO_RECORDS_MARKERS)


def truncate(text: str, limit: int = 300) -> str:
    """Shorten upstream error bodies for log and error messages."""
    text = (text or '').strip()
    return text if len(text) <= limit else text[:limit] + '...'
