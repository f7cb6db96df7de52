"""
Unit tests for the PXWEB client.
"""

import pytest

from errors import NotFoundError, UpstreamError, ValidationError
from models.dataset_types import Backend, DatasetRef
from pxweb_client import PxWebClient, normalize_variables

PXWEB_BASE = "https://pxweb.test/api/v1"
TABLE = "px-x-0102010000_101"
TABLE_URL = f"{PXWEB_BASE}/en/{TABLE}/{TABLE}.px"


class TestNormalizeVariables:
    """Test mapping of PXWEB variables to dimensions."""

    def test_variables(self, pxweb_metadata):
        dimensions = normalize_variables(pxweb_metadata["variables"])

        assert [d.code for d in dimensions] == ["Jahr", "Kanton", "Geschlecht"]
        assert [d.position for d in dimensions] == [0, 1, 2]
        assert dimensions[0].is_time_dimension
        assert dimensions[1].elimination
        assert dimensions[1].label_for("1") == "Zürich"

    def test_missing_labels_default_to_code(self, pxweb_metadata):
        geschlecht = normalize_variables(pxweb_metadata["variables"])[2]

        assert geschlecht.label == "Geschlecht"
        assert [v.label for v in geschlecht.values] == ["1", "2"]

    def test_duplicate_values_dropped(self):
        dimension = normalize_variables([
            {"code": "Jahr", "values": ["2020", "2020", "2021"], "valueTexts": ["a", "b", "c"]}
        ])[0]

        assert dimension.value_codes == ["2020", "2021"]
        assert dimension.label_for("2020") == "a"

    def test_no_variables(self):
        assert normalize_variables(None) == []
        assert normalize_variables([{"text": "no code"}]) == []


class TestPxWebClient:
    """Test PXWEB metadata and data requests."""

    @pytest.fixture
    def client(self, mock_http):
        return PxWebClient(base_url=f"{PXWEB_BASE}/", http=mock_http)

    @pytest.fixture
    def ref(self):
        return DatasetRef.create(TABLE, Backend.TABULAR, "en")

    def test_table_url(self, client, ref):
        assert client.base_url == PXWEB_BASE
        assert client.table_url(ref) == TABLE_URL

    @pytest.mark.asyncio
    async def test_get_metadata(self, client, ref, mock_http, make_response, pxweb_metadata):
        mock_http.session.request.return_value = make_response(200, json=pxweb_metadata)

        metadata = await client.get_metadata(ref)

        assert metadata.title == "Permanent resident population by canton"
        assert metadata.updated == "2024-08-29T08:30:00"
        assert metadata.source == "BFS"
        assert len(metadata.dimensions) == 3
        args, _ = mock_http.session.request.call_args
        assert args == ("GET", TABLE_URL)

    @pytest.mark.asyncio
    async def test_get_metadata_defaults(self, client, ref, mock_http, make_response):
        mock_http.session.request.return_value = make_response(200, json={})

        metadata = await client.get_metadata(ref)

        assert metadata.title == "Untitled"
        assert metadata.dimensions == []

    @pytest.mark.asyncio
    async def test_get_metadata_not_json(self, client, ref, mock_http, make_response):
        mock_http.session.request.return_value = make_response(200, text="<html/>")

        with pytest.raises(UpstreamError):
            await client.get_metadata(ref)

    @pytest.mark.asyncio
    async def test_unknown_table(self, client, ref, mock_http, make_response):
        mock_http.session.request.return_value = make_response(404, text="Not found")

        with pytest.raises(UpstreamError) as exc_info:
            await client.get_metadata(ref)

        assert exc_info.value.status_code == 404
        assert not isinstance(exc_info.value, NotFoundError)

    @pytest.mark.asyncio
    async def test_get_observations_without_filter(self, client, ref, mock_http, make_response, pxweb_metadata):
        """Test that every dimension is requested with the wildcard."""
        payload = {"class": "dataset", "value": [1, 2, 3]}
        mock_http.session.request.side_effect = [
            make_response(200, json=pxweb_metadata),
            make_response(200, json=payload),
        ]

        query, data = await client.get_observations(ref)

        assert data == payload
        method, url = mock_http.session.request.call_args.args
        assert (method, url) == ("POST", TABLE_URL)
        body = mock_http.session.request.call_args.kwargs["json"]
        assert body == query.to_payload()
        assert [entry["code"] for entry in body["query"]] == ["Jahr", "Kanton", "Geschlecht"]
        assert body["response"] == {"format": "json-stat"}

    @pytest.mark.asyncio
    async def test_get_observations_csv(self, client, ref, mock_http, make_response, pxweb_metadata):
        mock_http.session.request.side_effect = [
            make_response(200, json=pxweb_metadata),
            make_response(200, text='"Jahr","Kanton","Value"\n"2020","Zürich",1539275\n'),
        ]

        query, data = await client.get_observations(ref, {"Jahr": "2020", "Kanton": ["1"]}, "csv")

        assert isinstance(data, str)
        assert "Zürich" in data
        assert query.query == [
            {"code": "Jahr", "selection": {"filter": "item", "values": ["2020"]}},
            {"code": "Kanton", "selection": {"filter": "item", "values": ["1"]}},
        ]

    @pytest.mark.asyncio
    async def test_unknown_filter_dimension(self, client, ref, mock_http, make_response, pxweb_metadata):
        """Test that a bad filter fails before any data request."""
        mock_http.session.request.return_value = make_response(200, json=pxweb_metadata)

        with pytest.raises(ValidationError):
            await client.get_observations(ref, {"Year": "2020"})

        assert mock_http.session.request.call_count == 1

    @pytest.mark.asyncio
    async def test_get_config(self, client, mock_http, make_response):
        mock_http.session.request.return_value = make_response(200, json={"maxValues": 5000})

        result = await client.get_config("de")

        assert result == {"maxValues": 5000}
        assert mock_http.session.request.call_args.args == ("GET", f"{PXWEB_BASE}/de/?config")

    @pytest.mark.asyncio
    async def test_close(self, client, mock_http):
        session = mock_http.session

        await client.close()

        session.aclose.assert_awaited_once()
        assert mock_http.session is None
