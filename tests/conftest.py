"""
Pytest configuration and shared fixtures.
"""

from unittest.mock import AsyncMock

import httpx
import pytest

import config
from http_session import UpstreamSession
from models.dataset_types import Dimension, DimensionValue

URN_PREFIX = "urn:sdmx:org.sdmx.infomodel.datastructure.Dataflow="


@pytest.fixture(autouse=True)
def no_request_delay(monkeypatch):
    """Tests never wait for the politeness delay."""
    monkeypatch.setattr(config, "REQUEST_DELAY", 0.0)


@pytest.fixture
def make_response():
    """Factory for real httpx responses."""
    def _make(status_code=200, *, json=None, text=None, content=None, headers=None):
        return httpx.Response(status_code, json=json, text=text, content=content, headers=headers)
    return _make


@pytest.fixture
def mock_http():
    """UpstreamSession without retries whose httpx client is an AsyncMock."""
    http = UpstreamSession("Test API", max_retries=0, request_delay=0.0, max_retry_delay=0.0)
    http.session = AsyncMock()
    return http


@pytest.fixture
def dataflow_listing():
    """SSE dataflow discovery document."""
    return {
        "references": {
            f"{URN_PREFIX}CH1.LWZ:DF_LWZ_1(4.0.0)": {"id": "DF_LWZ_1"},
            f"{URN_PREFIX}BFS:DF_TEST_1(1.0)": {"id": "DF_TEST_1"},
            f"{URN_PREFIX}OTHER:DF_TEST_1(2.0)": {"id": "DF_TEST_1"},
        }
    }


@pytest.fixture
def structure_xml():
    """SDMX structure message with codelists and a time dimension."""
    return '''<?xml version="1.0" encoding="UTF-8"?>
<mes:Structure xmlns:mes="http://www.sdmx.org/resources/sdmxml/schemas/v2_1/message"
               xmlns:str="http://www.sdmx.org/resources/sdmxml/schemas/v2_1/structure"
               xmlns:com="http://www.sdmx.org/resources/sdmxml/schemas/v2_1/common">
    <mes:Header><mes:ID>IREF000001</mes:ID></mes:Header>
    <mes:Structures>
        <str:Codelists>
            <str:Codelist id="CL_GEO" agencyID="BFS" version="1.0">
                <com:Name xml:lang="en">Region</com:Name>
                <com:Name xml:lang="de">Gebiet</com:Name>
                <str:Code id="CH">
                    <com:Name xml:lang="en">Switzerland</com:Name>
                    <com:Name xml:lang="de">Schweiz</com:Name>
                </str:Code>
                <str:Code id="ZH">
                    <com:Name xml:lang="en">Zurich</com:Name>
                    <com:Name xml:lang="de">Zürich</com:Name>
                </str:Code>
            </str:Codelist>
            <str:Codelist id="CL_SEX" agencyID="BFS" version="1.0">
                <com:Name xml:lang="en">Sex</com:Name>
                <str:Code id="T"><com:Name xml:lang="en">Total</com:Name></str:Code>
                <str:Code id="F"><com:Name xml:lang="en">Female</com:Name></str:Code>
            </str:Codelist>
            <str:Codelist id="CL_UNIT" agencyID="BFS" version="1.0">
                <com:Name xml:lang="en">Unit</com:Name>
            </str:Codelist>
        </str:Codelists>
        <str:DataStructures>
            <str:DataStructure id="DSD_TEST_1" agencyID="BFS" version="1.0">
                <str:DataStructureComponents>
                    <str:DimensionList id="DimensionDescriptor">
                        <str:Dimension id="GEO" position="1">
                            <str:LocalRepresentation>
                                <str:Enumeration><Ref id="CL_GEO" agencyID="BFS" version="1.0"/></str:Enumeration>
                            </str:LocalRepresentation>
                        </str:Dimension>
                        <str:Dimension id="SEX" position="2">
                            <str:LocalRepresentation>
                                <str:Enumeration><Ref id="CL_SEX" agencyID="BFS" version="1.0"/></str:Enumeration>
                            </str:LocalRepresentation>
                        </str:Dimension>
                        <str:Dimension id="UNIT" position="3">
                            <str:LocalRepresentation>
                                <str:Enumeration><Ref id="CL_UNIT" agencyID="BFS" version="1.0"/></str:Enumeration>
                            </str:LocalRepresentation>
                        </str:Dimension>
                        <str:TimeDimension id="TIME_PERIOD" position="4">
                            <str:LocalRepresentation>
                                <str:TextFormat textType="ObservationalTimePeriod"/>
                            </str:LocalRepresentation>
                        </str:TimeDimension>
                    </str:DimensionList>
                </str:DataStructureComponents>
            </str:DataStructure>
        </str:DataStructures>
    </mes:Structures>
</mes:Structure>'''


@pytest.fixture
def generic_data_xml():
    """SDMX GenericData message with a flat observation layout."""
    return '''<?xml version="1.0" encoding="UTF-8"?>
<mes:GenericData xmlns:mes="http://www.sdmx.org/resources/sdmxml/schemas/v2_1/message"
                 xmlns:gen="http://www.sdmx.org/resources/sdmxml/schemas/v2_1/data/generic">
    <mes:Header><mes:ID>IREF000002</mes:ID></mes:Header>
    <mes:DataSet>
        <gen:Obs>
            <gen:ObsKey>
                <gen:Value id="GEO" value="CH"/>
                <gen:Value id="SEX" value="T"/>
                <gen:Value id="UNIT" value="PERS"/>
                <gen:Value id="TIME_PERIOD" value="2020"/>
            </gen:ObsKey>
            <gen:ObsValue value="100.5"/>
        </gen:Obs>
    </mes:DataSet>
</mes:GenericData>'''


@pytest.fixture
def pxweb_metadata():
    """PXWEB table metadata document."""
    return {
        "title": "Permanent resident population by canton",
        "updated": "2024-08-29T08:30:00",
        "variables": [
            {"code": "Jahr", "text": "Year", "values": ["2019", "2020"], "valueTexts": ["2019", "2020"], "time": True},
            {
                "code": "Kanton",
                "text": "Canton",
                "values": ["0", "1", "2", "3", "4", "5", "6"],
                "valueTexts": ["Switzerland", "Zürich", "Bern", "Luzern", "Uri", "Schwyz", "Obwalden"],
                "elimination": True,
            },
            {"code": "Geschlecht", "values": ["1", "2"]},
        ],
    }


@pytest.fixture
def sample_dimensions():
    """Three positional dimensions and a time axis."""
    return [
        Dimension(code="GEO", label="Region", position=0,
                  values=(DimensionValue("CH", "Switzerland"), DimensionValue("ZH", "Zurich"))),
        Dimension(code="SEX", label="Sex", position=1,
                  values=(DimensionValue("A", "All"), DimensionValue("B", "Both"))),
        Dimension(code="UNIT", label="Unit", position=2),
        Dimension(code="TIME_PERIOD", label="TIME_PERIOD", position=3, is_time_dimension=True),
    ]


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that require live API connectivity"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take a long time to run"
    )
    config.addinivalue_line(
        "markers", "unit: Fast unit tests"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests with mocked dependencies"
    )
