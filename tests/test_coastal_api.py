"""
Tests for the backend HTTP client.
"""

from datetime import date
from unittest.mock import Mock

import pytest
import requests
from pydantic import ValidationError

from coastal_api import CoastalApiClient
from coastal_models import CoastalRecord, PredictionRequest, PredictionResult

BASE = "http://api.test"


def response(payload):
    resp = Mock()
    resp.json.return_value = payload
    resp.raise_for_status = Mock()
    return resp


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def client(session):
    return CoastalApiClient(base_url=BASE + "/", session=session)


class TestCoastalData:

    def test_fetch_coastal_data(self, client, session):
        session.get.return_value = response([
            {"id": 1, "region": "Cape Cod", "date": "2020-01-01",
             "seaLevel": 0.4, "erosionRate": -0.5, "precipitation": 1.2},
        ])
        records = client.fetch_coastal_data()
        session.get.assert_called_once_with(f"{BASE}/api/coastal-data", params=None)
        assert records == [CoastalRecord(id=1, region="Cape Cod", date="2020-01-01",
                                         sea_level=0.4, erosion_rate=-0.5, precipitation=1.2)]

    def test_bad_shape_rejected_at_boundary(self, client, session):
        session.get.return_value = response([{"region": "Cape Cod"}])
        with pytest.raises(ValidationError):
            client.fetch_coastal_data()

    def test_http_error_propagates(self, client, session):
        resp = response(None)
        resp.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
        session.get.return_value = resp
        with pytest.raises(requests.HTTPError):
            client.fetch_coastal_data()

    def test_network_error_propagates(self, client, session):
        session.get.side_effect = requests.ConnectionError("refused")
        with pytest.raises(requests.ConnectionError):
            client.fetch_coastal_data()
        assert session.get.call_count == 1


class TestPredict:

    def test_posts_camel_case_payload(self, client, session):
        session.post.return_value = response(
            {"id": 7, "region": "Cape Cod", "date": "2024-05-01", "likelihood": 0.42})
        request = PredictionRequest(region="Cape Cod", date=date(2024, 5, 1),
                                    sea_level=0.5, erosion_rate=-1.0, precipitation=12.0)
        result = client.predict_coastal_change(request)
        session.post.assert_called_once_with(f"{BASE}/api/predict", json={
            "region": "Cape Cod", "date": "2024-05-01",
            "seaLevel": 0.5, "erosionRate": -1.0, "precipitation": 12.0,
        })
        assert isinstance(result, PredictionResult)
        assert result.likelihood == 0.42
        assert result.region == "Cape Cod"


class TestUsgsEndpoints:

    @pytest.mark.parametrize("call,args,path,params", [
        ("fetch_usgs_summary", (), "/api/usgs", None),
        ("fetch_usgs_by_location", ("Cape Cod",), "/api/usgs/location/Cape%20Cod", None),
        ("fetch_usgs_high_erosion", (), "/api/usgs/high-erosion", {"threshold": 2.0}),
        ("fetch_usgs_by_years", (1950, 2000), "/api/usgs/years", {"startYear": 1950, "endYear": 2000}),
        ("fetch_datasets", (2, 50), "/api/usgs-datasets", {"size": 50, "page": 2}),
        ("fetch_datasets_by_region", ("South Shore",), "/api/usgs-datasets/region/South%20Shore", None),
        ("fetch_datasets_by_date_range", ("2000-01-01", "2010-12-31"), "/api/usgs-datasets/date-range",
         {"start": "2000-01-01", "end": "2010-12-31"}),
        ("fetch_datasets_high_erosion", (), "/api/usgs-datasets/high-erosion", {"threshold": 1.0}),
        ("fetch_datasets_nearby", (-70.1, 42.0, 5.0), "/api/usgs-datasets/nearby",
         {"longitude": -70.1, "latitude": 42.0, "radiusKm": 5.0}),
    ])
    def test_dataset_lists(self, client, session, call, args, path, params):
        session.get.return_value = response([
            {"id": 1, "transectId": "CC-001", "latitude": 42.05, "longitude": -70.18,
             "erosionRate": -0.5, "measurementDate": "2018-01-01", "unknownField": "x"},
        ])
        rows = getattr(client, call)(*args)
        session.get.assert_called_once_with(f"{BASE}{path}", params=params)
        assert rows[0].transect_id == "CC-001"
        assert rows[0].measurement_date == "2018-01-01"

    def test_fetch_datasets_without_page(self, client, session):
        session.get.return_value = response([])
        client.fetch_datasets()
        session.get.assert_called_once_with(f"{BASE}/api/usgs-datasets", params={"size": 100})

    def test_fetch_datasets_unwraps_page_object(self, client, session):
        session.get.return_value = response({"content": [{"id": 3}], "totalElements": 1})
        rows = client.fetch_datasets(page=0)
        assert [r.id for r in rows] == [3]

    def test_string_lists_and_count(self, client, session):
        session.get.side_effect = [response(["Cape Cod", "Boston Harbor"]), response(["North Shore"]), response(42)]
        assert client.fetch_usgs_locations() == ["Cape Cod", "Boston Harbor"]
        assert client.fetch_dataset_regions() == ["North Shore"]
        assert client.fetch_dataset_count() == 42
