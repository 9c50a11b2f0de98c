# coastal_api.py
# HTTP access to the coastal backend. Errors propagate to the caller untouched:
# requests exceptions for transport/non-2xx, pydantic.ValidationError for bad payloads.

import sys
from typing import Any, Dict, List, Optional

import requests
from pydantic import TypeAdapter

import config
from coastal_models import CoastalRecord, PredictionRequest, PredictionResult, UsgsDataset

_RECORDS = TypeAdapter(List[CoastalRecord])
_DATASETS = TypeAdapter(List[UsgsDataset])
_STRINGS = TypeAdapter(List[str])


class CoastalApiClient:
    """Thin wrapper over one requests.Session pointed at the backend."""

    def __init__(self, base_url: Optional[str] = None, session: Optional[requests.Session] = None):
        self.base_url = (base_url or config.COASTAL_API_BASE).rstrip("/")
        self.session = session or requests.Session()

    def close(self):
        self.session.close()

    # -----------------------------------------------------------------
    # Transport
    # -----------------------------------------------------------------
    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        r = self.session.get(f"{self.base_url}{path}", params=params)
        r.raise_for_status()
        return r.json()

    def _post(self, path: str, body: Dict[str, Any]) -> Any:
        r = self.session.post(f"{self.base_url}{path}", json=body)
        r.raise_for_status()
        return r.json()

    # -----------------------------------------------------------------
    # Dashboard
    # -----------------------------------------------------------------
    def fetch_coastal_data(self) -> List[CoastalRecord]:
        return _RECORDS.validate_python(self._get("/api/coastal-data"))

    def predict_coastal_change(self, request: PredictionRequest) -> PredictionResult:
        print(f"POST /api/predict region={request.region} date={request.date}", file=sys.stderr)
        return PredictionResult.model_validate(self._post("/api/predict", request.to_payload()))

    # -----------------------------------------------------------------
    # /api/usgs
    # -----------------------------------------------------------------
    def fetch_usgs_summary(self) -> List[UsgsDataset]:
        return _DATASETS.validate_python(self._get("/api/usgs"))

    def fetch_usgs_by_location(self, location: str) -> List[UsgsDataset]:
        return _DATASETS.validate_python(self._get(f"/api/usgs/location/{_segment(location)}"))

    def fetch_usgs_high_erosion(self, threshold: float = 2.0) -> List[UsgsDataset]:
        return _DATASETS.validate_python(self._get("/api/usgs/high-erosion", {"threshold": threshold}))

    def fetch_usgs_by_years(self, start_year: int = 1900, end_year: int = 2023) -> List[UsgsDataset]:
        params = {"startYear": start_year, "endYear": end_year}
        return _DATASETS.validate_python(self._get("/api/usgs/years", params))

    def fetch_usgs_locations(self) -> List[str]:
        return _STRINGS.validate_python(self._get("/api/usgs/locations"))

    # -----------------------------------------------------------------
    # /api/usgs-datasets
    # -----------------------------------------------------------------
    def fetch_datasets(self, page: Optional[int] = None, size: int = 100) -> List[UsgsDataset]:
        params: Dict[str, Any] = {"size": size}
        if page is not None:
            params["page"] = page
        payload = self._get("/api/usgs-datasets", params)
        # paged responses come back as a Spring Page object
        if isinstance(payload, dict) and "content" in payload:
            payload = payload["content"]
        return _DATASETS.validate_python(payload)

    def fetch_dataset_count(self) -> int:
        return int(self._get("/api/usgs-datasets/count"))

    def fetch_dataset_regions(self) -> List[str]:
        return _STRINGS.validate_python(self._get("/api/usgs-datasets/regions"))

    def fetch_datasets_by_region(self, region: str) -> List[UsgsDataset]:
        return _DATASETS.validate_python(self._get(f"/api/usgs-datasets/region/{_segment(region)}"))

    def fetch_datasets_by_date_range(self, start: str, end: str) -> List[UsgsDataset]:
        params = {"start": str(start), "end": str(end)}
        return _DATASETS.validate_python(self._get("/api/usgs-datasets/date-range", params))

    def fetch_datasets_high_erosion(self, threshold: float = 1.0) -> List[UsgsDataset]:
        params = {"threshold": threshold}
        return _DATASETS.validate_python(self._get("/api/usgs-datasets/high-erosion", params))

    def fetch_datasets_nearby(self, longitude: float, latitude: float,
                              radius_km: float = 10.0) -> List[UsgsDataset]:
        params = {"longitude": longitude, "latitude": latitude, "radiusKm": radius_km}
        return _DATASETS.validate_python(self._get("/api/usgs-datasets/nearby", params))


def _segment(value: str) -> str:
    return requests.utils.quote(str(value), safe="")
