# coastal_models.py
# Typed payloads exchanged with the coastal backend and the shoreline feed

from datetime import date as Date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire; either accepted on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class CoastalRecord(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: Optional[int] = None
    region: str
    date: str  # ISO-8601, so string order is chronological order
    sea_level: float
    erosion_rate: float
    precipitation: float


class ShorelinePoint(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    transect_id: str
    latitude: float
    longitude: float
    date: str = ""
    erosion_rate: float = 0.0
    shoreline_change: float = 0.0
    uncertainty: float = 0.0
    location: str = "Unknown"


class PredictionRequest(CamelModel):
    region: str = Field(min_length=1)
    date: Date
    sea_level: float = Field(ge=0, le=100)
    erosion_rate: float = Field(ge=-10, le=10)
    precipitation: float = Field(ge=0, le=500)

    @field_validator("date")
    @classmethod
    def not_in_future(cls, value: Date) -> Date:
        if value > Date.today():
            raise ValueError("Date cannot be in the future")
        return value


class PredictionResult(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: Optional[int] = None
    region: Optional[str] = None
    date: Optional[str] = None
    likelihood: float


class UsgsDataset(CamelModel):
    """Row of the USGS Massachusetts shoreline change dataset as served by the backend."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: Optional[int] = None
    transect_id: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    location: Optional[str] = None
    region: Optional[str] = None
    measurement_date: Optional[str] = None
    shore_pos_uncert: Optional[float] = None
    shoreline_position: Optional[float] = None
    shoreline_change: Optional[float] = None
    erosion_rate: Optional[float] = None
    metadata: Optional[str] = None
    data_source: Optional[str] = None
    dataset_doi: Optional[str] = None
    data_url: Optional[str] = None
