"""Tracking request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CameraModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CoordinateModel(CameraModel):
    latitude: float
    longitude: float


class RegionModel(CameraModel):
    latitude: float
    longitude: float
    latitude_delta: float = Field(alias="latitudeDelta")
    longitude_delta: float = Field(alias="longitudeDelta")


class MarkerModel(CameraModel):
    id: str
    type: str
    coordinate: CoordinateModel
    title: str
    emoji: str


class PolylineModel(CameraModel):
    id: str
    coordinates: List[CoordinateModel]
    stroke_color: str = Field(alias="strokeColor")
    stroke_width: int = Field(alias="strokeWidth")


class BoundsModel(CameraModel):
    action: str = Field(..., description="fitToCoordinates, animateToRegion or keep")
    points: Optional[List[CoordinateModel]] = None
    region: Optional[RegionModel] = None
    edge_padding: Optional[dict] = Field(default=None, alias="edgePadding")
    duration_ms: Optional[int] = Field(default=None, alias="durationMs")


class MapModel(CameraModel):
    shows_map: bool = Field(alias="showsMap")
    markers: List[MarkerModel]
    polylines: List[PolylineModel]
    initial_region: RegionModel = Field(alias="initialRegion")
    bounds: BoundsModel


class ProgressStepModel(BaseModel):
    key: str
    done: bool
    active: bool


class DriverModel(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    vehicle_type: Optional[str] = None
    vehicle_number: Optional[str] = None
    rating: Optional[float] = None


class TrackingStartRequest(BaseModel):
    restaurant_name: Optional[str] = Field(default=None, description="Title for the restaurant marker.")


class TrackingResponse(BaseModel):
    order_id: str
    status: Optional[str]
    ordinal: Optional[int]
    progress: List[ProgressStepModel]
    title: str
    subtitle: str
    message: str
    eta_text: Optional[str]
    eta_window_text: Optional[str]
    route_duration_text: Optional[str]
    route_distance_km: Optional[float]
    driver: Optional[DriverModel]
    customer_address: Optional[str]
    map: MapModel
    is_running: bool
    updated_at: Optional[datetime]
