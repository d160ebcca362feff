"""Wire schemas for the delivery status endpoint."""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class LocationPayload(WireModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _lenient_coordinate(cls, value):
        if value is None or isinstance(value, bool):
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None


class DriverPayload(WireModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    vehicle_type: Optional[str] = None
    vehicle_number: Optional[str] = None
    rating: Optional[float] = None

    @field_validator("rating", mode="before")
    @classmethod
    def _lenient_rating(cls, value):
        if value is None or value == "":
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None


class EtaWindowPayload(WireModel):
    eta_range_min: Optional[float] = Field(default=None, alias="etaRangeMin")
    eta_range_max: Optional[float] = Field(default=None, alias="etaRangeMax")
    driver_status: Optional[str] = Field(default=None, alias="driverStatus")


class DeliveryStatusPayload(WireModel):
    status: Optional[str] = None
    driver: Optional[DriverPayload] = None
    driver_location: Optional[LocationPayload] = Field(default=None, alias="driverLocation")
    customer_location: Optional[LocationPayload] = Field(default=None, alias="customerLocation")
    restaurant_location: Optional[LocationPayload] = Field(default=None, alias="restaurantLocation")
    eta: Optional[Union[EtaWindowPayload, float]] = None
    estimated_duration: Optional[float] = Field(default=None, alias="estimatedDuration")

    @field_validator("status", mode="before")
    @classmethod
    def _status_as_text(cls, value):
        # non-string statuses are unrecognized, not malformed
        return value if isinstance(value, str) else None
