"""Derives the marker/polyline set handed to the map renderer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional

from ..config import settings
from ..models.domain import DeliverySnapshot, GeoPoint, Route
from .geospatial import region_for_points

CENTER_DELTA = 0.015
CENTER_ANIMATION_MS = 500
INITIAL_DELTA = 0.03
DEFAULT_DELTA = 0.05
FIT_EDGE_PADDING = {"top": 60, "right": 40, "bottom": 40, "left": 40}

MarkerType = Literal["restaurant", "customer", "driver"]


@dataclass(frozen=True, slots=True)
class Region:
    latitude: float
    longitude: float
    latitude_delta: float
    longitude_delta: float


@dataclass(frozen=True, slots=True)
class Marker:
    id: str
    type: MarkerType
    coordinate: GeoPoint
    title: str
    emoji: str


@dataclass(frozen=True, slots=True)
class Polyline:
    id: str
    coordinates: tuple[GeoPoint, ...]
    stroke_color: str
    stroke_width: int


@dataclass(frozen=True, slots=True)
class FitToCoordinates:
    points: tuple[GeoPoint, ...]
    region: Region
    edge_padding: dict = field(default_factory=lambda: dict(FIT_EDGE_PADDING))
    action: str = "fitToCoordinates"


@dataclass(frozen=True, slots=True)
class CenterOn:
    region: Region
    duration_ms: int = CENTER_ANIMATION_MS
    action: str = "animateToRegion"


@dataclass(frozen=True, slots=True)
class KeepRegion:
    action: str = "keep"


BoundsInstruction = FitToCoordinates | CenterOn | KeepRegion


@dataclass(frozen=True, slots=True)
class MapView:
    markers: tuple[Marker, ...]
    polylines: tuple[Polyline, ...]
    initial_region: Region
    bounds: BoundsInstruction
    shows_map: bool


def build_map_view(
    snapshot: Optional[DeliverySnapshot],
    route: Optional[Route],
    *,
    restaurant_name: str | None = None,
) -> MapView:
    """Compose markers, route polyline and camera instruction. No I/O, no state."""
    shows_map = bool(snapshot and snapshot.status and snapshot.status.shows_map)
    initial_region = _initial_region(snapshot)
    if not shows_map:
        return MapView(
            markers=(),
            polylines=(),
            initial_region=initial_region,
            bounds=KeepRegion(),
            shows_map=False,
        )

    markers = _markers(snapshot, restaurant_name)
    polylines: tuple[Polyline, ...] = ()
    if route is not None and len(route.coordinates) >= 2:
        polylines = (
            Polyline(
                id="route",
                coordinates=route.coordinates,
                stroke_color=settings.route_stroke_color,
                stroke_width=settings.route_stroke_width,
            ),
        )
    return MapView(
        markers=markers,
        polylines=polylines,
        initial_region=initial_region,
        bounds=_bounds([marker.coordinate for marker in markers]),
        shows_map=True,
    )


def _markers(snapshot: DeliverySnapshot, restaurant_name: str | None) -> tuple[Marker, ...]:
    markers = []
    if snapshot.restaurant_location:
        markers.append(
            Marker(
                id="restaurant",
                type="restaurant",
                coordinate=snapshot.restaurant_location,
                title=restaurant_name or "Restaurant",
                emoji="🏪",
            )
        )
    if snapshot.customer_location:
        markers.append(
            Marker(
                id="customer",
                type="customer",
                coordinate=snapshot.customer_location,
                title="Your Location",
                emoji="🏠",
            )
        )
    if snapshot.driver_location:
        driver_name = snapshot.driver.full_name if snapshot.driver else None
        markers.append(
            Marker(
                id="driver",
                type="driver",
                coordinate=snapshot.driver_location,
                title=driver_name or "Driver",
                emoji="🛵",
            )
        )
    return tuple(markers)


def _bounds(points: list[GeoPoint]) -> BoundsInstruction:
    if len(points) >= 2:
        lat, lon, lat_delta, lon_delta = region_for_points(points)
        return FitToCoordinates(points=tuple(points), region=Region(lat, lon, lat_delta, lon_delta))
    if len(points) == 1:
        only = points[0]
        return CenterOn(region=Region(only.latitude, only.longitude, CENTER_DELTA, CENTER_DELTA))
    return KeepRegion()


def _initial_region(snapshot: Optional[DeliverySnapshot]) -> Region:
    anchor = None
    if snapshot is not None:
        anchor = snapshot.customer_location or snapshot.restaurant_location or snapshot.driver_location
    if anchor is None:
        lat, lon = settings.map_default_center
        return Region(lat, lon, DEFAULT_DELTA, DEFAULT_DELTA)
    return Region(anchor.latitude, anchor.longitude, INITIAL_DELTA, INITIAL_DELTA)
