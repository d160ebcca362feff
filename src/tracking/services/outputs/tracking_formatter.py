"""Serializers for tracking views."""

from __future__ import annotations

from dataclasses import asdict
from typing import Optional

from ...models.domain import PROGRESS_STEPS, GeoPoint
from ..map_view import CenterOn, FitToCoordinates, MapView, Region
from ..tracking.session import TrackingView


def _coordinate(point: GeoPoint) -> dict:
    return {"latitude": point.latitude, "longitude": point.longitude}


def _region(region: Region) -> dict:
    return {
        "latitude": region.latitude,
        "longitude": region.longitude,
        "latitudeDelta": region.latitude_delta,
        "longitudeDelta": region.longitude_delta,
    }


def map_view_to_json(view: MapView) -> dict:
    bounds = view.bounds
    bounds_payload: dict = {"action": bounds.action}
    if isinstance(bounds, FitToCoordinates):
        bounds_payload.update(
            points=[_coordinate(point) for point in bounds.points],
            region=_region(bounds.region),
            edgePadding=dict(bounds.edge_padding),
        )
    elif isinstance(bounds, CenterOn):
        bounds_payload.update(region=_region(bounds.region), durationMs=bounds.duration_ms)

    return {
        "showsMap": view.shows_map,
        "markers": [
            {
                "id": marker.id,
                "type": marker.type,
                "coordinate": _coordinate(marker.coordinate),
                "title": marker.title,
                "emoji": marker.emoji,
            }
            for marker in view.markers
        ],
        "polylines": [
            {
                "id": polyline.id,
                "coordinates": [_coordinate(point) for point in polyline.coordinates],
                "strokeColor": polyline.stroke_color,
                "strokeWidth": polyline.stroke_width,
            }
            for polyline in view.polylines
        ],
        "initialRegion": _region(view.initial_region),
        "bounds": bounds_payload,
    }


def progress_steps(ordinal: Optional[int]) -> list[dict]:
    current = -1 if ordinal is None else ordinal
    return [
        {"key": step.value, "done": index < current, "active": index == current}
        for index, step in enumerate(PROGRESS_STEPS)
    ]


def tracking_view_to_json(view: TrackingView) -> dict:
    return {
        "order_id": view.order_id,
        "status": view.status.value if view.status else None,
        "ordinal": view.ordinal,
        "progress": progress_steps(view.ordinal),
        "title": view.copy.title,
        "subtitle": view.copy.subtitle,
        "message": view.copy.message,
        "eta_text": view.eta_text,
        "eta_window_text": view.eta_window_text,
        "route_duration_text": view.route_duration_text,
        "route_distance_km": view.route_distance_km,
        "driver": asdict(view.driver) if view.driver else None,
        "customer_address": view.customer_address,
        "map": map_view_to_json(view.map),
        "is_running": view.is_running,
        "updated_at": view.updated_at.isoformat() if view.updated_at else None,
    }
