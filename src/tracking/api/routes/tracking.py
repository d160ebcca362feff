"""Order tracking endpoints."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status

from ...schemas.tracking import TrackingResponse, TrackingStartRequest
from ...services.outputs.tracking_formatter import tracking_view_to_json
from ...services.tracking.registry import TrackingRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tracking", tags=["tracking"])


def get_registry(request: Request) -> TrackingRegistry:
    return request.app.state.tracking_registry


@router.post("/{order_id}", response_model=TrackingResponse, status_code=status.HTTP_200_OK)
async def start_tracking(
    order_id: str,
    payload: Optional[TrackingStartRequest] = Body(default=None),
    registry: TrackingRegistry = Depends(get_registry),
) -> dict:
    try:
        session = registry.start(order_id, restaurant_name=payload.restaurant_name if payload else None)
    except ValueError as exc:
        # missing API/OSRM base URL
        logger.error(f"Cannot start tracking order {order_id}: {exc}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return tracking_view_to_json(session.view)


@router.get("/{order_id}", response_model=TrackingResponse, status_code=status.HTTP_200_OK)
async def get_tracking(order_id: str, registry: TrackingRegistry = Depends(get_registry)) -> dict:
    try:
        session = registry.get(order_id)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Order {order_id} is not being tracked",
        ) from exc
    return tracking_view_to_json(session.view)


@router.delete("/{order_id}", status_code=status.HTTP_200_OK)
async def stop_tracking(order_id: str, registry: TrackingRegistry = Depends(get_registry)) -> dict:
    try:
        registry.stop(order_id)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Order {order_id} is not being tracked",
        ) from exc
    return {"order_id": order_id, "stopped": True}
