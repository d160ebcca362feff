"""Route resolution with endpoint-rounded caching and straight-line fallback."""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from typing import Optional, Protocol, Sequence

import httpx

from ...config import settings
from ...models.domain import GeoPoint, Route, RouteContext, build_cache_key
from .polyline import decode_polyline

logger = logging.getLogger(__name__)


class RouteProvider(Protocol):
    async def route(self, coordinates: Sequence[tuple[float, float]]) -> dict: ...


class RouteCache:
    """Small LRU of resolved routes keyed by rounded endpoints."""

    def __init__(self, max_entries: int = 16, ttl_seconds: float | None = None) -> None:
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._entries: OrderedDict[str, tuple[float, Route]] = OrderedDict()

    def get(self, key: str) -> Optional[Route]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, route = entry
        if self.ttl_seconds is not None and time.monotonic() - stored_at > self.ttl_seconds:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return route

    def put(self, key: str, route: Route) -> None:
        self._entries[key] = (time.monotonic(), route)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class RouteResolver:
    """Resolves the route to draw for one tracked order.

    Resolutions run one at a time and each call takes a ticket. A queued call
    whose key is no longer the most recently requested one skips its fetch.
    A fetched route is applied unless a route for a newer ticket has already
    been applied; otherwise it is cached for its key and ``None`` is returned.
    """

    def __init__(
        self,
        provider: RouteProvider,
        *,
        precision: int | None = None,
        cache: RouteCache | None = None,
    ) -> None:
        self.provider = provider
        self.precision = precision if precision is not None else settings.route_cache_precision
        self.cache = cache if cache is not None else RouteCache(
            max_entries=settings.route_cache_size,
            ttl_seconds=settings.route_cache_ttl_seconds,
        )
        self.current: Optional[Route] = None
        self.current_key: Optional[str] = None
        self.requests_made = 0
        self._lock = asyncio.Lock()
        self._wanted_key: Optional[str] = None
        self._issued = 0
        self._applied = 0

    async def resolve(self, context: RouteContext) -> Optional[Route]:
        endpoints = context.endpoints()
        if endpoints is None:
            return None
        origin, destination = endpoints
        key = build_cache_key(origin, destination, self.precision)
        self._issued += 1
        ticket = self._issued
        self._wanted_key = key

        cached = self.cache.get(key)
        if cached is not None:
            return self._apply(ticket, key, cached)

        async with self._lock:
            if self._wanted_key != key:
                logger.debug(f"Skipping route {key}: superseded by {self._wanted_key} before fetch")
                return None
            # an identical request may have filled the cache while we waited
            cached = self.cache.get(key)
            if cached is not None:
                return self._apply(ticket, key, cached)

            route = await self._fetch(origin, destination)
            self.cache.put(key, route)
            return self._apply(ticket, key, route)

    def _apply(self, ticket: int, key: str, route: Route) -> Optional[Route]:
        if ticket < self._applied:
            logger.debug(f"Discarding route {key}: a newer route is already shown")
            return None
        self._applied = ticket
        self.current = route
        self.current_key = key
        return route

    async def _fetch(self, origin: GeoPoint, destination: GeoPoint) -> Route:
        self.requests_made += 1
        try:
            data = await self.provider.route([origin.as_lat_lon(), destination.as_lat_lon()])
            best = data["routes"][0]
            points = decode_polyline(best["geometry"])
            if len(points) < 2:
                raise ValueError(f"Route geometry decoded to {len(points)} point(s).")
            return Route(
                origin=origin,
                destination=destination,
                coordinates=tuple(GeoPoint(lat, lon) for lat, lon in points),
                duration_seconds=_optional_float(best.get("duration")),
                distance_meters=_optional_float(best.get("distance")),
            )
        except (httpx.HTTPError, ConnectionError, ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning(f"Route lookup failed ({e}); drawing a straight line instead.")
            return Route.straight_line(origin, destination)

    def clear(self) -> None:
        self.cache.clear()
        self.current = None
        self.current_key = None
        self._wanted_key = None
        # anything still in flight belongs to the cleared view
        self._applied = self._issued + 1


def _optional_float(value: object) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
