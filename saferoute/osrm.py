import logging
from typing import List, Optional, Protocol, Sequence

import httpx
from pydantic import ValidationError

from saferoute.config import OSRM_BASE_URL, OSRM_PROFILE, OSRM_TIMEOUT_S
from saferoute.errors import RoutingEngineError
from saferoute.models import EngineRoute, LatLng

logger = logging.getLogger(__name__)


class RoutingEngine(Protocol):
    async def route(self, points: Sequence[LatLng]) -> EngineRoute:
        ...


def _to_coordinates_list(geojson_coords: List[List[float]]) -> List[LatLng]:
    # OSRM GeoJSON geometry is [lng, lat]
    return [LatLng(lat=lat, lng=lng) for lng, lat in geojson_coords]


class OSRMEngine:
    """Road-following routes from an OSRM server's /route service."""

    def __init__(
        self,
        base_url: str = OSRM_BASE_URL,
        profile: str = OSRM_PROFILE,
        timeout: float = OSRM_TIMEOUT_S,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.profile = profile
        self.timeout = timeout
        self._transport = transport

    def _url(self, points: Sequence[LatLng]) -> str:
        coords = ";".join(f"{p.lng},{p.lat}" for p in points)
        return f"{self.base_url}/route/v1/{self.profile}/{coords}"

    async def route(self, points: Sequence[LatLng]) -> EngineRoute:
        """
        Route through `points` in order and return the first route found.

        Raises RoutingEngineError on network errors, timeouts, non-200
        responses or when OSRM reports no route.
        """
        if len(points) < 2:
            raise ValueError("A route needs at least two points")

        url = self._url(points)
        params = {"overview": "full", "geometries": "geojson"}
        logger.debug("[OSRM] GET %s", url)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(url, params=params)
        except httpx.HTTPError as e:
            raise RoutingEngineError(f"OSRM request failed: {e!r}") from e

        if resp.status_code != 200:
            detail = resp.text
            try:
                body = resp.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                detail = body.get("message", detail)
            raise RoutingEngineError(f"OSRM returned {resp.status_code}: {detail}")

        try:
            data = resp.json()
        except ValueError as e:
            raise RoutingEngineError("OSRM returned a non-JSON body") from e

        if not isinstance(data, dict):
            raise RoutingEngineError("OSRM returned an unexpected body")
        if data.get("code") != "Ok":
            raise RoutingEngineError(f"OSRM error: {data.get('code')} {data.get('message', '')}".strip())

        routes = data.get("routes") or []
        if not isinstance(routes, list) or not routes or not isinstance(routes[0], dict):
            raise RoutingEngineError("No route found from OSRM")

        route = routes[0]
        geometry = route.get("geometry") or {}
        if not isinstance(geometry, dict):
            raise RoutingEngineError("Route geometry is not GeoJSON")

        try:
            path = _to_coordinates_list(geometry.get("coordinates") or [])
            if not path:
                raise RoutingEngineError("Route has no geometry data")
            if route.get("distance") is None or route.get("duration") is None:
                raise RoutingEngineError("Route has no distance/duration summary")
            return EngineRoute(path=path, distance_m=route["distance"], duration_s=route["duration"])
        except (TypeError, ValueError, ValidationError) as e:
            raise RoutingEngineError(f"Malformed OSRM route: {e}") from e
