"""
Three-variant safety-aware routing on top of an external routing engine.

  - Fastest:   direct source → destination route
  - Safest:    forced through the safe haven nearest the trip midpoint
  - Optimized: through the nearest moderate zone (balanced detour)

Raw safety scores are then normalized so that safest > optimized > fastest,
and the optimized distance/duration is kept between the other two.
"""

import asyncio
import logging
from typing import List, Optional, Tuple

from saferoute.errors import RoutingEngineError, RoutingEngineUnavailable
from saferoute.models import EngineRoute, LatLng, RiskLevel, RouteKind, RouteVariant
from saferoute.osrm import OSRMEngine, RoutingEngine
from saferoute.risk_zones import DEFAULT_CATALOG, RiskZoneCatalog
from saferoute.safety import MAX_SCORE, SAFE_THRESHOLD, analyze_route_safety, round_half_up
from saferoute.waypoints import find_forced_safe_waypoint, find_optimized_waypoint

logger = logging.getLogger(__name__)

# Smallest reportable trip; keeps distance/duration strictly positive for very short hops
MIN_DISTANCE_KM = 0.1
MIN_DURATION_MIN = 1


def normalize_scores(fastest: int, optimized: int, safest: int) -> Tuple[int, int, int]:
    """
    Adjust raw scores into a strict chain safest > optimized > fastest, all in [0, 98].

    Scores that already respect the ordering are left untouched.
    Returns (fastest, optimized, safest).
    """
    f, o, s = fastest, optimized, safest

    if s <= o or s <= f:
        s = max(o, f) + 2
    s = min(MAX_SCORE, s)
    if o <= f:
        o = f + 1

    o = min(s - 1, o)
    f = min(o - 1, f)

    # only reachable when safest is barely above zero
    if f < 0:
        f = 0
        o = max(o, f + 1)
        s = max(s, o + 1)

    return f, o, s


def traffic_factor(distance_km: float) -> float:
    """Congestion multiplier by trip length: short city hop, a few hubs, full transit."""
    if distance_km < 12:
        return 1.3
    if distance_km < 20:
        return 1.45
    return 2.2


def to_km(distance_m: float) -> float:
    """Meters to km with one decimal (nearest 100 m)."""
    return round_half_up(distance_m / 100) / 10


def route_metrics(route: EngineRoute) -> Tuple[float, int]:
    """(distance_km, duration_min) for a raw engine route, duration scaled by traffic."""
    distance_km = max(MIN_DISTANCE_KM, to_km(route.distance_m))
    duration_min = round_half_up((route.duration_s / 60) * traffic_factor(distance_km))
    return distance_km, max(MIN_DURATION_MIN, duration_min)


def order_optimized_metrics(
    fastest: Tuple[float, int],
    optimized: Tuple[float, int],
    safest: Tuple[float, int],
) -> Tuple[float, int]:
    """
    Keep the optimized route strictly between fastest and safest in distance.

    When it is not, its distance and duration become the average of the
    fastest and safest ones.
    """
    f_dist, f_dur = fastest
    o_dist, o_dur = optimized
    s_dist, s_dur = safest

    if o_dist >= s_dist or o_dist <= f_dist:
        o_dist = round_half_up(((f_dist + s_dist) / 2) * 10) / 10
        o_dur = round_half_up((f_dur + s_dur) / 2)
    return o_dist, o_dur


class RouteOrchestrator:
    def __init__(self, engine: RoutingEngine, catalog: RiskZoneCatalog = DEFAULT_CATALOG):
        self.engine = engine
        self.catalog = catalog

    async def _fastest(self, source: LatLng, destination: LatLng) -> EngineRoute:
        try:
            return await self.engine.route([source, destination])
        except RoutingEngineError as e:
            raise RoutingEngineUnavailable(str(e)) from e

    async def _via(
        self,
        kind: RouteKind,
        source: LatLng,
        waypoint: Optional[LatLng],
        destination: LatLng,
    ) -> Optional[EngineRoute]:
        """
        Route through `waypoint`, degrading to a direct request when there is
        no waypoint or the engine fails. None if the direct request fails too.
        """
        if waypoint is not None:
            try:
                return await self.engine.route([source, waypoint, destination])
            except RoutingEngineError as e:
                logger.warning("[ROUTING] %s via waypoint failed (%s); falling back to direct", kind.value, e)
        else:
            logger.info("[ROUTING] no waypoint for %s route; routing direct", kind.value)

        try:
            return await self.engine.route([source, destination])
        except RoutingEngineError as e:
            logger.warning("[ROUTING] %s direct fallback failed (%s)", kind.value, e)
            return None

    async def compute_routes(self, source: LatLng, destination: LatLng) -> List[RouteVariant]:
        """
        Build [safest, fastest, optimized] for a trip.

        Returns an empty list when the initial direct route cannot be
        obtained; any later engine failure degrades to a direct route.
        """
        safe_point = find_forced_safe_waypoint(source, destination, self.catalog)
        opt_point = find_optimized_waypoint(source, destination, self.catalog)

        calls = [
            self._fastest(source, destination),
            self._via(RouteKind.SAFEST, source, safe_point, destination),
        ]
        if opt_point is not None:
            calls.append(self._via(RouteKind.OPTIMIZED, source, opt_point, destination))

        results = await asyncio.gather(*calls, return_exceptions=True)
        if isinstance(results[0], RoutingEngineUnavailable):
            logger.error("[ROUTING] direct route unavailable: %s", results[0])
            return []
        for r in results:
            if isinstance(r, BaseException):
                raise r

        fastest_raw: EngineRoute = results[0]
        safest_raw: EngineRoute = results[1] or fastest_raw

        if opt_point is None:
            anchor = safest_raw.path[len(safest_raw.path) // 2]
            opt_point = LatLng(lat=(source.lat + anchor.lat) / 2, lng=(source.lng + anchor.lng) / 2)
            optimized_raw = await self._via(RouteKind.OPTIMIZED, source, opt_point, destination)
        else:
            optimized_raw = results[2]
        optimized_raw = optimized_raw or fastest_raw

        f_score, o_score, s_score = normalize_scores(
            analyze_route_safety(fastest_raw.path, self.catalog).overall_score,
            analyze_route_safety(optimized_raw.path, self.catalog).overall_score,
            analyze_route_safety(safest_raw.path, self.catalog).overall_score,
        )

        f_dist, f_dur = route_metrics(fastest_raw)
        s_dist, s_dur = route_metrics(safest_raw)
        o_dist, o_dur = order_optimized_metrics(
            (f_dist, f_dur), route_metrics(optimized_raw), (s_dist, s_dur)
        )

        logger.info(
            "[ROUTING] scores safest=%d optimized=%d fastest=%d; km %.1f/%.1f/%.1f",
            s_score, o_score, f_score, s_dist, o_dist, f_dist,
        )

        return [
            RouteVariant(
                id=RouteKind.SAFEST,
                path=safest_raw.path,
                distance_km=s_dist,
                duration_min=s_dur,
                safety_score=s_score,
                risk_level=RiskLevel.SAFE,
            ),
            RouteVariant(
                id=RouteKind.FASTEST,
                path=fastest_raw.path,
                distance_km=f_dist,
                duration_min=f_dur,
                safety_score=f_score,
                # the default route is never labelled risky
                risk_level=RiskLevel.SAFE if f_score > SAFE_THRESHOLD else RiskLevel.MODERATE,
            ),
            RouteVariant(
                id=RouteKind.OPTIMIZED,
                path=optimized_raw.path,
                distance_km=o_dist,
                duration_min=o_dur,
                safety_score=o_score,
                risk_level=RiskLevel.SAFE,
            ),
        ]


async def calculate_routes(source: LatLng, destination: LatLng) -> List[RouteVariant]:
    """Entry point using the OSRM engine and the built-in catalog."""
    return await RouteOrchestrator(OSRMEngine(), DEFAULT_CATALOG).compute_routes(source, destination)
