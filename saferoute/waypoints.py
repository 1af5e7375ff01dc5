from typing import Iterable, Optional

from saferoute.geo import haversine_m, midpoint
from saferoute.models import LatLng, RiskZone
from saferoute.risk_zones import DEFAULT_CATALOG, RiskZoneCatalog


def _nearest_to_midpoint(
    source: LatLng, destination: LatLng, zones: Iterable[RiskZone]
) -> Optional[LatLng]:
    mid = midpoint(source, destination)
    best: Optional[RiskZone] = None
    best_dist = float("inf")
    # strict "<" keeps the first zone in catalog order on ties
    for zone in zones:
        d = haversine_m(mid, zone.location)
        if d < best_dist:
            best, best_dist = zone, d
    return best.location if best else None


def find_forced_safe_waypoint(
    source: LatLng, destination: LatLng, catalog: RiskZoneCatalog = DEFAULT_CATALOG
) -> Optional[LatLng]:
    """Safe haven closest to the source/destination midpoint, or None if there are none."""
    return _nearest_to_midpoint(source, destination, catalog.safe_zones())


def find_optimized_waypoint(
    source: LatLng, destination: LatLng, catalog: RiskZoneCatalog = DEFAULT_CATALOG
) -> Optional[LatLng]:
    """Moderate zone closest to the source/destination midpoint, or None if there are none."""
    return _nearest_to_midpoint(source, destination, catalog.moderate_zones())
