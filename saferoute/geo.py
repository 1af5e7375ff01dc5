import math

from saferoute.models import LatLng

EARTH_RADIUS_M = 6371000.0


def haversine_m(a: LatLng, b: LatLng) -> float:
    """Great-circle distance in meters between two lat/lng points."""
    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    dphi = math.radians(b.lat - a.lat)
    dlambda = math.radians(b.lng - a.lng)
    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def midpoint(a: LatLng, b: LatLng) -> LatLng:
    """Plain lat/lng average. Good enough at city scale, not a geodesic midpoint."""
    return LatLng(lat=(a.lat + b.lat) / 2, lng=(a.lng + b.lng) / 2)
