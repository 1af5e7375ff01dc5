from typing import Callable, List, Optional
from urllib.parse import unquote

import httpx
import pytest

from saferoute.geo import haversine_m
from saferoute.models import LatLng
from saferoute.osrm import OSRMEngine

SIRIPURAM = LatLng(lat=17.7222, lng=83.315)
GAJUWAKA = LatLng(lat=17.6896, lng=83.2085)

STEPS_PER_LEG = 30
SPEED_MPS = 8.0


def points_from_request(request: httpx.Request) -> List[LatLng]:
    coords = unquote(request.url.path.rsplit("/", 1)[-1])
    points = []
    for pair in coords.split(";"):
        lng, lat = pair.split(",")
        points.append(LatLng(lat=float(lat), lng=float(lng)))
    return points


def straight_line_route(points: List[LatLng]) -> dict:
    """OSRM-shaped response following straight legs between the requested points."""
    coords = [[points[0].lng, points[0].lat]]
    distance = 0.0
    for a, b in zip(points, points[1:]):
        distance += haversine_m(a, b)
        for i in range(1, STEPS_PER_LEG):
            t = i / STEPS_PER_LEG
            coords.append([a.lng + (b.lng - a.lng) * t, a.lat + (b.lat - a.lat) * t])
        coords.append([b.lng, b.lat])
    return {
        "code": "Ok",
        "routes": [
            {
                "geometry": {"type": "LineString", "coordinates": coords},
                "distance": distance,
                "duration": distance / SPEED_MPS,
            }
        ],
    }


class FakeOSRM:
    """Records every routed point list; fails requests matched by `fail_when`."""

    def __init__(self, fail_when: Optional[Callable[[List[LatLng]], bool]] = None):
        self.fail_when = fail_when
        self.calls: List[List[LatLng]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        points = points_from_request(request)
        self.calls.append(points)
        if self.fail_when and self.fail_when(points):
            return httpx.Response(500, json={"message": "engine down"})
        return httpx.Response(200, json=straight_line_route(points))

    def engine(self) -> OSRMEngine:
        return OSRMEngine(base_url="http://osrm.test", transport=httpx.MockTransport(self.handler))

    def calls_with(self, n_points: int) -> List[List[LatLng]]:
        return [c for c in self.calls if len(c) == n_points]


@pytest.fixture
def fake_osrm():
    def make(fail_when=None) -> FakeOSRM:
        return FakeOSRM(fail_when)
    return make
