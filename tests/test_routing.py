import asyncio

import httpx

from saferoute.models import LatLng, RiskLevel, RiskZone, RouteKind
from saferoute.osrm import OSRMEngine
from saferoute.risk_zones import DEFAULT_CATALOG, RiskZoneCatalog
from saferoute.routing import RouteOrchestrator, calculate_routes
from saferoute.safety import round_half_up

from tests.conftest import GAJUWAKA, SIRIPURAM, FakeOSRM, points_from_request, straight_line_route

SHEELANAGAR = LatLng(lat=17.7029, lng=83.2291)
NAD = LatLng(lat=17.7441, lng=83.2505)


def _compute(engine, catalog=DEFAULT_CATALOG, source=SIRIPURAM, destination=GAJUWAKA):
    return asyncio.run(RouteOrchestrator(engine, catalog).compute_routes(source, destination))


def test_siripuram_to_gajuwaka(fake_osrm):
    osrm = fake_osrm()
    routes = _compute(osrm.engine())

    assert [r.id for r in routes] == [RouteKind.SAFEST, RouteKind.FASTEST, RouteKind.OPTIMIZED]
    safest, fastest, optimized = routes

    assert safest.safety_score > optimized.safety_score > fastest.safety_score
    assert all(0 <= r.safety_score <= 98 for r in routes)
    assert safest.risk_level is RiskLevel.SAFE
    assert optimized.risk_level is RiskLevel.SAFE
    assert fastest.risk_level in (RiskLevel.SAFE, RiskLevel.MODERATE)

    average = round_half_up(((fastest.distance_km + safest.distance_km) / 2) * 10) / 10
    assert (
        fastest.distance_km < optimized.distance_km < safest.distance_km
        or optimized.distance_km == average
    )
    assert all(r.distance_km > 0 and r.duration_min > 0 for r in routes)

    assert osrm.calls_with(2) == [[SIRIPURAM, GAJUWAKA]]
    assert sorted(c[1].lat for c in osrm.calls_with(3)) == [SHEELANAGAR.lat, NAD.lat]


def test_paths_come_from_engine(fake_osrm):
    safest, fastest, optimized = _compute(fake_osrm().engine())
    assert fastest.path[0] == SIRIPURAM and fastest.path[-1] == GAJUWAKA
    assert SHEELANAGAR in safest.path
    assert NAD in optimized.path


def test_direct_failure_returns_nothing(fake_osrm):
    osrm = fake_osrm(fail_when=lambda points: len(points) == 2)
    assert _compute(osrm.engine()) == []


def test_engine_unreachable_returns_nothing():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    engine = OSRMEngine(base_url="http://osrm.test", transport=httpx.MockTransport(handler))
    assert _compute(engine) == []


def test_no_safe_zones_routes_safest_direct(fake_osrm):
    catalog = RiskZoneCatalog(DEFAULT_CATALOG.danger_zones() + DEFAULT_CATALOG.moderate_zones())
    osrm = fake_osrm()
    safest, fastest, optimized = _compute(osrm.engine(), catalog)

    assert len(osrm.calls_with(2)) == 2
    assert [c[1] for c in osrm.calls_with(3)] == [NAD]
    assert safest.path == fastest.path
    assert safest.safety_score > optimized.safety_score > fastest.safety_score


def test_failed_waypoint_route_falls_back_to_direct(fake_osrm):
    osrm = fake_osrm(fail_when=lambda points: len(points) == 3)
    routes = _compute(osrm.engine())

    assert len(routes) == 3
    assert len(osrm.calls_with(3)) == 2
    assert len(osrm.calls_with(2)) == 3
    assert all(r.path == routes[1].path for r in routes)


def test_fallback_failure_reuses_direct_route(fake_osrm):
    first_direct = []

    def fail_after_first_direct(points):
        if len(points) == 3:
            return True
        first_direct.append(points)
        return len(first_direct) > 1

    osrm = fake_osrm(fail_when=fail_after_first_direct)
    routes = _compute(osrm.engine())

    # only the initial direct request succeeds; both variants reuse it
    assert len(routes) == 3
    assert routes[0].path == routes[1].path == routes[2].path


def test_no_moderate_zones_uses_synthetic_midpoint(fake_osrm):
    catalog = RiskZoneCatalog(DEFAULT_CATALOG.danger_zones() + DEFAULT_CATALOG.safe_zones())
    osrm = fake_osrm()
    safest, _, optimized = _compute(osrm.engine(), catalog)

    via_points = [c[1] for c in osrm.calls_with(3)]
    assert via_points[0] == SHEELANAGAR
    anchor = safest.path[len(safest.path) // 2]
    expected = LatLng(lat=(SIRIPURAM.lat + anchor.lat) / 2, lng=(SIRIPURAM.lng + anchor.lng) / 2)
    assert via_points[1] == expected
    assert expected in optimized.path


def test_calculate_routes_uses_default_engine(fake_osrm, monkeypatch):
    osrm = fake_osrm()
    monkeypatch.setattr("saferoute.routing.OSRMEngine", osrm.engine)

    routes = asyncio.run(calculate_routes(SIRIPURAM, GAJUWAKA))
    assert len(routes) == 3
    assert len(osrm.calls) == 3


def test_catalog_without_danger_zones():
    zones = [
        RiskZone.from_flags("haven", 17.70, 83.25, 1.0, is_safe=True),
        RiskZone.from_flags("balanced", 17.71, 83.26, 2.0, is_safe=True, is_moderate=True),
    ]
    safest, fastest, optimized = _compute(FakeOSRM().engine(), RiskZoneCatalog(zones))
    assert (safest.safety_score, optimized.safety_score, fastest.safety_score) == (98, 97, 96)
    assert fastest.risk_level is RiskLevel.SAFE


def _malformed_for(n_points, body):
    """FakeOSRM whose `n_points`-point requests get a 200 with `body`."""
    osrm = FakeOSRM()
    well_formed = osrm.handler

    def handler(request):
        if len(points_from_request(request)) == n_points:
            osrm.calls.append(points_from_request(request))
            return httpx.Response(200, json=body)
        return well_formed(request)

    return osrm, OSRMEngine(base_url="http://osrm.test", transport=httpx.MockTransport(handler))


def test_garbled_waypoint_response_falls_back_to_direct():
    osrm, engine = _malformed_for(3, [{"unexpected": "list"}])
    routes = _compute(engine)

    assert len(routes) == 3
    assert len(osrm.calls_with(3)) == 2
    assert all(r.path == routes[1].path for r in routes)


def test_garbled_direct_response_returns_nothing():
    body = straight_line_route([SIRIPURAM, GAJUWAKA])
    body["routes"][0]["distance"] = "n/a"
    _, engine = _malformed_for(2, body)

    assert _compute(engine) == []
