import logging
from typing import List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from saferoute.config import APP_HOST, APP_PORT, CORS_ORIGINS, LOG_LEVEL
from saferoute.models import (
    RiskZoneItem,
    RiskZonesResponse,
    RouteRequest,
    RoutesResponse,
)
from saferoute.osrm import OSRMEngine
from saferoute.risk_zones import DEFAULT_CATALOG
from saferoute.routing import RouteOrchestrator
from saferoute.zone_source import ZoneSourceNotConfigured, fetch_safety_zones, zone_from_row

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="SafeRoute Backend", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

orchestrator = RouteOrchestrator(OSRMEngine(), DEFAULT_CATALOG)


def _zone_items(zones) -> List[RiskZoneItem]:
    return [
        RiskZoneItem(
            name=z.name,
            lat=z.location.lat,
            lng=z.location.lng,
            risk=z.risk,
            zone_class=z.zone_class,
        )
        for z in zones
    ]


@app.post("/api/routes", response_model=RoutesResponse)
async def get_routes(payload: RouteRequest) -> RoutesResponse:
    """
    Safety-aware routing. Returns three options in order:
    - Safest: forced through the nearest safe haven
    - Fastest: direct route
    - Optimized: balanced detour through a moderate zone
    """
    if not (-90 <= payload.source.lat <= 90 and -180 <= payload.source.lng <= 180):
        raise HTTPException(status_code=400, detail=f"Invalid source coordinates: {payload.source}")
    if not (-90 <= payload.destination.lat <= 90 and -180 <= payload.destination.lng <= 180):
        raise HTTPException(status_code=400, detail=f"Invalid destination coordinates: {payload.destination}")

    logger.info("[API_REQUEST] source=%s destination=%s", payload.source, payload.destination)

    routes = await orchestrator.compute_routes(payload.source, payload.destination)
    if not routes:
        raise HTTPException(status_code=503, detail="Routing engine unavailable; no route found")
    return RoutesResponse(routes=routes)


@app.get("/api/risk-zones", response_model=RiskZonesResponse)
async def get_risk_zones() -> RiskZonesResponse:
    """The built-in catalog used for scoring and waypoints."""
    return RiskZonesResponse(zones=_zone_items(orchestrator.catalog))


@app.get("/api/safety-zones", response_model=RiskZonesResponse)
async def get_safety_zones() -> RiskZonesResponse:
    """Stored safety zones for map overlays. Rows with contradictory flags are skipped."""
    try:
        rows = await fetch_safety_zones()
    except ZoneSourceNotConfigured as e:
        raise HTTPException(status_code=500, detail=str(e))

    zones = []
    for row in rows:
        try:
            zones.append(zone_from_row(row))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("[ZONES] skipping row %r: %s", row.get("name"), e)
    return RiskZonesResponse(zones=_zone_items(zones))


@app.get("/health")
def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("saferoute.main:app", host=APP_HOST, port=APP_PORT)
