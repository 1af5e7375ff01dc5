import logging
from typing import Any, Dict, List, Optional

import httpx

from saferoute.config import SUPABASE_ANON_KEY, SUPABASE_URL
from saferoute.models import RiskZone

logger = logging.getLogger(__name__)

SAFETY_ZONES_TABLE = "safety_zones"


class ZoneSourceNotConfigured(RuntimeError):
    pass


async def fetch_safety_zones(
    base_url: str = SUPABASE_URL,
    api_key: str = SUPABASE_ANON_KEY,
    timeout: float = 10.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[Dict[str, Any]]:
    """
    Read every stored safety-zone row from the Supabase REST endpoint.

    Read-only; used for map overlays, not by the routing algorithm. A failed
    read yields an empty list.
    """
    if not base_url or not api_key:
        raise ZoneSourceNotConfigured("SUPABASE_URL / SUPABASE_ANON_KEY not configured")

    url = f"{base_url.rstrip('/')}/rest/v1/{SAFETY_ZONES_TABLE}"
    headers = {"apikey": api_key, "Authorization": f"Bearer {api_key}"}

    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            resp = await client.get(url, params={"select": "*"}, headers=headers)
    except httpx.HTTPError as e:
        logger.warning("[ZONES] fetch failed: %r", e)
        return []

    if resp.status_code != 200:
        logger.warning("[ZONES] fetch returned %s: %s", resp.status_code, resp.text)
        return []

    try:
        data = resp.json()
    except ValueError:
        logger.warning("[ZONES] fetch returned a non-JSON body")
        return []
    return data if isinstance(data, list) else []


def zone_from_row(row: Dict[str, Any]) -> RiskZone:
    """Convert a stored row (is_safe / is_moderate flags) into a RiskZone."""
    return RiskZone.from_flags(
        name=row["name"],
        lat=float(row["lat"]),
        lng=float(row["lng"]),
        risk=float(row.get("risk", 0.0)),
        is_safe=bool(row.get("is_safe", False)),
        is_moderate=bool(row.get("is_moderate", False)),
    )
