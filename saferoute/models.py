from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class LatLng(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


class ZoneClass(str, Enum):
    DANGER = "danger"
    MODERATE = "moderate"
    SAFE = "safe"


class RiskZone(BaseModel):
    """A named location tagged with a risk score and exactly one safety class."""

    model_config = ConfigDict(frozen=True)

    name: str
    location: LatLng
    risk: float = Field(ge=0)
    zone_class: ZoneClass

    @classmethod
    def from_flags(
        cls,
        name: str,
        lat: float,
        lng: float,
        risk: float,
        is_safe: bool,
        is_moderate: bool = False,
    ) -> "RiskZone":
        """
        Build a zone from the legacy two-flag encoding used by stored zone rows.

        moderate zones are a subset of safe ones, so a zone flagged moderate
        but not safe has no meaning and is rejected.
        """
        if is_moderate and not is_safe:
            raise ValueError(f"Zone {name!r} is flagged moderate but not safe")
        if not is_safe:
            zone_class = ZoneClass.DANGER
        elif is_moderate:
            zone_class = ZoneClass.MODERATE
        else:
            zone_class = ZoneClass.SAFE
        return cls(name=name, location=LatLng(lat=lat, lng=lng), risk=risk, zone_class=zone_class)


class RouteKind(str, Enum):
    SAFEST = "safest"
    FASTEST = "fastest"
    OPTIMIZED = "optimized"


class RiskLevel(str, Enum):
    SAFE = "safe"
    MODERATE = "moderate"
    RISKY = "risky"


class SafetyAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    overall_score: int = Field(ge=0, le=98)
    risk_level: RiskLevel


class EngineRoute(BaseModel):
    """Raw result of one routing-engine call."""

    path: List[LatLng]
    distance_m: float
    duration_s: float


class RouteVariant(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: RouteKind
    path: List[LatLng]
    distance_km: float = Field(gt=0)
    duration_min: int = Field(gt=0)
    safety_score: int = Field(ge=0, le=98)
    risk_level: RiskLevel


class RouteRequest(BaseModel):
    source: LatLng
    destination: LatLng


class RoutesResponse(BaseModel):
    routes: List[RouteVariant]


class RiskZoneItem(BaseModel):
    name: str
    lat: float
    lng: float
    risk: float
    zone_class: ZoneClass


class RiskZonesResponse(BaseModel):
    zones: List[RiskZoneItem]
