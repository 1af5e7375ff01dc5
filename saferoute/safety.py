"""
Route safety scoring.

A route is sampled every SAMPLE_STEP points. Each sample starts at 100 and
loses risk × PENALTY_MULTIPLIER for every danger zone closer than
PENALTY_RADIUS_M (flat penalty, no decay), floored at 0. The route score is
the mean sample score, capped at MAX_SCORE: a perfect 100 is never reported.
"""

import math
from typing import Sequence

from saferoute.errors import EmptyPathError
from saferoute.geo import haversine_m
from saferoute.models import LatLng, RiskLevel, SafetyAnalysis
from saferoute.risk_zones import DEFAULT_CATALOG, RiskZoneCatalog

SAMPLE_STEP = 10
PENALTY_RADIUS_M = 1200.0
PENALTY_MULTIPLIER = 5.0
MAX_SCORE = 98

SAFE_THRESHOLD = 75
MODERATE_THRESHOLD = 45


def round_half_up(x: float) -> int:
    """Round .5 away from zero for positives (Python's round() is banker's rounding)."""
    return int(math.floor(x + 0.5))


def risk_level_for(score: int) -> RiskLevel:
    if score > SAFE_THRESHOLD:
        return RiskLevel.SAFE
    if score > MODERATE_THRESHOLD:
        return RiskLevel.MODERATE
    return RiskLevel.RISKY


def _point_penalty(point: LatLng, catalog: RiskZoneCatalog) -> float:
    penalty = 0.0
    for zone in catalog.danger_zones():
        if haversine_m(point, zone.location) < PENALTY_RADIUS_M:
            penalty += zone.risk * PENALTY_MULTIPLIER
    return penalty


def analyze_route_safety(
    path: Sequence[LatLng], catalog: RiskZoneCatalog = DEFAULT_CATALOG
) -> SafetyAnalysis:
    samples = path[::SAMPLE_STEP]
    if not samples:
        raise EmptyPathError("Cannot score a route with no points")

    score_sum = 0.0
    for point in samples:
        score_sum += max(0.0, 100.0 - _point_penalty(point, catalog))

    score = min(MAX_SCORE, round_half_up(score_sum / len(samples)))
    return SafetyAnalysis(overall_score=score, risk_level=risk_level_for(score))
