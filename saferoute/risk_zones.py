"""
Static risk-zone catalog for Visakhapatnam.

Each zone carries one class:
  - danger:   scored against routes (penalty when a route passes within range)
  - moderate: balanced waypoints for the optimized route
  - safe:     safe havens used to force the safest route
"""

from typing import Iterable, Tuple

from saferoute.models import RiskZone, ZoneClass


class RiskZoneCatalog:
    """Read-only registry of risk zones. Iteration order is the catalog order."""

    def __init__(self, zones: Iterable[RiskZone]):
        self._zones: Tuple[RiskZone, ...] = tuple(zones)

    def __iter__(self):
        return iter(self._zones)

    def __len__(self) -> int:
        return len(self._zones)

    @property
    def zones(self) -> Tuple[RiskZone, ...]:
        return self._zones

    def _of_class(self, zone_class: ZoneClass) -> Tuple[RiskZone, ...]:
        return tuple(z for z in self._zones if z.zone_class is zone_class)

    def danger_zones(self) -> Tuple[RiskZone, ...]:
        return self._of_class(ZoneClass.DANGER)

    def safe_zones(self) -> Tuple[RiskZone, ...]:
        """Fully safe zones only; moderate zones are excluded."""
        return self._of_class(ZoneClass.SAFE)

    def moderate_zones(self) -> Tuple[RiskZone, ...]:
        return self._of_class(ZoneClass.MODERATE)


DEFAULT_CATALOG = RiskZoneCatalog([
    # danger
    RiskZone.from_flags("Beach Road", 17.7142, 83.3235, 11.0, is_safe=False),
    RiskZone.from_flags("Dwarakanagar", 17.7265, 83.3013, 9.07, is_safe=False),
    RiskZone.from_flags("Vizianagaram", 18.1067, 83.3955, 8.44, is_safe=False),
    RiskZone.from_flags("Kancharapalem", 17.7303, 83.2801, 7.89, is_safe=False),
    RiskZone.from_flags("Gajuwaka", 17.6896, 83.2085, 7.84, is_safe=False),
    RiskZone.from_flags("One Town", 17.6975, 83.2974, 7.12, is_safe=False),
    RiskZone.from_flags("Maddilapalem", 17.7356, 83.3164, 5.88, is_safe=False),
    RiskZone.from_flags("MVP Colony", 17.7436, 83.3304, 6.93, is_safe=False),
    # moderate / balanced
    RiskZone.from_flags("NAD", 17.7441, 83.2505, 2.1, is_safe=True, is_moderate=True),
    RiskZone.from_flags("Akkayapalem", 17.7289, 83.2986, 2.85, is_safe=True, is_moderate=True),
    RiskZone.from_flags("PM Palem", 17.7947, 83.3444, 2.53, is_safe=True, is_moderate=True),
    # safe havens
    RiskZone.from_flags("Siripuram", 17.7222, 83.315, 1.13, is_safe=True),
    RiskZone.from_flags("Tagarapuvalasa", 17.9304, 83.4257, 1.2, is_safe=True),
    RiskZone.from_flags("Arilova", 17.7705, 83.3283, 1.81, is_safe=True),
    RiskZone.from_flags("Sheelanagar", 17.7029, 83.2291, 1.39, is_safe=True),
])
