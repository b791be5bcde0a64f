"""Risk point storage and proximity queries."""

from riskzones.risk.proximity import NearbyPoint, format_distance, get_near_points
from riskzones.risk.store import RiskPointStore

__all__ = [
    "get_near_points",
    "format_distance",
    "NearbyPoint",
    "RiskPointStore",
]
