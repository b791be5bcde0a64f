"""MongoDB access for risk points."""

from riskzones.db.client import Database
from riskzones.db.collection import initialize, risk_point_schema

__all__ = [
    "Database",
    "initialize",
    "risk_point_schema",
]
