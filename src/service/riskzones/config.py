"""Configuration management for the risk zones service."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv


@dataclass
class MongoConfig:
    """MongoDB connection configuration."""

    uri: str = "mongodb://localhost:27017"
    database: str = "riskzones"
    collection: str = "risk_points"
    timeout_ms: int = 5000


@dataclass
class LimitsConfig:
    """Bounds applied to risk points and proximity queries."""

    radius_min: int = 10  # meters
    radius_max: int = 50000  # meters, also the search cap for containment queries
    risk_min: int = 1
    risk_max: int = 10
    add_batch_min: int = 1
    add_batch_max: int = 1000
    nearby_max_points: int = 100
    max_distance_km: float = 10.0  # beyond this, reported distances are whole km
    delta_max: float | None = None  # degrees, unbounded when unset
    title_max_length: int = 128


@dataclass
class Config:
    """Main configuration container."""

    mongo: MongoConfig = field(default_factory=MongoConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    locale: str = "en"

    @classmethod
    def load(cls, config_dir: Path | None = None) -> "Config":
        """Load configuration from files and environment variables."""
        # Load .env file if present
        env_file = Path(__file__).parent.parent / ".env"
        if env_file.exists():
            load_dotenv(env_file)

        config = cls()

        if config_dir and config_dir.exists():
            for name in ("mongo.yaml", "limits.yaml"):
                path = config_dir / name
                if path.exists():
                    config._load_yaml(path)

        config._load_from_env()

        return config

    def _load_yaml(self, path: Path) -> None:
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
            if data:
                self._apply_yaml_config(data)

    def _apply_yaml_config(self, data: dict[str, Any]) -> None:
        """Apply YAML configuration data."""
        if "mongo" in data:
            mongo = data["mongo"]
            if "uri" in mongo:
                self.mongo.uri = mongo["uri"]
            if "database" in mongo:
                self.mongo.database = mongo["database"]
            if "collection" in mongo:
                self.mongo.collection = mongo["collection"]
            if "timeout_ms" in mongo:
                self.mongo.timeout_ms = int(mongo["timeout_ms"])

        if "limits" in data:
            limits = data["limits"]
            for name in (
                "radius_min", "radius_max", "risk_min", "risk_max",
                "add_batch_min", "add_batch_max", "nearby_max_points",
                "title_max_length",
            ):
                if name in limits:
                    setattr(self.limits, name, int(limits[name]))
            if "max_distance_km" in limits:
                self.limits.max_distance_km = float(limits["max_distance_km"])
            if limits.get("delta_max") is not None:
                self.limits.delta_max = float(limits["delta_max"])

        if "locale" in data:
            self.locale = data["locale"]

    def _load_from_env(self) -> None:
        """Override configuration from environment variables."""
        # MongoDB
        if uri := os.getenv("MONGO_URI"):
            self.mongo.uri = uri
        if database := os.getenv("MONGO_DATABASE"):
            self.mongo.database = database
        if collection := os.getenv("MONGO_COLLECTION"):
            self.mongo.collection = collection
        if timeout := os.getenv("MONGO_TIMEOUT_MS"):
            self.mongo.timeout_ms = int(timeout)

        if locale := os.getenv("RISKZONES_LOCALE"):
            self.locale = locale

        # Limits
        if radius_min := os.getenv("HRPOINT_RADIUS_MIN"):
            self.limits.radius_min = int(radius_min)
        if radius_max := os.getenv("HRPOINT_RADIUS_MAX"):
            self.limits.radius_max = int(radius_max)
        if risk_min := os.getenv("HRPOINT_RISK_MIN"):
            self.limits.risk_min = int(risk_min)
        if risk_max := os.getenv("HRPOINT_RISK_MAX"):
            self.limits.risk_max = int(risk_max)
        if batch_min := os.getenv("HRPOINT_ADD_BATCH_MIN"):
            self.limits.add_batch_min = int(batch_min)
        if batch_max := os.getenv("HRPOINT_ADD_BATCH_MAX"):
            self.limits.add_batch_max = int(batch_max)
        if max_points := os.getenv("HRPOINT_NEARBY_MAX_POINTS"):
            self.limits.nearby_max_points = int(max_points)
        if max_distance := os.getenv("HRPOINT_MAX_DISTANCE_KM"):
            self.limits.max_distance_km = float(max_distance)
        if delta_max := os.getenv("HRPOINT_DELTA_MAX"):
            self.limits.delta_max = float(delta_max)


# Global config instance
_config: Config | None = None


def get_config() -> Config:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        config_dir = Path(__file__).parent.parent / "config"
        _config = Config.load(config_dir)
    return _config


def reload_config(config_dir: Path | None = None) -> Config:
    """Reload configuration (useful for testing)."""
    global _config
    _config = Config.load(config_dir)
    return _config
