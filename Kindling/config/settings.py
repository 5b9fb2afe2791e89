"""Centralized configuration system for Kindling.

Supports environment variables, JSON config files, and programmatic overrides.
"""

from __future__ import annotations

import os
import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging

from dotenv import load_dotenv

from ..utils.errors import ConfigurationError

logger = logging.getLogger("KINDLING.Config")


@dataclass
class StoreConfig:
    """Memory tree layout."""
    root: str = "memory-tree"
    notes_dir: str = "20-BRANCHES"
    system_dirs: List[str] = field(default_factory=lambda: ["99-SYSTEM", "40-EVOLUTION-LOG"])
    extensions: List[str] = field(default_factory=lambda: [".md"])
    ledger_file: str = "99-SYSTEM/heat-log.json"
    archive_file: str = "99-SYSTEM/archive-metadata.json"
    reports_dir: str = "40-EVOLUTION-LOG/heat-reports"
    lock_timeout_s: float = 10.0

    def resolve(self, relative: str) -> Path:
        return Path(self.root) / relative


@dataclass
class HeatConfig:
    """Heat ledger tuning."""
    boost: float = 10.0
    base_decay_rate: float = 0.95
    low_confidence_decay_rate: float = 0.90
    no_evidence_decay_rate: float = 0.85
    high_risk_cap: float = 30.0
    high_threshold: float = 80.0
    medium_threshold: float = 40.0
    echo_chamber_threshold: float = 80.0
    echo_chamber_penalty: float = 0.5
    max_consecutive_accesses: int = 5
    access_cooldown_s: float = 300.0
    max_log_entries: int = 1000
    decay_interval_hours: float = 24.0
    access_decay: str = "step"  # "step" (one rate step per access) or "elapsed" (rate ** hours)


@dataclass
class SparkConfig:
    """Spark detection thresholds."""
    policy: str = "recency"  # "recency" or "keyword"
    keyword_threshold: float = 30.0
    low_heat_threshold: float = 40.0
    idle_days: float = 7.0
    long_idle_days: float = 30.0
    min_token_length: int = 3


@dataclass
class ResurrectionConfig:
    """Archive resurrection matching."""
    similarity_threshold: float = 0.85
    vocabulary_size: int = 50
    min_token_length: int = 4


@dataclass
class SearchConfig:
    """Full text search defaults."""
    max_results: int = 50
    case_sensitive: bool = False
    preview_before: int = 50
    preview_after: int = 100
    candidate_limit: int = 1000


@dataclass
class ReportConfig:
    """Heat report settings."""
    top_n: int = 10
    archive_after_days: float = 90.0


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "WARNING"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    format: str = "standard"  # "standard" or "json"
    file_path: Optional[str] = None


@dataclass
class KindlingConfig:
    """Master configuration for Kindling."""
    store: StoreConfig = field(default_factory=StoreConfig)
    heat: HeatConfig = field(default_factory=HeatConfig)
    sparks: SparkConfig = field(default_factory=SparkConfig)
    resurrection: ResurrectionConfig = field(default_factory=ResurrectionConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return asdict(self)

    def to_json(self) -> str:
        """Convert config to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    def save(self, path: str) -> None:
        """Save config to JSON file."""
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Config saved to {path}")

    @classmethod
    def load(cls, path: str) -> KindlingConfig:
        """Load config from JSON file. A missing file yields defaults."""
        if not os.path.exists(path):
            logger.warning(f"Config file not found: {path}, using defaults")
            return cls()

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read config file: {e}", context={"path": path}) from e

        if not isinstance(data, dict):
            raise ConfigurationError("Config file must contain a JSON object", context={"path": path})

        config = cls()
        for key, value in data.items():
            if hasattr(config, key) and isinstance(value, dict):
                setattr(config, key, cls._update_dataclass(getattr(config, key), value))

        logger.info(f"Config loaded from {path}")
        return config

    @staticmethod
    def _update_dataclass(obj: Any, data: Dict[str, Any]) -> Any:
        """Recursively update dataclass from dict."""
        if not isinstance(data, dict):
            return obj

        for key, value in data.items():
            if hasattr(obj, key):
                current = getattr(obj, key)
                if hasattr(current, "__dataclass_fields__"):
                    setattr(obj, key, KindlingConfig._update_dataclass(current, value))
                else:
                    setattr(obj, key, value)
        return obj

    def apply_env(self) -> KindlingConfig:
        """Override fields from KINDLING_* environment variables.

        Numbers that fail to parse are logged and ignored.
        """
        for var, (section, name, cast) in ENV_OVERRIDES.items():
            raw = os.getenv(var)
            if raw is None:
                continue
            try:
                value = cast(raw)
            except ValueError:
                logger.warning(f"Invalid value for {var}={raw!r}, ignoring")
                continue
            setattr(getattr(self, section), name, value)
        return self


# env var -> (section, field, parser)
ENV_OVERRIDES: Dict[str, Tuple[str, str, Callable[[str], Any]]] = {
    "KINDLING_ROOT": ("store", "root", str),
    "KINDLING_LEDGER_FILE": ("store", "ledger_file", str),
    "KINDLING_ARCHIVE_FILE": ("store", "archive_file", str),
    "KINDLING_HEAT_BOOST": ("heat", "boost", float),
    "KINDLING_ACCESS_DECAY": ("heat", "access_decay", str),
    "KINDLING_MAX_LOG_ENTRIES": ("heat", "max_log_entries", int),
    "KINDLING_SPARK_POLICY": ("sparks", "policy", str),
    "KINDLING_SEARCH_MAX_RESULTS": ("search", "max_results", int),
    "KINDLING_RESURRECTION_THRESHOLD": ("resurrection", "similarity_threshold", float),
    "KINDLING_LOG_LEVEL": ("logging", "level", str),
    "KINDLING_LOG_FORMAT": ("logging", "format", str),
    "KINDLING_LOG_FILE": ("logging", "file_path", str),
}


def get_config(config_path: Optional[str] = None, use_env: bool = True) -> KindlingConfig:
    """Get Kindling configuration.

    Priority: env vars (including a .env file) > config file > defaults
    """
    if config_path:
        config = KindlingConfig.load(config_path)
    else:
        config = KindlingConfig()

    if use_env:
        load_dotenv()
        config.apply_env()

    return config


__all__ = [
    "KindlingConfig",
    "StoreConfig",
    "HeatConfig",
    "SparkConfig",
    "ResurrectionConfig",
    "SearchConfig",
    "ReportConfig",
    "LoggingConfig",
    "get_config",
]
