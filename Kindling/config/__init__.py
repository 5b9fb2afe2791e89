from .settings import (
    KindlingConfig,
    StoreConfig,
    HeatConfig,
    SparkConfig,
    ResurrectionConfig,
    SearchConfig,
    ReportConfig,
    LoggingConfig,
    get_config,
)
from .logging_config import setup_logging, get_logger

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
    "setup_logging",
    "get_logger",
]
