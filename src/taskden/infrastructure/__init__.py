"""Infrastructure layer for taskden."""

from taskden.infrastructure.config import Config, ConfigManager
from taskden.infrastructure.database import Database
from taskden.infrastructure.logger import get_logger, setup_logging
from taskden.infrastructure.queries import Queries

__all__ = [
    "Config",
    "ConfigManager",
    "Database",
    "Queries",
    "get_logger",
    "setup_logging",
]
