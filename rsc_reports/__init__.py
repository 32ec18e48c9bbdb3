"""Flat inventory and protection reports from Rubrik Security Cloud."""

from .collectors import (
    AuthenticationError,
    CollectorError,
    GraphQLClient,
    NotConnectedError,
    RSCConnection,
    SchemaError,
    TLSError,
    TransientError,
)
from .config import Config, ConfigError
from .data import InventoryCache
from .reports import RSCReports

__version__ = "1.0.0"

__all__ = [
    "AuthenticationError",
    "CollectorError",
    "GraphQLClient",
    "NotConnectedError",
    "RSCConnection",
    "SchemaError",
    "TLSError",
    "TransientError",
    "Config",
    "ConfigError",
    "InventoryCache",
    "RSCReports",
]
