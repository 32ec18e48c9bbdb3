"""Data collectors - RSC connection, GraphQL transport and report fetchers."""

from .base import (
    AuthenticationError,
    BaseCollector,
    CollectorError,
    NotConnectedError,
    SchemaError,
    TLSError,
    TransientError,
)
from .connection import RSCConnection
from .graphql import GraphQLClient, extract_nodes
from .inventory import GraphQLCollector
from .snapshots import fetch_snapshot_times, snapshot_collector

__all__ = [
    "AuthenticationError",
    "BaseCollector",
    "CollectorError",
    "NotConnectedError",
    "SchemaError",
    "TLSError",
    "TransientError",
    "RSCConnection",
    "GraphQLClient",
    "extract_nodes",
    "GraphQLCollector",
    "fetch_snapshot_times",
    "snapshot_collector",
]
