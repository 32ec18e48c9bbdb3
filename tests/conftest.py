"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import MagicMock

import pytest

from rsc_reports.collectors.connection import RSCConnection
from rsc_reports.collectors.graphql import GraphQLClient

FIXED_NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def _make_response(payload=None, status_code=200, reason="OK", json_error=False):
    """Fake requests.Response carrying ``payload`` as its JSON body."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.reason = reason
    if json_error:
        resp.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        resp.json.return_value = payload
    return resp


def _edges_page(path, nodes, end_cursor=None, has_next=False):
    """GraphQL response for one ``edges`` page of the connection at ``path``."""
    return {
        "data": {
            path: {
                "edges": [{"node": n} for n in nodes],
                "pageInfo": {"endCursor": end_cursor, "hasNextPage": has_next},
            }
        }
    }


def _nodes_page(path, nodes, end_cursor=None, has_next=False):
    """GraphQL response for one ``nodes`` page of the connection at ``path``."""
    return {
        "data": {
            path: {
                "nodes": list(nodes),
                "pageInfo": {"endCursor": end_cursor, "hasNextPage": has_next},
            }
        }
    }


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def connection():
    """Connection with a token and a mocked session."""
    conn = RSCConnection("https://example.my.rubrik.com/", "test-token", retry_total=0)
    conn._session = MagicMock()
    return conn


@pytest.fixture
def session(connection):
    return connection._session


@pytest.fixture
def client(connection):
    return GraphQLClient(connection)


@pytest.fixture
def sample_object_nodes():
    """Raw snappableConnection nodes (epoch-ms timestamps)."""
    last = int(FIXED_NOW.timestamp() * 1000) - 3600000
    return [
        {
            "id": "vm-1",
            "fid": "fid-vm-1",
            "name": "web-01",
            "objectType": "VmwareVirtualMachine",
            "isRelic": False,
            "location": "vcenter-a/dc1",
            "cluster": {"id": "c-1", "name": "cluster-a"},
            "slaDomain": {"id": "sla-gold", "name": "Gold"},
            "complianceStatus": "IN_COMPLIANCE",
            "protectionStatus": "Protected",
            "lastSnapshot": last,
            "logicalBytes": 1000000000,
            "localStorage": 2500000000,
            "archiveStorage": 0,
            "replicaStorage": None,
        },
        {
            "id": "vm-2",
            "fid": "fid-vm-2",
            "name": "db-01",
            "objectType": "VmwareVirtualMachine",
            "isRelic": True,
            "cluster": {"id": "c-1", "name": "cluster-a"},
            "slaDomain": {"id": "sla-gold", "name": "Gold"},
            "complianceStatus": "OUT_OF_COMPLIANCE",
            "lastSnapshot": last - 86400000,
            "localStorage": 500000000,
        },
        {
            "id": "db-1",
            "fid": "fid-db-1",
            "name": "sales",
            "objectType": "Mssql",
            "cluster": {"id": "c-2", "name": "cluster-b"},
            "slaDomain": {"id": "UNPROTECTED", "name": "Unprotected"},
            "complianceStatus": "NOT_AVAILABLE",
            "lastSnapshot": None,
        },
        {
            "id": "share-1",
            "name": "home",
            "objectType": "NasShare",
            "cluster": None,
            "slaDomain": {"id": "DO_NOT_PROTECT", "name": "Do Not Protect"},
        },
    ]


@pytest.fixture
def make_response():
    return _make_response


@pytest.fixture
def edges_page():
    return _edges_page


@pytest.fixture
def nodes_page():
    return _nodes_page
