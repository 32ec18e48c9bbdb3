"""GraphQL transport and cursor pagination.

Every report funnels through :meth:`GraphQLClient.paginate`: POST the query,
pull nodes out of the connection at ``path``, and keep following
``pageInfo.endCursor`` until ``hasNextPage`` is false.

Failures are classified once, here, into the CollectorError hierarchy.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from .base import AuthenticationError, SchemaError, TLSError, TransientError
from .connection import RSCConnection
from ..data.normalization import get_path


def extract_nodes(connection: Dict[str, Any], source: str = "graphql") -> List[Dict[str, Any]]:
    """Return the nodes of one connection page.

    Accepts both ``edges: [{node: ...}]`` and ``nodes: [...]`` shapes.
    """
    if "edges" in connection:
        edges = connection.get("edges") or []
        return [edge["node"] for edge in edges if edge and edge.get("node") is not None]
    if "nodes" in connection:
        return [node for node in (connection.get("nodes") or []) if node is not None]
    raise SchemaError(source, "Connection has neither 'edges' nor 'nodes'")


class GraphQLClient:
    """Thin GraphQL client bound to one RSC connection."""

    def __init__(self, connection: RSCConnection, verbose: bool = False):
        self.connection = connection
        self.verbose = verbose
        self.request_count = 0

    def log(self, msg: str) -> None:
        if self.verbose:
            print(msg, flush=True)

    def execute(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        operation_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Run a single GraphQL request and return its ``data`` object.

        Raises:
            NotConnectedError: If the connection has no session.
            TransientError: Timeouts, connection failures, 429 and 5xx.
            AuthenticationError: HTTP 401/403.
            TLSError: Certificate verification failed.
            SchemaError: Rejected query, GraphQL errors or an unreadable body.
        """
        self.connection.ensure_connected()
        source = operation_name or "graphql"
        body = {
            "operationName": operation_name,
            "variables": variables or {},
            "query": query,
        }

        session = self.connection.get_session()
        self.request_count += 1
        try:
            resp = session.post(
                self.connection.graphql_url,
                json=body,
                headers=self.connection.headers,
                timeout=self.connection.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise TransientError(source, f"Request timed out after {self.connection.timeout}s", e)
        except requests.exceptions.SSLError as e:
            raise TLSError(
                source,
                "TLS/SSL error: certificate verify failed. Set verify: false or a ca_bundle.",
                e,
            )
        except requests.exceptions.ConnectionError as e:
            raise TransientError(source, f"Connection failed: {e}", e)
        except requests.exceptions.RequestException as e:
            raise TransientError(source, f"Request failed: {e}", e)

        status = resp.status_code
        if status in (401, 403):
            raise AuthenticationError(source, f"HTTP {status}: session rejected", status_code=status)
        if status == 429 or status >= 500:
            raise TransientError(source, f"HTTP {status} {resp.reason}", status_code=status)

        try:
            payload = resp.json()
        except ValueError as e:
            raise SchemaError(source, f"HTTP {status}: response was not JSON", e)

        if not isinstance(payload, dict):
            raise SchemaError(source, "Response body was not a JSON object")

        errors = payload.get("errors")
        if errors:
            messages = "; ".join(
                str(err.get("message", err)) if isinstance(err, dict) else str(err)
                for err in errors
                if err
            )
            raise SchemaError(source, f"GraphQL error: {messages}", errors=errors)
        if status >= 400:
            raise SchemaError(source, f"HTTP {status} {resp.reason}")

        return payload.get("data") or {}

    def paginate(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        path: str = "",
        *,
        page_size: Optional[int] = None,
        page_size_variable: Optional[str] = "first",
        operation_name: Optional[str] = None,
        max_pages: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Fetch every page of a connection and return all nodes in order.

        Args:
            query: GraphQL document. Must accept an ``$after`` cursor.
            variables: Initial variables. Not mutated.
            path: Dotted path under ``data`` to the connection object.
            page_size: Requested page size, sent as ``page_size_variable``.
            page_size_variable: Name of the page-size variable (usually ``first``).
            operation_name: GraphQL operation name, also used in messages.
            max_pages: Stop after this many pages even if more exist.

        Returns:
            Concatenation of the nodes of every page, in server order.
        """
        source = operation_name or path or "graphql"
        page_vars = dict(variables or {})
        if page_size is not None and page_size_variable:
            page_vars[page_size_variable] = page_size

        nodes: List[Dict[str, Any]] = []
        pages = 0
        while True:
            data = self.execute(query, dict(page_vars), operation_name)
            connection = get_path(data, path) if path else data
            if not isinstance(connection, dict):
                raise SchemaError(source, f"No connection at 'data.{path}'")

            nodes.extend(extract_nodes(connection, source))
            pages += 1

            page_info = connection.get("pageInfo") or {}
            if not page_info.get("hasNextPage"):
                break
            if max_pages is not None and pages >= max_pages:
                self.log(f"[{source}] Stopping at max_pages={max_pages}")
                break
            cursor = page_info.get("endCursor")
            if not cursor:
                raise SchemaError(source, "pageInfo.hasNextPage is true but endCursor is empty")
            page_vars["after"] = cursor

        self.log(f"[{source}] Fetched {len(nodes)} nodes in {pages} page(s)")
        return nodes
