"""Generic paginate-and-flatten collector.

One class serves every object type in the catalog: it runs each QuerySpec
of an ObjectTypeSpec through GraphQLClient.paginate, flattens the nodes with
the object type's field table, and concatenates the records in query order.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from .base import BaseCollector, CollectorError
from .graphql import GraphQLClient
from ..data.mapping import MappingContext, flatten_all
from ..data.models import ObjectTypeSpec


class GraphQLCollector(BaseCollector):
    """Collector for one catalog object type."""

    def __init__(
        self,
        client: GraphQLClient,
        spec: ObjectTypeSpec,
        *,
        page_size: Optional[int] = None,
        variables: Optional[Dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ):
        self.client = client
        self.spec = spec
        self.page_size = page_size
        self.variables = dict(variables or {})
        self.now = now

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def display_name(self) -> str:
        return self.spec.display_name

    def is_available(self) -> bool:
        return self.client.connection.is_connected()

    def collect(self) -> List[Dict[str, Any]]:
        """Fetch every query of the object type and return the merged records.

        Raises:
            CollectorError: If a required variable is missing or any page fails.
        """
        missing = [v for v in self.spec.required_variables if v not in self.variables]
        if missing:
            raise CollectorError(self.name, f"Missing required variable(s): {', '.join(missing)}")

        ctx = MappingContext.create(self.now, self.client.connection.console_url)
        records: List[Dict[str, Any]] = []
        for query in self.spec.queries:
            variables = {**query.variables, **self.variables}
            nodes = self.client.paginate(
                query.query,
                variables,
                query.connection_path,
                page_size=self.page_size or query.page_size,
                page_size_variable=query.page_size_variable,
                operation_name=query.name,
            )
            records.extend(flatten_all(nodes, query.fields, ctx))
        self.client.log(f"[{self.name}] {len(records)} records")
        return records
