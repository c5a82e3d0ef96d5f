"""
Query options for Nomad reads.

QueryOptions is the cross-cutting part of a request: region, namespace,
filter expression, consistency mode and blocking-query parameters. Queries
overlay their own selector onto a copy of the caller's options with merge().
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import httpx


class ConsistencyMode(str, Enum):
    """Read consistency requested from the Nomad servers."""

    DEFAULT = "default"
    STALE = "stale"
    CONSISTENT = "consistent"


@dataclass(frozen=True)
class QueryOptions:
    """Immutable set of query options."""

    region: str = ""
    namespace: str = ""
    filter: str = ""
    consistency: ConsistencyMode = ConsistencyMode.DEFAULT
    wait_index: int = 0
    wait_time: float = 0.0  # seconds
    near: str = ""
    per_page: int = 0

    def merge(self, other: Optional[QueryOptions]) -> QueryOptions:
        """
        Return a new QueryOptions with every field set on other taken from other.

        A field counts as set when it differs from its default. Neither
        instance is modified.
        """
        if other is None:
            return dataclasses.replace(self)

        overrides: Dict[str, Any] = {}
        for f in dataclasses.fields(self):
            value = getattr(other, f.name)
            if value != f.default:
                overrides[f.name] = value
        return dataclasses.replace(self, **overrides)

    def to_params(self) -> Dict[str, str]:
        """Encode the options as Nomad HTTP API query parameters."""
        params: Dict[str, str] = {}
        if self.region:
            params["region"] = self.region
        if self.namespace:
            params["namespace"] = self.namespace
        if self.filter:
            params["filter"] = self.filter
        if self.consistency == ConsistencyMode.STALE:
            params["stale"] = ""
        elif self.consistency == ConsistencyMode.CONSISTENT:
            params["consistent"] = ""
        if self.wait_index:
            params["index"] = str(self.wait_index)
        if self.wait_time:
            params["wait"] = f"{int(self.wait_time * 1000)}ms"
        if self.near:
            params["near"] = self.near
        if self.per_page:
            params["per_page"] = str(self.per_page)
        return params

    def __str__(self) -> str:
        return str(httpx.QueryParams(self.to_params()))
