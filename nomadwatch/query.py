"""
Nomad node dependencies.

A Query describes what to read from Nomad: one node by identifier, or the
node list, optionally narrowed to a datacenter or region. Queries are built
from the selector strings used in templates:

    ""          every node
    "node1"     the node with identifier node1   (parse_node_query)
    "@dc1"      nodes in datacenter dc1          (parse_nodes_query)
    "@us-east"  nodes in region us-east          (parse_region_nodes_query)

A polling loop calls fetch() repeatedly and stop() once it is done with the
query. Both may be called from different threads.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol, Tuple

from httpx import URL

from .cancellation import StopSignal
from .clients import ClientSet
from .exceptions import BackendError, InvalidSelectorError, StoppedError
from .logger import get_logger
from .options import QueryOptions
from .snapshot import NodeSnippet, ResponseMetadata, build_node_record, build_node_snapshot

logger = get_logger(__name__)

# Shared node-name grammar.
NODE_NAME_PATTERN = r"[A-Za-z0-9._\-]+"

NODE_QUERY_RE = re.compile(r"\A(?P<name>" + NODE_NAME_PATTERN + r")\Z")
SCOPED_QUERY_RE = re.compile(r"\A@(?P<scope>" + NODE_NAME_PATTERN + r")\Z")


class DependencyType(str, Enum):
    """Backend a dependency reads from."""

    NOMAD = "nomad"


class QueryKind(str, Enum):
    """Which grammar built a query. The value is the query's display name."""

    NODE = "nomad.node"
    NODES = "nomad.nodes"
    REGION_NODES = "nomad.region.nodes"


class SelectorScope(str, Enum):
    """What a selector narrows the read to."""

    NONE = "none"
    IDENTIFIER = "identifier"
    DATACENTER = "datacenter"
    REGION = "region"


@dataclass(frozen=True)
class Selector:
    """Parsed, typed form of a selector string."""

    scope: SelectorScope = SelectorScope.NONE
    value: str = ""

    @classmethod
    def none(cls) -> Selector:
        return cls()

    @classmethod
    def identifier(cls, value: str) -> Selector:
        return cls(SelectorScope.IDENTIFIER, value)

    @classmethod
    def datacenter(cls, value: str) -> Selector:
        return cls(SelectorScope.DATACENTER, value)

    @classmethod
    def region(cls, value: str) -> Selector:
        return cls(SelectorScope.REGION, value)

    def apply(self, options: QueryOptions) -> QueryOptions:
        """Overlay this selector onto a copy of options."""
        if self.scope == SelectorScope.DATACENTER:
            return options.merge(QueryOptions(filter=f"Datacenter == {self.value}"))
        if self.scope == SelectorScope.REGION:
            return options.merge(QueryOptions(region=self.value))
        return options.merge(None)


class Dependency(Protocol):
    """Contract a polling loop relies on."""

    def fetch(
        self, clients: ClientSet, options: Optional[QueryOptions] = None
    ) -> Tuple[List[NodeSnippet], ResponseMetadata]:
        ...

    def stop(self) -> None:
        ...

    def can_share(self) -> bool:
        ...

    def dependency_type(self) -> DependencyType:
        ...

    def __str__(self) -> str:
        ...


class Query:
    """A requested Nomad node dependency."""

    def __init__(self, kind: QueryKind, selector: Optional[Selector] = None):
        self._kind = kind
        self._selector = selector or Selector.none()
        self._stop = StopSignal()

    @property
    def kind(self) -> QueryKind:
        return self._kind

    @property
    def selector(self) -> Selector:
        return self._selector

    @property
    def stopped(self) -> bool:
        """True once stop() has been called."""
        return self._stop.is_closed()

    def can_share(self) -> bool:
        """Results of identical queries may be shared between watchers."""
        return True

    def dependency_type(self) -> DependencyType:
        return DependencyType.NOMAD

    def fetch(
        self, clients: ClientSet, options: Optional[QueryOptions] = None
    ) -> Tuple[List[NodeSnippet], ResponseMetadata]:
        """
        Read the nodes this query describes.

        Returns the records sorted by name together with the response
        metadata. Raises StoppedError once the query has been stopped and
        BackendError when the backend call fails or returns a node whose
        address cannot be parsed.

        stop() does not interrupt a backend call already in progress; such a
        call raises StoppedError when it returns.
        """
        if self._stop.is_closed():
            raise StoppedError(str(self))

        opts = self._selector.apply(options or QueryOptions())

        if self._selector.scope == SelectorScope.IDENTIFIER:
            path = "/v1/node/" + self._selector.value
        else:
            path = "/v1/nodes"
        logger.debug(
            "GET request",
            dependency=str(self),
            url=str(URL(path, params=opts.to_params())),
        )

        try:
            nodes = clients.nomad().nodes()
            if self._selector.scope == SelectorScope.IDENTIFIER:
                entry, qm = nodes.info(self._selector.value, opts)
                entries = [] if entry is None else [entry]
            else:
                entries, qm = nodes.list(opts)
        except Exception as e:
            raise BackendError(str(self), e) from e

        if self._stop.is_closed():
            raise StoppedError(str(self))

        logger.debug("returned results", dependency=str(self), count=len(entries))

        if self._selector.scope == SelectorScope.IDENTIFIER:
            records = [build_node_record(e, str(self), opts.region) for e in entries]
        else:
            records = build_node_snapshot(entries, opts.region, source=str(self))

        rm = ResponseMetadata(last_index=qm.last_index, last_contact=qm.last_contact)
        return records, rm

    def stop(self) -> None:
        """Halt this query's fetches. Safe to call more than once."""
        if self._stop.close():
            logger.debug("stopped", dependency=str(self))

    def __str__(self) -> str:
        if self._selector.value:
            return f"{self._kind.value}(@{self._selector.value})"
        return self._kind.value

    def __repr__(self) -> str:
        return f"<Query {self}>"


_SCOPES = {
    QueryKind.NODES: SelectorScope.DATACENTER,
    QueryKind.REGION_NODES: SelectorScope.REGION,
}


def parse_query(s: str, kind: QueryKind) -> Query:
    """
    Parse a selector string with the grammar of the given query kind.

    Raises InvalidSelectorError when s does not match the grammar.
    """
    if s == "":
        return Query(kind)

    if kind == QueryKind.NODE:
        m = NODE_QUERY_RE.match(s)
        if m is None:
            raise InvalidSelectorError(kind.value, s)
        return Query(kind, Selector.identifier(m.group("name")))

    m = SCOPED_QUERY_RE.match(s)
    if m is None:
        raise InvalidSelectorError(kind.value, s)
    return Query(kind, Selector(_SCOPES[kind], m.group("scope")))


def parse_node_query(s: str) -> Query:
    """Parse a node identifier; an empty string reads every node."""
    return parse_query(s, QueryKind.NODE)


def parse_nodes_query(s: str) -> Query:
    """Parse an optional @datacenter selector for the node list."""
    return parse_query(s, QueryKind.NODES)


def parse_region_nodes_query(s: str) -> Query:
    """Parse an optional @region selector for the node list."""
    return parse_query(s, QueryKind.REGION_NODES)


__all__ = [
    "Dependency",
    "DependencyType",
    "Query",
    "QueryKind",
    "Selector",
    "SelectorScope",
    "parse_node_query",
    "parse_nodes_query",
    "parse_query",
    "parse_region_nodes_query",
]
