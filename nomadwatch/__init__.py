"""
nomadwatch - polling dependencies for Nomad node data

Declares parameterized reads of Nomad nodes, executes them against a backend
client and returns deterministic, sorted snapshots plus the consistency
point of the read. Queries can be stopped from any thread.

Usage:
    >>> from nomadwatch import ClientSet, NomadWatchConfig, parse_nodes_query
    >>> config = NomadWatchConfig.from_env()
    >>> query = parse_nodes_query("@dc1")
    >>> with ClientSet.from_config(config.nomad) as clients:
    ...     nodes, meta = query.fetch(clients, config.nomad.default_options())
"""

__version__ = "0.1.0"

from .cancellation import StopSignal
from .clients import ClientSet, NomadHTTPClient, QueryMeta
from .config import NomadConfig, NomadWatchConfig
from .exceptions import (
    BackendError,
    ClientError,
    ConfigurationError,
    DependencyError,
    InvalidSelectorError,
    MalformedFieldError,
    SerializationError,
    StoppedError,
)
from .options import ConsistencyMode, QueryOptions
from .query import (
    Dependency,
    DependencyType,
    Query,
    QueryKind,
    Selector,
    SelectorScope,
    parse_node_query,
    parse_nodes_query,
    parse_query,
    parse_region_nodes_query,
)
from .serialization import SnapshotRegistry, default_registry
from .snapshot import NodeSnippet, ResponseMetadata

__all__ = [
    "__version__",
    # Queries
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
    # Options and results
    "ConsistencyMode",
    "QueryOptions",
    "NodeSnippet",
    "ResponseMetadata",
    "StopSignal",
    # Clients and configuration
    "ClientSet",
    "NomadHTTPClient",
    "QueryMeta",
    "NomadConfig",
    "NomadWatchConfig",
    # Serialization
    "SnapshotRegistry",
    "default_registry",
    # Exceptions
    "BackendError",
    "ClientError",
    "ConfigurationError",
    "DependencyError",
    "InvalidSelectorError",
    "MalformedFieldError",
    "SerializationError",
    "StoppedError",
]
