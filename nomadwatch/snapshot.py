"""
Snapshot builder.

Turns raw Nomad node entries into NodeSnippet records. The records are a
stable internal representation: they do not leak the Nomad API schema to
callers and carry no encoding concerns.

Every function here is pure. Given the same entries the same ordered records
come back, which keeps fetch results comparable across polls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Tuple

from .exceptions import MalformedFieldError

ADVERTISE_ADDRESS_ATTRIBUTE = "nomad.advertise.address"


@dataclass(frozen=True)
class NodeSnippet:
    """A stub node entry in Nomad."""

    id: str
    name: str
    address: str
    datacenter: str
    region: str = ""


@dataclass(frozen=True)
class ResponseMetadata:
    """
    Consistency point of a read.

    last_index is the backend's monotonic index for the data returned.
    last_contact is the time in seconds since the serving node last heard
    from the leader.
    """

    last_index: int
    last_contact: float


def split_host_port(endpoint: str) -> Tuple[str, str]:
    """
    Split a host:port endpoint into host and port.

    IPv6 hosts must be bracketed, as in [::1]:4646. Raises ValueError when
    the endpoint cannot be decomposed.
    """
    if endpoint.startswith("["):
        end = endpoint.find("]")
        if end < 0:
            raise ValueError(f"missing ']' in address {endpoint!r}")
        host, rest = endpoint[1:end], endpoint[end + 1 :]
        if not rest.startswith(":"):
            raise ValueError(f"missing port in address {endpoint!r}")
        port = rest[1:]
        if ":" in port or "[" in port or "]" in port:
            raise ValueError(f"unexpected characters after port in {endpoint!r}")
        return host, port

    if endpoint.count(":") == 0:
        raise ValueError(f"missing port in address {endpoint!r}")
    if endpoint.count(":") > 1:
        raise ValueError(f"too many colons in address {endpoint!r}")
    if "[" in endpoint or "]" in endpoint:
        raise ValueError(f"unexpected bracket in address {endpoint!r}")
    host, port = endpoint.split(":")
    return host, port


def sort_by_name(records: Iterable[NodeSnippet]) -> List[NodeSnippet]:
    """Return records ordered by name; equal names keep their input order."""
    return sorted(records, key=lambda r: r.name)


def _require_mapping(entry: Any, source: str) -> Mapping[str, Any]:
    if not isinstance(entry, Mapping):
        raise MalformedFieldError(source, "entry", str(entry))
    return entry


def _text(entry: Mapping[str, Any], key: str) -> str:
    value = entry.get(key)
    return "" if value is None else str(value)


def build_node_record(
    entry: Mapping[str, Any], source: str, region: str = ""
) -> NodeSnippet:
    """
    Convert a node info entry into a NodeSnippet.

    The address is the host part of the node's advertise address attribute.
    source names the dependency being served and is used for error context.
    """
    entry = _require_mapping(entry, source)
    attributes = entry.get("Attributes")
    if not isinstance(attributes, Mapping):
        attributes = {}
    endpoint = str(attributes.get(ADVERTISE_ADDRESS_ATTRIBUTE, ""))
    try:
        host, _ = split_host_port(endpoint)
    except ValueError as e:
        raise MalformedFieldError(
            source, ADVERTISE_ADDRESS_ATTRIBUTE, endpoint
        ) from e

    return NodeSnippet(
        id=_text(entry, "ID"),
        name=_text(entry, "Name"),
        address=host,
        datacenter=_text(entry, "Datacenter"),
        region=region,
    )


def build_node_snapshot(
    entries: Iterable[Mapping[str, Any]], region: str = "", source: str = ""
) -> List[NodeSnippet]:
    """
    Convert node list entries into NodeSnippet records sorted by name.

    Raises MalformedFieldError, naming source, when an entry is not an object.
    """
    entries = [_require_mapping(entry, source) for entry in entries]
    nodes = [
        NodeSnippet(
            id=_text(entry, "ID"),
            name=_text(entry, "Name"),
            address=_text(entry, "Address"),
            datacenter=_text(entry, "Datacenter"),
            region=region,
        )
        for entry in entries
    ]
    return sort_by_name(nodes)
