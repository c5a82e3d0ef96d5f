"""
Shared pytest fixtures for nomadwatch tests.

Backends are faked with MagicMock objects that follow the NodesAPI contract,
so queries can be exercised without a Nomad agent.
"""

from typing import Any, Dict, Optional
from unittest.mock import MagicMock

import pytest

from nomadwatch.clients import ClientSet, QueryMeta


def make_node_stub(
    node_id: str, name: str, address: str = "10.0.0.1", datacenter: str = "dc1"
) -> Dict[str, Any]:
    """Node list stub as returned by GET /v1/nodes."""
    return {
        "ID": node_id,
        "Name": name,
        "Address": address,
        "Datacenter": datacenter,
        "Status": "ready",
    }


def make_node(
    node_id: str,
    name: str,
    advertise: Optional[str] = "10.0.0.5:4646",
    datacenter: str = "dc1",
) -> Dict[str, Any]:
    """Full node entry as returned by GET /v1/node/<id>."""
    attributes = {"kernel.name": "linux"}
    if advertise is not None:
        attributes["nomad.advertise.address"] = advertise
    return {
        "ID": node_id,
        "Name": name,
        "Datacenter": datacenter,
        "Attributes": attributes,
    }


@pytest.fixture
def query_meta() -> QueryMeta:
    """Backend metadata returned by the fake client."""
    return QueryMeta(last_index=42, last_contact=0.015)


@pytest.fixture
def nodes_api(query_meta):
    """Fake node endpoints with empty default responses."""
    api = MagicMock()
    api.list.return_value = ([], query_meta)
    api.info.return_value = (None, query_meta)
    return api


@pytest.fixture
def clients(nodes_api) -> ClientSet:
    """ClientSet wired to the fake node endpoints."""
    nomad = MagicMock()
    nomad.nodes.return_value = nodes_api
    return ClientSet(nomad=nomad)
