"""Unit tests for the snapshot builder."""

import pytest

from nomadwatch.exceptions import MalformedFieldError
from nomadwatch.snapshot import (
    NodeSnippet,
    build_node_record,
    build_node_snapshot,
    sort_by_name,
    split_host_port,
)

from .conftest import make_node, make_node_stub


@pytest.mark.unit
class TestSplitHostPort:
    """Endpoint decomposition."""

    @pytest.mark.parametrize(
        "endpoint,expected",
        [
            ("10.0.0.5:4646", ("10.0.0.5", "4646")),
            ("node.example.com:4647", ("node.example.com", "4647")),
            ("[::1]:4646", ("::1", "4646")),
            ("[fe80::1%eth0]:80", ("fe80::1%eth0", "80")),
            (":4646", ("", "4646")),
        ],
    )
    def test_valid(self, endpoint, expected):
        assert split_host_port(endpoint) == expected

    @pytest.mark.parametrize(
        "endpoint", ["", "10.0.0.5", "::1", "fe80::1:4646", "[::1]", "[::1", "[::1]x:1", "a]:1"]
    )
    def test_invalid(self, endpoint):
        with pytest.raises(ValueError):
            split_host_port(endpoint)


@pytest.mark.unit
class TestBuildNodeRecord:
    """Single node normalization."""

    def test_fields(self):
        record = build_node_record(
            make_node("id-1", "node1", advertise="10.0.0.5:4646", datacenter="dc3"),
            "nomad.node(@node1)",
            region="global",
        )
        assert record == NodeSnippet(
            id="id-1", name="node1", address="10.0.0.5", datacenter="dc3", region="global"
        )

    def test_malformed_address(self):
        with pytest.raises(MalformedFieldError) as exc_info:
            build_node_record(make_node("id-1", "node1", advertise="bogus"), "nomad.node(@node1)")

        err = exc_info.value
        assert err.dependency == "nomad.node(@node1)"
        assert err.field == "nomad.advertise.address"
        assert err.value == "bogus"
        assert "nomad.node(@node1)" in str(err)
        assert isinstance(err.__cause__, ValueError)

    def test_missing_attributes(self):
        entry = {"ID": "id-1", "Name": "node1", "Datacenter": "dc1", "Attributes": None}
        with pytest.raises(MalformedFieldError):
            build_node_record(entry, "nomad.node(@node1)")

    @pytest.mark.parametrize("attributes", [None, ["nomad.advertise.address"], "x"])
    def test_attributes_not_an_object(self, attributes):
        entry = {"ID": "id-1", "Name": "node1", "Attributes": attributes}
        with pytest.raises(MalformedFieldError):
            build_node_record(entry, "nomad.node(@node1)")

    def test_entry_not_an_object(self):
        with pytest.raises(MalformedFieldError) as exc_info:
            build_node_record(None, "nomad.node(@node1)")
        assert exc_info.value.field == "entry"


@pytest.mark.unit
class TestBuildNodeSnapshot:
    """Node list normalization."""

    def test_sorted(self):
        records = build_node_snapshot(
            [make_node_stub("2", "zeta"), make_node_stub("1", "Alpha"), make_node_stub("3", "beta")]
        )
        # plain string ordering: uppercase sorts before lowercase
        assert [r.name for r in records] == ["Alpha", "beta", "zeta"]

    def test_stable_for_equal_names(self):
        records = build_node_snapshot(
            [make_node_stub("first", "same"), make_node_stub("second", "same")]
        )
        assert [r.id for r in records] == ["first", "second"]

    def test_address_taken_verbatim(self):
        (record,) = build_node_snapshot([make_node_stub("1", "a", address="192.168.1.10")])
        assert record.address == "192.168.1.10"

    def test_missing_fields_read_as_empty(self):
        (record,) = build_node_snapshot([{"ID": "1", "Name": None}])
        assert record == NodeSnippet(id="1", name="", address="", datacenter="")

    def test_region_applied(self):
        (record,) = build_node_snapshot([make_node_stub("1", "a")], region="eu")
        assert record.region == "eu"

    def test_entry_not_an_object(self):
        with pytest.raises(MalformedFieldError) as exc_info:
            build_node_snapshot([make_node_stub("1", "a"), None], source="nomad.nodes")

        assert exc_info.value.dependency == "nomad.nodes"
        assert exc_info.value.field == "entry"
        assert exc_info.value.value == "None"

    def test_deterministic(self):
        entries = [make_node_stub(str(i), f"node{i % 3}") for i in range(9)]
        assert build_node_snapshot(entries) == build_node_snapshot(entries)

    def test_sort_by_name_does_not_mutate(self):
        records = [
            NodeSnippet(id="1", name="b", address="", datacenter=""),
            NodeSnippet(id="2", name="a", address="", datacenter=""),
        ]
        ordered = sort_by_name(records)
        assert [r.id for r in ordered] == ["2", "1"]
        assert [r.id for r in records] == ["1", "2"]
