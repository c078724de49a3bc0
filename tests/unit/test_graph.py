"""Tests for group reference validation."""

import pytest

from clashforge.groups.graph import GroupGraphError, validate_group_graph
from clashforge.groups.models import Endpoint, GroupKind, PolicyGroup
from clashforge.groups.regions import DEFAULT_REGIONS
from clashforge.groups.synthesizer import synthesize

URL = "http://www.gstatic.com/generate_204"


def test_synthesized_groups_are_valid(sample_endpoints: list[Endpoint]):
    groups = synthesize(sample_endpoints, DEFAULT_REGIONS, URL)
    validate_group_graph(groups, [ep.name for ep in sample_endpoints])


def test_synthesized_groups_without_endpoints_are_valid():
    validate_group_graph(synthesize([], DEFAULT_REGIONS, URL), [])


def test_dangling_member_detected():
    groups = [PolicyGroup(name="main", kind=GroupKind.SELECT, members=("ghost", "DIRECT"))]
    with pytest.raises(GroupGraphError, match="unknown member 'ghost'"):
        validate_group_graph(groups, [])


def test_endpoint_and_sentinel_members_resolve():
    groups = [
        PolicyGroup(name="main", kind=GroupKind.SELECT, members=("node-a", "DIRECT", "REJECT")),
    ]
    validate_group_graph(groups, ["node-a"])


def test_cycle_detected():
    groups = [
        PolicyGroup(name="a", kind=GroupKind.SELECT, members=("b",)),
        PolicyGroup(name="b", kind=GroupKind.SELECT, members=("c",)),
        PolicyGroup(name="c", kind=GroupKind.SELECT, members=("a",)),
    ]
    with pytest.raises(GroupGraphError, match="Circular"):
        validate_group_graph(groups, [])


def test_self_reference_detected():
    groups = [PolicyGroup(name="loop", kind=GroupKind.SELECT, members=("loop",))]
    with pytest.raises(GroupGraphError, match="loop -> loop"):
        validate_group_graph(groups, [])


def test_diamond_is_not_a_cycle():
    groups = [
        PolicyGroup(name="top", kind=GroupKind.SELECT, members=("left", "right")),
        PolicyGroup(name="left", kind=GroupKind.SELECT, members=("bottom",)),
        PolicyGroup(name="right", kind=GroupKind.SELECT, members=("bottom",)),
        PolicyGroup(name="bottom", kind=GroupKind.SELECT, members=("DIRECT",)),
    ]
    validate_group_graph(groups, [])


def test_duplicate_group_name_detected():
    groups = [
        PolicyGroup(name="dup", kind=GroupKind.SELECT, members=("DIRECT",)),
        PolicyGroup(name="dup", kind=GroupKind.SELECT, members=("DIRECT",)),
    ]
    with pytest.raises(GroupGraphError, match="Duplicate"):
        validate_group_graph(groups, [])


def test_endpoint_named_like_a_group_creates_cycle():
    # The all-endpoint groups list every endpoint, so an endpoint called "AI"
    # resolves to the AI selector, which points back at the primary selector.
    endpoints = [Endpoint(name="AI")]
    groups = synthesize(endpoints, DEFAULT_REGIONS, URL)
    with pytest.raises(GroupGraphError, match="Circular"):
        validate_group_graph(groups, ["AI"])
