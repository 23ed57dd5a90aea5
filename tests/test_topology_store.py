"""
Unit tests for TopologyStore: structural invariants, errors, queries, events.
"""

import itertools
import random

import pytest

from errors import (
    DuplicateLink,
    DuplicateNode,
    InvalidCost,
    LinkNotFound,
    NodeNotFound,
    SelfLink,
    TopologyError,
    UnknownNode,
)
from events import LinkAdded, LinkModified, LinkRemoved, NodeAdded, NodeRemoved, TopologyReplaced
from links import Link
from nodes import NodeKind
from topology_store import TopologyStore


def _triangle():
    store = TopologyStore()
    for node_id in ("A", "B", "C"):
        store.add_node(node_id, "endpoint")
    store.add_link("A", "B", 5)
    store.add_link("B", "C", 5)
    return store


def _state(store):
    return (
        [(n.id, n.kind, n.position) for n in store.node_records()],
        sorted((l.key, l.cost) for l in store.links()),
    )


def test_add_node_records_kind():
    store = TopologyStore()
    node = store.add_node("R1", "repeater")

    assert node.kind is NodeKind.REPEATER
    assert store.get_node("R1") == node
    assert "R1" in store
    assert store.outgoing("R1") == {}


def test_duplicate_node_rejected():
    store = TopologyStore()
    store.add_node("A", NodeKind.ENDPOINT)
    with pytest.raises(DuplicateNode):
        store.add_node("A", NodeKind.REPEATER)
    assert store.get_node("A").kind is NodeKind.ENDPOINT


def test_unknown_node_kind_rejected():
    store = TopologyStore()
    with pytest.raises(ValueError):
        store.add_node("A", "satellite")
    assert len(store) == 0


def test_remove_missing_node_raises():
    with pytest.raises(NodeNotFound):
        TopologyStore().remove_node("ghost")


def test_link_is_visible_from_both_ends():
    store = _triangle()

    assert store.outgoing("A") == {"B": 5.0}
    assert store.outgoing("B") == {"A": 5.0, "C": 5.0}
    assert store.link_between("B", "A") == Link("A", "B", 5.0)
    assert store.has_link("C", "B")


def test_add_link_errors_leave_store_unchanged():
    store = _triangle()
    before = _state(store)

    with pytest.raises(UnknownNode):
        store.add_link("A", "Z", 1)
    with pytest.raises(DuplicateLink):
        store.add_link("B", "A", 1)
    with pytest.raises(InvalidCost):
        store.add_link("A", "C", -1)
    with pytest.raises(InvalidCost):
        store.add_link("A", "C", float("nan"))
    with pytest.raises(InvalidCost):
        store.add_link("A", "C", "3")
    with pytest.raises(SelfLink):
        store.add_link("A", "A", 1)

    assert _state(store) == before


def test_all_store_errors_are_topology_errors():
    store = _triangle()
    with pytest.raises(TopologyError):
        store.modify_link("A", "C", 1)


def test_modify_link_updates_both_directions():
    store = _triangle()
    store.modify_link("B", "A", 2)

    assert store.outgoing("A")["B"] == 2.0
    assert store.outgoing("B")["A"] == 2.0


def test_modify_missing_link_raises():
    store = _triangle()
    with pytest.raises(LinkNotFound):
        store.modify_link("A", "C", 1)
    with pytest.raises(InvalidCost):
        store.modify_link("A", "B", -3)
    assert store.link_between("A", "B").cost == 5.0


def test_remove_link_is_noop_when_absent():
    store = _triangle()
    assert store.remove_link("A", "C") is None
    removed = store.remove_link("B", "A")

    assert removed == Link("A", "B", 5.0)
    assert not store.has_link("A", "B")
    assert store.outgoing("A") == {}


def test_remove_node_drops_exactly_incident_links():
    store = TopologyStore()
    for node_id in "ABCDE":
        store.add_node(node_id, "repeater")
    for a, b in [("A", "B"), ("A", "C"), ("B", "C"), ("C", "D"), ("D", "E")]:
        store.add_link(a, b, 1)

    before = set(store.links())
    degree = store.degree("C")
    store.remove_node("C")
    after = set(store.links())

    assert len(before) - len(after) == degree == 3
    assert after == {l for l in before if not l.touches("C")}
    assert "C" not in store.outgoing("B")


def test_directions_agree_after_random_mutations():
    rng = random.Random(7)
    store = TopologyStore()
    ids = [f"N{i}" for i in range(6)]
    for node_id in ids:
        store.add_node(node_id, "repeater")

    for _ in range(200):
        a, b = rng.sample(ids, 2)
        op = rng.choice(["add", "modify", "remove"])
        try:
            if op == "add":
                store.add_link(a, b, rng.randint(0, 20))
            elif op == "modify":
                store.modify_link(a, b, rng.randint(0, 20))
            else:
                store.remove_link(a, b)
        except TopologyError:
            pass

        for x, y in itertools.permutations(ids, 2):
            assert store.outgoing(x).get(y) == store.outgoing(y).get(x)


def test_shortest_path_cost_to_self_is_zero():
    store = _triangle()
    for node_id in ("A", "B", "C"):
        assert store.shortest_path_cost(node_id, node_id) == 0.0


def test_shortest_path_cost_symmetric():
    store = _triangle()
    store.add_node("D", "repeater")
    store.add_link("C", "D", 1.5)
    store.add_link("A", "D", 20)

    ids = ["A", "B", "C", "D"]
    for a, b in itertools.combinations(ids, 2):
        assert store.shortest_path_cost(a, b) == store.shortest_path_cost(b, a)
    assert store.shortest_path_cost("A", "D") == 11.5


def test_shortest_path_cost_unreachable_or_unknown():
    store = _triangle()
    store.add_node("Z", "endpoint")

    assert store.shortest_path_cost("A", "Z") is None
    assert store.shortest_path_cost("A", "missing") is None
    assert store.shortest_path_cost("missing", "missing") is None


def test_shortest_path_route():
    store = _triangle()
    assert store.shortest_path("A", "C") == ["A", "B", "C"]
    store.add_node("Z", "endpoint")
    assert store.shortest_path("A", "Z") is None


def test_listeners_receive_events_in_order():
    store = TopologyStore()
    seen = []
    store.subscribe(seen.append)

    store.add_node("A", "endpoint")
    store.add_node("B", "endpoint")
    store.add_link("A", "B", 3)
    store.modify_link("A", "B", 1)
    store.remove_link("A", "B")
    store.add_link("A", "B", 2)
    store.remove_node("B")
    store.clear()

    assert [type(e) for e in seen] == [
        NodeAdded,
        NodeAdded,
        LinkAdded,
        LinkModified,
        LinkRemoved,
        LinkAdded,
        NodeRemoved,
        TopologyReplaced,
    ]
    assert seen[3].previous_cost == 3.0 and seen[3].link.cost == 1.0
    assert seen[6].removed_links == (Link("A", "B", 2.0),)
    assert seen[7] == TopologyReplaced(0, 0)


def test_failed_mutation_publishes_nothing():
    store = _triangle()
    seen = []
    store.subscribe(seen.append)

    with pytest.raises(DuplicateLink):
        store.add_link("A", "B", 1)
    store.remove_link("A", "C")

    assert seen == []


def test_unsubscribe_stops_delivery():
    store = TopologyStore()
    seen = []
    unsubscribe = store.subscribe(seen.append)
    store.add_node("A", "endpoint")
    unsubscribe()
    store.add_node("B", "endpoint")

    assert len(seen) == 1


def test_set_position_round_trips():
    store = _triangle()
    store.set_position("A", (10.0, 20.0))
    assert store.get_node("A").position == (10.0, 20.0)
    with pytest.raises(NodeNotFound):
        store.set_position("Z", None)


def test_failing_listener_does_not_undo_or_block_delivery():
    store = TopologyStore()
    seen = []

    def broken(event):
        raise RuntimeError("renderer went away")

    store.subscribe(broken)
    store.subscribe(seen.append)

    node = store.add_node("A", "endpoint")

    assert "A" in store
    assert seen == [NodeAdded(node)]
