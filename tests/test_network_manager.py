"""
NetworkManager: validated link changes, import/export, highlight planning.
"""

import json
import threading

import pytest

from errors import (
    DuplicateLink,
    InvalidCost,
    LinkNotFound,
    SnapshotError,
    TriangleInequalityViolation,
    UnknownNode,
)
from events import TopologyReplaced
from network_manager import NetworkManager
from outcomes import SegmentKind
from schedule_compiler import HighlightAction


def _manager():
    m = NetworkManager()
    m.add_node("A", "endpoint")
    m.add_node("B", "repeater")
    m.add_node("C", "endpoint")
    m.add_link("A", "B", 5)
    m.add_link("B", "C", 5)
    return m


def test_add_link_within_triangle_inequality():
    m = _manager()
    link = m.add_link("A", "C", 3)

    assert link.cost == 3.0
    assert m.store.shortest_path_cost("A", "C") == 3.0


def test_add_link_above_shortest_route_rejected():
    m = _manager()
    with pytest.raises(TriangleInequalityViolation) as excinfo:
        m.add_link("A", "C", 11)

    assert excinfo.value.shortest == 10.0
    assert not m.store.has_link("A", "C")


def test_modify_link_is_validated():
    m = _manager()
    m.add_link("A", "C", 8)

    # The link itself is the current shortest route, so raising it is rejected.
    with pytest.raises(TriangleInequalityViolation):
        m.modify_link("A", "C", 12)
    assert m.store.link_between("A", "C").cost == 8.0

    m.modify_link("A", "C", 1)
    assert m.store.link_between("C", "A").cost == 1.0


def test_structural_errors_come_before_validation():
    m = _manager()
    with pytest.raises(DuplicateLink):
        m.add_link("A", "B", 100)
    with pytest.raises(LinkNotFound):
        m.modify_link("A", "C", 1)
    with pytest.raises(UnknownNode):
        m.add_link("A", "Z", 1)


def test_remove_node_and_link():
    m = _manager()
    m.remove_link("A", "B")
    m.remove_node("C")

    assert m.store.links() == []
    assert m.store.nodes() == ["A", "B"]


def test_export_import_replaces_topology():
    m = _manager()
    exported = m.export_network()

    other = NetworkManager()
    other.add_node("stale", "endpoint")
    seen = []
    other.store.subscribe(seen.append)
    other.import_network(exported)

    assert other.store.nodes() == ["A", "B", "C"]
    assert other.store.shortest_path_cost("A", "C") == 10.0
    assert seen == [TopologyReplaced(3, 2)]


def test_rejected_import_keeps_current_topology():
    m = _manager()
    with pytest.raises(SnapshotError):
        m.import_network('{"nodes": [{"id": "X"}], "edges": []}')
    with pytest.raises(SnapshotError):
        m.import_network("not json")

    assert m.store.nodes() == ["A", "B", "C"]


def test_clear_network():
    m = _manager()
    m.clear_network()

    assert len(m.store) == 0
    assert json.loads(m.export_network()) == {"nodes": [], "edges": []}


def test_validator_follows_the_live_store_after_import():
    m = NetworkManager()
    m.import_network(_manager().export_network())
    with pytest.raises(TriangleInequalityViolation):
        m.add_link("A", "C", 11)


def test_plan_highlight_end_to_end():
    m = _manager()
    plan = m.plan_highlight(
        {
            "path": ["A", "B", "C"],
            "operations": [
                {"type": "link_generation", "nodes": ["A", "B"], "status": "success"},
                {"type": "link_generation", "nodes": ["B", "C"], "status": "success"},
                {"type": "swap", "inputs": [["A", "B"], ["C", "B"]], "status": "failed"},
            ],
        }
    )

    assert plan.path == ("A", "B", "C")
    assert plan.path_cost == 10.0
    assert plan.count(SegmentKind.SUCCESS) == 2
    assert plan.count(SegmentKind.FAILED_SWAP) == 2
    sets = [(i.endpoints, i.start_offset_ms) for i in plan.instructions if i.action is HighlightAction.SET]
    # 0, 700, then the failed-swap run after 1400 + 1000 settle
    assert sets == [(("A", "B"), 0), (("B", "C"), 700), (("A", "B"), 2400), (("B", "C"), 2400)]
    assert plan.duration_ms == 2400 + 1000 + 2500


def test_plan_highlight_on_unknown_path_is_best_effort():
    m = _manager()
    plan = m.plan_highlight(
        {
            "path": ["A", "Q"],
            "operations": [{"type": "link_generation", "nodes": ["A", "Q"], "status": "failed"}],
        }
    )

    assert plan.path_cost is None
    assert plan.count(SegmentKind.FAILED_GENERATION) == 1
    assert plan.instructions == ()
    assert plan.duration_ms == 0


@pytest.mark.parametrize("cost", [float("nan"), "cheap", -1])
def test_bad_cost_is_invalid_cost_whether_or_not_a_route_exists(cost):
    m = _manager()
    m.add_node("Z", "endpoint")

    # A-C has a route via B; A-Z has none.
    with pytest.raises(InvalidCost):
        m.add_link("A", "C", cost)
    with pytest.raises(InvalidCost):
        m.add_link("A", "Z", cost)
    with pytest.raises(InvalidCost):
        m.modify_link("A", "B", cost)


def test_validated_add_waits_for_the_store_lock():
    m = _manager()
    errors = []

    def add():
        try:
            m.add_link("A", "C", 3)
        except Exception as exc:  # surfaced through the assertion below
            errors.append(exc)

    with m.store.lock:
        worker = threading.Thread(target=add)
        worker.start()
        worker.join(timeout=0.2)
        assert worker.is_alive()
        assert not m.store.has_link("A", "C")

    worker.join(timeout=5)
    assert not worker.is_alive()
    assert errors == []
    assert m.store.link_between("A", "C").cost == 3.0
