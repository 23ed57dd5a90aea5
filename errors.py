"""
Error kinds raised by the topology and its importers.

All topology errors are recoverable: the store is unchanged when one is raised.
"""


class TopologyError(ValueError):
    """Base class for rejected topology operations."""


class DuplicateNode(TopologyError):
    def __init__(self, node_id: str) -> None:
        super().__init__(f"Node '{node_id}' already exists.")
        self.node_id = node_id


class NodeNotFound(TopologyError):
    def __init__(self, node_id: str) -> None:
        super().__init__(f"Node '{node_id}' not found.")
        self.node_id = node_id


class UnknownNode(TopologyError):
    """A link references a node that is not in the topology."""

    def __init__(self, node_id: str) -> None:
        super().__init__(f"Link endpoint '{node_id}' is not a known node.")
        self.node_id = node_id


class DuplicateLink(TopologyError):
    def __init__(self, a: str, b: str) -> None:
        super().__init__(f"Link between '{a}' and '{b}' already exists.")
        self.endpoints = (a, b)


class LinkNotFound(TopologyError):
    def __init__(self, a: str, b: str) -> None:
        super().__init__(f"No link between '{a}' and '{b}'.")
        self.endpoints = (a, b)


class InvalidCost(TopologyError):
    def __init__(self, cost: object) -> None:
        super().__init__(f"Link cost must be a non-negative number, got {cost!r}.")
        self.cost = cost


class TriangleInequalityViolation(TopologyError):
    """
    A proposed direct link is priced above the cheapest existing route.
    """

    def __init__(self, a: str, b: str, cost: float, shortest: float) -> None:
        super().__init__(
            f"Cost {cost} for '{a}'-'{b}' exceeds the shortest existing path cost {shortest}; "
            "the link does not satisfy the triangle inequality."
        )
        self.endpoints = (a, b)
        self.cost = cost
        self.shortest = shortest


class SnapshotError(ValueError):
    """A topology snapshot document could not be imported."""


class ConfigError(ValueError):
    """A configuration value is missing or out of range."""


class SelfLink(TopologyError):
    def __init__(self, node_id: str) -> None:
        super().__init__(f"A link cannot join node '{node_id}' to itself.")
        self.node_id = node_id
