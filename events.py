"""
Topology change events and listener registration.

Listeners are called synchronously, in registration order, after the
mutation they describe has completed. Events are delivered FIFO per store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Tuple
import logging

from links import Link
from nodes import Node

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TopologyEvent:
    """Base class for topology change notifications."""


@dataclass(frozen=True)
class NodeAdded(TopologyEvent):
    node: Node


@dataclass(frozen=True)
class NodeRemoved(TopologyEvent):
    node: Node
    removed_links: Tuple[Link, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class LinkAdded(TopologyEvent):
    link: Link


@dataclass(frozen=True)
class LinkModified(TopologyEvent):
    link: Link
    previous_cost: float


@dataclass(frozen=True)
class LinkRemoved(TopologyEvent):
    link: Link


@dataclass(frozen=True)
class TopologyReplaced(TopologyEvent):
    """The whole node and link set was swapped (import or clear)."""

    node_count: int
    link_count: int


Listener = Callable[[TopologyEvent], None]


class ListenerRegistry:
    """
    Ordered set of listeners for one event source.
    """

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register listener; returns a callable that unregisters it.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: TopologyEvent) -> None:
        # Snapshot so listeners may unsubscribe during delivery.
        for listener in list(self._listeners):
            logger.debug("delivering %s to %r", type(event).__name__, listener)
            try:
                listener(event)
            except Exception:
                # The mutation is already committed; one listener must not
                # hide it from the caller or from later listeners.
                logger.exception("listener %r failed on %s", listener, type(event).__name__)
