"""
Triangle-inequality check for proposed link costs.

A direct link may not be priced above the cheapest route already present
between its endpoints. Pairs with no existing route are unconstrained.
"""

import logging

from topology_store import TopologyStore

logger = logging.getLogger(__name__)


class EdgeValidator:
    """Accepts or rejects link cost proposals against the current topology."""

    def __init__(self, store: TopologyStore) -> None:
        self._store = store

    def is_proposal_valid(self, a: str, b: str, proposed_cost: float) -> bool:
        if isinstance(proposed_cost, bool) or not isinstance(proposed_cost, (int, float)):
            logger.debug("rejecting %s-%s: cost %r is not a number", a, b, proposed_cost)
            return False
        # For a modification the link being changed is part of the topology
        # queried here.
        shortest = self._store.shortest_path_cost(a, b)
        if shortest is None:
            return True
        valid = proposed_cost <= shortest
        if not valid:
            logger.debug(
                "rejecting %s-%s cost=%s: shortest existing path is %s", a, b, proposed_cost, shortest
            )
        return valid
