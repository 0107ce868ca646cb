"""
Readiness Evaluator - per-node verdict from the aggregated state matrix.

A node is ready when, among the peers of its own region, every column of
its state vector is UP except for at most one. The single tolerated
column covers the node's view of itself and peers it has not yet
mutually discovered. At least one UP is always required, so a node that
has never been polled, or whose only entry is its own failed query, is
not ready.
"""

from typing import Mapping, Sequence

from statusgate.models import (
    NodeState,
    Observed,
    RegistrySnapshot,
    StateVector,
    UP,
)
from statusgate.registry import NodeRegistry


def count_up(states: Sequence[NodeState]) -> int:
    return sum(
        1 for state in states if isinstance(state, Observed) and state.status == UP
    )


def is_ready_vector(states: Sequence[NodeState]) -> bool:
    up_count = count_up(states)
    return up_count > 0 and up_count >= len(states) - 1


def scope_to_region(
    states: StateVector,
    known_addresses: Sequence[str],
    regions: Mapping[str, str | None],
    region: str | None,
) -> StateVector:
    """
    Restrict a state vector to the columns whose node shares ``region``.

    An unresolved region leaves the vector unrestricted.
    """
    if region is None:
        return states

    return tuple(
        state
        for address, state in zip(known_addresses, states)
        if regions.get(address) == region
    )


def render_states(states: Sequence[NodeState]) -> str:
    return ",".join(state.render() for state in states)


class ReadinessEvaluator:
    def __init__(self, registry: NodeRegistry) -> None:
        self._registry = registry

    def _regions(self) -> dict[str, str | None]:
        return {address: node.region for address, node in self._registry.nodes.items()}

    def scoped_states(
        self,
        address: str,
        snapshot: RegistrySnapshot | None = None,
    ) -> StateVector:
        """
        The address's state vector, restricted to its own region.

        Args:
            address: Registry address of the node.
            snapshot: Matrix to evaluate against. Defaults to the
                registry's committed snapshot.
        """
        if snapshot is None:
            snapshot = self._registry.snapshot

        states = snapshot.states.get(address, ())

        return scope_to_region(
            states,
            snapshot.known_addresses,
            self._regions(),
            self._registry.region_of(address),
        )

    def is_ready(
        self,
        address: str,
        snapshot: RegistrySnapshot | None = None,
    ) -> bool:
        return is_ready_vector(self.scoped_states(address, snapshot=snapshot))
