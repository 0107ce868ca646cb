from collections import Counter
from typing import Mapping

from tabulate import tabulate

from statusgate.models import RegistrySnapshot, StateVector, Unknown
from statusgate.registry import NodeRegistry

from .readiness import ReadinessEvaluator


UNKNOWN_LABEL = "unknown"


def status_counts(states: Mapping[str, StateVector]) -> dict[str, dict[str, int]]:
    """Occurrences of every rendered state, per node."""
    return {
        address: dict(
            Counter(
                UNKNOWN_LABEL if isinstance(state, Unknown) else state.render()
                for state in vector
            )
        )
        for address, vector in states.items()
    }


class StatusSummary:
    """
    Renders the aggregated matrix as a table, one row per known address:

        ip/host | ready | dc | id | 0 | 1 | ... | n-1

    The table is part of the snapshot so that a hostname being resolved,
    or the rows being reordered, registers as a change even when no state
    value moved.
    """

    def __init__(
        self,
        registry: NodeRegistry,
        evaluator: ReadinessEvaluator,
        table_format: str = "simple",
    ) -> None:
        self._registry = registry
        self._evaluator = evaluator
        self._table_format = table_format

    def render(self, snapshot: RegistrySnapshot) -> str:
        known_addresses = snapshot.known_addresses
        headers = ["ip/host", "ready", "dc", "id", *range(len(known_addresses))]

        rows = []
        for index, address in enumerate(known_addresses):
            node = self._registry.get(address)
            rows.append(
                [
                    node.display_name if node else address,
                    self._evaluator.is_ready(address, snapshot=snapshot),
                    node.region if node else None,
                    index,
                    *(
                        state.render()
                        for state in snapshot.states.get(address, ())
                    ),
                ]
            )

        return tabulate(
            rows,
            headers=headers,
            tablefmt=self._table_format,
            missingval="",
        )

    def build_snapshot(
        self,
        states: Mapping[str, StateVector],
        known_addresses: tuple[str, ...],
    ) -> RegistrySnapshot:
        snapshot = RegistrySnapshot(
            states=states,
            known_addresses=known_addresses,
        )

        return RegistrySnapshot(
            states=snapshot.states,
            known_addresses=known_addresses,
            table=self.render(snapshot),
        )
