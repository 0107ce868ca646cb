"""
Stale Node Reaper - evicts registrations nobody can vouch for.

A node that called the readiness endpoint once and then went away keeps
being polled forever unless it is removed. After stripping Unknown
entries, a node whose only remaining signal is the failure of its own
query is evicted.

Eviction only runs after a cycle in which at least one query succeeded.
During a total outage every node collapses to a lone RequestFailed, and
reaping then would empty the registry of the very addresses needed to
recover.
"""

from typing import Sequence

from statusgate.logging import Logger
from statusgate.logging.statusgate_logging_models import RegistryWarning
from statusgate.models import NodeState, RequestFailed, Unknown
from statusgate.registry import NodeRegistry

from .state_matrix import CycleResult


class StaleNodeReaper:
    def __init__(
        self,
        registry: NodeRegistry,
        logger: Logger | None = None,
    ) -> None:
        self._registry = registry
        self._logger = logger or Logger()

    @staticmethod
    def is_stale(states: Sequence[NodeState]) -> bool:
        remaining = [state for state in states if not isinstance(state, Unknown)]
        return len(remaining) == 1 and isinstance(remaining[0], RequestFailed)

    async def reap(self, result: CycleResult) -> list[str]:
        """
        Evict every stale node of the committed matrix.

        Returns:
            The evicted addresses. Always empty after a cycle without a
            single successful query.
        """
        if result.successes == 0:
            return []

        stale = [
            address
            for address, states in self._registry.snapshot.states.items()
            if self.is_stale(states)
        ]

        for address in stale:
            self._registry.evict(address)
            await self._logger.log(
                RegistryWarning(
                    message="Removing unreferenced node",
                    address=address,
                )
            )

        return stale
