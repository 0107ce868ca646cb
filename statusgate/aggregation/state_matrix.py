"""
State Matrix Builder - reconciles every node's partial view into one matrix.

Each database node reports the liveness of the peers its failure detector
currently tracks. The views disagree: a joining node knows fewer peers, an
unreachable node reports nothing at all. One cycle:

1. Query the failure-detector state of every registered address, in one batch.
2. Collect every peer key found inside the successful responses.
3. Resolve the region of responding addresses that lack one (second batch).
4. Known addresses = polled + responding, sorted by hostname, else region,
   else address, ties broken by address.
5. Build one vector per known address, aligned on the known addresses:
   - polled and succeeded: the reported states, silence becomes Unknown;
   - polled and failed: Unknown except its own slot, RequestFailed(code);
   - only seen in a peer's view: all Unknown.

The matrix replaces the previous one wholesale on every cycle.
"""

from dataclasses import dataclass, field

from statusgate.errors import ProtocolTransportError
from statusgate.logging import Logger
from statusgate.logging.statusgate_logging_models import RegistryWarning
from statusgate.models import (
    NodeState,
    Observed,
    RequestFailed,
    StateVector,
    UNKNOWN,
)
from statusgate.protocol import ProtocolClient, ReadResult
from statusgate.registry import NodeRegistry


@dataclass(slots=True)
class CycleResult:
    """Outcome of one matrix build."""

    polled: tuple[str, ...] = ()
    known_addresses: tuple[str, ...] = ()
    states: dict[str, StateVector] = field(default_factory=dict)
    successes: int = 0
    transport_error: ProtocolTransportError | None = None

    @property
    def succeeded(self) -> bool:
        return self.transport_error is None and self.successes > 0


class StateMatrixBuilder:
    def __init__(
        self,
        registry: NodeRegistry,
        client: ProtocolClient,
        logger: Logger | None = None,
    ) -> None:
        self._registry = registry
        self._client = client
        self._logger = logger or Logger()

    def sort_addresses(self, addresses: set[str]) -> tuple[str, ...]:
        def sort_key(address: str):
            node = self._registry.get(address)
            return (node.sort_key if node else address, address)

        return tuple(sorted(addresses, key=sort_key))

    async def build(self) -> CycleResult:
        polled = tuple(self._registry.addresses())

        try:
            responses = await self._client.batch_query(
                [self._client.failure_detector_request(address) for address in polled]
            )

        except ProtocolTransportError as err:
            return CycleResult(polled=polled, transport_error=err)

        reported: dict[str, dict[str, str]] = {}
        responding: set[str] = set()

        for address, response in zip(polled, responses):
            if response.ok and isinstance(response.value, dict):
                reported[address] = response.value
                responding.update(response.value.keys())

        await self._registry.discover(responding)
        await self._resolve_regions(responding)

        known_addresses = self.sort_addresses(set(polled) | responding)
        states = self._build_states(polled, responses, reported, known_addresses)

        return CycleResult(
            polled=polled,
            known_addresses=known_addresses,
            states=states,
            successes=len(reported),
        )

    def _build_states(
        self,
        polled: tuple[str, ...],
        responses: list[ReadResult],
        reported: dict[str, dict[str, str]],
        known_addresses: tuple[str, ...],
    ) -> dict[str, StateVector]:
        states: dict[str, StateVector] = {
            address: (UNKNOWN,) * len(known_addresses) for address in known_addresses
        }

        for address, response in zip(polled, responses):
            if address in reported:
                peer_states = reported[address]
                states[address] = tuple(
                    self._to_state(peer_states.get(peer)) for peer in known_addresses
                )

            else:
                vector: list[NodeState] = [UNKNOWN] * len(known_addresses)
                vector[known_addresses.index(address)] = RequestFailed(
                    code=response.status if not response.ok else 500
                )
                states[address] = tuple(vector)

        # Registered while the cycle was in flight: aligned, but nothing observed.
        for address in self._registry.addresses():
            if address not in states:
                states[address] = (UNKNOWN,) * len(known_addresses)

        return states

    @staticmethod
    def _to_state(status: str | None) -> NodeState:
        if status is None:
            return UNKNOWN

        return Observed(status=str(status))

    async def _resolve_regions(self, addresses: set[str]):
        missing = sorted(
            address for address in addresses if self._registry.region_of(address) is None
        )

        if len(missing) == 0:
            return

        try:
            responses = await self._client.batch_query(
                [self._client.region_request(address) for address in missing]
            )

        except ProtocolTransportError as err:
            for address in missing:
                await self._logger.log(
                    RegistryWarning(
                        message=f"Failed request of attribute: Datacenter - {err}",
                        address=address,
                    )
                )
            return

        for address, response in zip(missing, responses):
            if response.ok and isinstance(response.value, str):
                self._registry.set_region(address, response.value)

            else:
                await self._logger.log(
                    RegistryWarning(
                        message=f"Failed request of attribute: Datacenter - {response.error}",
                        address=address,
                    )
                )
