"""
Node Registry - in-memory store of every known database node.

Holds two collections, each replaced wholesale on every write so a reader
never observes a half-written value:

- nodes: address -> Node attributes (ip, broadcast ip, hostname, region)
- snapshot: the aggregated state matrix of the last committed poll cycle

Nodes enter the registry either when they call the readiness endpoint
themselves, or when they first appear inside a peer's failure-detector
view. Nothing is persisted; the registry is rebuilt from live queries.
"""

from types import MappingProxyType
from typing import Iterable, Mapping

import msgspec

from statusgate.logging import Logger
from statusgate.logging.statusgate_logging_models import (
    RegistryInfo,
    RegistryWarning,
)
from statusgate.models import Node, RegistrySnapshot

from .reverse_resolver import ReverseLookupError, ReverseResolver


class NodeRegistry:
    def __init__(
        self,
        resolver: ReverseResolver | None = None,
        logger: Logger | None = None,
    ) -> None:
        self._resolver = resolver or ReverseResolver()
        self._logger = logger or Logger()
        self._nodes: Mapping[str, Node] = MappingProxyType({})
        self._snapshot = RegistrySnapshot()

    @staticmethod
    def to_address(raw_address: str, broadcast_address: str | None = None) -> str:
        """Peer-key form used by the failure detector, e.g. ``/10.0.0.1``."""
        return "/" + (broadcast_address or raw_address)

    @property
    def nodes(self) -> Mapping[str, Node]:
        return self._nodes

    @property
    def snapshot(self) -> RegistrySnapshot:
        return self._snapshot

    def addresses(self) -> list[str]:
        return list(self._nodes.keys())

    def get(self, address: str) -> Node | None:
        return self._nodes.get(address)

    def region_of(self, address: str) -> str | None:
        node = self._nodes.get(address)
        return node.region if node else None

    def _replace_nodes(self, updates: dict[str, Node | None]) -> None:
        nodes = dict(self._nodes)

        for address, node in updates.items():
            if node is None:
                nodes.pop(address, None)
            else:
                nodes[address] = node

        self._nodes = MappingProxyType(nodes)

    # =========================================================================
    # Registration
    # =========================================================================

    async def register(
        self,
        raw_address: str,
        broadcast_address: str | None = None,
    ) -> str:
        """
        Idempotently upsert a node that called the readiness endpoint.

        The hostname is resolved by reverse lookup of the raw address the
        first time the node is seen and cached after that, so registering
        the same inputs again never triggers another lookup.

        Args:
            raw_address: The caller's observed IP address.
            broadcast_address: The address the node advertises to its
                peers, when it differs from the raw address.

        Returns:
            The node's registry address.
        """
        address = self.to_address(raw_address, broadcast_address)
        node = self._nodes.get(address)

        if node is None:
            node = Node(
                address=address,
                ip=raw_address,
                broadcast_ip=broadcast_address,
            )
            self._replace_nodes({address: node})

            await self._logger.log(
                RegistryInfo(
                    message="Found a new node from readiness probe",
                    address=address,
                )
            )

        elif node.ip != raw_address or node.broadcast_ip != broadcast_address:
            node = msgspec.structs.replace(
                node,
                ip=raw_address,
                broadcast_ip=broadcast_address,
            )
            self._replace_nodes({address: node})

        if node.hostname is None:
            await self._resolve_hostname(address, raw_address)

        return address

    async def _resolve_hostname(self, address: str, raw_address: str):
        try:
            fqdn = await self._resolver.reverse(raw_address)

        except ReverseLookupError as err:
            await self._logger.log(
                RegistryWarning(
                    message=str(err),
                    address=address,
                )
            )
            return

        hostname = fqdn.split(".", 1)[0]

        # The node may have been evicted while the lookup was in flight.
        if node := self._nodes.get(address):
            self._replace_nodes(
                {address: msgspec.structs.replace(node, hostname=hostname)}
            )

    def add_discovered(self, addresses: Iterable[str]) -> list[str]:
        """Add nodes first seen inside a peer's view. Returns the new ones."""
        discovered = {
            address: Node(address=address)
            for address in addresses
            if address not in self._nodes
        }

        if discovered:
            self._replace_nodes(discovered)

        return list(discovered)

    async def discover(self, addresses: Iterable[str]) -> list[str]:
        discovered = self.add_discovered(addresses)

        for address in discovered:
            await self._logger.log(
                RegistryInfo(
                    message="Found a new node from a peer's state view",
                    address=address,
                )
            )

        return discovered

    def set_region(self, address: str, region: str) -> None:
        node = self._nodes.get(address) or Node(address=address)
        self._replace_nodes({address: msgspec.structs.replace(node, region=region)})

    # =========================================================================
    # Poll cycle writes
    # =========================================================================

    def commit(self, snapshot: RegistrySnapshot) -> None:
        """
        Replace the state matrix with a freshly built one.

        Every address that appears in the new matrix is a registered node
        and will be polled on the next cycle.
        """
        self.add_discovered(snapshot.states.keys())
        self._snapshot = snapshot

    def evict(self, address: str) -> None:
        self._replace_nodes({address: None})

        if address in self._snapshot.states:
            states = dict(self._snapshot.states)
            states.pop(address)

            self._snapshot = RegistrySnapshot(
                states=states,
                known_addresses=self._snapshot.known_addresses,
                table=self._snapshot.table,
            )
