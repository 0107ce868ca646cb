from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from .node_state import StateVector


@dataclass(frozen=True, slots=True)
class RegistrySnapshot:
    """
    The aggregated state matrix of one poll cycle.

    Replaced wholesale by the poll loop; readers holding a reference keep
    seeing a complete, if possibly stale, matrix.
    """

    states: Mapping[str, StateVector] = field(
        default_factory=lambda: MappingProxyType({})
    )
    known_addresses: tuple[str, ...] = ()
    table: str | None = None

    def __post_init__(self):
        if not isinstance(self.states, MappingProxyType):
            object.__setattr__(self, "states", MappingProxyType(dict(self.states)))

    def same_as(self, other: "RegistrySnapshot") -> bool:
        return (
            dict(self.states) == dict(other.states)
            and self.known_addresses == other.known_addresses
            and self.table == other.table
        )
