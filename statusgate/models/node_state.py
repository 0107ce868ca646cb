"""
What one database node believes about one peer.

A StateVector holds one NodeState per entry of the current known-address
ordering. The three variants never overlap:

- Observed: the peer's failure detector reported this liveness status.
- RequestFailed: the query for this node's own view failed with this code.
- Unknown: the node did not mention the peer. Not the same as down, the
  two nodes may simply not have discovered each other yet.
"""

from typing import Union

import msgspec


UP = "UP"


class Observed(msgspec.Struct, frozen=True, tag="observed"):
    status: str

    def render(self) -> str:
        return self.status


class RequestFailed(msgspec.Struct, frozen=True, tag="request_failed"):
    code: int

    def render(self) -> str:
        return str(self.code)


class Unknown(msgspec.Struct, frozen=True, tag="unknown"):

    def render(self) -> str:
        return ""


UNKNOWN = Unknown()

NodeState = Union[Observed, RequestFailed, Unknown]

StateVector = tuple[NodeState, ...]
