from typing import Any

import msgspec


class ReadTarget(msgspec.Struct, omit_defaults=True, kw_only=True):
    url: str
    user: str | None = None
    password: str | None = None


class ReadRequest(msgspec.Struct, kw_only=True):
    """A single read of one management attribute on one node."""

    type: str = "read"
    mbean: str
    attribute: str
    target: ReadTarget


class ReadResult(msgspec.Struct, kw_only=True):
    """
    The proxy's answer to one ReadRequest.

    A non-200 ``status`` is an ordinary result, not an error: it only
    means that this one node could not be read.
    """

    status: int
    value: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == 200
