import msgspec


class Node(msgspec.Struct, frozen=True, kw_only=True):
    """
    Attributes of one database node, keyed by its address in the registry.

    ``address`` uses the failure detector's peer-key form (``/10.0.0.1``).
    ``hostname`` and ``region`` are resolved lazily and cached once known.
    """

    address: str
    ip: str | None = None
    broadcast_ip: str | None = None
    hostname: str | None = None
    region: str | None = None

    @property
    def sort_key(self) -> str:
        return self.hostname or self.region or self.address

    @property
    def display_name(self) -> str:
        return self.hostname or self.address
