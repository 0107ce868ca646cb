"""
Async reverse DNS resolver with caching.

Resolves node IP addresses to hostnames. Successful lookups are cached for
the life of the process; concurrent lookups of the same address share one
in-flight resolution.
"""

import asyncio
import socket
from dataclasses import dataclass, field


class ReverseLookupError(Exception):
    """Raised when a reverse lookup fails."""

    def __init__(self, ip: str, message: str):
        self.ip = ip
        super().__init__(f"Reverse lookup failed for '{ip}': {message}")


@dataclass
class ReverseResolver:
    """
    Usage:
        resolver = ReverseResolver()
        hostname = await resolver.reverse("10.0.0.12")
    """

    resolution_timeout_seconds: float = 5.0
    """Timeout for an individual lookup."""

    _cache: dict[str, str] = field(default_factory=dict)
    """IP address to fully qualified hostname."""

    _pending: dict[str, asyncio.Future[str]] = field(default_factory=dict, repr=False)
    """In-flight lookups, for deduplication."""

    lookups: int = 0
    """Number of lookups actually sent to the resolver."""

    async def reverse(self, ip: str) -> str:
        """
        Resolve an IP address to its hostname.

        Raises:
            ReverseLookupError: If the address has no name or the lookup timed out.
        """
        if cached := self._cache.get(ip):
            return cached

        if pending := self._pending.get(ip):
            return await asyncio.shield(pending)

        loop = asyncio.get_running_loop()
        future: asyncio.Future[str] = loop.create_future()
        self._pending[ip] = future

        try:
            hostname = await self._do_reverse(ip)
            self._cache[ip] = hostname
            future.set_result(hostname)
            return hostname

        except ReverseLookupError as err:
            future.set_exception(err)
            # Mark retrieved so an unawaited future does not warn.
            future.exception()
            raise

        finally:
            self._pending.pop(ip, None)

    async def _do_reverse(self, ip: str) -> str:
        self.lookups += 1

        try:
            hostname, _ = await asyncio.wait_for(
                asyncio.get_running_loop().getnameinfo(
                    (ip, 0),
                    socket.NI_NAMEREQD,
                ),
                timeout=self.resolution_timeout_seconds,
            )

        except asyncio.TimeoutError:
            raise ReverseLookupError(
                ip, f"Resolution timeout ({self.resolution_timeout_seconds}s)"
            )

        except OSError as exc:
            raise ReverseLookupError(ip, f"getnameinfo failed: {exc}")

        return hostname

    def clear(self, ip: str | None = None) -> None:
        if ip is None:
            self._cache.clear()
        else:
            self._cache.pop(ip, None)
