"""
Seed discovery - host IPs new nodes use to join the cluster.

Local seeds are the host IPs of the configured seed pods of this cluster.
Remote seeds come from the ``/seedslocal`` endpoint of every external
region's prober. An unreachable region or a pod without a host IP is
skipped; whatever could be collected is returned.
"""

import asyncio
from typing import Any

import aiohttp
import orjson
from aiohttp import ClientSession, ClientTimeout

from .kubernetes_gateway import KubernetesGateway


class SeedDiscovery:
    def __init__(
        self,
        gateway: KubernetesGateway,
        seed_hostnames: list[str],
        external_domains: list[str],
        subdomain: str,
        request_timeout: float = 2.0,
        session: ClientSession | None = None,
    ) -> None:
        self._gateway = gateway
        self._seed_hostnames = seed_hostnames
        self._external_domains = external_domains
        self._subdomain = subdomain
        self._request_timeout = request_timeout
        self._session = session
        self._owns_session = session is None

    def external_urls(self) -> list[str]:
        return [
            f"https://{self._subdomain}.{domain}/seedslocal"
            for domain in self._external_domains
        ]

    async def local_seeds(self) -> list[str]:
        host_ips = await self._gateway.get_pod_host_ips(self._seed_hostnames)
        return [host_ip for host_ip in host_ips if host_ip]

    async def all_seeds(self) -> list[str]:
        outcomes = await asyncio.gather(
            self.local_seeds(),
            *[self._fetch_remote(url) for url in self.external_urls()],
            return_exceptions=True,
        )

        seeds: list[str] = []
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                continue

            seeds.extend(outcome)

        return seeds

    async def _get_session(self) -> ClientSession:
        if self._session is None or self._session.closed:
            self._session = ClientSession()
            self._owns_session = True

        return self._session

    async def _fetch_remote(self, url: str) -> list[str]:
        session = await self._get_session()

        try:
            async with session.get(
                url,
                timeout=ClientTimeout(total=self._request_timeout),
            ) as response:
                response.raise_for_status()
                raw = await response.read()

        except (aiohttp.ClientError, asyncio.TimeoutError):
            return []

        try:
            body: Any = orjson.loads(raw)

        except orjson.JSONDecodeError:
            # Plain-text body: comma-joined host IPs.
            body = raw.decode(errors="replace").strip()

        if isinstance(body, list):
            return [str(seed) for seed in body if seed]

        if isinstance(body, str) and body:
            return [seed.strip() for seed in body.split(",") if seed.strip()]

        return []

    async def close(self):
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
