"""
Cross-Region Cascade - gates a region's bootstrap on its predecessors.

Regions are configured in bootstrap order. A region may start only once
every region configured before it reports ready. The fan-out is never
fail-fast: every region is queried concurrently and every outcome is
collected, so a caller always sees the full picture of which regions are
still being waited on. An unreachable region is reported as not ready;
it never raises to the caller.

Two addressing modes exist:
- local: every region is served by this cluster and reached through the
  prober's own loopback endpoint, ``/readydc/{region}``;
- ingress: each region has its own prober, reached through
  ``{subdomain}.{domain}/readydc/``, and this prober gates only its own
  region.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any

import aiohttp
import orjson
from aiohttp import ClientSession, ClientTimeout

from statusgate.env import Env, TimeParser
from statusgate.logging import Logger
from statusgate.logging.statusgate_logging_models import (
    CascadeDebug,
    CascadeInfo,
    CascadeWarning,
)


@dataclass(frozen=True, slots=True)
class RegionTarget:
    name: str
    url: str


@dataclass(frozen=True, slots=True)
class RegionResult:
    region: str
    url: str
    ready: bool
    body: Any = None


@dataclass(slots=True)
class CascadeResult:
    cutoff: str | None = None
    results: list[RegionResult] = field(default_factory=list)

    @property
    def ready(self) -> bool:
        return all(result.ready for result in self.results)

    @property
    def waiting_on(self) -> list[str]:
        return [result.region for result in self.results if not result.ready]

    def to_dict(self) -> dict[str, Any]:
        return {
            "ready": self.ready,
            "cutoff": self.cutoff,
            "regions": {result.region: result.body for result in self.results},
        }


class CrossRegionCascade:
    def __init__(
        self,
        targets: list[RegionTarget],
        request_timeout: float = 2.0,
        fixed_cutoff: str | None = None,
        session: ClientSession | None = None,
        logger: Logger | None = None,
    ) -> None:
        self._targets = targets
        self._request_timeout = request_timeout
        self._fixed_cutoff = fixed_cutoff
        self._session = session
        self._owns_session = session is None
        self._logger = logger or Logger()

    @classmethod
    def from_env(
        cls,
        env: Env,
        session: ClientSession | None = None,
        logger: Logger | None = None,
    ):
        request_timeout = TimeParser(env.PROBER_PEER_REQUEST_TIMEOUT).time
        ingress_domains = env.get_all_regions_ingress_domains()

        if ingress_domains:
            targets = [
                RegionTarget(
                    name=domain,
                    url=f"http://{env.PROBER_SUBDOMAIN}.{domain}/readydc/",
                )
                for domain in ingress_domains
            ]

            return cls(
                targets,
                request_timeout=request_timeout,
                fixed_cutoff=env.LOCAL_REGION_INGRESS_DOMAIN,
                session=session,
                logger=logger,
            )

        targets = [
            RegionTarget(
                name=region,
                url=f"http://localhost:{env.SERVER_PORT}/readydc/{region}",
            )
            for region in env.get_local_regions()
        ]

        return cls(
            targets,
            request_timeout=request_timeout,
            session=session,
            logger=logger,
        )

    @property
    def targets(self) -> list[RegionTarget]:
        return self._targets

    @property
    def fixed_cutoff(self) -> str | None:
        return self._fixed_cutoff

    def predecessors(self, cutoff: str | None) -> list[RegionTarget]:
        """
        Targets configured before ``cutoff``, in order. An unknown or absent
        cutoff yields every target.
        """
        preceding: list[RegionTarget] = []

        for target in self._targets:
            if target.name == cutoff:
                break

            preceding.append(target)

        return preceding

    async def ready_all_regions(self) -> CascadeResult:
        return await self._fan_out(None, self._targets)

    async def start_region_init(self, region: str) -> CascadeResult:
        cutoff = self._fixed_cutoff if self._fixed_cutoff is not None else region
        return await self._fan_out(cutoff, self.predecessors(cutoff))

    async def _fan_out(
        self,
        cutoff: str | None,
        targets: list[RegionTarget],
    ) -> CascadeResult:
        outcomes = await asyncio.gather(
            *[self._query(target) for target in targets],
            return_exceptions=True,
        )

        results: list[RegionResult] = []
        for target, outcome in zip(targets, outcomes):
            if isinstance(outcome, BaseException):
                outcome = RegionResult(
                    region=target.name,
                    url=target.url,
                    ready=False,
                    body={"url": target.url, "message": str(outcome)},
                )

            results.append(outcome)

        result = CascadeResult(cutoff=cutoff, results=results)
        regions = [target.name for target in targets]

        await self._logger.log(
            CascadeDebug(
                message=orjson.dumps(result.to_dict()["regions"]).decode(),
                cutoff=cutoff,
                regions=regions,
            )
        )

        if not result.ready:
            await self._logger.log(
                CascadeWarning(
                    message=f"Waiting on unready regions: {','.join(result.waiting_on)}",
                    cutoff=cutoff,
                    regions=regions,
                )
            )

        elif cutoff is not None:
            await self._logger.log(
                CascadeInfo(
                    message=f"OK to start: {cutoff}",
                    cutoff=cutoff,
                    regions=regions,
                )
            )

        else:
            await self._logger.log(
                CascadeInfo(
                    message="Ready all regions",
                    cutoff=cutoff,
                    regions=regions,
                )
            )

        return result

    async def _get_session(self) -> ClientSession:
        if self._session is None or self._session.closed:
            self._session = ClientSession()
            self._owns_session = True

        return self._session

    async def _query(self, target: RegionTarget) -> RegionResult:
        session = await self._get_session()

        try:
            async with session.get(
                target.url,
                timeout=ClientTimeout(total=self._request_timeout),
            ) as response:
                raw = await response.read()
                status = response.status

        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            return RegionResult(
                region=target.name,
                url=target.url,
                ready=False,
                body={"url": target.url, "message": str(err) or type(err).__name__},
            )

        try:
            body: Any = orjson.loads(raw)

        except orjson.JSONDecodeError:
            body = raw.decode(errors="replace")

        ready = 200 <= status < 300
        if not ready and not isinstance(body, dict):
            body = {
                "url": target.url,
                "message": f"Request failed with status code {status}",
            }

        return RegionResult(
            region=target.name,
            url=target.url,
            ready=ready,
            body=body,
        )

    async def close(self):
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
