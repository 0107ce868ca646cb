"""
Probe API - the endpoints database nodes and bootstrapping regions call.

    GET /healthz[/{broadcast_ip}]   node readiness, registers the caller
    GET /readydc[/{region}]         replica readiness of one local region
    GET /readyalldcs                readiness of every configured region
    GET /startdcinit/{region}       readiness of the regions before region
    GET /seedslocal                 host IPs of this cluster's seed pods
    GET /seeds                      local and remote seed host IPs
    GET /ping
"""

from aiohttp import web

from statusgate.aggregation import ReadinessEvaluator, render_states
from statusgate.errors import OrchestratorCallError, RegionArgumentError
from statusgate.logging import Logger
from statusgate.logging.statusgate_logging_models import ServerInfo
from statusgate.orchestrator import SeedDiscovery
from statusgate.regions import CascadeResult, CrossRegionCascade, RegionReadiness
from statusgate.registry import NodeRegistry


class ProbeServer:
    def __init__(
        self,
        registry: NodeRegistry,
        evaluator: ReadinessEvaluator,
        region_readiness: RegionReadiness,
        cascade: CrossRegionCascade,
        seeds: SeedDiscovery,
        logger: Logger | None = None,
    ) -> None:
        self._registry = registry
        self._evaluator = evaluator
        self._region_readiness = region_readiness
        self._cascade = cascade
        self._seeds = seeds
        self._logger = logger or Logger()
        self._runner: web.AppRunner | None = None

    def create_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/healthz", self.handle_healthz)
        app.router.add_get("/healthz/{broadcast_ip}", self.handle_healthz)
        app.router.add_get("/readydc", self.handle_ready_region)
        app.router.add_get("/readydc/", self.handle_ready_region)
        app.router.add_get("/readydc/{region}", self.handle_ready_region)
        app.router.add_get("/readyalldcs", self.handle_ready_all_regions)
        app.router.add_get("/startdcinit/{region}", self.handle_start_region_init)
        app.router.add_get("/seedslocal", self.handle_local_seeds)
        app.router.add_get("/seeds", self.handle_seeds)
        app.router.add_get("/ping", self.handle_ping)
        return app

    async def start(self, host: str, port: int):
        self._runner = web.AppRunner(self.create_app())
        await self._runner.setup()

        site = web.TCPSite(self._runner, host, port)
        await site.start()

        await self._logger.log(
            ServerInfo(
                message="Readiness prober listening",
                host=host,
                port=port,
            )
        )

    async def stop(self):
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None

    async def handle_healthz(self, request: web.Request) -> web.Response:
        address = await self._registry.register(
            request.remote,
            request.match_info.get("broadcast_ip"),
        )

        return web.Response(
            text=render_states(self._evaluator.scoped_states(address)),
            status=200 if self._evaluator.is_ready(address) else 404,
        )

    async def handle_ready_region(self, request: web.Request) -> web.Response:
        try:
            region = self._region_readiness.resolve_region(
                request.match_info.get("region")
            )

        except RegionArgumentError as err:
            return web.Response(text=str(err), status=400)

        try:
            _, status = await self._region_readiness.check(region)

        except OrchestratorCallError:
            status = None

        if status is None:
            return web.json_response({region: None}, status=503)

        return web.json_response(
            {region: status.to_dict()},
            status=200 if status.ready else 503,
        )

    def _cascade_response(self, result: CascadeResult) -> web.Response:
        return web.json_response(
            result.to_dict(),
            status=200 if result.ready else 503,
        )

    async def handle_ready_all_regions(self, request: web.Request) -> web.Response:
        return self._cascade_response(await self._cascade.ready_all_regions())

    async def handle_start_region_init(self, request: web.Request) -> web.Response:
        return self._cascade_response(
            await self._cascade.start_region_init(request.match_info["region"])
        )

    async def handle_local_seeds(self, request: web.Request) -> web.Response:
        try:
            seeds = await self._seeds.local_seeds()

        except OrchestratorCallError as err:
            return web.Response(
                text=f"[/seedslocal] seed lookup failed: {err}",
                status=500,
            )

        return web.json_response(seeds)

    async def handle_seeds(self, request: web.Request) -> web.Response:
        return web.Response(text=",".join(await self._seeds.all_seeds()))

    async def handle_ping(self, request: web.Request) -> web.Response:
        return web.Response(text="pong")
