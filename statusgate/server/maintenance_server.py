from aiohttp import web

from statusgate.errors import OrchestratorCallError, TargetNotFoundError
from statusgate.logging import Logger
from statusgate.logging.statusgate_logging_models import ServerInfo
from statusgate.maintenance import MaintenanceService


class MaintenanceServer:
    """
    Maintenance API, served on its own port:

        GET            /config
        GET|PUT|DELETE /pods/{pod}
        GET|PUT|DELETE /dcs/{region}
    """

    def __init__(
        self,
        service: MaintenanceService,
        logger: Logger | None = None,
    ) -> None:
        self._service = service
        self._logger = logger or Logger()
        self._runner: web.AppRunner | None = None

    def create_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/config", self.handle_config)
        app.router.add_get("/pods/{pod}", self.handle_get_pod)
        app.router.add_put("/pods/{pod}", self.handle_enable_pod)
        app.router.add_delete("/pods/{pod}", self.handle_disable_pod)
        app.router.add_get("/dcs/{region}", self.handle_get_region)
        app.router.add_put("/dcs/{region}", self.handle_enable_region)
        app.router.add_delete("/dcs/{region}", self.handle_disable_region)
        return app

    async def start(self, host: str, port: int):
        self._runner = web.AppRunner(self.create_app())
        await self._runner.setup()

        site = web.TCPSite(self._runner, host, port)
        await site.start()

        await self._logger.log(
            ServerInfo(
                message="Maintenance monitor listening",
                host=host,
                port=port,
            )
        )

    async def stop(self):
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None

    async def handle_config(self, request: web.Request) -> web.Response:
        try:
            return web.json_response(await self._service.get_config())

        except OrchestratorCallError as err:
            return web.Response(
                text=f"{err}: error getting ConfigMap",
                status=500,
            )

    async def handle_get_pod(self, request: web.Request) -> web.Response:
        pod = request.match_info["pod"]

        try:
            in_maintenance = await self._service.pod_in_maintenance(pod)

        except TargetNotFoundError as err:
            return web.Response(text=str(err), status=404)

        return web.json_response({"inMaintenance": in_maintenance})

    async def _set_pod(self, request: web.Request, enabled: bool) -> web.Response:
        pod = request.match_info["pod"]

        try:
            return web.json_response(await self._service.set_pod(pod, enabled))

        except TargetNotFoundError as err:
            return web.Response(text=str(err), status=404)

        except OrchestratorCallError as err:
            return web.Response(
                text=f"Failed to update maintenance mode for pod {pod}: {err}",
                status=503,
            )

    async def handle_enable_pod(self, request: web.Request) -> web.Response:
        return await self._set_pod(request, True)

    async def handle_disable_pod(self, request: web.Request) -> web.Response:
        return await self._set_pod(request, False)

    async def handle_get_region(self, request: web.Request) -> web.Response:
        region = request.match_info["region"]

        try:
            in_maintenance = await self._service.region_in_maintenance(region)

        except TargetNotFoundError as err:
            return web.Response(text=str(err), status=404)

        except OrchestratorCallError as err:
            return web.Response(
                text=f"Failed to get maintenance mode for region {region}: {err}",
                status=503,
            )

        return web.json_response({region: in_maintenance})

    async def _set_region(self, request: web.Request, enabled: bool) -> web.Response:
        region = request.match_info["region"]

        try:
            return web.json_response(await self._service.set_region(region, enabled))

        except TargetNotFoundError as err:
            return web.Response(text=str(err), status=404)

        except OrchestratorCallError as err:
            return web.Response(
                text=f"Failed to update maintenance mode for region {region}: {err}",
                status=503,
            )

    async def handle_enable_region(self, request: web.Request) -> web.Response:
        return await self._set_region(request, True)

    async def handle_disable_region(self, request: web.Request) -> web.Response:
        return await self._set_region(request, False)
