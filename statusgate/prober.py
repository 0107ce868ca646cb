"""
Prober - wires every component together and runs the sidecar.

One process, one event loop: the credentials watcher, the poll loop, the
probe API and the maintenance API all run side by side until the process
is interrupted.
"""

import asyncio

from aiohttp import ClientSession

from statusgate.aggregation import (
    ReadinessEvaluator,
    StaleNodeReaper,
    StateMatrixBuilder,
    StatusSummary,
)
from statusgate.credentials import CredentialFileWatcher, CredentialResolver
from statusgate.env import Env, TimeParser, load_env
from statusgate.logging import Logger, LoggingConfig
from statusgate.maintenance import MaintenanceService
from statusgate.orchestrator import KubernetesGateway, SeedDiscovery, load_client_config
from statusgate.polling import PollLoop
from statusgate.protocol import ProtocolClient
from statusgate.regions import CrossRegionCascade, RegionReadiness
from statusgate.registry import NodeRegistry, ReverseResolver
from statusgate.server import MaintenanceServer, ProbeServer


class Prober:
    def __init__(
        self,
        env: Env,
        gateway: KubernetesGateway | None = None,
        host: str = "0.0.0.0",
    ) -> None:
        self._env = env
        self._host = host
        self._logger = Logger()
        self._gateway = gateway

        self.credentials = CredentialResolver()
        self.registry = NodeRegistry(
            resolver=ReverseResolver(),
            logger=self._logger,
        )
        self.evaluator = ReadinessEvaluator(self.registry)

        self._session: ClientSession | None = None
        self._client: ProtocolClient | None = None
        self._cascade: CrossRegionCascade | None = None
        self._seeds: SeedDiscovery | None = None
        self._watcher: CredentialFileWatcher | None = None
        self._poll_loop: PollLoop | None = None
        self._probe_server: ProbeServer | None = None
        self._maintenance_server: MaintenanceServer | None = None

    async def start(self):
        env = self._env

        if self._gateway is None:
            load_client_config()
            self._gateway = KubernetesGateway(
                env.POD_NAMESPACE,
                maintenance_config_map=env.MAINTENANCE_CONFIGMAP_NAME,
                logger=self._logger,
            )

        request_timeout = TimeParser(env.PROBER_PEER_REQUEST_TIMEOUT).time

        self._session = ClientSession()
        self._client = ProtocolClient(
            env.get_proxy_url(),
            env.JMX_PORT,
            self.credentials,
        )
        self._cascade = CrossRegionCascade.from_env(
            env,
            session=self._session,
            logger=self._logger,
        )
        self._seeds = SeedDiscovery(
            self._gateway,
            env.get_seed_hostnames(),
            env.get_external_regions_ingress_domains(),
            env.PROBER_SUBDOMAIN,
            request_timeout=request_timeout,
            session=self._session,
        )

        self._watcher = CredentialFileWatcher(
            env.USERS_DIR,
            self.credentials,
            logger=self._logger,
        )
        await self._watcher.start()

        self._poll_loop = PollLoop(
            self.registry,
            StateMatrixBuilder(self.registry, self._client, logger=self._logger),
            StatusSummary(self.registry, self.evaluator),
            StaleNodeReaper(self.registry, logger=self._logger),
            self.credentials,
            interval=TimeParser(env.PROBER_POLL_INTERVAL).time,
            logger=self._logger,
        )
        self._poll_loop.start()

        self._probe_server = ProbeServer(
            self.registry,
            self.evaluator,
            RegionReadiness(
                env.get_local_regions(),
                env.DATABASE_ENDPOINT_LABELS,
                self._gateway,
            ),
            self._cascade,
            self._seeds,
            logger=self._logger,
        )
        await self._probe_server.start(self._host, env.SERVER_PORT)

        self._maintenance_server = MaintenanceServer(
            MaintenanceService(
                self._gateway,
                env.DATABASE_ENDPOINT_LABELS,
                logger=self._logger,
            ),
            logger=self._logger,
        )
        await self._maintenance_server.start(self._host, env.MAINTENANCE_PORT)

    async def stop(self):
        if self._maintenance_server is not None:
            await self._maintenance_server.stop()

        if self._probe_server is not None:
            await self._probe_server.stop()

        if self._poll_loop is not None:
            await self._poll_loop.stop()

        if self._watcher is not None:
            await self._watcher.stop()

        if self._client is not None:
            await self._client.close()

        if self._session is not None and not self._session.closed:
            await self._session.close()

        await self._logger.close()


async def serve(env: Env | None = None):
    if env is None:
        env = load_env(Env)

    logging_config = LoggingConfig()
    logging_config.update(
        log_directory=env.LOGS_DIRECTORY,
        log_level=env.LOG_LEVEL,
        log_output=env.LOG_OUTPUT,
    )

    prober = Prober(env)

    try:
        await prober.start()
        await asyncio.Event().wait()

    finally:
        await prober.stop()


def run():
    try:
        asyncio.run(serve())

    except (
        KeyboardInterrupt,
        asyncio.CancelledError,
    ):
        pass
