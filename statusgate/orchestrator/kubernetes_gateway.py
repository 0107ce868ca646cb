"""
Kubernetes Gateway - the orchestrator reads and patches the prober needs.

The official client is synchronous. Every call runs in the loop's default
executor so a slow API server never stalls the poll loop or the HTTP
handlers. Client failures surface as OrchestratorCallError carrying the
API status, so handlers can tell a missing object (404) apart from an
unavailable API.
"""

import asyncio
import functools
from typing import Any, Callable, TypeVar

import urllib3
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from statusgate.errors import OrchestratorCallError
from statusgate.logging import Logger
from statusgate.logging.statusgate_logging_models import OrchestratorError
from statusgate.regions import ReplicaStatus

from .models import PodContainers


T = TypeVar("T")

FAILED_PHASE = "Failed"


def load_client_config():
    try:
        config.load_incluster_config()

    except config.ConfigException:
        config.load_kube_config()


def _running_names(statuses: list[Any] | None) -> tuple[str, ...]:
    return tuple(
        status.name
        for status in statuses or []
        if status.state is not None and status.state.running is not None
    )


class KubernetesGateway:
    def __init__(
        self,
        namespace: str,
        maintenance_config_map: str | None = None,
        api_client: client.ApiClient | None = None,
        logger: Logger | None = None,
    ) -> None:
        self._namespace = namespace
        self._maintenance_config_map = maintenance_config_map
        self._api_client = api_client or client.ApiClient()
        self._core = client.CoreV1Api(self._api_client)
        self._apps = client.AppsV1Api(self._api_client)
        self._logger = logger or Logger()

    @property
    def namespace(self) -> str:
        return self._namespace

    async def _call(self, operation: str, call: Callable[..., T], *args, **kwargs) -> T:
        loop = asyncio.get_running_loop()

        try:
            return await loop.run_in_executor(
                None,
                functools.partial(call, *args, **kwargs),
            )

        except ApiException as err:
            await self._logger.log(
                OrchestratorError(
                    message=f"{err.status} {err.reason}",
                    operation=operation,
                )
            )
            raise OrchestratorCallError(operation, err.status, str(err.reason)) from err

        except urllib3.exceptions.HTTPError as err:
            await self._logger.log(
                OrchestratorError(
                    message=str(err),
                    operation=operation,
                )
            )
            raise OrchestratorCallError(operation, None, str(err)) from err

    # =========================================================================
    # Pods
    # =========================================================================

    async def get_pod_host_ip(self, pod: str) -> str | None:
        result = await self._call(
            "read_namespaced_pod",
            self._core.read_namespaced_pod,
            pod,
            self._namespace,
        )

        return result.status.host_ip if result.status else None

    async def get_pod_host_ips(self, pods: list[str]) -> list[str | None]:
        """
        Host IPs of the named pods, aligned with ``pods``. A pod that could
        not be read yields None.
        """
        results = await asyncio.gather(
            *[self.get_pod_host_ip(pod) for pod in pods],
            return_exceptions=True,
        )

        host_ips: list[str | None] = []
        for result in results:
            if isinstance(result, OrchestratorCallError):
                host_ips.append(None)

            elif isinstance(result, BaseException):
                raise result

            else:
                host_ips.append(result)

        return host_ips

    async def get_pod_containers(self, pod: str) -> PodContainers:
        result = await self._call(
            "read_namespaced_pod_status",
            self._core.read_namespaced_pod_status,
            pod,
            self._namespace,
        )

        status = result.status

        return PodContainers(
            name=pod,
            running_init_containers=_running_names(
                status.init_container_statuses if status else None
            ),
            running_containers=_running_names(
                status.container_statuses if status else None
            ),
        )

    async def mark_pod_failed(self, pod: str):
        await self._call(
            "patch_namespaced_pod_status",
            self._core.patch_namespaced_pod_status,
            pod,
            self._namespace,
            {"status": {"phase": FAILED_PHASE}},
        )

    async def list_pod_names(self, label_selector: str) -> list[str]:
        result = await self._call(
            "list_namespaced_pod",
            self._core.list_namespaced_pod,
            self._namespace,
            label_selector=label_selector,
        )

        return [pod.metadata.name for pod in result.items]

    # =========================================================================
    # Workloads
    # =========================================================================

    async def get_replica_statuses(self, label_selector: str) -> list[ReplicaStatus]:
        result = await self._call(
            "list_namespaced_stateful_set",
            self._apps.list_namespaced_stateful_set,
            self._namespace,
            label_selector=label_selector,
        )

        return [
            ReplicaStatus(
                replicas=(stateful_set.spec.replicas if stateful_set.spec else None) or 0,
                ready_replicas=(
                    stateful_set.status.ready_replicas if stateful_set.status else None
                )
                or 0,
            )
            for stateful_set in result.items
        ]

    # =========================================================================
    # Maintenance config map
    # =========================================================================

    def _config_map_name(self) -> str:
        if self._maintenance_config_map is None:
            raise OrchestratorCallError(
                "read_namespaced_config_map",
                None,
                "no maintenance config map configured",
            )

        return self._maintenance_config_map

    async def read_maintenance_config(self) -> dict[str, Any]:
        result = await self._call(
            "read_namespaced_config_map",
            self._core.read_namespaced_config_map,
            self._config_map_name(),
            self._namespace,
        )

        return self._api_client.sanitize_for_serialization(result)

    async def read_maintenance_flags(self) -> dict[str, str]:
        result = await self._call(
            "read_namespaced_config_map",
            self._core.read_namespaced_config_map,
            self._config_map_name(),
            self._namespace,
        )

        return dict(result.data or {})

    async def set_maintenance_flags(self, pods: list[str], enabled: bool):
        """
        Set or clear the maintenance flag of every pod in one patch. A
        cleared flag is removed from the map rather than set to false.
        """
        flags: dict[str, str | None] = dict(await self.read_maintenance_flags())

        for pod in pods:
            flags[pod] = "true" if enabled else None

        await self._call(
            "patch_namespaced_config_map",
            self._core.patch_namespaced_config_map,
            self._config_map_name(),
            self._namespace,
            {"data": flags},
        )
