"""
Maintenance Service - per-pod and per-region maintenance flags.

The flags live in a config map keyed by pod name. A pod's init container
blocks startup while the pod is flagged, so enabling the flag on a pod
whose database container is already running also forces the pod into the
Failed phase, making the orchestrator restart it into maintenance.
"""

import re
from typing import Any

from statusgate.errors import OrchestratorCallError, TargetNotFoundError
from statusgate.logging import Logger
from statusgate.logging.statusgate_logging_models import (
    MaintenanceDebug,
    MaintenanceError,
    MaintenanceInfo,
)
from statusgate.orchestrator import KubernetesGateway


ORDINAL_PATTERN = re.compile(r"-(\d+)$")


def ordinal_sort_key(pod: str) -> tuple[int, int]:
    """Highest trailing ordinal first; pods without an ordinal sort last."""
    match = ORDINAL_PATTERN.search(pod)
    if match is None:
        return (1, 0)

    return (0, -int(match.group(1)))


class MaintenanceService:
    def __init__(
        self,
        gateway: KubernetesGateway,
        endpoint_labels: str,
        logger: Logger | None = None,
    ) -> None:
        self._gateway = gateway
        self._endpoint_labels = endpoint_labels
        self._logger = logger or Logger()

    async def get_config(self) -> dict[str, Any]:
        return await self._gateway.read_maintenance_config()

    async def pod_in_maintenance(self, pod: str) -> bool:
        try:
            containers = await self._gateway.get_pod_containers(pod)

        except OrchestratorCallError as err:
            raise TargetNotFoundError(pod, f"Pod {pod} does not exist.") from err

        if containers.in_maintenance:
            await self._logger.log(
                MaintenanceDebug(
                    message=f"Maintenance mode container is running in pod {pod}",
                    target=pod,
                )
            )

        return containers.in_maintenance

    async def set_pod(self, pod: str, enabled: bool) -> dict[str, bool]:
        """
        Raises:
            TargetNotFoundError: The pod does not exist.
            OrchestratorCallError: The flag or the pod phase could not be updated.
        """
        try:
            containers = await self._gateway.get_pod_containers(pod)

        except OrchestratorCallError as err:
            await self._logger.log(
                MaintenanceError(
                    message=f"Pod {pod} does not exist.",
                    target=pod,
                )
            )
            raise TargetNotFoundError(pod, f"Pod {pod} does not exist: {err}") from err

        try:
            await self._gateway.set_maintenance_flags([pod], enabled)

            if enabled and containers.database_running:
                await self._gateway.mark_pod_failed(pod)

        except OrchestratorCallError:
            await self._logger.log(
                MaintenanceError(
                    message=f"Failed to update pod maintenance mode for pod {pod}.",
                    target=pod,
                )
            )
            raise

        await self._logger.log(
            MaintenanceInfo(
                message=f"Maintenance mode {'enabled' if enabled else 'disabled'}",
                target=pod,
            )
        )

        return {pod: enabled}

    async def matching_pods(self, region: str) -> list[str]:
        names = await self._gateway.list_pod_names(self._endpoint_labels)
        matches = sorted(
            (name for name in names if region in name),
            key=ordinal_sort_key,
        )

        if len(matches) == 0:
            raise TargetNotFoundError(region, f"No matches found for region {region}.")

        return matches

    async def region_in_maintenance(self, region: str) -> bool:
        """True when every database pod of the region is flagged."""
        matches = await self.matching_pods(region)
        flags = await self._gateway.read_maintenance_flags()

        return all(pod in flags for pod in matches)

    async def set_region(self, region: str, enabled: bool) -> list[dict[str, Any]]:
        """
        Flag or unflag every database pod of a region.

        Returns:
            One entry per pod, in ordinal order: ``{pod: enabled}`` on
            success or ``{"error": message}`` when that pod's update failed.
        """
        matches = await self.matching_pods(region)
        await self._gateway.set_maintenance_flags(matches, enabled)

        results: list[dict[str, Any]] = []
        for pod in matches:
            try:
                containers = await self._gateway.get_pod_containers(pod)

                if enabled and containers.database_running:
                    await self._gateway.mark_pod_failed(pod)

                results.append({pod: enabled})

            except OrchestratorCallError as err:
                await self._logger.log(
                    MaintenanceError(
                        message=str(err),
                        target=pod,
                    )
                )
                results.append({"error": str(err)})

        await self._logger.log(
            MaintenanceInfo(
                message=f"Maintenance mode {'enabled' if enabled else 'disabled'} for {len(matches)} pods",
                target=region,
            )
        )

        return results
