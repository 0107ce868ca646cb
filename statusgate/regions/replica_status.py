from typing import Protocol

import msgspec

from statusgate.errors import RegionArgumentError


class ReplicaStatus(msgspec.Struct, frozen=True):
    """Desired and ready replica counts of one region's database workload."""

    replicas: int = 0
    ready_replicas: int = 0

    @property
    def ready(self) -> bool:
        return self.replicas == self.ready_replicas

    def to_dict(self):
        return {
            "replicas": self.replicas,
            "readyReplicas": self.ready_replicas,
            "ready": self.ready,
        }


class ReplicaStatusSource(Protocol):
    async def get_replica_statuses(self, label_selector: str) -> list[ReplicaStatus]:
        ...


class RegionReadiness:
    """
    Answers whether one of this cluster's own regions is ready, from the
    replica counts of the workloads labelled with that region.
    """

    def __init__(
        self,
        local_regions: list[str],
        endpoint_labels: str,
        source: ReplicaStatusSource,
    ) -> None:
        self._local_regions = local_regions
        self._endpoint_labels = endpoint_labels
        self._source = source

    @property
    def local_regions(self) -> list[str]:
        return self._local_regions

    def label_selector(self, region: str) -> str:
        selector = f"datacenter={region}"
        if self._endpoint_labels:
            selector = f"{selector},{self._endpoint_labels}"

        return selector

    def resolve_region(self, region: str | None) -> str:
        """
        The region a readiness request refers to.

        Raises:
            RegionArgumentError: The region was omitted while more than one
                local region is configured, or names a region that is not
                served here.
        """
        if region is None:
            if len(self._local_regions) != 1:
                raise RegionArgumentError(
                    f"[/readydc/<region>]: <region> must be specified if more than one local region is configured, got {self._local_regions}"
                )

            return self._local_regions[0]

        if region not in self._local_regions:
            raise RegionArgumentError(
                f"[/readydc/<region>]: {region} must exist in: {','.join(self._local_regions)}"
            )

        return region

    async def check(self, region: str | None) -> tuple[str, ReplicaStatus | None]:
        """
        Returns:
            The resolved region and its workload status, or None when no
            workload matched the region's selector.
        """
        resolved = self.resolve_region(region)
        statuses = await self._source.get_replica_statuses(self.label_selector(resolved))

        if len(statuses) == 0:
            return resolved, None

        return resolved, statuses[0]
