import msgspec


MAINTENANCE_CONTAINER = "maintenance-mode"
DATABASE_CONTAINER = "cassandra"


class PodContainers(msgspec.Struct, frozen=True, kw_only=True):
    """Which of a pod's containers are currently in the running state."""

    name: str
    running_init_containers: tuple[str, ...] = ()
    running_containers: tuple[str, ...] = ()

    @property
    def in_maintenance(self) -> bool:
        return MAINTENANCE_CONTAINER in self.running_init_containers

    @property
    def database_running(self) -> bool:
        return DATABASE_CONTAINER in self.running_containers
