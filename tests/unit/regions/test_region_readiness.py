import pytest

from statusgate.errors import RegionArgumentError
from statusgate.regions import RegionReadiness, ReplicaStatus

from tests.fakes import FakeGateway


class TestReplicaStatus:
    def test_ready_when_counts_match(self):
        assert ReplicaStatus(replicas=3, ready_replicas=3).ready
        assert not ReplicaStatus(replicas=3, ready_replicas=2).ready

    def test_serializes_camel_case(self):
        assert ReplicaStatus(replicas=3, ready_replicas=1).to_dict() == {
            "replicas": 3,
            "readyReplicas": 1,
            "ready": False,
        }


class TestResolveRegion:
    def test_sole_region_is_the_default(self):
        readiness = RegionReadiness(["east"], "", FakeGateway())

        assert readiness.resolve_region(None) == "east"

    def test_region_required_with_several_local_regions(self):
        readiness = RegionReadiness(["east", "west"], "", FakeGateway())

        with pytest.raises(RegionArgumentError):
            readiness.resolve_region(None)

    def test_foreign_region_is_rejected(self):
        readiness = RegionReadiness(["east"], "", FakeGateway())

        with pytest.raises(RegionArgumentError):
            readiness.resolve_region("north")


class TestCheck:
    async def test_selector_combines_region_and_endpoint_labels(self):
        gateway = FakeGateway()
        gateway.replica_statuses["east"] = [ReplicaStatus(replicas=3, ready_replicas=3)]
        readiness = RegionReadiness(
            ["east"],
            "app.kubernetes.io/component=database",
            gateway,
        )

        region, status = await readiness.check(None)

        assert region == "east"
        assert status.ready
        assert gateway.selectors == [
            "datacenter=east,app.kubernetes.io/component=database"
        ]

    async def test_missing_workload_yields_no_status(self):
        readiness = RegionReadiness(["east"], "", FakeGateway())

        assert await readiness.check("east") == ("east", None)
