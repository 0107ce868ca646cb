import asyncio

from statusgate.models import Observed, RegistrySnapshot
from statusgate.registry import NodeRegistry

from tests.fakes import FakeReverseResolver


UP = Observed(status="UP")


class TestRegister:
    async def test_address_uses_broadcast_ip_when_given(self, registry: NodeRegistry):
        assert await registry.register("10.0.0.1") == "/10.0.0.1"
        assert await registry.register("10.0.0.2", "192.168.0.2") == "/192.168.0.2"

        node = registry.get("/192.168.0.2")
        assert node.ip == "10.0.0.2"
        assert node.broadcast_ip == "192.168.0.2"

    async def test_hostname_is_first_dns_label(self, registry: NodeRegistry):
        address = await registry.register("10.0.0.1")

        assert registry.get(address).hostname == "db-0"
        assert registry.get(address).display_name == "db-0"

    async def test_reregistering_does_not_resolve_again(
        self,
        registry: NodeRegistry,
        resolver: FakeReverseResolver,
    ):
        await registry.register("10.0.0.1")
        await registry.register("10.0.0.1")
        await registry.register("10.0.0.1")

        assert resolver.lookups == 1
        assert len(registry.nodes) == 1

    async def test_failed_lookup_is_retried_on_next_registration(self):
        resolver = FakeReverseResolver()
        registry = NodeRegistry(resolver=resolver)

        address = await registry.register("10.0.0.7")
        assert registry.get(address).hostname is None

        resolver.hostnames["10.0.0.7"] = "db-7.svc"
        await registry.register("10.0.0.7")

        assert registry.get(address).hostname == "db-7"
        assert resolver.lookups == 2

    async def test_concurrent_registrations_share_one_lookup(
        self,
        registry: NodeRegistry,
        resolver: FakeReverseResolver,
    ):
        await asyncio.gather(*[registry.register("10.0.0.2") for _ in range(5)])

        assert resolver.lookups == 1
        assert registry.get("/10.0.0.2").hostname == "db-1"

    async def test_changed_raw_address_updates_node(self, registry: NodeRegistry):
        await registry.register("10.0.0.1", "192.168.0.9")
        await registry.register("10.0.0.3", "192.168.0.9")

        assert registry.get("/192.168.0.9").ip == "10.0.0.3"


class TestDiscovery:
    async def test_discover_returns_only_new_addresses(self, registry: NodeRegistry):
        await registry.register("10.0.0.1")

        discovered = await registry.discover(["/10.0.0.1", "/10.0.0.8"])

        assert discovered == ["/10.0.0.8"]
        assert registry.get("/10.0.0.8").ip is None

    def test_region_is_cached_on_existing_node(self):
        registry = NodeRegistry()
        registry.add_discovered(["/10.0.0.1"])
        registry.set_region("/10.0.0.1", "east")

        assert registry.region_of("/10.0.0.1") == "east"


class TestSnapshotWrites:
    def test_nodes_mapping_is_replaced_not_mutated(self):
        registry = NodeRegistry()
        before = registry.nodes

        registry.add_discovered(["/10.0.0.1"])

        assert len(before) == 0
        assert registry.nodes is not before

    def test_commit_registers_every_row(self):
        registry = NodeRegistry()
        registry.commit(
            RegistrySnapshot(
                states={"/a": (UP,), "/b": (UP,)},
                known_addresses=("/a", "/b"),
            )
        )

        assert set(registry.nodes) == {"/a", "/b"}

    def test_evict_removes_attributes_and_row(self):
        registry = NodeRegistry()
        registry.commit(
            RegistrySnapshot(
                states={"/a": (UP, UP), "/b": (UP, UP)},
                known_addresses=("/a", "/b"),
            )
        )

        registry.evict("/b")

        assert "/b" not in registry.nodes
        assert "/b" not in registry.snapshot.states
        assert registry.snapshot.known_addresses == ("/a", "/b")
