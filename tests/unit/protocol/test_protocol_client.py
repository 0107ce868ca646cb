import orjson
import pytest
from aiohttp import web
from aiohttp import test_utils

from statusgate.credentials import CredentialResolver
from statusgate.errors import ProtocolTransportError
from statusgate.models import Credentials
from statusgate.protocol import ProtocolClient


class FakeProxy:
    """Records request bodies and answers with a canned response."""

    def __init__(self) -> None:
        self.bodies: list = []
        self.status = 200
        self.response: object | None = None
        self.url = ""

    async def handle(self, request: web.Request) -> web.Response:
        body = orjson.loads(await request.read())
        self.bodies.append(body)

        response = self.response
        if response is None:
            response = [
                {"status": 200, "value": {"/10.0.0.1": "UP"}} for _ in body
            ]

        return web.Response(
            body=orjson.dumps(response),
            status=self.status,
            content_type="application/json",
        )


@pytest.fixture
async def proxy():
    fake = FakeProxy()
    app = web.Application()
    app.router.add_post("/jolokia", fake.handle)

    server = test_utils.TestServer(app)
    await server.start_server()

    fake.url = str(server.make_url("/jolokia"))
    yield fake

    await server.close()


@pytest.fixture
async def proxy_client(proxy: FakeProxy):
    credentials = CredentialResolver()
    credentials.on_credential_file_changed(Credentials(user="admin", password="s3cret"))

    client = ProtocolClient(proxy.url, 7199, credentials)
    yield client

    await client.close()


class TestDescriptors:
    def test_failure_detector_descriptor(self):
        client = ProtocolClient("http://proxy", 7199, CredentialResolver())
        request = client.failure_detector_request("/10.0.0.1")

        assert request.type == "read"
        assert request.mbean == "org.apache.cassandra.net:type=FailureDetector"
        assert request.attribute == "SimpleStates"
        assert request.target.url == "service:jmx:rmi:///jndi/rmi://10.0.0.1:7199/jmxrmi"
        assert request.target.user is None

    def test_region_descriptor_carries_active_credentials(self):
        credentials = CredentialResolver()
        credentials.toggle()

        request = ProtocolClient("http://proxy", 7199, credentials).region_request("/10.0.0.1")

        assert request.mbean == "org.apache.cassandra.db:type=EndpointSnitchInfo"
        assert request.attribute == "Datacenter"
        assert (request.target.user, request.target.password) == ("cassandra", "cassandra")


class TestBatchQuery:
    async def test_empty_batch_sends_nothing(self):
        client = ProtocolClient("http://127.0.0.1:1/jolokia", 7199, CredentialResolver())

        assert await client.batch_query([]) == []

    async def test_one_post_per_batch_with_credentials(
        self,
        proxy: FakeProxy,
        proxy_client: ProtocolClient,
    ):
        results = await proxy_client.batch_query(
            [
                proxy_client.failure_detector_request("/10.0.0.1"),
                proxy_client.failure_detector_request("/10.0.0.2"),
            ]
        )

        assert len(proxy.bodies) == 1
        sent = proxy.bodies[0]
        assert [item["type"] for item in sent] == ["read", "read"]
        assert sent[1]["target"] == {
            "url": "service:jmx:rmi:///jndi/rmi://10.0.0.2:7199/jmxrmi",
            "user": "admin",
            "password": "s3cret",
        }

        assert [result.ok for result in results] == [True, True]
        assert results[0].value == {"/10.0.0.1": "UP"}

    async def test_item_failure_is_an_ordinary_result(
        self,
        proxy: FakeProxy,
        proxy_client: ProtocolClient,
    ):
        proxy.response = [
            {"status": 200, "value": {"/10.0.0.1": "UP"}},
            {"status": 404, "error": "javax.management.InstanceNotFoundException"},
        ]

        results = await proxy_client.batch_query(
            [
                proxy_client.failure_detector_request("/10.0.0.1"),
                proxy_client.failure_detector_request("/10.0.0.2"),
            ]
        )

        assert results[1].ok is False
        assert results[1].status == 404
        assert "InstanceNotFound" in results[1].error

    async def test_proxy_error_status_fails_the_batch(
        self,
        proxy: FakeProxy,
        proxy_client: ProtocolClient,
    ):
        proxy.status = 502

        with pytest.raises(ProtocolTransportError):
            await proxy_client.batch_query(
                [proxy_client.failure_detector_request("/10.0.0.1")]
            )

    async def test_mis_sized_response_fails_the_batch(
        self,
        proxy: FakeProxy,
        proxy_client: ProtocolClient,
    ):
        proxy.response = [{"status": 200, "value": {}}]

        with pytest.raises(ProtocolTransportError):
            await proxy_client.batch_query(
                [
                    proxy_client.failure_detector_request("/10.0.0.1"),
                    proxy_client.failure_detector_request("/10.0.0.2"),
                ]
            )

    async def test_connection_failure_fails_the_batch(self):
        client = ProtocolClient("http://127.0.0.1:1/jolokia", 7199, CredentialResolver())

        try:
            with pytest.raises(ProtocolTransportError):
                await client.batch_query([client.failure_detector_request("/10.0.0.1")])

        finally:
            await client.close()
