import pytest

from statusgate.aggregation import (
    ReadinessEvaluator,
    StaleNodeReaper,
    StateMatrixBuilder,
    StatusSummary,
)
from statusgate.credentials import CredentialResolver
from statusgate.logging import LoggingConfig
from statusgate.polling import PollLoop
from statusgate.registry import NodeRegistry

from tests.fakes import FakeProtocolClient, FakeReverseResolver


@pytest.fixture(autouse=True)
def quiet_logging():
    LoggingConfig().update(log_level="error", log_output="stdout")


@pytest.fixture
def resolver() -> FakeReverseResolver:
    return FakeReverseResolver(
        {
            "10.0.0.1": "db-0.db.svc.cluster.local",
            "10.0.0.2": "db-1.db.svc.cluster.local",
            "10.0.0.3": "db-2.db.svc.cluster.local",
        }
    )


@pytest.fixture
def registry(resolver: FakeReverseResolver) -> NodeRegistry:
    return NodeRegistry(resolver=resolver)


@pytest.fixture
def credentials() -> CredentialResolver:
    return CredentialResolver()


@pytest.fixture
def client(credentials: CredentialResolver) -> FakeProtocolClient:
    return FakeProtocolClient(credentials)


@pytest.fixture
def evaluator(registry: NodeRegistry) -> ReadinessEvaluator:
    return ReadinessEvaluator(registry)


@pytest.fixture
def builder(registry: NodeRegistry, client: FakeProtocolClient) -> StateMatrixBuilder:
    return StateMatrixBuilder(registry, client)


@pytest.fixture
def poll_loop(
    registry: NodeRegistry,
    builder: StateMatrixBuilder,
    evaluator: ReadinessEvaluator,
    credentials: CredentialResolver,
) -> PollLoop:
    return PollLoop(
        registry,
        builder,
        StatusSummary(registry, evaluator),
        StaleNodeReaper(registry),
        credentials,
        interval=0.01,
    )
