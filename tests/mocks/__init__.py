"""Mock implementations for testing."""

from tests.mocks.aggregator import (
    MockRouteProvider,
    MockSwapExecutor,
    RecordingSleep,
    make_route,
)
from tests.mocks.chain import MockRpc, MockSigner, MockSwapClient
from tests.mocks.servers import FakeJupiter, FakeRpc


__all__ = [
    "FakeJupiter",
    "FakeRpc",
    "MockRouteProvider",
    "MockRpc",
    "MockSigner",
    "MockSwapClient",
    "MockSwapExecutor",
    "RecordingSleep",
    "make_route",
]
