"""Shared fixtures for chatflow tests.

Collaborators are replaced by AsyncMocks so runner tests are deterministic and
never touch the network or an LLM API.
"""

from unittest.mock import AsyncMock

import pytest

from chatflow.core.display import BufferedDisplaySink
from chatflow.flow.graph import FlowGraph
from chatflow.runtime.runner import FlowRunner


@pytest.fixture
def sink() -> BufferedDisplaySink:
    """Sink that records every published snapshot."""
    return BufferedDisplaySink()


@pytest.fixture
def http_client() -> AsyncMock:
    """HTTP collaborator returning a JSON object."""
    client = AsyncMock()
    client.request.return_value = {"status": "ok"}
    return client


@pytest.fixture
def completion() -> AsyncMock:
    """AI collaborator returning a canned reply."""
    client = AsyncMock()
    client.generate.return_value = "Generated reply"
    return client


@pytest.fixture
def make_runner(sink, http_client, completion):
    """Build a runner over a graph with mocked collaborators."""

    def _make(graph: FlowGraph, **kwargs) -> FlowRunner:
        kwargs.setdefault("http_client", http_client)
        kwargs.setdefault("completion", completion)
        return FlowRunner(graph, kwargs.pop("sink", sink), **kwargs)

    return _make
