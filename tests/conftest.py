from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from mcp_aggregator.backend import BackendClient
from mcp_aggregator.config.models import AggregatorConfig, BackendConfig
from mcp_aggregator.routing import AggregatorRouter

Handler = Callable[[dict, httpx.Request], Any]


def rpc_result(result: Any) -> Handler:
    def handler(body: dict, request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json={"jsonrpc": "2.0", "id": body.get("id"), "result": result}
        )

    return handler


def rpc_error(code: int, message: str) -> Handler:
    def handler(body: dict, request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "jsonrpc": "2.0",
                "id": body.get("id"),
                "error": {"code": code, "message": message},
            },
        )

    return handler


def tool(name: str) -> dict:
    return {
        "name": name,
        "description": f"{name} tool",
        "inputSchema": {"type": "object", "properties": {}},
    }


def unreachable(body: dict, request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Connection refused", request=request)


class FakeBackend:
    def __init__(self, name: str, handler: Handler):
        self.name = name
        self.url = f"http://{name}.test/mcp"
        self.handler = handler
        self.calls: List[dict] = []


class FakeNetwork:
    """Routes mocked HTTP traffic to fake backends by host name."""

    def __init__(self) -> None:
        self.backends: Dict[str, FakeBackend] = {}

    def add(self, name: str, handler: Optional[Handler] = None) -> FakeBackend:
        backend = FakeBackend(name, handler or rpc_result({}))
        self.backends[f"{name}.test"] = backend
        return backend

    def __getitem__(self, name: str) -> FakeBackend:
        return self.backends[f"{name}.test"]

    @property
    def total_calls(self) -> int:
        return sum(len(b.calls) for b in self.backends.values())

    async def _dispatch(self, request: httpx.Request) -> httpx.Response:
        backend = self.backends[request.url.host]
        body = json.loads(request.content)
        backend.calls.append(body)
        response = backend.handler(body, request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self._dispatch))

    def config(self, **routing: Any) -> AggregatorConfig:
        backends = {}
        for backend in self.backends.values():
            backends[backend.name] = BackendConfig(
                url=backend.url,
                default=backend.name == "general",
                prefixes=(
                    ["jira_", "confluence_", "atlassian_"]
                    if backend.name == "atlassian"
                    else []
                ),
            )
        return AggregatorConfig(backends=backends, routing=routing)


@pytest.fixture
def network() -> FakeNetwork:
    net = FakeNetwork()
    net.add("general")
    net.add("atlassian")
    return net


@pytest.fixture
def make_router(network: FakeNetwork) -> Callable[..., AggregatorRouter]:
    def factory(**routing: Any) -> AggregatorRouter:
        client = BackendClient(timeout=5.0, http_client=network.http_client())
        return AggregatorRouter(network.config(**routing), client)

    return factory
