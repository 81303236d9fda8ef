"""Main request routing engine."""

import logging
from typing import Dict

import mcp.types as types

from ..backend import BackendClient
from ..config.models import AggregatorConfig
from ..protocol import PROTOCOL_VERSION, Envelope
from .aggregator import ToolCatalogAggregator
from .classifier import ToolClassifier

logger = logging.getLogger(__name__)


class AggregatorRouter:
    """Decides which backend answers each inbound envelope.

    ``initialize`` is answered locally, ``tools/list`` is fanned out and
    merged, ``tools/call`` goes to the backend owning the tool, and every
    other method walks the fallback chain until a backend answers without
    an error.
    """

    def __init__(self, config: AggregatorConfig, client: BackendClient):
        self.config = config
        self.client = client
        self.backends = config.enabled_backends()
        self.classifier = ToolClassifier(config)
        self.aggregator = ToolCatalogAggregator(config, client)
        self.fallback_chain = config.fallback_chain()

    async def route(self, envelope: Envelope) -> Envelope:
        """Route one envelope; always returns an envelope."""
        method = envelope.method

        try:
            if method == "initialize":
                return self._initialize(envelope)
            elif method == "tools/list":
                return await self._route_list_tools(envelope)
            elif method == "tools/call":
                return await self._route_tool_call(envelope)
            else:
                return await self._route_fallback(envelope)

        except Exception as e:
            logger.error(f"Routing error for {method}: {e}", exc_info=True)
            return envelope.error_reply(
                types.INTERNAL_ERROR, f"Internal routing error: {str(e)}"
            )

    def _initialize(self, envelope: Envelope) -> Envelope:
        result = types.InitializeResult(
            protocolVersion=PROTOCOL_VERSION,
            capabilities=types.ServerCapabilities(tools=types.ToolsCapability()),
            serverInfo=types.Implementation(
                name=self.config.manager.name, version=self.config.manager.version
            ),
        )
        return envelope.reply(result.model_dump(mode="json", exclude_none=True))

    async def _route_list_tools(self, envelope: Envelope) -> Envelope:
        tools = await self.aggregator.aggregate_tools()
        return envelope.reply({"tools": tools})

    async def _route_tool_call(self, envelope: Envelope) -> Envelope:
        params = envelope.params if isinstance(envelope.params, dict) else {}
        tool_name = params.get("name")

        if not isinstance(tool_name, str) or not tool_name:
            return envelope.error_reply(
                types.INVALID_PARAMS, "Missing tool name in parameters"
            )

        backend_name = self.classifier.classify(tool_name)
        logger.debug(f"Routing tool call {tool_name} to {backend_name}")
        return await self.client.forward(self.backends[backend_name].url, envelope)

    async def _route_fallback(self, envelope: Envelope) -> Envelope:
        response = None
        for backend_name in self.fallback_chain:
            response = await self.client.forward(
                self.backends[backend_name].url, envelope
            )
            if not response.is_error:
                return response
            logger.info(
                f"Backend {backend_name} could not handle {envelope.method}: "
                f"{response.error_message}"
            )
        return response

    def get_stats(self) -> Dict:
        """Get routing configuration summary."""
        return {
            "backends": {name: b.url for name, b in self.backends.items()},
            "default": self.classifier.default_backend,
            "prefixes": self.classifier.prefix_table(),
            "fallback_chain": list(self.fallback_chain),
            "duplicate_tools": self.config.routing.duplicate_tools,
        }
