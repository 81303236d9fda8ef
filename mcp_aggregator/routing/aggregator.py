"""Tool catalog aggregation across backend servers."""

import asyncio
import logging
from typing import Any, Dict, List

from ..backend import BackendClient
from ..config.models import AggregatorConfig
from ..protocol import Envelope

logger = logging.getLogger(__name__)


class ToolCatalogAggregator:
    """Fans ``tools/list`` out to every backend and merges the answers."""

    def __init__(self, config: AggregatorConfig, client: BackendClient):
        self.backends = config.enabled_backends()
        self.duplicate_policy = config.routing.duplicate_tools
        self.client = client

    async def aggregate_tools(self) -> List[Dict[str, Any]]:
        """Merged catalog, backends concatenated in registration order."""
        tasks = []
        for name, backend in self.backends.items():
            task = asyncio.create_task(
                self._get_backend_tools(name, backend.url), name=f"tools_list_{name}"
            )
            tasks.append(task)

        results = await asyncio.gather(*tasks, return_exceptions=True)

        all_tools: List[Dict[str, Any]] = []
        owners: Dict[str, str] = {}

        for name, result in zip(self.backends.keys(), results):
            if isinstance(result, Exception):
                logger.warning(f"Failed to get tools from {name}: {result}")
                continue

            for tool in result:
                tool_name = tool.get("name")
                if isinstance(tool_name, str) and tool_name in owners:
                    if self.duplicate_policy == "first_wins":
                        logger.warning(
                            f"Dropping duplicate tool {tool_name} from {name}; "
                            f"already provided by {owners[tool_name]}"
                        )
                        continue
                    logger.debug(f"Keeping duplicate tool {tool_name} from {name}")
                elif isinstance(tool_name, str):
                    owners[tool_name] = name
                all_tools.append(tool)

        logger.info(
            f"Aggregated {len(all_tools)} tools from {len(self.backends)} backends"
        )
        return all_tools

    async def _get_backend_tools(self, name: str, url: str) -> List[Dict[str, Any]]:
        """Tools advertised by one backend; empty when it cannot answer."""
        request = Envelope.request("tools/list", request_id=f"tools-list-{name}")
        response = await self.client.forward(url, request)

        if response.is_error:
            logger.warning(f"Omitting tools from {name}: {response.error_message}")
            return []

        tools = None
        if isinstance(response.result, dict):
            tools = response.result.get("tools")
        if not isinstance(tools, list):
            logger.warning(f"Omitting tools from {name}: response has no tools array")
            return []

        entries = [tool for tool in tools if isinstance(tool, dict)]
        if len(entries) != len(tools):
            logger.warning(
                f"Skipped {len(tools) - len(entries)} malformed tool entries from {name}"
            )
        return entries
