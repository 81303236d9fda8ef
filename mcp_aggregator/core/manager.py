"""Main MCP Aggregator application."""

import logging
from typing import Optional

import uvicorn

from ..backend import BackendClient
from ..config.manager import ConfigManager
from ..config.models import AggregatorConfig
from ..protocol import Envelope
from ..routing.router import AggregatorRouter
from ..server.app import create_app

logger = logging.getLogger(__name__)


class MCPAggregator:
    """Application that fronts several MCP backends with one HTTP endpoint."""

    def __init__(
        self,
        config_path: Optional[str] = None,
        config: Optional[AggregatorConfig] = None,
    ):
        self.config_manager = ConfigManager(config_path)
        self.config = config or self.config_manager.load_config()

        # Core components
        self.client = BackendClient(timeout=self.config.runtime.request_timeout)
        self.router = AggregatorRouter(self.config, self.client)
        self.app = create_app(self.config, self.router)

        # Runtime state
        self._server: Optional[uvicorn.Server] = None

        self._setup_logging()

    def _setup_logging(self):
        """Setup logging configuration."""
        level = getattr(logging, self.config.manager.log_level.upper())
        logging.basicConfig(
            level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    async def handle(self, envelope: Envelope) -> Envelope:
        """Route a single envelope without going through HTTP."""
        return await self.router.route(envelope)

    async def start(self, host: Optional[str] = None, port: Optional[int] = None) -> None:
        """Serve the HTTP endpoint until shut down."""
        host = host or self.config.manager.host
        port = port or self.config.manager.port

        logger.info(
            f"Starting {self.config.manager.name} on {host}:{port} "
            f"with backends: {', '.join(self.router.backends)}"
        )

        server_config = uvicorn.Config(
            self.app,
            host=host,
            port=port,
            log_level=self.config.manager.log_level,
        )
        self._server = uvicorn.Server(server_config)

        try:
            await self._server.serve()
        finally:
            await self.stop()

    async def stop(self) -> None:
        """Stop serving and release backend connections."""
        logger.info(f"Stopping {self.config.manager.name}")

        if self._server is not None:
            self._server.should_exit = True
        await self.client.aclose()
