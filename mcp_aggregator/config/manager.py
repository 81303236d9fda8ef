"""Configuration manager."""

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import yaml
from pydantic import ValidationError

from .models import AggregatorConfig, BackendConfig

DEFAULT_GENERAL_URL = "https://remote-mcp-server-authless.gladden4work.workers.dev"
DEFAULT_ATLASSIAN_URL = "https://atlassian-mcp-server.gladden4work.workers.dev"
ATLASSIAN_PREFIXES = ["jira_", "confluence_", "atlassian_"]

_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


def default_config() -> AggregatorConfig:
    """Two-backend layout used when no configuration file is supplied."""
    return AggregatorConfig(
        backends={
            "general": BackendConfig(
                url=os.getenv("EXISTING_MCP_SERVER_URL") or DEFAULT_GENERAL_URL,
                default=True,
            ),
            "atlassian": BackendConfig(
                url=os.getenv("ATLASSIAN_MCP_SERVER_URL") or DEFAULT_ATLASSIAN_URL,
                prefixes=list(ATLASSIAN_PREFIXES),
            ),
        }
    )


class ConfigManager:
    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path) if config_path else None
        self.config: Optional[AggregatorConfig] = None

    def load_config(self) -> AggregatorConfig:
        """Load and validate configuration.

        Without a path the built-in layout from environment variables is used.
        """
        if self.config_path is None:
            self.config = default_config()
            return self.config

        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, "r") as f:
                config_data = yaml.safe_load(f) or {}

            config_data = self._expand_env_vars(config_data)
            self.config = AggregatorConfig(**config_data)
            return self.config

        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML syntax: {e}")
        except ValidationError as e:
            raise ValueError(f"Configuration validation failed: {e}")
        except TypeError as e:
            # top-level document was not a mapping
            raise ValueError(f"Configuration validation failed: {e}")

    def validate_config(self) -> List[str]:
        """Validate configuration and return any issues."""
        issues = []

        try:
            config = self.load_config()

            for name, backend in config.backends.items():
                if not self._valid_url(backend.url):
                    issues.append(f"Backend {name}: invalid url {backend.url}")

            issues.extend(self._check_prefix_conflicts(config.enabled_backends()))

        except Exception as e:
            issues.append(f"Configuration error: {e}")

        return issues

    def _expand_env_vars(self, data: Any) -> Any:
        """Recursively expand ${VAR} and ${VAR:-default} in string values."""
        if isinstance(data, dict):
            return {k: self._expand_env_vars(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [self._expand_env_vars(item) for item in data]
        elif isinstance(data, str):
            return _ENV_PATTERN.sub(self._env_value, data)
        else:
            return data

    @staticmethod
    def _env_value(match: "re.Match") -> str:
        name, fallback = match.group(1), match.group(2)
        value = os.getenv(name)
        if value:
            return value
        if fallback is not None:
            return fallback
        return match.group(0)

    @staticmethod
    def _valid_url(url: str) -> bool:
        parsed = urlparse(url)
        return parsed.scheme in ("http", "https") and bool(parsed.netloc)

    def _check_prefix_conflicts(self, backends: Dict[str, BackendConfig]) -> List[str]:
        """Report prefixes that can never win because an earlier backend claims them."""
        conflicts = []
        seen: List[tuple] = []

        for name, backend in backends.items():
            for prefix in backend.prefixes:
                for owner, earlier in seen:
                    if owner != name and prefix.startswith(earlier):
                        conflicts.append(
                            f"Backend {name}: prefix '{prefix}' is shadowed by "
                            f"'{earlier}' on backend {owner}"
                        )
                seen.append((name, prefix))

        return conflicts

    def get_config(self) -> AggregatorConfig:
        """Get current configuration, loading if needed."""
        if self.config is None:
            self.load_config()
        return self.config
