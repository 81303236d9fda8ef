"""Configuration data models."""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class BackendConfig(BaseModel):
    url: str
    prefixes: List[str] = Field(default_factory=list)
    default: bool = False  # receives every tool no prefix claims
    enabled: bool = True

    @field_validator("prefixes")
    @classmethod
    def _no_empty_prefixes(cls, value: List[str]) -> List[str]:
        if any(not prefix for prefix in value):
            raise ValueError("tool name prefixes must be non-empty strings")
        return value


class ManagerConfig(BaseModel):
    name: str = "mcp-aggregator-server"
    version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 8787
    log_level: Literal["debug", "info", "warning", "error"] = "info"


class RoutingConfig(BaseModel):
    duplicate_tools: Literal["first_wins", "keep"] = "first_wins"
    fallback_chain: List[str] = Field(default_factory=list)  # empty = derived
    max_fallback_hops: Optional[int] = Field(default=None, ge=1)


class RuntimeConfig(BaseModel):
    request_timeout: float = Field(default=30.0, gt=0)  # seconds per backend call


class AggregatorConfig(BaseModel):
    manager: ManagerConfig = Field(default_factory=ManagerConfig)
    backends: Dict[str, BackendConfig] = Field(default_factory=dict)
    routing: RoutingConfig = Field(default_factory=RoutingConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)

    @model_validator(mode="after")
    def _check_backends(self) -> "AggregatorConfig":
        enabled = self.enabled_backends()
        if not enabled:
            raise ValueError("at least one enabled backend is required")

        defaults = [name for name, backend in enabled.items() if backend.default]
        if len(defaults) != 1:
            raise ValueError(
                f"exactly one enabled backend must be marked default, got {defaults}"
            )

        for name in self.routing.fallback_chain:
            if name not in enabled:
                raise ValueError(f"fallback chain names unknown backend: {name}")
        return self

    def enabled_backends(self) -> Dict[str, BackendConfig]:
        """Enabled backends in registration order."""
        return {name: b for name, b in self.backends.items() if b.enabled}

    @property
    def default_backend(self) -> str:
        return next(
            name for name, b in self.enabled_backends().items() if b.default
        )

    def fallback_chain(self) -> List[str]:
        """Backends tried, in order, for methods the router does not handle itself."""
        chain = list(self.routing.fallback_chain)
        if not chain:
            default = self.default_backend
            chain = [default] + [
                name for name in self.enabled_backends() if name != default
            ]
        if self.routing.max_fallback_hops is not None:
            chain = chain[: self.routing.max_fallback_hops]
        return chain
