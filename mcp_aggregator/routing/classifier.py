"""Tool name to backend classification."""

from typing import Dict, List, Tuple

from ..config.models import AggregatorConfig


class ToolClassifier:
    """Maps a tool name to the backend that owns it.

    Prefixes are checked in backend registration order and the first match
    wins. Names no prefix claims belong to the default backend.
    """

    def __init__(self, config: AggregatorConfig):
        self.default_backend = config.default_backend
        self._prefixes: List[Tuple[str, Tuple[str, ...]]] = [
            (name, tuple(backend.prefixes))
            for name, backend in config.enabled_backends().items()
            if backend.prefixes
        ]

    def classify(self, tool_name: str) -> str:
        for backend_name, prefixes in self._prefixes:
            if tool_name.startswith(prefixes):
                return backend_name
        return self.default_backend

    def prefix_table(self) -> Dict[str, List[str]]:
        return {name: list(prefixes) for name, prefixes in self._prefixes}
