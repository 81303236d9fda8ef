from __future__ import annotations

import pytest

from mcp_aggregator.config.models import AggregatorConfig, BackendConfig
from mcp_aggregator.routing import ToolClassifier


@pytest.fixture
def classifier() -> ToolClassifier:
    config = AggregatorConfig(
        backends={
            "general": BackendConfig(url="http://general.test", default=True),
            "atlassian": BackendConfig(
                url="http://atlassian.test",
                prefixes=["jira_", "confluence_", "atlassian_"],
            ),
            "github": BackendConfig(url="http://github.test", prefixes=["gh_"]),
        }
    )
    return ToolClassifier(config)


@pytest.mark.parametrize(
    "tool_name, backend",
    [
        ("jira_search", "atlassian"),
        ("confluence_get_page", "atlassian"),
        ("atlassian_whoami", "atlassian"),
        ("gh_list_issues", "github"),
        ("add", "general"),
        ("resolve-library-id", "general"),
        ("", "general"),
        ("JIRA_search", "general"),
        ("my_jira_search", "general"),
    ],
)
def test_classify(classifier: ToolClassifier, tool_name: str, backend: str) -> None:
    assert classifier.classify(tool_name) == backend


def test_classify_is_deterministic(classifier: ToolClassifier) -> None:
    assert {classifier.classify("jira_search") for _ in range(20)} == {"atlassian"}


def test_first_declared_prefix_wins() -> None:
    config = AggregatorConfig(
        backends={
            "general": BackendConfig(url="http://general.test", default=True),
            "wide": BackendConfig(url="http://wide.test", prefixes=["jira"]),
            "narrow": BackendConfig(url="http://narrow.test", prefixes=["jira_"]),
        }
    )

    assert ToolClassifier(config).classify("jira_search") == "wide"


def test_disabled_backend_prefixes_are_ignored() -> None:
    config = AggregatorConfig(
        backends={
            "general": BackendConfig(url="http://general.test", default=True),
            "atlassian": BackendConfig(
                url="http://atlassian.test", prefixes=["jira_"], enabled=False
            ),
        }
    )

    assert ToolClassifier(config).classify("jira_search") == "general"


def test_default_backend_may_own_prefixes() -> None:
    config = AggregatorConfig(
        backends={
            "atlassian": BackendConfig(url="http://atlassian.test", prefixes=["jira_"]),
            "general": BackendConfig(
                url="http://general.test", prefixes=["calc_"], default=True
            ),
        }
    )
    classifier = ToolClassifier(config)

    assert classifier.classify("calc_add") == "general"
    assert classifier.classify("jira_search") == "atlassian"
    assert classifier.prefix_table() == {"atlassian": ["jira_"], "general": ["calc_"]}
