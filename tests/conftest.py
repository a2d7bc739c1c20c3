"""Pytest configuration and fixtures for slack-build-notifier tests."""

from collections.abc import Callable
from pathlib import Path

import pytest

from slack_build_notifier.notifications import Build

# Block template covering a templated section, a divider and a button
# accessory whose URL has its double quotes replaced.
BLOCK_TEMPLATE = """[
    {
      "type": "section",
      "text": {
        "type": "mrkdwn",
        "text": "Build {{ build.substitutions._GOOGLE_FUNCTION_TARGET }} Status: {{ build.status }}"
      }
    },
    {
      "type": "divider"
    },
    {
      "type": "section",
      "text": {
        "type": "mrkdwn",
        "text": "View Build Logs"
      },
      "accessory": {
        "type": "button",
        "text": {
          "type": "plain_text",
          "text": "Logs"
        },
        "value": "click_me_123",
        "url": "{{ replace(build.logUrl, '"', "'") }}",
        "action_id": "button-action"
      }
    }
]"""

SINGLE_SECTION_TEMPLATE = """[
    {
      "type": "section",
      "text": {
        "type": "mrkdwn",
        "text": "Build {{ build.substitutions._GOOGLE_FUNCTION_TARGET }} Status: {{ build.status }}"
      }
    }
]"""


@pytest.fixture
def success_build() -> Build:
    """Successful build with a log URL containing a double quote."""
    return Build.model_validate(
        {
            "id": "111222333-4455-6677-8899-fa12345678",
            "status": "SUCCESS",
            "projectId": "hello-world-123",
            "logUrl": 'https://some.example.com/log/url?foo=bar"',
            "substitutions": {"_GOOGLE_FUNCTION_TARGET": "helloHttp"},
        }
    )


@pytest.fixture
def make_build() -> Callable[..., Build]:
    """Factory for builds with wire-form overrides."""

    def _make(**fields: object) -> Build:
        data: dict[str, object] = {
            "id": "build-1",
            "status": "SUCCESS",
            "projectId": "hello-world-123",
        }
        data.update(fields)
        return Build.model_validate(data)

    return _make


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[str], Path]:
    """Write a notifier YAML config into tmp_path and return its path."""

    def _write(content: str, name: str = "notifier.yaml") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def block_template() -> str:
    """Three-block template: section, divider, section with button."""
    return BLOCK_TEMPLATE


@pytest.fixture
def single_section_template() -> str:
    """One-section template referencing a substitution and the status."""
    return SINGLE_SECTION_TEMPLATE
