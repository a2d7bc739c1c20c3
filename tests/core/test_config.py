"""Tests for notifier config loading.

Tests cover:
- load_config() happy path, defaults and error cases
- messageTemplate param handling
- Secret reference lookup
- Block template resolution (inline, relative, file://, unsupported)
"""

from collections.abc import Callable
from pathlib import Path

import pytest

from slack_build_notifier.core.config import (
    MAX_CONFIG_SIZE,
    NotifierConfig,
    SecretConfig,
    find_secret_resource_name,
    get_secret_ref,
    load_block_template,
    load_config,
)
from slack_build_notifier.core.exceptions import ConfigError

VALID_CONFIG = """\
apiVersion: cloud-build-notifiers/v1
kind: SlackNotifier
metadata:
  name: example-slack-notifier
spec:
  notification:
    filter: build.status == Build.Status.SUCCESS
    params:
      messageTemplate: "Build {{ status }}"
      branch: $(build.substitutions.BRANCH_NAME)
    delivery:
      webhookUrl:
        secretRef: webhook-url
    template:
      type: golang
      uri: slack.json
  secrets:
    - name: webhook-url
      value: env:SLACK_WEBHOOK_URL
"""


class TestLoadConfig:
    """Test load_config()."""

    def test_valid_config(self, write_config: Callable[..., Path]) -> None:
        """All sections are parsed."""
        config = load_config(write_config(VALID_CONFIG))
        assert config.api_version == "cloud-build-notifiers/v1"
        assert config.metadata.name == "example-slack-notifier"
        notification = config.spec.notification
        assert notification.filter == "build.status == Build.Status.SUCCESS"
        assert notification.params["branch"] == "$(build.substitutions.BRANCH_NAME)"
        assert notification.template is not None
        assert notification.template.uri == "slack.json"
        assert config.spec.secrets == [
            SecretConfig(name="webhook-url", value="env:SLACK_WEBHOOK_URL")
        ]

    def test_empty_file_uses_defaults(self, write_config: Callable[..., Path]) -> None:
        """An empty document yields the default config."""
        config = load_config(write_config(""))
        assert config.metadata.name == "slack-notifier"
        assert config.spec.notification.filter == ""
        assert config.spec.notification.template is None

    def test_unknown_keys_ignored(self, write_config: Callable[..., Path]) -> None:
        """Extra keys do not fail validation."""
        config = load_config(write_config("kind: SlackNotifier\nextra: 1\n"))
        assert config.kind == "SlackNotifier"

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises ConfigError."""
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, write_config: Callable[..., Path]) -> None:
        """Malformed YAML raises ConfigError."""
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(write_config("spec: [unclosed\n"))

    def test_non_mapping_root(self, write_config: Callable[..., Path]) -> None:
        """A list document raises ConfigError."""
        with pytest.raises(ConfigError, match="mapping"):
            load_config(write_config("- a\n- b\n"))

    def test_schema_violation(self, write_config: Callable[..., Path]) -> None:
        """Secrets without a value fail validation."""
        with pytest.raises(ConfigError, match="Invalid notifier config"):
            load_config(write_config("spec:\n  secrets:\n    - name: only-name\n"))

    def test_too_large(self, write_config: Callable[..., Path]) -> None:
        """Files over the size limit are rejected before parsing."""
        path = write_config("#" * (MAX_CONFIG_SIZE + 1))
        with pytest.raises(ConfigError, match="too large"):
            load_config(path)


class TestMessageTemplate:
    """Test the messageTemplate param."""

    def test_present(self) -> None:
        config = NotifierConfig.model_validate(
            {"spec": {"notification": {"params": {"messageTemplate": "hi {{ id }}"}}}}
        )
        assert config.message_template == "hi {{ id }}"

    @pytest.mark.parametrize("params", [{}, {"messageTemplate": ""}])
    def test_absent_or_empty(self, params: dict[str, str]) -> None:
        """Unset and empty templates both mean no text."""
        config = NotifierConfig.model_validate({"spec": {"notification": {"params": params}}})
        assert config.message_template is None


class TestSecretRefs:
    """Test secret reference helpers."""

    def test_get_secret_ref(self) -> None:
        assert get_secret_ref({"webhookUrl": {"secretRef": "hook"}}, "webhookUrl") == "hook"

    @pytest.mark.parametrize(
        "delivery",
        [{}, {"webhookUrl": "https://hooks.example"}, {"webhookUrl": {"secretRef": ""}}],
    )
    def test_get_secret_ref_missing(self, delivery: dict[str, object]) -> None:
        with pytest.raises(ConfigError):
            get_secret_ref(delivery, "webhookUrl")

    def test_find_secret_resource_name(self) -> None:
        secrets = [SecretConfig(name="a", value="env:A"), SecretConfig(name="b", value="env:B")]
        assert find_secret_resource_name(secrets, "b") == "env:B"
        with pytest.raises(ConfigError, match="no secret named"):
            find_secret_resource_name(secrets, "c")


def _template_config(**template: str) -> NotifierConfig:
    return NotifierConfig.model_validate({"spec": {"notification": {"template": template}}})


class TestLoadBlockTemplate:
    """Test load_block_template()."""

    def test_inline_content_wins(self, tmp_path: Path) -> None:
        config = _template_config(content="[]", uri="missing.json")
        assert load_block_template(config, tmp_path) == "[]"

    def test_relative_uri(self, tmp_path: Path) -> None:
        """Relative paths resolve against base_dir."""
        (tmp_path / "slack.json").write_text('[{"type": "divider"}]', encoding="utf-8")
        config = _template_config(uri="slack.json")
        assert load_block_template(config, tmp_path) == '[{"type": "divider"}]'

    def test_file_uri(self, tmp_path: Path) -> None:
        template_path = tmp_path / "slack.json"
        template_path.write_text("[]", encoding="utf-8")
        config = _template_config(uri=template_path.as_uri())
        assert load_block_template(config) == "[]"

    def test_unsupported_scheme(self, tmp_path: Path) -> None:
        config = _template_config(uri="gs://bucket/slack.json")
        with pytest.raises(ConfigError, match="Unsupported template URI scheme"):
            load_block_template(config, tmp_path)

    def test_missing_file(self, tmp_path: Path) -> None:
        config = _template_config(uri="absent.json")
        with pytest.raises(ConfigError, match="Cannot read block template"):
            load_block_template(config, tmp_path)

    def test_no_template(self) -> None:
        with pytest.raises(ConfigError, match="must set"):
            load_block_template(NotifierConfig())
