"""Notifier configuration models and loading.

The configuration file follows the Cloud Build notifier layout:

    apiVersion: cloud-build-notifiers/v1
    kind: SlackNotifier
    metadata:
      name: example-slack-notifier
    spec:
      notification:
        filter: build.status == Build.Status.SUCCESS
        params:
          messageTemplate: "Build {{ status }} for {{ projectId }}"
        delivery:
          webhookUrl:
            secretRef: webhook-url
        template:
          type: golang
          uri: slack.json
      secrets:
        - name: webhook-url
          value: env:SLACK_WEBHOOK_URL

Usage:
    config = load_config(Path("notifier.yaml"))
    block_template = load_block_template(config, base_dir=Path("."))
"""

import logging
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from slack_build_notifier.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

# Environment variable consulted by the CLI when --config is not given
CONFIG_ENV_VAR = "SLACK_NOTIFIER_CONFIG"

# Maximum config file size (1MB) - protects against loading arbitrary files
MAX_CONFIG_SIZE = 1024 * 1024

# Name of the notification param holding the optional plain-text template
MESSAGE_TEMPLATE_PARAM = "messageTemplate"

# Name of the delivery field holding the webhook URL secret reference
WEBHOOK_URL_SECRET_NAME = "webhookUrl"


class _ConfigModel(BaseModel):
    """Base for config models: immutable, camelCase aliases, extras ignored."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class MetadataConfig(_ConfigModel):
    """Notifier metadata.

    Attributes:
        name: Human-readable notifier name, used in log messages.

    """

    name: str = "slack-notifier"


class TemplateConfig(_ConfigModel):
    """Block template source.

    Exactly one of ``content`` or ``uri`` is expected. ``type`` is kept for
    compatibility with existing notifier configs and is not interpreted.

    Attributes:
        type: Template dialect label from the original config.
        uri: Path or file:// URI of the block template.
        content: Inline block template.

    """

    type: str = "golang"
    uri: str | None = None
    content: str | None = None


class NotificationConfig(_ConfigModel):
    """The ``spec.notification`` section.

    Attributes:
        filter: Filter expression; empty string accepts every build.
        params: Param bindings; values may reference the build via
            ``$(build.<path>)``.
        delivery: Delivery settings (webhook secret reference).
        template: Block template source.

    """

    filter: str = ""
    params: dict[str, str] = Field(default_factory=dict)
    delivery: dict[str, Any] = Field(default_factory=dict)
    template: TemplateConfig | None = None


class SecretConfig(_ConfigModel):
    """A named secret resource.

    Attributes:
        name: Local name used by ``secretRef`` fields.
        value: Resource name handed to the SecretGetter.

    """

    name: str
    value: str


class SpecConfig(_ConfigModel):
    """The ``spec`` section."""

    notification: NotificationConfig = Field(default_factory=NotificationConfig)
    secrets: list[SecretConfig] = Field(default_factory=list)


class NotifierConfig(_ConfigModel):
    """Root notifier configuration."""

    api_version: str = Field(default="cloud-build-notifiers/v1", alias="apiVersion")
    kind: str = "SlackNotifier"
    metadata: MetadataConfig = Field(default_factory=MetadataConfig)
    spec: SpecConfig = Field(default_factory=SpecConfig)

    @property
    def message_template(self) -> str | None:
        """Plain-text template from params, or None when unset or empty."""
        return self.spec.notification.params.get(MESSAGE_TEMPLATE_PARAM) or None


def get_secret_ref(delivery: dict[str, Any], field_name: str) -> str:
    """Return the ``secretRef`` of a delivery field.

    Args:
        delivery: The ``spec.notification.delivery`` mapping.
        field_name: Delivery field holding the reference (e.g. "webhookUrl").

    Returns:
        The referenced secret name.

    Raises:
        ConfigError: If the field or its secretRef is missing.

    """
    field = delivery.get(field_name)
    if not isinstance(field, dict):
        raise ConfigError(f"delivery config is missing field {field_name!r}")
    ref = field.get("secretRef")
    if not isinstance(ref, str) or not ref:
        raise ConfigError(f"delivery field {field_name!r} has no secretRef")
    return ref


def find_secret_resource_name(secrets: list[SecretConfig], ref: str) -> str:
    """Map a secretRef to its resource name in ``spec.secrets``.

    Raises:
        ConfigError: If no secret with that name is declared.

    """
    for secret in secrets:
        if secret.name == ref:
            return secret.value
    raise ConfigError(f"no secret named {ref!r} in spec.secrets")


def load_config(path: Path) -> NotifierConfig:
    """Load and validate a notifier config file.

    Args:
        path: Path to the YAML config.

    Returns:
        Validated NotifierConfig.

    Raises:
        ConfigError: If the file is missing, too large, not valid YAML, or
            does not match the schema.

    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    size = path.stat().st_size
    if size > MAX_CONFIG_SIZE:
        raise ConfigError(f"Config file too large: {path} ({size} bytes, max {MAX_CONFIG_SIZE})")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be a mapping, got {type(data).__name__}")

    try:
        config = NotifierConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid notifier config in {path}:\n{e}") from e

    logger.debug("Loaded notifier config %r from %s", config.metadata.name, path)
    return config


def load_block_template(config: NotifierConfig, base_dir: Path | None = None) -> str:
    """Return the block template text for a config.

    Inline ``content`` wins over ``uri``. A relative ``uri`` is resolved
    against ``base_dir`` (normally the config file's directory).

    Args:
        config: Loaded notifier config.
        base_dir: Directory for relative template paths.

    Returns:
        Raw block template source.

    Raises:
        ConfigError: If no template is configured, the URI scheme is not
            supported, or the file cannot be read.

    """
    template = config.spec.notification.template
    if template is None or (template.content is None and not template.uri):
        raise ConfigError("spec.notification.template must set 'content' or 'uri'")

    if template.content is not None:
        return template.content

    assert template.uri is not None
    parsed = urlparse(template.uri)
    if parsed.scheme == "file":
        template_path = Path(parsed.path)
    elif parsed.scheme == "":
        template_path = Path(template.uri)
    else:
        raise ConfigError(
            f"Unsupported template URI scheme {parsed.scheme!r}: {template.uri} "
            "(only local paths and file:// are supported)"
        )

    if not template_path.is_absolute() and base_dir is not None:
        template_path = base_dir / template_path

    try:
        return template_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read block template {template_path}: {e}") from e
