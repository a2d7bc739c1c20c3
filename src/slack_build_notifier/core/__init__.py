"""Core module for slack-build-notifier configuration and errors.

This module provides:
- Configuration models and file loading via load_config()
- Block template loading via load_block_template()
- Custom exception hierarchy with NotifierError as base
"""

from slack_build_notifier.core.config import (
    CONFIG_ENV_VAR,
    MAX_CONFIG_SIZE,
    MESSAGE_TEMPLATE_PARAM,
    WEBHOOK_URL_SECRET_NAME,
    MetadataConfig,
    NotificationConfig,
    NotifierConfig,
    SecretConfig,
    SpecConfig,
    TemplateConfig,
    find_secret_resource_name,
    get_secret_ref,
    load_block_template,
    load_config,
)
from slack_build_notifier.core.exceptions import (
    BindingError,
    BlockParseError,
    ConfigError,
    DeliveryError,
    EventDecodeError,
    EventError,
    FilterError,
    FilterEvaluationError,
    NotifierError,
    SecretError,
    TemplateParseError,
    TemplateRenderError,
)

__all__ = [
    # Config constants
    "CONFIG_ENV_VAR",
    "MAX_CONFIG_SIZE",
    "MESSAGE_TEMPLATE_PARAM",
    "WEBHOOK_URL_SECRET_NAME",
    # Config models
    "MetadataConfig",
    "NotificationConfig",
    "NotifierConfig",
    "SecretConfig",
    "SpecConfig",
    "TemplateConfig",
    # Config functions
    "find_secret_resource_name",
    "get_secret_ref",
    "load_block_template",
    "load_config",
    # Exceptions
    "NotifierError",
    "ConfigError",
    "FilterError",
    "SecretError",
    "TemplateParseError",
    "EventError",
    "EventDecodeError",
    "FilterEvaluationError",
    "BindingError",
    "TemplateRenderError",
    "BlockParseError",
    "DeliveryError",
]
