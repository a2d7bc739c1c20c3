"""Notification pipeline: build events to Slack webhook messages.

Public API:
    Build, BuildStatus, parse_build: build event model
    MessageRenderer, status_color: message rendering
    parse_blocks, WebhookMessage, Attachment: Block Kit payload
    make_filter, ExpressionFilter: event filters
    ParamBindingResolver: param bindings
    EnvSecretGetter, MappingSecretGetter: secret lookup
    Notifier, NotificationOutcome, SlackNotifier: delivery
"""

from slack_build_notifier.notifications.base import NotificationOutcome, Notifier
from slack_build_notifier.notifications.bindings import BindingResolver, ParamBindingResolver
from slack_build_notifier.notifications.blocks import (
    ActionsBlock,
    Attachment,
    Block,
    ButtonElement,
    ContextBlock,
    DividerBlock,
    HeaderBlock,
    ImageBlock,
    ImageElement,
    InteractiveElement,
    OtherBlock,
    SectionBlock,
    TextObject,
    WebhookMessage,
    parse_blocks,
)
from slack_build_notifier.notifications.events import Build, BuildStatus, parse_build
from slack_build_notifier.notifications.filters import (
    AcceptAllFilter,
    EventFilter,
    ExpressionFilter,
    make_filter,
)
from slack_build_notifier.notifications.renderer import (
    FAILURE_COLOR,
    NEUTRAL_COLOR,
    STATUS_COLORS,
    SUCCESS_COLOR,
    MessageRenderer,
    build_template_view,
    status_color,
)
from slack_build_notifier.notifications.secrets import (
    EnvSecretGetter,
    MappingSecretGetter,
    SecretGetter,
)
from slack_build_notifier.notifications.slack import SlackNotifier
from slack_build_notifier.notifications.templating import json_escape, replace

__all__ = [
    # Events
    "Build",
    "BuildStatus",
    "parse_build",
    # Rendering
    "MessageRenderer",
    "build_template_view",
    "status_color",
    "STATUS_COLORS",
    "SUCCESS_COLOR",
    "FAILURE_COLOR",
    "NEUTRAL_COLOR",
    "json_escape",
    "replace",
    # Blocks
    "Block",
    "SectionBlock",
    "DividerBlock",
    "HeaderBlock",
    "ContextBlock",
    "ActionsBlock",
    "ImageBlock",
    "TextObject",
    "ButtonElement",
    "ImageElement",
    "InteractiveElement",
    "OtherBlock",
    "Attachment",
    "WebhookMessage",
    "parse_blocks",
    # Filters
    "EventFilter",
    "AcceptAllFilter",
    "ExpressionFilter",
    "make_filter",
    # Bindings and secrets
    "BindingResolver",
    "ParamBindingResolver",
    "SecretGetter",
    "EnvSecretGetter",
    "MappingSecretGetter",
    # Notifiers
    "Notifier",
    "NotificationOutcome",
    "SlackNotifier",
]
