"""Message renderer: build event to Slack webhook message.

The renderer owns two compiled templates (a required block template and an
optional plain-text template) and turns a Build plus resolved param bindings
into a WebhookMessage with exactly one colored attachment.

Templates see the following view:

- ``build`` - the build's wire-form mapping (``build.status``,
  ``build.logUrl``, ``build.substitutions._MY_VAR`` ...)
- ``params`` - resolved param bindings
- every build field at top level as well (``status``, ``projectId`` ...)

Example:
    >>> renderer = MessageRenderer(
    ...     '[{"type": "section", "text": {"type": "mrkdwn", "text": "{{ status }}"}}]'
    ... )
    >>> msg = renderer.render(Build(status="SUCCESS"))
    >>> msg.attachments[0].color
    '#22bb33'

"""

import logging
from collections.abc import Mapping
from typing import Any

from slack_build_notifier.notifications.blocks import Attachment, WebhookMessage, parse_blocks
from slack_build_notifier.notifications.events import Build, BuildStatus
from slack_build_notifier.notifications.templating import (
    BLOCK_TEMPLATE_NAME,
    MESSAGE_TEMPLATE_NAME,
    compile_template,
    render_template,
)

logger = logging.getLogger(__name__)

SUCCESS_COLOR = "#22bb33"
FAILURE_COLOR = "#bb2124"
NEUTRAL_COLOR = "#f0ad4e"

# Statuses without an entry here (pending, queued, working, cancelled,
# expired, unknown, unrecognised names) render with NEUTRAL_COLOR
STATUS_COLORS: dict[str, str] = {
    BuildStatus.SUCCESS: SUCCESS_COLOR,
    BuildStatus.FAILURE: FAILURE_COLOR,
    BuildStatus.INTERNAL_ERROR: FAILURE_COLOR,
    BuildStatus.TIMEOUT: FAILURE_COLOR,
}


def status_color(status: str) -> str:
    """Return the attachment color for a build status. Never raises."""
    return STATUS_COLORS.get(status, NEUTRAL_COLOR)


def build_template_view(build: Build, bindings: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Assemble the mapping templates are rendered against."""
    build_view = build.to_view()
    view: dict[str, Any] = dict(build_view)
    view["build"] = build_view
    view["params"] = dict(bindings or {})
    return view


class MessageRenderer:
    """Renders build events into Slack webhook messages.

    Both templates are compiled on construction, so a syntax error surfaces
    at configuration time. The renderer holds no per-event state and can be
    shared between concurrent notifications.

    Attributes:
        has_text_template: Whether a plain-text template is configured.

    """

    def __init__(self, block_template: str, text_template: str | None = None) -> None:
        """Compile the templates.

        Args:
            block_template: Template that renders to a Block Kit JSON array.
            text_template: Optional template for the top-level message text.
                None or empty disables the text field.

        Raises:
            TemplateParseError: If either template has invalid syntax.

        """
        self._block_template = compile_template(block_template, BLOCK_TEMPLATE_NAME)
        self._text_template = (
            compile_template(text_template, MESSAGE_TEMPLATE_NAME) if text_template else None
        )

    @property
    def has_text_template(self) -> bool:
        return self._text_template is not None

    def render(self, build: Build, bindings: Mapping[str, str] | None = None) -> WebhookMessage:
        """Render a build into a webhook message.

        Args:
            build: Build event view.
            bindings: Resolved param bindings, exposed as ``params``.

        Returns:
            WebhookMessage with one attachment; ``text`` is set only when a
            text template is configured.

        Raises:
            TemplateRenderError: If a template fails to execute.
            BlockParseError: If the block template output is not a valid
                block array.

        """
        color = status_color(build.status)
        view = build_template_view(build, bindings)

        rendered_blocks = render_template(self._block_template, view, BLOCK_TEMPLATE_NAME)
        blocks = parse_blocks(rendered_blocks)

        text: str | None = None
        if self._text_template is not None:
            text = render_template(self._text_template, view, MESSAGE_TEMPLATE_NAME)

        logger.debug(
            "Rendered build %s (status=%s) into %d block(s), color=%s",
            build.id,
            build.status,
            len(blocks),
            color,
        )
        return WebhookMessage(text=text, attachments=[Attachment(color=color, blocks=blocks)])
