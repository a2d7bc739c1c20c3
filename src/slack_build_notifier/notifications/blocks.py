"""Slack Block Kit models and strict block parsing.

The rendered block template must be a JSON array of blocks. Each block is
validated against a discriminated union on ``type``; an unknown block type,
a non-array document or malformed JSON fails the whole parse. Optional
fields that are not modelled here are preserved so they reach Slack
unchanged. Documented block and element types without a dedicated model
(rich_text, input, overflow menus, selects, ...) are checked by ``type``
only.

Example:
    >>> blocks = parse_blocks('[{"type": "divider"}]')
    >>> blocks[0].type
    'divider'

"""

import logging
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from slack_build_notifier.core.exceptions import BlockParseError

logger = logging.getLogger(__name__)

# Rendered text included in parse errors is truncated to this many chars
MAX_ERROR_PREFIX_CHARS = 500


class _SlackModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class TextObject(_SlackModel):
    """Text composition object."""

    type: Literal["plain_text", "mrkdwn"]
    text: str
    emoji: bool | None = None
    verbatim: bool | None = None


class ButtonElement(_SlackModel):
    """Button element (section accessory or actions element)."""

    type: Literal["button"]
    text: TextObject
    action_id: str | None = None
    url: str | None = None
    value: str | None = None
    style: Literal["primary", "danger"] | None = None


class ImageElement(_SlackModel):
    """Image element (section accessory or context element)."""

    type: Literal["image"]
    image_url: str
    alt_text: str


class InteractiveElement(_SlackModel):
    """Other documented interactive elements, validated by type only.

    Menus, pickers, inputs and overflow menus carry many type-specific
    fields; they are passed to Slack unchanged.
    """

    type: Literal[
        "checkboxes",
        "datepicker",
        "datetimepicker",
        "email_text_input",
        "external_select",
        "file_input",
        "multi_channels_select",
        "multi_conversations_select",
        "multi_external_select",
        "multi_static_select",
        "multi_users_select",
        "number_input",
        "overflow",
        "plain_text_input",
        "radio_buttons",
        "rich_text_input",
        "static_select",
        "channels_select",
        "conversations_select",
        "users_select",
        "timepicker",
        "url_text_input",
        "workflow_button",
    ]
    action_id: str | None = None


Element = Annotated[
    ButtonElement | ImageElement | InteractiveElement, Field(discriminator="type")
]
ContextElement = Annotated[TextObject | ImageElement, Field(discriminator="type")]


class SectionBlock(_SlackModel):
    type: Literal["section"]
    text: TextObject | None = None
    fields: list[TextObject] | None = None
    accessory: Element | None = None
    block_id: str | None = None


class DividerBlock(_SlackModel):
    type: Literal["divider"]
    block_id: str | None = None


class HeaderBlock(_SlackModel):
    type: Literal["header"]
    text: TextObject
    block_id: str | None = None


class ContextBlock(_SlackModel):
    type: Literal["context"]
    elements: list[ContextElement]
    block_id: str | None = None


class ActionsBlock(_SlackModel):
    type: Literal["actions"]
    elements: list[Element]
    block_id: str | None = None


class ImageBlock(_SlackModel):
    type: Literal["image"]
    image_url: str
    alt_text: str
    title: TextObject | None = None
    block_id: str | None = None


class OtherBlock(_SlackModel):
    """Other documented block types, validated by type only."""

    type: Literal["rich_text", "input", "file", "video", "markdown", "table"]
    block_id: str | None = None


Block = Annotated[
    SectionBlock
    | DividerBlock
    | HeaderBlock
    | ContextBlock
    | ActionsBlock
    | ImageBlock
    | OtherBlock,
    Field(discriminator="type"),
]

_blocks_adapter: TypeAdapter[list[Block]] = TypeAdapter(list[Block])


class Attachment(BaseModel):
    """Colored attachment wrapping a block list."""

    model_config = ConfigDict(frozen=True)

    color: str
    blocks: list[Block]


class WebhookMessage(BaseModel):
    """Incoming-webhook message body.

    Attributes:
        text: Top-level summary text, omitted from the payload when None.
        attachments: Colored attachments (one per build notification).

    """

    model_config = ConfigDict(frozen=True)

    text: str | None = None
    attachments: list[Attachment]

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-ready payload, without unset fields."""
        return self.model_dump(mode="json", exclude_none=True)


def _truncate(text: str, limit: int = MAX_ERROR_PREFIX_CHARS) -> str:
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def parse_blocks(rendered: str) -> list[Block]:
    """Parse rendered template output as a Block Kit array.

    Args:
        rendered: Output of the block template.

    Returns:
        Blocks in source order.

    Raises:
        BlockParseError: If the text is not JSON, not an array, or any block
            does not match the schema. The message carries a bounded prefix
            of the rendered text.

    """
    try:
        return _blocks_adapter.validate_json(rendered)
    except ValidationError as e:
        prefix = _truncate(rendered)
        logger.error(
            "failed to unmarshal templating JSON. JSON (first %d chars): %s",
            MAX_ERROR_PREFIX_CHARS,
            prefix,
        )
        first = e.errors(include_url=False)[0]
        location = ".".join(str(part) for part in first["loc"]) or "<root>"
        raise BlockParseError(
            f"failed to unmarshal templating JSON: {first['msg']} at {location} "
            f"({e.error_count()} error(s)). Rendered JSON (first "
            f"{MAX_ERROR_PREFIX_CHARS} chars): {prefix}",
            rendered_prefix=prefix,
        ) from e
