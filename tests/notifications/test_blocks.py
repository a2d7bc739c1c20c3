"""Tests for Block Kit models and parse_blocks()."""

import logging

import pytest

from slack_build_notifier.core.exceptions import BlockParseError
from slack_build_notifier.notifications import (
    ActionsBlock,
    Attachment,
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


class TestParseBlocks:
    """Test strict block parsing."""

    def test_parses_every_supported_block_type(self) -> None:
        """Each supported block type maps to its model."""
        blocks = parse_blocks(
            """[
              {"type": "header", "text": {"type": "plain_text", "text": "Build"}},
              {"type": "section", "fields": [
                  {"type": "mrkdwn", "text": "*Status*"},
                  {"type": "plain_text", "text": "SUCCESS"}
              ]},
              {"type": "divider"},
              {"type": "context", "elements": [
                  {"type": "image", "image_url": "https://x/i.png", "alt_text": "logo"},
                  {"type": "mrkdwn", "text": "by ci"}
              ]},
              {"type": "actions", "elements": [
                  {"type": "button", "text": {"type": "plain_text", "text": "Open"},
                   "url": "https://x", "style": "primary"}
              ]},
              {"type": "image", "image_url": "https://x/chart.png", "alt_text": "chart"}
            ]"""
        )

        assert [type(b) for b in blocks] == [
            HeaderBlock,
            SectionBlock,
            DividerBlock,
            ContextBlock,
            ActionsBlock,
            ImageBlock,
        ]
        context = blocks[3]
        assert isinstance(context, ContextBlock)
        assert isinstance(context.elements[0], ImageElement)
        assert isinstance(context.elements[1], TextObject)
        actions = blocks[4]
        assert isinstance(actions, ActionsBlock)
        assert isinstance(actions.elements[0], ButtonElement)
        assert actions.elements[0].style == "primary"

    def test_section_with_image_accessory(self) -> None:
        """Section accessories may be images."""
        (block,) = parse_blocks(
            '[{"type": "section", "text": {"type": "mrkdwn", "text": "hi"},'
            ' "accessory": {"type": "image", "image_url": "https://x/a.png", "alt_text": "a"}}]'
        )
        assert isinstance(block, SectionBlock)
        assert isinstance(block.accessory, ImageElement)

    def test_rich_text_block_passes_through(self) -> None:
        """Documented block types without a dedicated model are accepted."""
        rendered = (
            '[{"type": "rich_text", "elements": [{"type": "rich_text_section",'
            ' "elements": [{"type": "text", "text": "Build failed",'
            ' "style": {"bold": true}}]}]}]'
        )
        (block,) = parse_blocks(rendered)
        assert isinstance(block, OtherBlock)
        message = WebhookMessage(attachments=[Attachment(color="#bb2124", blocks=[block])])
        dumped = message.to_payload()["attachments"][0]["blocks"][0]
        assert dumped["elements"][0]["elements"][0]["style"] == {"bold": True}

    def test_overflow_accessory(self) -> None:
        """Section accessories may be any documented interactive element."""
        (block,) = parse_blocks(
            '[{"type": "section", "text": {"type": "mrkdwn", "text": "Build"},'
            ' "accessory": {"type": "overflow", "action_id": "more", "options": ['
            '{"text": {"type": "plain_text", "text": "Retry"}, "value": "retry"}]}}]'
        )
        assert isinstance(block, SectionBlock)
        assert isinstance(block.accessory, InteractiveElement)
        assert block.accessory.type == "overflow"
        assert block.model_dump(mode="json")["accessory"]["options"][0]["value"] == "retry"

    def test_static_select_in_actions(self) -> None:
        (block,) = parse_blocks(
            '[{"type": "actions", "elements": [{"type": "static_select",'
            ' "placeholder": {"type": "plain_text", "text": "Env"},'
            ' "options": [{"text": {"type": "plain_text", "text": "prod"}, "value": "prod"}]}]}]'
        )
        assert isinstance(block, ActionsBlock)
        assert isinstance(block.elements[0], InteractiveElement)

    def test_empty_array(self) -> None:
        """An empty array parses to an empty list."""
        assert parse_blocks("[]") == []

    def test_unmodelled_fields_are_preserved(self) -> None:
        """Optional Slack fields not modelled here pass through."""
        (block,) = parse_blocks(
            '[{"type": "section", "text": {"type": "mrkdwn", "text": "x"}, "expand": true}]'
        )
        message = WebhookMessage(attachments=[Attachment(color="#000000", blocks=[block])])
        dumped = message.to_payload()["attachments"][0]["blocks"][0]
        assert dumped["expand"] is True

    @pytest.mark.parametrize(
        "rendered",
        [
            "",
            "not json",
            '{"type": "divider"}',
            '[{"type": "divider"},]',
            '[{"type": "unknown_block"}]',
            '[{"type": "section", "accessory": {"type": "hologram_picker"}}]',
            '[{"no_type": true}]',
            '[{"type": "section", "text": {"type": "rich", "text": "x"}}]',
            '[{"type": "header"}]',
        ],
    )
    def test_invalid_documents_fail(self, rendered: str) -> None:
        """Anything outside the block schema raises BlockParseError."""
        with pytest.raises(BlockParseError):
            parse_blocks(rendered)

    def test_failure_is_logged_with_prefix(self, caplog: pytest.LogCaptureFixture) -> None:
        """Parse failures log the bounded rendered text."""
        with caplog.at_level(logging.ERROR), pytest.raises(BlockParseError):
            parse_blocks("[oops")
        assert "failed to unmarshal templating JSON" in caplog.text
        assert "[oops" in caplog.text


class TestWebhookMessage:
    """Test payload serialization."""

    def test_payload_without_text(self) -> None:
        """Unset text is omitted from the payload."""
        message = WebhookMessage(
            attachments=[Attachment(color="#22bb33", blocks=parse_blocks('[{"type": "divider"}]'))]
        )
        assert message.to_payload() == {
            "attachments": [{"color": "#22bb33", "blocks": [{"type": "divider"}]}]
        }

    def test_payload_with_text(self) -> None:
        """Set text appears at the top level."""
        message = WebhookMessage(text="hello", attachments=[Attachment(color="#fff", blocks=[])])
        assert message.to_payload()["text"] == "hello"
