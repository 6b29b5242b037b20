"""
Unit tests for platform boundary schemas.
Tests narrowing of raw SDK content blocks.
"""

from types import SimpleNamespace

import pytest

from cardiac_assistant.models.schemas import (
    OtherContent,
    PlatformMessage,
    TextContent,
    enum_value,
    narrow_content,
)


class _StrEnumLike:
    def __init__(self, value):
        self.value = value


class TestNarrowContent:
    """Tests for turning SDK content blocks into tagged variants."""

    def test_sdk_text_block(self):
        """Should read text.value from SDK objects."""
        raw = SimpleNamespace(type="text", text=SimpleNamespace(value="Rest today."))

        assert narrow_content(raw) == TextContent(value="Rest today.")

    def test_dict_text_block(self):
        raw = {"type": "text", "text": {"value": "Rest today."}}

        assert narrow_content(raw) == TextContent(value="Rest today.")

    def test_plain_string_text(self):
        assert narrow_content({"type": "text", "text": "hi"}) == TextContent(value="hi")

    def test_enum_typed_block(self):
        raw = SimpleNamespace(type=_StrEnumLike("text"), text=SimpleNamespace(value="ok"))

        assert narrow_content(raw) == TextContent(value="ok")

    @pytest.mark.parametrize("block_type", ["image_file", "image_url", "file_citation"])
    def test_non_text_block(self, block_type):
        result = narrow_content({"type": block_type, "image_file": {"file_id": "f1"}})

        assert result == OtherContent(type=block_type)

    def test_text_block_without_string_value(self):
        """Should not trust a text block whose value is not a string."""
        raw = {"type": "text", "text": {"value": 42}}

        assert narrow_content(raw) == OtherContent(type="text")

    def test_missing_type(self):
        assert narrow_content({}) == OtherContent(type="unknown")


class TestPlatformMessage:
    """Tests for reading text out of a message."""

    def test_first_text_skips_other_blocks(self):
        message = PlatformMessage(
            role="assistant",
            content=(OtherContent(type="image_file"), TextContent(value="caption")),
        )

        assert message.first_text() == "caption"

    def test_first_text_none(self):
        message = PlatformMessage(role="assistant", content=(OtherContent(),))

        assert message.first_text() is None

    def test_content_validates_tagged_dicts(self):
        message = PlatformMessage.model_validate(
            {"role": "assistant", "content": [{"kind": "text", "value": "hi"}]}
        )

        assert message.content == (TextContent(value="hi"),)


def test_enum_value_passthrough():
    assert enum_value("completed") == "completed"
    assert enum_value(_StrEnumLike("completed")) == "completed"
