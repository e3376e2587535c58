"""
Tests for the Reply value type

These tests verify payload validation and the convenience constructors.

Run with: python -m pytest tests/test_replies.py -v
"""

import dataclasses

import pytest

from respcli.protocol.replies import Reply, ReplyType


class TestReplyConstruction:
    """Test constructors and shape validation."""

    def test_constructors(self):
        assert Reply.simple("OK") == Reply(ReplyType.SIMPLE_STRING, "OK")
        assert Reply.error("ERR x") == Reply(ReplyType.ERROR, "ERR x")
        assert Reply.integer(1) == Reply(ReplyType.INTEGER, 1)
        assert Reply.bulk("v") == Reply(ReplyType.BULK_STRING, "v")
        assert Reply.null_bulk() == Reply.bulk(None)
        assert Reply.null_array() == Reply.array(None)

    def test_array_is_frozen_to_tuple(self):
        """Test list elements are stored as an immutable tuple."""
        reply = Reply.array([Reply.integer(1), Reply.integer(2)])

        assert isinstance(reply.value, tuple)
        assert reply == Reply.array((Reply.integer(1), Reply.integer(2)))

    def test_reply_is_immutable(self):
        reply = Reply.simple("OK")
        with pytest.raises(dataclasses.FrozenInstanceError):
            reply.value = "changed"

    @pytest.mark.parametrize("reply_type, value", [
        (ReplyType.SIMPLE_STRING, None),
        (ReplyType.ERROR, 5),
        (ReplyType.INTEGER, "5"),
        (ReplyType.INTEGER, True),
        (ReplyType.BULK_STRING, 5),
        (ReplyType.ARRAY, ["not a reply"]),
    ])
    def test_invalid_shapes(self, reply_type: ReplyType, value):
        """Test each type accepts only its own payload shape."""
        with pytest.raises(TypeError):
            Reply(reply_type, value)

    def test_is_null(self):
        assert Reply.null_bulk().is_null
        assert Reply.null_array().is_null
        assert not Reply.bulk("").is_null
        assert not Reply.array([]).is_null

    def test_is_error(self):
        assert Reply.error("ERR").is_error
        assert not Reply.simple("ERR").is_error
