"""Tests for context/messages.py module.

Covers:
- outbound wire shapes (updateTree, setLoading, notify)
- parse_inbound() validation and rejection
"""

from __future__ import annotations

from typing import Any

import pytest

from wit.context.messages import (
    Notify,
    Ready,
    SetLoading,
    UpdateDescription,
    UpdateTree,
    parse_inbound,
)
from wit.context.models import ContextTree, Node, NodeType
from wit.core.errors import ErrorCode, MessageError


class TestOutboundMessages:
    """Tests for messages sent to the surface."""

    def test_update_tree_wire_shape(self) -> None:
        # Given
        focused = Node(name="foo", path="a.py#foo", type=NodeType.FUNCTION, description="d")
        file_node = Node(name="a.py", path="a.py", type=NodeType.FILE, description="f")
        tree = ContextTree(nodes=(file_node, focused), focused=focused)

        # When
        wire = UpdateTree.from_tree(tree).to_wire()

        # Then
        assert wire["command"] == "updateTree"
        assert [n["path"] for n in wire["data"]["nodes"]] == ["a.py", "a.py#foo"]
        assert wire["data"]["focused"]["type"] == "function"

    def test_update_tree_without_focus(self) -> None:
        wire = UpdateTree.from_tree(ContextTree()).to_wire()
        assert wire == {"command": "updateTree", "data": {"nodes": [], "focused": None}}

    def test_set_loading_uses_camel_case(self) -> None:
        assert SetLoading(is_loading=True).to_wire() == {"command": "setLoading", "isLoading": True}

    def test_notify(self) -> None:
        wire = Notify(level="error", message="Database unavailable").to_wire()
        assert wire == {"command": "notify", "level": "error", "message": "Database unavailable"}


class TestParseInbound:
    """Tests for parse_inbound function."""

    def test_update_description(self) -> None:
        message = parse_inbound(
            {"command": "updateDescription", "path": "src/a.ts", "description": "Entry point"}
        )
        assert isinstance(message, UpdateDescription)
        assert message.path == "src/a.ts"
        assert message.description == "Entry point"

    def test_empty_description_is_allowed(self) -> None:
        """Clearing a description is a valid edit."""
        message = parse_inbound({"command": "updateDescription", "path": "src", "description": ""})
        assert isinstance(message, UpdateDescription)

    def test_ready(self) -> None:
        assert isinstance(parse_inbound({"command": "ready"}), Ready)

    def test_unknown_command_rejected(self) -> None:
        with pytest.raises(MessageError) as exc_info:
            parse_inbound({"command": "deleteEverything"})
        assert exc_info.value.code == ErrorCode.MESSAGE_UNKNOWN_COMMAND

    def test_missing_command_rejected(self) -> None:
        with pytest.raises(MessageError) as exc_info:
            parse_inbound({"path": "src"})
        assert exc_info.value.code == ErrorCode.MESSAGE_UNKNOWN_COMMAND

    @pytest.mark.parametrize(
        "raw",
        [
            {"command": "updateDescription", "description": "x"},
            {"command": "updateDescription", "path": "", "description": "x"},
            {"command": "updateDescription", "path": "src"},
            {"command": "updateDescription", "path": "src", "description": 5},
        ],
    )
    def test_invalid_fields_rejected(self, raw: dict[str, Any]) -> None:
        with pytest.raises(MessageError) as exc_info:
            parse_inbound(raw)
        assert exc_info.value.code == ErrorCode.MESSAGE_INVALID

    @pytest.mark.parametrize("raw", [None, "ready", ["ready"], 3])
    def test_non_objects_rejected(self, raw: Any) -> None:
        with pytest.raises(MessageError) as exc_info:
            parse_inbound(raw)
        assert exc_info.value.code == ErrorCode.MESSAGE_INVALID
