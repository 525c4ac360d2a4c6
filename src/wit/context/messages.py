"""Messages exchanged with the rendering surface.

Both directions are closed tagged unions keyed by ``command``. Inbound
payloads are validated before anything acts on them; unknown commands are
rejected.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from wit.context.models import ContextTree, Node
from wit.core.errors import MessageError

NotifyLevel = Literal["info", "warning", "error"]


class _Message(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Core -> surface
# =============================================================================


class TreePayload(BaseModel):
    """Serialized context tree."""

    nodes: list[Node]
    focused: Node | None = None

    @classmethod
    def from_tree(cls, tree: ContextTree) -> TreePayload:
        return cls(nodes=list(tree.nodes), focused=tree.focused)


class UpdateTree(_Message):
    command: Literal["updateTree"] = "updateTree"
    data: TreePayload

    @classmethod
    def from_tree(cls, tree: ContextTree) -> UpdateTree:
        return cls(data=TreePayload.from_tree(tree))


class SetLoading(_Message):
    command: Literal["setLoading"] = "setLoading"
    is_loading: bool = Field(alias="isLoading")


class Notify(_Message):
    command: Literal["notify"] = "notify"
    level: NotifyLevel = "info"
    message: str


OutboundMessage = Annotated[UpdateTree | SetLoading | Notify, Field(discriminator="command")]


# =============================================================================
# Surface -> core
# =============================================================================


class UpdateDescription(_Message):
    command: Literal["updateDescription"] = "updateDescription"
    path: str = Field(min_length=1)
    description: str


class Ready(_Message):
    """The panel (re)gained visibility and wants the current tree."""

    command: Literal["ready"] = "ready"


InboundMessage = Annotated[UpdateDescription | Ready, Field(discriminator="command")]

_INBOUND_COMMANDS = frozenset({"updateDescription", "ready"})
_inbound_adapter: TypeAdapter[UpdateDescription | Ready] = TypeAdapter(InboundMessage)


def parse_inbound(raw: Any) -> UpdateDescription | Ready:
    """Validate a surface message.

    Raises:
        MessageError: For non-objects, unknown commands, or missing fields.
    """
    if not isinstance(raw, dict):
        raise MessageError.invalid(f"expected an object, got {type(raw).__name__}")
    command = raw.get("command")
    if command not in _INBOUND_COMMANDS:
        raise MessageError.unknown_command(command)
    try:
        return _inbound_adapter.validate_python(raw)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise MessageError.invalid(f"{field}: {err['msg']}") from e
