"""
Response payloads attached to slash command acknowledgements.

``ResponseBuilder.build_response`` is where command handling logic plugs in;
the dispatch loop only ever talks to that interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from socketmode.config import ResponseSettings

if TYPE_CHECKING:
    from shared.envelope import SlashCommand


@dataclass(frozen=True)
class Text:
    type: str
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class Accessory:
    type: str
    text: Text
    value: str
    action_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "text": self.text.to_dict(),
            "value": self.value,
            "action_id": self.action_id,
        }


@dataclass(frozen=True)
class Block:
    text: Text
    type: str = "section"
    accessory: Optional[Accessory] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": self.type, "text": self.text.to_dict()}
        if self.accessory is not None:
            result["accessory"] = self.accessory.to_dict()
        return result


@dataclass
class ResponsePayload:
    text: str = ""
    response_type: str = "ephemeral"
    blocks: List[Block] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.blocks is None:
            raise ValueError("blocks must be a sequence, not None")
        action_ids = [b.accessory.action_id for b in self.blocks if b.accessory is not None]
        if len(action_ids) != len(set(action_ids)):
            raise ValueError(f"Duplicate action_id in blocks: {action_ids}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "response_type": self.response_type,
            "blocks": [b.to_dict() for b in self.blocks],
        }


def button(label: str, value: str, action_id: str) -> Accessory:
    return Accessory(type="button", text=Text("plain_text", label), value=value, action_id=action_id)


class ResponseBuilder(ABC):
    """Turns an incoming slash command into the payload shown to the user."""

    @abstractmethod
    def build_response(self, command: SlashCommand) -> ResponsePayload:
        ...


class DemoResponseBuilder(ResponseBuilder):
    """
    Answers every command with the same ephemeral section and a button.

    The strings come from ``ResponseSettings`` so they can be changed from
    the YAML config without touching code.
    """

    def __init__(self, settings: Optional[ResponseSettings] = None) -> None:
        self.settings = settings or ResponseSettings()

    def build_response(self, command: SlashCommand) -> ResponsePayload:
        s = self.settings
        return ResponsePayload(
            text=s.text,
            response_type=s.response_type,
            blocks=[
                Block(
                    text=Text("mrkdwn", s.block_text),
                    accessory=button(s.button_label, s.button_value, s.action_id),
                )
            ],
        )
