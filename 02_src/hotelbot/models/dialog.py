"""Dialog stack and conversation session models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class DialogFrame:
    """One active invocation of a dialog."""

    dialog: str
    step_index: int = 0
    dialog_data: dict[str, Any] = field(default_factory=dict)
    awaiting_input: bool = False
    prompt: str | None = None  # re-sent when a child dialog returns here

    def to_dict(self) -> dict:
        return {
            "dialog": self.dialog,
            "step_index": self.step_index,
            "dialog_data": dict(self.dialog_data),
            "awaiting_input": self.awaiting_input,
            "prompt": self.prompt,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DialogFrame":
        return cls(
            dialog=data["dialog"],
            step_index=int(data.get("step_index", 0)),
            dialog_data=dict(data.get("dialog_data") or {}),
            awaiting_input=bool(data.get("awaiting_input", False)),
            prompt=data.get("prompt"),
        )


@dataclass
class Session:
    """Per-conversation state that survives between turns."""

    address: str
    stack: list[DialogFrame] = field(default_factory=list)
    last_message: str | None = None
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def active_frame(self) -> DialogFrame | None:
        """Top of the stack, or None between dialogs."""
        return self.stack[-1] if self.stack else None

    def push(self, dialog: str) -> DialogFrame:
        frame = DialogFrame(dialog=dialog)
        self.stack.append(frame)
        return frame

    def pop(self) -> DialogFrame | None:
        return self.stack.pop() if self.stack else None

    def clear(self) -> None:
        self.stack.clear()

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "stack": [frame.to_dict() for frame in self.stack],
            "last_message": self.last_message,
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Session":
        updated_at = data.get("updated_at")
        return cls(
            address=data["address"],
            stack=[DialogFrame.from_dict(f) for f in data.get("stack", [])],
            last_message=data.get("last_message"),
            updated_at=(
                datetime.fromisoformat(updated_at)
                if updated_at
                else datetime.now(timezone.utc)
            ),
        )
