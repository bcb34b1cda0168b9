# src/pipeline/stage.py - v1
"""Stage definition: one named analysis perspective with fixed instructions."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from codereview.core.errors import ConfigurationError
from codereview.llm.models import Message


class Stage(BaseModel):
    """Immutable stage descriptor.

    Stages differ only in data, so there is a single class and no
    subclassing. Many stages share one gateway.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    instructions: str

    @field_validator("name", "instructions")
    @classmethod
    def validate_not_blank(cls, v: str, info) -> str:  # noqa: N805
        if not v.strip():
            raise ConfigurationError(f"Stage {info.field_name} must not be blank")
        return v.strip() if info.field_name == "name" else v

    def render_system_message(self) -> Message:
        """Wrap the instructions as a system-role message."""
        return Message(role="system", content=self.instructions)
