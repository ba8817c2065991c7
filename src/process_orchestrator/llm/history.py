"""Chat history passed to completion providers.

Histories are plain pydantic models so they can live inside step state and be
dumped for debugging.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class ChatRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    role: ChatRole
    content: str


class ChatHistory(BaseModel):
    """An ordered sequence of chat messages."""

    messages: list[ChatMessage] = Field(default_factory=list)

    @classmethod
    def with_system_prompt(cls, prompt: str) -> ChatHistory:
        history = cls()
        history.add_system_message(prompt)
        return history

    def add_system_message(self, content: str) -> None:
        self.messages.append(ChatMessage(role=ChatRole.SYSTEM, content=content))

    def add_user_message(self, content: str) -> None:
        self.messages.append(ChatMessage(role=ChatRole.USER, content=content))

    def add_assistant_message(self, content: str) -> None:
        self.messages.append(ChatMessage(role=ChatRole.ASSISTANT, content=content))

    def to_messages(self) -> list[dict[str, str]]:
        return [{"role": m.role.value, "content": m.content} for m in self.messages]
