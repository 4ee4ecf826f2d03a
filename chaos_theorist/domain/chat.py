from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from .systems import DomainModel, utcnow


class Sender(str, Enum):
    USER = "user"
    AI = "ai"


class AIModel(str, Enum):
    GEMINI = "Gemini"
    CHATGPT = "ChatGPT"
    CLAUDE = "Claude"
    SYSTEM = "System"


class ChatMessage(DomainModel):
    id: str = Field(..., min_length=1)
    text: str
    sender: Sender
    timestamp: datetime
    ai_model: Optional[AIModel] = None


def new_message(text: str, sender: Sender, *, ai_model: Optional[AIModel] = None) -> ChatMessage:
    return ChatMessage(
        id=f"msg-{uuid.uuid4().hex[:12]}",
        text=text,
        sender=sender,
        timestamp=utcnow(),
        ai_model=ai_model if sender is Sender.AI else None,
    )


__all__ = ["Sender", "AIModel", "ChatMessage", "new_message"]
