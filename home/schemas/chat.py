"""Request and response bodies for the chat assistant endpoint."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class ChatTurn(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class ChatRequest(BaseModel):
    message: Optional[str] = None
    conversationHistory: List[ChatTurn] = Field(default_factory=list)


class ChatResponse(BaseModel):
    response: str


class ChatError(BaseModel):
    error: str
