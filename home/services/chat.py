"""Maintenance assistant chat backed by a Gemini chat model."""

from typing import Optional, Sequence

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder
from langchain_google_genai import ChatGoogleGenerativeAI

from home.schemas.chat import ChatTurn
from home.settings import settings
from home.utils.logging_config import logger

FALLBACK_REPLY = "Sorry, I could not generate a response."

prompt = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "You are a helpful HOME (Housing Operations & Maintenance Engine) AI Assistant. "
            "You help users with maintenance questions, ticket tracking, contractor "
            "recommendations, scheduling, and property management. Be concise and helpful.",
        ),
        MessagesPlaceholder("history"),
        ("human", "{message}"),
    ]
)


class ChatNotConfiguredError(RuntimeError):
    pass


def build_llm() -> BaseChatModel:
    if not settings.GOOGLE_API_KEY:
        raise ChatNotConfiguredError("GOOGLE_API_KEY is not configured")
    return ChatGoogleGenerativeAI(
        model=settings.CHAT_MODEL,
        temperature=settings.CHAT_TEMPERATURE,
        max_output_tokens=settings.CHAT_MAX_TOKENS,
        google_api_key=settings.GOOGLE_API_KEY,
    )


def to_messages(history: Sequence[ChatTurn]) -> list[BaseMessage]:
    messages: list[BaseMessage] = []
    for turn in history:
        if turn.role == "assistant":
            messages.append(AIMessage(content=turn.content))
        elif turn.role == "user":
            messages.append(HumanMessage(content=turn.content))
    return messages


class ChatAssistant:
    def __init__(self, llm: Optional[BaseChatModel] = None):
        self._llm = llm

    @property
    def llm(self) -> BaseChatModel:
        if self._llm is None:
            self._llm = build_llm()
        return self._llm

    async def reply(self, message: str, history: Sequence[ChatTurn] = ()) -> str:
        chain = prompt | self.llm
        try:
            response = await chain.ainvoke(
                {"message": message, "history": to_messages(history)}
            )
        except Exception as e:
            logger.error(f"Chat model call failed: {e}", exc_info=True)
            raise
        content = response.content if isinstance(response.content, str) else ""
        return content.strip() or FALLBACK_REPLY
