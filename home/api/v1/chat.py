"""Maintenance assistant chat endpoint."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from home.api.deps import get_chat_assistant
from home.schemas.chat import ChatError, ChatRequest, ChatResponse
from home.services.chat import ChatAssistant, ChatNotConfiguredError
from home.utils.logging_config import logger

router = APIRouter()


@router.post(
    "",
    response_model=ChatResponse,
    responses={400: {"model": ChatError}, 500: {"model": ChatError}},
)
async def chat(
    body: ChatRequest, assistant: ChatAssistant = Depends(get_chat_assistant)
):
    if not body.message or not body.message.strip():
        return JSONResponse(status_code=400, content={"error": "Message is required"})

    try:
        reply = await assistant.reply(body.message, body.conversationHistory)
    except ChatNotConfiguredError as e:
        logger.error(f"Chat unavailable: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})
    except Exception as e:
        return JSONResponse(
            status_code=500, content={"error": str(e) or "Failed to get AI response"}
        )
    return ChatResponse(response=reply)
