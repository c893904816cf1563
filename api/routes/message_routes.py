"""
Message routes: list, clear, and send (streamed tutor reply).
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy.orm import Session as DBSession

from api.bootstrap import get_relay
from api.config import get_db
from api.models.models import Message
from api.schemas.chat_schemas import (
    ClearMessagesResponse,
    FallbackMessageResponse,
    MessageResponse,
    SendMessageRequest,
)
from api.services.chat_service import ChatService
from api.services.completion_relay import CompletionRelay, RelayFallback
from api.utils.common import iso_format
from api.utils.logger import configure_logging

logger = configure_logging()

message_routes = APIRouter()


def message_response(m: Message) -> MessageResponse:
    return MessageResponse(
        id=m.id,
        chat_id=m.chat_id,
        role=m.role,
        content=m.content,
        created_at=iso_format(m.created_at),
    )


@message_routes.get("/messages", response_model=list[MessageResponse])
async def list_messages(
    chat_id: Optional[str] = Query(None, alias="chatId"),
    db: DBSession = Depends(get_db),
) -> list[MessageResponse]:
    """Messages of a chat in conversation order."""
    return [message_response(m) for m in ChatService(db).list_messages(chat_id)]


@message_routes.delete("/messages", response_model=ClearMessagesResponse)
async def clear_messages(
    chat_id: Optional[str] = Query(None, alias="chatId"),
    db: DBSession = Depends(get_db),
) -> ClearMessagesResponse:
    return ClearMessagesResponse(deleted=ChatService(db).clear_messages(chat_id))


@message_routes.post("/messages")
async def send_message(
    req: SendMessageRequest,
    db: DBSession = Depends(get_db),
    relay: CompletionRelay = Depends(get_relay),
):
    """
    Store the user turn (unless rerun) and stream the tutor's reply as raw text chunks.

    The body is text/plain with no framing; the client concatenates bytes in arrival order.
    When the provider fails before emitting anything, the stored fallback turn is returned
    as JSON (status 200) with an "error" field instead.
    """
    logger.info(
        "message request chat_id=%s tutor_id=%s content_length=%s rerun=%s",
        req.chat_id,
        req.tutor_id,
        len(req.content or ""),
        req.rerun,
    )
    result = await relay.respond(
        db,
        req.chat_id,
        req.tutor_id,
        req.content,
        rerun=req.rerun,
        message_id=req.message_id,
    )
    if isinstance(result, RelayFallback):
        m = result.message
        body = FallbackMessageResponse(
            id=m.id,
            chat_id=m.chat_id,
            role=m.role,
            content=m.content,
            created_at=iso_format(m.created_at),
            error=result.error,
        )
        return JSONResponse(status_code=200, content=body.model_dump(by_alias=True))

    return StreamingResponse(
        result.chunks,
        media_type="text/plain; charset=utf-8",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        },
    )
