"""
Chat routes: chat lifecycle (create, list by tutor, get, rename, delete with cascade).
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session as DBSession

from api.config import get_db
from api.errors import ValidationError
from api.models.models import Chat
from api.schemas.chat_schemas import (
    ChatResponse,
    CreateChatRequest,
    RenameChatRequest,
    SuccessResponse,
)
from api.services.chat_service import ChatService
from api.utils.common import iso_format

chat_routes = APIRouter()


def chat_response(c: Chat) -> ChatResponse:
    return ChatResponse(
        id=c.id,
        tutor_id=c.tutor_id,
        title=c.title,
        created_at=iso_format(c.created_at),
        updated_at=iso_format(c.updated_at),
    )


@chat_routes.get("/chats", response_model=list[ChatResponse])
async def list_chats(
    tutor_id: Optional[str] = Query(None, alias="tutorId"),
    db: DBSession = Depends(get_db),
) -> list[ChatResponse]:
    """List a tutor's chats, most recently active first."""
    return [chat_response(c) for c in ChatService(db).list_chats(tutor_id)]


@chat_routes.post("/chats", response_model=ChatResponse)
async def create_chat(req: CreateChatRequest, db: DBSession = Depends(get_db)) -> ChatResponse:
    return chat_response(ChatService(db).create_chat(req.tutor_id))


@chat_routes.get("/chats/{chat_id}", response_model=ChatResponse)
async def get_chat(chat_id: str, db: DBSession = Depends(get_db)) -> ChatResponse:
    return chat_response(ChatService(db).get_chat(chat_id))


@chat_routes.patch("/chats/{chat_id}", response_model=SuccessResponse)
async def rename_chat(chat_id: str, req: RenameChatRequest, db: DBSession = Depends(get_db)) -> SuccessResponse:
    if req.title is None:
        raise ValidationError("title is required")
    ChatService(db).rename_chat(chat_id, req.title.strip())
    return SuccessResponse()


@chat_routes.delete("/chats/{chat_id}", response_model=SuccessResponse)
async def delete_chat(chat_id: str, db: DBSession = Depends(get_db)) -> SuccessResponse:
    """Delete a chat together with all of its messages."""
    ChatService(db).delete_chat(chat_id)
    return SuccessResponse()
