"""
Chat endpoint routes.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Query, Response

from legalswami.config import settings
from legalswami.dependencies import get_chat_service
from legalswami.models import ChatRecord, ChatRequest
from legalswami.services.chat_service import ChatService

router = APIRouter(
    prefix="/api/v1/chat",
    tags=["chat"],
    responses={
        503: {"description": "Service Unavailable - All models failed"},
    },
)

GUEST_USER_ID = "guest"


def resolve_user_id(x_user_id: Optional[str], x_request_id: Optional[str]) -> str:
    """
    Pick the user id for a request.

    X-User-Id wins; otherwise a stable id is derived from X-Request-Id;
    otherwise the request is attributed to the guest user.
    """
    if x_user_id:
        return x_user_id
    if x_request_id:
        return f"user_{uuid.uuid5(uuid.NAMESPACE_OID, x_request_id).hex[:12]}"
    return GUEST_USER_ID


@router.post(
    "/send",
    response_model=ChatRecord,
    summary="Ask a legal question",
    description="""
    Send a question to the legal assistant and store the exchange.

    The question is framed with the assistant's system prompt and dispatched
    upstream. Credentials rotate per request; if the current model fails,
    the next configured model is tried until one answers or every model
    has failed once.

    **Error Scenarios:**
    - 422: Empty message
    - 503: Every configured model failed for this request
    """,
)
async def send_message(
    request: ChatRequest,
    x_user_id: Optional[str] = Header(default=None),
    x_request_id: Optional[str] = Header(default=None),
    chat_service: ChatService = Depends(get_chat_service),
) -> ChatRecord:
    return await chat_service.process_message(request, resolve_user_id(x_user_id, x_request_id))


@router.get(
    "/history",
    response_model=List[ChatRecord],
    summary="Get chat history",
    description="Page through a user's stored exchanges, newest first.",
)
async def get_chat_history(
    user_id: str = GUEST_USER_ID,
    page: int = Query(default=0, ge=0),
    size: int = Query(default=settings.chat_history_page_size, gt=0, le=100),
    chat_service: ChatService = Depends(get_chat_service),
) -> List[ChatRecord]:
    return await chat_service.get_chat_history(user_id, page, size)


@router.delete(
    "/{chat_id}",
    status_code=204,
    summary="Delete a chat",
    responses={404: {"description": "Chat not found"}},
)
async def delete_chat(
    chat_id: str,
    user_id: str,
    chat_service: ChatService = Depends(get_chat_service),
) -> Response:
    await chat_service.delete_chat(chat_id, user_id)
    return Response(status_code=204)


@router.post(
    "/{chat_id}/regenerate",
    response_model=ChatRecord,
    summary="Regenerate an answer",
    description="Ask the stored question again and replace the stored answer.",
    responses={404: {"description": "Chat not found"}},
)
async def regenerate_response(
    chat_id: str,
    user_id: str,
    chat_service: ChatService = Depends(get_chat_service),
) -> ChatRecord:
    return await chat_service.regenerate_response(chat_id, user_id)
