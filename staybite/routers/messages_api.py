from typing import List, Optional

from fastapi import APIRouter, Depends, Response

from ..context import AppContext, get_context, require_user
from ..schemas import ConversationIn, ConversationOut, MessageIn, MessageOut
from ..services import messaging

router = APIRouter(prefix="/api/conversations", tags=["messages"])


def _message_out(message, user_id: int) -> MessageOut:
    out = MessageOut.model_validate(message)
    out.is_current_user = message.sender_id == user_id
    return out


@router.get("", response_model=List[ConversationOut])
def api_list_conversations(ctx: AppContext = Depends(get_context)):
    user = require_user(ctx)
    return messaging.list_conversations(ctx.db, user.id)


@router.post("", response_model=ConversationOut)
def api_start_conversation(payload: ConversationIn, response: Response, ctx: AppContext = Depends(get_context)):
    user = require_user(ctx)
    conversation, created = messaging.get_or_create_conversation(
        ctx.db, user.id, payload.other_user_id, payload.listing_id, payload.listing_type, payload.title
    )
    response.status_code = 201 if created else 200
    out = ConversationOut.model_validate(conversation)
    out.is_new = created
    return out


@router.get("/{conversation_id}/messages", response_model=List[MessageOut])
def api_list_messages(conversation_id: int, before_id: Optional[int] = None, ctx: AppContext = Depends(get_context)):
    user = require_user(ctx)
    return [_message_out(m, user.id) for m in messaging.list_messages(ctx.db, user.id, conversation_id, before_id)]


@router.post("/{conversation_id}/messages", response_model=MessageOut, status_code=201)
def api_send_message(conversation_id: int, payload: MessageIn, ctx: AppContext = Depends(get_context)):
    user = require_user(ctx)
    return _message_out(messaging.send_message(ctx.db, user.id, conversation_id, payload.content), user.id)
