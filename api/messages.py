from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import bad_request, get_assistant
from database import get_db
from models import Message
from schemas.message import MessageCreate
from services.assistant import LoanAssistant
from services.errors import InvalidInputError
from services.loan_context import load_loan, loan_context, message_history
from utils import iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/loans", tags=["messages"])

MSG_LOAN_NOT_FOUND = "Loan not found"


def _message_to_response(m: Message) -> dict[str, Any]:
    return {
        "id": m.id,
        "loanId": m.loan_id,
        "role": m.role,
        "content": m.content,
        "createdAt": iso(m.created_at),
    }


@router.get("/{loan_id}/messages")
async def list_messages(loan_id: str, db: AsyncSession = Depends(get_db)):
    if not await load_loan(db, loan_id):
        raise HTTPException(status_code=404, detail=MSG_LOAN_NOT_FOUND)
    result = await db.execute(select(Message).where(Message.loan_id == loan_id).order_by(Message.id))
    return [_message_to_response(m) for m in result.scalars().all()]


@router.post("/{loan_id}/messages", status_code=201)
async def post_message(
    loan_id: str,
    body: MessageCreate,
    db: AsyncSession = Depends(get_db),
    assistant: LoanAssistant = Depends(get_assistant),
):
    """Append the user's message, ask the assistant, and append its reply."""
    loan = await load_loan(db, loan_id, with_children=True)
    if not loan:
        raise HTTPException(status_code=404, detail=MSG_LOAN_NOT_FOUND)
    context = loan_context(loan)
    history = message_history(loan)

    user_message = Message(loan_id=loan.id, role="user", content=body.content, created_at=datetime.now(timezone.utc))
    db.add(user_message)
    await db.flush()

    try:
        reply = await assistant.reply(context, body.content, history)
    except InvalidInputError as e:
        raise bad_request(e)

    assistant_message = Message(
        loan_id=loan.id, role="assistant", content=reply.content, created_at=datetime.now(timezone.utc)
    )
    db.add(assistant_message)
    await db.flush()
    logger.debug("Loan %s chat reply sources: %s", loan.id, reply.sources)
    return {
        "userMessage": _message_to_response(user_message),
        "assistantMessage": _message_to_response(assistant_message),
        "sources": reply.sources,
    }
