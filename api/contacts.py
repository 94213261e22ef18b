from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import sender_from_settings
from database import get_db
from models import Contact
from schemas.contact import ContactCreate, ContactUpdate
from schemas.email import EmailDraft
from schemas.records import ContactRecord
from services.email_templates import generate_email_template
from services.loan_context import load_loan

router = APIRouter(prefix="/api", tags=["contacts"])

MSG_LOAN_NOT_FOUND = "Loan not found"
MSG_CONTACT_NOT_FOUND = "Contact not found"


def _contact_to_response(c: Contact) -> dict[str, Any]:
    return {
        "id": c.id,
        "loanId": c.loan_id,
        "name": c.name,
        "email": c.email,
        "phone": c.phone,
        "company": c.company,
        "role": c.role,
        "isAnalyst": c.is_analyst,
    }


async def _get_contact_or_404(db: AsyncSession, contact_id: str) -> Contact:
    result = await db.execute(select(Contact).where(Contact.id == contact_id))
    contact = result.scalar_one_or_none()
    if not contact:
        raise HTTPException(status_code=404, detail=MSG_CONTACT_NOT_FOUND)
    return contact


@router.get("/loans/{loan_id}/contacts")
async def list_contacts(loan_id: str, db: AsyncSession = Depends(get_db)):
    if not await load_loan(db, loan_id):
        raise HTTPException(status_code=404, detail=MSG_LOAN_NOT_FOUND)
    result = await db.execute(select(Contact).where(Contact.loan_id == loan_id).order_by(Contact.name))
    return [_contact_to_response(c) for c in result.scalars().all()]


@router.post("/loans/{loan_id}/contacts", status_code=201)
async def create_contact(loan_id: str, body: ContactCreate, db: AsyncSession = Depends(get_db)):
    if not await load_loan(db, loan_id):
        raise HTTPException(status_code=404, detail=MSG_LOAN_NOT_FOUND)
    contact = Contact(
        id=f"contact-{uuid.uuid4().hex[:12]}",
        loan_id=loan_id,
        **body.model_dump(by_alias=False),
    )
    db.add(contact)
    await db.flush()
    return _contact_to_response(contact)


@router.patch("/contacts/{contact_id}")
async def update_contact(contact_id: str, body: ContactUpdate, db: AsyncSession = Depends(get_db)):
    contact = await _get_contact_or_404(db, contact_id)
    for field, value in body.model_dump(by_alias=False, exclude_unset=True, exclude_none=True).items():
        setattr(contact, field, value)
    await db.flush()
    return _contact_to_response(contact)


@router.delete("/contacts/{contact_id}", status_code=204)
async def delete_contact(contact_id: str, db: AsyncSession = Depends(get_db)):
    contact = await _get_contact_or_404(db, contact_id)
    await db.delete(contact)
    await db.flush()
    return None


@router.get("/contacts/{contact_id}/email-draft")
async def get_email_draft(contact_id: str, db: AsyncSession = Depends(get_db)):
    """Initial outreach draft for the contact, worded for the contact's role."""
    contact = await _get_contact_or_404(db, contact_id)
    loan = await load_loan(db, contact.loan_id)
    if not loan:
        raise HTTPException(status_code=404, detail=MSG_LOAN_NOT_FOUND)
    draft = generate_email_template(
        ContactRecord.model_validate(contact),
        loan.property_address,
        loan.borrower_name,
        loan_number=loan.loan_number,
        loan_purpose=loan.loan_purpose,
        sender=sender_from_settings(),
        borrower_entity_name=loan.borrower_entity_name,
    )
    return EmailDraft(to=contact.email, subject=draft.subject, body=draft.body).model_dump(by_alias=True)
