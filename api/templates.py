from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_templates, get_tracker, sender_from_settings
from database import get_db
from schemas.email import EmailTemplate, TemplateCategory, TemplateRenderRequest
from services.checklist import ChecklistTracker
from services.email_templates import build_template_context, find_template, placeholders, render
from services.loan_context import checklist_for, load_loan, loan_context

router = APIRouter(prefix="/api", tags=["templates"])

MSG_LOAN_NOT_FOUND = "Loan not found"
MSG_TEMPLATE_NOT_FOUND = "Template not found"


def _template_to_response(t: EmailTemplate) -> dict[str, Any]:
    return {
        "id": t.id,
        "category": t.category,
        "title": t.title,
        "subject": t.subject,
        "body": t.body,
        "placeholders": placeholders(t.subject + "\n" + t.body),
    }


@router.get("/templates")
async def list_templates(
    category: Optional[TemplateCategory] = Query(None),
    templates: list[EmailTemplate] = Depends(get_templates),
):
    return [_template_to_response(t) for t in templates if category is None or t.category == category]


@router.post("/loans/{loan_id}/templates/{template_id}/render")
async def render_template(
    loan_id: str,
    template_id: int,
    body: Optional[TemplateRenderRequest] = None,
    db: AsyncSession = Depends(get_db),
    templates: list[EmailTemplate] = Depends(get_templates),
    tracker: ChecklistTracker = Depends(get_tracker),
):
    """Fill a library template from the loan; tokens with no known value are left in place."""
    template = find_template(templates, template_id)
    if template is None:
        raise HTTPException(status_code=404, detail=MSG_TEMPLATE_NOT_FOUND)
    loan = await load_loan(db, loan_id, with_children=True)
    if not loan:
        raise HTTPException(status_code=404, detail=MSG_LOAN_NOT_FOUND)
    context = loan_context(loan)
    values = build_template_context(
        context.loan,
        context.contacts,
        tracker.missing(checklist_for(loan)),
        sender_from_settings(),
    )
    if body is not None:
        values.update(body.context)
    rendered = render(template, values)
    return {
        "templateId": rendered.id,
        "subject": rendered.subject,
        "body": rendered.body,
        "unresolved": placeholders(rendered.subject + "\n" + rendered.body),
    }
