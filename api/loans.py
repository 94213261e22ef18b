from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import bad_request, get_resolver, get_tracker
from config import settings
from database import get_db
from models import Document, Loan
from schemas.loan import (
    CompletedRequirementsUpdate,
    DocumentAssignmentChange,
    DocumentAssignmentsUpdate,
    LoanCreate,
    LoanUpdate,
    RequirementToggle,
)
from services.checklist import ChecklistTracker, LoanChecklist
from services.errors import InvalidInputError
from services.loan_context import checklist_for, load_loan, persist_checklist
from services.next_actions import suggest_next_actions
from services.requirements import RequirementResolver
from utils import iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/loans", tags=["loans"])

MSG_LOAN_NOT_FOUND = "Loan not found"
MSG_DOCUMENT_NOT_FOUND = "Document not found"
MSG_LOAN_NUMBER_TAKEN = "Loan number already in use"


def _loan_to_response(loan: Loan) -> dict[str, Any]:
    return {
        "id": loan.id,
        "loanNumber": loan.loan_number,
        "borrowerName": loan.borrower_name,
        "borrowerEntityName": loan.borrower_entity_name,
        "propertyAddress": loan.property_address,
        "propertyType": loan.property_type,
        "estimatedValue": loan.estimated_value,
        "loanAmount": loan.loan_amount,
        "loanToValue": loan.loan_to_value,
        "loanType": loan.loan_type,
        "loanPurpose": loan.loan_purpose,
        "funder": loan.funder,
        "status": loan.status,
        "targetCloseDate": loan.target_close_date,
        "processorId": loan.processor_id,
        "completionPercentage": loan.completion_percentage,
        "completedRequirements": list(loan.completed_requirements or []),
        # Keys are requirement names and stay as-is
        "documentAssignments": {k: list(v) for k, v in (loan.document_assignments or {}).items()},
        "createdAt": iso(loan.created_at),
        "updatedAt": iso(loan.updated_at),
    }


async def _get_loan_or_404(db: AsyncSession, loan_id: str) -> Loan:
    loan = await load_loan(db, loan_id)
    if not loan:
        raise HTTPException(status_code=404, detail=MSG_LOAN_NOT_FOUND)
    return loan


async def _loan_number_taken(db: AsyncSession, loan_number: str, exclude_id: Optional[str] = None) -> bool:
    stmt = select(Loan.id).where(Loan.loan_number == loan_number)
    if exclude_id:
        stmt = stmt.where(Loan.id != exclude_id)
    result = await db.execute(stmt)
    return result.first() is not None


async def _active_document_ids(db: AsyncSession, loan_id: str) -> list[str]:
    result = await db.execute(
        select(Document.id)
        .where(Document.loan_id == loan_id, Document.deleted.is_(False))
        .order_by(Document.uploaded_at, Document.id)
    )
    return list(result.scalars().all())


def _validate_names(tracker: ChecklistTracker, checklist: LoanChecklist, names: list[str]) -> None:
    if not settings.strict_requirement_names:
        return
    try:
        tracker.validate_names(checklist, names)
    except InvalidInputError as e:
        raise bad_request(e)


@router.get("")
async def list_loans(
    processor_id: Optional[str] = Query(None, alias="processorId"),
    db: AsyncSession = Depends(get_db),
):
    stmt = select(Loan).order_by(Loan.updated_at.desc())
    if processor_id:
        stmt = stmt.where(Loan.processor_id == processor_id)
    result = await db.execute(stmt)
    return [_loan_to_response(l) for l in result.scalars().all()]


@router.get("/{loan_id}")
async def get_loan(loan_id: str, db: AsyncSession = Depends(get_db)):
    return _loan_to_response(await _get_loan_or_404(db, loan_id))


@router.post("", status_code=201)
async def create_loan(
    body: LoanCreate,
    db: AsyncSession = Depends(get_db),
    tracker: ChecklistTracker = Depends(get_tracker),
):
    if await _loan_number_taken(db, body.loan_number):
        raise HTTPException(status_code=409, detail=MSG_LOAN_NUMBER_TAKEN)
    now = datetime.now(timezone.utc)
    loan = Loan(
        id=f"loan-{uuid.uuid4().hex[:12]}",
        **body.model_dump(by_alias=False),
        status="in_progress",
        completed_requirements=[],
        document_assignments={},
        created_at=now,
        updated_at=now,
    )
    loan.completion_percentage = tracker.percent_complete(checklist_for(loan))
    db.add(loan)
    await db.flush()
    logger.info("Created loan %s (%s) for funder %s", loan.id, loan.loan_number, loan.funder)
    return _loan_to_response(loan)


@router.patch("/{loan_id}")
async def update_loan(
    loan_id: str,
    body: LoanUpdate,
    db: AsyncSession = Depends(get_db),
    tracker: ChecklistTracker = Depends(get_tracker),
):
    loan = await _get_loan_or_404(db, loan_id)
    changes = body.model_dump(by_alias=False, exclude_unset=True, exclude_none=True)
    if "loan_number" in changes and await _loan_number_taken(db, changes["loan_number"], exclude_id=loan.id):
        raise HTTPException(status_code=409, detail=MSG_LOAN_NUMBER_TAKEN)
    for field, value in changes.items():
        setattr(loan, field, value)
    if "funder" in changes:
        # Percentage is relative to the funder's checklist
        loan.completion_percentage = tracker.percent_complete(checklist_for(loan))
    loan.updated_at = datetime.now(timezone.utc)
    await db.flush()
    return _loan_to_response(loan)


@router.delete("/{loan_id}", status_code=204)
async def delete_loan(loan_id: str, db: AsyncSession = Depends(get_db)):
    loan = await load_loan(db, loan_id, with_children=True)
    if not loan:
        raise HTTPException(status_code=404, detail=MSG_LOAN_NOT_FOUND)
    await db.delete(loan)
    await db.flush()
    logger.info("Deleted loan %s", loan_id)
    return None


@router.get("/{loan_id}/checklist")
async def get_checklist(
    loan_id: str,
    db: AsyncSession = Depends(get_db),
    resolver: RequirementResolver = Depends(get_resolver),
    tracker: ChecklistTracker = Depends(get_tracker),
):
    loan = await _get_loan_or_404(db, loan_id)
    checklist = checklist_for(loan)
    summary = tracker.summarize(checklist, await _active_document_ids(db, loan.id))
    summary.next_actions = suggest_next_actions(
        resolver.catalog.funder_key(loan.funder),
        loan.loan_purpose,
        tracker.missing(checklist, required_only=False),
    )
    return summary.model_dump(by_alias=True)


@router.patch("/{loan_id}/completed-requirements")
async def replace_completed_requirements(
    loan_id: str,
    body: CompletedRequirementsUpdate,
    db: AsyncSession = Depends(get_db),
    tracker: ChecklistTracker = Depends(get_tracker),
):
    loan = await _get_loan_or_404(db, loan_id)
    checklist = checklist_for(loan)
    _validate_names(tracker, checklist, body.completed_requirements)
    tracker.replace_completed(checklist, body.completed_requirements)
    persist_checklist(loan, checklist, tracker)
    await db.flush()
    return _loan_to_response(loan)


@router.patch("/{loan_id}/requirements")
async def toggle_requirement(
    loan_id: str,
    body: RequirementToggle,
    db: AsyncSession = Depends(get_db),
    tracker: ChecklistTracker = Depends(get_tracker),
):
    loan = await _get_loan_or_404(db, loan_id)
    checklist = checklist_for(loan)
    if body.completed:
        _validate_names(tracker, checklist, [body.requirement_name])
        tracker.mark_complete(checklist, body.requirement_name)
    else:
        tracker.mark_incomplete(checklist, body.requirement_name)
    persist_checklist(loan, checklist, tracker)
    await db.flush()
    return _loan_to_response(loan)


@router.patch("/{loan_id}/document-assignments")
async def replace_document_assignments(
    loan_id: str,
    body: DocumentAssignmentsUpdate,
    db: AsyncSession = Depends(get_db),
    tracker: ChecklistTracker = Depends(get_tracker),
):
    loan = await _get_loan_or_404(db, loan_id)
    checklist = checklist_for(loan)
    _validate_names(tracker, checklist, list(body.document_assignments))
    known = set(await _active_document_ids(db, loan.id))
    unknown = sorted({d for ids in body.document_assignments.values() for d in ids if d not in known})
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown document ids for this loan: {', '.join(unknown)}")
    checklist.document_assignments = {}
    try:
        for name, ids in body.document_assignments.items():
            for document_id in ids:
                tracker.assign(checklist, name, document_id)
    except InvalidInputError as e:
        raise bad_request(e)
    persist_checklist(loan, checklist, tracker)
    await db.flush()
    return _loan_to_response(loan)


async def _require_loan_document(db: AsyncSession, loan_id: str, document_id: str) -> None:
    result = await db.execute(
        select(Document.id).where(
            Document.id == document_id,
            Document.loan_id == loan_id,
            Document.deleted.is_(False),
        )
    )
    if result.first() is None:
        raise HTTPException(status_code=404, detail=MSG_DOCUMENT_NOT_FOUND)


@router.post("/{loan_id}/document-assignments/assign")
async def assign_document(
    loan_id: str,
    body: DocumentAssignmentChange,
    db: AsyncSession = Depends(get_db),
    tracker: ChecklistTracker = Depends(get_tracker),
):
    loan = await _get_loan_or_404(db, loan_id)
    await _require_loan_document(db, loan.id, body.document_id)
    checklist = checklist_for(loan)
    _validate_names(tracker, checklist, [body.requirement_name])
    tracker.assign(checklist, body.requirement_name, body.document_id)
    persist_checklist(loan, checklist, tracker)
    await db.flush()
    return _loan_to_response(loan)


@router.post("/{loan_id}/document-assignments/unassign")
async def unassign_document(
    loan_id: str,
    body: DocumentAssignmentChange,
    db: AsyncSession = Depends(get_db),
    tracker: ChecklistTracker = Depends(get_tracker),
):
    loan = await _get_loan_or_404(db, loan_id)
    checklist = checklist_for(loan)
    tracker.unassign(checklist, body.requirement_name, body.document_id)
    persist_checklist(loan, checklist, tracker)
    await db.flush()
    return _loan_to_response(loan)
