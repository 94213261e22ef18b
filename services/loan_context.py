"""
Loading loan rows with their children and converting them to the records the core services consume.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models import Loan
from schemas.records import ContactRecord, DocumentRecord, LoanContext, LoanRecord, MessageRecord, TaskRecord
from services.checklist import ChecklistTracker, LoanChecklist


async def load_loan(db: AsyncSession, loan_id: str, with_children: bool = False) -> Optional[Loan]:
    stmt = select(Loan).where(Loan.id == loan_id)
    if with_children:
        stmt = stmt.options(
            selectinload(Loan.documents),
            selectinload(Loan.contacts),
            selectinload(Loan.tasks),
            selectinload(Loan.messages),
        )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


def loan_record(loan: Loan) -> LoanRecord:
    return LoanRecord.model_validate(loan)


def loan_context(loan: Loan) -> LoanContext:
    """Requires a loan loaded with_children."""
    return LoanContext(
        loan=loan_record(loan),
        documents=[DocumentRecord.model_validate(d) for d in loan.documents],
        contacts=[ContactRecord.model_validate(c) for c in loan.contacts],
        tasks=[TaskRecord.model_validate(t) for t in loan.tasks],
    )


def message_history(loan: Loan) -> list[MessageRecord]:
    return [MessageRecord.model_validate(m) for m in loan.messages]


def checklist_for(loan: Loan) -> LoanChecklist:
    return LoanChecklist.from_loan(loan_record(loan))


def persist_checklist(loan: Loan, checklist: LoanChecklist, tracker: ChecklistTracker) -> None:
    """Write checklist state back to the row, refreshing the cached completion percentage."""
    loan.completed_requirements = list(checklist.completed_requirements)
    loan.document_assignments = {k: list(v) for k, v in checklist.document_assignments.items()}
    loan.completion_percentage = tracker.percent_complete(checklist)
    loan.updated_at = datetime.now(timezone.utc)
