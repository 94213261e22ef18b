from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_tracker
from database import get_db
from models import Document, Loan
from schemas.document import DocumentCreate, DocumentUpdate
from schemas.records import DocumentRecord
from services.checklist import ChecklistTracker
from services.document_rules import categorize_document, find_duplicate_documents
from services.loan_context import checklist_for, load_loan, persist_checklist
from utils import camel_keys, iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["documents"])

MSG_LOAN_NOT_FOUND = "Loan not found"
MSG_DOCUMENT_NOT_FOUND = "Document not found"


def _document_to_response(d: Document) -> dict[str, Any]:
    return {
        "id": d.id,
        "loanId": d.loan_id,
        "name": d.name,
        "fileId": d.file_id,
        "fileType": d.file_type,
        "fileSize": d.file_size,
        "category": d.category,
        "status": d.status,
        "source": d.source,
        "deleted": d.deleted,
        "uploadedAt": iso(d.uploaded_at),
    }


async def _get_loan_or_404(db: AsyncSession, loan_id: str) -> Loan:
    loan = await load_loan(db, loan_id)
    if not loan:
        raise HTTPException(status_code=404, detail=MSG_LOAN_NOT_FOUND)
    return loan


async def _get_document_or_404(db: AsyncSession, document_id: str) -> Document:
    result = await db.execute(select(Document).where(Document.id == document_id))
    doc = result.scalar_one_or_none()
    if not doc:
        raise HTTPException(status_code=404, detail=MSG_DOCUMENT_NOT_FOUND)
    return doc


async def _list_documents(db: AsyncSession, loan_id: str, deleted: bool) -> list[Document]:
    result = await db.execute(
        select(Document)
        .where(Document.loan_id == loan_id, Document.deleted.is_(deleted))
        .order_by(Document.uploaded_at, Document.id)
    )
    return list(result.scalars().all())


async def _soft_delete(db: AsyncSession, docs: list[Document], tracker: ChecklistTracker) -> None:
    """Mark documents deleted and drop them from their loan's requirement assignments."""
    by_loan: dict[str, list[Document]] = {}
    for doc in docs:
        doc.deleted = True
        by_loan.setdefault(doc.loan_id, []).append(doc)
    for loan_id, loan_docs in by_loan.items():
        loan = await load_loan(db, loan_id)
        if not loan:
            continue
        checklist = checklist_for(loan)
        for doc in loan_docs:
            tracker.unassign_everywhere(checklist, doc.id)
        persist_checklist(loan, checklist, tracker)


@router.get("/loans/{loan_id}/documents")
async def list_documents(loan_id: str, db: AsyncSession = Depends(get_db)):
    await _get_loan_or_404(db, loan_id)
    return [_document_to_response(d) for d in await _list_documents(db, loan_id, deleted=False)]


@router.get("/loans/{loan_id}/deleted-documents")
async def list_deleted_documents(loan_id: str, db: AsyncSession = Depends(get_db)):
    await _get_loan_or_404(db, loan_id)
    return [_document_to_response(d) for d in await _list_documents(db, loan_id, deleted=True)]


@router.post("/loans/{loan_id}/documents", status_code=201)
async def create_document(loan_id: str, body: DocumentCreate, db: AsyncSession = Depends(get_db)):
    """Register document metadata; the category is suggested from the file name when not given."""
    await _get_loan_or_404(db, loan_id)
    suggestion = categorize_document(body.name)
    doc = Document(
        id=f"doc-{uuid.uuid4().hex[:12]}",
        loan_id=loan_id,
        name=body.name,
        file_id=body.file_id,
        file_type=body.file_type,
        file_size=body.file_size,
        category=body.category or (suggestion.category if suggestion.category != "unknown" else None),
        status=body.status,
        source=body.source,
        deleted=False,
        uploaded_at=datetime.now(timezone.utc),
    )
    db.add(doc)
    await db.flush()
    out = _document_to_response(doc)
    out["suggestion"] = camel_keys(suggestion.model_dump())
    return out


@router.post("/loans/{loan_id}/documents/dedupe")
async def dedupe_documents(
    loan_id: str,
    db: AsyncSession = Depends(get_db),
    tracker: ChecklistTracker = Depends(get_tracker),
):
    """Soft-delete later copies of the same file, keeping the earliest upload."""
    await _get_loan_or_404(db, loan_id)
    docs = await _list_documents(db, loan_id, deleted=False)
    duplicate_ids = set(find_duplicate_documents([DocumentRecord.model_validate(d) for d in docs]))
    removed = [d for d in docs if d.id in duplicate_ids]
    if removed:
        await _soft_delete(db, removed, tracker)
        await db.flush()
        logger.info("Removed %d duplicate documents from loan %s", len(removed), loan_id)
    return {"removed": len(removed), "removedIds": [d.id for d in removed]}


@router.patch("/documents/{document_id}")
async def update_document(document_id: str, body: DocumentUpdate, db: AsyncSession = Depends(get_db)):
    doc = await _get_document_or_404(db, document_id)
    for field, value in body.model_dump(by_alias=False, exclude_unset=True, exclude_none=True).items():
        setattr(doc, field, value)
    await db.flush()
    return _document_to_response(doc)


@router.delete("/documents/{document_id}", status_code=204)
async def delete_document(
    document_id: str,
    db: AsyncSession = Depends(get_db),
    tracker: ChecklistTracker = Depends(get_tracker),
):
    doc = await _get_document_or_404(db, document_id)
    if not doc.deleted:
        await _soft_delete(db, [doc], tracker)
        await db.flush()
    return None


@router.patch("/documents/{document_id}/restore")
async def restore_document(document_id: str, db: AsyncSession = Depends(get_db)):
    doc = await _get_document_or_404(db, document_id)
    doc.deleted = False
    await db.flush()
    return _document_to_response(doc)
