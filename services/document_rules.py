"""
Filename heuristics for loan documents: category suggestion and duplicate detection.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Optional, Sequence

from pydantic import BaseModel, Field

from schemas.records import DocumentRecord

logger = logging.getLogger(__name__)


class DocumentSuggestion(BaseModel):
    category: str
    confidence: float
    matched_requirement: Optional[str] = Field(None, alias="matchedRequirement")

    model_config = {"populate_by_name": True}


# Checked in order; first pattern found in the lowercased filename wins
_CATEGORY_RULES: tuple[tuple[re.Pattern, str, float, str], ...] = (
    (re.compile(r"driver|license|(?:^|[^a-z])(?:dl|id)(?:[^a-z]|$)"), "borrower_entity", 0.9, "drivers_license"),
    (re.compile(r"operating"), "borrower_entity", 0.85, "operating_agreement"),
    (re.compile(r"article|organization|incorporation|llc|corp"), "borrower_entity", 0.85, "articles_org"),
    (re.compile(r"good standing"), "borrower_entity", 0.85, "good_standing"),
    (re.compile(r"\bein\b|ss-?4"), "borrower_entity", 0.8, "ein_letter"),
    (re.compile(r"payoff"), "payoff", 0.8, "payoff_statement"),
    (re.compile(r"bank|statement|checking|savings"), "financials", 0.8, "bank_statements"),
    (re.compile(r"voided|void check"), "financials", 0.8, "voided_check"),
    (re.compile(r"insurance|policy|coverage|binder"), "insurance", 0.8, "insurance_policy"),
    (re.compile(r"appraisal|valuation|bpo"), "appraisal", 0.9, "appraisal"),
    (re.compile(r"lease|rental|rent"), "property", 0.8, "current_leases"),
    (re.compile(r"title|deed|hud|settlement"), "title", 0.8, "property_ownership"),
)


def categorize_document(filename: str) -> DocumentSuggestion:
    name = (filename or "").lower()
    for pattern, category, confidence, requirement_id in _CATEGORY_RULES:
        if pattern.search(name):
            return DocumentSuggestion(category=category, confidence=confidence, matched_requirement=requirement_id)
    return DocumentSuggestion(category="unknown", confidence=0.1)


_COPY_SUFFIX_RE = re.compile(r"^(.+)\s+\((\d+)\)(\.[^.]+)$")
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def normalize_file_name(filename: str) -> str:
    """'Bank Statement (1).pdf' -> 'Bank Statement.pdf'; names without a copy suffix are unchanged."""
    match = _COPY_SUFFIX_RE.match(filename)
    if match:
        return match.group(1) + match.group(3)
    return filename


def _upload_key(doc: DocumentRecord) -> datetime:
    if doc.uploaded_at is None:
        return _EPOCH
    if doc.uploaded_at.tzinfo is None:
        return doc.uploaded_at.replace(tzinfo=timezone.utc)
    return doc.uploaded_at


def find_duplicate_documents(documents: Sequence[DocumentRecord]) -> list[str]:
    """
    Ids of active documents that duplicate an earlier upload.
    Duplicates share exact name, file size and source; the earliest upload is kept.
    """
    groups: dict[tuple[str, Optional[int]], list[DocumentRecord]] = {}
    for doc in documents:
        if doc.deleted:
            continue
        groups.setdefault((normalize_file_name(doc.name), doc.file_size), []).append(doc)

    duplicates: list[str] = []
    for group in groups.values():
        if len(group) < 2:
            continue
        exact: dict[tuple[str, Optional[int], str], list[DocumentRecord]] = {}
        for doc in group:
            exact.setdefault((doc.name, doc.file_size, doc.source or "unknown"), []).append(doc)
        for key, docs in exact.items():
            if len(docs) < 2:
                continue
            docs = sorted(docs, key=_upload_key)
            logger.info("Duplicate group %s: keeping %s, dropping %d", key[0], docs[0].id, len(docs) - 1)
            duplicates.extend(d.id for d in docs[1:])
    return duplicates
