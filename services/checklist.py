"""
Per-loan checklist state: completed requirement names and document assignments.

LoanChecklist is the slice of a loan row the tracker works on. The tracker mutates it in
place (always rebinding lists/dicts so JSON columns see the change) and never performs I/O;
callers load the checklist from storage and write it back.
"""
from __future__ import annotations

import logging
from typing import Iterable

from pydantic import BaseModel, Field

from schemas.records import LoanRecord
from schemas.requirement import ChecklistGroup, ChecklistItem, ChecklistResponse
from services.errors import InvalidInputError, UnknownRequirementError
from services.requirements import RequirementResolver, group_requirements

logger = logging.getLogger(__name__)


class LoanChecklist(BaseModel):
    loan_id: str
    funder: str
    completed_requirements: list[str] = Field(default_factory=list)
    document_assignments: dict[str, list[str]] = Field(default_factory=dict)

    @classmethod
    def from_loan(cls, loan: LoanRecord) -> "LoanChecklist":
        return cls(
            loan_id=loan.id,
            funder=loan.funder,
            completed_requirements=list(loan.completed_requirements or []),
            document_assignments={k: list(v) for k, v in (loan.document_assignments or {}).items()},
        )


def _percent(done: int, total: int) -> int:
    """Round-half-up integer percentage; 0 when there is nothing to complete."""
    if total <= 0:
        return 0
    return (200 * done + total) // (2 * total)


class ChecklistTracker:
    def __init__(self, resolver: RequirementResolver):
        self.resolver = resolver

    # --- completion set ---

    def mark_complete(self, checklist: LoanChecklist, requirement_name: str) -> None:
        _require_name(requirement_name)
        if requirement_name not in checklist.completed_requirements:
            checklist.completed_requirements = [*checklist.completed_requirements, requirement_name]

    def mark_incomplete(self, checklist: LoanChecklist, requirement_name: str) -> None:
        _require_name(requirement_name)
        checklist.completed_requirements = [
            n for n in checklist.completed_requirements if n != requirement_name
        ]

    def is_complete(self, checklist: LoanChecklist, requirement_name: str) -> bool:
        return requirement_name in checklist.completed_requirements

    def replace_completed(self, checklist: LoanChecklist, names: Iterable[str]) -> None:
        checklist.completed_requirements = list(dict.fromkeys(n for n in names if n))

    def percent_complete(self, checklist: LoanChecklist) -> int:
        resolved = set(self.resolver.resolve_names(checklist.funder))
        done = len(resolved.intersection(checklist.completed_requirements))
        return _percent(done, len(resolved))

    def missing(self, checklist: LoanChecklist, required_only: bool = True) -> list[str]:
        """Resolved requirement names not yet completed, in checklist order."""
        completed = set(checklist.completed_requirements)
        return [
            r.name
            for r in self.resolver.resolve(checklist.funder)
            if r.name not in completed and (r.required or not required_only)
        ]

    def validate_names(self, checklist: LoanChecklist, names: Iterable[str]) -> None:
        """Raise UnknownRequirementError for names outside the loan's resolved checklist."""
        resolved = set(self.resolver.resolve_names(checklist.funder))
        unknown = [n for n in dict.fromkeys(names) if n not in resolved]
        if unknown:
            logger.info("Rejected requirement names for loan %s: %s", checklist.loan_id, unknown)
            raise UnknownRequirementError(unknown, checklist.funder)

    # --- document assignments ---

    def assign(self, checklist: LoanChecklist, requirement_name: str, document_id: str) -> None:
        _require_name(requirement_name)
        if not document_id:
            raise InvalidInputError("document id is required")
        current = checklist.document_assignments.get(requirement_name, [])
        if document_id in current:
            return
        checklist.document_assignments = {
            **checklist.document_assignments,
            requirement_name: [*current, document_id],
        }

    def unassign(self, checklist: LoanChecklist, requirement_name: str, document_id: str) -> None:
        current = checklist.document_assignments.get(requirement_name)
        if not current or document_id not in current:
            return
        remaining = [d for d in current if d != document_id]
        assignments = {k: v for k, v in checklist.document_assignments.items() if k != requirement_name}
        if remaining:
            assignments[requirement_name] = remaining
        checklist.document_assignments = assignments

    def unassign_everywhere(self, checklist: LoanChecklist, document_id: str) -> None:
        for name in [k for k, v in checklist.document_assignments.items() if document_id in v]:
            self.unassign(checklist, name, document_id)

    def requirements_for_document(self, checklist: LoanChecklist, document_id: str) -> list[str]:
        return [name for name, ids in checklist.document_assignments.items() if document_id in ids]

    def is_document_complete(self, checklist: LoanChecklist, document_id: str) -> bool:
        completed = set(checklist.completed_requirements)
        return any(name in completed for name in self.requirements_for_document(checklist, document_id))

    def unassigned_documents(self, checklist: LoanChecklist, document_ids: Iterable[str]) -> list[str]:
        assigned = {d for ids in checklist.document_assignments.values() for d in ids}
        return [d for d in document_ids if d not in assigned]

    # --- summary ---

    def summarize(self, checklist: LoanChecklist, document_ids: Iterable[str] = ()) -> ChecklistResponse:
        document_ids = list(document_ids)
        completed = set(checklist.completed_requirements)
        groups: list[ChecklistGroup] = []
        for group in group_requirements(self.resolver.resolve(checklist.funder)):
            items = [
                ChecklistItem(
                    id=r.id,
                    name=r.name,
                    category=r.category,
                    required=r.required,
                    description=r.description,
                    is_complete=r.name in completed,
                    document_ids=list(checklist.document_assignments.get(r.name, [])),
                )
                for r in group.requirements
            ]
            groups.append(
                ChecklistGroup(
                    category=group.category,
                    display_name=group.display_name,
                    items=items,
                    completed_count=sum(1 for i in items if i.is_complete),
                )
            )
        return ChecklistResponse(
            loan_id=checklist.loan_id,
            funder=checklist.funder,
            completion_percentage=self.percent_complete(checklist),
            groups=groups,
            missing=self.missing(checklist),
            unassigned_document_ids=self.unassigned_documents(checklist, document_ids),
            completed_document_ids=[d for d in document_ids if self.is_document_complete(checklist, d)],
        )


def _require_name(requirement_name: str) -> None:
    if not requirement_name:
        raise InvalidInputError("requirement name is required")
