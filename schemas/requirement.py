from typing import Literal, Optional

from pydantic import BaseModel, Field

RequirementCategory = Literal[
    "borrower_entity",
    "financials",
    "property",
    "appraisal",
    "title",
    "insurance",
    "payoff",
    "lender_specific",
]


class Requirement(BaseModel):
    """A named document or attestation a lender needs before funding."""

    id: str
    name: str
    category: RequirementCategory
    required: bool = True
    description: Optional[str] = None
    lender_specific: bool = Field(False, alias="lenderSpecific")

    model_config = {"populate_by_name": True, "frozen": True}


class RequirementGroup(BaseModel):
    category: RequirementCategory
    display_name: str = Field(..., alias="displayName")
    requirements: list[Requirement]

    model_config = {"populate_by_name": True}


class ChecklistItem(BaseModel):
    id: str
    name: str
    category: RequirementCategory
    required: bool
    description: Optional[str] = None
    is_complete: bool = Field(False, alias="isComplete")
    document_ids: list[str] = Field(default_factory=list, alias="documentIds")

    model_config = {"populate_by_name": True}


class ChecklistGroup(BaseModel):
    category: RequirementCategory
    display_name: str = Field(..., alias="displayName")
    items: list[ChecklistItem]
    completed_count: int = Field(0, alias="completedCount")

    model_config = {"populate_by_name": True}


class ChecklistResponse(BaseModel):
    loan_id: str = Field(..., alias="loanId")
    funder: str
    completion_percentage: int = Field(..., alias="completionPercentage")
    groups: list[ChecklistGroup]
    missing: list[str] = Field(default_factory=list)
    unassigned_document_ids: list[str] = Field(default_factory=list, alias="unassignedDocumentIds")
    completed_document_ids: list[str] = Field(default_factory=list, alias="completedDocumentIds")
    next_actions: list[str] = Field(default_factory=list, alias="nextActions")

    model_config = {"populate_by_name": True}
