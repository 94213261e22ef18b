from typing import Optional

from pydantic import BaseModel, Field


class LoanCreate(BaseModel):
    loan_number: str = Field(..., alias="loanNumber", min_length=1)
    borrower_name: str = Field(..., alias="borrowerName", min_length=1)
    borrower_entity_name: Optional[str] = Field(None, alias="borrowerEntityName")
    property_address: str = Field(..., alias="propertyAddress", min_length=1)
    property_type: str = Field("single_family", alias="propertyType")
    estimated_value: Optional[int] = Field(None, alias="estimatedValue", ge=0)
    loan_amount: Optional[str] = Field(None, alias="loanAmount")
    loan_to_value: Optional[int] = Field(None, alias="loanToValue", ge=0, le=100)
    loan_type: str = Field("DSCR", alias="loanType")
    loan_purpose: str = Field(..., alias="loanPurpose")
    funder: str = Field(..., min_length=1)
    target_close_date: Optional[str] = Field(None, alias="targetCloseDate")
    processor_id: Optional[str] = Field(None, alias="processorId")

    model_config = {"populate_by_name": True}


class LoanUpdate(BaseModel):
    loan_number: Optional[str] = Field(None, alias="loanNumber", min_length=1)
    borrower_name: Optional[str] = Field(None, alias="borrowerName")
    borrower_entity_name: Optional[str] = Field(None, alias="borrowerEntityName")
    property_address: Optional[str] = Field(None, alias="propertyAddress")
    property_type: Optional[str] = Field(None, alias="propertyType")
    estimated_value: Optional[int] = Field(None, alias="estimatedValue", ge=0)
    loan_amount: Optional[str] = Field(None, alias="loanAmount")
    loan_to_value: Optional[int] = Field(None, alias="loanToValue", ge=0, le=100)
    loan_type: Optional[str] = Field(None, alias="loanType")
    loan_purpose: Optional[str] = Field(None, alias="loanPurpose")
    funder: Optional[str] = Field(None, min_length=1)
    status: Optional[str] = None
    target_close_date: Optional[str] = Field(None, alias="targetCloseDate")

    model_config = {"populate_by_name": True}


class CompletedRequirementsUpdate(BaseModel):
    completed_requirements: list[str] = Field(default_factory=list, alias="completedRequirements")

    model_config = {"populate_by_name": True}


class RequirementToggle(BaseModel):
    requirement_name: str = Field(..., alias="requirementName", min_length=1)
    completed: bool = True

    model_config = {"populate_by_name": True}


class DocumentAssignmentsUpdate(BaseModel):
    document_assignments: dict[str, list[str]] = Field(default_factory=dict, alias="documentAssignments")

    model_config = {"populate_by_name": True}


class DocumentAssignmentChange(BaseModel):
    requirement_name: str = Field(..., alias="requirementName", min_length=1)
    document_id: str = Field(..., alias="documentId", min_length=1)

    model_config = {"populate_by_name": True}
