"""
Typed records handed to the checklist, email and assistant services.
ORM rows are converted to these at the boundary; services never see loose dicts.
"""
from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

ContactRole = Literal["borrower", "title", "insurance", "lender", "analyst", "appraiser", "attorney", "other"]
TaskPriority = Literal["high", "medium", "low"]
MessageRole = Literal["user", "assistant"]


class LoanRecord(BaseModel):
    id: str
    loan_number: str
    borrower_name: str
    borrower_entity_name: Optional[str] = None
    property_address: str
    property_type: Optional[str] = None
    estimated_value: Optional[int] = None
    loan_amount: Optional[str] = None
    loan_to_value: Optional[int] = None
    loan_type: str
    loan_purpose: str
    funder: str
    status: str = "in_progress"
    target_close_date: Optional[str] = None
    processor_id: Optional[str] = None
    completed_requirements: list[str] = Field(default_factory=list)
    document_assignments: dict[str, list[str]] = Field(default_factory=dict)

    model_config = {"from_attributes": True}


class DocumentRecord(BaseModel):
    id: str
    name: str
    file_id: str
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    category: Optional[str] = None
    status: str = "pending"
    source: str = "upload"
    deleted: bool = False
    uploaded_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ContactRecord(BaseModel):
    id: Optional[str] = None
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    role: ContactRole = "other"
    is_analyst: bool = False

    model_config = {"from_attributes": True}


class TaskRecord(BaseModel):
    id: Optional[str] = None
    description: str
    due_date: Optional[str] = None
    priority: TaskPriority = "medium"
    completed: bool = False

    model_config = {"from_attributes": True}


class MessageRecord(BaseModel):
    role: MessageRole
    content: str

    model_config = {"from_attributes": True}


class LoanContext(BaseModel):
    """Everything the assistant knows about one loan file."""

    loan: LoanRecord
    documents: list[DocumentRecord] = Field(default_factory=list)
    contacts: list[ContactRecord] = Field(default_factory=list)
    tasks: list[TaskRecord] = Field(default_factory=list)

    @property
    def active_documents(self) -> list[DocumentRecord]:
        return [d for d in self.documents if not d.deleted]

    @property
    def completed_task_count(self) -> int:
        return sum(1 for t in self.tasks if t.completed)

    @property
    def open_task_count(self) -> int:
        return sum(1 for t in self.tasks if not t.completed)
