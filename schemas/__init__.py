from schemas.contact import ContactCreate, ContactUpdate
from schemas.document import DocumentCreate, DocumentUpdate
from schemas.email import EmailContent, EmailDraft, EmailTemplate, SenderProfile, TemplateRenderRequest
from schemas.loan import (
    CompletedRequirementsUpdate,
    DocumentAssignmentChange,
    DocumentAssignmentsUpdate,
    LoanCreate,
    LoanUpdate,
    RequirementToggle,
)
from schemas.message import AssistantReply, MessageCreate
from schemas.records import (
    ContactRecord,
    DocumentRecord,
    LoanContext,
    LoanRecord,
    MessageRecord,
    TaskRecord,
)
from schemas.requirement import (
    ChecklistGroup,
    ChecklistItem,
    ChecklistResponse,
    Requirement,
    RequirementGroup,
)
from schemas.task import TaskCreate, TaskUpdate

__all__ = [
    "AssistantReply",
    "ChecklistGroup",
    "ChecklistItem",
    "ChecklistResponse",
    "CompletedRequirementsUpdate",
    "ContactCreate",
    "ContactRecord",
    "ContactUpdate",
    "DocumentAssignmentChange",
    "DocumentAssignmentsUpdate",
    "DocumentCreate",
    "DocumentRecord",
    "DocumentUpdate",
    "EmailContent",
    "EmailDraft",
    "EmailTemplate",
    "LoanContext",
    "LoanCreate",
    "LoanRecord",
    "LoanUpdate",
    "MessageCreate",
    "MessageRecord",
    "Requirement",
    "RequirementGroup",
    "RequirementToggle",
    "SenderProfile",
    "TaskCreate",
    "TaskRecord",
    "TaskUpdate",
    "TemplateRenderRequest",
]
