"""
Keyword-driven loan assistant used when the live model is unavailable.

Queries are lowercased and checked against an ordered list of intent rules; the first rule
with a matching keyword wins. Nothing is scored or tokenized, so rule order is the priority.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from pydantic import BaseModel, Field

from schemas.message import AssistantReply
from schemas.records import DocumentRecord, LoanContext
from services.errors import InvalidInputError, InvalidLoanContextError

logger = logging.getLogger(__name__)

STAGE_INITIAL_SUBMISSION = "initial_submission"
STAGE_CONDITIONAL_APPROVAL = "conditional_approval"
STAGE_CLOSING = "closing"

EXPECTED_DOCUMENT_CATEGORIES = ("borrower", "title", "insurance")

_CATEGORY_EXAMPLES = {
    "borrower": "(Driver's License, Tax Returns, Bank Statements)",
    "title": "(Title Commitment, Property Survey, HOA Documents if applicable)",
    "insurance": "(Property Insurance Declaration, Flood Insurance if required)",
}


class IntentRule(BaseModel):
    intent: str
    keywords: tuple[str, ...]

    model_config = {"frozen": True}

    def matches(self, query: str) -> bool:
        return any(k in query for k in self.keywords)


DEFAULT_INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule(intent="documents", keywords=("document", "checklist", "need", "missing")),
    IntentRule(intent="process", keywords=("next step", "timeline", "process", "what should i do")),
    IntentRule(intent="email", keywords=("email", "template", "message")),
    IntentRule(intent="dscr", keywords=("dscr", "debt service", "ratio", "calculation")),
)
GENERAL_INTENT = "general"


class KnowledgeBase(BaseModel):
    required_documents: list[str]
    insurance_documents: list[str]
    title_documents: list[str]
    common_issues: list[str] = Field(default_factory=list)
    processes: dict[str, list[str]]
    # Checked in insertion order; first key contained in the query answers it
    faq: dict[str, str]
    title_agent_email: str
    insurance_request_email: str


def default_knowledge_base() -> KnowledgeBase:
    return KnowledgeBase(
        required_documents=[
            "Driver's License or ID",
            "Tax Returns (2 years)",
            "Bank Statements (2 months)",
            "Purchase Agreement (if purchase)",
            "Current Mortgage Statement (if refinance)",
            "Property Insurance Declaration",
            "Property Tax Bill",
            "Lease Agreement (if property is rented)",
            "DSCR Calculator Worksheet",
            "Business Formation Documents (if applicable)",
        ],
        insurance_documents=[
            "HO-6 Policy (for condos)",
            "Flood Insurance (if in flood zone)",
            "Hazard Insurance",
            "Liability Insurance",
            "Property Insurance Declaration Page",
        ],
        title_documents=[
            "Title Commitment",
            "Property Survey",
            "HOA Documents (if applicable)",
            "Property Deed",
            "Chain of Title",
        ],
        common_issues=[
            "Missing pages in tax returns",
            "Expired insurance policies",
            "Unclear property survey",
            "Unsigned documents",
            "Missing notarization",
            "Incomplete application forms",
            "Outdated bank statements",
        ],
        processes={
            STAGE_INITIAL_SUBMISSION: [
                "Collect all borrower documents",
                "Complete loan application",
                "Run credit check",
                "Calculate DSCR ratio",
                "Submit to underwriting",
            ],
            STAGE_CONDITIONAL_APPROVAL: [
                "Address all underwriting conditions",
                "Order property appraisal",
                "Request title commitment",
                "Verify insurance coverage",
                "Finalize loan terms",
            ],
            STAGE_CLOSING: [
                "Review closing disclosure",
                "Schedule closing appointment",
                "Verify all conditions are cleared",
                "Confirm funds for closing",
                "Complete final walkthrough (if purchase)",
            ],
        },
        faq={
            "what is dscr": (
                "DSCR (Debt Service Coverage Ratio) is a measure used by lenders to determine if a property "
                "generates enough income to cover its mortgage payments. For investment properties, lenders "
                "typically require a DSCR of 1.25 or higher, meaning the property generates 25% more income "
                "than the debt payments."
            ),
            "dscr calculation": (
                "DSCR is calculated by dividing the annual net operating income (NOI) by the annual debt "
                "service. Formula: DSCR = NOI / Annual Debt Service. A DSCR of 1.0 means the property's "
                "income exactly covers the debt payments."
            ),
            "kiavi requirements": (
                "Kiavi typically requires a minimum DSCR of 1.25, a minimum credit score of 660, and focuses "
                "on the property's income potential rather than the borrower's personal income. They also "
                "have specific requirements for property types and condition."
            ),
            "document checklist": (
                "The essential documents for a DSCR loan include: government ID, property details, purchase "
                "contract (if applicable), insurance information, entity documents (if using an LLC), and "
                "information about existing rental income or projected rental income."
            ),
            "timeline": (
                "The typical timeline for a DSCR loan is 2-3 weeks from application to closing, though this "
                "can vary based on property complexity and how quickly documents are provided."
            ),
            "rates": (
                "DSCR loan rates are typically 1-2% higher than conventional mortgage rates due to the higher "
                "risk profile of investment properties. Rates vary based on DSCR ratio, credit score, "
                "loan-to-value ratio, and property type."
            ),
        },
        title_agent_email=(
            "Subject: Title Commitment Request for [Property Address]\n\n"
            "Hello [Title Agent Name],\n\n"
            "I'm [Your Name] from [Your Company], and I'm working on a DSCR loan for the property at "
            "[Property Address]. We need to order a title commitment for this property.\n\n"
            "Borrower: [Borrower Name]\n"
            "Property Address: [Property Address]\n"
            "Loan Type: DSCR Investment Property Loan\n"
            "Target Closing Date: [Date]\n\n"
            "Please provide the following:\n"
            "1. Title Commitment\n"
            "2. Property Survey (if available)\n"
            "3. Any HOA documents (if applicable)\n"
            "4. Any existing title issues that may affect closing\n\n"
            "Please let me know if you need any additional information.\n\n"
            "Thank you,\n[Your Name]\n[Your Contact Information]"
        ),
        insurance_request_email=(
            "Subject: Insurance Requirements for DSCR Loan - [Property Address]\n\n"
            "Hello [Insurance Agent Name],\n\n"
            "I'm working with [Borrower Name] on a DSCR investment property loan for [Property Address]. "
            "We need to ensure the property has adequate insurance coverage that meets our lender's "
            "requirements.\n\n"
            "Required Coverage:\n"
            "1. Hazard Insurance with minimum coverage equal to the loan amount\n"
            "2. Liability Insurance with minimum coverage of $1,000,000\n"
            "3. Flood Insurance (if property is in flood zone)\n"
            "4. [Any additional requirements]\n\n"
            "Lender must be listed as mortgagee:\n[Lender Name]\n[Lender Address]\nLoan #: [Loan Number]\n\n"
            "Please provide a quote and declaration page that includes all required coverages. Our target "
            "closing date is [Date].\n\n"
            "Thank you,\n[Your Name]\n[Your Contact Information]"
        ),
    )


def infer_stage(document_count: int, completed_task_count: int) -> str:
    """Recomputed on every call; a loan moves back if documents are deleted or tasks reopened."""
    if document_count >= 10 and completed_task_count >= 7:
        return STAGE_CLOSING
    if document_count >= 5 and completed_task_count >= 3:
        return STAGE_CONDITIONAL_APPROVAL
    return STAGE_INITIAL_SUBMISSION


def _has_category(present: set[str], expected: str) -> bool:
    # "borrower_entity" satisfies "borrower"
    return any(c == expected or c.startswith(expected + "_") for c in present)


def missing_document_categories(documents: Sequence[DocumentRecord]) -> list[str]:
    present = {(d.category or "").lower() for d in documents if not d.deleted}
    return [c for c in EXPECTED_DOCUMENT_CATEGORIES if not _has_category(present, c)]


class FallbackAssistant:
    def __init__(
        self,
        knowledge: Optional[KnowledgeBase] = None,
        rules: Sequence[IntentRule] = DEFAULT_INTENT_RULES,
    ):
        self.knowledge = knowledge or default_knowledge_base()
        self.rules = tuple(rules)

    def classify(self, query: str) -> str:
        q = query.lower()
        for rule in self.rules:
            if rule.matches(q):
                return rule.intent
        return GENERAL_INTENT

    def respond(self, context: LoanContext, query: str) -> AssistantReply:
        if context is None:
            raise InvalidLoanContextError("loan context is required")
        if query is None:
            raise InvalidInputError("query is required")
        q = query.lower()
        intent = self.classify(q)
        logger.debug("Fallback assistant routed loan %s query to %s", context.loan.id, intent)
        handler = {
            "documents": self._documents,
            "process": self._process,
            "email": self._email,
            "dscr": lambda _ctx, text: self._dscr(text),
        }.get(intent, self._general)
        return handler(context, q)

    def _documents(self, context: LoanContext, query: str) -> AssistantReply:
        missing = missing_document_categories(context.documents)
        if missing:
            lines = ["Based on the current loan file, you're missing some important document categories:", ""]
            for category in missing:
                lines.append(f"- {category.capitalize()} Documents")
                lines.append(f"  {_CATEGORY_EXAMPLES[category]}")
            lines.append("")
            lines.append("Would you like me to help you create a task list for obtaining these documents?")
            return AssistantReply(content="\n".join(lines))

        if "checklist" in query:
            kb = self.knowledge
            content = (
                "Here's a standard document checklist for DSCR loans:\n\n"
                "**Borrower Documents:**\n" + "\n".join(f"- {d}" for d in kb.required_documents)
                + "\n\n**Insurance Documents:**\n" + "\n".join(f"- {d}" for d in kb.insurance_documents)
                + "\n\n**Title Documents:**\n" + "\n".join(f"- {d}" for d in kb.title_documents)
            )
            return AssistantReply(content=content)

        return AssistantReply(
            content=(
                "To proceed with this DSCR loan, make sure you have all necessary documentation from the "
                "borrower, title company, and insurance provider. Would you like me to provide a specific "
                "checklist for any of these categories?"
            )
        )

    def _process(self, context: LoanContext, query: str) -> AssistantReply:
        stage = infer_stage(len(context.active_documents), context.completed_task_count)
        steps = self.knowledge.processes.get(stage, [])
        lines = [
            f"Based on the current status of this loan file, here are the next steps in the "
            f"{stage.replace('_', ' ')} phase:",
            "",
        ]
        lines.extend(f"{i}. {step}" for i, step in enumerate(steps, start=1))
        lines.append("")
        if stage == STAGE_INITIAL_SUBMISSION:
            lines.append(
                "Focus on collecting all required documents and calculating an accurate DSCR ratio "
                "before submission to underwriting."
            )
        elif stage == STAGE_CONDITIONAL_APPROVAL:
            lines.append(
                "Address any underwriting conditions promptly and ensure all third-party reports "
                "(appraisal, title) are ordered and received."
            )
        else:
            lines.append(
                "Review all closing documents carefully and ensure all final conditions are cleared "
                "before the closing date."
            )
        return AssistantReply(content="\n".join(lines), sources=[f"process:{stage}"])

    def _email(self, context: LoanContext, query: str) -> AssistantReply:
        if "title" in query or "commitment" in query:
            return AssistantReply(
                content="Here's a template for requesting a title commitment:\n\n" + self.knowledge.title_agent_email
            )
        if "insurance" in query:
            return AssistantReply(
                content="Here's a template for requesting insurance information:\n\n"
                + self.knowledge.insurance_request_email
            )
        return AssistantReply(
            content=(
                "I can provide email templates for various loan processing needs. Would you like a template "
                "for contacting a title agent, insurance agent, or something else?"
            )
        )

    def _dscr(self, query: str) -> AssistantReply:
        for key, answer in self.knowledge.faq.items():
            if key in query:
                return AssistantReply(content=answer, sources=[f"faq:{key}"])
        return AssistantReply(
            content=(
                "DSCR (Debt Service Coverage Ratio) is a key metric for investment property loans. It measures "
                "the property's ability to cover debt payments with its income. Would you like to know how to "
                "calculate DSCR, or what specific requirements lenders like Kiavi have for DSCR loans?"
            )
        )

    def _general(self, context: LoanContext, query: str) -> AssistantReply:
        loan = context.loan
        return AssistantReply(
            content=(
                f"This is a {loan.loan_type} loan for the property at {loan.property_address}. "
                f"The borrower is {loan.borrower_name} and the loan amount is "
                f"{loan.loan_amount or 'not yet specified'}.\n\n"
                f"There are currently {context.open_task_count} open tasks on this file. "
                f"The loan status is {loan.status or 'In Process'}.\n\n"
                "How else can I assist you with this loan file? I can help with document checklists, "
                "process guidance, or email templates."
            )
        )
