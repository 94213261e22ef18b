"""
Chat replies for a loan file: OpenAI chat completions when configured, keyword fallback otherwise.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from openai import AsyncOpenAI, OpenAIError

from config import Settings
from schemas.message import AssistantReply
from schemas.records import LoanContext, MessageRecord
from services.errors import InvalidLoanContextError
from services.fallback_assistant import FallbackAssistant
from services.requirements import RequirementResolver

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an expert loan processing assistant for a private lending brokerage. You help process DSCR and investor loan files.

CURRENT LOAN DETAILS:
- Loan Number: {loan_number}
- Borrower: {borrower}
- Property: {property_address}
- Loan Amount: {loan_amount}
- Loan Type: {loan_type}
- Loan Purpose: {loan_purpose}
- Lender: {funder}
- Target Close Date: {target_close_date}

DOCUMENTS AVAILABLE:
- {documents}

LENDER REQUIRED DOCUMENTS:
- {requirements}

COMPLETED REQUIREMENTS:
- {completed}

TASKS:
- {tasks}

CONTACTS:
- {contacts}

Your job is to:
1. Help the loan processor know what to do next
2. Check which documents are still missing based on lender requirements
3. Provide clear instructions for next steps
4. Generate professional email templates when requested
5. Answer any questions about the loan processing workflow

Keep your responses professional, concise, and action-oriented. When asked to create an email template, format it professionally with a subject line, greeting, body, and signature.
"""


def build_system_prompt(context: LoanContext, requirement_names: Sequence[str]) -> str:
    loan = context.loan
    tasks = [
        f"{t.description} ({t.priority} priority, due {t.due_date or 'n/a'}, "
        f"{'completed' if t.completed else 'not completed'})"
        for t in context.tasks
    ]
    contacts = [
        f"{c.name} ({c.role})" + (f", {c.company}" if c.company else "")
        + f", {c.email or 'No email'}, {c.phone or 'No phone'}"
        for c in context.contacts
    ]
    return SYSTEM_PROMPT.format(
        loan_number=loan.loan_number,
        borrower=loan.borrower_name,
        property_address=loan.property_address,
        loan_amount=loan.loan_amount or "not specified",
        loan_type=loan.loan_type,
        loan_purpose=loan.loan_purpose,
        funder=loan.funder,
        target_close_date=loan.target_close_date or "not set",
        documents="\n- ".join(d.name for d in context.active_documents) or "No documents uploaded yet",
        requirements="\n- ".join(requirement_names) or "No specific requirements listed",
        completed="\n- ".join(loan.completed_requirements) or "None yet",
        tasks="\n- ".join(tasks) or "No tasks created yet",
        contacts="\n- ".join(contacts) or "No contacts added yet",
    )


class LoanAssistant:
    def __init__(
        self,
        resolver: RequirementResolver,
        fallback: FallbackAssistant,
        client: Optional[AsyncOpenAI] = None,
        model: str = "gpt-4o",
    ):
        self.resolver = resolver
        self.fallback = fallback
        self.client = client
        self.model = model

    async def reply(
        self,
        context: LoanContext,
        query: str,
        history: Sequence[MessageRecord] = (),
    ) -> AssistantReply:
        if context is None:
            raise InvalidLoanContextError("loan context is required")
        if self.client is None:
            return self.fallback.respond(context, query)
        try:
            return await self._complete(context, query, history)
        except OpenAIError as e:
            logger.warning("OpenAI request failed for loan %s, using fallback: %s", context.loan.id, e)
            return self.fallback.respond(context, query)

    async def _complete(
        self,
        context: LoanContext,
        query: str,
        history: Sequence[MessageRecord],
    ) -> AssistantReply:
        prompt = build_system_prompt(context, self.resolver.resolve_names(context.loan.funder))
        messages = [{"role": "system", "content": prompt}]
        messages.extend({"role": m.role, "content": m.content} for m in history)
        messages.append({"role": "user", "content": query})
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=0.3,
        )
        content = (response.choices[0].message.content or "") if response.choices else ""
        if not content.strip():
            logger.warning("Empty completion for loan %s, using fallback", context.loan.id)
            return self.fallback.respond(context, query)
        return AssistantReply(content=content, sources=[f"openai:{response.model}"])


def build_loan_assistant(settings: Settings, resolver: RequirementResolver) -> LoanAssistant:
    client = None
    if settings.openai_enabled:
        client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            max_retries=settings.openai_max_retries,
            timeout=settings.openai_timeout_seconds,
        )
    else:
        logger.info("OPENAI_API_KEY not set; chat replies use the fallback assistant")
    return LoanAssistant(resolver=resolver, fallback=FallbackAssistant(), client=client, model=settings.openai_model)
