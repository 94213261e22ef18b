"""
Outbound email drafting.

Two mechanisms:
  - render(): {TOKEN} substitution over stored templates. Tokens missing from the context are
    left verbatim so a partially filled loan never blocks drafting.
  - generate_email_template(): one fixed draft per contact role, filled by direct interpolation.
"""
from __future__ import annotations

import re
from typing import Iterable, Mapping, Optional, TypeVar

from schemas.email import EmailContent, EmailTemplate, SenderProfile
from schemas.records import ContactRecord, LoanRecord

PLACEHOLDER_RE = re.compile(r"\{([A-Z][A-Z0-9_]*)\}")

T = TypeVar("T", bound=EmailContent)


def render_text(text: str, context: Mapping[str, str]) -> str:
    def _sub(match: re.Match) -> str:
        value = context.get(match.group(1))
        return match.group(0) if value is None else str(value)

    return PLACEHOLDER_RE.sub(_sub, text)


def render(template: T, context: Mapping[str, str]) -> T:
    """Return a copy of the template with known placeholders substituted in subject and body."""
    return template.model_copy(
        update={
            "subject": render_text(template.subject, context),
            "body": render_text(template.body, context),
        }
    )


def placeholders(text: str) -> list[str]:
    """Distinct placeholder names in order of first appearance."""
    return list(dict.fromkeys(PLACEHOLDER_RE.findall(text)))


def loan_purpose_text(loan_purpose: Optional[str]) -> str:
    purpose = (loan_purpose or "").strip().lower()
    if purpose == "purchase":
        return "purchasing"
    if purpose in ("refinance", "cash_out_refinance"):
        return "refinancing"
    return "purchasing/refinancing"


def signature_block(sender: SenderProfile) -> str:
    lines = [sender.name, sender.title, sender.company, sender.email, sender.phone]
    return "\n".join(line for line in lines if line)


def generate_email_template(
    contact: ContactRecord,
    property_address: str,
    borrower_name: str,
    *,
    loan_number: str,
    loan_purpose: Optional[str],
    sender: SenderProfile,
    borrower_entity_name: Optional[str] = None,
) -> EmailContent:
    """Initial outreach draft for a contact, chosen by contact role."""
    purpose = loan_purpose_text(loan_purpose)
    entity = borrower_entity_name or borrower_name
    signature = signature_block(sender)
    cell = f" or on my cell at {sender.phone}" if sender.phone else ""

    if contact.role == "title":
        return EmailContent(
            subject=f"{property_address} (Loan #{loan_number}) - Title Order Request",
            body=f"""Hi {contact.name},

I am working on originating a loan for my borrower, {borrower_name}, who is {purpose} the property located at {property_address}. The title for this transaction is under the entity "{entity}". Please process the title order in line with the attached instructions.

Please confirm receipt of this email.

If you need further clarification or additional details, don't hesitate to reach me directly here{cell}.

I appreciate your help and look forward to working with you.

Best regards,

{signature}""",
        )

    if contact.role == "insurance":
        return EmailContent(
            subject=f"{property_address} (Loan #{loan_number}) – Insurance Requirements",
            body=f"""Hi {contact.name},

I'm working on originating a loan for my borrower, {borrower_name}, who is {purpose} the property located at {property_address}. The policyholder must be listed as "{entity}".

Please provide the following insurance requirements for this transaction:

1. Bound Evidence of Insurance (EOI) or Binder (quotes are not accepted)
2. Dwelling Coverage: Must be listed with a dollar amount
3. Coverage must be equal to or greater than the loan amount, OR provide a Replacement Cost Estimate
4. Named Storm/Hurricane (Florida only): Must be explicitly named on policy (Deductible must also be listed and not exceed 10% of coverage)
5. Loss of Rent: Must be listed with a dollar amount
6. Annual Premium must be listed on the policy
7. Confirm that Wind and Fire are included in the policy
8. Confirm whether the premium is paid in full or what balance is due
9. Policy must include the lender's Mortgagee Clause exactly as provided
10. Include the Loan Number on the policy
11. List the Borrower Name as the named insured exactly as legally spelled

Please review carefully and respond accordingly to help avoid delays or follow-up revision requests.

Thanks,

{signature}""",
        )

    if contact.role == "lender":
        return EmailContent(
            subject=f"{property_address} (Loan #{loan_number}) - Payoff Request",
            body=f"""Hi {contact.name},

I am working on originating a loan for my borrower, {borrower_name}, who is {purpose} the property located at {property_address}. The title for this transaction is under the entity "{entity}".

To proceed, we need a payoff letter for the existing loan (#[Loan Number]). Please provide a written payoff statement that includes the following details:

Current outstanding balance
Per diem interest amount
Payoff amount good through [Requested Date]
Wiring instructions for final payment
Any additional fees required for loan payoff

If a borrower authorization form is required, please let me know, and I will provide it promptly.

Please confirm receipt of this request, and let me know if you need any additional information to process it efficiently.

Thanks for your help. I look forward to working with you.

Best regards,

{signature}""",
        )

    if contact.role == "borrower":
        portal = f"\n\n{sender.portal_link}" if sender.portal_link else ""
        return EmailContent(
            subject=f"{property_address} (Loan #{loan_number}) - Required Items",
            body=f"""Hi {borrower_name},

Please share the following documents/information to the secure portal below at your earliest convenience.{portal}

1. Signed/Completed borrowing authorization form
2. Signed/Completed disclosure form
3. HUD (or Deed to show property ownership)
4. 2 recent bank statements
5. Voided Check
6. All Current Leases
7. Insurance Certificate and Proof of Premium Payment
8. Insurance Agent Info (Name, Email, Phone)
9. Title/Closing Agent Info (Name, Email, Phone)
10. Payoff Letter from Existing Lenders (or if owned free and clear please specify here)
11. Existing Lender Contact Info (Name, Email, Phone)
12. LLC Docs:
---Articles of Organization
---Operating Agreement
---Certificate of Good Standing
---EIN Letter

Please let me know if you have any questions or would like to discuss any of the above items.

Thanks,

{signature}""",
        )

    return EmailContent(
        subject=f"{property_address} (#{loan_number}) - Loan Coordination",
        body=f"""Dear {contact.name},

We have a new loan file and wanted to coordinate with you on the next steps.

Loan Details:
• Property Address: {property_address}
• Borrower: {borrower_name}
• Loan Number: {loan_number}

Please let us know if you need any additional information from our side.

Best regards,
{signature}""",
    )


def _first_contact_name(contacts: Iterable[ContactRecord], role: str) -> Optional[str]:
    return next((c.name for c in contacts if c.role == role), None)


def build_template_context(
    loan: LoanRecord,
    contacts: Iterable[ContactRecord] = (),
    missing: Iterable[str] = (),
    sender: Optional[SenderProfile] = None,
) -> dict[str, str]:
    """Placeholder values known for a loan. Unknown values are omitted, not blanked."""
    contacts = list(contacts)
    missing = list(missing)
    values: dict[str, Optional[str]] = {
        "BORROWER_NAME": loan.borrower_name,
        "BORROWER_ENTITY_NAME": loan.borrower_entity_name or loan.borrower_name,
        "LOAN_NUMBER": loan.loan_number,
        "PROPERTY_ADDRESS": loan.property_address,
        "LOAN_PURPOSE": loan_purpose_text(loan.loan_purpose),
        "LOAN_AMOUNT": loan.loan_amount,
        "TARGET_CLOSING_DATE": loan.target_close_date,
        "TITLE_AGENT_NAME": _first_contact_name(contacts, "title"),
        "INSURANCE_AGENT_NAME": _first_contact_name(contacts, "insurance"),
        "EXISTING_LENDER_NAME": _first_contact_name(contacts, "lender"),
        "MISSING_DOCUMENTS": "\n".join(f"- {name}" for name in missing) if missing else None,
    }
    if sender is not None:
        values.update(
            {
                "PROCESSOR_NAME": sender.name,
                "COMPANY_NAME": sender.company or None,
                "SECURE_PORTAL_LINK": sender.portal_link,
            }
        )
    return {k: v for k, v in values.items() if v}


def default_templates() -> list[EmailTemplate]:
    """Built-in template library; returns fresh objects on every call."""
    return [EmailTemplate(**spec) for spec in _TEMPLATE_SPECS]


def find_template(templates: Iterable[EmailTemplate], template_id: int) -> Optional[EmailTemplate]:
    return next((t for t in templates if t.id == template_id), None)


_TEMPLATE_SPECS: tuple[dict, ...] = (
    {
        "id": 1,
        "category": "borrower",
        "title": "Initial Required Items",
        "subject": "{PROPERTY_ADDRESS} (Loan #{LOAN_NUMBER}) - Required Items",
        "body": """Hi {BORROWER_NAME},

Please sign/date the attached borrowing authorization form and disclosure form, and please return them to me as soon as possible to get the file into processing.

Afterwards, please share or upload the following documents/information to the secure portal below at your earliest convenience.

{SECURE_PORTAL_LINK}

HUD (or Deed to show property ownership)
2 recent bank statements
Voided Check
All Current Leases
Insurance Certificate and Proof of Premium Payment
Insurance Agent Info (Name, Email, Phone)
Title/Closing Agent Info (Name, Email, Phone)
Payoff Letter from Existing Lenders (or if owned free and clear please specify here)
Existing Lender Contact Info (Name, Email, Phone)
LLC Docs:
Articles of Organization
Operating Agreement
Certificate of Good Standing
EIN Letter

Please let me know if you have any questions or would like to discuss any of the above items.

Thanks,
{PROCESSOR_NAME}""",
    },
    {
        "id": 2,
        "category": "borrower",
        "title": "Missing Documents Reminder",
        "subject": "URGENT: Missing Documents for Your Loan Application",
        "body": """Dear {BORROWER_NAME},

I hope this email finds you well. I'm writing regarding your DSCR loan application for {PROPERTY_ADDRESS}.

Our underwriting team has reviewed your file and noted that we still need the following documents to proceed:

{MISSING_DOCUMENTS}

Without these documents, we cannot move forward with your loan. Please submit them at your earliest convenience.

Let me know if you have any questions or need assistance gathering these documents.

Thank you for your prompt attention to this matter.

Best regards,
{PROCESSOR_NAME}
Loan Processor
{COMPANY_NAME}""",
    },
    {
        "id": 3,
        "category": "title",
        "title": "Title Order Request",
        "subject": "{PROPERTY_ADDRESS} (Loan #{LOAN_NUMBER}) - Title Order Request",
        "body": """Hi {TITLE_AGENT_NAME},

I am working on originating a loan for my borrower, {BORROWER_NAME}, who is {LOAN_PURPOSE} the property located at {PROPERTY_ADDRESS}. The title for this transaction is under the entity "{BORROWER_ENTITY_NAME}". Please process the title order in line with the instructions below.

Please confirm receipt of this email.

I appreciate your help and look forward to working with you.

Best regards,
{PROCESSOR_NAME}

------------- TITLE REQUIREMENTS -------------

1. Preliminary title report or title commitment (must include coverage amount)
2. A 24-month chain of title, including deeds
3. Property address and APN referenced in report
4. Vested owner matches seller on the purchase contract
5. Estimated HUD-1 that includes all fees for this transaction
6. Closing Protection Letter
7. Tax Certificate
8. Contact information for closing documents
9. Wire instructions
10. Confirm property type and if there is an HOA associated with the property

LOAN INFORMATION:
Loan Number: {LOAN_NUMBER}
Loan Amount: {LOAN_AMOUNT}
Borrower: {BORROWER_ENTITY_NAME}
Property Address: {PROPERTY_ADDRESS}
Target Signing Date: {TARGET_CLOSING_DATE}
Loan Purpose: {LOAN_PURPOSE}""",
    },
    {
        "id": 4,
        "category": "lender",
        "title": "Existing Lender Payoff Request",
        "subject": "{PROPERTY_ADDRESS} (Loan #{LOAN_NUMBER}) - Payoff Request",
        "body": """Hi {EXISTING_LENDER_NAME},

I am working on originating a loan for my borrower, {BORROWER_NAME}, who is {LOAN_PURPOSE} the property located at {PROPERTY_ADDRESS}. The title for this transaction is under the entity "{BORROWER_ENTITY_NAME}".

To proceed, we need a payoff letter for the existing loan (#{EXISTING_LOAN_NUMBER}). Please provide a written payoff statement that includes the following details:

Current outstanding balance
Per diem interest amount
Payoff amount good through {REQUESTED_PAYOFF_DATE}
Wiring instructions for final payment
Any additional fees required for loan payoff

If a borrower authorization form is required, please let me know, and I will provide it promptly.

Please confirm receipt of this request, and let me know if you need any additional information to process it efficiently.

Thanks for your help. I look forward to working with you.

Best regards,
{PROCESSOR_NAME}""",
    },
    {
        "id": 5,
        "category": "insurance",
        "title": "Insurance Requirements",
        "subject": "{PROPERTY_ADDRESS} (Loan #{LOAN_NUMBER}) – Insurance Requirements",
        "body": """Hi {INSURANCE_AGENT_NAME},

I'm working on originating a loan for my borrower, {BORROWER_NAME}, who is {LOAN_PURPOSE} the property located at {PROPERTY_ADDRESS}. The policyholder must be listed as "{BORROWER_ENTITY_NAME}".

Below is a summary of the lender's requirements and instructions for approval. Please review carefully and respond accordingly to help avoid delays or follow-up revision requests.

REQUIRED COVERAGES

Provide a Bound Evidence of Insurance (EOI) or Binder (quotes are not accepted)
Dwelling Coverage: Must be listed with a dollar amount
Coverage must be equal to or greater than the loan amount, OR provide a Replacement Cost Estimate
Named Storm/Hurricane (Florida only): Must be explicitly named on policy
Loss of Rent: Must be listed with a dollar amount
List the Annual Premium on the policy, or confirm it in your reply
Confirm that Wind and Fire are included in the policy
Confirm whether the premium is paid in full or what balance is due
Include the Loan Number on the policy
List the Borrower Name as the named insured exactly as legally spelled

Thanks,
{PROCESSOR_NAME}""",
    },
    {
        "id": 6,
        "category": "title",
        "title": "Title Follow-up",
        "subject": "FOLLOW-UP: {PROPERTY_ADDRESS} (Loan #{LOAN_NUMBER}) - Title Order",
        "body": """Hi {TITLE_AGENT_NAME},

I wanted to follow up on the title order request I sent for {PROPERTY_ADDRESS} (Loan #{LOAN_NUMBER}).

We're working toward a target closing date of {TARGET_CLOSING_DATE}, so I wanted to check on the status of the following items:

- Preliminary title report
- 24-month chain of title
- Estimated HUD-1
- Closing Protection Letter
- Wire instructions

Please let me know if you need any additional information from our end to expedite the process.

Thanks for your assistance!

Best regards,
{PROCESSOR_NAME}""",
    },
    {
        "id": 7,
        "category": "insurance",
        "title": "Insurance Follow-up",
        "subject": "FOLLOW-UP: {PROPERTY_ADDRESS} (Loan #{LOAN_NUMBER}) - Insurance Requirements",
        "body": """Hi {INSURANCE_AGENT_NAME},

I wanted to follow up on the insurance requirements I sent for {PROPERTY_ADDRESS} (Loan #{LOAN_NUMBER}).

We're working toward a target closing date of {TARGET_CLOSING_DATE}, so I wanted to check on the status of the insurance binder.

As a reminder, we still need:
- Bound Evidence of Insurance (EOI) or Binder
- Dwelling coverage equal to or greater than loan amount
- Loss of Rent coverage with dollar amount
- Confirmation that Wind and Fire are included
- Premium payment status

Please let me know if you have any questions or need additional information.

Thanks for your help!

Best regards,
{PROCESSOR_NAME}""",
    },
    {
        "id": 8,
        "category": "lender",
        "title": "Payoff Follow-up",
        "subject": "FOLLOW-UP: {PROPERTY_ADDRESS} (Loan #{LOAN_NUMBER}) - Payoff Request",
        "body": """Hi {EXISTING_LENDER_NAME},

I wanted to follow up on the payoff letter request I sent for the existing loan on {PROPERTY_ADDRESS} (Loan #{LOAN_NUMBER}).

We're working toward a target closing date of {TARGET_CLOSING_DATE}, so I wanted to check on the status of the payoff statement.

As a reminder, we need:
- Current outstanding balance
- Per diem interest amount
- Payoff amount good through {REQUESTED_PAYOFF_DATE}
- Wiring instructions for final payment
- Any additional fees required for loan payoff

Please let me know if you need any additional information to process this request.

Thanks for your assistance!

Best regards,
{PROCESSOR_NAME}""",
    },
)
