"""
Seed demo loan files (one per sample funder) with contacts and tasks.
Run: python -m scripts.seed_demo_loans (from the project root).
"""
import asyncio
import uuid
from datetime import datetime, timezone

from sqlalchemy import select

from database import init_db, session_scope
from models import Contact, Loan, Task
from services.checklist import ChecklistTracker
from services.loan_context import checklist_for
from services.requirement_catalog import build_default_catalog
from services.requirements import RequirementResolver

LOANS_DATA = [
    {
        "loan_number": "DEMO-1001",
        "borrower_name": "Maria Santos",
        "borrower_entity_name": "Santos Holdings LLC",
        "property_address": "123 Main St, Tampa, FL 33602",
        "property_type": "single_family",
        "estimated_value": 425_000,
        "loan_amount": "$318,750",
        "loan_to_value": 75,
        "loan_type": "DSCR",
        "loan_purpose": "purchase",
        "funder": "kiavi",
        "target_close_date": "2026-12-15",
        "completed_requirements": ["Driver's License (front and back)", "2 most recent Bank Statements"],
        "contacts": [
            {"name": "Dana Reyes", "email": "dana@suncoasttitle.com", "role": "title", "company": "Suncoast Title"},
            {"name": "Sam Lee", "email": "sam@coastalins.com", "role": "insurance", "company": "Coastal Insurance"},
        ],
        "tasks": [
            {"description": "Order appraisal through AMC", "priority": "high"},
            {"description": "Request insurance binder", "priority": "medium"},
        ],
    },
    {
        "loan_number": "DEMO-1002",
        "borrower_name": "James Carter",
        "borrower_entity_name": "Carter Rentals LLC",
        "property_address": "88 Oak Ave, Atlanta, GA 30303",
        "property_type": "duplex",
        "estimated_value": 510_000,
        "loan_amount": "$357,000",
        "loan_to_value": 70,
        "loan_type": "DSCR",
        "loan_purpose": "cash_out_refinance",
        "funder": "roc_capital",
        "target_close_date": "2027-01-20",
        "completed_requirements": [],
        "contacts": [
            {"name": "Priya Shah", "email": "payoffs@firstbank.com", "role": "lender", "company": "First Bank"},
        ],
        "tasks": [
            {"description": "Request payoff statement from current lender", "priority": "high"},
        ],
    },
]


async def seed():
    await init_db()
    tracker = ChecklistTracker(RequirementResolver(build_default_catalog()))
    async with session_scope() as session:
        for data in LOANS_DATA:
            data = dict(data)
            existing = await session.execute(select(Loan).where(Loan.loan_number == data["loan_number"]))
            if existing.scalar_one_or_none():
                print(f"Loan {data['loan_number']} already exists, skipping")
                continue
            contacts = data.pop("contacts")
            tasks = data.pop("tasks")
            now = datetime.now(timezone.utc)
            loan = Loan(
                id=f"loan-{uuid.uuid4().hex[:12]}",
                status="in_progress",
                document_assignments={},
                created_at=now,
                updated_at=now,
                **data,
            )
            checklist = checklist_for(loan)
            # Same rule the API applies on write: completed names must be on the funder's checklist
            tracker.validate_names(checklist, checklist.completed_requirements)
            loan.completion_percentage = tracker.percent_complete(checklist)
            session.add(loan)
            await session.flush()
            for c in contacts:
                session.add(Contact(id=f"contact-{uuid.uuid4().hex[:12]}", loan_id=loan.id, **c))
            for t in tasks:
                session.add(Task(id=f"task-{uuid.uuid4().hex[:12]}", loan_id=loan.id, created_at=now, **t))
            print(f"Seeded loan: {data['loan_number']} ({loan.completion_percentage}% complete)")
    print("Seed complete.")


if __name__ == "__main__":
    asyncio.run(seed())
