"""
Request dependencies: core services live on app.state, built once in the lifespan.
"""
from fastapi import HTTPException, Request

from config import settings
from schemas.email import EmailTemplate, SenderProfile
from services.assistant import LoanAssistant
from services.checklist import ChecklistTracker
from services.errors import InvalidInputError
from services.requirements import RequirementResolver


def get_resolver(request: Request) -> RequirementResolver:
    return request.app.state.resolver


def get_tracker(request: Request) -> ChecklistTracker:
    return request.app.state.tracker


def get_assistant(request: Request) -> LoanAssistant:
    return request.app.state.assistant


def get_templates(request: Request) -> list[EmailTemplate]:
    return request.app.state.templates


def sender_from_settings() -> SenderProfile:
    return SenderProfile(
        name=settings.sender_name,
        title=settings.sender_title or None,
        company=settings.sender_company or None,
        email=settings.sender_email or None,
        phone=settings.sender_phone or None,
        portal_link=settings.secure_portal_link,
    )


def bad_request(e: InvalidInputError) -> HTTPException:
    return HTTPException(status_code=400, detail=str(e))
