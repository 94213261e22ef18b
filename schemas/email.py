from typing import Literal, Optional

from pydantic import BaseModel, Field

TemplateCategory = Literal["borrower", "title", "insurance", "lender"]


class EmailContent(BaseModel):
    subject: str
    body: str


class EmailTemplate(EmailContent):
    id: int
    category: TemplateCategory
    title: str


class EmailDraft(EmailContent):
    to: Optional[str] = None
    template_id: Optional[int] = Field(None, alias="templateId")

    model_config = {"populate_by_name": True}


class SenderProfile(BaseModel):
    """Signature block appended to generated drafts."""
    name: str
    title: Optional[str] = None
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    portal_link: Optional[str] = None


class TemplateRenderRequest(BaseModel):
    # Extra or overriding placeholder values, e.g. {"REQUESTED_PAYOFF_DATE": "06/30"}
    context: dict[str, str] = Field(default_factory=dict)
