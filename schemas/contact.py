from typing import Optional

from pydantic import BaseModel, Field

from schemas.records import ContactRole


class ContactCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    role: ContactRole
    is_analyst: bool = Field(False, alias="isAnalyst")

    model_config = {"populate_by_name": True}


class ContactUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    role: Optional[ContactRole] = None
    is_analyst: Optional[bool] = Field(None, alias="isAnalyst")

    model_config = {"populate_by_name": True}
