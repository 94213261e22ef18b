from typing import Literal, Optional

from pydantic import BaseModel, Field

DocumentSource = Literal["upload", "gmail", "drive"]


class DocumentCreate(BaseModel):
    """Register a stored file against a loan. Category is suggested from the name when omitted."""
    name: str = Field(..., min_length=1)
    file_id: str = Field(..., alias="fileId", min_length=1)
    file_type: Optional[str] = Field(None, alias="fileType")
    file_size: Optional[int] = Field(None, alias="fileSize", ge=0)
    category: Optional[str] = None
    status: str = "pending"
    source: DocumentSource = "upload"

    model_config = {"populate_by_name": True}


class DocumentUpdate(BaseModel):
    name: Optional[str] = None
    file_id: Optional[str] = Field(None, alias="fileId")
    file_type: Optional[str] = Field(None, alias="fileType")
    category: Optional[str] = None
    status: Optional[str] = None

    model_config = {"populate_by_name": True}
