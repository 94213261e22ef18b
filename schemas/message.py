from pydantic import BaseModel, Field


class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1)


class AssistantReply(BaseModel):
    content: str
    sources: list[str] = Field(default_factory=list)
