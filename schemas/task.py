from typing import Optional

from pydantic import BaseModel, Field

from schemas.records import TaskPriority


class TaskCreate(BaseModel):
    description: str = Field(..., min_length=1)
    due_date: Optional[str] = Field(None, alias="dueDate")
    priority: TaskPriority = "medium"
    completed: bool = False

    model_config = {"populate_by_name": True}


class TaskUpdate(BaseModel):
    description: Optional[str] = None
    due_date: Optional[str] = Field(None, alias="dueDate")
    priority: Optional[TaskPriority] = None
    completed: Optional[bool] = None

    model_config = {"populate_by_name": True}
