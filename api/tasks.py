from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models import Task
from schemas.task import TaskCreate, TaskUpdate
from services.loan_context import load_loan
from utils import iso

router = APIRouter(prefix="/api", tags=["tasks"])

MSG_LOAN_NOT_FOUND = "Loan not found"
MSG_TASK_NOT_FOUND = "Task not found"


def _task_to_response(t: Task) -> dict[str, Any]:
    return {
        "id": t.id,
        "loanId": t.loan_id,
        "description": t.description,
        "dueDate": t.due_date,
        "priority": t.priority,
        "completed": t.completed,
        "createdAt": iso(t.created_at),
    }


async def _get_task_or_404(db: AsyncSession, task_id: str) -> Task:
    result = await db.execute(select(Task).where(Task.id == task_id))
    task = result.scalar_one_or_none()
    if not task:
        raise HTTPException(status_code=404, detail=MSG_TASK_NOT_FOUND)
    return task


@router.get("/loans/{loan_id}/tasks")
async def list_tasks(loan_id: str, db: AsyncSession = Depends(get_db)):
    if not await load_loan(db, loan_id):
        raise HTTPException(status_code=404, detail=MSG_LOAN_NOT_FOUND)
    result = await db.execute(
        select(Task).where(Task.loan_id == loan_id).order_by(Task.completed, Task.created_at)
    )
    return [_task_to_response(t) for t in result.scalars().all()]


@router.post("/loans/{loan_id}/tasks", status_code=201)
async def create_task(loan_id: str, body: TaskCreate, db: AsyncSession = Depends(get_db)):
    if not await load_loan(db, loan_id):
        raise HTTPException(status_code=404, detail=MSG_LOAN_NOT_FOUND)
    task = Task(
        id=f"task-{uuid.uuid4().hex[:12]}",
        loan_id=loan_id,
        **body.model_dump(by_alias=False),
        created_at=datetime.now(timezone.utc),
    )
    db.add(task)
    await db.flush()
    return _task_to_response(task)


@router.patch("/tasks/{task_id}")
async def update_task(task_id: str, body: TaskUpdate, db: AsyncSession = Depends(get_db)):
    task = await _get_task_or_404(db, task_id)
    for field, value in body.model_dump(by_alias=False, exclude_unset=True, exclude_none=True).items():
        setattr(task, field, value)
    await db.flush()
    return _task_to_response(task)


@router.delete("/tasks/{task_id}", status_code=204)
async def delete_task(task_id: str, db: AsyncSession = Depends(get_db)):
    task = await _get_task_or_404(db, task_id)
    await db.delete(task)
    await db.flush()
    return None
