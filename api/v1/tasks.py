# api/v1/tasks.py
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.v1.schemas import TaskOut, TaskUpdate
from services.auth import current_user_id
from services.db import DailyTask, get_session, utc_now

router = APIRouter()


@router.get("", response_model=list[TaskOut])
async def list_tasks(
    day: date | None = None,
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> list[TaskOut]:
    """Tasks due on `day` (default: today)."""
    res = await db.execute(
        select(DailyTask)
        .where(DailyTask.user_id == user_id, DailyTask.target_date == (day or date.today()))
        .order_by(DailyTask.task_type, DailyTask.id)
    )
    return [TaskOut.model_validate(t, from_attributes=True) for t in res.scalars().all()]


@router.patch("/{task_id}", response_model=TaskOut)
async def update_task(
    task_id: int,
    body: TaskUpdate,
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> TaskOut:
    task = await db.get(DailyTask, task_id)
    if task is None or task.user_id != user_id:
        raise HTTPException(status_code=404, detail="Task not found")

    task.is_completed = body.is_completed
    task.completed_at = utc_now() if body.is_completed else None
    await db.commit()
    return TaskOut.model_validate(task, from_attributes=True)
