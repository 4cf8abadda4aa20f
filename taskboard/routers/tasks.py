from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from .. import crud
from ..db import get_session
from ..enums import Priority, TaskStatus
from ..schemas import BoardColumn, TaskCreate, TaskMove, TaskOut, TaskUpdate

router = APIRouter()

COLUMN_TITLES = {
    TaskStatus.backlog: "Backlog",
    TaskStatus.todo: "To Do",
    TaskStatus.in_progress: "In Progress",
    TaskStatus.review: "Review",
    TaskStatus.done: "Done",
}


async def _check_assignee(db: AsyncSession, assignee_id: str | None):
    if assignee_id and not await crud.get_member(db, assignee_id):
        raise HTTPException(422, f"Unknown assignee: {assignee_id}")


@router.post("", response_model=TaskOut)
async def create_task(payload: TaskCreate, db: AsyncSession = Depends(get_session)):
    await _check_assignee(db, payload.assignee_id)
    return await crud.create_task(db, payload)


@router.get("", response_model=list[TaskOut])
async def list_tasks(
    status: TaskStatus | None = Query(None, description="Filter by column"),
    search: str | None = Query(None, description="Case-insensitive title substring"),
    assignee: list[str] | None = Query(None),
    priority: list[Priority] | None = Query(None),
    label: list[str] | None = Query(None),
    due_from: datetime | None = None,
    due_to: datetime | None = None,
    limit: int = 100,
    offset: int = 0,
    db: AsyncSession = Depends(get_session),
):
    return await crud.list_tasks(
        db,
        status=status,
        search=search,
        assignees=assignee,
        priorities=priority,
        labels=label,
        due_from=due_from,
        due_to=due_to,
        limit=limit,
        offset=offset,
    )


@router.get("/board", response_model=list[BoardColumn])
async def get_board(
    search: str | None = None,
    assignee: list[str] | None = Query(None),
    priority: list[Priority] | None = Query(None),
    label: list[str] | None = Query(None),
    db: AsyncSession = Depends(get_session),
):
    columns = await crud.board(db, search=search, assignees=assignee, priorities=priority, labels=label)
    return [
        BoardColumn(
            id=status.value,
            title=COLUMN_TITLES[status],
            tasks=[TaskOut.model_validate(t) for t in tasks],
        )
        for status, tasks in columns.items()
    ]


@router.get("/{task_id}", response_model=TaskOut)
async def get_task(task_id: int, db: AsyncSession = Depends(get_session)):
    task = await crud.get_task(db, task_id)
    if not task:
        raise HTTPException(404, "Task not found")
    return task


@router.patch("/{task_id}", response_model=TaskOut)
async def update_task(task_id: int, payload: TaskUpdate, db: AsyncSession = Depends(get_session)):
    await _check_assignee(db, payload.assignee_id)
    task = await crud.update_task(db, task_id, payload)
    if not task:
        raise HTTPException(404, "Task not found")
    return task


@router.post("/{task_id}/move", response_model=TaskOut)
async def move_task(task_id: int, payload: TaskMove, db: AsyncSession = Depends(get_session)):
    task = await crud.move_task(db, task_id, payload.status)
    if not task:
        raise HTTPException(404, "Task not found")
    return task


@router.delete("/{task_id}")
async def delete_task(task_id: int, db: AsyncSession = Depends(get_session)):
    ok = await crud.delete_task(db, task_id)
    if not ok:
        raise HTTPException(404, "Task not found")
    return {"deleted": True}
