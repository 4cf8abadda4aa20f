import logging
from collections.abc import Sequence
from datetime import UTC, date, datetime

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .enums import BOARD_COLUMNS, Priority, TaskStatus
from .models import DailyReport, Label, Task, TeamMember
from .schemas import (
    LabelCreate,
    MemberCreate,
    MemberUpdate,
    ReportCreate,
    ReportUpdate,
    TaskCreate,
    TaskUpdate,
)

logger = logging.getLogger(__name__)


def _normalize_due(dt):
    if dt is None:
        return None
    # If tz-aware, convert to UTC and drop tzinfo (store naive UTC)
    if getattr(dt, "tzinfo", None) is not None:
        return dt.astimezone(UTC).replace(tzinfo=None)
    return dt


# --- tasks ---


async def create_task(db: AsyncSession, payload: TaskCreate) -> Task:
    data = payload.model_dump()
    data["due_date"] = _normalize_due(data.get("due_date"))
    task = Task(**data)
    db.add(task)
    await db.commit()
    await db.refresh(task)
    logger.info("Created task %s in %s", task.id, task.status.value)
    return task


async def get_task(db: AsyncSession, task_id: int) -> Task | None:
    res = await db.execute(select(Task).where(Task.id == task_id))
    return res.scalar_one_or_none()


async def list_tasks(
    db: AsyncSession,
    status: TaskStatus | None = None,
    search: str | None = None,
    assignees: Sequence[str] | None = None,
    priorities: Sequence[Priority] | None = None,
    labels: Sequence[str] | None = None,
    due_from: datetime | None = None,
    due_to: datetime | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[Task]:
    """
    All filters are ANDed. A task without a due date is never excluded by
    due_from/due_to. Labels match if the task carries any of them.
    """
    stmt = select(Task).order_by(Task.created_at.desc(), Task.id.desc())
    if status:
        stmt = stmt.where(Task.status == TaskStatus(status))
    if search:
        stmt = stmt.where(func.lower(Task.title).contains(search.lower(), autoescape=True))
    if assignees:
        stmt = stmt.where(Task.assignee_id.in_(list(assignees)))
    if priorities:
        stmt = stmt.where(Task.priority.in_([Priority(p) for p in priorities]))
    if due_from:
        stmt = stmt.where(or_(Task.due_date.is_(None), Task.due_date >= _normalize_due(due_from)))
    if due_to:
        stmt = stmt.where(or_(Task.due_date.is_(None), Task.due_date <= _normalize_due(due_to)))

    if not labels:
        res = await db.execute(stmt.limit(limit).offset(offset))
        return list(res.scalars().all())

    # labels live in a JSON column; filter here
    wanted = {label.lower() for label in labels}
    res = await db.execute(stmt)
    matching = [t for t in res.scalars().all() if wanted & {label.lower() for label in t.labels or []}]
    return matching[offset : offset + limit]


async def update_task(db: AsyncSession, task_id: int, payload: TaskUpdate):
    task = await get_task(db, task_id)
    if not task:
        return None
    updates = payload.model_dump(exclude_unset=True)
    for required in ("title", "status", "priority"):
        if required in updates and updates[required] is None:
            del updates[required]
    if "due_date" in updates:
        updates["due_date"] = _normalize_due(updates["due_date"])
    if "status" in updates and updates["status"] != task.status:
        task.history = _with_move(task, updates["status"])
    for k, v in updates.items():
        setattr(task, k, v)
    await db.commit()
    await db.refresh(task)
    return task


def _with_move(task: Task, to: TaskStatus) -> list[dict]:
    entry = {
        "from": task.status.value,
        "to": TaskStatus(to).value,
        "at": datetime.now(UTC).isoformat(),
    }
    # new list so the JSON column is flagged dirty
    return [*(task.history or []), entry]


async def move_task(db: AsyncSession, task_id: int, status: TaskStatus) -> Task | None:
    task = await get_task(db, task_id)
    if not task:
        return None
    status = TaskStatus(status)
    if task.status != status:
        logger.info("Moving task %s: %s -> %s", task.id, task.status.value, status.value)
        task.history = _with_move(task, status)
        task.status = status
        await db.commit()
        await db.refresh(task)
    return task


async def delete_task(db: AsyncSession, task_id: int) -> bool:
    task = await get_task(db, task_id)
    if not task:
        return False
    await db.delete(task)
    await db.commit()
    logger.info("Deleted task %s", task_id)
    return True


async def board(db: AsyncSession, **filters) -> dict[TaskStatus, list[Task]]:
    """Tasks grouped by column, columns in board order."""
    tasks = await list_tasks(db, limit=10_000, **filters)
    columns: dict[TaskStatus, list[Task]] = {status: [] for status in BOARD_COLUMNS}
    for task in sorted(tasks, key=lambda t: (t.created_at, t.id)):
        columns[task.status].append(task)
    return columns


# --- team members ---


async def create_member(db: AsyncSession, payload: MemberCreate) -> TeamMember:
    member = TeamMember(**payload.model_dump())
    db.add(member)
    await db.commit()
    await db.refresh(member)
    logger.info("Added team member %s (%s)", member.name, member.id)
    return member


async def get_member(db: AsyncSession, member_id: str) -> TeamMember | None:
    res = await db.execute(select(TeamMember).where(TeamMember.id == member_id))
    return res.scalar_one_or_none()


async def get_member_by_email(db: AsyncSession, email: str) -> TeamMember | None:
    res = await db.execute(select(TeamMember).where(func.lower(TeamMember.email) == email.lower()))
    return res.scalar_one_or_none()


async def list_members(db: AsyncSession) -> list[TeamMember]:
    res = await db.execute(select(TeamMember).order_by(TeamMember.name))
    return list(res.scalars().all())


async def update_member(db: AsyncSession, member_id: str, payload: MemberUpdate):
    member = await get_member(db, member_id)
    if not member:
        return None
    for k, v in payload.model_dump(exclude_unset=True).items():
        if v is None and k in ("name", "email", "user_role"):
            continue
        setattr(member, k, v)
    await db.commit()
    await db.refresh(member)
    return member


async def delete_member(db: AsyncSession, member_id: str) -> bool:
    member = await get_member(db, member_id)
    if not member:
        return False
    await db.execute(update(Task).where(Task.assignee_id == member_id).values(assignee_id=None))
    # standup reports belong to their author and go with them
    await db.execute(delete(DailyReport).where(DailyReport.author_id == member_id))
    await db.delete(member)
    await db.commit()
    logger.info("Removed team member %s; their tasks are now unassigned and their reports removed", member_id)
    return True


# --- labels ---


async def create_label(db: AsyncSession, payload: LabelCreate) -> Label:
    label = Label(**payload.model_dump())
    db.add(label)
    await db.commit()
    await db.refresh(label)
    return label


async def get_label_by_name(db: AsyncSession, name: str) -> Label | None:
    res = await db.execute(select(Label).where(func.lower(Label.name) == name.lower()))
    return res.scalar_one_or_none()


async def list_labels(db: AsyncSession) -> list[Label]:
    res = await db.execute(select(Label).order_by(Label.name))
    return list(res.scalars().all())


async def delete_label(db: AsyncSession, label_id: str) -> bool:
    res = await db.execute(select(Label).where(Label.id == label_id))
    label = res.scalar_one_or_none()
    if not label:
        return False
    await db.delete(label)
    await db.commit()
    return True


# --- daily reports ---


async def create_report(db: AsyncSession, payload: ReportCreate) -> DailyReport:
    report = DailyReport(**payload.model_dump())
    db.add(report)
    await db.commit()
    await db.refresh(report)
    logger.info("Daily report %s filed by %s for %s", report.id, report.author_id, report.report_date)
    return report


async def get_report(db: AsyncSession, report_id: str) -> DailyReport | None:
    res = await db.execute(select(DailyReport).where(DailyReport.id == report_id))
    return res.scalar_one_or_none()


async def list_reports(db: AsyncSession, author_id: str | None = None, report_date: date | None = None) -> list[DailyReport]:
    stmt = select(DailyReport).order_by(DailyReport.report_date.desc(), DailyReport.created_at.desc())
    if author_id:
        stmt = stmt.where(DailyReport.author_id == author_id)
    if report_date:
        stmt = stmt.where(DailyReport.report_date == report_date)
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def update_report(db: AsyncSession, report_id: str, payload: ReportUpdate):
    report = await get_report(db, report_id)
    if not report:
        return None
    for k, v in payload.model_dump(exclude_unset=True).items():
        if v is None and k != "blockers":
            continue
        setattr(report, k, v)
    await db.commit()
    await db.refresh(report)
    return report


async def delete_report(db: AsyncSession, report_id: str) -> bool:
    report = await get_report(db, report_id)
    if not report:
        return False
    await db.delete(report)
    await db.commit()
    return True
