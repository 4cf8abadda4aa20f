import logging
from collections.abc import Sequence
from dataclasses import asdict
from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from .. import crud
from ..config import settings
from ..db import get_session
from ..enums import Priority, TaskStatus
from ..models import Label
from ..nlp.parser import ParsedTask, parse_quick_task
from ..schemas import ParsedTaskOut, TaskCreate, TaskOut
from ..utils.text import contains_either_way

logger = logging.getLogger(__name__)

router = APIRouter()


class IngestIn(BaseModel):
    # the title is what is left of the text, so this also bounds the title
    text: str = Field(..., max_length=280)
    channel: str | None = None


def get_now() -> datetime:
    """Reference moment for today/tomorrow/weekday, in the configured timezone."""
    return datetime.now(ZoneInfo(settings.timezone))


def match_labels(parsed: Sequence[str] | None, known: Sequence[Label]) -> list[str] | None:
    """
    Map typed labels onto the board's labels: a known label matches when either
    name contains the other. Typed labels with no match are kept as typed.
    """
    if not parsed:
        return None
    out: list[str] = []
    for typed in parsed:
        label = next((k for k in known if contains_either_way(k.name, typed)), None)
        name = label.name if label else typed
        if name not in out:
            out.append(name)
    return out


async def _parse(payload: IngestIn, db: AsyncSession, now: datetime) -> ParsedTask:
    if not payload.text.strip():
        raise HTTPException(422, "Task text is empty")
    roster = await crud.list_members(db)
    return parse_quick_task(payload.text, roster, now)


@router.post("", response_model=TaskOut)
async def ingest(payload: IngestIn, db: AsyncSession = Depends(get_session), now: datetime = Depends(get_now)):
    parsed = await _parse(payload, db, now)
    task = TaskCreate(
        title=parsed.title,
        status=parsed.status or TaskStatus.todo,
        priority=parsed.priority or Priority.medium,
        assignee_id=parsed.assignee,
        due_date=parsed.due_date,
        estimated_hours=parsed.estimated_hours,
        labels=match_labels(parsed.labels, await crud.list_labels(db)),
        channel=payload.channel or "quick-add",
    )
    logger.info("Quick add %r -> %r", payload.text, task.title)
    return await crud.create_task(db, task)


@router.post("/preview", response_model=ParsedTaskOut)
async def preview(payload: IngestIn, db: AsyncSession = Depends(get_session), now: datetime = Depends(get_now)):
    parsed = await _parse(payload, db, now)
    member = await crud.get_member(db, parsed.assignee) if parsed.assignee else None
    return ParsedTaskOut(**asdict(parsed), assignee_name=member.name if member else None)
