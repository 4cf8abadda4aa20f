from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from .. import crud
from ..db import get_session
from ..schemas import LabelCreate, LabelOut

router = APIRouter()


@router.post("", response_model=LabelOut)
async def create_label(payload: LabelCreate, db: AsyncSession = Depends(get_session)):
    if await crud.get_label_by_name(db, payload.name):
        raise HTTPException(409, f"Label '{payload.name}' already exists")
    return await crud.create_label(db, payload)


@router.get("", response_model=list[LabelOut])
async def list_labels(db: AsyncSession = Depends(get_session)):
    return await crud.list_labels(db)


@router.delete("/{label_id}")
async def delete_label(label_id: str, db: AsyncSession = Depends(get_session)):
    ok = await crud.delete_label(db, label_id)
    if not ok:
        raise HTTPException(404, "Label not found")
    return {"deleted": True}
