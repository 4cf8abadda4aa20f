from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from .. import crud
from ..db import get_session
from ..schemas import MemberCreate, MemberOut, MemberUpdate

router = APIRouter()


@router.post("", response_model=MemberOut)
async def create_member(payload: MemberCreate, db: AsyncSession = Depends(get_session)):
    if await crud.get_member_by_email(db, payload.email):
        raise HTTPException(422, f"A team member with email {payload.email} already exists")
    return await crud.create_member(db, payload)


@router.get("", response_model=list[MemberOut])
async def list_members(db: AsyncSession = Depends(get_session)):
    return await crud.list_members(db)


@router.get("/{member_id}", response_model=MemberOut)
async def get_member(member_id: str, db: AsyncSession = Depends(get_session)):
    member = await crud.get_member(db, member_id)
    if not member:
        raise HTTPException(404, "Team member not found")
    return member


@router.patch("/{member_id}", response_model=MemberOut)
async def update_member(member_id: str, payload: MemberUpdate, db: AsyncSession = Depends(get_session)):
    if payload.email:
        other = await crud.get_member_by_email(db, payload.email)
        if other and other.id != member_id:
            raise HTTPException(422, f"A team member with email {payload.email} already exists")
    member = await crud.update_member(db, member_id, payload)
    if not member:
        raise HTTPException(404, "Team member not found")
    return member


@router.delete("/{member_id}")
async def delete_member(member_id: str, db: AsyncSession = Depends(get_session)):
    ok = await crud.delete_member(db, member_id)
    if not ok:
        raise HTTPException(404, "Team member not found")
    return {"deleted": True}
