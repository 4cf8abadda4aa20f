from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from .. import crud
from ..db import get_session
from ..schemas import ReportCreate, ReportOut, ReportUpdate

router = APIRouter()


@router.post("", response_model=ReportOut)
async def create_report(payload: ReportCreate, db: AsyncSession = Depends(get_session)):
    if not await crud.get_member(db, payload.author_id):
        raise HTTPException(422, f"Unknown author: {payload.author_id}")
    return await crud.create_report(db, payload)


@router.get("", response_model=list[ReportOut])
async def list_reports(
    author_id: str | None = Query(None, description="Only reports by this team member"),
    report_date: date | None = Query(None, description="Only reports for this day"),
    db: AsyncSession = Depends(get_session),
):
    return await crud.list_reports(db, author_id=author_id, report_date=report_date)


@router.get("/{report_id}", response_model=ReportOut)
async def get_report(report_id: str, db: AsyncSession = Depends(get_session)):
    report = await crud.get_report(db, report_id)
    if not report:
        raise HTTPException(404, "Report not found")
    return report


@router.patch("/{report_id}", response_model=ReportOut)
async def update_report(report_id: str, payload: ReportUpdate, db: AsyncSession = Depends(get_session)):
    report = await crud.update_report(db, report_id, payload)
    if not report:
        raise HTTPException(404, "Report not found")
    return report


@router.delete("/{report_id}")
async def delete_report(report_id: str, db: AsyncSession = Depends(get_session)):
    ok = await crud.delete_report(db, report_id)
    if not ok:
        raise HTTPException(404, "Report not found")
    return {"deleted": True}
