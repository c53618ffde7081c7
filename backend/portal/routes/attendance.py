"""Attendance API routes."""
from datetime import date as date_type, datetime, time, timedelta, timezone
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import desc
from sqlalchemy.ext.asyncio import AsyncSession

from portal.database import get_db
from portal.models.attendance import Attendance
from portal.schemas.attendance import AttendanceBatch, AttendanceResponse
from portal.schemas.common import DataResponse
from portal.services.record_store import RecordStore

router = APIRouter(prefix="/api/attendance", tags=["attendance"])


def attendance_store(db: AsyncSession) -> RecordStore:
    return RecordStore(db, Attendance, _to_response)


@router.post("", response_model=DataResponse[list[AttendanceResponse]])
async def mark_attendance(body: AttendanceBatch, db: AsyncSession = Depends(get_db)):
    """Save a batch of attendance records, one at a time."""
    store = attendance_store(db)
    saved = [await store.insert(record.model_dump()) for record in body.records]
    return {"success": True, "data": saved}


@router.get("/student/{student_id}", response_model=DataResponse[list[AttendanceResponse]])
async def student_attendance(student_id: str, db: AsyncSession = Depends(get_db)):
    """All attendance of one student, newest first."""
    rows = await attendance_store(db).find(
        order_by=(desc(Attendance.date),), student_id=student_id,
    )
    return {"success": True, "data": rows}


@router.get("/department", response_model=DataResponse[list[AttendanceResponse]])
async def department_attendance(
    year: Optional[str] = Query(None),
    department: Optional[str] = Query(None),
    date: Optional[date_type] = Query(None),
    period: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Attendance for a class, optionally narrowed to one day and period."""
    filters = {}
    if year:
        filters["year"] = year
    if department:
        filters["department"] = department
    if period:
        filters["period"] = period

    conditions = []
    if date:
        start = datetime.combine(date, time.min, tzinfo=timezone.utc)
        conditions = [Attendance.date >= start, Attendance.date < start + timedelta(days=1)]

    rows = await attendance_store(db).find(
        *conditions,
        order_by=(desc(Attendance.date), Attendance.student_name),
        **filters,
    )
    return {"success": True, "data": rows}


def _to_response(record: Attendance) -> dict:
    """Convert SQLAlchemy model to response dict."""
    return {
        "id": record.id,
        "student_id": record.student_id,
        "student_name": record.student_name,
        "status": record.status,
        "date": record.date,
        "period": record.period,
        "subject": record.subject,
        "marked_by": record.marked_by,
        "year": record.year,
        "department": record.department,
    }
