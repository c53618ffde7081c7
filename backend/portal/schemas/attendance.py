"""Attendance and SMS request/response schemas."""
from typing import Optional
from datetime import datetime
from portal.schemas.base import CamelModel, CamelORMModel


class AttendanceCreate(CamelModel):
    student_id: str
    student_name: Optional[str] = None
    status: Optional[str] = None
    date: Optional[datetime] = None
    period: Optional[str] = None
    subject: Optional[str] = None
    marked_by: Optional[str] = None
    year: Optional[str] = None
    department: Optional[str] = None


class AttendanceBatch(CamelModel):
    records: list[AttendanceCreate]


class AttendanceResponse(CamelORMModel):
    id: int
    student_id: str
    student_name: Optional[str] = None
    status: Optional[str] = None
    date: Optional[datetime] = None
    period: Optional[str] = None
    subject: Optional[str] = None
    marked_by: Optional[str] = None
    year: Optional[str] = None
    department: Optional[str] = None


class SmsRequest(CamelModel):
    recipients: list[str]
    message: str
    sent_by: Optional[str] = None
    type: Optional[str] = None


class SmsResponse(CamelModel):
    success: bool = True
    message: str
    count: int
