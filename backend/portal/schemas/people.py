"""Student, faculty and admin request/response schemas."""
from typing import Optional
from datetime import datetime
from portal.schemas.base import CamelModel, CamelORMModel


class PersonBase(CamelModel):
    name: Optional[str] = None
    user_id: str
    password: Optional[str] = None
    phone: Optional[str] = None


class StudentCreate(PersonBase):
    year: Optional[str] = None
    department: Optional[str] = None


class FacultyCreate(PersonBase):
    department: Optional[str] = None


class AdminCreate(PersonBase):
    role: Optional[str] = None
    department: Optional[str] = None


class StudentBulk(CamelModel):
    students: list[StudentCreate]


class FacultyBulk(CamelModel):
    faculty: list[FacultyCreate]


class AdminBulk(CamelModel):
    admins: list[AdminCreate]


class PersonResponse(CamelORMModel):
    id: int
    name: Optional[str] = None
    user_id: str
    phone: Optional[str] = None
    year: Optional[str] = None
    department: Optional[str] = None
    role: Optional[str] = None
    created_at: Optional[datetime] = None


class LoginRequest(CamelModel):
    user_id: str
    password: str
    user_type: str
    year: Optional[str] = None
    department: Optional[str] = None


class LoginResponse(CamelModel):
    success: bool
    user: Optional[dict] = None
    message: Optional[str] = None
