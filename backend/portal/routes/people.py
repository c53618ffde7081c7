"""Student, faculty and admin API routes."""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from portal.database import get_db
from portal.errors import ValidationError
from portal.models.people import Admin, Faculty, Student
from portal.schemas.common import BulkResponse, CountResponse, DataResponse
from portal.schemas.people import (
    AdminBulk, AdminCreate, FacultyBulk, FacultyCreate,
    PersonResponse, StudentBulk, StudentCreate,
)
from portal.services.record_store import BulkResult, RecordStore

students_router = APIRouter(prefix="/api/students", tags=["students"])
faculty_router = APIRouter(prefix="/api/faculty", tags=["faculty"])
admin_router = APIRouter(prefix="/api/admin", tags=["admin"])


def student_store(db: AsyncSession) -> RecordStore:
    return RecordStore(db, Student, person_to_response, "Student ID already exists")


def faculty_store(db: AsyncSession) -> RecordStore:
    return RecordStore(db, Faculty, person_to_response, "Faculty ID already exists")


def admin_store(db: AsyncSession) -> RecordStore:
    return RecordStore(db, Admin, person_to_response, "Admin ID already exists")


# ── Students ─────────────────────────────────────────────────────

@students_router.post("", response_model=DataResponse[PersonResponse])
async def create_student(body: StudentCreate, db: AsyncSession = Depends(get_db)):
    return {"success": True, "data": await student_store(db).insert(body.model_dump())}


@students_router.get("", response_model=DataResponse[list[PersonResponse]])
async def list_students(
    year: Optional[str] = Query(None),
    department: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    filters = {}
    if year:
        filters["year"] = year
    if department:
        filters["department"] = department
    return {"success": True, "data": await student_store(db).find(**filters)}


@students_router.post("/bulk", response_model=BulkResponse[PersonResponse])
async def bulk_create_students(body: StudentBulk, db: AsyncSession = Depends(get_db)):
    result = await student_store(db).bulk_insert([s.model_dump() for s in body.students])
    return _bulk_response(result)


@students_router.delete("/delete", response_model=CountResponse, response_model_exclude_none=True)
async def delete_students(
    year: Optional[str] = Query(None),
    department: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Delete every student of a year and department."""
    if not year or not department:
        raise ValidationError("Year and department are required")
    count = await student_store(db).delete_where(year=year, department=department)
    return {"success": True, "deleted_count": count}


@students_router.delete("/delete/individual", response_model=CountResponse, response_model_exclude_none=True)
async def delete_student(
    user_id: Optional[str] = Query(None, alias="userId"),
    db: AsyncSession = Depends(get_db),
):
    return await _delete_individual(student_store(db), user_id, "Student")


# ── Faculty ──────────────────────────────────────────────────────

@faculty_router.post("", response_model=DataResponse[PersonResponse])
async def create_faculty(body: FacultyCreate, db: AsyncSession = Depends(get_db)):
    return {"success": True, "data": await faculty_store(db).insert(body.model_dump())}


@faculty_router.get("", response_model=DataResponse[list[PersonResponse]])
async def list_faculty(db: AsyncSession = Depends(get_db)):
    return {"success": True, "data": await faculty_store(db).find()}


@faculty_router.post("/bulk", response_model=BulkResponse[PersonResponse])
async def bulk_create_faculty(body: FacultyBulk, db: AsyncSession = Depends(get_db)):
    result = await faculty_store(db).bulk_insert([f.model_dump() for f in body.faculty])
    return _bulk_response(result)


@faculty_router.get("/departments", response_model=DataResponse[list[str]])
async def faculty_departments(db: AsyncSession = Depends(get_db)):
    """Distinct faculty departments, sorted."""
    departments = await faculty_store(db).distinct("department")
    return {"success": True, "data": sorted(departments)}


@faculty_router.delete("/delete", response_model=CountResponse, response_model_exclude_none=True)
async def delete_faculty_department(
    department: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    if not department:
        raise ValidationError("Department is required")
    count = await faculty_store(db).delete_where(department=department)
    return {"success": True, "deleted_count": count}


@faculty_router.delete("/delete/individual", response_model=CountResponse, response_model_exclude_none=True)
async def delete_faculty_member(
    user_id: Optional[str] = Query(None, alias="userId"),
    db: AsyncSession = Depends(get_db),
):
    return await _delete_individual(faculty_store(db), user_id, "Faculty")


# ── Admins ───────────────────────────────────────────────────────

@admin_router.post("", response_model=DataResponse[PersonResponse])
async def create_admin(body: AdminCreate, db: AsyncSession = Depends(get_db)):
    return {"success": True, "data": await admin_store(db).insert(body.model_dump())}


@admin_router.get("", response_model=DataResponse[list[PersonResponse]])
async def list_admins(db: AsyncSession = Depends(get_db)):
    return {"success": True, "data": await admin_store(db).find()}


@admin_router.post("/bulk", response_model=BulkResponse[PersonResponse])
async def bulk_create_admins(body: AdminBulk, db: AsyncSession = Depends(get_db)):
    result = await admin_store(db).bulk_insert([a.model_dump() for a in body.admins])
    return _bulk_response(result)


@admin_router.get("/departments", response_model=DataResponse[list[str]])
async def admin_departments(db: AsyncSession = Depends(get_db)):
    """Admin roles and departments merged into one sorted list."""
    store = admin_store(db)
    names = set(await store.distinct("role")) | set(await store.distinct("department"))
    return {"success": True, "data": sorted(names)}


@admin_router.delete("/delete", response_model=CountResponse, response_model_exclude_none=True)
async def delete_admin_role(
    role: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    if not role:
        raise ValidationError("Role is required")
    count = await admin_store(db).delete_where(role=role)
    return {"success": True, "deleted_count": count}


@admin_router.delete("/delete/individual", response_model=CountResponse, response_model_exclude_none=True)
async def delete_admin(
    user_id: Optional[str] = Query(None, alias="userId"),
    db: AsyncSession = Depends(get_db),
):
    return await _delete_individual(admin_store(db), user_id, "Admin")


# ── Helpers ──────────────────────────────────────────────────────

async def _delete_individual(store: RecordStore, user_id: str | None, label: str) -> dict:
    if not user_id:
        raise ValidationError("User ID is required")
    count = await store.delete_one(user_id=user_id)
    if count == 0:
        return {"success": False, "message": f"{label} not found"}
    return {"success": True, "deleted_count": count}


def _bulk_response(result: BulkResult) -> dict:
    return {
        "success": True,
        "added_count": result.added_count,
        "duplicates": result.duplicates,
        "failed": result.failed,
        "data": result.added,
    }


def person_to_response(person) -> dict:
    """Convert SQLAlchemy model to response dict. Passwords never leave the store."""
    return {
        "id": person.id,
        "name": person.name,
        "user_id": person.user_id,
        "phone": person.phone,
        "year": getattr(person, "year", None),
        "department": getattr(person, "department", None),
        "role": getattr(person, "role", None),
        "created_at": person.created_at,
    }
