"""Login route. Passwords are compared as stored."""
import secrets
from fastapi import APIRouter, Depends
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from portal.database import get_db
from portal.routes.people import admin_store, faculty_store, person_to_response, student_store
from portal.schemas.people import LoginRequest, LoginResponse

router = APIRouter(prefix="/api/auth", tags=["auth"])

_STORES = {
    "student": student_store,
    "faculty": faculty_store,
    "admin": admin_store,
}


@router.post("/login", response_model=LoginResponse, response_model_exclude_none=True)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Check credentials for a student, faculty member or admin."""
    make_store = _STORES.get(body.user_type)
    user = None
    if make_store is not None:
        filters = {"user_id": body.user_id}
        if body.user_type == "student":
            if body.year:
                filters["year"] = body.year
            if body.department:
                filters["department"] = body.department
        user = await make_store(db).find_one(**filters)

    if user is None or user.password is None or not secrets.compare_digest(user.password.encode(), body.password.encode()):
        return {"success": False, "message": "Invalid credentials"}

    return {"success": True, "user": {**_camel(person_to_response(user)), "type": body.user_type}}


def _camel(data: dict) -> dict:
    return {to_camel(k): v for k, v in data.items() if v is not None}
