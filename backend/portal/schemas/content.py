"""Content record request/response schemas."""
import uuid
from typing import Optional
from datetime import datetime
from portal.schemas.base import CamelModel, CamelORMModel


class ContentCreate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    year: Optional[str] = None
    department: Optional[str] = None
    created_by: Optional[str] = None


class ContentResponse(CamelORMModel):
    id: uuid.UUID
    kind: str
    title: Optional[str] = None
    description: Optional[str] = None
    year: Optional[str] = None
    department: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    file_name: Optional[str] = None
    original_file_name: Optional[str] = None
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    file_ref: Optional[dict] = None
