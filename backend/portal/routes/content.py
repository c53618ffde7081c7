"""Content API routes - materials, question banks and updates."""
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from portal.database import get_db
from portal.models.content import ContentItem
from portal.schemas.common import DataResponse, MessageResponse
from portal.schemas.content import ContentCreate, ContentResponse
from portal.services.content_pipeline import create_content, delete_content, upload_content
from portal.services.content_store import ContentKind, ContentRecordStore, parse_content_id

router = APIRouter(prefix="/api/content", tags=["content"])


@router.post("/{kind}/upload", response_model=DataResponse[ContentResponse])
async def upload(
    kind: ContentKind,
    file: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    year: Optional[str] = Form(None),
    department: Optional[str] = Form(None),
    created_by: Optional[str] = Form(None, alias="createdBy"),
    db: AsyncSession = Depends(get_db),
):
    """Upload a file with its metadata."""
    record = await upload_content(
        db,
        kind,
        file,
        title=title,
        description=description,
        year=year,
        department=department,
        created_by=created_by,
    )
    return {
        "success": True,
        "message": f"{kind.label} uploaded successfully",
        "data": _to_response(record),
    }


@router.post("/{kind}", response_model=DataResponse[ContentResponse])
async def create(
    kind: ContentKind,
    body: ContentCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a content record without a file."""
    record = await create_content(db, kind, body.model_dump())
    return {"success": True, "data": _to_response(record)}


@router.get("/{kind}", response_model=DataResponse[list[ContentResponse]])
async def list_content(
    kind: ContentKind,
    year: Optional[str] = Query(None),
    department: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List content of one kind, optionally filtered by year and department."""
    records = await ContentRecordStore(db).find_by_filter(kind, year=year, department=department)
    return {"success": True, "data": [_to_response(r) for r in records]}


@router.get("/{kind}/year/{year}", response_model=DataResponse[list[ContentResponse]])
async def list_content_for_year(
    kind: ContentKind,
    year: str,
    department: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    records = await ContentRecordStore(db).find_by_filter(kind, year=year, department=department)
    return {"success": True, "data": [_to_response(r) for r in records]}


@router.delete("/{kind}/{content_id}", response_model=MessageResponse)
async def delete(
    kind: ContentKind,
    content_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Delete a content record and its file."""
    await delete_content(db, kind, parse_content_id(content_id, kind.label))
    return {"success": True, "message": f"{kind.label} deleted successfully"}


def _to_response(record: ContentItem) -> dict:
    """Convert SQLAlchemy model to response dict."""
    ref = record.file_ref
    return {
        "id": record.id,
        "kind": record.kind,
        "title": record.title,
        "description": record.description,
        "year": record.year,
        "department": record.department,
        "created_by": record.created_by,
        "created_at": record.created_at,
        "file_name": record.file_name,
        "original_file_name": record.original_file_name,
        "file_size": record.file_size,
        "file_type": record.file_type,
        "file_ref": ref.to_public_dict() if ref else None,
    }
