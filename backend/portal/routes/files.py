"""Files API routes - stream stored content back to the client."""
from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from portal.database import get_db
from portal.services.content_pipeline import (
    ATTACHMENT, INLINE, content_disposition, open_content,
)
from portal.services.content_store import parse_content_id

router = APIRouter(prefix="/api/files", tags=["files"])


@router.get("/download/{content_id}")
async def download_file(
    content_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Download a content file as an attachment."""
    return await _stream(db, content_id, ATTACHMENT)


@router.get("/view/{content_id}")
async def view_file(
    content_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Show a content file inline."""
    return await _stream(db, content_id, INLINE)


async def _stream(db: AsyncSession, content_id: str, disposition: str) -> StreamingResponse:
    delivery = await open_content(db, parse_content_id(content_id))
    return StreamingResponse(
        delivery.chunks,
        media_type=delivery.media_type,
        headers={"Content-Disposition": content_disposition(disposition, delivery.filename)},
    )
