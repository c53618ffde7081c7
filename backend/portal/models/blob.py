"""Blob bucket models - file bytes hosted in the database.

A blob is one ``blob_files`` row plus ``ceil(length / chunk_size)`` rows in
``blob_chunks`` numbered from 0.
"""
import uuid
from datetime import datetime
from sqlalchemy import (
    JSON, BigInteger, DateTime, ForeignKey, Integer, LargeBinary, String,
    UniqueConstraint, Uuid, func,
)
from sqlalchemy.orm import Mapped, mapped_column
from portal.models.base import Base


class BlobFile(Base):
    __tablename__ = "blob_files"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    bucket: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    filename: Mapped[str] = mapped_column(String(500), nullable=False)
    length: Mapped[int] = mapped_column(BigInteger, default=0)
    chunk_size: Mapped[int] = mapped_column(Integer, nullable=False)
    content_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    file_metadata: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)
    upload_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class BlobChunk(Base):
    __tablename__ = "blob_chunks"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    file_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("blob_files.id", ondelete="CASCADE"), nullable=False
    )
    n: Mapped[int] = mapped_column(Integer, nullable=False)
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    __table_args__ = (
        UniqueConstraint("file_id", "n", name="uq_blob_chunk"),
    )
