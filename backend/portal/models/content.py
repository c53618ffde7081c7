"""ContentItem model - materials, question banks and updates.

The three content kinds share one table and one schema; ``kind`` is the
partition. The attached file lives in a blob backend and is referenced through
the ``storage_kind``/``storage_key`` pair.
"""
import uuid
from sqlalchemy import BigInteger, CheckConstraint, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from portal.models.base import Base, ClassificationMixin, CreatedAtMixin
from portal.services.blob_refs import BlobReference, ref_from_columns


class ContentItem(Base, CreatedAtMixin, ClassificationMixin):
    __tablename__ = "content_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    kind: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    file_name: Mapped[str | None] = mapped_column(String(500), nullable=True)
    original_file_name: Mapped[str | None] = mapped_column(String(500), nullable=True)
    file_size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    file_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    storage_kind: Mapped[str | None] = mapped_column(String(20), nullable=True)
    storage_key: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "(storage_kind IS NULL) = (storage_key IS NULL)",
            name="ck_content_items_file_ref",
        ),
    )

    @property
    def file_ref(self) -> BlobReference | None:
        return ref_from_columns(self.storage_kind, self.storage_key)

    @file_ref.setter
    def file_ref(self, ref: BlobReference | None) -> None:
        if ref is None:
            self.storage_kind = None
            self.storage_key = None
        else:
            self.storage_kind = ref.kind
            self.storage_key = ref.key
