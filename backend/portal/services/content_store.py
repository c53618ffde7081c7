"""Content records - one table, three kinds."""
import enum
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.errors import NotFound
from portal.models.content import ContentItem


class ContentKind(str, enum.Enum):
    MATERIALS = "materials"
    QUESTIONS = "questions"
    UPDATES = "updates"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    ContentKind.MATERIALS: "Material",
    ContentKind.QUESTIONS: "Question bank",
    ContentKind.UPDATES: "Update",
}

# Order in which an id is looked up when the kind is not known.
RESOLUTION_ORDER = (ContentKind.MATERIALS, ContentKind.QUESTIONS, ContentKind.UPDATES)


def parse_content_id(raw: str, label: str = "File") -> uuid.UUID:
    """Malformed ids can never match a record, so they are NotFound too."""
    try:
        return uuid.UUID(raw)
    except ValueError:
        raise NotFound(f"{label} not found") from None


class ContentRecordStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, record: ContentItem) -> ContentItem:
        self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)
        return record

    async def find_by_id(self, kind: ContentKind, content_id: uuid.UUID) -> ContentItem:
        result = await self.db.execute(
            select(ContentItem).where(ContentItem.id == content_id, ContentItem.kind == kind.value)
        )
        record = result.scalar_one_or_none()
        if record is None:
            raise NotFound(f"{kind.label} not found")
        return record

    async def resolve(self, content_id: uuid.UUID) -> ContentItem:
        """Find an id across all kinds. First match in RESOLUTION_ORDER wins."""
        for kind in RESOLUTION_ORDER:
            try:
                return await self.find_by_id(kind, content_id)
            except NotFound:
                continue
        raise NotFound("File not found")

    async def find_by_filter(
        self,
        kind: ContentKind,
        year: str | None = None,
        department: str | None = None,
    ) -> list[ContentItem]:
        query = select(ContentItem).where(ContentItem.kind == kind.value)
        if year:
            query = query.where(ContentItem.year == year)
        if department:
            query = query.where(ContentItem.department == department)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def delete_by_id(self, kind: ContentKind, content_id: uuid.UUID) -> ContentItem:
        record = await self.find_by_id(kind, content_id)
        return await self.remove(record)

    async def remove(self, record: ContentItem) -> ContentItem:
        await self.db.delete(record)
        await self.db.commit()
        return record
