"""Generic record CRUD for people and attendance.

Rows leave the store as plain dicts, serialized right after each commit, so a
later rollback in the same session never has to reload them.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.errors import DuplicateKey

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    if getattr(orig, "sqlstate", None) == UNIQUE_VIOLATION_SQLSTATE:
        return True
    if getattr(orig, "pgcode", None) == UNIQUE_VIOLATION_SQLSTATE:
        return True
    text = str(orig).lower()
    return "unique" in text or "duplicate key" in text


@dataclass
class BulkResult:
    added: list[dict] = field(default_factory=list)
    duplicates: list[Any] = field(default_factory=list)
    failed: list[Any] = field(default_factory=list)

    @property
    def added_count(self) -> int:
        return len(self.added)


class RecordStore:
    def __init__(
        self,
        db: AsyncSession,
        model: type,
        serialize: Callable[[Any], dict],
        duplicate_message: str = "Record already exists",
    ):
        self.db = db
        self.model = model
        self.serialize = serialize
        self.duplicate_message = duplicate_message

    async def insert(self, values: dict) -> dict:
        """Insert one row.

        Raises:
            DuplicateKey: If a unique constraint rejects the row.
        """
        row = self.model(**values)
        self.db.add(row)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if is_unique_violation(e):
                raise DuplicateKey(self.duplicate_message) from e
            raise
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(row)
        return self.serialize(row)

    async def bulk_insert(self, items: list[dict], key: str = "user_id") -> BulkResult:
        """Insert rows one at a time.

        Duplicates and rows the database refuses are collected in the result;
        they never stop the rest of the batch.
        """
        result = BulkResult()
        for values in items:
            try:
                result.added.append(await self.insert(values))
            except DuplicateKey:
                result.duplicates.append(values.get(key))
            except Exception as e:
                logger.warning("Skipping %s %r: %s", self.model.__tablename__, values.get(key), e)
                result.failed.append(values.get(key))
        if result.duplicates or result.failed:
            logger.info(
                "Bulk insert into %s: %d added, %d duplicates, %d failed",
                self.model.__tablename__, result.added_count,
                len(result.duplicates), len(result.failed),
            )
        return result

    def _select(self, conditions, filters):
        query = select(self.model)
        for name, value in filters.items():
            query = query.where(getattr(self.model, name) == value)
        for condition in conditions:
            query = query.where(condition)
        return query

    async def find(self, *conditions, order_by=(), **filters) -> list[dict]:
        """Rows matching every equality filter and extra SQL condition."""
        query = self._select(conditions, filters)
        if order_by:
            query = query.order_by(*order_by)
        rows = await self.db.execute(query)
        return [self.serialize(row) for row in rows.scalars().all()]

    async def find_one(self, **filters):
        rows = await self.db.execute(self._select((), filters).limit(1))
        return rows.scalar_one_or_none()

    async def distinct(self, column_name: str) -> list:
        column = getattr(self.model, column_name)
        rows = await self.db.execute(select(func.distinct(column)).where(column.is_not(None)))
        return [value for value in rows.scalars().all() if value]

    async def delete_where(self, **filters) -> int:
        query = delete(self.model)
        for name, value in filters.items():
            query = query.where(getattr(self.model, name) == value)
        result = await self.db.execute(query)
        await self.db.commit()
        return result.rowcount

    async def delete_one(self, **filters) -> int:
        row = await self.find_one(**filters)
        if row is None:
            return 0
        await self.db.delete(row)
        await self.db.commit()
        return 1
