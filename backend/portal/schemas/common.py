"""Response envelopes shared by every route: {success, data?|message?}."""
from typing import Generic, Optional, TypeVar
from portal.schemas.base import CamelModel

T = TypeVar("T")


class DataResponse(CamelModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class MessageResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None


class CountResponse(CamelModel):
    success: bool = True
    deleted_count: Optional[int] = None
    message: Optional[str] = None


class BulkResponse(CamelModel, Generic[T]):
    success: bool = True
    added_count: int = 0
    duplicates: list = []
    failed: list = []
    data: list[T] = []
