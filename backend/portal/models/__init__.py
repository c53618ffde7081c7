"""Import all models so SQLAlchemy metadata knows about them."""
from portal.models.base import Base
from portal.models.content import ContentItem
from portal.models.blob import BlobFile, BlobChunk
from portal.models.people import Student, Faculty, Admin
from portal.models.attendance import Attendance

__all__ = [
    "Base",
    "ContentItem", "BlobFile", "BlobChunk",
    "Student", "Faculty", "Admin", "Attendance",
]
