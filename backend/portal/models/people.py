"""Person models - students, faculty and admins.

``user_id`` is unique per table; passwords are stored as given.
"""
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from portal.models.base import Base, ClassificationMixin, CreatedAtMixin


class PersonMixin(CreatedAtMixin):
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    password: Mapped[str | None] = mapped_column(String(200), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)


class Student(Base, PersonMixin, ClassificationMixin):
    __tablename__ = "students"


class Faculty(Base, PersonMixin):
    __tablename__ = "faculty"

    department: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)


class Admin(Base, PersonMixin):
    __tablename__ = "admins"

    role: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
