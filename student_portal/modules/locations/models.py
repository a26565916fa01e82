"""Location ORM models."""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from student_portal.core.database import Base, BaseModelMixin


class State(BaseModelMixin, Base):
    """State grouping teaching centers."""

    __tablename__ = "states"

    name: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
