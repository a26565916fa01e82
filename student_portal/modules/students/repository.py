"""Student repository layer."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from student_portal.modules.students.models import Student


class StudentsRepository:
    """DB operations for student accounts."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_student_by_id(self, student_id: UUID) -> Student | None:
        stmt = select(Student).options(selectinload(Student.center)).where(Student.id == student_id)
        return await self.session.scalar(stmt)

    async def get_student_by_registration_number(self, registration_number: str) -> Student | None:
        stmt = select(Student).where(Student.registration_number == registration_number)
        return await self.session.scalar(stmt)

    async def update_student(self, student: Student, changes: dict[str, Any]) -> Student:
        for field, value in changes.items():
            setattr(student, field, value)
        await self.session.flush()
        await self.session.refresh(student, attribute_names=["center"])
        return student
