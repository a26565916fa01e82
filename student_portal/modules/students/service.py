"""Student authentication and profile access."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from student_portal.core.database import get_db_session
from student_portal.core.security import bearer_scheme, decode_token
from student_portal.modules.audit.repository import AuditRepository
from student_portal.modules.locations.repository import LocationsRepository
from student_portal.modules.students.models import Student
from student_portal.modules.students.repository import StudentsRepository
from student_portal.modules.students.schemas import StudentProfileUpdate
from student_portal.shared.exceptions import NotFoundException, UnauthorizedException, ValidationException

logger = logging.getLogger(__name__)


class StudentsService:
    """Resolves the calling student from an externally issued token."""

    def __init__(self, repository: StudentsRepository) -> None:
        self.repository = repository

    async def get_student_from_access_token(self, token: str) -> Student:
        """Resolve student from access token."""
        payload = decode_token(token)
        if payload.get("type") != "access":
            raise UnauthorizedException("Invalid access token")

        subject = payload.get("sub")
        if not subject:
            raise UnauthorizedException("Token subject is missing")

        try:
            student_id = UUID(str(subject))
        except ValueError as exc:
            raise UnauthorizedException("Token subject is malformed") from exc

        student = await self.repository.get_student_by_id(student_id)
        if student is None:
            raise UnauthorizedException("Student not found")
        if not student.is_active:
            raise UnauthorizedException("Your profile needs to be approved")

        return student


class ProfileService:
    """Self-service profile edits of the calling student."""

    def __init__(
        self,
        repository: StudentsRepository,
        locations_repository: LocationsRepository,
        audit_repository: AuditRepository,
    ) -> None:
        self.repository = repository
        self.locations_repository = locations_repository
        self.audit_repository = audit_repository

    async def update_profile(self, student: Student, payload: StudentProfileUpdate) -> Student:
        changes = payload.model_dump(exclude_unset=True)
        for required in ("name", "email"):
            if required in changes and changes[required] is None:
                raise ValidationException(f"{required} cannot be empty")

        state_id = changes.get("state_id", student.state_id)
        if changes.get("state_id") is not None:
            if await self.locations_repository.get_state(changes["state_id"]) is None:
                raise NotFoundException("State not found")
        if changes.get("center_id") is not None:
            center = await self.locations_repository.get_center(changes["center_id"])
            if center is None:
                raise NotFoundException("Center not found")
            if state_id is not None and center.state_id is not None and center.state_id != state_id:
                raise ValidationException("Center does not belong to the selected state")

        if not changes:
            return student

        updated = await self.repository.update_student(student, changes)
        await self.audit_repository.create_audit_log(
            student_id=student.id,
            action="students.profile.update",
            entity_type="student",
            entity_id=str(student.id),
            payload={"fields": sorted(changes)},
        )
        logger.info("Student %s updated profile fields %s", student.id, sorted(changes))
        return updated


async def get_students_service(session: AsyncSession = Depends(get_db_session)) -> StudentsService:
    """Dependency to provide students service."""
    return StudentsService(StudentsRepository(session))


async def get_current_student(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    service: StudentsService = Depends(get_students_service),
) -> Student:
    """Resolve currently authenticated student from bearer token."""
    return await service.get_student_from_access_token(credentials.credentials)


async def get_profile_service(session: AsyncSession = Depends(get_db_session)) -> ProfileService:
    """Dependency to provide profile service."""
    return ProfileService(
        repository=StudentsRepository(session),
        locations_repository=LocationsRepository(session),
        audit_repository=AuditRepository(session),
    )
