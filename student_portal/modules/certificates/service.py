"""Read access to the calling student's assessment marks and certificates."""

from __future__ import annotations

from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from student_portal.core.database import get_db_session
from student_portal.modules.certificates.models import AssessmentMark, GeneratedCertificate
from student_portal.modules.certificates.repository import CertificatesRepository
from student_portal.modules.students.models import Student
from student_portal.shared.exceptions import NotFoundException


class CertificatesService:
    def __init__(self, repository: CertificatesRepository) -> None:
        self.repository = repository

    async def get_assessment_marks(self, student: Student, batch_id: UUID) -> AssessmentMark:
        """Submitted marks only; drafts stay invisible until the tutor submits them."""
        marks = await self.repository.get_submitted_marks(student.id, batch_id)
        if marks is None:
            raise NotFoundException("Assessment marks not found")
        return marks

    async def list_certificates(self, student: Student, batch_id: UUID) -> list[GeneratedCertificate]:
        return await self.repository.list_completed_certificates(student.id, batch_id)

    async def get_certificate(self, student: Student, certificate_id: UUID) -> GeneratedCertificate:
        certificate = await self.repository.get_certificate(certificate_id)
        if certificate is None or certificate.student_id != student.id:
            raise NotFoundException("Certificate not found")
        return certificate


async def get_certificates_service(session: AsyncSession = Depends(get_db_session)) -> CertificatesService:
    """Dependency provider for certificates service."""
    return CertificatesService(CertificatesRepository(session))
