"""Certificates repository layer."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from student_portal.core.enums import AssessmentStatusEnum, CertificateStatusEnum
from student_portal.modules.certificates.models import AssessmentMark, GeneratedCertificate


class CertificatesRepository:
    """DB operations for assessment marks and certificates."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_submitted_marks(self, student_id: UUID, batch_id: UUID) -> AssessmentMark | None:
        stmt = select(AssessmentMark).where(
            AssessmentMark.student_id == student_id,
            AssessmentMark.batch_id == batch_id,
            AssessmentMark.status == AssessmentStatusEnum.SUBMITTED,
        )
        return await self.session.scalar(stmt)

    async def list_completed_certificates(self, student_id: UUID, batch_id: UUID) -> list[GeneratedCertificate]:
        stmt = (
            select(GeneratedCertificate)
            .where(
                GeneratedCertificate.student_id == student_id,
                GeneratedCertificate.batch_id == batch_id,
                GeneratedCertificate.status == CertificateStatusEnum.COMPLETED,
            )
            .order_by(GeneratedCertificate.generated_at.desc().nulls_last())
        )
        return (await self.session.scalars(stmt)).all()

    async def get_certificate(self, certificate_id: UUID) -> GeneratedCertificate | None:
        return await self.session.get(GeneratedCertificate, certificate_id)
