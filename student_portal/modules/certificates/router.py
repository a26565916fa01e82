"""Certificates API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from student_portal.modules.certificates.schemas import AssessmentMarkRead, CertificateRead
from student_portal.modules.certificates.service import CertificatesService, get_certificates_service
from student_portal.modules.students.service import get_current_student
from student_portal.shared.pagination import Envelope, ok

router = APIRouter(prefix="/certificates", tags=["certificates"])


@router.get("/marks/{batch_id}", response_model=Envelope[AssessmentMarkRead])
async def get_assessment_marks(
    batch_id: UUID,
    service: CertificatesService = Depends(get_certificates_service),
    current_student=Depends(get_current_student),
) -> Envelope[AssessmentMarkRead]:
    """Return submitted assessment marks of current student in batch."""
    marks = await service.get_assessment_marks(current_student, batch_id)
    return ok(AssessmentMarkRead.model_validate(marks))


@router.get("/batches/{batch_id}", response_model=Envelope[list[CertificateRead]])
async def list_batch_certificates(
    batch_id: UUID,
    service: CertificatesService = Depends(get_certificates_service),
    current_student=Depends(get_current_student),
) -> Envelope[list[CertificateRead]]:
    certificates = await service.list_certificates(current_student, batch_id)
    return ok([CertificateRead.model_validate(item) for item in certificates])


@router.get("/{certificate_id}", response_model=Envelope[CertificateRead])
async def get_certificate(
    certificate_id: UUID,
    service: CertificatesService = Depends(get_certificates_service),
    current_student=Depends(get_current_student),
) -> Envelope[CertificateRead]:
    certificate = await service.get_certificate(current_student, certificate_id)
    return ok(CertificateRead.model_validate(certificate))
