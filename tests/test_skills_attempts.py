from __future__ import annotations

from datetime import UTC, datetime
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest

from student_portal.core.enums import AttemptStatusEnum, SkillModuleEnum
from student_portal.modules.skills.repository import RESUBMISSION_MESSAGE
from student_portal.modules.skills.schemas import SpeakingAttemptCreate, WritingSubmissionCreate
from student_portal.modules.skills.service import SkillsService
from student_portal.shared.exceptions import ConflictException, NotFoundException

NOW = datetime(2026, 3, 10, 9, 0, tzinfo=UTC)


class FakeSkillsRepository:
    def __init__(self, contents: list[SimpleNamespace], visibility: dict[UUID, set[UUID]]) -> None:
        self.contents = {content.id: content for content in contents}
        self.visibility = visibility
        self.attempts: list[SimpleNamespace] = []

    async def get_content(self, content_id: UUID) -> SimpleNamespace | None:
        return self.contents.get(content_id)

    async def list_visible_contents(self, batch_ids, course_id: UUID, module_type: SkillModuleEnum):
        wanted = set(batch_ids)
        return [
            content
            for content in self.contents.values()
            if content.course_id == course_id
            and content.module_type == module_type
            and self.visibility.get(content.id, set()) & wanted
        ]

    async def is_content_visible(self, content_id: UUID, batch_ids) -> bool:
        return bool(self.visibility.get(content_id, set()) & set(batch_ids))

    async def get_submitted_attempt(self, student_id: UUID, content_id: UUID) -> SimpleNamespace | None:
        for attempt in self.attempts:
            if (
                attempt.student_id == student_id
                and attempt.content_id == content_id
                and attempt.status == AttemptStatusEnum.SUBMITTED
            ):
                return attempt
        return None

    async def delete_draft_attempts(self, student_id: UUID, content_id: UUID) -> None:
        self.attempts = [
            attempt
            for attempt in self.attempts
            if not (
                attempt.student_id == student_id
                and attempt.content_id == content_id
                and attempt.status == AttemptStatusEnum.DRAFT
            )
        ]

    async def create_attempt(self, **values) -> SimpleNamespace:
        attempt = SimpleNamespace(id=uuid4(), feedback=None, marks=None, reviewed_at=None, **values)
        self.attempts.append(attempt)
        return attempt

    async def update_attempt_media(self, attempt: SimpleNamespace, media_url: str, submitted_at: datetime):
        attempt.media_url = media_url
        attempt.submitted_at = submitted_at
        return attempt

    async def list_attempts(self, student_id: UUID, content_ids) -> list[SimpleNamespace]:
        wanted = set(content_ids)
        return [
            attempt
            for attempt in reversed(self.attempts)
            if attempt.student_id == student_id and attempt.content_id in wanted
        ]


class FakeBatchesRepository:
    def __init__(self, batches: list[SimpleNamespace]) -> None:
        self.batches = {batch.id: batch for batch in batches}

    async def get_batch_by_id(self, batch_id: UUID) -> SimpleNamespace | None:
        return self.batches.get(batch_id)


class FakeMergeResolver:
    async def resolve_group(self, batch_id: UUID) -> set[UUID]:
        return {batch_id}


def make_content(course_id: UUID, module_type: SkillModuleEnum) -> SimpleNamespace:
    return SimpleNamespace(
        id=uuid4(),
        module_type=module_type,
        course_id=course_id,
        title=f"{module_type.value.title()} task",
        instruction="Describe your last holiday",
        media_url=None,
        session_number=2,
        max_marks=20,
        created_at=NOW,
        questions=[],
    )


def make_setup():
    course_id = uuid4()
    batch = SimpleNamespace(id=uuid4(), course_id=course_id)
    speaking = make_content(course_id, SkillModuleEnum.SPEAKING)
    writing = make_content(course_id, SkillModuleEnum.WRITING)
    hidden = make_content(course_id, SkillModuleEnum.SPEAKING)
    skills_repo = FakeSkillsRepository(
        [speaking, writing, hidden],
        {speaking.id: {batch.id}, writing.id: {batch.id}},
    )
    service = SkillsService(
        skills_repository=skills_repo,  # type: ignore[arg-type]
        batches_repository=FakeBatchesRepository([batch]),  # type: ignore[arg-type]
        merge_resolver=FakeMergeResolver(),  # type: ignore[arg-type]
        now_provider=lambda: NOW,
    )
    return service, skills_repo, batch, speaking, writing, hidden


@pytest.mark.asyncio
async def test_saving_a_draft_replaces_the_previous_draft() -> None:
    service, skills_repo, batch, speaking, _, _ = make_setup()
    student = SimpleNamespace(id=uuid4())

    await service.save_speaking_attempt(
        student,
        SpeakingAttemptCreate(batch_id=batch.id, content_id=speaking.id, audio_url="s3://audio/take-1.webm"),
    )
    draft = await service.save_speaking_attempt(
        student,
        SpeakingAttemptCreate(batch_id=batch.id, content_id=speaking.id, audio_url="s3://audio/take-2.webm"),
    )

    assert skills_repo.attempts == [draft]
    assert draft.status == AttemptStatusEnum.DRAFT
    assert draft.submitted_at is None


@pytest.mark.asyncio
async def test_speaking_attempt_can_be_submitted_once() -> None:
    service, skills_repo, batch, speaking, _, _ = make_setup()
    student = SimpleNamespace(id=uuid4())
    await service.save_speaking_attempt(
        student,
        SpeakingAttemptCreate(batch_id=batch.id, content_id=speaking.id, audio_url="s3://audio/draft.webm"),
    )
    final = SpeakingAttemptCreate(
        batch_id=batch.id,
        content_id=speaking.id,
        audio_url="s3://audio/final.webm",
        status=AttemptStatusEnum.SUBMITTED,
    )

    submitted = await service.save_speaking_attempt(student, final)

    assert skills_repo.attempts == [submitted]
    assert submitted.submitted_at == NOW

    with pytest.raises(ConflictException) as exc:
        await service.save_speaking_attempt(student, final)
    assert exc.value.message == RESUBMISSION_MESSAGE

    with pytest.raises(ConflictException):
        await service.save_speaking_attempt(
            student,
            SpeakingAttemptCreate(batch_id=batch.id, content_id=speaking.id, audio_url="s3://audio/late.webm"),
        )
    assert len(skills_repo.attempts) == 1


@pytest.mark.asyncio
async def test_writing_resubmission_replaces_the_answer_sheet() -> None:
    service, skills_repo, batch, _, writing, _ = make_setup()
    student = SimpleNamespace(id=uuid4())

    first = await service.submit_writing(
        student,
        WritingSubmissionCreate(batch_id=batch.id, content_id=writing.id, submission_image_url="s3://sheets/1.jpg"),
    )
    second = await service.submit_writing(
        student,
        WritingSubmissionCreate(batch_id=batch.id, content_id=writing.id, submission_image_url="s3://sheets/2.jpg"),
    )

    assert second is first
    assert len(skills_repo.attempts) == 1
    assert second.media_url == "s3://sheets/2.jpg"
    assert second.status == AttemptStatusEnum.SUBMITTED


@pytest.mark.asyncio
async def test_attempt_requires_visible_content_of_matching_module() -> None:
    service, _, batch, speaking, writing, hidden = make_setup()
    student = SimpleNamespace(id=uuid4())

    with pytest.raises(NotFoundException):
        await service.save_speaking_attempt(
            student,
            SpeakingAttemptCreate(batch_id=batch.id, content_id=hidden.id, audio_url="s3://audio/a.webm"),
        )
    with pytest.raises(NotFoundException):
        await service.save_speaking_attempt(
            student,
            SpeakingAttemptCreate(batch_id=batch.id, content_id=writing.id, audio_url="s3://audio/a.webm"),
        )
    with pytest.raises(NotFoundException):
        await service.submit_writing(
            student,
            WritingSubmissionCreate(batch_id=batch.id, content_id=speaking.id, submission_image_url="s3://x.jpg"),
        )


@pytest.mark.asyncio
async def test_listing_shows_submitted_attempt_before_later_drafts() -> None:
    service, skills_repo, batch, speaking, _, _ = make_setup()
    student = SimpleNamespace(id=uuid4())

    items = await service.list_for_batch(student, SkillModuleEnum.SPEAKING, batch.id)
    assert [item.id for item in items] == [speaking.id]
    assert items[0].attempted is False
    assert items[0].attempt is None

    submitted = await service.save_speaking_attempt(
        student,
        SpeakingAttemptCreate(
            batch_id=batch.id,
            content_id=speaking.id,
            audio_url="s3://audio/final.webm",
            status=AttemptStatusEnum.SUBMITTED,
        ),
    )
    skills_repo.attempts.append(
        SimpleNamespace(
            id=uuid4(),
            student_id=student.id,
            content_id=speaking.id,
            batch_id=batch.id,
            media_url="s3://audio/stray-draft.webm",
            status=AttemptStatusEnum.DRAFT,
            submitted_at=None,
            feedback=None,
            marks=None,
            reviewed_at=None,
        ),
    )
    submitted.feedback = "Clear pronunciation"
    submitted.marks = 17

    items = await service.list_for_batch(student, SkillModuleEnum.SPEAKING, batch.id)

    assert items[0].attempted is True
    assert items[0].submitted is True
    assert items[0].attempt.id == submitted.id
    assert items[0].attempt.feedback == "Clear pronunciation"
    assert items[0].attempt.marks == 17
    assert items[0].submission is None
