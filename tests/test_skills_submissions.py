from __future__ import annotations

from datetime import UTC, datetime
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest

from student_portal.core.enums import SkillModuleEnum
from student_portal.modules.skills.repository import ALREADY_SUBMITTED_MESSAGE
from student_portal.modules.skills.schemas import SubmissionCreate
from student_portal.modules.skills.service import SkillsService
from student_portal.shared.exceptions import ConflictException, NotFoundException, ValidationException

NOW = datetime(2026, 3, 10, 9, 0, tzinfo=UTC)


class FakeSkillsRepository:
    def __init__(self, contents: list[SimpleNamespace], visibility: dict[UUID, set[UUID]]) -> None:
        self.contents = {content.id: content for content in contents}
        self.visibility = visibility
        self.submissions: list[SimpleNamespace] = []

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

    async def get_submission(self, student_id: UUID, content_id: UUID) -> SimpleNamespace | None:
        for submission in self.submissions:
            if submission.student_id == student_id and submission.content_id == content_id:
                return submission
        return None

    async def list_submissions(self, student_id: UUID, content_ids) -> list[SimpleNamespace]:
        wanted = set(content_ids)
        return [item for item in self.submissions if item.student_id == student_id and item.content_id in wanted]

    async def create_submission(self, **values) -> SimpleNamespace:
        submission = SimpleNamespace(id=uuid4(), verified=False, verified_at=None, **values)
        self.submissions.append(submission)
        return submission


class FakeBatchesRepository:
    def __init__(self, batches: list[SimpleNamespace]) -> None:
        self.batches = {batch.id: batch for batch in batches}

    async def get_batch_by_id(self, batch_id: UUID) -> SimpleNamespace | None:
        return self.batches.get(batch_id)


class FakeMergeResolver:
    def __init__(self, groups: list[set[UUID]]) -> None:
        self.groups = groups

    async def resolve_group(self, batch_id: UUID) -> set[UUID]:
        for group in self.groups:
            if batch_id in group:
                return set(group)
        return {batch_id}


def make_content(
    course_id: UUID,
    *,
    max_marks: int = 10,
    module_type: SkillModuleEnum = SkillModuleEnum.LISTENING,
) -> SimpleNamespace:
    return SimpleNamespace(
        id=uuid4(),
        module_type=module_type,
        course_id=course_id,
        title="Listening 1",
        instruction="Listen and answer",
        media_url="https://cdn.example.com/audio/1.mp3",
        session_number=1,
        max_marks=max_marks,
        created_at=NOW,
        questions=[
            {"question_number": "Q1", "question": "Who?", "correct_answer": "Anna"},
            {"question_number": "Q2", "question": "Where?", "correct_answer": "Berlin"},
        ],
    )


def make_setup(module_type: SkillModuleEnum = SkillModuleEnum.LISTENING):
    course_id = uuid4()
    batch_a = SimpleNamespace(id=uuid4(), course_id=course_id)
    batch_b = SimpleNamespace(id=uuid4(), course_id=course_id)
    content = make_content(course_id, module_type=module_type)
    skills_repo = FakeSkillsRepository([content], {content.id: {batch_b.id}})
    service = SkillsService(
        skills_repository=skills_repo,  # type: ignore[arg-type]
        batches_repository=FakeBatchesRepository([batch_a, batch_b]),  # type: ignore[arg-type]
        merge_resolver=FakeMergeResolver([{batch_a.id, batch_b.id}]),  # type: ignore[arg-type]
        now_provider=lambda: NOW,
    )
    return service, skills_repo, content, batch_a


@pytest.mark.asyncio
async def test_submission_via_merged_batch_is_scored_immediately() -> None:
    service, skills_repo, content, batch_a = make_setup()
    student = SimpleNamespace(id=uuid4())

    result = await service.submit(
        student,
        SubmissionCreate(batch_id=batch_a.id, content_id=content.id, answers={"Q1": "anna", "Q2": "Paris"}),
    )

    assert result.correct_answers == 1
    assert result.total_questions == 2
    assert result.score == 5
    assert result.max_marks == 10
    assert skills_repo.submissions[0].submitted_at == NOW


@pytest.mark.asyncio
async def test_second_submission_is_rejected() -> None:
    service, skills_repo, content, batch_a = make_setup()
    student = SimpleNamespace(id=uuid4())
    payload = SubmissionCreate(batch_id=batch_a.id, content_id=content.id, answers={"Q1": "Anna"})
    await service.submit(student, payload)

    with pytest.raises(ConflictException) as exc:
        await service.submit(student, payload)

    assert exc.value.message == ALREADY_SUBMITTED_MESSAGE
    assert len(skills_repo.submissions) == 1


@pytest.mark.asyncio
async def test_content_not_published_to_batch_group_is_not_found() -> None:
    service, _, content, _ = make_setup()

    with pytest.raises(NotFoundException):
        await service.submit(
            SimpleNamespace(id=uuid4()),
            SubmissionCreate(batch_id=uuid4(), content_id=content.id, answers={"Q1": "Anna"}),
        )


@pytest.mark.asyncio
async def test_listing_hides_answers_and_unverified_score() -> None:
    service, skills_repo, content, batch_a = make_setup()
    student = SimpleNamespace(id=uuid4())
    await service.submit(
        student,
        SubmissionCreate(batch_id=batch_a.id, content_id=content.id, answers={"Q1": "Anna", "Q2": "Berlin"}),
    )

    items = await service.list_for_batch(student, SkillModuleEnum.LISTENING, batch_a.id)

    assert len(items) == 1
    assert items[0].attempted is True
    assert items[0].submission.score is None
    assert items[0].submission.verified is False
    assert all("correct_answer" not in question for question in items[0].questions)

    skills_repo.submissions[0].verified_at = NOW
    items = await service.list_for_batch(student, SkillModuleEnum.LISTENING, batch_a.id)
    assert items[0].submission.score == 10
    assert items[0].submission.verified is True


@pytest.mark.asyncio
async def test_review_requires_a_submission() -> None:
    service, _, content, _ = make_setup()

    with pytest.raises(NotFoundException) as exc:
        await service.get_review(SimpleNamespace(id=uuid4()), content.id)
    assert exc.value.message == "Quiz submission not found"


@pytest.mark.asyncio
async def test_reading_submission_must_answer_every_question() -> None:
    service, skills_repo, content, batch_a = make_setup(SkillModuleEnum.READING)

    with pytest.raises(ValidationException) as exc:
        await service.submit(
            SimpleNamespace(id=uuid4()),
            SubmissionCreate(batch_id=batch_a.id, content_id=content.id, answers={"Q1": "Anna"}),
        )

    assert exc.value.message == "Answers must contain responses for all 2 question(s)"
    assert skills_repo.submissions == []


@pytest.mark.asyncio
async def test_reading_submission_keyed_by_question_position_is_scored() -> None:
    service, _, content, batch_a = make_setup(SkillModuleEnum.READING)

    result = await service.submit(
        SimpleNamespace(id=uuid4()),
        SubmissionCreate(
            batch_id=batch_a.id,
            content_id=content.id,
            answers={"question1": "Anna", "question2": "Berlin"},
        ),
    )

    assert result.correct_answers == 2
    assert result.score == 10
