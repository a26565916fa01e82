"""Auto-scoring of listening and reading answers."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from student_portal.shared.exceptions import BusinessRuleException, ValidationException
from student_portal.shared.utils import round_half_up


@dataclass(slots=True, frozen=True)
class ScoreResult:
    correct_answers: int
    total_questions: int
    marks: int
    max_marks: int


def question_key(question: Mapping[str, Any], index: int) -> str:
    """Answer key of a question: its own number, else ``Q<n>`` counting from 1."""
    number = question.get("question_number") or question.get("questionNumber")
    if number:
        return str(number)
    return f"Q{index + 1}"


def answer_keys(question: Mapping[str, Any], index: int) -> list[str]:
    """Keys under which an answer is accepted, in lookup order.

    Listening clients send ``Q<n>`` or the question's own number, reading clients
    send ``question<n>``.
    """
    keys: list[str] = []
    for key in (question_key(question, index), f"Q{index + 1}", f"question{index + 1}"):
        for candidate in (key, key.lower()):
            if candidate not in keys:
                keys.append(candidate)
    return keys


def submitted_answer(question: Mapping[str, Any], index: int, answers: Mapping[str, Any]) -> Any:
    for key in answer_keys(question, index):
        if answers.get(key) is not None:
            return answers[key]
    return None


def correct_answer(question: Mapping[str, Any]) -> str:
    return str(question.get("correct_answer") or question.get("correctAnswer") or "")


def normalize_answer(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().casefold()


def count_correct(questions: Sequence[Mapping[str, Any]], answers: Mapping[str, Any]) -> int:
    correct = 0
    for index, question in enumerate(questions):
        given = normalize_answer(submitted_answer(question, index, answers))
        if given and given == normalize_answer(correct_answer(question)):
            correct += 1
    return correct


def score_answers(
    questions: Sequence[Mapping[str, Any]],
    answers: Mapping[str, Any],
    max_marks: int | None,
    *,
    require_all_answers: bool = False,
) -> ScoreResult:
    """Score answers; with ``max_marks`` set the score is scaled to it.

    ``require_all_answers`` rejects a submission whose answer count differs from
    the question count.
    """
    total = len(questions)
    if total == 0:
        raise BusinessRuleException("This content has no questions to score")
    if require_all_answers and len(answers) != total:
        raise ValidationException(f"Answers must contain responses for all {total} question(s)")

    correct = count_correct(questions, answers)
    if max_marks and max_marks > 0:
        return ScoreResult(
            correct_answers=correct,
            total_questions=total,
            marks=round_half_up(correct / total * max_marks),
            max_marks=max_marks,
        )
    return ScoreResult(correct_answers=correct, total_questions=total, marks=correct, max_marks=total)


def public_questions(questions: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Questions without their answer keys."""
    hidden = {"correct_answer", "correctAnswer"}
    return [{key: value for key, value in question.items() if key not in hidden} for question in questions]
