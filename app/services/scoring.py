# app/services/scoring.py
"""
Scores placement-test submissions against the question bank.

Each calculator returns a (correct, total) pair for one question category.
All three are pure: they read the submission and the bank and never mutate
either, so calling them twice yields the same result.
"""
import re
from typing import Dict, List, Mapping

from app.models.enums import QuestionType
from app.models.question import Question
from app.models.submission import Answer, QuestionScore, Submission, SubmissionScores
from app.utils.logger import logger

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9\s]")


def normalize_words(text: str) -> List[str]:
    """Lower-cases, drops everything but letters, digits and whitespace, then splits on whitespace."""
    return _NON_ALPHANUMERIC.sub("", (text or "").lower()).split()


def split_blank_answers(raw_answer: str) -> List[str]:
    """Splits a comma-joined blank answer into trimmed positional tokens."""
    if not raw_answer or not raw_answer.strip():
        return []
    return [token.strip() for token in raw_answer.split(",")]


def _answers_of_type(submission: Submission, question_type: QuestionType) -> List[Answer]:
    return [a for a in submission.answers if a.question_type == question_type.value]


def _score_fill_in_blank(
    submission: Submission,
    questions: Mapping[str, Question],
    question_type: QuestionType,
) -> QuestionScore:
    correct = 0
    total = 0
    for answer in _answers_of_type(submission, question_type):
        question = questions.get(answer.question_id)
        if question is None:
            logger.debug(f"{question_type.value} question {answer.question_id} not in bank; contributes 0/0.")
            continue

        expected = question.correct_answers
        given = split_blank_answers(answer.answer)
        matched = sum(
            1 for index, value in enumerate(expected)
            if index < len(given) and given[index] == value
        )
        logger.debug(f"{question_type.value} Q{answer.question_number}: {matched}/{len(expected)}")
        correct += matched
        total += len(expected)
    return QuestionScore(correct=correct, total=total)


def calculate_rwfib_score(submission: Submission, questions: Mapping[str, Question]) -> QuestionScore:
    return _score_fill_in_blank(submission, questions, QuestionType.RWFIB)


def calculate_rfib_score(submission: Submission, questions: Mapping[str, Question]) -> QuestionScore:
    return _score_fill_in_blank(submission, questions, QuestionType.RFIB)


def _reference_text(answer: Answer, questions: Mapping[str, Question]) -> str:
    question = questions.get(answer.question_id)
    if question is not None and question.content:
        return question.content
    return answer.text or answer.content or ""


def calculate_wfd_score(submission: Submission, questions: Mapping[str, Question]) -> QuestionScore:
    """
    A submitted word counts once if it appears anywhere in the reference,
    regardless of position. Repeated reference words can therefore never all
    be matched; the denominator is still the full reference word count.
    """
    correct = 0
    total = 0
    for answer in _answers_of_type(submission, QuestionType.WFD):
        reference_words = normalize_words(_reference_text(answer, questions))
        submitted_words = set(normalize_words(answer.answer))
        matched = len(submitted_words & set(reference_words))
        logger.debug(f"wfd Q{answer.question_number}: {matched}/{len(reference_words)}")
        correct += matched
        total += len(reference_words)
    return QuestionScore(correct=correct, total=total)


def score_submission(submission: Submission, questions: Mapping[str, Question]) -> SubmissionScores:
    return SubmissionScores(
        rwfib=calculate_rwfib_score(submission, questions),
        rfib=calculate_rfib_score(submission, questions),
        wfd=calculate_wfd_score(submission, questions),
    )


def questions_by_id(questions: List[Question]) -> Dict[str, Question]:
    return {q.id: q for q in questions}
