# tests/test_scoring.py
from datetime import datetime

import pytest

from app.models.enums import QuestionType
from app.models.question import Question
from app.models.submission import Answer, PersonalInfo, Submission
from app.services.scoring import (
    calculate_rfib_score,
    calculate_rwfib_score,
    calculate_wfd_score,
    normalize_words,
    score_submission,
    split_blank_answers,
)


def _submission(*answers: Answer) -> Submission:
    return Submission(
        id="s1",
        personal_info=PersonalInfo(full_name="A", email="a@b.c", phone="1", target="65"),
        created_at=datetime(2026, 1, 1),
        answers=list(answers),
    )


def _answer(number, qid, qtype, answer="", text=""):
    return Answer(question_number=number, question_id=qid, question_type=qtype.value, answer=answer, text=text)


BANK = {
    "rw1": Question(id="rw1", type=QuestionType.RWFIB, content="An _____ a day keeps the _____ away.",
                    correct_answers={"0": "apple", "1": "doctor"}),
    "rf1": Question(id="rf1", type=QuestionType.RFIB, content="Plants need _____ and _____ and _____.",
                    correct_answers=["water", "light", "soil"]),
    "wfd1": Question(id="wfd1", type=QuestionType.WFD, content="The quick brown fox"),
}


@pytest.mark.scoring
class TestFillInBlankScoring:
    def test_exact_positional_match_scores_full_marks(self):
        submission = _submission(_answer(7, "rf1", QuestionType.RFIB, "water,light,soil"))
        score = calculate_rfib_score(submission, BANK)
        assert (score.correct, score.total) == (3, 3)

    def test_tokens_are_trimmed(self):
        submission = _submission(_answer(4, "rw1", QuestionType.RWFIB, " apple ,  doctor"))
        score = calculate_rwfib_score(submission, BANK)
        assert (score.correct, score.total) == (2, 2)

    def test_wrong_position_does_not_count(self):
        submission = _submission(_answer(7, "rf1", QuestionType.RFIB, "light,water,soil"))
        score = calculate_rfib_score(submission, BANK)
        assert (score.correct, score.total) == (1, 3)

    def test_skipped_blank_keeps_later_positions(self):
        submission = _submission(_answer(7, "rf1", QuestionType.RFIB, ",light,soil"))
        assert calculate_rfib_score(submission, BANK).correct == 2

    def test_match_is_case_sensitive(self):
        submission = _submission(_answer(4, "rw1", QuestionType.RWFIB, "Apple,doctor"))
        assert calculate_rwfib_score(submission, BANK).correct == 1

    @pytest.mark.parametrize("empty", ["", "   "])
    def test_empty_answer_counts_full_denominator(self, empty):
        submission = _submission(_answer(7, "rf1", QuestionType.RFIB, empty))
        score = calculate_rfib_score(submission, BANK)
        assert (score.correct, score.total) == (0, 3)

    def test_question_missing_from_bank_contributes_nothing(self):
        submission = _submission(_answer(5, "gone", QuestionType.RWFIB, "apple,doctor"))
        score = calculate_rwfib_score(submission, BANK)
        assert (score.correct, score.total) == (0, 0)

    def test_only_own_category_is_counted(self):
        submission = _submission(
            _answer(4, "rw1", QuestionType.RWFIB, "apple,doctor"),
            _answer(7, "rf1", QuestionType.RFIB, "water,light,soil"),
        )
        assert calculate_rwfib_score(submission, BANK).total == 2
        assert calculate_rfib_score(submission, BANK).total == 3


@pytest.mark.scoring
class TestDictationScoring:
    def test_reference_example(self):
        submission = _submission(_answer(10, "wfd1", QuestionType.WFD, "the QUICK, brown"))
        score = calculate_wfd_score(submission, BANK)
        assert (score.correct, score.total) == (3, 4)

    def test_order_does_not_matter(self):
        submission = _submission(_answer(10, "wfd1", QuestionType.WFD, "fox brown quick the"))
        assert calculate_wfd_score(submission, BANK).correct == 4

    def test_repeated_submitted_words_count_once(self):
        submission = _submission(_answer(10, "wfd1", QuestionType.WFD, "fox fox fox"))
        assert calculate_wfd_score(submission, BANK).correct == 1

    def test_repeated_reference_words_cannot_all_be_matched(self):
        bank = {"w": Question(id="w", type=QuestionType.WFD, content="the cat saw the dog")}
        submission = _submission(_answer(10, "w", QuestionType.WFD, "the cat saw the dog"))
        score = calculate_wfd_score(submission, bank)
        assert (score.correct, score.total) == (4, 5)

    def test_whitespace_answer_scores_zero(self):
        submission = _submission(_answer(10, "wfd1", QuestionType.WFD, "   "))
        score = calculate_wfd_score(submission, BANK)
        assert (score.correct, score.total) == (0, 4)

    def test_falls_back_to_stored_text(self):
        submission = _submission(_answer(11, "unknown", QuestionType.WFD, "hello there", text="Hello world"))
        score = calculate_wfd_score(submission, BANK)
        assert (score.correct, score.total) == (1, 2)

    def test_no_reference_at_all(self):
        submission = _submission(_answer(12, "unknown", QuestionType.WFD, "anything"))
        score = calculate_wfd_score(submission, BANK)
        assert (score.correct, score.total) == (0, 0)


@pytest.mark.scoring
def test_scores_are_idempotent():
    submission = _submission(
        _answer(4, "rw1", QuestionType.RWFIB, "apple,teacher"),
        _answer(7, "rf1", QuestionType.RFIB, "water"),
        _answer(10, "wfd1", QuestionType.WFD, "quick fox"),
    )
    before = submission.model_dump()
    first = score_submission(submission, BANK)
    second = score_submission(submission, BANK)
    assert first == second
    assert submission.model_dump() == before
    assert first.rwfib.correct == 1 and first.rfib.correct == 1 and first.wfd.correct == 2


@pytest.mark.scoring
def test_normalize_words_strips_punctuation():
    assert normalize_words("It's 5 o'clock, isn't it?") == ["its", "5", "oclock", "isnt", "it"]


@pytest.mark.scoring
def test_split_blank_answers():
    assert split_blank_answers("a, b ,c") == ["a", "b", "c"]
    assert split_blank_answers("") == []
