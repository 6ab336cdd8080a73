# app/services/exam_flow.py
"""
Placement-test session state.

A session walks question indices from -1 (personal info) to N-1. Read-aloud
questions run two countdowns, preparation then recording; the recording is
stopped automatically when its countdown runs out. Timers are evaluated
lazily against the injected clock whenever the session is touched.
"""
import asyncio
import time
from typing import Awaitable, Callable, Dict, List, Optional

from app.models.enums import ExamPhase, QuestionType
from app.models.question import Question
from app.models.submission import Answer, PersonalInfo
from app.utils.config import settings
from app.utils.logger import logger

FILL_IN_BLANK_TYPES = (QuestionType.RWFIB, QuestionType.RFIB)


class ExamFlowError(Exception):
    """An action that is not allowed in the session's current phase."""


class RecordingUploadError(ExamFlowError):
    """The pending recording upload for the current question failed."""


def format_blank_answers(blanks: Dict[int, str], max_blanks: int) -> str:
    """Joins per-blank answers positionally, dropping trailing empty blanks."""
    answers = [""] * max_blanks
    for index, value in blanks.items():
        if 0 <= index < max_blanks:
            answers[index] = value
    while answers and answers[-1] == "":
        answers.pop()
    return ",".join(answers)


class ExamSession:
    def __init__(
        self,
        session_id: str,
        questions: List[Question],
        clock: Callable[[], float] = time.monotonic,
        prep_seconds: Optional[int] = None,
        record_seconds: Optional[int] = None,
        max_blanks: Optional[int] = None,
    ):
        self.session_id = session_id
        self.questions = questions
        self.clock = clock
        self.prep_seconds = prep_seconds if prep_seconds is not None else settings.prep_seconds
        self.record_seconds = record_seconds if record_seconds is not None else settings.record_seconds
        self.max_blanks = max_blanks if max_blanks is not None else settings.max_blanks

        self.personal_info = PersonalInfo()
        self.phase = ExamPhase.COLLECTING_INFO
        self.current_index = -1
        self.phase_started_at: Optional[float] = None
        self.question_started_at: Optional[float] = None
        self.submission_id: Optional[str] = None
        self.pending_upload: Optional[asyncio.Future] = None
        self._advancing = False
        self.last_activity = self.clock()
        self._reset_answers()

    def _reset_answers(self) -> None:
        self.text_answers: Dict[str, str] = {}
        self.blank_answers: Dict[str, Dict[int, str]] = {}
        self.recordings: Dict[str, str] = {}
        self.time_spent: Dict[str, int] = {}

    @property
    def current_question(self) -> Optional[Question]:
        if 0 <= self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    def start(self, personal_info: PersonalInfo) -> None:
        if self.phase != ExamPhase.COLLECTING_INFO:
            raise ExamFlowError("The test has already started")
        if not personal_info.is_complete():
            raise ValueError("Please fill in all personal information fields")
        self.personal_info = personal_info
        self._reset_answers()
        self.current_index = 0
        self._enter_current_question()
        logger.info(f"Exam session {self.session_id} started for {personal_info.email}.")

    def _enter_current_question(self) -> None:
        now = self.clock()
        self.question_started_at = now
        self.phase_started_at = now
        question = self.current_question
        if question is not None and question.type == QuestionType.READ_ALOUD:
            self.phase = ExamPhase.PREPPING
        else:
            self.phase = ExamPhase.IDLE

    def refresh(self) -> ExamPhase:
        """Applies any timer expiry that happened since the last call."""
        now = self.clock()
        self.last_activity = now
        if self.phase == ExamPhase.PREPPING and now - self.phase_started_at >= self.prep_seconds:
            # Recording starts at the preparation deadline, not when we noticed it.
            self.phase_started_at += self.prep_seconds
            self.phase = ExamPhase.RECORDING
            logger.debug(f"Session {self.session_id}: preparation over, recording Q{self.current_index + 1}.")
        if self.phase == ExamPhase.RECORDING and now - self.phase_started_at >= self.record_seconds:
            self._stop_recording(self.phase_started_at + self.record_seconds)
            logger.debug(f"Session {self.session_id}: recording time over, auto-stopped.")
        return self.phase

    def _stop_recording(self, at: float) -> None:
        self.phase = ExamPhase.IDLE
        self.phase_started_at = at

    def seconds_remaining(self) -> Optional[int]:
        self.refresh()
        if self.phase == ExamPhase.PREPPING:
            limit = self.prep_seconds
        elif self.phase == ExamPhase.RECORDING:
            limit = self.record_seconds
        else:
            return None
        return max(0, int(round(limit - (self.clock() - self.phase_started_at))))

    def _require_answerable(self, expected_types) -> Question:
        self.refresh()
        if self.phase in (ExamPhase.COLLECTING_INFO, ExamPhase.SUBMITTING, ExamPhase.DONE):
            raise ExamFlowError(f"Cannot answer while the session is {self.phase.value}")
        question = self.current_question
        if question.type not in expected_types:
            raise ExamFlowError(f"Question {question.question_number} is a {question.type.value} question")
        return question

    def set_text_answer(self, text: str) -> None:
        question = self._require_answerable((QuestionType.WFD,))
        self.text_answers[question.id] = text

    def set_blank_answer(self, index: int, value: str) -> None:
        question = self._require_answerable(FILL_IN_BLANK_TYPES)
        if not 0 <= index < self.max_blanks:
            raise ValueError(f"Blank index must be between 0 and {self.max_blanks - 1}")
        if "," in value:
            raise ValueError("Blank answers cannot contain commas")
        blanks = self.blank_answers.setdefault(question.id, {})
        if question.type == QuestionType.RFIB:
            # An option can only sit in one blank at a time.
            for other in [i for i, v in blanks.items() if v == value and i != index]:
                del blanks[other]
        blanks[index] = value

    def begin_upload(self, upload: Awaitable[str]) -> None:
        """Tracks the upload of the current read-aloud recording; its URL becomes the answer."""
        question = self._require_answerable((QuestionType.READ_ALOUD,))
        if self.phase == ExamPhase.PREPPING:
            raise ExamFlowError("Recording has not started yet")
        if self.pending_upload is not None and not self.pending_upload.done():
            raise ExamFlowError("A recording is already being uploaded")

        async def _store() -> str:
            url = await upload
            self.recordings[question.id] = url
            return url

        self.pending_upload = asyncio.ensure_future(_store())
        self.pending_upload.add_done_callback(self._upload_finished)

    def _upload_finished(self, upload: asyncio.Future) -> None:
        # Also covers uploads that are never awaited.
        if upload.cancelled():
            return
        error = upload.exception()
        if error is not None:
            logger.error(f"Recording upload failed for session {self.session_id}: {error!r}")

    def idle_seconds(self) -> float:
        return self.clock() - self.last_activity

    async def next(self) -> bool:
        """
        Moves to the next question. Returns True when the last question has been
        left and the session is ready to be submitted.

        Only one move can be in flight; a second call while the first waits for
        the recording upload raises ExamFlowError.
        """
        self.refresh()
        if self.phase in (ExamPhase.COLLECTING_INFO, ExamPhase.SUBMITTING, ExamPhase.DONE):
            raise ExamFlowError(f"Cannot move on while the session is {self.phase.value}")
        if self._advancing:
            raise ExamFlowError("Already moving to the next question")

        self._advancing = True
        try:
            return await self._advance()
        finally:
            self._advancing = False

    async def _advance(self) -> bool:
        question = self.current_question
        if self.phase == ExamPhase.RECORDING:
            self._stop_recording(self.clock())

        if self.pending_upload is not None:
            try:
                await self.pending_upload
            except Exception as e:
                raise RecordingUploadError("Error processing recording. Please try again.") from e
            finally:
                self.pending_upload = None

        if question.type == QuestionType.READ_ALOUD:
            self.time_spent[question.id] = self.record_seconds
        else:
            self.time_spent[question.id] = int(self.clock() - self.question_started_at)

        if self.current_index < len(self.questions) - 1:
            self.current_index += 1
            self._enter_current_question()
            return False

        self.phase = ExamPhase.SUBMITTING
        return True

    def formatted_answer(self, question: Question) -> str:
        if question.type == QuestionType.READ_ALOUD:
            return self.recordings.get(question.id, "")
        if question.type in FILL_IN_BLANK_TYPES:
            return format_blank_answers(self.blank_answers.get(question.id, {}), self.max_blanks)
        return self.text_answers.get(question.id, "")

    def build_answers(self) -> List[Answer]:
        """One answer per question; unanswered questions carry an empty answer."""
        answers = []
        for question in self.questions:
            fill_in_blank = question.type in FILL_IN_BLANK_TYPES
            answers.append(Answer(
                question_number=question.question_number,
                question_id=question.id,
                question_type=question.type.value,
                content=question.content,
                answer=self.formatted_answer(question),
                text=question.content or question.answer or "",
                time_spent=self.time_spent.get(question.id, 0),
                options=question.options if fill_in_blank else None,
                all_options=question.all_options() if fill_in_blank else None,
            ))
        return answers

    def finish(self, submission_id: str) -> None:
        self.submission_id = submission_id
        self.phase = ExamPhase.DONE
        logger.info(f"Exam session {self.session_id} stored as submission {submission_id}.")

    def submission_failed(self) -> None:
        """Puts the session back on the last question so the submit can be retried."""
        self.phase = ExamPhase.IDLE

    def snapshot(self) -> dict:
        remaining = self.seconds_remaining()
        question = self.current_question
        hidden = {"correct_answers", "answer"}
        if question is not None and question.type == QuestionType.WFD:
            # The dictation text is the expected answer.
            hidden.add("content")
        return {
            "session_id": self.session_id,
            "phase": self.phase.value,
            "current_index": self.current_index,
            "total_questions": len(self.questions),
            "seconds_remaining": remaining,
            "current_question": question.model_dump(mode="json", exclude=hidden) if question else None,
            "current_answer": self.formatted_answer(question) if question else None,
            "upload_pending": self.pending_upload is not None and not self.pending_upload.done(),
            "submission_id": self.submission_id,
        }
