# Data models for placement-test submissions and their scores
from datetime import datetime
from pydantic import BaseModel
from typing import List, Optional, Union, Dict


class PersonalInfo(BaseModel):
    full_name: str = ""
    email: str = ""
    phone: str = ""
    target: str = ""

    def is_complete(self) -> bool:
        return all(value.strip() for value in (self.full_name, self.email, self.phone, self.target))


class Answer(BaseModel):
    question_number: int
    question_id: str
    question_type: str
    content: str = ""
    answer: str = ""  # comma-joined per blank for rwfib/rfib, recording URL for readAloud
    text: str = ""
    time_spent: int = 0
    options: Optional[Union[List[str], Dict[str, List[str]]]] = None
    all_options: Optional[List[str]] = None

    class Config:
        from_attributes = True


class Submission(BaseModel):
    id: str
    personal_info: PersonalInfo
    created_at: datetime
    status: str = "completed"
    notes: Optional[str] = None
    answers: List[Answer] = []


class QuestionScore(BaseModel):
    correct: int = 0
    total: int = 0


class SubmissionScores(BaseModel):
    rwfib: QuestionScore
    rfib: QuestionScore
    wfd: QuestionScore


class SubmissionDetail(Submission):
    scores: SubmissionScores


class SubmissionSummary(BaseModel):
    id: str
    personal_info: PersonalInfo
    created_at: datetime
    status: str
    notes: Optional[str] = None


class NotesUpdate(BaseModel):
    notes: str
