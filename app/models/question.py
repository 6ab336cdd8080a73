# Data models for questions and write-from-dictation items
from datetime import datetime
from pydantic import BaseModel, validator
from typing import Dict, List, Optional, Union
from app.models.enums import QuestionType

# rfib stores a flat option list, rwfib one option group per blank
QuestionOptions = Union[List[str], Dict[str, List[str]]]

BLANK_MARKER = "_____"


def normalize_correct_answers(value) -> List[str]:
    """Accepts a list or a {"0": "a", "1": "b"} mapping and returns a positional list."""
    if value is None:
        return []
    if isinstance(value, dict):
        return [str(value[key]) for key in sorted(value, key=lambda k: int(k))]
    return [str(item) for item in value]


def flatten_options(options: Optional[QuestionOptions]) -> List[str]:
    if not options:
        return []
    if isinstance(options, dict):
        flat = []
        for key in sorted(options, key=lambda k: int(k)):
            flat.extend(options[key])
        return flat
    return list(options)


class Question(BaseModel):
    id: str
    type: QuestionType
    content: str = ""
    options: Optional[QuestionOptions] = None
    correct_answers: List[str] = []
    answer: Optional[str] = None
    difficulty: Optional[str] = None
    task_number: Optional[str] = None
    question_number: Optional[int] = None
    audio: Optional[Dict[str, str]] = None  # wfd only

    class Config:
        from_attributes = True

    @validator('correct_answers', pre=True)
    def _positional_answers(cls, v):
        return normalize_correct_answers(v)

    @property
    def blank_count(self) -> int:
        return self.content.count(BLANK_MARKER)

    def all_options(self) -> List[str]:
        return flatten_options(self.options)


class QuestionCreate(BaseModel):
    type: QuestionType
    content: str
    options: Optional[QuestionOptions] = None
    correct_answers: List[str] = []
    answer: Optional[str] = None
    difficulty: Optional[str] = None
    task_number: Optional[str] = None

    @validator('correct_answers', pre=True)
    def _positional_answers(cls, v):
        return normalize_correct_answers(v)


class DictationItem(BaseModel):
    id: str
    text: str
    audio: Dict[str, str] = {}
    occurrence: int = 0
    is_hidden: bool = False
    question_type: Optional[str] = None
    topic: Optional[str] = None
    vietnamese_translation: Optional[str] = None
    reference_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DictationItemIn(BaseModel):
    """One entry of a bulk dictation upload."""
    text: str
    occurrence: int = 0
    audio: Dict[str, str] = {}

    @validator('text')
    def _text_not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("text must not be empty")
        return v


class DictationItemUpdate(BaseModel):
    text: Optional[str] = None
    audio: Optional[Dict[str, str]] = None
    occurrence: Optional[int] = None
    is_hidden: Optional[bool] = None
    question_type: Optional[str] = None
    topic: Optional[str] = None
    vietnamese_translation: Optional[str] = None
    reference_id: Optional[str] = None

    @validator('text')
    def _text_not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("text must not be empty")
        return v.strip() if v is not None else v


class DictationBulkResult(BaseModel):
    added: int = 0
    updated: int = 0
    hidden: int = 0
