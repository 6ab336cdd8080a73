# app/models/enums.py
from enum import Enum

class QuestionType(str, Enum):
    """Fixed question-type codes used by the placement test."""
    READ_ALOUD = "readAloud"
    RWFIB = "rwfib"
    RFIB = "rfib"
    WFD = "wfd"

# Order in which question types appear in a placement test.
PLACEMENT_ORDER = [QuestionType.READ_ALOUD, QuestionType.RWFIB, QuestionType.RFIB, QuestionType.WFD]

class ExamPhase(str, Enum):
    """Phases of a placement-test session."""
    COLLECTING_INFO = "collecting_info"
    PREPPING = "prepping"
    RECORDING = "recording"
    IDLE = "idle"
    SUBMITTING = "submitting"
    DONE = "done"

class DictationFilter(str, Enum):
    ALL = "All"
    NEW = "New"
    STILL_IMPORTANT = "Still Important"

class DictationSort(str, Enum):
    OCCURRENCE = "occurrence"
    ALPHABETICAL = "alphabetical"
    NEWEST = "newest"
    EASY_TO_DIFFICULT = "easyToDifficult"

class WordMatchStatus(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    MISSING = "missing"
