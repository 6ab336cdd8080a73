# app/services/dictation_scoring.py
from collections import Counter
from typing import Dict, List, Optional

from pydantic import BaseModel

from app.models.enums import WordMatchStatus
from app.services.scoring import normalize_words


class WordStatus(BaseModel):
    word: str
    status: WordMatchStatus


class DictationResult(BaseModel):
    score: int
    max_score: int
    incorrect_count: int
    matched_correct_counts: Dict[str, int]
    correct_word_counts: Dict[str, int]
    normalized_correct_words: List[str]
    normalized_input_words: List[str]
    word_statuses: List[WordStatus] = []
    tokens: List[WordStatus] = []


def evaluate_write_from_dictation(correct_sentence: str, user_answer: str) -> DictationResult:
    """Scores a practice answer; each reference word can be matched as often as it occurs."""
    correct_words = normalize_words(correct_sentence)
    input_words = normalize_words(user_answer)
    correct_counts = Counter(correct_words)
    matched: Dict[str, int] = {}

    score = 0
    for word in input_words:
        if matched.get(word, 0) < correct_counts.get(word, 0):
            matched[word] = matched.get(word, 0) + 1
            score += 1

    max_score = len(correct_words)
    return DictationResult(
        score=score,
        max_score=max_score,
        incorrect_count=max(max_score - score, 0),
        matched_correct_counts=matched,
        correct_word_counts=dict(correct_counts),
        normalized_correct_words=correct_words,
        normalized_input_words=input_words,
        word_statuses=map_input_word_statuses(input_words, correct_counts),
        tokens=build_answer_tokens_for_display(correct_words, input_words),
    )


def map_input_word_statuses(input_words: List[str], correct_word_counts: Dict[str, int]) -> List[WordStatus]:
    matched: Dict[str, int] = {}
    statuses = []
    for word in input_words:
        if matched.get(word, 0) < correct_word_counts.get(word, 0):
            matched[word] = matched.get(word, 0) + 1
            statuses.append(WordStatus(word=word, status=WordMatchStatus.CORRECT))
        else:
            statuses.append(WordStatus(word=word, status=WordMatchStatus.INCORRECT))
    return statuses


def build_answer_tokens_for_display(correct_words: List[str], input_words: List[str]) -> List[WordStatus]:
    """
    Walks the input words and interleaves reference words the learner missed.

    Every input word claims the earliest unclaimed position of the same word in
    the reference. A missed reference word is shown right after the last input
    word whose claimed position precedes it, or before everything when none does.
    """
    index_queues: Dict[str, List[int]] = {}
    for index, word in enumerate(correct_words):
        index_queues.setdefault(word, []).append(index)

    input_matches: List[tuple] = []
    for word in input_words:
        queue = index_queues.get(word)
        if queue:
            input_matches.append((word, WordMatchStatus.CORRECT, queue.pop(0)))
        else:
            input_matches.append((word, WordMatchStatus.INCORRECT, None))

    missing_indices = sorted(i for queue in index_queues.values() for i in queue)

    insert_map: Dict[int, List[str]] = {}
    for missing_index in missing_indices:
        insert_position = -1
        for position, (_, _, correct_index) in enumerate(input_matches):
            if correct_index is not None and correct_index < missing_index:
                insert_position = position
        insert_map.setdefault(insert_position, []).append(correct_words[missing_index])

    tokens: List[WordStatus] = []

    def add_missing(position: int) -> None:
        for word in insert_map.get(position, []):
            tokens.append(WordStatus(word=word, status=WordMatchStatus.MISSING))

    add_missing(-1)
    for position, (word, status, _) in enumerate(input_matches):
        tokens.append(WordStatus(word=word, status=status))
        add_missing(position)
    return tokens


def score_percentage(result: DictationResult) -> Optional[float]:
    if result.max_score == 0:
        return None
    return round(100.0 * result.score / result.max_score, 1)
