"""
Letter-level guess feedback (Wordle-style, duplicate-letter aware).

Two passes over the guess:
1. exact position matches are marked CORRECT and consume one occurrence
   of the letter from a pool built from the answer's letter multiset;
2. every other position is PRESENT if the pool still holds that letter
   (consuming one), otherwise ABSENT.

Comparison is case-folded. The result always has one entry per guess
character; guess positions past the end of the answer are always ABSENT
and never consume from the pool.
"""
from collections import Counter
from enum import Enum
from typing import List, Dict


class LetterStatus(str, Enum):
    CORRECT = "correct"
    PRESENT = "present"
    ABSENT = "absent"


def generate_cipher_feedback(guess: str, correct_answer: str) -> List[Dict[str, str]]:
    """
    Compare a guess with the answer letter by letter.

    Returns a list of {"letter": str, "status": "correct"|"present"|"absent"}
    with the guess letters lower-cased.
    """
    guess_letters = list(guess.lower())
    answer_letters = list(correct_answer.lower())
    remaining = Counter(answer_letters)

    statuses: List[LetterStatus] = [None] * len(guess_letters)

    for i, letter in enumerate(guess_letters):
        if i < len(answer_letters) and letter == answer_letters[i]:
            statuses[i] = LetterStatus.CORRECT
            remaining[letter] -= 1

    for i, letter in enumerate(guess_letters):
        if statuses[i] is not None:
            continue
        if i >= len(answer_letters):
            statuses[i] = LetterStatus.ABSENT
        elif remaining[letter] > 0:
            statuses[i] = LetterStatus.PRESENT
            remaining[letter] -= 1
        else:
            statuses[i] = LetterStatus.ABSENT

    return [
        {"letter": letter, "status": status.value}
        for letter, status in zip(guess_letters, statuses)
    ]


def answers_match(guess: str, correct_answer: str) -> bool:
    """Exact match after trimming surrounding whitespace, case-insensitive."""
    return guess.strip().lower() == correct_answer.strip().lower()
