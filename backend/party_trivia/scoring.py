"""Answer ledger for the current round and the scoring policy applied to it.

First attempt correct scores a full point. A participant who armed the
second-chance lifeline before answering may try again after a wrong first
answer; a correct second attempt scores half a point. Any other wrong answer
ends the participant's round with no points.
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, List, Optional

from .errors import InvalidOption, NoAttemptsRemaining
from .models import AnswerAttempt, AnswerIndex, Question

FIRST_ATTEMPT_POINTS = 1.0
SECOND_ATTEMPT_POINTS = 0.5
MAX_ATTEMPTS = 2


class AnswerLedger:
    def __init__(self):
        self.attempts: Dict[str, AnswerAttempt] = {}
        # participants whose round ended on a wrong answer, in order
        self.incorrect: List[str] = []

    def attempt_for(self, participant_id: str) -> AnswerAttempt:
        return self.attempts.setdefault(participant_id, AnswerAttempt())

    def is_finished(self, participant_id: str) -> bool:
        attempt = self.attempts.get(participant_id)
        return bool(attempt and attempt.finished)

    def arm_second_chance(self, participant_id: str) -> None:
        self.attempt_for(participant_id).second_chance = True

    def record(self, participant_id: str, question: Question, option: AnswerIndex) -> tuple[AnswerAttempt, float]:
        """Record an attempt and return the updated record with its score delta."""
        if not 0 <= option < len(question.options):
            raise InvalidOption(f"Option {option} is not one of the {len(question.options)} options")

        attempt = self.attempt_for(participant_id)
        if attempt.finished:
            raise NoAttemptsRemaining("You have already answered this question")

        attempt.attempts += 1
        attempt.chosen_option = option
        attempt.is_correct = option == question.correct_index

        delta = 0.0
        if attempt.is_correct:
            delta = FIRST_ATTEMPT_POINTS if attempt.attempts == 1 else SECOND_ATTEMPT_POINTS
            attempt.finished = True
        elif attempt.second_chance and attempt.attempts < MAX_ATTEMPTS:
            pass
        else:
            attempt.finished = True
            self.incorrect.append(participant_id)

        return attempt, delta

    def can_retry(self, participant_id: str) -> bool:
        attempt = self.attempts.get(participant_id)
        return attempt is not None and not attempt.finished and attempt.attempts > 0

    def audience_histogram(self, exclude: Optional[str] = None) -> Dict[AnswerIndex, int]:
        counts = Counter(
            a.chosen_option
            for pid, a in self.attempts.items()
            if pid != exclude and a.chosen_option is not None
        )
        return dict(sorted(counts.items()))

    def clear(self) -> None:
        self.attempts.clear()
        self.incorrect.clear()
