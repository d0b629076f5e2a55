from __future__ import annotations

import random
from typing import Dict

from .errors import LifelineAlreadyUsed
from .models import LifelineEffect, LifelineKind, Question
from .scoring import AnswerLedger

# incorrect options left visible by the fifty-fifty
FIFTY_FIFTY_KEPT_INCORRECT = 1


class LifelineManager:
    """Tracks which lifeline each participant used in the current round."""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()
        self.used: Dict[str, LifelineKind] = {}

    def ensure_available(self, participant_id: str) -> None:
        if participant_id in self.used:
            raise LifelineAlreadyUsed(
                f"Lifeline {self.used[participant_id].value} already used this round"
            )

    def use(self, participant_id: str, kind: LifelineKind, question: Question, ledger: AnswerLedger) -> LifelineEffect:
        self.ensure_available(participant_id)

        if kind == LifelineKind.FIFTY_FIFTY:
            effect = LifelineEffect(kind=kind, remaining_options=self.fifty_fifty(question))
        elif kind == LifelineKind.SECOND_CHANCE:
            ledger.arm_second_chance(participant_id)
            effect = LifelineEffect(kind=kind, second_chance_armed=True)
        else:
            effect = LifelineEffect(kind=kind, audience=ledger.audience_histogram(exclude=participant_id))

        self.used[participant_id] = kind
        return effect

    def fifty_fifty(self, question: Question) -> Dict[int, str]:
        incorrect = [i for i in range(len(question.options)) if i != question.correct_index]
        kept = set(self.rng.sample(incorrect, min(FIFTY_FIFTY_KEPT_INCORRECT, len(incorrect))))
        kept.add(question.correct_index)
        return {i: question.options[i] for i in sorted(kept)}

    def clear(self) -> None:
        self.used.clear()
