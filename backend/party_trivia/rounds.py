from __future__ import annotations

import logging
import random
from typing import Optional, Sequence, Set, Tuple

from .config import Settings
from .errors import CategoryExhausted
from .models import Question, Round, RoundKind
from .questions import QuestionBank

logger = logging.getLogger(__name__)


class RoundSelector:
    """Per-room round sequencing: the round counter and the set of asked questions."""

    def __init__(self, bank: QuestionBank, settings: Settings, rng: random.Random | None = None):
        self.bank = bank
        self.settings = settings
        self.rng = rng or random.Random()
        self.round_counter = 0
        # (category, position in the bank) of every question already asked
        self.asked: Set[Tuple[str, int]] = set()

    def is_bonus(self, ordinal: int) -> bool:
        return ordinal % self.settings.BONUS_ROUND_INTERVAL == 0

    def bonus_kind(self, ordinal: int) -> RoundKind:
        kinds = self.settings.BONUS_ROUND_KINDS
        return kinds[(ordinal // self.settings.BONUS_ROUND_INTERVAL) % 2]

    def next_round(self, category: Optional[str] = None) -> Round:
        """Select the next round.

        The counter is only committed once a round has been selected, so a
        failed selection (``CategoryExhausted`` or ``ContentUnavailable``)
        can be retried for the same ordinal.
        """
        ordinal = self.round_counter + 1

        if self.is_bonus(ordinal):
            kind = self.bonus_kind(ordinal)
            pool = self.bank.social_prompts if kind == RoundKind.SOCIAL_PROMPT else self.bank.mingle_tasks
            rnd = Round(index=ordinal, kind=kind, prompt=self.rng.choice(pool))
        else:
            if category is None:
                category = self.rng.choice(self.settings.CATEGORIES)
            question = self._pick_question(category)
            rnd = Round(index=ordinal, kind=RoundKind.TRIVIA, category=category, question=question)

        self.round_counter = ordinal
        return rnd

    def _pick_question(self, category: str) -> Question:
        available = [
            (position, q)
            for position, q in enumerate(self.bank.questions_in(category))
            if (category, position) not in self.asked
        ]
        if not available:
            raise CategoryExhausted(category)
        position, question = self.rng.choice(available)
        self.asked.add((category, position))
        return question

    def fallback_order(self, exclude: Sequence[str] = ()) -> list[str]:
        """Remaining categories in random order, for retrying a failed pick."""
        remaining = [c for c in self.settings.CATEGORIES if c not in exclude]
        self.rng.shuffle(remaining)
        return remaining
