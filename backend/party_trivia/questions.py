"""Read-only question bank plus the prompt lists used by bonus rounds."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Sequence, Tuple

from .errors import ContentUnavailable
from .models import Question

logger = logging.getLogger(__name__)

BUNDLED_QUESTIONS = Path(__file__).parent / "data" / "questions.json"

DEFAULT_SOCIAL_PROMPTS: Tuple[str, ...] = (
    "If you could have any superpower, what would it be?",
    "What's your go-to karaoke song?",
    "What is the worst haircut you have ever had?",
    "Which fictional character would you invite to dinner?",
)

DEFAULT_MINGLE_TASKS: Tuple[str, ...] = (
    "Find someone who shares your birth month and take a selfie.",
    "Swap an interesting fact with the person on your left.",
    "Find two people who have visited the same country as you.",
    "Teach someone nearby a word in another language.",
)


class QuestionBank:
    """Questions indexed by category; never mutated after construction."""

    def __init__(
        self,
        questions: Mapping[str, Iterable[Question]],
        social_prompts: Sequence[str] = DEFAULT_SOCIAL_PROMPTS,
        mingle_tasks: Sequence[str] = DEFAULT_MINGLE_TASKS,
    ):
        self._questions: Dict[str, Tuple[Question, ...]] = {
            category: tuple(items) for category, items in questions.items()
        }
        self.social_prompts: Tuple[str, ...] = tuple(social_prompts) or DEFAULT_SOCIAL_PROMPTS
        self.mingle_tasks: Tuple[str, ...] = tuple(mingle_tasks) or DEFAULT_MINGLE_TASKS

    def categories(self) -> set[str]:
        return {category for category, items in self._questions.items() if items}

    def questions_in(self, category: str) -> Tuple[Question, ...]:
        items = self._questions.get(category)
        if not items:
            raise ContentUnavailable(category)
        return items

    def __len__(self) -> int:
        return sum(len(items) for items in self._questions.values())

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "QuestionBank":
        """Build a bank from ``{"categories": {name: [question, ...]}}``.

        Question entries may use either ``text``/``correct_index`` or the
        ``question``/``correctIndex`` keys. Entries without an ``id`` get
        ``"<category>:<position>"``.
        """
        categories: Dict[str, list[Question]] = {}
        for category, entries in (payload.get("categories") or {}).items():
            categories[category] = [
                Question.model_validate({**entry, "id": entry.get("id") or f"{category}:{position}"})
                for position, entry in enumerate(entries)
            ]

        return cls(
            categories,
            social_prompts=payload.get("social_prompts") or DEFAULT_SOCIAL_PROMPTS,
            mingle_tasks=payload.get("mingle_tasks") or DEFAULT_MINGLE_TASKS,
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "QuestionBank":
        with open(path, "r", encoding="utf-8") as fh:
            payload = json.load(fh)
        bank = cls.from_dict(payload)
        logger.info("Loaded %d questions in %d categories from %s", len(bank), len(bank.categories()), path)
        return bank


def load_default_bank(questions_path: str | None = None) -> QuestionBank:
    return QuestionBank.from_file(questions_path or BUNDLED_QUESTIONS)
