from enum import Enum
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

AnswerIndex = int


class RoomState(str, Enum):
    IDLE = "idle"
    ROUND_IN_PROGRESS = "round_in_progress"
    ROUND_RESOLVING = "round_resolving"
    ENDED = "ended"


class RoundKind(str, Enum):
    TRIVIA = "trivia"
    SOCIAL_PROMPT = "social_prompt"
    MINGLE_TASK = "mingle_task"


class LifelineKind(str, Enum):
    FIFTY_FIFTY = "fifty_fifty"
    SECOND_CHANCE = "second_chance"
    ASK_AUDIENCE = "ask_audience"


class Question(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = ""
    text: str = Field(validation_alias=AliasChoices("text", "question"))
    options: Tuple[str, ...] = Field(min_length=2)
    correct_index: AnswerIndex = Field(validation_alias=AliasChoices("correct_index", "correctIndex"))

    @model_validator(mode="after")
    def _check_correct_index(self):
        if not 0 <= self.correct_index < len(self.options):
            raise ValueError(f"correct_index {self.correct_index} out of range for {len(self.options)} options")
        return self


class Round(BaseModel):
    index: int
    kind: RoundKind
    category: Optional[str] = None
    question: Optional[Question] = None
    prompt: Optional[str] = None

    @property
    def is_trivia(self) -> bool:
        return self.kind == RoundKind.TRIVIA

    def public_view(self) -> dict:
        """What every participant may see; never includes the correct option."""
        view: dict = {"index": self.index, "kind": self.kind.value}
        if self.question is not None:
            view["category"] = self.category
            view["question"] = {
                "id": self.question.id,
                "text": self.question.text,
                "options": list(self.question.options),
            }
        else:
            view["prompt"] = self.prompt
        return view


class Participant(BaseModel):
    id: str
    nickname: Optional[str] = None
    score: float = 0.0


class AnswerAttempt(BaseModel):
    attempts: int = 0
    chosen_option: Optional[AnswerIndex] = None
    is_correct: bool = False
    second_chance: bool = False
    finished: bool = False


class AnswerOutcome(BaseModel):
    correct: bool
    attempt: int
    can_retry: bool
    score_delta: float
    score: float


class LifelineEffect(BaseModel):
    kind: LifelineKind
    remaining_options: Optional[Dict[AnswerIndex, str]] = None
    audience: Optional[Dict[AnswerIndex, int]] = None
    second_chance_armed: bool = False


class LifelineUse(BaseModel):
    nickname: Optional[str]
    lifeline: LifelineKind


class RoundSummary(BaseModel):
    round_index: int
    incorrect_nicknames: List[Optional[str]] = Field(default_factory=list)
    lifelines: List[LifelineUse] = Field(default_factory=list)


class GameOutcome(BaseModel):
    status: Literal["continue", "ended"]
    winner_id: Optional[str] = None
    winning_score: Optional[float] = None

    @property
    def ended(self) -> bool:
        return self.status == "ended"

    @classmethod
    def keep_playing(cls) -> "GameOutcome":
        return cls(status="continue")

    @classmethod
    def game_over(cls, winner: Optional[Participant]) -> "GameOutcome":
        if winner is None:
            return cls(status="ended")
        return cls(status="ended", winner_id=winner.id, winning_score=winner.score)
