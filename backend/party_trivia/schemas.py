from pydantic import BaseModel
from typing import Any, Dict, List, Optional

from .models import LifelineKind, Participant


class JoinIn(BaseModel):
    participant_id: str
    nickname: Optional[str] = None


class AnswerIn(BaseModel):
    participant_id: str
    option: int


class LifelineIn(BaseModel):
    participant_id: str
    kind: LifelineKind


class CreateRoomOut(BaseModel):
    room_id: str


class PublicRoomOut(BaseModel):
    id: str
    state: str
    round_counter: int
    participants: List[Participant]
    current_round: Optional[Dict[str, Any]] = None
    deadline_ts: Optional[float] = None
    outcome: Optional[Dict[str, Any]] = None
