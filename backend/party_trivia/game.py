from __future__ import annotations
import asyncio
import logging
import random
from typing import Dict, List, Optional, Tuple

from .config import Settings, settings as default_settings
from .errors import (
    CategoryExhausted,
    ContentUnavailable,
    InvalidState,
    NicknameTaken,
    NoActiveQuestion,
    NoAttemptsRemaining,
    RoomNotFound,
    UnknownParticipant,
    WindowClosed,
)
from .events import EventStore, event_store
from .lifelines import LifelineManager
from .models import (
    AnswerOutcome,
    GameOutcome,
    LifelineEffect,
    LifelineKind,
    LifelineUse,
    Participant,
    Question,
    Round,
    RoomState,
    RoundSummary,
)
from .questions import QuestionBank, load_default_bank
from .rounds import RoundSelector
from .scoring import AnswerLedger
from .standings import build_leaderboard, evaluate_win
from .utils import now_ts, room_code

logger = logging.getLogger(__name__)


class RoomSession:
    """All mutable state of one room. Only the controller mutates it, under the room lock."""

    def __init__(self, room_id: str, bank: QuestionBank, settings: Settings, rng: random.Random):
        self.id = room_id
        self.state = RoomState.IDLE
        # insertion order is join order and breaks leaderboard ties
        self.participants: Dict[str, Participant] = {}
        self.selector = RoundSelector(bank, settings, rng)
        self.ledger = AnswerLedger()
        self.lifelines = LifelineManager(rng)
        self.current_round: Optional[Round] = None
        self.deadline_ts: Optional[float] = None
        self.timer: Optional[asyncio.Task] = None
        self.outcome: Optional[GameOutcome] = None

    @property
    def round_counter(self) -> int:
        return self.selector.round_counter

    def participant(self, participant_id: str) -> Participant:
        p = self.participants.get(participant_id)
        if p is None:
            raise UnknownParticipant(f"Participant {participant_id!r} has not joined room {self.id}")
        return p

    def nickname_of(self, participant_id: str) -> Optional[str]:
        p = self.participants.get(participant_id)
        return p.nickname if p else None

    def current_question(self) -> Question:
        if self.current_round is None or not self.current_round.is_trivia:
            raise NoActiveQuestion("There is no trivia question in play")
        return self.current_round.question

    def window_open(self) -> bool:
        if self.state != RoomState.ROUND_IN_PROGRESS:
            return False
        return self.deadline_ts is None or now_ts() <= self.deadline_ts

    def leaderboard(self) -> Dict[str, float]:
        return build_leaderboard(self.participants.values())

    def summary(self) -> RoundSummary:
        return RoundSummary(
            round_index=self.round_counter,
            incorrect_nicknames=[self.nickname_of(pid) for pid in self.ledger.incorrect],
            lifelines=[
                LifelineUse(nickname=self.nickname_of(pid), lifeline=kind)
                for pid, kind in self.lifelines.used.items()
            ],
        )

    def public_view(self) -> dict:
        view = {
            "id": self.id,
            "state": self.state.value,
            "round_counter": self.round_counter,
            "participants": [p.model_dump() for p in self.participants.values()],
            "current_round": None,
            "deadline_ts": self.deadline_ts,
            "outcome": self.outcome.model_dump() if self.outcome else None,
        }
        if self.current_round is not None and self.state != RoomState.ENDED:
            view["current_round"] = self.current_round.public_view()
        return view


class GameController:
    def __init__(
        self,
        bank: QuestionBank | None = None,
        settings: Settings | None = None,
        events: EventStore | None = None,
        rng: random.Random | None = None,
    ):
        self.settings = settings or default_settings
        self.events = events or event_store
        self.rng = rng or random.Random()
        self._bank = bank
        self.rooms: Dict[str, RoomSession] = {}
        self.locks: Dict[str, asyncio.Lock] = {}
        # casefolded nickname -> (room_id, participant_id), unique across all rooms
        self.nicknames: Dict[str, Tuple[str, str]] = {}

    @property
    def bank(self) -> QuestionBank:
        if self._bank is None:
            self._bank = load_default_bank(self.settings.QUESTIONS_PATH)
        return self._bank

    def _lock(self, room_id: str) -> asyncio.Lock:
        # locks exist only for live rooms; create_room makes them
        lock = self.locks.get(room_id)
        if lock is None:
            raise RoomNotFound(f"Room {room_id!r} not found")
        return lock

    def _room(self, room_id: str) -> RoomSession:
        room = self.rooms.get(room_id)
        if room is None:
            raise RoomNotFound(f"Room {room_id!r} not found")
        return room

    def get_room(self, room_id: str) -> RoomSession:
        return self._room(room_id)

    async def create_room(self) -> str:
        room_id = room_code(self.rng)
        while room_id in self.rooms:
            room_id = room_code(self.rng)

        self.rooms[room_id] = RoomSession(room_id, self.bank, self.settings, self.rng)
        self.locks[room_id] = asyncio.Lock()
        await self.events.reset(room_id)
        logger.info("Room %s created", room_id)
        return room_id

    async def join_room(self, room_id: str, participant_id: str, nickname: Optional[str]) -> Participant:
        async with self._lock(room_id):
            room = self._room(room_id)
            if room.state == RoomState.ENDED:
                raise InvalidState("The game in this room is over")

            owner = (room_id, participant_id)
            if nickname and self.nicknames.get(nickname.casefold(), owner) != owner:
                raise NicknameTaken(f"Nickname {nickname!r} is already taken")

            p = room.participants.get(participant_id)
            if p is None:
                p = Participant(id=participant_id, nickname=nickname)
                room.participants[participant_id] = p
            else:
                self._release_nickname(room_id, p)
                p.nickname = nickname
            if nickname:
                self.nicknames[nickname.casefold()] = owner

            logger.info("Participant %s joined room %s as %r", participant_id, room_id, nickname)
            await self._publish_players(room)
            return p

    async def start_game(self, room_id: str) -> Round:
        async with self._lock(room_id):
            room = self._room(room_id)
            if room.state != RoomState.IDLE:
                raise InvalidState(f"Cannot start a game while the room is {room.state.value}")

            rnd = self._select_round(room)
            await self._open_window(room, rnd)
            logger.info("Room %s started with %d participants", room_id, len(room.participants))
            return rnd

    async def advance_round(self, room_id: str) -> Round:
        async with self._lock(room_id):
            room = self._room(room_id)
            if room.state != RoomState.ROUND_RESOLVING:
                raise InvalidState(f"Cannot select a round while the room is {room.state.value}")

            rnd = self._select_round(room)
            await self._open_window(room, rnd)
            return rnd

    def _select_round(self, room: RoomSession) -> Round:
        try:
            rnd = room.selector.next_round()
        except (CategoryExhausted, ContentUnavailable) as exc:
            failed: List[str] = [exc.category]
            logger.info("Room %s: category %r unavailable, trying the others", room.id, exc.category)
            for category in room.selector.fallback_order(exclude=failed):
                try:
                    rnd = room.selector.next_round(category)
                    break
                except (CategoryExhausted, ContentUnavailable):
                    failed.append(category)
            else:
                raise CategoryExhausted(None, "Every category has run out of questions") from exc

        room.ledger.clear()
        room.lifelines.clear()
        return rnd

    async def _open_window(self, room: RoomSession, rnd: Round):
        duration = self.settings.ANSWER_WINDOW_SEC
        room.current_round = rnd
        room.state = RoomState.ROUND_IN_PROGRESS
        room.deadline_ts = now_ts() + duration
        room.timer = asyncio.create_task(self._window_timer(room.id, rnd.index, duration))

        await self.events.append(
            room.id,
            {
                "type": "round_started",
                "round": rnd.public_view(),
                "deadline_ts": room.deadline_ts,
            },
        )
        logger.debug("Room %s round %d (%s) open for %ss", room.id, rnd.index, rnd.kind.value, duration)

    async def _window_timer(self, room_id: str, round_index: int, duration: float):
        await asyncio.sleep(duration)
        try:
            await self.expire_window(room_id, round_index)
        except RoomNotFound:
            logger.info("[timer-abort] room %s closed before round %d resolved", room_id, round_index)
        except Exception:
            logger.exception("[timer-error] room %s round %d failed to resolve", room_id, round_index)

    async def expire_window(self, room_id: str, round_index: int | None = None) -> GameOutcome | None:
        """Close the answer window and resolve the round.

        Stale calls (another round, or the window already closed) do nothing
        and return ``None``.
        """
        async with self._lock(room_id):
            room = self._room(room_id)
            if room.state != RoomState.ROUND_IN_PROGRESS or (
                round_index is not None and room.current_round.index != round_index
            ):
                logger.info("[timer-abort] room %s round %s no longer open (%s)", room_id, round_index, room.state.value)
                return None

            self._cancel_timer(room)
            return await self._resolve_round(room)

    async def _resolve_round(self, room: RoomSession) -> GameOutcome:
        room.state = RoomState.ROUND_RESOLVING
        room.deadline_ts = None

        rnd = room.current_round
        summary = room.summary()
        leaderboard = room.leaderboard()
        await self.events.append(
            room.id,
            {
                "type": "window_closed",
                "round_index": rnd.index,
                "correct_index": rnd.question.correct_index if rnd.question else None,
                "summary": summary.model_dump(mode="json"),
            },
        )
        await self.events.append(room.id, {"type": "leaderboard_updated", "leaderboard": leaderboard})

        room.ledger.clear()
        room.lifelines.clear()

        outcome = evaluate_win(
            room.participants.values(),
            room.round_counter,
            self.settings.TARGET_SCORE,
            self.settings.MAX_ROUNDS,
        )
        if outcome.ended:
            await self._finish(room, outcome)
        else:
            logger.info("Room %s round %d resolved, no winner yet", room.id, rnd.index)
        return outcome

    async def _finish(self, room: RoomSession, outcome: GameOutcome):
        room.state = RoomState.ENDED
        room.outcome = outcome
        room.current_round = None
        room.deadline_ts = None
        room.selector.asked.clear()
        self._cancel_timer(room)

        await self.events.append(
            room.id,
            {
                "type": "game_over",
                "winner_id": outcome.winner_id,
                "winner_nickname": room.nickname_of(outcome.winner_id) if outcome.winner_id else None,
                "winning_score": outcome.winning_score,
                "leaderboard": room.leaderboard(),
            },
        )
        logger.info("Room %s game over after %d rounds, winner=%s", room.id, room.round_counter, outcome.winner_id)

    def _cancel_timer(self, room: RoomSession):
        timer, room.timer = room.timer, None
        if timer is not None and not timer.done() and timer is not asyncio.current_task():
            timer.cancel()

    async def submit_answer(self, room_id: str, participant_id: str, option: int) -> AnswerOutcome:
        async with self._lock(room_id):
            room = self._room(room_id)
            if room.state in (RoomState.IDLE, RoomState.ENDED):
                raise NoActiveQuestion("There is no trivia question in play")
            question = room.current_question()
            if not room.window_open():
                raise WindowClosed("The answer window for this round has closed")

            p = room.participant(participant_id)
            attempt, delta = room.ledger.record(participant_id, question, option)
            p.score += delta

            logger.debug(
                "Room %s: %s answered %d (attempt %d, correct=%s, +%s)",
                room_id, participant_id, option, attempt.attempts, attempt.is_correct, delta,
            )
            return AnswerOutcome(
                correct=attempt.is_correct,
                attempt=attempt.attempts,
                can_retry=not attempt.finished,
                score_delta=delta,
                score=p.score,
            )

    async def use_lifeline(self, room_id: str, participant_id: str, kind: LifelineKind) -> LifelineEffect:
        async with self._lock(room_id):
            room = self._room(room_id)
            room.participant(participant_id)
            if room.state != RoomState.ROUND_IN_PROGRESS:
                raise InvalidState(f"Lifelines are only available while a round is open, not {room.state.value}")
            question = room.current_question()
            if not room.window_open():
                raise WindowClosed("The answer window for this round has closed")

            room.lifelines.ensure_available(participant_id)
            if room.ledger.is_finished(participant_id):
                raise NoAttemptsRemaining("You have already answered this question")

            effect = room.lifelines.use(participant_id, LifelineKind(kind), question, room.ledger)
            logger.debug("Room %s: %s used %s", room_id, participant_id, effect.kind.value)
            return effect

    async def build_leaderboard(self, room_id: str) -> Dict[str, float]:
        return self._room(room_id).leaderboard()

    async def close_room(self, room_id: str) -> None:
        async with self._lock(room_id):
            room = self.rooms.pop(room_id, None)
            if room is None:
                raise RoomNotFound(f"Room {room_id!r} not found")
            self.locks.pop(room_id, None)
            self._cancel_timer(room)
            for p in room.participants.values():
                self._release_nickname(room_id, p)
            await self.events.drop(room_id)
        logger.info("Room %s closed", room_id)

    def _release_nickname(self, room_id: str, p: Participant):
        if p.nickname and self.nicknames.get(p.nickname.casefold()) == (room_id, p.id):
            del self.nicknames[p.nickname.casefold()]

    async def _publish_players(self, room: RoomSession):
        await self.events.append(
            room.id,
            {
                "type": "players_update",
                "players": [p.model_dump() for p in room.participants.values()],
            },
        )


controller = GameController()
