from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .models import GameOutcome, Participant


def ranked(participants: Iterable[Participant]) -> List[Participant]:
    """Highest score first; equal scores keep join order."""
    # sorted() is stable, so the iteration (join) order breaks ties
    return sorted(participants, key=lambda p: -p.score)


def build_leaderboard(participants: Iterable[Participant]) -> Dict[str, float]:
    """Project participants onto ``{nickname: score}``.

    Participants without a nickname are left out.
    """
    return {p.nickname: p.score for p in ranked(participants) if p.nickname}


def evaluate_win(
    participants: Iterable[Participant],
    round_counter: int,
    target_score: float,
    max_rounds: int,
) -> GameOutcome:
    standings = ranked(participants)

    leader: Optional[Participant] = standings[0] if standings else None
    if leader is not None and leader.score >= target_score:
        return GameOutcome.game_over(leader)

    if round_counter >= max_rounds:
        return GameOutcome.game_over(leader)

    return GameOutcome.keep_playing()
