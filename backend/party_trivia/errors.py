"""Errors raised by room operations.

Every error is reported to the caller that made the request; none of them is
appended to a room's event log.
"""

from __future__ import annotations


class GameError(ValueError):
    status_code = 400
    code = "game_error"


class RoomNotFound(GameError):
    status_code = 404
    code = "room_not_found"


class UnknownParticipant(GameError):
    status_code = 404
    code = "unknown_participant"


class InvalidState(GameError):
    """Operation not valid in the room's current state; clients should resync."""

    status_code = 409
    code = "invalid_state"


class NoActiveQuestion(GameError):
    status_code = 409
    code = "no_active_question"


class WindowClosed(GameError):
    status_code = 409
    code = "window_closed"


class NoAttemptsRemaining(GameError):
    status_code = 409
    code = "no_attempts_remaining"


class InvalidOption(GameError):
    status_code = 400
    code = "invalid_option"


class LifelineAlreadyUsed(GameError):
    status_code = 409
    code = "lifeline_already_used"


class NicknameTaken(GameError):
    status_code = 409
    code = "nickname_taken"


class CategoryExhausted(GameError):
    status_code = 409
    code = "category_exhausted"

    def __init__(self, category: str | None, message: str | None = None):
        self.category = category
        super().__init__(message or f"No unused questions left in category {category!r}")


class ContentUnavailable(GameError):
    status_code = 503
    code = "content_unavailable"

    def __init__(self, category: str, message: str | None = None):
        self.category = category
        super().__init__(message or f"No questions loaded for category {category!r}")
