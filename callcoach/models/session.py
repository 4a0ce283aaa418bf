"""Call session lifecycle enums."""

from enum import Enum


class SessionStatus(str, Enum):
    """Call session states."""

    IDLE = "idle"
    ACTIVE = "active"
    ENDED = "ended"


class EndReason(str, Enum):
    """Why a call session ended."""

    MANUAL = "manual"
    NATURAL_ENDING = "natural_ending"
    INTERACTION_LIMIT = "interaction_limit"


__all__ = ["EndReason", "SessionStatus"]
