"""In-process events emitted after a learning write commits."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from progress_engine.xp.models import XPReason


@dataclass(frozen=True, slots=True)
class ActivityOccurred:
    """The user did something that counts toward today's streak."""

    user_id: UUID
    day: date
    kind: str
    reference_id: UUID | None = None


@dataclass(frozen=True, slots=True)
class XPAwardRequested:
    """Ask the XP ledger to append an award."""

    user_id: UUID
    amount: int
    reason: XPReason
    reference_id: UUID | None = None
    description: str | None = None


Event = ActivityOccurred | XPAwardRequested
