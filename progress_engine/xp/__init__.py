"""XP and leveling ledger."""

from progress_engine.xp.levels import LevelCurve
from progress_engine.xp.models import XPReason, XPTransaction
from progress_engine.xp.service import XPAwardResult, XPService, XPSummary


__all__ = [
    "LevelCurve",
    "XPAwardResult",
    "XPReason",
    "XPService",
    "XPSummary",
    "XPTransaction",
]
