"""Level curve: a step function from total XP to level."""

from bisect import bisect_right
from collections.abc import Sequence

from progress_engine.config.settings import get_settings


class LevelCurve:
    """Cumulative XP thresholds; ``thresholds[i]`` is the XP needed for level ``i + 1``."""

    def __init__(self, thresholds: Sequence[int]) -> None:
        if not thresholds or thresholds[0] != 0:
            msg = "Level thresholds must start at 0"
            raise ValueError(msg)
        if any(later <= earlier for earlier, later in zip(thresholds, thresholds[1:], strict=False)):
            msg = "Level thresholds must be strictly increasing"
            raise ValueError(msg)
        self.thresholds = tuple(thresholds)

    @classmethod
    def from_settings(cls) -> "LevelCurve":
        return cls(get_settings().XP_LEVEL_THRESHOLDS)

    @property
    def max_level(self) -> int:
        return len(self.thresholds)

    def threshold(self, level: int) -> int:
        """Cumulative XP needed to reach ``level``."""
        return self.thresholds[level - 1]

    def level_for(self, total_xp: int) -> int:
        """Largest level whose threshold is <= ``total_xp`` (at least 1)."""
        return max(bisect_right(self.thresholds, total_xp), 1)

    def xp_to_next_level(self, total_xp: int) -> int:
        level = self.level_for(total_xp)
        if level >= self.max_level:
            return 0
        return self.threshold(level + 1) - total_xp

    def progress_to_next_level(self, total_xp: int) -> float:
        """Percent of the way from the current level's threshold to the next one."""
        level = self.level_for(total_xp)
        if level >= self.max_level:
            return 100.0
        floor = self.threshold(level)
        span = self.threshold(level + 1) - floor
        return round(100 * (total_xp - floor) / span, 2)
