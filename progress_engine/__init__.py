"""Progress, streak and gamification engine for learning platforms."""

__version__ = "0.1.0"
