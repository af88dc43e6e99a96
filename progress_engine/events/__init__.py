from progress_engine.events.dispatcher import DispatchOutcome, SideEffectDispatcher
from progress_engine.events.types import ActivityOccurred, Event, XPAwardRequested


__all__ = [
    "ActivityOccurred",
    "DispatchOutcome",
    "Event",
    "SideEffectDispatcher",
    "XPAwardRequested",
]
