"""Application module for Net Bar.

Contains the engine's coordination components:
- EventBus: Engine-to-display event communication
- SamplingScheduler: Periodic sampling and the single update path
- PeriodicTimer: Interruptible periodic driver
- compose_summary: Menu-bar title text
"""

from app.dependencies import EngineDependencies, create_dependencies
from app.events import Event, EventBus, EventType
from app.scheduler import SamplingScheduler, SchedulerState
from app.summary import compose_summary
from app.timer import PeriodicTimer

__all__ = [
    "EngineDependencies",
    "Event",
    "EventBus",
    "EventType",
    "PeriodicTimer",
    "SamplingScheduler",
    "SchedulerState",
    "compose_summary",
    "create_dependencies",
]
