"""Core bot logic package.

This package provides:
- SlotScheduler: Cooldown and threshold scheduling over the slot grid
- SessionState: Mutable per-session state owned by a behavior
- SupportBehavior / FarmingBehavior: Per-tick behaviors
- BotLoop: Capture → behave tick loop
- LoopConfig: Configuration for the bot loop
- LoopState: Loop state enumeration
- BotMetrics: Snapshot of collected metrics
- MetricsCollector: Metrics collection for monitoring
- RecoverableError: Error that allows the loop to continue
- FatalError: Error that requires stopping the loop
"""

from hudbot.core.behavior import Behavior, FarmingBehavior, SupportBehavior
from hudbot.core.loop import BotLoop, FatalError, LoopConfig, LoopState, RecoverableError
from hudbot.core.metrics import BotMetrics, MetricsCollector
from hudbot.core.scheduler import SlotScheduler
from hudbot.core.session import AvoidanceState, SessionState

__all__ = [
    "AvoidanceState",
    "Behavior",
    "BotLoop",
    "BotMetrics",
    "FarmingBehavior",
    "FatalError",
    "LoopConfig",
    "LoopState",
    "MetricsCollector",
    "RecoverableError",
    "SessionState",
    "SlotScheduler",
    "SupportBehavior",
]
