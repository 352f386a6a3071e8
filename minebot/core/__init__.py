"""Core agent logic package.

This package provides:
- StateStore: Owner of the world snapshot and action history
- DecisionEngine: Prompt, reasoning call, parsing and circuit breaker
- DecisionConfig: Configuration for the decision engine
- DecisionPrompts: Prompt templates for decision making
- parse_plan: Free-text reply to Plan with graceful degradation
- AgentLoop: Main decide-execute loop
- LoopConfig: Configuration for the agent loop
- LoopState: Loop state enumeration
- CycleReport: Outcome of one loop cycle
- bind_session_events: Session events to StateStore updates
- AgentMetrics: Snapshot of collected metrics
- MetricsCollector: Metrics collection for monitoring
"""

from minebot.core.decision import DecisionConfig, DecisionEngine
from minebot.core.events import bind_session_events
from minebot.core.loop import AgentLoop, CycleReport, LoopConfig, LoopState
from minebot.core.metrics import AgentMetrics, MetricsCollector
from minebot.core.parsing import extract_goal, parse_plan
from minebot.core.prompts import DecisionPrompts
from minebot.core.state import StateStore, determine_game_phase

__all__ = [
    "AgentLoop",
    "AgentMetrics",
    "CycleReport",
    "DecisionConfig",
    "DecisionEngine",
    "DecisionPrompts",
    "LoopConfig",
    "LoopState",
    "MetricsCollector",
    "StateStore",
    "bind_session_events",
    "determine_game_phase",
    "extract_goal",
    "parse_plan",
]
