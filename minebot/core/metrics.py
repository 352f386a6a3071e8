"""Metrics collection for the agent loop.

This module provides metrics tracking for:
- Cycle timing and rate
- Decision timing, broken down by plan source
- Action success/failure rates
- Error tracking
- Uptime

Example:
    >>> from minebot.core.metrics import MetricsCollector
    >>> from minebot.models import PlanSource
    >>>
    >>> metrics = MetricsCollector()
    >>> metrics.start()
    >>> metrics.record_decision(120.0, PlanSource.REASONING)
    >>> metrics.record_action(success=True, duration_ms=900.0)
    >>>
    >>> stats = metrics.get_metrics()
    >>> print(f"Success rate: {stats.action_success_rate:.0%}")
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, Field

from minebot.models.plans import PlanSource

logger = logging.getLogger(__name__)

RATE_WINDOW = 100


class AgentMetrics(BaseModel):
    """Immutable snapshot of agent metrics.

    Attributes:
        cycle_count: Completed loop cycles.
        cycle_rate_hz: Recent cycle rate.
        avg_cycle_time_ms: Average cycle duration.
        avg_decision_time_ms: Average decision duration.
        avg_action_time_ms: Average action duration.
        decisions_total: Plans produced.
        decisions_by_source: Plan count per PlanSource value.
        actions_total: Actions attempted.
        actions_successful: Successful actions.
        actions_failed: Failed actions.
        actions_per_minute: Action rate since start.
        errors_total: Errors encountered.
        errors_recovered: Errors the loop continued past.
        errors_by_type: Count of errors by exception name.
        started_at: When collection started.
        uptime_seconds: Seconds since start.
    """

    cycle_count: int = Field(default=0, ge=0)
    cycle_rate_hz: float = Field(default=0.0, ge=0.0)
    avg_cycle_time_ms: float = Field(default=0.0, ge=0.0)
    avg_decision_time_ms: float = Field(default=0.0, ge=0.0)
    avg_action_time_ms: float = Field(default=0.0, ge=0.0)

    decisions_total: int = Field(default=0, ge=0)
    decisions_by_source: dict[str, int] = Field(default_factory=dict)

    actions_total: int = Field(default=0, ge=0)
    actions_successful: int = Field(default=0, ge=0)
    actions_failed: int = Field(default=0, ge=0)
    actions_per_minute: float = Field(default=0.0, ge=0.0)

    errors_total: int = Field(default=0, ge=0)
    errors_recovered: int = Field(default=0, ge=0)
    errors_by_type: dict[str, int] = Field(default_factory=dict)

    started_at: datetime | None = Field(default=None)
    uptime_seconds: float = Field(default=0.0, ge=0.0)

    model_config = {"frozen": True}

    @property
    def action_success_rate(self) -> float:
        """Action success rate (0.0 to 1.0)."""
        if self.actions_total == 0:
            return 0.0
        return self.actions_successful / self.actions_total

    @property
    def fallback_rate(self) -> float:
        """Share of plans that did not come from the reasoning service."""
        if self.decisions_total == 0:
            return 0.0
        reasoned = self.decisions_by_source.get(PlanSource.REASONING.value, 0)
        return 1.0 - reasoned / self.decisions_total


@dataclass
class _TimingStats:
    """Internal helper for tracking timing statistics."""

    total_ms: float = 0.0
    count: int = 0

    def record(self, duration_ms: float) -> None:
        self.total_ms += duration_ms
        self.count += 1

    @property
    def average_ms(self) -> float:
        if self.count == 0:
            return 0.0
        return self.total_ms / self.count


class MetricsCollector:
    """Collects metrics during agent loop execution.

    Thread-safe: the dashboard may read from a different thread than the
    one running the loop.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._reset_unlocked()
        logger.debug("MetricsCollector initialized")

    def _reset_unlocked(self) -> None:
        self._cycle_timing = _TimingStats()
        self._decision_timing = _TimingStats()
        self._action_timing = _TimingStats()
        self._decisions_by_source: dict[str, int] = {}
        self._actions_successful = 0
        self._actions_failed = 0
        self._errors_recovered = 0
        self._errors_fatal = 0
        self._errors_by_type: dict[str, int] = {}
        self._started_at: datetime | None = None
        self._cycle_times: list[float] = []

    def start(self) -> None:
        """Mark the start of metrics collection."""
        with self._lock:
            self._started_at = datetime.now()

    def reset(self) -> None:
        """Reset all metrics to initial state."""
        with self._lock:
            self._reset_unlocked()
            logger.debug("Metrics reset")

    def record_cycle(self, duration_ms: float) -> None:
        """Record a completed loop cycle."""
        with self._lock:
            self._cycle_timing.record(duration_ms)
            self._cycle_times.append(time.time())
            if len(self._cycle_times) > RATE_WINDOW:
                self._cycle_times = self._cycle_times[-RATE_WINDOW:]

    def record_decision(self, duration_ms: float, source: PlanSource) -> None:
        """Record a produced plan.

        Args:
            duration_ms: Time spent deciding.
            source: Where the plan came from.
        """
        with self._lock:
            self._decision_timing.record(duration_ms)
            key = PlanSource(source).value
            self._decisions_by_source[key] = self._decisions_by_source.get(key, 0) + 1

    def record_action(self, success: bool, duration_ms: float) -> None:
        """Record an action execution."""
        with self._lock:
            self._action_timing.record(duration_ms)
            if success:
                self._actions_successful += 1
            else:
                self._actions_failed += 1

    def record_error(self, error_type: str, recovered: bool) -> None:
        """Record an error.

        Args:
            error_type: Exception class name.
            recovered: Whether the loop continued after it.
        """
        with self._lock:
            if recovered:
                self._errors_recovered += 1
            else:
                self._errors_fatal += 1
            self._errors_by_type[error_type] = self._errors_by_type.get(error_type, 0) + 1

    def _cycle_rate(self) -> float:
        if len(self._cycle_times) < 2:
            return 0.0
        duration = self._cycle_times[-1] - self._cycle_times[0]
        if duration <= 0:
            return 0.0
        return (len(self._cycle_times) - 1) / duration

    def get_metrics(self) -> AgentMetrics:
        """Get a snapshot of all current metrics."""
        with self._lock:
            uptime = 0.0
            if self._started_at is not None:
                uptime = (datetime.now() - self._started_at).total_seconds()

            actions_total = self._actions_successful + self._actions_failed
            per_minute = (actions_total / uptime) * 60 if uptime > 0 else 0.0

            return AgentMetrics(
                cycle_count=self._cycle_timing.count,
                cycle_rate_hz=self._cycle_rate(),
                avg_cycle_time_ms=self._cycle_timing.average_ms,
                avg_decision_time_ms=self._decision_timing.average_ms,
                avg_action_time_ms=self._action_timing.average_ms,
                decisions_total=self._decision_timing.count,
                decisions_by_source=dict(self._decisions_by_source),
                actions_total=actions_total,
                actions_successful=self._actions_successful,
                actions_failed=self._actions_failed,
                actions_per_minute=per_minute,
                errors_total=self._errors_recovered + self._errors_fatal,
                errors_recovered=self._errors_recovered,
                errors_by_type=dict(self._errors_by_type),
                started_at=self._started_at,
                uptime_seconds=uptime,
            )
