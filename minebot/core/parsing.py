"""Parsing of free-text reasoning replies into plans.

The ladder is ordered and the first rung that matches wins:

1. An explicit ``ACTION: <command>`` marker. The command is the rest of
   that line; text before the marker is the reasoning.
2. The first known command verb (in ``KNOWN_VERBS`` order) found anywhere
   in the text, with up to two argument words after it.
3. A default ``explore`` plan noting that parsing failed.

parse_plan() never raises.
"""

from __future__ import annotations

import logging
import re

from minebot.models.commands import KNOWN_VERBS
from minebot.models.plans import Plan, PlanSource, Priority

logger = logging.getLogger(__name__)

DEFAULT_ACTION = "explore"
MAX_SCANNED_ARGUMENTS = 2

_ACTION_MARKER = re.compile(r"\bACTION\s*:", re.IGNORECASE)
_REASONING_LINE = re.compile(r"^\W*REASONING\s*:\W*(?P<value>.+)$", re.IGNORECASE | re.MULTILINE)
_GOAL_LINE = re.compile(r"^\W*GOAL\s*:\W*(?P<value>.+)$", re.IGNORECASE | re.MULTILINE)
_PRIORITY_LINE = re.compile(r"\bPRIORITY\s*:\W*(?P<value>high|medium|low)\b", re.IGNORECASE)
_TIME_LINE = re.compile(r"\bTIME\s*:[^\d\n]*(?P<value>\d+(?:\.\d+)?)", re.IGNORECASE)
_VERB_PATTERNS = tuple(
    (verb, re.compile(rf"\b{verb}\b(?P<args>(?:[ \t]+[A-Za-z0-9_-]+){{0,4}})", re.IGNORECASE))
    for verb in KNOWN_VERBS
)
_STOPWORDS = frozenset({"a", "an", "the", "to", "some", "for", "and", "then", "now", "more", "it"})
_WRAPPING = " \t*`\"'_.,;:!"


def _clean_command(raw: str) -> str:
    return " ".join(raw.strip().strip(_WRAPPING).split())


def _extract_marker(text: str) -> tuple[str, str] | None:
    """Return (command, text before marker) for the first non-empty marker."""
    for match in _ACTION_MARKER.finditer(text):
        rest = text[match.end():]
        line = rest.splitlines()[0] if rest else ""
        command = _clean_command(line)
        if command:
            return command, text[: match.start()]
    return None


def _scan_for_verb(text: str) -> str | None:
    """Find the first known verb by list order and keep its argument words."""
    for verb, pattern in _VERB_PATTERNS:
        match = pattern.search(text)
        if match is None:
            continue
        words = [w for w in match.group("args").split() if w.lower() not in _STOPWORDS]
        return " ".join([verb, *words[:MAX_SCANNED_ARGUMENTS]]).lower()
    return None


def _reasoning_from(preamble: str) -> str:
    line = _REASONING_LINE.search(preamble)
    if line:
        return line.group("value").strip()
    return " ".join(preamble.split())


def extract_goal(text: str) -> str | None:
    """Return the value of a ``GOAL:`` line, if any."""
    match = _GOAL_LINE.search(text or "")
    if match is None:
        return None
    goal = match.group("value").strip().strip(_WRAPPING)
    return goal or None


def parse_plan(text: str | None) -> Plan:
    """Turn a reasoning reply into a Plan.

    Args:
        text: Raw reply; may be empty or malformed.

    Returns:
        A Plan. Always valid, never raises.
    """
    text = text or ""

    priority_match = _PRIORITY_LINE.search(text)
    priority = Priority(priority_match.group("value").lower()) if priority_match else None
    time_match = _TIME_LINE.search(text)
    duration = float(time_match.group("value")) if time_match else None

    marker = _extract_marker(text)
    if marker is not None:
        command, preamble = marker
        return Plan(
            action=command,
            reasoning=_reasoning_from(preamble) or "No reasoning provided",
            priority=priority,
            estimated_duration=duration,
            source=PlanSource.REASONING,
        )

    scanned = _scan_for_verb(text)
    if scanned is not None:
        logger.debug(f"No ACTION marker; scanned command {scanned!r}")
        return Plan(
            action=scanned,
            reasoning=_reasoning_from(text) or "Parsed from free text",
            priority=priority,
            estimated_duration=duration,
            source=PlanSource.REASONING,
        )

    logger.warning("Could not parse a command from the reasoning reply; exploring")
    return Plan(
        action=DEFAULT_ACTION,
        reasoning="Parsing failed: no recognizable command in reply",
        priority=Priority.LOW,
        estimated_duration=duration,
        source=PlanSource.REASONING,
    )
