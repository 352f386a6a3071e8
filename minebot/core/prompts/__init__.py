"""Prompt templates for the decision engine."""

from minebot.core.prompts.decision_prompts import (
    DECISION_PROMPT_TEMPLATE,
    PROMPT_VERSION,
    RULESET,
    SYSTEM_PROMPT,
    DecisionPrompts,
)

__all__ = [
    "DECISION_PROMPT_TEMPLATE",
    "PROMPT_VERSION",
    "RULESET",
    "SYSTEM_PROMPT",
    "DecisionPrompts",
]
