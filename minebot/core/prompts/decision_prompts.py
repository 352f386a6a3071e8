"""Decision prompt templates for the agent.

This module contains the prompt templates used by the DecisionEngine.
The reply format is line-oriented (ACTION:/REASONING:/...) rather than
JSON so that a partially garbled reply still yields a usable command.

Prompt versions are tracked for debugging.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from minebot.models.world import DecisionSnapshot

PROMPT_VERSION = "2.0.0"

SYSTEM_PROMPT = """You are an AI controlling a survival block-building game bot.
Your long-term goal is to beat the game by defeating the Ender Dragon.
You choose exactly ONE concrete action per turn and never invent commands."""

RULESET = """AVAILABLE ACTIONS:
1. mine <block> - Mine a nearby block (wood, stone, coal, iron, diamond, ...)
2. craft <item> - Craft an item (planks, pickaxe, sword, armor, ...)
3. move <north|south|east|west> <distance> - Walk in a straight line
4. jump <north|south|east|west> <distance> - Jump forward over obstacles
5. explore - Wander to search for resources or structures
6. attack <target> - Attack the nearest hostile mob or a named target
7. build <structure> - Place blocks (shelter, pillar, portal, ...)
8. eat <food> - Consume food to restore hunger
9. sleep - Use a bed (night only)
10. chat <message> - Say something in chat
11. wait <seconds> - Stay still and observe

SURVIVAL PROGRESSION:
Early: gather wood -> craft tools -> mine stone -> find coal -> build shelter
Mid: mine iron -> upgrade tools -> explore caves -> find diamonds -> craft armor
Late: craft diamond gear -> locate stronghold -> prepare for the Nether
Endgame: gather blaze rods -> craft ender eyes -> find the End portal -> defeat the dragon

RULES:
- If health or hunger is low, eat, retreat or wait before anything risky.
- At night without a shelter, build one or sleep.
- Do not repeat an action that just failed more than twice in a row."""

DECISION_PROMPT_TEMPLATE = """{system_prompt}

CURRENT STATE:
- Position: {position}
- Health: {health}/20, Hunger: {hunger}/20
- Inventory: {inventory_count} items
- Game Phase: {game_phase}
- Time of day: {time_of_day}
- Current Goal: {current_goal}
- Recent Actions: {recent_actions}
{previous_section}
{ruleset}

Respond in exactly this format:
REASONING: <one or two sentences>
GOAL: <short current goal>
PRIORITY: <high|medium|low>
TIME: <estimated seconds>
ACTION: <one command from the list above>"""


@dataclass
class DecisionPrompts:
    """Manager for decision prompt templates.

    Attributes:
        version: Prompt version string.
        system_prompt: Role description placed at the top of each prompt.
        template: Decision prompt template.
        ruleset: Fixed action list and phase-staged strategy.
    """

    version: str = PROMPT_VERSION
    system_prompt: str = SYSTEM_PROMPT
    template: str = DECISION_PROMPT_TEMPLATE
    ruleset: str = RULESET

    def build_decision_prompt(
        self,
        snapshot: DecisionSnapshot,
        recent_limit: int = 5,
        previous_action: str | None = None,
    ) -> str:
        """Build the prompt for one decision cycle.

        The output depends only on its arguments.

        Args:
            snapshot: Current state projection.
            recent_limit: How many recent actions to include.
            previous_action: Last action the reasoning service proposed.

        Returns:
            Formatted prompt string.
        """
        recent = snapshot.recent_actions[-recent_limit:] if recent_limit > 0 else []
        previous_section = (
            f"- Your previous choice: {previous_action}\n" if previous_action else ""
        )
        return self.template.format(
            system_prompt=self.system_prompt,
            position=snapshot.position,
            health=snapshot.health,
            hunger=snapshot.hunger,
            inventory_count=snapshot.inventory_count,
            game_phase=snapshot.game_phase.value,
            time_of_day="day" if snapshot.is_day else "night",
            current_goal=snapshot.current_goal or "None",
            recent_actions="; ".join(recent) if recent else "None",
            previous_section=previous_section,
            ruleset=self.ruleset,
        )
