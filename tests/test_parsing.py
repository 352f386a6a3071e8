"""Tests for reasoning reply parsing."""

from __future__ import annotations

import pytest

from minebot.core.parsing import DEFAULT_ACTION, extract_goal, parse_plan
from minebot.models import PlanSource, Priority


class TestActionMarker:
    """The explicit ACTION marker takes precedence."""

    def test_structured_reply(self) -> None:
        reply = (
            "REASONING: It is early and I have no tools.\n"
            "GOAL: get wooden tools\n"
            "PRIORITY: high\n"
            "TIME: 20\n"
            "ACTION: mine wood\n"
        )

        plan = parse_plan(reply)

        assert plan.action == "mine wood"
        assert plan.reasoning == "It is early and I have no tools."
        assert plan.priority == Priority.HIGH
        assert plan.estimated_duration == 20.0
        assert plan.source == PlanSource.REASONING

    def test_marker_beats_earlier_verb(self) -> None:
        plan = parse_plan("mine wood now... ACTION: explore")

        assert plan.action == "explore"
        assert plan.reasoning == "mine wood now..."

    def test_marker_is_case_insensitive_and_stripped(self) -> None:
        plan = parse_plan("action:  **move north 5**  ")

        assert plan.action == "move north 5"

    def test_empty_marker_falls_through(self) -> None:
        plan = parse_plan("ACTION:\nI will jump east")

        assert plan.action == "jump east"

    def test_marker_takes_only_its_line(self) -> None:
        plan = parse_plan("ACTION: craft wooden_pickaxe\nThen I will mine stone.")

        assert plan.action == "craft wooden_pickaxe"

    def test_missing_reasoning_gets_placeholder(self) -> None:
        assert parse_plan("ACTION: wait").reasoning == "No reasoning provided"


class TestVerbScan:
    """Without a marker the first known verb is used."""

    def test_verb_with_arguments(self) -> None:
        plan = parse_plan("I think I should move north 10 blocks to find trees.")

        assert plan.action == "move north 10"

    def test_stopwords_are_skipped(self) -> None:
        assert parse_plan("Let's mine the iron over there").action == "mine iron over"

    def test_known_verb_order_breaks_ties(self) -> None:
        # "eat" appears first in the text but "mine" comes first in the verb list.
        plan = parse_plan("eat something, then mine coal")

        assert plan.action == "mine coal"

    def test_verbs_match_whole_words_only(self) -> None:
        plan = parse_plan("I determine that the wheat looks great")

        assert plan.action == DEFAULT_ACTION


class TestDefault:
    """Unparseable replies degrade to exploring."""

    @pytest.mark.parametrize("reply", ["", None, "¯\\_(ツ)_/¯", "Nothing to report."])
    def test_unparseable_reply(self, reply: str | None) -> None:
        plan = parse_plan(reply)

        assert plan.action == "explore"
        assert "Parsing failed" in plan.reasoning
        assert plan.priority == Priority.LOW

    def test_time_value_must_be_on_time_line(self) -> None:
        plan = parse_plan("TIME: unknown\nACTION: move south 3")

        assert plan.estimated_duration is None


class TestExtractGoal:
    """Tests for GOAL line extraction."""

    def test_goal_line(self) -> None:
        assert extract_goal("REASONING: x\nGOAL: find iron\nACTION: explore") == "find iron"

    def test_no_goal(self) -> None:
        assert extract_goal("ACTION: explore") is None
        assert extract_goal("") is None
