# tests/unit/models/test_action_models.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Unit tests for action steps and the conversation log."""

import pytest

from blockpilot.models import (
    MAX_LOG_ENTRIES,
    ConversationLog,
    FollowStep,
    GotoBlockStep,
    InvalidStep,
    TeleportRequestStep,
    WaitStep,
    clamp_wait_seconds,
    parse_step,
    parse_steps,
)


class TestClampWaitSeconds:
    """Tests for clamping wait durations."""

    @pytest.mark.parametrize("value,expected", [
        (5, 5),
        (1, 1),
        (30, 30),
        ("7", 7),
        (2.9, 2),
    ])
    def test_in_range(self, value, expected):
        """Test values inside [1, 30] pass through as integers."""
        assert clamp_wait_seconds(value) == expected

    @pytest.mark.parametrize("value", [0, -3, 31, 999, "abc", None, True, [5]])
    def test_out_of_range_or_invalid_defaults_to_one(self, value):
        """Test anything outside the range or non-numeric becomes 1."""
        assert clamp_wait_seconds(value) == 1

    def test_wait_step_clamps_on_construction(self):
        """Test WaitStep applies the clamp when validated."""
        assert WaitStep(seconds=45).seconds == 1
        assert WaitStep(seconds="12").seconds == 12


class TestParseStep:
    """Tests for validating raw step dicts."""

    def test_follow(self):
        step = parse_step({"action": "follow", "player": "Alice"})
        assert isinstance(step, FollowStep)
        assert step.player == "Alice"

    def test_goto(self):
        step = parse_step({"action": "goto", "x": 10, "y": 64, "z": -5})
        assert isinstance(step, GotoBlockStep)
        assert (step.x, step.y, step.z) == (10, 64, -5)

    def test_aliases_map_to_canonical_action(self):
        """Test alternate action spellings are accepted."""
        assert isinstance(parse_step({"action": "teleport", "player": "Bob"}), TeleportRequestStep)
        assert isinstance(parse_step({"action": "TP", "player": "Bob"}), TeleportRequestStep)
        assert isinstance(parse_step({"action": "goto_block", "x": 1, "y": 2, "z": 3}), GotoBlockStep)

    def test_goto_rejects_non_integer_coordinates(self):
        """Test coordinates must be integers, not strings or floats."""
        assert isinstance(parse_step({"action": "goto", "x": "10", "y": 64, "z": 10}), InvalidStep)
        assert isinstance(parse_step({"action": "goto", "x": 10.5, "y": 64, "z": 10}), InvalidStep)

    def test_goto_missing_coordinate_is_invalid(self):
        step = parse_step({"action": "goto", "x": 10, "y": 64})
        assert isinstance(step, InvalidStep)
        assert step.action == "goto"

    def test_unknown_action_is_invalid(self):
        """Test unknown actions keep their name for the reply."""
        step = parse_step({"action": "dance"})
        assert isinstance(step, InvalidStep)
        assert step.action == "dance"
        assert step.raw == {"action": "dance"}

    def test_non_dict_is_invalid(self):
        step = parse_step("follow me")
        assert isinstance(step, InvalidStep)
        assert step.action == "unknown"

    def test_wait_with_bad_seconds_is_clamped_not_rejected(self):
        step = parse_step({"action": "wait", "seconds": "soon"})
        assert isinstance(step, WaitStep)
        assert step.seconds == 1

    def test_parse_steps_preserves_order(self):
        """Test a list of steps keeps its order, invalid ones included."""
        plan = parse_steps([
            {"action": "wait", "seconds": 2},
            {"action": "fly"},
            {"action": "follow", "player": "Alice"},
        ])
        assert [type(step) for step in plan] == [WaitStep, InvalidStep, FollowStep]


class TestConversationLog:
    """Tests for the bounded conversation log."""

    def test_keeps_most_recent_entries(self):
        """Test the log never exceeds its limit and drops the oldest entries."""
        log = ConversationLog()
        for i in range(MAX_LOG_ENTRIES + 10):
            log.append("user", f"msg {i}")

        assert len(log) == MAX_LOG_ENTRIES
        assert log.to_list()[0]["content"] == "msg 10"
        assert log.recent(1)[0].content == f"msg {MAX_LOG_ENTRIES + 9}"

    def test_recent_with_zero(self):
        log = ConversationLog()
        log.append("user", "hi")
        assert log.recent(0) == []

    def test_from_list_skips_malformed_entries(self):
        log = ConversationLog.from_list([
            {"role": "user", "content": "hello"},
            {"role": "narrator", "content": "bad role"},
            "not a dict",
            {"role": "assistant", "content": "hi"},
        ])
        assert [entry.content for entry in log] == ["hello", "hi"]

    def test_from_list_with_non_list(self):
        assert len(ConversationLog.from_list({"role": "user"})) == 0
        assert len(ConversationLog.from_list(None)) == 0
