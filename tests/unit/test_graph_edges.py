"""
Unit tests for routing graph edges and reply adequacy.
"""

import pytest

from cardiac_assistant.graph.edges import (
    route_after_cascade,
    route_after_classify,
    route_after_primary,
)
from cardiac_assistant.graph.nodes import is_adequate
from cardiac_assistant.models.domain import AgentResponse


class TestRouteAfterClassify:
    """Tests for choosing between direct routing and the cascade."""

    def test_specialist_selected(self):
        state = {"specialist": "cardiac_exercise_agent"}

        assert route_after_classify(state) == "primary"

    @pytest.mark.parametrize("specialist", [None, ""])
    def test_no_specialist(self, specialist):
        assert route_after_classify({"specialist": specialist}) == "cascade"


class TestRouteAfterPrimary:
    """Tests for leaving the primary attempt."""

    def test_success_ends(self):
        """Should accept any successful primary reply, even a short one."""
        state = {"response": AgentResponse(success=True, message="Yes.")}

        assert route_after_primary(state) == "end"

    def test_failure_cascades(self):
        state = {"response": AgentResponse(success=False, message="x", error="timeout")}

        assert route_after_primary(state) == "cascade"

    def test_missing_response_cascades(self):
        assert route_after_primary({}) == "cascade"


class TestRouteAfterCascade:
    """Tests for looping through specialists."""

    def test_accepted_reply_ends(self):
        state = {"agent_used": "cardiac_diet_agent", "cascade_exhausted": True}

        assert route_after_cascade(state) == "end"

    def test_specialists_remain(self):
        assert route_after_cascade({"cascade_exhausted": False}) == "cascade"

    def test_all_tried(self):
        assert route_after_cascade({"cascade_exhausted": True}) == "exhausted"


class TestIsAdequate:
    """Tests for the cascade acceptance rule."""

    def test_long_success(self):
        assert is_adequate(AgentResponse(success=True, message="x" * 51), 50) is True

    def test_exactly_min_length_is_inadequate(self):
        """Should require strictly more than the minimum length."""
        assert is_adequate(AgentResponse(success=True, message="x" * 50), 50) is False

    def test_short_success(self):
        assert is_adequate(AgentResponse(success=True, message="OK"), 50) is False

    def test_long_failure(self):
        response = AgentResponse(success=False, message="x" * 200, error="unknown")

        assert is_adequate(response, 50) is False

    def test_none(self):
        assert is_adequate(None, 50) is False
