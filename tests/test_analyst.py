"""Tests for the LLM operations analyst (Gemini client is faked)."""

from types import SimpleNamespace

import pytest

from insights import analyst as analyst_module
from insights.analyst import (
    EMPTY_MESSAGE,
    FAILURE_MESSAGE,
    UNAVAILABLE_MESSAGE,
    OccupancyAnalyst,
    bullet_lines
)
from models import OccupancyMetric

from conftest import make_reactor


def metric(serial, actual=10.0, proposed=20.0, block="Block A"):
    return OccupancyMetric(
        reactor_serial_no=serial,
        period="Mar 2025",
        available_hours=744,
        proposed_hours=0,
        actual_hours=0,
        downtime_hours=0,
        proposed_percent=proposed,
        actual_percent=actual,
        block_name=block
    )


class FakeModel:
    def __init__(self, name, reply="- Block A leads utilization", error=None):
        self.name = name
        self.reply = reply
        self.error = error
        self.prompts = []

    def generate_content(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return SimpleNamespace(
            text=self.reply,
            usage_metadata=SimpleNamespace(prompt_token_count=1000, candidates_token_count=200)
        )


@pytest.fixture
def fake_genai(monkeypatch):
    created = {}

    def make_model(name):
        created["model"] = FakeModel(name)
        return created["model"]

    monkeypatch.setattr(analyst_module.genai, "configure", lambda api_key: created.setdefault("key", api_key))
    monkeypatch.setattr(analyst_module.genai, "GenerativeModel", make_model)
    return created


class TestOccupancyAnalyst:

    def test_disabled_without_key(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        analyst = OccupancyAnalyst()
        assert not analyst.enabled
        assert analyst.generate_insights([metric("R-101")]) == UNAVAILABLE_MESSAGE

    def test_generates_from_summary(self, fake_genai):
        analyst = OccupancyAnalyst(api_key="test-key", model_name="gemini-test")
        text = analyst.generate_insights([metric("R-101")])

        model = fake_genai["model"]
        assert fake_genai["key"] == "test-key"
        assert model.name == "gemini-test"
        assert text == "- Block A leads utilization"
        assert "R-101 (Block A): Actual 10.0%, Proposed 20.0%" in model.prompts[0]
        assert analyst.total_cost > 0

    def test_model_name_from_environment(self, fake_genai, monkeypatch):
        monkeypatch.setenv("PLANNER_INSIGHTS_MODEL", "gemini-env")
        OccupancyAnalyst(api_key="test-key")
        assert fake_genai["model"].name == "gemini-env"

    def test_empty_reply(self, fake_genai):
        analyst = OccupancyAnalyst(api_key="test-key")
        fake_genai["model"].reply = "   "
        assert analyst.generate_insights([metric("R-101")]) == EMPTY_MESSAGE

    def test_failure_falls_back(self, fake_genai):
        analyst = OccupancyAnalyst(api_key="test-key")
        fake_genai["model"].error = RuntimeError("quota exceeded")
        assert analyst.generate_insights([metric("R-101")]) == FAILURE_MESSAGE


class TestSummary:

    def test_limits_to_ten_reactors(self):
        summary = OccupancyAnalyst.summarize([metric(f"R-{i:03d}") for i in range(15)])
        assert summary.count(";") == 9
        assert "R-010" not in summary

    def test_block_falls_back_to_reactor_lookup(self):
        summary = OccupancyAnalyst.summarize([metric("R-201", block="")], [make_reactor("R-201", block="Block C")])
        assert summary.startswith("R-201 (Block C)")

    def test_bullet_lines(self):
        assert bullet_lines("- one\n\n* two\n• three\nfour") == ["one", "two", "three", "four"]
