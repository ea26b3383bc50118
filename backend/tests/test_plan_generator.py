"""Tests for the OpenAI plan generator client and its fallback."""
from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any, Dict, List

import openai
import pytest

from app.core.errors import ExternalGeneratorFailure
from app.services import plan_generator
from app.services.plan_normalizer import PlanParams


class _FakeCompletions:
    def __init__(self, content: str | None = None, exc: Exception | None = None):
        self.content = content
        self.exc = exc
        self.calls: List[Dict[str, Any]] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.exc:
            raise self.exc
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class _FakeClient:
    def __init__(self, content: str | None = None, exc: Exception | None = None):
        self.completions = _FakeCompletions(content=content, exc=exc)
        self.chat = SimpleNamespace(completions=self.completions)


PARAMS = PlanParams(type="exam", title="AWS Cloud Practitioner", total_days=3, daily_minutes=40)


def _days(count: int) -> List[Dict[str, Any]]:
    return [
        {
            "dayNumber": day,
            "title": f"AWS topic {day}",
            "purpose": f"Exam domain {day}.",
            "deliverables": [f"domain{day}.md", "20 practice questions answered"],
            "actionItems": ["Read the whitepaper (15 min)", "Answer 20 questions (15 min)", "Summarize (10 min)"],
            "resources": [{"type": "docs", "title": "AWS docs", "url": "https://docs.aws.amazon.com/"}],
            "skillProgression": f"Can explain domain {day}",
            "estimatedMinutes": 40,
        }
        for day in range(1, count + 1)
    ]


@pytest.fixture()
def captured_metrics(monkeypatch):
    calls: List[tuple] = []
    monkeypatch.setattr(plan_generator, "log_metric", lambda name, value, metadata=None: calls.append((name, value)))
    return calls


def test_generated_plan_is_used_when_valid(captured_metrics) -> None:
    client = _FakeClient(content=json.dumps({"days": _days(3)}))

    plan = plan_generator.generate_task_specs(PARAMS, client=client)

    assert plan.source == "generator"
    assert [spec.title for spec in plan.specs] == ["AWS topic 1", "AWS topic 2", "AWS topic 3"]
    assert plan.specs[0].resources[0].url == "https://docs.aws.amazon.com/"
    assert captured_metrics == []
    request = client.completions.calls[0]
    assert request["response_format"] == {"type": "json_object"}
    assert "AWS Cloud Practitioner" in request["messages"][1]["content"]


def test_fenced_array_content_is_parsed() -> None:
    content = "```json\n" + json.dumps(_days(2)) + "\n```"

    assert len(plan_generator.parse_plan_content(content)) == 2


@pytest.mark.parametrize("content", ["not json", "{}", '{"days": []}', "[]", '"just a string"'])
def test_unusable_content_raises(content: str) -> None:
    with pytest.raises(ExternalGeneratorFailure):
        plan_generator.parse_plan_content(content)


def test_transport_error_uses_fallback(captured_metrics) -> None:
    client = _FakeClient(exc=openai.OpenAIError("connection reset"))

    plan = plan_generator.generate_task_specs(PARAMS, client=client)

    assert plan.used_fallback is True
    assert len(plan.specs) == 3
    assert [spec.day_number for spec in plan.specs] == [1, 2, 3]
    assert all(len(spec.action_items) >= 3 for spec in plan.specs)
    assert captured_metrics == [("plan.fallback.used", 1)]


def test_garbage_content_uses_fallback(captured_metrics) -> None:
    plan = plan_generator.generate_task_specs(PARAMS, client=_FakeClient(content="Sure! Here is your plan:"))

    assert plan.used_fallback is True
    assert len(plan.specs) == 3


def test_missing_api_key_uses_fallback(monkeypatch, captured_metrics) -> None:
    monkeypatch.setattr(plan_generator, "_build_client", lambda: None)

    plan = plan_generator.generate_task_specs(PARAMS)

    assert plan.source == "fallback"
    assert len(plan.specs) == PARAMS.total_days


def test_partial_generator_output_is_completed_from_fallback(captured_metrics) -> None:
    client = _FakeClient(content=json.dumps({"days": _days(1)}))

    plan = plan_generator.generate_task_specs(PARAMS, client=client)

    assert plan.source == "generator"
    assert plan.specs[0].title == "AWS topic 1"
    assert len(plan.specs) == 3
    assert "Session" in plan.specs[1].title


def test_non_finite_numbers_in_generator_output_are_tolerated(captured_metrics) -> None:
    content = '{"days": [{"dayNumber": 1, "title": "IAM basics", "estimatedMinutes": Infinity, "resources": [{"type": ["video"], "url": "https://example.com/iam"}]}]}'
    client = _FakeClient(content=content)

    plan = plan_generator.generate_task_specs(PARAMS, client=client)

    assert plan.source == "generator"
    assert len(plan.specs) == 3
    assert plan.specs[0].title == "IAM basics"
    assert plan.specs[0].estimated_minutes == PARAMS.daily_minutes
    assert plan.specs[0].resources[0].type == "docs"
