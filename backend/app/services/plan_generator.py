"""Plan content generation via OpenAI with a deterministic fallback."""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import openai

from app.core.config import settings
from app.core.errors import ExternalGeneratorFailure
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.plan_normalizer import PlanParams, TaskSpec, calculate_phases, fallback_plan, normalize_plan

logger = logging.getLogger(__name__)

PLAN_SOURCE_GENERATOR = "generator"
PLAN_SOURCE_FALLBACK = "fallback"

_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)

SYSTEM_PROMPT = """You are a curriculum designer who writes concrete daily plans.
Rules:
- Exactly one specific topic per day; later days build on earlier ones.
- Every action item names a concrete activity and ends with a time tag like "(15 min)".
- The time tags of a day add up to the daily budget.
- At least 3 action items and at least 2 deliverables per day.
- Deliverables are artifacts the learner can point at (files, notes, solved exercises).
- No motivational language, no praise, no vague phrases such as "core concepts" or "build skills".
- Resources must be real, well-known pages with full https URLs.
Respond with a JSON object: {"days": [ ... ]}."""


@dataclass
class GeneratedPlan:
    specs: List[TaskSpec]
    source: str

    @property
    def used_fallback(self) -> bool:
        return self.source == PLAN_SOURCE_FALLBACK


def _build_client():
    api_key = settings.openai_api_key
    return openai.OpenAI(api_key=api_key) if api_key else None


def _build_user_prompt(params: PlanParams) -> str:
    phases = calculate_phases(params.total_days)
    phase_lines = "\n".join(f"- {phase.name}: days {phase.start_day}-{phase.end_day} ({phase.focus})" for phase in phases)
    description = params.description or "None provided."
    return (
        f"Goal type: {params.type}\n"
        f"Goal: {params.title}\n"
        f"Details: {description}\n"
        f"Total days: {params.total_days}\n"
        f"Daily time budget: {params.daily_minutes} minutes\n\n"
        f"Phases:\n{phase_lines}\n\n"
        "Return one entry per day with these keys: dayNumber, title, purpose, deliverables (list of strings), "
        "actionItems (list of strings), resources (list of {type, title, url, creator} where type is one of "
        "docs, video, article, tutorial, book), skillProgression, estimatedMinutes."
    )


def parse_plan_content(content: str) -> List[Dict[str, Any]]:
    """Extract the list of day descriptors from a completion body."""
    cleaned = _CODE_FENCE_RE.sub("", (content or "").strip()).strip()
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ExternalGeneratorFailure("Plan generator returned non-JSON content") from exc

    if isinstance(payload, dict):
        payload = payload.get("days") or payload.get("plan") or payload.get("tasks")
    if not isinstance(payload, list) or not payload:
        raise ExternalGeneratorFailure("Plan generator returned no day descriptors")
    return payload


def request_plan_descriptors(params: PlanParams, client=None, request_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """Ask the generator for raw day descriptors. Raises ExternalGeneratorFailure."""
    client = client or _build_client()
    if client is None:
        raise ExternalGeneratorFailure("OPENAI_API_KEY missing")

    metadata = {
        "goal_type": params.type,
        "total_days": params.total_days,
        "daily_minutes": params.daily_minutes,
        "model": settings.openai_model,
    }
    try:
        with trace("plan.generate", metadata=metadata, request_id=request_id):
            completion = client.chat.completions.create(
                model=settings.openai_model,
                response_format={"type": "json_object"},
                temperature=settings.plan_generator_temperature,
                max_tokens=settings.plan_generator_max_tokens,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": _build_user_prompt(params)},
                ],
            )
        content = completion.choices[0].message.content
    except openai.OpenAIError as exc:
        raise ExternalGeneratorFailure(f"Plan generator request failed: {exc}") from exc
    except (AttributeError, IndexError) as exc:
        raise ExternalGeneratorFailure("Plan generator returned an unexpected completion shape") from exc

    return parse_plan_content(content or "")


def generate_task_specs(params: PlanParams, client=None, request_id: Optional[str] = None) -> GeneratedPlan:
    """Return exactly ``params.total_days`` normalized specs; never raises for generator trouble."""
    try:
        raw_days = request_plan_descriptors(params, client=client, request_id=request_id)
        source = PLAN_SOURCE_GENERATOR
    except ExternalGeneratorFailure as exc:
        logger.warning("Plan generator unavailable, using fallback plan: %s", exc.message)
        log_metric("plan.fallback.used", 1, metadata={"goal_type": params.type, "reason": exc.message})
        raw_days = fallback_plan(params)
        source = PLAN_SOURCE_FALLBACK

    return GeneratedPlan(specs=normalize_plan(params, raw_days), source=source)
