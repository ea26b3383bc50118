"""Turn raw generator day descriptors into strict per-day task specs.

The generator is an external, fallible collaborator: its output may use legacy
field names, omit fields, carry motivational filler or broken resource links,
or cover the wrong number of days. Everything here is deterministic so the
same input always yields the same plan, and the fallback plan runs through
the same rules as generated content.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

MIN_ACTION_ITEMS = 3
MIN_DELIVERABLES = 2
RESOURCE_TYPES = {"docs", "video", "article", "tutorial", "book"}
# Upper bound for one day's estimate.
MAX_ESTIMATED_MINUTES = 24 * 60

MOTIVATIONAL_PHRASES = (
    r"great job",
    r"well done",
    r"keep it up",
    r"keep going",
    r"you['’]re doing great",
    r"you['’]re making progress",
    r"stay consistent",
    r"trust the process",
    r"believe in yourself",
    r"you['’]ve got this",
    r"feel confident",
    r"build confidence",
    r"celebrate your",
    r"be proud",
    r"appreciate your",
    r"remember why you started",
    r"you can do this",
    r"don['’]t give up",
    r"stay motivated",
    r"congratulations",
    r"excellent work",
    r"amazing progress",
    r"proud of",
    r"you['’]re on your way",
    r"believe in your",
    r"trust yourself",
    r"you['’]re ready",
    r"take a moment to",
    r"reflect on your",
    r"embrace the",
    r"enjoy the journey",
)

ABSTRACT_PHRASES = (
    r"strengthen understanding",
    r"build skills?",
    r"develop knowledge",
    r"gain familiarity",
    r"learn the basics",
    r"core concepts?",
    r"fundamental concepts?",
    r"build foundation",
    r"improve ability",
    r"enhance skills?",
    r"deepen understanding",
    r"broaden knowledge",
    r"expand capabilities",
    r"master the basics",
)

_MOTIVATIONAL_RE = [re.compile(rf"\b{phrase}\b", re.IGNORECASE) for phrase in MOTIVATIONAL_PHRASES]
_ABSTRACT_RE = [re.compile(rf"\b{phrase}\b", re.IGNORECASE) for phrase in ABSTRACT_PHRASES]
_TRAILING_EXCLAMATION_RE = re.compile(r"\s*!+\s*$")
_TIME_TAG_RE = re.compile(r"\(\s*\d+\s*min(?:ute)?s?\s*\)\s*$", re.IGNORECASE)

ACTION_ITEM_FILLERS = (
    "Read the reference material for {title}",
    "Complete 3 practice exercises on {title}",
    "Write notes.md listing the key points of {title}",
    "Review your notes and exercises for {title}",
)

DELIVERABLE_FILLERS = (
    "Notes document covering {title}",
    "Completed practice exercises for {title}",
    "Practice project files for {title}",
)

_HTTP_URL = TypeAdapter(HttpUrl)


@dataclass(frozen=True)
class PlanParams:
    """Goal parameters the plan is generated for."""

    type: str
    title: str
    total_days: int
    daily_minutes: int
    description: Optional[str] = None


@dataclass(frozen=True)
class Phase:
    name: str
    start_day: int
    end_day: int
    focus: str

    def contains(self, day: int) -> bool:
        return self.start_day <= day <= self.end_day


class ActionItemSpec(BaseModel):
    text: str
    completed: bool = False


class ResourceSpec(BaseModel):
    type: str = "docs"
    title: str = ""
    url: str
    creator: str = ""


class TaskSpec(BaseModel):
    """Validated content for one day; the only shape allowed into TaskRecord."""

    day_number: int = Field(..., ge=1)
    title: str = Field(..., min_length=1)
    purpose: str
    phase: str
    deliverables: List[str] = Field(..., min_length=MIN_DELIVERABLES)
    action_items: List[ActionItemSpec] = Field(..., min_length=MIN_ACTION_ITEMS)
    resources: List[ResourceSpec] = Field(default_factory=list)
    skill_progression: str = ""
    estimated_minutes: int = Field(..., ge=1)


class RawDayDescriptor(BaseModel):
    """Loosely typed generator record. Every field is optional and unchecked."""

    model_config = ConfigDict(extra="ignore")

    day_number: Any = Field(default=None, validation_alias=AliasChoices("dayNumber", "day_number", "day"))
    title: Any = None
    topic: Any = None
    purpose: Any = None
    description: Any = None
    deliverables: Any = None
    what_to_learn: Any = Field(default=None, validation_alias=AliasChoices("whatToLearn", "what_to_learn"))
    action_items: Any = Field(default=None, validation_alias=AliasChoices("actionItems", "action_items"))
    resources: Any = None
    skill_progression: Any = Field(
        default=None, validation_alias=AliasChoices("skillProgression", "skill_progression")
    )
    estimated_minutes: Any = Field(
        default=None, validation_alias=AliasChoices("estimatedMinutes", "estimated_minutes")
    )


# --- text sanitization -----------------------------------------------------


def _collapse_artifacts(text: str) -> str:
    cleaned = re.sub(r"\s+", " ", text)
    cleaned = re.sub(r"\s+\.", ".", cleaned)
    cleaned = re.sub(r"\s+,", ",", cleaned)
    cleaned = re.sub(r"\.\s*\.", ".", cleaned)
    cleaned = re.sub(r",\s*([.,])", r"\1", cleaned)
    cleaned = re.sub(r"^[\s,;:.!\-]+", "", cleaned)
    cleaned = re.sub(r"[\s,;:\-]+$", "", cleaned)
    return cleaned.strip()


def strip_motivational_language(text: str) -> str:
    cleaned = text
    for pattern in _MOTIVATIONAL_RE:
        cleaned = pattern.sub("", cleaned)
    cleaned = _TRAILING_EXCLAMATION_RE.sub("", cleaned)
    return _collapse_artifacts(cleaned)


def strip_abstract_language(text: str) -> str:
    cleaned = text
    for pattern in _ABSTRACT_RE:
        cleaned = pattern.sub("", cleaned)
    return _collapse_artifacts(cleaned)


def sanitize_text(value: Any) -> str:
    """Strip both banned phrase sets; non-strings become an empty string."""
    if not isinstance(value, str):
        return ""
    return strip_abstract_language(strip_motivational_language(value))


def ensure_time_tag(text: str, minutes: int) -> str:
    if _TIME_TAG_RE.search(text):
        return text
    return f"{text} ({minutes} min)"


# --- phases ----------------------------------------------------------------


def _ceil_fraction(total: int, numerator: int, denominator: int) -> int:
    # ceil(total * numerator / denominator) in integers.
    return -(-total * numerator // denominator)


def calculate_phases(total_days: int) -> List[Phase]:
    """Partition ``1..total_days`` into one to four contiguous phases."""
    if total_days <= 3:
        return [
            Phase("Phase 1: Foundation & Quick Wins", 1, total_days, "Terminology, setup and a first practical application"),
        ]

    if total_days <= 7:
        foundation_end = _ceil_fraction(total_days, 2, 5)
        return [
            Phase("Phase 1: Foundation", 1, foundation_end, "Terminology, setup and mental models"),
            Phase("Phase 2: Application", foundation_end + 1, total_days, "Hands-on practice and building"),
        ]

    if total_days <= 14:
        foundation_end = _ceil_fraction(total_days, 1, 4)
        core_end = _ceil_fraction(total_days, 3, 5)
        return [
            Phase("Phase 1: Foundation", 1, foundation_end, "Terminology and tool setup"),
            Phase("Phase 2: Core Skills", foundation_end + 1, core_end, "Essential techniques"),
            Phase("Phase 3: Project", core_end + 1, total_days, "Build something real"),
        ]

    foundation_end = _ceil_fraction(total_days, 1, 5)
    core_end = _ceil_fraction(total_days, 1, 2)
    application_end = _ceil_fraction(total_days, 4, 5)
    return [
        Phase("Phase 1: Foundation", 1, foundation_end, "Terminology, notation and mental models"),
        Phase("Phase 2: Core Skills", foundation_end + 1, core_end, "Essential techniques and patterns"),
        Phase("Phase 3: Application", core_end + 1, application_end, "Real-world problem solving"),
        Phase("Phase 4: Mastery Project", application_end + 1, total_days, "Independent creation"),
    ]


def phase_for_day(phases: List[Phase], day: int) -> Phase:
    for phase in phases:
        if phase.contains(day):
            return phase
    return phases[-1]


# --- fallback plan ---------------------------------------------------------


def fallback_day(params: PlanParams, phases: List[Phase], day: int) -> Dict[str, Any]:
    """Generic descriptor for one day, shaped like generator output."""
    phase = phase_for_day(phases, day)
    session = day - phase.start_day + 1
    minutes = params.daily_minutes
    return {
        "dayNumber": day,
        "title": f"{params.title} - {phase.name} Session {session}",
        "purpose": f"{phase.focus}. Required for tasks in subsequent sessions.",
        "deliverables": [
            f"Completed exercises for session {session}",
            f"Notes document for {phase.name}",
            "Practice project files",
        ],
        "actionItems": [
            f"Study the reference material for {params.title} session {session} ({minutes * 2 // 5} min)",
            f"Complete {session * 3} practice exercises ({minutes * 2 // 5} min)",
            f"Create notes.md documenting key points from session {session} ({minutes // 5} min)",
        ],
        "resources": [],
        "skillProgression": f"Outcome: Completed session {day} tasks for {params.title}",
        "estimatedMinutes": minutes,
    }


def fallback_plan(params: PlanParams) -> List[Dict[str, Any]]:
    """Deterministic one-task-per-day plan used when the generator is unusable."""
    phases = calculate_phases(params.total_days)
    return [fallback_day(params, phases, day) for day in range(1, params.total_days + 1)]


# --- normalization ---------------------------------------------------------


def _coerce_positive_int(value: Any, maximum: Optional[int] = None) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        num = int(value)
    except (TypeError, ValueError, OverflowError):
        # OverflowError: json.loads accepts Infinity.
        return None
    if num <= 0 or (maximum is not None and num > maximum):
        return None
    return num


def _first_text(*candidates: Any) -> str:
    for candidate in candidates:
        cleaned = sanitize_text(candidate)
        if cleaned:
            return cleaned
    return ""


def _first_list(*candidates: Any) -> List[Any]:
    for candidate in candidates:
        if isinstance(candidate, list) and candidate:
            return candidate
    return []


def _clean_texts(values: Iterable[Any]) -> List[str]:
    cleaned: List[str] = []
    for value in values:
        text = sanitize_text(value)
        if text:
            cleaned.append(text)
    return cleaned


def _action_item_texts(raw: Any) -> List[str]:
    if not isinstance(raw, list):
        return []
    texts: List[Any] = []
    for item in raw:
        if isinstance(item, str):
            texts.append(item)
        elif isinstance(item, dict):
            texts.append(item.get("text"))
    return _clean_texts(texts)


def _pad(values: List[str], fillers: Iterable[str], minimum: int, title: str) -> List[str]:
    padded = list(values)
    for template in fillers:
        if len(padded) >= minimum:
            break
        filler = template.format(title=title)
        if filler not in padded:
            padded.append(filler)
    return padded


def filter_resources(raw: Any) -> List[ResourceSpec]:
    """Keep only resources with a well-formed http(s) URL."""
    if not isinstance(raw, list):
        return []
    kept: List[ResourceSpec] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        url = entry.get("url")
        if not isinstance(url, str) or not url.strip():
            continue
        url = url.strip()
        try:
            _HTTP_URL.validate_python(url)
        except PydanticValidationError:
            logger.debug("Dropping resource with malformed url %r", url)
            continue
        resource_type = entry.get("type")
        kept.append(
            ResourceSpec(
                type=resource_type if isinstance(resource_type, str) and resource_type in RESOURCE_TYPES else "docs",
                title=entry.get("title") if isinstance(entry.get("title"), str) else "",
                url=url,
                creator=entry.get("creator") if isinstance(entry.get("creator"), str) else "",
            )
        )
    return kept


def build_task_spec(params: PlanParams, phase: Phase, day: int, raw: RawDayDescriptor) -> TaskSpec:
    title = _first_text(raw.title, raw.topic, f"{params.title} - Day {day}") or f"Day {day}"
    purpose = _first_text(raw.purpose, raw.description) or f"{phase.focus}."

    deliverables = _clean_texts(_first_list(raw.deliverables, raw.what_to_learn))
    deliverables = _pad(deliverables, DELIVERABLE_FILLERS, MIN_DELIVERABLES, title)

    action_texts = _pad(_action_item_texts(raw.action_items), ACTION_ITEM_FILLERS, MIN_ACTION_ITEMS, title)
    minutes_per_item = max(1, params.daily_minutes // 4)
    action_items = [ActionItemSpec(text=ensure_time_tag(text, minutes_per_item)) for text in action_texts]

    return TaskSpec(
        day_number=day,
        title=title,
        purpose=purpose,
        phase=phase.name,
        deliverables=deliverables,
        action_items=action_items,
        resources=filter_resources(raw.resources),
        skill_progression=sanitize_text(raw.skill_progression),
        estimated_minutes=_coerce_positive_int(raw.estimated_minutes, MAX_ESTIMATED_MINUTES) or params.daily_minutes,
    )


def _place_descriptors(raw_days: Any, total_days: int) -> Dict[int, RawDayDescriptor]:
    """Map descriptors onto day numbers.

    Explicit day numbers are trusted only when every record carries a unique
    one inside ``1..total_days``; otherwise records are placed by position.
    """
    if not isinstance(raw_days, list):
        return {}

    parsed: List[Optional[RawDayDescriptor]] = [
        RawDayDescriptor.model_validate(entry) if isinstance(entry, dict) else None for entry in raw_days
    ]
    numbers = [_coerce_positive_int(entry.day_number) for entry in parsed if entry is not None]
    trust_numbers = (
        bool(numbers)
        and all(number is not None and number <= total_days for number in numbers)
        and len(set(numbers)) == len(numbers)
    )

    placed: Dict[int, RawDayDescriptor] = {}
    for index, entry in enumerate(parsed):
        if entry is None:
            continue
        day = _coerce_positive_int(entry.day_number) if trust_numbers else index + 1
        if day is not None and day <= total_days:
            placed[day] = entry
    return placed


def normalize_plan(params: PlanParams, raw_days: Any) -> List[TaskSpec]:
    """Produce exactly ``params.total_days`` specs, day numbers ``1..N``.

    Days the raw plan does not cover are taken from the fallback plan.
    """
    phases = calculate_phases(params.total_days)
    placed = _place_descriptors(raw_days, params.total_days)

    specs: List[TaskSpec] = []
    filled = 0
    for day in range(1, params.total_days + 1):
        descriptor = placed.get(day)
        if descriptor is None:
            descriptor = RawDayDescriptor.model_validate(fallback_day(params, phases, day))
            filled += 1
        specs.append(build_task_spec(params, phase_for_day(phases, day), day, descriptor))

    if filled and placed:
        logger.info("Filled %s of %s plan days from the fallback template", filled, params.total_days)
    return specs
