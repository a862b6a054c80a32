"""Normalisation and checks for LLM-generated prep sessions."""

import json
import logging
import re
from dataclasses import dataclass

from fuelrx.domain.prep_sessions import PrepSessions, PrepValidationWarning
from fuelrx.errors import InvalidPrepSessionsError
from fuelrx.services.json_repair import RAW_RESPONSE_LIMIT, repair_prep_sessions

_logger = logging.getLogger(__name__)

# Assembly-only or quick-cook meals that should never be batch prepped.
NEVER_BATCH_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"yogurt.*bowl",
        r"yogurt.*parfait",
        r"cottage cheese",
        r"fresh.*fruit",
        r"fruit.*salad",
        r"toast",
        r"avocado.*toast",
        r"scrambled.*egg",
        r"fried.*egg",
        r"poached.*egg",
        r"omelette",
        r"omelet",
        r"smoothie",
        r"protein.*shake",
        r"quesadilla",
        r"grilled.*cheese",
    )
)

COOKING_KEYWORDS = (
    "bake at",
    "cook for",
    "grill for",
    "sauté",
    "saute",
    "roast at",
    "heat to",
    "simmer for",
    "boil for",
    "fry for",
    "sear for",
    "internal temp",
    "°f",
    "°c",
    "minutes per side",
    "until golden",
    "until browned",
    "until crispy",
)

ASSEMBLY_KEYWORDS = (
    "microwave",
    "reheat",
    "warm",
    "take from fridge",
    "remove from fridge",
    "prepped",
    "batch-prepped",
    "assemble",
    "top with",
    "drizzle",
    "garnish",
)

_DAY_OF_SESSION_TYPES = {"day_of_morning", "day_of_dinner"}
_MEAL_ID_RE = re.compile(r"meal_(\w+)_(\w+)_")


@dataclass
class PrepSessionService:
    """Turns raw prep session tool output into validated sessions."""

    def normalize(self, tool_result: dict[str, object]) -> PrepSessions:
        """Coerce string-encoded fields and check the session list shape."""
        raw_sessions = tool_result.get("prep_sessions")
        if isinstance(raw_sessions, str):
            _logger.warning(
                "LLM returned prep_sessions as string (%s chars)", len(raw_sessions)
            )
            raw_sessions = repair_prep_sessions(raw_sessions)

        daily_assembly = _coerce_daily_assembly(tool_result.get("daily_assembly"))

        if not isinstance(raw_sessions, list) or not all(
            isinstance(session, dict) for session in raw_sessions
        ):
            dumped = json.dumps(tool_result, indent=2, default=str)
            _logger.error(
                "Prep sessions have invalid structure: prep_sessions is %s",
                _describe_shape(raw_sessions),
            )
            raise InvalidPrepSessionsError(
                "LLM returned invalid response structure",
                raw_response=dumped[:RAW_RESPONSE_LIMIT],
            )
        if not raw_sessions:
            _logger.error("LLM returned empty prep_sessions array")
            raise InvalidPrepSessionsError(
                "no sessions returned",
                raw_response=json.dumps(tool_result, indent=2, default=str),
            )
        return PrepSessions(prep_sessions=raw_sessions, daily_assembly=daily_assembly)

    def validate(self, sessions: PrepSessions) -> list[PrepValidationWarning]:
        """Validate sessions and log any warnings."""
        warnings = validate_prep_sessions(
            sessions.prep_sessions, sessions.daily_assembly
        )
        if warnings:
            _logger.warning(
                "Prep session validation:\n%s", format_validation_warnings(warnings)
            )
        return warnings


def _describe_shape(value: object) -> str:
    if isinstance(value, list):
        kinds = sorted({type(item).__name__ for item in value})
        return f"list of {', '.join(kinds)}"
    return type(value).__name__


def _coerce_daily_assembly(value: object) -> dict[str, object]:
    if isinstance(value, str):
        _logger.warning("LLM returned daily_assembly as string, parsing")
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return {}
    return value if isinstance(value, dict) else {}


def _tasks(session: dict[str, object]) -> list[dict[str, object]]:
    tasks = session.get("prep_tasks")
    if not isinstance(tasks, list):
        return []
    return [task for task in tasks if isinstance(task, dict)]


def _meal_ids(task: dict[str, object]) -> list[str]:
    meal_ids = task.get("meal_ids")
    if not isinstance(meal_ids, list):
        return []
    return [meal_id for meal_id in meal_ids if isinstance(meal_id, str)]


def _steps_text(task: dict[str, object]) -> str:
    steps = task.get("detailed_steps")
    if isinstance(steps, str):
        return steps
    if isinstance(steps, list):
        return " ".join(str(step) for step in steps)
    return ""


def validate_prep_sessions(
    prep_sessions: list[dict[str, object]], daily_assembly: dict[str, object]
) -> list[PrepValidationWarning]:
    """Check batch prep output for meals that should not be batched.

    Only applies when a ``weekly_batch`` session exists.
    """
    warnings: list[PrepValidationWarning] = []
    prep_sessions = [s for s in prep_sessions if isinstance(s, dict)]
    batch_session = next(
        (s for s in prep_sessions if s.get("session_type") == "weekly_batch"), None
    )
    if batch_session is None:
        return warnings

    batched_meal_ids: dict[str, None] = {}
    for task in _tasks(batch_session):
        description = str(task.get("description", ""))
        meal_ids = _meal_ids(task)
        for pattern in NEVER_BATCH_PATTERNS:
            if pattern.search(description):
                warnings.append(
                    PrepValidationWarning(
                        type="assembly_meal_batched",
                        message=(
                            f'"{description}" appears to be an assembly-only meal '
                            "and should not be batch prepped"
                        ),
                        severity="warning",
                        meal_id=meal_ids[0] if meal_ids else None,
                    )
                )
                break
        for meal_id in meal_ids:
            batched_meal_ids[meal_id] = None

    for meal_id in batched_meal_ids:
        match = _MEAL_ID_RE.search(meal_id)
        if not match:
            continue
        day, meal_type = match.groups()
        assembly_day = daily_assembly.get(day)
        entry = assembly_day.get(meal_type) if isinstance(assembly_day, dict) else None
        if not entry:
            warnings.append(
                PrepValidationWarning(
                    type="missing_daily_assembly",
                    message=(
                        f'Batch-prepped meal "{meal_id}" is missing a daily_assembly '
                        f"entry for {day} {meal_type}"
                    ),
                    severity="warning",
                    meal_id=meal_id,
                )
            )

    for session in prep_sessions:
        if session.get("session_type") not in _DAY_OF_SESSION_TYPES:
            continue
        for task in _tasks(session):
            meal_ids = _meal_ids(task)
            if not any(meal_id in batched_meal_ids for meal_id in meal_ids):
                continue
            description = str(task.get("description", ""))
            steps = _steps_text(task)
            full_text = f"{description} {steps}".lower()
            if any(keyword in full_text for keyword in ASSEMBLY_KEYWORDS):
                continue
            keyword = next((k for k in COOKING_KEYWORDS if k in full_text), None)
            if keyword:
                warnings.append(
                    PrepValidationWarning(
                        type="cooking_batched_item",
                        message=(
                            f'Day-of task "{description}" contains cooking '
                            f'instructions ("{keyword}") but meal was batch-prepped '
                            "on Sunday"
                        ),
                        severity="error",
                        meal_id=meal_ids[0] if meal_ids else None,
                    )
                )

    return warnings


def format_validation_warnings(warnings: list[PrepValidationWarning]) -> str:
    """Render warnings as one line each."""
    if not warnings:
        return "No validation warnings"
    return "\n".join(
        f"{'[ERROR]' if w.severity == 'error' else '[WARN]'} {w.type}: {w.message}"
        for w in warnings
    )
