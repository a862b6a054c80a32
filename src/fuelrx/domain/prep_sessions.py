"""Domain models for prep sessions."""

from dataclasses import dataclass, field
from typing import Literal

WarningType = Literal[
    "assembly_meal_batched", "missing_daily_assembly", "cooking_batched_item"
]


@dataclass(frozen=True)
class PrepSessions:
    """Normalised prep sessions returned by the LLM."""

    prep_sessions: list[dict[str, object]]
    daily_assembly: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class PrepValidationWarning:
    """Issue detected in generated batch prep output."""

    type: WarningType
    message: str
    severity: Literal["warning", "error"]
    meal_id: str | None = None
