# task_assignment/scoring.py
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal, Mapping, Optional

from task_assignment.order import TaskInstance
from task_assignment.profiles import SkillProfile, SkillStats

RiskLevel = Literal["High", "Medium", "Low"]

COMPLEXITY_MULTIPLIERS: Mapping[str, float] = MappingProxyType(
    {"low": 1.0, "medium": 0.9, "high": 0.8}
)

MIN_SCORE = 0.1
SPEED_WEIGHT = 0.1
VIOLATION_WEIGHT = 0.15
MAX_VIOLATION_PENALTY = 0.4
WARN_ABOVE_VIOLATIONS = 2

HIGH_RISK_FINE = 200
MEDIUM_RISK_FINE = 100


@dataclass(frozen=True, slots=True)
class FitResult:
    score: float
    expected_fine: float
    risk_reduction: float
    success_rate: float
    warning: Optional[str] = None


def _unknown_skill() -> SkillStats:
    return SkillStats(accuracy=0.5, speed=0.5, violations=0)


def calculate_fit(task: TaskInstance, profile: SkillProfile) -> FitResult:
    """
    Score how likely `profile`'s worker is to perform `task` without incurring
    its fine.

    score = accuracy + (speed - 1) * 0.1 - min(violations * 0.15, 0.4),
    scaled by the task complexity multiplier and floored at 0.1. Scores have
    no ceiling, but the expected fine never drops below zero.
    """
    skill = profile.skills.get(task.type.lower()) or _unknown_skill()

    score = skill.accuracy
    score += (skill.speed - 1.0) * SPEED_WEIGHT
    if skill.violations > 0:
        score -= min(skill.violations * VIOLATION_WEIGHT, MAX_VIOLATION_PENALTY)
    score *= COMPLEXITY_MULTIPLIERS.get(task.complexity, 1.0)
    score = max(score, MIN_SCORE)

    # Fast, perfectly accurate workers can score above 1; exposure bottoms out at 0.
    expected_fine = task.potential_fine * max(0.0, 1.0 - score)
    warning = (
        f"High violation history ({skill.violations})"
        if skill.violations > WARN_ABOVE_VIOLATIONS
        else None
    )
    return FitResult(
        score=score,
        expected_fine=expected_fine,
        risk_reduction=task.potential_fine - expected_fine,
        success_rate=score * 100,
        warning=warning,
    )


def risk_level(expected_fine: float) -> RiskLevel:
    if expected_fine > HIGH_RISK_FINE:
        return "High"
    if expected_fine > MEDIUM_RISK_FINE:
        return "Medium"
    return "Low"
