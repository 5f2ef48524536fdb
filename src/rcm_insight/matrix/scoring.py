"""Effectiveness scoring for controls and risk rating for risks.

Raw effectiveness strings are canonicalized once through a single lookup
table; everything downstream works with EffectivenessLevel.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional, Union

import numpy as np

from ..logging_config import get_logger
from .models import EffectivenessLevel, EffectivenessScore, RCMNode, TrendDirection

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")

# Keys are in normalized form: lower case, whitespace runs collapsed to "-"
_CANONICAL_LEVELS: dict[str, EffectivenessLevel] = {
    "effective": EffectivenessLevel.EFFECTIVE,
    "partially-effective": EffectivenessLevel.PARTIALLY_EFFECTIVE,
    "partial": EffectivenessLevel.PARTIALLY_EFFECTIVE,
    "ineffective": EffectivenessLevel.INEFFECTIVE,
    "not-tested": EffectivenessLevel.NOT_TESTED,
    "pending": EffectivenessLevel.PENDING,
}

BASE_SCORES: dict[EffectivenessLevel, int] = {
    EffectivenessLevel.EFFECTIVE: 90,
    EffectivenessLevel.PARTIALLY_EFFECTIVE: 60,
    EffectivenessLevel.INEFFECTIVE: 30,
    EffectivenessLevel.PENDING: 0,
    EffectivenessLevel.NOT_TESTED: 0,
}

# Health-score adjustments (aggregate only, never the display score)
AUTOMATION_BONUS = 10
RETIRED_PENALTY = 20
KEY_CONTROL_WEIGHT = 1.5


def normalize_effectiveness(raw: str) -> str:
    return _WHITESPACE.sub("-", raw.strip().lower())


def canonicalize(raw: Optional[Union[str, EffectivenessLevel]]) -> EffectivenessLevel:
    """Map a raw effectiveness signal to its canonical level.

    Absent or unrecognized values map to ``not-tested``; never raises.
    """
    if isinstance(raw, EffectivenessLevel):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        return EffectivenessLevel.NOT_TESTED
    return _CANONICAL_LEVELS.get(normalize_effectiveness(raw), EffectivenessLevel.NOT_TESTED)


def parse_level(raw: Union[str, EffectivenessLevel]) -> EffectivenessLevel:
    """Strict form of canonicalize for user queries.

    Raises:
        ValueError: If ``raw`` is not a known effectiveness label
    """
    if isinstance(raw, EffectivenessLevel):
        return raw
    level = _CANONICAL_LEVELS.get(normalize_effectiveness(str(raw)))
    if level is None:
        choices = ", ".join(member.value for member in EffectivenessLevel)
        raise ValueError(f"Unknown effectiveness level: {raw!r}. Choose from: {choices}")
    return level


def score_control(raw: Optional[str] = None) -> EffectivenessScore:
    """Canonical level and fixed base score for one raw signal."""
    level = canonicalize(raw)
    return EffectivenessScore(level=level, score=BASE_SCORES[level])


def effectiveness_for(node: RCMNode) -> Optional[EffectivenessScore]:
    """Full display score for a control node, ``None`` for any other type.

    Trend, last test date, test count and pass rate come straight from the
    node's metadata; no history is consulted, so a missing trend reads as
    ``stable``.
    """
    if not node.is_control:
        return None
    base = score_control(node.effectiveness)
    return EffectivenessScore(
        level=base.level,
        score=base.score,
        trend=_parse_trend(node.metadata.get("trend")),
        last_tested=_parse_date(node.metadata.get("lastTested")),
        test_count=_parse_number(node.metadata.get("testCount"), int),
        pass_rate=_parse_number(node.metadata.get("passRate"), float),
    )


def health_adjusted_score(node: RCMNode) -> float:
    """Per-control contribution to the aggregate health score, in [0, 100]."""
    score = float(BASE_SCORES[canonicalize(node.effectiveness)])
    if node.metadata.get("automation") == "Automated":
        score += AUTOMATION_BONUS
    if node.status == "Retired":
        score -= RETIRED_PENALTY
    if node.metadata.get("keyControl"):
        score *= KEY_CONTROL_WEIGHT
    return min(100.0, max(0.0, score))


def score_health(controls: Iterable[RCMNode]) -> int:
    """Mean of adjusted control scores, rounded half up; 0 with no controls."""
    adjusted = np.array([health_adjusted_score(c) for c in controls if c.is_control], dtype=float)
    if adjusted.size == 0:
        return 0
    return int(np.floor(adjusted.mean() + 0.5))


# ── Risk rating ────────────────────────────────────────────────────


class RiskRating(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNRATED = "unrated"


IMPACT_SCORES = {"Low": 1, "Medium": 2, "High": 3, "Critical": 4}
LIKELIHOOD_SCORES = {"Rare": 1, "Unlikely": 2, "Possible": 3, "Likely": 4, "Almost Certain": 5}


def risk_score(impact: Optional[str], likelihood: Optional[str]) -> int:
    """Impact × likelihood; unknown labels count as 0."""
    return IMPACT_SCORES.get(impact or "", 0) * LIKELIHOOD_SCORES.get(likelihood or "", 0)


def rate_risk(impact: Optional[str], likelihood: Optional[str]) -> RiskRating:
    if not impact or not likelihood:
        return RiskRating.UNRATED
    score = risk_score(impact, likelihood)
    if score >= 15:
        return RiskRating.CRITICAL
    if score >= 10:
        return RiskRating.HIGH
    if score >= 5:
        return RiskRating.MEDIUM
    return RiskRating.LOW


# ── Metadata parsing helpers ───────────────────────────────────────


def _parse_trend(value: Any) -> TrendDirection:
    if isinstance(value, TrendDirection):
        return value
    if isinstance(value, str):
        try:
            return TrendDirection(value.strip().lower())
        except ValueError:
            logger.debug("Unknown trend %r; treating as stable", value)
    return TrendDirection.STABLE


def _parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError:
            logger.debug("Unparsable lastTested value %r", value)
    return None


def _parse_number(value: Any, kind: type) -> Any:
    if value is None or isinstance(value, bool):
        return None
    try:
        return kind(value)
    except (TypeError, ValueError):
        return None
