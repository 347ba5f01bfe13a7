"""Weighted rubric aggregation.

A round's subtotal is its weighted raw score as a share of the best possible
weighted score, scaled to the round's point allocation:

    subtotal = total_points * sum(score_i * weight_i) / (5 * sum(weight_i))

The final score is the sum of the four subtotals (0-100).
"""
from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional

from debate_ai.config import settings
from debate_ai.config.rubrics import RUBRICS, ROUND_TYPES
from debate_ai.models.schemas import (
    ClosingGrading,
    ConstructiveGrading,
    CrossExGrading,
    Grading,
    RebuttalGrading,
    Round,
    RoundGrading,
)


_CATEGORY_MODELS = {
    "constructive": ("constructive", ConstructiveGrading),
    "cross-ex": ("cross_ex", CrossExGrading),
    "rebuttal": ("rebuttal", RebuttalGrading),
    "closing": ("closing", ClosingGrading),
}


def clamp_score(value: float) -> float:
    return float(max(0, min(settings.MAX_CRITERION_SCORE, value)))


def compute_subtotal(round_type: str, scores: Mapping[str, float]) -> float:
    """Weighted subtotal for one round; criteria missing from `scores` count as 0."""
    rubric = RUBRICS[round_type]
    weighted = sum(clamp_score(scores.get(c.key, 0)) * c.weight for c in rubric.criteria)
    best = settings.MAX_CRITERION_SCORE * rubric.weight_sum
    return round(rubric.total_points * weighted / best, 2)


def build_round_grading(
    round_type: str,
    scores: Mapping[str, float],
    feedback: str = "",
    used_fallback: bool = False,
) -> RoundGrading:
    rubric = RUBRICS[round_type]
    clean = {c.key: clamp_score(scores.get(c.key, 0)) for c in rubric.criteria}
    return RoundGrading(
        round_type=round_type,
        scores=clean,
        subtotal=compute_subtotal(round_type, clean),
        feedback=feedback,
        used_fallback=used_fallback,
    )


def fallback_round_grading(round_type: str) -> RoundGrading:
    """Every criterion scored 'adequate' (3/5)."""
    scores = {c.key: settings.FALLBACK_CRITERION_SCORE for c in RUBRICS[round_type].criteria}
    return build_round_grading(
        round_type,
        scores,
        feedback="Automated grading was unavailable; every criterion received a default score of 3/5.",
        used_fallback=True,
    )


def build_final_grading(round_gradings: Mapping[str, Optional[RoundGrading]]) -> Grading:
    """Combine per-round gradings into the final rubric.

    Rounds with no grading are treated as fallback-graded so the result is
    always complete.
    """
    blocks: Dict[str, object] = {}
    used_fallback = False
    total = 0.0
    for round_type in ROUND_TYPES:
        grading = round_gradings.get(round_type)
        if grading is None:
            grading = fallback_round_grading(round_type)
        used_fallback = used_fallback or grading.used_fallback
        field_name, model = _CATEGORY_MODELS[round_type]
        blocks[field_name] = model(subtotal=grading.subtotal, **grading.scores)
        total += grading.subtotal

    return Grading(final_score=round(total, 2), used_fallback=used_fallback, **blocks)


def gradings_by_type(rounds: Iterable[Round]) -> Dict[str, Optional[RoundGrading]]:
    return {r.type: r.grading for r in rounds}
