"""Static judging rubric for the four debate rounds.

Each round type maps to a `RoundRubric` with its point allocation and the
weighted criteria the judge scores on a 0-5 scale. Criterion weights multiply
the raw score; examples are shown to the judge and the client only.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple


ROUND_TYPES: Tuple[str, ...] = ("constructive", "cross-ex", "rebuttal", "closing")


@dataclass(frozen=True)
class RubricCriterion:
    key: str
    name: str
    description: str
    weight: int
    examples: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RoundRubric:
    title: str
    description: str
    total_points: int
    criteria: Tuple[RubricCriterion, ...]

    @property
    def criterion_keys(self) -> List[str]:
        return [c.key for c in self.criteria]

    @property
    def weight_sum(self) -> int:
        return sum(c.weight for c in self.criteria)


RUBRICS: Dict[str, RoundRubric] = {
    "constructive": RoundRubric(
        title="Constructive",
        description="Build the case and set up the round",
        total_points=30,
        criteria=(
            RubricCriterion(
                key="clarity_structure",
                name="Clarity & Structure",
                description=(
                    "Are arguments presented in a clear, organized way with proper signposting? "
                    "Does the speech flow logically from claim to reasoning to conclusion?"
                ),
                weight=2,
                examples=(
                    "Clear thesis statement",
                    "Logical argument progression",
                    "Proper signposting (First, Second, etc.)",
                    "Organized structure",
                ),
            ),
            RubricCriterion(
                key="evidence_reasoning",
                name="Evidence & Reasoning",
                description=(
                    "Are claims backed up with relevant support (facts, logic, or examples)? "
                    "Is the reasoning chain clear (claim -> support -> impact)? "
                    "Are impacts explained rather than just asserted?"
                ),
                weight=2,
                examples=(
                    "Concrete evidence provided",
                    "Clear reasoning chain",
                    "Explained impacts",
                    "Credible sources",
                ),
            ),
            RubricCriterion(
                key="framing",
                name="Framing",
                description=(
                    "Are key terms or concepts defined clearly? Is there a standard or framework "
                    "for how the judge should evaluate the round? Does the speaker explain why "
                    "their side's impacts matter most?"
                ),
                weight=1,
                examples=(
                    "Clear definitions",
                    "Evaluation framework",
                    "Impact prioritization",
                    "Judge instruction",
                ),
            ),
        ),
    ),
    "cross-ex": RoundRubric(
        title="Cross-Examination",
        description="Expose weaknesses and clarify arguments",
        total_points=10,
        criteria=(
            RubricCriterion(
                key="responsiveness",
                name="Responsiveness",
                description=(
                    "Are questions answered directly and clearly? Do responses address the "
                    "substance of the question rather than avoiding it?"
                ),
                weight=1,
                examples=("Direct answers", "Addresses question substance", "No evasion", "Clear responses"),
            ),
            RubricCriterion(
                key="control",
                name="Control",
                description=(
                    "Are the questions purposeful, targeting weaknesses or clarifications? "
                    "Do responses maintain focus and avoid unnecessary digression?"
                ),
                weight=1,
                examples=("Strategic questions", "Target weaknesses", "Maintain focus", "Purposeful direction"),
            ),
        ),
    ),
    "rebuttal": RoundRubric(
        title="Rebuttal",
        description="Engage in clash: dismantle the opponent's points while defending one's own",
        total_points=35,
        criteria=(
            RubricCriterion(
                key="refutation",
                name="Refutation",
                description=(
                    "Are the opponent's main arguments addressed directly? Are counter-arguments "
                    "logical and clearly explained? Are weaknesses or contradictions in the "
                    "opponent's case exposed?"
                ),
                weight=2,
                examples=(
                    "Direct address of opponent's arguments",
                    "Logical counter-arguments",
                    "Expose contradictions",
                    "Clear explanations",
                ),
            ),
            RubricCriterion(
                key="defense",
                name="Defense",
                description=(
                    "Are the debater's own arguments protected against attacks? Are points rebuilt "
                    "or reinforced when challenged? Are dropped points minimized?"
                ),
                weight=2,
                examples=(
                    "Protect own arguments",
                    "Rebuild challenged points",
                    "Address attacks",
                    "Minimize dropped arguments",
                ),
            ),
            RubricCriterion(
                key="efficiency_focus",
                name="Efficiency & Focus",
                description=(
                    "Does the debater prioritize the most important clashes? Do they avoid wasting "
                    "effort on minor or irrelevant details?"
                ),
                weight=1,
                examples=(
                    "Prioritize key clashes",
                    "Avoid minor details",
                    "Strategic time use",
                    "Strengthen strong arguments",
                ),
            ),
        ),
    ),
    "closing": RoundRubric(
        title="Closing",
        description="Narrow, weigh, and persuade: give the judge a clear reason to vote",
        total_points=25,
        criteria=(
            RubricCriterion(
                key="crystallization",
                name="Crystallization",
                description=(
                    "Are the key issues of the round reduced to one or two decisive voting points? "
                    "Is it clear how these issues decide the outcome?"
                ),
                weight=2,
                examples=(
                    "Key voting issues identified",
                    "Clear decision points",
                    "Reduced complexity",
                    "Outcome clarity",
                ),
            ),
            RubricCriterion(
                key="comparative_weighing",
                name="Comparative Weighing",
                description=(
                    "Are the debater's arguments explicitly compared to the opponent's? Is it "
                    "explained why their side's impacts are more important, more likely, or come "
                    "first in time?"
                ),
                weight=2,
                examples=(
                    "Direct comparison",
                    "Impact weighing",
                    "Probability analysis",
                    "Win condition clarity",
                ),
            ),
            RubricCriterion(
                key="delivery",
                name="Delivery (text-based)",
                description=(
                    "Is the closing written clearly and persuasively? Is it easy to follow? "
                    "Are no new arguments improperly introduced at this stage?"
                ),
                weight=1,
                examples=("Clear writing", "Persuasive style", "Easy to follow", "No new arguments"),
            ),
        ),
    ),
}


def round_type_for(round_number: int) -> str:
    """Round type for a 1-based round position; out-of-range numbers map to constructive."""
    if 1 <= round_number <= len(ROUND_TYPES):
        return ROUND_TYPES[round_number - 1]
    return ROUND_TYPES[0]
