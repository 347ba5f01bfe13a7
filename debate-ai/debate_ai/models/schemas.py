"""Pydantic schemas for the DebateAI backend.

Includes models:
- Round, Session (debate state held by the session store)
- RoundGrading (judge output for a single round)
- Grading (final weighted rubric with per-category subtotals)
- OperationResult / SubmitResult (structured success-or-failure results)
- Request payloads for the HTTP API
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import ClassVar, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


Side = Literal["pro", "con"]
RoundType = Literal["constructive", "cross-ex", "rebuttal", "closing"]
FailureKind = Literal["not_found", "validation", "conflict"]

CATEGORY_MAX = {"constructive": 30, "cross_ex": 10, "rebuttal": 35, "closing": 25}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


def opposite_side(side: str) -> str:
    return "con" if side == "pro" else "pro"


class RoundGrading(BaseModel):
    """Judge scores for one round; raw criterion scores are 0-5."""

    round_type: RoundType
    scores: Dict[str, float]
    subtotal: float = Field(..., ge=0)
    feedback: str = ""
    used_fallback: bool = False

    @field_validator("scores")
    @classmethod
    def _scores_in_range(cls, v: Dict[str, float]) -> Dict[str, float]:
        for k, val in v.items():
            if not (0 <= val <= 5):
                raise ValueError(f"scores[{k}] must be in [0, 5]")
        return v


class Round(BaseModel):
    """A single debate round; its type is fixed by position and never changes."""

    id: str = Field(default_factory=new_id)
    type: RoundType
    user_response: Optional[str] = None
    ai_response: Optional[str] = None
    ai_used_fallback: Optional[bool] = None
    grading: Optional[RoundGrading] = None
    timestamp: datetime = Field(default_factory=utc_now)


class _Category(BaseModel):
    subtotal: float = Field(..., ge=0)

    _max_points: ClassVar[int] = 0

    @model_validator(mode="after")
    def _subtotal_within_max(self):
        if self.subtotal > self._max_points:
            raise ValueError(f"subtotal {self.subtotal} exceeds category maximum {self._max_points}")
        return self


class ConstructiveGrading(_Category):
    clarity_structure: float = Field(..., ge=0, le=5)
    evidence_reasoning: float = Field(..., ge=0, le=5)
    framing: float = Field(..., ge=0, le=5)

    _max_points: ClassVar[int] = CATEGORY_MAX["constructive"]


class CrossExGrading(_Category):
    responsiveness: float = Field(..., ge=0, le=5)
    control: float = Field(..., ge=0, le=5)

    _max_points: ClassVar[int] = CATEGORY_MAX["cross_ex"]


class RebuttalGrading(_Category):
    refutation: float = Field(..., ge=0, le=5)
    defense: float = Field(..., ge=0, le=5)
    efficiency_focus: float = Field(..., ge=0, le=5)

    _max_points: ClassVar[int] = CATEGORY_MAX["rebuttal"]


class ClosingGrading(_Category):
    crystallization: float = Field(..., ge=0, le=5)
    comparative_weighing: float = Field(..., ge=0, le=5)
    delivery: float = Field(..., ge=0, le=5)

    _max_points: ClassVar[int] = CATEGORY_MAX["closing"]


class Grading(BaseModel):
    """Final weighted grading across all four rounds (total 0-100)."""

    constructive: ConstructiveGrading
    cross_ex: CrossExGrading
    rebuttal: RebuttalGrading
    closing: ClosingGrading
    final_score: float = Field(..., ge=0, le=100)
    used_fallback: bool = False

    @model_validator(mode="after")
    def _final_is_sum(self) -> "Grading":
        total = self.constructive.subtotal + self.cross_ex.subtotal + self.rebuttal.subtotal + self.closing.subtotal
        if abs(total - self.final_score) > 0.01:
            raise ValueError(f"final_score {self.final_score} does not equal sum of subtotals {total:.2f}")
        return self


class Session(BaseModel):
    """One debate between the user and the AI opponent (process lifetime only)."""

    id: str = Field(default_factory=new_id)
    topic: str
    refined_topic: str
    user_side: Side
    current_round: int = Field(1, ge=1, le=4)
    rounds: List[Round] = Field(default_factory=list)
    is_complete: bool = False
    final_grading: Optional[Grading] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def touch(self) -> None:
        """Bump updated_at without ever moving it backwards."""
        now = utc_now()
        if now > self.updated_at:
            self.updated_at = now

    def find_round(self, round_id: str) -> Optional[Round]:
        for r in self.rounds:
            if r.id == round_id:
                return r
        return None


class OperationResult(BaseModel):
    """Outcome of a session operation. Failures are values, not exceptions."""

    success: bool
    message: str
    error: Optional[FailureKind] = None
    round: Optional[Round] = None
    new_round: Optional[int] = None

    @classmethod
    def ok(cls, message: str, **kwargs) -> "OperationResult":
        return cls(success=True, message=message, **kwargs)

    @classmethod
    def failure(cls, message: str, error: FailureKind = "validation") -> "OperationResult":
        return cls(success=False, message=message, error=error)

    @classmethod
    def not_found(cls, what: str = "Session") -> "OperationResult":
        return cls(success=False, message=f"{what} not found", error="not_found")


class SubmitResult(OperationResult):
    """Result of a full round submission, including the updated session."""

    session: Optional[Session] = None
    next_round: Optional[int] = None
    is_complete: bool = False
    final_grading: Optional[Grading] = None


class TopicValidation(BaseModel):
    valid: bool
    reason: str
    used_fallback: bool = False


# Request payloads
class _Payload(BaseModel):
    # Accept both snake_case and the browser client's camelCase keys
    model_config = ConfigDict(populate_by_name=True)

    @staticmethod
    def _not_blank(v: str, name: str) -> str:
        if not v or not v.strip():
            raise ValueError(f"{name} is required")
        return v


class TopicInput(_Payload):
    topic: str = Field(..., description="Proposed debate topic")

    @field_validator("topic")
    @classmethod
    def _topic_present(cls, v: str) -> str:
        return cls._not_blank(v, "Topic")


class CreateSessionInput(_Payload):
    topic: str
    refined_topic: str = Field(..., alias="refinedTopic")
    user_side: Side = Field(..., alias="userSide")

    @field_validator("topic", "refined_topic")
    @classmethod
    def _required(cls, v: str) -> str:
        return cls._not_blank(v, "Topic and refined_topic")

    @field_validator("user_side", mode="before")
    @classmethod
    def _side_normalized(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class SubmitResponseInput(_Payload):
    response: str

    @field_validator("response")
    @classmethod
    def _response_present(cls, v: str) -> str:
        return cls._not_blank(v, "Response")


class StartDebateInput(_Payload):
    topic: str
    position: Literal["for", "against"] = "for"
    starting_player: Optional[str] = Field(None, alias="startingPlayer")

    @field_validator("topic")
    @classmethod
    def _topic_present(cls, v: str) -> str:
        return cls._not_blank(v, "Topic")


class SubmitArgumentInput(_Payload):
    session_id: str = Field(..., alias="sessionId")
    argument: str

    @field_validator("session_id", "argument")
    @classmethod
    def _required(cls, v: str) -> str:
        return cls._not_blank(v, "Session ID and argument")


class SessionRefInput(_Payload):
    session_id: str = Field(..., alias="sessionId")

    @field_validator("session_id")
    @classmethod
    def _required(cls, v: str) -> str:
        return cls._not_blank(v, "Session ID")
