"""Debate manager: session lifecycle and the four-round state machine.

Rounds run in a fixed order (1 constructive, 2 cross-ex, 3 rebuttal,
4 closing). Every operation returns an `OperationResult`; unknown sessions or
rounds and rejected input are reported as failures, never raised.
"""
from __future__ import annotations

from typing import List, Optional

from debate_ai.config import settings
from debate_ai.config.rubrics import round_type_for
from debate_ai.models.schemas import Grading, OperationResult, Round, RoundGrading, Session
from debate_ai.utils.logger import DebateLogger
from debate_ai.utils.session_store import InMemorySessionStore, SessionStore
from debate_ai.utils.word_cap import validate_word_count, word_count


class DebateManager:
    """Owns debate sessions and enforces round sequencing and the word cap."""

    def __init__(
        self,
        word_cap: int = settings.WORD_CAP,
        store: Optional[SessionStore] = None,
        event_log: Optional[DebateLogger] = None,
    ) -> None:
        if word_cap <= 0:
            raise ValueError("word_cap must be a positive integer")
        self.word_cap = word_cap
        self.store = store if store is not None else InMemorySessionStore()
        self.event_log = event_log or DebateLogger("debate_ai.debate_manager")

    # Session lifecycle
    def create_session(self, topic: str, refined_topic: str, user_side: str) -> Session:
        session = Session(topic=topic, refined_topic=refined_topic, user_side=user_side)
        self.store.create(session)
        self.event_log.log(
            "INFO", "New debate session created", {"session_id": session.id, "topic": topic[:50], "user_side": user_side}
        )
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        return self.store.get(session_id)

    def list_sessions(self) -> List[Session]:
        return self.store.list()

    def expire_session(self, session_id: str) -> OperationResult:
        if not self.store.expire(session_id):
            return OperationResult.not_found()
        self.event_log.log("INFO", "Debate session expired", {"session_id": session_id})
        return OperationResult.ok("Debate session expired")

    # Round sequencing
    @staticmethod
    def get_current_round_type(round_number: int) -> str:
        return round_type_for(round_number)

    def add_round(self, session_id: str, rnd: Round) -> OperationResult:
        """Append a pre-built round; it must be the next round in sequence."""
        session = self.store.get(session_id)
        if session is None:
            return OperationResult.not_found()
        rejection = self._check_can_append(session)
        if rejection is not None:
            return rejection
        expected = self.get_current_round_type(len(session.rounds) + 1)
        if rnd.type != expected:
            return OperationResult.failure(f"Round {len(session.rounds) + 1} must be a {expected} round, not {rnd.type}")

        session.rounds.append(rnd)
        self._save(session)
        return OperationResult.ok("Round added successfully", round=rnd)

    def submit_user_response(self, session_id: str, response: str) -> OperationResult:
        """Record the user's speech as a new round of the current round's type."""
        if not isinstance(response, str) or not response.strip():
            return OperationResult.failure("Response is required and must be a non-empty string")
        validation = self.validate_word_count(response)
        if not validation.success:
            return validation

        session = self.store.get(session_id)
        if session is None:
            return OperationResult.not_found()
        rejection = self._check_can_append(session)
        if rejection is not None:
            return rejection

        rnd = Round(type=self.get_current_round_type(session.current_round), user_response=response)
        session.rounds.append(rnd)
        self._save(session)
        return OperationResult.ok("Response submitted successfully", round=rnd)

    def add_ai_response(self, session_id: str, round_id: str, ai_response: str, used_fallback: bool = False) -> OperationResult:
        session = self.store.get(session_id)
        if session is None:
            return OperationResult.not_found()
        rnd = session.find_round(round_id)
        if rnd is None:
            return OperationResult.not_found("Round")

        rnd.ai_response = ai_response
        rnd.ai_used_fallback = used_fallback
        self._save(session)
        return OperationResult.ok("AI response added successfully", round=rnd)

    def advance_round(self, session_id: str) -> OperationResult:
        """Move to the next round once the current one has a response.

        At round 4 the debate is marked complete; advancing a complete debate
        reports the final round again without changing anything.
        """
        session = self.store.get(session_id)
        if session is None:
            return OperationResult.not_found()
        if session.is_complete:
            return OperationResult.ok("Debate completed", new_round=session.current_round)
        if len(session.rounds) < session.current_round:
            return OperationResult.failure(
                f"Round {session.current_round} has no response yet; submit before advancing"
            )

        if session.current_round >= settings.NUM_ROUNDS:
            session.current_round = settings.NUM_ROUNDS
            session.is_complete = True
            self._save(session)
            return OperationResult.ok("Debate completed", new_round=session.current_round)

        session.current_round += 1
        self._save(session)
        return OperationResult.ok(f"Advanced to round {session.current_round}", new_round=session.current_round)

    # Grading
    def add_grading(self, session_id: str, round_id: str, grading: RoundGrading) -> OperationResult:
        session = self.store.get(session_id)
        if session is None:
            return OperationResult.not_found()
        rnd = session.find_round(round_id)
        if rnd is None:
            return OperationResult.not_found("Round")
        if rnd.grading is not None:
            return OperationResult.failure("Round has already been graded")
        if grading.round_type != rnd.type:
            return OperationResult.failure(f"Grading for {grading.round_type} cannot be attached to a {rnd.type} round")

        rnd.grading = grading
        self._save(session)
        return OperationResult.ok("Grading added successfully", round=rnd)

    def set_final_grading(self, session_id: str, final_grading: Grading) -> OperationResult:
        session = self.store.get(session_id)
        if session is None:
            return OperationResult.not_found()
        if session.current_round < settings.NUM_ROUNDS:
            return OperationResult.failure("Final grading requires the debate to reach the closing round")

        session.final_grading = final_grading
        session.is_complete = True
        self._save(session)
        return OperationResult.ok("Final grading set successfully")

    # Validation
    def validate_word_count(self, text: str) -> OperationResult:
        return validate_word_count(text, self.word_cap)

    @staticmethod
    def get_word_count(text: str) -> int:
        return word_count(text)

    # Internal helpers
    def _check_can_append(self, session: Session) -> Optional[OperationResult]:
        if session.is_complete:
            return OperationResult.failure("Debate session is already complete")
        if len(session.rounds) >= session.current_round:
            return OperationResult.failure(
                f"Round {session.current_round} already has a response; advance the round first"
            )
        return None

    def _save(self, session: Session) -> None:
        session.touch()
        self.store.update(session)
