"""Debate coordinator: runs one user submission through the round engine.

submit -> word cap -> record round -> opponent reply (not on closing)
       -> advance -> on completion grade every round and set the final score.
"""
from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from debate_ai.agents.judge import JudgeAgent
from debate_ai.agents.opponent import OpponentAgent
from debate_ai.models.schemas import OperationResult, SubmitResult, opposite_side
from debate_ai.utils.debate_manager import DebateManager
from debate_ai.utils.grading import build_final_grading, gradings_by_type
from debate_ai.utils.logger import DebateLogger


class DebateCoordinator:
    """Coordinates the manager, the opponent, and the judge for each submission.

    Submissions to the same session are mutually exclusive: a second caller
    arriving while one is in flight gets a `conflict` result.
    """

    def __init__(
        self,
        manager: DebateManager,
        opponent: OpponentAgent,
        judge: JudgeAgent,
        event_log: Optional[DebateLogger] = None,
    ) -> None:
        self.manager = manager
        self.opponent = opponent
        self.judge = judge
        self.event_log = event_log or DebateLogger("debate_ai.debate_coordinator")
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # Public API
    def submit_round(self, session_id: str, response: str) -> SubmitResult:
        # Locks exist only for live sessions
        rejection = self._check_open(session_id)
        if rejection is not None:
            return rejection

        with self._session_lock(session_id) as acquired:
            if not acquired:
                return SubmitResult(
                    success=False,
                    message="Another submission for this session is in progress",
                    error="conflict",
                )
            result = self._submit_locked(session_id, response)
        if result.is_complete or result.error == "not_found":
            self._drop_lock(session_id)
        return result

    def expire_session(self, session_id: str) -> OperationResult:
        result = self.manager.expire_session(session_id)
        self._drop_lock(session_id)
        return result

    # Internal helpers
    def _submit_locked(self, session_id: str, response: str) -> SubmitResult:
        start = time.time()
        rejection = self._check_open(session_id)
        if rejection is not None:
            return rejection
        session = self.manager.get_session(session_id)

        round_number = session.current_round
        round_type = self.manager.get_current_round_type(round_number)
        user_result = self.manager.submit_user_response(session_id, response)
        if not user_result.success:
            return SubmitResult(success=False, message=user_result.message, error=user_result.error, session=session)
        rnd = user_result.round
        assert rnd is not None
        self.event_log.log(
            "INFO", "User response submitted", {"session_id": session_id, "round_type": round_type, "round_number": round_number}
        )

        if round_type != "closing":
            if round_type == "constructive":
                reply = self.opponent.generate_constructive(
                    session.refined_topic, opposite_side(session.user_side), self.manager.word_cap
                )
            else:
                reply = self.opponent.generate_counter(
                    session.refined_topic, session.user_side, response, self.manager.word_cap
                )
            self.manager.add_ai_response(session_id, rnd.id, reply.argument, used_fallback=reply.used_fallback)
            self.event_log.log(
                "INFO",
                "AI response generated and added",
                {"session_id": session_id, "round_type": round_type, "used_fallback": reply.used_fallback},
            )

        advance = self.manager.advance_round(session_id)
        session = self.manager.get_session(session_id)
        if session.is_complete:
            self._grade_debate(session_id)
            session = self.manager.get_session(session_id)
        rnd = session.find_round(rnd.id) or rnd

        self.event_log.log(
            "INFO", "Round processed", {"session_id": session_id, "round_type": round_type, "time": round(time.time() - start, 2)}
        )
        return SubmitResult(
            success=True,
            message="Response submitted successfully",
            round=rnd,
            session=session,
            next_round=advance.new_round,
            is_complete=session.is_complete,
            final_grading=session.final_grading,
        )

    def _grade_debate(self, session_id: str) -> None:
        session = self.manager.get_session(session_id)
        assert session is not None
        self.event_log.log("INFO", "Debate complete, generating final grading", {"session_id": session_id})

        for rnd in session.rounds:
            if rnd.user_response and rnd.grading is None:
                grading = self.judge.grade_response(
                    rnd.type,
                    session.refined_topic,
                    session.user_side,
                    rnd.user_response,
                    rnd.ai_response,
                )
                self.manager.add_grading(session_id, rnd.id, grading)

        final = build_final_grading(gradings_by_type(session.rounds))
        self.manager.set_final_grading(session_id, final)
        self.event_log.log(
            "INFO",
            "Final grading completed",
            {"session_id": session_id, "final_score": final.final_score, "used_fallback": final.used_fallback},
        )

    def _check_open(self, session_id: str) -> Optional[SubmitResult]:
        session = self.manager.get_session(session_id)
        if session is None:
            return SubmitResult(success=False, message="Debate session not found", error="not_found")
        if session.is_complete:
            return SubmitResult(success=False, message="Debate session is already complete", error="validation", session=session)
        return None

    def _drop_lock(self, session_id: str) -> None:
        with self._locks_guard:
            self._locks.pop(session_id, None)

    @contextmanager
    def _session_lock(self, session_id: str) -> Iterator[bool]:
        with self._locks_guard:
            lock = self._locks.setdefault(session_id, threading.Lock())
        acquired = lock.acquire(blocking=False)
        try:
            yield acquired
        finally:
            if acquired:
                lock.release()
