"""Judge agent implementation: grades the user's speech for one round."""
from __future__ import annotations

import json
import math
from typing import Any, Dict, Optional

from debate_ai.config import prompts, settings
from debate_ai.config.rubrics import RUBRICS
from debate_ai.models.schemas import RoundGrading
from debate_ai.utils.grading import build_round_grading, fallback_round_grading
from debate_ai.utils.parsing import ParseError, Parsed, ParseResult, parse_with
from .base_agent import BaseAgent


class JudgeAgent(BaseAgent):
    log_name = "debate_ai.agents.judge"

    def grade_response(
        self,
        round_type: str,
        topic: str,
        user_side: str,
        user_response: str,
        ai_response: Optional[str] = None,
    ) -> RoundGrading:
        """Grade one round of the user's debating against that round's rubric.

        Args:
            round_type: "constructive", "cross-ex", "rebuttal", or "closing".
            topic: The (refined) debate motion.
            user_side: "pro" or "con".
            user_response: The user's speech for the round.
            ai_response: The opponent's reply, given to the judge as context.

        Returns:
            RoundGrading with raw 0-5 scores and the weighted subtotal. When the
            model is unavailable or its output cannot be parsed, every criterion
            receives the fallback score and `used_fallback` is set.
        """
        if round_type not in RUBRICS:
            raise ValueError(f"Unknown round type: {round_type}")

        if not self.available:
            return self._fallback(round_type, "Model unavailable")

        rubric = RUBRICS[round_type]
        criteria_block = "\n".join(
            f"- {c.key} ({c.name}, weight {c.weight}): {c.description}" for c in rubric.criteria
        )
        score_schema = json.dumps({c.key: "<int 0-5>" for c in rubric.criteria})
        system_prompt = prompts.JUDGE_SYSTEM_PROMPT.format(
            topic=topic,
            user_side=user_side,
            round_title=rubric.title,
            criteria_block=criteria_block,
            score_schema=score_schema,
        )
        user_prompt = prompts.JUDGE_USER_PROMPT.format(
            round_title=rubric.title,
            user_response=user_response,
            ai_response=ai_response or "(no reply)",
        )

        try:
            raw = self.client.generate(
                prompt=user_prompt,
                system_prompt=system_prompt,
                temperature=settings.TEMPERATURES["judge"],
                max_tokens=settings.MAX_TOKENS_GRADING,
                response_format="json",
            )
        except Exception as e:
            self.event_log.log_error(e, {"context": "judge-grading", "round_type": round_type})
            return self._fallback(round_type, str(e))

        parsed = self.parse_grading(round_type, raw)
        if isinstance(parsed, ParseError):
            self.event_log.log(
                "ERROR",
                "Failed to parse judge grading; using fallback",
                {"round_type": round_type, "reason": parsed.reason, "raw": str(raw)[:200]},
            )
            return self._fallback(round_type, parsed.reason)

        grading = build_round_grading(
            round_type,
            parsed.data["scores"],
            feedback=parsed.data.get("feedback", ""),
        )
        self.event_log.log("INFO", "Round graded", {"round_type": round_type, "subtotal": grading.subtotal})
        return grading

    @staticmethod
    def parse_grading(round_type: str, text: Any) -> ParseResult:
        """Parse judge output into `{"scores": {...}, "feedback": str}`.

        Every criterion of the round's rubric must be present and numeric;
        values outside 0-5 are clamped later by the aggregator.
        """
        keys = RUBRICS[round_type].criterion_keys

        def _validate(data: Dict[str, Any]) -> ParseResult:
            scores = data.get("scores")
            if not isinstance(scores, dict):
                # Some models flatten the scores into the top-level object
                scores = data
            clean: Dict[str, float] = {}
            for key in keys:
                val = scores.get(key)
                if isinstance(val, bool) or not isinstance(val, (int, float)) or not math.isfinite(val):
                    return ParseError(f"missing or invalid score for {key}")
                clean[key] = float(val)
            feedback = data.get("feedback", "")
            return Parsed({"scores": clean, "feedback": feedback if isinstance(feedback, str) else ""})

        return parse_with(text, _validate)

    def _fallback(self, round_type: str, reason: str) -> RoundGrading:
        self.event_log.log("INFO", "Generated fallback grading", {"round_type": round_type, "reason": reason})
        return fallback_round_grading(round_type)
