"""Topic validator: decides whether a proposed motion is debatable."""
from __future__ import annotations

import re
from typing import Any, Dict

from debate_ai.config import prompts, settings
from debate_ai.models.schemas import TopicValidation
from debate_ai.utils.parsing import ParseError, Parsed, ParseResult, parse_with
from .base_agent import BaseAgent


_DEBATABLE_WORDS = re.compile(
    r"\b(should|ought|must|better|worse|right|wrong|good|bad|allow|ban|require)\b", re.IGNORECASE
)


class TopicValidator(BaseAgent):
    log_name = "debate_ai.agents.topic"

    def validate_topic(self, topic: str) -> TopicValidation:
        self.event_log.log("INFO", "Validating topic", {"topic": topic[:50]})
        if not self.available:
            return self.fallback_validation(topic)

        try:
            raw = self.client.generate(
                prompt=prompts.TOPIC_VALIDATION_PROMPT.format(topic=topic),
                system_prompt="You are a debate judge. Reply only with JSON.",
                temperature=settings.TEMPERATURES["topic"],
                max_tokens=settings.MAX_TOKENS_TOPIC,
                response_format="json",
            )
        except Exception as e:
            self.event_log.log_error(e, {"context": "topic-validation", "topic": topic[:50]})
            return self.fallback_validation(topic)

        parsed = parse_with(raw, _validate_payload)
        if isinstance(parsed, ParseError):
            self.event_log.log("ERROR", "Failed to parse topic validation response", {"reason": parsed.reason})
            return self.fallback_validation(topic)
        return TopicValidation(valid=parsed.data["valid"], reason=parsed.data["reason"])

    def fallback_validation(self, topic: str) -> TopicValidation:
        """Rule-based check used when the model cannot answer."""
        t = topic.strip()
        lowered = t.lower()
        valid_length = 15 <= len(t) <= 200
        multiple_words = len(t.split()) >= 3
        question_like = "?" in t or lowered.startswith(("should", "is", "do"))
        debatable = bool(_DEBATABLE_WORDS.search(t))

        if not valid_length:
            reason = (
                "Topic is too short. Please provide more detail for a meaningful debate."
                if len(t) < 15
                else "Topic is too long. Please keep it concise for focused debate."
            )
        elif not multiple_words:
            reason = "Topic needs more detail. Please provide a complete question or statement."
        elif not (question_like or debatable):
            reason = "Topic should be debatable. Try framing it as a question or using words like 'should', 'ought', etc."
        else:
            reason = f"\"{t}\" appears to be a suitable debate topic."

        valid = valid_length and multiple_words and (question_like or debatable)
        self.event_log.log("INFO", "Generated fallback topic validation", {"valid": valid})
        return TopicValidation(valid=valid, reason=reason, used_fallback=True)


def _validate_payload(data: Dict[str, Any]) -> ParseResult:
    if isinstance(data.get("valid"), bool) and isinstance(data.get("reason"), str):
        return Parsed({"valid": data["valid"], "reason": data["reason"]})
    return ParseError("expected boolean 'valid' and string 'reason'")
