"""Opponent agent: the AI debater that argues the side opposite the user.

Produces a constructive case in round 1 and counter-arguments afterwards.
Every returned argument fits the word limit; when the model is unavailable
or returns nothing usable, a canned side-appropriate argument is used.
"""
from __future__ import annotations

import zlib
from typing import Dict, List, NamedTuple

from debate_ai.config import prompts, settings
from debate_ai.models.schemas import opposite_side
from debate_ai.utils.gibberish import is_gibberish
from debate_ai.utils.word_cap import truncate_to_word_limit, word_count
from .base_agent import BaseAgent


class ArgumentResult(NamedTuple):
    argument: str
    used_fallback: bool
    error: str = ""


FALLBACK_ARGUMENTS: Dict[str, List[str]] = {
    "pro": [
        "While there are valid concerns raised, the benefits of {subject} significantly outweigh the drawbacks. "
        "This approach would lead to positive outcomes for society, the economy, and individual well-being "
        "when implemented thoughtfully with proper safeguards.",
        "The argument presented overlooks several key advantages. Supporting this position would create "
        "opportunities for innovation, improve efficiency, and address current systemic issues that need "
        "urgent attention.",
        "Though the opposing view has merit, evidence suggests that {subject} represents progress and "
        "necessary change. The long-term benefits justify the short-term challenges.",
    ],
    "con": [
        "While the supporting argument raises interesting points, the potential risks and unintended "
        "consequences of {subject} are too significant to ignore. The current system, though imperfect, "
        "provides stability and proven results.",
        "The argument fails to adequately address the practical challenges and costs involved. Alternative "
        "solutions could achieve similar benefits without the associated risks and disruptions.",
        "Despite good intentions, this approach could create more problems than it solves. Historical "
        "precedent shows that such changes often have unforeseen negative impacts on affected communities "
        "and institutions.",
    ],
}

# Used when the user's previous speech is not a recognizable argument
FALLBACK_GIBBERISH_ARGUMENTS: Dict[str, List[str]] = {
    "pro": [
        "My opponent has not offered a coherent argument, so the case for {subject} stands unchallenged. "
        "It delivers clear benefits, and no reason has been given to doubt them.",
        "Without a clear objection on the table, the strongest reading of this debate favors {subject}. "
        "I invite my opponent to state a concrete concern we can weigh.",
    ],
    "con": [
        "My opponent has not presented a coherent argument for {subject}. The burden of proof rests on the "
        "side proposing change, and that burden has not been met.",
        "No clear reasoning has been offered in support of {subject}. Until the benefits are explained and "
        "supported, the risks of change remain the decisive consideration.",
    ],
}


def _subject_phrase(topic: str) -> str:
    subject = topic.strip().rstrip(".?!").strip()
    lowered = subject.lower()
    if lowered.startswith("should "):
        subject = subject[len("should ") :]
    return (subject[:1].lower() + subject[1:]) if subject else "this proposal"


class OpponentAgent(BaseAgent):
    """Argues against the user; `word_limit` bounds every returned argument."""

    log_name = "debate_ai.agents.opponent"

    def generate_constructive(self, topic: str, ai_side: str, word_limit: int = settings.WORD_CAP) -> ArgumentResult:
        """Round 1: the opponent's own opening case, independent of the user's speech."""
        ai_position = "supporting" if ai_side == "pro" else "opposing"
        user_prompt = prompts.CONSTRUCTIVE_PROMPT.format(topic=topic, ai_position=ai_position, word_limit=word_limit)
        return self._generate(topic, ai_side, user_prompt, word_limit, prior_text="")

    def generate_counter(
        self,
        topic: str,
        user_side: str,
        user_argument: str,
        word_limit: int = settings.WORD_CAP,
    ) -> ArgumentResult:
        """Rounds 2-3: a counter-argument aimed at the user's latest speech."""
        ai_side = opposite_side(user_side)
        user_prompt = prompts.COUNTER_PROMPT.format(
            user_position="supporting" if user_side == "pro" else "opposing",
            ai_position="supporting" if ai_side == "pro" else "opposing",
            user_argument=user_argument,
            word_limit=word_limit,
        )
        return self._generate(topic, ai_side, user_prompt, word_limit, prior_text=user_argument)

    def fallback_argument(self, topic: str, ai_side: str, prior_text: str, word_limit: int) -> str:
        """Pick a canned argument deterministically from the topic and the user's speech."""
        degenerate = bool(prior_text) and is_gibberish(prior_text)
        pool = (FALLBACK_GIBBERISH_ARGUMENTS if degenerate else FALLBACK_ARGUMENTS)[ai_side]
        index = zlib.crc32(f"{topic}\x00{prior_text}".encode("utf-8")) % len(pool)
        text = pool[index].format(subject=_subject_phrase(topic))
        return truncate_to_word_limit(text, word_limit)

    def _generate(self, topic: str, ai_side: str, user_prompt: str, word_limit: int, prior_text: str) -> ArgumentResult:
        if not self.available:
            return self._fallback(topic, ai_side, prior_text, word_limit, "Model unavailable")

        ai_position = "supporting" if ai_side == "pro" else "opposing"
        system_prompt = prompts.OPPONENT_SYSTEM_PROMPT.format(
            ai_side=ai_side, ai_position=ai_position, topic=topic, word_limit=word_limit
        )
        try:
            raw = self.client.generate(
                prompt=user_prompt,
                system_prompt=system_prompt,
                temperature=settings.TEMPERATURES["opponent"],
                max_tokens=self._tokens_for(word_limit),
            )
        except Exception as e:
            self.event_log.log_error(e, {"context": "opponent-generation", "topic": topic[:50], "ai_side": ai_side})
            return self._fallback(topic, ai_side, prior_text, word_limit, str(e))

        text = self._clean_response(raw)
        if not text:
            return self._fallback(topic, ai_side, prior_text, word_limit, "Empty response from model")

        wc = word_count(text)
        if wc > word_limit:
            self.event_log.log("WARN", "Model response exceeds word limit; truncating", {"word_count": wc, "word_limit": word_limit})
            text = truncate_to_word_limit(text, word_limit)

        self.event_log.log("INFO", "Opponent argument generated", {"ai_side": ai_side, "word_count": word_count(text)})
        return ArgumentResult(argument=text, used_fallback=False)

    def _fallback(self, topic: str, ai_side: str, prior_text: str, word_limit: int, reason: str) -> ArgumentResult:
        text = self.fallback_argument(topic, ai_side, prior_text, word_limit)
        self.event_log.log("INFO", "Generated fallback argument", {"ai_side": ai_side, "word_count": word_count(text), "reason": reason})
        return ArgumentResult(argument=text, used_fallback=True, error=f"Used fallback: {reason}")
