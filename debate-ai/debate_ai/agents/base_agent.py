"""Base agent interface and shared utilities for model-backed agents."""
from __future__ import annotations

import math
import re
from abc import ABC
from typing import Any, Optional

from debate_ai.config import settings
from debate_ai.utils.logger import DebateLogger
from debate_ai.utils.ollama_client import OllamaClient


class BaseAgent(ABC):
    """Abstract base class for agents that call the language model.

    Every agent can run without a client (fallback-only mode). Subclasses
    catch transport errors at their public boundary and substitute a
    deterministic fallback instead of raising.
    """

    log_name = "debate_ai.agents"

    def __init__(self, client: Optional[Any] = None, event_log: Optional[DebateLogger] = None) -> None:
        self.event_log = event_log or DebateLogger(self.log_name)
        if client is not None:
            self.client = client
        elif settings.USE_FALLBACK:
            self.client = None
            self.event_log.log("WARN", f"{type(self).__name__}: fallback mode enabled; model calls disabled")
        else:
            self.client = OllamaClient(model_name=settings.MODEL_NAME, event_log=self.event_log)

    @property
    def available(self) -> bool:
        return self.client is not None

    # Shared utilities
    @staticmethod
    def _tokens_for(word_limit: int) -> int:
        # Headroom so the model can finish its last sentence before truncation
        return int(math.ceil(word_limit * settings.TOKENS_PER_WORD)) + 40

    @staticmethod
    def _clean_response(text: str) -> str:
        """Normalize whitespace and strip code fences/quotes that models sometimes add."""
        if not isinstance(text, str):
            return ""
        t = text.strip()
        t = re.sub(r"^```[a-zA-Z]*\n|```$", "", t).strip()
        if (t.startswith("\"") and t.endswith("\"")) or (t.startswith("'") and t.endswith("'")):
            t = t[1:-1].strip()
        # Normalize internal whitespace but keep newlines
        t = re.sub(r"[ \t]+", " ", t)
        return t
