"""Ollama API client wrapper used by every agent.

Implements:
- Streamed generation with a hard wall-clock timeout
- A bounded number of attempts (one by default; callers fall back instead)
- Logging of prompt/response length and latency
- Approximate token counting (1 word ≈ 1.33 tokens)
- Mapping of transport failures onto built-in exception types

Usage:
    from debate_ai.utils.ollama_client import OllamaClient
    client = OllamaClient("llama3:8b")
    text = client.generate(prompt, system_prompt, temperature=0.7, max_tokens=260)
"""
from __future__ import annotations

import math
import time
from typing import Any, Dict, Optional

import httpx
import ollama

from debate_ai.config import settings
from debate_ai.utils.logger import DebateLogger
from debate_ai.utils.word_cap import word_count


class OllamaClient:
    """Thin client over the `ollama` Python SDK with a timeout and safeguards.

    Parameters:
        model_name: Name of the local model in Ollama (e.g., "llama3:8b").
        host: Base URL of the Ollama server.
        timeout_seconds: Hard limit for a single generation.
        max_attempts: Attempts before the last error is raised.
    """

    def __init__(
        self,
        model_name: str = settings.MODEL_NAME,
        host: str = settings.OLLAMA_HOST,
        timeout_seconds: float = settings.LLM_TIMEOUT_SECONDS,
        max_attempts: int = settings.LLM_MAX_ATTEMPTS,
        event_log: Optional[DebateLogger] = None,
    ) -> None:
        self.model_name = model_name
        self._timeout_seconds = float(timeout_seconds)
        self._max_attempts = max(1, int(max_attempts))
        self._client = ollama.Client(host=host, timeout=self._timeout_seconds)
        self.event_log = event_log or DebateLogger("debate_ai.ollama_client")

    def generate(
        self,
        prompt: str,
        system_prompt: str,
        temperature: float,
        max_tokens: int,
        extra_options: Optional[Dict[str, Any]] = None,
        response_format: Optional[str] = None,
    ) -> str:
        """Generate text from the model.

        Args:
            prompt: The user/content prompt to send to the model.
            system_prompt: The system instruction (role) to condition the model.
            temperature: Sampling temperature.
            max_tokens: Approximate maximum tokens to generate (`num_predict`).
            extra_options: Additional Ollama model options.
            response_format: Ollama output format, e.g. "json".

        Returns:
            The model's generated text.

        Raises:
            TimeoutError: If generation exceeds the configured timeout.
            ConnectionError: If the Ollama server is not reachable.
            FileNotFoundError: If the requested model is not available.
            MemoryError: If a VRAM/Out-of-memory condition is detected.
            RuntimeError: For empty or otherwise unclassified errors.
        """

        attempts = 0
        last_error: Optional[Exception] = None
        while attempts < self._max_attempts:
            attempts += 1
            start = time.time()
            try:
                text = self._stream_generate(
                    prompt=prompt,
                    system_prompt=system_prompt,
                    temperature=temperature,
                    max_tokens=max_tokens,
                    extra_options=extra_options,
                    response_format=response_format,
                    start_time=start,
                )
                if not self._validate_response(text):
                    raise RuntimeError("Malformed or empty response from model")

                elapsed = max(time.time() - start, 1e-6)
                tokens = self._approx_tokens(text)
                self.event_log.log(
                    "INFO",
                    "Ollama call ok",
                    {
                        "model": self.model_name,
                        "prompt_words": word_count(prompt),
                        "response_words": word_count(text),
                        "tokens": tokens,
                        "time": round(elapsed, 2),
                        "tps": round(tokens / elapsed, 1),
                    },
                )
                return text

            except TimeoutError:
                self.event_log.log(
                    "ERROR", f"Ollama call timed out after {self._timeout_seconds:.0f}s (attempt {attempts})"
                )
                last_error = TimeoutError(f"Generation exceeded {self._timeout_seconds:.0f}s")
            except Exception as e:
                mapped = self._map_exception(e)
                self.event_log.log(
                    "ERROR", f"Ollama call failed (attempt {attempts}/{self._max_attempts}): {mapped}"
                )
                last_error = mapped

            if attempts < self._max_attempts:
                time.sleep(1.5 * attempts)

        assert last_error is not None
        raise last_error

    # Internal helpers
    def _stream_generate(
        self,
        prompt: str,
        system_prompt: str,
        temperature: float,
        max_tokens: int,
        extra_options: Optional[Dict[str, Any]],
        response_format: Optional[str],
        start_time: float,
    ) -> str:
        """Stream tokens while enforcing a hard timeout by wall clock."""
        text_parts: list[str] = []

        opts: Dict[str, Any] = {
            "temperature": float(temperature),
            "num_predict": int(max_tokens),
        }
        if extra_options:
            opts.update(dict(extra_options))

        kwargs: Dict[str, Any] = {}
        if response_format:
            kwargs["format"] = response_format

        stream = self._client.generate(
            model=self.model_name,
            prompt=prompt,
            system=system_prompt or None,
            options=opts,
            stream=True,
            **kwargs,
        )

        for chunk in stream:
            if (time.time() - start_time) > self._timeout_seconds:
                raise TimeoutError("Ollama generation timeout")

            piece = chunk.get("response")
            if piece:
                text_parts.append(piece)

            if chunk.get("done"):
                break

        return "".join(text_parts).strip()

    @staticmethod
    def _validate_response(response: str) -> bool:
        return isinstance(response, str) and len(response.strip()) > 0

    @staticmethod
    def _approx_tokens(text: str) -> int:
        return int(math.ceil(word_count(text) * settings.TOKENS_PER_WORD))

    @staticmethod
    def _map_exception(exc: Exception) -> Exception:
        """Map raw SDK/transport exceptions to clearer built-in categories."""
        msg = str(exc).lower()

        # Connection refused / server not running
        if isinstance(exc, (httpx.ConnectError, ConnectionError)):
            return ConnectionError("Cannot reach Ollama server. Is it running?")
        if "connection refused" in msg or "failed to establish a new connection" in msg:
            return ConnectionError("Cannot reach Ollama server. Is it running?")

        if isinstance(exc, httpx.TimeoutException):
            return TimeoutError("Ollama request timed out")

        # Model not found / 404
        if isinstance(exc, ollama.ResponseError) and getattr(exc, "status_code", None) == 404:
            return FileNotFoundError("Model not found in Ollama: ensure it's pulled")
        if "model not found" in msg or "no such model" in msg:
            return FileNotFoundError("Model not found in Ollama: ensure it's pulled")

        # VRAM / memory
        if "out of memory" in msg or ("cuda" in msg and "memory" in msg) or "not enough vram" in msg:
            return MemoryError("VRAM exhausted during generation. Try a smaller model or reduce max tokens.")

        if "timeout" in msg:
            return TimeoutError("Ollama request timed out")

        return RuntimeError(str(exc))
