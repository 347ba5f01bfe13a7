"""Tests for the opponent, judge, and topic validator agents.

The model is replaced by scripted and failing clients, so every adapter
path (model output, truncation, parse failure, unavailability) is covered.

Run with:
  python -m unittest debate-ai/tests/test_agents.py
"""
from __future__ import annotations

import json
import sys
import unittest
from pathlib import Path

import httpx
import ollama


ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from fake_clients import FailingClient, ScriptedClient, quiet_logger, sentence_words

from debate_ai.agents.judge import JudgeAgent
from debate_ai.agents.opponent import FALLBACK_ARGUMENTS, FALLBACK_GIBBERISH_ARGUMENTS, OpponentAgent
from debate_ai.agents.topic_validator import TopicValidator
from debate_ai.utils.ollama_client import OllamaClient
from debate_ai.utils.parsing import ParseError, Parsed
from debate_ai.utils.word_cap import word_count


TOPIC = "Schools should require uniforms."


def offline(agent_cls):
    agent = agent_cls(client=FailingClient(), event_log=quiet_logger())
    agent.client = None
    return agent


class TestOpponentAgent(unittest.TestCase):
    def test_model_argument_returned_clean(self):
        client = ScriptedClient('"Uniforms erase individuality and cost families money they do not have."')
        agent = OpponentAgent(client=client, event_log=quiet_logger())
        result = agent.generate_constructive(TOPIC, "con", 180)
        self.assertFalse(result.used_fallback)
        self.assertEqual(result.argument, "Uniforms erase individuality and cost families money they do not have.")
        self.assertIn("opposing", client.calls[0]["prompt"])

    def test_overlong_model_output_is_truncated(self):
        client = ScriptedClient(sentence_words(400))
        agent = OpponentAgent(client=client, event_log=quiet_logger())
        result = agent.generate_counter(TOPIC, "pro", "Uniforms help focus.", 180)
        self.assertFalse(result.used_fallback)
        self.assertLessEqual(word_count(result.argument), 180)

    def test_counter_prompt_includes_user_argument(self):
        client = ScriptedClient("A measured reply that addresses the point directly.")
        agent = OpponentAgent(client=client, event_log=quiet_logger())
        agent.generate_counter(TOPIC, "pro", "Uniforms build school identity.", 180)
        self.assertIn("Uniforms build school identity.", client.calls[0]["prompt"])
        self.assertIn("con side", client.calls[0]["system_prompt"])

    def test_failure_falls_back_deterministically(self):
        failing = FailingClient(TimeoutError("Generation exceeded 60s"))
        agent = OpponentAgent(client=failing, event_log=quiet_logger())
        first = agent.generate_counter(TOPIC, "pro", "Uniforms make mornings easier for every family.", 180)
        second = agent.generate_counter(TOPIC, "pro", "Uniforms make mornings easier for every family.", 180)
        self.assertTrue(first.used_fallback)
        self.assertEqual(first.argument, second.argument)
        self.assertTrue(first.argument)
        self.assertEqual(failing.calls, 2)

    def test_empty_model_output_falls_back(self):
        agent = OpponentAgent(client=ScriptedClient("   "), event_log=quiet_logger())
        self.assertTrue(agent.generate_constructive(TOPIC, "pro", 180).used_fallback)

    def test_fallback_respects_word_limit(self):
        agent = offline(OpponentAgent)
        result = agent.generate_constructive(TOPIC, "con", 12)
        self.assertTrue(result.used_fallback)
        self.assertLessEqual(word_count(result.argument), 12)

    def test_fallback_matches_side_and_input_quality(self):
        agent = offline(OpponentAgent)
        normal = agent.fallback_argument(TOPIC, "con", "Uniforms reduce bullying in most schools today.", 180)
        mashed = agent.fallback_argument(TOPIC, "con", "asdfgh asdfgh", 180)
        subject = "schools should require uniforms"
        self.assertIn(normal, [t.format(subject=subject) for t in FALLBACK_ARGUMENTS["con"]])
        self.assertIn(mashed, [t.format(subject=subject) for t in FALLBACK_GIBBERISH_ARGUMENTS["con"]])


class TestJudgeAgent(unittest.TestCase):
    def test_parses_scores_and_computes_subtotal(self):
        payload = {"scores": {"clarity_structure": 5, "evidence_reasoning": 4, "framing": 3}, "feedback": "Solid."}
        client = ScriptedClient(json.dumps(payload))
        judge = JudgeAgent(client=client, event_log=quiet_logger())
        grading = judge.grade_response("constructive", TOPIC, "pro", "My case.", "Their case.")
        self.assertFalse(grading.used_fallback)
        self.assertEqual(grading.scores["evidence_reasoning"], 4)
        self.assertAlmostEqual(grading.subtotal, 30 * (10 + 8 + 3) / 25)
        self.assertEqual(grading.feedback, "Solid.")
        self.assertEqual(client.calls[0]["response_format"], "json")
        self.assertEqual(client.calls[0]["temperature"], 0.0)

    def test_fenced_json_with_trailing_comma(self):
        raw = '```json\n{"scores": {"responsiveness": 4, "control": 2,},}\n```'
        judge = JudgeAgent(client=ScriptedClient(raw), event_log=quiet_logger())
        grading = judge.grade_response("cross-ex", TOPIC, "con", "Answers.")
        self.assertFalse(grading.used_fallback)
        self.assertAlmostEqual(grading.subtotal, 6.0)

    def test_missing_criterion_falls_back(self):
        raw = json.dumps({"scores": {"responsiveness": 4}})
        judge = JudgeAgent(client=ScriptedClient(raw), event_log=quiet_logger())
        grading = judge.grade_response("cross-ex", TOPIC, "con", "Answers.")
        self.assertTrue(grading.used_fallback)
        self.assertEqual(grading.subtotal, 6.0)

    def test_non_finite_scores_fall_back(self):
        for raw in (
            '{"scores": {"responsiveness": NaN, "control": Infinity}}',
            '{"scores": {"responsiveness": 4, "control": -Infinity}}',
        ):
            judge = JudgeAgent(client=ScriptedClient(raw), event_log=quiet_logger())
            grading = judge.grade_response("cross-ex", TOPIC, "con", "Answers.")
            self.assertTrue(grading.used_fallback)
            self.assertEqual(grading.subtotal, 6.0)
        self.assertIsInstance(JudgeAgent.parse_grading("cross-ex", '{"responsiveness": NaN, "control": 3}'), ParseError)

    def test_prose_output_falls_back(self):
        judge = JudgeAgent(client=ScriptedClient("I would give this a solid four."), event_log=quiet_logger())
        grading = judge.grade_response("closing", TOPIC, "pro", "Vote for me.")
        self.assertTrue(grading.used_fallback)
        self.assertEqual(set(grading.scores.values()), {3.0})
        self.assertEqual(grading.subtotal, 15.0)

    def test_unreachable_model_falls_back(self):
        judge = JudgeAgent(client=FailingClient(), event_log=quiet_logger())
        grading = judge.grade_response("rebuttal", TOPIC, "pro", "Rebuttal.")
        self.assertTrue(grading.used_fallback)
        self.assertEqual(grading.subtotal, 21.0)

    def test_parse_grading_tagged_results(self):
        ok = JudgeAgent.parse_grading("cross-ex", '{"responsiveness": 1, "control": 5}')
        self.assertIsInstance(ok, Parsed)
        self.assertEqual(ok.data["scores"], {"responsiveness": 1.0, "control": 5.0})
        bad = JudgeAgent.parse_grading("cross-ex", '{"scores": {"responsiveness": "high", "control": 5}}')
        self.assertIsInstance(bad, ParseError)
        self.assertIn("responsiveness", bad.reason)

    def test_unknown_round_type(self):
        judge = offline(JudgeAgent)
        with self.assertRaises(ValueError):
            judge.grade_response("opening", TOPIC, "pro", "text")


class TestTopicValidator(unittest.TestCase):
    def test_model_verdict_used(self):
        client = ScriptedClient('{"valid": false, "reason": "This is a factual question."}')
        validator = TopicValidator(client=client, event_log=quiet_logger())
        result = validator.validate_topic("Is water wet?")
        self.assertFalse(result.valid)
        self.assertFalse(result.used_fallback)
        self.assertEqual(result.reason, "This is a factual question.")

    def test_bad_model_output_uses_heuristic(self):
        validator = TopicValidator(client=ScriptedClient('{"valid": "yes"}'), event_log=quiet_logger())
        result = validator.validate_topic(TOPIC)
        self.assertTrue(result.used_fallback)
        self.assertTrue(result.valid)

    def test_heuristic_rules(self):
        validator = offline(TopicValidator)
        self.assertFalse(validator.validate_topic("Uniforms").valid)
        self.assertIn("too short", validator.validate_topic("Uniforms").reason)
        self.assertFalse(validator.validate_topic("x" * 201).valid)
        self.assertFalse(validator.validate_topic("Pizza has cheese on top today").valid)
        self.assertTrue(validator.validate_topic("Should homework be banned in primary schools?").valid)
        self.assertTrue(validator.validate_topic(TOPIC).used_fallback)


class _FakeSDK:
    def __init__(self, chunks=None, error=None):
        self.chunks = chunks or []
        self.error = error
        self.kwargs = None

    def generate(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return iter(self.chunks)


class TestOllamaClient(unittest.TestCase):
    def make(self, sdk):
        client = OllamaClient("test-model", timeout_seconds=5, event_log=quiet_logger())
        client._client = sdk
        return client

    def test_streamed_chunks_are_joined(self):
        sdk = _FakeSDK([{"response": "Hello "}, {"response": "there."}, {"done": True}])
        text = self.make(sdk).generate("p", "s", temperature=0.7, max_tokens=50, response_format="json")
        self.assertEqual(text, "Hello there.")
        self.assertEqual(sdk.kwargs["options"]["num_predict"], 50)
        self.assertEqual(sdk.kwargs["format"], "json")

    def test_empty_output_raises(self):
        with self.assertRaises(RuntimeError):
            self.make(_FakeSDK([{"done": True}])).generate("p", "s", temperature=0.0, max_tokens=10)

    def test_transport_errors_are_mapped(self):
        cases = [
            (httpx.ConnectError("connection refused"), ConnectionError),
            (httpx.ReadTimeout("read timed out"), TimeoutError),
            (ollama.ResponseError("model 'x' not found", 404), FileNotFoundError),
            (ValueError("CUDA error: out of memory"), MemoryError),
        ]
        for raw, expected in cases:
            with self.assertRaises(expected):
                self.make(_FakeSDK(error=raw)).generate("p", "s", temperature=0.0, max_tokens=10)


if __name__ == "__main__":
    unittest.main(verbosity=2)
