"""HTTP surface tests using FastAPI's TestClient with scripted model clients."""
from __future__ import annotations

import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock


ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from fastapi.testclient import TestClient

from fake_clients import ScriptedClient, quiet_logger, sentence_words, words

from debate_ai.agents.judge import JudgeAgent
from debate_ai.agents.opponent import OpponentAgent
from debate_ai.agents.topic_validator import TopicValidator
from debate_ai.app import create_app
from debate_ai.config import settings
from debate_ai.utils.debate_coordinator import DebateCoordinator
from debate_ai.utils.debate_manager import DebateManager


TOPIC = "Social media platforms should verify the age of every user."


class TestDebateAPI(unittest.TestCase):
    def setUp(self) -> None:
        log = quiet_logger()
        self.manager = DebateManager(word_cap=180, event_log=log)
        opponent = OpponentAgent(client=ScriptedClient("Verification threatens privacy for every adult online."), event_log=log)
        judge = JudgeAgent(client=ScriptedClient("not json at all"), event_log=log)
        validator = TopicValidator(client=ScriptedClient('{"valid": true, "reason": "Two clear sides."}'), event_log=log)
        coordinator = DebateCoordinator(self.manager, opponent, judge, event_log=log)
        self.client = TestClient(create_app(self.manager, coordinator, validator, log))

    def create(self, side: str = "pro") -> str:
        res = self.client.post("/api/debate/create", json={"topic": TOPIC, "refined_topic": TOPIC, "user_side": side})
        self.assertEqual(res.status_code, 200)
        return res.json()["session"]["id"]

    def test_ping_and_info(self):
        self.assertEqual(self.client.get("/api/ping").json(), {"message": "pong"})
        info = self.client.get("/api/info").json()
        self.assertEqual(info["status"], "running")
        self.assertEqual(info["word_cap"], 180)
        self.assertTrue(info["ai_available"])

    def test_validate_topic(self):
        res = self.client.post("/api/validate-topic", json={"topic": TOPIC})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["valid"], True)
        self.assertEqual(res.json()["reason"], "Two clear sides.")

    def test_blank_topic_is_bad_request(self):
        res = self.client.post("/api/validate-topic", json={"topic": "   "})
        self.assertEqual(res.status_code, 400)
        self.assertFalse(res.json()["success"])
        self.assertIn("required", res.json()["message"])

    def test_create_session(self):
        res = self.client.post("/api/debate/create", json={"topic": TOPIC, "refined_topic": TOPIC, "user_side": "CON"})
        body = res.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["session"]["user_side"], "con")
        self.assertEqual(body["session"]["current_round"], 1)
        self.assertEqual(body["session"]["rounds"], [])

    def test_invalid_side_rejected(self):
        res = self.client.post("/api/debate/create", json={"topic": TOPIC, "refined_topic": TOPIC, "user_side": "maybe"})
        self.assertEqual(res.status_code, 400)

    def test_get_session(self):
        session_id = self.create()
        res = self.client.get(f"/api/debate/{session_id}")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["session"]["id"], session_id)

    def test_unknown_session_is_404(self):
        res = self.client.get("/api/debate/does-not-exist")
        self.assertEqual(res.status_code, 404)
        self.assertFalse(res.json()["success"])
        submit = self.client.post("/api/debate/does-not-exist/submit", json={"response": sentence_words(20)})
        self.assertEqual(submit.status_code, 404)

    def test_submit_round(self):
        session_id = self.create()
        res = self.client.post(f"/api/debate/{session_id}/submit", json={"response": sentence_words(50)})
        body = res.json()
        self.assertEqual(res.status_code, 200)
        self.assertEqual(body["next_round"], 2)
        self.assertEqual(body["round"]["type"], "constructive")
        self.assertTrue(body["round"]["ai_response"])
        self.assertFalse(body["is_complete"])
        self.assertIsNone(body["final_grading"])

    def test_over_cap_submission_is_400(self):
        session_id = self.create()
        res = self.client.post(f"/api/debate/{session_id}/submit", json={"response": words(300)})
        self.assertEqual(res.status_code, 400)
        self.assertIn("180", res.json()["message"])
        self.assertEqual(self.manager.get_session(session_id).rounds, [])

    def test_full_debate_over_http(self):
        session_id = self.create("con")
        for _ in range(4):
            body = self.client.post(f"/api/debate/{session_id}/submit", json={"response": sentence_words(40)}).json()
        self.assertTrue(body["is_complete"])
        final = body["final_grading"]
        # The judge client returns prose, so every category falls back to 3/5
        self.assertTrue(final["used_fallback"])
        self.assertEqual(final["final_score"], 60.0)
        self.assertEqual(final["cross_ex"]["subtotal"], 6.0)
        self.assertEqual(body["session"]["final_grading"]["final_score"], 60.0)

        listing = self.client.get("/api/debates").json()
        self.assertEqual(listing[0]["session_id"], session_id)
        self.assertEqual(listing[0]["final_score"], 60.0)

    def test_client_contract_endpoints(self):
        res = self.client.post("/api/start-debate", json={"topic": TOPIC, "position": "against", "starting_player": "user"})
        session = res.json()["session"]
        self.assertEqual(session["user_side"], "con")

        sub = self.client.post("/api/submit-argument", json={"session_id": session["id"], "argument": sentence_words(30)})
        self.assertEqual(sub.status_code, 200)
        self.assertEqual(sub.json()["session"]["current_round"], 2)

        ai = self.client.post("/api/ai-response", json={"session_id": session["id"]})
        self.assertTrue(ai.json()["session"]["rounds"][0]["ai_response"])

        missing = self.client.post("/api/ai-response", json={"session_id": "nope"})
        self.assertEqual(missing.status_code, 404)

    def test_client_contract_accepts_camel_case_keys(self):
        res = self.client.post("/api/start-debate", json={"topic": TOPIC, "position": "for", "startingPlayer": "ai"})
        session_id = res.json()["session"]["id"]

        sub = self.client.post("/api/submit-argument", json={"sessionId": session_id, "argument": sentence_words(30)})
        self.assertEqual(sub.status_code, 200)
        ai = self.client.post("/api/ai-response", json={"sessionId": session_id})
        self.assertEqual(ai.status_code, 200)
        self.assertEqual(len(ai.json()["session"]["rounds"]), 1)

        created = self.client.post("/api/debate/create", json={"topic": TOPIC, "refinedTopic": TOPIC, "userSide": "pro"})
        self.assertEqual(created.status_code, 200)
        self.assertEqual(created.json()["session"]["refined_topic"], TOPIC)

    def test_expire_session(self):
        session_id = self.create()
        res = self.client.delete(f"/api/debate/{session_id}")
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.json()["success"])
        self.assertEqual(self.client.get(f"/api/debate/{session_id}").status_code, 404)
        self.assertEqual(self.client.delete(f"/api/debate/{session_id}").status_code, 404)

    def test_favicon_has_no_content(self):
        self.assertEqual(self.client.get("/favicon.ico").status_code, 204)


class TestClientBuildServing(unittest.TestCase):
    def test_unknown_client_paths_serve_index(self):
        with tempfile.TemporaryDirectory() as tmp:
            Path(tmp, "index.html").write_text("<html>debate client</html>", encoding="utf-8")
            log = quiet_logger()
            manager = DebateManager(event_log=log)
            coordinator = DebateCoordinator(
                manager,
                OpponentAgent(client=ScriptedClient("reply"), event_log=log),
                JudgeAgent(client=ScriptedClient("{}"), event_log=log),
                event_log=log,
            )
            validator = TopicValidator(client=ScriptedClient("{}"), event_log=log)
            with mock.patch.object(settings, "CLIENT_BUILD_DIR", tmp):
                client = TestClient(create_app(manager, coordinator, validator, log))

            page = client.get("/history")
            self.assertEqual(page.status_code, 200)
            self.assertIn("debate client", page.text)
            self.assertEqual(client.get("/api/no-such-endpoint").status_code, 404)
            self.assertEqual(client.get("/api/ping").json(), {"message": "pong"})


if __name__ == "__main__":
    unittest.main(verbosity=2)
