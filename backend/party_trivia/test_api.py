from __future__ import annotations

import random
from unittest import TestCase, mock

from fastapi.testclient import TestClient

from . import main
from .config import Settings
from .events import EventStore
from .game import GameController
from .models import Question
from .questions import QuestionBank


class RoomApiTests(TestCase):
    def setUp(self) -> None:
        bank = QuestionBank(
            {
                "History": [
                    Question(id=f"h{i}", text=f"History {i}", options=["a", "b", "c"], correct_index=2)
                    for i in range(5)
                ]
            }
        )
        self.controller = GameController(
            bank=bank,
            settings=Settings(CATEGORIES=["History"], ANSWER_WINDOW_SEC=60),
            events=EventStore(),
            rng=random.Random(5),
        )
        patcher = mock.patch.object(main, "controller", self.controller)
        patcher.start()
        self.addCleanup(patcher.stop)
        # one event loop for the whole test so round timers outlive a request
        self.client = TestClient(main.app)
        self.client.__enter__()
        self.addCleanup(self.client.__exit__, None, None, None)

    def _room(self) -> str:
        resp = self.client.post("/api/rooms")
        self.assertEqual(resp.status_code, 200)
        room_id = resp.json()["room_id"]
        for pid, nick in (("a", "Ann"), ("b", "Bo")):
            resp = self.client.post(f"/api/rooms/{room_id}/join", json={"participant_id": pid, "nickname": nick})
            self.assertEqual(resp.status_code, 200)
        return room_id

    def test_play_a_round_over_http(self):
        room_id = self._room()

        resp = self.client.post(f"/api/rooms/{room_id}/start")
        self.assertEqual(resp.status_code, 200)
        rnd = resp.json()["round"]
        self.assertEqual(rnd["index"], 1)
        self.assertEqual(rnd["kind"], "trivia")
        self.assertNotIn("correct_index", rnd["question"])

        resp = self.client.post(f"/api/rooms/{room_id}/answer", json={"participant_id": "a", "option": 2})
        self.assertEqual(resp.json(), {"correct": True, "attempt": 1, "can_retry": False, "score_delta": 1.0, "score": 1.0})

        resp = self.client.post(f"/api/rooms/{room_id}/lifeline", json={"participant_id": "b", "kind": "fifty_fifty"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["kind"], "fifty_fifty")
        self.assertEqual(len(resp.json()["remaining_options"]), 2)

        resp = self.client.post(f"/api/rooms/{room_id}/lifeline", json={"participant_id": "b", "kind": "ask_audience"})
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["error"], "lifeline_already_used")

        resp = self.client.get(f"/api/rooms/{room_id}/leaderboard")
        self.assertEqual(resp.json(), {"leaderboard": {"Ann": 1.0, "Bo": 0.0}})

        resp = self.client.get(f"/api/rooms/{room_id}")
        body = resp.json()
        self.assertEqual(body["state"], "round_in_progress")
        self.assertEqual(body["round_counter"], 1)
        self.assertEqual([p["nickname"] for p in body["participants"]], ["Ann", "Bo"])

        resp = self.client.post(f"/api/rooms/{room_id}/advance")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["error"], "invalid_state")

    def test_events_can_be_polled_after_a_sequence(self):
        room_id = self._room()
        self.client.post(f"/api/rooms/{room_id}/start")

        body = self.client.get(f"/api/rooms/{room_id}/events").json()
        types = [e["payload"]["type"] for e in body["events"]]
        self.assertEqual(types, ["room_reset", "players_update", "players_update", "round_started"])
        self.assertEqual(body["latest_seq"], 4)

        body = self.client.get(f"/api/rooms/{room_id}/events", params={"after": 3}).json()
        self.assertEqual([e["seq"] for e in body["events"]], [4])

        body = self.client.get(f"/api/rooms/{room_id}/events", params={"after": 4}).json()
        self.assertEqual(body, {"events": [], "latest_seq": 4})

    def test_errors_are_reported_to_the_caller(self):
        resp = self.client.get("/api/rooms/NOPE")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["error"], "room_not_found")

        room_id = self._room()
        resp = self.client.post(f"/api/rooms/{room_id}/answer", json={"participant_id": "a", "option": 2})
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["error"], "no_active_question")

        resp = self.client.post(f"/api/rooms/{room_id}/join", json={"participant_id": "c", "nickname": "Bo"})
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["error"], "nickname_taken")

        # nothing about rejected requests reaches the room's event log
        body = self.client.get(f"/api/rooms/{room_id}/events").json()
        self.assertEqual(len(body["events"]), 3)

    def test_close_room(self):
        room_id = self._room()
        self.assertEqual(self.client.delete(f"/api/rooms/{room_id}").json(), {"ok": True})
        self.assertEqual(self.client.get(f"/api/rooms/{room_id}").status_code, 404)
