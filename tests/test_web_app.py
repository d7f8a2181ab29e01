"""Tests for the Flask operator API."""

import unittest

from poolside.models import GameState
from poolside.services import GameSession, StaticPrompts
from poolside.ui.web_app import create_app


class WebAppTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = GameSession(state=GameState.fresh(), prompts=StaticPrompts())
        app = create_app(self.session)
        app.testing = True
        self.client = app.test_client()
        self.roster = self.session.state.roster
        self.starters = [p.id for p in self.roster[:7]]

    def _start(self):
        return self.client.post("/api/game/start", json={
            "minutes": 8, "starter_ids": self.starters, "swim_off_id": self.starters[1],
        })

    def test_state_endpoint(self) -> None:
        body = self.client.get("/api/state").get_json()
        self.assertTrue(body["success"])
        self.assertEqual(body["state"]["phase"], "setup")
        self.assertEqual(body["state"]["clock"], "8:00")
        self.assertIsNone(body["state"]["pending_substitution"])
        self.assertEqual(body["state"]["active_players"], [])
        self.assertEqual(len(body["state"]["bench_players"]), 8)

    def test_start_game_and_record_goal(self) -> None:
        response = self._start()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()["state"]["phase"], "live")

        response = self.client.post("/api/events", json={"player_id": self.starters[1], "type": "goal"})
        self.assertEqual(response.status_code, 200)
        event = response.get_json()["event"]
        self.assertEqual((event["type"], event["clock"], event["period"]), ("goal", "8:00", 1))

        stats = self.client.get("/api/stats").get_json()["stats"]
        shooter = next(r for r in stats["players"] if r["player_id"] == self.starters[1])
        self.assertEqual(shooter["shot_pct"], "100.0%")
        self.assertEqual(shooter["position"], "FP")
        self.assertEqual(stats["score"], {"msu": 1, "opp": 0})
        self.assertIn("goal_against", stats["actions"]["goalie"])

    def test_rejections_are_400_with_reason(self) -> None:
        response = self.client.post("/api/events", json={"player_id": self.starters[1], "type": "goal"})
        self.assertEqual(response.status_code, 400)
        body = response.get_json()
        self.assertFalse(body["success"])
        self.assertEqual(body["reason"], "not_started")

        response = self.client.post("/api/game/start", json={"starter_ids": self.starters[:5]})
        self.assertEqual(response.get_json()["reason"], "lineup_wrong_size")

    def test_substitution_flow(self) -> None:
        self._start()
        bench = self.roster[7].id
        self.client.post("/api/substitution/start", json={"clock": "6:30"})
        state = self.client.get("/api/state").get_json()["state"]
        self.assertEqual(state["pending_substitution"]["time_sec"], 390)

        self.client.post(f"/api/substitution/out/{self.starters[6]}")
        self.client.post(f"/api/substitution/in/{bench}")
        response = self.client.post("/api/substitution/apply")
        state = response.get_json()["state"]
        self.assertIn(bench, state["active_ids"])
        self.assertEqual(state["time_played"][self.starters[0]], 90)

    def test_event_edit_and_delete(self) -> None:
        self._start()
        event = self.client.post(
            "/api/events/manual", json={"player_id": self.starters[1], "type": "steal", "clock": "5:00"}
        ).get_json()["event"]

        edited = self.client.put(f"/api/events/{event['id']}", json={"type": "turnover"}).get_json()["event"]
        self.assertEqual(edited["type"], "turnover")
        self.assertEqual(self.client.delete(f"/api/events/{event['id']}").status_code, 200)
        self.assertEqual(self.client.delete(f"/api/events/{event['id']}").status_code, 400)

    def test_event_edit_ignores_unknown_body_keys(self) -> None:
        self._start()
        event = self.client.post("/api/events", json={"player_id": self.starters[1], "type": "steal"}).get_json()["event"]

        response = self.client.put(f"/api/events/{event['id']}", json={"event_id": "x", "type": "turnover"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()["event"]["type"], "turnover")

        response = self.client.put(f"/api/events/{event['id']}", json={"period": "second"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["reason"], "invalid_number")

    def test_event_listing_filters(self) -> None:
        self._start()
        shooter, other = self.starters[1], self.starters[2]
        for player_id, kind in ((shooter, "goal"), (other, "steal"), (shooter, "assist")):
            self.client.post("/api/events", json={"player_id": player_id, "type": kind})

        events = self.client.get("/api/events").get_json()["events"]
        self.assertEqual([e["type"] for e in events], ["goal", "steal", "assist"])
        events = self.client.get(f"/api/events?player_id={shooter}").get_json()["events"]
        self.assertEqual([e["type"] for e in events], ["goal", "assist"])
        events = self.client.get("/api/events?limit=2").get_json()["events"]
        self.assertEqual([e["type"] for e in events], ["assist", "steal"])

    def test_situations_timeouts_and_swim_off(self) -> None:
        self._start()
        self.client.post("/api/situations/start_man_up")
        response = self.client.post("/api/situations/start_man_up")
        self.assertEqual(response.get_json()["reason"], "situation_active")

        state = self.client.post("/api/timeouts/use", json={"team": "opp", "kind": "short"}).get_json()["state"]
        self.assertEqual(state["timeouts"]["opp"]["short"], 0)

        response = self.client.post("/api/timeouts/adjust", json={"team": "msu", "kind": "short", "delta": "x"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["reason"], "invalid_number")

        state = self.client.post("/api/swim-off/winner", json={"winner": "msu"}).get_json()["state"]
        self.assertEqual(state["swim_wins"], {self.starters[1]: 1})

    def test_player_crud(self) -> None:
        response = self.client.post("/api/players", json={"number": 12, "name": "Ruiz", "position": "GK"})
        self.assertEqual(response.status_code, 201)
        player = response.get_json()["player"]

        response = self.client.put(f"/api/players/{player['id']}", json={"name": "Ruiz Jr"})
        self.assertEqual(response.get_json()["player"]["name"], "Ruiz Jr")
        self.assertEqual(self.client.put("/api/players/ghost", json={"name": "X"}).status_code, 404)

        self.assertEqual(self.client.delete(f"/api/players/{player['id']}").status_code, 200)
        self.assertEqual(self.client.delete(f"/api/players/{player['id']}").status_code, 404)

    def test_roster_import_and_export(self) -> None:
        response = self.client.post("/api/players/import", json={
            "csv": "number,name,pos\n1,Smith,GK\n9,Jones,fp\n", "mode": "merge",
        })
        players = response.get_json()["players"]
        self.assertEqual([p["number"] for p in players], list(range(1, 10)))
        self.assertEqual(players[0]["name"], "Smith")

        self.assertEqual(self.client.post("/api/players/import", json={}).status_code, 400)
        self.assertEqual(
            self.client.post("/api/players/import", json={"csv": ""}).get_json()["reason"], "import_failed"
        )

        text = self.client.get("/api/players/export").get_data(as_text=True)
        self.assertTrue(text.startswith("number,name,pos\n1,Smith,GK\n"))

    def test_csv_exports(self) -> None:
        self.client.post("/api/setup/opponent", json={"opponent": "North"})
        self._start()
        response = self.client.get("/api/export/players")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.mimetype.startswith("text/csv"))
        self.assertIn("North.csv", response.headers["Content-Disposition"])
        self.assertTrue(response.get_data(as_text=True).startswith("Number,Name,Pos"))
        self.assertEqual(self.client.get("/api/export/referees").status_code, 404)

    def test_new_game_and_end_game(self) -> None:
        self._start()
        state = self.client.post("/api/game/end").get_json()["state"]
        self.assertEqual(state["phase"], "ended")
        state = self.client.post("/api/game/new", json={}).get_json()["state"]
        self.assertEqual(state["phase"], "setup")
        self.assertEqual(len(state["roster"]), 8)


if __name__ == "__main__":
    unittest.main()
