"""Test box score aggregation and the CSV exports."""

import csv
import datetime as dt
import io
import unittest

from poolside.models import EventType, GameEvent, GameState
from poolside.services import BoxScoreExporter, GameSession, StatsAggregator, export_filename
from poolside.services.stats_service import pct


class TestStatsAggregator(unittest.TestCase):
    """Box scores are folded from the event log on every call."""

    def setUp(self):
        self.session = GameSession(state=GameState.fresh())
        self.state = self.session.state
        roster = self.state.roster
        self.keeper = roster[0]
        self.a = roster[1]
        self.b = roster[2]
        starters = [p.id for p in roster[:7]]
        self.session.start_game(minutes=8, starter_ids=starters, swim_off_id=self.a.id)
        self.stats = StatsAggregator(self.state)

    def _row(self, player_id):
        return next(r for r in self.stats.player_rows() if r.player_id == player_id)

    def test_percentages(self):
        self.assertEqual(pct(0, 0), "0.0%")
        self.assertEqual(pct(1, 3), "33.3%")
        self.assertEqual(pct(2, 2), "100.0%")

    def test_field_player_counts(self):
        for kind in ("goal", "attempt", "attempt", "assist", "steal", "turnover",
                     "exclusion", "forced_exclusion", "block"):
            self.session.add_event(self.a.id, kind)

        row = self._row(self.a.id)
        self.assertEqual(row.goals, 1)
        self.assertEqual(row.attempts, 3)
        self.assertEqual(row.shot_pct, "33.3%")
        self.assertEqual(
            (row.assists, row.steals, row.turnovers, row.exclusions, row.forced_exclusions, row.blocks),
            (1, 1, 1, 1, 1, 1),
        )
        self.assertTrue(row.active)

    def test_goalie_counts(self):
        for kind in ("save", "save", "penalty_block", "goal_against"):
            self.session.add_event(self.keeper.id, kind)

        row = self._row(self.keeper.id)
        self.assertEqual((row.saves, row.penalty_blocks, row.goals_against), (3, 1, 1))
        self.assertEqual(row.save_pct, "75.0%")
        self.assertEqual([r.player_id for r in self.stats.goalies()], [self.keeper.id])
        self.assertNotIn(self.keeper.id, [r.player_id for r in self.stats.field_players()])

    def test_recomputation_is_pure(self):
        self.session.add_event(self.a.id, "goal")
        self.session.add_event(self.b.id, "steal")
        first = [r.to_dict() for r in self.stats.player_rows()]
        second = [r.to_dict() for r in self.stats.player_rows()]
        self.assertEqual(first, second)
        self.assertEqual(len(self.state.log), 2)

    def test_removing_an_event_decrements_one_counter(self):
        self.session.add_event(self.a.id, "goal")
        assist = self.session.add_event(self.a.id, "assist").value
        self.session.add_event(self.b.id, "steal")
        before = {r.player_id: r.to_dict() for r in self.stats.player_rows()}

        self.session.remove_event(assist.id)
        after = {r.player_id: r.to_dict() for r in self.stats.player_rows()}

        expected = dict(before)
        expected[self.a.id] = dict(before[self.a.id], assists=before[self.a.id]["assists"] - 1)
        self.assertEqual(after, expected)

    def test_events_for_removed_players_are_skipped(self):
        self.state.log.append(GameEvent(player_id="gone", type=EventType.GOAL, period=1, clock="5:00"))
        self.assertEqual(sum(r.goals for r in self.stats.player_rows()), 0)

    def test_goals_against_by_scorer(self):
        for scorer in ("10", "#2", "10", "x", None):
            self.session.add_event(self.keeper.id, "goal_against", opp_scorer=scorer)

        breakdown = [(e.scorer, e.goals) for e in self.stats.goals_against_by_scorer()]
        self.assertEqual(breakdown, [("#2", 1), ("#10", 2), ("#x", 1)])
        self.assertEqual(self.stats.goals_conceded(), 5)

    def test_scorer_label_strips_a_single_hash(self):
        for scorer in ("#7", "7", "##7"):
            self.session.add_event(self.keeper.id, "goal_against", opp_scorer=scorer)

        breakdown = [(e.scorer, e.goals, e.number) for e in self.stats.goals_against_by_scorer()]
        self.assertEqual(breakdown, [("#7", 2, 7), ("##7", 1, None)])


class TestBoxScoreExporter(unittest.TestCase):
    """Test the three CSV exports."""

    def setUp(self):
        self.session = GameSession(state=GameState.fresh())
        self.state = self.session.state
        roster = self.state.roster
        starters = [p.id for p in roster[:7]]
        self.session.set_opponent("Central High")
        self.session.start_game(minutes=8, starter_ids=starters, swim_off_id=starters[1])
        self.session.add_event(roster[1].id, "goal")
        self.session.add_event(roster[0].id, "save")
        self.session.situation("start_man_up")
        self.session.use_timeout("opp", "full")
        self.session.set_notes('Pool was cold, "deep end" lights out')
        self.exporter = BoxScoreExporter()

    @staticmethod
    def _rows(text):
        return list(csv.reader(io.StringIO(text)))

    def test_players_csv(self):
        rows = self._rows(self.exporter.players_csv(self.state))
        self.assertEqual(rows[0], BoxScoreExporter.PLAYER_HEADER)
        self.assertEqual(len(rows[0]), 16)
        self.assertEqual(len(rows), 1 + 7)
        first = rows[1]
        self.assertEqual(first[:4], ["2", "A", "FP", "Y"])
        self.assertEqual(first[7:10], ["1", "1", "100.0%"])
        self.assertEqual(rows[-1][3], "N")

    def test_goalies_csv(self):
        rows = self._rows(self.exporter.goalies_csv(self.state))
        self.assertEqual(rows[0], BoxScoreExporter.GOALIE_HEADER)
        self.assertEqual(rows[1][:6], ["1", "GK", "0:00", "0", "1", "100.0%"])

    def test_team_csv(self):
        text = self.exporter.team_csv(self.state, dt.date(2026, 3, 1))
        rows = self._rows(text)
        self.assertEqual(rows[1], ["2026-03-01", "Central High", "480", "1", "Y", "N"])
        self.assertIn(["Team Stats"], rows)
        stats_row = rows[rows.index(BoxScoreExporter.TEAM_STATS_HEADER) + 1]
        self.assertEqual(stats_row[0], "1")
        self.assertIn(["MSU", "1", "2"], rows)
        self.assertIn(["Opponent", "1", "1"], rows)
        self.assertIn(['Pool was cold, "deep end" lights out'], rows)

    def test_notes_section_only_when_present(self):
        self.state.notes = ""
        self.assertNotIn("Notes", self.exporter.team_csv(self.state))

    def test_export_filename(self):
        day = dt.date(2026, 3, 1)
        self.assertEqual(export_filename("players", "Central High", day), "wp_players_2026-03-01_Central_High.csv")
        self.assertEqual(export_filename("team", "", day), "wp_team_2026-03-01_opponent.csv")


if __name__ == "__main__":
    unittest.main()
