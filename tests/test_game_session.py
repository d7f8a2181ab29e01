"""
Tests for the game lifecycle: setup, periods, end of game and reset.
"""
import unittest

from poolside.models import GameState, LifecyclePhase, Player
from poolside.services import GameSession, Reason, StaticPrompts


class GameStartTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = GameSession(state=GameState.fresh())
        self.state = self.session.state
        self.roster = self.state.roster
        self.starters = [p.id for p in self.roster[:7]]

    def test_start_game_scenario(self) -> None:
        result = self.session.start_game(minutes=8, starter_ids=self.starters, swim_off_id=self.starters[1])

        self.assertTrue(result)
        self.assertIs(self.session.phase, LifecyclePhase.LIVE)
        self.assertEqual(self.state.clock, "8:00")
        self.assertEqual(self.state.last_event_sec, 480)
        self.assertEqual(self.state.period, 1)
        self.assertEqual(self.state.active_ids, self.starters)

        shooter = self.roster[1]
        self.session.add_event(shooter.id, "goal")
        row = next(r for r in self.session.box_scores() if r.player_id == shooter.id)
        self.assertEqual((row.goals, row.attempts, row.shot_pct), (1, 1, "100.0%"))

    def test_starts_from_selection(self) -> None:
        for pid in self.starters:
            self.assertTrue(self.session.toggle_starter(pid))
        self.session.select_swim_off(self.starters[3])

        self.assertTrue(self.session.start_game())
        self.assertEqual(self.state.swim_off.player_id, self.starters[3])
        self.assertEqual(self.state.starter_selection, set())
        self.assertIsNone(self.state.swim_off_selection)

    def test_selection_toggles(self) -> None:
        pid = self.starters[2]
        self.session.toggle_starter(pid)
        self.session.select_swim_off(pid)
        self.assertEqual(self.state.swim_off_selection, pid)
        self.session.select_swim_off(pid)
        self.assertIsNone(self.state.swim_off_selection)

        self.session.select_swim_off(pid)
        self.session.toggle_starter(pid)
        self.assertEqual(self.state.starter_selection, set())
        self.assertIsNone(self.state.swim_off_selection)
        self.assertEqual(self.session.toggle_starter("ghost").reason, Reason.UNKNOWN_PLAYER)

    def test_starter_rules(self) -> None:
        cases = [
            (self.starters[:6], self.starters[1], Reason.LINEUP_WRONG_SIZE),
            ([p.id for p in self.roster], self.starters[1], Reason.LINEUP_TOO_LARGE),
            ([p.id for p in self.roster[1:]], self.starters[1], Reason.LINEUP_WRONG_GK_COUNT),
            (self.starters, None, Reason.SWIM_OFF_MISSING),
            (self.starters, self.roster[7].id, Reason.SWIM_OFF_NOT_STARTER),
        ]
        for starters, swim_off_id, reason in cases:
            with self.subTest(reason=reason):
                result = self.session.start_game(minutes=8, starter_ids=starters, swim_off_id=swim_off_id)
                self.assertEqual(result.reason, reason)
                self.assertIs(self.session.phase, LifecyclePhase.SETUP)
                self.assertEqual(self.state.active_ids, [])

    def test_unknown_starters_are_ignored(self) -> None:
        result = self.session.start_game(
            minutes=8, starter_ids=self.starters[:6] + ["ghost"], swim_off_id=self.starters[1]
        )
        self.assertEqual(result.reason, Reason.LINEUP_WRONG_SIZE)

    def test_period_length_limits(self) -> None:
        for minutes in (0, 21):
            with self.subTest(minutes=minutes):
                result = self.session.start_game(minutes=minutes, starter_ids=self.starters,
                                                 swim_off_id=self.starters[1])
                self.assertEqual(result.reason, Reason.INVALID_PERIOD_LENGTH)
        self.assertTrue(self.session.set_period_minutes(7))
        self.assertEqual(self.state.clock, "7:00")

    def test_cannot_start_twice(self) -> None:
        self.session.start_game(minutes=8, starter_ids=self.starters, swim_off_id=self.starters[1])
        again = self.session.start_game(minutes=8, starter_ids=self.starters, swim_off_id=self.starters[1])
        self.assertEqual(again.reason, Reason.ALREADY_STARTED)
        self.assertEqual(self.session.set_period_minutes(6).reason, Reason.ALREADY_STARTED)


class PeriodTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = GameSession(state=GameState.fresh())
        self.state = self.session.state
        self.starters = [p.id for p in self.state.roster[:7]]
        self.session.start_game(minutes=8, starter_ids=self.starters, swim_off_id=self.starters[1])

    def test_end_period_credits_remaining_time(self) -> None:
        self.session.set_clock("2:00")
        result = self.session.end_period()

        self.assertEqual(result.value, 120)
        self.assertIs(self.session.phase, LifecyclePhase.BETWEEN_PERIODS)
        self.assertEqual(self.state.active_ids, [])
        self.assertEqual(self.state.clock, "0:00")
        for pid in self.starters:
            self.assertEqual(self.state.time_played[pid], 120)

    def test_end_period_only_when_live(self) -> None:
        self.session.end_period()
        self.assertEqual(self.session.end_period().reason, Reason.NOT_LIVE)

    def test_start_period(self) -> None:
        self.session.end_period()
        lineup = [p.id for p in self.state.roster[:6]] + [self.state.roster[7].id]
        result = self.session.start_period(starter_ids=lineup, swim_off_id=lineup[-1])

        self.assertTrue(result)
        self.assertEqual(self.state.period, 2)
        self.assertEqual(self.state.clock, "8:00")
        self.assertEqual(self.state.active_ids, lineup)
        self.assertIs(self.session.phase, LifecyclePhase.LIVE)

    def test_start_period_rules(self) -> None:
        self.assertEqual(
            self.session.start_period(starter_ids=self.starters, swim_off_id=self.starters[1]).reason,
            Reason.NOT_BETWEEN_PERIODS,
        )
        self.session.end_period()
        result = self.session.start_period(starter_ids=self.starters, swim_off_id=None)
        self.assertEqual(result.reason, Reason.SWIM_OFF_MISSING)
        self.assertEqual(self.state.period, 1)
        self.assertIs(self.session.phase, LifecyclePhase.BETWEEN_PERIODS)

    def test_end_game_scenario(self) -> None:
        self.session.set_clock("0:45")
        result = self.session.end_game()

        self.assertEqual(result.value, 45)
        for pid in self.starters:
            self.assertEqual(self.state.time_played[pid], 45)
        self.assertIs(self.session.phase, LifecyclePhase.ENDED)
        self.assertEqual(self.state.active_ids, [])

        shooter = self.starters[1]
        self.assertEqual(self.session.add_event(shooter, "goal").reason, Reason.GAME_ENDED)
        self.assertEqual(self.state.log, [])
        self.assertEqual(self.session.end_game().reason, Reason.GAME_ENDED)
        self.assertEqual(self.session.start_period(self.starters, shooter).reason, Reason.GAME_ENDED)

    def test_end_game_between_periods_does_not_credit_twice(self) -> None:
        self.session.set_clock("1:00")
        self.session.end_period()
        self.assertEqual(self.session.end_game().value, 0)
        for pid in self.starters:
            self.assertEqual(self.state.time_played[pid], 60)

    def test_end_game_drops_pending_substitution(self) -> None:
        self.session.start_substitution("6:00")
        self.session.end_game()
        self.assertIsNone(self.session.pending_substitution)


class NewGameTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = GameSession(state=GameState.fresh())
        starters = [p.id for p in self.session.state.roster[:7]]
        self.session.set_opponent("Central")
        self.session.start_game(minutes=7.4, starter_ids=starters, swim_off_id=starters[1])
        self.session.add_event(starters[1], "goal")

    def test_declined_confirmation_keeps_game(self) -> None:
        result = self.session.new_game()
        self.assertEqual(result.reason, Reason.NOT_CONFIRMED)
        self.assertEqual(len(self.session.state.log), 1)

    def test_reset_keeps_roster_and_period_length(self) -> None:
        roster = list(self.session.state.roster)
        self.session.prompts = StaticPrompts()
        self.assertTrue(self.session.new_game())

        state = self.session.state
        self.assertIs(self.session.phase, LifecyclePhase.SETUP)
        self.assertEqual(state.roster, roster)
        self.assertEqual(state.period_length_sec, 7 * 60)
        self.assertEqual(state.clock, "7:00")
        self.assertEqual(state.log, [])
        self.assertEqual(state.opponent, "")
        self.assertIs(self.session.events.game_state, state)

    def test_reset_with_replacement_roster(self) -> None:
        self.session.prompts = StaticPrompts()
        self.session.new_game(roster=[Player(number=3, name="Solo", position="GK")])
        self.assertEqual([p.name for p in self.session.state.roster], ["Solo"])

        self.session.new_game(clear_roster=True)
        self.assertEqual([p.number for p in self.session.state.roster], list(range(1, 9)))


if __name__ == "__main__":
    unittest.main()
