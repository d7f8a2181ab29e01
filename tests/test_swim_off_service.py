import unittest

from poolside.models import GameState, SwimOffRecord
from poolside.services import GameSession, Reason


class SwimOffTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = GameSession(state=GameState.fresh())
        self.state = self.session.state
        self.starters = [p.id for p in self.state.roster[:7]]
        self.swimmer = self.starters[1]
        self.session.start_game(minutes=8, starter_ids=self.starters, swim_off_id=self.swimmer)

    def test_game_start_opens_period_one_record(self) -> None:
        self.assertEqual(self.state.swim_off, SwimOffRecord(period=1, player_id=self.swimmer))

    def test_same_winner_twice_credits_once(self) -> None:
        self.session.set_swim_winner("msu")
        self.session.set_swim_winner("msu")
        self.assertEqual(self.state.swim_wins[self.swimmer], 1)
        self.assertEqual(self.state.swim_losses.get(self.swimmer, 0), 0)

    def test_changing_winner_moves_the_credit(self) -> None:
        self.session.set_swim_winner("msu")
        self.session.set_swim_winner("opponent")
        self.assertEqual(self.state.swim_wins[self.swimmer], 0)
        self.assertEqual(self.state.swim_losses[self.swimmer], 1)
        self.assertEqual(self.state.swim_off.winner, "opponent")

    def test_reversal_never_goes_negative(self) -> None:
        self.state.swim_off.winner = "msu"
        self.session.set_swim_winner("opponent")
        self.assertEqual(self.state.swim_wins[self.swimmer], 0)

    def test_needs_a_record_for_this_period(self) -> None:
        self.state.swim_off = SwimOffRecord()
        self.assertEqual(self.session.set_swim_winner("msu").reason, Reason.NO_SWIM_OFF)
        self.state.swim_off = SwimOffRecord(period=3, player_id=self.swimmer)
        self.assertEqual(self.session.set_swim_winner("msu").reason, Reason.NO_SWIM_OFF)
        self.assertEqual(self.state.swim_wins, {})

    def test_unknown_winner(self) -> None:
        self.assertEqual(self.session.set_swim_winner("referee").reason, Reason.UNKNOWN_FIELD)

    def test_each_period_gets_its_own_swim_off(self) -> None:
        self.session.set_swim_winner("msu")
        self.session.end_period()
        self.assertEqual(self.state.swim_off, SwimOffRecord())

        other = self.starters[2]
        self.session.start_period(starter_ids=self.starters, swim_off_id=other)
        self.assertEqual(self.state.swim_off, SwimOffRecord(period=2, player_id=other))
        self.session.set_swim_winner("msu")
        self.assertEqual(self.state.swim_wins, {self.swimmer: 1, other: 1})


if __name__ == "__main__":
    unittest.main()
