"""Box-score statistics and CSV exports for the Poolside scorekeeper."""

from __future__ import annotations

import csv
import datetime as dt
import io
import re
from collections import Counter
from typing import Dict, List, Optional, Protocol

from ..models import EventType, GameState, GoalsAgainstEntry, PlayerBoxScore, Position
from ..utils import fmt_clock
from ..utils.constants import TEAM_US, TEAM_THEM, TEAM_LABELS


def pct(numer: int, denom: int) -> str:
    """Percentage with one decimal place; ``0.0%`` when there is nothing to divide by."""
    if not denom:
        return "0.0%"
    return f"{numer / denom * 100:.1f}%"


# Event type -> counters it increments on the box score row
EVENT_COUNTERS = {
    EventType.GOAL: ("goals", "attempts"),
    EventType.ATTEMPT: ("attempts",),
    EventType.BLOCK: ("blocks",),
    EventType.SAVE: ("saves",),
    EventType.GOAL_AGAINST: ("goals_against",),
    EventType.PENALTY_BLOCK: ("penalty_blocks", "saves"),
    EventType.ASSIST: ("assists",),
    EventType.STEAL: ("steals",),
    EventType.TURNOVER: ("turnovers",),
    EventType.EXCLUSION: ("exclusions",),
    EventType.FORCED_EXCLUSION: ("forced_exclusions",),
}


class StatsAggregator:
    """
    Pure projection of the game state into box scores.

    Nothing is cached; every call folds the current event log again, so the
    numbers can never go stale after a log edit.
    """

    def __init__(self, game_state: GameState):
        self.game_state = game_state

    def player_rows(self) -> List[PlayerBoxScore]:
        """One row per roster player, in roster order."""
        state = self.game_state
        active = set(state.active_ids)
        rows: Dict[str, PlayerBoxScore] = {}
        for player in state.roster:
            rows[player.id] = PlayerBoxScore(
                player_id=player.id,
                number=player.number,
                name=player.name,
                position=player.position,
                active=player.id in active,
                time_played_sec=state.time_played.get(player.id, 0),
                swim_wins=state.swim_wins.get(player.id, 0),
                swim_losses=state.swim_losses.get(player.id, 0),
            )

        for event in state.log:
            row = rows.get(event.player_id)
            if row is None:
                continue  # player removed since the event was logged
            for counter in EVENT_COUNTERS.get(event.type, ()):
                setattr(row, counter, getattr(row, counter) + 1)

        for row in rows.values():
            if row.position is Position.GK:
                row.save_pct = pct(row.saves, row.saves + row.goals_against)
            else:
                row.shot_pct = pct(row.goals, row.attempts)
        return list(rows.values())

    def goalies(self) -> List[PlayerBoxScore]:
        return [row for row in self.player_rows() if row.is_goalkeeper]

    def field_players(self) -> List[PlayerBoxScore]:
        return [row for row in self.player_rows() if not row.is_goalkeeper]

    def goals_against_by_scorer(self) -> List[GoalsAgainstEntry]:
        """
        Goals against grouped by the opposing scorer's cap number.

        Numeric cap numbers are listed in numeric order, anything else
        afterwards in text order. Goals against with no scorer are left out.
        """
        counts: Counter = Counter()
        for event in self.game_state.log:
            if event.type is EventType.GOAL_AGAINST and event.opp_scorer:
                counts["#" + re.sub(r"^#", "", str(event.opp_scorer))] += 1

        entries = []
        for label, goals in counts.items():
            digits = label[1:]
            number = int(digits) if digits.isdigit() else None
            entries.append(GoalsAgainstEntry(scorer=label, goals=goals, number=number))
        entries.sort(key=lambda e: (e.number is None, e.number or 0, e.scorer))
        return entries

    def team_goals(self) -> int:
        return sum(row.goals for row in self.player_rows())

    def goals_conceded(self) -> int:
        return sum(1 for e in self.game_state.log if e.type is EventType.GOAL_AGAINST)


class ExportServiceInterface(Protocol):
    """Interface for box score exports."""

    def players_csv(self, state: GameState) -> str:
        ...

    def goalies_csv(self, state: GameState) -> str:
        ...

    def team_csv(self, state: GameState, day: Optional[dt.date] = None) -> str:
        ...


class BoxScoreExporter:
    """Writes the three CSV products (players, goalies, team)."""

    PLAYER_HEADER = [
        "Number", "Name", "Pos", "Active", "TimePlayed", "SwimWins", "SwimLosses",
        "Goals", "Attempts", "Shot%", "Assists", "Steals", "Turnovers",
        "Exclusions", "ForcedExcl", "Blocks",
    ]
    GOALIE_HEADER = [
        "Number", "Name", "TimePlayed", "GA", "Saves", "Save%", "PK Blocks",
        "Assists", "Steals", "Turnovers", "Exclusions", "ForcedExcl",
    ]
    TEAM_STATS_HEADER = [
        "ManUp_Attempts", "ManUp_Goals", "ManUp_Stops",
        "ManDown_Defenses", "ManDown_Stops", "ManDown_GA",
        "PenFor_Attempts", "PenFor_Goals", "PenFor_Misses",
        "PenAg_Attempts", "PenAg_Saves", "PenAg_GA",
    ]

    def players_csv(self, state: GameState) -> str:
        """Field players only."""
        writer, buffer = self._writer()
        writer.writerow(self.PLAYER_HEADER)
        for row in StatsAggregator(state).field_players():
            writer.writerow([
                row.number, row.name, row.position.value, "Y" if row.active else "N",
                fmt_clock(row.time_played_sec), row.swim_wins, row.swim_losses,
                row.goals, row.attempts, row.shot_pct, row.assists, row.steals,
                row.turnovers, row.exclusions, row.forced_exclusions, row.blocks,
            ])
        return buffer.getvalue()

    def goalies_csv(self, state: GameState) -> str:
        writer, buffer = self._writer()
        writer.writerow(self.GOALIE_HEADER)
        for row in StatsAggregator(state).goalies():
            writer.writerow([
                row.number, row.name, fmt_clock(row.time_played_sec), row.goals_against,
                row.saves, row.save_pct, row.penalty_blocks, row.assists, row.steals,
                row.turnovers, row.exclusions, row.forced_exclusions,
            ])
        return buffer.getvalue()

    def team_csv(self, state: GameState, day: Optional[dt.date] = None) -> str:
        """Game metadata, team situational stats, timeouts left and notes."""
        day = day or dt.date.today()
        writer, buffer = self._writer()

        writer.writerow(["Date", "Opponent", "PeriodLengthSec", "CurrentPeriod", "GameStarted", "GameEnded"])
        writer.writerow([
            day.isoformat(), state.opponent, state.period_length_sec, state.period,
            "Y" if state.game_started else "N", "Y" if state.game_ended else "N",
        ])
        writer.writerow([])

        ts = state.team_stats
        writer.writerow(["Team Stats"])
        writer.writerow(self.TEAM_STATS_HEADER)
        writer.writerow([
            ts.man_up.attempts, ts.man_up.goals, ts.man_up.stops,
            ts.man_down.defenses, ts.man_down.stops, ts.man_down.goals_against,
            ts.pen_for.attempts, ts.pen_for.goals, ts.pen_for.misses,
            ts.pen_against.attempts, ts.pen_against.saves, ts.pen_against.goals_against,
        ])
        writer.writerow([])

        writer.writerow(["Timeouts"])
        writer.writerow(["Team", "30s", "Full"])
        for team in (TEAM_US, TEAM_THEM):
            counts = state.timeouts.for_team(team)
            writer.writerow([TEAM_LABELS[team], counts.short, counts.full])
        writer.writerow([])

        if state.notes:
            writer.writerow(["Notes"])
            writer.writerow([state.notes])
            writer.writerow([])

        return buffer.getvalue()

    @staticmethod
    def _writer():
        buffer = io.StringIO()
        return csv.writer(buffer, lineterminator="\n"), buffer


def export_filename(kind: str, opponent: str, day: Optional[dt.date] = None) -> str:
    """
    Build a download name such as ``wp_players_2026-03-01_Central_High.csv``.
    """
    day = day or dt.date.today()
    slug = re.sub(r"[^a-z0-9]+", "_", opponent or "opponent", flags=re.IGNORECASE)
    return f"wp_{kind}_{day.isoformat()}_{slug}.csv"
