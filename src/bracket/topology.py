"""
Fixed layout of the ten team double elimination bracket.

The shape is not computed from the team count. Other sizes are not
supported; ``TEN_TEAM`` is the only layout and ``generate`` rejects
anything but ten teams.

Winners: R1(2) -> R2(4) -> R3(2) -> R4(1)
Losers:  R1(2) -> R2(2) -> R3(2) -> R4(1) -> R5(1)
Finals:  Grand Final, then Reset Match only if required
"""
from collections import namedtuple
from typing import Dict, Tuple

from .models import WINNERS, LOSERS, FINALS

GRAND_FINAL = 'GRAND-FINAL'
RESET_MATCH = 'RESET-MATCH'

Route = namedtuple('Route', ['winner_to', 'loser_to'])


def match_id(segment: str, round_num: int, index: int) -> str:
    """Identifier for the ``index``-th (0-based) match of a segment round, e.g. ``W-R2-M3``."""
    prefix = 'W' if segment == WINNERS else 'L'
    return f"{prefix}-R{round_num}-M{index + 1}"


class BracketLayout:
    def __init__(self, team_count: int, winners_rounds: Tuple[int, ...], losers_rounds: Tuple[int, ...],
                 first_round_seeds: Dict[str, Tuple[int, int]], byes: Dict[str, Tuple[int, ...]],
                 routes: Dict[str, Route]):
        self.team_count = team_count
        self.winners_rounds = winners_rounds
        self.losers_rounds = losers_rounds
        self.first_round_seeds = first_round_seeds
        self.byes = byes
        self.routes = routes

    @property
    def total_matches(self) -> int:
        # Grand Final and Reset Match
        return sum(self.winners_rounds) + sum(self.losers_rounds) + 2

    def is_segment_final(self, segment: str, round_num: int) -> bool:
        if segment == WINNERS:
            return round_num == len(self.winners_rounds)
        if segment == LOSERS:
            return round_num == len(self.losers_rounds)
        return False

    def route_for(self, source_id: str) -> Route:
        return self.routes.get(source_id, Route(None, None))

    def match_ids(self, segment: str):
        """Yield (round, index, id) for every match of a segment in creation order."""
        if segment == FINALS:
            yield 1, 0, GRAND_FINAL
            yield 2, 0, RESET_MATCH
            return
        sizes = self.winners_rounds if segment == WINNERS else self.losers_rounds
        for round_idx, num_matches in enumerate(sizes):
            for index in range(num_matches):
                yield round_idx + 1, index, match_id(segment, round_idx + 1, index)

    def __repr__(self):
        return f"BracketLayout(team_count={self.team_count}, matches={self.total_matches})"


TEN_TEAM = BracketLayout(
    team_count=10,
    winners_rounds=(2, 4, 2, 1),
    losers_rounds=(2, 2, 2, 1, 1),
    # The four lowest seeds play in; seeds 1-6 receive byes into round 2.
    first_round_seeds={
        'W-R1-M1': (7, 8),
        'W-R1-M2': (9, 10),
    },
    byes={
        'W-R2-M1': (1, 2),
        'W-R2-M2': (3,),
        'W-R2-M3': (4,),
        'W-R2-M4': (5, 6),
    },
    routes={
        'W-R1-M1': Route('W-R2-M2', 'L-R1-M1'),
        'W-R1-M2': Route('W-R2-M3', 'L-R1-M2'),
        'W-R2-M1': Route('W-R3-M1', 'L-R2-M1'),
        'W-R2-M2': Route('W-R3-M1', 'L-R1-M1'),
        'W-R2-M3': Route('W-R3-M2', 'L-R1-M2'),
        'W-R2-M4': Route('W-R3-M2', 'L-R2-M2'),
        'W-R3-M1': Route('W-R4-M1', 'L-R3-M1'),
        'W-R3-M2': Route('W-R4-M1', 'L-R3-M2'),
        'W-R4-M1': Route(GRAND_FINAL, 'L-R5-M1'),
        'L-R1-M1': Route('L-R2-M1', None),
        'L-R1-M2': Route('L-R2-M2', None),
        'L-R2-M1': Route('L-R3-M1', None),
        'L-R2-M2': Route('L-R3-M2', None),
        'L-R3-M1': Route('L-R4-M1', None),
        'L-R3-M2': Route('L-R4-M1', None),
        'L-R4-M1': Route('L-R5-M1', None),
        'L-R5-M1': Route(GRAND_FINAL, None),
    },
)

