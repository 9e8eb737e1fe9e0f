"""
Double elimination bracket generation for ten teams.

In double elimination:
- Teams must lose twice to be eliminated
- Winners Bracket: Teams that haven't lost yet
- Losers Bracket: Teams that have lost once
- Grand Final: Winners bracket champion vs Losers bracket champion
- Bracket Reset: If the losers bracket champion wins the Grand Final, a
  Reset Match decides the champion
"""
import logging
from typing import List

from .models import Bracket, InvalidInputError, Match, Team, WINNERS, LOSERS, FINALS
from .topology import TEN_TEAM
from .view import competitors, reconstruct

logger = logging.getLogger(__name__)


def seed_teams(teams: List[Team]) -> List[Team]:
    """Copy the teams with seeds 1..N in entry order and no losses."""
    return [Team(id=team.id, name=team.name, seed=index + 1, losses=0) for index, team in enumerate(teams)]


def _validate_teams(teams: List[Team], layout) -> None:
    if len(teams) != layout.team_count:
        raise InvalidInputError(
            f"Double elimination bracket requires exactly {layout.team_count} teams, got {len(teams)}"
        )
    seen = set()
    for team in teams:
        if team.id in seen:
            raise InvalidInputError(f"Duplicate team id: {team.id}")
        seen.add(team.id)


def _create_segment(segment: str, layout, match_number: int) -> List[Match]:
    matches = []
    for round_num, index, match_id in layout.match_ids(segment):
        route = layout.route_for(match_id)
        matches.append(Match(
            id=match_id,
            match_number=match_number,
            round=round_num,
            segment=segment,
            feeds_into_match_id=route.winner_to,
            loser_feeds_into_match_id=route.loser_to,
            position=(round_num, index),
        ))
        match_number += 1
    return matches


def generate(teams: List[Team]) -> Bracket:
    """
    Build the full ten team double elimination bracket.

    Args:
        teams: Exactly ten teams in seed order (first entry is seed 1)

    Returns:
        A fresh bracket: 9 winners, 8 losers and 2 finals matches with every
        routing edge set, round 1 filled with seeds 7-10 and the round 2
        byes placed.

    Raises:
        InvalidInputError: if the team count is not ten or an id repeats
    """
    layout = TEN_TEAM
    teams = list(teams)
    _validate_teams(teams, layout)
    seeded = seed_teams(teams)
    seed_to_team = {team.seed: team for team in seeded}

    winners = _create_segment(WINNERS, layout, 1)
    losers = _create_segment(LOSERS, layout, len(winners) + 1)
    finals = _create_segment(FINALS, layout, len(winners) + len(losers) + 1)
    all_matches = winners + losers + finals

    by_id = {match.id: match for match in all_matches}
    for match_id, seeds in list(layout.first_round_seeds.items()) + list(layout.byes.items()):
        match = by_id[match_id]
        match.team1 = seed_to_team[seeds[0]]
        if len(seeds) > 1:
            match.team2 = seed_to_team[seeds[1]]

    logger.info(
        "Generated double elimination bracket for %d teams: %d winners, %d losers, %d finals matches",
        len(seeded), len(winners), len(losers), len(finals),
    )
    return reconstruct(all_matches)


def regenerate(bracket: Bracket) -> Bracket:
    """Start the bracket over with the same teams in the same seed order."""
    return generate(competitors(bracket))
