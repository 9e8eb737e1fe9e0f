"""
Round-grouped view of a bracket, plus read-only queries over it.
"""
from typing import Dict, List, Optional

from .models import Bracket, Match, Round, Team, WINNERS, LOSERS, FINALS
from .topology import GRAND_FINAL, RESET_MATCH


def _group_rounds(matches: List[Match], segment: str) -> List[Round]:
    by_round = {}
    for match in matches:
        if match.segment != segment:
            continue
        by_round.setdefault(match.round, []).append(match)
    return [Round(round_num, segment, by_round[round_num]) for round_num in sorted(by_round)]


def reconstruct(matches: List[Match]) -> Bracket:
    """
    Rebuild a bracket from its flat match list.

    Matches are grouped by (segment, round) with rounds ascending. The list
    passed in becomes ``all_matches`` unchanged, so reconstructing from an
    already reconstructed bracket yields the same grouping.
    """
    return Bracket(
        winners_rounds=_group_rounds(matches, WINNERS),
        losers_rounds=_group_rounds(matches, LOSERS),
        finals_rounds=_group_rounds(matches, FINALS),
        all_matches=matches,
    )


def bracket_from_dict(data: Optional[Dict]) -> Bracket:
    """Load a bracket stored by ``Bracket.to_dict``; the round views are re-derived."""
    data = data or {}
    return reconstruct([Match.from_dict(m) for m in data.get('all_matches', [])])


def competitors(bracket: Bracket) -> List[Team]:
    """
    All teams in the bracket by seed.

    Loss counts are tallied from completed matches: a team knocked out has
    no slot left to carry its final count.
    """
    teams = {}
    for match in bracket.all_matches:
        for team in (match.team1, match.team2):
            if team is not None and team.id not in teams:
                teams[team.id] = Team(id=team.id, name=team.name, seed=team.seed)
    for match in bracket.all_matches:
        if match.is_completed and match.loser_id in teams:
            teams[match.loser_id].losses += 1
    return sorted(teams.values(), key=lambda t: t.seed)


def playable_matches(bracket: Bracket) -> List[Match]:
    """Matches with both teams known that have not been completed yet."""
    playable = [m for m in bracket.all_matches if m.is_ready and not m.is_completed]
    return sorted(playable, key=lambda m: m.match_number)


def champion(bracket: Bracket) -> Optional[Team]:
    """
    The tournament winner, or None while the tournament is still open.

    A played Reset Match decides it. Otherwise the Grand Final decides it
    when it left the Reset Match unpopulated.
    """
    grand_final = bracket.get_match(GRAND_FINAL)
    reset = bracket.get_match(RESET_MATCH)
    if reset is not None and reset.is_completed:
        return reset.occupant(reset.winner_id)
    if grand_final is None or not grand_final.is_completed:
        return None
    if reset is not None and (reset.team1 is not None or reset.team2 is not None):
        return None
    return grand_final.occupant(grand_final.winner_id)


def standings(bracket: Bracket) -> List[Dict]:
    """Win/loss table from completed matches, best record first."""
    table = {team.id: {'team': team, 'wins': 0, 'losses': team.losses} for team in competitors(bracket)}
    for match in bracket.all_matches:
        if not match.is_completed:
            continue
        if match.winner_id in table:
            table[match.winner_id]['wins'] += 1
    return sorted(table.values(), key=lambda row: (row['losses'], -row['wins'], row['team'].seed))
