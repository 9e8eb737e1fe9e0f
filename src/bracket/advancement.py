"""
Applying match results to a double elimination bracket.

Every operation takes a bracket and returns a new one. The input bracket
is never modified: the flat match list is deep-copied, indexed by match id,
patched through that index and handed to ``reconstruct``.
"""
import copy
import logging
from typing import Dict, Optional

from .events import BracketEvents, LoggingEvents
from .models import (
    Bracket, InvalidResultError, Match, Team,
    COMPLETED, IN_PROGRESS, PENDING, WINNERS, LOSERS,
)
from .topology import GRAND_FINAL, RESET_MATCH, TEN_TEAM
from .view import reconstruct

logger = logging.getLogger(__name__)

FORCED_WIN_SCORE = 30


def _copy_matches(bracket: Bracket) -> Dict[str, Match]:
    matches = copy.deepcopy(bracket.all_matches)
    return {match.id: match for match in matches}


def _place(target: Optional[Match], team: Optional[Team]) -> Optional[int]:
    """Put ``team`` in the first open slot of ``target``; filled slots are never overwritten."""
    if target is None or team is None:
        return None
    if target.team1 is None:
        target.team1 = copy.copy(team)
        return 1
    if target.team2 is None:
        target.team2 = copy.copy(team)
        return 2
    logger.debug("%s already full, %s not placed", target.id, team.name)
    return None


def _promote_to_grand_final(arena: Dict[str, Match], completed: Match, winner: Optional[Team]) -> None:
    grand_final = arena.get(GRAND_FINAL)
    if grand_final is None or winner is None:
        return
    if completed.segment == WINNERS and grand_final.team1 is None:
        grand_final.team1 = copy.copy(winner)
        logger.debug("Winners bracket champion %s promoted to Grand Final (Team 1)", winner.name)
    elif completed.segment == LOSERS and grand_final.team2 is None:
        grand_final.team2 = copy.copy(winner)
        logger.debug("Losers bracket champion %s promoted to Grand Final (Team 2)", winner.name)


def _settle_grand_final(arena: Dict[str, Match], grand_final: Match, winner: Optional[Team],
                        loser: Optional[Team], events: BracketEvents) -> None:
    """
    Decide whether the Grand Final needs a Reset Match.

    Two checks run in order. If the Team 2 occupant (losers bracket
    champion) won, both teams go to the Reset Match. Otherwise the Reset
    Match is still created when the loser has exactly one loss after this
    game; with any other count the Grand Final ends the tournament.
    """
    reset = arena.get(RESET_MATCH)
    losers_champ = grand_final.team2

    if losers_champ is not None and losers_champ.id == grand_final.winner_id:
        # The winners bracket champion is the loser here and carries its first loss.
        if reset is not None:
            reset.team1 = copy.copy(loser) if loser else copy.copy(grand_final.team1)
            reset.team2 = copy.copy(winner)
            reset.status = PENDING
            logger.info("Bracket reset: %s and %s meet in %s", reset.team1.name, reset.team2.name, RESET_MATCH)
        return

    if loser is not None and loser.losses == 1:
        if reset is not None and winner is not None:
            reset.team1 = copy.copy(winner)
            reset.team2 = copy.copy(loser)
            reset.status = PENDING
            logger.info("%s has only one loss, %s created for a decisive game", loser.name, RESET_MATCH)
        return

    events.on_tournament_resolved(winner, grand_final)


def advance(bracket: Bracket, match_id: str, winner_id: str, loser_id: str,
            team1_score: int, team2_score: int, events: Optional[BracketEvents] = None) -> Bracket:
    """
    Record a result and route both teams onward.

    Args:
        bracket: Current bracket, left untouched
        match_id: Match that was played
        winner_id: Id of the winning team (must occupy one of the slots)
        loser_id: Id of the losing team (must occupy the other slot)
        team1_score: Score of the Team 1 slot
        team2_score: Score of the Team 2 slot
        events: Listener for completion/elimination/resolution hooks,
            defaults to ``LoggingEvents``

    Returns:
        A new bracket with the match completed, the loser's loss count
        increased and both teams moved along their routes. An unknown
        ``match_id`` returns the input bracket itself.
    """
    events = events if events is not None else LoggingEvents()
    arena = _copy_matches(bracket)
    match = arena.get(match_id)
    if match is None:
        logger.debug("advance: no match %s, bracket unchanged", match_id)
        return bracket

    match.winner_id = winner_id
    match.loser_id = loser_id
    match.team1_score = team1_score
    match.team2_score = team2_score
    match.status = COMPLETED

    winner = match.occupant(winner_id)
    loser = match.occupant(loser_id)
    if winner is not None:
        winner = copy.copy(winner)
    if loser is not None:
        loser = copy.copy(loser)
        loser.losses += 1

    events.on_match_completed(match, winner, loser)

    route = TEN_TEAM.route_for(match.id)
    slot = _place(arena.get(route.winner_to), winner) if route.winner_to else None
    if slot:
        logger.debug("%s advances to %s (Team %d)", winner.name, route.winner_to, slot)
    slot = _place(arena.get(route.loser_to), loser) if route.loser_to else None
    if slot:
        logger.debug("%s drops to %s (Team %d)", loser.name, route.loser_to, slot)

    if TEN_TEAM.is_segment_final(match.segment, match.round):
        _promote_to_grand_final(arena, match, winner)

    if loser is not None and loser.eliminated:
        events.on_competitor_eliminated(loser, match)

    if match.id == GRAND_FINAL:
        _settle_grand_final(arena, match, winner, loser, events)
    elif match.id == RESET_MATCH:
        events.on_tournament_resolved(winner, match)

    return reconstruct(list(arena.values()))


def start_match(bracket: Bracket, match_id: str) -> Bracket:
    """Mark a pending match with both teams present as in progress."""
    match = bracket.get_match(match_id)
    if match is None or match.status != PENDING or not match.is_ready:
        return bracket
    arena = _copy_matches(bracket)
    arena[match_id].status = IN_PROGRESS
    logger.debug("Match %s in progress", match_id)
    return reconstruct(list(arena.values()))


def _require_ready(bracket: Bracket, match_id: str) -> Optional[Match]:
    match = bracket.get_match(match_id)
    if match is not None and not match.is_ready:
        raise InvalidResultError(f"Match {match_id} does not have two teams yet")
    return match


def record_score(bracket: Bracket, match_id: str, team1_score: int, team2_score: int,
                 events: Optional[BracketEvents] = None) -> Bracket:
    """Complete a match from its score; the higher score wins."""
    match = _require_ready(bracket, match_id)
    if match is None:
        return bracket
    if team1_score == team2_score:
        raise InvalidResultError("Scores cannot be tied. One team must win.")
    if team1_score > team2_score:
        winner, loser = match.team1, match.team2
    else:
        winner, loser = match.team2, match.team1
    return advance(bracket, match_id, winner.id, loser.id, team1_score, team2_score, events)


def force_win(bracket: Bracket, match_id: str, winner_id: str,
              events: Optional[BracketEvents] = None) -> Bracket:
    """Director override: ``winner_id`` takes the match 30-0."""
    match = _require_ready(bracket, match_id)
    if match is None:
        return bracket
    if match.team1.id == winner_id:
        return advance(bracket, match_id, winner_id, match.team2.id, FORCED_WIN_SCORE, 0, events)
    if match.team2.id == winner_id:
        return advance(bracket, match_id, winner_id, match.team1.id, 0, FORCED_WIN_SCORE, events)
    raise InvalidResultError(f"Team {winner_id} is not playing in match {match_id}")
