"""
Observer hooks fired while a bracket advances.
"""
import logging

logger = logging.getLogger(__name__)


class BracketEvents:
    """
    Base listener; every hook is a no-op.

    Subclass and override the hooks of interest, then pass an instance to
    ``advance`` (or the score helpers built on it).
    """

    def on_match_completed(self, match, winner, loser):
        pass

    def on_competitor_eliminated(self, team, match):
        pass

    def on_tournament_resolved(self, champion, match):
        pass


class LoggingEvents(BracketEvents):
    """Default listener: reports each event on the ``bracket.events`` logger."""

    def on_match_completed(self, match, winner, loser):
        logger.info(
            "Match %s (#%s) completed %s-%s: winner=%s loser=%s",
            match.id, match.match_number, match.team1_score, match.team2_score,
            winner.name if winner else match.winner_id,
            loser.name if loser else match.loser_id,
        )

    def on_competitor_eliminated(self, team, match):
        logger.info("%s eliminated in %s with %d losses", team.name, match.id, team.losses)

    def on_tournament_resolved(self, champion, match):
        logger.info("Tournament resolved in %s: champion %s", match.id, champion.name if champion else None)
