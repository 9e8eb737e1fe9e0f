"""
Shared pytest fixtures for bracket engine tests.
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket.advancement import record_score
from bracket.double_elimination import generate
from bracket.events import BracketEvents
from bracket.models import Team
from bracket.view import playable_matches


class RecordingEvents(BracketEvents):
    """Collects every event for assertions."""

    def __init__(self):
        self.completed = []
        self.eliminated = []
        self.resolved = []

    def on_match_completed(self, match, winner, loser):
        self.completed.append((match.id, winner.id if winner else None, loser.id if loser else None))

    def on_competitor_eliminated(self, team, match):
        self.eliminated.append((team.id, match.id, team.losses))

    def on_tournament_resolved(self, champion, match):
        self.resolved.append((champion.id if champion else None, match.id))


def play_until(bracket, stop_at=None, events=None):
    """
    Play playable matches in match-number order, Team 1 always winning 21-15.

    Stops before playing ``stop_at`` once it becomes playable.
    """
    while True:
        playable = playable_matches(bracket)
        if not playable:
            return bracket
        match = playable[0]
        if match.id == stop_at:
            return bracket
        bracket = record_score(bracket, match.id, 21, 15, events)


@pytest.fixture
def ten_teams():
    """Ten teams entered in seed order, ids t1..t10."""
    return [Team(id=f't{i}', name=f'Team {i}') for i in range(1, 11)]


@pytest.fixture
def bracket(ten_teams):
    """A freshly generated bracket."""
    return generate(ten_teams)


@pytest.fixture
def events():
    return RecordingEvents()
