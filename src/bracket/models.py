from typing import Dict, List, Optional, Tuple

WINNERS = 'winners'
LOSERS = 'losers'
FINALS = 'finals'
SEGMENTS = (WINNERS, LOSERS, FINALS)

PENDING = 'pending'
IN_PROGRESS = 'in_progress'
COMPLETED = 'completed'
STATUS_ORDER = (PENDING, IN_PROGRESS, COMPLETED)

ELIMINATION_LOSSES = 2


class InvalidInputError(ValueError):
    """Raised when a bracket cannot be built from the given competitors."""


class InvalidResultError(ValueError):
    """Raised when a score cannot be applied to a match."""


class Team:
    def __init__(self, id, name, seed=0, losses=0):
        self.id = id
        self.name = name
        self.seed = seed
        self.losses = losses

    @property
    def eliminated(self) -> bool:
        return self.losses >= ELIMINATION_LOSSES

    def to_dict(self) -> Dict:
        return {'id': self.id, 'name': self.name, 'seed': self.seed, 'losses': self.losses}

    @classmethod
    def from_dict(cls, data: Dict) -> 'Team':
        return cls(
            id=data['id'],
            name=data.get('name', data['id']),
            seed=data.get('seed', 0),
            losses=data.get('losses', 0),
        )

    def __eq__(self, other):
        if not isinstance(other, Team):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Team(id={self.id}, name={self.name}, seed={self.seed}, losses={self.losses})"


def teams_from_entries(entries: List) -> List[Team]:
    """Build teams from a list of names or ``{'id', 'name'}`` mappings.

    A bare name doubles as the team id.
    """
    teams = []
    for entry in entries or []:
        if isinstance(entry, dict):
            team_id = str(entry.get('id') or entry.get('name', '')).strip()
            name = str(entry.get('name') or team_id).strip()
        else:
            team_id = name = str(entry).strip()
        teams.append(Team(id=team_id, name=name))
    return teams


class Match:
    def __init__(self, id, match_number, round, segment, team1=None, team2=None,
                 team1_score=0, team2_score=0, winner_id=None, loser_id=None,
                 status=PENDING, feeds_into_match_id=None, loser_feeds_into_match_id=None,
                 position=None):
        self.id = id
        self.match_number = match_number
        self.round = round
        self.segment = segment
        self.team1 = team1
        self.team2 = team2
        self.team1_score = team1_score
        self.team2_score = team2_score
        self.winner_id = winner_id
        self.loser_id = loser_id
        self.status = status
        self.feeds_into_match_id = feeds_into_match_id
        self.loser_feeds_into_match_id = loser_feeds_into_match_id
        # (round, index within round); layout only
        self.position = position if position else (round, 0)

    @property
    def is_ready(self) -> bool:
        return self.team1 is not None and self.team2 is not None

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED

    def occupant(self, team_id) -> Optional[Team]:
        """Return the team sitting in either slot with the given id."""
        for team in (self.team1, self.team2):
            if team is not None and team.id == team_id:
                return team
        return None

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'match_number': self.match_number,
            'round': self.round,
            'segment': self.segment,
            'team1': self.team1.to_dict() if self.team1 else None,
            'team2': self.team2.to_dict() if self.team2 else None,
            'team1_score': self.team1_score,
            'team2_score': self.team2_score,
            'winner_id': self.winner_id,
            'loser_id': self.loser_id,
            'status': self.status,
            'feeds_into_match_id': self.feeds_into_match_id,
            'loser_feeds_into_match_id': self.loser_feeds_into_match_id,
            'position': {'round': self.position[0], 'index': self.position[1]},
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Match':
        position = data.get('position') or {}
        return cls(
            id=data['id'],
            match_number=data.get('match_number', 0),
            round=data['round'],
            segment=data['segment'],
            team1=Team.from_dict(data['team1']) if data.get('team1') else None,
            team2=Team.from_dict(data['team2']) if data.get('team2') else None,
            team1_score=data.get('team1_score', 0),
            team2_score=data.get('team2_score', 0),
            winner_id=data.get('winner_id'),
            loser_id=data.get('loser_id'),
            status=data.get('status', PENDING),
            feeds_into_match_id=data.get('feeds_into_match_id'),
            loser_feeds_into_match_id=data.get('loser_feeds_into_match_id'),
            position=(position.get('round', data['round']), position.get('index', 0)),
        )

    def __eq__(self, other):
        if not isinstance(other, Match):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        team1 = self.team1.name if self.team1 else None
        team2 = self.team2.name if self.team2 else None
        return f"Match(id={self.id}, teams=({team1}, {team2}), status={self.status})"


class Round:
    def __init__(self, round, segment, matches):
        self.round = round
        self.segment = segment
        self.matches = matches

    def to_dict(self) -> Dict:
        return {
            'round': self.round,
            'segment': self.segment,
            'matches': [match.to_dict() for match in self.matches],
        }

    def __eq__(self, other):
        if not isinstance(other, Round):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Round(segment={self.segment}, round={self.round}, matches={len(self.matches)})"


class Bracket:
    """
    A double elimination bracket.

    ``all_matches`` is the authoritative state. The three round lists are a
    view grouped by (segment, round) and are rebuilt by ``view.reconstruct``
    after every change; never edit them directly.
    """

    def __init__(self, winners_rounds: List[Round], losers_rounds: List[Round],
                 finals_rounds: List[Round], all_matches: List[Match]):
        self.winners_rounds = winners_rounds
        self.losers_rounds = losers_rounds
        self.finals_rounds = finals_rounds
        self.all_matches = all_matches

    def matches_by_id(self) -> Dict[str, Match]:
        return {match.id: match for match in self.all_matches}

    def get_match(self, match_id) -> Optional[Match]:
        for match in self.all_matches:
            if match.id == match_id:
                return match
        return None

    def segment_counts(self) -> Tuple[int, int, int]:
        counts = {segment: 0 for segment in SEGMENTS}
        for match in self.all_matches:
            counts[match.segment] += 1
        return counts[WINNERS], counts[LOSERS], counts[FINALS]

    def to_dict(self, include_rounds: bool = True) -> Dict:
        data = {'all_matches': [match.to_dict() for match in self.all_matches]}
        if include_rounds:
            data['winners_rounds'] = [r.to_dict() for r in self.winners_rounds]
            data['losers_rounds'] = [r.to_dict() for r in self.losers_rounds]
            data['finals_rounds'] = [r.to_dict() for r in self.finals_rounds]
        return data

    def __eq__(self, other):
        if not isinstance(other, Bracket):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Bracket(matches={len(self.all_matches)})"
