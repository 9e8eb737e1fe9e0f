"""
Tests for applying results: routing, loss counts, Grand Final and Reset Match.
"""
import pytest
from conftest import play_until
from bracket.advancement import advance, force_win, record_score, start_match
from bracket.models import InvalidResultError, Match, Team, COMPLETED, IN_PROGRESS, PENDING
from bracket.topology import GRAND_FINAL, RESET_MATCH
from bracket.view import champion, competitors, playable_matches, reconstruct


def _ids(match):
    return (match.team1.id if match.team1 else None, match.team2.id if match.team2 else None)


def _with_grand_final(bracket, team1, team2):
    """Copy of ``bracket`` with the Grand Final slots set by hand."""
    matches = [Match.from_dict(m.to_dict()) for m in bracket.all_matches]
    for match in matches:
        if match.id == GRAND_FINAL:
            match.team1 = team1
            match.team2 = team2
    return reconstruct(matches)


class TestAdvance:
    """Tests for advance on early matches."""

    def test_first_round_result(self, bracket):
        """W-R1-M1 winner joins seed 3 in W-R2-M2, loser drops to L-R1-M1."""
        result = advance(bracket, 'W-R1-M1', 't7', 't8', 21, 15)

        played = result.get_match('W-R1-M1')
        assert played.status == COMPLETED
        assert (played.team1_score, played.team2_score) == (21, 15)
        assert (played.winner_id, played.loser_id) == ('t7', 't8')

        # seed 3 already holds Team 1, so the winner takes Team 2
        assert _ids(result.get_match('W-R2-M2')) == ('t3', 't7')

        dropped = result.get_match('L-R1-M1')
        assert dropped.team1.id == 't8'
        assert dropped.team1.losses == 1
        assert dropped.team2 is None

    def test_winner_keeps_loss_count(self, bracket):
        """The advancing team is not charged a loss."""
        result = advance(bracket, 'W-R1-M1', 't8', 't7', 10, 21)
        assert result.get_match('W-R2-M2').team2.id == 't8'
        assert result.get_match('W-R2-M2').team2.losses == 0

    def test_input_bracket_untouched(self, bracket):
        """advance returns a new bracket and leaves the old one as it was."""
        before = bracket.to_dict()
        result = advance(bracket, 'W-R1-M1', 't7', 't8', 21, 15)
        assert result is not bracket
        assert bracket.to_dict() == before
        assert bracket.get_match('W-R2-M2').team2 is None

    def test_unknown_match_is_noop(self, bracket, events):
        """An unknown match id hands back the same bracket."""
        assert advance(bracket, 'W-R9-M9', 't7', 't8', 21, 15, events) is bracket
        assert events.completed == []

    def test_loser_edge_pairing(self, bracket):
        """W-R2-M2's loser meets W-R1-M1's loser in L-R1-M1."""
        result = advance(bracket, 'W-R1-M1', 't7', 't8', 21, 15)
        result = advance(result, 'W-R2-M2', 't3', 't7', 21, 19)
        assert _ids(result.get_match('L-R1-M1')) == ('t8', 't7')
        assert result.get_match('W-R3-M1').team1.id == 't3'

    def test_full_destination_not_overwritten(self, bracket):
        """Replaying a match into a full destination is dropped silently."""
        result = advance(bracket, 'W-R1-M1', 't7', 't8', 21, 15)
        again = advance(result, 'W-R1-M1', 't8', 't7', 15, 21)
        assert _ids(again.get_match('W-R2-M2')) == ('t3', 't7')
        assert again.get_match('W-R1-M1').winner_id == 't8'

    def test_second_loss_eliminates(self, bracket, events):
        """Losing in the losers bracket reports elimination and routes nowhere."""
        result = advance(bracket, 'W-R1-M1', 't7', 't8', 21, 15, events)
        result = advance(result, 'W-R2-M2', 't3', 't7', 21, 19, events)
        result = advance(result, 'L-R1-M1', 't8', 't7', 21, 11, events)
        assert events.eliminated == [('t7', 'L-R1-M1', 2)]
        assert result.get_match('L-R2-M1').team1.id == 't8'
        assert [t.losses for t in competitors(result) if t.id == 't7'] == [2]

    def test_completion_events(self, bracket, events):
        """Each result fires on_match_completed once."""
        advance(bracket, 'W-R1-M1', 't7', 't8', 21, 15, events)
        assert events.completed == [('W-R1-M1', 't7', 't8')]
        assert events.eliminated == []
        assert events.resolved == []

    def test_default_events_log(self, bracket, caplog):
        """Without a listener the result is logged."""
        with caplog.at_level('INFO', logger='bracket.events'):
            advance(bracket, 'W-R1-M1', 't7', 't8', 21, 15)
        assert 'W-R1-M1' in caplog.text


class TestPlayThrough:
    """Driving the whole bracket with Team 1 always winning."""

    def test_winners_champion_reaches_team1_slot(self, bracket):
        """The W-R4-M1 winner sits in Grand Final Team 1, the loser in L-R5-M1."""
        result = play_until(bracket, stop_at='L-R1-M1')
        assert result.get_match('W-R4-M1').status == COMPLETED
        assert _ids(result.get_match(GRAND_FINAL)) == ('t1', None)
        assert result.get_match('L-R5-M1').team1.id == 't4'

    def test_losers_champion_reaches_team2_slot(self, bracket):
        """The L-R5-M1 winner fills Grand Final Team 2 with one loss."""
        result = play_until(bracket, stop_at=GRAND_FINAL)
        grand_final = result.get_match(GRAND_FINAL)
        assert _ids(grand_final) == ('t1', 't4')
        assert grand_final.team1.losses == 0
        assert grand_final.team2.losses == 1

    def test_terminates_with_single_champion(self, bracket, events):
        """Exactly one completed terminal match, won by the only team left."""
        result = play_until(bracket, events=events)

        terminal = [m for m in result.all_matches if m.is_completed and not m.feeds_into_match_id]
        assert [m.id for m in terminal] == [GRAND_FINAL]

        survivors = [t for t in competitors(result) if not t.eliminated]
        assert [t.id for t in survivors] == ['t1']
        assert terminal[0].winner_id == 't1'
        assert champion(result).id == 't1'

        assert len(events.completed) == 18
        assert len(events.eliminated) == 9
        assert events.resolved == [('t1', GRAND_FINAL)]
        assert playable_matches(result) == []


class TestGrandFinal:
    """Reset Match rules at the Grand Final."""

    def test_losers_champion_win_forces_reset(self, bracket, events):
        """Team 2 winning the Grand Final sends both teams to the Reset Match."""
        result = play_until(bracket, stop_at=GRAND_FINAL)
        result = record_score(result, GRAND_FINAL, 18, 21, events)

        reset = result.get_match(RESET_MATCH)
        assert _ids(reset) == ('t1', 't4')
        assert reset.status == PENDING
        assert reset.team1.losses == 1
        assert reset.team2.losses == 1
        assert champion(result) is None
        assert events.resolved == []

    def test_reset_match_decides_champion(self, bracket, events):
        """The Reset Match winner is champion; the loser is eliminated."""
        result = play_until(bracket, stop_at=GRAND_FINAL)
        result = record_score(result, GRAND_FINAL, 18, 21)
        result = record_score(result, RESET_MATCH, 15, 21, events)

        assert champion(result).id == 't4'
        assert events.resolved == [('t4', RESET_MATCH)]
        assert events.eliminated == [('t1', RESET_MATCH, 2)]

    def test_winners_champion_win_is_final(self, bracket, events):
        """Team 1 winning with the loser on two losses ends the tournament."""
        result = play_until(bracket, stop_at=GRAND_FINAL)
        result = record_score(result, GRAND_FINAL, 21, 18, events)

        reset = result.get_match(RESET_MATCH)
        assert _ids(reset) == (None, None)
        assert reset.status == PENDING
        assert events.eliminated == [('t4', GRAND_FINAL, 2)]
        assert events.resolved == [('t1', GRAND_FINAL)]
        assert champion(result).id == 't1'

    def test_loser_with_one_loss_gets_reset(self, bracket, events):
        """With the slots swapped, a Team 1 win over an unbeaten loser still forces a Reset Match."""
        swapped = _with_grand_final(
            bracket,
            Team(id='t4', name='Team 4', seed=4, losses=1),
            Team(id='t1', name='Team 1', seed=1, losses=0),
        )
        result = advance(swapped, GRAND_FINAL, 't4', 't1', 21, 19, events)

        reset = result.get_match(RESET_MATCH)
        assert _ids(reset) == ('t4', 't1')
        assert reset.team2.losses == 1
        assert reset.status == PENDING
        assert events.resolved == []
        assert champion(result) is None

    def test_team2_win_checked_before_loss_count(self, bracket):
        """A Team 2 win always forces the reset, whatever the loss counts."""
        swapped = _with_grand_final(
            bracket,
            Team(id='t4', name='Team 4', seed=4, losses=1),
            Team(id='t1', name='Team 1', seed=1, losses=0),
        )
        result = advance(swapped, GRAND_FINAL, 't1', 't4', 19, 21)
        # loser t4 now has two losses yet the reset is still created
        assert _ids(result.get_match(RESET_MATCH)) == ('t4', 't1')
        assert result.get_match(RESET_MATCH).team1.losses == 2

    def test_replayed_grand_final_repopulates_reset(self, bracket):
        """Replaying the Grand Final resets the Reset Match to pending."""
        result = play_until(bracket, stop_at=GRAND_FINAL)
        result = record_score(result, GRAND_FINAL, 18, 21)
        result = start_match(result, RESET_MATCH)
        assert result.get_match(RESET_MATCH).status == IN_PROGRESS
        result = record_score(result, GRAND_FINAL, 18, 21)
        assert result.get_match(RESET_MATCH).status == PENDING


class TestStartMatch:
    """Tests for start_match."""

    def test_start_ready_match(self, bracket):
        """A pending match with two teams moves to in progress."""
        result = start_match(bracket, 'W-R1-M1')
        assert result.get_match('W-R1-M1').status == IN_PROGRESS
        assert bracket.get_match('W-R1-M1').status == PENDING

    def test_start_incomplete_match(self, bracket):
        """A match still waiting for a team stays pending."""
        assert start_match(bracket, 'W-R2-M2') is bracket

    def test_start_never_regresses(self, bracket):
        """Completed or unknown matches are left alone."""
        played = record_score(bracket, 'W-R1-M1', 21, 15)
        assert start_match(played, 'W-R1-M1') is played
        assert start_match(played, 'nope') is played

    def test_in_progress_then_completed(self, bracket):
        """A started match completes normally."""
        result = record_score(start_match(bracket, 'W-R1-M1'), 'W-R1-M1', 21, 15)
        assert result.get_match('W-R1-M1').status == COMPLETED


class TestRecordScore:
    """Tests for score-driven entry."""

    def test_higher_score_wins(self, bracket):
        """Team 2 wins with the higher score."""
        result = record_score(bracket, 'W-R1-M1', 15, 21)
        match = result.get_match('W-R1-M1')
        assert (match.winner_id, match.loser_id) == ('t8', 't7')

    def test_tie_rejected(self, bracket):
        """Tied scores raise."""
        with pytest.raises(InvalidResultError, match='tied'):
            record_score(bracket, 'W-R1-M1', 21, 21)

    def test_match_without_two_teams(self, bracket):
        """A match waiting for teams cannot be scored."""
        with pytest.raises(InvalidResultError):
            record_score(bracket, 'W-R2-M2', 21, 15)

    def test_unknown_match(self, bracket):
        """Unknown match ids are a no-op."""
        assert record_score(bracket, 'nope', 21, 15) is bracket


class TestForceWin:
    """Tests for director overrides."""

    def test_force_team2(self, bracket):
        """Forcing Team 2 records 0-30."""
        result = force_win(bracket, 'W-R1-M1', 't8')
        match = result.get_match('W-R1-M1')
        assert (match.team1_score, match.team2_score) == (0, 30)
        assert match.winner_id == 't8'
        assert result.get_match('L-R1-M1').team1.id == 't7'

    def test_force_team1(self, bracket):
        """Forcing Team 1 records 30-0."""
        match = force_win(bracket, 'W-R1-M2', 't9').get_match('W-R1-M2')
        assert (match.team1_score, match.team2_score) == (30, 0)

    def test_force_outsider(self, bracket):
        """A team not in the match cannot be forced through."""
        with pytest.raises(InvalidResultError):
            force_win(bracket, 'W-R1-M1', 't1')
