"""
Flask web application for the double elimination bracket engine.
"""
import os
import yaml
from flask import Flask, request, jsonify
from bracket.advancement import force_win, record_score, start_match
from bracket.double_elimination import generate, regenerate
from bracket.models import InvalidResultError, teams_from_entries
from bracket.store import BracketStore
from bracket.view import champion, playable_matches, standings

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(BASE_DIR, 'data'))


def get_store() -> BracketStore:
    """Store rooted at the configured data directory."""
    return BracketStore(DATA_DIR)


def _error(message, status):
    return jsonify({'success': False, 'error': message}), status


def _bracket_payload(bracket):
    winner = champion(bracket)
    return {
        'bracket': bracket.to_dict(),
        'playable': [m.id for m in playable_matches(bracket)],
        'champion': winner.to_dict() if winner else None,
    }


def _load(store, tournament_id):
    """Return (bracket, error_response)."""
    try:
        bracket = store.load_bracket(tournament_id)
    except ValueError as e:
        return None, _error(str(e), 400)
    except yaml.YAMLError as e:
        app.logger.warning(f'Failed to parse bracket for {tournament_id}: {e}')
        return None, _error('Stored bracket is unreadable', 500)
    if bracket is None:
        return None, _error(f'No bracket for tournament {tournament_id}', 404)
    return bracket, None


def _update_match(tournament_id, match_id, operation):
    """Load, apply ``operation`` to the bracket and save, all under the tournament lock."""
    store = get_store()
    try:
        lock = store.lock(tournament_id)
    except ValueError as e:
        return _error(str(e), 400)
    with lock:
        bracket, error = _load(store, tournament_id)
        if error:
            return error
        if bracket.get_match(match_id) is None:
            return _error(f'Match {match_id} not found', 404)
        try:
            bracket = operation(bracket)
        except InvalidResultError as e:
            return _error(str(e), 400)
        store.save_bracket(tournament_id, bracket)
    return jsonify({'success': True, **_bracket_payload(bracket)})


@app.route('/api/tournaments', methods=['GET'])
def api_list_tournaments():
    return jsonify({'success': True, 'tournaments': get_store().list_tournaments()})


@app.route('/api/tournaments/<tournament_id>/bracket', methods=['GET'])
def api_get_bracket(tournament_id):
    bracket, error = _load(get_store(), tournament_id)
    if error:
        return error
    return jsonify({'success': True, **_bracket_payload(bracket)})


@app.route('/api/tournaments/<tournament_id>/bracket', methods=['POST'])
def api_generate_bracket(tournament_id):
    data = request.get_json(silent=True) or {}
    teams = teams_from_entries(data.get('teams', []))
    try:
        bracket = generate(teams)
        get_store().save_bracket(tournament_id, bracket)
    except ValueError as e:
        return _error(str(e), 400)
    app.logger.info(f'Generated bracket for {tournament_id} with {len(teams)} teams')
    return jsonify({'success': True, **_bracket_payload(bracket)}), 201


@app.route('/api/tournaments/<tournament_id>/bracket', methods=['DELETE'])
def api_delete_bracket(tournament_id):
    try:
        deleted = get_store().delete_bracket(tournament_id)
    except ValueError as e:
        return _error(str(e), 400)
    if not deleted:
        return _error(f'No bracket for tournament {tournament_id}', 404)
    return jsonify({'success': True})


@app.route('/api/tournaments/<tournament_id>/bracket/reset', methods=['POST'])
def api_reset_bracket(tournament_id):
    store = get_store()
    try:
        lock = store.lock(tournament_id)
    except ValueError as e:
        return _error(str(e), 400)
    with lock:
        bracket, error = _load(store, tournament_id)
        if error:
            return error
        bracket = regenerate(bracket)
        store.save_bracket(tournament_id, bracket)
    app.logger.info(f'Bracket for {tournament_id} reset to its initial state')
    return jsonify({'success': True, **_bracket_payload(bracket)})


@app.route('/api/tournaments/<tournament_id>/standings', methods=['GET'])
def api_standings(tournament_id):
    bracket, error = _load(get_store(), tournament_id)
    if error:
        return error
    rows = [
        {'team': row['team'].to_dict(), 'wins': row['wins'], 'losses': row['losses']}
        for row in standings(bracket)
    ]
    return jsonify({'success': True, 'standings': rows})


@app.route('/api/tournaments/<tournament_id>/matches/<match_id>/start', methods=['POST'])
def api_start_match(tournament_id, match_id):
    return _update_match(tournament_id, match_id, lambda b: start_match(b, match_id))


@app.route('/api/tournaments/<tournament_id>/matches/<match_id>/score', methods=['POST'])
def api_score_match(tournament_id, match_id):
    data = request.get_json(silent=True) or {}
    try:
        team1_score = int(data.get('team1_score', 0))
        team2_score = int(data.get('team2_score', 0))
    except (TypeError, ValueError):
        return _error('Scores must be integers', 400)
    return _update_match(
        tournament_id, match_id,
        lambda b: record_score(b, match_id, team1_score, team2_score),
    )


@app.route('/api/tournaments/<tournament_id>/matches/<match_id>/force', methods=['POST'])
def api_force_win(tournament_id, match_id):
    data = request.get_json(silent=True) or {}
    winner_id = data.get('winner_id')
    if not winner_id:
        return _error('winner_id is required', 400)
    return _update_match(tournament_id, match_id, lambda b: force_win(b, match_id, winner_id))


if __name__ == '__main__':
    app.run(debug=True)
