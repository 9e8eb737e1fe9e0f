#!/usr/bin/env python3
"""
Command line front end for the double elimination bracket engine.

Usage:
    python src/main.py generate <tournament> --teams data/teams.yaml
    python src/main.py show <tournament>
    python src/main.py start <tournament> <match_id>
    python src/main.py score <tournament> <match_id> <team1_score> <team2_score>
    python src/main.py force <tournament> <match_id> <winner_id>
    python src/main.py reset <tournament>

Exit codes:
    0: Success
    1: Invalid input or result
    2: No bracket stored for the tournament
"""
import argparse
import logging
import os
import sys
import yaml
from bracket.advancement import force_win, record_score, start_match
from bracket.double_elimination import generate, regenerate
from bracket.models import PENDING, teams_from_entries
from bracket.store import BracketStore
from bracket.view import champion, playable_matches, standings

SEGMENT_TITLES = (
    ('winners_rounds', 'Winners'),
    ('losers_rounds', 'Losers'),
    ('finals_rounds', 'Finals'),
)


def load_teams(file_path):
    """Teams file: a YAML list of names or of {id, name} entries."""
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file) or []
    if isinstance(data, dict):
        data = data.get('teams', [])
    return teams_from_entries(data)


def _team_label(team):
    if team is None:
        return 'TBD'
    return f"({team.seed}) {team.name}"


def print_bracket(bracket):
    for attr, title in SEGMENT_TITLES:
        for bracket_round in getattr(bracket, attr):
            print(f"\n# {title} Round {bracket_round.round}")
            for match in bracket_round.matches:
                line = f"{match.id:<12} {_team_label(match.team1)} vs {_team_label(match.team2)}"
                if match.is_completed:
                    line += f"  {match.team1_score}-{match.team2_score}"
                elif match.status != PENDING:
                    line += f"  [{match.status}]"
                print(line)

    playable = playable_matches(bracket)
    if playable:
        print("\nReady to play: " + ", ".join(m.id for m in playable))

    winner = champion(bracket)
    if winner:
        print(f"\nChampion: {winner.name}")


def print_standings(bracket):
    print("\n--- Standings ---")
    for row in standings(bracket):
        team = row['team']
        print(f"{team.seed:>2}. {team.name:<24} W{row['wins']} L{row['losses']}")


def build_parser():
    script_dir = os.path.dirname(__file__)
    default_data_dir = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(os.path.dirname(script_dir), 'data'))

    parser = argparse.ArgumentParser(description='Ten team double elimination bracket')
    parser.add_argument('--data-dir', default=default_data_dir, help='Directory holding stored brackets')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log routing details')
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('generate', help='Create a bracket from a teams file')
    p.add_argument('tournament')
    p.add_argument('--teams', required=True, help='YAML list of ten teams in seed order')

    p = sub.add_parser('show', help='Print the bracket and standings')
    p.add_argument('tournament')

    p = sub.add_parser('start', help='Mark a match as in progress')
    p.add_argument('tournament')
    p.add_argument('match_id')

    p = sub.add_parser('score', help='Record a match score')
    p.add_argument('tournament')
    p.add_argument('match_id')
    p.add_argument('team1_score', type=int)
    p.add_argument('team2_score', type=int)

    p = sub.add_parser('force', help='Force a team to win a match')
    p.add_argument('tournament')
    p.add_argument('match_id')
    p.add_argument('winner_id')

    p = sub.add_parser('reset', help='Start the bracket over with the same teams')
    p.add_argument('tournament')
    return parser


def run(args):
    store = BracketStore(args.data_dir)

    if args.command == 'generate':
        bracket = generate(load_teams(args.teams))
        store.save_bracket(args.tournament, bracket)
        print_bracket(bracket)
        return 0

    with store.lock(args.tournament):
        bracket = store.load_bracket(args.tournament)
        if bracket is None:
            print(f"Error: no bracket for tournament '{args.tournament}'", file=sys.stderr)
            return 2

        if args.command == 'show':
            print_bracket(bracket)
            print_standings(bracket)
            return 0

        if args.command != 'reset' and bracket.get_match(args.match_id) is None:
            print(f"Error: match '{args.match_id}' not found", file=sys.stderr)
            return 1

        if args.command == 'start':
            bracket = start_match(bracket, args.match_id)
        elif args.command == 'score':
            bracket = record_score(bracket, args.match_id, args.team1_score, args.team2_score)
        elif args.command == 'force':
            bracket = force_win(bracket, args.match_id, args.winner_id)
        elif args.command == 'reset':
            bracket = regenerate(bracket)

        store.save_bracket(args.tournament, bracket)
    print_bracket(bracket)
    return 0


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s %(name)s: %(message)s',
    )
    try:
        return run(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
