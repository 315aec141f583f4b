#!/usr/bin/env python3
"""
JellySubChanger - Bulk default subtitle/audio track changer for Jellyfin
Browse a Jellyfin library and set the default tracks of whole seasons.
"""

import argparse
import getpass
import logging
import os
import sys

import requests

from core import auth_service, track_service
from core.library_service import get_item_title
from error_handling import (
    CrashReporter,
    ErrorMessageFormatter,
    JellySubChangerError,
)
from utils.config_manager import ConfigManager
from utils.constants import CONFIG_FILE_PATH
from utils.logging_config import setup_logging

PASSWORD_ENV = "JELLYFIN_PASSWORD"


class JellySubChanger:
    """Command-line front-end over an authenticated Jellyfin client."""

    def __init__(self, client):
        self.client = client

    def search_shows(self, term):
        """Print shows matching a search term."""
        hints = self.client.search_shows(term)
        if not hints:
            print(f"No shows found for '{term}'")
            return hints

        print(f"\nShows matching '{term}':")
        for hint in hints:
            print(f"  - {get_item_title(hint)} (ID: {hint.get('Id') or hint.get('ItemId')})")
        return hints

    def list_seasons(self, show_id):
        seasons = self.client.list_seasons(show_id)
        print("\nSeasons:")
        for season in seasons:
            print(f"  - {get_item_title(season)} (ID: {season.get('Id')})")
        return seasons

    def list_episodes(self, show_id, season_id):
        episodes = self.client.list_episodes(show_id, season_id)
        print("\nEpisodes:")
        for episode in episodes:
            print(f"  - {get_item_title(episode)} (ID: {episode.get('Id')})")
        return episodes

    def list_streams(self, episode_id):
        """Print the subtitle and audio tracks of one episode."""
        episode = self.client.get_episode(episode_id)
        choices = track_service.stream_choices(episode)
        print(f"\n{get_item_title(episode)}:")

        for heading, key in (("Subtitles", 'subtitles'), ("Audio", 'audio')):
            print(f"  {heading}:")
            if not choices[key]:
                print("    (none)")
            for stream in choices[key]:
                default = "[DEFAULT] " if stream['default'] else ""
                print(f"    {default}Index: {stream['index']} | {stream['label']}")
        return choices

    def set_episode_defaults(self, episode_id, subtitle, audio):
        subtitle_changed, audio_changed = track_service.update_defaults(self.client, episode_id, subtitle, audio)
        self._print_result(episode_id, subtitle_changed, audio_changed)
        return subtitle_changed, audio_changed

    def set_season_defaults(self, show_id, season_id, subtitle, audio):
        print("\nSetting default tracks:")
        results = track_service.update_season_defaults(self.client, show_id, season_id, subtitle, audio)
        for result in results:
            self._print_result(result.title, result.subtitle_changed, result.audio_changed)

        changed = sum(1 for r in results if r.changed)
        print(f"\n{changed}/{len(results)} episode(s) changed")
        return results

    @staticmethod
    def _print_result(title, subtitle_changed, audio_changed):
        if subtitle_changed or audio_changed:
            parts = []
            if subtitle_changed:
                parts.append("subtitle")
            if audio_changed:
                parts.append("audio")
            print(f"  ✓ {title} - Set {' and '.join(parts)}")
        else:
            print(f"  ✗ {title} - No matching tracks")


def descriptor_from_args(label, index):
    """StreamDescriptor from CLI options, or None when the axis was not given."""
    if label is None and index is None:
        return None
    if label is None or index is None:
        raise ValueError("Both a label and an index are needed to pick a stream")
    return track_service.StreamDescriptor(label=label, index=index)


def resolve_password(args):
    """--password, then the environment, then an interactive prompt."""
    if args.password:
        return args.password
    if os.environ.get(PASSWORD_ENV):
        return os.environ[PASSWORD_ENV]
    return getpass.getpass(f"Password for {args.username}: ")


def build_parser():
    parser = argparse.ArgumentParser(
        description='JellySubChanger - Bulk default subtitle/audio track changer for Jellyfin',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Find a show
  python jelly_subchanger.py --server jf.local --username me --search "Frieren"

  # List seasons, then episodes
  python jelly_subchanger.py --server jf.local --username me --show SHOW_ID --list-seasons
  python jelly_subchanger.py --server jf.local --username me --show SHOW_ID --season SEASON_ID --list-episodes

  # Show the tracks of one episode
  python jelly_subchanger.py --server jf.local --username me --episode EPISODE_ID --list-streams

  # Make "English - SUBRIP" (index 3) the default subtitle of a whole season
  python jelly_subchanger.py --server jf.local --username me --show SHOW_ID --season SEASON_ID \\
      --set-defaults --subtitle-label "English - SUBRIP" --subtitle-index 3

  # Serve the JSON API
  python jelly_subchanger.py --serve
        """
    )

    # Connection arguments
    parser.add_argument('--server', help='Jellyfin server URL (default: from config.ini)')
    parser.add_argument('--username', help='Jellyfin username (default: from config.ini)')
    parser.add_argument('--password', help=f'Jellyfin password (default: ${PASSWORD_ENV} or prompt)')
    parser.add_argument('--config', default=CONFIG_FILE_PATH, help='Path to config.ini')
    parser.add_argument('--remember', action='store_true', help='Save server URL and username to config.ini')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')

    # Selection
    parser.add_argument('--show', help='Show (series) ID')
    parser.add_argument('--season', help='Season ID')
    parser.add_argument('--episode', help='Episode ID')

    # Actions
    actions = parser.add_mutually_exclusive_group()
    actions.add_argument('--search', metavar='TERM', help='Search shows by name')
    actions.add_argument('--list-seasons', action='store_true', help='List seasons of --show')
    actions.add_argument('--list-episodes', action='store_true', help='List episodes of --show/--season')
    actions.add_argument('--list-streams', action='store_true', help='List subtitle/audio tracks of --episode')
    actions.add_argument('--set-defaults', action='store_true',
                         help='Set default tracks of --episode, or of every episode in --show/--season')
    actions.add_argument('--serve', action='store_true', help='Run the JSON web API')

    # Track options
    parser.add_argument('--subtitle-label', help='Display title of the subtitle stream')
    parser.add_argument('--subtitle-index', type=int, help='Index of the subtitle stream')
    parser.add_argument('--audio-label', help='Display title of the audio stream')
    parser.add_argument('--audio-index', type=int, help='Index of the audio stream')

    return parser


def action_name(args):
    for name in ("search", "list_seasons", "list_episodes", "list_streams", "set_defaults", "serve"):
        if getattr(args, name):
            return name
    return None


def serve(settings, config_path):
    """Run the Flask JSON API until interrupted."""
    from web import create_app
    app = create_app(config_path=config_path)
    logging.info(f"Serving JSON API on http://{settings['web_host']}:{settings['web_port']}")
    app.run(host=settings['web_host'], port=settings['web_port'])


def validate_args(args):
    """
    Check action/selection combinations before touching the network.

    Returns:
        tuple: (subtitle, audio) StreamDescriptors for --set-defaults

    Raises:
        ValueError: on a missing or inconsistent option
    """
    if args.list_seasons and not args.show:
        raise ValueError("--list-seasons needs --show")
    if args.list_episodes and not (args.show and args.season):
        raise ValueError("--list-episodes needs --show and --season")
    if args.list_streams and not args.episode:
        raise ValueError("--list-streams needs --episode")

    subtitle = audio = None
    if args.set_defaults:
        subtitle = descriptor_from_args(args.subtitle_label, args.subtitle_index)
        audio = descriptor_from_args(args.audio_label, args.audio_index)
        if subtitle is None and audio is None:
            raise ValueError("--set-defaults needs a subtitle and/or an audio stream")
        if not args.episode and not (args.show and args.season):
            raise ValueError("--set-defaults needs --episode, or --show and --season")
    return subtitle, audio


def run(args, settings, subtitle=None, audio=None):
    """Log in and dispatch the requested action. Errors propagate."""
    client = auth_service.login(args.server, args.username, resolve_password(args), settings)
    app = JellySubChanger(client)

    if args.search:
        app.search_shows(args.search)
    elif args.list_seasons:
        app.list_seasons(args.show)
    elif args.list_episodes:
        app.list_episodes(args.show, args.season)
    elif args.list_streams:
        app.list_streams(args.episode)
    elif args.set_defaults:
        if args.episode:
            app.set_episode_defaults(args.episode, subtitle, audio)
        else:
            app.set_season_defaults(args.show, args.season, subtitle, audio)


def main(argv=None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = ConfigManager(args.config)
    try:
        settings = config.load_settings()
    except JellySubChangerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(debug=args.debug or settings['enable_debug_logging'])

    if args.serve:
        serve(settings, args.config)
        return 0

    if action_name(args) is None:
        parser.print_help()
        return 0

    args.server = args.server or settings['server_url']
    args.username = args.username or settings['username']
    if not args.server or not args.username:
        parser.error("--server and --username are required (or set them in config.ini)")

    if args.remember:
        settings['server_url'] = args.server
        settings['username'] = args.username
        config.save_settings(settings)

    try:
        subtitle, audio = validate_args(args)
    except ValueError as e:
        parser.error(str(e))

    try:
        run(args, settings, subtitle, audio)
    except (JellySubChangerError, requests.RequestException) as e:
        print(f"\n{ErrorMessageFormatter.format_jellyfin_error(e)}", file=sys.stderr)
        return 1
    except Exception as e:
        CrashReporter().report_crash(e, {"action": action_name(args), "server": args.server})
        raise

    return 0


if __name__ == '__main__':
    sys.exit(main())
