"""Library browsing routes."""

from flask import Blueprint, jsonify, request, current_app

from core import library_service, track_service
from web import error_response

library_bp = Blueprint('library', __name__)


def _not_authenticated():
    return jsonify({'error': 'Not authenticated'}), 401


@library_bp.route('/shows')
def search_shows():
    """Search series by name."""
    client = current_app.state.client
    if not client:
        return _not_authenticated()

    term = request.args.get('q', '').strip()
    if not term:
        return jsonify({'error': 'Missing search term'}), 400

    try:
        hints = client.search_shows(term)
        return jsonify([library_service.summarize_item(h) for h in hints])
    except Exception as e:
        return error_response(e, f"searching shows for '{term}'")


@library_bp.route('/shows/<show_id>/seasons')
def list_seasons(show_id):
    client = current_app.state.client
    if not client:
        return _not_authenticated()

    try:
        seasons = client.list_seasons(show_id)
        return jsonify([library_service.summarize_item(s) for s in seasons])
    except Exception as e:
        return error_response(e, f"listing seasons of {show_id}")


@library_bp.route('/shows/<show_id>/seasons/<season_id>/episodes')
def list_episodes(show_id, season_id):
    client = current_app.state.client
    if not client:
        return _not_authenticated()

    try:
        episodes = client.list_episodes(show_id, season_id)
        return jsonify([library_service.summarize_item(e) for e in episodes])
    except Exception as e:
        return error_response(e, f"listing episodes of season {season_id}")


@library_bp.route('/episodes/<episode_id>')
def get_episode(episode_id):
    """Full episode record as returned by the server."""
    client = current_app.state.client
    if not client:
        return _not_authenticated()

    try:
        return jsonify(client.get_episode(episode_id))
    except Exception as e:
        return error_response(e, f"fetching episode {episode_id}")


@library_bp.route('/episodes/<episode_id>/streams')
def episode_streams(episode_id):
    """Subtitle and audio tracks of an episode, current defaults flagged."""
    client = current_app.state.client
    if not client:
        return _not_authenticated()

    try:
        episode = client.get_episode(episode_id)
        return jsonify(track_service.stream_choices(episode))
    except Exception as e:
        return error_response(e, f"listing streams of episode {episode_id}")
