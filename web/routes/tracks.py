"""Default track routes."""

import logging
from flask import Blueprint, jsonify, request, current_app

from core import track_service
from web import error_response

tracks_bp = Blueprint('tracks', __name__)


def _read_descriptors():
    """(subtitle, audio) StreamDescriptors from the JSON body. Raises ValueError."""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")
    subtitle = track_service.StreamDescriptor.from_dict(data.get('subtitle'))
    audio = track_service.StreamDescriptor.from_dict(data.get('audio'))
    if subtitle is None and audio is None:
        raise ValueError("Provide a subtitle and/or an audio stream")
    return subtitle, audio


@tracks_bp.route('/episodes/<episode_id>/defaults', methods=['POST'])
def set_episode_defaults(episode_id):
    """Set default subtitle/audio of one episode."""
    client = current_app.state.client
    if not client:
        return jsonify({'error': 'Not authenticated'}), 401

    try:
        subtitle, audio = _read_descriptors()
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    try:
        subtitle_changed, audio_changed = track_service.update_defaults(client, episode_id, subtitle, audio)
    except Exception as e:
        return error_response(e, f"updating defaults of episode {episode_id}")

    logging.info(f"Episode {episode_id}: subtitle_changed={subtitle_changed} audio_changed={audio_changed}")
    return jsonify({
        'episode_id': episode_id,
        'subtitle_changed': subtitle_changed,
        'audio_changed': audio_changed,
    })


@tracks_bp.route('/shows/<show_id>/seasons/<season_id>/defaults', methods=['POST'])
def set_season_defaults(show_id, season_id):
    """Set default subtitle/audio of every episode in a season."""
    client = current_app.state.client
    if not client:
        return jsonify({'error': 'Not authenticated'}), 401

    try:
        subtitle, audio = _read_descriptors()
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    try:
        results = track_service.update_season_defaults(client, show_id, season_id, subtitle, audio)
    except Exception as e:
        return error_response(e, f"updating defaults of season {season_id}")

    return jsonify({
        'changed_count': sum(1 for r in results if r.changed),
        'total_count': len(results),
        'results': [
            {
                'episode_id': r.episode_id,
                'title': r.title,
                'subtitle_changed': r.subtitle_changed,
                'audio_changed': r.audio_changed,
            }
            for r in results
        ],
    })
