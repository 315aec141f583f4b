"""Authentication routes."""

import logging
from flask import Blueprint, jsonify, request, current_app

from core import auth_service
from web import error_response, config_manager

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/auth/login', methods=['POST'])
def login():
    """Resolve the server and log in with username/password."""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400

    try:
        settings = config_manager().load_settings()
    except Exception as e:
        return error_response(e, "loading settings")

    url = data.get('url') or settings['server_url']
    username = data.get('username') or settings['username']
    password = data.get('password', '')

    if not url or not username:
        return jsonify({'error': 'Missing server URL or username'}), 400

    try:
        client = auth_service.login(url, username, password, settings)
    except Exception as e:
        return error_response(e, "logging in")

    current_app.state.set_client(client)
    logging.info(f"Web session logged in as '{client.credentials.user_name}' on {client.address}")
    return jsonify({
        'status': 'authenticated',
        'server': client.address,
        'username': client.credentials.user_name,
        'user_id': client.credentials.user_id,
    })


@auth_bp.route('/auth/logout', methods=['POST'])
def logout():
    """Forget the current client."""
    current_app.state.clear_auth()
    return jsonify({'status': 'unauthenticated'})


@auth_bp.route('/auth/status')
def auth_status():
    """Check current auth state."""
    client = current_app.state.client
    if client is not None and client.is_authenticated:
        return jsonify({
            'state': 'authenticated',
            'server': client.address,
            'username': client.credentials.user_name,
        })
    return jsonify({'state': 'unauthenticated'})
