"""
Authentication service for Jellyfin username/password login.

Shared by the CLI and the web API. No UI dependencies.
"""

import logging

from core.jellyfin_client import ClientInfo
from core import server_service
from utils.constants import CLIENT_NAME, DEVICE_NAME, DEFAULT_DISCOVERY_TIMEOUT


def build_client_info(settings):
    """
    Create the ClientInfo announced to the server from loaded settings.

    Args:
        settings: dict from ConfigManager.load_settings()
    """
    return ClientInfo(
        device_id=settings['device_id'],
        client_name=settings.get('client_name') or CLIENT_NAME,
        device_name=settings.get('device_name') or DEVICE_NAME,
    )


def login(url, username, password, settings):
    """
    Resolve the server behind url and log in.

    Returns:
        Authenticated JellyfinClient

    Raises:
        NoServersFoundError: discovery found nothing; no login is attempted
        requests.RequestException: login rejected or failed, as raised
    """
    logging.info(f"Starting login to {url} as '{username}'...")
    client = server_service.resolve(
        url,
        build_client_info(settings),
        timeout=settings.get('discovery_timeout', DEFAULT_DISCOVERY_TIMEOUT),
    )
    return client.authenticate(username, password)
