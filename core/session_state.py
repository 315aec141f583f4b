"""
In-memory session state for the JellySubChanger web API.

Holds the one authenticated client of a single-user local app. The client
and its credentials are immutable; logging in again swaps the reference.
"""

import threading


class SessionState:
    """Thread-safe holder for the current client of a single-user local app."""

    def __init__(self):
        self._lock = threading.Lock()
        self.client = None           # authenticated JellyfinClient

    def set_client(self, client):
        with self._lock:
            self.client = client

    def clear_auth(self):
        with self._lock:
            self.client = None
