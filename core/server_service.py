"""
Server discovery and connection service.

Turns a user-typed address into candidate URLs, probes each one's public
system info, ranks the answers and hands back a client for the best server.
"""

import time
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit, urlunsplit

import requests

from core.jellyfin_client import ClientInfo, JellyfinClient
from error_handling import NoServersFoundError, ErrorContext
from utils.constants import (
    HTTP_DEFAULT_PORT,
    HTTPS_DEFAULT_PORT,
    PRODUCT_NAME,
    MINIMUM_SERVER_VERSION,
    SLOW_RESPONSE_MS,
    DEFAULT_DISCOVERY_TIMEOUT,
    SCORE_PENALTY_INSECURE,
    SCORE_PENALTY_SLOW,
    SCORE_PENALTY_REDIRECT,
)

PUBLIC_INFO_PATH = "/System/Info/Public"

ISSUE_PRODUCT = "unsupported_product"
ISSUE_VERSION = "unsupported_version"
ISSUE_INSECURE = "insecure"
ISSUE_SLOW = "slow_response"
ISSUE_REDIRECT = "redirected"
# Issues that make a server unusable regardless of score
BLOCKING_ISSUES = {ISSUE_PRODUCT, ISSUE_VERSION}


@dataclass
class ServerCandidate:
    """A probed address and what the server said about itself."""
    address: str
    system_info: Dict[str, Any] = field(default_factory=dict)
    response_time_ms: float = 0.0
    redirected: bool = False
    issues: List[str] = field(default_factory=list)
    score: int = 0

    @property
    def usable(self) -> bool:
        return not BLOCKING_ISSUES.intersection(self.issues)

    @property
    def name(self) -> str:
        return self.system_info.get("ServerName") or self.address


def get_address_candidates(url):
    """
    Expand user input into the addresses worth probing.

    'jf.local' -> https://jf.local, https://jf.local:8920, http://jf.local,
    http://jf.local:8096. An explicit scheme or port is kept as given.
    """
    raw = (url or "").strip()
    if not raw:
        return []

    bases = [raw] if "://" in raw else [f"https://{raw}", f"http://{raw}"]

    candidates = []
    for base in bases:
        parts = urlsplit(base)
        try:
            port = parts.port
        except ValueError as e:
            logging.debug(f"Skipping malformed address {base}: {e}")
            continue
        if not parts.netloc:
            continue

        path = parts.path.rstrip("/")
        candidates.append(urlunsplit((parts.scheme, parts.netloc, path, "", "")))

        if port is None:
            default_port = HTTPS_DEFAULT_PORT if parts.scheme == "https" else HTTP_DEFAULT_PORT
            netloc = f"{parts.netloc}:{default_port}"
            candidates.append(urlunsplit((parts.scheme, netloc, path, "", "")))

    # Drop duplicates, keep order
    return list(dict.fromkeys(candidates))


def parse_version(version):
    """'10.8.13' -> (10, 8, 13). Unparseable parts stop the parse."""
    parts = []
    for piece in str(version or "").split("."):
        if not piece.isdigit():
            break
        parts.append(int(piece))
    return tuple(parts) or (0,)


def probe_server(session, address, timeout=DEFAULT_DISCOVERY_TIMEOUT) -> Optional[ServerCandidate]:
    """
    Fetch public system info from one address.

    Returns:
        ServerCandidate, or None if the address did not answer like a server
    """
    start = time.monotonic()
    try:
        response = session.get(f"{address}{PUBLIC_INFO_PATH}", timeout=timeout)
    except requests.RequestException as e:
        logging.debug(f"No server at {address}: {e}")
        return None
    elapsed_ms = (time.monotonic() - start) * 1000

    if not response.ok:
        logging.debug(f"No server at {address}: HTTP {response.status_code}")
        return None

    try:
        info = response.json()
    except ValueError:
        logging.debug(f"No server at {address}: response is not JSON")
        return None
    if not isinstance(info, dict):
        return None

    redirected = bool(response.history)
    if redirected and response.url.endswith(PUBLIC_INFO_PATH):
        address = response.url[:-len(PUBLIC_INFO_PATH)]

    return ServerCandidate(
        address=address,
        system_info=info,
        response_time_ms=elapsed_ms,
        redirected=redirected,
    )


def rank_candidate(candidate):
    """
    Record issues on a candidate and score it (lower is better).
    Priority: HTTPS > HTTP, fast > slow, direct > redirected.
    """
    issues = []
    score = 0

    if candidate.system_info.get("ProductName") != PRODUCT_NAME:
        issues.append(ISSUE_PRODUCT)
    if parse_version(candidate.system_info.get("Version")) < MINIMUM_SERVER_VERSION:
        issues.append(ISSUE_VERSION)

    if not candidate.address.startswith("https"):
        issues.append(ISSUE_INSECURE)
        score += SCORE_PENALTY_INSECURE
    if candidate.response_time_ms > SLOW_RESPONSE_MS:
        issues.append(ISSUE_SLOW)
        score += SCORE_PENALTY_SLOW
    if candidate.redirected:
        issues.append(ISSUE_REDIRECT)
        score += SCORE_PENALTY_REDIRECT

    candidate.issues = issues
    candidate.score = score
    return score


def get_recommended_server_candidates(url, session=None, timeout=DEFAULT_DISCOVERY_TIMEOUT):
    """
    Probe every address candidate for a URL.

    Returns:
        list of ranked ServerCandidate objects that answered
    """
    session = session or requests.Session()
    candidates = []
    for address in get_address_candidates(url):
        candidate = probe_server(session, address, timeout)
        if candidate is None:
            continue
        rank_candidate(candidate)
        logging.debug(
            f"Candidate {candidate.address}: score={candidate.score} "
            f"issues={candidate.issues} ({candidate.response_time_ms:.0f}ms)"
        )
        candidates.append(candidate)
    return candidates


def find_best_server(candidates) -> Optional[ServerCandidate]:
    """Lowest-scored usable candidate, ties broken by response time."""
    usable = [c for c in candidates if c.usable]
    if not usable:
        return None
    return min(usable, key=lambda c: (c.score, c.response_time_ms))


def resolve(url, client_info: ClientInfo, timeout=DEFAULT_DISCOVERY_TIMEOUT, session=None) -> JellyfinClient:
    """
    Find the best server behind a URL and bind an unauthenticated client to it.

    Raises:
        NoServersFoundError: if no candidate is usable
    """
    own_session = session is None
    if own_session:
        session = requests.Session()

    try:
        with ErrorContext(f"server discovery for {url}"):
            candidates = get_recommended_server_candidates(url, session, timeout)
            best = find_best_server(candidates)
            if best is None:
                raise NoServersFoundError(url)

            version = best.system_info.get("Version", "?")
            logging.info(f"Selected Jellyfin server: {best.name} (v{version}) via {best.address}")
            return JellyfinClient(best.address, client_info, session=session)
    except Exception:
        # No client took ownership of a session created here
        if own_session:
            session.close()
        raise
