"""Synthetic session identifiers and request headers for Foodora.

The API expects browser-like perseus and dps session headers. They are
generated fresh for every request.
"""

import base64
import json
import random
import secrets
import string
import time

_BASE36 = string.digits + string.ascii_lowercase

USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:146.0) Gecko/20100101 Firefox/146.0"
CLIENT_VERSION = "GROCERIES-MENU-MICROFRONTEND.26.03.0016"


def generate_perseus_id() -> str:
    """Build an id of the form ``<epoch ms>.<random digits>.<10 base36 chars>``."""
    timestamp = int(time.time() * 1000)
    digits = "".join(random.choices(string.digits, k=16))
    suffix = "".join(random.choices(_BASE36, k=10))
    return f"{timestamp}.{digits}.{suffix}"


def generate_dps_session_id(perseus_client_id: str) -> str:
    """Encode a dps session payload as base64 JSON.

    Args:
        perseus_client_id: Client id embedded in the payload.

    Returns:
        Base64 of ``{"session_id", "perseus_id", "timestamp"}``.
    """
    payload = {
        "session_id": secrets.token_hex(16),
        "perseus_id": perseus_client_id,
        "timestamp": int(time.time()),
    }
    return base64.b64encode(json.dumps(payload, separators=(",", ":")).encode()).decode()


def build_headers(include_dps_session: bool = True) -> dict[str, str]:
    """Build the header set for one GraphQL request.

    Args:
        include_dps_session: Add the dps-session-id header. The category
            listing works without it, product details require it.
    """
    perseus_client_id = generate_perseus_id()
    perseus_session_id = generate_perseus_id()
    headers = {
        "User-Agent": USER_AGENT,
        "Accept": "application/json",
        "Accept-Language": "en-US,en;q=0.5",
        "Referer": "https://www.foodora.cz/",
        "Origin": "https://www.foodora.cz",
        "Content-Type": "application/json;charset=utf-8",
        "perseus-client-id": perseus_client_id,
        "perseus-session-id": perseus_session_id,
        "X-PD-Language-ID": "3",
        "X-Requested-With": "XMLHttpRequest",
        "apollographql-client-name": "web",
        "apollographql-client-version": CLIENT_VERSION,
        "platform": "web",
    }
    if include_dps_session:
        headers["dps-session-id"] = generate_dps_session_id(perseus_client_id)
    return headers
