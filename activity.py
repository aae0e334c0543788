# activity.py
from typing import Any, Optional

import config
from exceptions import RequestFailed
from http_client import ResilientHttpClient
from logger import get_logger
from utils import shorten_address

logger = get_logger("Activity", config.LOG_LEVEL)

ACTIVITY_HEADERS = {
    "Accept": "*/*",
    "User-Agent": config.USER_AGENT,
    "Accept-Language": "en-US,en;q=0.9",
    "Connection": "keep-alive",
    "Sec-Fetch-Dest": "empty",
    "Sec-Fetch-Mode": "cors",
    "Sec-Fetch-Site": "same-origin",
    "Content-Type": "application/json",
}


def fetch_wallet_activity(
    http: ResilientHttpClient,
    address: str,
    network_slug: str = config.ACTIVITY_NETWORK_SLUG,
) -> Optional[Any]:
    """Returns the Layerhub activity record of a wallet, or None on failure."""
    url = config.ACTIVITY_API.format(network=network_slug, address=address)
    try:
        return http.get(url, headers=ACTIVITY_HEADERS).json()
    except (RequestFailed, ValueError) as e:
        logger.error(f"Error checking activity for {shorten_address(address)}: {e}")
        return None
