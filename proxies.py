# proxies.py
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote

import requests

import config
from logger import get_logger

logger = get_logger("Proxies", config.LOG_LEVEL)

SCHEMES = ("http", "socks4", "socks5")


@dataclass(frozen=True)
class ProxyDescriptor:
    scheme: str
    host: str
    port: int
    credentials: Optional[Tuple[str, str]] = None

    @property
    def line(self) -> str:
        """Serializes back to the proxies.txt form."""
        auth = ""
        if self.credentials:
            auth = f"{self.credentials[0]}:{self.credentials[1]}@"
        return f"{self.scheme}://{auth}{self.host}:{self.port}"

    @property
    def url(self) -> str:
        """Proxy URL for requests, credentials percent-encoded."""
        auth = ""
        if self.credentials:
            username, password = self.credentials
            auth = f"{quote(username, safe='')}:{quote(password, safe='')}@"
        return f"{self.scheme}://{auth}{self.host}:{self.port}"

    def __str__(self) -> str:
        # Never print the password
        user = f"{self.credentials[0]}@" if self.credentials else ""
        return f"{self.scheme}://{user}{self.host}:{self.port}"


def parse_proxy(line: str) -> Optional[ProxyDescriptor]:
    """Parses [scheme://][user[:pass]@]host:port. Returns None if malformed."""
    entry = line.strip()
    if not entry:
        return None

    scheme = "http"
    if "://" in entry:
        scheme, entry = entry.split("://", 1)
        scheme = scheme.lower()
        if scheme not in SCHEMES:
            return None

    credentials = None
    if "@" in entry:
        auth, entry = entry.rsplit("@", 1)
        if not auth:
            return None
        username, _, password = auth.partition(":")
        credentials = (username, password)

    host, sep, port_str = entry.rpartition(":")
    if not sep or not host or not port_str.isdigit():
        return None
    port = int(port_str)
    if not 1 <= port <= 65535:
        return None

    return ProxyDescriptor(scheme=scheme, host=host, port=port, credentials=credentials)


class ProxyPool:
    """Proxy list backed by a text file. The file is re-read on every load()."""

    def __init__(self, path: str = config.PROXY_FILE):
        self.path = path

    def load(self) -> List[ProxyDescriptor]:
        try:
            with open(self.path, encoding="utf-8") as f:
                lines = f.read().splitlines()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read proxies from {self.path}: {e}")
            return []

        pool = []
        for line in lines:
            if not line.strip():
                continue
            proxy = parse_proxy(line)
            if proxy is None:
                logger.debug(f"Skipping malformed proxy entry: {line.strip()}")
                continue
            pool.append(proxy)
        return pool

    @staticmethod
    def pick_random(pool: Sequence[ProxyDescriptor]) -> Optional[ProxyDescriptor]:
        if not pool:
            return None
        return random.choice(pool)


def _proxy_urls(proxy: ProxyDescriptor) -> Dict[str, str]:
    return {"http": proxy.url, "https": proxy.url}


# socks4/socks5 URLs are handled by requests through PySocks
_TRANSPORTS = {
    "http": _proxy_urls,
    "socks4": _proxy_urls,
    "socks5": _proxy_urls,
}


def build_session(proxy: Optional[ProxyDescriptor] = None) -> requests.Session:
    """Returns a requests session bound to the proxy, or a direct one."""
    session = requests.Session()
    if proxy is None:
        logger.debug("No proxy used for this request")
        return session
    session.proxies = _TRANSPORTS[proxy.scheme](proxy)
    # Environment proxies must not override the chosen one
    session.trust_env = False
    logger.debug(f"Using {proxy.scheme.upper()} proxy {proxy}")
    return session
