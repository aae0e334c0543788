# http_client.py
import socket
import time
from dataclasses import dataclass, field
from typing import Any, Callable, FrozenSet, List, Optional

import requests

import config
from exceptions import RequestFailed
from logger import get_logger
from proxies import ProxyDescriptor, ProxyPool, build_session

logger = get_logger("HttpClient", config.LOG_LEVEL)

DNS_TEMPORARY_FAILURE = "dns_temporary_failure"

_EAI_AGAIN = getattr(socket, "EAI_AGAIN", -3)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = config.HTTP_MAX_ATTEMPTS
    retryable: FrozenSet[str] = field(default_factory=lambda: frozenset({DNS_TEMPORARY_FAILURE}))
    delay: float = config.HTTP_RETRY_DELAY_SEC
    timeout: float = config.HTTP_TIMEOUT_SEC

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")


DEFAULT_POLICY = RetryPolicy()


def _iter_causes(error: BaseException):
    """Walks the exception chain, including urllib3's wrapped `reason`."""
    seen = set()
    stack = [error]
    while stack:
        current = stack.pop()
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        stack.append(current.__cause__)
        stack.append(current.__context__)
        stack.append(getattr(current, "reason", None))
        stack.extend(arg for arg in getattr(current, "args", ()) if isinstance(arg, BaseException))


def is_temporary_dns_failure(error: BaseException) -> bool:
    for cause in _iter_causes(error):
        if isinstance(cause, socket.gaierror) and cause.errno == _EAI_AGAIN:
            return True
        if "temporary failure in name resolution" in str(cause).lower():
            return True
    return False


def classify_failure(error: BaseException) -> Optional[str]:
    if is_temporary_dns_failure(error):
        return DNS_TEMPORARY_FAILURE
    return None


class ResilientHttpClient:
    """HTTP client that rotates proxies and retries on transient DNS failures."""

    def __init__(
        self,
        proxy_pool: Optional[ProxyPool] = None,
        session_factory: Callable[[Optional[ProxyDescriptor]], Any] = build_session,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.proxy_pool = proxy_pool or ProxyPool()
        self.session_factory = session_factory
        self.sleep = sleep

    def send(self, url: str, method: str = "GET", policy: RetryPolicy = DEFAULT_POLICY, **request_kwargs) -> requests.Response:
        pool: List[ProxyDescriptor] = self.proxy_pool.load()
        proxy = self.proxy_pool.pick_random(pool)
        attempt = 0

        while True:
            attempt += 1
            session = self.session_factory(proxy)
            try:
                response = session.request(method, url, timeout=policy.timeout, **request_kwargs)
                response.raise_for_status()
                return response
            except requests.RequestException as e:
                kind = classify_failure(e)
                if kind in policy.retryable and attempt < policy.max_attempts:
                    logger.warning(
                        f"{kind} on attempt {attempt}/{policy.max_attempts} "
                        f"with proxy: {proxy or 'no proxy'}, retrying with another proxy..."
                    )
                    proxy = self.proxy_pool.pick_random(pool)
                    self.sleep(policy.delay)
                    continue
                logger.error(f"{method} {url} failed on attempt {attempt}/{policy.max_attempts}: {e}")
                raise RequestFailed(attempt, proxy, e) from e
            finally:
                close = getattr(session, "close", None)
                if close is not None:
                    close()

    def get(self, url: str, policy: RetryPolicy = DEFAULT_POLICY, **request_kwargs) -> requests.Response:
        return self.send(url, "GET", policy, **request_kwargs)

    def post(self, url: str, policy: RetryPolicy = DEFAULT_POLICY, **request_kwargs) -> requests.Response:
        return self.send(url, "POST", policy, **request_kwargs)
