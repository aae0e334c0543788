# exceptions.py
from typing import Any, Optional


class BotError(Exception):
    """Base class for every error raised by the bot."""


class ConfigError(BotError):
    """config.json is missing, unreadable or incomplete."""


class ValidationError(BotError):
    """User input is malformed. Raised before any network call."""


class PersistenceError(BotError):
    """The wallet ledger could not be written."""


class RequestFailed(BotError):
    """An HTTP request failed for good (retries exhausted or not retryable)."""

    def __init__(self, attempts: int, last_proxy: Any, cause: BaseException):
        self.attempts = attempts
        self.last_proxy = last_proxy
        self.cause = cause
        via = f" via proxy {last_proxy}" if last_proxy else " without proxy"
        super().__init__(f"Request failed after {attempts} attempt(s){via}: {cause}")


class ChainError(BotError):
    """The RPC endpoint rejected a call or a transaction did not succeed."""

    def __init__(self, message: str, tx_hash: Optional[str] = None, receipt: Any = None):
        self.tx_hash = tx_hash
        self.receipt = receipt
        super().__init__(message)
