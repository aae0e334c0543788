# utils.py
import os
import threading
import zipfile
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

import pandas as pd
from eth_account import Account
from web3 import Web3

import config
from exceptions import PersistenceError, ValidationError
from logger import get_logger

logger = get_logger("Utils", config.LOG_LEVEL)


def shorten_address(address: str) -> str:
    return f"{address[:6]}...{address[-4:]}"


def normalize_private_key(private_key: Any) -> Optional[str]:
    """Returns the key as 0x + 64 hex chars, or None if it is not a valid key."""
    if isinstance(private_key, (int, float)):
        private_key = str(private_key)
    if not isinstance(private_key, str):
        return None
    pk = private_key.strip()
    if not pk.startswith("0x"):
        pk = "0x" + pk
    if len(pk) != 66:
        return None
    if not all(c in "0123456789abcdefABCDEF" for c in pk[2:]):
        return None
    return pk


def _read_key_rows(path: str) -> List[Any]:
    if path.lower().endswith((".xlsx", ".xls")):
        df = pd.read_excel(path, engine="openpyxl")
        df.columns = df.columns.str.lower().str.strip()
        if "private_key" not in df.columns:
            raise ValidationError(f"{path} must contain a private_key column")
        return [pk for pk in df["private_key"].tolist() if pd.notnull(pk)]
    with open(path, encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip()]


def load_private_keys(path: str = config.PK_FILE) -> List[str]:
    """Loads private keys from a text file (one per line) or an Excel sheet.
    Invalid rows are skipped; a missing file yields an empty list, an unreadable
    one raises ValidationError.
    """
    try:
        rows = _read_key_rows(path)
    except FileNotFoundError:
        logger.error(f"Private key file {path} not found")
        return []
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        raise ValidationError(f"Failed to read private keys from {path}: {e}") from e

    keys = []
    for idx, row in enumerate(rows, start=1):
        pk = normalize_private_key(row)
        if pk is None:
            logger.error(f"Row {idx} in {path}: invalid private key, skipping")
            continue
        keys.append(pk)

    logger.info(f"Loaded {len(keys)} private keys from {path}")
    return keys


@dataclass(frozen=True)
class WalletCredential:
    address: str
    private_key: str


def generate_wallet() -> WalletCredential:
    acct = Account.create()
    return WalletCredential(address=acct.address, private_key=Web3.to_hex(acct.key))


class WalletLedger:
    """Append-only file of generated wallets, one address:privateKey per line."""

    def __init__(self, path: str = config.WALLET_FILE):
        self.path = path
        self._lock = threading.Lock()

    def append(self, wallet: WalletCredential) -> None:
        line = f"{wallet.address}:{wallet.private_key}\n"
        with self._lock:
            try:
                with open(self.path, "a", encoding="utf-8") as f:
                    f.write(line)
                    f.flush()
                    os.fsync(f.fileno())
            except OSError as e:
                raise PersistenceError(f"Failed to save wallet {wallet.address} to {self.path}: {e}") from e

    def new_wallet(self) -> WalletCredential:
        """Generates a wallet and persists it before anyone can use it."""
        wallet = generate_wallet()
        self.append(wallet)
        return wallet


class Pacer:
    """Interruptible sleep shared by the workflows of one run."""

    def __init__(self, stop_event: Optional[threading.Event] = None):
        self._stop_event = stop_event or threading.Event()

    def sleep(self, seconds: float) -> bool:
        """Sleeps up to `seconds`. Returns False if stop() was called meanwhile."""
        return not self._stop_event.wait(max(0.0, seconds))

    def stop(self) -> None:
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()


def parse_positive_int(value: Any, field: str) -> int:
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a positive integer, got {value!r}") from None
    if number <= 0:
        raise ValidationError(f"{field} must be a positive integer, got {value!r}")
    return number


def parse_non_negative_int(value: Any, field: str) -> int:
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a whole number of seconds, got {value!r}") from None
    if number < 0:
        raise ValidationError(f"{field} must not be negative, got {value!r}")
    return number


def parse_amount(value: Any, field: str = "Amount") -> Decimal:
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, TypeError):
        raise ValidationError(f"{field} must be a number, got {value!r}") from None
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{field} must be greater than zero, got {value!r}")
    return amount
