import os
from decimal import Decimal

import pandas as pd
import pytest
from eth_account import Account

from exceptions import PersistenceError, ValidationError
from tests.conftest import read_ledger
from utils import (
    Pacer,
    WalletLedger,
    generate_wallet,
    load_private_keys,
    normalize_private_key,
    parse_amount,
    parse_positive_int,
    shorten_address,
)

KEY = "4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


def test_shorten_address():
    assert shorten_address("0x1234567890abcdef1234567890abcdef12345678") == "0x1234...5678"


class TestPrivateKeys:
    def test_normalize(self):
        assert normalize_private_key(KEY) == "0x" + KEY
        assert normalize_private_key("  0x" + KEY + " ") == "0x" + KEY
        assert normalize_private_key("0x1234") is None
        assert normalize_private_key("zz" * 32) is None
        assert normalize_private_key(None) is None

    def test_load_text_file(self, tmp_path):
        path = tmp_path / "pk.txt"
        path.write_text(f"{KEY}\n\nnot-a-key\n0x{'1' * 64}\n")

        assert load_private_keys(str(path)) == ["0x" + KEY, "0x" + "1" * 64]

    def test_load_excel_file(self, tmp_path):
        path = tmp_path / "keys.xlsx"
        pd.DataFrame({"Private_Key ": [KEY, "bad"]}).to_excel(path, index=False, engine="openpyxl")

        assert load_private_keys(str(path)) == ["0x" + KEY]

    def test_missing_file(self, tmp_path):
        assert load_private_keys(str(tmp_path / "missing.txt")) == []

    def test_corrupt_excel_file(self, tmp_path):
        path = tmp_path / "keys.xlsx"
        path.write_bytes(b"this is not a zip archive")
        with pytest.raises(ValidationError):
            load_private_keys(str(path))

    def test_unreadable_path(self, tmp_path):
        with pytest.raises(ValidationError):
            load_private_keys(str(tmp_path))


class TestWalletLedger:
    def test_generated_wallet_is_consistent(self):
        wallet = generate_wallet()
        assert Account.from_key(wallet.private_key).address == wallet.address
        assert wallet.private_key.startswith("0x") and len(wallet.private_key) == 66

    def test_append_only(self, ledger):
        first = ledger.new_wallet()
        second = ledger.new_wallet()

        assert read_ledger(ledger) == [
            f"{first.address}:{first.private_key}",
            f"{second.address}:{second.private_key}",
        ]

    def test_unwritable_ledger(self, tmp_path):
        ledger = WalletLedger(str(tmp_path / "no" / "such" / "dir" / "wallets.txt"))
        with pytest.raises(PersistenceError):
            ledger.new_wallet()
        assert not os.path.exists(ledger.path)


class TestPacer:
    def test_sleep_completes(self):
        assert Pacer().sleep(0)

    def test_stop_interrupts_sleep(self):
        pacer = Pacer()
        pacer.stop()
        assert pacer.stopped
        assert not pacer.sleep(60)


class TestParsers:
    def test_positive_int(self):
        assert parse_positive_int(" 4 ", "Count") == 4
        for bad in ("0", "-2", "1.5", "", None):
            with pytest.raises(ValidationError):
                parse_positive_int(bad, "Count")

    def test_amount(self):
        assert parse_amount("0.25") == Decimal("0.25")
        for bad in ("", "abc", "-1", "0", "inf"):
            with pytest.raises(ValidationError):
                parse_amount(bad)
