from types import MappingProxyType

import pytest

import config

# Keep test runs from writing the log file
config.LOG_FILE = ""

from networks import NetworkProfile  # noqa: E402
from utils import WalletLedger  # noqa: E402

STAKING_CONTRACT = "0x000000000000000000000000000000000000dEaD"


class FakePacer:
    """Records requested sleeps instead of sleeping."""

    def __init__(self, stop_after=None):
        self.sleeps = []
        self.stop_after = stop_after
        self.stopped = False

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        if self.stop_after is not None and len(self.sleeps) >= self.stop_after:
            self.stopped = True
            return False
        return True

    def stop(self):
        self.stopped = True


@pytest.fixture
def network():
    return NetworkProfile(
        key="testnet",
        name="Test Network",
        rpc="http://localhost:8545",
        explorer="https://explorer.test",
        symbol="TST",
        faucet_api="https://faucet.test/api/claim",
        contracts=MappingProxyType({"staking": STAKING_CONTRACT}),
    )


@pytest.fixture
def pacer():
    return FakePacer()


@pytest.fixture
def ledger(tmp_path):
    return WalletLedger(str(tmp_path / "wallets.txt"))


def read_ledger(ledger):
    try:
        with open(ledger.path, encoding="utf-8") as f:
            return [line.rstrip("\n") for line in f if line.strip()]
    except FileNotFoundError:
        return []
