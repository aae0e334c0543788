from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from web3 import Web3

from chain import PendingTransaction, TransactionReceipt
from exceptions import ChainError, ValidationError
from tests.conftest import FakePacer, read_ledger
from transfer import TransferEngine, TransferParams

SENDER = MagicMock(address="0x00000000000000000000000000000000000000A1")


class FakeChain:
    def __init__(self, network, ledger, fail_on=None, revert_on=None):
        self.network = network
        self.ledger = ledger
        self.fail_on = fail_on
        self.revert_on = revert_on
        self.submitted = []

    def submit(self, intent, signer):
        # The recipient must already be saved when the transaction goes out
        assert any(line.startswith(intent.recipient + ":") for line in read_ledger(self.ledger))
        self.submitted.append(intent)
        return PendingTransaction(tx_hash=f"0x{len(self.submitted):02x}", sender=signer.address, nonce=len(self.submitted))

    def await_confirmation(self, pending):
        n = len(self.submitted)
        if n == self.fail_on:
            raise ChainError("execution reverted", tx_hash=pending.tx_hash)
        return TransactionReceipt(tx_hash=pending.tx_hash, success=n != self.revert_on)


def params(count=5, amount="0.001", min_delay=3, max_delay=7):
    return TransferParams(Decimal(amount), count, min_delay, max_delay)


class TestTransferEngine:
    def test_full_batch(self, network, ledger, pacer):
        chain = FakeChain(network, ledger)

        receipts = TransferEngine(chain, ledger, pacer).run_batch(SENDER, params(count=3))

        assert len(receipts) == 3
        lines = read_ledger(ledger)
        assert [line.split(":")[0] for line in lines] == [i.recipient for i in chain.submitted]
        assert all(i.value_wei == Web3.to_wei("0.001", "ether") for i in chain.submitted)
        assert len(pacer.sleeps) == 2
        assert all(3 <= s <= 7 for s in pacer.sleeps)

    def test_recipient_saved_before_submit(self, network, ledger, pacer):
        chain = FakeChain(network, ledger)
        chain.await_confirmation = MagicMock(side_effect=ChainError("rpc down"))

        with pytest.raises(ChainError):
            TransferEngine(chain, ledger, pacer).run_batch(SENDER, params(count=2))

        assert [line.split(":")[0] for line in read_ledger(ledger)] == [chain.submitted[0].recipient]

    def test_halts_on_chain_rejection(self, network, ledger, pacer):
        chain = FakeChain(network, ledger, fail_on=2)

        with pytest.raises(ChainError):
            TransferEngine(chain, ledger, pacer).run_batch(SENDER, params(count=5))

        assert len(chain.submitted) == 2
        assert len(read_ledger(ledger)) == 2
        assert len(pacer.sleeps) == 1

    def test_reverted_receipt_aborts(self, network, ledger, pacer):
        chain = FakeChain(network, ledger, revert_on=1)

        with pytest.raises(ChainError) as exc_info:
            TransferEngine(chain, ledger, pacer).run_batch(SENDER, params(count=5))

        assert exc_info.value.receipt.status == "failure"
        assert len(chain.submitted) == 1
        assert pacer.sleeps == []

    def test_stop_between_transactions(self, network, ledger):
        chain = FakeChain(network, ledger)

        receipts = TransferEngine(chain, ledger, FakePacer(stop_after=2)).run_batch(SENDER, params(count=5))

        assert len(receipts) == 2
        assert len(chain.submitted) == 2

    def test_fixed_delay(self, network, ledger, pacer):
        TransferEngine(FakeChain(network, ledger), ledger, pacer).run_batch(SENDER, params(count=4, min_delay=2, max_delay=2))
        assert pacer.sleeps == [2, 2, 2]


class TestTransferParams:
    def test_whole_wei_with_trailing_zeros(self):
        p = TransferParams.from_inputs("1.000000000000000000000", "1", "0", "0")
        assert p.value_wei == 10**18
        assert TransferParams.from_inputs("0.000000000000000001", "1", "0", "0").value_wei == 1

    def test_from_inputs(self):
        p = TransferParams.from_inputs(" 0.05 ", "10", "1", "5")
        assert p == TransferParams(Decimal("0.05"), 10, 1, 5)
        assert p.value_wei == 5 * 10**16

    @pytest.mark.parametrize("inputs", [
        ("abc", "1", "1", "2"),
        ("0", "1", "1", "2"),
        ("0.1", "zero", "1", "2"),
        ("0.1", "0", "1", "2"),
        ("0.1", "1", "-1", "2"),
        ("0.1", "1", "5", "2"),
        ("0.1", "1", "1", "x"),
        ("nan", "1", "1", "2"),
        ("0.0000000000000000001", "1", "0", "0"),
        ("1e80", "1", "0", "0"),
    ])
    def test_invalid_inputs(self, inputs):
        with pytest.raises(ValidationError):
            TransferParams.from_inputs(*inputs)
