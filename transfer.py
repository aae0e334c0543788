# transfer.py
import random
from dataclasses import dataclass
from decimal import Decimal, localcontext
from typing import List, Optional

from eth_account.signers.local import LocalAccount

import config
from chain import ChainClient, TransactionIntent, TransactionReceipt
from exceptions import ChainError, ValidationError
from logger import get_logger
from utils import Pacer, WalletLedger, parse_amount, parse_non_negative_int, parse_positive_int

logger = get_logger("Transfer", config.LOG_LEVEL)

MAX_UINT256 = 2**256 - 1


def ether_to_wei(amount: Decimal) -> int:
    """Exact ether -> wei conversion. Rejects fractions of a wei and values outside uint256."""
    with localcontext() as ctx:
        ctx.prec = max(100, len(amount.as_tuple().digits) + 20)
        wei = amount.scaleb(18)
        if wei != wei.to_integral_value():
            raise ValidationError(f"Amount {amount} is not a whole number of wei")
    wei = int(wei)
    if not 1 <= wei <= MAX_UINT256:
        raise ValidationError(f"Amount {amount} is out of range (1 wei to 2**256 - 1 wei)")
    return wei


@dataclass(frozen=True)
class TransferParams:
    amount_per_tx: Decimal
    count: int
    min_delay_sec: int
    max_delay_sec: int

    def __post_init__(self):
        if not self.amount_per_tx.is_finite() or self.amount_per_tx <= 0:
            raise ValidationError("Amount per transaction must be greater than zero")
        ether_to_wei(self.amount_per_tx)
        if self.count <= 0:
            raise ValidationError("Number of transactions must be a positive integer")
        if self.min_delay_sec < 0 or self.max_delay_sec < self.min_delay_sec:
            raise ValidationError(
                f"Delay range is invalid: min={self.min_delay_sec}, max={self.max_delay_sec}"
            )

    @classmethod
    def from_inputs(cls, amount, count, min_delay, max_delay) -> "TransferParams":
        """Builds params from raw prompt answers, failing fast on bad input."""
        return cls(
            amount_per_tx=parse_amount(amount, "Amount per transaction"),
            count=parse_positive_int(count, "Number of transactions"),
            min_delay_sec=parse_non_negative_int(min_delay, "Minimum delay"),
            max_delay_sec=parse_non_negative_int(max_delay, "Maximum delay"),
        )

    @property
    def value_wei(self) -> int:
        return ether_to_wei(self.amount_per_tx)


class TransferEngine:
    """Sends native tokens to freshly generated wallets, one at a time."""

    def __init__(self, chain: ChainClient, ledger: WalletLedger, pacer: Optional[Pacer] = None):
        self.chain = chain
        self.ledger = ledger
        self.pacer = pacer or Pacer()

    def run_batch(self, sender: LocalAccount, params: TransferParams) -> List[TransactionReceipt]:
        """Any failed transaction aborts the batch with ChainError."""
        network = self.chain.network
        logger.info(f"Selected network: {network.name}, token: {network.symbol}, sender: {sender.address}")

        receipts = []
        for i in range(1, params.count + 1):
            logger.info(f"Processing transaction {i} of {params.count}")
            recipient = self.ledger.new_wallet()
            logger.info(f"Generated recipient address: {recipient.address}")

            intent = TransactionIntent(recipient=recipient.address, value_wei=params.value_wei)
            pending = self.chain.submit(intent, sender)
            receipt = self.chain.await_confirmation(pending)
            if not receipt.success:
                raise ChainError(
                    f"Transaction {i}/{params.count} failed on chain: {network.tx_url(receipt.tx_hash)}",
                    tx_hash=receipt.tx_hash,
                    receipt=receipt,
                )
            logger.info(f"Transaction {i}/{params.count} confirmed: {params.amount_per_tx} {network.symbol} -> {recipient.address}")
            receipts.append(receipt)

            if i < params.count:
                delay = random.randint(params.min_delay_sec, params.max_delay_sec)
                logger.info(f"Waiting {delay} seconds before next transaction...")
                if not self.pacer.sleep(delay):
                    logger.warning(f"Transfers stopped after {i} of {params.count} transactions")
                    return receipts

        logger.info("All transactions completed successfully!")
        return receipts
