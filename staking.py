# staking.py
import enum
import random
from dataclasses import dataclass
from typing import Callable, Optional

from eth_account.signers.local import LocalAccount
from web3 import Web3

import config
from chain import ChainClient, TransactionIntent, TransactionReceipt
from exceptions import ChainError, ConfigError
from logger import get_logger
from utils import Pacer

logger = get_logger("Staking", config.LOG_LEVEL)


class StakingState(enum.Enum):
    EXECUTING = "executing"
    SLEEPING = "sleeping"


@dataclass(frozen=True)
class StakingCall:
    contract_key: str = config.STAKING_CONTRACT_KEY
    calldata: str = config.STAKING_CALLDATA
    value_wei: int = Web3.to_wei(config.STAKING_VALUE_ETHER, "ether")


def sample_sleep(min_sec: float = config.STAKING_MIN_SLEEP_SEC, max_sec: float = config.STAKING_MAX_SLEEP_SEC) -> float:
    """Uniform duration in [min_sec, max_sec)."""
    if max_sec <= min_sec:
        raise ValueError("max_sec must be greater than min_sec")
    while True:
        delay = min_sec + random.random() * (max_sec - min_sec)
        # Float rounding can land exactly on max_sec
        if delay < max_sec:
            return delay


class StakingLoop:
    """Executing -> Sleeping -> Executing ... until stopped.

    Every attempt is followed by a sleep, whether the call succeeded, reverted
    or was rejected by the RPC endpoint.
    """

    def __init__(
        self,
        chain: ChainClient,
        signer: LocalAccount,
        call: StakingCall = StakingCall(),
        pacer: Optional[Pacer] = None,
        sleep_sampler: Callable[[], float] = sample_sleep,
    ):
        contracts = chain.network.contracts
        if call.contract_key not in contracts:
            raise ConfigError(f"Network '{chain.network.name}' has no '{call.contract_key}' contract configured")
        self.chain = chain
        self.signer = signer
        self.intent = TransactionIntent(
            recipient=contracts[call.contract_key],
            value_wei=call.value_wei,
            data=call.calldata,
        )
        self.pacer = pacer or Pacer()
        self.sleep_sampler = sleep_sampler
        self.state = StakingState.EXECUTING
        self.attempts = 0
        self.last_receipt: Optional[TransactionReceipt] = None

    def execute(self) -> Optional[TransactionReceipt]:
        self.attempts += 1
        receipt = None
        try:
            pending = self.chain.submit(self.intent, self.signer)
            logger.info("Transaction sent. Waiting for confirmation...")
            receipt = self.chain.await_confirmation(pending)
            if receipt.success:
                logger.info(f"Success! Tx confirmed: {self.chain.network.tx_url(receipt.tx_hash)}")
            else:
                logger.error(f"Transaction failed: {self.chain.network.tx_url(receipt.tx_hash)}")
        except ChainError as e:
            logger.error(f"Staking attempt {self.attempts} failed: {e}")
        self.last_receipt = receipt
        return receipt

    def step(self) -> bool:
        """Performs one state transition. Returns False if the loop was stopped while sleeping."""
        if self.state is StakingState.EXECUTING:
            self.execute()
            self.state = StakingState.SLEEPING
            return True

        delay = self.sleep_sampler()
        logger.info(f"Sleeping for {delay / 3600:.2f} hours")
        if not self.pacer.sleep(delay):
            return False
        self.state = StakingState.EXECUTING
        return True

    def run(self, max_attempts: Optional[int] = None) -> None:
        """Runs until stop() is called (or `max_attempts` calls have been made)."""
        logger.info(f"Staking loop started on {self.chain.network.name} for {self.signer.address}")
        while not self.pacer.stopped:
            if (max_attempts is not None and self.state is StakingState.EXECUTING
                    and self.attempts >= max_attempts):
                break
            if not self.step():
                break
        logger.info(f"Staking loop stopped after {self.attempts} attempts")

    def stop(self) -> None:
        self.pacer.stop()
