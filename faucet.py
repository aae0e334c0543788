# faucet.py
from dataclasses import dataclass
from typing import Any, List, Optional

from web3 import Web3

import config
from exceptions import ValidationError
from http_client import ResilientHttpClient, RetryPolicy
from logger import get_logger
from networks import NetworkProfile
from utils import Pacer, WalletLedger, shorten_address

logger = get_logger("Faucet", config.LOG_LEVEL)

FAUCET_POLICY = RetryPolicy(max_attempts=3, timeout=10)


@dataclass(frozen=True)
class ClaimResult:
    success: bool
    hash: Optional[str] = None
    amount: Optional[Any] = None
    error: Optional[str] = None


class FaucetClaimer:
    def __init__(
        self,
        network: NetworkProfile,
        http: ResilientHttpClient,
        ledger: WalletLedger,
        pacer: Optional[Pacer] = None,
        delay_sec: float = config.FAUCET_DELAY_SEC,
    ):
        if not network.faucet_api:
            raise ValidationError(f"Network '{network.name}' has no faucetApi configured")
        self.network = network
        self.http = http
        self.ledger = ledger
        self.pacer = pacer or Pacer()
        self.delay_sec = delay_sec

    def claim(self, address: str) -> ClaimResult:
        """Claims the faucet for one address. Never raises: failures become a failed ClaimResult."""
        headers = {
            "Content-Type": "application/json",
            "User-Agent": config.USER_AGENT,
        }
        try:
            response = self.http.post(self.network.faucet_api, FAUCET_POLICY, json={"address": address}, headers=headers)
            body = response.json()
            if body.get("success"):
                data = body.get("data") or {}
                return ClaimResult(success=True, hash=data.get("hash"), amount=data.get("amount"))
            return ClaimResult(success=False, error=body.get("message") or "Faucet claim failed")
        except Exception as e:
            return ClaimResult(success=False, error=str(e))

    def _format_amount(self, amount: Any) -> str:
        try:
            return f"{Web3.from_wei(int(amount), 'ether')} {self.network.symbol}"
        except (TypeError, ValueError):
            return f"{amount} {self.network.symbol}"

    def run_batch(self, count: int) -> List[ClaimResult]:
        if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            raise ValidationError("Number of wallets must be a positive number")

        logger.info(f"Starting wallet generation and faucet claims on {self.network.name} ({count} wallets)")
        logger.info(f"Wallets will be saved to: {self.ledger.path}")

        results = []
        for i in range(1, count + 1):
            wallet = self.ledger.new_wallet()
            wallet_short = shorten_address(wallet.address)
            logger.info(f"Wallet {i}/{count} ({wallet.address}): attempting to claim faucet...")

            result = self.claim(wallet.address)
            results.append(result)
            if result.success:
                logger.info(f"Wallet {i}/{count} ({wallet_short}): claim successful, tx: {result.hash}")
                if result.amount is not None:
                    logger.info(f"Wallet {i}/{count} ({wallet_short}): amount {self._format_amount(result.amount)}")
            else:
                logger.warning(f"Wallet {i}/{count} ({wallet_short}): claim failed: {result.error}")

            if i < count:
                logger.info(f"Waiting {self.delay_sec} seconds before next wallet...")
                if not self.pacer.sleep(self.delay_sec):
                    logger.warning("Faucet claims stopped")
                    break

        succeeded = sum(1 for r in results if r.success)
        logger.info(
            f"Faucet claims completed: {succeeded} succeeded, {len(results) - succeeded} failed, "
            f"{len(results)} wallets saved to {self.ledger.path}"
        )
        return results
