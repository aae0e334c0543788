# chain.py
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from eth_account.signers.local import LocalAccount
from web3 import Web3, HTTPProvider
from web3.exceptions import TimeExhausted, Web3Exception

import config
from exceptions import ChainError
from logger import get_logger
from networks import NetworkProfile
from proxies import ProxyDescriptor, build_session
from utils import shorten_address

logger = get_logger("Chain", config.LOG_LEVEL)

# Errors the node or the transport can raise on any JSON-RPC call
RPC_ERRORS = (Web3Exception, ValueError, requests.RequestException)


@dataclass(frozen=True)
class TransactionIntent:
    recipient: str
    value_wei: int = 0
    data: Optional[str] = None
    gas_limit: Optional[int] = None
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None

    def __post_init__(self):
        if self.value_wei < 0:
            raise ValueError("value_wei must not be negative")


@dataclass(frozen=True)
class PendingTransaction:
    tx_hash: str
    sender: str
    nonce: int


@dataclass(frozen=True)
class TransactionReceipt:
    tx_hash: str
    success: bool
    block_number: Optional[int] = None
    gas_used: Optional[int] = None

    @property
    def status(self) -> str:
        return "success" if self.success else "failure"


def get_w3(rpc_url: str, proxy: Optional[ProxyDescriptor] = None) -> Web3:
    """Returns Web3 connection to RPC (with optional proxied session)."""
    if proxy:
        provider = HTTPProvider(rpc_url, request_kwargs={'timeout': config.RPC_TIMEOUT}, session=build_session(proxy))
    else:
        provider = HTTPProvider(rpc_url, request_kwargs={'timeout': config.RPC_TIMEOUT})
    return Web3(provider)


class ChainClient:
    """Synchronous facade over one network's JSON-RPC endpoint.
    Transactions are signed locally; only the raw signed payload leaves the process.
    """

    def __init__(self, network: NetworkProfile, proxy: Optional[ProxyDescriptor] = None, w3: Optional[Web3] = None):
        self.network = network
        self.w3 = w3 or get_w3(network.rpc, proxy)

    @property
    def chain_id(self) -> int:
        try:
            return int(self.w3.eth.chain_id)
        except RPC_ERRORS as e:
            raise ChainError(f"{self.network.name}: chain_id query failed: {e}") from e

    def get_balance(self, address: str) -> int:
        try:
            return int(self.w3.eth.get_balance(Web3.to_checksum_address(address)))
        except RPC_ERRORS as e:
            raise ChainError(f"{self.network.name}: balance query for {shorten_address(address)} failed: {e}") from e

    def _compute_eip1559_fees(self) -> Dict[str, int]:
        """Compute EIP-1559 fields: returns dict with maxPriorityFeePerGas and maxFeePerGas (ints)."""
        eth = self.w3.eth
        try:
            priority = eth.max_priority_fee
        except RPC_ERRORS as e:
            logger.debug(f"max_priority_fee not available ({e}), using 10% of gas price")
            priority = int(eth.gas_price * 0.1)

        try:
            base_fee = eth.get_block("pending").get("baseFeePerGas")
        except RPC_ERRORS as e:
            logger.debug(f"Pending block not available ({e}), using gas price as base fee")
            base_fee = None
        if base_fee is None:
            base_fee = eth.gas_price

        max_fee = int((int(base_fee) * 2 + int(priority)) * config.GAS_PRICE_MULTIPLIER)
        return {"maxPriorityFeePerGas": int(priority), "maxFeePerGas": max_fee}

    def _build_transaction(self, intent: TransactionIntent, sender: str) -> Dict[str, Any]:
        eth = self.w3.eth
        txn: Dict[str, Any] = {
            "from": sender,
            "to": Web3.to_checksum_address(intent.recipient),
            "value": int(intent.value_wei),
            "nonce": eth.get_transaction_count(sender, "pending"),
            "chainId": int(eth.chain_id),
        }
        if intent.data:
            txn["data"] = intent.data

        if intent.max_fee_per_gas is not None and intent.max_priority_fee_per_gas is not None:
            txn["maxFeePerGas"] = int(intent.max_fee_per_gas)
            txn["maxPriorityFeePerGas"] = int(intent.max_priority_fee_per_gas)
        else:
            txn.update(self._compute_eip1559_fees())

        if intent.gas_limit is not None:
            txn["gas"] = int(intent.gas_limit)
        else:
            estimate = eth.estimate_gas({k: v for k, v in txn.items() if k != "nonce"})
            txn["gas"] = int(estimate * config.GAS_LIMIT_MULTIPLIER)
            logger.debug(f"Estimated gas: {txn['gas']}")
        return txn

    def submit(self, intent: TransactionIntent, signer: LocalAccount) -> PendingTransaction:
        sender = signer.address
        try:
            txn = self._build_transaction(intent, sender)
            signed = signer.sign_transaction(txn)
            tx_hash = Web3.to_hex(self.w3.eth.send_raw_transaction(signed.raw_transaction))
        except RPC_ERRORS as e:
            raise ChainError(
                f"{self.network.name}: transaction from {shorten_address(sender)} "
                f"to {shorten_address(intent.recipient)} rejected: {e}"
            ) from e

        logger.info(f"Transaction sent ({shorten_address(sender)}), tx: {tx_hash}")
        logger.info(f"View on explorer: {self.network.tx_url(tx_hash)}")
        return PendingTransaction(tx_hash=tx_hash, sender=sender, nonce=txn["nonce"])

    def await_confirmation(self, pending: PendingTransaction, timeout: float = config.TX_TIMEOUT) -> TransactionReceipt:
        """Blocks until the transaction is mined or `timeout` seconds pass. Never retries."""
        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(
                pending.tx_hash, timeout=timeout, poll_latency=config.TX_POLL_LATENCY
            )
        except TimeExhausted as e:
            raise ChainError(
                f"{self.network.name}: transaction {pending.tx_hash} not mined within {timeout}s",
                tx_hash=pending.tx_hash,
            ) from e
        except RPC_ERRORS as e:
            raise ChainError(
                f"{self.network.name}: receipt query for {pending.tx_hash} failed: {e}",
                tx_hash=pending.tx_hash,
            ) from e

        result = TransactionReceipt(
            tx_hash=pending.tx_hash,
            success=receipt.get("status") == 1,
            block_number=receipt.get("blockNumber"),
            gas_used=receipt.get("gasUsed"),
        )
        logger.debug(f"Receipt for {pending.tx_hash}: {result.status} in block {result.block_number}")
        return result
