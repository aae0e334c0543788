# main.py
import asyncio
import sys
from typing import List, Mapping

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3

import config
from activity import fetch_wallet_activity
from chain import ChainClient
from exceptions import BotError, ValidationError
from faucet import FaucetClaimer
from http_client import ResilientHttpClient
from logger import get_logger
from networks import NetworkProfile, get_network, load_networks
from proxies import ProxyPool
from staking import StakingLoop
from transfer import TransferEngine, TransferParams
from utils import Pacer, WalletLedger, load_private_keys, parse_positive_int

logger = get_logger("Main", config.LOG_LEVEL)

ASCII_BANNER = r"""
  __  __       _ _   _       _   _      _     ____        _
 |  \/  |_   _| | |_(_)     | \ | | ___| |_  | __ )  ___ | |_
 | |\/| | | | | | __| |_____|  \| |/ _ \ __| |  _ \ / _ \| __|
 | |  | | |_| | | |_| |_____| |\  |  __/ |_  | |_) | (_) | |_
 |_|  |_|\__,_|_|\__|_|     |_| \_|\___|\__| |____/ \___/ \__|
"""


def print_banner() -> None:
    print(ASCII_BANNER)


def menu() -> None:
    print("Select an action:")
    print("1. Generate wallets and claim faucet")
    print("2. Send tokens to new wallets")
    print("3. Start staking loop")
    print("4. Check wallet activity")
    print("5. Check RPC connection")
    print("6. Exit")


def make_chain_client(network: NetworkProfile, pool: ProxyPool) -> ChainClient:
    proxy = pool.pick_random(pool.load()) if config.USE_PROXY_FOR_RPC else None
    return ChainClient(network, proxy=proxy)


def select_wallet(chain: ChainClient, private_keys: List[str]) -> LocalAccount:
    """Logs the balance of every configured key and returns the first wallet."""
    if not private_keys:
        raise ValidationError(f"No private keys found in {config.PK_FILE}")

    accounts = [Account.from_key(pk) for pk in private_keys]
    for index, account in enumerate(accounts, start=1):
        balance = chain.get_balance(account.address)
        logger.info(
            f"Wallet #{index} {account.address}: {Web3.from_wei(balance, 'ether')} {chain.network.symbol}"
        )
    logger.info(f"Using wallet: {accounts[0].address}")
    return accounts[0]


async def run_blocking(func, *args):
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func, *args)


async def handle_faucet_claims(networks: Mapping[str, NetworkProfile], pool: ProxyPool, pacer: Pacer) -> None:
    network = get_network(networks, config.FAUCET_NETWORK)
    logger.info(f"Loading proxies from {config.PROXY_FILE}... found {len(pool.load())} proxies")
    count = parse_positive_int(input("How many wallets do you want to generate for faucet claims? "), "Number of wallets")
    claimer = FaucetClaimer(network, ResilientHttpClient(pool), WalletLedger(config.WALLET_FILE), pacer)
    await run_blocking(claimer.run_batch, count)


async def handle_token_transfers(networks: Mapping[str, NetworkProfile], pool: ProxyPool, pacer: Pacer) -> None:
    key = input(f"Network ({', '.join(networks)}): ").strip() or config.STAKING_NETWORK
    network = get_network(networks, key)
    chain = make_chain_client(network, pool)
    sender = await run_blocking(select_wallet, chain, load_private_keys(config.PK_FILE))

    params = TransferParams.from_inputs(
        input("Enter amount of tokens per transaction: "),
        input("Enter number of transactions to perform: "),
        input("Enter minimum delay (seconds) between transactions: "),
        input("Enter maximum delay (seconds) between transactions: "),
    )
    engine = TransferEngine(chain, WalletLedger(config.WALLET_FILE), pacer)
    await run_blocking(engine.run_batch, sender, params)


async def handle_staking(networks: Mapping[str, NetworkProfile], pool: ProxyPool, pacer: Pacer) -> None:
    chain = make_chain_client(get_network(networks, config.STAKING_NETWORK), pool)
    signer = await run_blocking(select_wallet, chain, load_private_keys(config.PK_FILE))
    staking = StakingLoop(chain, signer, pacer=pacer)
    await run_blocking(staking.run)


async def handle_activity(pool: ProxyPool) -> None:
    accounts = [Account.from_key(pk) for pk in load_private_keys(config.PK_FILE)]
    if not accounts:
        raise ValidationError(f"No private keys found in {config.PK_FILE}")
    http = ResilientHttpClient(pool)
    for account in accounts:
        activity = await run_blocking(fetch_wallet_activity, http, account.address)
        print(f"{account.address}: {activity if activity is not None else 'N/A'}")


async def check_rpc(networks: Mapping[str, NetworkProfile]) -> None:
    """Checks availability of every configured RPC node and reports its chain_id"""
    print("Checking RPC connectivity...\n")
    for network in networks.values():
        try:
            chain_id = await run_blocking(lambda: ChainClient(network).chain_id)
            print(f"{network.name} ({network.rpc}): OK (chain_id: {chain_id})")
        except BotError as e:
            print(f"{network.name} ({network.rpc}): ERROR ({e})")
    print()


async def main_loop() -> None:
    print_banner()
    networks = load_networks(config.NETWORKS_CONFIG_PATH)
    pool = ProxyPool(config.PROXY_FILE)
    while True:
        pacer = Pacer()
        try:
            menu()
            choice = input("Enter action number: ").strip()
            if choice == "1":
                await handle_faucet_claims(networks, pool, pacer)
            elif choice == "2":
                await handle_token_transfers(networks, pool, pacer)
            elif choice == "3":
                await handle_staking(networks, pool, pacer)
            elif choice == "4":
                await handle_activity(pool)
            elif choice == "5":
                await check_rpc(networks)
            elif choice == "6":
                logger.info("Exiting...")
                sys.exit(0)
            else:
                print("Invalid input, please try again.\n")
        except BotError as e:
            logger.error(f"Error: {e}")
        except asyncio.CancelledError:
            # Let the worker thread leave its current sleep
            pacer.stop()
            raise
        except Exception as e:
            logger.error(f"Error in main loop: {e}")
            print("An error occurred, returning to the menu.\n")


if __name__ == "__main__":
    logger.info("Starting Multi-Network Bot...")
    try:
        asyncio.run(main_loop())
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
