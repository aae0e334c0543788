# config.py
# Configuration

# Network profiles (rpc, explorer, symbol, faucetApi, contracts)
NETWORKS_CONFIG_PATH = "config.json"

# Network used by the faucet claimer and the staking loop
FAUCET_NETWORK = "somnia"
STAKING_NETWORK = "monad"

# Input / output files
PK_FILE = "pk.txt"  # one private key per line, or an .xlsx file with a private_key column
PROXY_FILE = "proxies.txt"
WALLET_FILE = "wallets.txt"  # append-only ledger of generated wallets (address:privateKey)

# Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
LOG_LEVEL = "INFO"

# Log file path
LOG_FILE = "bot_log.txt"

# HTTP retry policy
HTTP_MAX_ATTEMPTS = 3
HTTP_TIMEOUT_SEC = 10
HTTP_RETRY_DELAY_SEC = 2

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/133.0.0.0 Safari/537.36"
)

# Delay between faucet claims in seconds
FAUCET_DELAY_SEC = 5

# Route JSON-RPC traffic through a random proxy from PROXY_FILE (True/False)
USE_PROXY_FOR_RPC = False

# JSON-RPC request timeout in seconds
RPC_TIMEOUT = 30

# Transaction confirmation timeout in seconds
TX_TIMEOUT = 600
TX_POLL_LATENCY = 2

# Gas price multiplier for safety (applied to maxFeePerGas)
GAS_PRICE_MULTIPLIER = 1.1
GAS_LIMIT_MULTIPLIER = 1.2

# Staking call: sent to networks[STAKING_NETWORK].contracts[STAKING_CONTRACT_KEY]
STAKING_CONTRACT_KEY = "staking"
STAKING_VALUE_ETHER = "0.01"
STAKING_CALLDATA = (
    "0x1c3477dd"
    "0000000000000000000000000000000000000000000000000000000000000000"
    "000000000000000000000000d3362e7944e6e1dc8efaf884ae541891e7e368d1"
)

# Sleep window between staking calls in seconds (5h to 6h)
STAKING_MIN_SLEEP_SEC = 5 * 60 * 60
STAKING_MAX_SLEEP_SEC = 6 * 60 * 60

# Wallet activity API ({network} and {address} are substituted)
ACTIVITY_API = "https://layerhub.xyz/be-api/wallets/{network}/{address}"
ACTIVITY_NETWORK_SLUG = "monad_testnet"
