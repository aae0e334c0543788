# networks.py
import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

import config
from exceptions import ConfigError
from logger import get_logger

logger = get_logger("Networks", config.LOG_LEVEL)


@dataclass(frozen=True)
class NetworkProfile:
    key: str
    name: str
    rpc: str
    explorer: str
    symbol: str
    faucet_api: Optional[str] = None
    contracts: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def tx_url(self, tx_hash: str) -> str:
        return f"{self.explorer.rstrip('/')}/tx/{tx_hash}"


def _profile_from_dict(key: str, data: dict) -> NetworkProfile:
    if not isinstance(data, dict):
        raise ConfigError(f"Network '{key}' must be an object")
    if not data.get("rpc"):
        raise ConfigError(f"Network '{key}' has no rpc endpoint")
    return NetworkProfile(
        key=key,
        name=data.get("name", key),
        rpc=data["rpc"],
        explorer=data.get("explorer", ""),
        symbol=data.get("symbol", ""),
        faucet_api=data.get("faucetApi"),
        contracts=MappingProxyType(dict(data.get("contracts") or {})),
    )


def load_networks(path: str = config.NETWORKS_CONFIG_PATH) -> Mapping[str, NetworkProfile]:
    """Loads network profiles from config.json. The result is read-only."""
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file {path} not found") from e
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e

    networks = raw.get("networks") if isinstance(raw, dict) else None
    if not isinstance(networks, dict) or not networks:
        raise ConfigError(f"{path} must contain a non-empty 'networks' object")

    profiles = {key: _profile_from_dict(key, data) for key, data in networks.items()}
    logger.debug(f"Loaded {len(profiles)} network profiles from {path}: {', '.join(profiles)}")
    return MappingProxyType(profiles)


def get_network(networks: Mapping[str, NetworkProfile], key: str) -> NetworkProfile:
    try:
        return networks[key]
    except KeyError:
        raise ConfigError(f"Network '{key}' is not configured") from None
