import json

import pytest

from exceptions import ConfigError
from networks import get_network, load_networks


def write_config(tmp_path, data):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data))
    return str(path)


def test_load_networks(tmp_path):
    path = write_config(tmp_path, {"networks": {
        "monad": {
            "name": "Monad Testnet",
            "rpc": "https://rpc.monad.test",
            "explorer": "https://explorer.monad.test/",
            "symbol": "MON",
            "contracts": {"staking": "0x01"},
        },
        "somnia": {"rpc": "https://rpc.somnia.test", "faucetApi": "https://faucet.somnia.test"},
    }})

    networks = load_networks(path)

    monad = get_network(networks, "monad")
    assert monad.name == "Monad Testnet"
    assert monad.contracts["staking"] == "0x01"
    assert monad.faucet_api is None
    assert monad.tx_url("0xab") == "https://explorer.monad.test/tx/0xab"
    assert networks["somnia"].faucet_api == "https://faucet.somnia.test"
    assert networks["somnia"].name == "somnia"


def test_profiles_are_read_only(tmp_path):
    networks = load_networks(write_config(tmp_path, {"networks": {"a": {"rpc": "http://a", "contracts": {"x": "0x1"}}}}))
    with pytest.raises(TypeError):
        networks["b"] = networks["a"]
    with pytest.raises(TypeError):
        networks["a"].contracts["y"] = "0x2"


@pytest.mark.parametrize("data", [{}, {"networks": {}}, {"networks": {"a": {"name": "no rpc"}}}, []])
def test_invalid_config(tmp_path, data):
    with pytest.raises(ConfigError):
        load_networks(write_config(tmp_path, data))


def test_missing_config(tmp_path):
    with pytest.raises(ConfigError):
        load_networks(str(tmp_path / "config.json"))


def test_unknown_network(tmp_path):
    networks = load_networks(write_config(tmp_path, {"networks": {"a": {"rpc": "http://a"}}}))
    with pytest.raises(ConfigError):
        get_network(networks, "b")
