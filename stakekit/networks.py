"""
networks.py: chain identifiers and well-known addresses per deployment target
"""
from dataclasses import dataclass
from typing import Optional

MAINNET = "mainnet"


@dataclass(frozen=True)
class NetworkProfile:
    name: str
    is_mainnet: bool
    chain_id: int
    execution_chain: str       # chain name understood by execution clients
    tx_watch_url: str
    stake_url: str
    storage_address: str
    one_inch_oracle_address: str
    rpl_token_address: str
    rpl_faucet_address: Optional[str] = None


_MAINNET = dict(
    is_mainnet=True,
    chain_id=1,
    execution_chain="mainnet",
    tx_watch_url="https://etherscan.io/tx",
    stake_url="https://stake.rocketpool.net",
    storage_address="0x1d8f8f00cfa6758d7bE78336684788Fb0ee0Fa46",
    one_inch_oracle_address="0x07D91f5fb9Bf7798734C3f606dB065549F6893bb",
    rpl_token_address="0xb4efd85c19999d84251304bda99e90b92300bd93",
)

# Every non-mainnet deployment runs against the Goerli/Prater testnet pair.
_TESTNET = dict(
    is_mainnet=False,
    chain_id=5,
    execution_chain="goerli",
    tx_watch_url="https://goerli.etherscan.io/tx",
    stake_url="https://testnet.rocketpool.net",
    storage_address="0xd8Cd47263414aFEca62d6e2a3917d6600abDceB3",
    one_inch_oracle_address="0x4eDC966Df24264C9C817295a0753804EcC46Dd22",
    rpl_token_address="0xb4efd85c19999d84251304bda99e90b92300bd93",
    rpl_faucet_address="0x95D6b8E2106E3B30a72fC87e2B56ce15E37853F9",
)


def is_mainnet(network: str) -> bool:
    return network == MAINNET


def network_profile(network: str) -> NetworkProfile:
    """Identifiers for a deployment target; anything but mainnet is a testnet"""
    return NetworkProfile(name=network, **(_MAINNET if is_mainnet(network) else _TESTNET))
