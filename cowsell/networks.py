"""Per-network contract addresses and service endpoints."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ConfigurationError

# CoW Protocol contracts are deployed at the same address on every network.
SETTLEMENT_ADDRESS = "0x9008D19f58AAbD9eD0D60971565AA8510560ab41"
VAULT_RELAYER_ADDRESS = "0xC92E8bdf79f0507f65a392b0ab4667716BFE0110"

# Safe v1.3.0 MultiSend (canonical deployment)
MULTISEND_ADDRESS = "0xA238CBeb142c10Ef7Ad8442C6D1f9E89e07e7761"


@dataclass(frozen=True)
class Network:
    """Static description of a supported chain."""

    chain_id: int
    name: str
    order_book_url: str
    explorer_url: str
    tx_explorer_url: str
    safe_service_url: str
    safe_short_name: str
    infura_name: str | None = None
    settlement: str = SETTLEMENT_ADDRESS
    vault_relayer: str = VAULT_RELAYER_ADDRESS
    multisend: str = MULTISEND_ADDRESS

    def order_url(self, order_id: str) -> str:
        return f"{self.explorer_url}/orders/{order_id}"

    def address_url(self, address: str) -> str:
        return f"{self.explorer_url}/address/{address}"

    def tx_url(self, tx_hash: str) -> str:
        return f"{self.tx_explorer_url.rstrip('/')}/{tx_hash}"

    def safe_queue_url(self, safe_address: str) -> str:
        return (
            f"https://gnosis-safe.io/app/{self.safe_short_name}:{safe_address}"
            "/transactions/queue"
        )


NETWORKS: dict[int, Network] = {
    1: Network(
        chain_id=1,
        name="mainnet",
        order_book_url="https://api.cow.fi/mainnet",
        explorer_url="https://explorer.cow.fi",
        tx_explorer_url="https://etherscan.io/tx",
        safe_service_url="https://safe-transaction.gnosis.io",
        safe_short_name="eth",
        infura_name="mainnet",
    ),
    4: Network(
        chain_id=4,
        name="rinkeby",
        order_book_url="https://api.cow.fi/rinkeby",
        explorer_url="https://explorer.cow.fi/rinkeby",
        tx_explorer_url="https://rinkeby.etherscan.io/tx",
        safe_service_url="https://safe-transaction.rinkeby.gnosis.io",
        safe_short_name="rin",
        infura_name="rinkeby",
    ),
    5: Network(
        chain_id=5,
        name="goerli",
        order_book_url="https://api.cow.fi/goerli",
        explorer_url="https://explorer.cow.fi/goerli",
        tx_explorer_url="https://goerli.etherscan.io/tx",
        safe_service_url="https://safe-transaction.goerli.gnosis.io",
        safe_short_name="gor",
        infura_name="goerli",
    ),
    100: Network(
        chain_id=100,
        name="xdai",
        order_book_url="https://api.cow.fi/xdai",
        explorer_url="https://explorer.cow.fi/gc",
        tx_explorer_url="https://blockscout.com/xdai/mainnet/tx",
        safe_service_url="https://safe-transaction.xdai.gnosis.io",
        safe_short_name="gc",
    ),
}

SUPPORTED_CHAIN_IDS = tuple(sorted(NETWORKS))


def get_network(chain_id: int | None) -> Network:
    """Return the :class:`Network` for *chain_id* or raise ``ConfigurationError``."""

    if chain_id is None:
        raise ConfigurationError(
            "chainId is missing from the order file and CHAIN_ID is not set"
        )
    try:
        return NETWORKS[int(chain_id)]
    except (KeyError, TypeError, ValueError):
        supported = ", ".join(str(c) for c in SUPPORTED_CHAIN_IDS)
        raise ConfigurationError(
            f"chainId must be one supported chainId. Supported: {supported}",
            details={"chain_id": chain_id},
        ) from None


def rpc_endpoint(network: Network, *, rpc_url: str | None, infura_key: str | None) -> str:
    """Return the JSON-RPC URL for *network* from ``RPC_URL`` or ``INFURA_KEY``."""

    if rpc_url:
        return rpc_url
    if infura_key:
        if network.infura_name is None:
            raise ConfigurationError(
                f"Infura does not serve {network.name}; set RPC_URL instead"
            )
        return f"https://{network.infura_name}.infura.io/v3/{infura_key}"
    raise ConfigurationError("Either INFURA_KEY or RPC_URL environment var is required")


__all__ = [
    "MULTISEND_ADDRESS",
    "NETWORKS",
    "Network",
    "SETTLEMENT_ADDRESS",
    "SUPPORTED_CHAIN_IDS",
    "VAULT_RELAYER_ADDRESS",
    "get_network",
    "rpc_endpoint",
]
