"""Destination chain registry."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext
from types import MappingProxyType

from ..types import (
    AddressFamily,
    ChainId,
    InvalidInputError,
    NetworkId,
    parse_chain,
    parse_network,
)


@dataclass(frozen=True)
class ChainConfig:
    """Destination chain configuration."""

    chain: ChainId
    chain_id: str  # Network-native id ("1", "11155111", "mainnet", ...)
    name: str
    symbol: str
    decimals: int
    rpc_url: str
    explorer_url: str
    family: AddressFamily = AddressFamily.EVM

    def tx_url(self, tx_hash: str) -> str:
        """Get explorer URL for a transaction."""
        return f"{self.explorer_url}/tx/{tx_hash}"

    def address_url(self, address: str) -> str:
        """Get explorer URL for an address."""
        return f"{self.explorer_url}/address/{address}"

    def format_amount(self, raw: int | str) -> str:
        """Format a raw on-chain amount with 6 decimals and the native symbol."""
        try:
            amount = Decimal(raw)
            if not amount.is_finite():
                raise InvalidInputError(f"Invalid amount: {raw!r}")
            with localcontext() as ctx:
                # Room for every integer digit plus 6 decimals (uint256 needs 78)
                ctx.prec = max(ctx.prec, amount.adjusted() + 8)
                value = amount.scaleb(-self.decimals).quantize(
                    Decimal("0.000001"), rounding=ROUND_HALF_UP
                )
        except ArithmeticError as e:
            raise InvalidInputError(f"Invalid amount: {raw!r}", e) from e
        return f"{value} {self.symbol}"


# Pre-configured chain configs
MAINNET_CHAINS = (
    ChainConfig(
        chain=ChainId.ETHEREUM,
        chain_id="1",
        name="Ethereum",
        symbol="ETH",
        decimals=18,
        rpc_url="https://eth.llamarpc.com",
        explorer_url="https://etherscan.io",
    ),
    ChainConfig(
        chain=ChainId.BITCOIN,
        chain_id="mainnet",
        name="Bitcoin",
        symbol="BTC",
        decimals=8,
        rpc_url="",
        explorer_url="https://blockstream.info",
        family=AddressFamily.BITCOIN,
    ),
    ChainConfig(
        chain=ChainId.POLYGON,
        chain_id="137",
        name="Polygon",
        symbol="MATIC",
        decimals=18,
        rpc_url="https://polygon-rpc.com",
        explorer_url="https://polygonscan.com",
    ),
    ChainConfig(
        chain=ChainId.ARBITRUM,
        chain_id="42161",
        name="Arbitrum One",
        symbol="ETH",
        decimals=18,
        rpc_url="https://arb1.arbitrum.io/rpc",
        explorer_url="https://arbiscan.io",
    ),
    ChainConfig(
        chain=ChainId.OPTIMISM,
        chain_id="10",
        name="Optimism",
        symbol="ETH",
        decimals=18,
        rpc_url="https://mainnet.optimism.io",
        explorer_url="https://optimistic.etherscan.io",
    ),
)

TESTNET_CHAINS = (
    ChainConfig(
        chain=ChainId.ETHEREUM,
        chain_id="11155111",
        name="Sepolia Testnet",
        symbol="ETH",
        decimals=18,
        rpc_url="https://rpc.sepolia.org",
        explorer_url="https://sepolia.etherscan.io",
    ),
    ChainConfig(
        chain=ChainId.BITCOIN,
        chain_id="testnet",
        name="Bitcoin Testnet",
        symbol="BTC",
        decimals=8,
        rpc_url="",
        explorer_url="https://blockstream.info/testnet",
        family=AddressFamily.BITCOIN,
    ),
    ChainConfig(
        chain=ChainId.POLYGON,
        chain_id="80002",
        name="Polygon Amoy",
        symbol="MATIC",
        decimals=18,
        rpc_url="https://rpc-amoy.polygon.technology",
        explorer_url="https://amoy.polygonscan.com",
    ),
    ChainConfig(
        chain=ChainId.ARBITRUM,
        chain_id="421614",
        name="Arbitrum Sepolia",
        symbol="ETH",
        decimals=18,
        rpc_url="https://sepolia-rollup.arbitrum.io/rpc",
        explorer_url="https://sepolia.arbiscan.io",
    ),
    ChainConfig(
        chain=ChainId.OPTIMISM,
        chain_id="11155420",
        name="Optimism Sepolia",
        symbol="ETH",
        decimals=18,
        rpc_url="https://sepolia.optimism.io",
        explorer_url="https://sepolia-optimism.etherscan.io",
    ),
)


class ChainRegistry(Mapping[ChainId, ChainConfig]):
    """
    Read-only table of supported destination chains.

    Example:
        >>> registry = ChainRegistry.for_network(NetworkId.TESTNET)
        >>> registry.get(ChainId.ETHEREUM).name
        'Sepolia Testnet'
        >>> registry.address_url("bitcoin", "mkH...")
        'https://blockstream.info/testnet/address/mkH...'
    """

    def __init__(self, network: NetworkId, configs: tuple[ChainConfig, ...]) -> None:
        self._network = network
        self._configs = MappingProxyType({c.chain: c for c in configs})

    @classmethod
    def for_network(cls, network: NetworkId | str) -> "ChainRegistry":
        """Build the registry for mainnet or testnet."""
        network_id = parse_network(network)
        configs = MAINNET_CHAINS if network_id == NetworkId.MAINNET else TESTNET_CHAINS
        return cls(network_id, configs)

    @property
    def network(self) -> NetworkId:
        return self._network

    def __getitem__(self, chain: ChainId | str) -> ChainConfig:
        try:
            return self._configs[parse_chain(chain)]
        except KeyError as e:
            raise InvalidInputError(f"Chain not configured: {chain!r}", e) from e

    def __iter__(self) -> Iterator[ChainId]:
        return iter(self._configs)

    def __len__(self) -> int:
        return len(self._configs)

    def __contains__(self, chain: object) -> bool:
        return self.is_supported(chain)

    def get(self, chain: ChainId | str) -> ChainConfig:  # type: ignore[override]
        """Look up a chain, raising InvalidInputError when it is not configured."""
        return self[chain]

    def chains(self) -> list[ChainId]:
        """Configured chains in registry order."""
        return list(self._configs)

    def is_supported(self, chain: object) -> bool:
        """Check if a chain identifier is configured."""
        if not isinstance(chain, str):
            return False
        try:
            return parse_chain(chain) in self._configs
        except InvalidInputError:
            return False

    def by_family(self, family: AddressFamily) -> list[ChainId]:
        """Configured chains using the given address family."""
        return [c.chain for c in self._configs.values() if c.family == family]

    def tx_url(self, chain: ChainId | str, tx_hash: str) -> str:
        """Get explorer URL for a transaction on a foreign chain."""
        return self[chain].tx_url(tx_hash)

    def address_url(self, chain: ChainId | str, address: str) -> str:
        """Get explorer URL for an address on a foreign chain."""
        return self[chain].address_url(address)

    def format_amount(self, chain: ChainId | str, raw: int | str) -> str:
        """Format an amount for a specific chain."""
        return self[chain].format_amount(raw)
