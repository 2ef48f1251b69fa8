"""Chain registry: the closed set of supported chains and their network names."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import IntEnum
from types import MappingProxyType

from deployconf.exceptions import ConfigurationError, UnknownChainError


class ChainId(IntEnum):
    """Supported EVM chains."""

    MAINNET = 1
    RINKEBY = 4
    GOERLI = 5
    KOVAN = 42
    BSC = 56
    XDAI = 100
    POLYGON = 137
    OPBNB_MAINNET = 204
    EWC = 246
    HEDERA_MAINNET = 295
    HEDERA_TESTNET = 296
    HORIZEN_TESTNET = 1663
    FANTOM_TESTNET = 4002
    HORIZEN_MAINNET = 7332
    HARDHAT = 31337
    ARBITRUM = 42161
    VOLTA = 73799


def to_chain_id(value: object) -> ChainId:
    """Convert an integer-like value to a ChainId.

    Raises
    ------
    UnknownChainError
        If the value is not a member of the closed chain set.
    """
    if isinstance(value, ChainId):
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise UnknownChainError(value)
    try:
        return ChainId(value)
    except ValueError:
        raise UnknownChainError(value) from None


@dataclass(frozen=True)
class ChainRecord:
    """A supported chain and its network slug.

    Attributes
    ----------
    chain_id : ChainId
        The chain identifier.
    name : str
        Unique slug used as the network key of the resolved configuration.
    """

    chain_id: ChainId
    name: str


CHAIN_NAMES: Mapping[ChainId, str] = MappingProxyType(
    {
        ChainId.HARDHAT: "hardhat",
        ChainId.MAINNET: "mainnet",
        ChainId.RINKEBY: "rinkeby",
        ChainId.GOERLI: "goerli",
        ChainId.KOVAN: "kovan",
        ChainId.XDAI: "xdai",
        ChainId.EWC: "ewc",
        ChainId.VOLTA: "volta",
        ChainId.POLYGON: "polygon",
        ChainId.BSC: "bsc",
        ChainId.ARBITRUM: "arbitrum",
        ChainId.FANTOM_TESTNET: "fantom-testnet",
        ChainId.HEDERA_TESTNET: "hedera-testnet",
        ChainId.HEDERA_MAINNET: "hedera-mainnet",
        ChainId.OPBNB_MAINNET: "opbnb-mainnet",
        ChainId.HORIZEN_TESTNET: "horizen-gobi",
        ChainId.HORIZEN_MAINNET: "horizen-mainnet",
    }
)

# Network names used by older hardhat configs
LEGACY_ALIASES: Mapping[str, ChainId] = MappingProxyType(
    {
        "fantomTestnet": ChainId.FANTOM_TESTNET,
        "hederaTestnet": ChainId.HEDERA_TESTNET,
        "hederaMainnet": ChainId.HEDERA_MAINNET,
        "opbnb": ChainId.OPBNB_MAINNET,
        "horizenGobi": ChainId.HORIZEN_TESTNET,
        "horizenMainnet": ChainId.HORIZEN_MAINNET,
    }
)


class ChainRegistry:
    """Read-only lookup between chain ids and network names.

    Parameters
    ----------
    names : Mapping[ChainId, str]
        Network slug per chain. Defaults to the built-in table.
    aliases : Mapping[str, ChainId]
        Additional names accepted by ``id_of``.
    """

    def __init__(
        self,
        names: Mapping[ChainId, str] = CHAIN_NAMES,
        aliases: Mapping[str, ChainId] = LEGACY_ALIASES,
    ):
        records = [ChainRecord(to_chain_id(chain_id), name) for chain_id, name in names.items()]
        by_name: dict[str, ChainId] = {}
        for record in records:
            if record.name in by_name:
                raise ConfigurationError(f"Duplicate network name: {record.name!r}")
            by_name[record.name] = record.chain_id
        for alias, chain_id in aliases.items():
            by_name.setdefault(alias, to_chain_id(chain_id))

        self._records = tuple(sorted(records, key=lambda r: r.chain_id))
        self._by_id = MappingProxyType({r.chain_id: r for r in self._records})
        self._by_name = MappingProxyType(by_name)

    def all_chains(self) -> tuple[ChainRecord, ...]:
        """Return every chain record, ordered by chain id."""
        return self._records

    def get(self, chain_id: object) -> ChainRecord:
        """Return the record for a chain id."""
        chain = to_chain_id(chain_id)
        try:
            return self._by_id[chain]
        except KeyError:
            raise UnknownChainError(chain_id) from None

    def name_of(self, chain_id: object) -> str:
        """Return the network slug for a chain id."""
        return self.get(chain_id).name

    def id_of(self, name: str) -> ChainId:
        """Return the chain id for a network slug or legacy alias."""
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownChainError(name) from None

    def parse(self, value: str) -> ChainRecord:
        """Look up a chain by slug, legacy alias or decimal chain id."""
        value = value.strip()
        if value.isdigit():
            return self.get(int(value))
        return self.get(self.id_of(value))

    def __contains__(self, chain_id: object) -> bool:
        return chain_id in self._by_id

    def __len__(self) -> int:
        return len(self._records)


def validate_tables(
    complete: Mapping[str, Mapping[ChainId, object]],
    partial: Mapping[str, Iterable[object]] | None = None,
) -> None:
    """Check per-chain tables against the closed chain set.

    Parameters
    ----------
    complete : Mapping[str, Mapping[ChainId, object]]
        Tables that must have an entry for every ChainId, keyed by a
        label used in error messages.
    partial : Mapping[str, Iterable[object]] | None
        Tables (or their key sets) whose keys must all be ChainId members.

    Raises
    ------
    ConfigurationError
        If a complete table misses a chain.
    UnknownChainError
        If any table references a chain outside the set.
    """
    for label, table in complete.items():
        for key in table:
            to_chain_id(key)
        missing = [chain.name for chain in ChainId if chain not in table]
        if missing:
            raise ConfigurationError(f"Table {label!r} has no entry for: {', '.join(missing)}")

    for table in (partial or {}).values():
        for key in table:
            to_chain_id(key)
