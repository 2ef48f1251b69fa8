"""Singleton factory records and the built-in factory profiles.

A record is a pre-signed contract-creation transaction that deploys the
singleton factory to ``address`` once ``signer_address`` holds ``funding``
wei. Raw record data is kept as plain mappings and validated only when a
deterministic deployment asks for it.
"""

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from types import MappingProxyType
from typing import Any

from eth_account import Account
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from web3 import Web3

from deployconf.chains.registry import ChainId, to_chain_id
from deployconf.exceptions import ConfigurationError, MalformedFactoryRecordError

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")
RAW_TX_PATTERN = re.compile(r"^0x(?:[0-9a-fA-F]{2})+$")

DEFAULT_PROFILE = "safe-singleton"

RawRecord = Mapping[str, Any]
FactoryProfile = Mapping[ChainId, RawRecord]


class SingletonFactoryRecord(BaseModel):
    """Validated singleton factory deployment data for one chain.

    Field aliases follow the published ``deployment.json`` artifacts.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    chain_id: ChainId = Field(alias="chainId")
    gas_price: int = Field(alias="gasPrice", ge=0)
    gas_limit: int = Field(alias="gasLimit", gt=0)
    signer_address: str = Field(alias="signerAddress")
    transaction: str
    address: str

    @field_validator("signer_address", "address")
    @classmethod
    def _checksum_address(cls, value: str) -> str:
        if not ADDRESS_PATTERN.match(value):
            raise ValueError("expected a 0x-prefixed 20-byte hex address")
        return Web3.to_checksum_address(value)

    @field_validator("transaction")
    @classmethod
    def _raw_transaction(cls, value: str) -> str:
        if not RAW_TX_PATTERN.match(value):
            raise ValueError("expected a non-empty 0x-prefixed raw transaction")
        return value

    @classmethod
    def parse(cls, chain_id: object, data: RawRecord) -> "SingletonFactoryRecord":
        """Validate raw record data for a chain.

        Raises
        ------
        UnknownChainError
            If the chain id is outside the supported set.
        MalformedFactoryRecordError
            If any field is missing or invalid.
        """
        chain = to_chain_id(chain_id)
        if not isinstance(data, Mapping):
            raise MalformedFactoryRecordError(
                f"Singleton factory record for chain id {int(chain)} is not an object"
            )
        try:
            return cls.model_validate({**data, "chainId": chain})
        except ValidationError as e:
            raise MalformedFactoryRecordError(
                f"Malformed singleton factory record for chain id {int(chain)}: {e}"
            ) from e

    @property
    def funding(self) -> int:
        """Wei the signer needs to broadcast the deployment transaction."""
        return self.gas_limit * self.gas_price

    def recovered_signer(self) -> str:
        """Recover the sender of the raw transaction."""
        return Account.recover_transaction(self.transaction)

    def verify_signer(self) -> None:
        """Check the raw transaction was signed by ``signer_address``.

        Raises
        ------
        MalformedFactoryRecordError
            If the transaction cannot be decoded or the signer differs.
        """
        try:
            signer = self.recovered_signer()
        except Exception as e:
            raise MalformedFactoryRecordError(
                f"Undecodable factory transaction for chain id {int(self.chain_id)}: {e}"
            ) from e
        if signer != self.signer_address:
            raise MalformedFactoryRecordError(
                f"Factory transaction for chain id {int(self.chain_id)} is signed by "
                f"{signer}, expected {self.signer_address}"
            )


@dataclass(frozen=True)
class DeterministicDeployment:
    """What the deployment tool needs to set up deterministic addressing."""

    factory: str
    deployer: str
    funding: str  # wei, decimal string
    signed_tx: str

    @classmethod
    def from_record(cls, record: SingletonFactoryRecord) -> "DeterministicDeployment":
        return cls(
            factory=record.address,
            deployer=record.signer_address,
            funding=str(record.funding),
            signed_tx=record.transaction,
        )

    @property
    def funding_ether(self) -> Decimal:
        return Decimal(str(Web3.from_wei(int(self.funding), "ether")))

    def to_dict(self) -> dict[str, str]:
        return {
            "factory": self.factory,
            "deployer": self.deployer,
            "funding": self.funding,
            "signedTx": self.signed_tx,
        }


SAFE_SINGLETON_FACTORIES: FactoryProfile = MappingProxyType(
    {
        ChainId.HORIZEN_TESTNET: {
            "gasPrice": 20000000000,
            "gasLimit": 95383,
            "signerAddress": "0xE1CB04A0fA36DdD16a06ea828007E35e1a3cBC37",
            "transaction": "0xf8a7808504a817c800830174978080b853604580600e600039806000f350fe7fffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffe03601600081602082378035828234f58015156039578182fd5b8082525050506014600cf3820d22a084ff7eceb3f2c5cc6f4a47bb3bfe91bd777b4a58f9b96a58f23838142830214aa00756107df56ba531041782af89a89c018d96d4cad20d7bee0f05b75cc3778e1b",
            "address": "0x914d7Fec6aaC8cd542e72Bca78B30650d45643d7",
        },
        ChainId.HORIZEN_MAINNET: {
            "gasPrice": 500000000000,
            "gasLimit": 95383,
            "signerAddress": "0xE1CB04A0fA36DdD16a06ea828007E35e1a3cBC37",
            "transaction": "0xf8a78085746a528800830174978080b853604580600e600039806000f350fe7fffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffe03601600081602082378035828234f58015156039578182fd5b8082525050506014600cf382396ba06efa20cb1594f958a7976ed88c97ba7bb8304cee81a3102e2e9948b7d45cee7ea0482fa4b926a2920effd569a50757589cee03509631397c6f14970896a66614c8",
            "address": "0x914d7Fec6aaC8cd542e72Bca78B30650d45643d7",
        },
        ChainId.HEDERA_TESTNET: {
            "gasPrice": 2200000000000,
            "gasLimit": 100000,
            "signerAddress": "0x13D65d7fA66A2970eE8862ba8633D064B43Bf091",
            "transaction": "0xf8a8808602003a37f000830186a08080b853604580600e600039806000f350fe7fffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffe03601600081602082378035828234f58015156039578182fd5b8082525050506014600cf3820273a02c2dc95853f2d9809a846eb31ce58e2061c20f3699ebbf1f641c4e2a818f6940a078feaec02b382bb4e0b610dba69f8643a6f6b1f1dec60e0d7ff079b568438472",
            "address": "0xAfb3D5C0cd6a610F87365ce1BF8Eb6A0AA985988",
        },
        ChainId.OPBNB_MAINNET: {
            "gasPrice": 10,
            "gasLimit": 95383,
            "signerAddress": "0xE1CB04A0fA36DdD16a06ea828007E35e1a3cBC37",
            "transaction": "0xf8a2800a830174978080b853604580600e600039806000f350fe7fffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffe03601600081602082378035828234f58015156039578182fd5b8082525050506014600cf38201bca0321c2231ac15b3a45c6e7cca4f6686706ebe4d926fae78c3cb9f2d354d874731a05c4a31c24a88d43af57c77f1020c933e51091f0cd30fd59c40af9a5a5a290c89",
            "address": "0x914d7Fec6aaC8cd542e72Bca78B30650d45643d7",
        },
        ChainId.HEDERA_MAINNET: {
            "gasPrice": 1160000000000,
            "gasLimit": 86279,
            "signerAddress": "0xC30220fc19e2db669eaa3fa042C07b28F0c10737",
            "transaction": "0xf8a88086010e15635000830151078080b853604580600e600039806000f350fe7fffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffe03601600081602082378035828234f58015156039578182fd5b8082525050506014600cf3820272a0cbb4ed8ba208385a8cc9e58f1ddee69eda8cf94b86b85748b17c5b45a626f7c1a033cda078898e9c13e4ef123173d0f8dd24bf7416b4c291768a0a3b170d9c8fda",
            "address": "0xBF60A8e623D4E776F6FFA94d8bB7Ef7c22E057A1",
        },
    }
)

BUILTIN_PROFILES: Mapping[str, FactoryProfile] = MappingProxyType(
    {
        DEFAULT_PROFILE: SAFE_SINGLETON_FACTORIES,
    }
)


def load_profiles(file_path: Path | str) -> dict[str, FactoryProfile]:
    """Load named factory profiles from a JSON file.

    The file maps profile names to ``{"<chain id>": <record>}`` objects.

    Raises
    ------
    ConfigurationError
        If the file is missing or not shaped as described.
    UnknownChainError
        If a profile references a chain outside the supported set.
    """
    path = Path(file_path).expanduser()
    if not path.exists():
        raise ConfigurationError(f"Factory profile file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in factory profile file {path}: {e}") from e
    except (UnicodeDecodeError, OSError) as e:
        raise ConfigurationError(f"Cannot read factory profile file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Factory profile file {path} must contain a JSON object")

    profiles: dict[str, FactoryProfile] = {}
    for name, records in data.items():
        if not isinstance(records, dict):
            raise ConfigurationError(f"Factory profile {name!r} must map chain ids to records")
        table = {}
        for key, record in records.items():
            if not str(key).isdigit():
                raise ConfigurationError(f"Factory profile {name!r} has non-numeric chain id {key!r}")
            table[to_chain_id(int(key))] = record
        profiles[name] = MappingProxyType(table)
    return profiles


def select_profile(
    name: str,
    extra: Mapping[str, FactoryProfile] | None = None,
) -> FactoryProfile:
    """Pick a factory profile by name from the built-in and extra profiles."""
    profiles = {**BUILTIN_PROFILES, **(extra or {})}
    try:
        return profiles[name]
    except KeyError:
        known = ", ".join(sorted(profiles))
        raise ConfigurationError(f"Unknown factory profile {name!r}. Known profiles: {known}") from None
