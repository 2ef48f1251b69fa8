"""Tests for singleton factory records and profiles."""

import json
import random
from decimal import Decimal

import pytest
from eth_account import Account
from web3 import Web3

from deployconf.chains.registry import ChainId
from deployconf.exceptions import (
    ConfigurationError,
    MalformedFactoryRecordError,
    UnknownChainError,
)
from deployconf.factory.records import (
    BUILTIN_PROFILES,
    DEFAULT_PROFILE,
    SAFE_SINGLETON_FACTORIES,
    DeterministicDeployment,
    SingletonFactoryRecord,
    load_profiles,
    select_profile,
)

# Test private key (DO NOT USE IN PRODUCTION - this is a well-known test key)
TEST_PRIVATE_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
TEST_ADDRESS = "0xFCAd0B19bB29D4674531d6f115237E16AfCE377c"

FACTORY_ADDRESS = "0x914d7Fec6aaC8cd542e72Bca78B30650d45643d7"
FACTORY_SIGNER = "0xE1CB04A0fA36DdD16a06ea828007E35e1a3cBC37"


def signed_creation_tx(gas_price: int = 10, gas: int = 95383, chain_id: int = 204) -> str:
    """Sign a legacy transaction with the test key and return its raw hex."""
    signed = Account.sign_transaction(
        {
            "nonce": 0,
            "gasPrice": gas_price,
            "gas": gas,
            "to": "0x0000000000000000000000000000000000000001",
            "value": 0,
            "data": "0x6045",
            "chainId": chain_id,
        },
        TEST_PRIVATE_KEY,
    )
    return Web3.to_hex(signed.raw_transaction)


def raw_record(**overrides) -> dict:
    """A valid raw record with optional field overrides."""
    record = dict(SAFE_SINGLETON_FACTORIES[ChainId.OPBNB_MAINNET])
    record.update(overrides)
    return record


class TestSingletonFactoryRecord:
    """Tests for record parsing and validation."""

    def test_parse_opbnb(self):
        """The opBNB record parses with the published values."""
        record = SingletonFactoryRecord.parse(204, SAFE_SINGLETON_FACTORIES[ChainId.OPBNB_MAINNET])

        assert record.chain_id == ChainId.OPBNB_MAINNET
        assert record.gas_price == 10
        assert record.gas_limit == 95383
        assert record.signer_address == FACTORY_SIGNER
        assert record.address == FACTORY_ADDRESS
        assert record.funding == 953830

    def test_every_builtin_record_parses(self):
        """All built-in records are valid."""
        for chain_id, data in SAFE_SINGLETON_FACTORIES.items():
            record = SingletonFactoryRecord.parse(chain_id, data)
            assert record.funding == data["gasLimit"] * data["gasPrice"]

    def test_hedera_mainnet_funding(self):
        """Funding beyond 2**53 is exact."""
        record = SingletonFactoryRecord.parse(
            ChainId.HEDERA_MAINNET, SAFE_SINGLETON_FACTORIES[ChainId.HEDERA_MAINNET]
        )
        assert record.funding == 86279 * 1160000000000
        assert record.funding > 2**53

    def test_lowercase_addresses_checksummed(self):
        """Addresses are normalized to checksum form."""
        record = SingletonFactoryRecord.parse(
            204,
            raw_record(address=FACTORY_ADDRESS.lower(), signerAddress=FACTORY_SIGNER.lower()),
        )
        assert record.address == FACTORY_ADDRESS
        assert record.signer_address == FACTORY_SIGNER

    def test_numeric_strings_accepted(self):
        """Gas values given as decimal strings are parsed as integers."""
        record = SingletonFactoryRecord.parse(204, raw_record(gasPrice="10", gasLimit="95383"))
        assert record.funding == 953830

    def test_record_is_frozen(self):
        """Records cannot be mutated."""
        record = SingletonFactoryRecord.parse(204, raw_record())
        with pytest.raises(Exception):
            record.gas_price = 1

    @pytest.mark.parametrize(
        "overrides",
        [
            {"transaction": ""},
            {"transaction": "0x"},
            {"transaction": "f8a2800a"},
            {"transaction": "0xabc"},
            {"address": "0x1234"},
            {"signerAddress": "not-an-address"},
            {"gasLimit": 0},
            {"gasPrice": -1},
            {"gasPrice": "ten"},
        ],
    )
    def test_malformed_fields(self, overrides):
        """Invalid fields raise MalformedFactoryRecordError."""
        with pytest.raises(MalformedFactoryRecordError, match="chain id 204"):
            SingletonFactoryRecord.parse(204, raw_record(**overrides))

    @pytest.mark.parametrize("field", ["transaction", "gasPrice", "gasLimit", "signerAddress", "address"])
    def test_missing_field(self, field):
        """Missing fields raise MalformedFactoryRecordError."""
        data = raw_record()
        del data[field]

        with pytest.raises(MalformedFactoryRecordError):
            SingletonFactoryRecord.parse(204, data)

    def test_non_mapping(self):
        """Non-object records are malformed."""
        with pytest.raises(MalformedFactoryRecordError, match="not an object"):
            SingletonFactoryRecord.parse(204, ["0xf8a2"])  # type: ignore[arg-type]

    def test_unknown_chain(self):
        """Records for unsupported chains are rejected."""
        with pytest.raises(UnknownChainError):
            SingletonFactoryRecord.parse(999999, raw_record())


class TestFundingProperty:
    """funding == gas_limit * gas_price for large values."""

    @pytest.mark.parametrize("seed", range(5))
    def test_random_large_values(self, seed):
        """Products far beyond 64 bits stay exact."""
        rng = random.Random(seed)
        for _ in range(200):
            gas_price = rng.randrange(0, 2**96)
            gas_limit = rng.randrange(1, 2**64)
            record = SingletonFactoryRecord.parse(
                204, raw_record(gasPrice=gas_price, gasLimit=gas_limit)
            )

            assert record.funding == gas_price * gas_limit
            assert record.funding % gas_limit == 0
            assert record.funding // gas_limit == gas_price

    def test_funding_string_is_exact(self):
        """Serialized funding keeps every digit."""
        gas_price = 2**80 + 1
        gas_limit = 2**60 + 3
        record = SingletonFactoryRecord.parse(
            204, raw_record(gasPrice=gas_price, gasLimit=gas_limit)
        )

        deployment = DeterministicDeployment.from_record(record)

        assert int(deployment.funding) == gas_price * gas_limit
        assert deployment.funding == str(gas_price * gas_limit)


class TestVerifySigner:
    """Tests for raw transaction signer recovery."""

    def test_matching_signer(self):
        """A transaction signed by the record's signer passes."""
        record = SingletonFactoryRecord.parse(
            204, raw_record(signerAddress=TEST_ADDRESS, transaction=signed_creation_tx())
        )

        assert record.recovered_signer() == TEST_ADDRESS
        record.verify_signer()

    def test_mismatched_signer(self):
        """A transaction from another signer fails."""
        record = SingletonFactoryRecord.parse(
            204, raw_record(signerAddress=FACTORY_SIGNER, transaction=signed_creation_tx())
        )

        with pytest.raises(MalformedFactoryRecordError, match="signed by"):
            record.verify_signer()

    def test_undecodable_transaction(self):
        """Garbage transactions fail verification."""
        record = SingletonFactoryRecord.parse(204, raw_record(transaction="0xdeadbeef"))

        with pytest.raises(MalformedFactoryRecordError, match="Undecodable"):
            record.verify_signer()


class TestDeterministicDeployment:
    """Tests for DeterministicDeployment."""

    def test_from_opbnb_record(self):
        """Output carries factory, deployer, funding and raw tx."""
        record = SingletonFactoryRecord.parse(204, raw_record())
        deployment = DeterministicDeployment.from_record(record)

        assert deployment.to_dict() == {
            "factory": FACTORY_ADDRESS,
            "deployer": FACTORY_SIGNER,
            "funding": "953830",
            "signedTx": record.transaction,
        }

    def test_funding_ether(self):
        """Funding converts to ether."""
        record = SingletonFactoryRecord.parse(
            ChainId.HORIZEN_MAINNET, SAFE_SINGLETON_FACTORIES[ChainId.HORIZEN_MAINNET]
        )
        deployment = DeterministicDeployment.from_record(record)

        assert deployment.funding_ether == Decimal("0.0476915")


class TestProfiles:
    """Tests for factory profiles."""

    def test_default_profile(self):
        """The default profile is the built-in table."""
        assert select_profile(DEFAULT_PROFILE) is SAFE_SINGLETON_FACTORIES
        assert DEFAULT_PROFILE in BUILTIN_PROFILES

    def test_builtin_profile_chains(self):
        """Built-in profile covers Horizen, Hedera and opBNB."""
        assert set(SAFE_SINGLETON_FACTORIES) == {
            ChainId.HORIZEN_TESTNET,
            ChainId.HORIZEN_MAINNET,
            ChainId.HEDERA_TESTNET,
            ChainId.HEDERA_MAINNET,
            ChainId.OPBNB_MAINNET,
        }

    def test_unknown_profile(self):
        """Unknown profile names list the known ones."""
        with pytest.raises(ConfigurationError, match="safe-singleton"):
            select_profile("missing")

    def test_load_profiles(self, tmp_path):
        """Profiles load from JSON and can be selected."""
        path = tmp_path / "profiles.json"
        path.write_text(json.dumps({"hedera-epoch-2": {"295": raw_record(gasPrice=1)}}))

        profiles = load_profiles(path)
        profile = select_profile("hedera-epoch-2", profiles)

        assert set(profile) == {ChainId.HEDERA_MAINNET}
        assert SingletonFactoryRecord.parse(295, profile[ChainId.HEDERA_MAINNET]).gas_price == 1

    def test_extra_profile_does_not_hide_builtin(self, tmp_path):
        """Built-in profiles stay selectable next to loaded ones."""
        path = tmp_path / "profiles.json"
        path.write_text(json.dumps({"other": {}}))

        assert select_profile(DEFAULT_PROFILE, load_profiles(path)) is SAFE_SINGLETON_FACTORIES

    def test_load_profiles_missing_file(self, tmp_path):
        """Missing files raise ConfigurationError."""
        with pytest.raises(ConfigurationError, match="not found"):
            load_profiles(tmp_path / "missing.json")

    def test_load_profiles_invalid_json(self, tmp_path):
        """Invalid JSON raises ConfigurationError."""
        path = tmp_path / "profiles.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            load_profiles(path)

    def test_load_profiles_not_utf8(self, tmp_path):
        """Undecodable bytes raise ConfigurationError."""
        path = tmp_path / "profiles.json"
        path.write_bytes(b"\xff\xfe{}")

        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_profiles(path)

    def test_load_profiles_directory(self, tmp_path):
        """A directory in place of the file raises ConfigurationError."""
        path = tmp_path / "profiles.json"
        path.mkdir()

        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_profiles(path)

    @pytest.mark.parametrize("content", [[], {"p": []}, {"p": {"opbnb": {}}}])
    def test_load_profiles_bad_shape(self, tmp_path, content):
        """Wrongly shaped files raise ConfigurationError."""
        path = tmp_path / "profiles.json"
        path.write_text(json.dumps(content))

        with pytest.raises(ConfigurationError):
            load_profiles(path)

    def test_load_profiles_unknown_chain(self, tmp_path):
        """Profiles may only reference supported chains."""
        path = tmp_path / "profiles.json"
        path.write_text(json.dumps({"p": {"999999": raw_record()}}))

        with pytest.raises(UnknownChainError):
            load_profiles(path)

    def test_malformed_record_loads_lazily(self, tmp_path):
        """Malformed records only fail when parsed."""
        path = tmp_path / "profiles.json"
        path.write_text(json.dumps({"p": {"204": {"transaction": ""}}}))

        profile = load_profiles(path)["p"]

        with pytest.raises(MalformedFactoryRecordError):
            SingletonFactoryRecord.parse(204, profile[ChainId.OPBNB_MAINNET])
