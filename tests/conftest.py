"""Shared pytest fixtures for prizepool-deployments tests."""

import shutil
from pathlib import Path
from typing import Any, Dict, List, Sequence

import pytest

from prizepool_deployments.exceptions import ChainClientError
from prizepool_deployments.records import InMemoryRecordStore
from prizepool_deployments.types import (
    DeployOptions,
    DeployResult,
    MnemonicAccounts,
    NetworkProfile,
    NodeAccounts,
    Signer,
)

# Well-known development mnemonic; account 0 is the Hardhat/Anvil default deployer
TEST_MNEMONIC = "test test test test test test test test test test test junk"
TEST_DEPLOYER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

LOCAL_RPC = "http://127.0.0.1:8545"
REMOTE_RPC = "https://rinkeby.infura.io/v3/test-key"


class FakeChainClient:
    """Chain client double that hands out sequential addresses and records calls."""

    def __init__(self, fail_on: Sequence[str] = ()):
        self.fail_on = set(fail_on)
        self.calls: List[Dict[str, Any]] = []

    def deploy_contract(
        self,
        bytecode_ref: str,
        args: Sequence[Any],
        signer: Signer,
        options: DeployOptions,
    ) -> DeployResult:
        self.calls.append(
            {"bytecode_ref": bytecode_ref, "args": list(args), "signer": signer, "options": options}
        )
        if bytecode_ref in self.fail_on:
            raise ChainClientError(f"execution reverted deploying {bytecode_ref}")
        address = "0x" + f"{len(self.calls):040x}"
        return DeployResult(address=address, transaction_hash="0x" + "ab" * 32, block_number=100 + len(self.calls))


class FakeAccountProvider:
    """Account provider double with a fixed deployer."""

    def __init__(self, roles: Sequence[str] = ("deployer",)):
        self.roles = roles

    def signers(self, profile: NetworkProfile) -> Dict[str, Signer]:
        return {role: Signer(role=role, address=TEST_DEPLOYER) for role in self.roles}


class RecordingStore(InMemoryRecordStore):
    """In-memory store that counts reads and writes."""

    def __init__(self):
        super().__init__()
        self.gets = 0
        self.puts = 0

    def get(self, artifact_name, network):
        self.gets += 1
        return super().get(artifact_name, network)

    def put(self, record):
        self.puts += 1
        super().put(record)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def artifacts_dir(fixtures_dir: Path) -> Path:
    """Return the compiled Hardhat artifacts fixture directory."""
    return fixtures_dir / "artifacts"


@pytest.fixture
def temp_deployments_dir(tmp_path: Path, fixtures_dir: Path) -> Path:
    """Copy the sample deployment records into a writable directory."""
    deployments_dir = tmp_path / "deployments"
    shutil.copytree(fixtures_dir / "deployments", deployments_dir)
    return deployments_dir


@pytest.fixture
def local_profile() -> NetworkProfile:
    """Ephemeral local network profile."""
    return NetworkProfile(
        name="localhost",
        rpc_endpoint=LOCAL_RPC,
        account_source=NodeAccounts(),
        persist_records=False,
        block_gas_limit=200_000_000,
        allow_unlimited_contract_size=True,
    )


@pytest.fixture
def remote_profile() -> NetworkProfile:
    """Persisted public network profile."""
    return NetworkProfile(
        name="rinkeby",
        rpc_endpoint=REMOTE_RPC,
        account_source=MnemonicAccounts(mnemonic=TEST_MNEMONIC),
        persist_records=True,
    )


@pytest.fixture
def chain_client() -> FakeChainClient:
    return FakeChainClient()


@pytest.fixture
def account_provider() -> FakeAccountProvider:
    return FakeAccountProvider()


@pytest.fixture
def record_store() -> RecordingStore:
    return RecordingStore()
