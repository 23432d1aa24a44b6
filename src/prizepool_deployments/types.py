"""Data types and dataclasses for prizepool-deployments library."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Sequence, Union

from .constants import DEFAULT_DERIVATION_PATH
from .exceptions import InvalidProfileError


@dataclass(frozen=True)
class MnemonicAccounts:
    """Accounts derived from a BIP-39 mnemonic."""

    mnemonic: str
    derivation_path: str = DEFAULT_DERIVATION_PATH

    def __bool__(self) -> bool:
        return bool(self.mnemonic.strip())

    def __repr__(self) -> str:
        return f"MnemonicAccounts(derivation_path={self.derivation_path!r})"


@dataclass(frozen=True)
class NodeAccounts:
    """Accounts unlocked on the node itself (eth_accounts)."""

    pass


AccountSource = Union[MnemonicAccounts, NodeAccounts]


@dataclass(frozen=True)
class DeployOptions:
    """Engineering overrides handed to the chain client."""

    gas_limit: Optional[int] = None
    allow_unlimited_contract_size: bool = False


@dataclass(frozen=True)
class NetworkProfile:
    """A resolved deployment target."""

    name: str  # e.g., "mainnet", "localhost"
    rpc_endpoint: Optional[str]
    account_source: Optional[AccountSource]
    persist_records: bool

    # Local-only overrides
    block_gas_limit: Optional[int] = None
    allow_unlimited_contract_size: bool = False

    multisig_address: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.persist_records:
            return
        if not self.rpc_endpoint:
            raise InvalidProfileError(
                f"Network '{self.name}' persists records but has no RPC endpoint"
            )
        if not self.account_source:
            raise InvalidProfileError(
                f"Network '{self.name}' persists records but has no account source"
            )

    def deploy_options(self) -> DeployOptions:
        return DeployOptions(
            gas_limit=self.block_gas_limit,
            allow_unlimited_contract_size=self.allow_unlimited_contract_size,
        )


@dataclass(frozen=True)
class AddressOf:
    """Constructor argument replaced by the address of an earlier artifact."""

    artifact_name: str


@dataclass(frozen=True)
class ArtifactSpec:
    """One deployable unit, declared by the caller."""

    name: str
    args_template: Sequence[Any] = ()
    deployer_account: str = "deployer"
    skip_if_deployed: bool = True
    contract: Optional[str] = None  # compiled artifact name, defaults to name

    @property
    def bytecode_ref(self) -> str:
        return self.contract or self.name

    def dependencies(self) -> List[str]:
        """Names of artifacts whose addresses this spec consumes, in argument order."""
        return [arg.artifact_name for arg in self.args_template if isinstance(arg, AddressOf)]


class DeploymentStatus(Enum):
    """
    Terminal state of one artifact within a run.

    Value strings define de/serialization law for persisted records.
    """

    DEPLOYED = "deployed"
    SKIPPED_ALREADY_DEPLOYED = "skipped"
    FAILED = "failed"
    NOT_ATTEMPTED = "not-attempted"


@dataclass(frozen=True)
class DeploymentRecord:
    """Outcome of one deployment attempt, keyed by (artifact_name, network)."""

    # Required fields
    artifact_name: str
    network: str
    address: Optional[str]  # Checksummed address, None unless deployed or skipped
    status: DeploymentStatus

    # Optional fields
    args: Optional[List[Any]] = None
    transaction_hash: Optional[str] = None
    block_number: Optional[int] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class DeployResult:
    """What the chain client reports for a mined deployment."""

    address: str
    transaction_hash: Optional[str] = None
    block_number: Optional[int] = None


@dataclass(frozen=True)
class Signer:
    """A named account usable by the chain client."""

    role: str
    address: str
    # eth_account LocalAccount when the key is held locally; None when the node signs
    account: Optional[Any] = field(default=None, repr=False, compare=False)
