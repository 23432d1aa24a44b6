"""
prizepool-deployments: idempotent deployment of the prize pool registry contracts
"""

from importlib.metadata import PackageNotFoundError, version

from .exceptions import (
    AccountNotFoundError,
    ArtifactNotFoundError,
    ChainClientError,
    ConstructorArgumentsError,
    DeploymentError,
    DeploymentFailedError,
    InvalidPlanError,
    InvalidProfileError,
    MissingCredentialsWarning,
    NetworkNotFoundError,
    RecordStoreUnavailableError,
    UnresolvedDependencyError,
)
from .networks import resolve_networks, select_network
from .orchestrator import DeploymentOrchestrator, ensure_success, run_succeeded
from .plan import prize_pool_artifacts
from .types import (
    AddressOf,
    ArtifactSpec,
    DeploymentRecord,
    DeploymentStatus,
    MnemonicAccounts,
    NetworkProfile,
    NodeAccounts,
)

try:
    __version__ = version("prizepool-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "DeploymentOrchestrator",
    "resolve_networks",
    "select_network",
    "ensure_success",
    "run_succeeded",
    "prize_pool_artifacts",
    "AddressOf",
    "ArtifactSpec",
    "DeploymentRecord",
    "DeploymentStatus",
    "MnemonicAccounts",
    "NetworkProfile",
    "NodeAccounts",
    "DeploymentError",
    "MissingCredentialsWarning",
    "InvalidProfileError",
    "NetworkNotFoundError",
    "InvalidPlanError",
    "UnresolvedDependencyError",
    "AccountNotFoundError",
    "ArtifactNotFoundError",
    "ConstructorArgumentsError",
    "ChainClientError",
    "DeploymentFailedError",
    "RecordStoreUnavailableError",
]
