"""Collaborator contracts consumed by the deployment orchestrator."""

from typing import Any, Dict, Optional, Protocol, Sequence

from .types import DeploymentRecord, DeployOptions, DeployResult, NetworkProfile, Signer


class ChainClient(Protocol):
    def deploy_contract(
        self,
        bytecode_ref: str,
        args: Sequence[Any],
        signer: Signer,
        options: DeployOptions,
    ) -> DeployResult:
        """Deploy a contract and block until its transaction is mined."""
        ...


class RecordStore(Protocol):
    def get(self, artifact_name: str, network: str) -> Optional[DeploymentRecord]:
        ...

    def put(self, record: DeploymentRecord) -> None:
        ...


class AccountProvider(Protocol):
    def signers(self, profile: NetworkProfile) -> Dict[str, Signer]:
        """Return signer handles keyed by role ("deployer", "multisig")."""
        ...
