"""Idempotent, sequential deployment of declared artifacts."""

import logging
from typing import Any, Dict, List, Sequence

from .exceptions import (
    AccountNotFoundError,
    ArtifactNotFoundError,
    ChainClientError,
    ConstructorArgumentsError,
    DeploymentFailedError,
    InvalidPlanError,
    UnresolvedDependencyError,
)
from .interfaces import AccountProvider, ChainClient, RecordStore
from .types import (
    AddressOf,
    ArtifactSpec,
    DeploymentRecord,
    DeploymentStatus,
    NetworkProfile,
    Signer,
)

logger = logging.getLogger(__name__)

# Errors that fail one artifact and stop the run; anything else propagates
ATTEMPT_ERRORS = (ChainClientError, ArtifactNotFoundError, ConstructorArgumentsError)

SUCCESS_STATUSES = (DeploymentStatus.DEPLOYED, DeploymentStatus.SKIPPED_ALREADY_DEPLOYED)


def validate_declaration_order(specs: Sequence[ArtifactSpec]) -> None:
    """
    Check that every address reference names an artifact declared earlier.

    Declaration order stands in for a dependency graph: a reference to an
    artifact declared later, or never, is rejected rather than reordered.

    Raises:
        InvalidPlanError: If an artifact name is declared twice
        UnresolvedDependencyError: If a reference is forward or undeclared
    """
    declared: List[str] = []
    for spec in specs:
        if spec.name in declared:
            raise InvalidPlanError(f"Artifact '{spec.name}' is declared more than once")
        for dependency in spec.dependencies():
            if dependency not in declared:
                raise UnresolvedDependencyError(
                    f"Artifact '{spec.name}' needs the address of '{dependency}', "
                    f"which is not declared before it"
                )
        declared.append(spec.name)


def resolve_args(spec: ArtifactSpec, addresses: Dict[str, str]) -> List[Any]:
    """
    Substitute AddressOf references with addresses recorded earlier in the run.

    Raises:
        UnresolvedDependencyError: If a referenced artifact has no address yet
    """
    args: List[Any] = []
    for arg in spec.args_template:
        if isinstance(arg, AddressOf):
            if arg.artifact_name not in addresses:
                raise UnresolvedDependencyError(
                    f"Artifact '{spec.name}' needs the address of '{arg.artifact_name}', "
                    f"which has not been deployed in this run"
                )
            args.append(addresses[arg.artifact_name])
        else:
            args.append(arg)
    return args


def run_succeeded(records: Sequence[DeploymentRecord]) -> bool:
    """True when every artifact was deployed or already deployed."""
    return all(record.status in SUCCESS_STATUSES for record in records)


def ensure_success(records: Sequence[DeploymentRecord]) -> None:
    """
    Raise if a run did not bring every artifact up.

    Raises:
        DeploymentFailedError: Naming the failed and not-attempted artifacts
    """
    if run_succeeded(records):
        return
    failed = [r for r in records if r.status == DeploymentStatus.FAILED]
    skipped = [r.artifact_name for r in records if r.status == DeploymentStatus.NOT_ATTEMPTED]

    message = "; ".join(f"{r.artifact_name} failed on {r.network}: {r.error}" for r in failed)
    if skipped:
        message += f"; not attempted: {', '.join(skipped)}"
    raise DeploymentFailedError(message)


class DeploymentOrchestrator:
    """
    Deploys a fixed list of artifacts to one network, once.

    Artifacts are processed strictly one at a time in declaration order. The
    address of every deployed or already-deployed artifact is kept for the
    rest of the run so later constructor arguments can reference it.
    """

    def __init__(
        self,
        chain_client: ChainClient,
        record_store: RecordStore,
        account_provider: AccountProvider,
    ):
        self.chain_client = chain_client
        self.record_store = record_store
        self.account_provider = account_provider

    def _signers_for(
        self, profile: NetworkProfile, specs: Sequence[ArtifactSpec]
    ) -> Dict[str, Signer]:
        signers = self.account_provider.signers(profile)
        for spec in specs:
            if spec.deployer_account not in signers:
                raise AccountNotFoundError(
                    f"No '{spec.deployer_account}' account on '{profile.name}' "
                    f"to deploy {spec.name}; available: {', '.join(sorted(signers))}"
                )
            if not signers[spec.deployer_account].address:
                raise AccountNotFoundError(
                    f"Account '{spec.deployer_account}' on '{profile.name}' has no address"
                )
        return signers

    def _previous_deployment(self, profile: NetworkProfile, spec: ArtifactSpec):
        if not (spec.skip_if_deployed and profile.persist_records):
            return None
        record = self.record_store.get(spec.name, profile.name)
        # A recorded failure does not count; the artifact is attempted again
        if record is None or record.status != DeploymentStatus.DEPLOYED or not record.address:
            return None
        return record

    def _persist(self, profile: NetworkProfile, record: DeploymentRecord) -> None:
        if not profile.persist_records:
            return
        if record.status == DeploymentStatus.FAILED:
            existing = self.record_store.get(record.artifact_name, record.network)
            # A failed redeploy must not hide a live contract
            if (
                existing is not None
                and existing.status == DeploymentStatus.DEPLOYED
                and existing.address
            ):
                logger.warning(
                    "Keeping recorded %s deployment at %s on %s after failed redeploy",
                    record.artifact_name,
                    existing.address,
                    record.network,
                )
                return
        self.record_store.put(record)

    def _attempt(
        self,
        profile: NetworkProfile,
        spec: ArtifactSpec,
        signer: Signer,
        args: List[Any],
    ) -> DeploymentRecord:
        logger.info("Deploying %s contract from %s", spec.name, signer.address)
        try:
            result = self.chain_client.deploy_contract(
                spec.bytecode_ref, args, signer, profile.deploy_options()
            )
        except ATTEMPT_ERRORS as e:
            logger.error("Failed to deploy %s on %s: %s", spec.name, profile.name, e)
            return DeploymentRecord(
                artifact_name=spec.name,
                network=profile.name,
                address=None,
                status=DeploymentStatus.FAILED,
                args=args,
                error=str(e),
            )

        logger.info("Deployed %s: %s", spec.name, result.address)
        return DeploymentRecord(
            artifact_name=spec.name,
            network=profile.name,
            address=result.address,
            status=DeploymentStatus.DEPLOYED,
            args=args,
            transaction_hash=result.transaction_hash,
            block_number=result.block_number,
        )

    def run(
        self, profile: NetworkProfile, specs: Sequence[ArtifactSpec]
    ) -> List[DeploymentRecord]:
        """
        Deploy each artifact in order, skipping those already deployed.

        Args:
            profile: Target network
            specs: Artifacts in deployment order

        Returns:
            One DeploymentRecord per spec, in declaration order. After the
            first failure, remaining specs are reported as NOT_ATTEMPTED.

        Raises:
            InvalidPlanError: If names repeat
            UnresolvedDependencyError: If a reference is forward or undeclared
            AccountNotFoundError: If a deployer role has no signer
            RecordStoreUnavailableError: If a persisted network's records cannot be read or written
        """
        validate_declaration_order(specs)
        signers = self._signers_for(profile, specs)

        logger.info("Deploying %d artifact(s) to %s", len(specs), profile.name)

        addresses: Dict[str, str] = {}
        records: List[DeploymentRecord] = []

        for position, spec in enumerate(specs):
            args = resolve_args(spec, addresses)

            previous = self._previous_deployment(profile, spec)
            if previous is not None:
                logger.info(
                    "Skipping %s, already deployed on %s at %s",
                    spec.name,
                    profile.name,
                    previous.address,
                )
                record = DeploymentRecord(
                    artifact_name=spec.name,
                    network=profile.name,
                    address=previous.address,
                    status=DeploymentStatus.SKIPPED_ALREADY_DEPLOYED,
                    args=previous.args,
                    transaction_hash=previous.transaction_hash,
                    block_number=previous.block_number,
                )
            else:
                record = self._attempt(profile, spec, signers[spec.deployer_account], args)
                self._persist(profile, record)

            records.append(record)

            if record.status == DeploymentStatus.FAILED:
                remaining = specs[position + 1:]
                for later in remaining:
                    records.append(
                        DeploymentRecord(
                            artifact_name=later.name,
                            network=profile.name,
                            address=None,
                            status=DeploymentStatus.NOT_ATTEMPTED,
                        )
                    )
                if remaining:
                    logger.warning(
                        "Stopping after %s failed; not attempted: %s",
                        spec.name,
                        ", ".join(later.name for later in remaining),
                    )
                break

            addresses[spec.name] = record.address

        return records
