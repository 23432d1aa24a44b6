"""Integration tests for the deployment orchestrator."""

from pathlib import Path

import pytest

from prizepool_deployments import (
    AccountNotFoundError,
    AddressOf,
    ArtifactSpec,
    DeploymentFailedError,
    DeploymentOrchestrator,
    DeploymentStatus,
    InvalidPlanError,
    RecordStoreUnavailableError,
    UnresolvedDependencyError,
    ensure_success,
    prize_pool_artifacts,
    run_succeeded,
)
from prizepool_deployments.records import JsonRecordStore
from prizepool_deployments.types import DeploymentRecord

from conftest import FakeAccountProvider, FakeChainClient, RecordingStore

ADDRESS_A = "0x" + "aa" * 20


def _orchestrator(chain_client, record_store, account_provider=None):
    return DeploymentOrchestrator(
        chain_client=chain_client,
        record_store=record_store,
        account_provider=account_provider or FakeAccountProvider(),
    )


def _three_specs():
    return [
        ArtifactSpec(name="A"),
        ArtifactSpec(name="B", args_template=(AddressOf("A"),)),
        ArtifactSpec(name="C", args_template=(AddressOf("B"), AddressOf("A"))),
    ]


class TestArgumentSubstitution:
    """Test that earlier addresses are threaded into later constructors."""

    def test_address_of_is_substituted(self, local_profile, record_store):
        """Test [AddressOf(A), 5] is submitted as [address of A, 5]."""

        class FixedAddressClient(FakeChainClient):
            def deploy_contract(self, bytecode_ref, args, signer, options):
                result = super().deploy_contract(bytecode_ref, args, signer, options)
                if bytecode_ref == "A":
                    return type(result)(address=ADDRESS_A)
                return result

        client = FixedAddressClient()
        specs = [ArtifactSpec(name="A"), ArtifactSpec(name="B", args_template=(AddressOf("A"), 5))]

        records = _orchestrator(client, record_store).run(local_profile, specs)

        assert client.calls[1]["args"] == [ADDRESS_A, 5]
        assert records[1].args == [ADDRESS_A, 5]

    def test_prize_pool_plan(self, local_profile, chain_client, record_store):
        """Test the shipped plan: upkeep gets the registry address and batch size."""
        records = _orchestrator(chain_client, record_store).run(local_profile, prize_pool_artifacts())

        registry, upkeep = records
        assert [c["bytecode_ref"] for c in chain_client.calls] == [
            "PrizePoolRegistry",
            "PrizeStrategyUpkeep",
        ]
        assert chain_client.calls[1]["args"] == [registry.address, 5]
        assert upkeep.status == DeploymentStatus.DEPLOYED

    def test_literal_args_pass_through(self, local_profile, chain_client, record_store):
        """Test that literal values are submitted unchanged."""
        specs = [ArtifactSpec(name="A", args_template=("name", 18, True))]
        _orchestrator(chain_client, record_store).run(local_profile, specs)

        assert chain_client.calls[0]["args"] == ["name", 18, True]

    def test_deploy_options_come_from_profile(self, local_profile, chain_client, record_store):
        """Test that gas and code-size overrides reach the chain client."""
        _orchestrator(chain_client, record_store).run(local_profile, [ArtifactSpec(name="A")])

        options = chain_client.calls[0]["options"]
        assert options.gas_limit == 200_000_000
        assert options.allow_unlimited_contract_size is True


class TestOrderEnforcement:
    """Test declaration-order validation."""

    def test_forward_reference_fails_without_chain_calls(self, local_profile, chain_client, record_store):
        """Test that referencing a later artifact raises before any deployment."""
        specs = [
            ArtifactSpec(name="A"),
            ArtifactSpec(name="B", args_template=(AddressOf("C"),)),
            ArtifactSpec(name="C"),
        ]

        with pytest.raises(UnresolvedDependencyError, match="'C'"):
            _orchestrator(chain_client, record_store).run(local_profile, specs)

        assert chain_client.calls == []

    def test_undeclared_reference_fails(self, local_profile, chain_client, record_store):
        """Test that referencing an unknown artifact raises."""
        specs = [ArtifactSpec(name="B", args_template=(AddressOf("Nowhere"),))]

        with pytest.raises(UnresolvedDependencyError):
            _orchestrator(chain_client, record_store).run(local_profile, specs)
        assert chain_client.calls == []

    def test_self_reference_fails(self, local_profile, chain_client, record_store):
        """Test that an artifact cannot reference its own address."""
        specs = [ArtifactSpec(name="A", args_template=(AddressOf("A"),))]

        with pytest.raises(UnresolvedDependencyError):
            _orchestrator(chain_client, record_store).run(local_profile, specs)

    def test_duplicate_names_fail(self, local_profile, chain_client, record_store):
        """Test that names must be unique within a run."""
        specs = [ArtifactSpec(name="A"), ArtifactSpec(name="A")]

        with pytest.raises(InvalidPlanError, match="more than once"):
            _orchestrator(chain_client, record_store).run(local_profile, specs)
        assert chain_client.calls == []

    def test_unknown_deployer_fails_without_chain_calls(self, local_profile, chain_client, record_store):
        """Test that a spec naming a missing role is rejected up front."""
        specs = [ArtifactSpec(name="A"), ArtifactSpec(name="B", deployer_account="multisig")]

        with pytest.raises(AccountNotFoundError, match="multisig"):
            _orchestrator(chain_client, record_store).run(local_profile, specs)
        assert chain_client.calls == []

    def test_deploys_in_declaration_order(self, local_profile, chain_client, record_store):
        """Test that artifacts are deployed exactly in the order given."""
        specs = [ArtifactSpec(name="Z"), ArtifactSpec(name="M"), ArtifactSpec(name="A")]
        records = _orchestrator(chain_client, record_store).run(local_profile, specs)

        assert [c["bytecode_ref"] for c in chain_client.calls] == ["Z", "M", "A"]
        assert [r.artifact_name for r in records] == ["Z", "M", "A"]


class TestFailFast:
    """Test that the first failure stops the run."""

    def test_second_of_three_fails(self, remote_profile, record_store):
        """Test Deployed / Failed / NotAttempted and no third deployment."""
        client = FakeChainClient(fail_on=["B"])

        records = _orchestrator(client, record_store).run(remote_profile, _three_specs())

        assert [r.status for r in records] == [
            DeploymentStatus.DEPLOYED,
            DeploymentStatus.FAILED,
            DeploymentStatus.NOT_ATTEMPTED,
        ]
        assert [c["bytecode_ref"] for c in client.calls] == ["A", "B"]
        assert "execution reverted" in records[1].error
        assert records[2].address is None

    def test_prior_success_and_failure_are_recorded(self, remote_profile, record_store):
        """Test that the deployed and failed attempts are persisted, the skipped one is not."""
        client = FakeChainClient(fail_on=["B"])
        _orchestrator(client, record_store).run(remote_profile, _three_specs())

        assert record_store.get("A", "rinkeby").status == DeploymentStatus.DEPLOYED
        assert record_store.get("B", "rinkeby").status == DeploymentStatus.FAILED
        assert record_store.get("C", "rinkeby") is None

    def test_failure_is_logged_with_artifact_name(self, remote_profile, record_store, caplog):
        """Test that the failure message names the artifact and chain error."""
        client = FakeChainClient(fail_on=["B"])
        _orchestrator(client, record_store).run(remote_profile, _three_specs())

        errors = [r.getMessage() for r in caplog.records if r.levelname == "ERROR"]
        assert any("B" in m and "execution reverted" in m for m in errors)

    def test_last_artifact_failure_has_no_not_attempted(self, local_profile, record_store):
        """Test that a failing final artifact leaves nothing un-attempted."""
        client = FakeChainClient(fail_on=["C"])
        records = _orchestrator(client, record_store).run(local_profile, _three_specs())

        assert records[-1].status == DeploymentStatus.FAILED
        assert len(records) == 3

    def test_run_succeeded_and_ensure_success(self, local_profile, record_store):
        """Test the run summary helpers."""
        ok = _orchestrator(FakeChainClient(), RecordingStore()).run(local_profile, _three_specs())
        failed = _orchestrator(FakeChainClient(fail_on=["A"]), record_store).run(
            local_profile, _three_specs()
        )

        assert run_succeeded(ok)
        ensure_success(ok)
        assert not run_succeeded(failed)
        with pytest.raises(DeploymentFailedError, match="not attempted: B, C"):
            ensure_success(failed)


class TestIdempotency:
    """Test skip-if-deployed against a persisted store."""

    def test_second_run_skips_everything(self, remote_profile, record_store):
        """Test that a rerun yields SkippedAlreadyDeployed with identical addresses."""
        first = _orchestrator(FakeChainClient(), record_store).run(remote_profile, _three_specs())

        second_client = FakeChainClient()
        second = _orchestrator(second_client, record_store).run(remote_profile, _three_specs())

        assert second_client.calls == []
        assert all(r.status == DeploymentStatus.SKIPPED_ALREADY_DEPLOYED for r in second)
        assert [r.address for r in second] == [r.address for r in first]

    def test_skipped_address_feeds_later_args(self, remote_profile, record_store):
        """Test that a skipped artifact's stored address is substituted downstream."""
        record_store.put(
            DeploymentRecord(
                artifact_name="A",
                network="rinkeby",
                address=ADDRESS_A,
                status=DeploymentStatus.DEPLOYED,
            )
        )
        client = FakeChainClient()

        records = _orchestrator(client, record_store).run(remote_profile, _three_specs()[:2])

        assert records[0].status == DeploymentStatus.SKIPPED_ALREADY_DEPLOYED
        assert client.calls[0]["args"] == [ADDRESS_A]

    def test_prior_failure_is_retried(self, remote_profile, record_store):
        """Test that a recorded failure does not count as deployed."""
        record_store.put(
            DeploymentRecord(
                artifact_name="A",
                network="rinkeby",
                address=None,
                status=DeploymentStatus.FAILED,
                error="out of gas",
            )
        )
        client = FakeChainClient()

        records = _orchestrator(client, record_store).run(remote_profile, [ArtifactSpec(name="A")])

        assert records[0].status == DeploymentStatus.DEPLOYED
        assert record_store.get("A", "rinkeby").status == DeploymentStatus.DEPLOYED

    def test_skip_if_deployed_false_redeploys(self, remote_profile, record_store):
        """Test that opting out of skipping always deploys."""
        _orchestrator(FakeChainClient(), record_store).run(remote_profile, [ArtifactSpec(name="A")])

        client = FakeChainClient()
        records = _orchestrator(client, record_store).run(
            remote_profile, [ArtifactSpec(name="A", skip_if_deployed=False)]
        )

        assert len(client.calls) == 1
        assert records[0].status == DeploymentStatus.DEPLOYED

    def test_records_are_per_network(self, remote_profile, record_store):
        """Test that a deployment on one network does not satisfy another."""
        record_store.put(
            DeploymentRecord(
                artifact_name="A", network="kovan", address=ADDRESS_A, status=DeploymentStatus.DEPLOYED
            )
        )
        client = FakeChainClient()
        _orchestrator(client, record_store).run(remote_profile, [ArtifactSpec(name="A")])

        assert len(client.calls) == 1

    def test_idempotent_against_json_store(self, remote_profile, tmp_path: Path):
        """Test the rerun property against the on-disk store."""
        store = JsonRecordStore(tmp_path / "deployments")
        first = _orchestrator(FakeChainClient(), store).run(remote_profile, prize_pool_artifacts())

        second = _orchestrator(FakeChainClient(), JsonRecordStore(tmp_path / "deployments")).run(
            remote_profile, prize_pool_artifacts()
        )

        assert [r.status for r in second] == [DeploymentStatus.SKIPPED_ALREADY_DEPLOYED] * 2
        assert [r.address for r in second] == [r.address for r in first]

    def test_bytes_arg_rerun_skips_against_json_store(self, remote_profile, tmp_path: Path):
        """Test that a bytes32 constructor argument is persisted and the rerun skips."""
        specs = [ArtifactSpec(name="A", args_template=(b"\x01" * 32,))]
        first = _orchestrator(FakeChainClient(), JsonRecordStore(tmp_path)).run(remote_profile, specs)

        client = FakeChainClient()
        second = _orchestrator(client, JsonRecordStore(tmp_path)).run(remote_profile, specs)

        assert first[0].status == DeploymentStatus.DEPLOYED
        assert client.calls == []
        assert second[0].status == DeploymentStatus.SKIPPED_ALREADY_DEPLOYED
        assert second[0].address == first[0].address

    def test_failed_redeploy_keeps_deployed_record(self, remote_profile, record_store):
        """Test that a failed forced redeploy does not replace the live deployment."""
        first = _orchestrator(FakeChainClient(), record_store).run(remote_profile, [ArtifactSpec(name="A")])

        records = _orchestrator(FakeChainClient(fail_on=["A"]), record_store).run(
            remote_profile, [ArtifactSpec(name="A", skip_if_deployed=False)]
        )

        assert records[0].status == DeploymentStatus.FAILED
        stored = record_store.get("A", "rinkeby")
        assert stored.status == DeploymentStatus.DEPLOYED
        assert stored.address == first[0].address

        client = FakeChainClient()
        rerun = _orchestrator(client, record_store).run(remote_profile, [ArtifactSpec(name="A")])
        assert client.calls == []
        assert rerun[0].address == first[0].address

    def test_existing_hardhat_deploy_record_is_honoured(self, remote_profile, temp_deployments_dir):
        """Test that a pre-existing hardhat-deploy file skips the registry."""
        client = FakeChainClient()
        records = _orchestrator(client, JsonRecordStore(temp_deployments_dir)).run(
            remote_profile, prize_pool_artifacts()
        )

        assert records[0].status == DeploymentStatus.SKIPPED_ALREADY_DEPLOYED
        assert [c["bytecode_ref"] for c in client.calls] == ["PrizeStrategyUpkeep"]
        assert client.calls[0]["args"] == ["0x6f5a0d1b2e3c4a5b6c7d8e9f0a1b2c3d4e5f6a7b", 5]


class TestEphemeralTargets:
    """Test that local networks never touch the record store."""

    def test_no_store_reads_or_writes(self, local_profile, chain_client, record_store):
        """Test that persist_records=False skips the store while still wiring addresses."""
        records = _orchestrator(chain_client, record_store).run(local_profile, _three_specs())

        assert record_store.puts == 0
        assert record_store.gets == 0
        assert chain_client.calls[2]["args"] == [records[1].address, records[0].address]

    def test_local_rerun_deploys_again(self, local_profile, record_store):
        """Test that without persistence each run deploys afresh."""
        _orchestrator(FakeChainClient(), record_store).run(local_profile, [ArtifactSpec(name="A")])
        client = FakeChainClient()
        _orchestrator(client, record_store).run(local_profile, [ArtifactSpec(name="A")])

        assert len(client.calls) == 1


class TestRecordStoreFailures:
    """Test store errors on persisted networks."""

    def test_unavailable_store_aborts_persisted_run(self, remote_profile, tmp_path: Path):
        """Test that a store that cannot be read stops the run before deploying."""
        root = tmp_path / "deployments"
        root.write_text("not a directory")
        client = FakeChainClient()

        with pytest.raises(RecordStoreUnavailableError):
            _orchestrator(client, JsonRecordStore(root)).run(remote_profile, _three_specs())

        assert client.calls == []

    def test_unavailable_store_ignored_for_local_run(self, local_profile, tmp_path: Path):
        """Test that local runs proceed without the store."""
        root = tmp_path / "deployments"
        root.write_text("not a directory")

        records = _orchestrator(FakeChainClient(), JsonRecordStore(root)).run(local_profile, _three_specs())

        assert run_succeeded(records)

    def test_write_failure_aborts_after_first_deployment(self, remote_profile):
        """Test that a failed record write stops the run after the attempt it follows."""

        class ReadOnlyStore(RecordingStore):
            def put(self, record):
                raise RecordStoreUnavailableError("disk full")

        client = FakeChainClient()

        with pytest.raises(RecordStoreUnavailableError, match="disk full"):
            _orchestrator(client, ReadOnlyStore()).run(remote_profile, _three_specs())

        assert [c["bytecode_ref"] for c in client.calls] == ["A"]
