"""Command-line entry point: prizepool-deploy."""

import argparse
import logging
import os
import sys
import warnings
from typing import List, Mapping, Optional

from .accounts import DefaultAccountProvider
from .artifacts import HardhatArtifactSource
from .exceptions import (
    DeploymentError,
    DeploymentFailedError,
    MissingCredentialsWarning,
    NetworkNotFoundError,
)
from .networks import resolve_networks, select_network
from .orchestrator import DeploymentOrchestrator, ensure_success
from .paths import get_default_artifacts_dir, get_default_deployments_dir
from .plan import DEFAULT_BATCH_SIZE, prize_pool_artifacts
from .records import InMemoryRecordStore, JsonRecordStore
from .rpc import JsonRpcChainClient

logger = logging.getLogger("prizepool_deployments")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prizepool-deploy",
        description="Deploy PrizePoolRegistry and PrizeStrategyUpkeep, skipping existing deployments.",
    )
    parser.add_argument("--network", default="localhost", help="Target network (default: localhost)")
    parser.add_argument("--artifacts-dir", default=None, help="Compiled Hardhat artifacts directory")
    parser.add_argument("--deployments-dir", default=None, help="Deployment record directory")
    parser.add_argument(
        "--batch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help=f"PrizeStrategyUpkeep batch size (default: {DEFAULT_BATCH_SIZE})",
    )
    parser.add_argument(
        "--list-networks", action="store_true", help="Print resolved networks and exit"
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug output")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Warnings and errors only")
    return parser


def _configure_logging(args: argparse.Namespace) -> None:
    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(message)s", stream=sys.stdout)


def main(argv: Optional[List[str]] = None, env: Optional[Mapping[str, str]] = None) -> int:
    """
    Run one deployment.

    Returns:
        0 if every artifact is deployed or already deployed, 1 on a failed or
        not-attempted artifact or any deployment error, 2 on usage errors
    """
    args = build_parser().parse_args(argv)
    if env is None:
        env = os.environ
    _configure_logging(args)

    try:
        # The resolver already logs missing credentials; printing the warning too repeats it
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", MissingCredentialsWarning)
            profiles = resolve_networks(env)
    except DeploymentError as e:
        logger.error("Invalid network configuration: %s", e)
        return EXIT_FAILED

    if args.list_networks:
        for name, profile in profiles.items():
            persistence = "persisted" if profile.persist_records else "ephemeral"
            print(f"{name}\t{profile.rpc_endpoint}\t{persistence}")
        return EXIT_OK

    try:
        profile = select_network(profiles, args.network)
    except NetworkNotFoundError as e:
        logger.error("%s", e)
        return EXIT_USAGE

    artifacts_dir = args.artifacts_dir or get_default_artifacts_dir(env)
    if profile.persist_records:
        record_store = JsonRecordStore(args.deployments_dir or get_default_deployments_dir(env))
    else:
        record_store = InMemoryRecordStore()

    orchestrator = DeploymentOrchestrator(
        chain_client=JsonRpcChainClient(profile.rpc_endpoint, HardhatArtifactSource(artifacts_dir)),
        record_store=record_store,
        account_provider=DefaultAccountProvider(),
    )

    logger.info("Running deploy script on %s", profile.name)
    try:
        records = orchestrator.run(profile, prize_pool_artifacts(batch_size=args.batch_size))
    except DeploymentError as e:
        logger.error("Deployment aborted: %s", e)
        return EXIT_FAILED

    for record in records:
        logger.debug("%s: %s %s", record.artifact_name, record.status.value, record.address)

    try:
        ensure_success(records)
    except DeploymentFailedError as e:
        logger.error("Deployment incomplete: %s", e)
        return EXIT_FAILED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
