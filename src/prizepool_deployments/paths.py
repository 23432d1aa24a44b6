"""Path management utilities for prizepool-deployments library."""

import os
from pathlib import Path
from typing import Mapping, Optional, Union

ARTIFACTS_DIR_ENV = "PRIZEPOOL_ARTIFACTS_DIR"
DEPLOYMENTS_DIR_ENV = "PRIZEPOOL_DEPLOYMENTS_DIR"


def get_default_artifacts_dir(env: Optional[Mapping[str, str]] = None) -> Path:
    """
    Get default directory of compiled Hardhat artifacts.

    Returns:
        $PRIZEPOOL_ARTIFACTS_DIR if set, otherwise ./artifacts
    """
    if env is None:
        env = os.environ
    if env.get(ARTIFACTS_DIR_ENV):
        return Path(env[ARTIFACTS_DIR_ENV]).absolute()
    return Path.cwd() / "artifacts"


def get_default_deployments_dir(env: Optional[Mapping[str, str]] = None) -> Path:
    """
    Get default directory of persisted deployment records.

    Returns:
        $PRIZEPOOL_DEPLOYMENTS_DIR if set, otherwise ./deployments
    """
    if env is None:
        env = os.environ
    if env.get(DEPLOYMENTS_DIR_ENV):
        return Path(env[DEPLOYMENTS_DIR_ENV]).absolute()
    return Path.cwd() / "deployments"


def get_record_path(
    deployments_root: Union[Path, str], network: str, artifact_name: str
) -> Path:
    """
    Get the record file for one artifact on one network.

    Args:
        deployments_root: Root of the record store
        network: Network name
        artifact_name: Artifact name

    Returns:
        Path to {deployments_root}/{network}/{artifact_name}.json
    """
    return Path(deployments_root).absolute() / network / f"{artifact_name}.json"
