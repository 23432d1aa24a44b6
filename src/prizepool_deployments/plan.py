"""The prize pool contracts this package deploys, in deployment order."""

from typing import List

from .types import AddressOf, ArtifactSpec

PRIZE_POOL_REGISTRY = "PrizePoolRegistry"
PRIZE_STRATEGY_UPKEEP = "PrizeStrategyUpkeep"

DEFAULT_BATCH_SIZE = 5


def prize_pool_artifacts(batch_size: int = DEFAULT_BATCH_SIZE) -> List[ArtifactSpec]:
    """
    Declare the registry and the upkeep that iterates it.

    Args:
        batch_size: Number of prize pools the upkeep processes per call

    Returns:
        Artifact specs; the upkeep is constructed with the registry's address
    """
    return [
        ArtifactSpec(name=PRIZE_POOL_REGISTRY, deployer_account="deployer"),
        ArtifactSpec(
            name=PRIZE_STRATEGY_UPKEEP,
            args_template=(AddressOf(PRIZE_POOL_REGISTRY), batch_size),
            deployer_account="deployer",
        ),
    ]
