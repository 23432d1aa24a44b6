"""Custom exception classes for prizepool-deployments library."""


class DeploymentError(Exception):
    """Base exception for deployment-related errors."""

    pass


class MissingCredentialsWarning(UserWarning):
    """Issued when remote-network secrets are absent and only local networks resolve."""

    pass


class InvalidProfileError(DeploymentError, ValueError):
    """Raised when a network profile is missing fields its persistence policy requires."""

    pass


class NetworkNotFoundError(DeploymentError, ValueError):
    """Raised when requested network is not among the resolved profiles."""

    pass


class InvalidPlanError(DeploymentError, ValueError):
    """Raised when a list of artifact specs cannot be deployed as declared."""

    pass


class UnresolvedDependencyError(InvalidPlanError):
    """Raised when an artifact references an address not deployed earlier in the run."""

    pass


class AccountNotFoundError(DeploymentError, ValueError):
    """Raised when a deployer role has no signer on the target network."""

    pass


class ArtifactNotFoundError(DeploymentError, FileNotFoundError):
    """Raised when no compiled artifact exists for a contract name."""

    pass


class ConstructorArgumentsError(DeploymentError, ValueError):
    """Raised when constructor arguments do not match the artifact ABI."""

    pass


class ChainClientError(DeploymentError, RuntimeError):
    """Raised when a deployment transaction cannot be submitted or is reverted."""

    pass


class DeploymentFailedError(DeploymentError, RuntimeError):
    """Raised when a run ends with failed or not-attempted artifacts."""

    pass


class RecordStoreUnavailableError(DeploymentError, OSError):
    """Raised when deployment records cannot be read or written."""

    pass
