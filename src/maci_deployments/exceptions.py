"""Custom exception classes for maci-deployments library."""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .types import AddressManifest


class DeploymentError(Exception):
    """Base exception for deployment-related errors."""

    pass


class InvalidParameterError(DeploymentError, ValueError):
    """Raised when configuration is malformed or out of range."""

    pass


class DeploymentFailedError(DeploymentError, RuntimeError):
    """
    Raised when a contract deployment did not confirm.

    Attributes:
        contract_name: Logical name of the contract whose deployment failed
        manifest: Partial manifest of contracts resolved before the failure
    """

    def __init__(
        self,
        contract_name: str,
        manifest: "AddressManifest",
        message: Optional[str] = None,
    ):
        if message is None:
            message = f"Deployment of {contract_name} failed"
        super().__init__(message)
        self.contract_name = contract_name
        self.manifest = manifest


class StoreConflictError(DeploymentError, FileExistsError):
    """Raised when the address store cannot be archived safely."""

    pass


class StoreCorruptedError(DeploymentError, ValueError):
    """Raised when the persisted manifest cannot be parsed."""

    pass


class ArtifactNotFoundError(DeploymentError, FileNotFoundError):
    """Raised when a compiled contract artifact is not found."""

    pass


class ArtifactError(DeploymentError, ValueError):
    """Raised when an artifact is malformed or cannot be linked or encoded."""

    pass


class TransactionError(DeploymentError, RuntimeError):
    """Raised when a deployment transaction is rejected, reverts or times out."""

    pass
