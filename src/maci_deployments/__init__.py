"""
maci-deployments: Python library for deploying the MACI voting contracts
"""

from importlib.metadata import PackageNotFoundError, version

from .config import load_deployment_config
from .deployer import ContractDeployer, JsonRpcDeployer
from .exceptions import (
    ArtifactError,
    ArtifactNotFoundError,
    DeploymentError,
    DeploymentFailedError,
    InvalidParameterError,
    StoreConflictError,
    StoreCorruptedError,
    TransactionError,
)
from .orchestrator import DeploymentOrchestrator, run_deployment
from .parameters import derive_capacities, resolve_coordinator_key
from .storage import AddressStore
from .types import (
    AddressManifest,
    CoordinatorKey,
    DeployedContract,
    DeployFresh,
    DeploymentConfig,
    DeploymentOverrides,
    Reuse,
)

try:
    __version__ = version("maci-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "run_deployment",
    "DeploymentOrchestrator",
    "AddressStore",
    "ContractDeployer",
    "JsonRpcDeployer",
    "load_deployment_config",
    "derive_capacities",
    "resolve_coordinator_key",
    "AddressManifest",
    "CoordinatorKey",
    "DeployedContract",
    "DeployFresh",
    "DeploymentConfig",
    "DeploymentOverrides",
    "Reuse",
    "DeploymentError",
    "InvalidParameterError",
    "DeploymentFailedError",
    "StoreConflictError",
    "StoreCorruptedError",
    "ArtifactError",
    "ArtifactNotFoundError",
    "TransactionError",
]
