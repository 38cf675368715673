"""Unit tests for custom exception classes."""

import pytest

from maci_deployments.exceptions import (
    ArtifactError,
    ArtifactNotFoundError,
    DeploymentError,
    DeploymentFailedError,
    InvalidParameterError,
    StoreConflictError,
    StoreCorruptedError,
    TransactionError,
)
from maci_deployments.types import AddressManifest


class TestExceptionCatching:
    """Test that exceptions can be caught as their base types."""

    def test_catch_invalid_parameter_as_value_error(self):
        """Test that InvalidParameterError can be caught as ValueError."""
        with pytest.raises(ValueError):
            raise InvalidParameterError("test")

    def test_catch_store_conflict_as_file_exists_error(self):
        """Test that StoreConflictError can be caught as FileExistsError."""
        with pytest.raises(FileExistsError):
            raise StoreConflictError("test")

    def test_catch_artifact_not_found_as_file_not_found_error(self):
        """Test that ArtifactNotFoundError can be caught as FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            raise ArtifactNotFoundError("test")

    def test_catch_deployment_failed_as_runtime_error(self):
        """Test that DeploymentFailedError can be caught as RuntimeError."""
        with pytest.raises(RuntimeError):
            raise DeploymentFailedError("MACI", AddressManifest())

    def test_catch_all_as_deployment_error(self):
        """Test that all custom exceptions can be caught as DeploymentError."""
        exceptions = [
            InvalidParameterError("test"),
            DeploymentFailedError("MACI", AddressManifest()),
            StoreConflictError("test"),
            StoreCorruptedError("test"),
            ArtifactNotFoundError("test"),
            ArtifactError("test"),
            TransactionError("test"),
        ]

        for exc in exceptions:
            with pytest.raises(DeploymentError):
                raise exc


class TestDeploymentFailedError:
    """Test the attributes carried by DeploymentFailedError."""

    def test_carries_contract_name_and_manifest(self):
        """Test that the failing contract and partial manifest are exposed."""
        manifest = AddressManifest.from_addresses({"SignUpToken": "0x01"})
        exc = DeploymentFailedError("SignUpTokenGatekeeper", manifest)

        assert exc.contract_name == "SignUpTokenGatekeeper"
        assert exc.manifest is manifest

    def test_default_message_names_contract(self):
        """Test that the default message identifies the failing step."""
        exc = DeploymentFailedError("MACI", AddressManifest())
        assert str(exc) == "Deployment of MACI failed"

    def test_custom_message(self):
        """Test that an explicit message is used verbatim."""
        exc = DeploymentFailedError("MACI", AddressManifest(), "out of gas")
        assert str(exc) == "out of gas"
