"""Shared pytest fixtures for maci-deployments tests."""

import hashlib
import json
import threading
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

import pytest

from maci_deployments.storage import AddressStore
from maci_deployments.types import DeploymentConfig


def fake_address(artifact_name: str) -> str:
    """Deterministic address for a fake deployment of an artifact."""
    return "0x" + hashlib.sha1(artifact_name.encode()).hexdigest()


class FakeDeployer:
    """Records deploy calls and returns a fixed address per artifact."""

    def __init__(self, fail_on: Tuple[str, ...] = ()):
        self.fail_on = set(fail_on)
        self.calls: List[Tuple[str, Dict[str, str], Tuple[Any, ...]]] = []
        self._lock = threading.Lock()

    def deploy(self, artifact_name: str, libraries: Mapping[str, str], *constructor_args: Any) -> str:
        with self._lock:
            self.calls.append((artifact_name, dict(libraries), constructor_args))
        if artifact_name in self.fail_on:
            raise RuntimeError(f"{artifact_name} reverted")
        return fake_address(artifact_name)

    @staticmethod
    def address_of(artifact_name: str) -> str:
        return fake_address(artifact_name)

    @property
    def deployed(self) -> List[str]:
        return [call[0] for call in self.calls]

    def call_for(self, artifact_name: str) -> Tuple[str, Dict[str, str], Tuple[Any, ...]]:
        return next(call for call in self.calls if call[0] == artifact_name)


@pytest.fixture
def fake_deployer() -> FakeDeployer:
    """Return a deployer that always succeeds."""
    return FakeDeployer()


@pytest.fixture
def make_deployer():
    """Return a factory for deployers that fail on the given artifacts."""
    return FakeDeployer


@pytest.fixture
def config() -> DeploymentConfig:
    """Return a small deployment configuration with a coordinator private key."""
    return DeploymentConfig(coordinator_priv_key=12345)


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    """Return the path of a manifest file inside a temporary directory."""
    return tmp_path / "contractAddresses.json"


@pytest.fixture
def address_store(store_path: Path) -> AddressStore:
    """Return an address store backed by a temporary file."""
    return AddressStore(store_path)


@pytest.fixture
def artifacts_dir(tmp_path: Path) -> Path:
    """Create compiled artifacts for a gatekeeper and a linked contract."""
    artifacts = tmp_path / "compiled"
    artifacts.mkdir()

    gatekeeper = {
        "abi": [
            {
                "type": "constructor",
                "inputs": [{"name": "_token", "type": "address"}],
            }
        ],
        "bytecode": "0x6080604052",
    }
    with open(artifacts / "SignUpTokenGatekeeper.json", "w") as f:
        json.dump(gatekeeper, f)

    linked = {
        "abi": [],
        "bytecode": "0x6080" + "__MiMC" + "_" * 34 + "6000",
    }
    with open(artifacts / "UsesMiMC.json", "w") as f:
        json.dump(linked, f)

    return artifacts
