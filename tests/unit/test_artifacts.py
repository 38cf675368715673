"""Unit tests for artifact loading, library linking and argument encoding."""

import json
from pathlib import Path

import pytest

from maci_deployments.artifacts import (
    ContractArtifact,
    encode_constructor_args,
    link_bytecode,
    load_artifact,
)
from maci_deployments.exceptions import ArtifactError, ArtifactNotFoundError

MIMC_ADDRESS = "0x" + "12" * 20


class TestLoadArtifact:
    """Test the load_artifact function."""

    def test_loads_abi_and_bytecode(self, artifacts_dir: Path):
        """Test loading a truffle-style artifact."""
        artifact = load_artifact(artifacts_dir, "SignUpTokenGatekeeper")

        assert artifact.name == "SignUpTokenGatekeeper"
        assert artifact.bytecode == "6080604052"
        assert artifact.constructor_inputs() == [{"name": "_token", "type": "address"}]

    def test_loads_standard_json_bytecode_object(self, tmp_path: Path):
        """Test loading bytecode nested under "object" with link references."""
        refs = {"contracts/MiMC.sol": {"MiMC": [{"start": 2, "length": 20}]}}
        (tmp_path / "MACI.json").write_text(
            json.dumps(
                {"abi": [], "bytecode": {"object": "6080" + "00" * 20, "linkReferences": refs}}
            )
        )

        artifact = load_artifact(tmp_path, "MACI")

        assert artifact.bytecode == "6080" + "00" * 20
        assert artifact.link_references == refs

    def test_missing_artifact_raises(self, tmp_path: Path):
        """Test that a missing file raises ArtifactNotFoundError."""
        with pytest.raises(ArtifactNotFoundError, match="MACI"):
            load_artifact(tmp_path, "MACI")

    def test_missing_bytecode_raises(self, tmp_path: Path):
        """Test that an artifact without bytecode is rejected."""
        (tmp_path / "MiMC.json").write_text(json.dumps({"abi": []}))

        with pytest.raises(ArtifactError):
            load_artifact(tmp_path, "MiMC")

    def test_corrupted_artifact_raises(self, tmp_path: Path):
        """Test that invalid JSON is rejected."""
        (tmp_path / "MiMC.json").write_text("{ invalid json")

        with pytest.raises(ArtifactError):
            load_artifact(tmp_path, "MiMC")


class TestLinkBytecode:
    """Test the link_bytecode function."""

    def test_links_legacy_placeholder(self, artifacts_dir: Path):
        """Test replacing a __MiMC____ placeholder."""
        artifact = load_artifact(artifacts_dir, "UsesMiMC")

        linked = link_bytecode(artifact, {"MiMC": MIMC_ADDRESS})

        assert linked == "6080" + "12" * 20 + "6000"

    def test_links_qualified_legacy_placeholder(self):
        """Test a placeholder that carries the source path."""
        placeholder = "__contracts/MiMC.sol:MiMC"
        placeholder += "_" * (40 - len(placeholder))
        artifact = ContractArtifact(name="MACI", abi=[], bytecode="60" + placeholder + "00")

        assert link_bytecode(artifact, {"MiMC": MIMC_ADDRESS}) == "60" + "12" * 20 + "00"

    def test_links_by_link_references(self):
        """Test replacing library offsets from linkReferences."""
        artifact = ContractArtifact(
            name="MACI",
            abi=[],
            bytecode="6080" + "00" * 20 + "6000",
            link_references={"contracts/MiMC.sol": {"MiMC": [{"start": 2, "length": 20}]}},
        )

        assert link_bytecode(artifact, {"MiMC": MIMC_ADDRESS}) == "6080" + "12" * 20 + "6000"

    def test_checksummed_address_is_lowercased(self, artifacts_dir: Path):
        """Test that addresses are embedded as lowercase hex."""
        artifact = load_artifact(artifacts_dir, "UsesMiMC")
        address = "0x52908400098527886E0F7030069857D2E4169EE7"

        linked = link_bytecode(artifact, {"MiMC": address})

        assert address[2:].lower() in linked

    def test_missing_library_raises(self, artifacts_dir: Path):
        """Test that an unlinked placeholder is reported."""
        artifact = load_artifact(artifacts_dir, "UsesMiMC")

        with pytest.raises(ArtifactError, match="MiMC"):
            link_bytecode(artifact, {})

    def test_invalid_library_address_raises(self, artifacts_dir: Path):
        """Test that malformed library addresses are rejected."""
        artifact = load_artifact(artifacts_dir, "UsesMiMC")

        with pytest.raises(ArtifactError):
            link_bytecode(artifact, {"MiMC": "0x1234"})

    def test_bytecode_without_libraries_unchanged(self, artifacts_dir: Path):
        """Test that plain bytecode passes through."""
        artifact = load_artifact(artifacts_dir, "SignUpTokenGatekeeper")
        assert link_bytecode(artifact, {}) == "6080604052"


class TestEncodeConstructorArgs:
    """Test the encode_constructor_args function."""

    def _artifact(self, inputs):
        return ContractArtifact(
            name="Test", abi=[{"type": "constructor", "inputs": inputs}], bytecode="00"
        )

    def test_encodes_address(self):
        """Test that an address is left-padded to one word."""
        artifact = self._artifact([{"name": "_token", "type": "address"}])

        encoded = encode_constructor_args(artifact, [MIMC_ADDRESS])

        assert encoded == bytes(12) + bytes.fromhex("12" * 20)

    def test_encodes_tuple_from_dict(self):
        """Test that struct arguments may be given by field name."""
        artifact = self._artifact(
            [
                {
                    "name": "_batchSizes",
                    "type": "tuple",
                    "components": [
                        {"name": "tallyBatchSize", "type": "uint8"},
                        {"name": "messageBatchSize", "type": "uint8"},
                    ],
                }
            ]
        )

        from_dict = encode_constructor_args(
            artifact, [{"messageBatchSize": 5, "tallyBatchSize": 4}]
        )
        from_tuple = encode_constructor_args(artifact, [(4, 5)])

        assert from_dict == from_tuple
        assert from_dict == (4).to_bytes(32, "big") + (5).to_bytes(32, "big")

    def test_encodes_big_uint256(self):
        """Test that capacities beyond 64 bits survive encoding."""
        artifact = self._artifact([{"name": "maxUsers", "type": "uint256"}])

        encoded = encode_constructor_args(artifact, [2**200 - 1])

        assert int.from_bytes(encoded, "big") == 2**200 - 1

    def test_value_out_of_range_raises(self):
        """Test that values exceeding the ABI type are rejected."""
        artifact = self._artifact([{"name": "depth", "type": "uint8"}])

        with pytest.raises(ArtifactError):
            encode_constructor_args(artifact, [256])

    def test_missing_tuple_field_raises(self):
        """Test that dict arguments must name every component."""
        artifact = self._artifact(
            [
                {
                    "name": "_pubKey",
                    "type": "tuple",
                    "components": [
                        {"name": "x", "type": "uint256"},
                        {"name": "y", "type": "uint256"},
                    ],
                }
            ]
        )

        with pytest.raises(ArtifactError, match="y"):
            encode_constructor_args(artifact, [{"x": 1}])

    def test_wrong_argument_count_raises(self):
        """Test that the argument count must match the constructor."""
        artifact = self._artifact([{"name": "amount", "type": "uint256"}])

        with pytest.raises(ArtifactError, match="1 arguments"):
            encode_constructor_args(artifact, [])

    def test_no_constructor(self):
        """Test that contracts without a constructor encode nothing."""
        artifact = ContractArtifact(name="MiMC", abi=[], bytecode="00")
        assert encode_constructor_args(artifact, []) == b""
