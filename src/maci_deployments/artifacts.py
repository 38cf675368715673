"""Compiled contract artifact handling for maci-deployments library."""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Union

from eth_abi import encode
from eth_abi.exceptions import EncodingError
from eth_utils import is_address

from .exceptions import ArtifactError, ArtifactNotFoundError

# Legacy solc placeholder: "__" + library name (optionally "path:Name") padded with "_" to 40 chars
_LEGACY_PLACEHOLDER = re.compile(r"__([A-Za-z0-9_./:$-]{1,36}?)_*__")


@dataclass
class ContractArtifact:
    """Compiled contract: ABI, creation bytecode and library link references."""

    name: str
    abi: List[Dict[str, Any]]
    bytecode: str  # Hex, without 0x prefix
    link_references: Dict[str, Dict[str, List[Dict[str, int]]]] = field(default_factory=dict)

    def constructor_inputs(self) -> List[Dict[str, Any]]:
        for item in self.abi:
            if item.get("type") == "constructor":
                return item.get("inputs", [])
        return []


def load_artifact(artifacts_dir: Union[Path, str], name: str) -> ContractArtifact:
    """
    Load a compiled contract artifact.

    Args:
        artifacts_dir: Directory holding {name}.json artifact files
        name: Artifact name, e.g. "MACI"

    Returns:
        ContractArtifact

    Raises:
        ArtifactNotFoundError: If the artifact file does not exist
        ArtifactError: If the artifact is missing its ABI or bytecode
    """
    file_path = Path(artifacts_dir) / f"{name}.json"
    try:
        with open(file_path) as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ArtifactNotFoundError(f"Artifact '{name}' not found at {file_path}") from e
    except json.JSONDecodeError as e:
        raise ArtifactError(f"Artifact {file_path} is not valid JSON: {e}") from e

    if "abi" not in data or "bytecode" not in data:
        raise ArtifactError(f"Artifact {file_path} must contain 'abi' and 'bytecode'")

    # solc standard JSON nests the bytecode as {"object": ..., "linkReferences": ...}
    bytecode = data["bytecode"]
    link_references = data.get("linkReferences", {})
    if isinstance(bytecode, dict):
        link_references = bytecode.get("linkReferences", link_references)
        bytecode = bytecode.get("object", "")

    if not isinstance(bytecode, str) or not bytecode:
        raise ArtifactError(f"Artifact {file_path} has empty bytecode")
    if bytecode.startswith("0x"):
        bytecode = bytecode[2:]

    return ContractArtifact(
        name=name,
        abi=data["abi"],
        bytecode=bytecode,
        link_references=link_references,
    )


def _library_name(placeholder_name: str) -> str:
    # "contracts/MiMC.sol:MiMC" -> "MiMC"
    return placeholder_name.rsplit(":", 1)[-1]


def link_bytecode(artifact: ContractArtifact, libraries: Mapping[str, str]) -> str:
    """
    Substitute library addresses into an artifact's bytecode.

    Uses the artifact's linkReferences offsets where present, then replaces
    any legacy "__Name____" placeholders.

    Args:
        artifact: Contract artifact
        libraries: Maps library name -> address

    Returns:
        Linked bytecode as hex, without 0x prefix

    Raises:
        ArtifactError: If an address is malformed or a placeholder is left unlinked
    """
    linked: Dict[str, str] = {}
    for name, address in libraries.items():
        if not is_address(address):
            raise ArtifactError(f"Invalid address for library {name}: {address!r}")
        linked[name] = address[2:].lower() if address.startswith("0x") else address.lower()

    bytecode = artifact.bytecode

    for source, refs in artifact.link_references.items():
        for lib_name, offsets in refs.items():
            if lib_name not in linked:
                raise ArtifactError(
                    f"Artifact {artifact.name} requires library {source}:{lib_name}"
                )
            for offset in offsets:
                start = offset["start"] * 2
                end = start + offset["length"] * 2
                bytecode = bytecode[:start] + linked[lib_name] + bytecode[end:]

    def _replace(match: "re.Match[str]") -> str:
        lib_name = _library_name(match.group(1))
        if lib_name not in linked:
            raise ArtifactError(f"Artifact {artifact.name} requires library {lib_name}")
        return linked[lib_name]

    bytecode = _LEGACY_PLACEHOLDER.sub(
        lambda m: _replace(m) if len(m.group(0)) == 40 else m.group(0), bytecode
    )

    if "__" in bytecode:
        raise ArtifactError(f"Artifact {artifact.name} has unlinked library placeholders")

    return bytecode


def _abi_type(abi_input: Dict[str, Any]) -> str:
    type_str = abi_input["type"]
    if type_str.startswith("tuple"):
        components = ",".join(_abi_type(c) for c in abi_input.get("components", []))
        return f"({components}){type_str[len('tuple'):]}"
    return type_str


def _abi_value(abi_input: Dict[str, Any], value: Any) -> Any:
    type_str = abi_input["type"]
    if type_str == "tuple":
        components = abi_input.get("components", [])
        if isinstance(value, Mapping):
            try:
                value = [value[c["name"]] for c in components]
            except KeyError as e:
                raise ArtifactError(f"Missing field {e} for tuple argument") from e
        return tuple(_abi_value(c, v) for c, v in zip(components, value))
    if type_str.startswith("tuple"):
        element = dict(abi_input, type=type_str[: type_str.rindex("[")])
        return [_abi_value(element, v) for v in value]
    return value


def encode_constructor_args(artifact: ContractArtifact, args: Sequence[Any]) -> bytes:
    """
    ABI-encode constructor arguments.

    Tuple arguments may be sequences or dicts keyed by component name.

    Args:
        artifact: Contract artifact
        args: Constructor arguments in declaration order

    Returns:
        Encoded arguments to append to the creation bytecode

    Raises:
        ArtifactError: If the argument count is wrong or a value cannot be encoded
    """
    inputs = artifact.constructor_inputs()
    if len(inputs) != len(args):
        raise ArtifactError(
            f"{artifact.name} constructor takes {len(inputs)} arguments, got {len(args)}"
        )
    if not inputs:
        return b""

    types = [_abi_type(i) for i in inputs]
    values = [_abi_value(i, a) for i, a in zip(inputs, args)]
    try:
        return encode(types, values)
    except (EncodingError, TypeError, ValueError) as e:
        raise ArtifactError(f"Cannot encode {artifact.name} constructor arguments: {e}") from e
