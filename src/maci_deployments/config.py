"""Deployment configuration loading for maci-deployments library."""

import json
import os
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .constants import DEFAULT_CONFIG, DEFAULT_RPC_URL, RPC_URL_ENV
from .exceptions import InvalidParameterError
from .types import CoordinatorKey, DeploymentConfig


def _parse_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise InvalidParameterError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 0)
        except ValueError as e:
            raise InvalidParameterError(f"{name} must be an integer, got {value!r}") from e
    raise InvalidParameterError(f"{name} must be an integer, got {value!r}")


def _parse_pub_key(value: Any) -> Optional[CoordinatorKey]:
    if value is None:
        return None
    if not isinstance(value, dict) or set(value) != {"x", "y"}:
        raise InvalidParameterError('coordinator_pub_key must be an object with "x" and "y"')
    return CoordinatorKey(
        x=_parse_int(value["x"], "coordinator_pub_key.x"),
        y=_parse_int(value["y"], "coordinator_pub_key.y"),
    )


def config_from_dict(data: Dict[str, Any]) -> DeploymentConfig:
    """
    Build a DeploymentConfig from a dictionary of field values.

    Missing fields take their defaults from DEFAULT_CONFIG.

    Args:
        data: Maps DeploymentConfig field names to values

    Returns:
        DeploymentConfig

    Raises:
        InvalidParameterError: If a key is unknown or a value is malformed
    """
    known = {f.name for f in fields(DeploymentConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise InvalidParameterError(f"Unknown configuration keys: {', '.join(unknown)}")

    values = {**DEFAULT_CONFIG, **data}
    for name, value in values.items():
        if name == "coordinator_pub_key":
            values[name] = _parse_pub_key(value)
        elif name == "sign_up_gatekeeper":
            continue
        elif value is not None:
            values[name] = _parse_int(value, name)

    return DeploymentConfig(**values)


def load_deployment_config(config_path: Optional[Union[Path, str]] = None) -> DeploymentConfig:
    """
    Load deployment configuration from a JSON file.

    Args:
        config_path: Path to a JSON object of DeploymentConfig fields
                     If None, returns the defaults

    Returns:
        DeploymentConfig

    Raises:
        InvalidParameterError: If the file is missing, not a JSON object, or
            holds invalid values
    """
    if config_path is None:
        return config_from_dict({})

    try:
        with open(config_path) as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise InvalidParameterError(f"Configuration file not found: {config_path}") from e
    except json.JSONDecodeError as e:
        raise InvalidParameterError(f"Configuration file {config_path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise InvalidParameterError(f"Configuration file {config_path} must hold a JSON object")

    return config_from_dict(data)


def get_rpc_url(rpc_url: Optional[str] = None) -> str:
    """
    Resolve the JSON-RPC endpoint.

    Args:
        rpc_url: Explicit URL; takes precedence

    Returns:
        rpc_url, else $MACI_RPC_URL, else http://localhost:8545
    """
    if rpc_url is not None:
        return rpc_url
    return os.environ.get(RPC_URL_ENV, DEFAULT_RPC_URL)
