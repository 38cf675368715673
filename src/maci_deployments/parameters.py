"""Constructor parameter derivation for maci-deployments library."""

from typing import Optional, Tuple

from .blake512 import blake512
from .constants import BABYJUB_A, BABYJUB_BASE8, BABYJUB_D, SNARK_FIELD_SIZE
from .exceptions import InvalidParameterError
from .types import CoordinatorKey, DeploymentConfig, DerivedCapacity

Point = Tuple[int, int]


def _capacity(depth: int, name: str) -> int:
    if isinstance(depth, bool) or not isinstance(depth, int):
        raise InvalidParameterError(f"{name} must be an integer, got {depth!r}")
    if depth <= 0:
        raise InvalidParameterError(f"{name} must be positive, got {depth}")
    return 2**depth - 1


def derive_capacities(state_tree_depth: int, message_tree_depth: int) -> Tuple[int, int]:
    """
    Derive the maximum number of users and messages from tree depths.

    A tree of depth d holds 2**d leaves; leaf zero is reserved, so the
    capacity is 2**d - 1. Python integers are unbounded, so the result is
    exact for any depth.

    Args:
        state_tree_depth: Depth of the state tree
        message_tree_depth: Depth of the message tree

    Returns:
        Tuple of (max_users, max_messages)

    Raises:
        InvalidParameterError: If either depth is not a positive integer
    """
    max_users = _capacity(state_tree_depth, "state_tree_depth")
    max_messages = _capacity(message_tree_depth, "message_tree_depth")
    return max_users, max_messages


def derive_capacity(config: DeploymentConfig) -> DerivedCapacity:
    """Derive all MACI capacity limits from a deployment config."""
    max_users, max_messages = derive_capacities(
        config.state_tree_depth, config.message_tree_depth
    )
    return DerivedCapacity(
        max_users=max_users,
        max_messages=max_messages,
        max_vote_options=config.vote_options_max_leaf_index,
    )


def _add_points(p1: Point, p2: Point) -> Point:
    x1, y1 = p1
    x2, y2 = p2
    q = SNARK_FIELD_SIZE
    t = BABYJUB_D * x1 * x2 * y1 * y2 % q
    x3 = (x1 * y2 + y1 * x2) * pow(1 + t, q - 2, q) % q
    y3 = (y1 * y2 - BABYJUB_A * x1 * x2) * pow(1 - t, q - 2, q) % q
    return x3, y3


def _mul_point_scalar(base: Point, scalar: int) -> Point:
    result: Point = (0, 1)
    addend = base
    while scalar:
        if scalar & 1:
            result = _add_points(result, addend)
        addend = _add_points(addend, addend)
        scalar >>= 1
    return result


def prv2pub(priv_key: bytes) -> CoordinatorKey:
    """
    Derive a Baby Jubjub EdDSA public key from private key bytes.

    The bytes are hashed with BLAKE-512, the low half of the digest is
    pruned into a scalar, and Base8 is multiplied by the scalar >> 3.

    Args:
        priv_key: Private key bytes

    Returns:
        CoordinatorKey for the private key
    """
    digest = bytearray(blake512(priv_key)[:32])
    digest[0] &= 0xF8
    digest[31] &= 0x7F
    digest[31] |= 0x40
    scalar = int.from_bytes(digest, "little")

    x, y = _mul_point_scalar(BABYJUB_BASE8, scalar >> 3)
    return CoordinatorKey(x=x, y=y)


def priv_key_to_bytes(priv_key: int) -> bytes:
    """
    Encode an integer private key the way the MACI key tools do.

    The key is written as hex without leading zeros and decoded pairwise;
    a trailing unpaired digit is dropped.
    """
    hex_str = format(priv_key, "x")
    return bytes.fromhex(hex_str[: len(hex_str) - len(hex_str) % 2])


def derive_pub_key(priv_key: int) -> CoordinatorKey:
    """
    Derive the coordinator public key from an integer private key.

    Args:
        priv_key: Private key, below the SNARK field size

    Returns:
        CoordinatorKey for the private key

    Raises:
        InvalidParameterError: If the private key is out of range
    """
    if isinstance(priv_key, bool) or not isinstance(priv_key, int):
        raise InvalidParameterError(f"Private key must be an integer, got {priv_key!r}")
    if not 0 <= priv_key < SNARK_FIELD_SIZE:
        raise InvalidParameterError("Private key must be below the SNARK field size")

    return prv2pub(priv_key_to_bytes(priv_key))


def resolve_coordinator_key(
    pub_key: Optional[CoordinatorKey], priv_key: Optional[int]
) -> CoordinatorKey:
    """
    Resolve the coordinator public key for the MACI constructor.

    Args:
        pub_key: Explicit public key; returned unchanged when given
        priv_key: Private key to derive the public key from otherwise

    Returns:
        CoordinatorKey

    Raises:
        InvalidParameterError: If neither key is available or the private
            key is out of range
    """
    if pub_key is not None:
        return pub_key
    if priv_key is None:
        raise InvalidParameterError(
            "Coordinator key required: set coordinator_pub_key or coordinator_priv_key"
        )
    return derive_pub_key(priv_key)
