"""Data types and dataclasses for maci-deployments library."""

from dataclasses import dataclass, field
from typing import Dict, Iterator, Mapping, Optional, Union

from .constants import GATEKEEPER_CONTRACTS, GATEKEEPER_TOKEN
from .exceptions import InvalidParameterError


@dataclass(frozen=True)
class CoordinatorKey:
    """Coordinator public key as a Baby Jubjub point."""

    x: int
    y: int

    def as_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y}


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class DeploymentConfig:
    """
    Immutable input for one deployment run.

    Raises:
        InvalidParameterError: If a depth or batch size is not a positive
            integer, or a duration, balance or leaf index is negative
    """

    # Merkle tree depths
    state_tree_depth: int = 4
    message_tree_depth: int = 4
    vote_option_tree_depth: int = 2

    # Batch sizes
    quad_vote_tally_batch_size: int = 4
    message_batch_size: int = 4

    vote_options_max_leaf_index: int = 3
    sign_up_duration_in_seconds: int = 3600
    voting_duration_in_seconds: int = 3600
    initial_voice_credit_balance: int = 100

    # Coordinator key material; the public key wins when both are set
    coordinator_priv_key: Optional[int] = None
    coordinator_pub_key: Optional[CoordinatorKey] = None

    sign_up_gatekeeper: str = GATEKEEPER_TOKEN

    def __post_init__(self) -> None:
        for name in (
            "state_tree_depth",
            "message_tree_depth",
            "vote_option_tree_depth",
            "quad_vote_tally_batch_size",
            "message_batch_size",
        ):
            value = getattr(self, name)
            if not _is_int(value) or value <= 0:
                raise InvalidParameterError(
                    f"{name} must be a positive integer, got {value!r}"
                )

        for name in (
            "vote_options_max_leaf_index",
            "sign_up_duration_in_seconds",
            "voting_duration_in_seconds",
            "initial_voice_credit_balance",
        ):
            value = getattr(self, name)
            if not _is_int(value) or value < 0:
                raise InvalidParameterError(
                    f"{name} must be a non-negative integer, got {value!r}"
                )

        if self.coordinator_priv_key is not None and not _is_int(self.coordinator_priv_key):
            raise InvalidParameterError("coordinator_priv_key must be an integer")

        if self.sign_up_gatekeeper not in GATEKEEPER_CONTRACTS:
            raise InvalidParameterError(
                f"Unknown sign-up gatekeeper '{self.sign_up_gatekeeper}', expected one of "
                f"{sorted(GATEKEEPER_CONTRACTS)}"
            )


@dataclass(frozen=True)
class DerivedCapacity:
    """Capacity limits passed to the MACI constructor."""

    max_users: int
    max_messages: int
    max_vote_options: int

    def as_dict(self) -> Dict[str, int]:
        return {
            "maxUsers": self.max_users,
            "maxMessages": self.max_messages,
            "maxVoteOptions": self.max_vote_options,
        }


@dataclass(frozen=True)
class DeploymentOverrides:
    """Addresses of pre-existing contracts to reuse instead of deploying."""

    sign_up_token: Optional[str] = None
    initial_voice_credit_proxy: Optional[str] = None


@dataclass(frozen=True)
class Reuse:
    """Slot choice: use an already deployed contract."""

    address: str


@dataclass(frozen=True)
class DeployFresh:
    """Slot choice: deploy a new contract."""


SlotChoice = Union[Reuse, DeployFresh]


@dataclass(frozen=True)
class DeployedContract:
    """A contract that is available on-chain for this run."""

    name: str  # Logical name, e.g., "MACI"
    address: str
    libraries: Mapping[str, str] = field(default_factory=dict)  # Linked library name -> address
    reused: bool = False


class AddressManifest:
    """
    Ordered set of deployed contracts for one deployment run, keyed by name.

    Adding a contract whose name is already present replaces it. Once sealed,
    the manifest rejects further changes.
    """

    def __init__(self, contracts: Optional[Dict[str, DeployedContract]] = None):
        self._contracts: Dict[str, DeployedContract] = dict(contracts or {})
        self._sealed = False

    @classmethod
    def from_addresses(cls, addresses: Mapping[str, str]) -> "AddressManifest":
        return cls(
            {name: DeployedContract(name=name, address=address) for name, address in addresses.items()}
        )

    def add(self, contract: DeployedContract) -> None:
        if self._sealed:
            raise ValueError("Manifest of a completed run cannot be modified")
        self._contracts[contract.name] = contract

    def seal(self) -> "AddressManifest":
        self._sealed = True
        return self

    @property
    def sealed(self) -> bool:
        return self._sealed

    def copy(self) -> "AddressManifest":
        """Return an unsealed copy."""
        return AddressManifest(self._contracts)

    def get(self, name: str) -> Optional[DeployedContract]:
        return self._contracts.get(name)

    def address(self, name: str) -> str:
        return self._contracts[name].address

    def names(self) -> list[str]:
        return list(self._contracts)

    def addresses(self) -> Dict[str, str]:
        """Return the name -> address mapping in insertion order."""
        return {name: contract.address for name, contract in self._contracts.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._contracts

    def __getitem__(self, name: str) -> DeployedContract:
        return self._contracts[name]

    def __iter__(self) -> Iterator[DeployedContract]:
        return iter(self._contracts.values())

    def __len__(self) -> int:
        return len(self._contracts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AddressManifest):
            return NotImplemented
        return self._contracts == other._contracts

    def __repr__(self) -> str:
        return f"AddressManifest({self.addresses()!r})"
