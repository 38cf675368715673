"""Dependency-ordered deployment of the MACI contract suite."""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional

from eth_utils import is_address

from .constants import (
    BATCH_UPDATE_STATE_TREE_VERIFIER,
    CONTRACT_ARTIFACTS,
    CONTRACT_DEPENDENCIES,
    GATEKEEPER_CONTRACTS,
    GATEKEEPER_TOKEN,
    INITIAL_VOICE_CREDIT_PROXY,
    MACI,
    MIMC,
    QUAD_VOTE_TALLY_VERIFIER,
    SHARED_LIBRARIES,
    SIGN_UP_TOKEN,
)
from .deployer import ContractDeployer
from .exceptions import DeploymentError, DeploymentFailedError, InvalidParameterError
from .parameters import derive_capacity, resolve_coordinator_key
from .storage import AddressStore
from .types import (
    AddressManifest,
    CoordinatorKey,
    DeployedContract,
    DeployFresh,
    DeploymentConfig,
    DeploymentOverrides,
    DerivedCapacity,
    Reuse,
    SlotChoice,
)

logger = logging.getLogger(__name__)


def gatekeeper_name(config: DeploymentConfig) -> str:
    """Logical name of the gatekeeper contract selected by the config."""
    return GATEKEEPER_CONTRACTS[config.sign_up_gatekeeper]


def plan_contracts(config: DeploymentConfig) -> List[str]:
    """
    Get the logical contracts of a run in deployment order.

    Every contract appears after all of its dependencies.

    Args:
        config: Deployment configuration

    Returns:
        Ordered list of logical contract names
    """
    plan = []
    if config.sign_up_gatekeeper == GATEKEEPER_TOKEN:
        plan.append(SIGN_UP_TOKEN)
    plan.append(INITIAL_VOICE_CREDIT_PROXY)
    plan.append(gatekeeper_name(config))
    plan.extend(SHARED_LIBRARIES)
    plan.append(MACI)
    return plan


def contract_dependencies(config: DeploymentConfig) -> Dict[str, FrozenSet[str]]:
    """
    Get the dependency edges of a run.

    Returns:
        Maps each planned logical contract to the contracts its constructor needs
    """
    dependencies = {name: CONTRACT_DEPENDENCIES[name] for name in plan_contracts(config)}
    dependencies[MACI] = dependencies[MACI] | {gatekeeper_name(config)}
    return dependencies


def _check_address(label: str, address: str) -> None:
    if not isinstance(address, str) or not is_address(address):
        raise InvalidParameterError(f"{label} is not a valid address: {address!r}")


def resolve_slots(
    config: DeploymentConfig,
    overrides: Optional[DeploymentOverrides] = None,
    recorded: Optional[Mapping[str, str]] = None,
) -> Dict[str, SlotChoice]:
    """
    Decide, once per logical contract, whether to reuse or deploy it.

    Explicit overrides are always reused. A recorded address from a resumed
    run is reused only while every dependency is reused at its recorded
    address, so a contract is never wired to a dependency that is being
    replaced, whether by a fresh deployment or by an override.

    Args:
        config: Deployment configuration
        overrides: Caller-supplied addresses
        recorded: Addresses persisted by an earlier, possibly partial, run

    Returns:
        Maps each planned logical contract to Reuse or DeployFresh

    Raises:
        InvalidParameterError: If an override or recorded address is malformed,
            or a token override is given without the token gatekeeper
    """
    overrides = overrides or DeploymentOverrides()
    recorded = recorded or {}

    explicit: Dict[str, str] = {}
    if overrides.sign_up_token is not None:
        if config.sign_up_gatekeeper != GATEKEEPER_TOKEN:
            raise InvalidParameterError(
                f"A sign-up token override requires the '{GATEKEEPER_TOKEN}' gatekeeper"
            )
        _check_address("Sign-up token override", overrides.sign_up_token)
        explicit[SIGN_UP_TOKEN] = overrides.sign_up_token
    if overrides.initial_voice_credit_proxy is not None:
        _check_address(
            "Initial voice credit proxy override", overrides.initial_voice_credit_proxy
        )
        explicit[INITIAL_VOICE_CREDIT_PROXY] = overrides.initial_voice_credit_proxy

    dependencies = contract_dependencies(config)
    slots: Dict[str, SlotChoice] = {}
    for name in plan_contracts(config):
        if name in explicit:
            slots[name] = Reuse(explicit[name])
        elif name in recorded and all(
            dep in recorded and slots[dep] == Reuse(recorded[dep])
            for dep in dependencies[name]
        ):
            _check_address(f"Recorded address of {name}", recorded[name])
            slots[name] = Reuse(recorded[name])
        else:
            slots[name] = DeployFresh()
    return slots


class DeploymentOrchestrator:
    """Deploys the MACI contract suite in dependency order."""

    def __init__(
        self,
        deployer: ContractDeployer,
        store: Optional[AddressStore] = None,
        max_workers: int = 3,
    ):
        """
        Initialize the orchestrator.

        Args:
            deployer: Capability that deploys one contract and returns its address
            store: Address store to record each contract in as it comes online
            max_workers: Concurrent deployments for the independent libraries
        """
        if max_workers < 1:
            raise InvalidParameterError("max_workers must be at least 1")
        self.deployer = deployer
        self.store = store
        self.max_workers = max_workers

    def _persist(self, manifest: AddressManifest, contract: DeployedContract) -> None:
        if self.store is None:
            return
        try:
            self.store.store_contract_address(contract.name, contract.address)
        except Exception as e:
            # The contract is already on-chain
            raise DeploymentFailedError(
                contract.name,
                manifest.copy(),
                f"Recording {contract.name} at {contract.address} failed: {e}",
            ) from e

    def _record(self, manifest: AddressManifest, contract: DeployedContract) -> None:
        manifest.add(contract)
        self._persist(manifest, contract)

    def _dependency_addresses(
        self, manifest: AddressManifest, name: str, dependencies: Mapping[str, FrozenSet[str]]
    ) -> Dict[str, str]:
        missing = sorted(dep for dep in dependencies[name] if dep not in manifest)
        if missing:
            raise DeploymentError(f"Cannot deploy {name} before {', '.join(missing)}")
        return {dep: manifest.address(dep) for dep in dependencies[name]}

    def _step(
        self,
        manifest: AddressManifest,
        name: str,
        slot: SlotChoice,
        deploy: Callable[[], str],
        libraries: Optional[Mapping[str, str]] = None,
    ) -> str:
        if isinstance(slot, Reuse):
            logger.info("Reusing %s at %s", name, slot.address)
            self._record(manifest, DeployedContract(name=name, address=slot.address, reused=True))
            return slot.address

        logger.info("Deploying %s", name)
        try:
            address = deploy()
        except Exception as e:
            raise DeploymentFailedError(
                name, manifest.copy(), f"Deployment of {name} failed: {e}"
            ) from e

        logger.info("%s deployed at %s", name, address)
        self._record(
            manifest, DeployedContract(name=name, address=address, libraries=dict(libraries or {}))
        )
        return address

    def _deploy_libraries(self, manifest: AddressManifest, slots: Mapping[str, SlotChoice]) -> None:
        fresh = []
        for name in SHARED_LIBRARIES:
            slot = slots[name]
            if isinstance(slot, Reuse):
                self._step(manifest, name, slot, lambda: slot.address)
            else:
                fresh.append(name)
        if not fresh:
            return

        executor = ThreadPoolExecutor(max_workers=min(self.max_workers, len(fresh)))
        futures = {}
        try:
            for name in fresh:
                logger.info("Deploying %s", name)
                futures[name] = executor.submit(self.deployer.deploy, CONTRACT_ARTIFACTS[name], {})
            wait(futures.values())
        except BaseException:
            # Interrupted: stop issuing work, submitted transactions may still confirm
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown()

        # Every library that made it on-chain goes into the manifest before
        # the first store write or failure report
        confirmed = []
        failures = []
        for name in fresh:
            try:
                address = futures[name].result()
            except Exception as e:
                failures.append((name, e))
                continue
            logger.info("%s deployed at %s", name, address)
            contract = DeployedContract(name=name, address=address)
            manifest.add(contract)
            confirmed.append(contract)

        for contract in confirmed:
            self._persist(manifest, contract)

        if failures:
            name, error = failures[0]
            raise DeploymentFailedError(
                name, manifest.copy(), f"Deployment of {name} failed: {error}"
            ) from error

    def _deploy_maci(
        self,
        manifest: AddressManifest,
        config: DeploymentConfig,
        slot: SlotChoice,
        dependencies: Mapping[str, FrozenSet[str]],
        capacity: DerivedCapacity,
        coordinator_key: CoordinatorKey,
    ) -> None:
        addresses = self._dependency_addresses(manifest, MACI, dependencies)
        libraries = {MIMC: addresses[MIMC]}

        def deploy() -> str:
            return self.deployer.deploy(
                CONTRACT_ARTIFACTS[MACI],
                libraries,
                {
                    "stateTreeDepth": config.state_tree_depth,
                    "messageTreeDepth": config.message_tree_depth,
                    "voteOptionTreeDepth": config.vote_option_tree_depth,
                },
                {
                    "tallyBatchSize": config.quad_vote_tally_batch_size,
                    "messageBatchSize": config.message_batch_size,
                },
                capacity.as_dict(),
                addresses[gatekeeper_name(config)],
                addresses[BATCH_UPDATE_STATE_TREE_VERIFIER],
                addresses[QUAD_VOTE_TALLY_VERIFIER],
                config.sign_up_duration_in_seconds,
                config.voting_duration_in_seconds,
                addresses[INITIAL_VOICE_CREDIT_PROXY],
                coordinator_key.as_dict(),
            )

        self._step(manifest, MACI, slot, deploy, libraries)

    def run(
        self,
        config: DeploymentConfig,
        overrides: Optional[DeploymentOverrides] = None,
        resume: bool = False,
        force: bool = False,
    ) -> AddressManifest:
        """
        Deploy every contract of the suite that is not reused.

        Parameters are validated and the store is reset (or, when resuming,
        read) before any transaction is issued.

        Args:
            config: Deployment configuration
            overrides: Addresses of pre-existing contracts to reuse
            resume: Reuse the addresses recorded in the store instead of
                    archiving it and starting over. Requires a store
            force: Overwrite an existing store archive when resetting

        Returns:
            Sealed AddressManifest with one entry per planned contract

        Raises:
            InvalidParameterError: If the configuration or an override is invalid,
                or resume is requested without a store
            StoreConflictError: If the store cannot be archived
            DeploymentFailedError: If a deployment fails or a confirmed address cannot be
                stored; carries the partial manifest
        """
        if resume and self.store is None:
            raise InvalidParameterError("Resuming a deployment requires an address store")

        capacity = derive_capacity(config)
        coordinator_key = resolve_coordinator_key(
            config.coordinator_pub_key, config.coordinator_priv_key
        )
        # Surface override errors before the store is touched
        resolve_slots(config, overrides)

        recorded: Dict[str, str] = {}
        if self.store is not None:
            if resume:
                recorded = self.store.load_manifest().addresses()
            else:
                self.store.reset_store(force=force)

        slots = resolve_slots(config, overrides, recorded)
        dependencies = contract_dependencies(config)
        manifest = AddressManifest()

        if config.sign_up_gatekeeper == GATEKEEPER_TOKEN:
            self._step(
                manifest,
                SIGN_UP_TOKEN,
                slots[SIGN_UP_TOKEN],
                lambda: self.deployer.deploy(CONTRACT_ARTIFACTS[SIGN_UP_TOKEN], {}),
            )

        self._step(
            manifest,
            INITIAL_VOICE_CREDIT_PROXY,
            slots[INITIAL_VOICE_CREDIT_PROXY],
            lambda: self.deployer.deploy(
                CONTRACT_ARTIFACTS[INITIAL_VOICE_CREDIT_PROXY],
                {},
                config.initial_voice_credit_balance,
            ),
        )

        gatekeeper = gatekeeper_name(config)
        gatekeeper_args: List[Any] = list(
            self._dependency_addresses(manifest, gatekeeper, dependencies).values()
        )
        self._step(
            manifest,
            gatekeeper,
            slots[gatekeeper],
            lambda: self.deployer.deploy(CONTRACT_ARTIFACTS[gatekeeper], {}, *gatekeeper_args),
        )

        self._deploy_libraries(manifest, slots)

        self._deploy_maci(manifest, config, slots[MACI], dependencies, capacity, coordinator_key)

        logger.info("Deployment complete: %d contracts", len(manifest))
        return manifest.seal()


def run_deployment(
    config: DeploymentConfig,
    overrides: Optional[DeploymentOverrides],
    deployer: ContractDeployer,
    store: Optional[AddressStore] = None,
    resume: bool = False,
    force: bool = False,
    max_workers: int = 3,
) -> AddressManifest:
    """
    Deploy the MACI contract suite.

    See DeploymentOrchestrator.run for arguments, return value and errors.
    """
    orchestrator = DeploymentOrchestrator(deployer, store=store, max_workers=max_workers)
    return orchestrator.run(config, overrides, resume=resume, force=force)
