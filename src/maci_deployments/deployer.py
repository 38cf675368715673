"""Contract deployment capability for maci-deployments library."""

import logging
import threading
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Protocol, Union

from eth_utils import to_checksum_address

from .artifacts import ContractArtifact, encode_constructor_args, link_bytecode, load_artifact
from .constants import DEFAULT_GAS_LIMIT, DEFAULT_POLL_INTERVAL, DEFAULT_RECEIPT_TIMEOUT
from .exceptions import TransactionError
from .rpc import get_accounts, send_transaction, wait_for_receipt

logger = logging.getLogger(__name__)


class ContractDeployer(Protocol):
    """Deploys one contract and blocks until it is confirmed."""

    def deploy(self, artifact_name: str, libraries: Mapping[str, str], *constructor_args: Any) -> str:
        """
        Deploy a contract.

        Args:
            artifact_name: Compiled artifact name, e.g. "MACI"
            libraries: Maps linked library name -> address
            *constructor_args: Constructor arguments in declaration order

        Returns:
            Address of the deployed contract

        Raises:
            Exception: Any failure to confirm the deployment
        """
        ...


class JsonRpcDeployer:
    """Deploys contracts from a node-managed account over JSON-RPC."""

    def __init__(
        self,
        rpc_url: str,
        artifacts_dir: Union[Path, str],
        sender: Optional[str] = None,
        gas_limit: int = DEFAULT_GAS_LIMIT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
    ):
        """
        Initialize the deployer.

        Args:
            rpc_url: RPC endpoint URL
            artifacts_dir: Directory holding compiled {name}.json artifacts
            sender: Account to deploy from (defaults to the node's first account)
            gas_limit: Gas limit for each deployment transaction
            poll_interval: Seconds between receipt queries
            receipt_timeout: Seconds to wait for each deployment to be mined
        """
        self.rpc_url = rpc_url
        self.artifacts_dir = Path(artifacts_dir)
        self.gas_limit = gas_limit
        self.poll_interval = poll_interval
        self.receipt_timeout = receipt_timeout
        self._sender = sender
        self._artifacts: Dict[str, ContractArtifact] = {}
        self._lock = threading.Lock()

    @property
    def sender(self) -> str:
        """
        Account deployments are sent from.

        Raises:
            TransactionError: If no sender was given and the node manages no accounts
        """
        with self._lock:
            if self._sender is None:
                accounts = get_accounts(self.rpc_url)
                if not accounts:
                    raise TransactionError(f"Node at {self.rpc_url} has no unlocked accounts")
                self._sender = accounts[0]
            return self._sender

    def artifact(self, name: str) -> ContractArtifact:
        with self._lock:
            if name not in self._artifacts:
                self._artifacts[name] = load_artifact(self.artifacts_dir, name)
            return self._artifacts[name]

    def deploy(self, artifact_name: str, libraries: Mapping[str, str], *constructor_args: Any) -> str:
        artifact = self.artifact(artifact_name)
        data = link_bytecode(artifact, libraries) + encode_constructor_args(
            artifact, constructor_args
        ).hex()

        tx_hash = send_transaction(
            self.rpc_url,
            {
                "from": self.sender,
                "data": "0x" + data,
                "gas": hex(self.gas_limit),
            },
        )
        logger.debug("Sent %s deployment in %s", artifact_name, tx_hash)

        receipt = wait_for_receipt(
            self.rpc_url, tx_hash, self.poll_interval, self.receipt_timeout
        )

        # Pre-Byzantium receipts have no status field
        if receipt.get("status") not in (None, "0x1"):
            raise TransactionError(f"{artifact_name} deployment {tx_hash} reverted")

        address = receipt.get("contractAddress")
        if not address:
            raise TransactionError(f"Receipt for {tx_hash} has no contract address")

        return to_checksum_address(address)
