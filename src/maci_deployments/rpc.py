"""Ethereum JSON-RPC helpers for maci-deployments library."""

import itertools
import time
from typing import Any, Dict, List, Optional

import requests

from .exceptions import TransactionError

_request_ids = itertools.count(1)


def rpc_request(rpc_url: str, method: str, params: List[Any], timeout: float = 30) -> Any:
    """
    Make a JSON-RPC call.

    Args:
        rpc_url: RPC endpoint URL
        method: JSON-RPC method, e.g. "eth_sendTransaction"
        params: Method parameters
        timeout: HTTP timeout in seconds

    Returns:
        The "result" member of the response

    Raises:
        TransactionError: If the HTTP request fails, the node returns an
            error, or the response has no result member
    """
    try:
        response = requests.post(
            rpc_url,
            json={
                "jsonrpc": "2.0",
                "method": method,
                "params": params,
                "id": next(_request_ids),
            },
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise TransactionError(f"Network error during {method}: {e}") from e

    # Check for HTTP errors
    if response.status_code != 200:
        raise TransactionError(f"{method} failed with HTTP status {response.status_code}")

    try:
        result = response.json()
    except ValueError as e:
        raise TransactionError(f"{method} returned a non-JSON response") from e

    # Check for RPC errors
    if "error" in result:
        raise TransactionError(f"RPC error during {method}: {result['error']}")
    if "result" not in result:
        raise TransactionError(f"{method} response has no result")

    return result["result"]


def get_accounts(rpc_url: str) -> List[str]:
    """Return the accounts managed by the node."""
    return rpc_request(rpc_url, "eth_accounts", [])


def send_transaction(rpc_url: str, transaction: Dict[str, str]) -> str:
    """
    Submit a transaction signed by a node-managed account.

    Returns:
        Transaction hash
    """
    return rpc_request(rpc_url, "eth_sendTransaction", [transaction])


def get_transaction_receipt(rpc_url: str, tx_hash: str) -> Optional[Dict[str, Any]]:
    """Return the receipt for a transaction, or None while it is pending."""
    return rpc_request(rpc_url, "eth_getTransactionReceipt", [tx_hash])


def wait_for_receipt(
    rpc_url: str,
    tx_hash: str,
    poll_interval: float = 1.0,
    timeout: float = 300.0,
) -> Dict[str, Any]:
    """
    Block until a transaction is mined.

    Args:
        rpc_url: RPC endpoint URL
        tx_hash: Transaction hash
        poll_interval: Seconds between receipt queries
        timeout: Seconds to wait before giving up

    Returns:
        Transaction receipt

    Raises:
        TransactionError: If no receipt appears within the timeout
    """
    deadline = time.monotonic() + timeout
    while True:
        receipt = get_transaction_receipt(rpc_url, tx_hash)
        if receipt is not None:
            return receipt
        if time.monotonic() >= deadline:
            raise TransactionError(
                f"Transaction {tx_hash} not mined within {timeout} seconds"
            )
        time.sleep(poll_interval)
