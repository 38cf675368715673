"""Persistent address store for maci-deployments library."""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional, Union

from .exceptions import StoreConflictError, StoreCorruptedError
from .paths import get_store_paths
from .types import AddressManifest

logger = logging.getLogger(__name__)


class AddressStore:
    """
    Durable name -> address record of a deployment run.

    Every write is flushed to disk before returning, so the progress of an
    interrupted run can be read back and resumed.
    """

    def __init__(
        self,
        store_path: Optional[Union[Path, str]] = None,
        backup_path: Optional[Union[Path, str]] = None,
    ):
        """
        Initialize the address store.

        Args:
            store_path: Path to the manifest file
                        If None, uses ./contractAddresses.json
            backup_path: Archive path for the previous manifest
                         If None, inserts ".old" before the manifest suffix
        """
        default_store, default_backup = get_store_paths(store_path)
        self.store_path = default_store
        self.backup_path = Path(backup_path) if backup_path is not None else default_backup
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, str]:
        try:
            with open(self.store_path) as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as e:
            raise StoreCorruptedError(
                f"Address store at {self.store_path} is not valid JSON: {e}"
            ) from e

        if not isinstance(data, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in data.items()
        ):
            raise StoreCorruptedError(
                f"Address store at {self.store_path} must map contract names to addresses"
            )
        return data

    def _write(self, addresses: Dict[str, str]) -> None:
        # Write to a sibling temp file and swap it in so readers never see a partial file
        self.store_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.store_path.parent, prefix=f".{self.store_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(addresses, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.store_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def reset_store(self, force: bool = False) -> None:
        """
        Archive the current manifest and start a new empty one.

        Args:
            force: Overwrite an existing archive at the backup path

        Raises:
            StoreConflictError: If an archive already exists and force is False,
                or the manifest cannot be renamed
        """
        with self._lock:
            if self.store_path.exists():
                if self.backup_path.exists() and not force:
                    raise StoreConflictError(
                        f"Backup {self.backup_path} already exists; "
                        "remove it or reset with force=True"
                    )
                if self.backup_path.is_dir():
                    raise StoreConflictError(
                        f"Backup path {self.backup_path} is a directory"
                    )
                try:
                    os.replace(self.store_path, self.backup_path)
                except OSError as e:
                    raise StoreConflictError(
                        f"Failed to archive {self.store_path} to {self.backup_path}: {e}"
                    ) from e
                logger.info("Archived %s to %s", self.store_path, self.backup_path)

            self._write({})

    def store_contract_address(self, name: str, address: str) -> None:
        """
        Record one contract address and flush it to disk.

        An existing entry with the same name is overwritten.

        Args:
            name: Logical contract name
            address: Contract address
        """
        with self._lock:
            addresses = self._read()
            addresses[name] = address
            self._write(addresses)
        logger.debug("Stored %s at %s", name, address)

    def load_manifest(self) -> AddressManifest:
        """
        Read the persisted manifest.

        Returns:
            AddressManifest (empty if no manifest has been written)

        Raises:
            StoreCorruptedError: If the manifest file cannot be parsed
        """
        with self._lock:
            return AddressManifest.from_addresses(self._read())
