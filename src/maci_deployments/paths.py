"""Path management utilities for maci-deployments library."""

from pathlib import Path
from typing import Optional, Union

from .constants import BACKUP_FILE_NAME, STORE_FILE_NAME


def get_default_store_dir() -> Path:
    """
    Get default address store directory (current working directory).

    Returns:
        Path to ./
    """
    return Path.cwd()


def get_backup_path(store_path: Union[Path, str]) -> Path:
    """
    Get the archive path for an address store file.

    Args:
        store_path: Path to the manifest file

    Returns:
        Sibling path with ".old" inserted before the suffix,
        e.g. contractAddresses.json -> contractAddresses.old.json
    """
    store_path = Path(store_path)
    return store_path.with_name(f"{store_path.stem}.old{store_path.suffix}")


def get_store_paths(store_path: Optional[Union[Path, str]] = None) -> tuple[Path, Path]:
    """
    Get address store file paths.

    Args:
        store_path: Custom manifest file (defaults to ./contractAddresses.json)

    Returns:
        Tuple of (store_path, backup_path)
    """
    if store_path is None:
        store_dir = get_default_store_dir()
        return (store_dir / STORE_FILE_NAME, store_dir / BACKUP_FILE_NAME)

    store_path = Path(store_path).absolute()
    return (store_path, get_backup_path(store_path))
