"""
File path helpers for server-side image storage.
"""

import logging
from pathlib import Path
from typing import Union

from rasterflow.core.exceptions import ConfigError

logger = logging.getLogger(__name__)


def resolve_storage_path(storage_root: Union[str, Path], path: Union[str, Path]) -> Path:
    """
    Resolve a client supplied path inside the storage directory.

    Relative paths are taken relative to storage_root. Absolute paths are
    accepted only when they point inside it. Symlinks and ``..`` parts are
    resolved before the check.

    Args:
        storage_root: Directory the server may read from and write to
        path: Requested file path

    Returns:
        Absolute resolved path

    Raises:
        ConfigError: If the path resolves outside storage_root
    """
    root = Path(storage_root).resolve()
    candidate = Path(path)
    if not candidate.is_absolute():
        candidate = root / candidate
    resolved = candidate.resolve()

    try:
        resolved.relative_to(root)
    except ValueError as e:
        logger.warning(f"Rejected path outside storage directory: {path}")
        raise ConfigError(
            f"Path {path} is outside the storage directory", parameter="path"
        ) from e

    if resolved == root:
        raise ConfigError(f"Path {path} names the storage directory itself", parameter="path")
    return resolved
