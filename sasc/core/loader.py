"""File discovery for a run."""

import os
from pathlib import Path
from typing import List, Optional, Union

from .ignore import IgnoreManager
from ..errors import DiscoveryError, InvalidArgumentError
from ..utils.logging_setup import get_logger

logger = get_logger(__name__)


def normalize_extension(extension: str) -> str:
    """Return the extension without its leading dot ("go", ".go" -> "go")."""
    ext = (extension or "").strip().lstrip(".")
    if not ext:
        raise InvalidArgumentError(
            "Extension must not be empty",
            argument='extension',
            value=extension,
            hint="Pass the extension of the files to compare, e.g. go or py"
        )
    return ext


def collect_files(
    root: Union[str, Path],
    extension: str,
    exclude: Optional[List[str]] = None,
    ignore_manager: Optional[IgnoreManager] = None
) -> List[Path]:
    """Collect the files ending in ``.<extension>`` below ``root``.

    Directories are walked depth-first with their entries sorted by
    name, so the result is the same on every run. That order is the
    discovery order used by grouping.

    Args:
        root: Base directory to search
        extension: File extension, with or without the leading dot
        exclude: Extra gitignore-style patterns to leave out
        ignore_manager: Optional IgnoreManager replacing the default one

    Returns:
        List of file paths in discovery order

    Raises:
        DiscoveryError: If the base directory or one of its
            subdirectories cannot be read
    """
    root = Path(root).absolute()
    suffix = "." + normalize_extension(extension)

    if not root.is_dir():
        raise DiscoveryError(f"Base directory does not exist or is not a directory: {root}", root=str(root))

    if ignore_manager is None:
        ignore_manager = IgnoreManager(root_path=root, additional_patterns=exclude)

    files: List[Path] = []
    _walk(root, root, suffix, ignore_manager, files)

    logger.info(f"Found {len(files)} *{suffix} files under {root}")
    return files


def _walk(root: Path, directory: Path, suffix: str,
          ignore_manager: IgnoreManager, files: List[Path]) -> None:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise DiscoveryError(
            f"Cannot list directory {directory}: {e.strerror or e}",
            root=str(root),
            details={'directory': str(directory)}
        ) from e

    for entry in entries:
        path = Path(entry.path)
        # Symlinked directories are not followed
        if entry.is_dir(follow_symlinks=False):
            if ignore_manager.should_ignore(path, is_dir=True):
                logger.debug(f"Ignoring directory: {path}")
                continue
            _walk(root, path, suffix, ignore_manager, files)
        elif entry.name.endswith(suffix) and entry.is_file():
            if ignore_manager.should_ignore(path):
                logger.debug(f"Ignoring: {path}")
                continue
            files.append(path)
