"""
Ignore Manager - Handles .sascignore files and exclusion patterns.

Patterns use gitignore syntax and are matched against paths relative
to the base directory of a run.
"""

from pathlib import Path
from typing import List, Optional, Union

import pathspec

from ..utils.logging_setup import get_logger

logger = get_logger(__name__)


class IgnoreManager:
    """
    Decides which discovered paths are left out of a run.

    Patterns come from three sources, in this order: the built-in
    defaults, the .sascignore file in the base directory and any extra
    patterns from the configuration or the command line.
    """

    # Default patterns to always ignore
    DEFAULT_PATTERNS = [
        # Version control
        ".git/",
        ".svn/",
        ".hg/",

        # IDE and editor files
        ".idea/",
        ".vscode/",
        "*.swp",
        "*~",
        ".DS_Store",
        "Thumbs.db",
    ]

    # File to look for in the base directory
    IGNORE_FILENAME = ".sascignore"

    def __init__(
        self,
        root_path: Union[str, Path],
        additional_patterns: Optional[List[str]] = None,
        use_defaults: bool = True,
        use_ignore_file: bool = True
    ):
        """
        Initialize the IgnoreManager.

        Args:
            root_path: Base directory of the run
            additional_patterns: Extra patterns (e.g., from CLI)
            use_defaults: Whether to include default patterns
            use_ignore_file: Whether to read .sascignore from the base directory
        """
        self.root_path = Path(root_path).absolute()

        all_patterns: List[str] = []
        if use_defaults:
            all_patterns.extend(self.DEFAULT_PATTERNS)

        if use_ignore_file:
            ignore_file = self.root_path / self.IGNORE_FILENAME
            if ignore_file.is_file():
                file_patterns = self._read_ignore_file(ignore_file)
                all_patterns.extend(file_patterns)
                logger.debug(f"Loaded {len(file_patterns)} patterns from {ignore_file}")

        if additional_patterns:
            all_patterns.extend(additional_patterns)

        # Remove duplicates while preserving order
        seen = set()
        self.patterns: List[str] = []
        for pattern in all_patterns:
            pattern = pattern.strip()
            if pattern and pattern not in seen and not pattern.startswith('#'):
                seen.add(pattern)
                self.patterns.append(pattern)

        self.spec = pathspec.PathSpec.from_lines('gitignore', self.patterns)
        logger.debug(f"IgnoreManager initialized with {len(self.patterns)} patterns")

    @staticmethod
    def _read_ignore_file(file_path: Path) -> List[str]:
        with open(file_path, 'r', encoding='utf-8') as f:
            return [
                line.strip() for line in f
                if line.strip() and not line.strip().startswith('#')
            ]

    def should_ignore(self, path: Union[str, Path], is_dir: bool = False) -> bool:
        """
        Check if a path should be ignored.

        Args:
            path: Path to check (absolute or relative to the base directory)
            is_dir: Whether the path is a directory

        Returns:
            True if the path should be ignored
        """
        path = Path(path)
        if path.is_absolute():
            try:
                path = path.relative_to(self.root_path)
            except ValueError:
                # Not under the base directory
                return False

        path_str = path.as_posix()
        if is_dir:
            path_str += '/'
        return self.spec.match_file(path_str)

    def __repr__(self) -> str:
        return f"IgnoreManager(root={self.root_path}, patterns={len(self.patterns)})"
