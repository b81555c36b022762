"""
Byte-frequency feature extraction.

Every file becomes a vector of 256 counts, one per possible byte value.
The raw bytes are counted without decoding, so a multi-byte UTF-8
character contributes each of its bytes separately.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence, Union

import numpy as np

from ..errors import InvalidArgumentError, SourceReadError
from ..utils.logging_setup import get_logger

logger = get_logger(__name__)

# Size of the byte alphabet, one dimension per byte value
VECTOR_SIZE = 256

_CHUNK_SIZE = 1 << 20


@dataclass(frozen=True, eq=False)
class SourceFile:
    """A discovered file and its frequency vector."""
    path: str
    vector: np.ndarray

    @property
    def total_bytes(self) -> int:
        return int(self.vector.sum())

    def __repr__(self) -> str:
        return f"SourceFile(path={self.path!r}, total_bytes={self.total_bytes})"


def extract(path: Union[str, Path]) -> np.ndarray:
    """
    Count the occurrences of every byte value in a file.

    Args:
        path: File to read

    Returns:
        int64 array of length 256 where index i holds the count of byte i

    Raises:
        SourceReadError: If the file cannot be opened or read
    """
    counts = np.zeros(VECTOR_SIZE, dtype=np.int64)
    try:
        with open(path, 'rb') as f:
            for chunk in iter(lambda: f.read(_CHUNK_SIZE), b''):
                counts += np.bincount(
                    np.frombuffer(chunk, dtype=np.uint8),
                    minlength=VECTOR_SIZE
                )
    except OSError as e:
        raise SourceReadError(
            f"Cannot read source file {path}: {e.strerror or e}",
            path=str(path),
            details={'errno': e.errno}
        ) from e

    logger.debug(f"Extracted {int(counts.sum())} bytes from {path}")
    return counts


def load_source_file(path: Union[str, Path]) -> SourceFile:
    """Build the immutable SourceFile record for one path."""
    vector = extract(path)
    vector.setflags(write=False)
    return SourceFile(path=str(path), vector=vector)


def extract_all(paths: Sequence[Union[str, Path]], workers: int = 1) -> List[SourceFile]:
    """
    Extract the frequency vectors of many files.

    The returned list follows the order of ``paths`` whatever the number
    of workers. The first unreadable file aborts the whole batch.

    Args:
        paths: Files in discovery order
        workers: Number of threads used to read files

    Returns:
        One SourceFile per path, in input order
    """
    if workers < 1:
        raise InvalidArgumentError(
            f"workers must be at least 1, got {workers}",
            argument='workers',
            value=workers
        )

    logger.info(f"Extracting features from {len(paths)} files with {workers} worker(s)")

    if workers == 1 or len(paths) < 2:
        return [load_source_file(p) for p in paths]

    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(load_source_file, paths))
