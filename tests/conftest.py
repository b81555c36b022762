"""Shared fixtures for the SASC test suite."""

from pathlib import Path
from typing import Dict, List

import numpy as np
import pytest

from sasc.core.distance import build_matrix
from sasc.core.features import SourceFile, VECTOR_SIZE


def vector_at(position: int, byte: int = 0) -> np.ndarray:
    """Frequency vector holding ``position`` occurrences of one byte.

    Files built from such vectors lie on a line, so the distance between
    two of them is the difference of their positions.
    """
    vec = np.zeros(VECTOR_SIZE, dtype=np.int64)
    vec[byte] = position
    return vec


@pytest.fixture
def make_vector():
    return vector_at


@pytest.fixture
def line_matrix():
    """Factory for the distance matrix of files placed on a line."""
    def _build(positions, names=None):
        names = names or [f"f{i}.go" for i in range(len(positions))]
        files = [SourceFile(path=name, vector=vector_at(p)) for name, p in zip(names, positions)]
        return build_matrix(files)
    return _build


@pytest.fixture
def write_files(tmp_path):
    """Factory writing {relative path: content} below tmp_path."""
    def _write(files: Dict[str, object], root: Path = None) -> List[Path]:
        base = root or tmp_path
        written = []
        for rel, content in files.items():
            path = base / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content, encoding="utf-8")
            written.append(path)
        return written
    return _write


@pytest.fixture
def submissions(tmp_path, write_files):
    """Three near-identical submissions and one unrelated file."""
    write_files({
        "alumno1/main.txt": "CASA",
        "alumno2/main.txt": "SAAC",
        "alumno3/main.txt": "CASAS",
        "alumno4/main.txt": "z" * 48,
    })
    return tmp_path
