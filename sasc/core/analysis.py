"""
Orchestration of a similarity run.

The three phases run strictly in sequence: every frequency vector exists
before the matrix is built and the matrix is complete before grouping
or reporting reads it.
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Sequence, Union

from .distance import DistanceMatrix, build_matrix
from .features import SourceFile, extract_all
from .grouping import Group, build_groups, validate_threshold
from .ignore import IgnoreManager
from .loader import collect_files
from ..utils.logging_setup import get_logger, log_operation, log_phase

if TYPE_CHECKING:
    from ..config import SascConfig

logger = get_logger(__name__)

PHASE_FEATURES = "features"
PHASE_DISTANCES = "distances"
PHASE_GROUPS = "groups"

# Called with the phase name before the phase starts
PhaseCallback = Callable[[str], None]


@dataclass
class AnalysisResult:
    """Everything one run produces."""
    files: List[SourceFile]
    matrix: DistanceMatrix
    threshold: Optional[float] = None
    groups: Optional[List[Group]] = None  # None when grouping was skipped
    timings: Dict[str, float] = field(default_factory=dict)

    @property
    def paths(self) -> List[str]:
        return [f.path for f in self.files]


def analyze(
    paths: Sequence[Union[str, Path]],
    threshold: Optional[float] = None,
    workers: int = 1,
    on_phase: Optional[PhaseCallback] = None,
) -> AnalysisResult:
    """
    Extract features, build the distance matrix and, with a threshold,
    group the files.

    Args:
        paths: Files in discovery order
        threshold: Maximum distance; None disables filtering and grouping
        workers: Threads used for feature extraction
        on_phase: Optional callback notified as each phase starts

    Returns:
        AnalysisResult for the run
    """
    if threshold is not None:
        threshold = validate_threshold(threshold)

    log_operation(logger, "analyze", files=len(paths), threshold=threshold, workers=workers)
    timings: Dict[str, float] = {}

    def phase(name: str):
        if on_phase is not None:
            on_phase(name)
        return time.perf_counter()

    start = phase(PHASE_FEATURES)
    files = extract_all(paths, workers=workers)
    timings[PHASE_FEATURES] = time.perf_counter() - start
    log_phase(logger, PHASE_FEATURES, timings[PHASE_FEATURES], files=len(files))

    start = phase(PHASE_DISTANCES)
    matrix = build_matrix(files)
    timings[PHASE_DISTANCES] = time.perf_counter() - start
    log_phase(logger, PHASE_DISTANCES, timings[PHASE_DISTANCES], files=len(files))

    groups = None
    if threshold is not None:
        start = phase(PHASE_GROUPS)
        groups = build_groups(matrix, threshold)
        timings[PHASE_GROUPS] = time.perf_counter() - start
        log_phase(logger, PHASE_GROUPS, timings[PHASE_GROUPS], groups=len(groups))

    return AnalysisResult(
        files=files,
        matrix=matrix,
        threshold=threshold,
        groups=groups,
        timings=timings,
    )


def discover(config: "SascConfig") -> List[Path]:
    """Files selected by a SascConfig, in discovery order."""
    ignore_manager = IgnoreManager(
        root_path=config.root,
        additional_patterns=config.discovery.exclude,
        use_ignore_file=config.discovery.use_ignore_file,
    )
    return collect_files(
        config.root,
        config.discovery.extension,
        ignore_manager=ignore_manager,
    )


def run(config: "SascConfig", on_phase: Optional[PhaseCallback] = None) -> AnalysisResult:
    """Discover the files described by ``config`` and analyze them."""
    paths = discover(config)
    return analyze(paths, threshold=config.threshold, workers=config.workers, on_phase=on_phase)
