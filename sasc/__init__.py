"""SASC - Byte-frequency similarity between source files."""

__version__ = "2.0.0"

from .config import SascConfig
from .core.analysis import AnalysisResult, analyze, run
from .core.distance import DistanceMatrix, build_matrix, pairwise_distance
from .core.features import SourceFile, extract
from .core.grouping import Group, build_groups

__all__ = [
    "SascConfig",
    "AnalysisResult",
    "analyze",
    "run",
    "DistanceMatrix",
    "build_matrix",
    "pairwise_distance",
    "SourceFile",
    "extract",
    "Group",
    "build_groups",
    "__version__",
]
