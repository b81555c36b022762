"""Feature extraction, distance matrix and grouping engine."""

from .features import SourceFile, VECTOR_SIZE, extract, extract_all, load_source_file
from .distance import DistanceEntry, DistanceMatrix, build_matrix, pairwise_distance
from .grouping import ClusterBuilder, Group, GroupMember, build_groups, validate_threshold
from .loader import collect_files
from .analysis import AnalysisResult, analyze, run

__all__ = [
    'SourceFile',
    'VECTOR_SIZE',
    'extract',
    'extract_all',
    'load_source_file',
    'DistanceEntry',
    'DistanceMatrix',
    'build_matrix',
    'pairwise_distance',
    'ClusterBuilder',
    'Group',
    'GroupMember',
    'build_groups',
    'validate_threshold',
    'collect_files',
    'AnalysisResult',
    'analyze',
    'run',
]
