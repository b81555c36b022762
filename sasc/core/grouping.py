"""
Center-expansion grouping of similar files.

Files are visited once in discovery order. Each visited file is the
center of a candidate group made of every file within the threshold.
Files already claimed by an earlier group are listed again as
cross-references but are not re-claimed, so a file can show up in
several groups while belonging to exactly one.

The result depends on discovery order. This is a greedy approximation
of "neighbourhoods around natural centers", not clique detection.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

from .distance import DistanceMatrix
from ..errors import InvalidArgumentError
from ..utils.logging_setup import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class GroupMember:
    """One file listed in a group."""
    index: int
    path: str
    distance: float  # to the group center
    cross_reference: bool = False
    owner_index: Optional[int] = None  # center of the group that claimed the file
    owner_path: Optional[str] = None


@dataclass
class Group:
    """Files within the threshold of one central file."""
    number: int
    center_index: int
    center_path: str
    members: List[GroupMember] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def new_members(self) -> List[GroupMember]:
        return [m for m in self.members if not m.cross_reference]

    @property
    def cross_references(self) -> List[GroupMember]:
        return [m for m in self.members if m.cross_reference]

    def to_dict(self):
        """Convert to dictionary for JSON serialization."""
        return {
            "number": self.number,
            "center": self.center_path,
            "members": [
                {
                    "path": m.path,
                    "distance": m.distance,
                    "cross_reference": m.cross_reference,
                    "owner": m.owner_path,
                }
                for m in self.members
            ],
        }


def validate_threshold(threshold) -> float:
    """
    Check that a threshold is a finite, non-negative number.

    Raises:
        InvalidArgumentError: For anything else
    """
    try:
        value = float(threshold)
    except (TypeError, ValueError):
        raise InvalidArgumentError(
            f"Threshold must be a number, got {threshold!r}",
            argument='threshold',
            value=threshold,
            hint="Use a non-negative decimal such as 40 or 12.5"
        ) from None
    if math.isnan(value) or math.isinf(value) or value < 0:
        raise InvalidArgumentError(
            f"Threshold must be a finite non-negative number, got {threshold!r}",
            argument='threshold',
            value=threshold,
            hint="Use a non-negative decimal such as 40 or 12.5"
        )
    return value


class ClusterBuilder:
    """
    Builds groups from a complete distance matrix.

    Membership flags live on the builder and are reset by every call to
    build(), so one builder can be reused for several thresholds.
    """

    def __init__(self, matrix: DistanceMatrix, threshold: float):
        self.matrix = matrix
        self.threshold = validate_threshold(threshold)
        self._claimed: List[bool] = []
        self._owner: List[Optional[int]] = []

    def build(self) -> List[Group]:
        """Run one pass over the files in discovery order."""
        n = len(self.matrix)
        self._claimed = [False] * n
        self._owner = [None] * n
        groups: List[Group] = []
        paths = self.matrix.paths

        for center in range(n):
            members = self._expand(center, paths)
            has_new = any(not m.cross_reference for m in members)
            if len(members) > 1 and has_new:
                groups.append(Group(
                    number=len(groups) + 1,
                    center_index=center,
                    center_path=paths[center],
                    members=members
                ))

        logger.info(
            f"Built {len(groups)} group(s) from {n} files at threshold {self.threshold}"
        )
        return groups

    def _expand(self, center: int, paths: List[str]) -> List[GroupMember]:
        members = []
        for entry in self.matrix.within(center, self.threshold):
            j = entry.index
            if self._claimed[j]:
                owner = self._owner[j]
                members.append(GroupMember(
                    index=j,
                    path=entry.path,
                    distance=entry.distance,
                    cross_reference=True,
                    owner_index=owner,
                    owner_path=paths[owner]
                ))
            else:
                self._claimed[j] = True
                self._owner[j] = center
                members.append(GroupMember(
                    index=j,
                    path=entry.path,
                    distance=entry.distance,
                    owner_index=center,
                    owner_path=paths[center]
                ))
        return members


def build_groups(matrix: DistanceMatrix, threshold: float) -> List[Group]:
    """
    Group files within ``threshold`` of automatically chosen centers.

    Args:
        matrix: Complete distance matrix, rows in discovery order
        threshold: Maximum distance to a center (inclusive)

    Returns:
        Emitted groups numbered from 1
    """
    return ClusterBuilder(matrix, threshold).build()
