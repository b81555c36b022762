"""Report generation for similarity runs.

Section titles and the CSV header keep the wording of the 1.x
SASC reports ("GRUPOS", "DISTANCIAS", "CÓDIGO FUENTE") because
spreadsheets and scripts already consume them.
"""

import csv
import json
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from .distance import DistanceMatrix
from .grouping import Group
from .. import __version__
from ..errors import ReportWriteError
from ..utils.logging_setup import get_logger

if TYPE_CHECKING:
    from .analysis import AnalysisResult

logger = get_logger(__name__)

CSV_CORNER = "CÓDIGO FUENTE"
CSV_DELIMITER = "\t"


class DisplayNames:
    """Shortens file paths for display, relative to the base directory."""

    def __init__(self, base_dir: Optional[Union[str, Path]] = None):
        """
        Initialize display name mapping.

        Args:
            base_dir: The base directory of the run. If None, uses current working directory.
        """
        self.base_dir = Path(base_dir).absolute() if base_dir else Path.cwd()
        self._cache: Dict[str, str] = {}

    def __call__(self, file_path: Union[str, Path]) -> str:
        """
        Shortened form of a path: ./sub/file.go under the base directory,
        the path unchanged otherwise.
        """
        key = str(file_path)
        if key not in self._cache:
            path = Path(file_path)
            if not path.is_absolute():
                path = self.base_dir / path
            try:
                rel_path = path.relative_to(self.base_dir)
                self._cache[key] = f"./{rel_path.as_posix()}"
            except ValueError:
                self._cache[key] = key
        return self._cache[key]

    def names(self, paths: Sequence[str]) -> List[str]:
        return [self(p) for p in paths]


class NumpyJSONEncoder(json.JSONEncoder):
    """Custom JSON encoder that handles numpy types."""
    def default(self, obj):
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        return super().default(obj)


def render_groups(groups: Sequence[Group], names: DisplayNames) -> str:
    """Render the GRUPOS section.

    Cross-referenced members name the center of the group that claimed
    them first.
    """
    lines = ["", "GRUPOS", ""]
    for group in groups:
        lines.append(f"GRUPO {group.number} ({names(group.center_path)})")
        for member in group.members:
            line = f"\t{names(member.path)}"
            if member.cross_reference:
                line += f"  [también en el grupo de {names(member.owner_path)}]"
            lines.append(line)
        lines.append("")
    return "\n".join(lines) + "\n"


def render_distances(matrix: DistanceMatrix, names: DisplayNames,
                     threshold: Optional[float] = None) -> str:
    """Render the DISTANCIAS section, nearest neighbours first."""
    lines = ["", "DISTANCIAS", ""]
    for i, path in enumerate(matrix.paths):
        lines.append(names(path))
        for entry in matrix.nearest(i, threshold):
            lines.append(f"\t{entry.distance:8.2f} {names(entry.path)}")
        lines.append("")
    return "\n".join(lines) + "\n"


def render_text_report(result: "AnalysisResult", names: DisplayNames,
                       show_groups: bool = True) -> str:
    """Groups (when clustering ran) followed by the distance listing."""
    parts = []
    if show_groups and result.groups is not None:
        parts.append(render_groups(result.groups, names))
    parts.append(render_distances(result.matrix, names, result.threshold))
    return "".join(parts)


def write_csv(matrix: DistanceMatrix, names: DisplayNames,
              path: Union[str, Path]) -> Path:
    """
    Write the full distance matrix as a tab-delimited table.

    Args:
        matrix: Complete distance matrix
        names: Display name mapping
        path: Destination file

    Returns:
        The path written

    Raises:
        ReportWriteError: If the file cannot be created
    """
    path = Path(path)
    display = names.names(matrix.paths)
    distances = matrix.as_array()
    try:
        with open(path, 'w', encoding='utf-8', newline='') as f:
            writer = csv.writer(f, delimiter=CSV_DELIMITER, lineterminator='\n')
            writer.writerow([CSV_CORNER] + display)
            for i, name in enumerate(display):
                writer.writerow([name] + [f"{d:.2f}" for d in distances[i]])
    except OSError as e:
        raise ReportWriteError(
            f"Cannot create CSV file {path}: {e.strerror or e}",
            path=str(path)
        ) from e

    logger.info(f"Wrote {len(display)}x{len(display)} distance table to {path}")
    return path


def read_csv(path: Union[str, Path]) -> Tuple[List[str], np.ndarray]:
    """
    Read a table written by write_csv().

    Returns:
        Tuple of (display names, N x N distance array)
    """
    with open(path, 'r', encoding='utf-8', newline='') as f:
        rows = list(csv.reader(f, delimiter=CSV_DELIMITER))

    if not rows or not rows[0] or rows[0][0] != CSV_CORNER:
        raise ValueError(f"Not a SASC distance table: {path}")

    header = rows[0][1:]
    body = rows[1:]
    if len(body) != len(header):
        raise ValueError(f"Expected {len(header)} rows in {path}, found {len(body)}")

    values = np.zeros((len(header), len(header)), dtype=np.float64)
    for i, row in enumerate(body):
        if row[0] != header[i] or len(row) != len(header) + 1:
            raise ValueError(f"Malformed row {i + 1} in {path}")
        values[i] = [float(v) for v in row[1:]]
    return header, values


class Reporter:
    """Generate reports for one analysis result."""

    def __init__(self, base_dir: Optional[Union[str, Path]] = None):
        self.names = DisplayNames(base_dir)

    def render_text(self, result: "AnalysisResult", show_groups: bool = True) -> str:
        return render_text_report(result, self.names, show_groups)

    def render_json(self, result: "AnalysisResult") -> str:
        """Render a JSON document with the matrix, neighbours and groups."""
        matrix = result.matrix
        files = []
        for i, source in enumerate(matrix.files):
            files.append({
                "name": self.names(source.path),
                "path": source.path,
                "bytes": source.total_bytes,
                "neighbours": [
                    {"name": self.names(e.path), "distance": e.distance}
                    for e in matrix.nearest(i, result.threshold)
                ],
            })

        groups = None
        if result.groups is not None:
            groups = []
            for group in result.groups:
                data = group.to_dict()
                data["center"] = self.names(group.center_path)
                for member in data["members"]:
                    member["path"] = self.names(member["path"])
                    member["owner"] = self.names(member["owner"]) if member["owner"] else None
                groups.append(data)

        report = {
            "metadata": {
                "version": __version__,
                "generated": datetime.now().isoformat(),
                "tool": "sasc"
            },
            "summary": {
                "files": len(matrix),
                "threshold": result.threshold,
                "groups": len(result.groups) if result.groups is not None else None,
            },
            "names": self.names.names(matrix.paths),
            "matrix": np.round(matrix.as_array(), 2),
            "files": files,
            "groups": groups,
        }
        return json.dumps(report, indent=2, ensure_ascii=False, cls=NumpyJSONEncoder)

    def write_csv(self, result: "AnalysisResult", path: Union[str, Path]) -> Path:
        return write_csv(result.matrix, self.names, path)

    def write_json(self, result: "AnalysisResult", path: Union[str, Path]) -> Path:
        path = Path(path)
        try:
            path.write_text(self.render_json(result) + "\n", encoding='utf-8')
        except OSError as e:
            raise ReportWriteError(
                f"Cannot create JSON file {path}: {e.strerror or e}",
                path=str(path)
            ) from e
        logger.info(f"Wrote JSON report to {path}")
        return path
