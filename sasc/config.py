"""
Configuration for SASC runs.

All settings of a run live in one SascConfig value object that is passed
explicitly to discovery, analysis and reporting. It can be loaded from a
YAML or JSON file (.sasc.yml by default) and overridden from the command
line.
"""

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .core.grouping import validate_threshold
from .errors import InvalidArgumentError


CONFIG_FILENAMES = [".sasc.yml", ".sasc.yaml", "sasc.yml", "sasc.yaml"]

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _as_text(value: Any, argument: str) -> str:
    """Accept strings and plain numbers (YAML reads `extension: 123` as an int)."""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise InvalidArgumentError(
        f"{argument} must be a string, got {value!r}",
        argument=argument,
        value=value,
        hint="Quote the value in the configuration file"
    )


def _as_patterns(value: Any, argument: str) -> List[str]:
    """A single pattern or a list of patterns."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [_as_text(p, argument) for p in value]
    raise InvalidArgumentError(
        f"{argument} must be a pattern or a list of patterns, got {value!r}",
        argument=argument,
        value=value,
        hint="Use a YAML list, e.g. [old/, \"*_test.go\"]"
    )


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise InvalidArgumentError(
            f"{name} must be a mapping, got {section!r}",
            argument=name,
            value=section,
        )
    return section


@dataclass
class DiscoveryConfig:
    """Which files take part in a run."""

    # Extension of the compared files, without the leading dot
    extension: str = "go"

    # Extra gitignore-style patterns to leave out
    exclude: List[str] = field(default_factory=list)

    # Read .sascignore from the base directory
    use_ignore_file: bool = True

    def __post_init__(self):
        self.extension = _as_text(self.extension or "", "discovery.extension").strip().lstrip(".")
        self.exclude = _as_patterns(self.exclude, "discovery.exclude")
        if not self.extension:
            raise InvalidArgumentError(
                "extension must not be empty",
                argument="discovery.extension",
                value=self.extension,
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "extension": self.extension,
            "exclude": list(self.exclude),
            "use_ignore_file": self.use_ignore_file,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DiscoveryConfig":
        """Create from dictionary representation."""
        return cls(
            extension=data.get("extension", "go"),
            exclude=data.get("exclude"),
            use_ignore_file=data.get("use_ignore_file", True),
        )


@dataclass
class ReportConfig:
    """Where and how results are written."""

    # Tab-delimited distance table; when set the console report is skipped
    csv_path: Optional[str] = None

    # JSON report file
    json_path: Optional[str] = None

    # Print the GRUPOS section when a threshold is given
    show_groups: bool = True

    # Colored banner and progress messages
    color: bool = True

    def __post_init__(self):
        if self.csv_path is not None:
            self.csv_path = _as_text(self.csv_path, "report.csv_path")
        if self.json_path is not None:
            self.json_path = _as_text(self.json_path, "report.json_path")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "csv_path": self.csv_path,
            "json_path": self.json_path,
            "show_groups": self.show_groups,
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReportConfig":
        """Create from dictionary representation."""
        return cls(
            csv_path=data.get("csv_path"),
            json_path=data.get("json_path"),
            show_groups=data.get("show_groups", True),
            color=data.get("color", True),
        )


@dataclass
class SascConfig:
    """
    Settings of one similarity run.

    A threshold of None means no filtering of the distance listing and no
    grouping.
    """

    # Base directory searched for files; display names are relative to it
    root: str = "."

    # Maximum distance shown and grouping radius
    threshold: Optional[float] = None

    # Threads used for feature extraction
    workers: int = 1

    log_level: str = "WARNING"

    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    report: ReportConfig = field(default_factory=ReportConfig)

    def __post_init__(self):
        """Validate configuration parameters."""
        self.root = _as_text(self.root, "root")

        if self.threshold is not None:
            self.threshold = validate_threshold(self.threshold)

        if not isinstance(self.workers, int) or isinstance(self.workers, bool) or self.workers < 1:
            raise InvalidArgumentError(
                f"workers must be a positive integer, got {self.workers!r}",
                argument="workers",
                value=self.workers,
            )

        level = str(self.log_level).upper()
        if level not in LOG_LEVELS:
            raise InvalidArgumentError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}",
                argument="log_level",
                value=self.log_level,
            )
        self.log_level = level

    @property
    def grouping_enabled(self) -> bool:
        return self.threshold is not None

    def merged(self, **overrides) -> "SascConfig":
        """
        Copy with the given fields replaced; None values are ignored.

        Fields of the nested sections are addressed with a double
        underscore, e.g. ``report__csv_path="out.csv"``.
        """
        top: Dict[str, Any] = {}
        discovery: Dict[str, Any] = {}
        report: Dict[str, Any] = {}
        for key, value in overrides.items():
            if value is None:
                continue
            if key.startswith("discovery__"):
                discovery[key[len("discovery__"):]] = value
            elif key.startswith("report__"):
                report[key[len("report__"):]] = value
            else:
                top[key] = value

        return replace(
            self,
            discovery=replace(self.discovery, **discovery),
            report=replace(self.report, **report),
            **top,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "root": self.root,
            "threshold": self.threshold,
            "workers": self.workers,
            "log_level": self.log_level,
            "discovery": self.discovery.to_dict(),
            "report": self.report.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SascConfig":
        """Create from dictionary representation."""
        unknown = set(data) - {"root", "threshold", "workers", "log_level", "discovery", "report"}
        if unknown:
            raise InvalidArgumentError(
                f"Unknown configuration keys: {', '.join(sorted(unknown))}",
                argument="config",
                value=sorted(unknown),
            )

        return cls(
            root=data.get("root", "."),
            threshold=data.get("threshold"),
            workers=data.get("workers", 1),
            log_level=data.get("log_level", "WARNING"),
            discovery=DiscoveryConfig.from_dict(_section(data, "discovery")),
            report=ReportConfig.from_dict(_section(data, "report")),
        )

    def save_to_file(self, file_path: Union[str, Path]) -> None:
        """Save configuration to a YAML file."""
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, "w", encoding="utf-8") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False,
                      allow_unicode=True)

    @classmethod
    def load_from_file(cls, file_path: Union[str, Path]) -> "SascConfig":
        """Load configuration from a YAML or JSON file."""
        file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        if file_path.suffix not in [".yaml", ".yml", ".json"]:
            raise InvalidArgumentError(
                f"Unsupported config format: {file_path.suffix}",
                argument="config",
                value=str(file_path),
                hint="Use a .yml, .yaml or .json file",
            )

        with open(file_path, "r", encoding="utf-8") as f:
            try:
                if file_path.suffix == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
            except (yaml.YAMLError, json.JSONDecodeError) as e:
                raise InvalidArgumentError(
                    f"Cannot parse configuration file {file_path}: {e}",
                    argument="config",
                    value=str(file_path),
                ) from e

        if data is not None and not isinstance(data, dict):
            raise InvalidArgumentError(
                f"Configuration file must contain a mapping: {file_path}",
                argument="config",
                value=str(file_path),
            )

        return cls.from_dict(data or {})

    @classmethod
    def find_config_file(cls, start_path: Union[str, Path]) -> Optional[Path]:
        """Look for a config file in start_path and its parents."""
        current = Path(start_path).absolute()

        while True:
            for name in CONFIG_FILENAMES:
                config_path = current / name
                if config_path.is_file():
                    return config_path
            if current == current.parent:
                return None
            current = current.parent

    @classmethod
    def find_and_load(cls, start_path: Union[str, Path]) -> "SascConfig":
        """Load the nearest config file, or the defaults when there is none."""
        config_path = cls.find_config_file(start_path)
        if config_path is None:
            return cls()
        return cls.load_from_file(config_path)


def validate_config(config: SascConfig) -> List[str]:
    """Return a list of problems worth reporting for an otherwise valid config."""
    issues = []

    root = Path(config.root)
    if not root.is_dir():
        issues.append(f"root directory does not exist: {root}")

    if config.report.csv_path and config.report.json_path and \
            Path(config.report.csv_path) == Path(config.report.json_path):
        issues.append("csv_path and json_path point to the same file")

    if config.report.csv_path and config.threshold is not None and config.report.show_groups:
        issues.append("Warning: groups are not printed when a CSV file is requested")

    if config.discovery.extension.lower() in ("csv", "json") and config.report.csv_path:
        issues.append("Warning: the CSV report may be picked up as an input file on the next run")

    return issues
