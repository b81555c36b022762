"""Command-line interface for SASC."""

import argparse
import math
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .. import __version__
from ..config import SascConfig
from ..core.analysis import analyze, discover
from ..core.grouping import validate_threshold
from ..core.reporting import Reporter
from ..errors import InvalidArgumentError, SascError
from ..utils.logging_setup import get_logger, log_operation, setup_logging
from .output_manager import OutputManager, VerbosityLevel

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_IO_ERROR = 1
EXIT_INVALID_ARGUMENT = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sasc",
        description=(
            "Compare every file of one extension below a directory by the "
            "Euclidean distance between their byte-frequency vectors. "
            "0.0 means identical byte profiles."
        ),
        epilog=(
            "Compatibility form: sasc [EXTENSION] [THRESHOLD | TABLE.csv]. "
            "A second positional that parses as a number is the threshold, "
            "anything else is the CSV file name. Prefer --threshold and --csv."
        ),
    )

    parser.add_argument(
        "extension",
        nargs="?",
        help="Extension of the files to compare (default: go)"
    )

    parser.add_argument(
        "target",
        nargs="?",
        metavar="THRESHOLD|TABLE.csv",
        help="Maximum distance, or the name of the CSV file to generate"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    parser.add_argument(
        "--threshold",
        "-t",
        metavar="DISTANCE",
        help="Only show distances up to DISTANCE and group files within it"
    )

    parser.add_argument(
        "--csv",
        type=Path,
        metavar="FILE",
        help="Write the full distance matrix as a tab-delimited table"
    )

    parser.add_argument(
        "--json",
        type=Path,
        metavar="FILE",
        help="Write distances and groups as JSON"
    )

    parser.add_argument(
        "--path",
        "-p",
        type=Path,
        help="Base directory to search (default: current directory)"
    )

    parser.add_argument(
        "--exclude",
        action="append",
        metavar="PATTERN",
        help="gitignore-style pattern to leave out (can be specified multiple times)"
    )

    parser.add_argument(
        "--workers",
        "-j",
        type=int,
        metavar="N",
        help="Threads used to read files (default: 1)"
    )

    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        help="Path to configuration file"
    )

    parser.add_argument(
        "--no-groups",
        action="store_true",
        help="Do not print the groups section"
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging and the run summary"
    )

    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only print the report and errors"
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored messages"
    )

    parser.add_argument(
        "--log-dir",
        type=Path,
        help="Also write JSON-lines logs to this directory"
    )

    return parser


def interpret_target(value: Optional[str]) -> Tuple[Optional[float], Optional[str]]:
    """
    Decide whether the second positional argument is a threshold or a
    CSV file name.

    Anything that parses as a number is a threshold and must be finite
    and non-negative; everything else is a file name.

    Returns:
        Tuple of (threshold, csv_path), at most one of them set
    """
    if value is None:
        return None, None
    try:
        number = float(value)
    except ValueError:
        return None, value

    if math.isnan(number) or math.isinf(number) or number < 0:
        raise InvalidArgumentError(
            f"Invalid maximum distance: {value}",
            argument="threshold",
            value=value,
            hint="Use a finite non-negative number, or --csv FILE to name the table"
        )
    return number, None


def resolve_config(args: argparse.Namespace) -> SascConfig:
    """Combine the config file with the command-line arguments."""
    if args.config:
        config = SascConfig.load_from_file(args.config)
    else:
        config = SascConfig.find_and_load(args.path or Path.cwd())

    positional_threshold, positional_csv = interpret_target(args.target)

    threshold = None
    if args.threshold is not None:
        threshold = validate_threshold(args.threshold)
    if threshold is not None and positional_threshold is not None:
        if threshold != positional_threshold:
            raise InvalidArgumentError(
                f"Conflicting thresholds: {args.target} and --threshold {threshold}",
                argument="threshold",
                value=threshold,
                hint="Give the maximum distance only once"
            )
    if threshold is None:
        threshold = positional_threshold

    csv_path = str(args.csv) if args.csv else None
    if csv_path and positional_csv and Path(csv_path) != Path(positional_csv):
        raise InvalidArgumentError(
            f"Conflicting CSV files: {positional_csv} and --csv {csv_path}",
            argument="csv",
            value=csv_path,
            hint="Give the CSV file name only once"
        )
    csv_path = csv_path or positional_csv

    exclude = None
    if args.exclude:
        exclude = list(config.discovery.exclude) + list(args.exclude)

    return config.merged(
        root=str(args.path) if args.path else None,
        threshold=threshold,
        workers=args.workers,
        log_level="DEBUG" if args.verbose else None,
        discovery__extension=args.extension,
        discovery__exclude=exclude,
        report__csv_path=csv_path,
        report__json_path=str(args.json) if args.json else None,
        report__show_groups=False if args.no_groups else None,
        report__color=False if args.no_color else None,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.quiet:
        verbosity = VerbosityLevel.QUIET
    elif args.verbose:
        verbosity = VerbosityLevel.VERBOSE
    else:
        verbosity = VerbosityLevel.NORMAL
    out = OutputManager(verbosity=verbosity, use_color=not args.no_color)

    setup_logging(
        level="DEBUG" if args.verbose else "WARNING",
        log_dir=args.log_dir,
        file=args.log_dir is not None,
    )
    log_operation(logger, "cli_main", argv=argv)

    try:
        config = resolve_config(args)
        if not args.verbose and config.log_level != "WARNING":
            setup_logging(
                level=config.log_level,
                log_dir=args.log_dir,
                file=args.log_dir is not None,
            )
        if not config.report.color:
            out = OutputManager(verbosity=verbosity, use_color=False)
        out.banner()
        return execute(config, out)
    except InvalidArgumentError as e:
        logger.error(f"Invalid argument: {e.message}")
        out.error(e.message, e.hint)
        return EXIT_INVALID_ARGUMENT
    except SascError as e:
        logger.error(f"Run aborted: {e.message}")
        out.error(e.message)
        return EXIT_IO_ERROR
    except OSError as e:
        # Config files and other reads outside the analysis
        logger.error(f"Run aborted: {e}")
        out.error(str(e))
        return EXIT_IO_ERROR


def execute(config: SascConfig, out: OutputManager) -> int:
    """Run the analysis described by ``config`` and write its reports."""
    root = Path(config.root).absolute()
    paths = discover(config)

    if not paths:
        out.warning(f"No .{config.discovery.extension} files found in {root}")
        return EXIT_OK

    out.start_run(len(paths), config.discovery.extension, str(root))
    result = analyze(
        paths,
        threshold=config.threshold,
        workers=config.workers,
        on_phase=out.phase,
    )

    reporter = Reporter(root)
    if config.report.csv_path:
        out.report_phase(f"Generando el archivo \"{config.report.csv_path}\"")
        reporter.write_csv(result, config.report.csv_path)
    else:
        out.report_phase("Imprimiendo distancia entre archivos de forma creciente...")
        sys.stdout.write(reporter.render_text(result, show_groups=config.report.show_groups))
        sys.stdout.flush()

    if config.report.json_path:
        reporter.write_json(result, config.report.json_path)
        out.success(f"JSON report: {config.report.json_path}")

    out.show_summary(result)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
