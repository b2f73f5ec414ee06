"""
Command-line entry point.

Usage: waybackurls <domain>
"""

import logging
import sys
from typing import List, Optional, Tuple

from .core.errors import FatalNetworkError, MissingDependencyError, UsageError, WaybackError
from .core.logger import ErrorTracker, create_error_tracker, get_logger, initialize_logging
from .utils.settings import load_settings
from .utils.validators import check_dependencies, normalize_domain

RULE = "=" * 57

USAGE = """Usage: {prog} <domain>
Example: {prog} example.com

Description:
  Queries the Wayback Machine for archived URLs of the specified domain,
  extracts all URLs (including subdomains), filters and deduplicates them,
  and saves the results to a .txt file named after the target domain.

Requirements:
  - requests: for API requests
"""


def print_usage(prog: str = "waybackurls"):
    print(USAGE.format(prog=prog))


def parse_args(argv: List[str]) -> str:
    """Return the single target argument; raises UsageError otherwise."""
    if len(argv) != 1:
        raise UsageError(f"expected exactly one domain argument, got {len(argv)}")
    return argv[0]


def _logging_options(settings: dict, problems: List[str]) -> Tuple[Optional[str], int]:
    """Pick log_dir and console level from settings, reporting bad values."""
    log_dir = settings.get('log_dir', 'logs')
    if log_dir is not None and not isinstance(log_dir, str):
        problems.append(f"Ignoring setting log_dir={log_dir!r}: expected str or null")
        log_dir = 'logs'

    level_name = settings.get('log_level', 'INFO')
    level = getattr(logging, level_name.upper(), None) if isinstance(level_name, str) else None
    if not isinstance(level, int):
        problems.append(f"Ignoring setting log_level={level_name!r}: expected a logging level name")
        level = logging.INFO
    return log_dir, level


def _setup_logging(settings: dict, problems: List[str]):
    log_dir, level = _logging_options(settings, problems)
    try:
        initialize_logging(log_dir, level)
    except OSError as e:
        problems.append(f"Cannot write log files to {log_dir}: {e}; logging to the console only")
        initialize_logging(None, level)


def _finish(logger: logging.Logger, tracker: ErrorTracker, code: int) -> int:
    summary = tracker.get_error_summary()
    if summary['total_errors'] or summary['total_warnings']:
        logger.info(f"Run finished with {summary['total_errors']} error(s) "
                    f"and {summary['total_warnings']} warning(s)")
    logger.info(RULE)
    if code == 0:
        logger.info("Operation completed successfully")
    else:
        logger.info("Operation failed")
    return code


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the extractor for one domain.

    Returns:
        Process exit code: 0 on completion (including zero results), 1 on
        any error
    """
    argv = sys.argv[1:] if argv is None else list(argv)

    try:
        target = parse_args(argv)
    except UsageError:
        print_usage()
        return 1

    problems: List[str] = []
    settings = load_settings(problems=problems)
    _setup_logging(settings, problems)
    logger = get_logger('cli')
    tracker = create_error_tracker('cli')

    logger.info(RULE)
    logger.info("              WAYBACK MACHINE URL EXTRACTOR")
    logger.info(RULE)

    for message in problems:
        tracker.log_warning(message, context="settings")

    try:
        check_dependencies()
        domain = normalize_domain(target)
    except MissingDependencyError as e:
        tracker.log_error(e, context="dependency check")
        logger.error(f"    Please install it with: {e.hint}")
        return _finish(logger, tracker, 1)
    except WaybackError as e:
        tracker.log_error(e, context="domain validation")
        return _finish(logger, tracker, 1)

    # Imported late so a missing dependency is reported instead of crashing
    from .core.controller import RunConfig, WaybackController

    config = RunConfig.from_settings(
        settings, warn=lambda message: tracker.log_warning(message, context="settings"))
    controller = None
    try:
        controller = WaybackController(config)
        result = controller.run(domain)
    except FatalNetworkError as e:
        tracker.log_error(e, context="CDX query", domain=domain)
        return _finish(logger, tracker, 1)
    except OSError as e:
        tracker.log_error(e, context="writing results", domain=domain)
        return _finish(logger, tracker, 1)
    finally:
        if controller is not None:
            controller.close()

    if result.write.skipped_records:
        tracker.log_warning(f"{result.write.skipped_records} malformed records were skipped",
                            context="parsing", domain=domain)
    return _finish(logger, tracker, 0)


if __name__ == "__main__":
    sys.exit(main())
