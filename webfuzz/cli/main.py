"""
webfuzz CLI: property-based fuzzing of a running web application.

Usage examples:
    webfuzz --init                        # write webfuzz.config.yaml
    webfuzz                               # run with the default config file
    webfuzz -n 100                        # 100 trials per check
    webfuzz --check formFuzzing           # one check only
    webfuzz --seed 12345 --reporter json  # replay a run, machine-readable

Exit codes: 0 all checks passed, 1 a check failed, 2 configuration error
or aborted run.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from webfuzz import __version__
from webfuzz.base.config import CONFIG_TEMPLATE, DEFAULT_CONFIG_FILE, load_config, setup_logging
from webfuzz.base.exceptions import ConfigurationError, RunAbortedError
from webfuzz.contracts.enums import DriverType, ReporterType
from webfuzz.errors import WebFuzzError, handle_error
from webfuzz.executor import run_session
from webfuzz.reporting import emit_report

log = logging.getLogger("cli")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_ERROR = 2


def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {raw!r}") from None
    if value < 1:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webfuzz",
        description="Check universal properties of a web application with property-based fuzzing",
    )
    parser.add_argument("--init", action="store_true", help="Write a config file template and exit")
    parser.add_argument("-c", "--config", default=DEFAULT_CONFIG_FILE, help=f"Config file path (default: {DEFAULT_CONFIG_FILE})")
    parser.add_argument("-n", "--num-runs", type=_positive_int, help="Override trials per check")
    parser.add_argument("-s", "--seed", type=int, help="Random seed (for replay)")
    parser.add_argument("--check", action="append", dest="checks", metavar="NAME", help="Run only this check (repeatable)")
    parser.add_argument("--reporter", choices=[r.value for r in ReporterType], help="Report format")
    parser.add_argument("--driver", choices=[d.value for d in DriverType], help="Session driver")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"webfuzz v{__version__}")
    return parser


def init_config(path: Path) -> int:
    if path.exists():
        print(f"❌ {path} already exists", file=sys.stderr)
        return EXIT_ERROR
    path.write_text(CONFIG_TEMPLATE, encoding="utf-8")
    print(f"📝 Created {path}")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config_path = Path(args.config)

    if args.init:
        return init_config(config_path)

    try:
        config = load_config(config_path).with_overrides(
            num_runs=args.num_runs,
            seed=args.seed,
            reporter=ReporterType(args.reporter) if args.reporter else None,
            driver=DriverType(args.driver) if args.driver else None,
            headless=False if args.headed else None,
        )
        setup_logging(config, verbose=args.verbose)

        errors = config.validate()
        if errors:
            raise ConfigurationError("Configuration errors", errors=errors)

        report = asyncio.run(run_session(config, only=args.checks))
    except RunAbortedError as e:
        emit_report(e.report, config.reporter)
        print(f"💥 {e.message}", file=sys.stderr)
        return EXIT_ERROR
    except ConfigurationError as e:
        print(f"❌ {e.message}", file=sys.stderr)
        for error in e.errors:
            print(f"  - {error}", file=sys.stderr)
        return EXIT_ERROR
    except WebFuzzError as e:
        print(f"💥 Fatal error: {e.message}", file=sys.stderr)
        return EXIT_ERROR
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return EXIT_ERROR
    except Exception as e:
        error = handle_error(e, context="Unexpected failure")
        log.debug("Unhandled exception", exc_info=True)
        print(f"💥 {error.message}", file=sys.stderr)
        return EXIT_ERROR

    emit_report(report, config.reporter)
    return EXIT_OK if report.succeeded else EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
