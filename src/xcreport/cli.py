from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from xcreport.config import Config, load_config, set_config
from xcreport.errors import ErrorCode, handle_exception, is_verbose, make_error, set_verbose
from xcreport.report import Status
from xcreport.report.artifacts import build_report, summarize, write_report_artifacts
from xcreport.tree.loader import DEFAULT_TREES, build_trees, load_trees
from xcreport.xctest.reader import XcTestReader
from xcreport.xctest.visitor import CollectingVisitor

logger = logging.getLogger("xcreport")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load_config_from_args(args: argparse.Namespace) -> Config:
    config = load_config(
        env_file=getattr(args, "env_file", None),
        cli_overrides={
            "results_dir": getattr(args, "results", None),
            "out_dir": getattr(args, "out", None),
            "trees_file": getattr(args, "trees", None),
            "output_format": getattr(args, "format", None),
        },
    )
    set_config(config)
    return config


def _cmd_parse(args: argparse.Namespace) -> int:
    """Read an XCTest results directory and write report artifacts."""
    config = _load_config_from_args(args)

    if config.results_dir is None:
        make_error(ErrorCode.E100, "no results directory given").print()
        return 1
    if not config.results_dir.is_dir():
        make_error(ErrorCode.E100, str(config.results_dir)).print()
        return 1

    if config.trees_file is not None:
        if not config.trees_file.exists():
            make_error(ErrorCode.E002, str(config.trees_file)).print()
            return 1
        try:
            specs = load_trees(config.trees_file)
        except ValueError as e:
            make_error(ErrorCode.E003, str(e)).print()
            return 1
    else:
        specs = list(DEFAULT_TREES)

    visitor = CollectingVisitor()
    reader = XcTestReader(
        visitor,
        logger=logger.getChild("reader"),
        screenshot_extensions=config.screenshot_extensions,
    )
    reader.read_results(config.results_dir)

    trees = build_trees(visitor.results, specs)
    report = build_report(
        visitor.results, trees, failures=reader.failures, results_dir=config.results_dir
    )

    try:
        written = write_report_artifacts(
            out_dir=config.out_dir,
            report=report,
            output_format=config.output_format.value,
        )
    except OSError as e:
        handle_exception(e, ErrorCode.E303, f"{config.out_dir}: {e}")
        return 1

    summary = summarize(visitor.results)
    print(f"Results dir: {config.results_dir}")
    print(
        f"Tests: {summary['total']} | Passed: {summary['passed']} | "
        f"Failed: {summary['failed']} | Broken: {summary['broken']} | "
        f"Skipped: {summary['skipped']} | Unknown: {summary['unknown']}"
    )
    print(f"Attachments: {len(visitor.attachments)}")
    for tree in trees:
        print(f"Tree '{tree.name}': {len(tree.children)} top-level groups")
    if reader.failures:
        print(f"\n⚠️  {len(reader.failures)} summary file(s) skipped:")
        for failure in reader.failures:
            print(f"  - {failure.message}")
    for path in written:
        print(f"Wrote: {path}")

    if args.strict and (
        reader.failures or any(r.status != Status.PASSED for r in visitor.results)
    ):
        return 1
    return 0


def _cmd_show_config(args: argparse.Namespace) -> int:
    """Print the resolved configuration."""
    config = _load_config_from_args(args)
    print(json.dumps(config.to_dict(), indent=2))
    return 0


def _cmd_validate_trees(args: argparse.Namespace) -> int:
    """Validate a tree definitions file."""
    path = Path(args.trees)
    if not path.exists():
        make_error(ErrorCode.E002, str(path)).print()
        return 1
    try:
        specs = load_trees(path)
    except ValueError as e:
        make_error(ErrorCode.E003, str(e)).print()
        return 1

    print(f"✅ {path} is valid ({len(specs)} tree(s))")
    for spec in specs:
        print(f"  - {spec.name}: {' > '.join(spec.group_by)}")
    return 0


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--env-file",
        dest="env_file",
        help="Path to .env file (default: nearest .env)",
    )


def main(argv: list[str] | None = None) -> None:
    p = argparse.ArgumentParser(
        prog="xcreport",
        description="Normalize XCTest results and group them into report trees",
    )

    p.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug logging and full tracebacks on errors",
    )
    p.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )

    sub = p.add_subparsers(dest="cmd", required=True)

    # parse
    p_parse = sub.add_parser(
        "parse",
        help="Read an XCTest results directory and write results and trees",
    )
    p_parse.add_argument(
        "--results",
        help="Directory containing *.plist summaries (or XCR_RESULTS_DIR)",
    )
    p_parse.add_argument(
        "--out",
        help="Output directory for report artifacts (or XCR_OUT_DIR)",
    )
    p_parse.add_argument(
        "--trees",
        help="Tree definitions YAML file (default: suites and behaviors trees)",
    )
    p_parse.add_argument(
        "--format",
        choices=["json", "yaml"],
        help="Artifact format (default: json, or XCR_OUTPUT_FORMAT)",
    )
    p_parse.add_argument(
        "--strict",
        action="store_true",
        help="Exit 1 when any test did not pass or a summary file was skipped",
    )
    _add_common_args(p_parse)
    p_parse.set_defaults(func=_cmd_parse)

    # show-config
    p_show = sub.add_parser(
        "show-config",
        help="Print the resolved configuration",
    )
    _add_common_args(p_show)
    p_show.set_defaults(func=_cmd_show_config)

    # validate-trees
    p_val = sub.add_parser(
        "validate-trees",
        help="Validate a tree definitions YAML file",
    )
    p_val.add_argument("--trees", required=True, help="Tree definitions YAML file")
    p_val.set_defaults(func=_cmd_validate_trees)

    args = p.parse_args(argv)

    set_verbose(args.verbose)
    _configure_logging(args.verbose)

    try:
        rc = args.func(args)
        raise SystemExit(rc)
    except SystemExit:
        raise
    except KeyboardInterrupt:
        print("\n⚠️  Interrupted by user", file=sys.stderr)
        raise SystemExit(130)
    except ValueError as e:
        handle_exception(e, ErrorCode.E004, str(e))
        raise SystemExit(1)
    except Exception as e:
        if is_verbose():
            import traceback
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
            print("Run with --verbose for full traceback", file=sys.stderr)
        raise SystemExit(1)
