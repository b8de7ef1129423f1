"""Read XCTest summary plists from a results directory.

Each ``*.plist`` file in the results directory is decoded and walked
depth-first. Suites are descended into; every leaf test becomes one
TestResult handed to the visitor. A file that cannot be decoded or has an
unexpected shape contributes nothing and is recorded in ``failures``.
"""
from __future__ import annotations

import logging
import plistlib
from pathlib import Path
from typing import Any, Callable, Optional, Sequence
from xml.parsers.expat import ExpatError

from xcreport.errors import DecodeFailure, ErrorCode, ReportError, TypeMismatch, make_error
from xcreport.report import TestResult
from xcreport.report.aggregate import propagate_failure
from xcreport.xctest.records import (
    ACTIVITY_SUMMARIES,
    SUB_TESTS,
    TESTABLE_SUMMARIES,
    TESTS,
    add_default_labels,
    as_mapping,
    get_list,
    get_test_name,
    get_test_result,
    is_test,
)
from xcreport.xctest.steps import DEFAULT_SCREENSHOT_EXTENSIONS, StepTreeBuilder
from xcreport.xctest.visitor import ResultsVisitor

SUMMARY_PATTERN = "*.plist"

LOGGER = logging.getLogger(__name__)


def list_summaries(directory: Path, log: Optional[logging.Logger] = None) -> list[Path]:
    """List summary files directly inside ``directory``, sorted by name."""
    log = log or LOGGER
    if not directory.is_dir():
        return []
    try:
        return sorted(p for p in directory.glob(SUMMARY_PATTERN) if not p.is_dir())
    except OSError as e:
        log.error("Could not read data from %s: %s", directory, e)
        return []


def load_summary(path: Path) -> dict[str, Any]:
    """Decode one summary plist.

    Any error raised while decoding is reported as DecodeFailure; plistlib
    surfaces malformed values (e.g. a bad ``<date>``) as arbitrary
    exception types.

    Raises:
        DecodeFailure: If the file is unreadable or not a valid plist.
    """
    try:
        with path.open("rb") as f:
            loaded = plistlib.load(f)
    except (OSError, ValueError, ExpatError) as e:
        raise DecodeFailure(str(e)) from e
    except Exception as e:
        raise DecodeFailure(f"{type(e).__name__}: {e}") from e
    if not isinstance(loaded, dict):
        raise DecodeFailure(f"top-level object is {type(loaded).__name__}, not a dictionary")
    return loaded


class XcTestReader:
    """Walk XCTest summaries and emit one TestResult per leaf test.

    Instances keep per-run state (``failures``) and must not be shared
    across threads.

    Args:
        visitor: Receives results and attachment files.
        logger: Diagnostic sink for this reader; defaults to the module logger.
        file_exists: Existence check for screenshot files.
        screenshot_extensions: Screenshot extensions in priority order.
    """

    def __init__(
        self,
        visitor: ResultsVisitor,
        logger: Optional[logging.Logger] = None,
        file_exists: Optional[Callable[[Path], bool]] = None,
        screenshot_extensions: Sequence[str] = DEFAULT_SCREENSHOT_EXTENSIONS,
    ) -> None:
        self.visitor = visitor
        self.log = logger or LOGGER
        self.file_exists = file_exists
        self.screenshot_extensions = tuple(screenshot_extensions)
        self.failures: list[ReportError] = []

    def read_results(self, directory: Path) -> int:
        """Read every summary file in ``directory``.

        Returns:
            Number of test results emitted.
        """
        directory = Path(directory)
        if not directory.is_dir():
            self.log.warning("Results directory not found: %s", directory)
            return 0

        emitted = 0
        for summary_path in list_summaries(directory, self.log):
            emitted += self.read_summaries(directory, summary_path)
        return emitted

    def read_summaries(self, directory: Path, summary_path: Path) -> int:
        """Read one summary file; failures are logged and recorded.

        Results are emitted only after the whole file was walked.
        """
        self.log.info("Parse file %s", summary_path)
        try:
            loaded = load_summary(summary_path)
            results = self.parse_summaries(directory, loaded)
        except DecodeFailure as e:
            self._record_failure(ErrorCode.E101, summary_path, e)
            return 0
        except TypeMismatch as e:
            self._record_failure(ErrorCode.E102, summary_path, e)
            return 0
        except RecursionError:
            self._record_failure(
                ErrorCode.E102, summary_path, TypeMismatch("records are nested too deeply")
            )
            return 0

        for result in results:
            self.visitor.visit_test_result(result)
        return len(results)

    def parse_summaries(self, directory: Path, loaded: dict[str, Any]) -> list[TestResult]:
        """Walk a decoded summary document and return its results in order."""
        results: list[TestResult] = []
        builder = StepTreeBuilder(
            directory,
            self.visitor,
            file_exists=self.file_exists,
            screenshot_extensions=self.screenshot_extensions,
        )
        for summary in get_list(loaded, TESTABLE_SUMMARIES):
            props = as_mapping(summary)
            name = get_test_name(props)
            for test in get_list(props, TESTS):
                self._parse_test_suite(name, test, builder, results)
        return results

    def _parse_test_suite(
        self,
        parent_name: str,
        record: Any,
        builder: StepTreeBuilder,
        results: list[TestResult],
    ) -> None:
        props = as_mapping(record)
        if is_test(props):
            results.append(self.parse_test(parent_name, props, builder))
            return

        suite_name = get_test_name(props)
        for sub_test in get_list(props, SUB_TESTS):
            self._parse_test_suite(suite_name, sub_test, builder, results)

    def parse_test(
        self, suite_name: str, props: dict[str, Any], builder: StepTreeBuilder
    ) -> TestResult:
        """Build a fully aggregated TestResult from a leaf test record."""
        result = get_test_result(props)
        add_default_labels(result, suite_name)

        for activity in get_list(props, ACTIVITY_SUMMARIES):
            builder.build(result, activity)

        propagate_failure(result)
        return result

    def _record_failure(self, code: ErrorCode, path: Path, exc: Exception) -> None:
        error = make_error(code, f"{path}: {exc}")
        self.failures.append(error)
        self.log.error("Could not parse file %s: %s", path, exc)


def read_results(
    directory: Path,
    visitor: ResultsVisitor,
    logger: Optional[logging.Logger] = None,
    screenshot_extensions: Sequence[str] = DEFAULT_SCREENSHOT_EXTENSIONS,
) -> XcTestReader:
    """Read a results directory into ``visitor`` and return the used reader."""
    reader = XcTestReader(visitor, logger=logger, screenshot_extensions=screenshot_extensions)
    reader.read_results(directory)
    return reader
