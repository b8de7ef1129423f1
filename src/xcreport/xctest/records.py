"""Typed views over decoded XCTest summary records.

Summary plists decode into plain dicts, lists and scalars. The helpers here
are narrow casts: they check the container type and raise ``TypeMismatch``
when a field has the wrong shape, nothing more.
"""
from __future__ import annotations

from typing import Any, Optional

from xcreport.errors import TypeMismatch
from xcreport.report import LabelName, Status, TestResult

# Field names in the summary plist
TESTABLE_SUMMARIES = "TestableSummaries"
TESTS = "Tests"
SUB_TESTS = "Subtests"
TEST_NAME = "TestName"
TEST_IDENTIFIER = "TestIdentifier"
TEST_STATUS = "TestStatus"
TEST_SUMMARY_GUID = "TestSummaryGUID"
DURATION = "Duration"
ACTIVITY_SUMMARIES = "ActivitySummaries"
SUB_ACTIVITIES = "SubActivities"
TITLE = "Title"
UUID = "UUID"
HAS_SCREENSHOT = "HasScreenshotData"

XCTEST_RESULTS_FORMAT = "xctest"
UNKNOWN_NAME = "Unknown"

_STATUS_MAPPING = {
    "success": Status.PASSED,
    "failure": Status.FAILED,
    "skipped": Status.SKIPPED,
}


def as_list(value: Any) -> list[Any]:
    """Return ``value`` as a list or raise TypeMismatch."""
    if isinstance(value, (list, tuple)):
        return list(value)
    raise TypeMismatch(f"expected a list, got {type(value).__name__}")


def as_mapping(value: Any) -> dict[str, Any]:
    """Return ``value`` as a mapping or raise TypeMismatch."""
    if isinstance(value, dict):
        return value
    raise TypeMismatch(f"expected a mapping, got {type(value).__name__}")


def as_str(value: Any, field_name: str) -> str:
    if isinstance(value, str):
        return value
    raise TypeMismatch(f"expected {field_name} to be a string, got {type(value).__name__}")


def get_list(props: dict[str, Any], key: str) -> list[Any]:
    """Return the list stored under ``key``, or an empty list when absent."""
    return as_list(props.get(key, []))


def is_test(props: dict[str, Any]) -> bool:
    """Whether a Tests/Subtests entry is a leaf test rather than a suite."""
    return TEST_STATUS in props


def get_test_name(props: dict[str, Any]) -> str:
    return str(props.get(TEST_NAME, UNKNOWN_NAME))


def get_test_status(props: dict[str, Any]) -> Status:
    status = str(props.get(TEST_STATUS, "")).strip().lower()
    return _STATUS_MAPPING.get(status, Status.UNKNOWN)


def get_duration_ms(props: dict[str, Any]) -> Optional[int]:
    """Convert the ``Duration`` field (seconds) to whole milliseconds."""
    value = props.get(DURATION)
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(round(float(value) * 1000))
    except (TypeError, ValueError):
        return None


def get_test_result(props: dict[str, Any]) -> TestResult:
    """Build a TestResult from the identity fields of a leaf test record."""
    identifier = props.get(TEST_IDENTIFIER)
    guid = props.get(TEST_SUMMARY_GUID)
    return TestResult(
        name=get_test_name(props),
        full_name=str(identifier) if identifier is not None else None,
        history_id=str(guid) if guid is not None else None,
        status=get_test_status(props),
        duration=get_duration_ms(props),
    )


def add_default_labels(result: TestResult, suite_name: str) -> TestResult:
    """Attach format and suite labels unless the record already set them."""
    result.add_label_if_not_exists(LabelName.RESULT_FORMAT, XCTEST_RESULTS_FORMAT)
    result.add_label_if_not_exists(LabelName.SUITE, suite_name)
    return result
