"""xcreport test configuration and fixtures."""
from __future__ import annotations

import plistlib
import sys
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

# Add src to path for imports
SRC_DIR = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(SRC_DIR))


def activity(
    title: str,
    *subs: dict[str, Any],
    screenshot_uuid: Optional[str] = None,
) -> dict[str, Any]:
    """Build an activity record."""
    record: dict[str, Any] = {"Title": title}
    if screenshot_uuid is not None:
        record["HasScreenshotData"] = True
        record["UUID"] = screenshot_uuid
    if subs:
        record["SubActivities"] = list(subs)
    return record


def leaf_test(
    name: str,
    *activities: dict[str, Any],
    status: str = "Success",
    duration: Optional[float] = None,
    identifier: Optional[str] = None,
) -> dict[str, Any]:
    """Build a leaf test record."""
    record: dict[str, Any] = {
        "TestName": name,
        "TestIdentifier": identifier or f"Suite/{name}()",
        "TestStatus": status,
        "TestSummaryGUID": f"guid-{name}",
        "ActivitySummaries": list(activities),
    }
    if duration is not None:
        record["Duration"] = duration
    return record


def suite(name: str, *subtests: dict[str, Any]) -> dict[str, Any]:
    """Build a suite record."""
    return {"TestName": name, "Subtests": list(subtests)}


def summary_document(*testables: dict[str, Any]) -> dict[str, Any]:
    return {"FormatVersion": "1.2", "TestableSummaries": list(testables)}


def target(name: str, *tests: dict[str, Any]) -> dict[str, Any]:
    return {"TestName": name, "TargetName": name, "Tests": list(tests)}


@pytest.fixture
def results_dir(tmp_path: Path) -> Path:
    """Return an empty results directory with an Attachments folder."""
    path = tmp_path / "results"
    (path / "Attachments").mkdir(parents=True)
    return path


@pytest.fixture
def write_summary(results_dir: Path) -> Callable[..., Path]:
    """Return a function writing a summary plist into ``results_dir``."""

    def _write(document: dict[str, Any], name: str = "TestSummaries.plist", fmt=plistlib.FMT_XML) -> Path:
        path = results_dir / name
        with path.open("wb") as f:
            plistlib.dump(document, f, fmt=fmt)
        return path

    return _write


@pytest.fixture
def login_summary() -> dict[str, Any]:
    """One suite "LoginTests" with one failing leaf test "testLogin"."""
    return summary_document(
        target(
            "AppUITests",
            suite(
                "LoginTests",
                leaf_test(
                    "testLogin",
                    activity("Start Test at 2024-01-01 10:00:00.000Z"),
                    activity("Tap Button"),
                    activity("Assertion Failure: expected true"),
                    status="Failure",
                    duration=1.5,
                ),
            ),
        )
    )
