"""Build step trees from XCTest activity records."""
from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from xcreport.errors import TypeMismatch
from xcreport.report import Status, Step, StepContainer
from xcreport.report.aggregate import propagate_failure
from xcreport.xctest.records import (
    HAS_SCREENSHOT,
    SUB_ACTIVITIES,
    TITLE,
    UUID,
    as_mapping,
    as_str,
    get_list,
)
from xcreport.xctest.visitor import ResultsVisitor

START_TEST_MARKER = "Start Test at"
START_TIME_OFFSET = len("Start Test at ")
START_TIME_FORMAT = "%Y-%m-%d %H:%M:%S.%f%z"
START_TIME_PATTERN = re.compile(
    r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{1,6}(?:Z|[+-]\d{2}:?\d{2})"
)
ASSERTION_FAILURE_PREFIX = "Assertion Failure:"
ATTACHMENTS_DIR = "Attachments"
DEFAULT_SCREENSHOT_EXTENSIONS = ("jpg", "png")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_start_time(title: str) -> Optional[int]:
    """Parse the timestamp of a "Start Test at ..." title.

    Only the leading timestamp is read; anything after the zone offset is
    ignored.

    Returns:
        Epoch milliseconds, or None when the text is not a valid timestamp.
    """
    match = START_TIME_PATTERN.match(title, START_TIME_OFFSET)
    if match is None:
        return None
    try:
        moment = datetime.strptime(match.group(0), START_TIME_FORMAT)
    except ValueError:
        return None
    return (moment - _EPOCH) // timedelta(milliseconds=1)


def set_time(node: StepContainer, start: int) -> None:
    """Set start on ``node`` and derive stop from its known duration."""
    node.start = start
    node.stop = start + node.duration if node.duration is not None else None


def screenshot_candidates(
    directory: Path, uuid: str, extensions: Sequence[str] = DEFAULT_SCREENSHOT_EXTENSIONS
) -> list[Path]:
    """Candidate screenshot paths for an activity, in priority order."""
    attachments = directory / ATTACHMENTS_DIR
    return [attachments / f"Screenshot_{uuid}.{ext}" for ext in extensions]


def _is_file(path: Path) -> bool:
    return path.is_file()


class StepTreeBuilder:
    """Turn activity records into Step trees.

    Args:
        directory: Results directory; screenshots live under its
            ``Attachments`` folder.
        visitor: Receives every resolved screenshot file.
        file_exists: Predicate used to check candidate screenshot paths.
        screenshot_extensions: Extensions tried in order; first match wins.
    """

    def __init__(
        self,
        directory: Path,
        visitor: ResultsVisitor,
        file_exists: Optional[Callable[[Path], bool]] = None,
        screenshot_extensions: Sequence[str] = DEFAULT_SCREENSHOT_EXTENSIONS,
    ) -> None:
        self.directory = directory
        self.visitor = visitor
        self.file_exists = file_exists or _is_file
        self.screenshot_extensions = tuple(screenshot_extensions)

    def build(self, parent: StepContainer, activity: Any) -> Optional[Step]:
        """Parse one activity into a step appended to ``parent``.

        A "Start Test at" activity only sets timing on ``parent`` and
        produces no step.

        Returns:
            The new step, or None for timing markers.
        """
        props = as_mapping(activity)
        title = as_str(props.get(TITLE), TITLE)

        if title.startswith(START_TEST_MARKER):
            start = parse_start_time(title)
            if start is not None:
                set_time(parent, start)
            return None

        step = Step(name=title)
        if title.startswith(ASSERTION_FAILURE_PREFIX):
            step.status = Status.FAILED
            step.message = title

        if HAS_SCREENSHOT in props:
            self._add_screenshot(props, step)

        parent.steps.append(step)

        for sub_activity in get_list(props, SUB_ACTIVITIES):
            self.build(step, sub_activity)

        propagate_failure(step)
        return step

    def _add_screenshot(self, props: dict[str, Any], step: Step) -> None:
        if UUID not in props:
            raise TypeMismatch(f"activity {step.name!r} has screenshot data but no {UUID}")
        uuid = str(props[UUID])
        for candidate in screenshot_candidates(self.directory, uuid, self.screenshot_extensions):
            if self.file_exists(candidate):
                step.attachments.append(self.visitor.visit_attachment_file(candidate))
                return
