"""Result model for xcreport.

This module provides the normalized test result structures produced by the
readers and consumed by the grouping trees and report writers.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class Status(Enum):
    """Status of a test result or step."""

    PASSED = "passed"
    FAILED = "failed"
    BROKEN = "broken"
    SKIPPED = "skipped"
    UNKNOWN = "unknown"


class LabelName:
    """Well-known label names."""

    SUITE = "suite"
    FEATURE = "feature"
    STORY = "story"
    RESULT_FORMAT = "resultFormat"


@dataclass(frozen=True)
class Label:
    """A single name/value label on a test result."""

    name: str
    value: str


@dataclass(frozen=True)
class Attachment:
    """A file attached to a step.

    Attributes:
        name: File name shown in reports.
        source: Path of the source file.
        content_type: MIME type guessed from the file name.
        size: File size in bytes, if known.
    """

    name: str
    source: str
    content_type: Optional[str] = None
    size: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "source": self.source,
            "content_type": self.content_type,
            "size": self.size,
        }


@dataclass
class Step:
    """A single step inside a test result.

    Attributes:
        name: Step title.
        status: Effective status after aggregation.
        message: Failure message, if any.
        trace: Failure trace, if any.
        start: Epoch milliseconds when the step started.
        stop: Epoch milliseconds when the step stopped.
        duration: Duration in milliseconds, if known.
        attachments: Files attached to this step.
        steps: Nested steps in recording order.
    """

    name: str
    status: Status = Status.PASSED
    message: Optional[str] = None
    trace: Optional[str] = None
    start: Optional[int] = None
    stop: Optional[int] = None
    duration: Optional[int] = None
    attachments: list[Any] = field(default_factory=list)
    steps: list[Step] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "trace": self.trace,
            "start": self.start,
            "stop": self.stop,
            "duration": self.duration,
            "attachments": [
                a.to_dict() if hasattr(a, "to_dict") else str(a) for a in self.attachments
            ],
            "steps": [s.to_dict() for s in self.steps],
        }


@dataclass
class TestResult:
    """Result of a single test.

    Attributes:
        name: Test name.
        full_name: Fully qualified test identifier.
        history_id: Stable identifier of the test across runs.
        status: Status reported by the test runner.
        message: Message of the representative failed step.
        trace: Trace of the representative failed step.
        start: Epoch milliseconds when the test started.
        stop: Epoch milliseconds when the test stopped.
        duration: Duration in milliseconds.
        labels: Unique name/value labels.
        steps: Top-level steps in recording order.
    """

    __test__ = False  # not a pytest test class

    name: str
    full_name: Optional[str] = None
    history_id: Optional[str] = None
    status: Status = Status.UNKNOWN
    message: Optional[str] = None
    trace: Optional[str] = None
    start: Optional[int] = None
    stop: Optional[int] = None
    duration: Optional[int] = None
    labels: list[Label] = field(default_factory=list)
    steps: list[Step] = field(default_factory=list)

    @property
    def suite(self) -> Optional[str]:
        """Name of the enclosing suite."""
        return self.find_one(LabelName.SUITE)

    def find_all(self, name: str) -> list[str]:
        """Return all label values with the given name, in insertion order."""
        return [label.value for label in self.labels if label.name == name]

    def find_one(self, name: str) -> Optional[str]:
        values = self.find_all(name)
        return values[0] if values else None

    def has_label(self, name: str) -> bool:
        return any(label.name == name for label in self.labels)

    def add_label(self, name: str, value: str) -> TestResult:
        """Add a label unless the same name/value pair is already present."""
        label = Label(name=name, value=value)
        if label not in self.labels:
            self.labels.append(label)
        return self

    def add_label_if_not_exists(self, name: str, value: str) -> TestResult:
        """Add a label only when no label with this name exists yet."""
        if not self.has_label(name):
            self.labels.append(Label(name=name, value=value))
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "full_name": self.full_name,
            "history_id": self.history_id,
            "status": self.status.value,
            "message": self.message,
            "trace": self.trace,
            "start": self.start,
            "stop": self.stop,
            "duration": self.duration,
            "labels": [{"name": l.name, "value": l.value} for l in self.labels],
            "steps": [s.to_dict() for s in self.steps],
        }


# Anything that owns a list of steps and carries a failure summary.
StepContainer = Union[TestResult, Step]
