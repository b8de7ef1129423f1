"""Output boundary for readers.

Readers hand finished results and discovered attachment files to a visitor.
``CollectingVisitor`` keeps everything in memory for the CLI and tests.
"""
from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Any

from xcreport.report import Attachment, TestResult


class ResultsVisitor:
    """Receives results and attachments from a reader."""

    def visit_test_result(self, result: TestResult) -> None:
        raise NotImplementedError

    def visit_attachment_file(self, path: Path) -> Any:
        """Ingest an attachment file and return the handle stored on the step."""
        raise NotImplementedError


class CollectingVisitor(ResultsVisitor):
    """Collect results and attachment handles in memory."""

    def __init__(self) -> None:
        self.results: list[TestResult] = []
        self.attachments: list[Attachment] = []

    def visit_test_result(self, result: TestResult) -> None:
        self.results.append(result)

    def visit_attachment_file(self, path: Path) -> Attachment:
        content_type, _ = mimetypes.guess_type(path.name)
        try:
            size = path.stat().st_size
        except OSError:
            size = None
        attachment = Attachment(
            name=path.name,
            source=str(path),
            content_type=content_type,
            size=size,
        )
        self.attachments.append(attachment)
        return attachment
