"""XCTest summary plist reader."""
from __future__ import annotations

from xcreport.xctest.reader import XcTestReader, read_results
from xcreport.xctest.visitor import CollectingVisitor, ResultsVisitor

__all__ = [
    "CollectingVisitor",
    "ResultsVisitor",
    "XcTestReader",
    "read_results",
]
