"""xcreport error code registry and exception taxonomy.

Provides structured error codes with helpful messages and next steps.
Each error has:
- Code: XCR-EXXX format
- Message: Human-readable description
- Next step: Actionable command or instruction
"""
from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DecodeFailure(ValueError):
    """A summary file is malformed or unreadable."""


class TypeMismatch(TypeError):
    """A decoded record does not have the shape the reader asked for."""


class ErrorCode(Enum):
    """xcreport error codes."""

    # Configuration errors (E001-E099)
    E002 = "E002"  # Tree definitions file not found
    E003 = "E003"  # Tree definitions file invalid
    E004 = "E004"  # Invalid configuration value

    # Input errors (E100-E199)
    E100 = "E100"  # Results directory not found
    E101 = "E101"  # Summary file could not be decoded
    E102 = "E102"  # Record has unexpected shape

    # File/IO errors (E300-E399)
    E303 = "E303"  # Cannot write file


@dataclass
class ReportError:
    """Structured error with code, message, and next step."""

    code: ErrorCode
    message: str
    next_step: str
    details: Optional[str] = None

    def __str__(self) -> str:
        lines = [
            f"XCR-{self.code.value}: {self.message}",
        ]
        if self.details:
            lines.append(f"  Details: {self.details}")
        lines.append(f"  Next step: {self.next_step}")
        return "\n".join(lines)

    def print(self, file=None) -> None:
        """Print the error to stderr (or specified file)."""
        print(str(self), file=file or sys.stderr)

    def to_dict(self) -> dict[str, Optional[str]]:
        return {
            "code": f"XCR-{self.code.value}",
            "message": self.message,
            "next_step": self.next_step,
            "details": self.details,
        }


# Pre-defined error templates
ERROR_TEMPLATES: dict[ErrorCode, tuple[str, str]] = {
    # (message_template, next_step)
    ErrorCode.E002: (
        "Tree definitions file not found: {details}",
        "Check the --trees path or omit it to use the default trees"
    ),
    ErrorCode.E003: (
        "Tree definitions file is invalid: {details}",
        "Each tree needs a name and a non-empty group_by list"
    ),
    ErrorCode.E004: (
        "Invalid configuration value: {details}",
        "Run 'xcreport show-config' and check XCR_* variables"
    ),
    ErrorCode.E100: (
        "Results directory not found: {details}",
        "Point --results at the directory holding the *.plist summaries"
    ),
    ErrorCode.E101: (
        "Could not parse summary file: {details}",
        "Check that the file is a valid XML or binary plist"
    ),
    ErrorCode.E102: (
        "Summary file has an unexpected record shape: {details}",
        "Regenerate the summary with a supported xcodebuild version"
    ),
    ErrorCode.E303: (
        "Cannot write file: {details}",
        "Check directory permissions"
    ),
}


def make_error(code: ErrorCode, details: Optional[str] = None) -> ReportError:
    """Create a ReportError from a code with optional details.

    Args:
        code: The error code
        details: Optional details to include in the message

    Returns:
        ReportError instance ready to print
    """
    template = ERROR_TEMPLATES.get(code, ("Unknown error", "Run 'xcreport --help'"))
    message_template, next_step = template

    if details and "{details}" in message_template:
        message = message_template.format(details=details)
    elif details:
        message = f"{message_template}: {details}"
    else:
        message = message_template.replace(": {details}", "")

    return ReportError(
        code=code,
        message=message,
        next_step=next_step,
        details=details if "{details}" not in message_template else None,
    )


# Verbose mode flag (set by CLI)
_verbose_mode: bool = False


def set_verbose(verbose: bool) -> None:
    """Set verbose mode for error output."""
    global _verbose_mode
    _verbose_mode = verbose


def is_verbose() -> bool:
    """Check if verbose mode is enabled."""
    return _verbose_mode


def handle_exception(exc: Exception, code: ErrorCode, details: Optional[str] = None) -> None:
    """Handle an exception with proper error formatting.

    In verbose mode, prints the full traceback.
    Otherwise, prints a formatted error message.

    Args:
        exc: The exception that occurred
        code: The error code to use
        details: Optional additional details
    """
    import traceback

    err = make_error(code, details or str(exc))
    err.print()

    if _verbose_mode:
        print("\n--- Full Traceback ---", file=sys.stderr)
        traceback.print_exception(type(exc), exc, exc.__traceback__)
