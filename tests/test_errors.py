"""Tests for the error registry."""
from __future__ import annotations

import pytest

from xcreport.errors import ErrorCode, ReportError, handle_exception, make_error, set_verbose


class TestMakeError:
    """Tests for make_error formatting."""

    def test_details_inlined(self) -> None:
        err = make_error(ErrorCode.E101, "a.plist: bad header")
        assert err.message == "Could not parse summary file: a.plist: bad header"
        assert err.details is None
        assert str(err).startswith("XCR-E101: ")
        assert "Next step:" in str(err)

    def test_template_without_details(self) -> None:
        err = make_error(ErrorCode.E100)
        assert err.message == "Results directory not found"

    def test_to_dict(self) -> None:
        d = make_error(ErrorCode.E102, "x").to_dict()
        assert d["code"] == "XCR-E102"
        assert d["message"].endswith(": x")


class TestHandleException:
    """Tests for handle_exception output."""

    def test_prints_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        set_verbose(False)
        handle_exception(OSError("disk full"), ErrorCode.E303)
        err = capsys.readouterr().err
        assert "XCR-E303" in err
        assert "disk full" in err
        assert "Traceback" not in err

    def test_verbose_prints_traceback(self, capsys: pytest.CaptureFixture[str]) -> None:
        set_verbose(True)
        try:
            try:
                raise OSError("disk full")
            except OSError as e:
                handle_exception(e, ErrorCode.E303)
        finally:
            set_verbose(False)
        assert "Full Traceback" in capsys.readouterr().err

    def test_report_error_print(self, capsys: pytest.CaptureFixture[str]) -> None:
        ReportError(code=ErrorCode.E100, message="m", next_step="n", details="d").print()
        err = capsys.readouterr().err
        assert "Details: d" in err
