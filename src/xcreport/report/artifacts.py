"""Write parsed results and grouping trees to disk."""
from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Sequence

import yaml

from xcreport.errors import ReportError
from xcreport.report import Status, TestResult
from xcreport.tree.result_tree import ResultTree


def summarize(results: Sequence[TestResult]) -> dict[str, int]:
    """Count results per status."""
    summary = {"total": len(results)}
    for status in Status:
        summary[status.value] = sum(1 for r in results if r.status == status)
    return summary


def build_report(
    results: Sequence[TestResult],
    trees: Sequence[ResultTree[TestResult]],
    failures: Optional[Sequence[ReportError]] = None,
    results_dir: Optional[Path] = None,
) -> dict[str, Any]:
    """Assemble the report document."""
    return {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "results_dir": str(results_dir) if results_dir else None,
        "summary": summarize(results),
        "results": [r.to_dict() for r in results],
        "trees": [t.to_dict() for t in trees],
        "failures": [f.to_dict() for f in failures or []],
    }


def _dump(data: Any, path: Path, output_format: str) -> Path:
    if output_format == "yaml":
        path = path.with_suffix(".yaml")
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
    else:
        path = path.with_suffix(".json")
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def write_report_artifacts(
    *,
    out_dir: Path,
    report: dict[str, Any],
    output_format: str = "json",
) -> list[Path]:
    """Write all artifacts for a parse run.

    Creates:
    - results.<ext>: summary, results and read failures
    - trees.<ext>: one entry per grouping tree

    Returns:
        Written paths.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    results_doc = {k: v for k, v in report.items() if k != "trees"}
    return [
        _dump(results_doc, out_dir / "results", output_format),
        _dump({"trees": report["trees"]}, out_dir / "trees", output_format),
    ]
