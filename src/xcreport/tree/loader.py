"""Load and validate tree definition YAML files."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml
from jsonschema import Draft202012Validator

from xcreport.report import LabelName, TestResult
from xcreport.tree.result_tree import ResultTree, label_tree

SCHEMA_NAME = "xcreport.trees.schema.json"


@dataclass(frozen=True)
class TreeSpec:
    """One grouping tree to build: a name and the labels per level."""

    name: str
    group_by: tuple[str, ...]
    description: Optional[str] = None

    def build(self) -> ResultTree[TestResult]:
        return label_tree(self.name, *self.group_by)


DEFAULT_TREES: tuple[TreeSpec, ...] = (
    TreeSpec(name="suites", group_by=(LabelName.SUITE,)),
    TreeSpec(name="behaviors", group_by=(LabelName.FEATURE, LabelName.STORY)),
)


def _find_schema_path() -> Optional[Path]:
    """Locate the tree schema relative to this file."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        candidate = parent / "schemas" / SCHEMA_NAME
        if candidate.exists():
            return candidate
    return None


def validate_trees_against_schema(data: Any) -> list[str]:
    """Validate tree definitions against the JSON schema. Returns list of errors."""
    schema_path = _find_schema_path()
    if schema_path is None:
        return [f"Could not locate {SCHEMA_NAME}"]

    schema = json.loads(schema_path.read_text(encoding="utf-8"))
    validator = Draft202012Validator(schema)
    errors: list[str] = []
    for error in validator.iter_errors(data):
        errors.append(f"{error.json_path}: {error.message}")
    return errors


def load_trees(path: Path) -> list[TreeSpec]:
    """Load a tree definitions YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Tree specs in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the YAML is malformed or fails schema validation
    """
    if not path.exists():
        raise FileNotFoundError(f"Tree definitions file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in tree definitions file {path}:\n{e}") from e

    if data is None:
        raise ValueError(f"Tree definitions file is empty: {path}")

    errors = validate_trees_against_schema(data)
    if errors:
        error_details = "\n".join(f"  - {e}" for e in errors[:5])
        raise ValueError(f"Tree definitions validation failed for {path}:\n{error_details}")

    names = [t["name"] for t in data["trees"]]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ValueError(f"Duplicate tree names in {path}: {', '.join(duplicates)}")

    return [
        TreeSpec(
            name=t["name"],
            group_by=tuple(t["group_by"]),
            description=t.get("description"),
        )
        for t in data["trees"]
    ]


def build_trees(
    results: list[TestResult], specs: Optional[list[TreeSpec]] = None
) -> list[ResultTree[TestResult]]:
    """Build one populated tree per spec (default trees when none given)."""
    trees = []
    for spec in specs if specs is not None else list(DEFAULT_TREES):
        trees.append(spec.build().add_all(results))
    return trees
