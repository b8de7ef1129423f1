"""Grouping trees over test results."""
from __future__ import annotations

from xcreport.tree.result_tree import ResultTree, TreeNode, group_by_labels, label_tree

__all__ = [
    "ResultTree",
    "TreeNode",
    "group_by_labels",
    "label_tree",
]
