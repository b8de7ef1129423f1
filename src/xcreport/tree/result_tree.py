"""Multi-level grouping trees over test results.

A tree is built from a flat collection of items and a classifier that maps
each item to zero or more group paths. Nodes with the same name at the same
depth are merged, and an item with several paths is attached under each of
them ("cross-grouping").
"""
from __future__ import annotations

from dataclasses import dataclass, field
from itertools import product
from typing import Any, Callable, Generic, Iterator, Optional, Sequence, TypeVar

from xcreport.report import TestResult

T = TypeVar("T")

GroupKey = Sequence[str]


@dataclass
class TreeNode(Generic[T]):
    """A named group inside a ResultTree.

    Attributes:
        name: Group name, unique among siblings.
        groups: Child groups keyed by name, in insertion order.
        items: Items attached directly to this group.
    """

    name: str
    groups: dict[str, TreeNode[T]] = field(default_factory=dict)
    items: list[T] = field(default_factory=list)
    _item_ids: set[int] = field(default_factory=set, init=False, repr=False, compare=False)

    @property
    def children(self) -> list[TreeNode[T]]:
        return list(self.groups.values())

    def child(self, name: str) -> TreeNode[T]:
        """Return the child group ``name``, creating it when missing."""
        node = self.groups.get(name)
        if node is None:
            node = TreeNode(name=name)
            self.groups[name] = node
        return node

    def attach(self, item: T) -> bool:
        """Attach ``item`` unless this exact object is already here."""
        # items keeps every attached object alive, so ids stay unique
        if id(item) in self._item_ids:
            return False
        self._item_ids.add(id(item))
        self.items.append(item)
        return True


class ResultTree(Generic[T]):
    """Labeled grouping tree with cross-grouping support.

    Args:
        name: Display name of the tree.
        classifier: Maps an item to the list of group paths it belongs to.
        leaf_name: Maps an item to its display name in ``to_dict``.
    """

    def __init__(
        self,
        name: str,
        classifier: Callable[[T], Sequence[GroupKey]],
        leaf_name: Optional[Callable[[T], str]] = None,
    ) -> None:
        self.name = name
        self.classifier = classifier
        self.leaf_name = leaf_name or _default_leaf_name
        self.root: TreeNode[T] = TreeNode(name=name)

    @property
    def children(self) -> list[TreeNode[T]]:
        """Top-level groups."""
        return self.root.children

    @property
    def items(self) -> list[T]:
        """Items attached at the root (classified with an empty path)."""
        return self.root.items

    def add(self, item: T) -> int:
        """Attach ``item`` under every group path the classifier returns.

        Returns:
            Number of distinct nodes the item was attached to.
        """
        attached = 0
        for key in self.classifier(item):
            node = self.root
            for segment in key:
                node = node.child(segment)
            if node.attach(item):
                attached += 1
        return attached

    def add_all(self, items: Sequence[T]) -> ResultTree[T]:
        for item in items:
            self.add(item)
        return self

    def find(self, *path: str) -> Optional[TreeNode[T]]:
        """Return the node at ``path`` or None."""
        node = self.root
        for segment in path:
            found = node.groups.get(segment)
            if found is None:
                return None
            node = found
        return node

    def walk(self) -> Iterator[tuple[tuple[str, ...], TreeNode[T]]]:
        """Yield ``(path, node)`` for every group, depth-first pre-order."""
        stack: list[tuple[tuple[str, ...], TreeNode[T]]] = [((), self.root)]
        while stack:
            path, node = stack.pop()
            if path:
                yield path, node
            for child in reversed(node.children):
                stack.append((path + (child.name,), child))

    def leaves(self) -> list[tuple[tuple[str, ...], T]]:
        """Every ``(path, item)`` attachment, including root attachments."""
        found = [((), item) for item in self.root.items]
        for path, node in self.walk():
            found.extend((path, item) for item in node.items)
        return found

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "items": [self.leaf_name(i) for i in self.root.items],
            "children": [self._node_to_dict(c) for c in self.children],
        }

    def _node_to_dict(self, node: TreeNode[T]) -> dict[str, Any]:
        return {
            "name": node.name,
            "items": [self.leaf_name(i) for i in node.items],
            "children": [self._node_to_dict(c) for c in node.children],
        }


def _default_leaf_name(item: Any) -> str:
    name = getattr(item, "name", None)
    return name if isinstance(name, str) else str(item)


def group_by_labels(result: TestResult, *label_names: str) -> list[list[str]]:
    """Group paths for ``result`` from the values of the given labels.

    Each requested label is one tree level; a label with several values
    fans out into several paths. Labels the result does not carry are
    skipped, so a result with none of them lands at the tree root.
    """
    levels = [result.find_all(name) for name in label_names]
    levels = [_unique(values) for values in levels if values]
    return [list(path) for path in product(*levels)]


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


def label_tree(name: str, *label_names: str) -> ResultTree[TestResult]:
    """Build an empty tree grouping test results by ``label_names``."""
    return ResultTree(name, lambda result: group_by_labels(result, *label_names))
