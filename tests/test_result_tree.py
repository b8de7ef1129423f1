"""Tests for grouping trees."""
from __future__ import annotations

from xcreport.report import LabelName, TestResult
from xcreport.tree.result_tree import ResultTree, group_by_labels, label_tree


def _result(name: str, **labels: list[str]) -> TestResult:
    result = TestResult(name=name)
    for label_name, values in labels.items():
        for value in values:
            result.add_label(label_name, value)
    return result


def _names(nodes) -> list[str]:
    return sorted(n.name for n in nodes)


class TestGroupByLabels:
    """Tests for label-based group paths."""

    def test_cartesian_product(self) -> None:
        result = _result("t", feature=["f1", "f2"], story=["s1", "s2"])
        paths = group_by_labels(result, LabelName.FEATURE, LabelName.STORY)
        assert sorted(paths) == [["f1", "s1"], ["f1", "s2"], ["f2", "s1"], ["f2", "s2"]]

    def test_missing_label_level_skipped(self) -> None:
        result = _result("t", story=["s1"])
        assert group_by_labels(result, LabelName.FEATURE, LabelName.STORY) == [["s1"]]

    def test_no_labels_gives_root_path(self) -> None:
        assert group_by_labels(_result("t"), LabelName.FEATURE) == [[]]


class TestResultTree:
    """Tests for ResultTree.add and navigation."""

    def test_empty_tree(self) -> None:
        tree: ResultTree[TestResult] = ResultTree("default", lambda item: [])
        tree.add(_result("first"))
        assert tree.children == []
        assert tree.items == []

    def test_cross_grouping(self) -> None:
        behaviors = label_tree("behaviors", LabelName.FEATURE, LabelName.STORY)
        first = _result("first", feature=["f1", "f2"], story=["s1", "s2"])
        second = _result("second", feature=["f2", "f3"], story=["s2", "s3"])
        behaviors.add(first)
        behaviors.add(second)

        assert _names(behaviors.children) == ["f1", "f2", "f3"]
        stories = sorted(s.name for f in behaviors.children for s in f.children)
        assert stories == sorted(["s1", "s2", "s1", "s2", "s3", "s2", "s3"])

        f2 = behaviors.find("f2")
        assert f2 is not None
        assert _names(f2.children) == ["s1", "s2", "s3"]
        assert [r.name for r in behaviors.find("f2", "s1").items] == ["first"]
        assert sorted(r.name for r in behaviors.find("f2", "s2").items) == ["first", "second"]
        assert [r.name for r in behaviors.find("f2", "s3").items] == ["second"]

    def test_independent_branches(self) -> None:
        tree: ResultTree[str] = ResultTree("t", lambda item: [["a", "b"], ["x", "y"]])
        assert tree.add("item") == 2
        assert _names(tree.children) == ["a", "x"]
        assert tree.find("a", "b").items == ["item"]
        assert tree.find("x", "y").items == ["item"]
        assert tree.find("a").items == []
        assert _names(tree.find("a").children) == ["b"]
        assert _names(tree.find("x").children) == ["y"]

    def test_shared_prefix_reuses_node(self) -> None:
        tree: ResultTree[str] = ResultTree("t", lambda item: [["a", "b"], ["a", "c"]])
        tree.add("one")
        tree.add("two")
        assert _names(tree.children) == ["a"]
        assert _names(tree.find("a").children) == ["b", "c"]
        assert tree.find("a", "c").items == ["one", "two"]

    def test_duplicate_keys_attach_once(self) -> None:
        tree: ResultTree[str] = ResultTree("t", lambda item: [["a"], ["a"]])
        assert tree.add("one") == 1
        assert tree.find("a").items == ["one"]

    def test_equal_but_distinct_items_both_attached(self) -> None:
        tree = label_tree("suites", LabelName.SUITE)
        first = _result("same", suite=["S"])
        second = _result("same", suite=["S"])
        assert first == second
        tree.add_all([first, second, first])
        items = tree.find("S").items
        assert len(items) == 2
        assert items[0] is first and items[1] is second

    def test_many_results_under_one_group(self) -> None:
        tree = label_tree("suites", LabelName.SUITE)
        results = [_result(f"t{i}", suite=["Big"]) for i in range(5000)]
        tree.add_all(results)
        tree.add_all(results)
        assert len(tree.find("Big").items) == 5000

    def test_full_depth_chain(self) -> None:
        tree: ResultTree[str] = ResultTree("t", lambda item: [["l1", "l2", "l3", "l4"]])
        tree.add("deep")
        assert tree.find("l1", "l2", "l3").items == []
        assert tree.find("l1", "l2", "l3", "l4").items == ["deep"]

    def test_empty_key_attaches_at_root(self) -> None:
        tree = label_tree("suites", LabelName.SUITE)
        tree.add(_result("lonely"))
        assert [r.name for r in tree.items] == ["lonely"]
        assert tree.children == []

    def test_find_missing(self) -> None:
        tree: ResultTree[str] = ResultTree("t", lambda item: [["a"]])
        tree.add("x")
        assert tree.find("b") is None
        assert tree.find("a", "b") is None

    def test_leaves_and_walk(self) -> None:
        tree: ResultTree[str] = ResultTree("t", lambda item: [["a", item], ["b"]])
        tree.add_all(["x", "y"])
        assert sorted(tree.leaves()) == sorted(
            [(("a", "x"), "x"), (("a", "y"), "y"), (("b",), "x"), (("b",), "y")]
        )
        assert sorted(path for path, _ in tree.walk()) == [("a",), ("a", "x"), ("a", "y"), ("b",)]

    def test_to_dict(self) -> None:
        tree = label_tree("suites", LabelName.SUITE)
        tree.add(_result("t1", suite=["S"]))
        assert tree.to_dict() == {
            "name": "suites",
            "items": [],
            "children": [{"name": "S", "items": ["t1"], "children": []}],
        }
