"""Search-filter tests: ancestor preservation and directory reveal."""

from __future__ import annotations

import unittest

from filegroups.tree_model import build_tree, count_matches, filter_tree, find_node


class SearchFilterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.roots = build_tree(
            [
                "src/core/engine/Matcher.py",
                "src/core/engine/runner.py",
                "src/util.py",
                "docs/guide/index.md",
                "docs/guide/setup.md",
                "README.md",
            ]
        )

    def test_empty_query_returns_input_unchanged(self) -> None:
        self.assertIs(filter_tree(self.roots, ""), self.roots)
        self.assertIs(filter_tree(self.roots, "   "), self.roots)

    def test_deep_file_match_keeps_every_ancestor(self) -> None:
        filtered = filter_tree(self.roots, "matcher")

        self.assertEqual([node.name for node in filtered], ["src"])
        self.assertIsNotNone(find_node(filtered, "src/core"))
        self.assertIsNotNone(find_node(filtered, "src/core/engine"))
        self.assertIsNotNone(find_node(filtered, "src/core/engine/Matcher.py"))
        self.assertIsNone(find_node(filtered, "src/core/engine/runner.py"))
        self.assertIsNone(find_node(filtered, "src/util.py"))

    def test_matching_directory_reveals_all_children(self) -> None:
        filtered = filter_tree(self.roots, "GUIDE")

        guide = find_node(filtered, "docs/guide")
        self.assertIsNotNone(guide)
        self.assertEqual(sorted(guide.children), ["index.md", "setup.md"])

    def test_matching_directory_with_matching_child_keeps_only_matches(self) -> None:
        roots = build_tree(["set/setup.md", "set/other.md"])

        filtered = filter_tree(roots, "set")

        self.assertEqual(sorted(filtered[0].children), ["setup.md"])

    def test_files_need_a_direct_name_match(self) -> None:
        filtered = filter_tree(self.roots, "readme")

        self.assertEqual([node.path for node in filtered], ["README.md"])

    def test_filtering_does_not_mutate_source_tree(self) -> None:
        filter_tree(self.roots, "matcher")

        self.assertIsNotNone(find_node(self.roots, "src/core/engine/runner.py"))

    def test_count_matches_counts_files_and_directories(self) -> None:
        self.assertEqual(count_matches(self.roots, "e"), 8)
        self.assertEqual(count_matches(self.roots, ""), 0)


if __name__ == "__main__":
    unittest.main()
