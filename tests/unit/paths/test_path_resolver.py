"""Fallback-chain tests for resource reference resolution."""

from __future__ import annotations

import unittest

from filegroups.paths import PathResolver, normalize_relative_path, ref_to_path_string


class _EchoResolver:
    """Host resolver that echoes foreign references unchanged."""

    def __init__(self, root: str) -> None:
        self.root = root

    def to_relative_path(self, resource_ref: str) -> str | None:
        path = ref_to_path_string(resource_ref) or resource_ref
        if path.startswith(self.root + "/"):
            return path[len(self.root) + 1 :]
        return path

    async def exists_and_is_file(self, resource_ref: str) -> bool:
        return True


class PathResolverTests(unittest.TestCase):
    def test_reference_under_workspace_root_is_relative_to_it(self) -> None:
        resolver = PathResolver("/home/dev/project")

        self.assertEqual(resolver.resolve("file:///home/dev/project/src/app.py"), "src/app.py")
        self.assertEqual(resolver.resolve("/home/dev/project/README.md"), "README.md")

    def test_backslashes_are_normalized_before_comparison(self) -> None:
        resolver = PathResolver("C:\\work\\repo")

        self.assertEqual(resolver.resolve("C:\\work\\repo\\lib\\util.py"), "lib/util.py")
        self.assertEqual(resolver.resolve("file:///C:/work/repo/lib/x.py"), "lib/x.py")

    def test_alternate_root_is_used_when_active_root_does_not_match(self) -> None:
        resolver = PathResolver("/home/dev/project", alternate_roots=["/mnt/old/checkout"])

        self.assertEqual(resolver.resolve("/mnt/old/checkout/pkg/mod.py"), "pkg/mod.py")

    def test_common_ancestor_with_two_segments_keeps_structure(self) -> None:
        resolver = PathResolver("/home/dev/project")

        self.assertEqual(resolver.resolve("/home/dev/notes/todo.md"), "notes/todo.md")

    def test_degenerate_common_ancestor_falls_back_to_basename(self) -> None:
        resolver = PathResolver("/home/dev/project")

        self.assertEqual(resolver.resolve("/home/other/file.txt"), "file.txt")
        self.assertEqual(resolver.resolve("/etc/hosts"), "hosts")

    def test_segment_comparison_is_case_sensitive(self) -> None:
        resolver = PathResolver("/home/dev/project")

        self.assertEqual(resolver.resolve("/home/dev/Project/a.txt"), "Project/a.txt")

    def test_prefix_match_requires_whole_segments(self) -> None:
        resolver = PathResolver("/home/dev/project")

        self.assertEqual(resolver.resolve("/home/dev/project-two/a.txt"), "project-two/a.txt")

    def test_unusable_references_resolve_to_none_without_raising(self) -> None:
        resolver = PathResolver("/home/dev/project")

        self.assertIsNone(resolver.resolve(""))
        self.assertIsNone(resolver.resolve("   "))
        self.assertIsNone(resolver.resolve("untitled://scratch"))

    def test_host_resolver_answer_wins_only_when_relative(self) -> None:
        resolver = PathResolver("/home/dev/project", resource_resolver=_EchoResolver("/home/dev/project"))

        self.assertEqual(resolver.resolve("/home/dev/project/a/b.txt"), "a/b.txt")
        # The echoed absolute path is ignored and the fallback chain continues.
        self.assertEqual(resolver.resolve("/srv/data/c.txt"), "c.txt")

    def test_with_alternate_roots_leaves_original_untouched(self) -> None:
        resolver = PathResolver("/home/dev/project")
        extended = resolver.with_alternate_roots(["/mnt/old", None])

        self.assertEqual(extended.resolve("/mnt/old/x/y.txt"), "x/y.txt")
        self.assertEqual(resolver.resolve("/mnt/old/x/y.txt"), "y.txt")

    def test_to_resource_ref_builds_file_uri_under_workspace_root(self) -> None:
        resolver = PathResolver("/home/dev/project")

        self.assertEqual(resolver.to_resource_ref("a dir/b.txt"), "file:///home/dev/project/a%20dir/b.txt")
        self.assertIsNone(PathResolver(None).to_resource_ref("a.txt"))

    def test_ref_to_path_string_decodes_file_uris(self) -> None:
        self.assertEqual(ref_to_path_string("file:///tmp/a%20b.txt"), "/tmp/a b.txt")
        self.assertEqual(normalize_relative_path("/a\\b//c/"), "a/b/c")


if __name__ == "__main__":
    unittest.main()
