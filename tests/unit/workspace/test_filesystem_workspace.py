from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from filegroups.workspace import FileSystemWorkspace, exclude_spec


class ExcludeSpecTests(unittest.TestCase):
    def test_double_star_matches_any_depth(self) -> None:
        spec = exclude_spec(["**/node_modules/**"])
        self.assertTrue(spec.match_file("web/node_modules/"))
        self.assertTrue(spec.match_file("web/node_modules/pkg/index.js"))
        self.assertFalse(spec.match_file("web/node_modules_backup/a.js"))

    def test_gitignore_style_patterns_match_at_any_level(self) -> None:
        self.assertTrue(exclude_spec(["node_modules"]).match_file("pkg/node_modules/x.js"))
        self.assertTrue(exclude_spec(["build/"]).match_file("pkg/build/x.js"))
        self.assertTrue(exclude_spec(["*.pyc"]).match_file("a/x.pyc"))
        self.assertFalse(exclude_spec(["build/"]).match_file("pkg/build.txt"))

    def test_leading_slash_anchors_to_root(self) -> None:
        spec = exclude_spec(["/*.log"])
        self.assertTrue(spec.match_file("debug.log"))
        self.assertFalse(spec.match_file("logs/debug.log"))

    def test_blank_patterns_are_ignored(self) -> None:
        self.assertFalse(exclude_spec(["", "  "]).match_file("a.txt"))


class FileSystemWorkspaceTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name).resolve()
        for relative in ("src/app.py", "src/util/io.py", "README.md", "node_modules/pkg/index.js", ".git/HEAD"):
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("x\n", encoding="utf-8")
        self.workspace = FileSystemWorkspace(self.root)

    async def test_list_all_files_skips_excluded_trees(self) -> None:
        refs = await self.workspace.list_all_files(["**/node_modules/**", "**/.git/**"])

        relative = sorted(self.workspace.to_relative_path(ref) for ref in refs)
        self.assertEqual(relative, ["README.md", "src/app.py", "src/util/io.py"])
        self.assertTrue(all(ref.startswith("file://") for ref in refs))

    async def test_list_all_files_without_excludes(self) -> None:
        refs = await self.workspace.list_all_files([])

        self.assertEqual(len(refs), 5)

    async def test_list_all_files_prunes_nested_directory_patterns(self) -> None:
        refs = await self.workspace.list_all_files(["util/", "*.md", "node_modules", ".git"])

        self.assertEqual([self.workspace.to_relative_path(ref) for ref in refs], ["src/app.py"])

    def test_to_relative_path_accepts_uris_and_plain_paths(self) -> None:
        app = self.root / "src" / "app.py"

        self.assertEqual(self.workspace.to_relative_path(app.as_uri()), "src/app.py")
        self.assertEqual(self.workspace.to_relative_path(str(app)), "src/app.py")
        self.assertIsNone(self.workspace.to_relative_path("file:///elsewhere/app.py"))
        self.assertIsNone(self.workspace.to_relative_path(self.root.as_uri()))
        self.assertIsNone(self.workspace.to_relative_path("https://example.com/app.py"))

    async def test_exists_and_is_file(self) -> None:
        self.assertTrue(await self.workspace.exists_and_is_file((self.root / "README.md").as_uri()))
        self.assertFalse(await self.workspace.exists_and_is_file((self.root / "src").as_uri()))
        self.assertFalse(await self.workspace.exists_and_is_file((self.root / "gone.txt").as_uri()))


if __name__ == "__main__":
    unittest.main()
