"""Test resource selection and pattern matching"""

import shutil
import subprocess
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from copa.resources.selector import (
    ResourceSelector,
    filter_paths,
    glob_to_regex,
    list_git_files,
    matches_pattern,
    walk_files,
)


class TestPatterns:
    """Test include/exclude pattern semantics"""

    def test_glob_stays_in_segment(self) -> None:
        assert glob_to_regex("*.py").match("a.py")
        assert not glob_to_regex("*.py").match("pkg/a.py")

    def test_double_star_spans_directories(self) -> None:
        assert matches_pattern("src/a.py", "src/**/*.py")
        assert matches_pattern("src/sub/deep/a.py", "src/**/*.py")
        assert not matches_pattern("lib/a.py", "src/**/*.py")

    def test_wildcard_without_slash_matches_basename(self) -> None:
        assert matches_pattern("src/sub/a.test.ts", "*.test.ts")
        assert not matches_pattern("src/sub/a.ts", "*.test.ts")

    def test_path_glob_matches_whole_path(self) -> None:
        assert matches_pattern("src/a.py", "src/*.py")
        assert not matches_pattern("src/sub/a.py", "src/*.py")

    def test_hidden_pattern(self) -> None:
        assert matches_pattern(".git/config", ".*")
        assert matches_pattern("src/.env", ".*")
        assert not matches_pattern("src/app.py", ".*")

    def test_trailing_slash_means_directory(self) -> None:
        assert matches_pattern("node_modules/x/y.js", "node_modules/")
        assert matches_pattern("web/node_modules/y.js", "node_modules/")
        assert not matches_pattern("src/node_modules.js", "node_modules/")

    def test_extension(self) -> None:
        assert matches_pattern("a/b.js", ".js")
        assert not matches_pattern("a/b.json", ".js")

    def test_dot_name_matches_whole_basename(self) -> None:
        assert matches_pattern("src/.env", ".env")
        assert matches_pattern(".gitignore", ".gitignore")
        assert not matches_pattern("src/a.env.bak", ".env")
        assert filter_paths([".env", "app.py"], [], [".env"]) == ["app.py"]

    def test_bare_name_matches_segment(self) -> None:
        assert matches_pattern("build/out.txt", "build")
        assert matches_pattern("src/build", "build")
        assert not matches_pattern("rebuild/out.txt", "build")

    def test_filter_paths(self) -> None:
        paths = ["a.py", "b.js", "c/d.py", "c/e.md"]
        assert filter_paths(paths, ["*.py"], ["c"]) == ["a.py"]
        assert filter_paths(paths, [], ["*.py"]) == ["b.js", "c/e.md"]
        assert filter_paths(paths, [], []) == paths


def _touch(root: Path, *names: str) -> None:
    for name in names:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(name, encoding="utf-8")


class TestWalkFiles:
    """Test the filesystem fallback listing"""

    def test_sorted_with_dot_files(self, tmp_path: Path) -> None:
        _touch(tmp_path, "b/c.txt", "a.txt", ".hidden")
        assert walk_files(tmp_path) == [".hidden", "a.txt", "b/c.txt"]

    def test_empty_directory(self, tmp_path: Path) -> None:
        (tmp_path / "empty").mkdir()
        assert walk_files(tmp_path) == []


@pytest.mark.asyncio
class TestResourceSelector:
    """Test ResourceSelector.select"""

    async def test_missing_path(self, tmp_path: Path) -> None:
        assert await ResourceSelector().select(tmp_path / "nope") is None

    async def test_single_file(self, tmp_path: Path) -> None:
        _touch(tmp_path, "a.txt")
        selector = ResourceSelector()

        assert await selector.select(tmp_path / "a.txt") == [tmp_path / "a.txt"]
        assert await selector.select(tmp_path / "a.txt", exclude=["*.txt"]) == []

    async def test_directory_without_git(self, tmp_path: Path) -> None:
        _touch(tmp_path, "src/a.js", "src/b.ts", "src/sub/c.js", "src/.env")

        with patch(
            "copa.resources.selector.list_git_files", AsyncMock(return_value=None)
        ):
            files = await ResourceSelector().select(
                tmp_path / "src", include=["*.js"], exclude=[".*"]
            )

        assert files == [tmp_path / "src" / "a.js", tmp_path / "src" / "sub" / "c.js"]

    async def test_directory_uses_git_listing(self, tmp_path: Path) -> None:
        _touch(tmp_path, "keep.txt", "gone.txt")

        with patch(
            "copa.resources.selector.list_git_files",
            AsyncMock(return_value=["keep.txt", "deleted.txt"]),
        ):
            files = await ResourceSelector().select(tmp_path)

        # listed-but-missing files are skipped
        assert files == [tmp_path / "keep.txt"]

    @pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
    async def test_git_respects_gitignore(self, tmp_path: Path) -> None:
        subprocess.run(["git", "init", "-q"], cwd=tmp_path, check=True)
        (tmp_path / ".gitignore").write_text("ignored.txt\n", encoding="utf-8")
        _touch(tmp_path, "keep.txt", "ignored.txt", "sub/x.txt")

        listed = await list_git_files(tmp_path)

        assert listed is not None
        assert set(listed) == {".gitignore", "keep.txt", "sub/x.txt"}

    async def test_walk_runs_in_worker_thread(self, tmp_path: Path) -> None:
        _touch(tmp_path, "a.txt")

        with (
            patch("copa.resources.selector.list_git_files", AsyncMock(return_value=None)),
            patch(
                "copa.resources.selector.asyncio.to_thread",
                AsyncMock(return_value=["a.txt"]),
            ) as to_thread,
        ):
            files = await ResourceSelector().select(tmp_path)

        to_thread.assert_awaited_once_with(walk_files, tmp_path)
        assert files == [tmp_path / "a.txt"]
