"""Resolve a placeholder path into the set of files it includes"""

import asyncio
import os
import posixpath
import re
from collections.abc import Iterable, Sequence
from functools import lru_cache
from pathlib import Path

from copa.utils.error_handler import safe_operation
from copa.utils.mixins import LoggerMixin

HIDDEN_PATTERN = ".*"


@lru_cache(maxsize=256)
def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate a shell glob into a regex over POSIX relative paths.

    ``**`` spans directories (``**/`` also matches nothing), ``*`` and ``?``
    stay inside one segment, and leading dots need no explicit match.
    """
    if pattern.startswith("./"):
        pattern = pattern[2:]

    out: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        char = pattern[i]
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("/**", i) and i + 3 == n:
            out.append("(?:/.*)?")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif char == "*":
            out.append("[^/]*")
            i += 1
        elif char == "?":
            out.append("[^/]")
            i += 1
        elif char == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(char))
                i += 1
                continue
            body = pattern[i + 1 : end]
            if body.startswith("!"):
                body = "^" + body[1:]
            out.append(f"[{body}]")
            i = end + 1
        else:
            out.append(re.escape(char))
            i += 1
    return re.compile("".join(out) + r"\Z")


def matches_pattern(relative_path: str, pattern: str) -> bool:
    """Check one POSIX relative path against a single include/exclude pattern"""
    name = posixpath.basename(relative_path)
    segments = relative_path.split("/")

    if pattern == HIDDEN_PATTERN:
        return any(segment.startswith(".") for segment in segments)

    if pattern.endswith("/"):
        pattern = f"**/{pattern}**"

    if "*" in pattern or "/" in pattern:
        regex = glob_to_regex(pattern)
        if "/" not in pattern:
            return regex.match(name) is not None
        return regex.match(relative_path) is not None

    if pattern.startswith("."):
        return name == pattern or posixpath.splitext(name)[1] == pattern

    return pattern in segments


def filter_paths(
    relative_paths: Iterable[str],
    include: Sequence[str],
    exclude: Sequence[str],
) -> list[str]:
    """Apply include (any must match) then exclude (none may match) patterns"""
    selected = []
    for rel in relative_paths:
        if include and not any(matches_pattern(rel, p) for p in include):
            continue
        if any(matches_pattern(rel, p) for p in exclude):
            continue
        selected.append(rel)
    return selected


async def _run_git(directory: Path, *args: str) -> tuple[int, str]:
    process = await asyncio.create_subprocess_exec(
        "git",
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=directory,
    )
    stdout, _ = await process.communicate()
    return process.returncode or 0, stdout.decode("utf-8", errors="surrogateescape")


@safe_operation("list git files")
async def list_git_files(directory: Path) -> list[str] | None:
    """List tracked and untracked-but-not-ignored files under ``directory``.

    Paths are POSIX and relative to ``directory``. ``None`` when the directory
    is not inside a git work tree or git is unavailable.
    """
    code, out = await _run_git(directory, "rev-parse", "--is-inside-work-tree")
    if code != 0 or out.strip() != "true":
        return None

    code, out = await _run_git(
        directory, "ls-files", "-co", "--exclude-standard", "-z", "--", "."
    )
    if code != 0:
        return None
    return [entry for entry in out.split("\0") if entry]


def walk_files(directory: Path) -> list[str]:
    """Recursive listing including dot files, sorted per directory"""
    found: list[str] = []
    for root, dirnames, filenames in os.walk(directory):
        dirnames.sort()
        for filename in sorted(filenames):
            full = os.path.join(root, filename)
            if os.path.isfile(full):
                found.append(Path(os.path.relpath(full, directory)).as_posix())
    return found


def existing_files(directory: Path, relative_paths: Iterable[str]) -> list[str]:
    """Drop listed paths that are not regular files on disk"""
    return [rel for rel in relative_paths if (directory / rel).is_file()]


class ResourceSelector(LoggerMixin):
    """Select the files a placeholder refers to"""

    async def select(
        self,
        base_path: str | Path,
        include: Sequence[str] = (),
        exclude: Sequence[str] = (),
    ) -> list[Path] | None:
        """Return absolute file paths under ``base_path`` after filtering.

        ``None`` signals that ``base_path`` does not exist.
        """
        base = Path(os.path.abspath(base_path))
        if not base.exists():
            return None

        if base.is_file():
            candidates = [base.name]
            root = base.parent
        else:
            root = base
            listed = await list_git_files(root)
            if listed is None:
                self.logger.debug("Listing files by walking", directory=str(root))
                candidates = await asyncio.to_thread(walk_files, root)
            else:
                self.logger.debug("Listing files with git", directory=str(root))
                candidates = await asyncio.to_thread(existing_files, root, listed)

        selected = filter_paths(candidates, include, exclude)
        self.logger.debug(
            "Resources selected",
            path=str(base),
            candidates=len(candidates),
            selected=len(selected),
        )
        return [root / rel for rel in selected]
