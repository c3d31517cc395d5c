"""Per-file content transformations and output formatting"""

import re
from pathlib import PurePosixPath

FILE_IGNORE_BELOW = "{{!COPA_IGNORE_BELOW}}"

_IGNORE_BELOW_RE = re.compile(
    r"(?://|\\\\)?[ \t]*" + re.escape(FILE_IGNORE_BELOW)
)

IMPORT_STRIPPING_EXTENSIONS = {".ts", ".tsx"}

# Static ES imports with a ``from`` clause; side-effect imports have none.
_STATIC_IMPORT_RE = re.compile(
    r"""^[ \t]*import[ \t]+(?:type[ \t]+)?[\w$*{}\s,]+?[ \t]+from[ \t]+(['"])[^'"\n]+\1[ \t]*;?[ \t]*(?://.*)?$"""
)

_BLANK_RUN_RE = re.compile(r"\n(?:[ \t]*\n){3,}")


def truncate_at_marker(content: str) -> str:
    """Drop everything from the first ignore-below marker onwards.

    A ``//`` or ``\\\\`` comment lead-in goes with the marker; when nothing but
    whitespace precedes it on its line, the line break before it goes too.
    """
    match = _IGNORE_BELOW_RE.search(content)
    if match is None:
        return content

    head = content[: match.start()].rstrip(" \t")
    if head.endswith("\n"):
        head = head[:-1]
        if head.endswith("\r"):
            head = head[:-1]
    return head


def supports_import_stripping(relative_path: str) -> bool:
    return PurePosixPath(relative_path).suffix in IMPORT_STRIPPING_EXTENSIONS


def remove_imports(content: str) -> str:
    """Strip single-line static ES imports, keeping side-effect imports.

    Runs of three or more blank lines left behind collapse to one and the
    result is left-trimmed, which makes the operation idempotent.
    """
    kept = [
        line
        for line in content.splitlines(keepends=True)
        if not _STATIC_IMPORT_RE.match(line.rstrip("\r\n"))
    ]
    return _BLANK_RUN_RE.sub("\n\n", "".join(kept)).lstrip()


def file_label(relative_path: str, clean: bool, imports_removed: bool) -> str:
    """Key under which a file's token count is reported"""
    if clean:
        inner = "clean (imports removed)" if imports_removed else "clean"
        return f"{relative_path} ({inner})"
    if imports_removed:
        return f"{relative_path} (imports removed)"
    return relative_path


def format_file(relative_path: str, content: str, imports_removed: bool = False) -> str:
    suffix = " (imports removed)" if imports_removed else ""
    return f"===== {relative_path}{suffix} =====\n{content}\n\n"


def format_directory_tree(resource: str, tree: str) -> str:
    return f"===== Directory Structure: {resource} =====\n{tree}\n\n"


def format_web_page(url: str, text: str) -> str:
    return f"===== {url} =====\n{text}\n\n"


def format_fence(body: str) -> str:
    return f"```\n{body.strip()}\n```"
