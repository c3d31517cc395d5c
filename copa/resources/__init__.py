"""Resource selection, reading and formatting"""

from .reader import extract_document_text, read_text
from .selector import ResourceSelector, filter_paths, list_git_files, matches_pattern
from .transformer import remove_imports, truncate_at_marker
from .tree import TreeNode, build_tree, render_tree

__all__ = [
    "ResourceSelector",
    "TreeNode",
    "build_tree",
    "extract_document_text",
    "filter_paths",
    "list_git_files",
    "matches_pattern",
    "read_text",
    "remove_imports",
    "render_tree",
    "truncate_at_marker",
]
