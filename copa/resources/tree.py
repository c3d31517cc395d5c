"""Directory tree rendering for ``:dir`` placeholders"""

from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass
class TreeNode:
    """A file or directory in a rendered tree"""

    name: str
    is_directory: bool = False
    children: dict[str, "TreeNode"] = field(default_factory=dict)

    def sorted_children(self) -> list["TreeNode"]:
        """Directories first, then files, each group alphabetical"""
        return sorted(
            self.children.values(),
            key=lambda node: (not node.is_directory, node.name.lower(), node.name),
        )


def build_tree(root_name: str, relative_paths: Iterable[str]) -> TreeNode:
    """Build a name tree from POSIX file paths.

    Directories are inferred from path segments, so a directory without any
    selected file below it never appears.
    """
    root = TreeNode(root_name, is_directory=True)
    for rel in relative_paths:
        parts = [part for part in rel.split("/") if part and part != "."]
        node = root
        for index, part in enumerate(parts):
            is_last = index == len(parts) - 1
            child = node.children.get(part)
            if child is None:
                child = TreeNode(part, is_directory=not is_last)
                node.children[part] = child
            elif not is_last:
                child.is_directory = True
            node = child
    return root


def render_tree(root: TreeNode) -> str:
    """Render a tree with box-drawing connectors, root line first"""
    lines = [f"{root.name}/"]

    def render_children(node: TreeNode, prefix: str) -> None:
        children = node.sorted_children()
        for index, child in enumerate(children):
            is_last = index == len(children) - 1
            connector = "└── " if is_last else "├── "
            suffix = "/" if child.is_directory else ""
            lines.append(f"{prefix}{connector}{child.name}{suffix}")
            if child.children:
                render_children(child, prefix + ("    " if is_last else "│   "))

    render_children(root, "")
    return "\n".join(lines)
