"""Test directory tree building and rendering"""

from copa.resources.tree import build_tree, render_tree


def test_render_nested_tree() -> None:
    tree = build_tree("src", ["main.ts", "components/component.tsx", "b.txt"])

    assert render_tree(tree) == (
        "src/\n"
        "├── components/\n"
        "│   └── component.tsx\n"
        "├── b.txt\n"
        "└── main.ts"
    )


def test_directories_first_then_case_insensitive() -> None:
    tree = build_tree("root", ["B.txt", "a.txt", "z/y.txt"])

    assert [child.name for child in tree.sorted_children()] == ["z", "a.txt", "B.txt"]


def test_last_branch_prefix() -> None:
    tree = build_tree("r", ["a/b/c.txt", "d.txt"])

    assert render_tree(tree) == (
        "r/\n"
        "├── a/\n"
        "│   └── b/\n"
        "│       └── c.txt\n"
        "└── d.txt"
    )


def test_empty_tree_is_root_only() -> None:
    assert render_tree(build_tree("empty", [])) == "empty/"
