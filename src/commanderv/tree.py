"""
Project tree: read, filter and render the workspace directory structure.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .core import FilesystemError, ItemKind, echo, read_directory, stat_kind, warn
from .ignore import LITERAL, is_ignored, load_ignore_rules


@dataclass
class RawNode:
    """A filesystem entry as read from disk; ``children`` is None for files."""

    path: str
    name: str
    children: Optional[List["RawNode"]] = None


@dataclass
class TreeNode:
    label: str
    children: Optional[List["TreeNode"]] = None


# Reading
def read_directory_tree(root: str, depth: int) -> RawNode:
    """
    Read the tree below *root*, listing directories up to *depth* levels deep.

    The root sits at level 0; a directory at level ``d`` only gets children
    when ``depth > d``. Entries are sorted by name. Subdirectories that cannot
    be listed are left out, an unreadable root raises :class:`FilesystemError`.
    """
    root = os.path.abspath(os.fspath(root))
    if stat_kind(root) is not ItemKind.DIRECTORY:
        raise FilesystemError(f"Workspace root '{root}' is not a directory")
    return _read_dir_node(root, depth, 0)


def _read_dir_node(path: str, depth: int, level: int) -> RawNode:
    node = RawNode(path, os.path.basename(path) or path)
    if depth <= level:
        return node
    entries = read_directory(path)

    children: List[RawNode] = []
    for name, kind in sorted(entries, key=lambda e: e[0]):
        child_path = os.path.join(path, name)
        if kind is ItemKind.FILE:
            children.append(RawNode(child_path, name))
        elif kind is ItemKind.DIRECTORY:
            try:
                children.append(_read_dir_node(child_path, depth, level + 1))
            except FilesystemError:
                # unreadable subdirectories are left out of the tree
                continue
    node.children = children
    return node


# Filtering
def in_keep_set(path: str, keep_set: Iterable[str]) -> bool:
    # substring test, so a directory is kept for any selected file below it
    return any(path in f for f in keep_set)


def filter_tree(
    node: RawNode,
    ignore_rules: Sequence = (),
    keep_set: Optional[Sequence[str]] = None,
    prune: bool = False,
) -> Optional[TreeNode]:
    """
    Drop ignored or pruned nodes from *node* and build renderable nodes.

    With *prune* set the ignore rules are bypassed and only ancestors of the
    paths in *keep_set* survive. Returns None when *node* itself is dropped.
    """
    ignored = False if prune else is_ignored(node.path, ignore_rules)
    pruned = prune and not in_keep_set(node.path, keep_set or ())
    if ignored or pruned:
        return None

    if not node.children:
        return TreeNode(node.name)

    children = []
    for child in node.children:
        kept = filter_tree(child, ignore_rules, keep_set, prune)
        if kept is not None:
            children.append(kept)
    return TreeNode(node.name + "/", children)


def _segments(path: str) -> int:
    return len(os.path.normpath(path).rstrip(os.sep).split(os.sep))


def max_selected_depth(root: str, files: Iterable[str]) -> int:
    root_depth = _segments(root)
    max_depth = 0
    for f in files:
        max_depth = max(max_depth, _segments(f) - root_depth)
    return max_depth


def directory_tree_depth(prune: bool, depth: int, root: str, files: Iterable[str]) -> int:
    return max_selected_depth(root, files) if prune else depth


# Rendering
def render_tree(node: Optional[TreeNode]) -> str:
    """
    Return an ASCII tree (à la the Unix ``tree`` utility).

    Children keep their order and use ``├──``, ``└──``, ``│   `` connectors.
    """
    if node is None:
        raise ValueError("Cannot render a tree that was filtered out entirely")

    lines: List[str] = [node.label]

    def _walk(children: Optional[List[TreeNode]], prefix: str = "") -> None:
        if not children:
            return
        for idx, child in enumerate(children):
            last = idx == len(children) - 1
            connector = "└── " if last else "├── "
            lines.append(f"{prefix}{connector}{child.label}")
            _walk(child.children, prefix + ("    " if last else "│   "))

    _walk(node.children)
    return "\n".join(lines) + "\n"


def generate_project_tree(
    root: str,
    depth: int,
    ignore_file: str = ".gitignore",
    files: Sequence[str] = (),
    prune: bool = False,
    ignore_syntax: str = LITERAL,
    verbose: bool = False,
) -> str:
    """Build the project tree string for *root*; empty if nothing survives."""
    root = os.path.abspath(root)
    ignore_rules = load_ignore_rules(os.path.join(root, ignore_file), ignore_syntax, root)
    tree_depth = directory_tree_depth(prune, depth, root, files)
    if verbose:
        echo(
            f"[commanderv] Project tree: depth {tree_depth}, "
            f"{len(ignore_rules)} ignore rule(s), prune={prune}"
        )

    raw = read_directory_tree(root, tree_depth)
    filtered = filter_tree(raw, ignore_rules, files, prune)
    if filtered is None:
        if verbose:
            warn(f"[commanderv] - Project tree for {root} is empty after filtering")
        return ""
    return render_tree(filtered)
