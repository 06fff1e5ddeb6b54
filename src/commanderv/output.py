"""
Assemble the clipboard artifact: project tree plus comment-wrapped files.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Sequence

from colorama import Fore

from .core import (
    EmptySelectionError,
    OrderingPolicy,
    classify_paths,
    echo,
    read_bytes,
    resolve_selection,
)
from .tree import generate_project_tree


@dataclass
class ContextResult:
    text: str
    files: List[str]

    @property
    def file_count(self) -> int:
        return len(self.files)

    @property
    def char_count(self) -> int:
        return len(self.text)


def read_file_contents(paths: Iterable[str]) -> List[str]:
    return [read_bytes(p).decode("utf-8", errors="replace") for p in paths]


def relative_file_paths(paths: Iterable[str], root: str) -> List[str]:
    rel: List[str] = []
    for p in paths:
        try:
            rel.append(Path(p).relative_to(root).as_posix())
        except ValueError:
            rel.append(Path(p).as_posix())
    return rel


def wrap_with_comments(
    labels: Sequence[str],
    contents: Sequence[str],
    comment_at_begin: str,
    comment_at_end: str,
) -> List[str]:
    """Surround each content block with its begin/end comment, ``$file`` filled in."""
    return [
        f"{comment_at_begin.replace('$file', label)}\n{content}\n"
        f"{comment_at_end.replace('$file', label)}\n"
        for label, content in zip(labels, contents)
    ]


def format_result(
    project_tree: str,
    blocks: Sequence[str],
    include_separator: bool = True,
    separator_character: str = "-",
    separator_length: int = 80,
    wrap_in_code_block: bool = False,
) -> str:
    parts: List[str] = []
    if wrap_in_code_block:
        parts.append("```\n")
    if project_tree:
        parts.append(f"{project_tree}\n\n")

    if include_separator:
        separator = "\n" + separator_character * separator_length + "\n\n"
    else:
        separator = "\n\n"
    parts.append(separator.join(blocks))

    if wrap_in_code_block:
        parts.append("\n```")
    return "".join(parts)


def build_context(
    raw_paths: Iterable[str],
    root: str,
    config: Mapping[str, Any],
    verbose: bool = False,
) -> ContextResult:
    """
    Run the whole selection → tree → contents pipeline for *raw_paths*.

    Raises :class:`EmptySelectionError` when there is nothing to join and lets
    :class:`AllBinaryError` and :class:`FilesystemError` through untouched, so
    a failure never yields a partial artifact.
    """
    raw_paths = list(raw_paths)
    if not raw_paths:
        raise EmptySelectionError("No file or folder selected.")

    root = os.path.abspath(root)
    items = classify_paths(raw_paths)
    order = OrderingPolicy.from_config(config.get("orderFilesBy"))
    files = resolve_selection(items, order)
    if not files:
        raise EmptySelectionError("No file or folder selected.")
    if verbose:
        echo(f"[commanderv] {len(raw_paths)} selected, {len(files)} text file(s) ({order.value})")

    project_tree = ""
    if config.get("includeProjectTree"):
        project_tree = generate_project_tree(
            root,
            int(config.get("projectTreeDepth", 0)),
            config.get("ignoreFile") or ".gitignore",
            files,
            bool(config.get("pruneProjectTree")),
            config.get("ignoreSyntax") or "literal",
            verbose=verbose,
        )

    contents = read_file_contents(files)
    labels = relative_file_paths(files, root)
    blocks = wrap_with_comments(
        labels,
        contents,
        config.get("commentAtFileBegin", ""),
        config.get("commentAtFileEnd", ""),
    )
    text = format_result(
        project_tree,
        blocks,
        bool(config.get("includeSeparator")),
        config.get("separatorCharacter", "-"),
        int(config.get("separatorLength", 0)),
        bool(config.get("wrapInCodeBlock")),
    )
    if verbose:
        echo(f"[commanderv] Assembled {len(files)} file(s), {len(text)} chars", Fore.GREEN)
    return ContextResult(text, files)
