"""
Ignore-file handling for the project tree.

The default ``literal`` syntax turns each line of the ignore file into an
unanchored regular expression built from the escaped line, so a rule matches
whenever its text occurs anywhere in the candidate path. This is looser than
gitignore on purpose: ``node_modules`` also hides ``node_modules_helper.js``.
The opt-in ``gitwildmatch`` syntax hands the same lines to :mod:`pathspec`.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

import pathspec

LITERAL = "literal"
GITWILDMATCH = "gitwildmatch"
SYNTAXES = (LITERAL, GITWILDMATCH)

_META_RE = re.compile(r"[-/\\^$*+?.()|[\]{}]")


@dataclass(frozen=True)
class IgnoreRule:
    source: str
    pattern: "re.Pattern[str]"

    def matches(self, path: str) -> bool:
        return self.pattern.search(path) is not None


@dataclass(frozen=True)
class GlobIgnoreRule:
    """gitwildmatch rule set, matched against paths relative to *root*."""

    spec: "pathspec.GitIgnoreSpec"
    root: str

    def matches(self, path: str) -> bool:
        try:
            rel = os.path.relpath(path, self.root)
        except ValueError:
            return False
        if rel == os.curdir or rel.split(os.sep, 1)[0] == os.pardir:
            return False
        rel = rel.replace(os.sep, "/")
        if os.path.isdir(path):
            return self.spec.match_file(rel + "/")
        return self.spec.match_file(rel)


def compile_rule(line: str) -> IgnoreRule:
    escaped = _META_RE.sub(lambda m: "\\" + m.group(0), line)
    return IgnoreRule(line, re.compile(escaped))


def _rule_lines(text: str) -> List[str]:
    lines = (ln.strip() for ln in text.split("\n"))
    return [ln for ln in lines if ln and not ln.startswith("#")]


def read_ignore_file(ignore_file_path: str) -> Optional[str]:
    try:
        with open(ignore_file_path, "r", encoding="utf-8", errors="replace") as fh:
            return fh.read()
    except OSError:
        return None


def load_ignore_rules(
    ignore_file_path: str,
    syntax: str = LITERAL,
    root: Optional[str] = None,
) -> list:
    """
    Compile *ignore_file_path* into rules with a ``matches(path)`` method.

    A missing or unreadable ignore file simply yields no rules.
    """
    if syntax not in SYNTAXES:
        raise ValueError(f"Unknown ignore syntax '{syntax}'")
    text = read_ignore_file(ignore_file_path)
    if text is None:
        return []
    lines = _rule_lines(text)
    if syntax == GITWILDMATCH:
        if not lines:
            return []
        base = root if root is not None else os.path.dirname(os.path.abspath(ignore_file_path))
        return [GlobIgnoreRule(pathspec.GitIgnoreSpec.from_lines(lines), base)]
    return [compile_rule(ln) for ln in lines]


def is_ignored(path: str, rules: Iterable) -> bool:
    return any(rule.matches(path) for rule in rules)
