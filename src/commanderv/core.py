"""
Core selection logic for commanderv.

Turns a raw selection of files and folders into the ordered, de-duplicated
list of text files whose contents end up in the clipboard artifact.
"""

from __future__ import annotations

import enum
import os
import stat
import sys
import unicodedata
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from colorama import Fore, Style, init as colorama_init

colorama_init()

PathLike = Union[str, "os.PathLike[str]"]


# Exceptions
class CommanderError(Exception):
    """Base exception for commanderv errors."""


class FilesystemError(CommanderError):
    """Raised when a stat, read or directory listing fails."""


class PathNotFoundError(FilesystemError):
    """Raised when a selected path does not exist."""


class AllBinaryError(CommanderError):
    """Raised when every selected file or folder turned out to be binary."""

    def __init__(self, paths: Sequence[str]):
        super().__init__("Commander V does not join binary files")
        self.paths = list(paths)


class EmptySelectionError(CommanderError):
    """Raised when nothing was selected at all."""


class ConfigFileError(CommanderError):
    """Raised when the local config file cannot be used."""


class OutputError(CommanderError):
    """Raised when the artifact cannot be written to its destination."""


# Console helpers
def echo(msg: str, colour: str = "", *, err: bool = False) -> None:
    stream = sys.stderr if err else sys.stdout
    if colour:
        msg = colour + msg + Style.RESET_ALL
    print(msg, file=stream)


def warn(msg: str) -> None:
    echo(msg, Fore.YELLOW)


# Data model
class ItemKind(enum.Enum):
    FILE = "file"
    DIRECTORY = "directory"


class OrderingPolicy(enum.Enum):
    TREE_ORDER = "treeOrder"
    SELECTION_ORDER = "selectionOrder"

    @classmethod
    def from_config(cls, value: object) -> "OrderingPolicy":
        # anything that is not explicitly treeOrder keeps the selection order
        if value == cls.TREE_ORDER.value or value is cls.TREE_ORDER:
            return cls.TREE_ORDER
        return cls.SELECTION_ORDER


@dataclass(frozen=True)
class SelectedItem:
    kind: ItemKind
    path: str
    # text files found while classifying a directory, reused when resolving
    files: Optional[Tuple[str, ...]] = field(default=None, compare=False, repr=False)


# Filesystem access
def is_binary(data: bytes) -> bool:
    """A buffer is binary as soon as it holds a single NUL byte."""
    return b"\0" in data


def _fs_error(action: str, path: str, exc: OSError) -> FilesystemError:
    if isinstance(exc, FileNotFoundError):
        return PathNotFoundError(f"Path '{path}' does not exist")
    return FilesystemError(f"Could not {action} '{path}': {exc}")


def read_bytes(path: str) -> bytes:
    try:
        with open(path, "rb") as fh:
            return fh.read()
    except OSError as e:
        raise _fs_error("read file", path, e) from e


def stat_kind(path: str) -> Optional[ItemKind]:
    """Return FILE or DIRECTORY for *path*, None for anything else."""
    try:
        mode = os.stat(path).st_mode
    except OSError as e:
        raise _fs_error("stat", path, e) from e
    if stat.S_ISREG(mode):
        return ItemKind.FILE
    if stat.S_ISDIR(mode):
        return ItemKind.DIRECTORY
    return None


def read_directory(path: str) -> List[Tuple[str, Optional[ItemKind]]]:
    """List ``(name, kind)`` pairs in enumeration order; symlinks have no kind."""
    entries: List[Tuple[str, Optional[ItemKind]]] = []
    try:
        with os.scandir(path) as it:
            for entry in it:
                if entry.is_file(follow_symlinks=False):
                    kind: Optional[ItemKind] = ItemKind.FILE
                elif entry.is_dir(follow_symlinks=False):
                    kind = ItemKind.DIRECTORY
                else:
                    kind = None
                entries.append((entry.name, kind))
    except OSError as e:
        raise _fs_error("read directory", path, e) from e
    return entries


# Directory expansion
def expand_directory(dir_path: PathLike) -> List[str]:
    """
    Recursively collect every non-binary file below *dir_path*.

    Files come out in filesystem enumeration order, each subdirectory's files
    spliced in depth-first where the subdirectory was met. Any listing or read
    failure propagates as :class:`FilesystemError`.
    """
    dir_path = os.fspath(dir_path)
    found: List[str] = []
    for name, kind in read_directory(dir_path):
        child = os.path.join(dir_path, name)
        if kind is ItemKind.FILE:
            if not is_binary(read_bytes(child)):
                found.append(child)
        elif kind is ItemKind.DIRECTORY:
            found.extend(expand_directory(child))
    return found


# Selection
def classify_paths(raw_paths: Iterable[PathLike]) -> List[SelectedItem]:
    """
    Sort raw selection paths into files and directories worth joining.

    Binary files, and directories without a single text file, are rejected.
    If everything was rejected for that reason :class:`AllBinaryError` is
    raised so callers can tell it apart from an empty selection.
    """
    accepted: List[SelectedItem] = []
    rejected: List[str] = []

    for raw in raw_paths:
        path = os.path.abspath(os.fspath(raw))
        kind = stat_kind(path)
        if kind is ItemKind.FILE:
            if is_binary(read_bytes(path)):
                rejected.append(path)
            else:
                accepted.append(SelectedItem(ItemKind.FILE, path))
        elif kind is ItemKind.DIRECTORY:
            files = expand_directory(path)
            if files:
                accepted.append(SelectedItem(ItemKind.DIRECTORY, path, tuple(files)))
            else:
                rejected.append(path)

    if rejected and not accepted:
        raise AllBinaryError(rejected)
    return accepted


# ASCII punctuation and symbols in root collation order
_PUNCT_ORDER = "_-,;:!?.'\"()[]{}@*/\\&#%`^+<=>|~$"
_PUNCT_RANK = {ch: i for i, ch in enumerate(_PUNCT_ORDER)}


def _char_weight(ch: str) -> Tuple[int, int]:
    if ch in _PUNCT_RANK:
        return (1, _PUNCT_RANK[ch])
    category = unicodedata.category(ch)[0]
    if category == "Z" or ch.isspace():
        return (0, ord(ch))
    if category == "P":
        return (1, len(_PUNCT_ORDER) + ord(ch))
    if category == "S":
        return (2, ord(ch))
    if category == "N":
        return (3, ord(ch))
    return (4, ord(ch))


def _collation_key(path: str) -> Tuple[Tuple[int, int], ...]:
    """
    Primary-strength sort key: case and accents are ignored, and whitespace
    sorts before punctuation, then symbols, digits and letters.
    """
    decomposed = unicodedata.normalize("NFKD", path)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return tuple(_char_weight(ch) for ch in stripped.casefold())


def sort_tree_order(paths: Iterable[str]) -> List[str]:
    return sorted(paths, key=_collation_key)


def resolve_selection(
    items: Iterable[SelectedItem],
    order_by: OrderingPolicy = OrderingPolicy.TREE_ORDER,
) -> List[str]:
    """Expand *items* into a de-duplicated list of text file paths."""
    selected: Dict[str, None] = {}
    for item in items:
        if item.kind is ItemKind.FILE:
            selected.setdefault(item.path, None)
        elif item.kind is ItemKind.DIRECTORY:
            files = item.files if item.files is not None else expand_directory(item.path)
            for path in files:
                selected.setdefault(path, None)

    ordered = list(selected)
    if order_by is OrderingPolicy.TREE_ORDER:
        ordered = sort_tree_order(ordered)
    return ordered
