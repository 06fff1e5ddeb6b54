"""
CLI entrypoint for commanderv package.
"""
import argparse
import os
import sys
from pathlib import Path

import pyperclip
from colorama import Fore

from .config import load_config, merge_configurations
from .core import (
    AllBinaryError,
    CommanderError,
    EmptySelectionError,
    OutputError,
    echo,
    warn,
)
from .ignore import SYNTAXES
from .output import build_context


def _parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="commanderv",
        description="Join selected files (plus an optional project tree) into one clipboard-ready text.",
    )
    p.add_argument("paths", nargs="*", type=Path, help="Files and folders to join")
    p.add_argument("--root", type=Path, default=Path("."), help="Workspace root dir")
    p.add_argument(
        "--config",
        type=Path,
        help="JSON config file (default: v.config.json in the workspace root)",
    )
    p.add_argument(
        "--order",
        dest="orderFilesBy",
        choices=["treeOrder", "selectionOrder"],
        help="Order files alphabetically or as selected",
    )
    tree = p.add_mutually_exclusive_group()
    tree.add_argument(
        "--tree", dest="includeProjectTree", action="store_true", default=None,
        help="Prefix the output with the project tree",
    )
    tree.add_argument(
        "--no-tree", dest="includeProjectTree", action="store_false",
        help="Leave the project tree out",
    )
    p.add_argument(
        "--prune", dest="pruneProjectTree", action="store_true", default=None,
        help="Only show the selected files in the project tree",
    )
    p.add_argument("--depth", dest="projectTreeDepth", type=int, help="Project tree depth")
    p.add_argument("--ignore-file", dest="ignoreFile", help="Ignore file name (default .gitignore)")
    p.add_argument("--ignore-syntax", dest="ignoreSyntax", choices=SYNTAXES, help="How ignore lines match")
    dest = p.add_mutually_exclusive_group()
    dest.add_argument("--out", type=Path, help="Write to this file instead of the clipboard")
    dest.add_argument("--stdout", action="store_true", help="Print instead of copying to the clipboard")
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    return p.parse_args(argv)


_OVERRIDE_KEYS = (
    "orderFilesBy",
    "includeProjectTree",
    "pruneProjectTree",
    "projectTreeDepth",
    "ignoreFile",
    "ignoreSyntax",
)


def _cli_overrides(ns: argparse.Namespace) -> dict:
    return {k: getattr(ns, k) for k in _OVERRIDE_KEYS if getattr(ns, k) is not None}


def _deliver(text: str, ns: argparse.Namespace) -> str:
    if ns.stdout:
        sys.stdout.write(text + "\n")
        return "stdout"
    if ns.out:
        out_path = ns.out.resolve()
        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
            out_path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise OutputError(f"Could not write to output file '{out_path}': {e}")
        return str(out_path)
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        raise OutputError(f"Could not copy to the clipboard: {e}")
    return "your clipboard"


def main(argv=None) -> None:
    try:
        ns = _parse_args(argv)
        # same normalisation as the selected paths, symlinks kept
        root = Path(os.path.abspath(ns.root))

        if not ns.paths:
            echo("No file or folder selected.")
            return

        try:
            config = merge_configurations(load_config(root, ns.config), _cli_overrides(ns))
            if ns.verbose:
                echo(f"[commanderv] Workspace {root}")
            result = build_context([str(p) for p in ns.paths], str(root), config, ns.verbose)
            target = _deliver(result.text, ns)
        except AllBinaryError as e:
            warn(f"🤚 {e}")
            return
        except EmptySelectionError as e:
            echo(str(e))
            return
        except CommanderError as e:
            echo(f"Error: {e}", Fore.RED, err=True)
            sys.exit(1)

        noun = "file" if result.file_count == 1 else "files"
        msg = f"✌️ Commander copied {result.file_count} {noun} ({result.char_count} chars) to {target}"
        if ns.stdout:
            echo(msg, Fore.GREEN, err=True)
        else:
            echo(msg, Fore.GREEN)

    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
