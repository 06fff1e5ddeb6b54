import os

import pytest

from commanderv import core
from commanderv.core import (
    AllBinaryError,
    FilesystemError,
    ItemKind,
    OrderingPolicy,
    PathNotFoundError,
    SelectedItem,
    classify_paths,
    expand_directory,
    is_binary,
    resolve_selection,
    sort_tree_order,
)

from .conftest import write


def test_is_binary_on_nul_byte():
    assert is_binary(b"abc\x00def")
    assert not is_binary(b"plain text\n")
    assert not is_binary(b"")
    # utf-16 text carries NULs and is treated as binary
    assert is_binary("hi".encode("utf-16-le"))


def test_expand_directory_skips_binaries_and_recurses(workspace):
    found = expand_directory(workspace / "src")
    assert sorted(os.path.basename(p) for p in found) == ["B.py", "a.py"]

    everything = expand_directory(workspace)
    names = {os.path.relpath(p, workspace) for p in everything}
    assert os.path.join("node_modules", "pkg", "index.js") in names
    assert os.path.join("src", "logo.png") not in names


def test_expand_directory_only_binaries_is_empty(tmp_path):
    write(tmp_path / "bin" / "a.bin", b"\x00")
    write(tmp_path / "bin" / "deep" / "b.bin", b"x\x00y")
    assert expand_directory(tmp_path / "bin") == []


def test_expand_directory_propagates_listing_errors(tmp_path, monkeypatch):
    def boom(path):
        raise PermissionError(13, "Permission denied", path)

    monkeypatch.setattr(core.os, "scandir", boom)
    with pytest.raises(FilesystemError):
        expand_directory(tmp_path)


def test_dedup_directory_and_contained_file(tmp_path):
    d = tmp_path / "D"
    a = write(d / "a.txt", "a\n")
    items = classify_paths([d, a])
    resolved = resolve_selection(items, OrderingPolicy.SELECTION_ORDER)
    assert resolved == [str(a)]


def test_resolve_is_idempotent(workspace):
    raw = [workspace / "docs", workspace / "src"]
    first = resolve_selection(classify_paths(raw), OrderingPolicy.TREE_ORDER)
    second = resolve_selection(classify_paths(raw), OrderingPolicy.TREE_ORDER)
    assert first == second
    assert len(first) == 3


def test_single_binary_file_signals_all_binary(workspace):
    png = workspace / "src" / "logo.png"
    with pytest.raises(AllBinaryError) as excinfo:
        classify_paths([png])
    assert excinfo.value.paths == [str(png)]
    assert "does not join binary files" in str(excinfo.value)


def test_binary_only_directory_signals_all_binary(tmp_path):
    write(tmp_path / "assets" / "a.bin", b"\x00")
    with pytest.raises(AllBinaryError):
        classify_paths([tmp_path / "assets"])


def test_binary_mixed_with_text_is_dropped(workspace):
    png = workspace / "src" / "logo.png"
    readme = workspace / "docs" / "readme.md"
    items = classify_paths([png, readme])
    assert items == [SelectedItem(ItemKind.FILE, str(readme))]


def test_empty_selection_is_not_all_binary():
    assert classify_paths([]) == []


def test_missing_path_raises_not_found(tmp_path):
    with pytest.raises(PathNotFoundError):
        classify_paths([tmp_path / "nope.txt"])
    assert issubclass(PathNotFoundError, FilesystemError)


def test_tree_order_is_case_insensitive():
    paths = ["/a/B.txt", "/a/a.txt", "/a/C.txt"]
    assert sort_tree_order(paths) == ["/a/a.txt", "/a/B.txt", "/a/C.txt"]


def test_tree_order_ignores_accents():
    assert sort_tree_order(["/x/f.txt", "/x/é.txt", "/x/d.txt"]) == [
        "/x/d.txt",
        "/x/é.txt",
        "/x/f.txt",
    ]


def test_selection_order_keeps_input_order(tmp_path):
    b = write(tmp_path / "b.txt", "b")
    a = write(tmp_path / "a.txt", "a")
    items = classify_paths([b, a])
    assert resolve_selection(items, OrderingPolicy.SELECTION_ORDER) == [str(b), str(a)]
    assert resolve_selection(items, OrderingPolicy.TREE_ORDER) == [str(a), str(b)]


def test_selection_order_splices_directory_at_its_position(tmp_path):
    first = write(tmp_path / "z_first.txt", "1")
    write(tmp_path / "dir" / "only.txt", "2")
    last = write(tmp_path / "a_last.txt", "3")
    items = classify_paths([first, tmp_path / "dir", last])
    assert resolve_selection(items, OrderingPolicy.SELECTION_ORDER) == [
        str(first),
        str(tmp_path / "dir" / "only.txt"),
        str(last),
    ]


def test_resolve_expands_uncached_directory_items(workspace):
    item = SelectedItem(ItemKind.DIRECTORY, str(workspace / "src"))
    resolved = resolve_selection([item])
    assert [os.path.basename(p) for p in resolved] == ["a.py", "B.py"]


@pytest.mark.parametrize(
    "value, expected",
    [
        ("treeOrder", OrderingPolicy.TREE_ORDER),
        ("selectionOrder", OrderingPolicy.SELECTION_ORDER),
        ("somethingElse", OrderingPolicy.SELECTION_ORDER),
        (None, OrderingPolicy.SELECTION_ORDER),
        (OrderingPolicy.TREE_ORDER, OrderingPolicy.TREE_ORDER),
    ],
)
def test_ordering_policy_from_config(value, expected):
    assert OrderingPolicy.from_config(value) is expected


def test_tree_order_ranks_punctuation_before_digits_and_letters():
    assert sort_tree_order(["/a/file1.txt", "/a/file_a.txt"]) == ["/a/file_a.txt", "/a/file1.txt"]
    assert sort_tree_order(["/a/b/x", "/a/b_c"]) == ["/a/b_c", "/a/b/x"]
    assert sort_tree_order(["/a/x.txt", "/a/x-y.txt", "/a/x y.txt"]) == [
        "/a/x y.txt",
        "/a/x-y.txt",
        "/a/x.txt",
    ]


def test_expand_directory_skips_symlinks(tmp_path):
    real = write(tmp_path / "outside" / "real.txt", "r")
    pkg = tmp_path / "pkg"
    kept = write(pkg / "kept.txt", "k")
    os.symlink(real, pkg / "link.txt")
    os.symlink(tmp_path / "outside", pkg / "linked_dir", target_is_directory=True)
    assert expand_directory(pkg) == [str(kept)]
