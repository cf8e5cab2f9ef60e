import os
import sys
from pathlib import Path

import pytest

from helpers import tree_snapshot, warnings_in, write_file
from zmpack.errors import UnsupportedEntryKindError
from zmpack.fs_walker import (
    EntryKind,
    copy_item,
    copy_tree,
    entry_kind,
    exists,
    join_under,
    remove_item,
    remove_tree_recursive,
)

needs_fifo = pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="requires os.mkfifo")


@pytest.mark.unit
def test_exists_never_raises(tmp_path: Path):
    write_file(tmp_path, "a.txt")
    assert exists(tmp_path / "a.txt") is True
    assert exists(tmp_path / "missing") is False
    assert exists(tmp_path / "a.txt" / "below-a-file") is False


@pytest.mark.unit
def test_entry_kind_classifies_paths(tmp_path: Path):
    write_file(tmp_path, "f.txt")
    (tmp_path / "d").mkdir()
    assert entry_kind(tmp_path / "f.txt") is EntryKind.FILE
    assert entry_kind(tmp_path / "d") is EntryKind.DIRECTORY
    assert entry_kind(tmp_path / "nope") is EntryKind.MISSING


@pytest.mark.unit
def test_copy_tree_mirrors_nested_directories(tmp_path: Path):
    src = tmp_path / "src"
    write_file(src, "a.txt", "hi")
    write_file(src, "sub/b.txt", "x")
    write_file(src, "sub/deeper/c.bin", "c")
    (src / "empty").mkdir()

    copied = copy_tree(src, tmp_path / "dst")

    assert copied == 3
    assert tree_snapshot(tmp_path / "dst") == tree_snapshot(src)
    assert (tmp_path / "dst" / "empty").is_dir()


@pytest.mark.unit
def test_copy_tree_requires_existing_parent(tmp_path: Path):
    src = tmp_path / "src"
    write_file(src, "a.txt")
    with pytest.raises(FileNotFoundError):
        copy_tree(src, tmp_path / "missing-parent" / "dst")


@pytest.mark.unit
def test_copy_tree_twice_is_idempotent_and_cumulative(tmp_path: Path):
    src = tmp_path / "src"
    dst = tmp_path / "dst"
    write_file(src, "a.txt", "one")
    write_file(dst, "unrelated.txt", "keep me")

    copy_tree(src, dst)
    first = tree_snapshot(dst)
    copy_tree(src, dst)
    assert tree_snapshot(dst) == first

    write_file(src, "new/b.txt", "two")
    write_file(src, "a.txt", "changed")
    copy_tree(src, dst)

    assert tree_snapshot(dst) == {
        "a.txt": b"changed",
        "new/b.txt": b"two",
        "unrelated.txt": b"keep me",
    }


@needs_fifo
@pytest.mark.unit
def test_copy_tree_warns_and_skips_special_entries(tmp_path: Path, log_records):
    src = tmp_path / "src"
    write_file(src, "nested/a.txt", "a")
    os.mkfifo(src / "nested" / "pipe")

    copy_tree(src, tmp_path / "dst")

    assert (tmp_path / "dst" / "nested" / "a.txt").read_text(encoding="utf-8") == "a"
    assert not os.path.lexists(tmp_path / "dst" / "nested" / "pipe")
    assert any("pipe" in w for w in warnings_in(log_records))


@pytest.mark.unit
def test_copy_item_skips_missing_source_with_warning(tmp_path: Path, log_records):
    assert copy_item(tmp_path / "nope.txt", tmp_path / "out.txt") is False
    assert not (tmp_path / "out.txt").exists()
    assert any("not exists" in w for w in warnings_in(log_records))


@pytest.mark.unit
def test_copy_item_copies_file_and_directory(tmp_path: Path):
    src = tmp_path / "src"
    dst = tmp_path / "dst"
    dst.mkdir()
    write_file(src, "a.txt", "hi")
    write_file(src, "sub/b.txt", "x")

    assert copy_item(src / "a.txt", dst / "a.txt") is True
    assert copy_item(src / "sub", dst / "sub") is True
    assert tree_snapshot(dst) == {"a.txt": b"hi", "sub/b.txt": b"x"}


@pytest.mark.unit
def test_remove_tree_recursive_removes_everything(tmp_path: Path):
    root = tmp_path / "victim"
    write_file(root, "a.txt")
    write_file(root, "x/y/z.txt")
    (root / "x" / "empty").mkdir()

    remove_tree_recursive(root)

    assert not root.exists()
    assert tmp_path.exists()


@needs_fifo
@pytest.mark.unit
def test_remove_tree_recursive_rejects_special_entries(tmp_path: Path):
    root = tmp_path / "victim"
    write_file(root, "a.txt")
    os.mkfifo(root / "pipe")

    with pytest.raises(UnsupportedEntryKindError) as excinfo:
        remove_tree_recursive(root)
    assert excinfo.value.path.name == "pipe"
    assert root.exists()


@pytest.mark.unit
@pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges on Windows")
def test_remove_tree_recursive_does_not_follow_symlinks(tmp_path: Path):
    outside = tmp_path / "outside"
    write_file(outside, "keep.txt", "safe")
    root = tmp_path / "victim"
    root.mkdir()
    os.symlink(outside, root / "link")

    remove_tree_recursive(root)

    assert not root.exists()
    assert (outside / "keep.txt").read_text(encoding="utf-8") == "safe"


@pytest.mark.unit
def test_remove_item_deletes_only_the_target(tmp_path: Path):
    write_file(tmp_path, "stale.log")
    write_file(tmp_path, "keep.txt")
    write_file(tmp_path, "build/out/a.o")
    write_file(tmp_path, "src/main.c")

    assert remove_item(tmp_path / "stale.log") is True
    assert remove_item(tmp_path / "build") is True

    assert sorted(p.name for p in tmp_path.iterdir()) == ["keep.txt", "src"]
    assert (tmp_path / "src" / "main.c").exists()


@pytest.mark.unit
def test_remove_item_missing_is_silent_noop(tmp_path: Path, log_records):
    assert remove_item(tmp_path / "never-existed") is False
    assert remove_item(tmp_path / "never-existed") is False
    assert warnings_in(log_records) == []


@needs_fifo
@pytest.mark.unit
def test_remove_item_warns_on_special_entry(tmp_path: Path, log_records):
    os.mkfifo(tmp_path / "pipe")
    assert remove_item(tmp_path / "pipe") is False
    assert os.path.lexists(tmp_path / "pipe")
    assert any("not either file or directory" in w for w in warnings_in(log_records))


@pytest.mark.unit
def test_join_under_keeps_absolute_names_inside_base(tmp_path: Path):
    assert join_under(tmp_path, "a/b.txt") == tmp_path / "a" / "b.txt"
    assert join_under(tmp_path, "/a/b.txt") == tmp_path / "a" / "b.txt"


@pytest.mark.unit
@pytest.mark.skipif(sys.platform == "win32", reason="POSIX absolute paths")
def test_join_under_drops_root_of_host_path():
    assert join_under(Path("/work/staging"), "/etc/passwd") == Path("/work/staging/etc/passwd")
