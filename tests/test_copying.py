import os
import stat
from unittest import mock

import pytest

from patchrun.copying import copy_file_preserve, copy_tree, ensure_writable_dir


def test_copy_file_preserve_regular(tmp_path):
    src = tmp_path / "src"
    dst = tmp_path / "other" / "nested" / "dst"
    src.write_bytes(b"hello")
    copy_file_preserve(src, dst)
    assert dst.read_bytes() == b"hello"


def test_copy_file_preserve_exec_bit(tmp_path):
    src = tmp_path / "src.sh"
    dst = tmp_path / "out" / "dst.sh"
    src.write_bytes(b"#!/bin/sh\n")
    os.chmod(src, 0o755)
    copy_file_preserve(src, dst)
    mode = stat.S_IMODE(os.stat(dst).st_mode)
    assert mode & 0o111
    assert mode == 0o755


def test_copy_file_preserve_symlink(tmp_path):
    target = tmp_path / "target"
    target.write_bytes(b"t")
    src = tmp_path / "link"
    os.symlink("target", src)
    dst = tmp_path / "out" / "link"
    copy_file_preserve(src, dst)
    assert os.path.islink(dst)
    assert os.readlink(dst) == "target"


def test_copy_file_preserve_replaces_existing_symlink(tmp_path):
    src = tmp_path / "link"
    os.symlink("new-target", src)
    dst = tmp_path / "dst"
    os.symlink("old-target", dst)
    copy_file_preserve(src, dst)
    assert os.readlink(dst) == "new-target"


def test_copy_tree(tmp_path):
    src = tmp_path / "src"
    (src / "a" / "b").mkdir(parents=True)
    (src / "a" / "b" / "c.txt").write_bytes(b"c")
    dst = tmp_path / "out"
    copy_tree(src, dst)
    assert (dst / "a" / "b" / "c.txt").read_bytes() == b"c"


def test_copy_file_preserve_source_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        copy_file_preserve(tmp_path / "nope", tmp_path / "out")


def test_copy_file_preserve_directory_as_file(tmp_path):
    src_dir = tmp_path / "dir"
    src_dir.mkdir()
    with pytest.raises(IsADirectoryError, match="expected file, got directory"):
        copy_file_preserve(src_dir, tmp_path / "out")


def test_copy_tree_with_symlink(tmp_path):
    src = tmp_path / "src"
    src.mkdir()
    (src / "real.txt").write_bytes(b"real")
    os.symlink("real.txt", src / "link")
    dst = tmp_path / "out"
    copy_tree(src, dst)
    assert os.path.islink(dst / "link")
    assert os.readlink(dst / "link") == "real.txt"
    assert (dst / "real.txt").read_bytes() == b"real"


def test_ensure_writable_dir_creates_and_is_idempotent(tmp_path):
    target = tmp_path / "a" / "b" / "c"
    ensure_writable_dir(target)
    assert target.is_dir()
    ensure_writable_dir(target)
    assert target.is_dir()


def test_ensure_writable_dir_rejects_existing_file(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_bytes(b"x")
    with pytest.raises(FileExistsError):
        ensure_writable_dir(blocker)


def test_copy_file_preserve_destination_through_file_fails(tmp_path):
    src = tmp_path / "src"
    src.write_bytes(b"hello")
    blocker = tmp_path / "blocker"
    blocker.write_bytes(b"x")
    with pytest.raises(OSError):
        copy_file_preserve(src, blocker / "sub" / "dst")
    assert blocker.read_bytes() == b"x"


def test_copy_write_failure_removes_temp_file(tmp_path):
    src = tmp_path / "src"
    src.write_bytes(b"payload")
    dst = tmp_path / "dst"
    failure = OSError(28, "No space left on device")
    with mock.patch("shutil.copyfileobj", side_effect=failure):
        with pytest.raises(OSError, match="No space left"):
            copy_file_preserve(src, dst)
    assert not os.path.exists(str(dst) + ".patchrun.tmp")
    assert not dst.exists()


def test_copy_rename_onto_directory_fails(tmp_path):
    src = tmp_path / "src"
    src.write_bytes(b"payload")
    dst = tmp_path / "dst"
    dst.mkdir()
    (dst / "x").write_bytes(b"x")
    with pytest.raises(OSError) as excinfo:
        copy_file_preserve(src, dst)
    assert not isinstance(excinfo.value, FileNotFoundError)
    assert not os.path.exists(str(dst) + ".patchrun.tmp")
    assert (dst / "x").read_bytes() == b"x"


def test_copy_tree_source_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        copy_tree(tmp_path / "definitely-not-a-real-path-xyz", tmp_path / "out")


def test_copy_file_preserve_unsupported_mode(tmp_path):
    fifo = tmp_path / "fifo"
    os.mkfifo(fifo)
    with pytest.raises(OSError, match="unsupported file mode"):
        copy_file_preserve(fifo, tmp_path / "dst")
    assert not (tmp_path / "dst").exists()


def test_copy_file_preserve_parent_is_file(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_bytes(b"x")
    src = tmp_path / "src"
    src.write_bytes(b"y")
    with pytest.raises(OSError):
        copy_file_preserve(src, blocker / "sub" / "out")