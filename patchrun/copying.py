"""Filesystem copy helpers that keep permission bits and symlinks intact."""

from __future__ import annotations

import contextlib
import errno
import os
import shutil
import stat
from typing import Iterator, Tuple, Union

PathLike = Union[str, "os.PathLike[str]"]

_TMP_SUFFIX = ".patchrun.tmp"


def copy_file_preserve(src_path: PathLike, dst_path: PathLike) -> None:
    """Copy a file, keeping its mode bits; symlinks are replicated, not followed.

    Missing parent directories of the destination are created.
    """
    src = os.fspath(src_path)
    dst = os.fspath(dst_path)
    info = os.lstat(src)
    os.makedirs(os.path.dirname(dst) or ".", 0o755, exist_ok=True)

    mode = info.st_mode
    if stat.S_ISLNK(mode):
        target = os.readlink(src)
        with contextlib.suppress(OSError):
            os.remove(dst)
        os.symlink(target, dst)
    elif stat.S_ISDIR(mode):
        raise IsADirectoryError(errno.EISDIR, "expected file, got directory", src)
    elif stat.S_ISREG(mode):
        _copy_regular(src, dst, stat.S_IMODE(mode) & 0o777)
    else:
        raise OSError(
            errno.EINVAL, f"unsupported file mode {stat.filemode(mode)}", src
        )


def _copy_regular(src: str, dst: str, perm: int) -> None:
    """Copy through a temporary sibling file, then move it into place."""
    tmp = dst + _TMP_SUFFIX
    with open(src, "rb") as source:
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, perm)
        try:
            with os.fdopen(fd, "wb") as target:
                shutil.copyfileobj(source, target)
            os.chmod(tmp, perm)
            os.replace(tmp, dst)
        except BaseException:
            with contextlib.suppress(OSError):
                os.remove(tmp)
            raise


def _walk(path: str) -> Iterator[Tuple[str, os.stat_result]]:
    """Yield every entry under path in lexical order without following links."""
    info = os.lstat(path)
    yield path, info
    if stat.S_ISDIR(info.st_mode):
        for name in sorted(os.listdir(path)):
            yield from _walk(os.path.join(path, name))


def copy_tree(src_root: PathLike, dst_root: PathLike) -> None:
    """Recursively copy a directory tree, replicating symlinks."""
    src_root = os.fspath(src_root)
    dst_root = os.fspath(dst_root)
    for path, info in _walk(src_root):
        rel = os.path.relpath(path, src_root)
        dst = os.path.normpath(os.path.join(dst_root, rel))
        mode = info.st_mode
        if stat.S_ISLNK(mode):
            target = os.readlink(path)
            os.makedirs(os.path.dirname(dst) or ".", 0o755, exist_ok=True)
            with contextlib.suppress(OSError):
                os.remove(dst)
            os.symlink(target, dst)
        elif stat.S_ISDIR(mode):
            os.makedirs(dst, (stat.S_IMODE(mode) & 0o777) | 0o700, exist_ok=True)
        else:
            copy_file_preserve(path, dst)


def ensure_writable_dir(path: PathLike) -> None:
    """Create the directory and its parents if they are missing."""
    os.makedirs(os.fspath(path), 0o755, exist_ok=True)