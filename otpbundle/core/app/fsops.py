from __future__ import annotations

import os
import shutil
from typing import Iterable, List

from otpbundle.core.errors import FilesystemError


def _fail(op: str, path: str, exc: OSError) -> FilesystemError:
    return FilesystemError(f"{op} failed for {path}: {exc.strerror or exc}", op=op, path=str(path), errno=exc.errno)


def rm_rf(path: str) -> None:
    """Remove a file, symlink or tree. A missing path is a no-op."""
    try:
        if os.path.islink(path) or os.path.isfile(path):
            os.remove(path)
        elif os.path.isdir(path):
            shutil.rmtree(path)
    except OSError as e:
        raise _fail("rm_rf", path, e) from e


def mkdir_p(path: str) -> None:
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise _fail("mkdir_p", path, e) from e


def cp_r(sources: Iterable[str], dest_dir: str) -> List[str]:
    """
    Copy each source into `dest_dir/<basename>` (like `cp -R src... dest`).
    Returns the created destination paths.
    """
    out: List[str] = []
    for src in sources:
        dst = os.path.join(dest_dir, os.path.basename(os.path.normpath(src)))
        try:
            if os.path.isdir(src):
                shutil.copytree(src, dst, symlinks=True)
            else:
                shutil.copy2(src, dst)
        except OSError as e:  # shutil.Error included
            raise _fail("cp_r", src, e) from e
        out.append(dst)
    return out


def ln_sf(target: str, link_dir: str) -> str:
    """Create or replace `link_dir/<basename(target)>` as a symlink to `target`."""
    link = os.path.join(link_dir, os.path.basename(os.path.normpath(target)))
    try:
        if os.path.islink(link) or os.path.isfile(link):
            os.remove(link)
        os.symlink(target, link)
    except OSError as e:
        raise _fail("ln_sf", link, e) from e
    return link
