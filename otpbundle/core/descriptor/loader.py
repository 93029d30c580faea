from __future__ import annotations

import glob
import os
import tempfile
from typing import Optional

from otpbundle.core.descriptor.models import AppDescriptor
from otpbundle.core.descriptor.terms import TermSyntaxError, format_document, parse_file
from otpbundle.core.errors import DescriptorLoadError

__all__ = [
    "APP_EXT",
    "APP_SRC_EXT",
    "is_app_src",
    "app_src_to_app",
    "app_stem",
    "load_descriptor",
    "write_descriptor",
    "find_descriptor",
]


APP_EXT = ".app"
APP_SRC_EXT = ".app.src"


def is_app_src(path: str) -> bool:
    return os.path.basename(str(path)).endswith(APP_SRC_EXT)


def app_src_to_app(path: str) -> str:
    """`src/foo.app.src` -> `src/foo.app` (sibling, canonical extension)."""
    path = str(path)
    if not is_app_src(path):
        raise ValueError(f"not an app template: {path}")
    return path[: -len(".src")]


def app_stem(path: str) -> str:
    base = os.path.basename(str(path))
    for ext in (APP_SRC_EXT, APP_EXT):
        if base.endswith(ext):
            return base[: -len(ext)]
    return base


def load_descriptor(path: str) -> AppDescriptor:
    try:
        terms = parse_file(path)
    except FileNotFoundError:
        raise DescriptorLoadError(f"Failed to load app file {path}: enoent", path=str(path), reason="enoent") from None
    except (OSError, UnicodeDecodeError) as e:
        raise DescriptorLoadError(f"Failed to load app file {path}: {e}", path=str(path), reason=str(e)) from e
    except TermSyntaxError as e:
        raise DescriptorLoadError(f"Failed to load app file {path}: {e}", path=str(path), reason=str(e)) from e

    if len(terms) != 1:
        reason = f"expected exactly one term, found {len(terms)}"
        raise DescriptorLoadError(f"Failed to load app file {path}: {reason}", path=str(path), reason=reason)
    try:
        return AppDescriptor.from_term(terms[0])
    except ValueError as e:
        raise DescriptorLoadError(f"Failed to load app file {path}: {e}", path=str(path), reason=str(e)) from e


def _file_mode() -> int:
    # mkstemp creates 0600; published descriptors get the usual umask-derived mode
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_descriptor(path: str, descriptor: AppDescriptor) -> None:
    """Replace `path` with the serialised descriptor via temp file + rename."""
    text = format_document(descriptor.to_term())
    dirname = os.path.dirname(str(path)) or "."
    os.makedirs(dirname, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".tmp_", suffix=APP_EXT, dir=dirname)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        os.chmod(tmp, _file_mode())
        os.replace(tmp, path)
    finally:
        if os.path.exists(tmp):
            os.remove(tmp)


def find_descriptor(root: str = ".") -> Optional[str]:
    for pattern in (os.path.join(root, "ebin", "*" + APP_EXT), os.path.join(root, "src", "*" + APP_SRC_EXT)):
        found = sorted(glob.glob(pattern))
        if found:
            return found[0]
    return None
