from __future__ import annotations

"""
Template (`.app.src`) preprocessing.

WHY THIS FILE EXISTS:
Authors keep `src/foo.app.src` without a module list. Before validation the
live module set from ebin/ is injected and the finalized `foo.app` written
next to the template.
"""

from typing import Any, Tuple

from otpbundle.core.descriptor.ebin import list_compiled_modules
from otpbundle.core.descriptor.loader import app_src_to_app, is_app_src, load_descriptor, write_descriptor
from otpbundle.core.errors import DescriptorLoadError, FilesystemError
from otpbundle.core.logger import get_logger


def preprocess(app_src: str, *, ebin_dir: str, logger: Any = None) -> str:
    """Write the finalized descriptor for `app_src` and return its path."""
    log = get_logger(logger)
    try:
        desc = load_descriptor(app_src)
    except DescriptorLoadError as e:
        reason = e.context.get("reason", e.user_message)
        raise DescriptorLoadError(f"Failed to read {app_src} for preprocessing: {reason}", path=str(app_src), reason=reason) from e

    final = desc.with_modules(list_compiled_modules(ebin_dir))
    app_file = app_src_to_app(app_src)
    try:
        write_descriptor(app_file, final)
    except OSError as e:
        raise FilesystemError(f"Failed to write {app_file}: {e}", op="write", path=str(app_file)) from e
    log.debug(f"Preprocessed {app_src} -> {app_file} ({len(final.modules or [])} modules)")
    return app_file


def resolve_app_file(path: str, *, ebin_dir: str, logger: Any = None) -> Tuple[str, bool]:
    """Returns (finalized_path, was_preprocessed)."""
    if is_app_src(path):
        return preprocess(path, ebin_dir=ebin_dir, logger=logger), True
    return str(path), False
