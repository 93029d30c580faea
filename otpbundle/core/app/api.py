from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from otpbundle.core.app.installer import InstallReport, Installer
from otpbundle.core.app.preprocess import resolve_app_file
from otpbundle.core.app.validator import validate_descriptor
from otpbundle.core.config.models import BundleConfig
from otpbundle.core.config.paths import ProjectPaths
from otpbundle.core.descriptor.loader import app_src_to_app, is_app_src, load_descriptor
from otpbundle.core.errors import BundleError
from otpbundle.core.logger import get_logger
from otpbundle.core.ops_log import InstallJournal

# validators and the collision check log these themselves
_LOGGED_AT_SOURCE = frozenset({"name_mismatch", "missing_modules", "module_set_mismatch", "install_collision"})


@dataclass(frozen=True)
class OperationResult:
    ok: bool
    op: str
    error: Optional[BundleError] = None
    app_file: Optional[str] = None
    report: Optional[InstallReport] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"ok": self.ok, "op": self.op, "app_file": self.app_file}
        if self.error is not None:
            out["error"] = self.error.to_dict()
        if self.report is not None:
            out["app_id"] = self.report.app_id
            out["app_dir"] = self.report.app_dir
            out["states"] = [s.value for s in self.report.states]
        return out


def _finish(res: OperationResult, journal: Optional[InstallJournal]) -> OperationResult:
    if journal is not None:
        details = res.to_dict()
        details.pop("ok", None)
        details.pop("op", None)
        journal.log(op=res.op, outcome="ok" if res.ok else "failed", details=details)
    return res


def compile_app(
    config: BundleConfig,
    descriptor_path: str,
    *,
    paths: Optional[ProjectPaths] = None,
    logger: Any = None,
    journal: Optional[InstallJournal] = None,
) -> OperationResult:
    """Preprocess a template if needed, then validate the finalized descriptor."""
    paths = paths or ProjectPaths(".")
    log = get_logger(logger)
    app_file: Optional[str] = None
    try:
        app_file, _ = resolve_app_file(descriptor_path, ebin_dir=paths.ebin_dir, logger=log)
        desc = load_descriptor(app_file)
        validate_descriptor(desc, app_file, ebin_dir=paths.ebin_dir, logger=log).raise_for_error()
    except BundleError as e:
        if e.code not in _LOGGED_AT_SOURCE:
            log.error(e.user_message)
        return _finish(OperationResult(ok=False, op="compile", error=e, app_file=app_file), journal)
    return _finish(OperationResult(ok=True, op="compile", app_file=app_file), journal)


def clean_app(
    config: BundleConfig,
    descriptor_path: str,
    *,
    logger: Any = None,
    journal: Optional[InstallJournal] = None,
) -> OperationResult:
    """Remove the `.app` generated from a template. Finalized descriptors are left alone."""
    log = get_logger(logger)
    if not is_app_src(descriptor_path):
        return _finish(OperationResult(ok=True, op="clean", app_file=str(descriptor_path)), journal)
    app_file = app_src_to_app(descriptor_path)
    try:
        os.remove(app_file)
        log.debug(f"Removed {app_file}")
    except FileNotFoundError:
        pass
    except OSError as e:
        log.warning(f"Could not remove {app_file}: {e}")
    return _finish(OperationResult(ok=True, op="clean", app_file=app_file), journal)


def install_app(
    config: BundleConfig,
    descriptor_path: str,
    *,
    paths: Optional[ProjectPaths] = None,
    logger: Any = None,
    journal: Optional[InstallJournal] = None,
) -> OperationResult:
    log = get_logger(logger)
    report = InstallReport()
    try:
        Installer(config=config, paths=paths, logger=log).install(descriptor_path, report=report)
    except BundleError as e:
        if e.code not in _LOGGED_AT_SOURCE:
            log.error(e.user_message)
        return _finish(OperationResult(ok=False, op="install", error=e, app_file=report.app_file or None, report=report), journal)
    return _finish(OperationResult(ok=True, op="install", app_file=report.app_file, report=report), journal)
