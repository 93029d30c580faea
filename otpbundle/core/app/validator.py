from __future__ import annotations

"""
Descriptor consistency checks.

WHY THIS FILE EXISTS:
The module list in `foo.app` must match ebin/*.beam exactly, and the
application name must match the file name. Checks return a CheckResult
instead of raising so callers decide how a failure propagates.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Tuple

from otpbundle.core.descriptor.ebin import list_compiled_modules
from otpbundle.core.descriptor.loader import app_stem
from otpbundle.core.descriptor.models import AppDescriptor
from otpbundle.core.errors import BundleError, MissingModulesError, ModuleSetMismatchError, NameMismatchError
from otpbundle.core.logger import get_logger


@dataclass(frozen=True)
class CheckResult:
    ok: bool
    error: Optional[BundleError] = None
    not_compiled: List[str] = field(default_factory=list)
    not_declared: List[str] = field(default_factory=list)

    def raise_for_error(self) -> None:
        if not self.ok and self.error is not None:
            raise self.error


OK = CheckResult(ok=True)


def _bullets(mods: Iterable[str]) -> str:
    return "".join(f"\t* {m}\n" for m in mods)


def validate_name(name: str, app_file: str, *, logger: Any = None) -> CheckResult:
    expected = app_stem(app_file)
    if expected == name:
        return OK
    err = NameMismatchError(
        f"Invalid {app_file}: name of application ({name}) must match filename.",
        app_file=str(app_file),
        name=str(name),
        expected=expected,
    )
    get_logger(logger).error(err.user_message)
    return CheckResult(ok=False, error=err)


def diff_modules(declared: Iterable[str], compiled: Iterable[str]) -> Tuple[List[str], List[str]]:
    """Returns (declared but not compiled, compiled but not declared), both sorted."""
    dec = {str(m) for m in declared}
    com = {str(m) for m in compiled}
    return sorted(dec - com), sorted(com - dec)


def validate_modules(name: str, declared: Optional[Iterable[str]], *, ebin_dir: str, logger: Any = None) -> CheckResult:
    log = get_logger(logger)
    if declared is None:
        err = MissingModulesError(f"Missing modules declaration in {name}.app", name=str(name))
        log.error(err.user_message)
        return CheckResult(ok=False, error=err)

    not_compiled, not_declared = diff_modules(declared, list_compiled_modules(ebin_dir))
    messages: List[str] = []
    if not_compiled:
        messages.append(f"One or more modules listed in {name}.app are not present in ebin/*.beam:\n{_bullets(not_compiled)}")
        log.error(messages[-1].rstrip("\n"))
    if not_declared:
        messages.append(f"One or more .beam files exist that are not listed in {name}.app:\n{_bullets(not_declared)}")
        log.error(messages[-1].rstrip("\n"))
    if not messages:
        return OK

    err = ModuleSetMismatchError(
        "".join(messages).rstrip("\n"),
        name=str(name),
        not_compiled=not_compiled,
        not_declared=not_declared,
    )
    return CheckResult(ok=False, error=err, not_compiled=not_compiled, not_declared=not_declared)


def validate_descriptor(desc: AppDescriptor, app_file: str, *, ebin_dir: str, logger: Any = None) -> CheckResult:
    res = validate_name(desc.name, app_file, logger=logger)
    if not res.ok:
        return res
    return validate_modules(desc.name, desc.modules, ebin_dir=ebin_dir, logger=logger)
