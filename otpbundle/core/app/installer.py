from __future__ import annotations

"""
Install transaction: validated descriptor -> <target>/<name>-<vsn>/.

WHY THIS FILE EXISTS:
Installing into a shared OTP lib dir must never replace a different install
of the same name-vsn unless forced, and must never merge into an old tree.
Each step is a hard gate; the first BundleError aborts the whole install.

There is no rollback: a failure after the purge leaves the app dir absent or
partially copied. Installs of the same name-vsn must be serialised by the
caller.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from otpbundle.core.app import fsops
from otpbundle.core.app.preprocess import resolve_app_file
from otpbundle.core.app.validator import validate_descriptor
from otpbundle.core.config.models import BundleConfig
from otpbundle.core.config.paths import ProjectPaths, otp_bin_dir, otp_lib_dir, otp_root_dir
from otpbundle.core.descriptor.loader import load_descriptor
from otpbundle.core.errors import BinaryLinkError, BundleError, InstallCollisionError, MissingVersionError
from otpbundle.core.logger import get_logger

DEFAULT_BUNDLE_DIRS = ("ebin", "src", "priv", "include")


class InstallState(str, Enum):
    START = "START"
    PREPROCESSED = "PREPROCESSED"
    VALIDATED = "VALIDATED"
    TARGET_RESOLVED = "TARGET_RESOLVED"
    COLLISION_CHECKED = "COLLISION_CHECKED"
    PURGED = "PURGED"
    COPIED = "COPIED"
    BINARIES_LINKED = "BINARIES_LINKED"
    DONE = "DONE"
    ABORTED = "ABORTED"


@dataclass
class InstallReport:
    app_file: str = ""
    app_id: str = ""
    target_dir: str = ""
    app_dir: str = ""
    states: List[InstallState] = field(default_factory=lambda: [InstallState.START])
    copied: List[str] = field(default_factory=list)
    linked: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def state(self) -> InstallState:
        return self.states[-1]

    def advance(self, state: InstallState) -> None:
        self.states.append(state)


def bundle_dirs(config: BundleConfig, paths: ProjectPaths) -> List[str]:
    """Default + configured bundle dirs that exist under the project root, deduplicated."""
    seen: List[str] = []
    for d in list(DEFAULT_BUNDLE_DIRS) + list(config.sub_dirs):
        if d not in seen:
            seen.append(d)
    return [paths.resolve(d) for d in seen if os.path.exists(paths.resolve(d))]


class Installer:
    def __init__(self, *, config: BundleConfig, paths: Optional[ProjectPaths] = None, logger: Any = None):
        self.config = config
        self.paths = paths or ProjectPaths(".")
        self.logger = get_logger(logger)

    def target_dir(self) -> str:
        # always absolute: app_bin symlinks embed it
        if self.config.target:
            return os.path.abspath(self.config.target)
        return os.path.abspath(otp_lib_dir(otp_root_dir(self.config.otp_root)))

    def bin_dir(self) -> str:
        return otp_bin_dir(otp_root_dir(self.config.otp_root))

    def install(self, descriptor_path: str, *, report: Optional[InstallReport] = None) -> InstallReport:
        report = report if report is not None else InstallReport()
        try:
            self._run(descriptor_path, report)
        except BundleError:
            report.advance(InstallState.ABORTED)
            raise
        report.advance(InstallState.DONE)
        return report

    # ---- steps ----
    def _run(self, descriptor_path: str, report: InstallReport) -> None:
        app_file, preprocessed = resolve_app_file(descriptor_path, ebin_dir=self.paths.ebin_dir, logger=self.logger)
        report.app_file = app_file
        if preprocessed:
            report.advance(InstallState.PREPROCESSED)

        desc = load_descriptor(app_file)
        validate_descriptor(desc, app_file, ebin_dir=self.paths.ebin_dir, logger=self.logger).raise_for_error()
        report.advance(InstallState.VALIDATED)

        target = self.target_dir()
        report.target_dir = target
        report.advance(InstallState.TARGET_RESOLVED)

        if desc.version is None:
            raise MissingVersionError(f"Missing vsn in {app_file}; cannot construct install identity.", app_file=app_file, name=desc.name)
        app_id = desc.app_id
        report.app_id = app_id
        self.logger.info(f"Installing: {app_id} to {target}")

        app_dir = os.path.join(target, app_id)
        report.app_dir = app_dir
        if os.path.isdir(app_dir):
            if not self.config.force:
                err = InstallCollisionError(f"{app_id} already exists. Installation failed.", app_id=app_id, app_dir=app_dir)
                self.logger.error(err.user_message)
                raise err
            msg = f"{app_id} already exists, but forcibly overwriting."
            self.logger.warning(msg)
            report.warnings.append(msg)
        report.advance(InstallState.COLLISION_CHECKED)

        fsops.rm_rf(app_dir)
        fsops.mkdir_p(app_dir)
        report.advance(InstallState.PURGED)

        report.copied = fsops.cp_r(bundle_dirs(self.config, self.paths), app_dir)
        report.advance(InstallState.COPIED)

        if self.config.app_bin:
            self._link_binaries(app_dir, report)
            report.advance(InstallState.BINARIES_LINKED)

    def _link_binaries(self, app_dir: str, report: InstallReport) -> None:
        bin_dir = self.bin_dir()
        failed: List[str] = []
        for name in self.config.app_bin:
            try:
                report.linked.append(fsops.ln_sf(os.path.join(app_dir, name), bin_dir))
            except BundleError as e:
                self.logger.error(f"Failed to link {name} into {bin_dir}: {e.user_message}")
                failed.append(name)
        if failed:
            raise BinaryLinkError(
                f"Failed to link {len(failed)} binaries into {bin_dir}: {', '.join(failed)}",
                bin_dir=bin_dir,
                failed=failed,
                linked=list(report.linked),
            )
