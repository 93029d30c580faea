from __future__ import annotations

import os

import pytest

from otpbundle.core.app.installer import InstallReport, InstallState, Installer, bundle_dirs
from otpbundle.core.config.models import BundleConfig
from otpbundle.core.errors import BinaryLinkError, InstallCollisionError, MissingVersionError, ModuleSetMismatchError
from tests.helpers.project import app_term, read_text, tree_files, write_beams, write_text


def _foo_project(project, *, vsn="1.0"):
    write_beams(project.ebin_dir, ["foo"])
    write_text(os.path.join(project.src_dir, "foo.erl"), "-module(foo).\n")
    return write_text(os.path.join(project.ebin_dir, "foo.app"), app_term("foo", vsn=vsn, modules=["foo"]))


def test_fresh_install_copies_bundle_dirs(project, config, target_dir, log):
    app = _foo_project(project)

    report = Installer(config=config, paths=project, logger=log).install(app)

    app_dir = os.path.join(target_dir, "foo-1.0")
    assert report.app_id == "foo-1.0"
    assert report.app_dir == app_dir
    assert report.states == [
        InstallState.START,
        InstallState.VALIDATED,
        InstallState.TARGET_RESOLVED,
        InstallState.COLLISION_CHECKED,
        InstallState.PURGED,
        InstallState.COPIED,
        InstallState.DONE,
    ]
    assert tree_files(app_dir) == ["ebin/foo.app", "ebin/foo.beam", "src/foo.erl"]
    assert report.copied == [os.path.join(app_dir, "ebin"), os.path.join(app_dir, "src")]
    assert log.messages("info") == [f"Installing: foo-1.0 to {target_dir}"]
    assert report.warnings == []


def test_install_from_template_records_preprocessing(project, config, target_dir, log):
    write_beams(project.ebin_dir, ["foo_app", "foo_sup"])
    src = write_text(os.path.join(project.src_dir, "foo.app.src"), app_term("foo", vsn="2.1"))

    report = Installer(config=config, paths=project, logger=log).install(src)

    assert report.states[:3] == [InstallState.START, InstallState.PREPROCESSED, InstallState.VALIDATED]
    assert report.app_file == os.path.join(project.src_dir, "foo.app")
    assert report.state == InstallState.DONE
    assert "src/foo.app" in tree_files(os.path.join(target_dir, "foo-2.1"))


def test_collision_without_force_leaves_install_untouched(project, config, target_dir, log):
    app = _foo_project(project)
    old = os.path.join(target_dir, "foo-1.0")
    write_text(os.path.join(old, "ebin", "stale.beam"), "old")
    write_text(os.path.join(old, "NOTES"), "keep me")
    before = {p: read_text(os.path.join(old, p)) for p in tree_files(old)}
    report = InstallReport()

    with pytest.raises(InstallCollisionError) as ei:
        Installer(config=config, paths=project, logger=log).install(app, report=report)

    assert ei.value.user_message == "foo-1.0 already exists. Installation failed."
    assert {p: read_text(os.path.join(old, p)) for p in tree_files(old)} == before
    assert report.state == InstallState.ABORTED
    assert InstallState.PURGED not in report.states
    assert log.messages("error") == [ei.value.user_message]


def test_force_replaces_previous_install(project, target_dir, log):
    app = _foo_project(project)
    old = os.path.join(target_dir, "foo-1.0")
    write_text(os.path.join(old, "ebin", "stale.beam"), "old")
    write_text(os.path.join(old, "priv", "old.cfg"), "old")
    write_text(os.path.join(old, "src", "foo.erl"), "stale source")

    report = Installer(config=BundleConfig(target=target_dir, force="1"), paths=project, logger=log).install(app)

    assert tree_files(old) == ["ebin/foo.app", "ebin/foo.beam", "src/foo.erl"]
    assert read_text(os.path.join(old, "src", "foo.erl")) == "-module(foo).\n"
    assert log.messages("warning") == ["foo-1.0 already exists, but forcibly overwriting."]
    assert report.warnings == log.messages("warning")
    assert report.state == InstallState.DONE


def test_validation_failure_creates_nothing(project, config, target_dir, log):
    app = _foo_project(project)
    write_beams(project.ebin_dir, ["foo_extra"])
    report = InstallReport()

    with pytest.raises(ModuleSetMismatchError):
        Installer(config=config, paths=project, logger=log).install(app, report=report)

    assert os.listdir(target_dir) == []
    assert report.states == [InstallState.START, InstallState.ABORTED]


def test_missing_version_aborts_before_touching_target(project, config, target_dir, log):
    app = _foo_project(project, vsn=None)
    with pytest.raises(MissingVersionError):
        Installer(config=config, paths=project, logger=log).install(app)
    assert os.listdir(target_dir) == []


def test_bundle_dirs_dedup_and_filter(project):
    os.makedirs(project.resolve("priv"))
    os.makedirs(project.resolve("scripts"))
    cfg = BundleConfig(sub_dirs=["priv", "scripts", "missing", "scripts"])
    assert bundle_dirs(cfg, project) == [project.resolve(d) for d in ("ebin", "src", "priv", "scripts")]


def test_extra_sub_dirs_are_copied(project, target_dir, log):
    app = _foo_project(project)
    write_text(project.resolve("scripts/run.sh"), "#!/bin/sh\n")
    cfg = BundleConfig(target=target_dir, sub_dirs=["scripts"])
    Installer(config=cfg, paths=project, logger=log).install(app)
    assert "scripts/run.sh" in tree_files(os.path.join(target_dir, "foo-1.0"))


def test_target_defaults_to_otp_lib_dir(project, otp_root, log):
    app = _foo_project(project)
    installer = Installer(config=BundleConfig(), paths=project, logger=log)
    assert installer.target_dir() == os.path.join(otp_root, "lib")
    report = installer.install(app)
    assert report.app_dir == os.path.join(otp_root, "lib", "foo-1.0")
    assert os.path.isdir(report.app_dir)


def test_app_bin_is_symlinked_into_otp_bin(project, target_dir, otp_root, tmp_path, log):
    app = _foo_project(project)
    write_text(project.resolve("bin/foo_tool"), "#!/bin/sh\n")
    cfg = BundleConfig(target=target_dir, sub_dirs=["bin"], app_bin=["bin/foo_tool"])

    report = Installer(config=cfg, paths=project, logger=log).install(app)

    link = str(tmp_path / "otp" / "bin" / "foo_tool")
    assert report.linked == [link]
    assert os.path.islink(link)
    assert os.readlink(link) == os.path.join(target_dir, "foo-1.0", "bin", "foo_tool")
    assert report.states[-2:] == [InstallState.BINARIES_LINKED, InstallState.DONE]


def test_failed_links_are_reported_after_all_attempts(project, target_dir, otp_root, tmp_path, log):
    app = _foo_project(project)
    write_text(project.resolve("bin/bad"), "x")
    write_text(project.resolve("bin/good"), "x")
    os.makedirs(tmp_path / "otp" / "bin" / "bad")
    cfg = BundleConfig(target=target_dir, sub_dirs=["bin"], app_bin=["bin/bad", "bin/good"])
    report = InstallReport()

    with pytest.raises(BinaryLinkError) as ei:
        Installer(config=cfg, paths=project, logger=log).install(app, report=report)

    assert ei.value.context["failed"] == ["bin/bad"]
    assert os.path.islink(tmp_path / "otp" / "bin" / "good")
    assert report.state == InstallState.ABORTED
    assert InstallState.BINARIES_LINKED not in report.states
    assert len(log.messages("error")) == 1


def test_relative_target_publishes_resolvable_links(project, otp_root, tmp_path, monkeypatch, log):
    app = _foo_project(project)
    write_text(project.resolve("bin/foo_tool"), "#!/bin/sh\n")
    monkeypatch.chdir(tmp_path)
    cfg = BundleConfig(target="build/lib", sub_dirs=["bin"], app_bin=["bin/foo_tool"])

    report = Installer(config=cfg, paths=project, logger=log).install(app)

    expected_app_dir = os.path.join(os.getcwd(), "build", "lib", "foo-1.0")
    assert report.target_dir == os.path.join(os.getcwd(), "build", "lib")
    assert report.app_dir == expected_app_dir
    [link] = report.linked
    assert os.readlink(link) == os.path.join(expected_app_dir, "bin", "foo_tool")
    assert read_text(link) == "#!/bin/sh\n"
