from __future__ import annotations

from otpbundle.core.errors import BundleError, ConfigError, InstallCollisionError, ModuleSetMismatchError, Severity


def test_errors_are_structured():
    e = InstallCollisionError("foo-1.0 already exists. Installation failed.", app_id="foo-1.0")
    assert isinstance(e, BundleError)
    assert str(e) == "foo-1.0 already exists. Installation failed."
    assert e.to_dict() == {
        "code": "install_collision",
        "user_message": "foo-1.0 already exists. Installation failed.",
        "severity": "ERROR",
        "context": {"app_id": "foo-1.0"},
    }


def test_config_errors_are_critical():
    assert ConfigError().severity == Severity.CRITICAL


def test_module_set_mismatch_exposes_lists():
    e = ModuleSetMismatchError(not_compiled=["a"], not_declared=["b", "c"])
    assert e.not_compiled == ["a"]
    assert e.not_declared == ["b", "c"]
    assert ModuleSetMismatchError().not_declared == []
