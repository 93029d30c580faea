from __future__ import annotations

import logging
import os

import pytest

from otpbundle.core.config.models import BundleConfig
from otpbundle.core.config.paths import ProjectPaths
from otpbundle.core.logger import LOGGER_NAME, owned_handlers
from tests.helpers.fakes import RecordingLogger


@pytest.fixture
def project(tmp_path):
    """
    An isolated OTP application root with empty ebin/ and src/.
    """
    paths = ProjectPaths(root=str(tmp_path / "proj"))
    os.makedirs(paths.ebin_dir, exist_ok=True)
    os.makedirs(paths.src_dir, exist_ok=True)
    return paths


@pytest.fixture
def otp_root(tmp_path, monkeypatch):
    """
    Fake Erlang install: <tmp>/otp/lib/erlang with lib/ and <tmp>/otp/bin.
    """
    root = tmp_path / "otp" / "lib" / "erlang"
    os.makedirs(root / "lib", exist_ok=True)
    os.makedirs(tmp_path / "otp" / "bin", exist_ok=True)
    monkeypatch.setenv("OTP_ROOT", str(root))
    return str(root)


@pytest.fixture
def target_dir(tmp_path):
    d = tmp_path / "target"
    os.makedirs(d, exist_ok=True)
    return str(d)


@pytest.fixture
def config(target_dir):
    return BundleConfig(target=target_dir)


@pytest.fixture
def log():
    return RecordingLogger()


@pytest.fixture
def clean_logger():
    """
    Detach whatever handlers setup_logging() attached during the test.
    """
    lg = logging.getLogger(LOGGER_NAME)
    yield lg
    for h in owned_handlers(lg):
        lg.removeHandler(h)
        h.close()
