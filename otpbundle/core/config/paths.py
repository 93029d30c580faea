from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from typing import Optional

DEFAULT_OTP_ROOT = "/usr/local/lib/erlang"


@dataclass(frozen=True)
class ProjectPaths:
    root: str = "."

    @property
    def ebin_dir(self) -> str:
        return os.path.join(self.root, "ebin")

    @property
    def src_dir(self) -> str:
        return os.path.join(self.root, "src")

    @property
    def rebar_config(self) -> str:
        return os.path.join(self.root, "rebar.config")

    def resolve(self, rel: str) -> str:
        if os.path.isabs(rel):
            return rel
        return os.path.join(self.root, rel)


def otp_root_dir(override: Optional[str] = None) -> str:
    """
    The Erlang root (`code:root_dir()`), e.g. /usr/local/lib/erlang.
    Order: explicit override, $OTP_ROOT, the install holding `erl` on PATH.
    """
    if override:
        return override
    env = os.environ.get("OTP_ROOT")
    if env:
        return env
    erl = shutil.which("erl")
    if erl:
        # <root>/bin/erl; PATH usually holds a symlink to it
        return os.path.dirname(os.path.dirname(os.path.realpath(erl)))
    return DEFAULT_OTP_ROOT


def otp_lib_dir(root: str) -> str:
    return os.path.join(root, "lib")


def otp_bin_dir(root: str) -> str:
    # a stock install lives at $PREFIX/lib/erlang, so this is $PREFIX/bin
    return os.path.normpath(os.path.join(root, "..", "..", "bin"))
