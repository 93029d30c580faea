from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from otpbundle.core.config.models import BundleConfig
from otpbundle.core.descriptor.terms import Atom, TermSyntaxError, parse_file
from otpbundle.core.errors import ConfigError

# Keys read from the project config file; the rest are command-line globals.
PROJECT_KEYS = ("sub_dirs", "app_bin")
GLOBAL_KEYS = ("target", "force", "otp_root")


@dataclass(frozen=True)
class ReadResult:
    ok: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None


def read_config_terms(path: str) -> ReadResult:
    """Read a rebar.config style file of `{Key, Value}.` terms."""
    if not os.path.exists(path):
        return ReadResult(ok=False, error="missing")
    try:
        terms = parse_file(path)
    except TermSyntaxError as e:
        return ReadResult(ok=False, error=f"corrupt_terms:{e}")
    except (OSError, UnicodeDecodeError) as e:
        return ReadResult(ok=False, error=str(e))

    data: Dict[str, Any] = {}
    for term in terms:
        if isinstance(term, tuple) and len(term) == 2 and isinstance(term[0], Atom):
            # first occurrence wins, like proplists:get_value/2
            data.setdefault(str(term[0]), term[1])
        else:
            return ReadResult(ok=False, error=f"not_a_property:{term!r}")
    return ReadResult(ok=True, data=data)


def load_bundle_config(config_path: Optional[str] = None, overrides: Optional[Mapping[str, Any]] = None) -> BundleConfig:
    """
    Build the explicit config for one invocation.

    Project keys come from `config_path` (a missing file means defaults);
    `overrides` are the command-line globals and win over the file.
    """
    raw: Dict[str, Any] = {}
    if config_path:
        rr = read_config_terms(config_path)
        if rr.ok:
            raw.update({k: v for k, v in rr.data.items() if k in PROJECT_KEYS})
        elif rr.error != "missing":
            raise ConfigError(f"Failed to read {config_path}: {rr.error}", path=str(config_path), reason=rr.error)

    for key, value in (overrides or {}).items():
        if key not in PROJECT_KEYS + GLOBAL_KEYS:
            raise ConfigError(f"Unknown option: {key}", key=str(key))
        raw[key] = value

    try:
        return BundleConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e.errors()[0].get('msg', str(e))}", errors=len(e.errors())) from e
