from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BundleConfig(BaseModel):
    """
    Settings for one compile/clean/install invocation.

    target:   install root; None means the OTP lib dir of `otp_root`.
    force:    overwrite an existing `name-vsn` install ("0"/"1" accepted).
    sub_dirs: extra bundle directories copied next to ebin/src/priv/include.
    app_bin:  paths (inside the installed app) published into the OTP bin dir.
    otp_root: Erlang root dir; None means detect it.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    target: Optional[str] = None
    force: bool = False
    sub_dirs: List[str] = Field(default_factory=list)
    app_bin: List[str] = Field(default_factory=list)
    otp_root: Optional[str] = None

    @field_validator("force", mode="before")
    @classmethod
    def _norm_force(cls, v: Any) -> Any:
        if v is None or v == "":
            return False
        if isinstance(v, bool):
            return v
        vv = str(v).strip().lower()
        if vv in {"1", "true", "yes"}:
            return True
        if vv in {"0", "false", "no"}:
            return False
        raise ValueError(f"force must be 0 or 1, got {v!r}")

    @field_validator("sub_dirs", "app_bin", mode="before")
    @classmethod
    def _norm_names(cls, v: Any) -> List[str]:
        if v is None:
            return []
        if isinstance(v, (str, bytes)):
            v = [v]
        if not isinstance(v, (list, tuple)):
            raise ValueError(f"expected a list of strings, got {v!r}")
        out: List[str] = []
        for x in v:
            if isinstance(x, bytes):
                x = x.decode("utf-8")
            if not isinstance(x, str):
                raise ValueError(f"expected a string, got {x!r}")
            if str(x).strip():
                out.append(str(x))
        return out

    @field_validator("target", "otp_root", mode="before")
    @classmethod
    def _norm_path(cls, v: Any) -> Optional[str]:
        if v is None or str(v).strip() == "":
            return None
        return str(v)
