from __future__ import annotations

import argparse
import json

from otpbundle.core.config.io import load_bundle_config
from otpbundle.core.config.paths import ProjectPaths, otp_bin_dir, otp_lib_dir, otp_root_dir


def main() -> None:
    ap = argparse.ArgumentParser(description="Print the resolved otpbundle configuration")
    ap.add_argument("--root", default=".")
    ap.add_argument("overrides", nargs="*", metavar="key=value")
    args = ap.parse_args()

    overrides = dict(item.partition("=")[::2] for item in args.overrides)
    paths = ProjectPaths(args.root)
    cfg = load_bundle_config(paths.rebar_config, overrides)
    root = otp_root_dir(cfg.otp_root)
    out = cfg.model_dump()
    out["resolved"] = {
        "otp_root": root,
        "target": cfg.target or otp_lib_dir(root),
        "bin_dir": otp_bin_dir(root),
    }
    print(json.dumps(out, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
