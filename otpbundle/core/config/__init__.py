from otpbundle.core.config.io import ReadResult, load_bundle_config, read_config_terms
from otpbundle.core.config.models import BundleConfig
from otpbundle.core.config.paths import ProjectPaths, otp_bin_dir, otp_lib_dir, otp_root_dir

__all__ = [
    "BundleConfig",
    "ProjectPaths",
    "ReadResult",
    "load_bundle_config",
    "otp_bin_dir",
    "otp_lib_dir",
    "otp_root_dir",
    "read_config_terms",
]
