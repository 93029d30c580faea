"""
OTP application pipeline: preprocess -> validate -> install.

WHY THIS PACKAGE EXISTS:
compile and install share the same preprocessing and validation steps;
install then hands a validated descriptor to the install transaction.
"""

from otpbundle.core.app.api import OperationResult, clean_app, compile_app, install_app
from otpbundle.core.app.installer import InstallReport, InstallState, Installer

__all__ = [
    "InstallReport",
    "InstallState",
    "Installer",
    "OperationResult",
    "clean_app",
    "compile_app",
    "install_app",
]
