from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class Severity(str, Enum):
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class BundleError(Exception):
    code: str
    user_message: str
    severity: Severity = Severity.ERROR
    context: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.code)

    def __str__(self) -> str:
        return self.user_message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "user_message": self.user_message,
            "severity": self.severity.value,
            "context": dict(self.context or {}),
        }


# ---- Core types ----
class ConfigError(BundleError):
    def __init__(self, user_message: str = "Configuration error.", **ctx: Any):
        super().__init__("config_error", user_message, severity=Severity.CRITICAL, context=ctx)


class DescriptorLoadError(BundleError):
    def __init__(self, user_message: str = "Failed to load app file.", **ctx: Any):
        super().__init__("descriptor_load_error", user_message, context=ctx)


class NameMismatchError(BundleError):
    def __init__(self, user_message: str = "Application name must match filename.", **ctx: Any):
        super().__init__("name_mismatch", user_message, context=ctx)


class MissingModulesError(BundleError):
    def __init__(self, user_message: str = "Missing modules declaration.", **ctx: Any):
        super().__init__("missing_modules", user_message, context=ctx)


class ModuleSetMismatchError(BundleError):
    def __init__(self, user_message: str = "Declared modules do not match ebin.", **ctx: Any):
        super().__init__("module_set_mismatch", user_message, context=ctx)

    @property
    def not_compiled(self) -> List[str]:
        return list(self.context.get("not_compiled") or [])

    @property
    def not_declared(self) -> List[str]:
        return list(self.context.get("not_declared") or [])


class MissingVersionError(BundleError):
    def __init__(self, user_message: str = "Missing vsn in app file.", **ctx: Any):
        super().__init__("missing_version", user_message, context=ctx)


class InstallCollisionError(BundleError):
    def __init__(self, user_message: str = "Application already installed.", **ctx: Any):
        super().__init__("install_collision", user_message, context=ctx)


class FilesystemError(BundleError):
    def __init__(self, user_message: str = "Filesystem operation failed.", **ctx: Any):
        super().__init__("filesystem_error", user_message, severity=Severity.CRITICAL, context=ctx)


class BinaryLinkError(BundleError):
    def __init__(self, user_message: str = "Failed to link one or more binaries.", **ctx: Any):
        super().__init__("binary_link_error", user_message, context=ctx)
