"""Core type definitions"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

Outcome = Enum("Outcome", ["PERFORMED", "NOOP", "FAILED"])

InstallState = Enum(
    "InstallState",
    [
        "NOT_PRESENT",
        "ROOT_CREATED",
        "DOWNLOADING",
        "EXTRACTED",
        "CONFIG_APPLIED",
        "INSTALLED",
        "FAILED",
    ],
)


@dataclass(frozen=True)
class InstallConfig:
    """Where managed installations live"""

    root_dir: Path
    external_home: Optional[Path] = None
    catalog_path: Optional[Path] = None


@dataclass(frozen=True)
class VersionEntry:
    """One row of the version catalog"""

    runtime_version: str
    platform_version: str
    is_default: bool = False
    is_platform_default: bool = False
    latest: bool = False
    base_url: str = ""
    installed: bool = False

    @property
    def component_name(self) -> str:
        return f"spark-{self.runtime_version}-bin-hadoop{self.platform_version}"

    @property
    def archive_name(self) -> str:
        return f"{self.component_name}.tgz"

    @property
    def remote_archive_url(self) -> str:
        return f"{self.base_url}spark-{self.runtime_version}/{self.archive_name}"


@dataclass(frozen=True)
class InstallDescriptor:
    """Resolved, path-bearing view of one catalog entry"""

    runtime_version: str
    platform_version: str
    component_name: str
    root_dir: Path
    version_dir: Path
    local_archive_path: Path
    remote_archive_url: str
    external: bool = False

    @property
    def conf_dir(self) -> Path:
        return self.version_dir / "conf"

    @property
    def installed(self) -> bool:
        # Read from disk every time; descriptors outlive install/uninstall calls.
        return self.external or self.version_dir.exists()

    def to_dict(self) -> dict:
        return {
            "runtime_version": self.runtime_version,
            "platform_version": self.platform_version,
            "component_name": self.component_name,
            "root_dir": str(self.root_dir),
            "version_dir": str(self.version_dir),
            "conf_dir": str(self.conf_dir),
            "local_archive_path": str(self.local_archive_path),
            "remote_archive_url": self.remote_archive_url,
            "installed": self.installed,
            "external": self.external,
        }


@dataclass
class InstallResult:
    """Outcome of one ensure_installed call"""

    descriptor: InstallDescriptor
    outcome: Outcome
    state: InstallState
    warnings: List[str] = field(default_factory=list)
