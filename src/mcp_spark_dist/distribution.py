"""Spark distribution operations."""

from pathlib import Path
from typing import List, Optional

from mcp_spark_dist.catalog import VersionCatalog, VersionResolver
from mcp_spark_dist.config import load_config
from mcp_spark_dist.install.manager import InstallationManager
from mcp_spark_dist.logging import get_logger
from mcp_spark_dist.types import (
    InstallConfig,
    InstallDescriptor,
    InstallResult,
    Outcome,
    VersionEntry,
)

logger = get_logger(__name__)


def create_resolver(config: Optional[InstallConfig] = None) -> VersionResolver:
    """Catalog and resolver bound to ``config`` (the environment by default)."""
    return VersionResolver(VersionCatalog(config or load_config()))


def create_manager(config: Optional[InstallConfig] = None) -> InstallationManager:
    return InstallationManager(create_resolver(config))


async def install(
    runtime_version: Optional[str] = None,
    platform_version: Optional[str] = None,
    reset: bool = False,
    logging_level: Optional[str] = "INFO",
    verbose: bool = False,
    config: Optional[InstallConfig] = None,
) -> InstallResult:
    """Download and install a Spark version for local use.

    Without filters this installs the catalog's latest default version.
    """
    manager = create_manager(config)
    descriptor = manager.resolver.resolve(
        runtime_version, platform_version, installed_only=False, latest=True
    )
    return await manager.ensure_installed(
        descriptor, reset=reset, logging_level=logging_level, verbose=verbose
    )


def uninstall(
    runtime_version: str, platform_version: str, config: Optional[InstallConfig] = None
) -> Outcome:
    return create_manager(config).uninstall(runtime_version, platform_version)


def install_tar(tarfile: Path, config: Optional[InstallConfig] = None) -> Path:
    return create_manager(config).install_tar(tarfile)


def list_versions(
    installed_only: bool = False,
    latest: bool = False,
    config: Optional[InstallConfig] = None,
) -> List[VersionEntry]:
    return create_resolver(config).catalog.list_versions(
        installed_only=installed_only, latest_only=latest
    )


def resolve_default(config: Optional[InstallConfig] = None) -> InstallDescriptor:
    """Version a connection binds to when no version is given."""
    return create_resolver(config).resolve_default()


def is_available(
    runtime_version: str, platform_version: str, config: Optional[InstallConfig] = None
) -> bool:
    return create_resolver(config).catalog.is_available(runtime_version, platform_version)


def can_install(config: Optional[InstallConfig] = None) -> bool:
    return create_manager(config).can_install()


def install_root(config: Optional[InstallConfig] = None) -> Path:
    return (config or load_config()).root_dir
