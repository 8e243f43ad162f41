"""Resolve user version filters to a single install target."""

from typing import Optional

from mcp_spark_dist.catalog.versions import VersionCatalog
from mcp_spark_dist.errors import VersionNotFoundError
from mcp_spark_dist.logging import get_logger
from mcp_spark_dist.types import InstallDescriptor, VersionEntry

logger = get_logger(__name__)


class VersionResolver:
    """Turns (spark, hadoop) filters into an InstallDescriptor."""

    def __init__(self, catalog: VersionCatalog):
        self.catalog = catalog

    @property
    def config(self):
        return self.catalog.config

    def descriptor(self, entry: VersionEntry) -> InstallDescriptor:
        """Build the descriptor for a catalog entry against the configured root."""
        root_dir = self.config.root_dir
        external = self.config.external_home is not None
        version_dir = (
            self.config.external_home if external else root_dir / entry.component_name
        )

        return InstallDescriptor(
            runtime_version=entry.runtime_version,
            platform_version=entry.platform_version,
            component_name=entry.component_name,
            root_dir=root_dir,
            version_dir=version_dir,
            local_archive_path=root_dir / entry.archive_name,
            remote_archive_url=entry.remote_archive_url,
            external=external,
        )

    def descriptor_for(self, runtime_version: str, platform_version: str) -> InstallDescriptor:
        """Descriptor for an exact catalog pair."""
        entry = self.catalog.find(runtime_version, platform_version)
        if entry is None:
            raise VersionNotFoundError(runtime_version, platform_version)
        return self.descriptor(entry)

    def resolve(
        self,
        runtime_version: Optional[str] = None,
        platform_version: Optional[str] = None,
        installed_only: bool = True,
        latest: bool = False,
    ) -> InstallDescriptor:
        """Pick the best catalog entry matching the filters.

        Candidates are ranked by the ``default`` then ``hadoop_default``
        flags; remaining ties go to the entry listed first in the catalog.

        Raises:
            VersionNotFoundError: if no entry matches.
        """
        versions = self.catalog.list_versions(installed_only=installed_only, latest_only=latest)

        if runtime_version is not None:
            versions = [v for v in versions if v.runtime_version == runtime_version]
        if platform_version is not None:
            versions = [v for v in versions if v.platform_version == platform_version]

        if not versions:
            logger.debug(
                {
                    "event": "version_not_found",
                    "runtime_version": runtime_version,
                    "platform_version": platform_version,
                    "installed_only": installed_only,
                    "latest": latest,
                }
            )
            raise VersionNotFoundError(runtime_version, platform_version)

        # sorted() is stable, so catalog order breaks ties
        versions = sorted(
            versions, key=lambda v: (not v.is_default, not v.is_platform_default)
        )
        chosen = versions[0]

        logger.debug(
            {
                "event": "version_resolved",
                "runtime_version": chosen.runtime_version,
                "platform_version": chosen.platform_version,
                "candidates": len(versions),
            }
        )
        return self.descriptor(chosen)

    def resolve_default(self) -> InstallDescriptor:
        """Version used when the caller names none.

        Prefers whatever is installed, using the same ranking as ``resolve``;
        with nothing installed, falls back to the catalog's fully-default
        entry, which the catalog guarantees exists.
        """
        if self.catalog.list_versions(installed_only=True):
            return self.resolve(None, None, installed_only=True, latest=False)

        entry = next(
            e
            for e in self.catalog.load_available()
            if e.is_default and e.is_platform_default
        )
        return self.descriptor(entry)
