"""Spark version catalog and resolution."""

from mcp_spark_dist.catalog.versions import VersionCatalog
from mcp_spark_dist.catalog.resolver import VersionResolver

__all__ = ["VersionCatalog", "VersionResolver"]
