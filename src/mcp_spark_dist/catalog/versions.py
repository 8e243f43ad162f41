"""Version catalog loading and installed-state scanning."""

import csv
import dataclasses
from importlib import resources
from pathlib import Path
from typing import Iterable, List, Optional

from mcp_spark_dist.errors import CatalogIntegrityError
from mcp_spark_dist.logging import get_logger
from mcp_spark_dist.types import InstallConfig, VersionEntry

logger = get_logger(__name__)

CATALOG_FILE = "versions.csv"
REQUIRED_COLUMNS = ("spark", "hadoop", "base", "default", "hadoop_default", "latest")

TRUE_VALUES = {"true", "t", "yes", "1"}
FALSE_VALUES = {"false", "f", "no", "0", ""}


def parse_flag(value: Optional[str], column: str, line: int) -> bool:
    """Parse a catalog boolean cell (TRUE/FALSE style)."""
    text = (value or "").strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise CatalogIntegrityError(
        f"Invalid boolean {value!r} in column '{column}' on line {line}",
        details={"column": column, "line": line},
    )


def read_catalog_rows(path: Optional[Path] = None) -> List[dict]:
    """Read raw rows from the catalog CSV, shipped or user supplied."""
    if path is not None:
        with open(path, newline="") as f:
            return list(csv.DictReader(f))

    source = resources.files("mcp_spark_dist.catalog").joinpath(CATALOG_FILE)
    with source.open("r", newline="") as f:
        return list(csv.DictReader(f))


def parse_catalog(rows: Iterable[dict]) -> List[VersionEntry]:
    """Turn raw rows into validated entries.

    Raises:
        CatalogIntegrityError: on missing columns, bad values, duplicate
            pairs, or when no entry is flagged as both defaults.
    """
    entries: List[VersionEntry] = []

    for line, row in enumerate(rows, start=2):
        missing = [c for c in REQUIRED_COLUMNS if c not in row]
        if missing:
            raise CatalogIntegrityError(
                f"Catalog is missing columns: {', '.join(missing)}",
                details={"missing": missing},
            )

        spark = (row["spark"] or "").strip()
        hadoop = (row["hadoop"] or "").strip()
        if not spark or not hadoop:
            raise CatalogIntegrityError(
                f"Empty version on catalog line {line}", details={"line": line}
            )

        entries.append(
            VersionEntry(
                runtime_version=spark,
                platform_version=hadoop,
                is_default=parse_flag(row["default"], "default", line),
                is_platform_default=parse_flag(row["hadoop_default"], "hadoop_default", line),
                latest=parse_flag(row["latest"], "latest", line),
                base_url=(row["base"] or "").strip(),
            )
        )

    return validate_catalog(entries)


def validate_catalog(entries: List[VersionEntry]) -> List[VersionEntry]:
    """Check catalog-wide invariants."""
    if not entries:
        raise CatalogIntegrityError("Version catalog is empty")

    seen = set()
    for entry in entries:
        key = (entry.runtime_version, entry.platform_version)
        if key in seen:
            raise CatalogIntegrityError(
                f"Duplicate catalog entry spark={key[0]} hadoop={key[1]}",
                details={"runtime_version": key[0], "platform_version": key[1]},
            )
        seen.add(key)

    if not any(e.is_default and e.is_platform_default for e in entries):
        raise CatalogIntegrityError(
            "Version catalog has no entry flagged as both default and hadoop_default"
        )

    return entries


class VersionCatalog:
    """Known Spark/Hadoop combinations and their installed state.

    The reference table is parsed and validated once, when the catalog is
    constructed. Installed state is never cached: every ``load_installed``
    call scans the install root again.

    Installed state only ever describes the managed install root. An
    external SPARK_HOME is not scanned and does not mark any entry as
    installed; ``VersionResolver.descriptor`` is where it takes over.
    """

    def __init__(self, config: InstallConfig, entries: Optional[List[VersionEntry]] = None):
        self.config = config
        if entries is None:
            entries = parse_catalog(read_catalog_rows(config.catalog_path))
        else:
            entries = validate_catalog(list(entries))
        self._entries = tuple(entries)

        logger.debug({"event": "catalog_loaded", "entries": len(self._entries)})

    @property
    def root_dir(self) -> Path:
        return self.config.root_dir

    def version_dir(self, entry: VersionEntry) -> Path:
        return self.root_dir / entry.component_name

    def load_available(self) -> List[VersionEntry]:
        """Full reference table in stored order."""
        return list(self._entries)

    def load_installed(self) -> List[VersionEntry]:
        """Reference table with ``installed`` recomputed from the install root."""
        return [
            dataclasses.replace(entry, installed=self.version_dir(entry).exists())
            for entry in self._entries
        ]

    def list_versions(
        self, installed_only: bool = False, latest_only: bool = False
    ) -> List[VersionEntry]:
        versions = self.load_installed()
        if installed_only:
            versions = [v for v in versions if v.installed]
        if latest_only:
            versions = [v for v in versions if v.latest]
        return versions

    def find(self, runtime_version: str, platform_version: str) -> Optional[VersionEntry]:
        """Exact lookup of a pair in the reference table."""
        for entry in self._entries:
            if (
                entry.runtime_version == runtime_version
                and entry.platform_version == platform_version
            ):
                return entry
        return None

    def is_available(self, runtime_version: str, platform_version: str) -> bool:
        """Whether the pair's version directory exists under the root."""
        entry = self.find(runtime_version, platform_version)
        if entry is None:
            return False
        return self.version_dir(entry).exists()
