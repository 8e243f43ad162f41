"""Spark installation lifecycle.

Installs are driven through a fixed sequence of states::

    NOT_PRESENT -> ROOT_CREATED -> DOWNLOADING -> EXTRACTED
                -> CONFIG_APPLIED -> INSTALLED

Archives are unpacked into a staging directory under the install root and
the version directory is moved into place only once it is known to exist,
so an interrupted install never leaves a half-extracted version directory
behind. An existing version directory is never removed or replaced.

Any failure up to and including extraction aborts the install and is
re-raised unchanged. Configuration problems afterwards are logged as
warnings and reported on the result; the install still succeeds.

Nothing here locks the install root. Two callers installing into the same
root at the same time can corrupt it, so concurrent use must be serialized
by the caller.
"""

import logging
import re
from importlib import resources
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

from mcp_spark_dist.catalog.resolver import VersionResolver
from mcp_spark_dist.errors import (
    ConfigPatchError,
    DirectoryUnwritableError,
    ExternalInstallationError,
    ExtractionFailedError,
    log_error,
)
from mcp_spark_dist.install.conf import apply_property, copy_template
from mcp_spark_dist.logging import get_logger, log_with_data
from mcp_spark_dist.types import (
    InstallDescriptor,
    InstallResult,
    InstallState,
    Outcome,
    VersionEntry,
)
from mcp_spark_dist.utils.fetching import download_url, extract_archive
from mcp_spark_dist.utils.fs import aliased_path, is_writable_dir, remove_tree

logger = get_logger(__name__)

Fetcher = Callable[[str, Path], Awaitable[Path]]
Extractor = Callable[[Path, Path], Path]

STAGING_PREFIX = ".staging-"
LOGGING_PROPERTY = "log4j.rootCategory"
LOG4J_FILE = "log4j.properties"
HIVE_SITE_FILE = "hive-site.xml"

TARFILE_PATTERN = re.compile(r"^(spark-(.+)-bin-(?:hadoop)?(.+?))(?:\.tgz|\.tar\.gz)$")


def hive_site_template() -> Path:
    """hive-site.xml shipped with this package."""
    return Path(str(resources.files("mcp_spark_dist.conf").joinpath(HIVE_SITE_FILE)))


class InstallationManager:
    """Creates, configures and removes Spark version directories."""

    def __init__(
        self,
        resolver: VersionResolver,
        fetch: Optional[Fetcher] = None,
        extract: Optional[Extractor] = None,
        hive_site_path: Optional[Path] = None,
    ):
        self.resolver = resolver
        self.fetch = fetch or download_url
        self.extract = extract or extract_archive
        self.hive_site_path = hive_site_path or hive_site_template()

    @property
    def root_dir(self) -> Path:
        return self.resolver.config.root_dir

    def can_install(self) -> bool:
        """Whether the install root is (or can become) writable."""
        return is_writable_dir(self.root_dir)

    def _transition(self, descriptor: InstallDescriptor, state: InstallState) -> InstallState:
        logger.debug(
            {
                "event": "install_state",
                "component": descriptor.component_name,
                "state": state.name,
            }
        )
        return state

    def _say(self, verbose: bool, msg: str) -> None:
        logger.log(logging.INFO if verbose else logging.DEBUG, msg)

    def _unpack(self, archive: Path, component: str, version_dir: Path) -> Path:
        """Extract ``archive`` and move its ``component`` directory to ``version_dir``.

        Extraction happens in ``<root>/.staging-<component>``, which is
        removed afterwards whether or not the archive held ``component``.
        """
        staging_dir = self.root_dir / f"{STAGING_PREFIX}{component}"
        if staging_dir.exists():
            remove_tree(staging_dir)
        staging_dir.mkdir(parents=True)

        try:
            self.extract(archive, staging_dir)

            staged = staging_dir / component
            if not staged.is_dir():
                members = sorted(p.name for p in staging_dir.iterdir())
                log_with_data(
                    logger,
                    logging.WARNING,
                    "Archive did not contain the expected directory",
                    {"archive": str(archive), "expected": component, "members": members},
                )
                raise ExtractionFailedError(archive, f"{component} not found after extraction")

            staged.rename(version_dir)
        finally:
            if staging_dir.exists():
                remove_tree(staging_dir)

        return version_dir

    def _create_root(self, root_dir: Path) -> None:
        if not is_writable_dir(root_dir):
            raise DirectoryUnwritableError(root_dir)
        try:
            root_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryUnwritableError(root_dir, str(e)) from e

    def _config_warning(self, msg: str, path: Path) -> str:
        error = ConfigPatchError(msg, path)
        log_with_data(logger, logging.WARNING, str(error), error.details)
        return str(error)

    def apply_config(
        self,
        descriptor: InstallDescriptor,
        reset: bool = False,
        logging_level: Optional[str] = "INFO",
    ) -> List[str]:
        """Best-effort configuration of an installed version.

        Returns the warnings raised along the way; never raises itself.
        """
        warnings: List[str] = []
        conf_dir = descriptor.conf_dir

        if logging_level is not None:
            log4j = conf_dir / LOG4J_FILE
            try:
                apply_property(
                    log4j,
                    conf_dir / f"{LOG4J_FILE}.template",
                    LOGGING_PROPERTY,
                    f"{logging_level}, console",
                    reset,
                )
            except Exception as e:
                warnings.append(
                    self._config_warning(f"Failed to set logging settings: {e}", log4j)
                )

        hive_site = conf_dir / HIVE_SITE_FILE
        if not hive_site.exists() or reset:
            try:
                copy_template(self.hive_site_path, hive_site, overwrite=True)
            except Exception as e:
                warnings.append(
                    self._config_warning(
                        f"Failed to apply custom hive-site.xml configuration: {e}",
                        hive_site,
                    )
                )

        return warnings

    async def ensure_installed(
        self,
        descriptor: InstallDescriptor,
        reset: bool = False,
        logging_level: Optional[str] = "INFO",
        verbose: bool = False,
    ) -> InstallResult:
        """Install ``descriptor`` unless it is already present, then configure it.

        ``reset`` only affects configuration: an existing version directory
        is never downloaded or extracted again.

        Raises:
            ExternalInstallationError: descriptor points at SPARK_HOME.
            DirectoryUnwritableError: the install root cannot be created.
            DownloadFailedError: fetching the archive failed.
            ExtractionFailedError: extraction failed or produced nothing.
        """
        if descriptor.external:
            raise ExternalInstallationError(descriptor.version_dir)

        state = self._transition(descriptor, InstallState.NOT_PRESENT)
        outcome = Outcome.NOOP

        try:
            self._create_root(descriptor.root_dir)
            state = self._transition(descriptor, InstallState.ROOT_CREATED)

            if descriptor.version_dir.exists():
                self._say(
                    verbose,
                    f"Spark {descriptor.runtime_version} for Hadoop "
                    f"{descriptor.platform_version} or later already installed.",
                )
            else:
                self._say(
                    verbose,
                    f"Installing Spark {descriptor.runtime_version} for Hadoop "
                    f"{descriptor.platform_version} or later.\n"
                    f"Downloading from:\n- '{descriptor.remote_archive_url}'\n"
                    f"Installing to:\n- '{aliased_path(descriptor.version_dir)}'",
                )

                state = self._transition(descriptor, InstallState.DOWNLOADING)
                await self.fetch(descriptor.remote_archive_url, descriptor.local_archive_path)

                try:
                    self._unpack(
                        descriptor.local_archive_path,
                        descriptor.component_name,
                        descriptor.version_dir,
                    )
                finally:
                    descriptor.local_archive_path.unlink(missing_ok=True)

                state = self._transition(descriptor, InstallState.EXTRACTED)
                outcome = Outcome.PERFORMED

                self._say(verbose, "Installation complete.")
        except Exception as e:
            self._transition(descriptor, InstallState.FAILED)
            log_error(
                e,
                {"component": descriptor.component_name, "state": state.name},
                logger,
            )
            raise

        warnings = self.apply_config(descriptor, reset=reset, logging_level=logging_level)
        self._transition(descriptor, InstallState.CONFIG_APPLIED)

        state = self._transition(descriptor, InstallState.INSTALLED)
        return InstallResult(
            descriptor=descriptor, outcome=outcome, state=state, warnings=warnings
        )

    def uninstall(self, runtime_version: str, platform_version: str) -> Outcome:
        """Remove a managed version directory.

        Only the directory under the install root is touched, never an
        external SPARK_HOME. A missing directory is a no-op.
        """
        component = VersionEntry(runtime_version, platform_version).component_name
        version_dir = self.root_dir / component

        if not version_dir.exists():
            logger.info(f"{component} not found (no uninstall performed)")
            return Outcome.NOOP

        try:
            remove_tree(version_dir)
        except OSError as e:
            log_error(e, {"component": component, "version_dir": str(version_dir)}, logger)
            return Outcome.FAILED

        logger.info(f"{component} successfully uninstalled.")
        return Outcome.PERFORMED

    def install_tar(self, tarfile: Path) -> Path:
        """Install from a local archive named like ``spark-<ver>-bin-hadoop<ver>.tgz``.

        The archive must hold a top-level directory named after the archive
        without its extension. Returns the resulting version directory.

        Raises:
            ExternalInstallationError: SPARK_HOME is set.
            ValueError: the file is missing or badly named.
            ExtractionFailedError: extraction failed or the directory is missing.
        """
        external_home = self.resolver.config.external_home
        if external_home is not None:
            raise ExternalInstallationError(external_home)

        tarfile = Path(tarfile)
        if not tarfile.exists():
            raise ValueError(f'The file "{tarfile}", does not exist.')

        match = TARFILE_PATTERN.match(tarfile.name)
        if not match:
            raise ValueError(
                "The given file does not conform with the following pattern: "
                f"{TARFILE_PATTERN.pattern}"
            )

        component = match.group(1)
        version_dir = self.root_dir / component
        if version_dir.exists():
            logger.info(f"{component} already installed.")
            return version_dir

        self._create_root(self.root_dir)
        self._unpack(tarfile, component, version_dir)

        logger.info({"event": "tar_installed", "tarfile": str(tarfile), "version_dir": str(version_dir)})
        return version_dir
