import io
import shutil
import tarfile
from pathlib import Path

import pytest

from mcp_spark_dist.catalog import VersionCatalog, VersionResolver
from mcp_spark_dist.install.manager import InstallationManager
from mcp_spark_dist.types import InstallConfig, VersionEntry

BASE_URL = "https://archive.example.org/spark/"

LOG4J_TEMPLATE = """\
# Set everything to be logged to the console
log4j.rootCategory=WARN, console
log4j.appender.console=org.apache.log4j.ConsoleAppender
log4j.appender.console.target=System.err
log4j.appender.console.layout=org.apache.log4j.PatternLayout
log4j.logger.org.apache.spark.repl.Main=WARN
"""


def entry(spark, hadoop, default=False, hadoop_default=False, latest=False):
    return VersionEntry(
        runtime_version=spark,
        platform_version=hadoop,
        is_default=default,
        is_platform_default=hadoop_default,
        latest=latest,
        base_url=BASE_URL,
    )


def make_spark_archive(dest_dir: Path, component: str) -> Path:
    """Build a small .tgz laid out like a Spark binary distribution."""
    archive_path = dest_dir / f"{component}.tgz"
    files = {
        f"{component}/bin/spark-submit": b"#!/bin/sh\n",
        f"{component}/conf/log4j.properties.template": LOG4J_TEMPLATE.encode(),
        f"{component}/RELEASE": f"{component}\n".encode(),
    }
    with tarfile.open(archive_path, "w:gz") as tf:
        for name, content in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            tf.addfile(info, io.BytesIO(content))
    return archive_path


class FakeFetcher:
    """Serves prebuilt archives in place of the network."""

    def __init__(self, archive_dir: Path):
        self.archive_dir = archive_dir
        self.calls = []

    async def __call__(self, url: str, dest: Path) -> Path:
        self.calls.append(url)
        component = url.rsplit("/", 1)[-1][: -len(".tgz")]
        source = make_spark_archive(self.archive_dir, component)
        shutil.copyfile(source, dest)
        return dest


@pytest.fixture
def catalog_entries():
    return [
        entry("1.6.0", "2.6", hadoop_default=True),
        entry("1.6.2", "2.4", default=True, latest=True),
        entry("1.6.2", "2.6", default=True, hadoop_default=True, latest=True),
        entry("2.0", "2.7", hadoop_default=True, latest=True),
        entry("2.0", "2.6", latest=True),
    ]


@pytest.fixture
def install_config(tmp_path):
    return InstallConfig(root_dir=tmp_path / "spark")


@pytest.fixture
def catalog(install_config, catalog_entries):
    return VersionCatalog(install_config, catalog_entries)


@pytest.fixture
def resolver(catalog):
    return VersionResolver(catalog)


@pytest.fixture
def fetcher(tmp_path):
    archive_dir = tmp_path / "archives"
    archive_dir.mkdir()
    return FakeFetcher(archive_dir)


@pytest.fixture
def manager(resolver, fetcher):
    return InstallationManager(resolver, fetch=fetcher)


def fake_install(config: InstallConfig, spark: str, hadoop: str) -> Path:
    """Create a version directory as if it had been installed."""
    version_dir = config.root_dir / entry(spark, hadoop).component_name
    (version_dir / "conf").mkdir(parents=True)
    return version_dir
