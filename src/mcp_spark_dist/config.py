"""Install location configuration."""

import os
from pathlib import Path
from typing import Mapping, Optional

import appdirs

from mcp_spark_dist.types import InstallConfig

APP_NAME = "spark"
APP_AUTHOR = "mcp-spark-dist"

INSTALL_DIR_ENV = "SPARK_INSTALL_DIR"
SPARK_HOME_ENV = "SPARK_HOME"


def default_install_dir() -> Path:
    """Platform cache directory used when no root is configured."""
    return Path(appdirs.user_cache_dir(APP_NAME, APP_AUTHOR))


def external_home(environ: Optional[Mapping[str, str]] = None) -> Optional[Path]:
    """Externally managed Spark installation, if SPARK_HOME names one."""
    environ = os.environ if environ is None else environ
    home = environ.get(SPARK_HOME_ENV)
    if not home:
        return None
    return Path(home).expanduser()


def load_config(
    root_dir: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> InstallConfig:
    """Build an InstallConfig from explicit values, then the environment.

    An explicit ``root_dir`` wins over SPARK_INSTALL_DIR, which wins over the
    platform cache directory.
    """
    environ = os.environ if environ is None else environ

    if root_dir is None:
        configured = environ.get(INSTALL_DIR_ENV)
        root_dir = Path(configured).expanduser() if configured else default_install_dir()

    return InstallConfig(root_dir=Path(root_dir), external_home=external_home(environ))
