import os
import shutil
from pathlib import Path

from mcp_spark_dist.logging import get_logger

logger = get_logger(__name__)


def aliased_path(path: Path) -> str:
    """Render ``path`` with the home directory shown as ``~``."""
    path = Path(path)
    home = Path.home()
    try:
        return str(Path("~") / path.relative_to(home))
    except ValueError:
        return str(path)


def is_writable_dir(path: Path) -> bool:
    """True when ``path`` is absent or an existing directory we can write to."""
    path = Path(path)
    if not path.exists():
        return True
    return path.is_dir() and os.access(path, os.W_OK)


def remove_tree(path: Path) -> None:
    logger.debug({"event": "removing_tree", "path": str(path)})
    shutil.rmtree(path)
