"""In-place patching of Spark configuration files."""

import re
import shutil
from pathlib import Path
from typing import Iterable, List, Tuple

from mcp_spark_dist.logging import get_logger

logger = get_logger(__name__)


LINE_ENDINGS = ("\r\n", "\n", "\r")


def split_line_ending(line: str) -> Tuple[str, str]:
    for ending in LINE_ENDINGS:
        if line.endswith(ending):
            return line[: -len(ending)], ending
    return line, ""


def patch_lines(lines: Iterable[str], key: str, value: str) -> List[str]:
    """Replace every line starting with ``key`` by ``key=value``.

    ``key`` is matched literally. A replaced line keeps its original line
    ending, if it had one. Other lines pass through untouched and in order.
    """
    pattern = re.compile(re.escape(key))
    replacement = f"{key}={value}"

    patched = []
    for line in lines:
        content, ending = split_line_ending(line)
        patched.append(replacement + ending if pattern.match(content) else line)
    return patched


def copy_template(src: Path, dst: Path, overwrite: bool = False) -> bool:
    """Copy a template file into place.

    Returns False without copying when ``dst`` exists and ``overwrite`` is
    not set.
    """
    src, dst = Path(src), Path(dst)
    if dst.exists() and not overwrite:
        return False

    shutil.copyfile(src, dst)
    logger.debug({"event": "template_copied", "src": str(src), "dst": str(dst)})
    return True


def apply_property(
    file_path: Path, template_path: Path, key: str, value: str, reset: bool = False
) -> None:
    """Set ``key=value`` in a properties file, seeding it from a template.

    The template is copied over ``file_path`` first when the file is missing
    or ``reset`` is set.
    """
    file_path = Path(file_path)
    copy_template(template_path, file_path, overwrite=reset)

    with open(file_path, "r", newline="") as f:
        lines = f.readlines()

    patched = patch_lines(lines, key, value)

    with open(file_path, "w", newline="") as f:
        f.writelines(patched)

    logger.debug(
        {"event": "property_applied", "file": str(file_path), "key": key, "value": value}
    )
