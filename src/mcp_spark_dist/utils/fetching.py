import tarfile
import zipfile
from pathlib import Path

import aiohttp

from mcp_spark_dist.errors import DownloadFailedError, ExtractionFailedError
from mcp_spark_dist.logging import get_logger

logger = get_logger(__name__)

CHUNK_SIZE = 8192


async def download_url(url: str, dest: Path) -> Path:
    """Stream ``url`` into ``dest``.

    A partially written file is left in place when the download fails.
    """
    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(url) as response:
                if response.status != 200:
                    raise DownloadFailedError(
                        url, f"download failed with status {response.status}"
                    )

                with open(dest, "wb") as f:
                    while chunk := await response.content.read(CHUNK_SIZE):
                        f.write(chunk)

    except DownloadFailedError:
        raise
    except (aiohttp.ClientError, OSError) as e:
        raise DownloadFailedError(url, str(e)) from e

    logger.info({"event": "url_downloaded", "url": url, "dest": str(dest)})
    return dest


ARCHIVE_FORMATS = (".tar.gz", ".tgz", ".zip")


def archive_format(archive_path: Path) -> str:
    # names carry dotted versions, e.g. spark-2.0-bin-hadoop2.7.tgz
    name = archive_path.name.lower()
    for format in ARCHIVE_FORMATS:
        if name.endswith(format):
            return format
    return archive_path.suffix


def extract_archive(archive_path: Path, dest_dir: Path) -> Path:
    """Extract a .tgz, .tar.gz or .zip archive into ``dest_dir``."""
    archive_path = Path(archive_path)

    logger.debug(
        {"event": "extract_archive", "archive": str(archive_path), "dest": str(dest_dir)}
    )
    format = archive_format(archive_path)

    try:
        if format == ".zip":
            with zipfile.ZipFile(archive_path) as archive:
                archive.extractall(dest_dir)
        elif format in (".tar.gz", ".tgz"):
            with tarfile.open(archive_path, "r:gz") as archive:
                archive.extractall(dest_dir, filter="data")
        else:
            raise ExtractionFailedError(archive_path, f"unsupported archive format: {format}")
    except ExtractionFailedError:
        raise
    except (tarfile.TarError, zipfile.BadZipFile, OSError) as e:
        raise ExtractionFailedError(archive_path, str(e)) from e

    logger.info(
        {
            "event": "archive_extracted",
            "archive": str(archive_path),
            "extracted_to": str(dest_dir),
        }
    )
    return Path(dest_dir)
