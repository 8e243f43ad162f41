"""Tests for archive download and extraction."""

import io
import tarfile
import zipfile
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from mcp_spark_dist.errors import DownloadFailedError, ExtractionFailedError
from mcp_spark_dist.utils.fetching import archive_format, download_url, extract_archive

from conftest import make_spark_archive


def mock_session(status=200, chunks=(b"",), get_side_effect=None):
    """aiohttp.ClientSession stand-in whose get() streams ``chunks``."""
    response = MagicMock()
    response.status = status
    response.content.read = AsyncMock(side_effect=list(chunks))

    request = MagicMock()
    request.__aenter__ = AsyncMock(return_value=response)
    request.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    if get_side_effect:
        session.get = MagicMock(side_effect=get_side_effect)
    else:
        session.get = MagicMock(return_value=request)
    return session


@pytest.mark.asyncio
async def test_download_url(tmp_path):
    dest = tmp_path / "spark.tgz"
    session = mock_session(chunks=[b"spark ", b"archive", b""])

    with patch("aiohttp.ClientSession", return_value=session):
        result = await download_url("https://example.org/spark.tgz", dest)

    assert result == dest
    assert dest.read_bytes() == b"spark archive"
    session.get.assert_called_once_with("https://example.org/spark.tgz")


@pytest.mark.asyncio
async def test_download_url_bad_status(tmp_path):
    dest = tmp_path / "spark.tgz"
    session = mock_session(status=404)

    with patch("aiohttp.ClientSession", return_value=session):
        with pytest.raises(DownloadFailedError, match="status 404"):
            await download_url("https://example.org/spark.tgz", dest)


@pytest.mark.asyncio
async def test_download_url_keeps_partial_file(tmp_path):
    dest = tmp_path / "spark.tgz"
    session = mock_session(chunks=[b"partial", aiohttp.ClientPayloadError("truncated")])

    with patch("aiohttp.ClientSession", return_value=session):
        with pytest.raises(DownloadFailedError, match="truncated"):
            await download_url("https://example.org/spark.tgz", dest)

    assert dest.read_bytes() == b"partial"


@pytest.mark.asyncio
async def test_download_url_connection_error(tmp_path):
    session = mock_session(get_side_effect=aiohttp.ClientConnectionError("refused"))

    with patch("aiohttp.ClientSession", return_value=session):
        with pytest.raises(DownloadFailedError, match="refused"):
            await download_url("https://example.org/spark.tgz", tmp_path / "spark.tgz")


def test_archive_format(tmp_path):
    assert archive_format(tmp_path / "spark-2.0-bin-hadoop2.7.tgz") == ".tgz"
    assert archive_format(tmp_path / "spark.tar.gz") == ".tar.gz"
    assert archive_format(tmp_path / "spark.zip") == ".zip"


def test_extract_tgz(tmp_path):
    archive = make_spark_archive(tmp_path, "spark-2.0-bin-hadoop2.7")
    dest = tmp_path / "out"

    extract_archive(archive, dest)

    assert (dest / "spark-2.0-bin-hadoop2.7" / "bin" / "spark-submit").exists()
    assert (dest / "spark-2.0-bin-hadoop2.7" / "conf" / "log4j.properties.template").exists()


def test_extract_zip(tmp_path):
    archive = tmp_path / "spark.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("spark/RELEASE", "content")

    extract_archive(archive, tmp_path / "out")
    assert (tmp_path / "out" / "spark" / "RELEASE").read_text() == "content"


def test_extract_unsupported_format(tmp_path):
    archive = tmp_path / "spark.rar"
    archive.write_bytes(b"data")

    with pytest.raises(ExtractionFailedError, match="unsupported archive format"):
        extract_archive(archive, tmp_path / "out")


def test_extract_rejects_path_traversal(tmp_path):
    archive = tmp_path / "evil.tgz"
    with tarfile.open(archive, "w:gz") as tf:
        info = tarfile.TarInfo("../escaped")
        info.size = 4
        tf.addfile(info, io.BytesIO(b"evil"))

    with pytest.raises(ExtractionFailedError):
        extract_archive(archive, tmp_path / "out")
    assert not (tmp_path / "escaped").exists()
