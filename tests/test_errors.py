import logging

from mcp.types import INVALID_PARAMS, INVALID_REQUEST

from mcp_spark_dist.errors import (
    DownloadFailedError,
    ExternalInstallationError,
    VersionNotFoundError,
    log_error,
)


def test_version_not_found_remedy():
    error = VersionNotFoundError("2.0", "2.6")

    assert 'install(runtime_version="2.0", platform_version="2.6")' in str(error)
    assert error.code == INVALID_PARAMS
    assert error.details["runtime_version"] == "2.0"


def test_to_error_data():
    error = ExternalInstallationError("/opt/spark")
    data = error.to_error_data()

    assert data.code == INVALID_REQUEST
    assert "/opt/spark" in data.message
    assert data.data == {"path": "/opt/spark"}


def test_log_error_includes_details(caplog):
    logger = logging.getLogger("test_errors")

    with caplog.at_level(logging.ERROR, logger="test_errors"):
        log_error(DownloadFailedError("https://example.org/x.tgz"), {"step": "fetch"}, logger)

    record = caplog.records[-1]
    assert record.data["error_type"] == "DownloadFailedError"
    assert record.data["details"] == {"url": "https://example.org/x.tgz"}
    assert record.data["context"] == {"step": "fetch"}
