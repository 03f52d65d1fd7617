# tests/core/test_error_handling.py

import logging

import pytest
import requests
from botocore.exceptions import ClientError, NoCredentialsError
from PIL import UnidentifiedImageError

from media_pipeline.core.exceptions import (
    ConfigurationError,
    DecodeError,
    DownloadError,
    EncodeError,
)
from media_pipeline.core.error_handling import (
    with_error_handling,
    BatchOperationContextManager,
)


def _raiser(exc):
    @with_error_handling
    def operation():
        raise exc
    return operation


# --- Tests for @with_error_handling decorator ---

def test_with_error_handling_returns_value():
    """Successful calls pass their return value through."""
    @with_error_handling
    def operation(x, y=1):
        return x + y

    assert operation(2, y=3) == 5
    assert operation.__name__ == "operation"


@pytest.mark.parametrize("exc", [EncodeError("enc"), ConfigurationError("cfg"), DownloadError("dl", status_code=500)])
def test_pipeline_errors_pass_through(exc):
    """Pipeline errors are re-raised unchanged."""
    with pytest.raises(type(exc)) as exc_info:
        _raiser(exc)()
    assert exc_info.value is exc


def test_http_error_becomes_download_error_with_status():
    """An HTTP error status maps to DownloadError carrying the status code."""
    response = requests.Response()
    response.status_code = 404
    with pytest.raises(DownloadError) as exc_info:
        _raiser(requests.HTTPError("404 Client Error", response=response))()
    assert exc_info.value.status_code == 404
    assert "404" in str(exc_info.value)


def test_transport_error_becomes_download_error():
    """Timeouts and connection errors map to DownloadError without a status."""
    with pytest.raises(DownloadError) as exc_info:
        _raiser(requests.Timeout("timed out"))()
    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, requests.Timeout)


def test_s3_client_error_becomes_download_error():
    """botocore ClientError maps to DownloadError naming the error code."""
    error = ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject")
    with pytest.raises(DownloadError, match="NoSuchKey"):
        _raiser(error)()


def test_botocore_error_becomes_download_error():
    """Other botocore failures map to DownloadError."""
    with pytest.raises(DownloadError):
        _raiser(NoCredentialsError())()


def test_unidentified_image_becomes_decode_error():
    """Pillow's UnidentifiedImageError maps to DecodeError."""
    with pytest.raises(DecodeError):
        _raiser(UnidentifiedImageError("cannot identify image file"))()


def test_unknown_errors_are_reraised():
    """Anything else propagates unchanged."""
    with pytest.raises(KeyError):
        _raiser(KeyError("missing"))()


class _RecordingHandler(logging.Handler):
    def __init__(self):
        super().__init__(logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def pipeline_records():
    """Capture records reaching the pipeline logger, which does not propagate."""
    pipeline_logger = logging.getLogger("media-pipeline")
    previous = pipeline_logger.level
    handler = _RecordingHandler()
    pipeline_logger.setLevel(logging.DEBUG)
    pipeline_logger.addHandler(handler)
    yield handler
    pipeline_logger.removeHandler(handler)
    pipeline_logger.setLevel(previous)


@pytest.mark.parametrize(
    "exc",
    [
        requests.HTTPError("404 Client Error", response=None),
        requests.ConnectionError("refused"),
        ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject"),
        UnidentifiedImageError("cannot identify image file"),
    ],
)
def test_expected_failures_logged_at_debug_without_traceback(pipeline_records, exc):
    """Mapped per-item failures stay quiet; the caller reports them."""
    with pytest.raises((DownloadError, DecodeError)):
        _raiser(exc)()

    records = [r for r in pipeline_records.records if r.name == "media-pipeline.operation"]
    assert len(records) == 1
    assert records[0].levelno == logging.DEBUG
    assert records[0].exc_info is None


def test_unknown_errors_logged_with_traceback(pipeline_records):
    """Unexpected errors are logged as errors with the traceback."""
    with pytest.raises(KeyError):
        _raiser(KeyError("missing"))()

    records = [r for r in pipeline_records.records if r.name == "media-pipeline.operation"]
    assert [r.levelno for r in records] == [logging.ERROR]
    assert records[0].exc_info is not None


# --- Tests for BatchOperationContextManager ---

def test_batch_context_collects_errors():
    """add_error records per-item failures."""
    with BatchOperationContextManager("Test batch") as batch:
        batch.add_error("Download failed", item_identifier="101")
        batch.add_error(ValueError("bad"), item_identifier="102")

    assert batch.errors == [
        {"item": "101", "error": "Download failed"},
        {"item": "102", "error": "bad"},
    ]


def test_batch_context_default_item_identifier():
    """Errors without an identifier are labelled."""
    with BatchOperationContextManager() as batch:
        batch.add_error("oops")
    assert batch.errors[0]["item"] == "Unknown item"


def test_batch_context_does_not_suppress_exceptions():
    """Aborting exceptions propagate out of the block."""
    with pytest.raises(RuntimeError, match="abort"):
        with BatchOperationContextManager("Aborting batch"):
            raise RuntimeError("abort")
