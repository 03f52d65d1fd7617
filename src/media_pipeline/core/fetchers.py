"""Fetchers retrieving raw source bytes for media items."""

import threading
from typing import Callable, Dict, Optional
from urllib.parse import urlparse

import requests

from .error_handling import with_error_handling
from .exceptions import DownloadError
from .logging_config import get_logger
from .protocols import FetcherProtocol, S3ClientProtocol

DEFAULT_TIMEOUT = 30.0

logger = get_logger("media-pipeline.fetcher")


class HttpFetcher:
    """Fetch http(s) URLs with a single GET; no retries."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, headers: Optional[Dict[str, str]] = None):
        self._timeout = timeout
        self._headers = headers or {"User-Agent": "media-pipeline/0.1"}

    @with_error_handling
    def fetch(self, url: str) -> bytes:
        """Download the body at ``url``; any non-2xx status is a DownloadError."""
        logger.debug(f"GET {url}")
        response = requests.get(url, timeout=self._timeout, headers=self._headers)
        response.raise_for_status()
        # raise_for_status lets 1xx and 3xx through
        if not 200 <= response.status_code < 300:
            raise DownloadError(
                f"Download failed with status {response.status_code}: {url}",
                status_code=response.status_code,
            )
        return response.content


def parse_s3_url(url: str) -> tuple:
    """Split ``s3://bucket/key`` into (bucket, key)."""
    parsed = urlparse(url)
    bucket = parsed.netloc
    key = parsed.path.lstrip("/")
    if parsed.scheme != "s3" or not bucket or not key:
        raise DownloadError(f"Invalid S3 URL: {url}")
    return bucket, key


class S3Fetcher:
    """Fetch ``s3://bucket/key`` URLs with boto3 ``get_object``."""

    def __init__(
        self,
        s3_client: Optional[S3ClientProtocol] = None,
        client_factory: Optional[Callable[[], S3ClientProtocol]] = None,
    ):
        self._s3_client = s3_client
        self._client_factory = client_factory
        self._lock = threading.Lock()

    @property
    def client(self) -> S3ClientProtocol:
        """S3 client, created on first use."""
        with self._lock:
            if self._s3_client is None:
                if self._client_factory is None:
                    # Imported here so http-only runs never build a boto3 session.
                    from .factories import S3ClientFactory

                    self._client_factory = S3ClientFactory.create_s3_client
                self._s3_client = self._client_factory()
            return self._s3_client

    @with_error_handling
    def fetch(self, url: str) -> bytes:
        """Download the object addressed by an ``s3://`` URL."""
        bucket, key = parse_s3_url(url)
        logger.debug(f"Downloading from s3://{bucket}/{key}")
        response = self.client.get_object(Bucket=bucket, Key=key)
        return response["Body"].read()


class SchemeRoutingFetcher:
    """Dispatch each URL to the fetcher registered for its scheme."""

    def __init__(self, fetchers: Dict[str, FetcherProtocol]):
        self._fetchers = {scheme.lower(): fetcher for scheme, fetcher in fetchers.items()}

    def fetch(self, url: str) -> bytes:
        scheme = urlparse(url).scheme.lower()
        fetcher = self._fetchers.get(scheme)
        if fetcher is None:
            raise DownloadError(f"Unsupported URL scheme '{scheme}' for {url}")
        return fetcher.fetch(url)
