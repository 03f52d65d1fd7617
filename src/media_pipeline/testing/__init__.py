"""Testing utilities and fakes for the media pipeline."""

from .fakes import (
    ConcurrencyProbe,
    FakeCodec,
    FakeFetcher,
    FakeLogger,
    FakeS3Client,
    S3Bucket,
    S3Object,
    create_test_image,
    setup_test_media_environment,
)

__all__ = [
    "ConcurrencyProbe",
    "FakeCodec",
    "FakeFetcher",
    "FakeLogger",
    "FakeS3Client",
    "S3Bucket",
    "S3Object",
    "create_test_image",
    "setup_test_media_environment",
]
