"""Factory classes for creating configured service instances."""

import logging
from typing import Any, Optional

import boto3

from .codec import PillowImageCodec
from .fetchers import HttpFetcher, S3Fetcher, SchemeRoutingFetcher
from .manifest import ManifestWriter
from .models import PipelineConfig
from .observability import MetricsCollector, StructuredLogger
from .protocols import (
    FetcherProtocol,
    ImageCodecProtocol,
    LoggerProtocol,
    S3ClientProtocol,
)
from .services import ItemProcessingService, PipelineCoordinator


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(name: str, level: int = logging.INFO) -> LoggerProtocol:
        """Create a structured logger."""
        return StructuredLogger(name, level)


class S3ClientFactory:
    """Factory for creating S3 client instances."""

    @staticmethod
    def create_s3_client(**kwargs: Any) -> S3ClientProtocol:
        """Create S3 client with optional configuration."""
        session = boto3.Session()
        return session.client("s3", **kwargs)  # type: ignore


class FetcherFactory:
    """Factory for the default scheme-routing fetcher."""

    @staticmethod
    def create_fetcher(
        timeout: float = 30.0, s3_client: Optional[S3ClientProtocol] = None
    ) -> FetcherProtocol:
        """http(s) through requests, s3 through a lazily created boto3 client."""
        http_fetcher = HttpFetcher(timeout=timeout)
        s3_fetcher = S3Fetcher(
            s3_client=s3_client, client_factory=S3ClientFactory.create_s3_client
        )
        return SchemeRoutingFetcher(
            {"http": http_fetcher, "https": http_fetcher, "s3": s3_fetcher}
        )


class ProcessingPipelineFactory:
    """Factory for creating the complete processing pipeline."""

    @staticmethod
    def create_pipeline(
        fetcher: Optional[FetcherProtocol] = None,
        codec: Optional[ImageCodecProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
        config: Optional[PipelineConfig] = None,
    ) -> PipelineCoordinator:
        """Create a fully configured pipeline coordinator."""
        config = config or PipelineConfig()

        if fetcher is None:
            fetcher = FetcherFactory.create_fetcher(timeout=config.request_timeout)

        if codec is None:
            codec = PillowImageCodec(
                output_format=config.output_format, quality=config.quality
            )

        if logger is None:
            level = logging.DEBUG if config.debug else logging.INFO
            logger = LoggerFactory.create_logger("media-pipeline.services", level)

        metrics_collector = MetricsCollector()
        processor = ItemProcessingService(
            fetcher,
            codec,
            logger,
            partial_variants=config.partial_variants,
            metrics_collector=metrics_collector,
        )
        writer = ManifestWriter(filename=config.manifest_filename, logger=logger)

        return PipelineCoordinator(
            processor=processor,
            writer=writer,
            logger=logger,
            metrics_collector=metrics_collector,
        )
