# src/media_pipeline/core/error_handling.py

import functools

import requests
from botocore.exceptions import BotoCoreError, ClientError
from PIL import UnidentifiedImageError

from .exceptions import DecodeError, DownloadError, MediaPipelineError
from .logging_config import ROOT_LOGGER_NAME, get_logger


def with_error_handling(func):
    """
    A decorator that logs failures and maps third-party exceptions onto the
    pipeline's error taxonomy.

    Pipeline errors pass through untouched. HTTP and S3 transport errors become
    DownloadError, unidentifiable images become DecodeError. These are logged at debug
    only; the caller reports the failed item.
    Anything else is logged as an error and re-raised unchanged.
    """
    logger = get_logger(f"{ROOT_LOGGER_NAME}.{func.__name__}")

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except MediaPipelineError:
            raise
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            logger.debug(f"HTTP error in '{func.__name__}': {e}")
            raise DownloadError(f"Download failed with status {status}: {e}", status_code=status) from e
        except requests.RequestException as e:
            logger.debug(f"Request error in '{func.__name__}': {e}")
            raise DownloadError(f"Download failed: {e}") from e
        except ClientError as e:
            code = e.response.get('Error', {}).get('Code')
            logger.debug(f"S3 error in '{func.__name__}': {e}")
            raise DownloadError(f"S3 download failed ({code}): {e}") from e
        except BotoCoreError as e:
            logger.debug(f"S3 transport error in '{func.__name__}': {e}")
            raise DownloadError(f"S3 download failed: {e}") from e
        except UnidentifiedImageError as e:
            logger.debug(f"Unidentified image in '{func.__name__}': {e}")
            raise DecodeError(f"Failed to identify image: {e}") from e
        except Exception as e:
            logger.error(
                f"Error in '{func.__name__}': {e}",
                exc_info=True
            )
            raise
    return wrapper


class BatchOperationContextManager:
    """
    Context manager for batch operations to collect and summarize errors.
    """
    def __init__(self, operation_name="Batch Operation"):
        self.operation_name = operation_name
        self.errors = []
        self.logger = get_logger(f"{ROOT_LOGGER_NAME}.batch")

    def __enter__(self):
        self.logger.info(f"Starting {self.operation_name}.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            self.logger.error(
                f"{self.operation_name} aborted: {exc_val}",
                exc_info=(exc_type, exc_val, exc_tb)
            )
        elif self.errors:
            self.logger.warning(
                f"{self.operation_name} completed with {len(self.errors)} error(s)."
            )
            for i, error_detail in enumerate(self.errors):
                self.logger.debug(
                    f"  Error {i+1}/{len(self.errors)} for item '{error_detail['item']}': {error_detail['error']}"
                )
        else:
            self.logger.info(f"{self.operation_name} completed successfully.")

        # Never suppress: aborting exceptions propagate to the caller.
        return False

    def add_error(self, error_message: str, item_identifier: str = "Unknown item"):
        """
        Report a failed item inside the 'with' block.

        Args:
            error_message (str): The error message or exception string.
            item_identifier (str): Identifier of the failed item (e.g. media id).
        """
        self.errors.append({"item": item_identifier, "error": str(error_message)})
        self.logger.debug(f"Error added for item '{item_identifier}' in {self.operation_name}: {error_message}")
