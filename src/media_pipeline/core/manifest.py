"""
ManifestWriter - Persists the ordered manifest of processed media items.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import List, Optional

from .exceptions import StorageError
from .models import BatchOutcome, MediaManifestEntry
from .observability import StructuredLogger
from .protocols import LoggerProtocol

MANIFEST_FILENAME = "converted_media.json"


class ManifestWriter:
    """
    Writes the manifest as a JSON array at a fixed name inside the output dir.

    The file is written to a temporary sibling and moved into place, so
    readers see either the previous manifest or the complete new one.
    """

    def __init__(
        self,
        filename: str = MANIFEST_FILENAME,
        logger: Optional[LoggerProtocol] = None,
    ):
        self.filename = filename
        self._logger = logger or StructuredLogger("media-pipeline.manifest")

    def manifest_path(self, output_dir: Path) -> Path:
        return Path(output_dir) / self.filename

    def write(self, outcome: BatchOutcome, output_dir: Path) -> Path:
        """
        Serialize the outcome's entries to the manifest file.

        Args:
            outcome: Batch outcome holding sorted manifest entries
            output_dir: Directory receiving the manifest; created if absent

        Returns:
            Path of the written manifest

        Raises:
            StorageError: If the directory or file cannot be written
        """
        path = self.manifest_path(output_dir)
        data = [entry.model_dump(mode="json") for entry in outcome.entries]

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create output directory {path.parent}: {e}") from e

        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=path.parent,
                prefix=f".{self.filename}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_name = f.name
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Error writing manifest to {path}: {e}") from e

        self._logger.info(f"Wrote manifest with {len(data)} entries to {path}")
        return path

    @staticmethod
    def load(path: Path) -> List[MediaManifestEntry]:
        """Load manifest entries from a JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return [MediaManifestEntry.model_validate(record) for record in data]
