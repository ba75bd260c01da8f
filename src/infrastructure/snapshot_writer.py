"""Persist the sync snapshot as a JSON file."""

import json
import logging
import os
import tempfile

from src.domain.repository import Snapshot

logger = logging.getLogger(__name__)


class SnapshotWriter:
    """Writes snapshots to a fixed path, replacing the whole file at once."""

    def __init__(self, output_file: str):
        self.output_file = output_file

    def write(self, snapshot: Snapshot) -> str:
        """
        Serialize ``snapshot`` and atomically replace the output file.

        Returns:
            The path written.

        Raises:
            OSError: If the directory or file cannot be written.
        """
        directory = os.path.dirname(os.path.abspath(self.output_file))
        os.makedirs(directory, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(prefix=".github-", suffix=".json.tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(snapshot.to_dict(), f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(tmp_path, self.output_file)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        logger.info(f"Wrote snapshot to {self.output_file}")
        return self.output_file
