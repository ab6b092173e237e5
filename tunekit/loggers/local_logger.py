"""LocalFileLogger — JSON-lines logger for offline tuning runs.

Writes one JSON line per evaluated configuration to ``metrics.jsonl``
(measurements) and ``params.jsonl`` (hyperparameters), and copies
artifact files such as saved meta-states into the run directory.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
from typing import Any, Dict, List, Optional

from tunekit.loggers.interface import LoggerInterface

logger = logging.getLogger(__name__)


class LocalFileLogger(LoggerInterface):
    """Logger that persists tuning records to the local file system.

    Attributes:
        run_dir: Directory where logs and artifacts are stored.
    """

    def __init__(self, run_dir: str = "artifacts/tuning") -> None:
        """Initialise the logger, creating *run_dir* if needed.

        Args:
            run_dir: Target directory for log and artifact files.
        """
        os.makedirs(run_dir, exist_ok=True)
        self.run_dir = run_dir
        self._metrics_path = os.path.join(run_dir, "metrics.jsonl")
        self._params_path = os.path.join(run_dir, "params.jsonl")

    def _append(self, path: str, record: Dict[str, Any]) -> None:
        with open(path, "a", encoding="utf-8") as fh:
            fh.write(json.dumps(record, default=str) + "\n")

    def log_metrics(self, step: int, metrics: Dict[str, float]) -> None:
        self._append(self._metrics_path, {"step": step, **metrics})

    def log_params(self, step: int, params: Dict[str, Any]) -> None:
        self._append(self._params_path, {"step": step, **params})

    def log_artifact(
        self, path: str, metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """Copy an artifact file into the run directory.

        Args:
            path: Source file path.
            metadata: Written next to the copy as ``<name>.meta.json``.
        """
        if not os.path.isfile(path):
            logger.warning("Artifact %s does not exist; not logged.", path)
            return
        dest = os.path.join(self.run_dir, os.path.basename(path))
        if os.path.abspath(dest) != os.path.abspath(path):
            shutil.copy2(path, dest)
        if metadata:
            self._append(dest + ".meta.json", metadata)

    @staticmethod
    def _read(path: str) -> List[Dict[str, Any]]:
        if not os.path.isfile(path):
            return []
        records = []
        with open(path, "r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if line:
                    records.append(json.loads(line))
        return records

    def read_metrics(self) -> List[Dict[str, Any]]:
        """Read all logged measurement records."""
        return self._read(self._metrics_path)

    def read_params(self) -> List[Dict[str, Any]]:
        """Read all logged hyperparameter records."""
        return self._read(self._params_path)
