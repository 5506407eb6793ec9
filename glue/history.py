"""Execution history stored as one JSON file per run."""

from __future__ import annotations

import logging
import re
import time
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from .config import GlueConfig, load_config
from .contracts import ExecutionLog, StepResult

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")
_last_stamp = 0


def _next_stamp() -> int:
    """Nanosecond timestamp, strictly increasing within the process."""
    global _last_stamp
    _last_stamp = max(time.time_ns(), _last_stamp + 1)
    return _last_stamp


def _stamp_of(path: Path) -> Optional[int]:
    """Return the nanosecond stamp encoded in a record file name."""
    _, sep, stamp = path.stem.rpartition("-")
    if not sep or not stamp.isdigit():
        return None
    return int(stamp)


class HistoryRecorder:
    """Persist and query past workflow executions.

    Every call to :meth:`record` creates a new file named after the workflow
    and a nanosecond timestamp, so successive or concurrent runs never
    overwrite each other.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def record(
        self, workflow_name: str, step_results: Sequence[StepResult]
    ) -> ExecutionLog:
        entry = ExecutionLog.from_results(workflow_name, list(step_results))
        self.directory.mkdir(parents=True, exist_ok=True)

        safe_name = _UNSAFE_CHARS.sub("_", workflow_name).lstrip(".") or "workflow"
        stamp = _next_stamp()
        while True:
            path = self.directory / f"{safe_name}-{stamp}.json"
            try:
                with open(path, "x", encoding="utf-8") as f:
                    f.write(entry.to_json())
                break
            except FileExistsError:
                stamp += 1

        logger.info(
            "Workflow execution recorded",
            extra={
                "workflow": entry.workflow,
                "success": entry.success,
                "duration_ms": entry.duration_ms,
                "history_file": str(path),
            },
        )
        return entry

    def list(self, limit: int = 20) -> list[ExecutionLog]:
        """Return up to ``limit`` records, most recent first.

        Unreadable or malformed records are skipped.
        """
        if limit <= 0 or not self.directory.is_dir():
            return []

        stamped = []
        for path in self.directory.glob("*.json"):
            stamp = _stamp_of(path)
            if stamp is None:
                logger.debug("Skipping unrecognised history file %s", path)
                continue
            stamped.append((stamp, path))
        stamped.sort(reverse=True)

        entries: list[ExecutionLog] = []
        for _stamp, path in stamped:
            try:
                entries.append(ExecutionLog.from_json(path.read_text(encoding="utf-8")))
            except (OSError, UnicodeDecodeError, ValidationError) as exc:
                logger.debug("Skipping unreadable history file %s: %s", path, exc)
                continue
            if len(entries) >= limit:
                break
        return entries

    def clear(self) -> None:
        """Remove every record and log file in the history directory."""
        if not self.directory.is_dir():
            return
        for path in self.directory.iterdir():
            if path.suffix == ".json" or ".log" in path.suffixes:
                path.unlink(missing_ok=True)


def get_history_recorder(config: Optional[GlueConfig] = None) -> HistoryRecorder:
    """Build a recorder for the configured history directory."""
    config = config or load_config()
    return HistoryRecorder(config.history.directory)
