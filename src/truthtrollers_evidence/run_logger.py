"""JSON run records for claim mapping and evidence engine runs.

One file per run under ``log_dir``, named
``run_<pipeline>_<started-at>_<id8>.json``, holding the request, every stage's
input and output, and the run's meta diagnostics.
"""

import dataclasses
import re
import time
import uuid
from collections.abc import Sized
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel

_UNSAFE_NAME = re.compile(r"[^A-Za-z0-9_-]+")


class StageRecord(BaseModel):
    """One executed pipeline stage."""

    stage: str
    component: str
    input: Any = None
    output: Any = None
    output_count: int | None = None
    timestamp: str = ""
    duration_seconds: float = 0.0


class RunRecord(BaseModel):
    """A complete run: request, stages and final diagnostics."""

    run_id: str
    pipeline_type: str
    request: Any = None
    started_at: str
    completed_at: str | None = None
    duration_seconds: float | None = None
    stages: list[StageRecord] = []
    final_item_count: int = 0
    meta: dict[str, Any] | None = None


def _serialize(obj: Any) -> Any:
    """Convert engine objects into JSON-compatible values.

    Dataclasses become dicts, enums their values, sets and tuples lists,
    exceptions ``"Type: message"`` strings and paths plain strings.
    """
    if isinstance(obj, Enum):
        return obj.value
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return _serialize(dataclasses.asdict(obj))
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, dict):
        return {str(k): _serialize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_serialize(item) for item in obj]
    if isinstance(obj, (set, frozenset)):
        return sorted((_serialize(item) for item in obj), key=str)
    if isinstance(obj, BaseException):
        return f"{type(obj).__name__}: {obj}"
    if isinstance(obj, Path):
        return str(obj)
    return obj


def _count(output: Any) -> int | None:
    if isinstance(output, (str, bytes)) or not isinstance(output, Sized):
        return None
    return len(output)


class RunLogger:
    """Collect stage records for the current run and write them as JSON.

    Disabled loggers ignore every call. A logger tracks a single run at a
    time, so concurrent runs (for example HTTP requests) need their own
    instances or no logger at all.

    Args:
        log_dir: Directory for run files, created on first write.
        enabled: If False, every method is a no-op.
    """

    def __init__(self, log_dir: Path, *, enabled: bool = True) -> None:
        self._log_dir = log_dir
        self._enabled = enabled
        self._record: RunRecord | None = None
        self._t_start = 0.0
        self._last_log_path: Path | None = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def last_log_path(self) -> Path | None:
        """File written by the most recent finished run."""
        return self._last_log_path

    def start_run(self, pipeline_type: str, request: Any) -> None:
        """Begin a run, discarding any unfinished one.

        Args:
            pipeline_type: "map_claims" or "evidence_engine".
            request: Normalized run input.
        """
        if not self._enabled:
            return
        self._t_start = time.monotonic()
        self._record = RunRecord(
            run_id=uuid.uuid4().hex,
            pipeline_type=pipeline_type,
            request=_serialize(request),
            started_at=datetime.now(tz=UTC).isoformat(),
        )

    def log_stage(
        self,
        stage: str,
        component: str,
        input_data: Any,
        output_data: Any,
        duration_seconds: float,
    ) -> None:
        """Record a finished stage; ignored when no run is active."""
        if not self._enabled or self._record is None:
            return
        self._record.stages.append(
            StageRecord(
                stage=stage,
                component=component,
                input=_serialize(input_data),
                output=_serialize(output_data),
                output_count=_count(output_data),
                timestamp=datetime.now(tz=UTC).isoformat(),
                duration_seconds=round(duration_seconds, 4),
            )
        )

    def finish_run(self, items: list[Any], meta: dict[str, Any] | None = None) -> Path | None:
        """Close the active run and write its file.

        Args:
            items: Per-claim outputs of the run.
            meta: Run diagnostics.

        Returns:
            The written path, or None when disabled or no run is active.
        """
        if not self._enabled or self._record is None:
            return None

        record = self._record
        self._record = None
        record.completed_at = datetime.now(tz=UTC).isoformat()
        record.duration_seconds = round(time.monotonic() - self._t_start, 4)
        record.final_item_count = len(items)
        record.meta = _serialize(meta)

        stamp = record.started_at.split(".")[0].split("+")[0].replace(":", "-")
        pipeline = _UNSAFE_NAME.sub("-", record.pipeline_type) or "run"
        path = self._log_dir / f"run_{pipeline}_{stamp}_{record.run_id[:8]}.json"

        self._log_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(record.model_dump_json(indent=2))
        self._last_log_path = path
        return path
