"""Per-run trace of every pipeline step.

Each run writes one JSON file that is overwritten in place on every flush, so
the log survives a crash mid-run. Tracing must never break the pipeline: every
public method reports its own failures and returns normally.
"""
import json
import os
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from playgen.config import config


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _encode(value: Any):
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, exclude_none=True, mode="json")
    if hasattr(value, "to_trace"):
        return value.to_trace()
    if hasattr(value, "__dict__"):
        return vars(value)
    return str(value)


class PipelineTrace:
    def __init__(self, run_input: dict, trace_dir: str = None):
        self.start_time = time.monotonic()
        self.run_id = uuid.uuid4().hex[:6]
        self.finalized = False
        self.filepath: Optional[str] = None
        self.data = {
            "runId": self.run_id,
            "status": "running",
            "startedAt": _now_iso(),
            "input": run_input,
            "steps": [],
        }
        try:
            directory = trace_dir or config.TRACE_DIR
            os.makedirs(directory, exist_ok=True)
            stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%f")
            self.filepath = os.path.join(directory, f"trace-{stamp}-{self.run_id}.json")
        except OSError as e:
            print(f"[Trace] Warning: could not prepare trace directory: {e}")

    def _step(self, step: str, iteration: Optional[int], extras: dict) -> dict:
        entry = {"step": step}
        if iteration is not None:
            entry["iteration"] = iteration
        entry["timestamp"] = _now_iso()
        entry.update({to_camel(key): value for key, value in extras.items() if value is not None})
        return entry

    def start_step(self, step: str, iteration: Optional[int] = None) -> Callable[..., None]:
        """Start timing a step. Returns a callable to invoke with the step's extras when it completes."""
        started = time.monotonic()
        timestamp = _now_iso()

        def complete(**extras):
            try:
                entry = self._step(step, iteration, extras)
                entry["timestamp"] = timestamp
                entry["durationMs"] = int((time.monotonic() - started) * 1000)
                self.data["steps"].append(entry)
            except Exception as e:
                print(f"[Trace] Warning: could not record step '{step}': {e}")

        return complete

    def add_step(self, step: str, iteration: Optional[int] = None, **extras):
        try:
            self.data["steps"].append(self._step(step, iteration, extras))
        except Exception as e:
            print(f"[Trace] Warning: could not record step '{step}': {e}")

    def _write(self):
        if not self.filepath:
            return
        self.data["durationMs"] = int((time.monotonic() - self.start_time) * 1000)
        with open(self.filepath, "w", encoding="utf-8") as f:
            json.dump(self.data, f, indent=2, default=_encode, ensure_ascii=False)

    def flush(self):
        try:
            self._write()
        except Exception as e:
            print(f"[Trace] Warning: could not write trace: {e}")

    def finalize(self, status: str = "complete"):
        try:
            self.finalized = True
            self.data["status"] = status
            self.data["finishedAt"] = _now_iso()
            self._write()
        except Exception as e:
            print(f"[Trace] Warning: could not finalize trace: {e}")
