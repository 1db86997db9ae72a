"""
run_store.py — In-memory pipeline run registry
===============================================
Keeps the outcome of every pipeline run made through the API so clients can
fetch it again without any database.

Each run contains:
  request   — the PipelineRequest that started it
  status    — "running" | "done" | "failed"
  report    — PipelineReport once done
  error     — error message when failed
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class RunEntry:
    run_id: str
    request: Any                  # PipelineRequest
    status: str = "running"
    report: Any = None            # PipelineReport | None
    error: str = ""
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )


# Single global store — keyed by run_id string
_STORE: dict[str, RunEntry] = {}
_LOCK = threading.Lock()


# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────

def create_run(request: Any) -> RunEntry:
    """Register a new running entry and return it."""
    entry = RunEntry(run_id=str(uuid.uuid4()), request=request)
    with _LOCK:
        _STORE[entry.run_id] = entry
    return entry


def get_run(run_id: str) -> RunEntry | None:
    return _STORE.get(run_id)


def list_runs() -> list[RunEntry]:
    with _LOCK:
        return sorted(_STORE.values(), key=lambda e: e.created_at)


def complete_run(entry: RunEntry, report: Any) -> None:
    entry.report = report
    entry.status = "done"


def fail_run(entry: RunEntry, error: str) -> None:
    entry.error = error
    entry.status = "failed"


def clear() -> None:
    """Drop every run (used by tests)."""
    with _LOCK:
        _STORE.clear()
