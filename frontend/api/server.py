"""
server.py — Guided Component Forge FastAPI Bridge
==================================================
Wraps ComponentPipeline behind a small REST API.

Start with:
    uvicorn frontend.api.server:app --reload --port 8000
"""

from __future__ import annotations

from dotenv import load_dotenv

load_dotenv()

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from codegen.build_validator import BuildValidator
from codegen.llm import GenerationError
from codegen.pipeline import ComponentPipeline
from codegen.spec_generator import SpecGenerationError
from codegen.states import PipelineReport, PipelineRequest
from frontend.api import run_store as store

# ─────────────────────────────────────────────────────────────────────────────
# App
# ─────────────────────────────────────────────────────────────────────────────

app = FastAPI(title="Guided Component Forge API", version="1.0.0")

_pipeline: ComponentPipeline | None = None


def get_pipeline() -> ComponentPipeline:
    """Shared pipeline, created on first request."""
    global _pipeline
    if _pipeline is None:
        _pipeline = ComponentPipeline(build_validator=BuildValidator())
    return _pipeline


# ─────────────────────────────────────────────────────────────────────────────
# Response schemas
# ─────────────────────────────────────────────────────────────────────────────

class GenerateResponse(BaseModel):
    run_id: str
    report: PipelineReport


class RunResponse(BaseModel):
    run_id: str
    status: str
    created_at: str
    description: str
    error: str = ""
    report: PipelineReport | None = None


def _to_run_response(entry: store.RunEntry) -> RunResponse:
    return RunResponse(
        run_id=entry.run_id,
        status=entry.status,
        created_at=entry.created_at,
        description=entry.request.description,
        error=entry.error,
        report=entry.report,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Routes
# ─────────────────────────────────────────────────────────────────────────────

@app.post("/api/generate", response_model=GenerateResponse)
def generate(body: PipelineRequest, pipeline: ComponentPipeline = Depends(get_pipeline)):
    """
    Run the full pipeline for one description.
    Not reaching the quality gate still returns 200 with a best-effort report;
    only a generation-service outage is an error.
    """
    entry = store.create_run(body)
    try:
        report = pipeline.run(body)
    except GenerationError as exc:
        store.fail_run(entry, str(exc))
        raise HTTPException(status_code=502, detail=f"Generation service error: {exc}") from exc
    except SpecGenerationError as exc:
        store.fail_run(entry, str(exc))
        raise HTTPException(status_code=502, detail=f"Spec generation failed: {exc}") from exc
    except Exception as exc:
        store.fail_run(entry, f"{type(exc).__name__}: {exc}")
        print(f"[api] ❌ Run {entry.run_id} failed: {exc}")
        raise HTTPException(status_code=500, detail=f"Pipeline failed: {exc}") from exc

    store.complete_run(entry, report)
    return GenerateResponse(run_id=entry.run_id, report=report)


@app.get("/api/runs", response_model=list[RunResponse])
def list_runs():
    return [_to_run_response(e) for e in store.list_runs()]


@app.get("/api/runs/{run_id}", response_model=RunResponse)
def get_run(run_id: str):
    entry = store.get_run(run_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Run not found.")
    return _to_run_response(entry)
