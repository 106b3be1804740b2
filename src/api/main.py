import logging
import os
import tempfile
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, Field

from Filters.registry import FILTERS, get_filter_factory
from Pipelines.parallel_pipeline import ParallelPipeline
from Utils.settings import get_settings

logger = logging.getLogger("parallel_stemmer.api")

# =========================
# FastAPI + CORS (dev)
# =========================
app = FastAPI(title="Parallel Stemmer API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# =========================
# Pydantic models
# =========================
class ProcessRequest(BaseModel):
    lines: List[str]
    transform: str = "stem"
    n_workers: Optional[int] = Field(default=None, ge=1)
    queue_size: Optional[int] = Field(default=None, ge=1)
    preserve_order: bool = True


# =========================
# Endpoints
# =========================
@app.get("/", include_in_schema=False)
def root():
    return RedirectResponse(url="/docs")


@app.get("/api/filters")
def list_filters():
    return [{"name": name, "description": meta.get("description", "")} for name, meta in FILTERS.items()]


@app.post("/api/process")
def process_lines(payload: ProcessRequest):
    if payload.transform not in FILTERS:
        raise HTTPException(status_code=400, detail=f"Unknown filter: {payload.transform}")

    settings = get_settings()
    with tempfile.TemporaryDirectory(prefix="stemmer_") as work_dir:
        input_path = os.path.join(work_dir, "input.txt")
        output_path = os.path.join(work_dir, "output.txt")
        with open(input_path, "w", encoding="utf-8") as fh:
            for line in payload.lines:
                # one request line is one input line
                fh.write(line.replace("\r", " ").replace("\n", " "))
                fh.write("\n")

        pipeline = ParallelPipeline(
            input_path=input_path,
            output_path=output_path,
            n_workers=payload.n_workers or settings.n_workers,
            queue_size=payload.queue_size or settings.queue_size,
            filter_factory=get_filter_factory(payload.transform),
            join_timeout=settings.join_timeout,
            preserve_order=payload.preserve_order,
        )
        result = pipeline.run()
        if not result.ok:
            logger.error("Pipeline run failed: timed_out=%s interrupted=%s source=%s sink=%s",
                         result.timed_out, result.interrupted, result.source_error, result.sink_error)
            raise HTTPException(status_code=500, detail="Pipeline run failed")

        with open(output_path, "r", encoding="utf-8") as fh:
            # only "\n" ends a record; str.splitlines() would also split on \x0c, \u2028 etc.
            out_lines = [line.rstrip("\n") for line in fh]

    return {
        "status": "done",
        "lines": out_lines,
        "lines_read": result.lines_read,
        "lines_written": result.lines_written,
        "transform_errors": result.transform_errors,
        "duration": result.duration,
        "metrics": result.metrics,
    }


@app.get("/favicon.ico", include_in_schema=False)
def favicon():
    return Response(status_code=204)


# run directly: python -m api.main (from src/)
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.main:app", host="0.0.0.0", port=8000)
