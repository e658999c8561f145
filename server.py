"""FastAPI server that renders gnuplot scripts over HTTP.

Start with:
    uv run uvicorn server:app --host 127.0.0.1 --port 8000 --reload

Endpoints
---------
GET    /health     Liveness check
POST   /render     Render commands plus inline column data; returns the image

Request body for POST /render::

    {
      "commands": "set terminal svg\\nplot $points using 1:2 with lines",
      "data": {"points": {"x": [1, 2, 3], "y": [4, 5, 6]}},
      "separator": ",",
      "precision": 10,
      "format": "svg"
    }
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any

import pandas as pd
from fastapi import FastAPI, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, Field

import config as cfg
from gnuplot_script import GnuplotScript, GnuplotUnavailable

logger = logging.getLogger(__name__)

_MEDIA_TYPES = {
    "svg": "image/svg+xml",
    "png": "image/png",
    "pdf": "application/pdf",
    "gif": "image/gif",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
}


# ── App ───────────────────────────────────────────────────────────────────────

app = FastAPI(
    title="gnuplot render API",
    description="Build a gnuplot script with inline data and render it.",
)


# ── Request models ────────────────────────────────────────────────────────────

class RenderRequest(BaseModel):
    commands: str
    # label -> column name -> values; columns may differ in length
    data: dict[str, dict[str, list[Any]]] = Field(default_factory=dict)
    separator: str = ","
    precision: int = cfg.CSV_PRECISION
    format: str = cfg.DEFAULT_IMAGE_FORMAT


def _columns_to_frame(columns: dict[str, list[Any]]) -> pd.DataFrame:
    return pd.DataFrame({name: pd.Series(values, dtype=object) for name, values in columns.items()})


def _render(body: RenderRequest) -> bytes:
    gp = GnuplotScript()
    for label, columns in body.data.items():
        gp.add_data(label, _columns_to_frame(columns), separator=body.separator, precision=body.precision)
    gp.add_command(body.commands)
    return gp.execute(image_format=body.format)


# ── Endpoints ─────────────────────────────────────────────────────────────────

@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/render")
async def render(body: RenderRequest):
    """Render the request's script and return the raw image bytes."""
    try:
        image = await asyncio.to_thread(_render, body)
    except GnuplotUnavailable as exc:
        logger.warning("Render failed: %s", exc)
        raise HTTPException(status_code=503, detail=str(exc))
    except Exception as exc:
        logger.exception("Unexpected error rendering gnuplot script")
        raise HTTPException(status_code=500, detail=f"Render failed: {exc}")
    media_type = _MEDIA_TYPES.get(body.format.lower(), "application/octet-stream")
    return Response(content=image, media_type=media_type)


# ── Dev entry-point ───────────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "server:app",
        host=cfg.SERVER_HOST,
        port=cfg.SERVER_PORT,
        reload=True,
    )
