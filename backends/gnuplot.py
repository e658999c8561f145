import logging
import os
import subprocess
import sys
import tempfile
import uuid
from datetime import datetime
from pathlib import Path

from backends.base import RenderResult
from config import GNUPLOT_ENV_VAR

logger = logging.getLogger(__name__)

SCRIPT_SUFFIX = ".gnuplot"


def make_stem(now: datetime | None = None) -> str:
    """Return a unique ``<timestamp>_<random>`` base name for script/image files."""
    now = now or datetime.now()
    timestamp = now.strftime("%m-%d-%Y_%H.%M.%S.%f")
    return f"{timestamp}_{uuid.uuid4().int & 0xFFFFFFFF}"


def render_gnuplot(
    script: str,
    image_format: str = "svg",
    stem: str | None = None,
) -> RenderResult:
    stem = stem or make_stem()
    tmpdir = Path(tempfile.gettempdir())
    script_file = tmpdir / f"{stem}{SCRIPT_SUFFIX}"
    image_file = tmpdir / f"{stem}.{image_format}"

    binary = _resolve_gnuplot()
    script_file.write_text(script, encoding="utf-8")

    try:
        logger.debug("Running %s %s > %s", binary, script_file, image_file)
        try:
            with open(image_file, "wb") as out:
                result = subprocess.run(
                    [binary, str(script_file)],
                    stdout=out,
                    stderr=subprocess.PIPE,
                    text=True,
                    encoding="utf-8",
                    errors="replace",
                )
        except OSError as exc:
            return RenderResult(
                success=False,
                error=f"Couldn't communicate with gnuplot ({binary}), is it installed? {exc}",
                format=image_format,
                backend="gnuplot",
                source_code=script,
            )

        if result.returncode != 0:
            logger.warning("gnuplot exited with status %d: %s", result.returncode, result.stderr.strip())

        try:
            image_bytes = image_file.read_bytes()
        except OSError as exc:
            image_bytes = b""
            logger.debug("Could not read %s: %s", image_file, exc)

        if not image_bytes:
            return RenderResult(
                success=False,
                stderr=result.stderr,
                error=result.stderr.strip() or "gnuplot produced no output, is it installed?",
                returncode=result.returncode,
                format=image_format,
                backend="gnuplot",
                source_code=script,
            )

        return RenderResult(
            success=True,
            image_bytes=image_bytes,
            format=image_format,
            stderr=result.stderr,
            returncode=result.returncode,
            backend="gnuplot",
            source_code=script,
        )
    finally:
        script_file.unlink(missing_ok=True)
        image_file.unlink(missing_ok=True)


def _resolve_gnuplot() -> str:
    """Return the gnuplot executable, honouring the GNUPLOT_EXE override."""
    override = os.environ.get(GNUPLOT_ENV_VAR)
    if override:
        return override
    return "gnuplot.exe" if sys.platform.startswith("win") else "gnuplot"
