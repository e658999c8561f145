from dataclasses import dataclass


@dataclass
class RenderResult:
    success: bool
    image_bytes: bytes | None = None
    format: str = "svg"
    stdout: str = ""
    stderr: str = ""
    error: str = ""
    returncode: int | None = None
    backend: str = ""
    source_code: str = ""
