"""Write generated artifacts to disk."""

from __future__ import annotations

from pathlib import Path

from .errors import EmitError
from .logging import get_logger

logger = get_logger("output")


def emit_file(out_dir: str | Path, rel_path: str, contents: bytes | str | None) -> Path | None:
    """Write ``contents`` to ``out_dir/rel_path``, creating parent directories.

    Nothing is written when ``contents`` is None.
    """
    if contents is None:
        return None

    path = Path(out_dir) / rel_path
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise EmitError(str(path.parent), f"creating directory: {exc}") from exc

    data = contents.encode("utf-8") if isinstance(contents, str) else contents
    try:
        path.write_bytes(data)
    except OSError as exc:
        raise EmitError(str(path), f"creating file: {exc}") from exc

    logger.debug("Wrote %s (%d bytes)", path, len(data))
    return path
