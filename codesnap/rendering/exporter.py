"""
Output file helpers: filename patterns, output paths and atomic writes.

Files are first written to a temporary file in the destination directory
and renamed into place only once the content is complete, so a failed
export never leaves a partial file behind.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from datetime import datetime
from typing import Optional, Union

from .options import ExportConfig

LOGGER = logging.getLogger(__name__)

EXTENSIONS = {"image": "png", "html": "html", "rtf": "rtf"}


def _safe_name(s: Optional[str]) -> str:
    if not s:
        return "untitled"
    s = re.sub(r"\s+", " ", s).strip()
    s = re.sub(r"[^\w\-. ]+", "-", s)
    return s[:120] or "untitled"


def generate_filename(pattern: str, original: str, now: Optional[datetime] = None) -> str:
    """Expand %t, %time, %date, %file_name, %file_extension and %unixtime.

    Longer keys are replaced first so that ``%time`` is never read as
    ``%t`` followed by ``ime``.
    """
    now = now or datetime.now()
    base = os.path.basename(original or "")
    stem, dot, ext = base.rpartition(".")
    if not dot:
        stem, ext = base, ""
    replacements = {
        "%t": now.strftime("%Y%m%d_%H%M%S"),
        "%time": now.strftime("%H%M%S"),
        "%date": now.strftime("%Y%m%d"),
        "%file_name": stem,
        "%file_extension": ext,
        "%unixtime": str(int(now.timestamp())),
    }
    out = pattern
    for key in sorted(replacements, key=len, reverse=True):
        out = out.replace(key, replacements[key])
    return _safe_name(out)


def full_output_path(
    request_type: str,
    *,
    filename: str = "",
    pattern: Optional[str] = None,
    output_dir: Optional[str] = None,
    config: Optional[ExportConfig] = None,
    extension: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    """Destination path for one export; the directory is created if missing."""
    cfg = config or ExportConfig()
    directory = os.path.expanduser(output_dir or cfg.resolved_output_dir())
    os.makedirs(directory, exist_ok=True)
    name = generate_filename(pattern or cfg.filename_pattern, filename, now=now)
    ext = extension or EXTENSIONS[request_type]
    return os.path.join(directory, f"{name}.{ext}")


def write_atomic(path: str, content: Union[str, bytes]) -> str:
    """Write ``content`` to ``path`` via a temp file and an atomic rename."""
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    data = content.encode("utf-8") if isinstance(content, str) else content
    fd, tmp = tempfile.mkstemp(prefix=".codesnap-", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
    LOGGER.info("Wrote %s (%d bytes)", path, len(data))
    return path
