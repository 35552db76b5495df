"""
Clipboard sink backed by the platform's command line tools.

macOS: pbcopy, or osascript for images. Linux: wl-copy on Wayland, then
xsel or xclip. Windows: PowerShell. Missing tools raise
ClipboardUnavailable; the caller decides whether that is fatal.
"""

from __future__ import annotations

import base64
import logging
import os
import shutil
import subprocess
import sys
import tempfile
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Tuple

from ..exceptions import ClipboardUnavailable

LOGGER = logging.getLogger(__name__)

PATH_PLACEHOLDER = "{path}"

_PS_IMAGE = (
    "Add-Type -AssemblyName System.Windows.Forms, System.Drawing; "
    "$bytes = [System.Convert]::FromBase64String('{b64}'); "
    "$ms = New-Object System.IO.MemoryStream($bytes, 0, $bytes.Length); "
    "$img = [System.Drawing.Image]::FromStream($ms); "
    "[System.Windows.Forms.Clipboard]::SetImage($img);"
)


@dataclass(frozen=True)
class ClipboardCommand:
    argv: Tuple[str, ...]
    # Feed the payload on stdin
    use_stdin: bool = True
    # Leave the tool running (wl-copy serves the selection itself)
    detach: bool = False
    # Payload goes through a temp file whose path replaces PATH_PLACEHOLDER
    temp_suffix: Optional[str] = None


def _linux_tool(env: Mapping[str, str], which: Callable[[str], Optional[str]]) -> Optional[str]:
    if env.get("WAYLAND_DISPLAY") and which("wl-copy"):
        return "wl-copy"
    if which("xsel"):
        return "xsel"
    if which("xclip"):
        return "xclip"
    return None


def clipboard_command(
    mime: str,
    *,
    data: bytes = b"",
    platform: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> Optional[ClipboardCommand]:
    """Pick the command that puts ``mime`` content on the clipboard, if any."""
    platform = platform or sys.platform
    env = os.environ if env is None else env
    is_image = mime.startswith("image/")

    if platform == "darwin":
        if is_image:
            script = f'set the clipboard to (read (POSIX file "{PATH_PLACEHOLDER}") as «class PNGf»)'
            return ClipboardCommand(("osascript", "-e", script), use_stdin=False, temp_suffix=".png")
        return ClipboardCommand(("pbcopy",))

    if platform == "win32":
        if is_image:
            script = _PS_IMAGE.replace("{b64}", base64.b64encode(data).decode("ascii"))
            return ClipboardCommand(("powershell.exe", "-NoProfile", "-Command", script), use_stdin=False)
        return ClipboardCommand(("powershell.exe", "-NoProfile", "-Command", "$input | Set-Clipboard"))

    if platform.startswith("linux"):
        tool = _linux_tool(env, which)
        if tool == "wl-copy":
            return ClipboardCommand(("wl-copy", "--type", mime), detach=True)
        if tool == "xclip":
            return ClipboardCommand(("xclip", "-selection", "clipboard", "-t", mime, "-in"))
        if tool == "xsel":
            return ClipboardCommand(("xsel", "--clipboard", "--input"))
    return None


def copy_to_clipboard(
    data: bytes,
    mime: str,
    *,
    platform: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    which: Callable[[str], Optional[str]] = shutil.which,
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    spawner: Callable[..., subprocess.Popen] = subprocess.Popen,
    timeout_s: float = 5.0,
) -> None:
    """Copy ``data`` to the system clipboard as ``mime``.

    Raises ClipboardUnavailable when no tool is found or the tool fails.
    """
    cmd = clipboard_command(mime, data=data, platform=platform, env=env, which=which)
    if cmd is None:
        raise ClipboardUnavailable(f"No clipboard tool available for {mime}")

    tmp_path: Optional[str] = None
    argv = list(cmd.argv)
    try:
        if cmd.temp_suffix:
            fd, tmp_path = tempfile.mkstemp(prefix="codesnap-clip-", suffix=cmd.temp_suffix)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            argv = [arg.replace(PATH_PLACEHOLDER, tmp_path) for arg in argv]

        if cmd.detach:
            proc = spawner(
                argv,
                stdin=subprocess.PIPE,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
            proc.stdin.write(data)
            proc.stdin.close()
        else:
            result = runner(
                argv,
                input=data if cmd.use_stdin else None,
                capture_output=True,
                timeout=timeout_s,
            )
            if result.returncode != 0:
                raise ClipboardUnavailable(
                    f"{argv[0]} exited with {result.returncode}: "
                    f"{(result.stderr or b'').decode('utf-8', 'replace').strip()}"
                )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ClipboardUnavailable(f"Clipboard tool {argv[0]} failed: {e}") from e
    finally:
        if tmp_path and os.path.exists(tmp_path):
            os.unlink(tmp_path)
    LOGGER.debug("Copied %d bytes of %s to the clipboard via %s", len(data), mime, argv[0])
