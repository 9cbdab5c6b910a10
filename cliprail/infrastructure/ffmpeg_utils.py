import json
import logging
import math
import os
import shutil
import subprocess
import sys
from typing import List, Optional

from ..core.errors import ProbeFailure

logger = logging.getLogger(__name__)


# Homebrew locations GUI apps on macOS do not get in PATH
MAC_TOOL_DIRS = ("/opt/homebrew/bin", "/usr/local/bin")


class FFmpegUtils:
    _tool_cache = {}

    @staticmethod
    def _bundle_root() -> str:
        if getattr(sys, 'frozen', False):
            return sys._MEIPASS
        return os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))

    @staticmethod
    def tool_dirs() -> List[str]:
        """Directories searched, in order, before falling back to PATH."""
        root = FFmpegUtils._bundle_root()
        dirs = [
            os.path.join(root, "external", "ffmpeg", "bin"),
            os.path.join(root, "external", "ffmpeg"),
            root,
        ]
        if sys.platform == "darwin":
            dirs.extend(MAC_TOOL_DIRS)
        return dirs

    @staticmethod
    def find_tool(name: str) -> str:
        """Resolves an FFmpeg suite binary (ffmpeg, ffprobe) by its file name."""
        if name in FFmpegUtils._tool_cache:
            return FFmpegUtils._tool_cache[name]

        exe_name = f"{name}.exe" if sys.platform == "win32" else name
        found = next(
            (os.path.join(d, exe_name) for d in FFmpegUtils.tool_dirs()
             if os.access(os.path.join(d, exe_name), os.X_OK)),
            None,
        )
        resolved = found or shutil.which(name) or name
        FFmpegUtils._tool_cache[name] = resolved
        return resolved

    @staticmethod
    def get_ffmpeg_path() -> str:
        return FFmpegUtils.find_tool("ffmpeg")

    @staticmethod
    def get_ffprobe_path(override: Optional[str] = None) -> str:
        return override or FFmpegUtils.find_tool("ffprobe")

    @staticmethod
    def probe_duration(file_path: str, timeout: float = 4.0, ffprobe_path: Optional[str] = None) -> float:
        """
        Returns the container duration in seconds.
        Raises ProbeFailure when ffprobe is missing, times out or reports nothing usable.
        """
        cmd = [
            FFmpegUtils.get_ffprobe_path(ffprobe_path), '-v', 'error',
            '-show_entries', 'format=duration:stream=duration',
            '-of', 'json', file_path
        ]
        try:
            output = subprocess.check_output(cmd, timeout=timeout).decode('utf-8')
            data = json.loads(output)
        except (OSError, subprocess.SubprocessError, ValueError) as e:
            raise ProbeFailure(f"ffprobe failed for {os.path.basename(file_path)}: {e}") from e
        if not isinstance(data, dict):
            raise ProbeFailure(f"Unexpected ffprobe output for {os.path.basename(file_path)}")

        fmt = data.get("format")
        raw = fmt.get("duration") if isinstance(fmt, dict) else None
        if raw is None:
            # Some containers only carry the duration on the stream
            streams = data.get('streams')
            streams = streams if isinstance(streams, list) else []
            raw = next((s.get('duration') for s in streams if isinstance(s, dict) and s.get('duration')), None)
        try:
            duration = float(raw)
        except (TypeError, ValueError):
            raise ProbeFailure(f"No duration reported for {os.path.basename(file_path)}")
        if not math.isfinite(duration) or duration <= 0:
            raise ProbeFailure(f"Unusable duration {raw!r} for {os.path.basename(file_path)}")
        return duration
