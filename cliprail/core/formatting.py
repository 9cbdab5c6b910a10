import math

SIZE_UNITS = ["B", "KB", "MB", "GB"]


def format_file_size(num_bytes: float) -> str:
    """Human readable size label shown next to a clip (base 1024)."""
    if num_bytes is None or not math.isfinite(num_bytes) or num_bytes < 0:
        return "—"
    if num_bytes == 0:
        return "0 B"
    exponent = min(int(math.floor(math.log(num_bytes) / math.log(1024))), len(SIZE_UNITS) - 1)
    exponent = max(0, exponent)
    value = num_bytes / 1024 ** exponent
    return f"{value:.0f} {SIZE_UNITS[exponent]}" if value >= 10 else f"{value:.1f} {SIZE_UNITS[exponent]}"


def format_duration(seconds: float) -> str:
    """Short m:ss label used by the scrubber and the inspector."""
    if seconds is None or not math.isfinite(seconds) or seconds <= 0:
        return "0:00"
    mins = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{mins}:{secs:02}"


def format_timecode(seconds: float, fps: float) -> str:
    """Standard SMPTE-like timecode formatting."""
    total_seconds = max(0.0, seconds)
    frame = total_seconds * fps
    h = int(total_seconds // 3600)
    m = int((total_seconds // 60) % 60)
    s = int(total_seconds % 60)
    f = int(frame % fps)
    return f"{h:02}:{m:02}:{s:02};{f:02}"
