from typing import Optional, Sequence, Tuple

import numpy as np

from .layout import LayoutEntry


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class SeekMapper:
    """Translates between the global scrub percentage and a clip's local time."""

    @staticmethod
    def to_clip_time(global_percent: float, entries: Sequence[LayoutEntry],
                     actual_total: float) -> Optional[Tuple[str, float]]:
        """
        Resolves a global percentage to (clip_id, local seconds).
        Returns None when there is nothing to seek into.
        """
        if not entries or actual_total <= 0:
            return None

        target = clamp(float(global_percent), 0.0, 100.0) / 100.0 * actual_total
        ends = np.fromiter((e.end for e in entries), dtype=np.float64, count=len(entries))

        # Ends never decrease, so the first end reaching the target is a bisection
        index = int(np.searchsorted(ends, target, side="left"))
        if index >= len(entries):
            index = len(entries) - 1
        entry = entries[index]
        local = clamp(target - entry.start, 0.0, entry.safe_duration)
        return entry.clip_id, local

    @staticmethod
    def to_global_percent(clip_id: str, local_time: float, entries: Sequence[LayoutEntry],
                          actual_total: float) -> Optional[float]:
        """Inverse mapping used on every native playback position update."""
        if actual_total <= 0:
            return None
        entry = next((e for e in entries if e.clip_id == clip_id), None)
        if entry is None:
            return None
        global_seconds = entry.start + min(max(0.0, local_time), entry.safe_duration)
        return clamp(global_seconds / actual_total * 100.0, 0.0, 100.0)

    @staticmethod
    def start_percent(entry: LayoutEntry, actual_total: float) -> float:
        if actual_total <= 0:
            return 0.0
        return clamp(entry.start / actual_total * 100.0, 0.0, 100.0)
