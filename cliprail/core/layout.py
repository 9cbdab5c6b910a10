from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .models import Clip

DEFAULT_MIN_DURATION = 0.01


@dataclass(frozen=True)
class LayoutEntry:
    """Derived timing and width data for one clip. Never stored."""
    clip_id: str
    track: int
    duration: float
    safe_duration: float
    start: float
    layout_start: float
    width_percent: float
    left_percent: float

    @property
    def end(self) -> float:
        """Cumulative actual end used when resolving a global seek."""
        return self.start + self.safe_duration


@dataclass(frozen=True)
class TimelineLayout:
    entries: Tuple[LayoutEntry, ...] = field(default_factory=tuple)
    actual_total: float = 0.0
    layout_total: float = DEFAULT_MIN_DURATION

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def index_of(self, clip_id: Optional[str]) -> int:
        for i, entry in enumerate(self.entries):
            if entry.clip_id == clip_id:
                return i
        return -1

    def entry_for(self, clip_id: Optional[str]) -> Optional[LayoutEntry]:
        index = self.index_of(clip_id)
        return self.entries[index] if index >= 0 else None

    def entries_on_track(self, track: int) -> List[LayoutEntry]:
        return [e for e in self.entries if e.track == track]


class LayoutCalculator:
    """
    Maps clip durations onto a proportional axis.
    One fold over the sequence carries two cursors: the floor-adjusted layout
    cursor that drives widths and the actual cursor that drives playback time.
    """
    def __init__(self, min_duration: float = DEFAULT_MIN_DURATION):
        self.min_duration = min_duration

    def safe_duration(self, duration: float) -> float:
        return duration if duration > self.min_duration else self.min_duration

    def compute(self, sequence: Iterable[Clip]) -> TimelineLayout:
        clips = list(sequence)
        if not clips:
            return TimelineLayout(layout_total=self.min_duration)

        layout_cursor = 0.0
        actual_cursor = 0.0
        partial = []
        for clip in clips:
            duration = max(0.0, clip.duration)
            safe = self.safe_duration(duration)
            partial.append((clip, duration, safe, actual_cursor, layout_cursor))
            layout_cursor += safe
            actual_cursor += duration

        layout_total = max(layout_cursor, self.min_duration)
        entries = tuple(
            LayoutEntry(
                clip_id=clip.id,
                track=clip.track,
                duration=duration,
                safe_duration=safe,
                start=start,
                layout_start=layout_start,
                width_percent=safe / layout_total * 100,
                left_percent=layout_start / layout_total * 100,
            )
            for clip, duration, safe, start, layout_start in partial
        )
        return TimelineLayout(entries=entries, actual_total=actual_cursor, layout_total=layout_total)
