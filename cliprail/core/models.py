import logging
import math
import os
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class DropPosition(Enum):
    """Where a dragged clip lands relative to the anchor clip."""
    BEFORE = "before"
    AFTER = "after"
    END = "end"


class MediaHandle:
    """
    Exclusively owned reference to a clip's media resource.
    Released exactly once, either when the clip leaves the registry or at teardown.
    """
    def __init__(self, path, owns_file: bool = False):
        self.path = str(path)
        self.owns_file = owns_file
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    @property
    def uri(self) -> str:
        return Path(self.path).absolute().as_uri()

    def release(self) -> bool:
        """Frees the resource. Returns False if it had already been released."""
        if self._released:
            logger.warning("Media handle for %s released twice", self.path)
            return False
        self._released = True

        if self.owns_file and os.path.exists(self.path):
            try:
                os.remove(self.path)
            except OSError as e:
                logger.warning("Could not remove owned media file %s: %s", self.path, e)
        return True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if not self._released:
            self.release()
        return False

    def __repr__(self):
        state = "released" if self._released else "live"
        return f"MediaHandle({self.path!r}, {state})"


def new_clip_id() -> str:
    return f"clip-{uuid.uuid4().hex}"


@dataclass(frozen=True)
class Clip:
    """
    One imported media unit on the timeline.
    Only track (and sequence position, held by the registry) change after import;
    duration is filled in once when the probe resolves.
    """
    id: str
    name: str
    resource: MediaHandle
    size_label: str
    mime_type: str
    duration: float = 0.0
    track: int = 0

    @property
    def has_duration(self) -> bool:
        return self.duration > 0


def sanitize_duration(value: Optional[float]) -> float:
    """Probe results that are missing, negative or not finite count as unknown (0)."""
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(seconds) or seconds < 0:
        return 0.0
    return seconds
