import json
import logging
import os
from dataclasses import dataclass, asdict, fields
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class EngineSettings:
    """Tunables for the timeline engine and its collaborators."""
    # Floor substituted for unknown/zero durations so the clip stays visible
    min_clip_duration: float = 0.01
    track_count: int = 2
    default_track: int = 0
    probe_timeout: float = 4.0
    ffprobe_path: Optional[str] = None

    def normalized(self) -> "EngineSettings":
        """Returns a copy with out-of-range values pulled back into range."""
        min_dur = self.min_clip_duration
        if not isinstance(min_dur, (int, float)) or min_dur <= 0:
            min_dur = EngineSettings.min_clip_duration
        track_count = max(1, int(self.track_count))
        default_track = min(max(0, int(self.default_track)), track_count - 1)
        timeout = self.probe_timeout if self.probe_timeout and self.probe_timeout > 0 else EngineSettings.probe_timeout
        return EngineSettings(
            min_clip_duration=float(min_dur),
            track_count=track_count,
            default_track=default_track,
            probe_timeout=float(timeout),
            ffprobe_path=self.ffprobe_path or None,
        )

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "EngineSettings":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known}).normalized()


def load_settings(path) -> EngineSettings:
    """Reads settings from a JSON file, falling back to defaults."""
    if not path or not os.path.exists(path):
        return EngineSettings()
    try:
        with open(path, 'r') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("settings root must be an object")
        return EngineSettings.from_dict(data)
    except (OSError, ValueError, TypeError) as e:
        logger.warning("Ignoring unreadable settings file %s: %s", path, e)
        return EngineSettings()


def save_settings(settings: EngineSettings, path):
    with open(path, 'w') as f:
        json.dump(settings.to_dict(), f, indent=4)
