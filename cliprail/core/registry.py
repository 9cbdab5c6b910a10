import logging
from dataclasses import replace
from typing import Iterable, List, Optional

from .errors import InvalidReference
from .models import Clip, MediaHandle, new_clip_id, sanitize_duration

logger = logging.getLogger(__name__)


class ClipRegistry:
    """
    Owns the single global ordering of clips and their track assignment.
    Playback follows this order; tracks are visual lanes only.
    """
    def __init__(self):
        self._clips: List[Clip] = []
        self.revision = 0

    def __len__(self):
        return len(self._clips)

    def __iter__(self):
        return iter(self._clips)

    def __contains__(self, clip_id):
        return any(c.id == clip_id for c in self._clips)

    @property
    def sequence(self) -> List[Clip]:
        return list(self._clips)

    @property
    def is_empty(self) -> bool:
        return not self._clips

    def get(self, clip_id: str) -> Clip:
        for clip in self._clips:
            if clip.id == clip_id:
                return clip
        raise InvalidReference(clip_id)

    def find(self, clip_id: Optional[str]) -> Optional[Clip]:
        try:
            return self.get(clip_id)
        except InvalidReference:
            return None

    def index_of(self, clip_id: str) -> int:
        for i, clip in enumerate(self._clips):
            if clip.id == clip_id:
                return i
        return -1

    def add(self, name: str, resource: MediaHandle, size_label: str, mime_type: str, track: int = 0) -> Clip:
        """Appends a freshly imported clip; its duration stays 0 until probed."""
        clip = Clip(
            id=new_clip_id(),
            name=name,
            resource=resource,
            size_label=size_label,
            mime_type=mime_type or "video",
            track=max(0, int(track)),
        )
        self._clips.append(clip)
        self.revision += 1
        logger.info("Imported clip %s (%s) on track %d", clip.name, clip.id, clip.track)
        return clip

    def set_duration(self, clip_id: str, duration) -> Clip:
        """Stores the probed duration. Raises InvalidReference for unknown ids."""
        index = self.index_of(clip_id)
        if index < 0:
            raise InvalidReference(clip_id)
        clip = replace(self._clips[index], duration=sanitize_duration(duration))
        self._clips[index] = clip
        self.revision += 1
        return clip

    def replace_sequence(self, sequence: Iterable[Clip]):
        """
        Swaps in a reordered sequence in one step.
        The new sequence must hold exactly the same clip ids.
        """
        new_sequence = list(sequence)
        if sorted(c.id for c in new_sequence) != sorted(c.id for c in self._clips):
            raise ValueError("replacement sequence must be a permutation of the current clips")
        self._clips = new_sequence
        self.revision += 1

    def remove(self, clip_id: str) -> Optional[Clip]:
        """Drops a clip and releases its media resource."""
        index = self.index_of(clip_id)
        if index < 0:
            return None
        clip = self._clips.pop(index)
        clip.resource.release()
        self.revision += 1
        logger.info("Removed clip %s (%s)", clip.name, clip.id)
        return clip

    def teardown(self):
        """Releases every remaining resource and empties the registry."""
        clips, self._clips = self._clips, []
        for clip in clips:
            clip.resource.release()
        if clips:
            self.revision += 1
        logger.debug("Registry torn down, %d resources released", len(clips))
