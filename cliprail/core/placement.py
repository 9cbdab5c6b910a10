import logging
from dataclasses import replace
from typing import List, Optional, Sequence

from .models import Clip, DropPosition

logger = logging.getLogger(__name__)


class PlacementEngine:
    """Computes the reordered sequence produced by a drag-and-drop move."""

    @staticmethod
    def place(sequence: Sequence[Clip], moving_clip_id: str, destination_track: int,
              anchor_clip_id: Optional[str] = None,
              position: DropPosition = DropPosition.END) -> List[Clip]:
        remaining = [c for c in sequence if c.id != moving_clip_id]
        if len(remaining) == len(sequence):
            logger.debug("Placement ignored, clip %s is not in the sequence", moving_clip_id)
            return list(sequence)

        moving = next(c for c in sequence if c.id == moving_clip_id)
        moved = replace(moving, track=max(0, int(destination_track)))

        if anchor_clip_id is None or position == DropPosition.END:
            return remaining + [moved]

        anchor_index = next((i for i, c in enumerate(remaining) if c.id == anchor_clip_id), -1)
        if anchor_index < 0:
            logger.debug("Anchor %s not found, appending %s at the end", anchor_clip_id, moving_clip_id)
            return remaining + [moved]

        insert_at = anchor_index if position == DropPosition.BEFORE else anchor_index + 1
        return remaining[:insert_at] + [moved] + remaining[insert_at:]

    @staticmethod
    def drop_position_for(pointer_x: float, target_left: float, target_width: float) -> DropPosition:
        """Left half of the hovered clip means before, right half means after."""
        midline = target_left + target_width / 2
        return DropPosition.BEFORE if pointer_x < midline else DropPosition.AFTER
