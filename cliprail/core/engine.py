import logging
from typing import List, Optional

from PySide6.QtCore import QObject, Signal

from .continuity import ContinuityController, ContinuityState
from .errors import InvalidReference
from .layout import LayoutCalculator, TimelineLayout
from .models import Clip, DropPosition, MediaHandle
from .placement import PlacementEngine
from .registry import ClipRegistry
from .seek import SeekMapper
from .settings import EngineSettings

logger = logging.getLogger(__name__)


class TimelineEngine(QObject):
    """
    Virtual multi-clip timeline.
    Owns the clip registry and the global scrub position, recomputes layout on
    every structural change and routes playback through the continuity controller.
    """

    layout_changed = Signal(object)        # TimelineLayout
    position_changed = Signal(float)       # global percent 0..100
    active_clip_changed = Signal(object)   # Clip or None
    clip_imported = Signal(object)         # Clip
    clip_removed = Signal(str)             # clip id

    def __init__(self, surface=None, settings: Optional[EngineSettings] = None, prober=None, parent=None):
        super().__init__(parent)
        self.settings = (settings or EngineSettings()).normalized()
        self.registry = ClipRegistry()
        self.calculator = LayoutCalculator(self.settings.min_clip_duration)
        self._layout = TimelineLayout(layout_total=self.settings.min_clip_duration)
        self.prober = prober

        self.controller = ContinuityController(resolve_clip=self.registry.find)
        self.controller.on_state_changed = self._on_continuity_changed
        self.surface = None
        if surface is not None:
            self.attach_surface(surface)

    # Read-only views

    @property
    def layout(self) -> TimelineLayout:
        return self._layout

    @property
    def clips(self) -> List[Clip]:
        return self.registry.sequence

    @property
    def state(self) -> ContinuityState:
        return self.controller.state

    @property
    def global_percent(self) -> float:
        return self.controller.state.global_percent

    @property
    def active_clip(self) -> Optional[Clip]:
        return self.registry.find(self.controller.state.active_clip_id)

    # Playback surface wiring

    def attach_surface(self, surface):
        """Connects a PlaybackSurface. Only the continuity controller commands it."""
        if self.surface is not None:
            self.surface.metadata_ready.disconnect(self._on_metadata_ready)
            self.surface.time_updated.disconnect(self._on_time_updated)
            self.surface.ended.disconnect(self._on_ended)
        self.surface = surface
        self.controller.surface = surface
        surface.metadata_ready.connect(self._on_metadata_ready)
        surface.time_updated.connect(self._on_time_updated)
        surface.ended.connect(self._on_ended)
        self.controller.handle_surface_attached(self._layout)

    def _on_metadata_ready(self, duration: float):
        self.controller.handle_metadata_ready(duration, self._layout)

    def _on_time_updated(self, local_time: float):
        self.controller.handle_time_updated(local_time, self._layout)

    def _on_ended(self):
        self.controller.handle_ended(self._layout)

    # Mutating entry points

    def import_clip(self, name: str, resource, size_label: str, mime_type: str,
                    track: Optional[int] = None) -> Clip:
        """Adds a clip at the end of the sequence and asks the prober for its duration."""
        if not isinstance(resource, MediaHandle):
            resource = MediaHandle(resource)
        track = self._clamp_track(self.settings.default_track if track is None else track)
        clip = self.registry.add(name, resource, size_label, mime_type, track)
        self.clip_imported.emit(clip)
        self._structure_changed()
        if self.prober is not None:
            self.prober.probe(clip, self.set_clip_duration)
        return clip

    def set_clip_duration(self, clip_id: str, duration: float):
        """Probe callback. Durations may arrive long after the clip was laid out."""
        try:
            clip = self.registry.set_duration(clip_id, duration)
        except InvalidReference:
            logger.debug("Duration for removed clip %s ignored", clip_id)
            return
        if not clip.has_duration:
            logger.warning("No usable duration for %s, keeping floor width", clip.name)
        self._structure_changed()

    def remove_clip(self, clip_id: str) -> bool:
        clip = self.registry.remove(clip_id)
        if clip is None:
            return False
        self.clip_removed.emit(clip_id)
        self._structure_changed()
        return True

    def clear(self):
        removed = [c for c in self.registry.sequence if self.registry.remove(c.id) is not None]
        for clip in removed:
            self.clip_removed.emit(clip.id)
        if removed:
            self._structure_changed()

    def teardown(self):
        """Releases every clip resource. Called once when the application closes."""
        self.registry.teardown()
        self._structure_changed()

    def seek_global(self, percent: float):
        target = SeekMapper.to_clip_time(percent, self._layout.entries, self._layout.actual_total)
        if target is None:
            return
        clip_id, local_time = target
        self.controller.select(clip_id, local_time, self._layout)

    def select_clip(self, clip_id: str, local_time: float = 0.0):
        """Library or timeline click on a clip."""
        if clip_id not in self.registry:
            logger.debug("Selection of unknown clip %s ignored", clip_id)
            return
        self.controller.select(clip_id, local_time, self._layout)

    def place(self, moving_clip_id: str, destination_track: int, anchor_clip_id: Optional[str] = None,
              position: DropPosition = DropPosition.END):
        """Moves a clip to another lane and/or position in the global order."""
        if moving_clip_id not in self.registry:
            return
        new_sequence = PlacementEngine.place(
            self.registry.sequence, moving_clip_id, self._clamp_track(destination_track),
            anchor_clip_id, DropPosition(position),
        )
        self.registry.replace_sequence(new_sequence)
        self._structure_changed()

    def play(self):
        self.controller.set_playing(True)

    def pause(self):
        self.controller.set_playing(False)

    # Internals

    def _clamp_track(self, track: int) -> int:
        return min(max(0, int(track)), self.settings.track_count - 1)

    def _structure_changed(self):
        self._layout = self.calculator.compute(self.registry.sequence)
        self.layout_changed.emit(self._layout)
        self.controller.handle_sequence_changed(self._layout)

    def _on_continuity_changed(self, previous: ContinuityState, current: ContinuityState):
        if previous.active_clip_id != current.active_clip_id:
            self.active_clip_changed.emit(self.registry.find(current.active_clip_id))
        if previous.global_percent != current.global_percent:
            self.position_changed.emit(current.global_percent)
