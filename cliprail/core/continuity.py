"""
Playback continuity across clip boundaries.

A single playback surface can only hold one clip at a time. Swapping the
clip means a full reload whose real duration arrives later, so a seek that
targets another clip is parked in a single pending slot until the surface
reports metadata for it. Each event is a pure reducer over
``ContinuityState`` returning the new state plus the surface commands to
issue; ``ContinuityController`` commits the state and then drives the
surface with those commands.
"""
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Tuple

from .layout import TimelineLayout
from .seek import SeekMapper

logger = logging.getLogger(__name__)


class PlaybackPhase(Enum):
    IDLE = 0
    ACTIVE = 1
    AWAITING_LOAD = 2


@dataclass(frozen=True)
class PendingSeek:
    clip_id: str
    local_time: float
    autoplay: bool = False


@dataclass(frozen=True)
class ContinuityState:
    phase: PlaybackPhase = PlaybackPhase.IDLE
    active_clip_id: Optional[str] = None
    pending: Optional[PendingSeek] = None
    local_time: float = 0.0
    global_percent: float = 0.0
    playing: bool = False


# Surface commands

@dataclass(frozen=True)
class LoadClip:
    clip_id: str


@dataclass(frozen=True)
class SeekTo:
    local_time: float


@dataclass(frozen=True)
class Play:
    pass


@dataclass(frozen=True)
class Pause:
    pass


Transition = Tuple[ContinuityState, List[object]]


def _percent_or(current: float, clip_id: Optional[str], local_time: float, layout: TimelineLayout) -> float:
    percent = SeekMapper.to_global_percent(clip_id, local_time, layout.entries, layout.actual_total)
    return current if percent is None else percent


def select_clip(state: ContinuityState, clip_id: str, local_time: float,
                layout: TimelineLayout) -> Transition:
    """Makes clip_id the playback target, positioned at local_time."""
    entry = layout.entry_for(clip_id)
    if entry is None:
        return state, []
    local_time = max(0.0, local_time)
    if entry.duration > 0:
        local_time = min(local_time, entry.duration)
    percent = _percent_or(state.global_percent, clip_id, local_time, layout)

    if clip_id == state.active_clip_id and state.phase == PlaybackPhase.ACTIVE:
        new_state = replace(state, local_time=local_time, global_percent=percent)
        return new_state, [SeekTo(local_time)]

    if clip_id == state.active_clip_id and state.phase == PlaybackPhase.AWAITING_LOAD:
        # Still loading: the newer target replaces the parked one
        pending = PendingSeek(clip_id, local_time, state.pending.autoplay if state.pending else state.playing)
        return replace(state, pending=pending, local_time=local_time, global_percent=percent), []

    new_state = replace(
        state,
        phase=PlaybackPhase.AWAITING_LOAD,
        active_clip_id=clip_id,
        pending=PendingSeek(clip_id, local_time, state.playing),
        local_time=local_time,
        global_percent=percent,
    )
    return new_state, [LoadClip(clip_id)]


def metadata_ready(state: ContinuityState, duration: float, layout: TimelineLayout) -> Transition:
    """The surface finished loading the active clip and knows its real duration."""
    if state.active_clip_id is None:
        return state, []

    pending = state.pending
    if state.phase == PlaybackPhase.AWAITING_LOAD and pending and pending.clip_id == state.active_clip_id:
        target = pending.local_time
        if duration > 0:
            target = min(target, duration)
        new_state = replace(
            state,
            phase=PlaybackPhase.ACTIVE,
            pending=None,
            local_time=target,
            global_percent=_percent_or(state.global_percent, state.active_clip_id, target, layout),
            playing=pending.autoplay,
        )
        commands = [SeekTo(target)]
        if pending.autoplay:
            commands.append(Play())
        return new_state, commands

    new_state = replace(
        state,
        phase=PlaybackPhase.ACTIVE,
        pending=None,
        local_time=0.0,
        global_percent=_percent_or(state.global_percent, state.active_clip_id, 0.0, layout),
    )
    return new_state, []


def time_updated(state: ContinuityState, local_time: float, layout: TimelineLayout) -> Transition:
    if state.phase != PlaybackPhase.ACTIVE:
        return state, []
    percent = _percent_or(state.global_percent, state.active_clip_id, local_time, layout)
    return replace(state, local_time=max(0.0, local_time), global_percent=percent), []


def ended(state: ContinuityState, layout: TimelineLayout) -> Transition:
    """Advances to the next clip in global order, whatever its track."""
    if state.phase != PlaybackPhase.ACTIVE:
        return state, []
    index = layout.index_of(state.active_clip_id)
    if index < 0:
        return state, []

    if index + 1 >= len(layout.entries):
        last = layout.entries[index]
        return replace(state, global_percent=100.0, local_time=last.safe_duration, playing=False), []

    nxt = layout.entries[index + 1]
    new_state = replace(
        state,
        phase=PlaybackPhase.AWAITING_LOAD,
        active_clip_id=nxt.clip_id,
        pending=PendingSeek(nxt.clip_id, 0.0, True),
        local_time=0.0,
        global_percent=SeekMapper.start_percent(nxt, layout.actual_total),
        playing=True,
    )
    return new_state, [LoadClip(nxt.clip_id)]


def sequence_changed(state: ContinuityState, layout: TimelineLayout) -> Transition:
    """Reconciles the state after clips were imported, removed, reordered or probed."""
    if layout.is_empty:
        return ContinuityState(), []
    if layout.entry_for(state.active_clip_id) is None:
        # Nothing active (or the active clip was removed): default to the first clip
        fresh = replace(state, phase=PlaybackPhase.IDLE, active_clip_id=None, pending=None, local_time=0.0)
        return select_clip(fresh, layout.entries[0].clip_id, 0.0, layout)
    percent = _percent_or(state.global_percent, state.active_clip_id, state.local_time, layout)
    return replace(state, global_percent=percent), []


def surface_attached(state: ContinuityState, layout: TimelineLayout) -> Transition:
    """A new surface holds nothing yet: reload the active clip at the remembered time."""
    if state.active_clip_id is None or layout.entry_for(state.active_clip_id) is None:
        return state, []
    pending = state.pending or PendingSeek(state.active_clip_id, state.local_time, state.playing)
    new_state = replace(state, phase=PlaybackPhase.AWAITING_LOAD, pending=pending)
    return new_state, [LoadClip(state.active_clip_id)]


def set_playing(state: ContinuityState, playing: bool) -> Transition:
    if state.active_clip_id is None or state.playing == playing:
        return state, []
    if state.phase == PlaybackPhase.AWAITING_LOAD and state.pending:
        # Applied together with the pending seek
        return replace(state, playing=playing, pending=replace(state.pending, autoplay=playing)), []
    return replace(state, playing=playing), [Play() if playing else Pause()]


class ContinuityController:
    """
    Sole owner of the playback surface.
    Keeps the loaded clip in step with the logical position on the timeline.
    """
    def __init__(self, surface=None, resolve_clip=None):
        self.state = ContinuityState()
        self.surface = surface
        # Maps a clip id to the Clip the surface should load
        self.resolve_clip = resolve_clip
        self.on_state_changed = None

    @property
    def phase(self) -> PlaybackPhase:
        return self.state.phase

    def select(self, clip_id: str, local_time: float, layout: TimelineLayout):
        self._apply(select_clip(self.state, clip_id, local_time, layout))

    def handle_metadata_ready(self, duration: float, layout: TimelineLayout):
        self._apply(metadata_ready(self.state, duration, layout))

    def handle_time_updated(self, local_time: float, layout: TimelineLayout):
        self._apply(time_updated(self.state, local_time, layout))

    def handle_ended(self, layout: TimelineLayout):
        self._apply(ended(self.state, layout))

    def handle_sequence_changed(self, layout: TimelineLayout):
        self._apply(sequence_changed(self.state, layout))

    def handle_surface_attached(self, layout: TimelineLayout):
        self._apply(surface_attached(self.state, layout))

    def set_playing(self, playing: bool):
        self._apply(set_playing(self.state, playing))

    def _apply(self, transition: Transition):
        previous = self.state
        new_state, commands = transition
        self.state = new_state
        if new_state != previous:
            logger.debug("Continuity %s -> %s (clip=%s, pending=%s)",
                         previous.phase.name, new_state.phase.name,
                         new_state.active_clip_id, new_state.pending)
            if self.on_state_changed:
                self.on_state_changed(previous, new_state)
        if new_state.phase == PlaybackPhase.IDLE and previous.phase != PlaybackPhase.IDLE and self.surface:
            self.surface.stop()
        for command in commands:
            self._execute(command)

    def _execute(self, command):
        if self.surface is None:
            return
        if isinstance(command, LoadClip):
            clip = self.resolve_clip(command.clip_id) if self.resolve_clip else command.clip_id
            if clip is not None:
                self.surface.load(clip)
        elif isinstance(command, SeekTo):
            self.surface.seek_to(command.local_time)
        elif isinstance(command, Play):
            self.surface.play()
        elif isinstance(command, Pause):
            self.surface.pause()
