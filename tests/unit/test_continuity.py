"""
Tests for the continuity reducers, without any playback surface.
"""
import pytest

from cliprail.core import continuity as cont
from cliprail.core.continuity import (ContinuityController, ContinuityState, LoadClip, PendingSeek,
                                      Play, PlaybackPhase, SeekTo)
from cliprail.core.layout import LayoutCalculator


@pytest.fixture
def layout(clip_factory):
    # Tracks deliberately alternate: playback order must ignore them
    return LayoutCalculator().compute([
        clip_factory("A", 10, track=0),
        clip_factory("B", 5, track=1),
        clip_factory("C", 5, track=0),
    ])


def _active(clip_id, local=0.0, percent=0.0, playing=False):
    return ContinuityState(PlaybackPhase.ACTIVE, clip_id, None, local, percent, playing)


def test_select_other_clip_parks_pending_seek(layout):
    state, commands = cont.select_clip(ContinuityState(), "B", 2.0, layout)
    assert state.phase == PlaybackPhase.AWAITING_LOAD
    assert state.pending == PendingSeek("B", 2.0, False)
    assert commands == [LoadClip("B")]
    assert state.global_percent == pytest.approx(60)


def test_select_active_clip_seeks_immediately(layout):
    state, commands = cont.select_clip(_active("A"), "A", 4.0, layout)
    assert state.phase == PlaybackPhase.ACTIVE
    assert state.pending is None
    assert commands == [SeekTo(4.0)]
    assert state.global_percent == pytest.approx(20)


def test_newer_seek_overwrites_pending(layout):
    state, _ = cont.select_clip(ContinuityState(), "B", 2.0, layout)
    state, commands = cont.select_clip(state, "B", 3.0, layout)
    assert commands == []
    assert state.pending.local_time == 3.0
    state, commands = cont.select_clip(state, "C", 1.0, layout)
    assert commands == [LoadClip("C")]
    assert state.pending == PendingSeek("C", 1.0, False)


def test_metadata_applies_pending_and_clamps_to_duration(layout):
    state, _ = cont.select_clip(ContinuityState(), "C", 4.5, layout)
    state, commands = cont.metadata_ready(state, 3.0, layout)
    assert state.phase == PlaybackPhase.ACTIVE
    assert state.pending is None
    assert commands == [SeekTo(3.0)]


def test_metadata_with_autoplay_resumes(layout):
    playing = _active("A", playing=True)
    state, _ = cont.select_clip(playing, "B", 1.0, layout)
    state, commands = cont.metadata_ready(state, 5.0, layout)
    assert commands == [SeekTo(1.0), Play()]
    assert state.playing


def test_metadata_without_pending_resyncs_from_zero(layout):
    state = ContinuityState(PlaybackPhase.AWAITING_LOAD, "B", None, 3.0, 77.0)
    state, commands = cont.metadata_ready(state, 5.0, layout)
    assert commands == []
    assert state.phase == PlaybackPhase.ACTIVE
    assert state.global_percent == pytest.approx(50)


def test_time_updates_only_while_active(layout):
    state, _ = cont.time_updated(_active("B"), 2.5, layout)
    assert state.global_percent == pytest.approx(62.5)

    waiting, _ = cont.select_clip(ContinuityState(), "C", 0.0, layout)
    unchanged, _ = cont.time_updated(waiting, 4.0, layout)
    assert unchanged == waiting


def test_ended_advances_in_global_order(layout):
    state, commands = cont.ended(_active("A", 10.0, 50.0, playing=True), layout)
    # B sits on another track but is next in the global sequence
    assert state.active_clip_id == "B"
    assert state.phase == PlaybackPhase.AWAITING_LOAD
    assert state.pending == PendingSeek("B", 0.0, True)
    assert state.global_percent == pytest.approx(50)
    assert commands == [LoadClip("B")]


def test_ended_on_last_clip_is_terminal(layout):
    state, commands = cont.ended(_active("C", 5.0, 99.0, playing=True), layout)
    assert commands == []
    assert state.active_clip_id == "C"
    assert state.global_percent == 100.0
    assert not state.playing


def test_sequence_changed_defaults_and_resets(layout):
    state, commands = cont.sequence_changed(ContinuityState(), layout)
    assert state.active_clip_id == "A"
    assert commands == [LoadClip("A")]

    empty = LayoutCalculator().compute([])
    state, commands = cont.sequence_changed(_active("A", 3.0, 15.0), empty)
    assert state == ContinuityState()
    assert commands == []


def test_sequence_changed_keeps_local_time_after_reorder(clip_factory, layout):
    reordered = LayoutCalculator().compute([
        clip_factory("B", 5, 1), clip_factory("C", 5, 0), clip_factory("A", 10, 0),
    ])
    state, _ = cont.sequence_changed(_active("A", 5.0, 25.0), reordered)
    assert state.global_percent == pytest.approx(75)


def test_controller_commits_state_before_driving_surface(layout):
    seen = []

    class RecordingSurface:
        def load(self, clip_id):
            seen.append(("load", controller.phase))
            controller.handle_metadata_ready(5.0, layout)

        def seek_to(self, seconds):
            seen.append(("seek", seconds))

        def play(self):
            seen.append(("play",))

        def pause(self):
            seen.append(("pause",))

        def stop(self):
            seen.append(("stop",))

    controller = ContinuityController(surface=RecordingSurface())
    controller.select("B", 2.0, layout)
    assert seen == [("load", PlaybackPhase.AWAITING_LOAD), ("seek", 2.0)]
    assert controller.phase == PlaybackPhase.ACTIVE


def test_select_clamps_to_known_duration(layout):
    state, commands = cont.select_clip(_active("B"), "B", 42.0, layout)
    assert commands == [SeekTo(5.0)]
    assert state.local_time == 5.0


def test_surface_attached_reissues_load(layout):
    state, commands = cont.surface_attached(_active("C", 2.0, 60.0, playing=True), layout)
    assert commands == [LoadClip("C")]
    assert state.phase == PlaybackPhase.AWAITING_LOAD
    assert state.pending == PendingSeek("C", 2.0, True)

    idle, commands = cont.surface_attached(ContinuityState(), layout)
    assert idle == ContinuityState()
    assert commands == []
