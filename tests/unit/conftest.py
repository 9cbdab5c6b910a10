import pytest

from cliprail.core.models import Clip, MediaHandle
from cliprail.infrastructure.playback_surface import PlaybackSurface


@pytest.fixture(scope="session", autouse=True)
def qapp():
    """Ensure a Qt application exists for QObject signals."""
    from PySide6.QtCore import QCoreApplication
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


class FakeSurface(PlaybackSurface):
    """Playback surface that reports metadata synchronously on load()."""

    def __init__(self, durations=None):
        super().__init__()
        self.durations = durations or {}
        self.calls = []
        self.loaded = None
        self.position = 0.0
        self.playing = False
        self.auto_metadata = True

    def load(self, clip):
        self.calls.append(("load", clip.id))
        self.loaded = clip
        self.position = 0.0
        if self.auto_metadata:
            self.metadata_ready.emit(self.durations.get(clip.id, clip.duration))

    def seek_to(self, seconds):
        self.calls.append(("seek", seconds))
        self.position = seconds

    def play(self):
        self.calls.append(("play",))
        self.playing = True

    def pause(self):
        self.calls.append(("pause",))
        self.playing = False

    def stop(self):
        self.calls.append(("stop",))
        self.loaded = None
        self.playing = False

    def finish(self):
        """Simulates the media reaching its end."""
        self.ended.emit()


def make_clip(clip_id, duration=0.0, track=0):
    return Clip(
        id=clip_id,
        name=f"{clip_id}.mp4",
        resource=MediaHandle(f"/media/{clip_id}.mp4"),
        size_label="1.0 MB",
        mime_type="video/mp4",
        duration=duration,
        track=track,
    )


@pytest.fixture
def clip_factory():
    return make_clip


@pytest.fixture
def fake_surface():
    return FakeSurface()
