import logging

from PySide6.QtCore import QObject, QUrl, Signal
from PySide6.QtMultimedia import QAudioOutput, QMediaPlayer

logger = logging.getLogger(__name__)


class PlaybackSurface(QObject):
    """
    Abstract single-stream playback surface.
    Holds one clip at a time; switching clips means a full reload.
    """
    metadata_ready = Signal(float)   # duration in seconds (0 if unknown)
    time_updated = Signal(float)     # current local time in seconds
    ended = Signal()

    def load(self, clip):
        raise NotImplementedError

    def seek_to(self, seconds: float):
        raise NotImplementedError

    def play(self):
        raise NotImplementedError

    def pause(self):
        raise NotImplementedError

    def stop(self):
        raise NotImplementedError


class QtMediaSurface(PlaybackSurface):
    """PlaybackSurface backed by QMediaPlayer."""

    def __init__(self, video_output=None, parent=None):
        super().__init__(parent)
        self.player = QMediaPlayer(self)
        self.audio_output = QAudioOutput(self)
        self.player.setAudioOutput(self.audio_output)
        if video_output is not None:
            self.player.setVideoOutput(video_output)

        self.current_clip = None
        self._awaiting_metadata = False

        self.player.mediaStatusChanged.connect(self._on_media_status_changed)
        self.player.positionChanged.connect(self._on_position_changed)
        self.player.errorOccurred.connect(self._on_error)

    def load(self, clip):
        self.current_clip = clip
        self._awaiting_metadata = True
        logger.debug("Loading %s into player", clip.resource.path)
        self.player.setSource(QUrl.fromLocalFile(clip.resource.path))

    def seek_to(self, seconds: float):
        self.player.setPosition(int(max(0.0, seconds) * 1000))

    def play(self):
        self.player.play()

    def pause(self):
        self.player.pause()

    def stop(self):
        self.player.stop()
        self.player.setSource(QUrl())
        self.current_clip = None
        self._awaiting_metadata = False

    def _emit_metadata(self, duration_ms):
        if not self._awaiting_metadata:
            return
        self._awaiting_metadata = False
        self.metadata_ready.emit(max(0, duration_ms) / 1000.0)

    def _on_media_status_changed(self, status):
        # Some backends jump straight to BufferedMedia and skip LoadedMedia
        ready = (QMediaPlayer.MediaStatus.LoadedMedia, QMediaPlayer.MediaStatus.BufferedMedia)
        if status in ready:
            self._emit_metadata(self.player.duration())
        elif status == QMediaPlayer.MediaStatus.EndOfMedia:
            self.ended.emit()
        elif status == QMediaPlayer.MediaStatus.InvalidMedia:
            # Unblock a parked seek even though nothing will play
            self._emit_metadata(0)

    def _on_position_changed(self, position_ms):
        if not self._awaiting_metadata:
            self.time_updated.emit(position_ms / 1000.0)

    def _on_error(self, error, message):
        logger.warning("Playback error for %s: %s", getattr(self.current_clip, "name", "?"), message)
