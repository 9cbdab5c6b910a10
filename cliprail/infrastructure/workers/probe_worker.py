import logging

from PySide6.QtCore import QObject, QThread, Signal

from ...core.errors import ProbeFailure
from ..ffmpeg_utils import FFmpegUtils

logger = logging.getLogger(__name__)


class ProbeWorker(QThread):
    """
    Background duration prober for one imported clip.
    Never fails: an unusable probe is reported as duration 0.
    """
    # Emits: clip_id, duration_seconds
    finished = Signal(str, float)

    def __init__(self, clip_id, file_path, timeout=4.0, ffprobe_path=None):
        super().__init__()
        self.clip_id = clip_id
        self.file_path = file_path
        self.timeout = timeout
        self.ffprobe_path = ffprobe_path

    def run(self):
        try:
            duration = FFmpegUtils.probe_duration(self.file_path, self.timeout, self.ffprobe_path)
        except ProbeFailure as e:
            logger.warning("%s", e)
            duration = 0.0
        self.finished.emit(self.clip_id, float(duration))


class DurationProber(QObject):
    """Starts one ProbeWorker per clip and hands the result back on the GUI thread."""

    def __init__(self, timeout=4.0, ffprobe_path=None, parent=None):
        super().__init__(parent)
        self.timeout = timeout
        self.ffprobe_path = ffprobe_path
        self._workers = {}
        self._callbacks = {}

    @classmethod
    def from_settings(cls, settings, parent=None):
        return cls(settings.probe_timeout, settings.ffprobe_path, parent)

    def probe(self, clip, callback):
        worker = ProbeWorker(clip.id, clip.resource.path, self.timeout, self.ffprobe_path)
        worker.finished.connect(self._on_finished)
        self._workers[clip.id] = worker
        self._callbacks[clip.id] = callback
        worker.start()

    def _on_finished(self, clip_id, duration):
        worker = self._workers.pop(clip_id, None)
        callback = self._callbacks.pop(clip_id, None)
        if worker is not None:
            worker.wait()
            worker.deleteLater()
        if callback is not None:
            callback(clip_id, duration)

    def shutdown(self):
        """Blocks until running probes return; each is bounded by the probe timeout."""
        for worker in self._workers.values():
            worker.requestInterruption()
            worker.finished.disconnect(self._on_finished)
            worker.wait()
        self._workers.clear()
        self._callbacks.clear()
