import logging
import mimetypes
import os
import sys

from PySide6.QtWidgets import QApplication
from PySide6.QtMultimediaWidgets import QVideoWidget

from .core.engine import TimelineEngine
from .core.formatting import format_duration, format_file_size
from .core.models import MediaHandle
from .core.settings import load_settings
from .infrastructure.playback_surface import QtMediaSurface
from .infrastructure.workers.probe_worker import DurationProber

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = os.path.join(os.path.expanduser("~"), ".cliprail.json")


def import_files(engine: TimelineEngine, paths):
    """Imports files in order, alternating them across the available tracks."""
    for i, path in enumerate(paths):
        if not os.path.isfile(path):
            logger.warning("Skipping missing file %s", path)
            continue
        mime_type = mimetypes.guess_type(path)[0] or "video"
        engine.import_clip(
            os.path.basename(path),
            MediaHandle(path),
            format_file_size(os.path.getsize(path)),
            mime_type,
            track=i % engine.settings.track_count,
        )


def main(argv=None):
    argv = sys.argv if argv is None else argv
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    paths = argv[1:]
    if not paths:
        print("usage: cliprail-preview CLIP [CLIP ...]")
        return 2

    app = QApplication(argv)
    settings = load_settings(os.environ.get("CLIPRAIL_SETTINGS", DEFAULT_SETTINGS_PATH))

    viewer = QVideoWidget()
    viewer.setWindowTitle("cliprail preview")
    viewer.resize(960, 540)

    surface = QtMediaSurface(video_output=viewer)
    prober = DurationProber.from_settings(settings)
    engine = TimelineEngine(surface=surface, settings=settings, prober=prober)

    def on_position(percent):
        total = engine.layout.actual_total
        viewer.setWindowTitle(
            f"cliprail preview - {format_duration(percent / 100 * total)} / {format_duration(total)}")

    def on_active(clip):
        if clip is not None:
            logger.info("Now showing %s (%s, %s)", clip.name, clip.size_label, clip.mime_type)

    def on_quit():
        prober.shutdown()
        engine.teardown()

    engine.position_changed.connect(on_position)
    engine.active_clip_changed.connect(on_active)
    app.aboutToQuit.connect(on_quit)

    import_files(engine, paths)
    if engine.layout.is_empty:
        logger.error("Nothing to preview")
        return 1

    viewer.show()
    engine.play()
    return app.exec()
