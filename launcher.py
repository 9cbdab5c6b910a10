import sys
import os


def setup_env():
    """Puts a bundled FFmpeg on PATH and ensures the project root is importable."""
    exe_dir = os.path.dirname(sys.executable)
    if getattr(sys, 'frozen', False):
        application_path = sys._MEIPASS if hasattr(sys, '_MEIPASS') else exe_dir
    else:
        application_path = os.path.dirname(os.path.abspath(__file__))

    # Use exe_dir if external/ exists there (installed mode), else application_path
    root = exe_dir if os.path.isdir(os.path.join(exe_dir, "external")) else application_path

    ffmpeg_bin = os.path.join(root, 'external', 'ffmpeg', 'bin')
    if os.path.isdir(ffmpeg_bin):
        if hasattr(os, 'add_dll_directory'):
            os.add_dll_directory(ffmpeg_bin)
        if ffmpeg_bin not in os.environ.get('PATH', ''):
            os.environ['PATH'] = ffmpeg_bin + os.pathsep + os.environ.get('PATH', '')

    if application_path not in sys.path:
        sys.path.insert(0, application_path)

    return application_path


if __name__ == "__main__":
    setup_env()
    from cliprail.preview import main
    sys.exit(main())
