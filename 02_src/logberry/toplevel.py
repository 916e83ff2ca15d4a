"""Process-wide default root and main task."""

import atexit
import sys
import threading

from .config import Settings, load_settings
from .logging_config import get_logger
from .outputs import JSONOutput, LoggingErrorListener, TextOutput
from .root import BackgroundRoot, ImmediateRoot, IRoot
from .task import Task

logger = get_logger(__name__)

MAIN_COMPONENT = "main"

_lock = threading.RLock()
_std: IRoot | None = None
_main: Task | None = None


def build_root(settings: Settings) -> IRoot:
    """Create a root with the driver and listener described by ``settings``."""
    if settings.root_mode == "background":
        root: IRoot = BackgroundRoot(buffer=settings.buffer)
        atexit.register(root.stop)
    else:
        root = ImmediateRoot()

    stream = sys.stderr if settings.stream == "stderr" else sys.stdout
    if settings.output == "text":
        root.add_output_driver(TextOutput(stream, program=settings.program))
    elif settings.output == "json":
        root.add_output_driver(JSONOutput(stream))

    root.add_error_listener(LoggingErrorListener())
    logger.debug("Built %s root with %s output", settings.root_mode, settings.output)
    return root


def get_std() -> IRoot:
    """Return the default root, building it from the environment on first use."""
    global _std
    with _lock:
        if _std is None:
            _std = build_root(load_settings())
        return _std


def get_main() -> Task:
    """Return the ``main`` component of the default root."""
    global _main
    with _lock:
        if _main is None:
            _main = get_std().component(MAIN_COMPONENT)
        return _main


def set_std(root: IRoot) -> IRoot:
    """Replace the default root; the main task is recreated on next use."""
    global _std, _main
    with _lock:
        _std = root
        _main = None
    return root


def reset() -> None:
    """Stop and discard the default root and main task."""
    global _std, _main
    with _lock:
        root, _std, _main = _std, None, None
    if root is not None:
        atexit.unregister(root.stop)
        root.stop()
