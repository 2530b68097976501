import logging
import sys


logger = logging.getLogger("soyloader")

_DEBUG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(debug: bool):
    """
    Route soyloader log records to stderr at INFO, or DEBUG when debugging.

    stdout is left to command output such as compiled templates.
    """
    log_level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(log_level)

    handler = next(
        (h for h in logger.handlers if getattr(h, "_soyloader_cli", False)), None
    )
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
        handler._soyloader_cli = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    else:
        handler.setStream(sys.stderr)
    handler.setFormatter(logging.Formatter(_DEBUG_FORMAT if debug else "%(message)s"))
