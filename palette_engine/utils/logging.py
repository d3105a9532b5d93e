"""
Palette Engine Logging
Opt-in stdout sink for loguru plus a thin wrapper that binds extras.

The pipeline itself only emits records through `loguru.logger`; it never
adds or removes sinks. Applications that want the engine's format call
get_logger() (or build a StructuredLogger) once at startup.
"""
import sys
from typing import Any, Dict, Optional

from loguru import logger

from palette_engine.config import config

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message} | {extra}"


class StructuredLogger:
    """
    Owns one stdout sink alongside whatever sinks the host already has.

    Extras passed to a call are bound onto the record, so they appear in
    the {extra} field, or as JSON keys when the sink serializes.
    """

    def __init__(self, level: Optional[str] = None, serialize: Optional[bool] = None):
        self.level = (level or config.LOG_LEVEL).upper()
        self.serialize = config.LOG_JSON if serialize is None else serialize
        self.sink_id: Optional[int] = logger.add(
            sys.stdout,
            format=LOG_FORMAT,
            level=self.level,
            serialize=self.serialize,
        )

    def close(self) -> None:
        """Remove this logger's sink; other sinks are left alone."""
        if self.sink_id is not None:
            logger.remove(self.sink_id)
            self.sink_id = None

    def log(self, level: str, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        bound = logger.bind(**extra) if extra else logger
        bound.log(level.upper(), message)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.log("DEBUG", message, extra)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.log("INFO", message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.log("WARNING", message, extra)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.log("ERROR", message, extra)


_logger: Optional[StructuredLogger] = None


def get_logger() -> StructuredLogger:
    """Return the process-wide logger, adding its sink on first use."""
    global _logger
    if _logger is None:
        _logger = StructuredLogger()
    return _logger
