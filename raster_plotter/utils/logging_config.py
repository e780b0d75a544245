"""Logging setup for the command-line entry points.

Library modules only ever call ``logging.getLogger(__name__)``; the CLIs
call ``setup_logging`` once, which installs handlers on the root logger.

Line formats::

    2026-10-19T13:45:12.345Z | INFO     | app=trace image=logo.png | Traced 42 paths
    {"t": "2026-10-19T13:45:12.345000+00:00", "lvl": "INFO", "name": "...", "pid": 1, "msg": "...", "app": "trace"}

Context fields (``push_context(image="logo.png")``) live in a ContextVar
and are appended to every record formatted in the same context.

Calling ``setup_logging`` again replaces the handlers it installed before
instead of stacking new ones.
"""

import contextvars
import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

_context_var: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar(
    'raster_plotter_log_context', default={}
)

_configured = False

_RESET = '\033[0m'
_LEVEL_COLORS = {
    'DEBUG': '\033[36m',
    'INFO': '\033[32m',
    'WARNING': '\033[33m',
    'ERROR': '\033[31m',
    'CRITICAL': '\033[35m',
}


class ContextFormatter(logging.Formatter):
    """Human or JSON-lines formatter that appends the current context fields."""

    def __init__(self, fmt_mode: str = "human", use_color: bool = True, tz: str = "UTC"):
        super().__init__()
        if fmt_mode not in ("human", "json"):
            raise ValueError(f"Unknown format mode: {fmt_mode}. Use 'human' or 'json'.")
        self.fmt_mode = fmt_mode
        self.use_color = use_color and sys.stderr.isatty()
        self.tz = timezone.utc if tz == "UTC" else None

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=self.tz)
        context = _context_var.get()
        if self.fmt_mode == "json":
            return self._json_line(record, ts, context)
        return self._human_line(record, ts, context)

    def _json_line(self, record: logging.LogRecord, ts: datetime, context: Dict[str, Any]) -> str:
        payload = {
            't': ts.isoformat(),
            'lvl': record.levelname,
            'name': record.name,
            'pid': os.getpid(),
            'msg': record.getMessage(),
            **context,
        }
        if record.exc_info:
            payload['exc'] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)

    def _human_line(self, record: logging.LogRecord, ts: datetime, context: Dict[str, Any]) -> str:
        level = f"{record.levelname:8s}"
        if self.use_color:
            level = f"{_LEVEL_COLORS.get(record.levelname, '')}{level}{_RESET}"

        fields = [ts.strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z', level]
        if context:
            fields.append(' '.join(f"{k}={v}" for k, v in context.items()))
        fields.append(record.getMessage())

        line = ' | '.join(fields)
        if record.exc_info:
            line += '\n' + self.formatException(record.exc_info)
        return line


def _file_handler(log_file: str, rotate: Optional[Dict[str, Any]]) -> logging.Handler:
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    if not rotate:
        return logging.FileHandler(log_file)

    mode = rotate.get('mode', 'size')
    if mode == 'size':
        return logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=rotate.get('max_bytes', 10_000_000),
            backupCount=rotate.get('backup_count', 5),
        )
    if mode == 'time':
        return logging.handlers.TimedRotatingFileHandler(
            log_file,
            when=rotate.get('when', 'D'),
            interval=rotate.get('interval', 1),
            backupCount=rotate.get('backup_count', 7),
        )
    raise ValueError(f"Unknown rotation mode: {mode}. Use 'size' or 'time'.")


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    *,
    json: bool = False,
    color: bool = True,
    to_stderr: bool = True,
    rotate: Optional[Dict[str, Any]] = None,
    tz: str = "UTC",
    capture_warnings: bool = True,
    quiet_libs: Optional[List[str]] = None,
    context: Optional[Dict[str, Any]] = None,
) -> List[logging.Handler]:
    """Install console and/or file handlers on the root logger.

    Parameters
    ----------
    log_level : str
        Level name, case-insensitive ("DEBUG", "info", ...)
    log_file : str, optional
        Also log to this file (parents are created)
    json : bool
        JSON lines in the file handler; the console stays human-readable
    color : bool
        ANSI level colours on the console when stderr is a TTY
    to_stderr : bool
        Attach a console handler
    rotate : dict, optional
        ``{"mode": "size", "max_bytes": ..., "backup_count": ...}`` or
        ``{"mode": "time", "when": "D", "interval": 1, "backup_count": ...}``
    tz : str
        "UTC" or "local" timestamps
    capture_warnings : bool
        Route ``warnings.warn`` through logging
    quiet_libs : list of str, optional
        Logger names clamped to WARNING (e.g. ``["PIL"]``)
    context : dict, optional
        Fields pushed with ``push_context`` (e.g. ``{"app": "trace"}``)

    Returns
    -------
    list of logging.Handler
        The handlers now attached to the root logger

    Raises
    ------
    ValueError
        Unknown level or rotation mode
    """
    global _configured

    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    handlers: List[logging.Handler] = []
    if to_stderr:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(ContextFormatter("human", color, tz))
        handlers.append(console)
    if log_file:
        file_handler = _file_handler(log_file, rotate)
        file_handler.setFormatter(ContextFormatter("json" if json else "human", use_color=False, tz=tz))
        handlers.append(file_handler)

    root = logging.getLogger()
    if _configured:
        for old in root.handlers[:]:
            root.removeHandler(old)
            old.close()
    root.setLevel(level)
    for handler in handlers:
        root.addHandler(handler)

    for lib in quiet_libs or []:
        logging.getLogger(lib).setLevel(logging.WARNING)
    if context:
        push_context(**context)
    logging.captureWarnings(capture_warnings)

    _configured = True
    return handlers


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def push_context(**fields: Any) -> None:
    """Add fields to every subsequent record in this context."""
    _context_var.set({**_context_var.get(), **fields})


def pop_context(keys: Optional[List[str]] = None) -> None:
    """Drop the named fields, or all of them when *keys* is None."""
    if keys is None:
        _context_var.set({})
        return
    remaining = dict(_context_var.get())
    for key in keys:
        remaining.pop(key, None)
    _context_var.set(remaining)
