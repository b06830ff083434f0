# ringchart/logging.py
from __future__ import annotations
import logging as _logging
import os
import sys
from typing import Any, TextIO

_ANSI = {
    "reset": "\x1b[0m",
    "green": "\x1b[32m",
    "yellow": "\x1b[33m",
    "red": "\x1b[31m",
    "cyan": "\x1b[36m",
    "gray": "\x1b[90m",
}

# mark name -> (glyph, colour)
_MARKS = {
    "ok": ("✓", "green"),
    "warn": ("⚠", "yellow"),
    "err": ("✖", "red"),
    "step": ("→", "cyan"),
}

_LOGGER = _logging.getLogger("ringchart")


def _supports_color(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty()) and (os.environ.get("TERM") not in (None, "dumb"))


def _level_for(verbosity: int) -> int:
    if verbosity >= 2:
        return _logging.DEBUG
    if verbosity == 1:
        return _logging.INFO
    return _logging.WARNING


class MarkFormatter(_logging.Formatter):
    """
    Prefixes records with the glyph named by their 'mark' extra and appends
    their 'detail' extra. Colour is decided per handler, so a file handler
    next to a terminal one stays free of escape codes.
    """

    def __init__(self, fmt: str = "%(message)s", *, color: bool = False):
        super().__init__(fmt)
        self.color = color

    def _paint(self, text: str, color: str) -> str:
        if not self.color:
            return text
        return f"{_ANSI[color]}{text}{_ANSI['reset']}"

    def format(self, record: _logging.LogRecord) -> str:
        parts = []
        mark = getattr(record, "mark", None)
        if mark in _MARKS:
            glyph, color = _MARKS[mark]
            parts.append(self._paint(glyph, color))
        parts.append(record.getMessage())
        detail = getattr(record, "detail", "")
        if detail:
            parts.append(self._paint(str(detail), "gray"))

        # other handlers see the same record
        marked = _logging.makeLogRecord(record.__dict__)
        marked.msg, marked.args = " ".join(parts), None
        return super().format(marked)


def setup_logging(verbosity: int = 0, log_file: str | None = None, *, stream: TextIO | None = None) -> None:
    """Configure chart logging. Verbosity: 0→WARNING, 1→INFO, 2+→DEBUG."""
    stream = stream or sys.stdout
    level = _level_for(verbosity)
    _LOGGER.handlers.clear()
    _LOGGER.setLevel(level)

    sh = _logging.StreamHandler(stream=stream)
    sh.setLevel(level)
    sh.setFormatter(MarkFormatter(color=_supports_color(stream)))
    _LOGGER.addHandler(sh)

    if log_file:
        fh = _logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(MarkFormatter("%(asctime)s %(levelname)s %(message)s"))
        _LOGGER.addHandler(fh)


def log_info(msg: str) -> None:
    _LOGGER.info(msg)

def log_debug(msg: str) -> None:
    _LOGGER.debug(msg)

def log_warn(msg: str) -> None:
    _LOGGER.warning(msg, extra={"mark": "warn"})

def log_err(msg: str) -> None:
    _LOGGER.error(msg, extra={"mark": "err"})

def log_ok(msg: str) -> None:
    _LOGGER.info(msg, extra={"mark": "ok"})

def log_step(label: str, value: str = "") -> None:
    _LOGGER.info(label, extra={"mark": "step", "detail": value})

def log_fields(label: str, **fields: Any) -> None:
    """Debug line of the form 'label: k=v k=v' (skipped cheaply when DEBUG is off)."""
    if not _LOGGER.isEnabledFor(_logging.DEBUG):
        return
    parts = " ".join(f"{k}={v}" for k, v in fields.items())
    _LOGGER.debug(f"{label}:", extra={"detail": parts})
