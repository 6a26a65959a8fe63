"""Logging: printf-style and brace-style formatting, appenders and a shared logger."""

from __future__ import annotations

import enum
import os
import sys
import threading
from typing import Any, Optional, TextIO


class LogLevel(enum.IntEnum):
    """Severity of a log record; higher values are more severe."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4

    @property
    def label(self) -> str:
        """Prefix written in front of every record of this level."""
        return f"[{self.name}] "


class _Args:
    """Sequential consumer of formatting arguments."""

    def __init__(self, args: tuple) -> None:
        self._items = iter(args)

    def take(self) -> Any:
        try:
            return next(self._items)
        except StopIteration:
            raise ValueError("not enough arguments for format string") from None


def _as_char(value: Any) -> str:
    if isinstance(value, int):
        return chr(value)
    text = str(value)
    return text[:1]


def format_printf(fmt: str, *args: Any) -> str:
    """Format ``fmt`` with the small printf subset understood by appenders.

    Integer conversions (%d, %i, %u, %o, %x, %X and the l/h variants) are
    always written in decimal; floating conversions use the shortest form
    with six significant digits. Unknown conversions write the character
    after '%' verbatim, and a precision marker ("%.") is dropped.
    """
    values = _Args(args)
    out: list[str] = []
    i = 0
    length = len(fmt)
    while i < length:
        ch = fmt[i]
        if ch != "%":
            out.append(ch)
            i += 1
            continue

        spec = fmt[i + 1] if i + 1 < length else ""
        after = fmt[i + 2] if i + 2 < length else ""
        step = 2 if spec else 1

        if spec in ("d", "i"):
            out.append(str(int(values.take())))
        elif spec in ("f", "F", "e", "E"):
            out.append(f"{float(values.take()):g}")
        elif spec == "c":
            out.append(_as_char(values.take()))
        elif spec == "s":
            out.append(str(values.take()))
        elif spec in ("u", "o", "x", "X"):
            out.append(str(int(values.take()) & 0xFFFFFFFF))
        elif spec == "l":
            if after in ("d", "l"):
                out.append(str(int(values.take())))
            else:
                out.append(spec + after)
            if after:
                step += 1
        elif spec == "h":
            if after == "d":
                out.append(str(int(values.take())))
            elif after == "u":
                out.append(str(int(values.take()) & 0xFFFFFFFF))
            else:
                out.append(spec + after)
            if after:
                step += 1
        elif spec == "%":
            out.append("%")
        elif spec == ".":
            pass
        else:
            out.append(spec)
        i += step
    return "".join(out)


def format_braces(fmt: str, *args: Any) -> str:
    """Replace each ``{}`` in ``fmt`` with the next argument.

    Placeholders without a matching argument are left as they are and
    surplus arguments are ignored.
    """
    pieces = fmt.split("{}")
    out = [pieces[0]]
    remaining = iter(args)
    for piece in pieces[1:]:
        try:
            out.append(str(next(remaining)))
        except StopIteration:
            out.append("{}")
        out.append(piece)
    return "".join(out)


class Appender:
    """A destination for log output."""

    def __init__(self, stream: Optional[TextIO] = None, format: str = "") -> None:
        self.format = format
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        """The target stream; standard output when none was given."""
        return self._stream if self._stream is not None else sys.stdout

    def write_format_string(self, level_name: str, file_path: str, line: int) -> None:
        """Write the record prefix: level, source location and a tab."""
        self.stream.write(f"{level_name}{file_path}:{line}\t")

    def write(self, text: str) -> None:
        """Write ``text`` unchanged."""
        self.stream.write(text)

    def write_printf(self, fmt: str, *args: Any) -> None:
        """Write ``fmt`` formatted with :func:`format_printf`."""
        self.stream.write(format_printf(fmt, *args))


def _caller_location() -> tuple[str, int]:
    frame = sys._getframe(1)
    here = os.path.normcase(__file__)
    while frame is not None and os.path.normcase(frame.f_code.co_filename) == here:
        frame = frame.f_back
    if frame is None:
        return "<unknown>", 0
    return os.path.basename(frame.f_code.co_filename), frame.f_lineno


class Logger:
    """Writes records at or above a threshold level to every appender."""

    def __init__(self, level: LogLevel = LogLevel.INFO, stream: Optional[TextIO] = None) -> None:
        self.level = LogLevel(level)
        self.appenders: list[Appender] = [Appender(stream)]
        self._lock = threading.Lock()

    def add_appender(self, stream: TextIO) -> Appender:
        """Send future records to ``stream`` as well."""
        appender = Appender(stream)
        with self._lock:
            self.appenders.append(appender)
        return appender

    def log(self, level: LogLevel, message: str, *args: Any) -> None:
        """Format ``message`` with ``args`` and write it if ``level`` passes."""
        level = LogLevel(level)
        if level < self.level:
            return
        text = format_braces(message, *args)
        file_path, line = _caller_location()
        with self._lock:
            for appender in self.appenders:
                appender.write_format_string(level.label, file_path, line)
                appender.write(text + "\n")

    def trace(self, message: str, *args: Any) -> None:
        self.log(LogLevel.TRACE, message, *args)

    def debug(self, message: str, *args: Any) -> None:
        self.log(LogLevel.DEBUG, message, *args)

    def info(self, message: str, *args: Any) -> None:
        self.log(LogLevel.INFO, message, *args)

    def warn(self, message: str, *args: Any) -> None:
        self.log(LogLevel.WARN, message, *args)

    def error(self, message: str, *args: Any) -> None:
        self.log(LogLevel.ERROR, message, *args)


_shared_logger: Optional[Logger] = None
_shared_lock = threading.Lock()


def get_logger() -> Logger:
    """Return the process-wide logger, creating it on first use."""
    global _shared_logger
    with _shared_lock:
        if _shared_logger is None:
            _shared_logger = Logger()
        return _shared_logger