"""
Hierarchical runtime tracing for the vectorization pipeline.

Nested spans with timing, one-off events and compact summaries of arrays,
statistics and approximations, written as text or JSON lines to stderr
and optionally to a file. Span durations are also accumulated per span
name to profile the stages of repeated vectorizer runs.
"""

import functools
import hashlib
import json
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime

import numpy as np
from pydantic import BaseModel


@dataclass
class TracerConfig:
    """Output settings of a tracer."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False
    _file_handle: object = field(default=None, repr=False, compare=False)

    def configure(self, enabled=False, level="INFO", file_path=None, json_output=False):
        """Apply new settings, reopening the trace file if needed."""
        self.close()
        self.enabled = enabled
        self.level = level.upper()
        self.file_path = file_path
        self.json_output = json_output
        if file_path and enabled:
            self._file_handle = open(file_path, "w", encoding="utf-8")

    def close(self):
        """Close file handle if open."""
        if self._file_handle:
            self._file_handle.close()
            self._file_handle = None


@dataclass
class SpanRecord:
    """An open span on the tracer stack."""
    name: str
    module: str
    start: float


class Tracer:
    """
    Hierarchical tracer for structured pipeline logging.

    Text lines are indented by span depth; JSON lines carry the depth as
    a field instead.
    """

    LEVELS = {"ERROR": 0, "WARN": 1, "INFO": 2, "DEBUG": 3}

    def __init__(self):
        self.config = TracerConfig()
        self._stack = []
        # span name -> [calls, total milliseconds]
        self.timings = {}

    @property
    def depth(self):
        return len(self._stack)

    def _should_log(self, level):
        if not self.config.enabled:
            return False
        return self.LEVELS.get(level, 2) <= self.LEVELS.get(self.config.level, 2)

    def _write(self, level, module, func, message, meta=None):
        if not self._should_log(level):
            return

        now = datetime.now()
        timestamp = now.strftime("%H:%M:%S.") + f"{now.microsecond // 1000:03d}"

        if self.config.json_output:
            line = json.dumps({
                "timestamp": timestamp,
                "level": level,
                "depth": self.depth,
                "module": module,
                "function": func,
                "message": message,
                "meta": {k: summarize(v) for k, v in (meta or {}).items()},
            })
        else:
            location = f"{module}:{func}" if func else module
            line = f"{timestamp} {level:<5} {'  ' * self.depth}{location}  {message}"

        print(line, file=sys.stderr)
        handle = self.config._file_handle
        if handle:
            handle.write(line + "\n")
            handle.flush()

    def _close_span(self, record):
        self._stack.pop()
        elapsed = (time.perf_counter() - record.start) * 1000
        entry = self.timings.setdefault(record.name, [0, 0.0])
        entry[0] += 1
        entry[1] += elapsed
        return elapsed

    @contextmanager
    def span(self, name, module="", **meta):
        """
        Context manager for a traced span.

        Logs start and end with timing information. Exceptions are logged
        at ERROR level and re-raised.
        """
        if not self.config.enabled:
            yield
            return

        header = " ".join(f"{k}={summarize(v)}" for k, v in meta.items())
        self._write("INFO", module, name, f"start {header}".strip(), meta)
        record = SpanRecord(name, module, time.perf_counter())
        self._stack.append(record)

        try:
            yield
        except Exception as e:
            elapsed = self._close_span(record)
            self._write(
                "ERROR", module, name,
                f"failed dt={elapsed:.1f}ms error={type(e).__name__}: {str(e)[:100]}",
            )
            raise

        elapsed = self._close_span(record)
        self._write("INFO", module, name, f"end ok dt={elapsed:.1f}ms")

    def event(self, message, level="INFO", **meta):
        """Log a one-off event within the current span."""
        if not self._should_log(level):
            return

        module, func = "", ""
        if self._stack:
            module, func = self._stack[-1].module, self._stack[-1].name

        details = " ".join(f"{k}={summarize(v)}" for k, v in meta.items())
        self._write(level, module, func, f"{message} {details}".strip(), meta)

    def reset_timings(self):
        self.timings = {}


def summarize(obj, max_len=200):
    """
    Summarize an object for logging.

    Returns a compact string representation that never exceeds max_len chars.
    """
    try:
        result = _summarize_impl(obj)
    except Exception:
        return f"<{type(obj).__name__}>"
    if len(result) > max_len:
        return result[:max_len - 3] + "..."
    return result


def _digest(data):
    return hashlib.md5(data).hexdigest()[:8]


def _summarize_impl(obj):
    type_name = type(obj).__name__

    if obj is None or isinstance(obj, bool):
        return str(obj)
    if isinstance(obj, int):
        return str(obj)
    if isinstance(obj, float):
        return f"{obj:.6g}"
    if isinstance(obj, np.generic):
        return _summarize_impl(obj.item())

    if isinstance(obj, np.ndarray):
        shape = "x".join(str(s) for s in obj.shape)
        h = _digest(obj.tobytes() if 0 < obj.size < 1000 else shape.encode())
        return f"ndarray({obj.dtype},{shape},h={h})"

    if isinstance(obj, BaseModel):
        fields = list(type(obj).model_fields.keys())[:3]
        return f"{type_name}(fields={fields}...)"

    # fitted approximations
    sigma2 = getattr(obj, "sigma2", None)
    if isinstance(sigma2, float):
        return f"{type_name}(sigma2={sigma2:.3g})"

    # sufficient statistics
    count = getattr(obj, "count", None)
    dim = getattr(obj, "dim", None)
    if isinstance(count, float) and isinstance(dim, int):
        return f"{type_name}(dim={dim},count={count:g})"

    if isinstance(obj, str):
        if len(obj) > 50:
            return f"str(len={len(obj)},h={_digest(obj.encode())})"
        return repr(obj)

    if isinstance(obj, (list, tuple)):
        if not obj:
            return f"{type_name}(len=0)"
        return f"{type_name}(len={len(obj)},first={type(obj[0]).__name__})"

    if isinstance(obj, dict):
        keys = ",".join(str(k) for k in list(obj)[:5])
        return f"dict(len={len(obj)},keys=[{keys}])"

    return f"<{type_name}>"


def trace(label=None, arg_names=None):
    """
    Decorator to trace function execution.

    Wraps a function in a span that logs start/end with timing. Keyword
    arguments listed in arg_names are summarized into the span header.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if not _tracer.config.enabled:
                return func(*args, **kwargs)

            module = func.__module__.split(".")[-1] if func.__module__ else ""
            meta = {name: kwargs[name] for name in (arg_names or []) if name in kwargs}
            with _tracer.span(label or func.__name__, module=module, **meta):
                return func(*args, **kwargs)

        return wrapper
    return decorator


# Global tracer instance
_tracer = Tracer()


def get_tracer():
    """Get the global tracer instance."""
    return _tracer


def configure_tracer(enabled=False, level="INFO", file_path=None, json_output=False):
    """Configure the global tracer."""
    _tracer.config.configure(
        enabled=enabled,
        level=level,
        file_path=file_path,
        json_output=json_output,
    )
