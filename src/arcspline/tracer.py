"""
Hierarchical runtime tracing for the ArcSpline fitting pipeline.

Nested spans with timing show where a fit spends its time and what each
stage found (corners, segments, biarcs) without stepping through code.
Tracing is off by default and never changes fit results.
"""

import functools
import hashlib
import inspect
import json
import sys
import time
from collections import Counter, namedtuple
from contextlib import contextmanager
from datetime import datetime

import numpy as np
from pydantic import BaseModel


OpenSpan = namedtuple("OpenSpan", ["name", "module", "started"])


class TracerConfig:
    """Output settings of a tracer."""

    def __init__(self):
        self.enabled = False
        self.level = "INFO"
        self.file_path = None
        self.json_output = False
        self._file_handle = None

    def configure(self, enabled=False, level="INFO", file_path=None, json_output=False):
        self.close()

        self.enabled = enabled
        self.level = level.upper()
        self.file_path = file_path
        self.json_output = json_output

        if enabled and file_path:
            self._file_handle = open(file_path, "w", encoding="utf-8")

    def close(self):
        """Close the trace file, if one is open."""
        if self._file_handle is not None:
            self._file_handle.close()
            self._file_handle = None

    def write_line(self, line):
        print(line, file=sys.stderr)
        if self._file_handle is not None:
            self._file_handle.write(line + "\n")
            self._file_handle.flush()


class Tracer:
    """
    Tracer for fitting runs.

    Spans nest; every line is indented by the current span depth in text
    mode, or carries the depth as a field in JSON-lines mode. Events are
    attributed to the innermost open span. Events are counted per level in
    `counts` whether or not tracing is enabled, so callers can report
    warnings raised while fitting.
    """

    LEVELS = {"ERROR": 0, "WARN": 1, "INFO": 2, "DEBUG": 3}

    def __init__(self):
        self.config = TracerConfig()
        self.counts = Counter()
        self._open_spans = []

    def is_enabled_for(self, level):
        if not self.config.enabled:
            return False
        return self.LEVELS.get(level, 2) <= self.LEVELS.get(self.config.level, 2)

    def reset_counts(self):
        self.counts.clear()

    def _write(self, level, span_name, module, message, meta):
        now = datetime.now()
        timestamp = now.strftime("%H:%M:%S.") + f"{now.microsecond // 1000:03d}"
        depth = len(self._open_spans)

        if self.config.json_output:
            self.config.write_line(json.dumps({
                "timestamp": timestamp,
                "level": level,
                "depth": depth,
                "module": module,
                "function": span_name,
                "message": message,
                "meta": {k: summarize(v) for k, v in meta.items()},
            }))
            return

        location = f"{module}:{span_name}" if span_name else module
        details = " ".join(f"{k}={summarize(v)}" for k, v in meta.items())
        text = f"{message} {details}".strip()
        self.config.write_line(f"{timestamp} {level:<5} {'  ' * depth}{location}  {text}")

    @contextmanager
    def span(self, name, module="", **meta):
        """
        Trace a block of work as a named span.

        Logs start and end with timing. A failing span is logged at ERROR
        level and the exception propagates.
        """
        if not self.config.enabled:
            yield
            return

        if self.is_enabled_for("INFO"):
            self._write("INFO", name, module, "start", meta)
        opened = OpenSpan(name, module, time.perf_counter())
        self._open_spans.append(opened)

        try:
            yield
        except Exception as e:
            self._open_spans.pop()
            elapsed = (time.perf_counter() - opened.started) * 1000
            self._write("ERROR", name, module,
                        f"failed dt={elapsed:.0f}ms error={type(e).__name__}: {str(e)[:100]}", {})
            raise

        self._open_spans.pop()
        if self.is_enabled_for("INFO"):
            elapsed = (time.perf_counter() - opened.started) * 1000
            self._write("INFO", name, module, f"end ok dt={elapsed:.1f}ms", {})

    def event(self, message, level="INFO", **meta):
        """Count an event and log it within the innermost open span."""
        self.counts[level] += 1
        if not self.is_enabled_for(level):
            return

        name, module = "", ""
        if self._open_spans:
            name, module = self._open_spans[-1].name, self._open_spans[-1].module
        self._write(level, name, module, message, meta)


def summarize(obj, max_len=200):
    """
    Compact description of an object for trace lines, at most max_len chars.

    Points print as coordinates, larger arrays as dtype, shape and a content
    hash. Geometry types print their defining numbers. Summaries are best
    effort: an object that cannot be described prints as its type name.
    """
    try:
        result = _describe(obj)
    except Exception:
        result = f"<{type(obj).__name__}>"
    if len(result) > max_len:
        result = result[:max_len - 3] + "..."
    return result


def _short_hash(data):
    return hashlib.md5(data).hexdigest()[:8]


def _describe(obj):
    type_name = type(obj).__name__

    if obj is None:
        return "None"

    if isinstance(obj, np.ndarray):
        if obj.shape == (2,):
            return f"({obj[0]:.2f},{obj[1]:.2f})"
        shape = "x".join(str(s) for s in obj.shape)
        content = obj.tobytes() if 0 < obj.size < 1000 else shape.encode()
        return f"ndarray({obj.dtype},{shape},h={_short_hash(content)})"

    if isinstance(obj, BaseModel):
        fields = list(type(obj).model_fields.keys())[:3]
        return f"{type_name}(fields={fields}...)"

    # Geometry types are matched by name; importing them here would be circular
    if type_name == "Range":
        return f"Range[{obj.start:.2f},{obj.end:.2f}]"
    if type_name == "ParametrizedPolyline":
        return f"Polyline(samples={len(obj)},length={obj.length():.1f})"
    if type_name == "Biarc":
        return f"Biarc(d0={obj.param.d0:.2f},d1={obj.param.d1:.2f})"
    if type_name == "ArcSpline":
        return f"ArcSpline(shapes={len(obj.display_shapes)},corners={len(obj.debug_corners)})"

    if isinstance(obj, str):
        if len(obj) > 50:
            return f"str(len={len(obj)},h={_short_hash(obj.encode())})"
        return repr(obj)

    if isinstance(obj, bytes):
        return f"bytes(len={len(obj)},h={_short_hash(obj)})"

    if isinstance(obj, (list, tuple)):
        if not obj:
            return f"{type_name}(len=0)"
        return f"{type_name}(len={len(obj)},first={type(obj[0]).__name__})"

    if isinstance(obj, dict):
        keys = ",".join(str(k) for k in list(obj.keys())[:5])
        return f"dict(len={len(obj)},keys=[{keys}])"

    if isinstance(obj, float):
        return f"{obj:.4g}"

    if isinstance(obj, (int, np.integer, np.floating)):
        return str(obj)

    return f"<{type_name}>"


def trace(label=None, arg_names=None):
    """
    Decorator that runs a function inside a tracer span.

    Arguments named in arg_names, positional or keyword, are summarized
    into the span's start line.
    """
    def decorator(func):
        signature = inspect.signature(func)
        module = func.__module__.split(".")[-1] if func.__module__ else ""
        name = label or func.__name__

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if not _tracer.config.enabled:
                return func(*args, **kwargs)

            meta = {}
            if arg_names:
                bound = signature.bind_partial(*args, **kwargs)
                meta = {k: bound.arguments[k] for k in arg_names if k in bound.arguments}

            with _tracer.span(name, module=module, **meta):
                return func(*args, **kwargs)

        return wrapper
    return decorator


# Diagnostics only; fitting state lives in ArcSpline and DrawingSession objects
_tracer = Tracer()


def get_tracer():
    return _tracer


def configure_tracer(enabled=False, level="INFO", file_path=None, json_output=False):
    """Configure the global tracer and reset its event counts."""
    _tracer.config.configure(
        enabled=enabled,
        level=level,
        file_path=file_path,
        json_output=json_output,
    )
    _tracer.reset_counts()
