"""
Hierarchical runtime tracing for gesturematch.

Spans nest and time the work done for one gesture; events inside a span
report which templates were tried and how each scored. Lines go to stderr
and, optionally, to a log file, each followed by a JSON record when JSON
output is on.

    12:00:01.250 INFO  cli:cli_match  start
    12:00:01.251 DEBUG   matcher:match_against_templates  Scored dagaz rmsd=0.01 score=97
"""

import functools
import hashlib
import json
import math
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime

import numpy as np
from pydantic import BaseModel
from scipy.spatial.transform import Rotation

LEVEL_RANKS = {"ERROR": 0, "WARN": 1, "INFO": 2, "DEBUG": 3}


@dataclass
class _OpenSpan:
    name: str
    module: str
    started: float

    def elapsed_ms(self):
        return (time.perf_counter() - self.started) * 1000


class Tracer:
    """Writes span and event lines, indented by span depth."""

    def __init__(self):
        self.enabled = False
        self.level = "INFO"
        self.json_output = False
        self._log_file = None
        self._spans = []

    @property
    def depth(self):
        return len(self._spans)

    def configure(self, enabled=False, level="INFO", file_path=None, json_output=False):
        """Replace the current settings; a log file is opened only when enabled."""
        self.close()
        self.enabled = enabled
        self.level = level.upper()
        self.json_output = json_output
        if enabled and file_path:
            self._log_file = open(file_path, "w", encoding="utf-8")

    def close(self):
        if self._log_file is not None:
            self._log_file.close()
            self._log_file = None

    def logs(self, level):
        """Whether a line at this level would be written."""
        if not self.enabled:
            return False
        return LEVEL_RANKS.get(level, 2) <= LEVEL_RANKS.get(self.level, 2)

    def _emit(self, level, module, func, message, meta=None):
        if not self.logs(level):
            return

        stamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        where = f"{module}:{func}" if func else module
        lines = [f"{stamp} {level:<5} {'  ' * self.depth}{where}  {message}"]
        if self.json_output:
            lines.append(json.dumps({
                "timestamp": stamp,
                "level": level,
                "depth": self.depth,
                "module": module,
                "function": func,
                "message": message,
                "meta": {key: summarize(value) for key, value in (meta or {}).items()},
            }))

        for line in lines:
            print(line, file=sys.stderr)
            if self._log_file is not None:
                self._log_file.write(line + "\n")
        if self._log_file is not None:
            self._log_file.flush()

    @contextmanager
    def span(self, name, module="", **meta):
        """Time the enclosed block, logging its start and how it ended."""
        if not self.enabled:
            yield
            return

        self._emit("INFO", module, name, f"start {_format_meta(meta)}".strip())
        current = _OpenSpan(name, module, time.perf_counter())
        self._spans.append(current)
        try:
            yield
        except Exception as e:
            self._spans.pop()
            detail = str(e)[:100]
            self._emit(
                "ERROR", module, name,
                f"failed dt={current.elapsed_ms():.0f}ms error={type(e).__name__}: {detail}",
            )
            raise
        else:
            self._spans.pop()
            self._emit("INFO", module, name, f"end ok dt={current.elapsed_ms():.0f}ms")

    def event(self, message, level="INFO", **meta):
        """Log a message attributed to the innermost open span."""
        if not self.logs(level):
            return
        module, func = "", ""
        if self._spans:
            module, func = self._spans[-1].module, self._spans[-1].name
        self._emit(level, module, func, f"{message} {_format_meta(meta)}".strip(), meta)


def _format_meta(meta):
    return " ".join(f"{key}={summarize(value)}" for key, value in meta.items())


def summarize(obj, max_len=200):
    """
    Short text for a logged value, at most max_len characters.

    3-vectors print by value, larger arrays by dtype, shape and content
    hash, rotations by angle, named models by name, floats to 6 digits.
    """
    text = _summary(obj)
    if len(text) > max_len:
        return text[:max_len - 3] + "..."
    return text


@functools.singledispatch
def _summary(obj):
    return f"<{type(obj).__name__}>"


@_summary.register(type(None))
def _(obj):
    return "None"


@_summary.register(int)
def _(obj):
    return str(obj)


@_summary.register(float)
def _(obj):
    if math.isnan(obj) or math.isinf(obj):
        return str(obj)
    return f"{obj:.6g}"


@_summary.register(np.ndarray)
def _(obj):
    if obj.shape == (3,):
        return "ndarray(" + ",".join(f"{c:.4g}" for c in obj) + ")"
    digest = hashlib.md5(obj.tobytes()).hexdigest()[:8]
    return f"ndarray({obj.dtype},{'x'.join(map(str, obj.shape))},h={digest})"


@_summary.register(Rotation)
def _(obj):
    degrees = np.degrees(np.linalg.norm(obj.as_rotvec()))
    return f"Rotation(deg={degrees:.2f})"


@_summary.register(BaseModel)
def _(obj):
    name = getattr(obj, "name", None)
    if isinstance(name, str):
        return f"{type(obj).__name__}(name={name!r})"
    return f"<{type(obj).__name__}>"


def trace(label=None):
    """Run the decorated function inside a span named label (or its own name)."""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if not _tracer.enabled:
                return func(*args, **kwargs)
            module = func.__module__.rsplit(".", 1)[-1]
            with _tracer.span(label or func.__name__, module=module):
                return func(*args, **kwargs)
        return wrapper
    return decorator


_tracer = Tracer()


def get_tracer():
    """The process-wide tracer."""
    return _tracer


def configure_tracer(enabled=False, level="INFO", file_path=None, json_output=False):
    _tracer.configure(enabled=enabled, level=level, file_path=file_path, json_output=json_output)


def configure_from(tracing_config):
    """Apply a TracingConfig section to the process-wide tracer."""
    configure_tracer(
        enabled=tracing_config.enabled,
        level=tracing_config.level,
        file_path=tracing_config.file_path,
        json_output=tracing_config.json_output,
    )
