"""
Stroke persistence for ArcSpline.

A stroke file holds the number of lines followed by each line's encoding:
half smoothing spread, sample count, then t x y for every real sample.
All values are whitespace separated. Sentinels are not stored.
"""

import os

from arcspline.strokes.polyline import ParametrizedPolyline
from arcspline.tracer import get_tracer, trace


def _format_float(value):
    # repr round-trips a float exactly
    return repr(float(value))


def encode_line(line):
    """
    Encode one line as a single text line.
    """
    tokens = [_format_float(line.half_smoothing_spread), str(len(line))]
    for t, x, y in line.samples():
        tokens.extend((_format_float(t), _format_float(x), _format_float(y)))
    return " ".join(tokens)


def _parse_float(token, what):
    try:
        return float(token)
    except ValueError:
        raise ValueError(f"Malformed stroke data: {what} is not a number: {token!r}") from None


def _parse_count(token, what):
    try:
        count = int(token)
    except ValueError:
        raise ValueError(f"Malformed stroke data: {what} is not an integer: {token!r}") from None
    if count < 0:
        raise ValueError(f"Malformed stroke data: negative {what}: {count}")
    return count


def decode_line(tokens):
    """
    Decode one line from an iterator of tokens.

    Consumes exactly the tokens of one line, so several lines can be
    decoded from the same iterator.

    Returns:
        ParametrizedPolyline
    """
    tokens = iter(tokens)
    try:
        half_smoothing_spread = _parse_float(next(tokens), "half smoothing spread")
        count = _parse_count(next(tokens), "sample count")
        samples = []
        for _ in range(count):
            t = _parse_float(next(tokens), "t")
            x = _parse_float(next(tokens), "x")
            y = _parse_float(next(tokens), "y")
            samples.append((t, x, y))
    except StopIteration:
        raise ValueError("Malformed stroke data: unexpected end of input") from None

    if half_smoothing_spread <= 0.0:
        raise ValueError(f"Malformed stroke data: half smoothing spread must be positive: {half_smoothing_spread}")

    return ParametrizedPolyline.from_samples(samples, half_smoothing_spread)


@trace(label="save_lines", arg_names=["lines", "path"])
def save_lines(lines, path):
    """
    Save lines to a stroke file.
    """
    tracer = get_tracer()

    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        f.write(f"{len(lines)}\n")
        for line in lines:
            f.write(encode_line(line))
            f.write("\n")

    tracer.event(f"Saved {len(lines)} lines: {path}")


@trace(label="load_lines", arg_names=["path"])
def load_lines(path):
    """
    Load lines from a stroke file.

    Raises:
        FileNotFoundError: if the file does not exist
        ValueError: if the file is malformed
    """
    tracer = get_tracer()

    if not os.path.exists(path):
        raise FileNotFoundError(f"Stroke file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        tokens = iter(f.read().split())

    try:
        count = _parse_count(next(tokens), "line count")
    except StopIteration:
        raise ValueError(f"Empty stroke file: {path}") from None

    lines = [decode_line(tokens) for _ in range(count)]

    leftover = next(tokens, None)
    if leftover is not None:
        raise ValueError(f"Malformed stroke data: unexpected trailing token {leftover!r}")

    tracer.event(f"Loaded {len(lines)} lines", path=path)

    return lines
