"""
Word wrapping. Splits a run of text into lines, given a function to measure
how much of a piece of text fits in a certain width.

The measure function has the signature ``measure(text, start, end, width)``
and returns a ``LineSpan``: the range of characters (starting at ``start``)
that fit within ``width``, and the width that these characters take up.
The layout provides a glyph-aware measure function; the ``monospace``
function in this module treats every character as one unit wide.
"""

import sys
from typing import Callable, NamedTuple

from ..utils.enums import WrapMode


# The width to use when there is no limit
MAX_WIDTH = sys.float_info.max

NEWLINE = "\n"


class LineSpan(NamedTuple):
    """A half-open range ``[start, end)`` of the text, and its measured width."""

    start: int
    end: int
    width: float


MeasureFunc = Callable[[str, int, int, float], LineSpan]


def monospace(text, start, end, width):
    """Measure text where each character is exactly one unit wide."""
    count = int(max(0, min(width, end - start)))
    return LineSpan(start, start + count, count)


def wordwrap(text, **options):
    """Wrap the given text and return it as a string with newlines.

    Takes the same keyword arguments as ``wordwrap_lines()``.
    """
    lines = wordwrap_lines(text, **options)
    return NEWLINE.join(text[line.start : line.end] for line in lines)


def wordwrap_lines(
    text="", *, width=None, start=0, end=None, mode=None, measure=None
):
    """Split text into lines.

    Parameters:
        text (str): the text to wrap.
        width (float | None): the available width. None means unbounded.
        start (int): the index to start at. Default 0.
        end (int | None): the index to end at (exclusive). Default the end of the text.
        mode (str | WrapMode | None): "greedy" (default), "pre" or "nowrap".
        measure (callable | None): the measure function. Default ``monospace``.

    Returns a list of ``LineSpan`` objects.
    """
    text = text or ""
    mode = normalize_wrap_mode(mode)
    measure = measure or monospace
    start = max(0, int(start or 0))
    end = len(text) if end is None else int(end)

    # A zero width has nothing to lay out (unless we're not wrapping at all)
    if width is not None and width == 0 and mode != "nowrap":
        return []
    width = MAX_WIDTH if width is None else float(width)

    if mode == "pre":
        return _wrap_pre(measure, text, start, end, width)
    else:
        if mode == "nowrap":
            width = MAX_WIDTH
        return _wrap_greedy(measure, text, start, end, width)


def normalize_wrap_mode(mode):
    """Get a WrapMode value from a str or None. Raises ValueError for unknown modes."""
    if mode is None:
        return WrapMode.greedy
    if not isinstance(mode, str):
        raise TypeError("Wrap mode must be None or str.")
    mode = mode.lower().strip()
    if mode not in WrapMode.__fields__:
        raise ValueError(f"Wrap mode must be one of {WrapMode}. Got {mode!r}")
    return WrapMode[mode]


def _index_of(text, chr, start, end):
    index = text.find(chr, start)
    if index == -1 or index > end:
        return end
    return index


def _measure_span(measure, text, start, end, width):
    """Get the LineSpan for exactly ``[start, end)``, with its measured width."""
    result = measure(text, start, end, width)
    if result.end - result.start < end - start:
        # The piece overflows the width; report its real width
        result = measure(text, start, end, MAX_WIDTH)
    return LineSpan(start, end, result.width)


def _wrap_pre(measure, text, start, end, width):
    """Break on newlines only. Each segment is kept whole, whatever its width."""
    lines = []
    line_start = start
    for i in range(start, min(end, len(text))):
        is_newline = text[i] == NEWLINE
        if is_newline or i == end - 1:
            line_end = i if is_newline else i + 1
            lines.append(_measure_span(measure, text, line_start, line_end, width))
            line_start = i + 1
    return lines


def _wrap_greedy(measure, text, start, end, width):
    """Break on newlines, and wrap words that do not fit in the width."""
    lines = []
    end = min(end, len(text))

    while start < end:
        hard_break = _index_of(text, NEWLINE, start, end)

        # Whitespace is never the first character of a wrapped line
        while start < hard_break:
            if not text[start].isspace():
                break
            start += 1

        # How much fits? The count is clamped to the segment.
        measured = measure(text, start, hard_break, width)
        count = max(0, measured.end - measured.start)
        line_end = min(start + count, hard_break)
        next_start = line_end + len(NEWLINE)

        # If wrapping was needed, move back to the start of the word
        if line_end < hard_break:
            while line_end > start:
                if text[line_end].isspace():
                    break
                line_end -= 1
            if line_end == start:
                # A single word that is too long: break it where it stops fitting.
                # If nothing fits, take one character to make sure we advance.
                if next_start > start + len(NEWLINE):
                    next_start -= 1
                line_end = next_start
            else:
                # Strip the whitespace at the end of the line
                next_start = line_end
                while line_end > start:
                    if not text[line_end - len(NEWLINE)].isspace():
                        break
                    line_end -= 1

        lines.append(_measure_span(measure, text, start, line_end, width))
        start = next_start

    return lines
