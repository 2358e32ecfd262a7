"""Stack trace structuring.

Frames are keyed ``frame0``, ``frame1``... innermost call first, matching the
``#0 file(line): function`` text carried in ``additionalData.trace``.
"""

import re
import traceback
from types import TracebackType
from typing import Any

_LINE_SPLIT_RE = re.compile(r"\r\n|\n|\r")
_INDEXED_FRAME_RE = re.compile(
    r"^\s*(?:#\d+\s+)?(?P<file>[^()]+)\((?P<line>\d+)\):\s+(?P<function>\S+)"
)
_PYTHON_FRAME_RE = re.compile(
    r'^\s*File "(?P<file>[^"]+)", line (?P<line>\d+), in (?P<function>\S+)'
)


def _frame(file: str, line: int, function: str) -> dict[str, Any]:
    return {"file": file, "line": line, "column": 0, "function": function}


def parse_trace_text(text: str) -> dict[str, dict[str, Any]]:
    """Parse preformatted trace text into frames.

    Every line yields exactly one frame, blank and duplicate lines included.
    Column is always 0 because text traces carry no column information.
    """
    frames: dict[str, dict[str, Any]] = {}
    for index, line in enumerate(_LINE_SPLIT_RE.split(text)):
        match = _INDEXED_FRAME_RE.match(line) or _PYTHON_FRAME_RE.match(line)
        if match:
            frames[f"frame{index}"] = _frame(
                match.group("file").strip(),
                int(match.group("line")),
                match.group("function"),
            )
        else:
            frames[f"frame{index}"] = {"raw": line}
    return frames


def _summaries(tb: TracebackType | None) -> list[traceback.FrameSummary]:
    if tb is None:
        return []
    return list(reversed(traceback.extract_tb(tb)))


def frames_from_traceback(tb: TracebackType | None) -> dict[str, dict[str, Any]]:
    frames: dict[str, dict[str, Any]] = {}
    for index, summary in enumerate(_summaries(tb)):
        frames[f"frame{index}"] = _frame(summary.filename, summary.lineno or 0, summary.name)
    return frames


def render_trace_text(tb: TracebackType | None) -> str:
    lines = [
        f"#{index} {summary.filename}({summary.lineno or 0}): {summary.name}"
        for index, summary in enumerate(_summaries(tb))
    ]
    lines.append(f"#{len(lines)} {{main}}")
    return "\n".join(lines)


def format_stack_trace(
    exception: BaseException, trace_text: str | None = None
) -> dict[str, dict[str, Any]]:
    """Structured frames for ``exception``.

    The live traceback is preferred; text parsing is the fallback for
    exceptions that were never raised or for trace text supplied by the host.
    """
    if trace_text is None and exception.__traceback__ is not None:
        return frames_from_traceback(exception.__traceback__)
    if trace_text is None:
        trace_text = render_trace_text(exception.__traceback__)
    return parse_trace_text(trace_text)
