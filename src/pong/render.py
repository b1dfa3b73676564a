"""Presentation helpers shared by the Textual UI and the plain-text renderer."""

from __future__ import annotations

import math
import sys
from collections.abc import Sequence
from typing import TextIO

from .core.snapshot import StatsSnapshot

COLUMN_LABELS: tuple[str, ...] = ("Region", "Last", "Min", "Avg", "Max", "Stddev", "P95", "P99")
COLUMN_WIDTHS: tuple[int, ...] = (28, 11, 11, 11, 11, 11, 11, 11)
MIN_VISIBLE_COLUMNS = 2

BORDER_STYLE = "rgb(80,120,160)"
HEADER_STYLE = "bold rgb(120,200,255)"
TEXT_STYLE = "rgb(220,220,220)"
GREEN_STYLE = "rgb(120,200,140)"
RED_STYLE = "rgb(230,120,120)"
YELLOW_STYLE = "rgb(230,200,120)"

QUIT_HINT = "Press q or Ctrl+C to quit."
SPINNER_FRAMES = ("-", "\\", "|", "/")
SPINNER_FRAME_SECONDS = 0.15

_SAMPLE_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (1_000_000_000_000, "T"),
    (1_000_000_000, "B"),
    (1_000_000, "M"),
    (1_000, "K"),
)


def visible_columns(width: int) -> int:
    """Number of leading columns that fit in ``width``; narrow terminals drop from the right."""

    total = 2
    visible = 0
    for col_width in COLUMN_WIDTHS:
        needed = total + col_width + 2
        if needed > width:
            break
        total = needed
        visible += 1
    return max(MIN_VISIBLE_COLUMNS, min(visible, len(COLUMN_LABELS)))


def format_latency(value: float | None) -> str:
    if value is None:
        return "--"
    return f"{value:>9.2f}ms"


def format_sample_count(value: int) -> str:
    for threshold, suffix in _SAMPLE_THRESHOLDS:
        if value >= threshold:
            return f"{value / threshold:.1f}{suffix}"
    return str(value)


def last_style(last: float | None, avg: float | None) -> str:
    """Red when the latest sample is slower than average, green otherwise."""

    if last is None or avg is None:
        return YELLOW_STYLE
    return RED_STYLE if last > avg else GREEN_STYLE


def row_cells(snapshot: StatsSnapshot, columns: int = len(COLUMN_LABELS)) -> list[str]:
    values = (
        snapshot.last,
        snapshot.min,
        snapshot.avg,
        snapshot.max,
        snapshot.stddev,
        snapshot.p95,
        snapshot.p99,
    )
    cells = [snapshot.region_id] + [format_latency(v) for v in values]
    return cells[:columns]


def format_status(total_samples: int) -> str:
    return f"{format_sample_count(total_samples)} samples"


def format_warmup(elapsed: float, remaining: float, total_seconds: float) -> tuple[str, str]:
    """Return the spinner headline and the padded countdown line."""

    frame = int(max(0.0, elapsed) / SPINNER_FRAME_SECONDS) % len(SPINNER_FRAMES)
    remaining_seconds = 0 if remaining <= 0 else math.ceil(remaining)
    width = len(str(int(math.ceil(total_seconds))))
    return (
        f"{SPINNER_FRAMES[frame]} Warming up...",
        f"{remaining_seconds:>{width}}s remaining",
    )


def format_table(
    snapshots: Sequence[StatsSnapshot], columns: int = len(COLUMN_LABELS)
) -> list[str]:
    widths = COLUMN_WIDTHS[:columns]

    def line(cells: Sequence[str]) -> str:
        head = cells[0].ljust(widths[0])
        rest = [cell.rjust(width) for cell, width in zip(cells[1:], widths[1:], strict=True)]
        return "  ".join([head, *rest]).rstrip()

    lines = [line(COLUMN_LABELS[:columns])]
    lines.extend(line(row_cells(snapshot, columns)) for snapshot in snapshots)
    return lines


class TextRenderer:
    """Write the dashboard as plain text; used for headless runs and reports."""

    def __init__(self, stream: TextIO | None = None, *, columns: int = len(COLUMN_LABELS)) -> None:
        self.stream = stream or sys.stdout
        self.columns = columns

    def draw(self, snapshots: Sequence[StatsSnapshot], total_samples: int) -> None:
        lines = format_table(snapshots, self.columns)
        lines.append(format_status(total_samples))
        self.stream.write("\n".join(lines) + "\n")
        self.stream.flush()

    def draw_warmup(self, elapsed: float, remaining: float, total_seconds: float) -> None:
        headline, countdown = format_warmup(elapsed, remaining, total_seconds)
        self.stream.write(f"{headline} {countdown}\n")
        self.stream.flush()


__all__ = [
    "COLUMN_LABELS",
    "COLUMN_WIDTHS",
    "QUIT_HINT",
    "TextRenderer",
    "format_latency",
    "format_sample_count",
    "format_status",
    "format_table",
    "format_warmup",
    "last_style",
    "row_cells",
    "visible_columns",
]
