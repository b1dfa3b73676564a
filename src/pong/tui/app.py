"""Textual terminal UI rendering the live latency table."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import DataTable, Static

from pong.core.snapshot import StatsSnapshot
from pong.dashboard import Dashboard
from pong.render import (
    COLUMN_LABELS,
    HEADER_STYLE,
    QUIT_HINT,
    TEXT_STYLE,
    YELLOW_STYLE,
    format_latency,
    format_status,
    format_warmup,
    last_style,
    visible_columns,
)

logger = logging.getLogger(__name__)


def _header_cells(columns: int) -> list[Text]:
    cells = [Text(COLUMN_LABELS[0], style=HEADER_STYLE)]
    cells.extend(
        Text(label, style=HEADER_STYLE, justify="right") for label in COLUMN_LABELS[1:columns]
    )
    return cells


def _row_cells(snapshot: StatsSnapshot, columns: int) -> list[Text]:
    cells = [
        Text(snapshot.region_id, style=TEXT_STYLE),
        Text(
            format_latency(snapshot.last),
            style=last_style(snapshot.last, snapshot.avg),
            justify="right",
        ),
    ]
    for value in (
        snapshot.min,
        snapshot.avg,
        snapshot.max,
        snapshot.stddev,
        snapshot.p95,
        snapshot.p99,
    ):
        cells.append(Text(format_latency(value), style=YELLOW_STYLE, justify="right"))
    return cells[:columns]


class PongApp(App[None]):
    """Full-screen latency table, redrawn on the dashboard's render interval."""

    TITLE = "pong"

    CSS = """
    Screen { layout: vertical; }
    #warmup { height: 1fr; content-align: center middle; text-align: center; }
    #table { height: 1fr; width: 1fr; border: round rgb(80,120,160); }
    #footer { height: 1; }
    #hint { width: 1fr; color: rgb(220,220,220); }
    #status { width: auto; color: rgb(220,220,220); }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(self, dashboard: Dashboard) -> None:
        super().__init__()
        self.dashboard = dashboard
        self._columns = 0

    def compose(self) -> ComposeResult:
        yield Static("", id="warmup")
        yield DataTable(id="table", cursor_type="none", show_cursor=False)
        with Horizontal(id="footer"):
            yield Static(QUIT_HINT, id="hint")
            yield Static("", id="status")

    def on_mount(self) -> None:
        self._warmup_panel = self.query_one("#warmup", Static)
        self._table = self.query_one("#table", DataTable)
        self._status = self.query_one("#status", Static)
        self.set_interval(self.dashboard.config.display.render_interval, self._tick)
        self._tick()

    def _tick(self) -> None:
        self.dashboard.tick(self)

    async def action_quit(self) -> None:
        self.dashboard.shutdown.set()
        self.exit()

    def draw(self, snapshots: Sequence[StatsSnapshot], total_samples: int) -> None:
        self._warmup_panel.display = False
        self._table.display = True
        width = self._table.size.width
        columns = visible_columns(width) if width else len(COLUMN_LABELS)
        if columns != self._columns:
            self._table.clear(columns=True)
            self._table.add_columns(*_header_cells(columns))
            self._columns = columns
        else:
            self._table.clear()
        for snapshot in snapshots:
            self._table.add_row(*_row_cells(snapshot, columns))
        self._status.update(format_status(total_samples))

    def draw_warmup(self, elapsed: float, remaining: float, total_seconds: float) -> None:
        headline, countdown = format_warmup(elapsed, remaining, total_seconds)
        self._table.display = False
        self._warmup_panel.display = True
        self._warmup_panel.update(
            Text.assemble((headline, HEADER_STYLE), "\n", (countdown, TEXT_STYLE))
        )


def run_tui(dashboard: Dashboard) -> None:
    """Run the UI until the user quits; the caller owns the dashboard lifecycle."""

    logger.debug("Launching Textual UI for %d endpoints", len(dashboard.endpoints))
    PongApp(dashboard).run()


__all__ = ["PongApp", "run_tui"]
