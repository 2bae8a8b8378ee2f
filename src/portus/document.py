"""Views: the observers a StateManager renders to and saves through."""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from portus.model.board import Board

logger = logging.getLogger(__name__)


class BoardView:
    """An observer attached to a StateManager.

    ``data`` holds the last document text this view loaded or saved.
    Subclasses override the hooks they care about.
    """

    def __init__(self, data: str = "") -> None:
        self.data = data
        self.rendered: Board | None = None

    def prerender(self, board: Board) -> None:
        """Called with the board before this view first shows it."""
        self.rendered = board

    def populate_view_state(self, settings: dict[str, Any]) -> None:
        """Called once after attach with the compiled settings."""

    def on_board_changed(self, board: Board) -> None:
        """Called on every set_state before persistence and fan-out."""

    def request_save_to_disk(self, text: str) -> None:
        """Persist text. The base view keeps it in memory only."""
        self.data = text


class FileView(BoardView):
    """View backed by a file on disk.

    Inside a running event loop writes go to a worker thread and are not
    awaited by the caller; they are chained so they land in order.
    Without a loop the write happens inline. Either way a failed write is
    logged and kept in ``last_error``; it never reaches the board.
    """

    def __init__(self, path: str | Path, data: str | None = None) -> None:
        self.path = Path(path)
        if data is None:
            data = self.path.read_text(encoding="utf-8") if self.path.exists() else ""
        super().__init__(data)
        self.last_error: Exception | None = None
        self._last_write: asyncio.Task | None = None

    def _write(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
                fh.write(text)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def _write_logged(self, text: str) -> None:
        try:
            self._write(text)
            self.last_error = None
        except OSError as exc:
            self.last_error = exc
            logger.error("failed to save %s: %s", self.path, exc)

    async def _write_after(self, previous: asyncio.Task | None, text: str) -> None:
        if previous is not None and not previous.done():
            await asyncio.wait({previous})
        await asyncio.to_thread(self._write_logged, text)

    def request_save_to_disk(self, text: str) -> None:
        self.data = text
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._write_logged(text)
            return
        self._last_write = loop.create_task(self._write_after(self._last_write, text))

    async def flush(self) -> None:
        """Wait for every scheduled write to finish."""
        if self._last_write is not None:
            await asyncio.wait({self._last_write})
