"""StateManager: owns the live Board for one document.

Every mutation goes through ``set_state``. It decides between a plain
structural update and a full reparse, recompiles settings, lets views
react, persists, and then fans the new board out to receivers and to
per-setting listeners. Nothing raised inside a mutation escapes: the
failure is recorded as a BoardError on the board instead.
"""

from __future__ import annotations

import asyncio
import logging
import traceback
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Union

from portus import panes
from portus.config import HostLocale, host_locale
from portus.constants import DONE_CHAR
from portus.dates import format_date
from portus.document import BoardView
from portus.errors import MutationError, PortusError, RestoreNoOp
from portus.format import ListFormat
from portus.model.board import (
    Board,
    BoardError,
    Item,
    Location,
    VirtualLocation,
    empty_board,
    find_item,
    locate_item,
    with_error,
    with_settings,
)
from portus.model.item import insert_item, item_at, move_item, remove_at, resolve_target, update_item
from portus.panes import PaneMode, PaneState
from portus.registry import Registry
from portus.settings import Settings, changed_keys, compile_settings, resolve_raw, should_refresh_board
from portus.undo import UndoBuffer, restore

logger = logging.getLogger(__name__)

# Delay before the first parse so a host can paint a loading state.
FIRST_PARSE_DELAY = 0.01

BoardUpdate = Union[Board, Callable[[Board], Board]]


def _pane_accessors(name: str):
    """Build open/close/toggle methods and an is-open property for one overlay."""

    def open_(self: StateManager) -> None:
        self.open_pane(name)

    def close(self: StateManager) -> None:
        self.close_pane(name)

    def toggle(self: StateManager) -> None:
        self.toggle_pane(name)

    def is_open(self: StateManager) -> bool:
        return self.pane.is_open(name)

    open_.__name__ = f"open_{name}"
    close.__name__ = f"close_{name}"
    toggle.__name__ = f"toggle_{name}"
    return open_, close, toggle, property(is_open)


class StateManager:
    """Coordinator for one open board document.

    ``board_id`` identifies the document (normally its path).
    ``get_global_settings`` returns the process-wide settings tier and is
    read on every compile, so out-of-band changes take effect on the next
    ``set_state`` or ``force_refresh``. ``on_empty`` fires when the last
    view detaches.
    """

    def __init__(
        self,
        board_id: str,
        on_empty: Callable[[], None] | None = None,
        get_global_settings: Callable[[], Settings] | None = None,
        host: HostLocale | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.board_id = board_id
        self.on_empty = on_empty
        self.get_global_settings = get_global_settings or dict
        self.host = host
        self.clock = clock

        self.state: Board | None = None
        self.compiled_settings: Settings = {}
        self.views: list[BoardView] = []
        self.format = ListFormat(self)
        self.pane: PaneState = panes.CLOSED
        self.undo = UndoBuffer()

        self._receivers = Registry()
        self._setting_listeners = Registry()
        self._completion_hooks = Registry()
        self._parse_started = False
        self._recording_error = False
        # compiled settings as of the last listener fan-out
        self._published: Settings | None = None

    # --- views ---

    async def attach(self, view: BoardView, data: str | None = None) -> None:
        """Attach a view. The first attach parses data (or view.data)."""
        if view not in self.views:
            self.views.append(view)
        should_parse = not self._parse_started
        self._parse_started = True

        await asyncio.sleep(FIRST_PARSE_DELAY)

        if should_parse:
            self._new_board(view, view.data if data is None else data)
        else:
            view.prerender(self.state)
        view.populate_view_state(dict(self.compiled_settings))

    def _new_board(self, view: BoardView, text: str) -> None:
        try:
            board = self.get_parsed_board(text)
            view.prerender(board)
            self._apply(board, persist=False, allow_reparse=False)
        except Exception as exc:
            self.set_error(exc)

    def detach(self, view: BoardView) -> None:
        if view not in self.views:
            return
        self.views.remove(view)
        if not self.views and self.on_empty is not None:
            self.on_empty()

    def get_a_view(self) -> BoardView | None:
        return self.views[0] if self.views else None

    # --- settings ---

    def compile_settings(self, supplied: Settings | None = None) -> None:
        local = self.state.data.settings if self.state is not None else None
        self._compile_tiers(local, supplied)

    def compile_document_settings(self, local: Settings) -> Settings:
        """Compile with a document's own settings block as the local tier.

        Used while parsing, before the document is the current board.
        """
        self._compile_tiers(local, None)
        return self.compiled_settings

    def _compile_tiers(self, local: Settings | None, supplied: Settings | None) -> None:
        global_settings = self.get_global_settings() or {}
        host = self.host or host_locale(global_settings)
        self.compiled_settings = compile_settings(local, global_settings, supplied, host)

    def get_setting(self, key: str, supplied: Settings | None = None) -> Any:
        """Supplied value, then compiled value, then the raw tiers."""
        if supplied and supplied.get(key) is not None:
            return supplied[key]
        if key in self.compiled_settings:
            return self.compiled_settings[key]
        return self.get_setting_raw(key)

    def get_setting_raw(self, key: str, supplied: Settings | None = None) -> Any:
        local = self.state.data.settings if self.state is not None else None
        return resolve_raw(key, local, self.get_global_settings(), supplied)

    def get_global_setting(self, key: str) -> Any:
        return (self.get_global_settings() or {}).get(key)

    def use_setting(self, key: str, callback: Callable[[Any], None]) -> Callable[[], None]:
        """Call callback(value) whenever key's compiled value changes."""
        return self._setting_listeners.watch(key, callback)

    def use_state(self, callback: Callable[[Board], None]) -> Callable[[], None]:
        """Call callback(board) on every state push."""
        return self._receivers.watch("state", callback)

    def on_complete(self, callback: Callable[[Item], None]) -> Callable[[], None]:
        """Call callback(item) after mark_task_complete moves an item to done."""
        return self._completion_hooks.watch("complete", callback)

    # --- state ---

    def has_error(self) -> bool:
        return self.state is not None and bool(self.state.data.errors)

    def get_parsed_board(self, text: str) -> Board:
        """Parse text. A failure comes back as a board carrying the error."""
        text = text.strip()
        if not text:
            return empty_board(self.board_id)
        try:
            return self.format.md_to_board(text)
        except Exception as exc:
            logger.warning("failed to parse %s: %s", self.board_id, exc)
            return with_error(empty_board(self.board_id), _board_error(exc))

    def set_state(self, update: BoardUpdate, persist: bool = True) -> None:
        """Replace the board with a value or with update(current board)."""
        self._apply(update, persist)

    def _apply(self, update: BoardUpdate, persist: bool, allow_reparse: bool = True) -> None:
        try:
            old = self.state
            candidate = update(old) if callable(update) else update
            old_settings = old.data.settings if old is not None else None
            new_settings = candidate.data.settings

            if (
                allow_reparse
                and old_settings is not None
                and should_refresh_board(old_settings, new_settings)
            ):
                logger.debug("settings change needs a reparse of %s", self.board_id)
                self.state = with_settings(old, new_settings)
                self.compile_settings()
                self.state = self.format.reparse_board()
            else:
                self.state = candidate
                self.compile_settings()

            for view in list(self.views):
                view.on_board_changed(self.state)

            if persist:
                self.save_to_disk()

            self._receivers.emit("state", self.state)

            previous, self._published = self._published, dict(self.compiled_settings)
            for key in changed_keys(previous, self.compiled_settings):
                self._setting_listeners.emit(key, self.compiled_settings.get(key))
        except Exception as exc:
            self.set_error(exc)

    def set_error(self, exc: BaseException) -> None:
        """Append exc to the board's errors without saving."""
        if self._recording_error:
            logger.error("failed while recording an error on %s: %s", self.board_id, exc)
            return
        logger.error("mutation failed on %s: %s", self.board_id, exc)
        base = self.state if self.state is not None else empty_board(self.board_id)
        self._recording_error = True
        try:
            self._apply(with_error(base, _board_error(exc)), persist=False, allow_reparse=False)
        finally:
            self._recording_error = False

    def clear_errors(self) -> None:
        if self.has_error():
            self.set_state(replace(self.state, data=replace(self.state.data, errors=())), persist=False)

    def force_refresh(self) -> None:
        """Recompile and reparse the current board, notifying everyone."""
        if self.state is None:
            return
        try:
            self.compile_settings()
            self.state = self.format.reparse_board()
            for view in list(self.views):
                view.on_board_changed(self.state)
            self._published = dict(self.compiled_settings)
            self._receivers.emit("state", self.state)
            for key in self._setting_listeners.keys():
                self._setting_listeners.emit(key, self.compiled_settings.get(key))
        except Exception as exc:
            self.set_error(exc)

    def soft_refresh(self) -> None:
        """Push a shallow copy to receivers. No compile, no save."""
        if self.state is None:
            return
        self._receivers.emit("state", replace(self.state))

    def save_to_disk(self) -> None:
        if self.state is None or self.state.data.errors:
            logger.debug("not saving %s: board has errors", self.board_id)
            return
        view = self.get_a_view()
        if view is None:
            return
        text = self.format.board_to_md(self.state)
        view.request_save_to_disk(text)
        for each in self.views:
            each.data = text

    def on_file_changed(self, text: str) -> None:
        """The document changed outside this manager: reparse, don't save."""
        self._apply(self.get_parsed_board(text), persist=False, allow_reparse=False)

    # --- items ---

    def new_item(self, content: str, check_char: str = " ", force_edit: bool = False) -> Item:
        return self.format.new_item(content, check_char, force_edit)

    def update_item_content(self, item: Item, content: str) -> Item:
        return self.format.update_item_content(item, content)

    def add_item(
        self,
        target: str,
        content: str,
        check_char: str = " ",
        position: int | None = None,
    ) -> Item:
        """Create an item and insert it into a lane (by id) or virtual list."""
        item = self.new_item(content, check_char)
        self.set_state(lambda board: insert_item(board, resolve_target(board, target, position), item))
        return item

    def update_item(self, item_id: str, fn: Callable[[Item], Item]) -> None:
        self.set_state(lambda board: update_item(board, item_id, fn))

    def set_item_content(self, item_id: str, content: str) -> None:
        """Replace an item's raw text, re-deriving everything else."""
        self.update_item(item_id, lambda item: self.format.update_item_content(item, content))

    def move_item(self, item_id: str, target: str, position: int | None = None) -> None:
        self.set_state(lambda board: move_item(board, item_id, target, position))

    def delete_item(self, item_id: str) -> Item | None:
        """Remove an item, keeping it in the undo slot."""
        location = locate_item(self.state, item_id) if self.state is not None else None
        if location is None:
            self.set_error(MutationError(f"No item '{item_id}'"))
            return None
        item = item_at(self.state, location)
        self.save_deleted_item(item, location)
        if self.pane.selected_item_id == item_id:
            self.pane = panes.CLOSED
        self.set_state(lambda board: remove_at(board, location))
        return item

    def save_deleted_item(self, item: Item, location: Location) -> None:
        self.undo.save(item, location)

    def restore_last_deleted(self) -> bool:
        """Reinsert the last deleted item. Returns False if nothing happened."""
        deleted = self.undo.take()
        if deleted is None:
            return False
        try:
            board = restore(self.state, deleted)
        except RestoreNoOp as exc:
            logger.debug("restore skipped: %s", exc)
            return False
        self.set_state(board)
        return True

    def mark_task_complete(self, item_id: str) -> Item | None:
        """Move an item to the done list, then run the completion hooks."""
        if find_item(self.state, item_id) is None:
            self.set_error(MutationError(f"No item '{item_id}'"))
            return None
        self.set_state(
            lambda board: move_item(
                board, item_id, "done", transform=lambda item: self.format.set_check_char(item, DONE_CHAR)
            )
        )
        location = locate_item(self.state, item_id)
        if not isinstance(location, VirtualLocation) or location.list_name != "done":
            return None
        completed = item_at(self.state, location)
        try:
            self._completion_hooks.emit("complete", completed)
        except Exception:
            logger.exception("completion hook failed for %s", item_id)
        return completed

    def archive_completed_cards(self) -> None:
        """Move completed cards, and every card in complete lanes, to the archive."""
        board = self.state
        if board is None:
            return
        stamp_date = bool(self.get_setting("archive-with-date"))
        separator = self.get_setting("archive-date-separator")
        date_format = self.get_setting("archive-date-format")
        date_after = bool(self.get_setting("append-archive-date"))

        def stamp(item: Item) -> Item:
            parts = [format_date(self.clock(), date_format)]
            if separator:
                parts.append(separator)
            parts.append(item.data.title_raw)
            if date_after:
                parts.reverse()
            return self.format.update_item_content(item, " ".join(parts))

        archived: list[Item] = []
        lanes = []
        for lane in board.lanes:
            keep = []
            for item in lane.items:
                done = item.data.checked and item.data.check_char == DONE_CHAR
                if lane.data.should_mark_items_complete or done:
                    archived.append(item)
                else:
                    keep.append(item)
            lanes.append(lane if len(keep) == len(lane.items) else replace(lane, items=tuple(keep)))

        if not archived:
            return
        try:
            if stamp_date:
                archived = [stamp(item) for item in archived]
        except Exception as exc:
            self.set_error(exc)
            return
        data = replace(board.data, archive=board.data.archive + tuple(archived))
        self.set_state(replace(board, lanes=tuple(lanes), data=data))

    # --- panes ---

    @property
    def selected_item_id(self) -> str | None:
        return self.pane.selected_item_id

    @property
    def previous_pane_mode(self) -> PaneMode | None:
        return self.pane.previous

    def _set_pane(self, pane: PaneState) -> None:
        self.pane = pane
        self.soft_refresh()

    def select_item(self, item_id: str | None) -> None:
        self._set_pane(panes.select(self.pane, item_id))

    def drill_down(self, item_id: str, source: str) -> None:
        """Open an item's detail from an overlay; closing returns there."""
        self._set_pane(panes.drill_down(self.pane, item_id, source))

    def close_detail(self) -> None:
        self._set_pane(panes.close_detail(self.pane))

    def get_selected_item(self) -> Item | None:
        if self.state is None:
            return None
        return find_item(self.state, self.pane.selected_item_id)

    def open_pane(self, name: str) -> None:
        self._set_pane(panes.open_overlay(self.pane, name))

    def close_pane(self, name: str) -> None:
        self._set_pane(panes.close_overlay(self.pane, name))

    def toggle_pane(self, name: str) -> None:
        self._set_pane(panes.toggle_overlay(self.pane, name))

    def is_pane_open(self, name: str) -> bool:
        return self.pane.is_open(name)

    open_archive, close_archive, toggle_archive, is_archive_open = _pane_accessors("archive")
    open_done, close_done, toggle_done, is_done_open = _pane_accessors("done")
    open_delegated, close_delegated, toggle_delegated, is_delegated_open = _pane_accessors("delegated")
    open_recurring, close_recurring, toggle_recurring, is_recurring_open = _pane_accessors("recurring")
    open_proposals, close_proposals, toggle_proposals, is_proposals_open = _pane_accessors("proposals")
    open_waiting, close_waiting, toggle_waiting, is_waiting_open = _pane_accessors("waiting")


def _board_error(exc: BaseException) -> BoardError:
    if not isinstance(exc, PortusError):
        exc = MutationError(f"{type(exc).__name__}: {exc}").with_traceback(exc.__traceback__)
    stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return BoardError(description=f"{type(exc).__name__}: {exc}", stack=stack)
