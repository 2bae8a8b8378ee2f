"""Pane/selection state machine.

At most one side pane is open: nothing, the detail view of one card, or
one of the six list overlays. The state is a single value, so opening
one pane can't leave another flagged open.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PaneMode(str, Enum):
    DETAIL = "detail"
    ARCHIVE = "archive"
    DONE = "done"
    DELEGATED = "delegated"
    RECURRING = "recurring"
    PROPOSALS = "proposals"
    WAITING = "waiting"


OVERLAYS = (
    PaneMode.ARCHIVE,
    PaneMode.DONE,
    PaneMode.DELEGATED,
    PaneMode.RECURRING,
    PaneMode.PROPOSALS,
    PaneMode.WAITING,
)


def overlay(name: str | PaneMode) -> PaneMode:
    """Coerce a list name to its overlay mode."""
    mode = PaneMode(name)
    if mode not in OVERLAYS:
        raise ValueError(f"'{name}' is not an overlay pane")
    return mode


@dataclass(frozen=True)
class PaneState:
    """Which pane is open.

    ``previous`` is the overlay a detail view was drilled into from;
    closing the detail view returns to it.
    """

    mode: PaneMode | None = None
    item_id: str | None = None
    previous: PaneMode | None = None

    @property
    def selected_item_id(self) -> str | None:
        return self.item_id if self.mode is PaneMode.DETAIL else None

    def is_open(self, name: str | PaneMode) -> bool:
        return self.mode is overlay(name)


CLOSED = PaneState()


def select(state: PaneState, item_id: str | None) -> PaneState:
    """Focus a card, closing any overlay.

    None clears the selection only; an open overlay stays open.
    """
    if item_id is None:
        return CLOSED if state.mode is PaneMode.DETAIL else state
    return PaneState(PaneMode.DETAIL, item_id)


def drill_down(state: PaneState, item_id: str, source: str | PaneMode) -> PaneState:
    """Open a card's detail from an overlay, remembering where to return."""
    return PaneState(PaneMode.DETAIL, item_id, previous=overlay(source))


def close_detail(state: PaneState) -> PaneState:
    if state.mode is not PaneMode.DETAIL:
        return state
    if state.previous is not None:
        return PaneState(state.previous)
    return CLOSED


def open_overlay(state: PaneState, name: str | PaneMode) -> PaneState:
    return PaneState(overlay(name))


def close_overlay(state: PaneState, name: str | PaneMode) -> PaneState:
    if state.mode is overlay(name):
        return CLOSED
    return state


def toggle_overlay(state: PaneState, name: str | PaneMode) -> PaneState:
    if state.is_open(name):
        return CLOSED
    return open_overlay(state, name)
