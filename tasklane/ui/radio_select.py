"""Keyboard-driven single-choice list state.

``SelectionController`` owns the cursor, the visible window and the numeric
"jump to item N" buffer. It renders nothing itself: a widget feeds it
``KeyEvent`` values and draws ``render_rows()``.

Numeric entry is debounced. Typing ``1`` on a 20 item list highlights item 1
and schedules a commit; typing ``5`` before the commit fires cancels it,
re-targets item 15 and schedules a new commit. A number outside the list only
schedules a (longer) buffer reset.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Optional, Protocol, Sequence, TypeVar

from ..core.session_log import log_debug

T = TypeVar("T")

DEFAULT_WINDOW_SIZE = 10
COMMIT_DELAY_S = 0.25
RESET_DELAY_S = 0.5

ACTIVE_MARKER = "●"
INACTIVE_MARKER = "○"

UP_KEYS = ("up", "k")
DOWN_KEYS = ("down", "j")
CONFIRM_KEYS = ("enter", "c-m", "\r")


@dataclass(frozen=True)
class RadioSelectItem(Generic[T]):
    """One option. ``value`` is returned on selection and never inspected."""

    label: str
    value: T
    disabled: bool = False
    name_display: Optional[str] = None
    type_display: Optional[str] = None

    def display_parts(self) -> tuple[str, Optional[str]]:
        if self.name_display and self.type_display:
            return self.name_display, self.type_display
        return self.label, None


class KeyKind(Enum):
    UP = "up"
    DOWN = "down"
    CONFIRM = "confirm"
    DIGIT = "digit"
    OTHER = "other"


@dataclass(frozen=True)
class KeyEvent:
    kind: KeyKind
    digit: str = ""

    @classmethod
    def from_key(cls, key: Any) -> "KeyEvent":
        """Classify a key name or typed character."""
        name = str(getattr(key, "value", key))
        if name in UP_KEYS:
            return cls(KeyKind.UP)
        if name in DOWN_KEYS:
            return cls(KeyKind.DOWN)
        if name in CONFIRM_KEYS:
            return cls(KeyKind.CONFIRM)
        if len(name) == 1 and name.isdigit() and name.isascii():
            return cls(KeyKind.DIGIT, name)
        return cls(KeyKind.OTHER)


class EffectKind(Enum):
    HIGHLIGHT = "highlight"
    SELECT = "select"


@dataclass(frozen=True)
class SelectionEffect(Generic[T]):
    kind: EffectKind
    index: int
    value: T


@dataclass(frozen=True)
class VisibleRow(Generic[T]):
    item: RadioSelectItem[T]
    index: int
    is_active: bool


@dataclass(frozen=True)
class RadioRow:
    index: int
    number: str
    marker: str
    style: str
    label: str
    type_label: Optional[str]
    is_active: bool
    is_disabled: bool


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything with ``call_later``; an asyncio event loop qualifies."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


@dataclass(eq=False)
class PendingTimer:
    """Snapshot a scheduled callback was created for.

    ``target`` is the index to commit, or ``None`` for a reset-only timer.
    """

    buffer: str
    target: Optional[int]
    handle: Optional[TimerHandle] = None


class SelectionController(Generic[T]):
    def __init__(
        self,
        items: Sequence[RadioSelectItem[T]],
        *,
        initial_index: int = 0,
        window_size: int = DEFAULT_WINDOW_SIZE,
        show_scroll_arrows: bool = False,
        on_highlight: Optional[Callable[[T], None]] = None,
        on_select: Optional[Callable[[T], None]] = None,
        scheduler: Optional[Scheduler] = None,
        commit_delay: float = COMMIT_DELAY_S,
        reset_delay: float = RESET_DELAY_S,
    ) -> None:
        if window_size < 1:
            raise ValueError(f"window_size must be at least 1, got {window_size}")
        self._items: list[RadioSelectItem[T]] = list(items)
        if self._items and not 0 <= initial_index < len(self._items):
            raise ValueError(
                f"initial_index {initial_index} outside 0..{len(self._items) - 1}"
            )
        if not self._items and initial_index != 0:
            raise ValueError("initial_index must be 0 for an empty list")
        self._window_size = window_size
        self._show_scroll_arrows = show_scroll_arrows
        self._on_highlight = on_highlight
        self._on_select = on_select
        self._scheduler = scheduler
        self._commit_delay = commit_delay
        self._reset_delay = reset_delay
        self._active_index = initial_index
        self._scroll_offset = 0
        self._number_buffer = ""
        self._pending: Optional[PendingTimer] = None
        self._focused = True
        self._closed = False
        self._sync_scroll()

    @property
    def items(self) -> list[RadioSelectItem[T]]:
        return list(self._items)

    @property
    def active_index(self) -> int:
        return self._active_index

    @property
    def scroll_offset(self) -> int:
        return self._scroll_offset

    @property
    def number_buffer(self) -> str:
        return self._number_buffer

    @property
    def window_size(self) -> int:
        return self._window_size

    @property
    def show_scroll_arrows(self) -> bool:
        return self._show_scroll_arrows

    @property
    def has_pending_timer(self) -> bool:
        return self._pending is not None

    @property
    def is_active(self) -> bool:
        """Whether key events are accepted right now."""
        return self._focused and not self._closed and bool(self._items)

    def mount(self) -> list[SelectionEffect[T]]:
        """Announce the initial highlight once the widget is shown."""
        if not self.is_active:
            return []
        return self._emit([self._effect(EffectKind.HIGHLIGHT, self._active_index)])

    def set_focused(self, focused: bool) -> None:
        if not focused:
            self._reset_buffer()
        self._focused = focused

    def close(self) -> None:
        self._reset_buffer()
        self._closed = True

    def replace_items(self, items: Sequence[RadioSelectItem[T]]) -> list[SelectionEffect[T]]:
        """Swap the list; any pending commit refers to the old list and is dropped."""
        self._reset_buffer()
        previous = self._active_index if self._items else None
        self._items = list(items)
        if not self._items:
            self._active_index = 0
            self._scroll_offset = 0
            return []
        self._active_index = min(self._active_index, len(self._items) - 1)
        self._sync_scroll()
        if self._active_index != previous and self.is_active:
            return self._emit([self._effect(EffectKind.HIGHLIGHT, self._active_index)])
        return []

    def handle_key(self, event: KeyEvent) -> list[SelectionEffect[T]]:
        if not self.is_active:
            return []
        kind = event.kind
        if kind in (KeyKind.UP, KeyKind.DOWN, KeyKind.CONFIRM):
            self._reset_buffer()
        count = len(self._items)
        if kind is KeyKind.UP:
            index = self._active_index - 1 if self._active_index > 0 else count - 1
            return self._move_to(index)
        if kind is KeyKind.DOWN:
            index = self._active_index + 1 if self._active_index < count - 1 else 0
            return self._move_to(index)
        if kind is KeyKind.CONFIRM:
            return self._emit([self._effect(EffectKind.SELECT, self._active_index)])
        if kind is KeyKind.DIGIT and len(event.digit) == 1 and event.digit.isdigit():
            return self._handle_digit(event.digit)
        return []

    def on_timer_fire(self, pending: PendingTimer) -> list[SelectionEffect[T]]:
        if pending is not self._pending or pending.buffer != self._number_buffer:
            return []
        self._pending = None
        self._number_buffer = ""
        if pending.target is None:
            log_debug("select", "select.buffer_reset", {"buffer": pending.buffer})
            return []
        if self._closed or pending.target >= len(self._items):
            return []
        log_debug("select", "select.commit", {"buffer": pending.buffer, "index": pending.target})
        return self._emit([self._effect(EffectKind.SELECT, pending.target)])

    def visible_slice(self) -> list[VisibleRow[T]]:
        start = self._scroll_offset
        window = self._items[start : start + self._window_size]
        return [
            VisibleRow(item=item, index=index, is_active=index == self._active_index)
            for index, item in enumerate(window, start=start)
        ]

    def can_scroll_up(self) -> bool:
        return self._show_scroll_arrows and self._scroll_offset > 0

    def can_scroll_down(self) -> bool:
        return (
            self._show_scroll_arrows
            and self._scroll_offset + self._window_size < len(self._items)
        )

    def render_rows(self) -> list[RadioRow]:
        width = len(str(len(self._items)))
        rows: list[RadioRow] = []
        for row in self.visible_slice():
            if row.is_active:
                style = "selected"
            elif row.item.disabled:
                style = "disabled"
            else:
                style = "choice"
            label, type_label = row.item.display_parts()
            rows.append(
                RadioRow(
                    index=row.index,
                    number=f"{str(row.index + 1).rjust(width)}.",
                    marker=ACTIVE_MARKER if row.is_active else INACTIVE_MARKER,
                    style=style,
                    label=label,
                    type_label=type_label,
                    is_active=row.is_active,
                    is_disabled=row.item.disabled,
                )
            )
        return rows

    def _handle_digit(self, digit: str) -> list[SelectionEffect[T]]:
        self._cancel_timer()
        buffer = self._number_buffer + digit
        self._number_buffer = buffer
        target = int(buffer) - 1
        if 0 <= target < len(self._items):
            effects = self._move_to(target)
            self._schedule(self._commit_delay, PendingTimer(buffer=buffer, target=target))
            return effects
        self._schedule(self._reset_delay, PendingTimer(buffer=buffer, target=None))
        return []

    def _move_to(self, index: int) -> list[SelectionEffect[T]]:
        self._active_index = index
        self._sync_scroll()
        return self._emit([self._effect(EffectKind.HIGHLIGHT, index)])

    def _sync_scroll(self) -> None:
        count = len(self._items)
        if count == 0:
            self._scroll_offset = 0
            return
        max_offset = max(0, count - self._window_size)
        offset = min(self._scroll_offset, max_offset)
        if self._active_index < offset:
            offset = self._active_index
        elif self._active_index >= offset + self._window_size:
            offset = max(0, min(self._active_index - self._window_size + 1, max_offset))
        self._scroll_offset = offset

    def _schedule(self, delay: float, pending: PendingTimer) -> None:
        # A callback may have closed or defocused us while emitting.
        if not self.is_active or pending.buffer != self._number_buffer:
            return
        scheduler = self._scheduler or asyncio.get_running_loop()
        pending.handle = scheduler.call_later(delay, self.on_timer_fire, pending)
        self._pending = pending

    def _cancel_timer(self) -> None:
        pending, self._pending = self._pending, None
        if pending is not None and pending.handle is not None:
            pending.handle.cancel()

    def _reset_buffer(self) -> None:
        self._cancel_timer()
        self._number_buffer = ""

    def _effect(self, kind: EffectKind, index: int) -> SelectionEffect[T]:
        return SelectionEffect(kind=kind, index=index, value=self._items[index].value)

    def _emit(self, effects: list[SelectionEffect[T]]) -> list[SelectionEffect[T]]:
        for effect in effects:
            if effect.kind is EffectKind.HIGHLIGHT and self._on_highlight is not None:
                self._on_highlight(effect.value)
            elif effect.kind is EffectKind.SELECT and self._on_select is not None:
                self._on_select(effect.value)
        return effects
