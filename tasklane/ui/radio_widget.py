from __future__ import annotations

from typing import Callable, Generic, Optional, Sequence, TypeVar

from prompt_toolkit.application import Application
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import Layout
from prompt_toolkit.layout.containers import HSplit, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.styles import Style

from .radio_select import (
    CONFIRM_KEYS,
    DEFAULT_WINDOW_SIZE,
    DOWN_KEYS,
    UP_KEYS,
    KeyEvent,
    RadioSelectItem,
    Scheduler,
    SelectionController,
)

T = TypeVar("T")

SCROLL_UP_ARROW = "▲"
SCROLL_DOWN_ARROW = "▼"
RADIO_HINT = "Use ↑/↓ (j/k) to move, type a number to jump, Enter to confirm, Esc to cancel."

RADIO_STYLE = Style.from_dict(
    {
        "title": "bold",
        "hint": "#888888",
        "choice": "#8a8a8a",
        "selected": "#5fd75f",
        "disabled": "#585858",
        "type": "#585858",
        "marker": "",
        "marker.active": "#5fd75f",
        "arrow": "",
        "arrow.dim": "#585858",
    }
)


class RadioButtonSelect(Generic[T]):
    """prompt_toolkit container drawing a ``SelectionController``."""

    def __init__(
        self,
        items: Sequence[RadioSelectItem[T]],
        *,
        on_select: Callable[[T], None],
        on_highlight: Optional[Callable[[T], None]] = None,
        initial_index: int = 0,
        window_size: int = DEFAULT_WINDOW_SIZE,
        show_scroll_arrows: bool = False,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self._on_select = on_select
        self._on_highlight = on_highlight
        self.controller: SelectionController[T] = SelectionController(
            items,
            initial_index=initial_index,
            window_size=window_size,
            show_scroll_arrows=show_scroll_arrows,
            on_highlight=self._handle_highlight,
            on_select=self._handle_select,
            scheduler=scheduler,
        )
        self.control = FormattedTextControl(
            self._fragments,
            focusable=True,
            show_cursor=False,
            key_bindings=self._build_key_bindings(),
        )
        self.window = Window(self.control, dont_extend_height=True)

    def __pt_container__(self) -> Window:
        return self.window

    def close(self) -> None:
        self.controller.close()

    def sync_focus(self, focused: bool) -> None:
        """Follow layout focus; losing it drops any half-typed number."""
        self.controller.set_focused(focused)

    def _handle_highlight(self, value: T) -> None:
        if self._on_highlight is not None:
            self._on_highlight(value)

    def _handle_select(self, value: T) -> None:
        self._on_select(value)

    def _fragments(self) -> list[tuple[str, str]]:
        controller = self.controller
        fragments: list[tuple[str, str]] = []
        if controller.show_scroll_arrows:
            style = "class:arrow" if controller.can_scroll_up() else "class:arrow.dim"
            fragments.append((style, f"{SCROLL_UP_ARROW}\n"))
        for row in controller.render_rows():
            style = f"class:{row.style}"
            marker_style = "class:marker.active" if row.is_active else "class:marker"
            fragments.append((style, f"{row.number} "))
            fragments.append((marker_style, f"{row.marker} "))
            if row.type_label:
                fragments.append((style, f"{row.label} "))
                fragments.append(("class:type", row.type_label))
            else:
                fragments.append((style, row.label))
            fragments.append(("", "\n"))
        if controller.show_scroll_arrows:
            style = "class:arrow" if controller.can_scroll_down() else "class:arrow.dim"
            fragments.append((style, f"{SCROLL_DOWN_ARROW}\n"))
        return fragments

    def _build_key_bindings(self) -> KeyBindings:
        bindings = KeyBindings()
        keys = [*UP_KEYS, *DOWN_KEYS, CONFIRM_KEYS[0], *"0123456789"]
        for key in keys:
            bindings.add(key)(self._key_handler(key))
        return bindings

    def _key_handler(self, key: str) -> Callable[..., None]:
        def _handler(event) -> None:  # type: ignore[no-untyped-def]
            self.controller.handle_key(KeyEvent.from_key(key))
            event.app.invalidate()

        return _handler


async def run_radio_select(
    items: Sequence[RadioSelectItem[T]],
    *,
    title: Optional[str] = None,
    initial_index: int = 0,
    window_size: int = DEFAULT_WINDOW_SIZE,
    show_scroll_arrows: bool = False,
    on_highlight: Optional[Callable[[T], None]] = None,
) -> Optional[T]:
    """Show a radio list inline and return the chosen value, or None if cancelled."""
    if not items:
        return None
    app: Optional[Application] = None
    finished = False

    def _finish(value: Optional[T]) -> None:
        nonlocal finished
        if finished or app is None:
            return
        finished = True
        app.exit(result=value)

    widget: RadioButtonSelect[T] = RadioButtonSelect(
        items,
        on_select=_finish,
        on_highlight=on_highlight,
        initial_index=initial_index,
        window_size=window_size,
        show_scroll_arrows=show_scroll_arrows,
    )
    rows: list = []
    if title:
        rows.append(Window(FormattedTextControl([("class:title", title)]), dont_extend_height=True))
    rows.append(widget)
    rows.append(Window(FormattedTextControl([("class:hint", RADIO_HINT)]), dont_extend_height=True))
    bindings = KeyBindings()

    @bindings.add("escape")
    def _cancel(event) -> None:  # type: ignore[no-untyped-def]
        _finish(None)

    @bindings.add("c-c")
    def _cancel_sigint(event) -> None:  # type: ignore[no-untyped-def]
        _finish(None)

    app = Application(
        layout=Layout(HSplit(rows), focused_element=widget.window),
        key_bindings=bindings,
        full_screen=False,
        style=RADIO_STYLE,
    )

    def _track_focus(sender: Application) -> None:
        widget.sync_focus(sender.layout.has_focus(widget.window))

    app.after_render += _track_focus
    widget.controller.mount()
    try:
        return await app.run_async()
    finally:
        widget.close()
