"""Terminal selection widgets."""

from .radio_select import (
    KeyEvent,
    KeyKind,
    RadioSelectItem,
    SelectionController,
    SelectionEffect,
)

__all__ = [
    "KeyEvent",
    "KeyKind",
    "RadioSelectItem",
    "SelectionController",
    "SelectionEffect",
]
