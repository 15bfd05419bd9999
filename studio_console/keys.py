"""Input events fed to the console each tick."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Union


class Key(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    HOME = "home"
    END = "end"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    RETURN = "return"
    BACKSPACE = "backspace"
    DELETE = "delete"
    TAB = "tab"
    K = "k"


@dataclass(frozen=True)
class KeyPress:
    key: Key
    ctrl: bool = False


@dataclass(frozen=True)
class TextInput:
    """Printable characters typed this frame."""

    text: str


@dataclass(frozen=True)
class ClipboardAction:
    action: Literal["copy", "paste"]


@dataclass(frozen=True)
class MouseState:
    """Pointer position in screen cells plus button and wheel state."""

    col: int
    row: int
    left: bool = False
    middle_click: bool = False
    wheel: int = 0


InputEvent = Union[KeyPress, TextInput, ClipboardAction, MouseState]
