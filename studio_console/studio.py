"""Headless game runtime host."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

from studio_console.cartridge import Cartridge
from studio_console.logging import get_logger

log = get_logger(__name__)


class StudioMode(str, Enum):
    CONSOLE = "console"
    RUN = "run"
    SURF = "surf"
    MENU = "menu"


class HeadlessStudio:
    """Tracks the loaded cart, its unsaved state and mode switches.

    There is no script engine or audio synthesizer behind it, so eval,
    the cart browser and sound export report themselves unavailable.
    """

    supports_eval = False

    def __init__(self, cart: Cartridge | None = None):
        self.cart = cart or Cartridge.new()
        self.changed = False
        self.mode = StudioMode.CONSOLE
        self.exit_requested = False
        self.runs = 0

    def cart_changed(self) -> bool:
        return self.changed

    def mark_changed(self) -> None:
        self.changed = True

    def load_cart(self, cart: Cartridge) -> None:
        self.cart = cart

    def rom_loaded(self) -> None:
        self.changed = False

    def rom_saved(self) -> None:
        self.changed = False

    def run(self) -> None:
        log.info("Running cart", script=self.cart.script)
        self.mode = StudioMode.RUN
        self.runs += 1

    def resume(self) -> None:
        self.mode = StudioMode.RUN

    def exit(self) -> None:
        log.debug("Exit requested")
        self.exit_requested = True

    def show_game_menu(self) -> None:
        self.mode = StudioMode.MENU

    def goto_surf(self, on_return: Callable[[bool], None]) -> None:
        on_return(False)

    def evaluate(self, code: str) -> None:
        raise NotImplementedError("eval needs a script engine")

    def export_sfx(self, index: int) -> bytes | None:
        return None

    def export_music(self, index: int) -> bytes | None:
        return None
