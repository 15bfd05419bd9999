"""Interfaces of the services the console drives but does not own."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal, Protocol

from studio_console.cartridge import Cartridge
from studio_console.continuation import Completion

CompletionCallback = Callable[[Completion], None]


@dataclass(frozen=True)
class DirEntry:
    """One entry of a folder listing."""

    name: str
    is_dir: bool
    hash: str = ""


@dataclass(frozen=True)
class NetEvent:
    """Progress, failure or end of a network request."""

    kind: Literal["progress", "error", "done"]
    url: str
    received: int = 0
    total: int = 0
    data: bytes = b""
    error: str = ""

    @property
    def percent(self) -> int:
        return self.received * 100 // self.total if self.total else 0


class FileSystem(Protocol):
    """Virtual filesystem rooted at the storage folder."""

    def enumerate(self, on_done: CompletionCallback) -> None:
        """List the current folder; completes with `list[DirEntry]`."""

    def is_dir_async(self, name: str, on_done: CompletionCallback) -> None:
        """Completes with a bool."""

    def hash_load(self, name: str, hash: str, on_done: CompletionCallback) -> None:
        """Fetch a public cart by hash; completes with bytes."""

    def load(self, name: str) -> bytes | None: ...

    def save(self, name: str, data: bytes, overwrite: bool = False) -> bool: ...

    def exists(self, name: str) -> bool: ...

    def is_dir(self, name: str) -> bool: ...

    def change_dir(self, name: str) -> None: ...

    def home(self) -> None: ...

    def back(self) -> None: ...

    def make_dir(self, name: str) -> bool: ...

    def delete_file(self, name: str) -> bool: ...

    def delete_dir(self, name: str) -> bool: ...

    def current_path(self) -> str: ...

    def is_public_dir(self) -> bool: ...

    def root_path(self) -> str: ...

    def load_root(self, name: str) -> bytes | None: ...

    def save_root(self, name: str, data: bytes) -> bool: ...

    def open_folder(self) -> None: ...


class ConfirmationUI(Protocol):
    """Modal yes/no question."""

    def request(self, lines: list[str], on_answer: Callable[[bool], None]) -> None: ...


class Network(Protocol):
    """HTTP GET relative to the configured server."""

    def get(self, url: str, on_event: Callable[[NetEvent], None]) -> None: ...


class Clipboard(Protocol):
    def get(self) -> str | None: ...

    def set(self, text: str) -> None: ...

    def has(self) -> bool: ...


class CartridgeCodec(Protocol):
    def load(self, data: bytes) -> Cartridge:
        """Decode cart bytes; raises CartridgeError."""

    def save(self, cart: Cartridge) -> bytes: ...


class StudioHost(Protocol):
    """Game runtime the console hands control to."""

    cart: Cartridge
    supports_eval: bool

    def cart_changed(self) -> bool: ...

    def mark_changed(self) -> None: ...

    def load_cart(self, cart: Cartridge) -> None: ...

    def rom_loaded(self) -> None: ...

    def rom_saved(self) -> None: ...

    def run(self) -> None: ...

    def resume(self) -> None: ...

    def exit(self) -> None: ...

    def show_game_menu(self) -> None: ...

    def goto_surf(self, on_return: Callable[[bool], None]) -> None: ...

    def evaluate(self, code: str) -> None: ...

    def export_sfx(self, index: int) -> bytes | None: ...

    def export_music(self, index: int) -> bytes | None: ...
