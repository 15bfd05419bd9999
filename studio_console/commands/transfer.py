"""`export` and `import` commands."""

from __future__ import annotations

import io
import re
import struct
import zipfile
import zlib
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from studio_console import __version__
from studio_console.cartridge import BANK_COUNT, CODE_SIZE, MAP_SIZE
from studio_console.collaborators import NetEvent
from studio_console.command_parser import CommandDescriptor
from studio_console.commands.cart import with_ext
from studio_console.commands.help import build_help_markdown, print_usage_for
from studio_console.commands.registry import CommandSpec
from studio_console.continuation import Completion
from studio_console.logging import get_logger
from studio_console.palette import palette_from_bytes
from studio_console.sprites import (
    SCREEN_HEIGHT,
    SCREEN_WIDTH,
    decode_png,
    image_to_screen,
    paste_into_sheet,
    screen_to_png,
    sheet_to_png,
)

if TYPE_CHECKING:
    from studio_console.console import Console

log = get_logger(__name__)

EMBED_SIGNATURE = b"STU.CART"
EMBED_HEADER = struct.Struct("<8sii")
HTML_CART_NAME = "cart.tic"
SFX_COUNT = 64
MUSIC_TRACKS = 8

NATIVE_SYSTEMS: dict[str, str] = {
    # export type: file extension
    "win": ".exe",
    "winxp": ".exe",
    "linux": "",
    "rpi": "",
    "mac": "",
}

_LEADING_INT = re.compile(r"^\s*[+-]?\d+")


@dataclass
class TransferParams:
    bank: int = 0
    x: int = 0
    y: int = 0
    w: int = 0
    h: int = 0
    ovr: bool = False
    id: int = 0


def _to_int(value: str | None) -> int:
    match = _LEADING_INT.match(value or "")
    return int(match.group()) if match else 0


def parse_transfer_params(desc: CommandDescriptor) -> TransferParams | None:
    """Read `bank= x= y= w= h= ovr= id=`; None when the bank is out of range."""
    params = TransferParams()
    for param in desc.params:
        if param.key == "ovr":
            params.ovr = _to_int(param.value) != 0
        elif param.key in ("bank", "x", "y", "w", "h", "id"):
            setattr(params, param.key, _to_int(param.value))
    if not 0 <= params.bank < BANK_COUNT:
        return None
    return params


def embed_cart(player: bytes, cart: bytes) -> bytes:
    """Append a zlib-packed cart and its header to a player executable."""
    packed = zlib.compress(cart)
    return player + EMBED_HEADER.pack(EMBED_SIGNATURE, len(player), len(packed)) + packed


def add_cart_to_zip(archive: bytes, cart: bytes) -> bytes:
    buffer = io.BytesIO(archive)
    with zipfile.ZipFile(buffer, "a", compression=zipfile.ZIP_DEFLATED) as bundle:
        bundle.writestr(HTML_CART_NAME, cart)
    return buffer.getvalue()


def _invalid_params(console: Console, desc: CommandDescriptor) -> None:
    console.print_error("\nerror: invalid parameters.")
    console.print_line()
    print_usage_for(console, desc)
    console.done()


def _file_exported(console: Console, filename: str, ok: bool) -> None:
    console.print_line()
    if ok:
        console.print_back(f"{filename} exported :)")
    else:
        console.print_error(f"error: {filename} not exported :(")
    console.done()


def _file_imported(console: Console, filename: str) -> None:
    console.studio.mark_changed()
    console.print_line()
    console.print_back(f"{filename} imported :)")
    console.done()


def _palette(console: Console, params: TransferParams) -> list[tuple[int, int, int]]:
    return palette_from_bytes(console.studio.cart.banks[params.bank].palette_bytes(params.ovr))


def _export_native(console: Console, filename: str, export_type: str) -> None:
    ext = NATIVE_SYSTEMS.get(export_type, ".zip")
    if ext:
        filename = with_ext(filename, ext)
    major, minor = __version__.split(".")[:2]
    url = f"/export/{major}.{minor}/{export_type}"

    def on_progress(event: NetEvent) -> None:
        console.restart_line()
        console.print_back("GET ")
        console.print_front(url)
        console.print_back(f" [{event.percent}%]")

    def on_downloaded(completion: Completion) -> None:
        if not completion.ok:
            console.print_line()
            console.print_error("file downloading error :(")
            console.done()
            return

        cart = console.codec.save(console.studio.cart)
        if export_type == "html":
            try:
                data = add_cart_to_zip(completion.value, cart)
            except zipfile.BadZipFile as e:
                log.error("Downloaded player is not a zip", url=url, error=str(e))
                _file_exported(console, filename, False)
                return
        else:
            data = embed_cart(completion.value, cart)
        _file_exported(console, filename, console.fs.save(filename, data, overwrite=True))

    console.print_line()
    console.fetch(url, on_downloaded, on_progress=on_progress, filename=filename)


def _export_sheet(console: Console, filename: str, params: TransferParams, attribute: str) -> None:
    bank = console.studio.cart.banks[params.bank]
    filename = with_ext(filename, ".png")
    png = sheet_to_png(getattr(bank, attribute), _palette(console, params))
    _file_exported(console, filename, console.fs.save(filename, png, overwrite=True))


def _export_map(console: Console, filename: str, params: TransferParams) -> None:
    filename = with_ext(filename, ".map")
    data = bytes(console.studio.cart.banks[params.bank].map)
    _file_exported(console, filename, console.fs.save(filename, data, overwrite=True))


def _export_sound(console: Console, filename: str, data: bytes | None) -> None:
    filename = with_ext(filename, ".wav")
    ok = data is not None and console.fs.save(filename, data, overwrite=True)
    _file_exported(console, filename, ok)


def _export_sfx(console: Console, filename: str, params: TransferParams) -> None:
    if not 0 <= params.id < SFX_COUNT:
        console.print_error(f"\nerror: sfx id must be in 0..{SFX_COUNT - 1}")
        console.done()
        return
    _export_sound(console, filename, console.studio.export_sfx(params.id))


def _export_music(console: Console, filename: str, params: TransferParams) -> None:
    if not 0 <= params.id < MUSIC_TRACKS:
        console.print_error(f"\nerror: music track must be in 0..{MUSIC_TRACKS - 1}")
        console.done()
        return
    _export_sound(console, filename, console.studio.export_music(params.id))


def _export_screen(console: Console, filename: str, params: TransferParams) -> None:
    filename = with_ext(filename, ".png")
    png = screen_to_png(console.studio.cart.banks[params.bank].screen, _palette(console, params))
    _file_exported(console, filename, console.fs.save(filename, png, overwrite=True))


def _export_help(console: Console, filename: str, params: TransferParams) -> None:
    filename = with_ext(filename, ".md")
    text = build_help_markdown(console.registry)
    _file_exported(console, filename, console.fs.save(filename, text.encode("utf-8"), overwrite=True))


Exporter = Callable[["Console", str, TransferParams], None]

EXPORTERS: dict[str, Exporter] = {
    **{name: (lambda c, f, p, name=name: _export_native(c, f, name)) for name in NATIVE_SYSTEMS},
    "html": lambda c, f, p: _export_native(c, f, "html"),
    "tiles": lambda c, f, p: _export_sheet(c, f, p, "tiles"),
    "sprites": lambda c, f, p: _export_sheet(c, f, p, "sprites"),
    "map": _export_map,
    "sfx": _export_sfx,
    "music": _export_music,
    "screen": _export_screen,
    "help": _export_help,
}


def on_export(console: Console, desc: CommandDescriptor) -> None:
    export_type, filename = desc.param(0), desc.param(1)
    params = parse_transfer_params(desc)
    exporter = EXPORTERS.get(export_type or "")
    if exporter is None or not filename or params is None:
        _invalid_params(console, desc)
        return
    exporter(console, filename, params)


def _import_sheet(console: Console, filename: str, data: bytes, params: TransferParams, attribute: str) -> None:
    try:
        image = decode_png(data)
    except OSError as e:
        log.warning("Image import failed", filename=filename, error=str(e))
        console.print_error(f"\nerror: {filename} is not a valid image")
        console.done()
        return

    bank = console.studio.cart.banks[params.bank]
    paste_into_sheet(getattr(bank, attribute), image, _palette(console, params),
                     params.x, params.y, params.w, params.h)
    _file_imported(console, filename)


def _import_code(console: Console, filename: str, data: bytes, params: TransferParams) -> None:
    if len(data) >= CODE_SIZE:
        console.print_error(f"\nerror: {filename} is too big")
        console.done()
        return
    console.studio.cart.code = data.decode("utf-8", errors="replace")
    _file_imported(console, filename)


def _import_map(console: Console, filename: str, data: bytes, params: TransferParams) -> None:
    if len(data) > MAP_SIZE:
        console.print_error(f"\nerror: {filename} is too big")
        console.done()
        return
    target = console.studio.cart.banks[params.bank].map
    target[:len(data)] = data
    _file_imported(console, filename)


def _import_screen(console: Console, filename: str, data: bytes, params: TransferParams) -> None:
    try:
        image = decode_png(data)
    except OSError as e:
        log.warning("Image import failed", filename=filename, error=str(e))
        image = None

    if image is None or image.size != (SCREEN_WIDTH, SCREEN_HEIGHT):
        console.print_error(f"\nerror: screen image must be {SCREEN_WIDTH}x{SCREEN_HEIGHT} pixels")
        console.done()
        return

    console.studio.cart.banks[params.bank].screen[:] = image_to_screen(image, _palette(console, params))
    _file_imported(console, filename)


Importer = Callable[["Console", str, bytes, TransferParams], None]

IMPORTERS: dict[str, Importer] = {
    "tiles": lambda c, f, d, p: _import_sheet(c, f, d, p, "tiles"),
    "sprites": lambda c, f, d, p: _import_sheet(c, f, d, p, "sprites"),
    "map": _import_map,
    "code": _import_code,
    "screen": _import_screen,
}


def on_import(console: Console, desc: CommandDescriptor) -> None:
    import_type, filename = desc.param(0), desc.param(1)
    params = parse_transfer_params(desc)
    importer = IMPORTERS.get(import_type or "")
    if importer is None or not filename or params is None:
        _invalid_params(console, desc)
        return

    data = console.fs.load(filename)
    if data is None:
        console.print_error(f"\nerror, {filename} file not loaded")
        console.done()
        return

    importer(console, filename, data, params)


COMMANDS: tuple[CommandSpec, ...] = (
    CommandSpec(
        name="export",
        help="export cart to HTML,\nnative build (win linux rpi mac),\nexport sprites/map/... as a .png/.map/... image "
             "or export sfx and music to .wav files.",
        usage=f"\nexport [{'|'.join(EXPORTERS)}...] <file> [bank=0 ovr=1 id=0 ...]",
        handler=on_export,
    ),
    CommandSpec(
        name="import",
        help="import code/sprites/map/... from an external file.",
        usage=f"\nimport [{'|'.join(IMPORTERS)}...] <file> [bank=0 x=0 y=0 w=0 h=0 ovr=1 ...]",
        handler=on_import,
    ),
)
