"""Cartridge model and its chunked binary codec."""

from __future__ import annotations

import re
import struct
from dataclasses import dataclass, field
from enum import IntEnum

from studio_console.exceptions import CartridgeError
from studio_console.logging import get_logger
from studio_console.palette import PALETTE_BYTES

log = get_logger(__name__)

BANK_COUNT = 8
TILES_SIZE = 8192
MAP_SIZE = 240 * 136
SFX_SIZE = 64 * 66
WAVEFORMS_SIZE = 16 * 16
PATTERNS_SIZE = 60 * 192
TRACKS_SIZE = 8 * 51
PALETTE_SIZE = 48
FLAGS_SIZE = 512
SCREEN_SIZE = 240 * 136 // 2
CODE_SIZE = 0x10000
CHUNK_HEADER = struct.Struct("<BHB")

SCRIPTS: dict[str, tuple[str, str]] = {
    # name: (file extension, line comment)
    "lua": (".lua", "--"),
    "moon": (".moon", "--"),
    "fennel": (".fnl", ";;"),
    "squirrel": (".nut", "//"),
    "wren": (".wren", "//"),
    "js": (".js", "//"),
    "ruby": (".rb", "#"),
    "janet": (".janet", "#"),
    "python": (".py", "#"),
}

SECTIONS = ("code", "tiles", "sprites", "map", "sfx", "music", "palette", "flags", "screen")


class ChunkType(IntEnum):
    TILES = 1
    SPRITES = 2
    MAP = 4
    CODE = 5
    FLAGS = 6
    SAMPLES = 9
    WAVEFORM = 10
    PALETTE = 12
    MUSIC = 14
    PATTERNS = 15
    SCREEN = 18


def _zeros(size: int) -> bytearray:
    return bytearray(size)


@dataclass
class Bank:
    """One memory bank of cart assets."""

    tiles: bytearray = field(default_factory=lambda: _zeros(TILES_SIZE))
    sprites: bytearray = field(default_factory=lambda: _zeros(TILES_SIZE))
    map: bytearray = field(default_factory=lambda: _zeros(MAP_SIZE))
    samples: bytearray = field(default_factory=lambda: _zeros(SFX_SIZE))
    waveforms: bytearray = field(default_factory=lambda: _zeros(WAVEFORMS_SIZE))
    patterns: bytearray = field(default_factory=lambda: _zeros(PATTERNS_SIZE))
    tracks: bytearray = field(default_factory=lambda: _zeros(TRACKS_SIZE))
    palette: bytearray = field(default_factory=lambda: bytearray(PALETTE_BYTES * 2))
    flags: bytearray = field(default_factory=lambda: _zeros(FLAGS_SIZE))
    screen: bytearray = field(default_factory=lambda: _zeros(SCREEN_SIZE))

    def palette_bytes(self, ovr: bool = False) -> bytes:
        offset = PALETTE_SIZE if ovr else 0
        return bytes(self.palette[offset:offset + PALETTE_SIZE])


# Section name -> Bank attributes it covers.
BANK_SECTIONS: dict[str, tuple[str, ...]] = {
    "tiles": ("tiles",),
    "sprites": ("sprites",),
    "map": ("map",),
    "sfx": ("samples", "waveforms"),
    "music": ("patterns", "tracks"),
    "palette": ("palette",),
    "flags": ("flags",),
    "screen": ("screen",),
}

_CHUNK_FIELDS: dict[ChunkType, str] = {
    ChunkType.TILES: "tiles",
    ChunkType.SPRITES: "sprites",
    ChunkType.MAP: "map",
    ChunkType.FLAGS: "flags",
    ChunkType.SAMPLES: "samples",
    ChunkType.WAVEFORM: "waveforms",
    ChunkType.PALETTE: "palette",
    ChunkType.MUSIC: "tracks",
    ChunkType.PATTERNS: "patterns",
    ChunkType.SCREEN: "screen",
}

_SCRIPT_TAG = re.compile(r"^\s*(?:--|//|;;|#)\s*script:\s*(\w+)", re.MULTILINE)


@dataclass
class Cartridge:
    """Code plus `BANK_COUNT` banks of assets."""

    code: str = ""
    banks: list[Bank] = field(default_factory=lambda: [Bank() for _ in range(BANK_COUNT)])

    @property
    def script(self) -> str:
        """Language declared by the `script:` metatag, lua when absent."""
        match = _SCRIPT_TAG.search(self.code)
        if match and match.group(1) in SCRIPTS:
            return match.group(1)
        return "lua"

    @classmethod
    def new(cls, script: str = "lua") -> "Cartridge":
        """Hello-world cart for `script`."""
        if script not in SCRIPTS:
            raise CartridgeError(f"unknown script: {script}")
        cart = cls(code=hello_world_code(script))
        # A single 8x8 sprite so the demo has something to draw.
        for row in range(8):
            cart.banks[0].sprites[row * 4:row * 4 + 4] = b"\xcc\xcc\xcc\xcc"
        return cart

    def copy_section(self, source: "Cartridge", section: str) -> None:
        """Replace one section (all banks) with the one from `source`."""
        if section == "code":
            self.code = source.code
            return
        attributes = BANK_SECTIONS.get(section)
        if attributes is None:
            raise CartridgeError(f"unknown section: {section}")
        for target, origin in zip(self.banks, source.banks):
            for attribute in attributes:
                setattr(target, attribute, bytearray(getattr(origin, attribute)))


def hello_world_code(script: str) -> str:
    ext, comment = SCRIPTS[script]
    return "\n".join([
        f"{comment} title:  game title",
        f"{comment} author: game developer",
        f"{comment} desc:   short description",
        f"{comment} script: {script}",
        "",
        f"{comment} entry point called 60 times per second",
        f"{comment} TIC() {{ cls(13); print('HELLO WORLD!', 84, 84) }}",
        "",
    ])


def _trimmed(data: bytes | bytearray) -> bytes:
    return bytes(data).rstrip(b"\0")


class ChunkCodec:
    """Binary cart format: a flat sequence of chunks.

    Each chunk starts with a 4 byte header: `bank << 5 | type`, a little
    endian 16 bit size and a reserved byte. Trailing zeros of every
    section are trimmed and empty sections are omitted.
    """

    def save(self, cart: Cartridge) -> bytes:
        out = bytearray()

        def chunk(chunk_type: ChunkType, bank: int, data: bytes) -> None:
            if data:
                out.extend(CHUNK_HEADER.pack((bank << 5) | chunk_type, len(data), 0))
                out.extend(data)

        for index, bank in enumerate(cart.banks):
            for chunk_type, attribute in _CHUNK_FIELDS.items():
                chunk(chunk_type, index, _trimmed(getattr(bank, attribute)))

        # Saved whole in bank 0; load() also joins code split over banks.
        chunk(ChunkType.CODE, 0, cart.code.encode("latin-1", errors="replace")[:CODE_SIZE - 1])

        return bytes(out)

    def load(self, data: bytes) -> Cartridge:
        if not data:
            raise CartridgeError("empty cartridge")

        cart = Cartridge(code="")
        code_parts: dict[int, bytes] = {}
        offset = 0
        while offset < len(data):
            if offset + CHUNK_HEADER.size > len(data):
                raise CartridgeError(f"truncated chunk header at {offset}")
            head, size, _ = CHUNK_HEADER.unpack_from(data, offset)
            offset += CHUNK_HEADER.size
            if offset + size > len(data):
                raise CartridgeError(f"truncated chunk at {offset}: need {size} bytes")
            body = data[offset:offset + size]
            offset += size

            bank, kind = head >> 5, head & 0x1F
            if kind == ChunkType.CODE:
                code_parts[bank] = body
                continue

            try:
                attribute = _CHUNK_FIELDS[ChunkType(kind)]
            except (ValueError, KeyError):
                log.debug("Skipping unknown cart chunk", chunk_type=kind, size=size)
                continue

            target = getattr(cart.banks[bank], attribute)
            count = min(len(body), len(target))
            target[:count] = body[:count]
            target[count:] = bytes(len(target) - count)

        cart.code = b"".join(code_parts[i] for i in sorted(code_parts)).decode("latin-1")
        return cart
