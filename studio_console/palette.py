"""Sixteen colour palette shared by the console, cartridges and renderers."""

from enum import IntEnum


class Color(IntEnum):
    """Palette index names."""

    BLACK = 0
    PURPLE = 1
    RED = 2
    ORANGE = 3
    YELLOW = 4
    LIGHT_GREEN = 5
    GREEN = 6
    DARK_GREEN = 7
    DARK_BLUE = 8
    BLUE = 9
    LIGHT_BLUE = 10
    CYAN = 11
    WHITE = 12
    LIGHT_GREY = 13
    GREY = 14
    DARK_GREY = 15


DEFAULT_PALETTE: tuple[tuple[int, int, int], ...] = (
    (0x1A, 0x1C, 0x2C),
    (0x5D, 0x27, 0x5D),
    (0xB1, 0x3E, 0x53),
    (0xEF, 0x7D, 0x57),
    (0xFF, 0xCD, 0x75),
    (0xA7, 0xF0, 0x70),
    (0x38, 0xB7, 0x64),
    (0x25, 0x71, 0x79),
    (0x29, 0x36, 0x6F),
    (0x3B, 0x5D, 0xC9),
    (0x41, 0xA6, 0xF6),
    (0x73, 0xEF, 0xF7),
    (0xF4, 0xF4, 0xF4),
    (0x94, 0xB0, 0xC2),
    (0x56, 0x6C, 0x86),
    (0x33, 0x3C, 0x57),
)

PALETTE_BYTES = bytes(channel for rgb in DEFAULT_PALETTE for channel in rgb)


def palette_from_bytes(data: bytes) -> list[tuple[int, int, int]]:
    """Split 48 packed RGB bytes into 16 colour triples."""
    padded = bytes(data[:48]).ljust(48, b"\0")
    return [tuple(padded[i:i + 3]) for i in range(0, 48, 3)]  # type: ignore[misc]


def hex_color(index: int, palette: tuple[tuple[int, int, int], ...] = DEFAULT_PALETTE) -> str:
    """Return `#rrggbb` for a palette index."""
    r, g, b = palette[index & 0x0F]
    return f"#{r:02x}{g:02x}{b:02x}"


def nearest_color(rgb: tuple[int, int, int], palette: list[tuple[int, int, int]]) -> int:
    """Index of the palette entry closest to `rgb` (squared distance)."""
    best_index = 0
    best_distance = None
    for index, (r, g, b) in enumerate(palette):
        distance = (r - rgb[0]) ** 2 + (g - rgb[1]) ** 2 + (b - rgb[2]) ** 2
        if best_distance is None or distance < best_distance:
            best_index = index
            best_distance = distance
            if distance == 0:
                break
    return best_index
