"""4bpp pixel access for sprite sheets and the screen, PNG conversion via Pillow."""

from __future__ import annotations

import io

from PIL import Image
from PIL.PngImagePlugin import PngInfo

from studio_console.logging import get_logger
from studio_console.palette import Color, nearest_color

log = get_logger(__name__)

TILE_SIZE = 8
SHEET_TILES = 16
SHEET_SIZE = TILE_SIZE * SHEET_TILES
SCREEN_WIDTH = 240
SCREEN_HEIGHT = 136
COVER_SIZE = 256
COVER_PADDING = 8
CART_CHUNK_KEY = "studio-cart"


def peek4(buffer: bytearray, index: int) -> int:
    value = buffer[index >> 1]
    return (value >> 4) & 0x0F if index & 1 else value & 0x0F


def poke4(buffer: bytearray, index: int, color: int) -> None:
    byte = buffer[index >> 1]
    if index & 1:
        buffer[index >> 1] = (byte & 0x0F) | ((color & 0x0F) << 4)
    else:
        buffer[index >> 1] = (byte & 0xF0) | (color & 0x0F)


def _sheet_index(x: int, y: int) -> int:
    tile = (y // TILE_SIZE) * SHEET_TILES + x // TILE_SIZE
    return tile * TILE_SIZE * TILE_SIZE + (y % TILE_SIZE) * TILE_SIZE + x % TILE_SIZE


def get_sheet_pixel(sheet: bytearray, x: int, y: int) -> int:
    return peek4(sheet, _sheet_index(x, y))


def set_sheet_pixel(sheet: bytearray, x: int, y: int, color: int) -> None:
    poke4(sheet, _sheet_index(x, y), color)


def _encode_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def sheet_to_png(sheet: bytearray, palette: list[tuple[int, int, int]]) -> bytes:
    image = Image.new("RGB", (SHEET_SIZE, SHEET_SIZE))
    pixels = image.load()
    for y in range(SHEET_SIZE):
        for x in range(SHEET_SIZE):
            pixels[x, y] = palette[get_sheet_pixel(sheet, x, y)]
    return _encode_png(image)


def _screen_image(screen: bytearray, palette: list[tuple[int, int, int]]) -> Image.Image:
    image = Image.new("RGB", (SCREEN_WIDTH, SCREEN_HEIGHT))
    pixels = image.load()
    for y in range(SCREEN_HEIGHT):
        for x in range(SCREEN_WIDTH):
            pixels[x, y] = palette[peek4(screen, y * SCREEN_WIDTH + x)]
    return image


def screen_to_png(screen: bytearray, palette: list[tuple[int, int, int]]) -> bytes:
    return _encode_png(_screen_image(screen, palette))


def cart_to_png(cart_data: bytes, screen: bytearray, palette: list[tuple[int, int, int]]) -> bytes:
    """Cover image of the cart screen carrying the encoded cart in a compressed text chunk."""
    cover = Image.new("RGB", (COVER_SIZE, COVER_SIZE), palette[Color.DARK_GREY])
    cover.paste(_screen_image(screen, palette), (COVER_PADDING, COVER_PADDING))

    info = PngInfo()
    info.add_text(CART_CHUNK_KEY, cart_data.decode("latin-1"), zip=True)
    buffer = io.BytesIO()
    cover.save(buffer, format="PNG", pnginfo=info)
    return buffer.getvalue()


def cart_from_png(data: bytes) -> bytes | None:
    """Encoded cart carried by a PNG cover, or None when the image has none."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            text = getattr(image, "text", {})
    except (OSError, ValueError) as e:
        log.warning("PNG cart unreadable", error=str(e))
        return None

    value = text.get(CART_CHUNK_KEY)
    return value.encode("latin-1") if value else None


def decode_png(data: bytes) -> Image.Image:
    """Open image bytes as RGB; raises OSError for anything Pillow cannot read."""
    with Image.open(io.BytesIO(data)) as image:
        return image.convert("RGB")


def paste_into_sheet(
    sheet: bytearray,
    image: Image.Image,
    palette: list[tuple[int, int, int]],
    x: int = 0,
    y: int = 0,
    width: int = 0,
    height: int = 0,
) -> None:
    """Copy an image region into the sheet at `(x, y)`, mapping to palette indices."""
    width = width or image.width
    height = height or image.height
    pixels = image.load()
    for row in range(min(height, image.height)):
        for col in range(min(width, image.width)):
            target_x, target_y = x + col, y + row
            if 0 <= target_x < SHEET_SIZE and 0 <= target_y < SHEET_SIZE:
                set_sheet_pixel(sheet, target_x, target_y, nearest_color(pixels[col, row], palette))


def image_to_screen(image: Image.Image, palette: list[tuple[int, int, int]]) -> bytearray:
    screen = bytearray(SCREEN_WIDTH * SCREEN_HEIGHT // 2)
    pixels = image.load()
    for y in range(SCREEN_HEIGHT):
        for x in range(SCREEN_WIDTH):
            poke4(screen, y * SCREEN_WIDTH + x, nearest_color(pixels[x, y], palette))
    return screen
