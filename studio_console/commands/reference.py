"""Static reference text shown by `help` topics."""

from studio_console.commands.registry import ApiItem

PRODUCT_NAME = "Studio Console"

WELCOME_TEXT = (
    "Welcome to the studio, a fantasy computer for making, playing and sharing tiny games.\n\n"
    "There are built-in tools for development: code, sprites, map, sound editors "
    "and the command line, which is enough to create a mini retro game.\n\n"
    "At the exit you will get a cartridge file, which can be stored and played on the website.\n\n"
    "Also, the game can be packed into a player that works on all popular platforms "
    "and distributed as you wish.\n\n"
    "To make a retro styled game, the whole process of creation takes place "
    "under some technical limitations: 240x136 pixels display, 16 color palette, "
    "256 8x8 color sprites, 4 channel sound and etc."
)

SPEC_ROWS: tuple[tuple[str, str], ...] = (
    ("DISPLAY", "240x136 pixels, 16 colors palette."),
    ("INPUT", "4 gamepads with 8 buttons / mouse / keyboard."),
    ("SPRITES", "256 8x8 tiles and 256 8x8 sprites."),
    ("MAP", "240x136 cells, 1920x1088 pixels."),
    ("SOUND", "4 channels with configurable waveforms."),
    ("CODE", "64KB of code."),
    ("MEMORY", "96KB RAM, 16KB VRAM."),
    ("BANKS", "8 banks of tiles, sprites, map, sfx, music, palette, flags and screen."),
)

RAM_LAYOUT: tuple[tuple[int, str, int], ...] = (
    (0x00000, "<VRAM>", 16384),
    (0x04000, "TILES", 8192),
    (0x06000, "SPRITES", 8192),
    (0x08000, "MAP", 32640),
    (0x0FF80, "GAMEPADS", 4),
    (0x0FF84, "MOUSE", 4),
    (0x0FF88, "KEYBOARD", 4),
    (0x0FF8C, "SFX STATE", 16),
    (0x0FF9C, "SOUND REGISTERS", 72),
    (0x0FFE4, "WAVEFORMS", 256),
    (0x100E4, "SFX", 4224),
    (0x11164, "MUSIC PATTERNS", 11520),
    (0x13E64, "MUSIC TRACKS", 408),
    (0x13FFC, "SOUND STATE", 4),
    (0x14000, "STEREO VOLUME", 4),
    (0x14004, "PERSISTENT MEMORY", 1024),
    (0x14404, "SPRITE FLAGS", 512),
    (0x14604, "SYSTEM FONT", 2048),
    (0x14E04, "... (free)", 12796),
    (0x18000, "", 0),
)

VRAM_LAYOUT: tuple[tuple[int, str, int], ...] = (
    (0x00000, "SCREEN", 16320),
    (0x03FC0, "PALETTE", 48),
    (0x03FF0, "PALETTE MAP", 8),
    (0x03FF8, "BORDER COLOR", 1),
    (0x03FF9, "SCREEN OFFSET", 2),
    (0x03FFB, "MOUSE CURSOR", 1),
    (0x03FFC, "BLIT SEGMENT", 1),
    (0x03FFD, "... (reserved)", 3),
    (0x04000, "", 0),
)

STARTUP_OPTIONS: tuple[tuple[str, str], ...] = (
    ("skip", "skip the startup delay before running a cart."),
    ("cli", "console only mode: no prompts, exit after the commands."),
    ("cmd=...", "run `&` separated commands in the console."),
    ("fs=...", "path to the file system folder."),
    ("config=...", "path to a YAML configuration file."),
    ("verbose", "print debug logs to stderr."),
    ("dump-screen", "print the visible console screen after a batch run."),
)

TERMS_TEXT = (
    "## Terms of Use\n\n"
    "- All cartridges posted on the website are the property of their authors.\n"
    "- Do not redistribute a cartridge without permission, directly from the author.\n"
    "- By uploading cartridges to the site, you grant the right to freely use, "
    "display, reproduce and distribute them.\n"
    "- Cartridges can use any license you wish.\n"
    "- Do not post material that violates copyright, obscenity or other laws."
)

LICENSE_TEXT = (
    "## MIT License\n\n"
    "Permission is hereby granted, free of charge, to any person obtaining a copy "
    "of this software and associated documentation files (the \"Software\"), to deal "
    "in the Software without restriction, including without limitation the rights "
    "to use, copy, modify, merge, publish, distribute, sublicense, and/or sell "
    "copies of the Software, and to permit persons to whom the Software is "
    "furnished to do so, subject to the following conditions:\n\n"
    "The above copyright notice and this permission notice shall be included in all "
    "copies or substantial portions of the Software.\n\n"
    "THE SOFTWARE IS PROVIDED \"AS IS\", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR "
    "IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY, "
    "FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT."
)

API_ITEMS: tuple[ApiItem, ...] = (
    ApiItem("TIC", "TIC()", "Main function. It's called at 60fps (60 times every second)."),
    ApiItem("SCN", "SCN(row)", "Allows you to execute code between the drawing of each scan line."),
    ApiItem("BDR", "BDR(row)", "Allows you to execute code between the drawing of each fullscreen scanline."),
    ApiItem("OVR", "OVR()", "Called after TIC, draws on a separate overlay layer."),
    ApiItem("BOOT", "BOOT()", "Startup function, called once when the cart starts."),
    ApiItem("MENU", "MENU(index)", "Game Menu handler."),
    ApiItem("print", "print(text x=0 y=0 color=15 fixed=false scale=1 smallfont=false) -> width",
            "Print text to the screen using the font defined in config."),
    ApiItem("cls", "cls(color=0)", "Clear the screen."),
    ApiItem("pix", "pix(x y color)\npix(x y) -> color", "Draw a pixel in the specified color, or read its color."),
    ApiItem("line", "line(x0 y0 x1 y1 color)", "Draw a straight line from point (x0,y0) to point (x1,y1)."),
    ApiItem("rect", "rect(x y w h color)", "Draw a filled rectangle of the desired size and color."),
    ApiItem("rectb", "rectb(x y w h color)", "Draw a one pixel thick rectangle border."),
    ApiItem("circ", "circ(x y radius color)", "Draw a filled circle of the desired radius and color."),
    ApiItem("circb", "circb(x y radius color)", "Draw the circumference of a circle."),
    ApiItem("elli", "elli(x y a b color)", "Draw a filled ellipse of the desired radiuses and color."),
    ApiItem("ellib", "ellib(x y a b color)", "Draw the border of an ellipse."),
    ApiItem("tri", "tri(x1 y1 x2 y2 x3 y3 color)", "Draw a triangle filled with color."),
    ApiItem("trib", "trib(x1 y1 x2 y2 x3 y3 color)", "Draw a triangle border."),
    ApiItem("textri", "textri(x1 y1 x2 y2 x3 y3 u1 v1 u2 v2 u3 v3 use_map=false trans=-1)",
            "Draw a triangle filled with texture from sprites or map."),
    ApiItem("spr", "spr(id x y colorkey=-1 scale=1 flip=0 rotate=0 w=1 h=1)", "Draw a sprite, or composite sprite."),
    ApiItem("map", "map(x=0 y=0 w=30 h=17 sx=0 sy=0 colorkey=-1 scale=1 remap=nil)", "Draw the map."),
    ApiItem("mget", "mget(x y) -> tile_id", "Get the sprite id of a map cell."),
    ApiItem("mset", "mset(x y tile_id)", "Change a tile on the map."),
    ApiItem("fget", "fget(sprite_id flag) -> bool", "Return true if the flag of the sprite is set."),
    ApiItem("fset", "fset(sprite_id flag bool)", "Set the sprite flag to a given value."),
    ApiItem("btn", "btn(id) -> pressed", "Get the gamepad button state in the current frame."),
    ApiItem("btnp", "btnp(id hold=-1 period=-1) -> pressed", "Return true if the button was just pressed."),
    ApiItem("key", "key(code=-1) -> pressed", "Get the keyboard key state."),
    ApiItem("keyp", "keyp(code=-1 hold=-1 period=-17) -> pressed", "Return true if the key was just pressed."),
    ApiItem("mouse", "mouse() -> x y left middle right scrollx scrolly", "Return the mouse state."),
    ApiItem("sfx", "sfx(id note=-1 duration=-1 channel=0 volume=15 speed=0)", "Play a sound from the SFX editor."),
    ApiItem("music", "music(track=-1 frame=-1 row=-1 loop=true sustain=false tempo=-1 speed=-1)",
            "Play or stop a music track."),
    ApiItem("peek", "peek(addr bits=8) -> value", "Read a byte from RAM."),
    ApiItem("poke", "poke(addr value bits=8)", "Write a byte to RAM."),
    ApiItem("peek4", "peek4(addr4) -> value", "Read a nibble from RAM."),
    ApiItem("poke4", "poke4(addr4 value)", "Write a nibble to RAM."),
    ApiItem("memcpy", "memcpy(dest source size)", "Copy a block of RAM."),
    ApiItem("memset", "memset(dest value size)", "Set a block of RAM to a value."),
    ApiItem("pmem", "pmem(index value)\npmem(index) -> value", "Access the persistent memory."),
    ApiItem("sync", "sync(mask=0 bank=0 tocart=false)", "Copy memory banks between RAM and the cart."),
    ApiItem("vbank", "vbank(bank) -> prev", "Switch the VRAM bank."),
    ApiItem("clip", "clip(x y width height)\nclip()", "Limit drawing to a clipping region."),
    ApiItem("font", "font(text x y chromakey char_width char_height fixed=false scale=1) -> width",
            "Print text using the foreground sprites as a font."),
    ApiItem("trace", "trace(message color=15)", "Print a message in the console."),
    ApiItem("time", "time() -> ticks", "Milliseconds elapsed since the game started."),
    ApiItem("tstamp", "tstamp() -> timestamp", "Current Unix timestamp in seconds."),
    ApiItem("exit", "exit()", "Interrupt the program and return to the console."),
    ApiItem("reset", "reset()", "Reset the game to its initial state."),
)


def format_layout_table(rows: tuple[tuple[int, str, int], ...]) -> str:
    """Memory layout as a framed ASCII table."""
    rule = "+-----+------------------+-------+\n"
    lines = ["\n", rule, "|ADDR | INFO             | BYTES |\n", rule]
    for address, name, size in rows:
        if size:
            lines.append(f"|{address:05X}| {name:<17}|{size:>6} |\n")
        else:
            lines.append(f"|{address:05X}| {name:<17}|       |\n")
    lines.append(rule)
    return "".join(lines)
