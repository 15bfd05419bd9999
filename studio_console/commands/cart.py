"""Cart lifecycle commands: new, load, save, run, config and friends."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING

from studio_console.cartridge import SCRIPTS, SECTIONS, Cartridge
from studio_console.command_parser import CommandDescriptor, parse_command
from studio_console.commands.help import print_usage_for
from studio_console.commands.registry import CommandSpec
from studio_console.continuation import Completion
from studio_console.exceptions import CartridgeError
from studio_console.logging import get_logger
from studio_console.palette import palette_from_bytes
from studio_console.sprites import cart_from_png, cart_to_png

if TYPE_CHECKING:
    from studio_console.console import Console

log = get_logger(__name__)

CART_EXT = ".tic"
PNG_EXT = ".png"

LOAD_CONFIRM = ["YOU HAVE", "UNSAVED CHANGES", "", "DO YOU REALLY WANT", "TO LOAD CART?"]
NEW_CONFIRM = ["YOU HAVE", "UNSAVED CHANGES", "", "DO YOU REALLY WANT", "TO CREATE NEW CART?"]
OVERWRITE_CONFIRM = ["THE CART", "ALREADY EXISTS", "", "DO YOU WANT TO", "OVERWRITE IT?"]


class SaveResult(str, Enum):
    OK = "ok"
    MISSING_NAME = "missing_name"
    ERROR = "error"


def with_ext(name: str, ext: str) -> str:
    return name if name.endswith(ext) and len(name) > len(ext) else name + ext


def cart_file(name: str) -> str:
    return with_ext(name, CART_EXT)


def is_png_cart(name: str) -> bool:
    return name.endswith(PNG_EXT) and len(name) > len(PNG_EXT)


def saved_name(name: str) -> str:
    """File name a save writes to: PNG covers keep their name, anything else gets the cart extension."""
    return name if is_png_cart(name) else cart_file(name)


def _confirm_unsaved(console: Console, rows: list[str], on_yes: Callable[[], None]) -> None:
    if console.studio.cart_changed():
        console.confirm_command(rows, on_yes)
    else:
        on_yes()


def _cart_loaded(console: Console, name: str, section: str | None = None) -> None:
    if section is None:
        console.set_rom(name)
        console.studio.rom_loaded()

    console.print_back("\ncart ")
    console.print_front(name)
    console.print_back(" loaded!\nuse ")
    console.print_front("RUN")
    console.print_back(" command to run it\n")


def _apply_cart(console: Console, data: bytes, name: str, section: str | None) -> bool:
    try:
        cart = console.codec.load(data)
    except CartridgeError as e:
        log.error("Cart decode failed", name=name, error=str(e))
        return False

    if section is None:
        console.studio.load_cart(cart)
    else:
        console.studio.cart.copy_section(cart, section)
    _cart_loaded(console, name, section)
    return True


def load_demo(console: Console, script: str) -> None:
    """Install the template cart for `script`, creating it in the root on first use."""
    path = template_name(script)
    cart = None
    data = console.fs.load_root(path)
    if data:
        try:
            cart = console.codec.load(data)
        except CartridgeError as e:
            log.warning("Template cart unreadable, rebuilding", path=path, error=str(e))

    if cart is None:
        cart = Cartridge.new(script)
        console.fs.save_root(path, console.codec.save(cart))

    console.studio.load_cart(cart)
    console.set_rom("")
    console.studio.rom_loaded()


def template_name(script: str) -> str:
    return f"default_{script}{CART_EXT}"


def _load_by_hash(console: Console, name: str, cart_hash: str, section: str | None) -> None:
    def on_loaded(completion: Completion) -> None:
        if completion.ok and completion.value and _apply_cart(console, completion.value, name, section):
            console.done()
            return
        console.print_error(f"\nerror: `{name}` file not loaded")
        console.done()

    pending = console.defer("hash_load", on_loaded, name=name, hash=cart_hash)
    console.fs.hash_load(name, cart_hash, pending.complete)


def _load_png_cart(console: Console, name: str, section: str | None) -> None:
    data = console.fs.load(name)
    cart_data = cart_from_png(data) if data else None
    if not cart_data or not _apply_cart(console, cart_data, name, section):
        console.print_error("\npng cart loading error")


def _load_confirmed(console: Console, desc: CommandDescriptor) -> None:
    param = desc.param(0)
    if not param:
        print_usage_for(console, desc)
        console.done()
        return

    name = cart_file(param)
    section = desc.param(1)
    if section is not None and section not in SECTIONS:
        console.print_error(f"\nunknown section: {section}")
        console.print_line()
        print_usage_for(console, desc)
        console.done()
        return

    if console.fs.is_public_dir():
        def on_listing(completion: Completion) -> None:
            entries = completion.value if completion.ok else []
            for entry in entries:
                if not entry.is_dir and entry.name == name and entry.hash:
                    _load_by_hash(console, name, entry.hash, section)
                    return
            console.print_error(f"\nerror: `{name}` file not loaded")
            console.done()

        pending = console.defer("enumerate", on_listing, name=name)
        console.fs.enumerate(pending.complete)
        return

    if name == console.config.storage.config_cart:
        data = console.fs.load_root(name)
    else:
        data = console.fs.load(name)

    if data:
        if not _apply_cart(console, data, name, section):
            console.print_error("\ncart loading error")
    elif is_png_cart(param) and console.fs.exists(param):
        _load_png_cart(console, param, section)
    else:
        console.print_error("\ncart loading error")

    console.done()


def on_load(console: Console, desc: CommandDescriptor) -> None:
    _confirm_unsaved(console, LOAD_CONFIRM, lambda: _load_confirmed(console, desc))


def _new_confirmed(console: Console, desc: CommandDescriptor) -> None:
    script = desc.param(0)
    if script is None:
        script = console.config.console.default_script
    elif script not in SCRIPTS:
        console.print_error(f"\nunknown parameter: {script}")
        console.done()
        return

    load_demo(console, script)
    console.print_back("\nnew cart is created")
    console.done()


def on_new(console: Console, desc: CommandDescriptor) -> None:
    _confirm_unsaved(console, NEW_CONFIRM, lambda: _new_confirmed(console, desc))


def save_cart(console: Console, name: str | None) -> SaveResult:
    if name:
        if name == console.config.storage.config_cart:
            ok = console.fs.save_root(name, console.codec.save(console.studio.cart))
            if ok:
                console.studio.rom_saved()
            return SaveResult.OK if ok else SaveResult.ERROR

        name = saved_name(name)
        try:
            data = console.codec.save(console.studio.cart)
        except CartridgeError as e:
            log.error("Cart encode failed", name=name, error=str(e))
            return SaveResult.ERROR

        if is_png_cart(name):
            bank = console.studio.cart.banks[0]
            data = cart_to_png(data, bank.screen, palette_from_bytes(bank.palette_bytes()))

        if data and console.fs.save(name, data, overwrite=True):
            console.set_rom(name)
            console.studio.rom_saved()
            return SaveResult.OK
        return SaveResult.ERROR

    if console.rom.name:
        return save_cart(console, console.rom.name)

    return SaveResult.MISSING_NAME


def _save_confirmed(console: Console, desc: CommandDescriptor) -> None:
    param = desc.param(0)
    result = save_cart(console, param)
    if result is SaveResult.OK:
        shown = param or console.rom.name
        if shown != console.config.storage.config_cart:
            shown = saved_name(shown)
        console.print_back("\ncart ")
        console.print_front(shown)
        console.print_back(" saved!\n")
    elif result is SaveResult.MISSING_NAME:
        console.print_error("\ncart name is missing\n")
    else:
        console.print_error("\ncart saving error")
    console.done()


def on_save(console: Console, desc: CommandDescriptor) -> None:
    name = desc.param(0)
    if name and (console.fs.exists(name) or console.fs.exists(cart_file(name))):
        console.confirm_command(OVERWRITE_CONFIRM, lambda: _save_confirmed(console, desc))
    else:
        _save_confirmed(console, desc)


def on_run(console: Console, desc: CommandDescriptor) -> None:
    console.done()
    console.studio.run()


def on_resume(console: Console, desc: CommandDescriptor) -> None:
    console.done()
    console.studio.resume()


def on_eval(console: Console, desc: CommandDescriptor) -> None:
    console.print_line()
    if not console.studio.supports_eval:
        console.print_error("'eval' not implemented for the script")
        console.done()
        return

    code = desc.tail()
    if not code:
        console.print_error("nothing to eval")
        console.done()
        return

    # The runtime reports through trace()/error(), which complete the command.
    console.studio.evaluate(code)
    if console.is_busy and console.scheduler.idle:
        console.done()


def on_exit(console: Console, desc: CommandDescriptor) -> None:
    console.studio.exit()
    console.done()


def on_menu(console: Console, desc: CommandDescriptor) -> None:
    console.studio.show_game_menu()
    console.done()


def on_surf(console: Console, desc: CommandDescriptor) -> None:
    def on_return(completion: Completion) -> None:
        if not (completion.ok and completion.value):
            console.print_error("\ncarts browser is not available")
        console.done()

    pending = console.defer("surf", on_return)
    console.studio.goto_surf(pending.resolve)


def on_demo(console: Console, desc: CommandDescriptor) -> None:
    console.print_back("\nadded carts:\n\n")
    for script in SCRIPTS:
        name = f"{script}demo{CART_EXT}"
        if console.fs.save(name, console.codec.save(Cartridge.new(script)), overwrite=True):
            console.print_front(name)
            console.print_line()
    console.done()


def _load_template_confirmed(console: Console, script: str) -> None:
    load_demo(console, script)
    name = template_name(script)
    console.set_rom(name)
    _cart_loaded(console, name)
    console.done()


def on_config(console: Console, desc: CommandDescriptor) -> None:
    action = desc.param(0)
    config_cart = console.config.storage.config_cart

    if action is None:
        console.run_handler(on_load, parse_command(f"load {config_cart}"))
    elif action == "reset":
        console.fs.save_root(config_cart, console.codec.save(Cartridge.new(console.config.console.default_script)))
        console.print_back("\nconfiguration reset :)")
        console.done()
    elif action == "default":
        script = desc.param(1) or console.config.console.default_script
        if script not in SCRIPTS:
            console.print_error(f"\nunknown parameter: {script}")
            console.done()
            return
        _confirm_unsaved(console, LOAD_CONFIRM, lambda: _load_template_confirmed(console, script))
    else:
        console.print_error("\nunknown parameter: ")
        console.print_error(action)
        console.done()


COMMANDS: tuple[CommandSpec, ...] = (
    CommandSpec(
        name="exit",
        alias="quit",
        help="exit the application.",
        handler=on_exit,
    ),
    CommandSpec(
        name="new",
        help="creates a new `Hello World` cartridge.",
        usage=f"new [{'|'.join(SCRIPTS)}]",
        handler=on_new,
    ),
    CommandSpec(
        name="load",
        help=(
            "load cartridge from the local filesystem "
            "(there's no need to type the .tic extension).\n"
            "you can also load just the section (sprites, map etc) from another cart."
        ),
        usage=f"load <cart> [{'|'.join(SECTIONS)}]",
        handler=on_load,
    ),
    CommandSpec(
        name="save",
        help="save cartridge to the local filesystem, use .tic cart extension.",
        usage="save <cart>",
        handler=on_save,
    ),
    CommandSpec(
        name="run",
        help="run current cart / project.",
        handler=on_run,
    ),
    CommandSpec(
        name="resume",
        help="resume last run cart / project.",
        handler=on_resume,
    ),
    CommandSpec(
        name="eval",
        alias="=",
        help="run code provided code.",
        handler=on_eval,
    ),
    CommandSpec(
        name="demo",
        help="install demo carts to the current directory.",
        handler=on_demo,
    ),
    CommandSpec(
        name="config",
        help="edit system configuration cartridge,\nuse `reset` param to reset current configuration,\n"
             "use `default` to edit default cart template.",
        usage="config [reset|default]",
        handler=on_config,
    ),
    CommandSpec(
        name="surf",
        help="open carts browser.",
        handler=on_surf,
    ),
    CommandSpec(
        name="menu",
        help="show game menu where you can setup keyboard/gamepad buttons mapping.",
        handler=on_menu,
    ),
)
