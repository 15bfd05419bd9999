import io

from PIL import Image

from studio_console.cartridge import SCRIPTS, Cartridge, ChunkCodec
from studio_console.keys import Key, KeyPress, TextInput
from studio_console.studio import StudioMode


def _type_line(console, line: str) -> None:
    console.tick([TextInput(line), KeyPress(Key.RETURN)])


def _settle(console, limit: int = 10) -> None:
    for _ in range(limit):
        if console.is_ready:
            return
        console.tick()
    raise AssertionError("console stayed busy")


def _write_cart(path, code: str) -> Cartridge:
    cart = Cartridge(code=code)
    path.write_bytes(ChunkCodec().save(cart))
    return cart


def test_save_then_load_restores_the_cart(make_console, studio, storage):
    console = make_console()
    studio.cart.code = "-- script: lua\nsaved()"

    _type_line(console, "save mycart")
    assert (storage / "mycart.tic").is_file()
    assert "cart mycart.tic saved!" in console.grid.text()

    studio.cart.code = "scratch"
    _type_line(console, "load mycart")

    assert studio.cart.code == "-- script: lua\nsaved()"
    assert "cart mycart.tic loaded!" in console.grid.text()
    assert console.rom.name == "mycart.tic"
    assert not studio.cart_changed()


def test_save_without_name_uses_the_loaded_cart(make_console, studio, storage):
    _write_cart(storage / "game.tic", "old")
    console = make_console()
    _type_line(console, "load game")

    studio.cart.code = "new"
    studio.mark_changed()
    _type_line(console, "save")

    assert ChunkCodec().load((storage / "game.tic").read_bytes()).code == "new"
    assert not studio.cart_changed()


def test_save_without_any_name_is_an_error(make_console):
    console = make_console()

    _type_line(console, "save")

    assert "cart name is missing" in console.grid.text()


def test_overwrite_declined_keeps_the_file(make_console, storage, confirmation):
    (storage / "mycart.tic").write_bytes(b"original")
    answers = confirmation(False)
    console = make_console(confirm=answers)

    _type_line(console, "save mycart")
    _settle(console)

    assert (storage / "mycart.tic").read_bytes() == b"original"
    assert answers.requests[0][1] == "ALREADY EXISTS"
    assert "saved!" not in console.grid.text()


def test_overwrite_accepted_replaces_the_file(make_console, storage, confirmation):
    (storage / "mycart.tic").write_bytes(b"original")
    console = make_console(confirm=confirmation(True))

    _type_line(console, "save mycart")
    assert console.is_busy
    _settle(console)

    assert (storage / "mycart.tic").read_bytes() != b"original"
    assert "cart mycart.tic saved!" in console.grid.text()


def test_load_missing_cart(make_console):
    console = make_console()

    _type_line(console, "load nothing")

    assert "cart loading error" in console.grid.text()
    assert console.is_ready


def test_load_without_name_shows_usage(make_console):
    console = make_console()

    _type_line(console, "load")

    text = console.grid.text()
    assert "---=== COMMAND ===---" in text
    assert "usage: load <cart>" in text


def test_load_single_section(make_console, studio, storage):
    source = Cartridge(code="other code")
    source.banks[0].sprites[0] = 0x21
    (storage / "art.tic").write_bytes(ChunkCodec().save(source))
    console = make_console()
    studio.cart.code = "my code"

    _type_line(console, "load art sprites")

    assert studio.cart.code == "my code"
    assert studio.cart.banks[0].sprites[0] == 0x21
    assert console.rom.name == ""


def test_load_unknown_section(make_console, storage):
    _write_cart(storage / "art.tic", "x")
    console = make_console()

    _type_line(console, "load art pictures")

    assert "unknown section: pictures" in console.grid.text()


def test_load_with_unsaved_changes_asks_first(make_console, studio, storage, confirmation):
    _write_cart(storage / "game.tic", "loaded")
    answers = confirmation(True)
    console = make_console(confirm=answers)
    studio.mark_changed()

    _type_line(console, "load game")
    assert studio.cart.code != "loaded"

    _settle(console)

    assert answers.requests[0][1] == "UNSAVED CHANGES"
    assert studio.cart.code == "loaded"


def test_new_cart_for_each_script(make_console, studio):
    console = make_console()

    for script in SCRIPTS:
        _type_line(console, f"new {script}")
        assert studio.cart.script == script

    assert "new cart is created" in console.grid.text()


def test_new_with_unknown_script(make_console, studio):
    console = make_console()
    before = studio.cart

    _type_line(console, "new cobol")

    assert studio.cart is before
    assert "unknown parameter: cobol" in console.grid.text()


def test_run_resume_and_menu_switch_modes(make_console, studio):
    console = make_console()

    _type_line(console, "run")
    assert studio.mode is StudioMode.RUN
    assert studio.runs == 1

    _type_line(console, "menu")
    assert studio.mode is StudioMode.MENU

    _type_line(console, "resume")
    assert studio.mode is StudioMode.RUN
    assert console.is_ready


def test_surf_reports_missing_browser(make_console):
    console = make_console()

    _type_line(console, "surf")
    _settle(console)

    assert "carts browser is not available" in console.grid.text()


def test_demo_installs_one_cart_per_script(make_console, storage):
    console = make_console()

    _type_line(console, "demo")

    for script in SCRIPTS:
        assert (storage / f"{script}demo.tic").is_file()
    assert "luademo.tic" in console.grid.text()


def test_config_loads_the_system_cart(make_console):
    console = make_console()

    _type_line(console, "config")

    assert "cart config.tic loaded!" in console.grid.text()
    assert console.rom.name == "config.tic"


def test_config_save_writes_the_system_cart(make_console, studio, storage):
    console = make_console()
    _type_line(console, "config")
    studio.cart.code = "-- settings"

    _type_line(console, "save")

    saved = ChunkCodec().load((storage / ".local" / "config.tic").read_bytes())
    assert saved.code == "-- settings"
    assert not (storage / "config.tic").exists()


def test_config_reset(make_console, fs):
    fs.save_root("config.tic", b"custom")
    console = make_console()

    _type_line(console, "config reset")

    assert "configuration reset :)" in console.grid.text()
    assert fs.load_root("config.tic") != b"custom"


def test_config_default_opens_the_template(make_console, studio):
    console = make_console()

    _type_line(console, "config default js")

    assert studio.cart.script == "js"
    assert console.rom.name == "default_js.tic"


def test_config_unknown_action(make_console):
    console = make_console()

    _type_line(console, "config bogus")

    assert "unknown parameter: bogus" in console.grid.text()


def test_public_dir_carts_load_by_hash(make_console, studio, storage):
    (storage / "public").mkdir(parents=True)
    _write_cart(storage / "public" / "shared.tic", "-- shared")
    console = make_console()
    _type_line(console, "cd public")
    _settle(console)

    _type_line(console, "load shared")
    _settle(console)

    assert studio.cart.code == "-- shared"
    assert "cart shared.tic loaded!" in console.grid.text()


def test_public_dir_is_read_only(make_console, storage):
    (storage / "public").mkdir(parents=True)
    console = make_console()
    _type_line(console, "cd public")
    _settle(console)

    _type_line(console, "save mine")

    assert "cart saving error" in console.grid.text()
    assert not (storage / "public" / "mine.tic").exists()


def test_png_cart_save_then_load(make_console, studio, storage):
    console = make_console()
    studio.cart.code = "-- script: lua\ncover()"
    studio.cart.banks[0].screen[0] = 0x21

    _type_line(console, "save cover.png")
    assert "cart cover.png saved!" in console.grid.text()
    with Image.open(storage / "cover.png") as image:
        assert image.size == (256, 256)

    studio.cart.code = "scratch"
    _type_line(console, "load cover.png")

    assert studio.cart.code == "-- script: lua\ncover()"
    assert studio.cart.banks[0].screen[0] == 0x21
    assert console.rom.name == "cover.png"
    assert "cart cover.png loaded!" in console.grid.text()


def test_png_without_a_cart_is_a_loading_error(make_console, studio, storage):
    storage.mkdir(parents=True, exist_ok=True)
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8)).save(buffer, format="PNG")
    (storage / "photo.png").write_bytes(buffer.getvalue())
    console = make_console()
    before = studio.cart

    _type_line(console, "load photo.png")

    assert "png cart loading error" in console.grid.text()
    assert studio.cart is before
    assert console.is_ready
