import pytest

from studio_console.cartridge import Cartridge, ChunkCodec
from studio_console.collaborators import NetEvent
from studio_console.config import Config, NetConfig
from studio_console.console import Console, parse_version
from studio_console.exceptions import StartupCartError
from studio_console.studio import StudioMode


class _CannedNetwork:
    def __init__(self, body: bytes):
        self.body = body
        self.urls = []

    def get(self, url, on_event) -> None:
        self.urls.append(url)
        on_event(NetEvent(kind="done", url=url, data=self.body))


def test_first_tick_shows_banner_and_prompt(make_console):
    console = make_console()

    text = console.grid.text()
    assert "Studio Console 0.1.0" in text
    assert "hello! type help for help" in text
    assert text.endswith(">")
    assert console.is_ready


def test_first_tick_creates_hidden_system_carts(make_console, storage, fs):
    make_console()

    assert (storage / ".local" / "config.tic").is_file()
    assert (storage / ".local" / "default_lua.tic").is_file()
    assert not fs.exists("config.tic")


def test_existing_config_cart_is_kept(make_console, fs, storage):
    fs.save_root("config.tic", b"custom")

    make_console()

    assert (storage / ".local" / "config.tic").read_bytes() == b"custom"


def test_startup_cart_runs_after_the_delay(fs, studio, config, tmp_path):
    cart_path = tmp_path / "game.tic"
    cart_path.write_bytes(ChunkCodec().save(Cartridge(code="-- script: lua\nboot()")))

    console = Console(fs=fs, studio=studio, config=config, skip=True)
    console.load_startup_cart(cart_path)
    console.tick()

    assert studio.cart.code == "-- script: lua\nboot()"
    assert studio.mode is StudioMode.RUN
    assert studio.runs == 1
    assert console.rom.name == "game.tic"
    assert "loading cart..." in console.grid.text()


def test_startup_cart_waits_a_second_without_skip(fs, studio, config, tmp_path):
    cart_path = tmp_path / "game.tic"
    cart_path.write_bytes(ChunkCodec().save(Cartridge.new()))

    console = Console(fs=fs, studio=studio, config=config)
    console.load_startup_cart(cart_path)
    for _ in range(config.console.fps - 1):
        console.tick()
    assert studio.runs == 0

    console.tick()
    assert studio.runs == 1


def test_missing_startup_cart_raises(fs, studio, config, tmp_path):
    console = Console(fs=fs, studio=studio, config=config)

    with pytest.raises(StartupCartError) as exc_info:
        console.load_startup_cart(tmp_path / "missing.tic")

    assert str(exc_info.value) == f"error: cart `{tmp_path / 'missing.tic'}` not loaded"


def test_newer_version_is_announced_on_a_later_tick(make_console):
    net = _CannedNetwork(b"major=9 minor=1 patch=2")
    config = Config(net=NetConfig(check_new_version=True))

    console = make_console(net=net, config=config)
    assert "new version" not in console.grid.text()

    console.tick()

    assert net.urls == ["/api?fn=version"]
    assert "new version 9.1.2 available" in console.grid.row_text(1)
    assert console.is_ready


def test_same_version_is_not_announced(make_console):
    config = Config(net=NetConfig(check_new_version=True))
    console = make_console(net=_CannedNetwork(b"major=0 minor=1 patch=0"), config=config)

    console.tick()

    assert "new version" not in console.grid.text()


class _BrokenNetwork:
    def get(self, url, on_event) -> None:
        raise OSError("network unreachable")


def test_version_check_that_cannot_start_leaves_the_console_ready(make_console):
    config = Config(net=NetConfig(check_new_version=True))

    console = make_console(net=_BrokenNetwork(), config=config)
    console.tick()

    assert console.is_ready
    assert "hello! type help for help" in console.grid.text()
    assert "new version" not in console.grid.text()


def test_parse_version():
    assert parse_version("major=1 minor=2 patch=3") == (1, 2, 3)
    assert parse_version("{major = 1, minor = 2}") == (1, 2, 0)
    assert parse_version("garbage") is None
