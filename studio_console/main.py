"""Command line entry point for Studio Console."""

import asyncio
from pathlib import Path

import typer

from studio_console.cli import RichConfirmation, TerminalView, get_view
from studio_console.config import Config, set_config
from studio_console.console import Console, printable
from studio_console.exceptions import StartupCartError
from studio_console.filesystem import LocalFileSystem
from studio_console.logging import configure_logging, get_logger
from studio_console.network import HttpxNetwork
from studio_console.studio import HeadlessStudio

log = get_logger(__name__)


def build_console(
    cfg: Config,
    view: TerminalView,
    *,
    cli: bool = False,
    commands: str = "",
    fs_path: str = "",
    skip: bool = False,
) -> tuple[Console, HttpxNetwork]:
    """Wire the console to the local filesystem, network and terminal."""
    net = HttpxNetwork()
    fs = LocalFileSystem(
        fs_path or cfg.storage.path,
        public_dir=cfg.storage.public_dir,
        network=net if cfg.net.base_url else None,
    )
    console = Console(
        fs=fs,
        studio=HeadlessStudio(),
        net=net,
        confirm=None if cli else RichConfirmation(view.out),
        config=cfg,
        cli=cli,
        commands=commands,
        skip=skip,
        echo=view.echo,
    )
    return console, net


async def run_console(console: Console, view: TerminalView, net: HttpxNetwork, *, interactive: bool) -> None:
    """Tick the console until it finishes, exits, or input ends."""
    frame = 1.0 / console.config.console.fps
    try:
        while not console.finished and not console.studio.exit_requested:
            console.tick()
            if interactive and console.is_ready and not console.has_queued_commands:
                line = await view.prompt_async()
                if line is None:
                    break
                console.insert_input(printable(line))
                console.submit()
            else:
                await asyncio.sleep(frame)
    finally:
        await net.close()


def main(
    cart: str = "",
    cmd: str = "",
    cli: bool = False,
    skip: bool = False,
    fs: str = "",
    config: str = "",
    verbose: bool = False,
    dump_screen: bool = False,
) -> int:
    """Start the console; returns the process exit code."""
    if config:
        try:
            cfg = Config.from_yaml(Path(config))
        except Exception as e:
            log.error("Failed to load config", error=str(e))
            cfg = Config.load()
    else:
        cfg = Config.load()
    set_config(cfg)
    view = get_view()
    configure_logging(verbose, sink=view.log_line)

    console, net = build_console(cfg, view, cli=cli, commands=cmd, fs_path=fs, skip=skip)

    if cart:
        try:
            console.load_startup_cart(cart)
        except StartupCartError as e:
            view.err.print(str(e), markup=False, highlight=False)
            return 1

    if not cli:
        view.setup_readline(console.registry.command_names())

    try:
        asyncio.run(run_console(console, view, net, interactive=not cli))
    except KeyboardInterrupt:
        log.info("Interrupted")
    except Exception as e:
        log.error("Fatal error", error=str(e))
        view.print_error(str(e))
        return 1

    if dump_screen:
        view.dump_screen(console.grid)
    return 0


app = typer.Typer(help="Studio Console - command console for cartridge based game projects.", add_completion=False)


@app.command()
def run(
    cart: str = typer.Argument("", help="Cart file to load and run at startup"),
    cmd: str = typer.Option("", "--cmd", help="Commands to run, separated by ' & '"),
    cli: bool = typer.Option(False, "--cli", help="Console only: no prompts, exit after the commands"),
    skip: bool = typer.Option(False, "--skip", help="Skip the startup delay"),
    fs: str = typer.Option("", "--fs", help="Storage folder for the virtual filesystem"),
    config: str = typer.Option("", "-c", "--config", help="Path to config file"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
    dump_screen: bool = typer.Option(False, "--dump-screen", help="Print the console screen when done"),
) -> None:
    """Start Studio Console."""
    raise typer.Exit(code=main(cart, cmd, cli, skip, fs, config, verbose, dump_screen))
