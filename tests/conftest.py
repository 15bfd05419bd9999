from pathlib import Path

import pytest

from studio_console.config import Config
from studio_console.console import Console
from studio_console.filesystem import LocalFileSystem
from studio_console.studio import HeadlessStudio


class ScriptedConfirmation:
    """Answers every confirmation with a fixed reply and records the rows."""

    def __init__(self, answer: bool = True):
        self.answer = answer
        self.requests: list[list[str]] = []

    def request(self, lines, on_answer) -> None:
        self.requests.append(list(lines))
        on_answer(self.answer)


@pytest.fixture
def config() -> Config:
    return Config()


@pytest.fixture
def storage(tmp_path: Path) -> Path:
    return tmp_path / "carts"


@pytest.fixture
def fs(storage: Path) -> LocalFileSystem:
    return LocalFileSystem(storage)


@pytest.fixture
def studio() -> HeadlessStudio:
    return HeadlessStudio()


@pytest.fixture
def make_console(fs, studio, config):
    """Build a console and run its first tick so the prompt is up."""

    def factory(**kwargs) -> Console:
        kwargs.setdefault("fs", fs)
        kwargs.setdefault("studio", studio)
        kwargs.setdefault("config", config)
        console = Console(**kwargs)
        console.tick()
        return console

    return factory


@pytest.fixture
def confirmation():
    """Factory for scripted yes/no answers."""
    return ScriptedConfirmation
