"""Virtual filesystem backed by a folder on disk."""

from __future__ import annotations

import hashlib
from pathlib import Path, PurePosixPath

import typer

from studio_console.collaborators import CompletionCallback, DirEntry, NetEvent, Network
from studio_console.continuation import Completion
from studio_console.exceptions import PathEscapeError
from studio_console.logging import get_logger

log = get_logger(__name__)


SYSTEM_DIR = ".local"


def content_hash(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


class LocalFileSystem:
    """Folder tree under `root` with a current directory.

    Names are relative to the current directory and may not leave the
    root. The `public_dir` subtree is read-only: its carts are addressed
    by content hash and fetched from the network when one is attached.
    System carts (configuration, templates) live in a hidden `.local`
    folder that listings skip.
    """

    def __init__(self, root: Path | str, *, public_dir: str = "public", network: Network | None = None):
        self.root = Path(root).expanduser().resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        self.public_dir = public_dir
        self.network = network
        self._cwd = PurePosixPath()

    def _resolve(self, name: str, *, from_root: bool = False) -> Path:
        base = self.root / SYSTEM_DIR if from_root else self.root / self._cwd
        candidate = (base / name).resolve()
        try:
            candidate.relative_to(self.root)
        except ValueError:
            raise PathEscapeError(name) from None
        return candidate

    def _safe(self, name: str, *, from_root: bool = False) -> Path | None:
        try:
            return self._resolve(name, from_root=from_root)
        except PathEscapeError as e:
            log.warning("Rejected path", name=name, error=str(e))
            return None

    def current_path(self) -> str:
        return "" if self._cwd == PurePosixPath() else self._cwd.as_posix()

    def root_path(self) -> str:
        return str(self.root)

    def is_public_dir(self) -> bool:
        return bool(self._cwd.parts) and self._cwd.parts[0] == self.public_dir

    def enumerate(self, on_done: CompletionCallback) -> None:
        try:
            folder = self._resolve(".")
            entries = []
            public = self.is_public_dir()
            for path in sorted(folder.iterdir()):
                if path.name.startswith("."):
                    continue
                is_dir = path.is_dir()
                digest = content_hash(path.read_bytes()) if public and not is_dir else ""
                entries.append(DirEntry(name=path.name, is_dir=is_dir, hash=digest))
        except (OSError, PathEscapeError) as e:
            log.error("Folder listing failed", path=self.current_path(), error=str(e))
            on_done(Completion.failure(str(e)))
            return
        on_done(Completion.success(entries))

    def is_dir_async(self, name: str, on_done: CompletionCallback) -> None:
        on_done(Completion.success(self.is_dir(name)))

    def hash_load(self, name: str, hash: str, on_done: CompletionCallback) -> None:
        if self.network is not None:
            def on_event(event: NetEvent) -> None:
                if event.kind == "done":
                    on_done(Completion.success(event.data))
                elif event.kind == "error":
                    on_done(Completion.failure(event.error))

            self.network.get(f"/cart/{hash}/cart.tic", on_event)
            return

        data = self.load(name)
        if data is not None and content_hash(data) == hash:
            on_done(Completion.success(data))
        else:
            on_done(Completion.failure(f"cart {name} not found"))

    def load(self, name: str) -> bytes | None:
        path = self._safe(name)
        if path is None or not path.is_file():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            log.error("File read failed", name=name, error=str(e))
            return None

    def save(self, name: str, data: bytes, overwrite: bool = False) -> bool:
        path = self._safe(name)
        if path is None or self.is_public_dir():
            return False
        if path.exists() and not overwrite:
            return False
        try:
            path.write_bytes(data)
        except OSError as e:
            log.error("File write failed", name=name, error=str(e))
            return False
        return True

    def exists(self, name: str) -> bool:
        path = self._safe(name)
        return path is not None and path.exists()

    def is_dir(self, name: str) -> bool:
        path = self._safe(name)
        return path is not None and path.is_dir()

    def change_dir(self, name: str) -> None:
        path = self._resolve(name)
        self._cwd = PurePosixPath(path.relative_to(self.root).as_posix())

    def home(self) -> None:
        self._cwd = PurePosixPath()

    def back(self) -> None:
        self._cwd = self._cwd.parent

    def make_dir(self, name: str) -> bool:
        path = self._safe(name)
        if path is None:
            return False
        try:
            path.mkdir()
        except OSError as e:
            log.error("Folder create failed", name=name, error=str(e))
            return False
        return True

    def delete_file(self, name: str) -> bool:
        path = self._safe(name)
        if path is None:
            return False
        try:
            path.unlink()
        except OSError as e:
            log.info("File delete failed", name=name, error=str(e))
            return False
        return True

    def delete_dir(self, name: str) -> bool:
        path = self._safe(name)
        if path is None or path == self.root:
            return False
        try:
            path.rmdir()
        except OSError as e:
            log.info("Folder delete failed", name=name, error=str(e))
            return False
        return True

    def load_root(self, name: str) -> bytes | None:
        path = self._safe(name, from_root=True)
        if path is None or not path.is_file():
            return None
        return path.read_bytes()

    def save_root(self, name: str, data: bytes) -> bool:
        path = self._safe(name, from_root=True)
        if path is None:
            return False
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            log.error("File write failed", name=name, error=str(e))
            return False
        return True

    def open_folder(self) -> None:
        folder = self._resolve(".")
        log.info("Opening folder", path=str(folder))
        typer.launch(str(folder), locate=False)
