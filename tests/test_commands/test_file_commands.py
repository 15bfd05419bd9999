from studio_console.collaborators import DirEntry
from studio_console.commands.files import sort_entries
from studio_console.keys import Key, KeyPress, TextInput


def _type_line(console, line: str) -> None:
    console.tick([TextInput(line), KeyPress(Key.RETURN)])


def _settle(console, limit: int = 10) -> None:
    for _ in range(limit):
        if console.is_ready:
            return
        console.tick()
    raise AssertionError("console stayed busy")


def test_sort_entries_puts_folders_first():
    entries = [
        DirEntry("zeta.tic", False),
        DirEntry("Alpha.tic", False),
        DirEntry("music", True),
        DirEntry("Games", True),
    ]

    assert [e.name for e in sort_entries(entries)] == ["Games", "music", "Alpha.tic", "zeta.tic"]


def test_dir_lists_folders_then_files(make_console, storage):
    (storage / "games").mkdir()
    (storage / "b.tic").write_bytes(b"x")
    (storage / "A.tic").write_bytes(b"x")
    console = make_console()

    _type_line(console, "dir")
    assert console.is_busy
    console.tick()

    text = console.grid.text()
    assert console.is_ready
    assert text.index("[games]") < text.index("A.tic") < text.index("b.tic")
    assert "config.tic" not in text


def test_empty_dir_suggests_demo(make_console):
    console = make_console()

    _type_line(console, "ls")
    _settle(console)

    assert "DEMO" in console.grid.text()


def test_mkdir_and_cd_update_the_prompt(make_console, fs):
    console = make_console()

    _type_line(console, "mkdir games")
    assert "created [games] folder :)" in console.grid.text()

    _type_line(console, "cd games")
    _settle(console)
    assert fs.current_path() == "games"
    assert console.grid.text().endswith("games>")

    _type_line(console, "cd ..")
    assert fs.current_path() == ""

    _type_line(console, "cd games")
    _settle(console)
    _type_line(console, "cd /")
    assert fs.current_path() == ""


def test_cd_to_missing_folder(make_console, fs):
    console = make_console()

    _type_line(console, "cd nowhere")
    _settle(console)

    assert "dir doesn't exist" in console.grid.text()
    assert fs.current_path() == ""


def test_cd_without_name(make_console):
    console = make_console()

    _type_line(console, "cd")

    assert "invalid dir name" in console.grid.text()


def test_cd_cannot_leave_the_storage_root(make_console, fs):
    console = make_console()

    _type_line(console, "cd ../..")
    _settle(console)

    assert "dir doesn't exist" in console.grid.text()
    assert fs.current_path() == ""


def test_mkdir_existing_folder_fails(make_console, storage):
    (storage / "games").mkdir()
    console = make_console()

    _type_line(console, "mkdir games")

    assert "invalid dir name" in console.grid.text()


def test_del_missing_file_after_confirmation(make_console, confirmation):
    answers = confirmation(True)
    console = make_console(confirm=answers)

    _type_line(console, "del missing.tic")
    _settle(console)

    assert answers.requests == [["", "", "DO YOU REALLY WANT", "TO DELETE FILE?"]]
    assert "file not deleted" in console.grid.text()


def test_del_file_and_empty_folder(make_console, storage, confirmation):
    (storage / "old.tic").write_bytes(b"x")
    (storage / "empty").mkdir()
    console = make_console(confirm=confirmation(True))

    _type_line(console, "del old.tic")
    _settle(console)
    _type_line(console, "del empty")
    _settle(console)

    text = console.grid.text()
    assert "file successfully deleted" in text
    assert "dir successfully deleted" in text
    assert not (storage / "old.tic").exists()
    assert not (storage / "empty").exists()


def test_del_non_empty_folder_is_refused(make_console, storage, confirmation):
    (storage / "full").mkdir()
    (storage / "full" / "cart.tic").write_bytes(b"x")
    console = make_console(confirm=confirmation(True))

    _type_line(console, "del full")
    _settle(console)

    assert "dir not deleted" in console.grid.text()
    assert (storage / "full" / "cart.tic").exists()


def test_del_declined_keeps_the_file(make_console, storage, confirmation):
    (storage / "keep.tic").write_bytes(b"x")
    console = make_console(confirm=confirmation(False))

    _type_line(console, "del keep.tic")
    _settle(console)

    assert (storage / "keep.tic").exists()
    assert "deleted" not in console.grid.text()


def test_del_in_public_dir_is_denied(make_console, storage, confirmation):
    (storage / "public").mkdir()
    (storage / "public" / "shared.tic").write_bytes(b"x")
    console = make_console(confirm=confirmation(True))
    _type_line(console, "cd public")
    _settle(console)

    _type_line(console, "del shared.tic")
    _settle(console)

    assert "access denied" in console.grid.text()
    assert (storage / "public" / "shared.tic").exists()
    denied_at = console.grid.chars.rfind(b"access denied")
    assert console.grid.colors[denied_at] == console.colors.error


def test_folder_shows_storage_path(make_console, fs, monkeypatch):
    opened = []
    monkeypatch.setattr(fs, "open_folder", lambda: opened.append(True))
    console = make_console()

    _type_line(console, "folder")

    assert opened == [True]
    assert "Storage path:" in console.grid.text()


def test_cls_clears_scrollback(make_console):
    console = make_console()

    _type_line(console, "cls")

    assert console.grid.text() == ">"
    assert console.grid.scroll == 0
