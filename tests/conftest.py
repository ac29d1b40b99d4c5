"""Test fixtures for lyricast tests."""

import os
import sqlite3
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

# Headless Qt for CI environments without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtCore import QObject, Signal  # noqa: E402
from pytestqt.qtbot import QtBot  # noqa: E402

from lyricast.core.channel import PresentationChannel  # noqa: E402
from lyricast.core.controller import PresentationController  # noqa: E402
from lyricast.core.resolver import ScriptureResolver, SongResolver  # noqa: E402
from lyricast.core.windows import WindowLifecycleManager  # noqa: E402
from lyricast.models.payload import PresentationPayload  # noqa: E402
from lyricast.storage.library import SongLibrary  # noqa: E402

# (book, chapter, verse, text)
GENESIS_1 = [
    (1, 1, 1, "In the beginning God created the heaven and the earth."),
    (1, 1, 2, "And the earth was without form, and void."),
    (1, 1, 3, "And God said, Let there be light: and there was light."),
]
GENESIS_2 = [
    (1, 2, 1, "Thus the heavens and the earth were finished."),
]
JOHN_3 = [
    (43, 3, 16, "For God so loved the world, that he gave his only begotten Son."),
    (43, 3, 17, "For God sent not his Son into the world to condemn the world."),
]
SCRIPTURE_ROWS = GENESIS_1 + GENESIS_2 + JOHN_3

# Numbers stored as text, out of order, with one malformed verse number
TEXT_ROWS = [
    ("1", "1", "1", "In the beginning God created the heaven and the earth."),
    ("1", "1", "10", "And God called the dry land Earth."),
    ("1", "1", "2", "And the earth was without form, and void."),
    ("1", "1", "2a", "A marginal reading of 100% and snake_case."),
    ("1", "10", "1", "Now these are the generations of the sons of Noah."),
    ("1", "2", "1", "Thus the heavens and the earth were finished."),
]


@pytest.fixture
def library(tmp_path: Path) -> Generator[SongLibrary, None, None]:
    """Return an initialized, seeded song library in a temp directory."""
    lib = SongLibrary(tmp_path / "lyricast.db")
    lib.initialize()
    yield lib
    lib.close()


@pytest.fixture
def empty_library(tmp_path: Path) -> Generator[SongLibrary, None, None]:
    """Return an initialized song library without sample content."""
    lib = SongLibrary(tmp_path / "empty.db")
    lib.initialize(seed=False)
    yield lib
    lib.close()


def _write_db(path: Path, statements: list[str], rows: list[tuple[str, list[tuple]]]) -> Path:
    conn = sqlite3.connect(path)
    with conn:
        for statement in statements:
            conn.execute(statement)
        for sql, values in rows:
            conn.executemany(sql, values)
    conn.close()
    return path


@pytest.fixture
def make_scripture_db(tmp_path: Path) -> Callable[[str], Path]:
    """Return a factory building scripture databases in different naming schemes.

    Schemes:
        plain: verses(book, chapter, verse, text) + books(id, name)
        compact: t_verses(b, c, v, t) + t_book_key(b, n)
        numbered: bible_verses(id, book_number, chapter, verse, text_content), no books table
        text: verses(book, chapter, verse, text) declared TEXT, numbers stored as strings
    """

    def factory(scheme: str = "plain") -> Path:
        path = tmp_path / f"bible_{scheme}.db"
        if scheme == "plain":
            return _write_db(
                path,
                [
                    "CREATE TABLE books (id INTEGER, name TEXT)",
                    "CREATE TABLE verses (book INTEGER, chapter INTEGER, verse INTEGER, text TEXT)",
                ],
                [
                    ("INSERT INTO books VALUES (?, ?)", [(1, "Genesis"), (43, "Juan")]),
                    ("INSERT INTO verses VALUES (?, ?, ?, ?)", SCRIPTURE_ROWS),
                ],
            )
        if scheme == "compact":
            return _write_db(
                path,
                [
                    "CREATE TABLE t_book_key (b INTEGER, n TEXT)",
                    "CREATE TABLE t_verses (id INTEGER, b INTEGER, c INTEGER, v INTEGER, t TEXT)",
                ],
                [
                    ("INSERT INTO t_book_key VALUES (?, ?)", [(1, "Genesis"), (43, "John")]),
                    (
                        "INSERT INTO t_verses (b, c, v, t) VALUES (?, ?, ?, ?)",
                        SCRIPTURE_ROWS,
                    ),
                ],
            )
        if scheme == "numbered":
            return _write_db(
                path,
                [
                    "CREATE TABLE bible_verses (id INTEGER PRIMARY KEY, book_number INTEGER,"
                    " chapter INTEGER, verse INTEGER, text_content TEXT)",
                ],
                [
                    (
                        "INSERT INTO bible_verses (book_number, chapter, verse, text_content)"
                        " VALUES (?, ?, ?, ?)",
                        SCRIPTURE_ROWS,
                    ),
                ],
            )
        if scheme == "text":
            return _write_db(
                path,
                ["CREATE TABLE verses (book TEXT, chapter TEXT, verse TEXT, text TEXT)"],
                [("INSERT INTO verses VALUES (?, ?, ?, ?)", TEXT_ROWS)],
            )
        if scheme == "unusable":
            return _write_db(
                path,
                ["CREATE TABLE notes (id INTEGER, body TEXT)"],
                [("INSERT INTO notes VALUES (?, ?)", [(1, "hello")])],
            )
        raise ValueError(f"unknown scheme {scheme}")

    return factory


@pytest.fixture
def scripture_path(make_scripture_db: Callable[[str], Path]) -> Path:
    """Return a plain-scheme scripture database."""
    return make_scripture_db("plain")


class FakeOutput(QObject):
    """Stand-in output window recording what it was asked to do."""

    closed = Signal()

    def __init__(self) -> None:
        super().__init__()
        self.payloads: list[PresentationPayload] = []
        self.screen: object = None
        self.shown = False
        self.close_calls = 0

    def apply_payload(self, payload: PresentationPayload) -> None:
        self.payloads.append(payload)

    def show_on(self, screen: object) -> None:
        self.screen = screen
        self.shown = True

    def close(self) -> bool:
        self.close_calls += 1
        self.closed.emit()
        return True

    def close_externally(self) -> None:
        """Simulate the window manager closing the window."""
        self.closed.emit()


class FakeOutputFactory:
    """Window factory keeping every FakeOutput it built."""

    def __init__(self) -> None:
        self.created: list[FakeOutput] = []

    def __call__(self) -> FakeOutput:
        window = FakeOutput()
        self.created.append(window)
        return window

    @property
    def current(self) -> FakeOutput:
        """Return the most recently built window."""
        return self.created[-1]


@pytest.fixture
def output_factory() -> FakeOutputFactory:
    """Return a factory of fake output windows."""
    return FakeOutputFactory()


@pytest.fixture
def channel(qtbot: QtBot) -> PresentationChannel:
    """Return a presentation channel."""
    return PresentationChannel()


@pytest.fixture
def windows(
    channel: PresentationChannel, output_factory: FakeOutputFactory
) -> WindowLifecycleManager:
    """Return a lifecycle manager building fake output windows."""
    return WindowLifecycleManager(channel, screens=lambda: [], window_factory=output_factory)


@pytest.fixture
def scripture(scripture_path: Path) -> Generator[ScriptureResolver, None, None]:
    """Return a scripture resolver over the plain-scheme database."""
    resolver = ScriptureResolver.from_path(scripture_path)
    yield resolver
    resolver.close()


@pytest.fixture
def controller(
    library: SongLibrary,
    scripture: ScriptureResolver,
    channel: PresentationChannel,
    windows: WindowLifecycleManager,
    tmp_path: Path,
) -> PresentationController:
    """Return a controller over the seeded library and plain scripture."""
    return PresentationController(
        SongResolver(library),
        scripture,
        library,
        channel,
        windows,
        media_dir=tmp_path / "media",
    )
