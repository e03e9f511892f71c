import curses
import json

import pytest

from idz.app import App, AppView
from idz.disk import IdentityDisk
from idz.errors import InvalidDataError
from idz.models import Chunk, SearchResult
from idz.tui import (
    chunk_list_line,
    detail_text,
    overview_lines,
    run_app,
    search_result_line,
)

SIGNATURE = "test-3_fp32"


class FakeScreen:
    def __init__(self, keys, size=(24, 80)):
        self.keys = list(keys)
        self.size = size
        self.written = []
        self.refreshes = 0

    def getmaxyx(self):
        return self.size

    def erase(self):
        self.written = []

    def refresh(self):
        self.refreshes += 1

    def addnstr(self, y, x, text, n, *attr):
        self.written.append(text[:n])

    def get_wch(self):
        return self.keys.pop(0)


@pytest.fixture
def disk(tmp_path):
    path = tmp_path / "disk.idz"
    with IdentityDisk.create(path, SIGNATURE) as fresh:
        with pytest.raises(InvalidDataError):
            fresh.add_chunk("abc", [1.0, 0.0, 0.0], {"n": 0})
    opened = IdentityDisk.open(path, SIGNATURE)
    opened.add_chunk("xyz", [0.0, 1.0, 0.0], {"n": 1})
    yield opened
    opened.close()


@pytest.fixture
def app(disk, tmp_path):
    return App(disk, tmp_path / "disk.idz", SIGNATURE)


def test_chunk_list_line_short_content():
    chunk = Chunk("abcdefgh-rest", "hello", {})
    assert chunk_list_line(chunk) == "ID: abcdefgh... | hello"


def test_chunk_list_line_truncates_long_content():
    chunk = Chunk("abcdefgh-rest", "a" * 100, {})
    assert chunk_list_line(chunk) == "ID: abcdefgh... | " + "a" * 77 + "..."


def test_chunk_list_line_keeps_content_at_limit():
    chunk = Chunk("abcdefgh-rest", "b" * 80, {})
    assert chunk_list_line(chunk).endswith("| " + "b" * 80)


def test_chunk_list_line_measures_bytes():
    chunk = Chunk("abcdefgh-rest", "é" * 50, {})
    assert chunk_list_line(chunk) == "ID: abcdefgh... | " + "é" * 50 + "..."


def test_search_result_line_format():
    result = SearchResult(Chunk("12345678-rest", "text", {}), 0.5)
    assert search_result_line(result) == "ID: 12345678... | Score: 0.5000 | text"


def test_search_result_line_truncates():
    result = SearchResult(Chunk("12345678-rest", "c" * 61, {}), 0.25)
    assert search_result_line(result).endswith("c" * 57 + "...")


def test_overview_lines(app):
    file_info, embed_info = overview_lines(app)
    assert "Spec Version: 1.0" in file_info
    assert f"Model Signature: {SIGNATURE}" in file_info
    assert "Total Chunks: 2" in file_info
    assert "Average chars per chunk: 3" in file_info
    assert embed_info == [
        "Parsed Dimension: 3",
        "Parsed Data Type: fp32",
        "Active Index Type: F32 (Cosine Distance)",
    ]


def test_overview_without_dimension(tmp_path):
    with IdentityDisk.create(tmp_path / "d.idz", "model_fp32") as disk:
        app = App(disk, tmp_path / "d.idz", "model_fp32")
        file_info, embed_info = overview_lines(app)
    assert "Total Chunks: 0" in file_info
    assert "Average chars per chunk: 0" in file_info
    assert embed_info[0] == "Parsed Dimension: N/A"
    assert embed_info[2].startswith("Active Index Type: None")


def test_detail_without_selection(app):
    assert detail_text(app) == [("Chunk Detail", "No chunk selected.")]


def test_detail_of_selected_chunk(app):
    chunk = app.all_chunks[0]
    app.selected_chunk_id = chunk.chunk_id
    (text_title, body), (meta_title, meta) = detail_text(app)
    assert text_title == f"Chunk {chunk.chunk_id} - Text"
    assert body == chunk.content
    assert meta_title == "Metadata"
    assert json.loads(meta) == chunk.metadata


def test_detail_of_missing_chunk(app):
    app.selected_chunk_id = "missing"
    assert detail_text(app) == [("Error", "Could not find chunk with ID: missing")]


def test_run_app_navigates_to_detail(app):
    screen = FakeScreen(["2", curses.KEY_DOWN, "\n", "q"])
    run_app(screen, app)
    assert app.current_view is AppView.CHUNK_DETAIL
    assert app.selected_chunk_id == app.all_chunks[1].chunk_id
    assert screen.refreshes == 4


def test_run_app_draws_header(app):
    screen = FakeScreen(["q"])
    run_app(screen, app)
    assert any("IDZ Explorer - " in text for text in screen.written)


def test_run_app_search_flow(app):
    screen = FakeScreen(["3", "/", "h", "i", "\x7f", "o", "\n", "q"])
    run_app(screen, app)
    assert app.search_query == "ho"
    assert app.search_mode is False
    assert len(app.search_results) == 2
    assert app.search_selected == 0


def test_run_app_ignores_unknown_keys(app):
    screen = FakeScreen(["\t", curses.KEY_LEFT, "q"])
    run_app(screen, app)
    assert app.current_view is AppView.OVERVIEW
    assert screen.refreshes == 3